from __future__ import annotations

import logging
import re
from datetime import date
from typing import Callable

from dateutil import parser as dateparser

from .errors import DateParseError
from .lines import PropertyLine
from .model import Address, Card
from .values import DecodedValue, transform_value

logger = logging.getLogger(__name__)

NAME_PARTS = ("lastname", "firstname", "additional", "prefix", "suffix")
ADDRESS_PARTS = ("name", "extended", "street", "city", "region", "zip", "country")

_SCALARS = {
    "FN": "fullname",
    "NICKNAME": "nickname",
    "REV": "revision",
    "VERSION": "version",
    "TITLE": "title",
    "UID": "uid",
    "X-ADDRESSBOOKSERVER-KIND": "xabskind",
}
_KEYED_DEFAULTS = {
    "TEL": ("phone", "default"),
    "EMAIL": ("email", "default"),
    "URL": ("url", "default"),
}
_BINARY = ("PHOTO", "LOGO", "SOUND", "KEY")
_ESCAPED_NEWLINE = re.compile(r"\\[nN]")
_DIGITS = re.compile(r"\d+", re.ASCII)


# ── Structured sub-values ──────────────────────────────────────────────────────

def _split_components(value: str, names: tuple[str, ...]) -> dict[str, str]:
    # Components beyond the supplied ones stay absent; extra ones are dropped.
    return dict(zip(names, value.split(";")))


def parse_name(value: str) -> dict[str, str]:
    return _split_components(value, NAME_PARTS)


def parse_address(value: str) -> Address:
    return Address(**_split_components(value, ADDRESS_PARTS))


def parse_birthday(value: str) -> date:
    text = value.strip()
    # vCard 4 truncated forms (--MMDD) carry no year
    if not text or text.startswith("--"):
        raise DateParseError(value)
    try:
        return dateparser.parse(text).date()
    except (ValueError, OverflowError) as exc:
        raise DateParseError(value) from exc


# ── Dispatcher ─────────────────────────────────────────────────────────────────

def _text(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _type_key(params: list[str], default: str) -> str:
    return ";".join(params) if params else default


def _set_name(card: Card, dv: DecodedValue) -> None:
    for attr, part in parse_name(_text(dv.value)).items():
        setattr(card, attr, part)


def _set_birthday(card: Card, dv: DecodedValue) -> None:
    card.birthday = parse_birthday(_text(dv.value))


def _add_address(card: Card, dv: DecodedValue) -> None:
    key = _type_key(dv.params, "WORK;POSTAL")
    card.address.setdefault(key, []).append(parse_address(_text(dv.value)))


def _set_org(card: Card, dv: DecodedValue) -> None:
    value = _text(dv.value)
    if value.endswith(";"):
        value = value[:-1]
    card.organization = value


def _set_note(card: Card, dv: DecodedValue) -> None:
    card.note = _ESCAPED_NEWLINE.sub("\n", _text(dv.value))


def _set_categories(card: Card, dv: DecodedValue) -> None:
    card.categories = [c.strip() for c in _text(dv.value).split(",")]


def _add_member(card: Card, dv: DecodedValue) -> None:
    member = _text(dv.value)
    if member.startswith("urn:uuid:"):
        member = member[len("urn:uuid:"):]
    if card.xabsmember is None:
        card.xabsmember = []
    card.xabsmember.append(member)


def _set_quickdial(card: Card, dv: DecodedValue) -> None:
    # Fritz!Box speed dial slots are 00-99
    value = _text(dv.value).strip()
    if not _DIGITS.fullmatch(value):
        return
    number = int(value)
    if number <= 99:
        card.xquickdial = number


def _set_vanity(card: Card, dv: DecodedValue) -> None:
    value = _text(dv.value)
    if value.isascii() and value.isalpha():
        card.xvanity = value.upper()[:8]


_HANDLERS: dict[str, Callable[[Card, DecodedValue], None]] = {
    "N": _set_name,
    "BDAY": _set_birthday,
    "ADR": _add_address,
    "ORG": _set_org,
    "NOTE": _set_note,
    "CATEGORIES": _set_categories,
    "X-ADDRESSBOOKSERVER-MEMBER": _add_member,
    "X-FB-QUICKDIAL": _set_quickdial,
    "X-FB-VANITY": _set_vanity,
}


def apply_property(card: Card, prop: PropertyLine) -> bool:
    """Write one tokenized property onto *card*.

    Returns False when the property is not one we map; such lines are
    ignored rather than rejected.
    """
    name = prop.name.upper()
    if not (name in _HANDLERS or name in _SCALARS or name in _KEYED_DEFAULTS or name in _BINARY):
        logger.debug("Ignoring property %s", name)
        return False

    dv = transform_value(prop.value, prop.params)

    if name in _SCALARS:
        setattr(card, _SCALARS[name], _text(dv.value))
    elif name in _KEYED_DEFAULTS:
        attr, default = _KEYED_DEFAULTS[name]
        getattr(card, attr).setdefault(_type_key(dv.params, default), []).append(_text(dv.value))
    elif name in _BINARY:
        slot = name.lower()
        if dv.binary:
            setattr(card, f"raw_{slot}", dv.value)
            setattr(card, f"{slot}_data", ";".join(dv.params))
        else:
            setattr(card, slot, _text(dv.value))
    else:
        _HANDLERS[name](card, dv)
    return True
