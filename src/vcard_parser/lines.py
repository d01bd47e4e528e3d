from __future__ import annotations

import re
from typing import NamedTuple

# RFC 2425 5.8.1: a line break followed by one space or tab is a fold.
_FOLD = re.compile(r"\n[ \t]")
# Group names are alphanumeric and end with a period, e.g. "item1.TEL".
_GROUP_PREFIX = re.compile(r"^\w+\.", re.ASCII)
_TYPE_PREFIX = re.compile(r"^type=", re.IGNORECASE)


class PropertyLine(NamedTuple):
    name: str
    params: list[str]
    value: str


def unfold(text: str) -> list[str]:
    """Turn raw vCard text into trimmed, non-empty logical lines."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _FOLD.sub("", text)
    return [s for s in (line.strip() for line in text.split("\n")) if s]


def tokenize(line: str) -> PropertyLine:
    """Split one logical property line into name, type-params and raw value.

    The group prefix is dropped. A bare parameter (``WORK``) and a
    ``type=WORK`` parameter normalise to the same tag.
    """
    line = _GROUP_PREFIX.sub("", line, count=1)
    head, _, value = line.partition(":")
    name, *params = head.split(";")
    return PropertyLine(
        name=name.upper(),
        params=[_TYPE_PREFIX.sub("", p) for p in params],
        value=value,
    )
