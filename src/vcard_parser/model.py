from __future__ import annotations

import base64
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any


@dataclass
class Address:
    # None means the component was not supplied; "" means supplied empty.
    name: str | None = None
    extended: str | None = None
    street: str | None = None
    city: str | None = None
    region: str | None = None
    zip: str | None = None
    country: str | None = None

    def component_count(self) -> int:
        return sum(1 for f in fields(self) if getattr(self, f.name) is not None)

    def to_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass
class Card:
    fullname: str | None = None
    # structured name (N), merged flat onto the card
    lastname: str | None = None
    firstname: str | None = None
    additional: str | None = None
    prefix: str | None = None
    suffix: str | None = None
    nickname: str | None = None
    birthday: date | None = None
    organization: str | None = None
    title: str | None = None
    revision: str | None = None
    version: str | None = None
    note: str | None = None
    categories: list[str] | None = None
    uid: str | None = None
    # multi-valued properties keyed by type-tag
    address: dict[str, list[Address]] = field(default_factory=dict)
    phone: dict[str, list[str]] = field(default_factory=dict)
    email: dict[str, list[str]] = field(default_factory=dict)
    url: dict[str, list[str]] = field(default_factory=dict)
    # binary properties: either a reference string or a decoded payload
    photo: str | None = None
    raw_photo: bytes | str | None = None
    photo_data: str | None = None
    logo: str | None = None
    raw_logo: bytes | str | None = None
    logo_data: str | None = None
    sound: str | None = None
    raw_sound: bytes | str | None = None
    sound_data: str | None = None
    key: str | None = None
    raw_key: bytes | str | None = None
    key_data: str | None = None
    # iCloud address-book server extensions
    xabskind: str | None = None
    xabsmember: list[str] | None = None
    # Fritz!Box extensions
    xquickdial: int | None = None
    xvanity: str | None = None

    @property
    def is_group(self) -> bool:
        return self.xabsmember is not None

    def to_dict(self) -> dict[str, Any]:
        """Sparse, JSON-ready view: unset slots and empty mappings are left out."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == {}:
                continue
            if isinstance(value, bytes):
                value = base64.b64encode(value).decode("ascii")
            elif isinstance(value, date):
                value = value.isoformat()
            elif f.name == "address":
                value = {k: [a.to_dict() for a in v] for k, v in value.items()}
            elif isinstance(value, dict):
                value = {k: list(v) for k, v in value.items()}
            elif isinstance(value, list):
                value = list(value)
            out[f.name] = value
        return out
