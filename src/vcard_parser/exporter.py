from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from .model import Card


def cards_to_json(cards: Iterable[Card], indent: int | None = 4) -> str:
    text = json.dumps([c.to_dict() for c in cards], indent=indent, ensure_ascii=False)
    # undecodable input bytes (surrogate escapes) cannot be emitted as UTF-8
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def export_json(cards: Iterable[Card], path: Path, indent: int | None = 4) -> int:
    cards = list(cards)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(cards_to_json(cards, indent=indent) + "\n", encoding="utf-8")
    return len(cards)
