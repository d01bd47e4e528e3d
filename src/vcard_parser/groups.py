from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from .model import Card

logger = logging.getLogger(__name__)


def collect_groups(cards: Iterable[Card]) -> dict[str, list[str]]:
    """Map group name to member UIDs; same-named groups are merged."""
    groups: dict[str, list[str]] = {}
    for card in cards:
        if card.is_group:
            groups.setdefault(card.fullname or "", []).extend(card.xabsmember)
    return groups


def dissolve_groups(cards: Iterable[Card]) -> list[Card]:
    """Drop iCloud group cards and file their members under the group name.

    Every member card gets the name of each group listing its UID appended
    to its categories. The cards passed in are left untouched.
    """
    cards = list(cards)
    groups = collect_groups(cards)
    out: list[Card] = []
    for card in cards:
        if card.is_group:
            continue
        names = [g for g, members in groups.items() if card.uid is not None and card.uid in members]
        if names:
            card = replace(card, categories=list(card.categories or []) + names)
        out.append(card)
    logger.debug("Dissolved %d group(s), %d card(s) remain", len(groups), len(out))
    return out
