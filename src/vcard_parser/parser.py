from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from .errors import MalformedInputError
from .fields import apply_property
from .lines import tokenize, unfold
from .model import Card

logger = logging.getLogger(__name__)

BEGIN = "BEGIN:VCARD"
END = "END:VCARD"


def iter_card_blocks(lines: Iterable[str]) -> Iterator[list[tuple[int, str]]]:
    """Group logical lines into one block per BEGIN:VCARD ... END:VCARD.

    Each block holds the (1-based line number, line) pairs between the
    markers. Anything that breaks the pairing - a property outside a card,
    a nested BEGIN, a stray END or a card left open at the end of input -
    raises MalformedInputError.
    """
    block: list[tuple[int, str]] | None = None
    opened_at = 0
    for lineno, line in enumerate(lines, 1):
        marker = line.upper()
        if marker == BEGIN:
            if block is not None:
                raise MalformedInputError(
                    f"BEGIN:VCARD inside the card opened at line {opened_at}", lineno
                )
            block, opened_at = [], lineno
        elif marker == END:
            if block is None:
                raise MalformedInputError("END:VCARD without a matching BEGIN:VCARD", lineno)
            yield block
            block = None
        elif block is None:
            raise MalformedInputError(f"property outside of a card: {line[:40]!r}", lineno)
        else:
            block.append((lineno, line))
    if block is not None:
        raise MalformedInputError("card is never closed with END:VCARD", opened_at)


def build_card(block: Iterable[tuple[int, str]]) -> Card:
    card = Card()
    for lineno, line in block:
        try:
            apply_property(card, tokenize(line))
        except MalformedInputError as exc:
            if exc.lineno is None:
                raise MalformedInputError(str(exc), lineno) from exc
            raise
    return card


class Parser:
    """Parse a blob of vCard text into Card records.

    Parsing happens once, in the constructor. The result is read back by
    iterating the parser, through ``cards`` or with ``card_at``.
    """

    def __init__(self, content: str):
        lines = unfold(content)
        logger.debug("Unfolded input into %d logical line(s)", len(lines))
        self._cards: tuple[Card, ...] = tuple(build_card(b) for b in iter_card_blocks(lines))
        logger.debug("Parsed %d card(s)", len(self._cards))

    @classmethod
    def from_file(cls, path: Path) -> "Parser":
        from .io import read_vcf_text

        return cls(read_vcf_text(path))

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def cards(self) -> tuple[Card, ...]:
        return self._cards

    def card_at(self, index: int) -> Card:
        if not 0 <= index < len(self._cards):
            raise IndexError(f"No card at index {index}; {len(self._cards)} card(s) parsed")
        return self._cards[index]
