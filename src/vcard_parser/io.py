from __future__ import annotations

import logging
from pathlib import Path

from .model import Card
from .parser import Parser

logger = logging.getLogger(__name__)


def read_vcf_text(path: Path) -> str:
    """Read a .vcf file as text without losing bytes that are not UTF-8.

    A leading byte order mark is dropped. Undecodable bytes survive as
    surrogate escapes so a CHARSET= parameter can still convert them later.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File {path} is not readable, or doesn't exist.")
    return path.read_bytes().decode("utf-8-sig", errors="surrogateescape")


def read_cards_from_files(paths: list[Path]) -> list[tuple[Card, str]]:
    """Parse all .vcf files and return (card, source_label) pairs."""
    results: list[tuple[Card, str]] = []
    for p in paths:
        p = Path(p)
        label = p.stem
        parser = Parser(read_vcf_text(p))
        logger.debug("%s: %d card(s)", label, len(parser))
        results.extend((card, label) for card in parser)
    return results


def collect_sources(source_dir: Path) -> list[Path]:
    """Return all .vcf files found directly inside source_dir, sorted by name."""
    if not source_dir.is_dir():
        return []
    return sorted(p for p in source_dir.iterdir() if p.suffix.lower() == ".vcf")
