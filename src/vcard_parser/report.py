from __future__ import annotations

from collections import Counter

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .model import Card

console = Console()

# ── Palette ────────────────────────────────────────────────────────────────────
_ACCENT  = "#4d9fff"
_GREEN   = "#3ecf8e"
_AMBER   = "#f0a500"
_TEXT    = "#c9d1e0"
_MID     = "#8896af"
_DIM     = "#546075"
_BORDER  = "#2a3347"


def _count_values(cards: list[Card], attr: str) -> int:
    return sum(len(v) for c in cards for v in getattr(c, attr).values())


def _stat_panel(value: str, label: str, colour: str) -> Panel:
    body = Text()
    body.append(f"{value}\n", style=f"bold {colour}")
    body.append(label, style=f"dim {_DIM}")
    return Panel(body, border_style=_BORDER, padding=(0, 2), expand=True)


def summarize(cards: list[Card]) -> dict[str, int]:
    return {
        "cards": len(cards),
        "groups": sum(1 for c in cards if c.is_group),
        "phones": _count_values(cards, "phone"),
        "emails": _count_values(cards, "email"),
        "addresses": _count_values(cards, "address"),
        "photos": sum(1 for c in cards if c.photo or c.raw_photo is not None),
    }


def print_summary(
    cards: list[Card],
    *,
    source_counts: dict[str, int] | None = None,
    dissolved: int = 0,
) -> None:
    stats = summarize(cards)
    if dissolved:
        groups, groups_label = dissolved, "groups dissolved"
    else:
        groups, groups_label = stats["groups"], "groups"

    console.print()
    console.print(Text("  PARSE SUMMARY", style=f"dim {_DIM}"))
    console.print()

    row1 = Columns([
        _stat_panel(str(stats["cards"]),  "cards parsed",     _ACCENT),
        _stat_panel(str(groups),          groups_label,       _GREEN),
        _stat_panel(str(stats["photos"]), "with photo",       _AMBER),
    ], equal=True, expand=True)
    row2 = Columns([
        _stat_panel(str(stats["phones"]),    "phone numbers", _TEXT),
        _stat_panel(str(stats["emails"]),    "email addresses", _TEXT),
        _stat_panel(str(stats["addresses"]), "postal addresses", _TEXT),
    ], equal=True, expand=True)
    console.print(row1)
    console.print(row2)
    console.print()

    # ── Source breakdown (if multiple) ────────────────────────────────────────
    if source_counts and len(source_counts) > 1:
        src_parts = Text()
        for i, (src, count) in enumerate(sorted(source_counts.items())):
            if i:
                src_parts.append("   ", style="")
            src_parts.append(src, style=f"{_MID}")
            src_parts.append(f"  {count}", style=f"bold {_TEXT}")
        console.print(Panel(
            src_parts,
            title=Text("SOURCES READ", style=f"dim {_DIM}"),
            title_align="left",
            border_style=_BORDER,
            padding=(0, 1),
        ))
        console.print()


def print_cards(cards: list[Card]) -> None:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("#", style=_DIM, justify="right")
    table.add_column("Name")
    table.add_column("Organization", style=_MID)
    table.add_column("Phones", justify="right")
    table.add_column("Emails", justify="right")
    for i, c in enumerate(cards):
        label = c.fullname or " ".join(p for p in (c.firstname, c.lastname) if p) or "Unnamed"
        table.add_row(
            str(i),
            label[:40],
            (c.organization or "")[:30],
            str(sum(len(v) for v in c.phone.values())),
            str(sum(len(v) for v in c.email.values())),
        )
    console.print(table)


def build_source_counts(pairs: list[tuple[object, str]]) -> dict[str, int]:
    return dict(Counter(label for _, label in pairs))
