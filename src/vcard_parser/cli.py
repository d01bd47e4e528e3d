from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import typer
from rich.console import Console

from .config import Settings, ensure_workspace, load_settings
from .errors import VcardError
from .exporter import cards_to_json, export_json
from .groups import collect_groups, dissolve_groups
from .io import collect_sources, read_cards_from_files
from .model import Card
from .report import build_source_counts, print_cards, print_summary

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="vcard-parser: turn vCard exports into structured JSON contact records.",
)
console = Console()
err_console = Console(stderr=True)

DEFAULT_CONF = Path("local") / "vcard.conf"
DEFAULT_SOURCES = Path("cards-raw")


# ── Shared helpers ─────────────────────────────────────────────────────────────

def _settings(config: Path | None) -> Settings:
    conf = config or DEFAULT_CONF
    if config is None and not conf.exists():
        return Settings()
    return load_settings(conf)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _output_name(pairs: list[tuple[Card, str]]) -> str:
    labels = {label for _, label in pairs}
    if len(labels) == 1:
        return f"{labels.pop()}.json"
    return f"{date.today().isoformat()}-cards.json"


def _load(files: list[Path] | None) -> list[tuple[Card, str]]:
    files = files or collect_sources(DEFAULT_SOURCES)
    if not files:
        err_console.print(
            f"[bold red]No .vcf files given and none found in {DEFAULT_SOURCES}/.[/bold red]"
        )
        raise typer.Exit(code=2)
    try:
        return read_cards_from_files(files)
    except FileNotFoundError as exc:
        err_console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=2)
    except VcardError as exc:
        err_console.print(f"[bold red]Parse error:[/bold red] {exc}")
        raise typer.Exit(code=1)


# ── `parse` command ────────────────────────────────────────────────────────────

@app.command()
def parse(
    files: list[Path] | None = typer.Argument(
        None, help=".vcf file(s) to parse (default: every .vcf in cards-raw/)"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Write JSON here. Falls back to output_dir in local/vcard.conf, then stdout.",
    ),
    dissolve: bool | None = typer.Option(
        None, "--dissolve/--no-dissolve",
        help="Fold iCloud group cards into their members' categories. Falls back to local/vcard.conf.",
    ),
    indent: int | None = typer.Option(None, "--indent", help="JSON indent. Falls back to local/vcard.conf."),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    config: Path | None = typer.Option(None, "--config", "-c", help="TOML config file"),
) -> None:
    """Parse vCard file(s) and emit the cards as a JSON array."""
    settings = _settings(config)
    _setup_logging(log_level or settings.log_level)

    pairs = _load(files)
    cards = [card for card, _ in pairs]
    should_dissolve = settings.dissolve_groups if dissolve is None else dissolve
    if should_dissolve:
        cards = dissolve_groups(cards)

    effective_indent = settings.json_indent if indent is None else indent
    if output is None and settings.output_dir is not None:
        output = settings.output_dir / _output_name(pairs)
    if output is None:
        typer.echo(cards_to_json(cards, indent=effective_indent))
        return
    count = export_json(cards, output, indent=effective_indent)
    err_console.print(f"[bold green]✓ Wrote {count} card(s) → {output}[/bold green]")


# ── `summary` command ──────────────────────────────────────────────────────────

@app.command()
def summary(
    files: list[Path] | None = typer.Argument(
        None, help=".vcf file(s) to parse (default: every .vcf in cards-raw/)"
    ),
    dissolve: bool | None = typer.Option(
        None, "--dissolve/--no-dissolve",
        help="Dissolve groups before counting. Falls back to local/vcard.conf.",
    ),
    show_cards: bool = typer.Option(False, "--cards", help="List every parsed card"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    config: Path | None = typer.Option(None, "--config", "-c", help="TOML config file"),
) -> None:
    """Parse vCard file(s) and print what was found."""
    settings = _settings(config)
    _setup_logging(log_level or settings.log_level)

    pairs = _load(files)
    cards = [card for card, _ in pairs]
    should_dissolve = settings.dissolve_groups if dissolve is None else dissolve
    dissolved = 0
    if should_dissolve:
        dissolved = len(collect_groups(cards))
        cards = dissolve_groups(cards)

    print_summary(cards, source_counts=build_source_counts(pairs), dissolved=dissolved)
    if show_cards:
        print_cards(cards)


# ── `init` command ─────────────────────────────────────────────────────────────

@app.command()
def init(
    base: Path | None = typer.Option(None, "--dir", "-d", help="Workspace root (default: current folder)"),
) -> None:
    """Create cards-raw/, cards-json/ and a default local/vcard.conf."""
    paths, _ = ensure_workspace(base)
    console.print(f"  Sources : [bold]{paths.raw_dir}[/bold]")
    console.print(f"  Output  : [bold]{paths.json_dir}[/bold]")
    console.print(f"  Config  : [bold]{paths.conf_file}[/bold]")


if __name__ == "__main__":
    app()
