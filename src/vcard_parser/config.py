from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Paths:
    root: Path
    raw_dir: Path
    json_dir: Path
    local_dir: Path
    conf_file: Path


@dataclass
class Settings:
    dissolve_groups: bool = True
    json_indent: int = 4
    log_level: str = "WARNING"
    # where `parse` writes JSON when no --output is given; None means stdout
    output_dir: Path | None = None


DEFAULT_CONF = """# vcard-parser local config (TOML)
dissolve_groups = true
json_indent = 4
log_level = "WARNING"
# output_dir = "cards-json"
"""


def load_settings(conf: Path) -> Settings:
    settings = Settings()
    try:
        data = tomllib.loads(conf.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", conf, exc)
        return settings

    dissolve = data.get("dissolve_groups", settings.dissolve_groups)
    if isinstance(dissolve, bool):
        settings.dissolve_groups = dissolve
    else:
        logger.warning("dissolve_groups in %s is not true/false, using %s", conf, settings.dissolve_groups)

    try:
        settings.json_indent = int(data.get("json_indent", settings.json_indent))
    except (TypeError, ValueError):
        logger.warning("json_indent in %s is not a number, using %d", conf, settings.json_indent)

    settings.log_level = str(data.get("log_level", settings.log_level)).upper()

    output_dir = data.get("output_dir")
    if isinstance(output_dir, str) and output_dir:
        settings.output_dir = Path(output_dir)
    elif output_dir is not None:
        logger.warning("output_dir in %s is not a path, writing to stdout", conf)
    return settings


def ensure_workspace(base: Path | None = None) -> tuple[Paths, Settings]:
    root = Path(base or os.getcwd())
    raw = root / "cards-raw"
    out = root / "cards-json"
    local = root / "local"
    conf = local / "vcard.conf"

    for d in (raw, out, local):
        d.mkdir(parents=True, exist_ok=True)

    if not conf.exists():
        conf.write_text(DEFAULT_CONF, encoding="utf-8")

    return (
        Paths(root=root, raw_dir=raw, json_dir=out, local_dir=local, conf_file=conf),
        load_settings(conf),
    )
