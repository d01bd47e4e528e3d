"""Serialisation, group dissolution and file loading."""
from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from vcard_parser.exporter import cards_to_json, export_json
from vcard_parser.groups import collect_groups, dissolve_groups
from vcard_parser.io import collect_sources, read_cards_from_files, read_vcf_text
from vcard_parser.model import Address, Card
from vcard_parser.parser import Parser
from vcard_parser.report import build_source_counts, summarize


# ── Model ──────────────────────────────────────────────────────────────────────

def test_to_dict_is_sparse():
    assert Card(fullname="Alice").to_dict() == {"fullname": "Alice"}


def test_to_dict_converts_dates_bytes_and_addresses():
    card = Card(
        birthday=date(1980, 1, 2),
        raw_photo=b"hello",
        photo_data="JPEG",
        address={"HOME": [Address(street="Main St", city="")]},
    )
    assert card.to_dict() == {
        "birthday": "1980-01-02",
        "address": {"HOME": [{"street": "Main St", "city": ""}]},
        "raw_photo": "aGVsbG8=",
        "photo_data": "JPEG",
    }


# ── JSON export ────────────────────────────────────────────────────────────────

def test_export_json(tmp_path: Path):
    cards = [Card(fullname="Zoë", phone={"CELL": ["+49 1"]}), Card(fullname="Bob")]
    out = tmp_path / "out" / "cards.json"
    assert export_json(cards, out) == 2
    text = out.read_text(encoding="utf-8")
    assert "Zoë" in text
    assert json.loads(text) == [{"fullname": "Zoë", "phone": {"CELL": ["+49 1"]}}, {"fullname": "Bob"}]


def test_cards_to_json_compact():
    assert cards_to_json([Card(uid="1")], indent=None) == '[{"uid": "1"}]'


def test_cards_to_json_replaces_undecodable_bytes():
    raw = b"caf\xe9".decode("utf-8", errors="surrogateescape")
    assert json.loads(cards_to_json([Card(fullname=raw)])) == [{"fullname": "caf�"}]


# ── Group dissolution ──────────────────────────────────────────────────────────

_ICLOUD = """BEGIN:VCARD
VERSION:3.0
FN:Alice
UID:u-alice
CATEGORIES:Work
END:VCARD
BEGIN:VCARD
VERSION:3.0
FN:Bob
UID:u-bob
END:VCARD
BEGIN:VCARD
VERSION:3.0
FN:Family
X-ADDRESSBOOKSERVER-KIND:group
X-ADDRESSBOOKSERVER-MEMBER:urn:uuid:u-alice
X-ADDRESSBOOKSERVER-MEMBER:urn:uuid:u-bob
END:VCARD
BEGIN:VCARD
VERSION:3.0
FN:Tennis
X-ADDRESSBOOKSERVER-KIND:group
X-ADDRESSBOOKSERVER-MEMBER:urn:uuid:u-alice
END:VCARD
"""


def test_collect_groups():
    assert collect_groups(Parser(_ICLOUD)) == {"Family": ["u-alice", "u-bob"], "Tennis": ["u-alice"]}


def test_dissolve_groups_files_members():
    cards = dissolve_groups(Parser(_ICLOUD))
    assert [c.fullname for c in cards] == ["Alice", "Bob"]
    assert cards[0].categories == ["Work", "Family", "Tennis"]
    assert cards[1].categories == ["Family"]


def test_dissolve_groups_does_not_touch_input():
    parser = Parser(_ICLOUD)
    dissolve_groups(parser)
    assert parser.card_at(0).categories == ["Work"]
    assert parser.card_at(1).categories is None
    assert len(parser) == 4


def test_same_named_groups_merge():
    text = _ICLOUD.replace("FN:Tennis", "FN:Family")
    assert collect_groups(Parser(text)) == {"Family": ["u-alice", "u-bob", "u-alice"]}
    cards = dissolve_groups(Parser(text))
    assert cards[0].categories == ["Work", "Family"]


# ── File loading ───────────────────────────────────────────────────────────────

def test_read_cards_tracks_source(tmp_path: Path):
    (tmp_path / "icloud.vcf").write_text("BEGIN:VCARD\nFN:Alice\nEND:VCARD\n")
    (tmp_path / "fritzbox.vcf").write_text("BEGIN:VCARD\nFN:Bob\nEND:VCARD\nBEGIN:VCARD\nFN:Carl\nEND:VCARD\n")
    pairs = read_cards_from_files(collect_sources(tmp_path))
    assert [(c.fullname, label) for c, label in pairs] == [
        ("Bob", "fritzbox"), ("Carl", "fritzbox"), ("Alice", "icloud"),
    ]
    assert build_source_counts(pairs) == {"fritzbox": 2, "icloud": 1}


def test_latin1_file_with_charset(tmp_path: Path):
    path = tmp_path / "old.vcf"
    path.write_bytes(b"BEGIN:VCARD\r\nVERSION:2.1\r\nFN;CHARSET=ISO-8859-1:Ren\xe9\r\nEND:VCARD\r\n")
    assert Parser(read_vcf_text(path)).card_at(0).fullname == "René"


def test_byte_order_mark_is_dropped(tmp_path: Path):
    path = tmp_path / "outlook.vcf"
    path.write_bytes(b"\xef\xbb\xbfBEGIN:VCARD\r\nFN:Alice\r\nEND:VCARD\r\n")
    assert read_vcf_text(path).startswith("BEGIN:VCARD")
    assert Parser(read_vcf_text(path)).card_at(0).fullname == "Alice"


def test_read_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        read_vcf_text(tmp_path / "nope.vcf")


def test_collect_sources_ignores_other_files(tmp_path: Path):
    (tmp_path / "a.vcf").write_text("")
    (tmp_path / "B.VCF").write_text("")
    (tmp_path / "notes.txt").write_text("")
    assert [p.name for p in collect_sources(tmp_path)] == ["B.VCF", "a.vcf"]


def test_collect_sources_missing_dir(tmp_path: Path):
    assert collect_sources(tmp_path / "nonexistent") == []


# ── Summary ────────────────────────────────────────────────────────────────────

def test_summarize_counts():
    stats = summarize(list(Parser(_ICLOUD)))
    assert stats["cards"] == 4
    assert stats["groups"] == 2
    assert stats["phones"] == 0
