from __future__ import annotations

import json
from pathlib import Path

import pytest

from git_recommit.config import build_config, load_recommit_config

AUTHORS = [
    {"name": "Alice", "email": "alice@example.com", "role": "backend"},
    {"name": "Carol", "email": "carol@example.com", "role": "frontend"},
]


def test_defaults_with_inline_authors(tmp_path: Path) -> None:
    cfg = build_config({"authors": AUTHORS}, base_dir=tmp_path)

    assert [a.name for a in cfg.authors] == ["Alice", "Carol"]
    assert cfg.backend_label == "server"
    assert cfg.frontend_label == "client"
    assert cfg.message_marker == "MAKHROVYI"
    assert cfg.message_replacement == "AnotherOneProject"
    assert cfg.branch_prefix == "recommited/"
    assert cfg.time_shift_months == 6


def test_authors_path_is_relative_to_config(tmp_path: Path) -> None:
    (tmp_path / "pool").mkdir()
    (tmp_path / "pool" / "people.json").write_text(json.dumps(AUTHORS), encoding="utf-8")
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"authors_path": "pool/people.json", "frontend_label": "web"}), encoding="utf-8")

    cfg = load_recommit_config(config_path)

    assert len(cfg.authors) == 2
    assert cfg.frontend_label == "web"


def test_missing_config_uses_default_authors_file(tmp_path: Path) -> None:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "authors.json").write_text(json.dumps(AUTHORS), encoding="utf-8")

    cfg = load_recommit_config(tmp_path / "config.json")

    assert len(cfg.authors) == 2


def test_authors_override(tmp_path: Path) -> None:
    override = tmp_path / "other.json"
    override.write_text(json.dumps(AUTHORS[:1]), encoding="utf-8")
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"authors": AUTHORS}), encoding="utf-8")

    cfg = load_recommit_config(config_path, authors_path=override)

    assert [a.name for a in cfg.authors] == ["Alice"]


@pytest.mark.parametrize(
    "raw",
    [
        {"authors": AUTHORS, "time_shift_months": "six"},
        {"authors": AUTHORS, "backend_label": ""},
        {"authors": AUTHORS, "branch_prefix": 3},
        {"authors": []},
    ],
)
def test_invalid_config(tmp_path: Path, raw: dict) -> None:
    with pytest.raises(ValueError):
        build_config(raw, base_dir=tmp_path)


def test_invalid_json(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(ValueError):
        load_recommit_config(config_path)


def test_shipped_template_is_valid() -> None:
    template = Path(__file__).resolve().parents[1] / "config-template.json"
    cfg = load_recommit_config(template)
    assert {a.role for a in cfg.authors} == {"backend", "frontend"}
