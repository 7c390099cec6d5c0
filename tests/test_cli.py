"""
Tests for scripts/predict_navigation.py with the default engine swapped for
an in-memory one.
"""

import importlib.util
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from navigator.models import IdentifierKind, UrlPattern
from navigator.pattern_storage import InMemoryPatternStore

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "predict_navigation.py"


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("predict_navigation", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def engine():
    store = InMemoryPatternStore([
        UrlPattern(
            domain="old.example",
            template="/chapter-{number}",
            example_url="https://old.example/chapter-1",
            identifier_kind=IdentifierKind.NUMERIC,
            confidence=0.9,
            success_rate=0.9,
            last_used=0,
        ),
    ])
    fake = MagicMock()
    fake.store = store
    return fake


def test_predict_prints_response(cli, capsys):
    response = (200, {"nextUrl": "https://site.example/chapter-2", "cached": False})
    with patch.object(cli, "handle_next_chapter_request", return_value=response) as handler:
        assert cli.main(["predict", "https://site.example/chapter-1"]) == 0
    handler.assert_called_once_with({"url": "https://site.example/chapter-1"})
    assert json.loads(capsys.readouterr().out)["nextUrl"] == "https://site.example/chapter-2"


def test_predict_invalid_url_exits_nonzero(cli, capsys):
    with patch("navigator.api.get_default_engine") as get_engine:
        assert cli.main(["predict", "not-a-url"]) == 1
        get_engine.assert_not_called()
    assert "Request validation failed" in capsys.readouterr().out


def test_stats_lists_patterns(cli, engine, capsys):
    with patch.object(cli, "get_default_engine", return_value=engine), \
            patch("navigator.api.get_default_engine", return_value=engine):
        assert cli.main(["stats", "-v"]) == 0
    out = capsys.readouterr().out
    assert '"totalPatterns": 1' in out
    assert "old.example" in out


def test_prune_removes_stale_patterns(cli, engine, capsys):
    with patch.object(cli, "get_default_engine", return_value=engine):
        assert cli.main(["prune", "--max-age-days", "1"]) == 0
    assert "Removed 1 stale patterns" in capsys.readouterr().out
    assert engine.store.get_all_patterns() == []


def test_debug_level_choices_follow_logger_levels(cli):
    parser = cli.build_parser()
    assert parser.parse_args(['--debug-level', 'TRACE', 'stats']).debug_level == 'TRACE'
    with pytest.raises(SystemExit):
        parser.parse_args(['--debug-level', 'LOUD', 'stats'])
