import json

import pytest

from cade.cli import build_parser, handle
from cade.config import EngineConfig
from cade.engine import DiscoverySession
from cade.models import CATEGORIES
from conftest import NOW


@pytest.fixture
def session(catalog):
    return DiscoverySession(catalog=catalog, config=EngineConfig(page_size=12, load_more_delay=0), now=NOW)


def last_line(capsys):
    return capsys.readouterr().out.strip().splitlines()[-1]


# ============================================
# Commands
# ============================================

def test_filter_category_prints_summary(session, capsys):
    handle(session, "filter category medical")
    assert last_line(capsys) == "2 projects found | 1 filter(s) active | showing 2"


def test_more_then_nothing_left(session, capsys):
    handle(session, "more")
    assert last_line(capsys) == "18 projects found | showing 18"
    handle(session, "more")
    assert last_line(capsys) == "No more projects to load."


def test_search_with_quotes_and_empty_result(session, capsys):
    handle(session, 'search "zzzz"')
    assert last_line(capsys) == "0 projects found | showing 0"
    handle(session, "show")
    assert last_line(capsys) == "No projects found. Try adjusting your filters or search."
    handle(session, "search")
    assert session.filters.search_query == ""


def test_clear_keeps_search(session, capsys):
    handle(session, "search creator:anura")
    handle(session, "filter status active")
    handle(session, "clear")
    out = capsys.readouterr().out
    assert "Filters cleared (search text kept)." in out
    assert session.filters.search_query == "creator:anura"
    assert out.strip().splitlines()[-1] == "5 projects found | showing 5"


def test_unknown_sort_key_is_reported(session, capsys):
    handle(session, "sort bogus")
    out = capsys.readouterr().out
    assert "Unknown sort key 'bogus'; keeping catalog order." in out


def test_sort_and_flip(session, capsys):
    handle(session, "sort most_funded")
    assert (session.sort.sort_by, session.sort.direction) == ("most_funded", "desc")
    handle(session, "flip")
    assert session.sort.direction == "asc"


def test_values_and_unknown_command(session, capsys):
    handle(session, "values category")
    assert capsys.readouterr().out.split() == list(CATEGORIES)
    handle(session, "dance")
    assert last_line(capsys) == "Unknown command. Type 'help'."
    with pytest.raises(ValueError):
        handle(session, "values colour")


def test_filter_usage_errors(session):
    with pytest.raises(ValueError):
        handle(session, "filter category")
    with pytest.raises(ValueError):
        handle(session, "filter funding 10")


def test_suggest_command(session, capsys):
    handle(session, 'suggest "silva"')
    assert "[creator] Anura Silva | Creator" in capsys.readouterr().out
    handle(session, "suggest x")
    assert last_line(capsys) == "No suggestions."


def test_export_commands(session, capsys, tmp_path):
    out_csv = tmp_path / "out.csv"
    handle(session, f'export csv "{out_csv}"')
    assert last_line(capsys) == f"Exported 18 campaigns to {out_csv}"
    out_json = tmp_path / "out.json"
    handle(session, "filter category medical")
    handle(session, f'export json "{out_json}"')
    payload = json.loads(out_json.read_text(encoding="utf-8"))
    assert payload["filters"]["categories"] == ["medical"]
    assert len(payload["campaigns"]) == 2


# ============================================
# Arguments
# ============================================

def test_parser_reads_now_and_page_size():
    args = build_parser().parse_args(["--now", "2026-01-15T12:00:00", "--page-size", "6"])
    assert args.now == NOW
    assert args.page_size == 6


def test_parser_rejects_bad_now():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--now", "yesterday"])
