from __future__ import annotations

from typing import Any, Dict, List

import pytest

from tests.support.harness import TT, fmt, read_input, token_pairs

FIXTURES = ["project.cmake", "comments.cmake"]

SETTINGS: Dict[str, Dict[str, Any]] = {
    "defaults": {},
    "narrow": {"printWidth": 40},
    "tabs-crlf": {"useTabs": True, "tabWidth": 4, "endOfLine": "\r\n"},
}

PARAMS = [(name, label) for name in FIXTURES for label in SETTINGS]
IDS = [f"{name}-{label}" for name, label in PARAMS]


def physical_lines(text: str, settings: Dict[str, Any]) -> List[str]:
    eol = settings.get("endOfLine", "\n")
    assert text.endswith(eol)
    return text[: -len(eol)].split(eol)


@pytest.mark.parametrize(("name", "label"), PARAMS, ids=IDS)
def test_tokens_survive_formatting(name: str, label: str) -> None:
    source = read_input(name)
    out = fmt(source, SETTINGS[label])
    assert token_pairs(out) == token_pairs(source)


@pytest.mark.parametrize(("name", "label"), PARAMS, ids=IDS)
def test_formatting_is_idempotent(name: str, label: str) -> None:
    settings = SETTINGS[label]
    once = fmt(read_input(name), settings)
    assert fmt(once, settings) == once


@pytest.mark.parametrize(("name", "label"), PARAMS, ids=IDS)
def test_width_law(name: str, label: str) -> None:
    settings = SETTINGS[label]
    width = settings.get("printWidth", 80)
    tab = " " * settings.get("tabWidth", 2)

    for line in physical_lines(fmt(read_input(name), settings), settings):
        measured = line.replace("\t", tab)
        # a lone token may overflow since it cannot be split
        assert len(measured) <= width or " " not in line.strip(), line


@pytest.mark.parametrize(("name", "label"), PARAMS, ids=IDS)
def test_end_of_line_law(name: str, label: str) -> None:
    settings = SETTINGS[label]
    out = fmt(read_input(name), settings)
    if settings.get("endOfLine") == "\r\n":
        assert "\n" not in out.replace("\r\n", "")
    else:
        assert "\r\n" not in out


def test_keyword_case_is_the_only_token_change() -> None:
    source = "target_link_libraries(app public a private b)"
    out = fmt(source)

    def normalize(pairs):
        return [(t, v.upper() if t == TT.IDENT else v) for t, v in pairs]

    assert token_pairs(out) != token_pairs(source)
    assert normalize(token_pairs(out)) == normalize(token_pairs(source))


def test_unformatted_region_survives_verbatim() -> None:
    out = fmt(read_input("comments.cmake"), {"printWidth": 40})
    assert "set(MATRIX\n  1 0 0\n  0 1 0\n  0 0 1)\n" in out


def test_blank_line_runs_collapse() -> None:
    out = fmt(read_input("project.cmake"))
    assert "\n\n\n" not in out
    assert out.startswith("# Demo project\n")


EDGE_SOURCES = [
    "foo() #[[x]] # @format-off\nset(  y  )\n",
    "foo() #[[x]] # y\n",
    "set(A #[[c]] # t\n b)\n",
    "if(A)\n# @format-off\nset(  x  ) endif()\nset(y)\n",
    "function(f)\n# @format-off\nset( a )\nset(\n  b ) endfunction()\n",
]


@pytest.mark.parametrize("source", EDGE_SOURCES, ids=[f"edge-{i}" for i in range(len(EDGE_SOURCES))])
def test_edge_sources_keep_tokens_and_settle(source: str) -> None:
    once = fmt(source)
    assert token_pairs(once) == token_pairs(source)
    assert fmt(once) == once
