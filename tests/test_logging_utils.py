"""Tests for colored trace output helpers."""

from rapport.logging_utils import (
    LOG_TAG_SUCCESS,
    Color,
    colored,
    format_columns,
    indent_continuation,
    log_success,
)


def test_colored_wraps_text(monkeypatch):
    monkeypatch.delenv("RAPPORT_NO_COLOR", raising=False)

    assert colored("hi", Color.BLUE) == f"{Color.BLUE.value}hi{Color.RESET.value}"
    assert colored("hi", Color.RED, bold=True).startswith(Color.BOLD.value + Color.RED.value)


def test_no_color_env_disables_codes(monkeypatch):
    monkeypatch.setenv("RAPPORT_NO_COLOR", "1")

    assert colored("hi", Color.GREEN, bold=True) == "hi"


def test_log_helpers_print(monkeypatch, capsys):
    monkeypatch.setenv("RAPPORT_NO_COLOR", "1")

    log_success(f"{LOG_TAG_SUCCESS} done")

    assert capsys.readouterr().out == "[✓] done\n"


def test_format_columns_aligns_fields():
    line = format_columns("Event", "Dist", "Beliefs")

    assert line.index("Dist") == 25
    assert line.index("Beliefs") == 50


def test_indent_continuation():
    assert indent_continuation("single") == "single"
    assert indent_continuation("one\ntwo", width=3) == "one\n   two"
