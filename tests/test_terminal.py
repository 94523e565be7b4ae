from datetime import date

import pytest

from worklog_app.core.models import ParsedWorkLog
from worklog_app.terminal import console
from worklog_app.terminal.prompting import (
    confirm_yes_no,
    is_exit_command,
    parse_command,
    read_date_range,
)


def _reader(*answers):
    queue = list(answers)

    def read_line(prompt):
        if not queue:
            raise EOFError
        return queue.pop(0)

    return read_line


def test_reply_is_printed_without_payload_or_markdown(capsys):
    reply = 'Here is the **final** list:\n```json\n{"work_logs": [], "ready_to_submit": true}\n```'
    console.print_reply(reply, delay=0)
    out = capsys.readouterr().out
    assert "AI: Here is the final list:" in out
    assert "work_logs" not in out
    assert "**" not in out


def test_payload_only_reply_prints_nothing(capsys):
    console.print_reply('```json\n{"work_logs": []}\n```', delay=0)
    assert capsys.readouterr().out == ""


def test_summary_table_groups_by_issue_with_total():
    logs = [
        ParsedWorkLog("PROJ-1", 3600, "Review"),
        ParsedWorkLog("PROJ-2", 5400, "Invoices"),
        ParsedWorkLog("PROJ-1", 1800, "Fixes"),
    ]
    table = console.summary_table(logs)
    assert table["Issue"].tolist() == ["PROJ-1", "PROJ-2", "TOTAL"]
    assert table["Time"].tolist() == ["1.5h", "1.5h", "3.0h"]
    assert table.loc[0, "Description"] == "Review; Fixes"


def test_errors_go_to_stderr(capsys):
    console.print_error("boom")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "! boom" in captured.err


@pytest.mark.parametrize(
    "answers, expected",
    [
        (["y"], True),
        ([""], True),
        (["Да"], True),
        (["нет"], False),
        (["maybe", "n"], False),
        ([], False),
    ],
)
def test_confirm_yes_no(answers, expected):
    assert confirm_yes_no("Submit?", _reader(*answers)) is expected


def test_parse_command():
    assert parse_command("/model  gemini-2.5-pro ") == ("/model", "gemini-2.5-pro")
    assert parse_command("/HELP") == ("/help", "")
    assert parse_command("fixed the build") is None


def test_exit_phrases_are_case_insensitive():
    assert is_exit_command("  QUIT ")
    assert is_exit_command("Стоп")
    assert not is_exit_command("stopped the server")


def test_date_range_reprompts_on_bad_input(capsys):
    read = _reader("2024-13-01", "2024-09-02", "2024-09-06")
    assert read_date_range(read) == (date(2024, 9, 2), date(2024, 9, 6))
    assert "Invalid date format" in capsys.readouterr().out


def test_date_range_rejects_reversed_order(capsys):
    read = _reader("2024-09-06", "2024-09-02", "2024-09-02", "2024-09-06")
    assert read_date_range(read) == (date(2024, 9, 2), date(2024, 9, 6))
    assert "must not be before" in capsys.readouterr().out
