"""End-to-end tests for the command-line interface."""

import re

import pytest

from jobtrack.cli import main, parse_args


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "cli.db")


def _run(db, *argv):
    return main(["--db", db, *argv])


def _add(db, capsys, *argv):
    assert _run(db, "add", *argv) == 0
    out = capsys.readouterr().out
    return re.search(r"Added (\S+):", out).group(1)


def test_add_list_and_stage(db, capsys):
    app_id = _add(db, capsys, "Engineer", "Acme", "--salary", "$100k")
    _add(db, capsys, "Designer", "Globex")

    assert _run(db, "list", "--salary", "with") == 0
    out = capsys.readouterr().out
    assert "Engineer @ Acme" in out
    assert "Designer" not in out
    assert "1 of 2 application(s)" in out

    assert _run(db, "stage", app_id, "interview") == 0
    assert "Moved to Interview" in capsys.readouterr().out

    assert _run(db, "list", "--stage", "interview") == 0
    assert app_id in capsys.readouterr().out


def test_stats(db, capsys):
    _add(db, capsys, "Engineer", "Acme", "--stage", "offer")
    assert _run(db, "stats") == 0
    out = capsys.readouterr().out
    assert "Total:               1" in out
    assert "Success rate:        100%" in out


def test_delete(db, capsys):
    app_id = _add(db, capsys, "Engineer", "Acme")
    assert _run(db, "delete", app_id) == 0
    assert _run(db, "delete", app_id) == 1
    assert "no application" in capsys.readouterr().err


def test_stage_unknown_id(db, capsys):
    assert _run(db, "stage", "missing", "offer") == 1


def test_export_backup_restore(db, tmp_path, capsys):
    _add(db, capsys, "Engineer", "Acme")
    csv_path = str(tmp_path / "out.csv")
    backup_path = str(tmp_path / "backup.json")

    assert _run(db, "export", csv_path) == 0
    assert "Exported 1 application(s)" in capsys.readouterr().out

    assert _run(db, "backup", backup_path) == 0
    assert _run(db, "reset", "--yes") == 0
    capsys.readouterr()
    assert _run(db, "-q", "list") == 0
    assert capsys.readouterr().out == ""

    assert _run(db, "restore", backup_path) == 0
    capsys.readouterr()
    assert _run(db, "list") == 0
    assert "Engineer @ Acme" in capsys.readouterr().out


def test_restore_bad_file(db, tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text('{"nope": 1}', encoding="utf-8")
    assert _run(db, "restore", str(bad)) == 1
    assert "Error" in capsys.readouterr().err


def test_reminders_empty(db, capsys):
    assert _run(db, "reminders", "--overdue") == 0
    assert "0 reminder(s)" in capsys.readouterr().out


def test_reset_declined(db, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    assert _run(db, "reset") == 1


def test_subcommand_required():
    with pytest.raises(SystemExit):
        parse_args([])


def test_list_column_filter(db, capsys):
    _add(db, capsys, "Engineer", "Acme", "--location", "Remote")
    _add(db, capsys, "Designer", "Globex", "--location", "Berlin")

    assert _run(db, "list", "--column", "location=rem", "-c", "company=acme") == 0
    out = capsys.readouterr().out
    assert "Engineer @ Acme" in out
    assert "Designer" not in out


@pytest.mark.parametrize("value", ["nocolumn", "notes=x"])
def test_unknown_filter_column_rejected(value):
    with pytest.raises(SystemExit):
        parse_args(["list", "--column", value])


def test_sort_choices():
    assert parse_args(["list", "--sort", "company.name"]).sort == "company.name"
    with pytest.raises(SystemExit):
        parse_args(["list", "--sort", "notes"])
