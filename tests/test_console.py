"""
Tests for the timeport-import command line.
"""
import pytest
from rich.console import Console

from timeport import console as cli
from timeport.db.models import TimeEntry

CSV = (
    "description,billable,client,project,tags,start,end,task,user_name,user_email\n"
    "Work,true,Acme,Website,,2024-01-01T09:00:00Z,2024-01-01T10:00:00Z,,Alice,a@x.com\n"
)


@pytest.fixture
def recording_console():
    return Console(record=True, width=200)


@pytest.fixture
def use_test_database(monkeypatch, session_factory):
    monkeypatch.setattr(cli, "get_session_local", lambda: session_factory)


def test_types_lists_registered_importers(recording_console):
    exit_code = cli.main(["types"], console=recording_console)

    output = recording_console.export_text()
    assert exit_code == 0
    assert "generic_time_entries" in output
    assert "toggl_data_importer" in output
    assert "Clockify Projects" in output


def test_import_prints_report(tmp_path, recording_console, use_test_database, organization, count_rows):
    export = tmp_path / "entries.csv"
    export.write_text(CSV, encoding="utf-8")

    exit_code = cli.main(
        ["import", str(export), "--organization-id", organization.id, "--type", "generic_time_entries"],
        console=recording_console,
    )

    assert exit_code == 0
    assert "time-entries" in recording_console.export_text()
    assert count_rows(TimeEntry) == 1


def test_import_with_unknown_type_fails(tmp_path, recording_console, use_test_database, organization):
    export = tmp_path / "entries.csv"
    export.write_text(CSV, encoding="utf-8")

    exit_code = cli.main(
        ["import", str(export), "--organization-id", organization.id, "--type", "harvest"],
        console=recording_console,
    )

    assert exit_code == 1
    assert "Invalid importer type 'harvest'" in recording_console.export_text()


def test_import_for_missing_organization(tmp_path, recording_console, use_test_database):
    export = tmp_path / "entries.csv"
    export.write_text(CSV, encoding="utf-8")

    exit_code = cli.main(
        ["import", str(export), "--organization-id", "missing", "--type", "generic_time_entries"],
        console=recording_console,
    )

    assert exit_code == 1
    assert "Organization 'missing' not found" in recording_console.export_text()


def test_date_format_choices_are_enforced():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(
            ["import", "x.csv", "--organization-id", "o", "--type", "t", "--date-format", "YYYY/MM/DD"]
        )
