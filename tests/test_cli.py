"""Tests for the kayako CLI commands."""

from pathlib import Path

import pytest

from kayako_client import cli, config_commands
from kayako_client.config import Config, SettingsFile
from tests.conftest import FakeTransport

TICKET = {
    "@id": "42",
    "displayid": "ABC-123-45678",
    "departmentid": "1",
    "statusid": "2",
    "priorityid": "3",
    "fullname": "John Smith",
    "email": "john@example.com",
    "subject": "Printer on fire",
    "ownerstaffname": "Jane Doe",
    "creationtime": "1700000000",
}


@pytest.fixture(autouse=True)
def cli_config(config: Config, monkeypatch: pytest.MonkeyPatch) -> Config:
    """Route CLI commands to the fake transport."""
    monkeypatch.setattr(cli, "get_config", lambda: config)
    return config


@pytest.fixture
def settings_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Store settings written by config commands in a temporary directory."""
    monkeypatch.setattr(
        config_commands, "get_settings", lambda use_global=False: SettingsFile(use_global, config_dir=tmp_path)
    )
    return tmp_path


def test_ticket(transport: FakeTransport, capsys: pytest.CaptureFixture[str]) -> None:
    """Test showing a ticket by display identifier."""
    transport.queue({"ticket": TICKET})

    cli.ticket("ABC-123-45678")

    output = capsys.readouterr().out
    assert "Ticket: ABC-123-45678 (#42)" in output
    assert "Subject: Printer on fire" in output
    assert "Creator: John Smith <john@example.com>" in output
    assert "Owner: Jane Doe" in output
    assert transport.calls == [("GET", "/Tickets/Ticket", ["ABC-123-45678"])]


def test_tickets(transport: FakeTransport, capsys: pytest.CaptureFixture[str]) -> None:
    """Test listing tickets of two departments filtered by status."""
    transport.queue({"ticket": TICKET})

    cli.tickets(1, 2, status_id=2)

    output = capsys.readouterr().out
    assert "Found 1 ticket(s)" in output
    assert "ABC-123-45678: Printer on fire [status: 2, priority: 3]" in output
    assert transport.calls == [("GET", "/Tickets/Ticket", ["ListAll", "1,2", "2", "-1", "-1"])]


def test_add_note(transport: FakeTransport, capsys: pytest.CaptureFixture[str]) -> None:
    """Test adding a note fetches the ticket and staff, then posts the note."""
    transport.queue(
        {"ticket": TICKET},
        {"staff": {"id": "7", "fullname": "Jane Doe"}},
        {"note": {"@id": "11", "@type": "ticket", "@ticketid": "42", "#text": "Called the fire brigade"}},
    )

    cli.add_note(42, "Called the fire brigade", 7)

    assert "Created note 11 on ticket 42" in capsys.readouterr().out
    method, controller, parameters, data, files = transport.calls[2]
    assert (method, controller) == ("POST", "/Tickets/TicketNote")
    assert data == {"ticketid": 42, "staffid": 7, "contents": "Called the fire brigade"}


def test_time_tracks(transport: FakeTransport, capsys: pytest.CaptureFixture[str]) -> None:
    """Test listing formatted durations."""
    transport.queue(
        {
            "timetrack": {
                "@id": "3",
                "@ticketid": "42",
                "@timeworked": "5400",
                "@timebillable": "3600",
                "@workerstaffname": "Jane Doe",
            }
        }
    )

    cli.time_tracks(42)

    assert "#3 Jane Doe: worked 01:30:00, billable 01:00:00" in capsys.readouterr().out


def test_statistics(transport: FakeTransport, capsys: pytest.CaptureFixture[str]) -> None:
    """Test printing ticket counts."""
    transport.queue(
        {
            "departments": {
                "department": {"@id": "1", "lastactivity": "0", "totalitems": "10", "totalunresolveditems": "4"}
            },
            "statuses": {"ticketstatus": {"@id": "2", "@lastactivity": "0", "@totalitems": "6"}},
            "owners": {
                "ownerstaff": {"@id": "0", "@lastactivity": "0", "@totalitems": "3", "@totalunresolveditems": "1"}
            },
        }
    )

    cli.statistics()

    output = capsys.readouterr().out
    assert "  1: 10 ticket(s), 4 unresolved" in output
    assert "  2: 6 ticket(s)" in output
    assert "  unassigned: 3 ticket(s), 1 unresolved" in output


def test_kb_categories(transport: FakeTransport, capsys: pytest.CaptureFixture[str]) -> None:
    """Test listing one page of categories."""
    transport.queue({"kbcategory": {"id": "3", "title": "Printers", "categorytype": "2"}})

    cli.kb_categories(limit=10, start=3)

    assert "3: Printers (category type: 2)" in capsys.readouterr().out
    assert transport.calls == [("GET", "/Knowledgebase/Category", ["ListAll", 10, 3])]


def test_config_set_masks_secrets(settings_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test secrets are never printed."""
    config_commands.set("api_key", "abc123")
    config_commands.set("base_url", "https://helpdesk.example.com/api/")

    output = capsys.readouterr().out
    assert "Set api_key = **** (local)" in output
    assert "abc123" not in output
    assert (settings_dir / "config.yaml").exists()


def test_config_get_list_unset(settings_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test reading, listing and removing settings."""
    config_commands.set("base_url", "https://helpdesk.example.com/api/")
    config_commands.set("secret_key", "s3cret")
    capsys.readouterr()

    config_commands.get("base_url")
    config_commands.list_settings()
    config_commands.unset("base_url")
    config_commands.get("base_url")

    output = capsys.readouterr().out
    assert "base_url = https://helpdesk.example.com/api/" in output
    assert "secret_key = ****" in output
    assert "base_url is not set" in output
