"""Tests for ticket notes."""

import pytest

from kayako_client.config import Config
from kayako_client.creators import Cleared, NameOnly, StaffRef, UserRef
from kayako_client.exceptions import IllegalState, InvalidEnumValue, MissingRequiredField, TypeMismatch
from kayako_client.identity import EntityIdentity
from kayako_client.objects.staff import Staff
from kayako_client.objects.ticket import Ticket
from kayako_client.objects.ticket_note import TicketNote, note_identity_fields
from kayako_client.objects.user import User
from tests.conftest import FakeTransport


def note_node(note_id: int, contents: str, note_type: str = "ticket") -> dict:
    return {
        "@id": str(note_id),
        "@type": note_type,
        "@ticketid": "42",
        "@userid": "9",
        "@creatorstaffid": "7",
        "@creatorstaffname": "Jane Doe",
        "@creationdate": "1700000000",
        "@notecolor": "2",
        "#text": contents,
    }


def test_build_ticket_note() -> None:
    """Test a ticket note built from ids sends ticket, staff and contents."""
    note = TicketNote()
    note.ticket_id = 42
    note.set_creator_staff_id(7)
    note.contents = "hello"

    data = note.build_data(create=True)

    assert data["ticketid"] == 42
    assert data["staffid"] == 7
    assert data["contents"] == "hello"
    assert "fullname" not in data


def test_build_ticket_note_without_ticket() -> None:
    """Test the ticket is required to create a note."""
    note = TicketNote()
    note.set_creator_staff_id(7)
    note.contents = "hello"

    with pytest.raises(MissingRequiredField) as excinfo:
        note.build_data(create=True)

    assert excinfo.value.field == "ticketid"


def test_build_note_requires_creator() -> None:
    """Test a note without staff id or name is rejected."""
    note = TicketNote()
    note.ticket_id = 42
    note.contents = "hello"

    with pytest.raises(MissingRequiredField) as excinfo:
        note.build_data(create=True)

    assert excinfo.value.field == "staffid/fullname"


def test_get_all_keeps_order(config: Config, transport: FakeTransport) -> None:
    """Test three repeated note nodes become three notes in order."""
    transport.queue({"note": [note_node(1, "first"), note_node(2, "second"), note_node(3, "third")]})

    notes = TicketNote.get_all(config, 42)

    assert len(notes) == 3
    assert notes.first().contents == "first"
    assert notes.to_list()[2].contents == "third"
    assert notes.collect_ids() == [1, 2, 3]
    assert transport.calls == [("GET", "/Tickets/TicketNote", ["ListAll", 42])]


def test_parsed_note_fields(config: Config) -> None:
    """Test attributes and text of a note node."""
    note = TicketNote(config, data=note_node(5, "text"))

    assert note.id == 5
    assert note.ticket_id == 42
    assert note.user_id is None
    assert note.creator_name == "Jane Doe"
    assert note.note_color == TicketNote.COLOR_PURPLE
    assert note.creation_date == 1700000000
    assert note.identity == EntityIdentity.of(42, 5)
    assert str(note) == "text (type: ticket)"


def test_non_finite_numbers_parse_as_missing(config: Config) -> None:
    """Test infinite numeric attributes are read as absent values."""
    node = note_node(5, "text")
    node["@id"] = "Infinity"
    node["@creationdate"] = "1e999"

    note = TicketNote(config, data=node)

    assert note.id is None
    assert note.ticket_id == 42
    assert note.creation_date is None
    assert note.contents == "text"


def test_user_note_identity(config: Config) -> None:
    """Test user notes are addressed by their user."""
    note = TicketNote(config, data=note_node(5, "text", note_type="user"))

    assert note_identity_fields("user") == ("user_id", "id")
    assert note.identity == EntityIdentity.of(9, 5)
    assert note.ticket_id is None
    assert note.ticket is None


def test_note_identity_defaults_to_ticket() -> None:
    """Test unknown note types are addressed like ticket notes."""
    assert note_identity_fields(None) == ("ticket_id", "id")
    assert note_identity_fields("other") == ("ticket_id", "id")
    assert note_identity_fields("userorganization") == ("user_organization_id", "id")


def test_only_ticket_notes_can_be_deleted(config: Config, transport: FakeTransport) -> None:
    """Test deleting user notes is rejected."""
    user_note = TicketNote(config, data=note_node(5, "text", note_type="user"))
    ticket_note = TicketNote(config, data=note_node(6, "text"))

    with pytest.raises(IllegalState):
        user_note.delete()
    ticket_note.delete()

    assert transport.calls == [("DELETE", "/Tickets/TicketNote", [42, 6])]


def test_notes_are_never_updated(config: Config, transport: FakeTransport) -> None:
    """Test update always fails."""
    note = TicketNote(config, data=note_node(6, "text"))

    with pytest.raises(IllegalState):
        note.update()
    assert transport.calls == []


def test_create_new_and_create(config: Config, transport: FakeTransport) -> None:
    """Test creating a note on a ticket by a staff user."""
    ticket = Ticket(config, data={"@id": "42", "subject": "Printer"})
    staff = Staff(config, data={"id": "7", "fullname": "Jane Doe"})
    transport.queue({"note": note_node(11, "hello")})

    note = TicketNote.create_new(config, ticket, staff, "hello")
    assert note.ticket is ticket
    assert note.creator_name == "Jane Doe"
    note.create()

    method, controller, parameters, data, files = transport.calls[0]
    assert (method, controller) == ("POST", "/Tickets/TicketNote")
    assert data == {"ticketid": 42, "staffid": 7, "contents": "hello"}
    assert note.id == 11
    assert not note.is_new


def test_set_creator_variants(config: Config) -> None:
    """Test the creator union."""
    staff = Staff(config, data={"id": "7", "fullname": "Jane Doe"})
    note = TicketNote(config)

    note.set_creator(StaffRef(staff))
    assert note.creator_staff_id == 7

    note.set_creator(NameOnly("System"))
    assert note.creator_staff_id is None
    assert note.creator_name == "System"

    note.set_creator(Cleared())
    assert note.creator_staff_id is None

    with pytest.raises(TypeMismatch):
        note.set_creator(UserRef(User(config, data={"id": "3"})))


def test_name_only_creator_sends_full_name() -> None:
    """Test a note signed by name sends fullname instead of staffid."""
    note = TicketNote()
    note.ticket_id = 42
    note.contents = "hello"
    note.set_creator(NameOnly("System"))

    data = note.build_data(create=True)

    assert data["fullname"] == "System"
    assert "staffid" not in data


def test_note_color_is_validated() -> None:
    """Test note colors must be declared constants."""
    note = TicketNote()

    note.note_color = "3"
    assert note.note_color == TicketNote.COLOR_BLUE
    with pytest.raises(InvalidEnumValue):
        note.note_color = 9


def test_creator_staff_is_resolved_lazily(config: Config, transport: FakeTransport) -> None:
    """Test the creator staff user is fetched once."""
    note = TicketNote(config, data=note_node(5, "text"))
    transport.queue({"staff": {"id": "7", "fullname": "Jane Doe"}})

    assert note.creator_staff.full_name == "Jane Doe"
    assert note.creator_staff.id == 7
    assert transport.calls == [("GET", "/Base/Staff", [7])]
