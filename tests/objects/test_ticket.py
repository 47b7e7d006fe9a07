"""Tests for tickets."""

import pytest

from kayako_client.config import Config
from kayako_client.creators import NameOnly, StaffRef, UserRef
from kayako_client.exceptions import IllegalState, InvalidEnumValue, MissingRequiredField, TransportError
from kayako_client.objects.department import Department
from kayako_client.objects.staff import Staff
from kayako_client.objects.ticket import Ticket
from kayako_client.objects.ticket_note import TicketNote
from kayako_client.objects.ticket_time_track import TicketTimeTrack
from kayako_client.objects.user import User
from tests.conftest import FakeTransport


def ticket_node(**extra: object) -> dict:
    node = {
        "@id": "42",
        "@flagtype": "0",
        "displayid": "ABC-123-45678",
        "departmentid": "1",
        "statusid": "2",
        "priorityid": "3",
        "typeid": "4",
        "userid": "9",
        "fullname": "John Smith",
        "email": "john@example.com",
        "subject": "Printer on fire",
        "creationtime": "1700000000",
        "lastactivity": "1700000100",
        "creator": "2",
        "templategroupid": "1",
        "templategroupname": "Default",
    }
    node.update(extra)
    return node


@pytest.fixture
def department(config: Config) -> Department:
    """Create a persisted department."""
    return Department(config, data={"id": "1", "title": "Support", "type": "public", "module": "tickets"})


@pytest.fixture
def staff(config: Config) -> Staff:
    """Create a persisted staff user."""
    return Staff(config, data={"id": "7", "fullname": "Jane Doe", "email": "jane@example.com"})


@pytest.fixture
def user(config: Config) -> User:
    """Create a persisted user."""
    return User(config, data={"id": "9", "fullname": "John Smith", "email": ["john@example.com", "js@example.com"]})


def test_parse_ticket(config: Config) -> None:
    """Test parsing ticket fields."""
    ticket = Ticket(config, data=ticket_node())

    assert ticket.id == 42
    assert ticket.display_id == "ABC-123-45678"
    assert ticket.department_id == 1
    assert ticket.status_id == 2
    assert ticket.creator == Ticket.CREATOR_USER
    assert ticket.template_group_id == 1
    assert ticket.watchers == []
    assert str(ticket) == "ABC-123-45678 Printer on fire (creator: John Smith)"


def test_get_all_builds_filter_parameters(config: Config, transport: FakeTransport, department: Department) -> None:
    """Test empty filters are sent as -1."""
    transport.queue({"ticket": [ticket_node(), ticket_node(**{"@id": "43"})]})

    tickets = Ticket.get_all(config, department, statuses=[2, 3])

    assert tickets.collect_ids() == [42, 43]
    assert transport.calls == [("GET", "/Tickets/Ticket", ["ListAll", "1", "2,3", "-1", "-1"])]


def test_get_all_paging(config: Config, transport: FakeTransport) -> None:
    """Test a start id without page size requests 1000 tickets."""
    Ticket.get_all(config, [1, 2], starting_ticket_id=500)
    Ticket.get_all(config, 1, max_items=10, starting_ticket_id=500)

    assert transport.calls[0][2] == ["ListAll", "1,2", "-1", "-1", "-1", 1000, 500]
    assert transport.calls[1][2] == ["ListAll", "1", "-1", "-1", "-1", 10, 500]


def test_get_all_requires_department(config: Config, transport: FakeTransport) -> None:
    """Test at least one department is needed."""
    with pytest.raises(ValueError):
        Ticket.get_all(config, [])
    assert transport.calls == []


def test_search(config: Config, transport: FakeTransport) -> None:
    """Test search posts the query and areas."""
    transport.queue({"ticket": ticket_node()})

    found = Ticket.search(config, "printer", [Ticket.SEARCH_CONTENTS, "notes"])

    assert found.collect_ids() == [42]
    assert transport.calls[0][:2] == ("POST", "/Tickets/TicketSearch")
    assert transport.calls[0][3] == {"query": "printer", "contents": 1, "notes": 1}
    with pytest.raises(InvalidEnumValue):
        Ticket.search(config, "printer", ["everywhere"])


def test_create_by_staff(config: Config, transport: FakeTransport, department: Department, staff: Staff) -> None:
    """Test a staff-created ticket sends staffid and the ticket defaults."""
    config.ticket_defaults.status_id = 2
    config.ticket_defaults.priority_id = 3
    config.ticket_defaults.type_id = 4
    transport.queue({"ticket": ticket_node(creator="1")})

    ticket = Ticket.create_new(config, department, staff, "It is on fire", "Printer on fire")
    assert ticket.full_name == "Jane Doe"
    assert ticket.email == "jane@example.com"
    ticket.create()

    data = transport.calls[0][3]
    assert data["staffid"] == 7
    assert "userid" not in data
    assert data["departmentid"] == 1
    assert data["ticketstatusid"] == 2
    assert data["ticketpriorityid"] == 3
    assert data["tickettypeid"] == 4
    assert data["contents"] == "It is on fire"
    assert data["type"] == Ticket.CREATION_TYPE_DEFAULT
    assert data["ignoreautoresponder"] == 0
    assert ticket.id == 42


def test_create_by_user(config: Config, department: Department, user: User) -> None:
    """Test a user-created ticket sends userid and the user's first e-mail."""
    config.ticket_defaults.status_id = 2
    config.ticket_defaults.priority_id = 3
    config.ticket_defaults.type_id = 4

    ticket = Ticket.create_new(config, department, UserRef(user), "Help", "Subject")
    data = ticket.build_data(create=True)

    assert data["userid"] == 9
    assert data["email"] == "john@example.com"
    assert "staffid" not in data


def test_create_auto_user(config: Config, department: Department) -> None:
    """Test automatic user creation by e-mail."""
    config.ticket_defaults.status_id = 2
    config.ticket_defaults.priority_id = 3
    config.ticket_defaults.type_id = 4

    ticket = Ticket.create_new_auto(config, department, "Ann Lee", "ann@example.com", "Help", "Subject")
    data = ticket.build_data(create=True)

    assert data["autouserid"] == 1
    assert data["fullname"] == "Ann Lee"
    assert ticket.creator == Ticket.CREATOR_AUTO


def test_create_auto_user_disabled(config: Config, department: Department) -> None:
    """Test a ticket without a creator is rejected when users are not created automatically."""
    config.ticket_defaults.status_id = 2
    config.ticket_defaults.priority_id = 3
    config.ticket_defaults.type_id = 4
    config.ticket_defaults.auto_create_user = False

    ticket = Ticket.create_new(config, department, NameOnly("Ann Lee"), "Help", "Subject")
    ticket.email = "ann@example.com"

    with pytest.raises(MissingRequiredField) as excinfo:
        ticket.build_data(create=True)
    assert excinfo.value.field == "staffid/userid"


def test_create_without_defaults(config: Config, transport: FakeTransport, department: Department, staff: Staff) -> None:
    """Test missing status fails before any request."""
    ticket = Ticket.create_new(config, department, staff, "Help", "Subject")

    with pytest.raises(MissingRequiredField) as excinfo:
        ticket.create()

    assert excinfo.value.field == "ticketstatusid"
    assert transport.calls == []


def test_switching_creator(config: Config, staff: Staff, user: User) -> None:
    """Test switching creator clears the previous one."""
    ticket = Ticket(config)

    ticket.set_creator(StaffRef(staff))
    ticket.set_creator(user)

    assert ticket.staff_id is None
    assert ticket.user_id == 9
    assert ticket.full_name == "John Smith"
    assert ticket.creator == Ticket.CREATOR_USER


def test_set_creator_id_fetches_creator(config: Config, transport: FakeTransport) -> None:
    """Test creators given by identifier are fetched."""
    transport.queue({"staff": {"id": "7", "fullname": "Jane Doe", "email": "jane@example.com"}})
    ticket = Ticket(config)

    ticket.set_creator_id(7, Ticket.CREATOR_STAFF)

    assert ticket.staff_id == 7
    assert ticket.email == "jane@example.com"
    assert transport.calls == [("GET", "/Base/Staff", [7])]


def test_update_sends_userid(config: Config, transport: FakeTransport) -> None:
    """Test update data."""
    ticket = Ticket(config, data=ticket_node())
    transport.queue({"ticket": ticket_node(subject="Printer fixed")})

    ticket.subject = "Printer fixed"
    ticket.update()

    method, controller, parameters, data = transport.calls[0]
    assert (method, controller, parameters) == ("PUT", "/Tickets/Ticket", [42])
    assert data["subject"] == "Printer fixed"
    assert data["userid"] == 9
    assert data["templategroup"] == 1
    assert "contents" not in data


def test_template_group_by_name_or_id(config: Config) -> None:
    """Test template groups given by name or identifier."""
    ticket = Ticket(config)

    ticket.set_template_group("Support")
    assert ticket.template_group_name == "Support"
    assert ticket.template_group_id is None

    ticket.set_template_group("3")
    assert ticket.template_group_id == 3
    assert ticket.template_group_name is None


def test_embedded_notes_and_posts(config: Config, transport: FakeTransport) -> None:
    """Test notes, time tracks and posts embedded in the ticket need no extra request."""
    node = ticket_node(
        note=[
            {"@type": "ticket", "@id": "1", "#text": "note"},
            {"@type": "timetrack", "@id": "2", "@timeworked": "60", "@timebillable": "30", "#text": "work"},
        ],
        posts={"post": {"id": "5", "ticketid": "42", "contents": "hello", "fullname": "John Smith"}},
        watcher={"@staffid": "7", "@name": "Jane Doe"},
    )
    ticket = Ticket(config, data=node)

    notes = ticket.notes
    time_tracks = ticket.time_tracks

    assert isinstance(notes[0], TicketNote)
    assert notes[0].ticket_id == 42
    assert isinstance(time_tracks[0], TicketTimeTrack)
    assert time_tracks[0].ticket_id == 42
    assert time_tracks[0].get_time_worked(formatted=True) == "00:01:00"
    assert ticket.get_first_post().contents == "hello"
    assert ticket.watchers == [{"staff_id": 7, "name": "Jane Doe"}]
    assert transport.calls == []


def test_collections_are_fetched_lazily(config: Config, transport: FakeTransport) -> None:
    """Test collections not embedded in the ticket are fetched once."""
    ticket = Ticket(config, data=ticket_node())
    transport.queue({"note": {"@type": "ticket", "@id": "1", "@ticketid": "42", "#text": "note"}})

    assert len(ticket.notes) == 1
    assert len(ticket.notes) == 1
    assert transport.calls == [("GET", "/Tickets/TicketNote", ["ListAll", 42])]


def test_collections_of_new_ticket(config: Config) -> None:
    """Test collections need a created ticket."""
    with pytest.raises(IllegalState):
        Ticket(config).get_notes()
    with pytest.raises(IllegalState):
        Ticket(config).get_custom_fields()


def test_lazy_relations(config: Config, transport: FakeTransport) -> None:
    """Test the department is fetched once by its identifier."""
    ticket = Ticket(config, data=ticket_node())
    transport.queue({"department": {"id": "1", "title": "Support", "type": "public", "module": "tickets"}})

    assert ticket.department.title == "Support"
    assert ticket.department.title == "Support"
    assert ticket.owner_staff is None
    assert transport.calls == [("GET", "/Base/Department", [1])]


def test_new_note_and_time_track(config: Config, staff: Staff) -> None:
    """Test factories of ticket sub-objects."""
    ticket = Ticket(config, data=ticket_node())

    note = ticket.new_note(staff, "note")
    time_track = ticket.new_time_track("work", staff, "01:00", 1800)

    assert note.ticket_id == 42
    assert note.creator_staff_id == 7
    assert time_track.ticket_id == 42
    assert time_track.time_worked == 3600
    assert time_track.time_billable == 1800


CUSTOM_FIELDS = {
    "group": {
        "@id": "1",
        "@title": "Details",
        "field": [
            {"@id": "10", "@type": "1", "@name": "serial", "@title": "Serial number", "#text": "SN-1"},
            {"@id": "11", "@type": "2", "@name": "notes", "@title": "Notes", "#text": "Fragile"},
        ],
    }
}

DEFINITIONS = {
    "customfield": [
        {"@customfieldid": "10", "@fieldname": "serial", "@fieldtype": "1", "@usereditable": "1", "@isrequired": "1"},
        {"@customfieldid": "11", "@fieldname": "notes", "@fieldtype": "2", "@usereditable": "0"},
    ]
}


def test_custom_field_values(config: Config, transport: FakeTransport) -> None:
    """Test custom field values are read from the ticket's groups."""
    ticket = Ticket(config, data=ticket_node())
    transport.queue(CUSTOM_FIELDS)

    assert ticket.get_custom_field_value("serial") == "SN-1"
    assert ticket.get_custom_field_value("missing") is None
    assert [field.name for field in ticket.get_custom_fields()] == ["serial", "notes"]
    assert transport.calls == [("GET", "/Tickets/TicketCustomField", [42])]


def test_update_sends_custom_fields(config: Config, transport: FakeTransport) -> None:
    """Test update posts loaded custom field values and reloads them."""
    ticket = Ticket(config, data=ticket_node())
    transport.queue(CUSTOM_FIELDS, DEFINITIONS, {"ticket": ticket_node()}, {}, CUSTOM_FIELDS)

    ticket.set_custom_field_value("serial", "SN-2")
    ticket.update()

    posts = transport.calls_to("POST")
    assert posts == [("POST", "/Tickets/TicketCustomField", [42], {"serial": "SN-2", "notes": "Fragile"}, {})]
    assert ticket.get_custom_field_value("serial") == "SN-1"


def test_failed_update_keeps_custom_fields(config: Config, transport: FakeTransport) -> None:
    """Test loaded custom field values survive a failed update."""
    ticket = Ticket(config, data=ticket_node())
    transport.queue(CUSTOM_FIELDS, DEFINITIONS)
    ticket.set_custom_field_value("serial", "SN-2")
    ticket.subject = "Printer still on fire"
    transport.error = TransportError("PUT /Tickets/Ticket failed", status_code=500)

    with pytest.raises(TransportError):
        ticket.update()

    transport.error = None
    assert not ticket.is_new
    assert ticket.subject == "Printer still on fire"
    assert ticket.get_custom_field_value("serial") == "SN-2"
    assert transport.calls_to("POST") == []
    assert len(transport.calls_to("GET")) == 2
