"""Notes attached to tickets, users and user organizations."""

from typing import TYPE_CHECKING, Any

from kayako_client.codec import INT, POSITIVE_INT, TIMESTAMP
from kayako_client.creators import Cleared, Creator, NameOnly, StaffRef, UserRef
from kayako_client.exceptions import IllegalState, MissingRequiredField, TypeMismatch
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.objects.staff import Staff
from kayako_client.objects.user import User, UserOrganization
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config
    from kayako_client.objects.ticket import Ticket

TYPE_TICKET = "ticket"
TYPE_USER = "user"
TYPE_USER_ORGANIZATION = "userorganization"

_NOTE_IDENTITIES = {
    TYPE_TICKET: ("ticket_id", "id"),
    TYPE_USER: ("user_id", "id"),
    TYPE_USER_ORGANIZATION: ("user_organization_id", "id"),
}


def note_identity_fields(note_type: str | None) -> tuple[str, ...]:
    """Return the fields addressing a note of the given type.

    Ticket notes live under their ticket, user notes under their user and
    organization notes under their organization. Unknown types are
    addressed like ticket notes.

    Args:
        note_type: One of the ``TYPE_*`` values

    Returns:
        Field names, parent identifier first
    """
    return _NOTE_IDENTITIES.get(note_type or TYPE_TICKET, _NOTE_IDENTITIES[TYPE_TICKET])


def _is_type(note_type: str):
    return lambda note: note.type == note_type


class TicketNote(ObjectBase):
    """Staff note.

    Notes are listed per ticket, but the server also reports notes attached
    to the ticket's user or organization. Only ticket notes can be created
    and deleted through this endpoint; notes are never updated.
    """

    COLOR_YELLOW = 1
    COLOR_PURPLE = 2
    COLOR_BLUE = 3
    COLOR_GREEN = 4
    COLOR_RED = 5

    TYPE_TICKET = TYPE_TICKET
    TYPE_USER = TYPE_USER
    TYPE_USER_ORGANIZATION = TYPE_USER_ORGANIZATION

    controller = "/Tickets/TicketNote"
    object_xml_name = "note"

    id = Field("@id", POSITIVE_INT)
    type = Field("@type", default=TYPE_TICKET)
    ticket_id = Field("@ticketid", POSITIVE_INT, post="ticketid", required_create=True)
    user_id = Field("@userid", POSITIVE_INT)
    user_organization_id = Field("@userorganizationid", POSITIVE_INT)
    note_color = Field("@notecolor", INT, post="notecolor", constant="COLOR")
    creator_staff_id = Field("@creatorstaffid", POSITIVE_INT, post="staffid")
    creator_name = Field("@creatorstaffname", post="fullname")
    for_staff_id = Field("@forstaffid", POSITIVE_INT, post="forstaffid")
    creation_date = Field("@creationdate", TIMESTAMP)
    contents = Field("#text", post="contents", required_create=True)

    ticket = Relation("Ticket", "ticket_id", when=_is_type(TYPE_TICKET))
    user = Relation(User, "user_id", when=_is_type(TYPE_USER))
    user_organization = Relation(UserOrganization, "user_organization_id", when=_is_type(TYPE_USER_ORGANIZATION))
    creator_staff = Relation(Staff, "creator_staff_id", sync={"creator_name": "full_name"})
    for_staff = Relation(Staff, "for_staff_id")

    @classmethod
    def get_all(cls, config: "Config", ticket: "Ticket | int") -> ResultSet["TicketNote"]:
        """Fetch all notes of a ticket.

        Args:
            config: Client configuration
            ticket: Ticket or its identifier
        """
        ticket_id = ticket if isinstance(ticket, int) else ticket.id
        return cls.generic_get_all(config, ["ListAll", ticket_id])

    @classmethod
    def get(cls, config: "Config", ticket_id: int, note_id: int) -> "TicketNote":
        """Return a single note of a ticket."""
        return cls.generic_get(config, [ticket_id, note_id])

    @classmethod
    def create_new(cls, config: "Config", ticket: "Ticket", creator: Staff | Creator, contents: str) -> "TicketNote":
        """Return a new, not yet created, note of a ticket."""
        note = cls(config)
        note.ticket = ticket
        note.set_creator(creator)
        note.contents = contents
        return note

    def identity_fields_for(self) -> tuple[str, ...]:
        return note_identity_fields(self.type)

    def parse_data(self, data: Any) -> None:
        super().parse_data(data)
        for note_type, (parent_field, _) in _NOTE_IDENTITIES.items():
            if note_type != self.type:
                self._values[parent_field] = None

    def set_related(self, name: str, value: Any) -> None:
        super().set_related(name, value)
        if name == "ticket":
            self._values["type"] = TYPE_TICKET if value is not None else None

    def set_creator(self, creator: Staff | Creator | None) -> "TicketNote":
        """Set the staff user the note is written by.

        Args:
            creator: Staff user, :class:`StaffRef`, :class:`NameOnly` for a
                free-form name, or :class:`Cleared` / None to clear the creator

        Raises:
            TypeMismatch: For a :class:`UserRef`, users can't write notes
        """
        if isinstance(creator, Staff):
            creator = StaffRef(creator)
        if creator is None:
            creator = Cleared()

        if isinstance(creator, StaffRef):
            self.creator_staff = creator.staff
        elif isinstance(creator, NameOnly):
            self.creator_staff = None
            self._values["creator_name"] = creator.name
        elif isinstance(creator, Cleared):
            self.creator_staff = None
        elif isinstance(creator, UserRef):
            raise TypeMismatch("Ticket notes can only be created by staff users")
        return self

    def set_creator_staff_id(self, staff_id: int | None) -> "TicketNote":
        """Set the author by staff identifier, clearing the cached author name."""
        self._assign("creator_staff_id", POSITIVE_INT.decode(staff_id))
        self._values["creator_name"] = None
        return self

    def build_data(self, create: bool) -> dict[str, Any]:
        data = super().build_data(create)
        if "staffid" in data:
            data.pop("fullname", None)
        elif "fullname" not in data:
            raise MissingRequiredField("staffid/fullname", create)
        return data

    def create(self) -> "TicketNote":
        if self.type != TYPE_TICKET:
            raise IllegalState('You can create only note of type "ticket".')
        return super().create()

    def update(self) -> "TicketNote":
        raise IllegalState("You can't update objects of type TicketNote.")

    def delete(self) -> None:
        if self.type != TYPE_TICKET:
            raise IllegalState('You can delete only note of type "ticket".')
        super().delete()

    def __str__(self) -> str:
        contents = self.contents or ""
        summary = contents[:50] + ("..." if len(contents) > 50 else "")
        return f"{summary} (type: {self.type})"
