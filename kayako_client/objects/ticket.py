"""Tickets."""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import structlog

from kayako_client.codec import BOOL, INT, POSITIVE_INT, RAW, TIMESTAMP, encode, to_constant, to_int, to_list
from kayako_client.creators import Cleared, Creator, NameOnly, StaffRef, UserRef
from kayako_client.custom_fields import CustomFieldGroupBase, HasCustomFields
from kayako_client.exceptions import MissingRequiredField
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase, wire_value
from kayako_client.objects.department import Department
from kayako_client.objects.staff import Staff
from kayako_client.objects.ticket_note import TicketNote
from kayako_client.objects.ticket_post import TicketAttachment, TicketPost
from kayako_client.objects.ticket_properties import TicketPriority, TicketStatus, TicketType
from kayako_client.objects.ticket_time_track import TicketTimeTrack
from kayako_client.objects.user import User, UserOrganization
from kayako_client.result_set import ResultSet
from kayako_client.statistics import get_ticket_statistics

if TYPE_CHECKING:
    from kayako_client.config import Config

logger = structlog.get_logger()

SEARCH_CONTROLLER = "/Tickets/TicketSearch"
DEFAULT_PAGE_SIZE = 1000


class TicketCustomFieldGroup(CustomFieldGroupBase):
    """Custom field group of a ticket."""

    group_type = CustomFieldGroupBase.TYPE_TICKET
    controller = "/Tickets/TicketCustomField"


def _collect_ids(value: Any) -> list[Any]:
    """Flatten an object, result set, identifier or iterable of them to identifiers."""
    if value is None:
        return []
    if isinstance(value, ObjectBase):
        return [value.id]
    if isinstance(value, ResultSet):
        return value.collect_ids()
    if isinstance(value, (int, str)):
        return [value]
    return [item.id if isinstance(item, ObjectBase) else item for item in value]


def _join_ids(ids: list[Any]) -> str:
    return ",".join(str(item) for item in ids) if ids else "-1"


class Ticket(HasCustomFields, ObjectBase):
    """Kayako ticket."""

    FLAG_NONE = 0
    FLAG_PURPLE = 1
    FLAG_ORANGE = 2
    FLAG_GREEN = 3
    FLAG_YELLOW = 4
    FLAG_RED = 5
    FLAG_BLUE = 6

    CREATOR_AUTO = 0
    CREATOR_STAFF = 1
    CREATOR_USER = 2
    CREATOR_CLIENT = 2

    CREATION_MODE_SUPPORTCENTER = 1
    CREATION_MODE_STAFFCP = 2
    CREATION_MODE_EMAIL = 3
    CREATION_MODE_API = 4
    CREATION_MODE_SITEBADGE = 5

    CREATION_TYPE_DEFAULT = "default"
    CREATION_TYPE_PHONE = "phone"

    SEARCH_TICKET_ID = "ticketid"
    SEARCH_CONTENTS = "contents"
    SEARCH_AUTHOR = "author"
    SEARCH_EMAIL = "email"
    SEARCH_CREATOR_EMAIL = "creatoremail"
    SEARCH_FULL_NAME = "fullname"
    SEARCH_NOTES = "notes"
    SEARCH_USER_GROUP = "usergroup"
    SEARCH_USER_ORGANIZATION = "userorganization"
    SEARCH_USER = "user"
    SEARCH_TAGS = "tags"

    controller = "/Tickets/Ticket"
    object_xml_name = "ticket"
    custom_field_group_class = TicketCustomFieldGroup

    id = Field("@id", POSITIVE_INT)
    flag_type = Field("@flagtype", INT, default=FLAG_NONE)
    display_id = Field("displayid")
    department_id = Field("departmentid", POSITIVE_INT, post=True, required_create=True)
    status_id = Field("statusid", POSITIVE_INT, post="ticketstatusid", required_create=True)
    priority_id = Field("priorityid", POSITIVE_INT, post="ticketpriorityid", required_create=True)
    type_id = Field("typeid", POSITIVE_INT, post="tickettypeid", required_create=True)
    user_id = Field("userid", POSITIVE_INT, post=True)
    user_organization_name = Field("userorganization")
    user_organization_id = Field("userorganizationid", POSITIVE_INT)
    owner_staff_id = Field("ownerstaffid", POSITIVE_INT, post=True)
    owner_staff_name = Field("ownerstaffname")
    full_name = Field("fullname", post=True, required_create=True)
    email = Field("email", post=True, required_create=True)
    last_replier = Field("lastreplier")
    subject = Field("subject", post=True, required_create=True)
    creation_time = Field("creationtime", TIMESTAMP)
    last_activity = Field("lastactivity", TIMESTAMP)
    last_staff_reply = Field("laststaffreply", TIMESTAMP)
    last_user_reply = Field("lastuserreply", TIMESTAMP)
    sla_plan_id = Field("slaplanid", POSITIVE_INT)
    next_reply_due = Field("nextreplydue", TIMESTAMP)
    resolution_due = Field("resolutiondue", TIMESTAMP)
    replies = Field("replies", INT, default=0)
    ip_address = Field("ipaddress")
    creator = Field("creator", INT)
    creation_mode = Field("creationmode", INT)
    creation_type = Field("creationtype", post="type", constant="CREATION_TYPE", default=CREATION_TYPE_DEFAULT)
    is_escalated = Field("isescalated", BOOL, default=False)
    escalation_rule_id = Field("escalationruleid", POSITIVE_INT)
    template_group_id = Field("templategroupid", POSITIVE_INT, post="templategroup")
    template_group_name = Field("templategroupname", post="templategroup")
    tags = Field("tags")
    watchers = Field(None, RAW, default=list)
    workflows = Field(None, RAW, default=list)
    staff_id = Field(None, POSITIVE_INT, post="staffid")
    contents = Field(None, post="contents", required_create=True)
    ignore_auto_responder = Field(None, BOOL, post="ignoreautoresponder", default=False)

    department = Relation(Department, "department_id")
    status = Relation(TicketStatus, "status_id")
    priority = Relation(TicketPriority, "priority_id")
    ticket_type = Relation(TicketType, "type_id")
    user = Relation(User, "user_id", sync={"full_name": "full_name", "email": "email"})
    user_organization = Relation(UserOrganization, "user_organization_id")
    owner_staff = Relation(Staff, "owner_staff_id", sync={"owner_staff_name": "full_name"})
    staff = Relation(Staff, "staff_id", sync={"full_name": "full_name", "email": "email"})

    # -- finders --------------------------------------------------------------

    @classmethod
    def get(cls, config: "Config", ticket_id: int | str) -> "Ticket":
        """Fetch a ticket by its identifier or display identifier (``ABC-123-45678``)."""
        return cls.generic_get(config, [ticket_id])

    @classmethod
    def get_all(
        cls,
        config: "Config",
        departments: Any,
        statuses: Any = None,
        owner_staffs: Any = None,
        users: Any = None,
        max_items: int | None = None,
        starting_ticket_id: int | None = None,
    ) -> ResultSet["Ticket"]:
        """Fetch tickets matching the filters.

        Every filter accepts an object, a result set, an identifier or an
        iterable of those.

        Args:
            config: Client configuration
            departments: Departments to search in, at least one is required
            statuses: Ticket statuses to filter on, all when empty
            owner_staffs: Owner staff users to filter on, all when empty
            users: Users to filter on, all when empty
            max_items: Maximum number of tickets to return
            starting_ticket_id: Identifier of the first ticket of the page

        Returns:
            Tickets in server order

        Raises:
            ValueError: If no department is given
        """
        department_ids = _collect_ids(departments)
        if not department_ids:
            raise ValueError("You must provide at least one department to search for tickets.")

        parameters: list[Any] = [
            "ListAll",
            _join_ids(department_ids),
            _join_ids(_collect_ids(statuses)),
            _join_ids(_collect_ids(owner_staffs)),
            _join_ids(_collect_ids(users)),
        ]
        if starting_ticket_id is not None and starting_ticket_id > 0:
            parameters.extend([max_items if max_items and max_items > 0 else DEFAULT_PAGE_SIZE, starting_ticket_id])
        elif max_items is not None and max_items > 0:
            parameters.append(max_items)
        return cls.generic_get_all(config, parameters)

    @classmethod
    def search(cls, config: "Config", query: str, areas: Iterable[str]) -> ResultSet["Ticket"]:
        """Search tickets.

        Args:
            config: Client configuration
            query: Text to search for
            areas: Where to search, ``SEARCH_*`` constants

        Raises:
            InvalidEnumValue: If an area is not a ``SEARCH_*`` constant
        """
        data: dict[str, Any] = {"query": query}
        for area in areas:
            data[to_constant(area, cls, "SEARCH")] = 1
        logger.debug("Searching tickets", query=query, areas=list(data)[1:])
        result = config.transport.post(SEARCH_CONTROLLER, [], data)
        return ResultSet(cls(config, data=node) for node in cls._nodes(result))

    @classmethod
    def get_statistics(cls, config: "Config", reload: bool = False) -> dict[str, Any]:
        """Return ticket counts per department, status and owner, cached on ``config``."""
        return get_ticket_statistics(config, reload)

    # -- factories ------------------------------------------------------------

    @classmethod
    def _create_new_generic(cls, config: "Config", department: Department, contents: str, subject: str) -> "Ticket":
        defaults = config.ticket_defaults
        ticket = cls(config)
        ticket.status_id = defaults.status_id
        ticket.priority_id = defaults.priority_id
        ticket.type_id = defaults.type_id
        ticket.department = department
        ticket.subject = subject
        ticket.contents = contents
        return ticket

    @classmethod
    def create_new(
        cls, config: "Config", department: Department, creator: Creator | Staff | User, contents: str, subject: str
    ) -> "Ticket":
        """Return a new, not yet created, ticket using the configured ticket defaults."""
        ticket = cls._create_new_generic(config, department, contents, subject)
        ticket.set_creator(creator)
        return ticket

    @classmethod
    def create_new_auto(
        cls, config: "Config", department: Department, full_name: str, email: str, contents: str, subject: str
    ) -> "Ticket":
        """Return a new ticket whose user is looked up or created by e-mail."""
        ticket = cls._create_new_generic(config, department, contents, subject)
        ticket.set_creator_auto(full_name, email)
        return ticket

    def new_post(self, creator: Creator | Staff | User, contents: str) -> TicketPost:
        """Return a new, not yet created, post on this ticket."""
        return TicketPost.create_new(self.config, self, creator, contents)

    def new_note(self, creator: Creator | Staff, contents: str) -> TicketNote:
        """Return a new, not yet created, note on this ticket."""
        return TicketNote.create_new(self.config, self, creator, contents)

    def new_time_track(
        self, contents: str, staff: Staff, time_worked: int | str, time_billable: int | str
    ) -> TicketTimeTrack:
        """Return a new, not yet created, time track of this ticket.

        Args:
            contents: Description of the work
            staff: Staff user who did the work
            time_worked: Seconds or ``"HH:MM"``
            time_billable: Seconds or ``"HH:MM"``
        """
        return TicketTimeTrack.create_new(self.config, self, contents, staff, time_worked, time_billable)

    # -- creator --------------------------------------------------------------

    def set_creator(self, creator: Creator | Staff | User | None) -> "Ticket":
        """Set who the ticket is created by.

        A staff user or a user fills in the ticket's name and e-mail. A bare
        name switches to automatic user creation with the current e-mail.
        """
        if isinstance(creator, Staff):
            creator = StaffRef(creator)
        elif isinstance(creator, User):
            creator = UserRef(creator)
        elif creator is None:
            creator = Cleared()

        if isinstance(creator, StaffRef):
            self.user = None
            self.staff = creator.staff
            self._values["creator"] = self.CREATOR_STAFF
        elif isinstance(creator, UserRef):
            self.staff = None
            self.user = creator.user
            self._values["creator"] = self.CREATOR_USER
        elif isinstance(creator, NameOnly):
            self.set_creator_auto(creator.name, self.email)
        elif isinstance(creator, Cleared):
            self.staff = None
            self.user = None
            self._values["creator"] = None
        return self

    def set_creator_id(self, creator_id: int, creator_type: int) -> "Ticket":
        """Set the creator by identifier, fetching it to fill in name and e-mail.

        Args:
            creator_id: Staff or user identifier
            creator_type: ``CREATOR_STAFF`` or ``CREATOR_USER``
        """
        creator_type = to_constant(creator_type, self, "CREATOR")
        if creator_type == self.CREATOR_STAFF:
            return self.set_creator(StaffRef(Staff.get(self.config, creator_id)))
        if creator_type == self.CREATOR_USER:
            return self.set_creator(UserRef(User.get(self.config, creator_id)))
        return self

    def set_creator_auto(self, full_name: str, email: str | None) -> "Ticket":
        """Let the server look up or create the user with ``email`` when the ticket is created."""
        self.staff = None
        self.user = None
        self.full_name = full_name
        self.email = email
        self._values["creator"] = self.CREATOR_AUTO
        return self

    def set_template_group(self, template_group: int | str) -> "Ticket":
        """Set the template group by identifier or by name."""
        if to_int(template_group) is not None:
            self.template_group_id = template_group
            self._values["template_group_name"] = None
        else:
            self.template_group_name = template_group
            self._values["template_group_id"] = None
        return self

    # -- wire mapping ---------------------------------------------------------

    def parse_data(self, data: Any) -> None:
        super().parse_data(data)
        if self.template_group_id is None:
            self._values["template_group_name"] = None

        self._values["watchers"] = [
            {"staff_id": to_int(wire_value(node, "@staffid")), "name": wire_value(node, "@name")}
            for node in to_list(wire_value(data, "watcher"))
        ]
        self._values["workflows"] = [
            {"id": to_int(wire_value(node, "@id")), "title": wire_value(node, "@title")}
            for node in to_list(wire_value(data, "workflow"))
        ]

        notes: list[TicketNote] = []
        time_tracks: list[TicketTimeTrack] = []
        for node in to_list(wire_value(data, "note")):
            if wire_value(node, "@type") == "timetrack" or wire_value(node, "@timeworked") is not None:
                time_track = TicketTimeTrack(self._config, data=node)
                time_track._values["ticket_id"] = time_track.ticket_id or self.id
                time_tracks.append(time_track)
            else:
                note = TicketNote(self._config, data=node)
                if note.type == TicketNote.TYPE_TICKET and note.ticket_id is None:
                    note._values["ticket_id"] = self.id
                notes.append(note)
        if notes:
            self._related["notes"] = ResultSet(notes)
        if time_tracks:
            self._related["time_tracks"] = ResultSet(time_tracks)

        posts = wire_value(data, "posts")
        if posts is not None:
            # tickets imported from other systems may come without posts
            self._related["posts"] = ResultSet(
                TicketPost(self._config, data=node) for node in to_list(wire_value(posts, "post"))
            )

    def build_data(self, create: bool) -> dict[str, Any]:
        """Build request data.

        On create the creator decides the identity fields sent: ``staffid``
        for staff, ``userid`` for users, ``autouserid`` when the ticket user
        is created automatically (see ``TicketDefaults.auto_create_user``).

        Raises:
            MissingRequiredField: If a required field or the creator is missing
        """
        self.check_required_fields(create)

        data: dict[str, Any] = {
            "subject": self.subject,
            "fullname": self.full_name,
            "email": self.email,
            "departmentid": self.department_id,
            "ticketstatusid": self.status_id,
            "ticketpriorityid": self.priority_id,
            "tickettypeid": self.type_id,
        }
        if self.owner_staff_id:
            data["ownerstaffid"] = self.owner_staff_id
        data["templategroup"] = (
            self.template_group_id if self.template_group_id is not None else self.template_group_name
        )

        if create:
            if self.creator == self.CREATOR_STAFF:
                data["staffid"] = self.staff_id
            elif self.creator == self.CREATOR_USER:
                data["userid"] = self.user_id
            elif self.creator == self.CREATOR_AUTO and self.config.ticket_defaults.auto_create_user:
                data["autouserid"] = 1
            else:
                raise MissingRequiredField("staffid/userid", create)
            data["contents"] = self.contents
            data["type"] = self.creation_type
            data["ignoreautoresponder"] = encode(bool(self.ignore_auto_responder))
        else:
            data["userid"] = self.user_id

        return {key: value for key, value in data.items() if value is not None}

    # -- collections ----------------------------------------------------------

    def get_notes(self, reload: bool = False) -> ResultSet[TicketNote]:
        """Return notes of this ticket, fetched once."""
        return self._memoized("notes", lambda: TicketNote.get_all(self.config, self.id), reload)

    def get_time_tracks(self, reload: bool = False) -> ResultSet[TicketTimeTrack]:
        """Return time tracks of this ticket, fetched once."""
        return self._memoized("time_tracks", lambda: TicketTimeTrack.get_all(self.config, self.id), reload)

    def get_posts(self, reload: bool = False) -> ResultSet[TicketPost]:
        """Return posts of this ticket.

        Args:
            reload: Fetch the posts again instead of using the cached ones
        """
        return self._memoized("posts", lambda: TicketPost.get_all(self.config, self.id), reload)

    def get_first_post(self) -> TicketPost | None:
        """Return the post that opened the ticket."""
        return self.get_posts().first()

    def get_attachments(self, reload: bool = False) -> ResultSet[TicketAttachment]:
        """Return attachments of all posts of this ticket."""
        return self._memoized("attachments", lambda: TicketAttachment.get_all(self.config, self.id), reload)

    @property
    def notes(self) -> ResultSet[TicketNote]:
        return self.get_notes()

    @property
    def time_tracks(self) -> ResultSet[TicketTimeTrack]:
        return self.get_time_tracks()

    @property
    def posts(self) -> ResultSet[TicketPost]:
        return self.get_posts()

    @property
    def attachments(self) -> ResultSet[TicketAttachment]:
        return self.get_attachments()

    def __str__(self) -> str:
        return f"{self.display_id} {self.subject} (creator: {self.full_name})"
