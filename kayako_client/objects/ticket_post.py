"""Ticket posts (replies) and their attachments."""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from kayako_client.codec import BOOL, INT, POSITIVE_INT, TIMESTAMP, format_bytes, from_base64, to_base64
from kayako_client.creators import Cleared, Creator, NameOnly, StaffRef, UserRef
from kayako_client.exceptions import IllegalState, MissingRequiredField, TypeMismatch
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.objects.staff import Staff
from kayako_client.objects.user import User
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config
    from kayako_client.objects.ticket import Ticket


class TicketPost(ObjectBase):
    """Message posted to a ticket by a staff user or a user."""

    CREATOR_STAFF = 1
    CREATOR_USER = 2
    CREATOR_CLIENT = 2
    CREATOR_THIRDPARTY = 3
    CREATOR_CC = 4
    CREATOR_BCC = 5

    controller = "/Tickets/TicketPost"
    object_xml_name = "post"
    identity_fields = ("ticket_id", "id")

    id = Field("id", POSITIVE_INT)
    ticket_id = Field("ticketid", POSITIVE_INT, post=True, required_create=True)
    dateline = Field("dateline", TIMESTAMP)
    user_id = Field("userid", POSITIVE_INT, post=True)
    full_name = Field("fullname")
    email = Field("email")
    email_to = Field("emailto")
    ip_address = Field("ipaddress")
    has_attachments = Field("hasattachments", BOOL, default=False)
    creator = Field("creator", INT)
    is_third_party = Field("isthirdparty", BOOL, default=False)
    is_html = Field("ishtml", BOOL, default=False)
    is_emailed = Field("isemailed", BOOL, default=False)
    staff_id = Field("staffid", POSITIVE_INT, post=True)
    is_survey_comment = Field("issurveycomment", BOOL, default=False)
    subject = Field("subject", post=True)
    contents = Field("contents", post=True, required_create=True)
    is_private = Field(None, BOOL, post="isprivate", default=False)

    ticket = Relation("Ticket", "ticket_id")
    user = Relation(User, "user_id", sync={"full_name": "full_name", "email": "email"})
    staff = Relation(Staff, "staff_id", sync={"full_name": "full_name", "email": "email"})

    @classmethod
    def get_all(cls, config: "Config", ticket: "Ticket | int") -> ResultSet["TicketPost"]:
        """Return posts of a ticket in server order."""
        ticket_id = ticket if isinstance(ticket, int) else ticket.id
        return cls.generic_get_all(config, ["ListAll", ticket_id])

    @classmethod
    def get(cls, config: "Config", ticket_id: int, post_id: int) -> "TicketPost":
        """Return a single post of a ticket."""
        return cls.generic_get(config, [ticket_id, post_id])

    @classmethod
    def create_new(cls, config: "Config", ticket: "Ticket", creator: Creator, contents: str) -> "TicketPost":
        """Return a new, not yet created, post on ``ticket``.

        Args:
            config: Client configuration
            ticket: Ticket to reply to, its subject becomes the post subject
            creator: Staff user or user writing the post
            contents: Post text
        """
        post = cls(config)
        post.ticket = ticket
        post.subject = ticket.subject
        post.set_creator(creator)
        post.contents = contents
        return post

    def set_creator(self, creator: Creator | Staff | User | None) -> "TicketPost":
        """Set the author of the post.

        Raises:
            TypeMismatch: For :class:`NameOnly`, posts need an existing author
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
        elif isinstance(creator, Cleared):
            self.staff = None
            self.user = None
            self._values["creator"] = None
        elif isinstance(creator, NameOnly):
            raise TypeMismatch("Ticket posts must be created by a staff user or a user")
        return self

    def build_data(self, create: bool) -> dict[str, Any]:
        data = super().build_data(create)
        if create and "staffid" not in data and "userid" not in data:
            raise MissingRequiredField("staffid/userid", create)
        if "staffid" in data:
            data.pop("userid", None)
        return data

    def update(self) -> "TicketPost":
        raise IllegalState("You can't update objects of type TicketPost.")

    def get_attachments(self, reload: bool = False) -> ResultSet["TicketAttachment"]:
        """Return attachments of this post."""

        def load() -> ResultSet[TicketAttachment]:
            attachments = TicketAttachment.get_all(self.config, self.ticket_id)
            return attachments.filter(ticket_post_id=self.id)

        return self._memoized("attachments", load, reload)

    def new_attachment(self, contents: bytes, file_name: str) -> "TicketAttachment":
        """Return a new, not yet created, attachment of this post."""
        return TicketAttachment.create_new(self.config, self, contents, file_name)

    def __str__(self) -> str:
        contents = (self.contents or "").replace("\n", " ")
        summary = contents[:50] + ("..." if len(contents) > 50 else "")
        return f"{summary} (author: {self.full_name})"


class TicketAttachment(ObjectBase):
    """File attached to a ticket post.

    Contents are transferred base64 encoded; listing attachments does not
    return contents, they are fetched on first access.
    """

    controller = "/Tickets/TicketAttachment"
    object_xml_name = "attachment"
    identity_fields = ("ticket_id", "id")

    id = Field("id", POSITIVE_INT)
    ticket_id = Field("ticketid", POSITIVE_INT, post=True, required_create=True)
    ticket_post_id = Field("ticketpostid", POSITIVE_INT, post=True, required_create=True)
    file_name = Field("filename", post=True, required_create=True)
    file_size = Field("filesize", INT)
    file_type = Field("filetype")
    dateline = Field("dateline", TIMESTAMP)

    ticket = Relation("Ticket", "ticket_id")
    ticket_post = Relation(
        TicketPost,
        "ticket_post_id",
        load=lambda attachment, target, post_id: target.get(attachment.config, attachment.ticket_id, post_id),
    )

    def __init__(self, config: "Config | None" = None, data: Any = None) -> None:
        self._contents: bytes | None = None
        super().__init__(config, data)

    @classmethod
    def get_all(cls, config: "Config", ticket: "Ticket | int") -> ResultSet["TicketAttachment"]:
        """Return attachments of all posts of a ticket.

        Args:
            config: Client configuration
            ticket: Ticket or its identifier
        """
        ticket_id = ticket if isinstance(ticket, int) else ticket.id
        return cls.generic_get_all(config, ["ListAll", ticket_id])

    @classmethod
    def get(cls, config: "Config", ticket_id: int, attachment_id: int) -> "TicketAttachment":
        """Return a single attachment of a ticket."""
        return cls.generic_get(config, [ticket_id, attachment_id])

    @classmethod
    def create_new(cls, config: "Config", ticket_post: TicketPost, contents: bytes, file_name: str) -> "TicketAttachment":
        """Return a new, not yet created, attachment of ``ticket_post``.

        Args:
            config: Client configuration
            ticket_post: Post the file is attached to
            contents: Raw file contents
            file_name: Name shown for the file
        """
        attachment = cls(config)
        attachment.ticket_id = ticket_post.ticket_id
        attachment.ticket_post = ticket_post
        attachment.contents = contents
        attachment.file_name = file_name
        return attachment

    @classmethod
    def create_new_from_file(
        cls, config: "Config", ticket_post: TicketPost, file_path: str | Path, file_name: str | None = None
    ) -> "TicketAttachment":
        """Return a new attachment with contents read from ``file_path``."""
        attachment = cls.create_new(config, ticket_post, b"", "")
        attachment.set_contents_from_file(file_path, file_name)
        return attachment

    def parse_data(self, data: Any) -> None:
        super().parse_data(data)
        self._contents = from_base64(data.get("contents") if isinstance(data, dict) else None)

    def get_contents(self, auto_fetch: bool = True) -> bytes | None:
        """Return the file contents, fetching the attachment when they were not loaded."""
        if self._contents is None and auto_fetch and not self.is_new and self.ticket_id and self.id:
            self._contents = self.get(self.config, self.ticket_id, self.id).get_contents(False)
        return self._contents

    @property
    def contents(self) -> bytes | None:
        return self.get_contents()

    @contents.setter
    def contents(self, contents: bytes) -> None:
        self._contents = contents

    def set_contents_from_file(self, file_path: str | Path, file_name: str | None = None) -> "TicketAttachment":
        """Read contents from a file, named after it unless ``file_name`` is given."""
        path = Path(file_path)
        self._contents = path.read_bytes()
        self.file_name = file_name or path.name
        return self

    def get_file_size(self, formatted: bool = False) -> int | str | None:
        """Return the file size.

        Args:
            formatted: Return a human readable size such as ``"1.5 KB"``
        """
        return format_bytes(self.file_size) if formatted else self.file_size

    def build_data(self, create: bool) -> dict[str, Any]:
        data = super().build_data(create)
        if not self._contents:
            raise MissingRequiredField("contents", create)
        data["contents"] = to_base64(self._contents)
        return data

    def update(self) -> "TicketAttachment":
        raise IllegalState("You can't update objects of type TicketAttachment.")

    def __str__(self) -> str:
        return f"{self.file_name} (filetype: {self.file_type}, filesize: {self.get_file_size(True)})"
