"""Troubleshooter steps and their attachments."""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from kayako_client.codec import BOOL, INT, INT_LIST, POSITIVE_INT, TIMESTAMP, format_bytes, from_base64, to_base64
from kayako_client.exceptions import IllegalState, MissingRequiredField
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.objects.staff import Staff
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config


class TroubleshooterStep(ObjectBase):
    """Step of a troubleshooter, linked to its parent steps."""

    STATUS_PUBLISHED = 1
    STATUS_DRAFT = 2

    controller = "/Troubleshooter/Step"
    object_xml_name = "troubleshooterstep"

    id = Field("id", POSITIVE_INT)
    category_id = Field("categoryid", POSITIVE_INT, post=True, required_create=True)
    staff_id = Field("staffid", POSITIVE_INT, post=True, required_create=True)
    staff_name = Field("staffname")
    subject = Field("subject", post=True, required_create=True, required_update=True)
    contents = Field("contents", post=True, required_create=True, required_update=True)
    dateline = Field("dateline", TIMESTAMP)
    views = Field("views", INT, default=0)
    display_order = Field("displayorder", INT, post=True)
    allow_comments = Field("allowcomments", BOOL, post=True)
    has_attachments = Field("hasattachments", BOOL, default=False)
    status = Field("stepstatus", POSITIVE_INT, post="stepstatus", constant="STATUS")
    parent_step_ids = Field("parentstepidlist/parentstepid", INT_LIST, post="parentstepidlist", default=list)

    staff = Relation(Staff, "staff_id", sync={"staff_name": "full_name"})

    @classmethod
    def get_all(cls, config: "Config") -> ResultSet["TroubleshooterStep"]:
        """Return all troubleshooter steps."""
        return cls.generic_get_all(config)

    @classmethod
    def get(cls, config: "Config", step_id: int) -> "TroubleshooterStep":
        """Return a single troubleshooter step."""
        return cls.generic_get(config, [step_id])

    @classmethod
    def create_new(
        cls, config: "Config", category_id: int, subject: str, contents: str, staff: Staff
    ) -> "TroubleshooterStep":
        """Return a new, not yet created, troubleshooter step.

        Args:
            config: Client configuration
            category_id: Troubleshooter category of the step
            subject: Step subject
            contents: Step contents
            staff: Staff user authoring the step
        """
        step = cls(config)
        step.category_id = category_id
        step.subject = subject
        step.contents = contents
        step.staff = staff
        return step

    def get_attachments(self, reload: bool = False) -> ResultSet["TroubleshooterAttachment"]:
        """Return attachments of this step, fetched once."""
        return self._memoized("attachments", lambda: TroubleshooterAttachment.get_all(self.config, self), reload)

    @property
    def attachments(self) -> ResultSet["TroubleshooterAttachment"]:
        return self.get_attachments()

    def new_attachment(self, contents: bytes, file_name: str) -> "TroubleshooterAttachment":
        """Return a new, not yet created, attachment of this step."""
        return TroubleshooterAttachment.create_new(self.config, self, contents, file_name)

    def __str__(self) -> str:
        return f"{self.subject} (views: {self.views})"


class TroubleshooterAttachment(ObjectBase):
    """File attached to a troubleshooter step.

    Contents are transferred base64 encoded and fetched on first access when
    the attachment came from a listing.
    """

    controller = "/Troubleshooter/Attachment"
    object_xml_name = "troubleshooterattachment"
    identity_fields = ("troubleshooter_step_id", "id")

    id = Field("id", POSITIVE_INT)
    troubleshooter_step_id = Field("troubleshooterstepid", POSITIVE_INT, post=True, required_create=True)
    file_name = Field("filename", post=True, required_create=True)
    file_size = Field("filesize", INT)
    file_type = Field("filetype")
    dateline = Field("dateline", TIMESTAMP)

    troubleshooter_step = Relation(TroubleshooterStep, "troubleshooter_step_id")

    def __init__(self, config: "Config | None" = None, data: Any = None) -> None:
        self._contents: bytes | None = None
        super().__init__(config, data)

    @classmethod
    def get_all(cls, config: "Config", step: TroubleshooterStep | int) -> ResultSet["TroubleshooterAttachment"]:
        """Return attachments of a troubleshooter step."""
        step_id = step if isinstance(step, int) else step.id
        return cls.generic_get_all(config, ["ListAll", step_id])

    @classmethod
    def get(cls, config: "Config", step_id: int, attachment_id: int) -> "TroubleshooterAttachment":
        """Return a single attachment of a troubleshooter step."""
        return cls.generic_get(config, [step_id, attachment_id])

    @classmethod
    def create_new(
        cls, config: "Config", step: TroubleshooterStep, contents: bytes, file_name: str
    ) -> "TroubleshooterAttachment":
        """Return a new, not yet created, attachment.

        Args:
            config: Client configuration
            step: Step the file is attached to
            contents: Raw file contents
            file_name: Name shown for the file
        """
        attachment = cls(config)
        attachment.troubleshooter_step = step
        attachment.contents = contents
        attachment.file_name = file_name
        return attachment

    @classmethod
    def create_new_from_file(
        cls, config: "Config", step: TroubleshooterStep, file_path: str | Path, file_name: str | None = None
    ) -> "TroubleshooterAttachment":
        """Return a new attachment with contents read from ``file_path``."""
        attachment = cls(config)
        attachment.troubleshooter_step = step
        return attachment.set_contents_from_file(file_path, file_name)

    def parse_data(self, data: Any) -> None:
        super().parse_data(data)
        self._contents = from_base64(data.get("contents") if isinstance(data, dict) else None)

    def get_contents(self, auto_fetch: bool = True) -> bytes | None:
        """Return the file contents, fetching the attachment when they were not loaded."""
        if self._contents is None and auto_fetch and not self.is_new and self.troubleshooter_step_id and self.id:
            self._contents = self.get(self.config, self.troubleshooter_step_id, self.id).get_contents(False)
        return self._contents

    @property
    def contents(self) -> bytes | None:
        return self.get_contents()

    @contents.setter
    def contents(self, contents: bytes) -> None:
        self._contents = contents

    def set_contents_from_file(self, file_path: str | Path, file_name: str | None = None) -> "TroubleshooterAttachment":
        """Read contents from a file.

        Args:
            file_path: File to read
            file_name: Name shown for the file, the file's own name by default
        """
        path = Path(file_path)
        self._contents = path.read_bytes()
        self.file_name = file_name or path.name
        return self

    def get_file_size(self, formatted: bool = False) -> int | str | None:
        """Return the file size in bytes, human readable when ``formatted`` is set."""
        return format_bytes(self.file_size) if formatted else self.file_size

    def build_data(self, create: bool) -> dict[str, Any]:
        data = super().build_data(create)
        if not self._contents:
            raise MissingRequiredField("contents", create)
        data["contents"] = to_base64(self._contents)
        return data

    def update(self) -> "TroubleshooterAttachment":
        raise IllegalState("You can't update objects of type TroubleshooterAttachment.")

    def __str__(self) -> str:
        return f"{self.file_name} (filetype: {self.file_type}, filesize: {self.get_file_size(True)})"
