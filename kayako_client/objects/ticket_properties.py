"""Read-only ticket statuses, types and priorities."""

from typing import TYPE_CHECKING

from kayako_client.codec import BOOL, INT, INT_LIST, POSITIVE_INT
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.objects.department import Department
from kayako_client.objects.user import UserGroup
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config


class TicketProperty(ObjectBase):
    """Common parts of statuses, types and priorities.

    These are configured in the admin panel and can only be read through
    the API. Public ones may be restricted to a list of user groups.
    """

    TYPE_PUBLIC = "public"
    TYPE_PRIVATE = "private"

    read_only = True

    id = Field("id", POSITIVE_INT)
    title = Field("title")
    display_order = Field("displayorder", INT, default=0)
    display_icon = Field("displayicon")
    type = Field("type")
    user_visibility_custom = Field("uservisibilitycustom", BOOL, default=False)
    user_group_ids = Field("usergroupid", INT_LIST, default=list)

    @classmethod
    def get_all(cls, config: "Config") -> ResultSet:
        """Return all objects of this type."""
        return cls.generic_get_all(config)

    @classmethod
    def get(cls, config: "Config", object_id: int):
        """Return a single object of this type."""
        return cls.generic_get(config, [object_id])

    def parse_data(self, data) -> None:
        super().parse_data(data)
        if not self.user_visibility_custom:
            self._values["user_group_ids"] = []

    def get_user_groups(self, reload: bool = False) -> ResultSet[UserGroup]:
        """Return user groups this object is visible to, fetching them once."""
        return self._memoized(
            "user_groups",
            lambda: ResultSet(UserGroup.get(self.config, user_group_id) for user_group_id in self.user_group_ids),
            reload,
        )

    @property
    def user_groups(self) -> ResultSet[UserGroup]:
        return self.get_user_groups()

    def is_visible_to_user_group(self, user_group: UserGroup | int) -> bool:
        """Check whether users of a group can see this object.

        Args:
            user_group: User group or its identifier

        Returns:
            False for private objects, True for public objects without custom
            visibility, otherwise whether the group is listed
        """
        if self.type != self.TYPE_PUBLIC:
            return False
        if not self.user_visibility_custom:
            return True
        user_group_id = user_group.id if isinstance(user_group, UserGroup) else int(user_group)
        return user_group_id in self.user_group_ids

    def __str__(self) -> str:
        return f"{self.title} (type: {self.type})"


class TicketStatus(TicketProperty):
    controller = "/Tickets/TicketStatus"
    object_xml_name = "ticketstatus"

    department_id = Field("departmentid", POSITIVE_INT)
    display_in_main_list = Field("displayinmainlist", BOOL, default=False)
    mark_as_resolved = Field("markasresolved", BOOL, default=False)
    display_count = Field("displaycount", BOOL, default=False)
    status_color = Field("statuscolor")
    status_bg_color = Field("statusbgcolor")
    reset_due_time = Field("resetduetime", BOOL, default=False)
    trigger_survey = Field("triggersurvey", BOOL, default=False)
    staff_visibility_custom = Field("staffvisibilitycustom", BOOL, default=False)

    department = Relation(Department, "department_id")


class TicketType(TicketProperty):
    controller = "/Tickets/TicketType"
    object_xml_name = "tickettype"

    department_id = Field("departmentid", POSITIVE_INT)

    department = Relation(Department, "department_id")


class TicketPriority(TicketProperty):
    controller = "/Tickets/TicketPriority"
    object_xml_name = "ticketpriority"

    foreground_color = Field("frcolorcode")
    background_color = Field("bgcolorcode")
