"""Ticket and live chat departments."""

from typing import TYPE_CHECKING

from kayako_client.codec import BOOL, INT, INT_LIST, POSITIVE_INT
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config


class Department(ObjectBase):
    """Kayako department."""

    TYPE_PUBLIC = "public"
    TYPE_PRIVATE = "private"

    MODULE_TICKETS = "tickets"
    MODULE_LIVECHAT = "livechat"

    controller = "/Base/Department"
    object_xml_name = "department"

    id = Field("id", POSITIVE_INT)
    title = Field("title", post=True, required_create=True, required_update=True)
    type = Field("type", post=True, required_create=True, required_update=True, constant="TYPE")
    module = Field("module", post=True, required_create=True, constant="MODULE")
    display_order = Field("displayorder", INT, post=True, default=0)
    parent_department_id = Field("parentdepartmentid", POSITIVE_INT, post=True)
    user_visibility_custom = Field("uservisibilitycustom", BOOL, post=True, default=False)
    user_group_ids = Field("usergroups/id", INT_LIST, post="usergroupid", default=list)

    parent_department = Relation("Department", "parent_department_id")

    @classmethod
    def get_all(cls, config: "Config") -> ResultSet["Department"]:
        """Return all departments."""
        return cls.generic_get_all(config)

    @classmethod
    def get(cls, config: "Config", department_id: int) -> "Department":
        """Return a single department."""
        return cls.generic_get(config, [department_id])

    @classmethod
    def create_new(
        cls, config: "Config", title: str, type: str = TYPE_PUBLIC, module: str = MODULE_TICKETS
    ) -> "Department":
        """Return a new, not yet created, department.

        Args:
            config: Client configuration
            title: Department title
            type: ``TYPE_PUBLIC`` or ``TYPE_PRIVATE``
            module: ``MODULE_TICKETS`` or ``MODULE_LIVECHAT``
        """
        department = cls(config)
        department.title = title
        department.type = type
        department.module = module
        return department

    def build_data(self, create: bool) -> dict:
        data = super().build_data(create)
        if not create:
            # module can't be changed once the department exists
            data.pop("module", None)
        if not self.user_visibility_custom:
            data.pop("usergroupid", None)
        return data

    def is_visible_to_user_group(self, user_group: "ObjectBase | int") -> bool:
        """Check whether users of a group can see this department.

        Args:
            user_group: User group or its identifier

        Returns:
            True for public departments without custom visibility or listing the group
        """
        if self.type != self.TYPE_PUBLIC:
            return False
        if not self.user_visibility_custom:
            return True
        user_group_id = user_group.id if isinstance(user_group, ObjectBase) else int(user_group)
        return user_group_id in self.user_group_ids

    def new_subdepartment(self, title: str) -> "Department":
        """Return a new department below this one, with the same type and module."""
        department = Department.create_new(self.config, title, self.type, self.module)
        department.parent_department = self
        return department

    def __str__(self) -> str:
        return f"{self.title} (module: {self.module}, type: {self.type})"

