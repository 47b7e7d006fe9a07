"""Staff users and staff groups."""

from typing import TYPE_CHECKING

from kayako_client.codec import BOOL, POSITIVE_INT
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config


class StaffGroup(ObjectBase):
    """Group of staff users sharing permissions."""

    controller = "/Base/StaffGroup"
    object_xml_name = "staffgroup"

    id = Field("id", POSITIVE_INT)
    title = Field("title", post=True, required_create=True)
    is_admin = Field("isadmin", BOOL, post=True, default=False)

    @classmethod
    def get_all(cls, config: "Config") -> ResultSet["StaffGroup"]:
        """Return all staff groups."""
        return cls.generic_get_all(config)

    @classmethod
    def get(cls, config: "Config", staff_group_id: int) -> "StaffGroup":
        """Return a single staff group."""
        return cls.generic_get(config, [staff_group_id])

    @classmethod
    def create_new(cls, config: "Config", title: str, is_admin: bool = False) -> "StaffGroup":
        """Return a new, not yet created, staff group."""
        staff_group = cls(config)
        staff_group.title = title
        staff_group.is_admin = is_admin
        return staff_group

    def new_staff(self, first_name: str, last_name: str, user_name: str, email: str, password: str) -> "Staff":
        """Return a new, not yet created, staff user in this group."""
        return Staff.create_new(self.config, first_name, last_name, user_name, email, self, password)

    def __str__(self) -> str:
        return f"{self.title} (isadmin: {'yes' if self.is_admin else 'no'})"


class Staff(ObjectBase):
    """Staff user (agent)."""

    controller = "/Base/Staff"
    object_xml_name = "staff"

    id = Field("id", POSITIVE_INT)
    staff_group_id = Field("staffgroupid", POSITIVE_INT, post=True, required_create=True, required_update=True)
    first_name = Field("firstname", post=True, required_create=True, required_update=True)
    last_name = Field("lastname", post=True, required_create=True, required_update=True)
    full_name = Field("fullname")
    user_name = Field("username", post=True, required_create=True, required_update=True)
    email = Field("email", post=True, required_create=True, required_update=True)
    designation = Field("designation", post=True)
    greeting = Field("greeting", post=True)
    mobile_number = Field("mobilenumber", post=True)
    is_enabled = Field("isenabled", BOOL, post=True, default=True)
    timezone = Field("timezone", post=True)
    enable_dst = Field("enabledst", BOOL, post=True, default=False)
    signature = Field("signature", post=True)
    password = Field(None, post="password", required_create=True)

    staff_group = Relation(StaffGroup, "staff_group_id")

    @classmethod
    def get_all(cls, config: "Config") -> ResultSet["Staff"]:
        """Return all staff users."""
        return cls.generic_get_all(config)

    @classmethod
    def get(cls, config: "Config", staff_id: int) -> "Staff":
        """Return a single staff user."""
        return cls.generic_get(config, [staff_id])

    @classmethod
    def create_new(
        cls,
        config: "Config",
        first_name: str,
        last_name: str,
        user_name: str,
        email: str,
        staff_group: StaffGroup,
        password: str,
    ) -> "Staff":
        """Return a new, not yet created, staff user.

        Args:
            config: Client configuration
            first_name: First name
            last_name: Last name
            user_name: Login name
            email: E-mail address
            staff_group: Group the staff user belongs to
            password: Login password, only sent on create
        """
        staff = cls(config)
        staff.first_name = first_name
        staff.last_name = last_name
        staff.user_name = user_name
        staff.email = email
        staff.staff_group = staff_group
        staff.password = password
        return staff

    def __str__(self) -> str:
        return f"{self.full_name or self.user_name} ({self.email})"
