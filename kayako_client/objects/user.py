"""End users, user groups and user organizations."""

from typing import TYPE_CHECKING

from kayako_client.codec import BOOL, POSITIVE_INT, STRING_LIST, TIMESTAMP
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config


class UserGroup(ObjectBase):
    """Group of end users."""

    TYPE_REGISTERED = "registered"
    TYPE_GUEST = "guest"

    controller = "/Base/UserGroup"
    object_xml_name = "usergroup"

    id = Field("id", POSITIVE_INT)
    title = Field("title", post=True, required_create=True, required_update=True)
    type = Field("grouptype", post=True, required_create=True, constant="TYPE", default=TYPE_REGISTERED)
    is_master = Field("ismaster", BOOL, default=False)

    @classmethod
    def get_all(cls, config: "Config") -> ResultSet["UserGroup"]:
        """Return all user groups."""
        return cls.generic_get_all(config)

    @classmethod
    def get(cls, config: "Config", user_group_id: int) -> "UserGroup":
        """Return a single user group."""
        return cls.generic_get(config, [user_group_id])

    @classmethod
    def create_new(cls, config: "Config", title: str, type: str = TYPE_REGISTERED) -> "UserGroup":
        """Return a new, not yet created, user group of one of the ``TYPE_*`` types."""
        user_group = cls(config)
        user_group.title = title
        user_group.type = type
        return user_group

    def build_data(self, create: bool) -> dict:
        data = super().build_data(create)
        if not create:
            data.pop("grouptype", None)
        return data

    def __str__(self) -> str:
        return f"{self.title} (type: {self.type})"


class UserOrganization(ObjectBase):
    """Organization end users belong to."""

    TYPE_RESTRICTED = "restricted"
    TYPE_SHARED = "shared"

    controller = "/Base/UserOrganization"
    object_xml_name = "userorganization"

    id = Field("id", POSITIVE_INT)
    name = Field("name", post=True, required_create=True, required_update=True)
    type = Field(
        "organizationtype", post=True, required_create=True, required_update=True, constant="TYPE"
    )
    address = Field("address", post=True)
    city = Field("city", post=True)
    state = Field("state", post=True)
    postal_code = Field("postalcode", post=True)
    country = Field("country", post=True)
    phone = Field("phone", post=True)
    fax = Field("fax", post=True)
    website = Field("website", post=True)
    dateline = Field("dateline", TIMESTAMP)
    last_update = Field("lastupdate", TIMESTAMP)
    sla_plan_id = Field("slaplanid", POSITIVE_INT, post=True)
    sla_plan_expiry = Field("slaplanexpiry", TIMESTAMP, post=True)

    @classmethod
    def get_all(cls, config: "Config") -> ResultSet["UserOrganization"]:
        """Return all user organizations."""
        return cls.generic_get_all(config)

    @classmethod
    def get(cls, config: "Config", user_organization_id: int) -> "UserOrganization":
        """Return a single user organization."""
        return cls.generic_get(config, [user_organization_id])

    @classmethod
    def create_new(cls, config: "Config", name: str, type: str = TYPE_RESTRICTED) -> "UserOrganization":
        """Return a new, not yet created, user organization."""
        organization = cls(config)
        organization.name = name
        organization.type = type
        return organization

    def __str__(self) -> str:
        return f"{self.name} (type: {self.type})"


class User(ObjectBase):
    """End user (customer)."""

    ROLE_USER = "user"
    ROLE_MANAGER = "manager"

    SALUTATION_MR = "Mr."
    SALUTATION_MS = "Ms."
    SALUTATION_MRS = "Mrs."
    SALUTATION_DR = "Dr."

    controller = "/Base/User"
    object_xml_name = "user"

    id = Field("id", POSITIVE_INT)
    user_group_id = Field("usergroupid", POSITIVE_INT, post=True, required_create=True, required_update=True)
    user_role = Field("userrole", post=True, constant="ROLE", default=ROLE_USER)
    user_organization_id = Field("userorganizationid", POSITIVE_INT, post=True)
    salutation = Field("salutation", post=True)
    user_expiry = Field("userexpiry", TIMESTAMP, post=True)
    full_name = Field("fullname", post=True, required_create=True, required_update=True)
    emails = Field("email", STRING_LIST, post="email", required_create=True, default=list)
    designation = Field("designation", post=True)
    phone = Field("phone", post=True)
    dateline = Field("dateline", TIMESTAMP)
    last_visit = Field("lastvisit", TIMESTAMP)
    is_enabled = Field("isenabled", BOOL, post=True, default=True)
    timezone = Field("timezone", post=True)
    enable_dst = Field("enabledst", BOOL, post=True, default=False)
    sla_plan_id = Field("slaplanid", POSITIVE_INT, post=True)
    sla_plan_expiry = Field("slaplanexpiry", TIMESTAMP, post=True)
    password = Field(None, post="password", required_create=True)
    send_welcome_email = Field(None, BOOL, post="sendwelcomeemail", default=True)

    user_group = Relation(UserGroup, "user_group_id")
    user_organization = Relation(UserOrganization, "user_organization_id")

    @classmethod
    def get_all(
        cls, config: "Config", max_items: int | None = None, starting_user_id: int | None = None
    ) -> ResultSet["User"]:
        """Fetch users, optionally one page of them.

        Args:
            config: Client configuration
            max_items: Page size
            starting_user_id: Identifier of the first user of the page
        """
        if max_items is None and starting_user_id is None:
            return cls.generic_get_all(config)
        parameters = ["Filter", starting_user_id or 1]
        if max_items is not None:
            parameters.append(max_items)
        return cls.generic_get_all(config, parameters)

    @classmethod
    def get(cls, config: "Config", user_id: int) -> "User":
        """Return a single user."""
        return cls.generic_get(config, [user_id])

    @classmethod
    def create_new(
        cls, config: "Config", full_name: str, email: str, user_group: UserGroup, password: str
    ) -> "User":
        """Return a new, not yet created, user.

        Args:
            config: Client configuration
            full_name: Full name of the user
            email: Primary e-mail address
            user_group: Group the user belongs to
            password: Login password, only sent on create
        """
        user = cls(config)
        user.full_name = full_name
        user.emails = [email]
        user.user_group = user_group
        user.password = password
        return user

    @property
    def email(self) -> str | None:
        """Primary e-mail address."""
        return self.emails[0] if self.emails else None

    def build_data(self, create: bool) -> dict:
        data = super().build_data(create)
        if not create:
            data.pop("password", None)
            data.pop("sendwelcomeemail", None)
        return data

    def __str__(self) -> str:
        return f"{self.full_name} ({self.email})"
