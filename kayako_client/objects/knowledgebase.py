"""Knowledgebase categories."""

from typing import TYPE_CHECKING, Any

from kayako_client.codec import BOOL, INT, INT_LIST, POSITIVE_INT
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.objects.staff import Staff
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config

DEFAULT_PAGE_SIZE = 1000


class KnowledgebaseCategory(ObjectBase):
    """Category grouping knowledgebase articles.

    User and staff group visibility lists are only sent when the matching
    ``*_visibility_custom`` flag is set; clearing the flag empties the list.
    """

    CATEGORY_TYPE_GLOBAL = "1"
    CATEGORY_TYPE_PUBLIC = "2"
    CATEGORY_TYPE_PRIVATE = "3"
    CATEGORY_TYPE_INHERIT = "4"

    controller = "/Knowledgebase/Category"
    object_xml_name = "kbcategory"

    id = Field("id", POSITIVE_INT)
    title = Field("title", post=True, required_create=True, required_update=True)
    category_type = Field(
        "categorytype", post=True, required_create=True, required_update=True, constant="CATEGORY_TYPE"
    )
    parent_category_id = Field("parentkbcategoryid", POSITIVE_INT, post=True)
    display_order = Field("displayorder", INT, post=True)
    article_sort_order = Field("articlesortorder", INT, post=True)
    allow_comments = Field("allowcomments", BOOL, post=True)
    allow_rating = Field("allowrating", BOOL, post=True)
    is_published = Field("ispublished", BOOL, post=True)
    user_visibility_custom = Field("uservisibilitycustom", BOOL, post=True, default=False)
    user_group_ids = Field("usergroupidlist/usergroupid", INT_LIST, post="usergroupidlist", default=list)
    staff_visibility_custom = Field("staffvisibilitycustom", BOOL, post=True, default=False)
    staff_group_ids = Field("staffgroupidlist/staffgroupid", INT_LIST, post="staffgroupidlist", default=list)
    staff_id = Field("staffid", POSITIVE_INT, post=True)

    parent_category = Relation("KnowledgebaseCategory", "parent_category_id")
    staff = Relation(Staff, "staff_id")

    @classmethod
    def get_all(
        cls, config: "Config", max_items: int | None = None, starting_id: int | None = None
    ) -> ResultSet["KnowledgebaseCategory"]:
        """Return categories, optionally one page of them.

        Args:
            config: Client configuration
            max_items: Page size
            starting_id: First category identifier of the page; without
                ``max_items`` a page of 1000 categories is requested
        """
        parameters: list[Any] = ["ListAll"]
        if starting_id is not None and starting_id > 0:
            parameters.extend([max_items if max_items and max_items > 0 else DEFAULT_PAGE_SIZE, starting_id])
        elif max_items is not None and max_items > 0:
            parameters.append(max_items)
        return cls.generic_get_all(config, parameters)

    @classmethod
    def get(cls, config: "Config", category_id: int) -> "KnowledgebaseCategory":
        """Return a single category."""
        return cls.generic_get(config, [category_id])

    @classmethod
    def create_new(cls, config: "Config", title: str, category_type: str) -> "KnowledgebaseCategory":
        """Return a new, not yet created, category.

        Args:
            config: Client configuration
            title: Category title
            category_type: One of the ``CATEGORY_TYPE_*`` constants
        """
        category = cls(config)
        category.title = title
        category.category_type = category_type
        return category

    def parse_data(self, data: Any) -> None:
        super().parse_data(data)
        if not self.user_visibility_custom:
            self._values["user_group_ids"] = []
        if not self.staff_visibility_custom:
            self._values["staff_group_ids"] = []

    def set_user_visibility_custom(self, custom: bool) -> "KnowledgebaseCategory":
        """Restrict the category to selected user groups.

        Args:
            custom: When false, the category is visible to every user group and the selected groups are cleared
        """
        self.user_visibility_custom = custom
        if not self.user_visibility_custom:
            self.user_group_ids = []
        return self

    def set_staff_visibility_custom(self, custom: bool) -> "KnowledgebaseCategory":
        """Restrict the category to selected staff groups, clearing them when ``custom`` is false."""
        self.staff_visibility_custom = custom
        if not self.staff_visibility_custom:
            self.staff_group_ids = []
        return self

    def build_data(self, create: bool) -> dict[str, Any]:
        data = super().build_data(create)
        if not self.user_visibility_custom:
            data.pop("usergroupidlist", None)
        if not self.staff_visibility_custom:
            data.pop("staffgroupidlist", None)
        return data

    def __str__(self) -> str:
        return f"{self.title} (category type: {self.category_type})"
