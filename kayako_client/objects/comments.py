"""Comments on news items, knowledgebase articles and troubleshooter steps."""

from typing import TYPE_CHECKING, Any, ClassVar

from kayako_client.codec import POSITIVE_INT, TIMESTAMP, to_object
from kayako_client.creators import Cleared, Creator, NameOnly, StaffRef, UserRef
from kayako_client.exceptions import MissingRequiredField
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.objects.staff import Staff
from kayako_client.objects.user import User
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config


def _is_staff_comment(comment: "CommentBase") -> bool:
    return comment.creator_type == CommentBase.CREATOR_TYPE_STAFF


def _is_user_comment(comment: "CommentBase") -> bool:
    return comment.creator_type == CommentBase.CREATOR_TYPE_USER


class CommentBase(ObjectBase):
    """Comment written by a staff user, a user or an anonymous visitor.

    Subclasses bind the comment to the item it belongs to through
    ``item_field`` (the name of the field holding the item identifier).
    """

    CREATOR_TYPE_STAFF = 1
    CREATOR_TYPE_USER = 2

    STATUS_PENDING = 1
    STATUS_APPROVED = 2
    STATUS_SPAM = 3

    item_field: ClassVar[str] = ""

    id = Field("id", POSITIVE_INT)
    creator_type = Field("creatortype", POSITIVE_INT, post=True, constant="CREATOR_TYPE")
    creator_id = Field("creatorid", POSITIVE_INT)
    creator_full_name = Field("fullname")
    creator_email = Field("email", post=True)
    ip_address = Field("ipaddress")
    dateline = Field("dateline", TIMESTAMP)
    parent_comment_id = Field("parentcommentid", POSITIVE_INT, post=True)
    status = Field("commentstatus", POSITIVE_INT)
    user_agent = Field("useragent")
    referrer = Field("referrer")
    parent_url = Field("parenturl")
    contents = Field("contents", post=True, required_create=True)

    creator_staff = Relation(Staff, "creator_id", when=_is_staff_comment)
    creator_user = Relation(User, "creator_id", when=_is_user_comment)
    parent_comment = Relation(
        "CommentBase",
        "parent_comment_id",
        load=lambda comment, target, comment_id: type(comment).get(comment.config, comment_id),
    )

    @classmethod
    def get(cls, config: "Config", comment_id: int) -> "CommentBase":
        """Return a single comment."""
        return cls.generic_get(config, [comment_id])

    @classmethod
    def get_all(cls, config: "Config", item: ObjectBase | int) -> ResultSet["CommentBase"]:
        """Return comments of a news item, article or step, in server order."""
        item_id = item if isinstance(item, int) else item.id
        return cls.generic_get_all(config, ["ListAll", item_id])

    @classmethod
    def create_new(
        cls, config: "Config", item: ObjectBase | int, creator: Creator | Staff | User | str, contents: str
    ) -> "CommentBase":
        """Return a new, not yet created, comment on ``item``."""
        comment = cls(config)
        setattr(comment, cls.item_field, item if isinstance(item, int) else item.id)
        comment.set_creator(creator)
        comment.contents = contents
        return comment

    @property
    def creator(self) -> Staff | User | None:
        """Author of the comment, resolved by the creator type."""
        return self.get_creator()

    def get_creator(self, reload: bool = False) -> Staff | User | None:
        """Return the staff user or user who wrote the comment, ``None`` for anonymous comments."""
        if _is_staff_comment(self):
            return self.get_related("creator_staff", reload)
        if _is_user_comment(self):
            return self.get_related("creator_user", reload)
        return None

    def set_creator(self, creator: Creator | Staff | User | str | None) -> "CommentBase":
        """Set the author of the comment.

        A plain string or :class:`NameOnly` makes an anonymous user comment
        known by the name only.
        """
        if isinstance(creator, Staff):
            creator = StaffRef(creator)
        elif isinstance(creator, User):
            creator = UserRef(creator)
        elif isinstance(creator, str) and creator:
            creator = NameOnly(creator)
        elif not isinstance(creator, (StaffRef, UserRef, NameOnly)):
            creator = Cleared()

        if isinstance(creator, StaffRef):
            self._values["creator_type"] = self.CREATOR_TYPE_STAFF
            self._values["creator_full_name"] = None
            self.creator_staff = creator.staff
        elif isinstance(creator, UserRef):
            self._values["creator_type"] = self.CREATOR_TYPE_USER
            self.creator_user = creator.user
        elif isinstance(creator, NameOnly):
            self.set_creator_full_name(creator.name)
        else:
            self._values["creator_type"] = None
            self._assign("creator_id", None)
        return self

    def set_creator_type(self, creator_type: int | str) -> "CommentBase":
        """Set whether a staff user or a user wrote the comment.

        Args:
            creator_type: ``CREATOR_TYPE_STAFF`` or ``CREATOR_TYPE_USER``

        Raises:
            InvalidEnumValue: For other creator types
        """
        self.creator_type = creator_type
        if self.creator_type == self.CREATOR_TYPE_STAFF:
            self._values["creator_full_name"] = None
        self.invalidate_related("creator_staff")
        self.invalidate_related("creator_user")
        return self

    def set_creator_id(self, creator_id: int | str | None) -> "CommentBase":
        """Set the author by identifier, interpreted according to the creator type."""
        self._assign("creator_id", POSITIVE_INT.decode(creator_id))
        self._values["creator_full_name"] = None
        return self

    def set_creator_full_name(self, full_name: str) -> "CommentBase":
        """Make this an anonymous user comment signed with ``full_name``."""
        self._values["creator_type"] = self.CREATOR_TYPE_USER
        self._assign("creator_id", None)
        self._values["creator_full_name"] = full_name
        return self

    def set_related(self, name: str, value: Any) -> None:
        if name == "parent_comment":
            to_object(value, type(self))
        super().set_related(name, value)

    def build_data(self, create: bool) -> dict[str, Any]:
        data = super().build_data(create)
        if self.creator_type == self.CREATOR_TYPE_STAFF:
            if self.creator_id is None:
                raise MissingRequiredField("creatorid", create)
            data["creatorid"] = self.creator_id
        elif self.creator_type == self.CREATOR_TYPE_USER:
            if self.creator_id is not None:
                data["creatorid"] = self.creator_id
            elif self.creator_full_name:
                data["fullname"] = self.creator_full_name
            else:
                raise MissingRequiredField("creatorid/fullname", create)
        return data

    def __str__(self) -> str:
        contents = (self.contents or "").replace("\n", " ")
        summary = contents[:20] + ("..." if len(contents) > 20 else "")
        return f"{summary} (author: {self.creator_full_name}, status: {self.status})"


class NewsComment(CommentBase):
    controller = "/News/Comment"
    object_xml_name = "newsitemcomment"
    item_field = "news_item_id"

    news_item_id = Field("newsitemid", POSITIVE_INT, post=True, required_create=True)


class KnowledgebaseComment(CommentBase):
    controller = "/Knowledgebase/Comment"
    object_xml_name = "kbarticlecomment"
    item_field = "kb_article_id"

    kb_article_id = Field("kbarticleid", POSITIVE_INT, post=True, required_create=True)


class TroubleshooterComment(CommentBase):
    controller = "/Troubleshooter/Comment"
    object_xml_name = "troubleshooterstepcomment"
    item_field = "troubleshooter_step_id"

    troubleshooter_step_id = Field("troubleshooterstepid", POSITIVE_INT, post=True, required_create=True)
