"""Creator of a ticket, post, note or comment.

Objects that may be created by a staff user, a user or just a name accept
one of these variants in their ``set_creator`` method.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from kayako_client.objects.staff import Staff
    from kayako_client.objects.user import User


@dataclass(frozen=True)
class StaffRef:
    staff: "Staff"


@dataclass(frozen=True)
class UserRef:
    user: "User"


@dataclass(frozen=True)
class NameOnly:
    """Creator known only by name, e.g. system messages and alerts."""

    name: str


@dataclass(frozen=True)
class Cleared:
    pass


Creator = Union[StaffRef, UserRef, NameOnly, Cleared]
