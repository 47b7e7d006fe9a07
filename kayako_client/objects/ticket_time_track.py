"""Time tracking entries of tickets."""

import time
from datetime import datetime
from typing import TYPE_CHECKING

from kayako_client.codec import DURATION, INT, POSITIVE_INT, TIMESTAMP, format_seconds
from kayako_client.exceptions import IllegalState
from kayako_client.fields import Field, Relation
from kayako_client.object_base import ObjectBase
from kayako_client.objects.staff import Staff
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config
    from kayako_client.objects.ticket import Ticket


class TicketTimeTrack(ObjectBase):
    """Work time logged on a ticket.

    Durations are stored in seconds and may be assigned as a number of
    seconds or as an ``"HH:MM"`` string. Time tracks can't be updated.
    """

    COLOR_YELLOW = 1
    COLOR_PURPLE = 2
    COLOR_BLUE = 3
    COLOR_GREEN = 4
    COLOR_RED = 5

    controller = "/Tickets/TicketTimeTrack"
    object_xml_name = "timetrack"
    identity_fields = ("ticket_id", "id")

    id = Field("@id", POSITIVE_INT)
    ticket_id = Field("@ticketid", POSITIVE_INT, post="ticketid", required_create=True)
    time_worked = Field("@timeworked", DURATION, post="timespent", required_create=True)
    time_billable = Field("@timebillable", DURATION, post="timebillable", required_create=True)
    bill_date = Field("@billdate", TIMESTAMP, post="billtimeline", required_create=True)
    work_date = Field("@workdate", TIMESTAMP, post="worktimeline", required_create=True)
    worker_staff_id = Field("@workerstaffid", POSITIVE_INT, post="workerstaffid")
    worker_staff_name = Field("@workerstaffname")
    creator_staff_id = Field("@creatorstaffid", POSITIVE_INT, post="staffid", required_create=True)
    creator_staff_name = Field("@creatorstaffname")
    note_color = Field("@notecolor", INT, post="notecolor", constant="COLOR")
    contents = Field("#text", post="contents", required_create=True)

    ticket = Relation("Ticket", "ticket_id")
    worker_staff = Relation(Staff, "worker_staff_id", sync={"worker_staff_name": "full_name"})
    creator_staff = Relation(Staff, "creator_staff_id", sync={"creator_staff_name": "full_name"})

    @classmethod
    def get_all(cls, config: "Config", ticket: "Ticket | int") -> ResultSet["TicketTimeTrack"]:
        """Return time tracks of a ticket.

        Args:
            config: Client configuration
            ticket: Ticket or its identifier

        Returns:
            Time tracks in server order
        """
        ticket_id = ticket if isinstance(ticket, int) else ticket.id
        return cls.generic_get_all(config, ["ListAll", ticket_id])

    @classmethod
    def get(cls, config: "Config", ticket_id: int, time_track_id: int) -> "TicketTimeTrack":
        """Return a single time track of a ticket."""
        return cls.generic_get(config, [ticket_id, time_track_id])

    @classmethod
    def create_new(
        cls,
        config: "Config",
        ticket: "Ticket",
        contents: str,
        staff: Staff,
        time_worked: int | str,
        time_billable: int | str,
    ) -> "TicketTimeTrack":
        """Return a new, not yet created, time track worked and billed now.

        Args:
            config: Client configuration
            ticket: Ticket the time was spent on
            contents: Description of the work
            staff: Staff user who did the work and logs it
            time_worked: Seconds or ``"HH:MM"``
            time_billable: Seconds or ``"HH:MM"``
        """
        time_track = cls(config)
        time_track.ticket = ticket
        time_track.contents = contents
        time_track.creator_staff = staff
        time_track.worker_staff = staff
        time_track.set_billing_data(time_billable)
        time_track.set_worked_data(time_worked)
        return time_track

    def set_worked_data(self, time_worked: int | str, work_date: int | str | datetime | None = None) -> "TicketTimeTrack":
        """Set worked time and when it was worked, now by default."""
        self.time_worked = time_worked
        self.work_date = work_date if work_date is not None else int(time.time())
        return self

    def set_billing_data(
        self, time_billable: int | str, bill_date: int | str | datetime | None = None
    ) -> "TicketTimeTrack":
        """Set billable time and its billing date, now by default."""
        self.time_billable = time_billable
        self.bill_date = bill_date if bill_date is not None else int(time.time())
        return self

    def get_time_worked(self, formatted: bool = False) -> int | str | None:
        """Return worked time in seconds.

        Args:
            formatted: Return ``HH:MM:SS`` instead of seconds
        """
        return format_seconds(self.time_worked) if formatted else self.time_worked

    def get_time_billable(self, formatted: bool = False) -> int | str | None:
        """Return billable time, as ``HH:MM:SS`` when ``formatted`` is set."""
        return format_seconds(self.time_billable) if formatted else self.time_billable

    def update(self) -> "TicketTimeTrack":
        raise IllegalState("You can't update objects of type TicketTimeTrack.")

    def __str__(self) -> str:
        contents = self.contents or ""
        summary = contents[:50] + ("..." if len(contents) > 50 else "")
        return f"{summary} (worker: {self.worker_staff_name})"
