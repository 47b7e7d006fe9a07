"""CLI for the Kayako client."""

from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from kayako_client.config import Config, get_settings
from kayako_client.config_commands import config_app
from kayako_client.objects import KnowledgebaseCategory, Staff, Ticket, TicketNote, TicketPriority, TicketTimeTrack

logger = structlog.get_logger()

app = App(
    help="Kayako client - browse and update a Kayako helpdesk over its REST API",
)

app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_config() -> Config:
    """Build the client configuration from the settings files."""
    return Config.from_settings(get_settings())


@app.command
def ticket(ticket_id: str) -> None:
    """Show a ticket by its identifier or display identifier."""
    config = get_config()
    found = Ticket.get(config, ticket_id)

    print(f"Ticket: {found.display_id} (#{found.id})")
    print(f"Subject: {found.subject}")
    print(f"Creator: {found.full_name} <{found.email}>")
    print(f"Department: {found.department_id}")
    print(f"Status: {found.status_id}")
    print(f"Priority: {found.priority_id}")
    if found.owner_staff_name:
        print(f"Owner: {found.owner_staff_name}")
    print(f"Created: {found.format_datetime('creation_time')}")
    print(f"Last activity: {found.format_datetime('last_activity')}")


@app.command
def tickets(
    *department_ids: int,
    status_id: int | None = None,
    owner_staff_id: int | None = None,
    limit: int | None = None,
) -> None:
    """List tickets of one or more departments."""
    config = get_config()
    found = Ticket.get_all(config, list(department_ids), status_id, owner_staff_id, max_items=limit)

    print(f"Found {len(found)} ticket(s):\n")
    for item in found:
        print(f"{item.display_id}: {item.subject} [status: {item.status_id}, priority: {item.priority_id}]")


@app.command
def notes(ticket_id: int) -> None:
    """List notes of a ticket."""
    config = get_config()
    found = TicketNote.get_all(config, ticket_id)

    print(f"Found {len(found)} note(s):\n")
    for note in found:
        print(f"#{note.id} {note.format_datetime('creation_date')} {note.creator_name}: {note.contents}")


@app.command(name="add-note")
def add_note(ticket_id: int, contents: str, staff_id: int) -> None:
    """Add a note to a ticket on behalf of a staff user.

    Args:
        ticket_id: Ticket identifier
        contents: Note text
        staff_id: Identifier of the staff user writing the note
    """
    config = get_config()
    note = Ticket.get(config, ticket_id).new_note(Staff.get(config, staff_id), contents).create()
    print(f"Created note {note.id} on ticket {ticket_id}")


@app.command(name="time-tracks")
def time_tracks(ticket_id: int) -> None:
    """List time tracked on a ticket."""
    config = get_config()
    found = TicketTimeTrack.get_all(config, ticket_id)

    print(f"Found {len(found)} time track(s):\n")
    for time_track in found:
        worked = time_track.get_time_worked(formatted=True)
        billable = time_track.get_time_billable(formatted=True)
        print(f"#{time_track.id} {time_track.worker_staff_name}: worked {worked}, billable {billable}")


@app.command
def priorities() -> None:
    """List ticket priorities."""
    config = get_config()
    for priority in TicketPriority.get_all(config):
        print(f"{priority.id}: {priority}")


@app.command
def statistics(reload: bool = False) -> None:
    """Show ticket counts per department, status and owner."""
    config = get_config()
    stats = Ticket.get_statistics(config, reload)

    print("Departments:")
    for department_id, department in stats["departments"].items():
        print(
            f"  {department_id}: {department['total_items']} ticket(s), "
            f"{department['total_unresolved_items']} unresolved"
        )
    print("Statuses:")
    for status_id, status in stats["ticket_statuses"].items():
        print(f"  {status_id}: {status['total_items']} ticket(s)")
    print("Owners:")
    for owner_id, owner in stats["ticket_owners"].items():
        print(f"  {owner_id}: {owner['total_items']} ticket(s), {owner['total_unresolved_items']} unresolved")


@app.command(name="kb-categories")
def kb_categories(limit: int | None = None, start: int | None = None) -> None:
    """List knowledgebase categories."""
    config = get_config()
    found = KnowledgebaseCategory.get_all(config, limit, start)

    print(f"Found {len(found)} categories:\n")
    for category in found:
        print(f"{category.id}: {category}")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
