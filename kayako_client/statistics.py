"""Ticket statistics (counts per department, status, type and owner)."""

from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog

from kayako_client.codec import to_int, to_list
from kayako_client.object_base import wire_value

if TYPE_CHECKING:
    from kayako_client.config import Config

logger = structlog.get_logger()

STATISTICS_CONTROLLER = "/Tickets/TicketCount"
STATISTICS_CACHE_KEY = "ticket_statistics"


def _last_activity(value: Any, config: "Config") -> str | None:
    timestamp = to_int(value, 0)
    if timestamp <= 0:
        return None
    return datetime.fromtimestamp(timestamp).strftime(config.datetime_format)


def _counts(node: Any, config: "Config", unresolved: bool = True) -> dict[str, Any]:
    """Counts stored as attributes of a statistics node."""
    counts = {
        "last_activity": _last_activity(wire_value(node, "@lastactivity"), config),
        "total_items": to_int(wire_value(node, "@totalitems"), 0),
    }
    if unresolved:
        counts["total_unresolved_items"] = to_int(wire_value(node, "@totalunresolveditems"), 0)
    return counts


def _key(node: Any, fallback: str) -> int | str:
    node_id = to_int(wire_value(node, "@id"), 0)
    return node_id if node_id > 0 else fallback


def _department_statistics(node: Any, config: "Config") -> dict[str, Any]:
    department: dict[str, Any] = {
        "last_activity": _last_activity(wire_value(node, "lastactivity"), config),
        "total_items": to_int(wire_value(node, "totalitems"), 0),
        "total_unresolved_items": to_int(wire_value(node, "totalunresolveditems"), 0),
        "ticket_statuses": {},
        "ticket_types": {},
        "ticket_owners": {},
    }
    for status in to_list(wire_value(node, "ticketstatus")):
        department["ticket_statuses"][to_int(wire_value(status, "@id"), 0)] = _counts(status, config, unresolved=False)
    # the server reports every ticket type with id 0, so they all end up under "unknown"
    for ticket_type in to_list(wire_value(node, "tickettype")):
        department["ticket_types"][_key(ticket_type, "unknown")] = _counts(ticket_type, config)
    for owner in to_list(wire_value(node, "ownerstaff")):
        department["ticket_owners"][_key(owner, "unassigned")] = _counts(owner, config)
    return department


def parse_ticket_statistics(result: Any, config: "Config") -> dict[str, Any]:
    """Turn a decoded ``/Tickets/TicketCount`` response into nested dicts.

    Args:
        result: Decoded response
        config: Configuration providing the datetime format

    Returns:
        ``{"departments": {...}, "ticket_statuses": {...}, "ticket_owners": {...}}``
        keyed by identifiers. Department id 0 (e.g. tickets in the trash) is
        keyed ``"unknown"``, owner id 0 ``"unassigned"``.
    """
    statistics: dict[str, Any] = {"departments": {}, "ticket_statuses": {}, "ticket_owners": {}}

    for node in to_list(wire_value(result, "departments/department")):
        statistics["departments"][_key(node, "unknown")] = _department_statistics(node, config)

    for node in to_list(wire_value(result, "statuses/ticketstatus")):
        statistics["ticket_statuses"][to_int(wire_value(node, "@id"), 0)] = _counts(node, config, unresolved=False)

    for node in to_list(wire_value(result, "owners/ownerstaff")):
        statistics["ticket_owners"][_key(node, "unassigned")] = _counts(node, config)

    return statistics


def get_ticket_statistics(config: "Config", reload: bool = False) -> dict[str, Any]:
    """Return ticket statistics, cached in the configuration's memo cache.

    The cache does not expire; pass ``reload=True`` or invalidate
    ``ticket_statistics`` on ``config.cache`` to fetch fresh numbers.
    """

    def load() -> dict[str, Any]:
        logger.debug("Fetching ticket statistics")
        return parse_ticket_statistics(config.transport.get(STATISTICS_CONTROLLER, []), config)

    return config.cache.get_or_load(STATISTICS_CACHE_KEY, load, reload)
