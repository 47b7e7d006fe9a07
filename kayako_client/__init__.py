"""Client library for the Kayako helpdesk REST API."""

from kayako_client.config import Config, TicketDefaults
from kayako_client.creators import Cleared, NameOnly, StaffRef, UserRef
from kayako_client.identity import EntityIdentity
from kayako_client.object_base import ObjectBase
from kayako_client.result_set import ResultSet
from kayako_client.transport import RESTClient, RESTTransport

# entity classes register themselves by name for relations declared with strings
from kayako_client import objects  # noqa: F401

__all__ = [
    "Cleared",
    "Config",
    "EntityIdentity",
    "NameOnly",
    "ObjectBase",
    "RESTClient",
    "RESTTransport",
    "ResultSet",
    "StaffRef",
    "TicketDefaults",
    "UserRef",
]
