"""Entity implementations."""

from kayako_client.objects.comments import CommentBase, KnowledgebaseComment, NewsComment, TroubleshooterComment
from kayako_client.objects.department import Department
from kayako_client.objects.knowledgebase import KnowledgebaseCategory
from kayako_client.objects.staff import Staff, StaffGroup
from kayako_client.objects.ticket import Ticket, TicketCustomFieldGroup
from kayako_client.objects.ticket_note import TicketNote
from kayako_client.objects.ticket_post import TicketAttachment, TicketPost
from kayako_client.objects.ticket_properties import TicketPriority, TicketStatus, TicketType
from kayako_client.objects.ticket_time_track import TicketTimeTrack
from kayako_client.objects.troubleshooter import TroubleshooterAttachment, TroubleshooterStep
from kayako_client.objects.user import User, UserGroup, UserOrganization

__all__ = [
    "CommentBase",
    "Department",
    "KnowledgebaseCategory",
    "KnowledgebaseComment",
    "NewsComment",
    "Staff",
    "StaffGroup",
    "Ticket",
    "TicketAttachment",
    "TicketCustomFieldGroup",
    "TicketNote",
    "TicketPost",
    "TicketPriority",
    "TicketStatus",
    "TicketTimeTrack",
    "TicketType",
    "TroubleshooterAttachment",
    "TroubleshooterComment",
    "TroubleshooterStep",
    "User",
    "UserGroup",
    "UserOrganization",
]
