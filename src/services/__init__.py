"""
Servicios de dominio: reciben la sesión y el actor explícito
"""
from .assignment_manager import AssignmentManager
from .meeting_lifecycle import MeetingLifecycle
from .discussion_ledger import DiscussionLedger
from . import recurrence

__all__ = [
    "AssignmentManager",
    "MeetingLifecycle",
    "DiscussionLedger",
    "recurrence"
]
