from .user import User
from .entry import Entry
from .entry_activity import EntryActivity, ActivityType, ReactionKind
from .notification import Notification

__all__ = [
    "User",
    "Entry",
    "EntryActivity",
    "ActivityType",
    "ReactionKind",
    "Notification",
]
