from .board import Board
from .tag import Tag
from .roadmap_item import RoadmapItem, ItemTag, ItemImage
from .feedback import UserFeedback, FeedbackImage
from .audit_log import AuditLog

__all__ = [
    "Board",
    "Tag",
    "RoadmapItem",
    "ItemTag",
    "ItemImage",
    "UserFeedback",
    "FeedbackImage",
    "AuditLog",
]
