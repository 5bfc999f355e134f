"""SQLAlchemy ORM models."""

from yafoy.models.base import CreatedAtMixin, TimestampMixin
from yafoy.models.chat import ChatMessage, ChatRoom, ChatRoomMember, MessageType
from yafoy.models.favorite import Favorite
from yafoy.models.notification import Notification
from yafoy.models.order import Order, OrderStatus
from yafoy.models.organizer_assignment import OrganizerAssignment
from yafoy.models.product import Product
from yafoy.models.user import User, UserRole

__all__ = [
    "CreatedAtMixin",
    "TimestampMixin",
    "User",
    "UserRole",
    "Product",
    "Order",
    "OrderStatus",
    "Favorite",
    "ChatRoom",
    "ChatRoomMember",
    "ChatMessage",
    "MessageType",
    "Notification",
    "OrganizerAssignment",
]
