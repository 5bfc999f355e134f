"""Pydantic schemas for request/response validation."""

from yafoy.schemas.chat import (
    ChatMessageCreate,
    ChatMessageListResponse,
    ChatMessageResponse,
    ChatRoomCreate,
    ChatRoomResponse,
)
from yafoy.schemas.notification import (
    NotificationBatchCreate,
    NotificationListResponse,
    NotificationResponse,
)
from yafoy.schemas.order import (
    OrderAction,
    OrderCreate,
    OrderDetailResponse,
    OrderListResponse,
    OrderResponse,
)
from yafoy.schemas.pagination import PageMeta
from yafoy.schemas.product import ProductListResponse, ProductResponse, ProductSummary
from yafoy.schemas.user import TokenResponse, UserLogin, UserRegister, UserResponse

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "PageMeta",
    "ProductResponse",
    "ProductSummary",
    "ProductListResponse",
    "OrderCreate",
    "OrderAction",
    "OrderResponse",
    "OrderDetailResponse",
    "OrderListResponse",
    "ChatRoomCreate",
    "ChatRoomResponse",
    "ChatMessageCreate",
    "ChatMessageResponse",
    "ChatMessageListResponse",
    "NotificationBatchCreate",
    "NotificationResponse",
    "NotificationListResponse",
]
