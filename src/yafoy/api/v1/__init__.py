"""API v1 routers."""

from yafoy.api.v1 import (
    auth,
    chat,
    favorites,
    notifications,
    orders,
    organizers,
    planner,
    products,
    voice,
)

__all__ = [
    "auth",
    "chat",
    "favorites",
    "notifications",
    "orders",
    "organizers",
    "planner",
    "products",
    "voice",
]
