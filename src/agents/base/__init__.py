"""Base chat responder shared by the coordinator and specialists."""

from .responder import ChatResponder, ResponderSettings

__all__ = [
    "ChatResponder",
    "ResponderSettings",
]
