"""
Webhook update handlers.

Root aggregation: dispatcher -> payments, callbacks, user messages.
"""
from .dispatcher import WebhookDispatcher

__all__ = ["WebhookDispatcher"]
