"""
Webhooks Module

Fan-out of record events to the flows subscribed on a table.
"""

from .dispatcher import JoinPolicy, TableWebhookDispatcher
from .handler import FlowWebhookHandler, WebhookPayload

__all__ = [
    "JoinPolicy",
    "TableWebhookDispatcher",
    "FlowWebhookHandler",
    "WebhookPayload",
]
