"""
Notifications module for LeadMiner.

Delivers the daily digest to an external webhook.
"""

from .webhook_notifier import WebhookNotifier, DeliveryResult, NOT_CONFIGURED_REASON

__all__ = ["WebhookNotifier", "DeliveryResult", "NOT_CONFIGURED_REASON"]
