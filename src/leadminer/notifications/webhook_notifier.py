"""
Webhook Notifier for LeadMiner
==============================

Posts the daily digest to an incoming webhook (WhatsApp/SMS bridge, chat
relay, ...). Delivery is best effort: one attempt, no retry, and failures
come back as a DeliveryResult instead of an exception.

Configuration:
    LEADMINER_WEBHOOK_URL: Webhook URL (fallback: WHATSAPP_WEBHOOK_URL)
    WEBHOOK_TIMEOUT: Request timeout in seconds (default: 10)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from ..data.config import NotificationConfig

logger = logging.getLogger(__name__)

NOT_CONFIGURED_REASON = "LEADMINER_WEBHOOK_URL not set"


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a delivery attempt."""
    sent: bool
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"sent": self.sent}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


class WebhookNotifier:
    """
    Sends the digest as JSON {"message": ...} to a webhook.

    Uses a single stateless POST per digest.
    """

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Args:
            webhook_url: Webhook URL (default: from LEADMINER_WEBHOOK_URL env var)
            timeout: Request timeout in seconds (default: from WEBHOOK_TIMEOUT)
        """
        if webhook_url is None or timeout is None:
            config = NotificationConfig()
            webhook_url = config.webhook_url if webhook_url is None else webhook_url
            timeout = config.timeout if timeout is None else timeout
        self.webhook_url = webhook_url or ""
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    def send_digest(self, message: str) -> DeliveryResult:
        """
        Deliver a digest message.

        Never raises: a missing URL, a non-2xx answer and a transport error
        all return sent=False with a reason.
        """
        if not self.is_configured():
            logger.debug("Webhook delivery not configured")
            return DeliveryResult(sent=False, reason=NOT_CONFIGURED_REASON)

        try:
            response = requests.post(
                self.webhook_url,
                json={"message": message},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to send digest: {e}")
            return DeliveryResult(sent=False, reason=str(e))

        if not 200 <= response.status_code < 300:
            logger.error(f"Digest webhook answered HTTP {response.status_code}")
            return DeliveryResult(sent=False, reason=f"HTTP {response.status_code}")

        logger.info("Digest sent")
        return DeliveryResult(sent=True)
