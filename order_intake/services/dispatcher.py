"""Send the business and customer notifications for one order."""

import asyncio
import logging

from order_intake.schemas.notification import (
    DispatchResult,
    NotificationMessage,
    OrderNotifications,
    Recipient,
)
from order_intake.services.transport import EmailTransport

logger = logging.getLogger(__name__)


async def _send_one(
    transport: EmailTransport,
    recipient: Recipient,
    message: NotificationMessage,
    timeout: float,
) -> None:
    try:
        await asyncio.wait_for(transport.send(message), timeout=timeout)
    except TimeoutError:
        logger.error("Sending %s notification timed out after %ss", recipient.value, timeout)
        raise
    except Exception:
        logger.exception("Sending %s notification failed", recipient.value)
        raise


async def dispatch_notifications(
    transport: EmailTransport,
    notifications: OrderNotifications,
    timeout: float,
) -> DispatchResult:
    """Send both messages concurrently and wait for both to settle.

    No retries. A message that does not settle within ``timeout`` counts as
    failed. The result lists every recipient whose send failed.
    """
    pairs = list(notifications.by_recipient().items())
    outcomes = await asyncio.gather(
        *(_send_one(transport, recipient, message, timeout) for recipient, message in pairs),
        return_exceptions=True,
    )
    failed = [
        recipient
        for (recipient, _), outcome in zip(pairs, outcomes, strict=True)
        if isinstance(outcome, BaseException)
    ]
    return DispatchResult(failed=failed)
