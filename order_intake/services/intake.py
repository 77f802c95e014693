"""Order intake: validate, number, compose, dispatch.

Each step either hands its result to the next or raises an ``IntakeError``;
the HTTP layer turns that into the response. Rate limiting happens before
this function is reached.
"""

import logging
from collections.abc import Mapping
from typing import Any

from order_intake.core.exceptions import DispatchFailed, InternalError
from order_intake.schemas.order import OrderRecord
from order_intake.services.composer import BusinessProfile, compose_notifications
from order_intake.services.dispatcher import dispatch_notifications
from order_intake.services.numbering import generate_order_number
from order_intake.services.transport import EmailTransport
from order_intake.services.validation import validate_order

logger = logging.getLogger(__name__)


async def process_order(
    payload: Mapping[str, Any],
    transport: EmailTransport,
    profile: BusinessProfile,
    timeout: float,
) -> OrderRecord:
    """Run one submission through the pipeline and return its record.

    Validation errors propagate unchanged. Anything unexpected after
    validation is logged with its traceback and re-raised as
    ``InternalError`` so no detail reaches the caller.
    """
    order = validate_order(payload)
    logger.debug("Order validated: %d item(s)", len(order.items))

    try:
        record = OrderRecord(order=order, order_number=generate_order_number())
        logger.debug("Order identified as %s", record.order_number)

        notifications = compose_notifications(order, record.order_number, profile)
        logger.debug("Notifications composed for %s", record.order_number)

        result = await dispatch_notifications(transport, notifications, timeout)
    except Exception as exc:
        logger.exception("Order submission error")
        raise InternalError() from exc

    if not result.success:
        failed = [r.value for r in result.failed]
        logger.error(
            "Order %s not confirmed: %s notification(s) failed",
            record.order_number,
            ", ".join(failed),
        )
        raise DispatchFailed(failed)

    logger.info("Order %s submitted (%d item(s))", record.order_number, len(order.items))
    return record
