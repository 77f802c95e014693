"""Structural checks on a submitted order payload."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from order_intake.core.exceptions import EmptyOrder, InvalidOrderData, MissingCustomerInfo
from order_intake.schemas.order import Order

logger = logging.getLogger(__name__)


def validate_order(payload: Mapping[str, Any]) -> Order:
    """Return the typed ``Order`` for ``payload`` or raise a 400-class error.

    Rules run in order and stop at the first failure:

    1. ``customer`` with a non-empty ``name`` and ``email``.
    2. A non-empty ``items`` list.

    E-mail syntax, numeric ranges and ``subtotal``/``total`` arithmetic are
    deliberately left unchecked.
    """
    customer = payload.get("customer")
    if (
        not isinstance(customer, Mapping)
        or not customer.get("name")
        or not customer.get("email")
    ):
        raise MissingCustomerInfo()

    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise EmptyOrder()

    try:
        return Order.model_validate(payload)
    except ValidationError as exc:
        logger.info("Order payload failed type conversion: %s", exc.errors(include_url=False))
        raise InvalidOrderData() from exc
