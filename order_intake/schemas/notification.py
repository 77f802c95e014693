"""Notification envelopes and the combined dispatch outcome."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Recipient(str, Enum):
    BUSINESS = "business"
    CUSTOMER = "customer"


class NotificationMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender: str
    to: str
    subject: str
    text_body: str
    html_body: str


class OrderNotifications(BaseModel):
    model_config = ConfigDict(frozen=True)

    business: NotificationMessage
    customer: NotificationMessage

    def by_recipient(self) -> dict[Recipient, NotificationMessage]:
        return {Recipient.BUSINESS: self.business, Recipient.CUSTOMER: self.customer}


class DispatchResult(BaseModel):
    failed: list[Recipient] = []

    @property
    def success(self) -> bool:
        return not self.failed
