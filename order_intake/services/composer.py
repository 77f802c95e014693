"""Render the business and customer e-mails for one order.

Everything here is pure string formatting over an ``Order``, its order
number and the static ``BusinessProfile``: no I/O, no clock, no randomness.
Absent optional customer fields show as ``N/A`` in plain text and are left
out of the HTML; both renderings agree on which fields have a value.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from html import escape

from order_intake.core.config import Settings
from order_intake.schemas.notification import NotificationMessage, OrderNotifications
from order_intake.schemas.order import CustomerInfo, LineItem, Order

CENTS = Decimal("0.01")
RULE = "═" * 39
THIN_RULE = "─" * 39

BASE_STYLE = """
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: linear-gradient(135deg, #ff6b35 0%, #f7931e 100%); color: white; padding: 20px; text-align: center; border-radius: 8px 8px 0 0; }
    .content { background: #f9f9f9; padding: 20px; border: 1px solid #ddd; }
    .section { background: white; padding: 15px; margin-bottom: 15px; border-radius: 5px; border-left: 4px solid #ff6b35; }
    .section-title { font-weight: bold; font-size: 1.1em; margin-bottom: 10px; color: #ff6b35; }
    .order-items { background: white; padding: 15px; margin: 15px 0; border-radius: 5px; }
    .item-row { padding: 8px 0; border-bottom: 1px solid #eee; }
    .total { font-size: 1.3em; font-weight: bold; color: #ff6b35; text-align: right; margin-top: 15px; padding-top: 15px; border-top: 2px solid #ff6b35; }
    .info-box { background: #fff3cd; padding: 15px; border-radius: 5px; border-left: 4px solid #ff6b35; margin: 15px 0; }
    .footer { text-align: center; color: #666; font-size: 0.9em; margin-top: 20px; }
"""

POLICY_LINES = (
    "Allow up to 2 weeks for custom orders",
    "Rush orders available for +$5/item",
    "A proof will be provided if applicable",
)


@dataclass(frozen=True)
class BusinessProfile:
    name: str
    email: str
    phone: str
    address: str
    tagline: str
    sender: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "BusinessProfile":
        return cls(
            name=settings.BUSINESS_NAME,
            email=settings.BUSINESS_EMAIL,
            phone=settings.BUSINESS_PHONE,
            address=settings.BUSINESS_ADDRESS,
            tagline=settings.BUSINESS_TAGLINE,
            sender=settings.sender_address,
        )


def format_money(amount: Decimal) -> str:
    with localcontext() as ctx:
        # Room for every integer digit plus two decimals.
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return f"${amount.quantize(CENTS, rounding=ROUND_HALF_UP)}"


def format_order_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


def _present(value: str | None) -> str | None:
    """Return the value if it carries text, else None."""
    if value is None or not value.strip():
        return None
    return value


def _item_line(item: LineItem) -> str:
    return (
        f"{item.quantity}x {item.name} @ {format_money(item.price)}"
        f" = {format_money(item.subtotal)}"
    )


def _items_text(items: list[LineItem]) -> str:
    return "\n".join(_item_line(item) for item in items)


def _items_html(items: list[LineItem]) -> str:
    return "".join(
        f"""
          <div class="item-row">
            <strong>{item.quantity}x {escape(item.name)}</strong><br>
            <span style="color: #666;">{format_money(item.price)} each = {format_money(item.subtotal)}</span>
          </div>"""
        for item in items
    )


def _customer_rows_html(customer: CustomerInfo) -> str:
    rows = [
        ("Student Entrepreneur", _present(customer.student_name)),
        ("Name", customer.name),
        ("Email", customer.email),
        ("Phone", _present(customer.phone)),
        ("Address", _present(customer.address)),
    ]
    return "\n".join(
        f"        <p><strong>{label}:</strong> {escape(value)}</p>"
        for label, value in rows
        if value is not None
    )


def _html_document(body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <style>{BASE_STYLE}  </style>
</head>
<body>
  <div class="container">
{body}
  </div>
</body>
</html>
"""


def render_business_text(order: Order, order_number: str, profile: BusinessProfile) -> str:
    customer = order.customer
    return f"""NEW ORDER RECEIVED

Order Number: {order_number}
Order Date: {format_order_date(order.order_date)}

{RULE}
CUSTOMER INFORMATION
{RULE}
Student Entrepreneur: {_present(customer.student_name) or "N/A"}
Customer Name: {customer.name}
Email: {customer.email}
Phone: {_present(customer.phone) or "N/A"}
Address: {_present(customer.address) or "N/A"}

{RULE}
ORDER DETAILS
{RULE}
{_items_text(order.items)}

{THIN_RULE}
TOTAL: {format_money(order.total)}
{RULE}

SPECIAL INSTRUCTIONS:
{_present(customer.special_instructions) or "None"}

{THIN_RULE}
This order was submitted through the {profile.name} online order form.
"""


def render_business_html(order: Order, order_number: str, profile: BusinessProfile) -> str:
    instructions = _present(order.customer.special_instructions)
    instructions_section = ""
    if instructions is not None:
        instructions_section = f"""
      <div class="section">
        <div class="section-title">📝 Special Instructions</div>
        <p>{escape(instructions)}</p>
      </div>
"""
    return _html_document(
        f"""    <div class="header">
      <h1>🎉 New Order Received!</h1>
      <p>Order #{escape(order_number)}</p>
    </div>
    <div class="content">
      <div class="section">
        <div class="section-title">📅 Order Information</div>
        <p><strong>Order Date:</strong> {format_order_date(order.order_date)}</p>
      </div>

      <div class="section">
        <div class="section-title">👤 Customer Information</div>
{_customer_rows_html(order.customer)}
      </div>

      <div class="section">
        <div class="section-title">🛒 Order Details</div>
        <div class="order-items">{_items_html(order.items)}
          <div class="total">TOTAL: {format_money(order.total)}</div>
        </div>
      </div>
{instructions_section}
      <div class="footer">
        <p>This order was submitted through the {escape(profile.name)} online order form.</p>
        <p><strong>{escape(profile.name)}</strong> | {escape(profile.address)}</p>
        <p>📞 {escape(profile.phone)} | ✉️ {escape(profile.email)}</p>
      </div>
    </div>"""
    )


def render_customer_text(order: Order, order_number: str, profile: BusinessProfile) -> str:
    return f"""Thank you for your order!

Order Number: {order_number}
Order Date: {format_order_date(order.order_date)}

Your Order:
{_items_text(order.items)}

Total: {format_money(order.total)}

We've received your order and will begin processing it shortly. A proof will be provided to your email if applicable.

Allow up to 2 weeks for custom orders. Rush orders are available for +$5/item.

If you have any questions, please contact us:
📞 {profile.phone}
✉️ {profile.email}

Thank you for supporting {profile.name}!
{profile.tagline}
"""


def render_customer_html(order: Order, order_number: str, profile: BusinessProfile) -> str:
    policy = "<br>\n        ".join(f"• {line}" for line in POLICY_LINES)
    return _html_document(
        f"""    <div class="header">
      <h1>Thank You for Your Order!</h1>
      <p>Order #{escape(order_number)}</p>
    </div>
    <div class="content">
      <p>Hi {escape(order.customer.name)},</p>
      <p>We've received your order and will begin processing it shortly!</p>

      <div class="order-items">
        <h3>Your Order:</h3>{_items_html(order.items)}
        <div class="total">TOTAL: {format_money(order.total)}</div>
      </div>

      <div class="info-box">
        <strong>📋 Important Information:</strong><br>
        {policy}
      </div>

      <p>If you have any questions about your order, please don't hesitate to contact us:</p>
      <p style="text-align: center;">
        <strong>📞 {escape(profile.phone)}</strong><br>
        <strong>✉️ {escape(profile.email)}</strong>
      </p>

      <div class="footer">
        <p><strong>{escape(profile.name)}</strong></p>
        <p>{escape(profile.tagline)}</p>
        <p>{escape(profile.address)}</p>
      </div>
    </div>"""
    )


def compose_notifications(
    order: Order, order_number: str, profile: BusinessProfile
) -> OrderNotifications:
    """Build the business copy and the customer confirmation for one order."""
    business = NotificationMessage(
        sender=profile.sender,
        to=profile.email,
        subject=(
            f"New E3 Order #{order_number} from {order.customer.name}"
            f" - {format_money(order.total)}"
        ),
        text_body=render_business_text(order, order_number, profile),
        html_body=render_business_html(order, order_number, profile),
    )
    customer = NotificationMessage(
        sender=profile.sender,
        to=order.customer.email,
        subject=f"Order Confirmation #{order_number} - {profile.name}",
        text_body=render_customer_text(order, order_number, profile),
        html_body=render_customer_html(order, order_number, profile),
    )
    return OrderNotifications(business=business, customer=customer)
