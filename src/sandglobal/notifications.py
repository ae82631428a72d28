"""Email notification building and fire-and-forget delivery."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from jinja2 import DictLoader, Environment, select_autoescape

from sandglobal.config import SandGlobalConfig, normalize_email
from sandglobal.exceptions import DataStoreError, NotificationError
from sandglobal.lifecycle import progress_for_status
from sandglobal.protocols import MailSender, NotificationRetryStore

logger = logging.getLogger(__name__)

BRAND = "Sand Global Express"

STATUS_COPY: dict[str, tuple[str, str]] = {
    "Pending": (
        "We received your order.",
        "We are preparing your shipment details.",
    ),
    "Awaiting Payment": (
        "Payment required.",
        "Complete payment to start processing.",
    ),
    "Payment Confirmed": (
        "Payment confirmed.",
        "Processing will start shortly.",
    ),
    "Processing": ("We are packing your order.", "Labels are being prepared."),
    "Ready for Pickup": ("Ready for pickup.", "Driver will collect soon."),
    "Driver En Route": (
        "Driver is on the way.",
        "Keep your phone nearby for updates.",
    ),
    "Picked Up": (
        "Package picked up.",
        "In hand and heading to origin facility.",
    ),
    "At Warehouse": (
        "At warehouse.",
        "Queued for the next leg of the journey.",
    ),
    "In Transit": ("In transit.", "Moving to the next facility."),
    "Departed Facility": (
        "Departed facility.",
        "On the road to the next stop.",
    ),
    "Arrived at Facility": (
        "Arrived at facility.",
        "Sorting for the next transfer.",
    ),
    "Out for Delivery": ("Out for delivery.", "Expect delivery today."),
    "Delivered": (
        "Delivered successfully!",
        f"Thank you for choosing {BRAND}.",
    ),
    "Returned to Sender": (
        "Returned to sender.",
        "Contact support to reschedule.",
    ),
    "Cancelled": ("Shipment cancelled.", "Reach out if this is unexpected."),
    "On Hold": (
        "Shipment on hold.",
        "We will notify you once it resumes.",
    ),
    "Delayed": ("Shipment delayed.", "We are expediting the next leg."),
    "Weather Delay": ("Weather delay.", "Safety first. A new ETA will follow."),
    "Address Issue": (
        "Address issue.",
        "Please confirm the delivery address.",
    ),
    "Customs Hold": ("Customs hold.", "Awaiting clearance."),
    "Inspection Required": (
        "Inspection in progress.",
        "We will share findings soon.",
    ),
    "Payment Verification Required": (
        "Payment verification needed.",
        "Please verify payment details.",
    ),
    "Lost Package": (
        "Package reported lost.",
        "Support will reach out with options.",
    ),
    "Damaged Package": (
        "Package reported damaged.",
        "Support will coordinate a resolution.",
    ),
}
DEFAULT_COPY = ("{status}", "We are monitoring your shipment.")

_TEMPLATES = {
    "shipment.html": """\
<!doctype html>
<html lang="en">
<body>
  <h1>{{ title }}</h1>
  <p>Hello {{ name or "Valued Customer" }},</p>
  <p>{{ tip }}</p>
  <table>
    <tr><td>Tracking number</td><td>{{ shipment.tracking_number }}</td></tr>
    <tr><td>Status</td><td>{{ shipment.status }}</td></tr>
    {% if old_status %}<tr><td>Previous status</td><td>{{ old_status }}</td></tr>{% endif %}
    <tr><td>Progress</td><td>{{ progress }}%</td></tr>
    <tr><td>Route</td><td>{{ route }}</td></tr>
    {% if shipment.current_location_name %}<tr><td>Current location</td><td>{{ shipment.current_location_name }}</td></tr>{% endif %}
    <tr><td>Estimated delivery</td><td>{{ eta }}</td></tr>
    {% if shipment.agent_name %}<tr><td>Agent</td><td>{{ shipment.agent_name }} {{ shipment.agent_phone or "" }}</td></tr>{% endif %}
  </table>
  {% if shipment.system_notes %}<p>{{ shipment.system_notes }}</p>{% endif %}
  <p>{{ brand }}</p>
</body>
</html>
""",
    "shipment.txt": """\
{{ title }}

Hello {{ name or "Valued Customer" }},
{{ tip }}

Tracking number: {{ shipment.tracking_number }}
Status: {{ shipment.status }}{% if old_status %} (was {{ old_status }}){% endif %}
Progress: {{ progress }}%
Route: {{ route }}
{% if shipment.current_location_name %}Current location: {{ shipment.current_location_name }}
{% endif %}Estimated delivery: {{ eta }}
{% if shipment.system_notes %}
{{ shipment.system_notes }}
{% endif %}
{{ brand }}
""",
    "contact.html": """\
<!doctype html>
<html lang="en">
<body>
  <h1>New contact message</h1>
  <p><strong>Name:</strong> {{ name }}</p>
  <p><strong>Email:</strong> {{ email }}</p>
  {% if phone %}<p><strong>Phone:</strong> {{ phone }}</p>{% endif %}
  {% if subject %}<p><strong>Subject:</strong> {{ subject }}</p>{% endif %}
  {% if inquiry_type %}<p><strong>Inquiry type:</strong> {{ inquiry_type }}</p>{% endif %}
  <p>{{ message }}</p>
</body>
</html>
""",
    "contact.txt": """\
New contact message

Name: {{ name }}
Email: {{ email }}
{% if phone %}Phone: {{ phone }}
{% endif %}{% if subject %}Subject: {{ subject }}
{% endif %}{% if inquiry_type %}Inquiry type: {{ inquiry_type }}
{% endif %}
{{ message }}
""",
}

_env = Environment(
    loader=DictLoader(_TEMPLATES),
    autoescape=select_autoescape(
        enabled_extensions=("html",), default_for_string=False
    ),
)


@dataclass
class EmailMessage:
    """A single outbound email."""

    to: list[str]
    subject: str
    html: str
    text: str
    bcc: list[str] = field(default_factory=list)
    reply_to: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> EmailMessage:
        return cls(
            to=list(payload["to"]),
            subject=payload["subject"],
            html=payload["html"],
            text=payload["text"],
            bcc=list(payload.get("bcc") or []),
            reply_to=payload.get("reply_to"),
        )


def status_copy(status: str) -> tuple[str, str]:
    title, tip = STATUS_COPY.get(str(status), DEFAULT_COPY)
    return title.format(status=status), tip


def route_label(shipment: Any) -> str:
    return (
        f"{shipment.sender_city}, {shipment.sender_country} → "
        f"{shipment.recipient_city}, {shipment.recipient_country}"
    )


def _render_shipment(
    shipment: Any,
    *,
    name: str | None,
    old_status: str | None,
) -> tuple[str, str]:
    title, tip = status_copy(shipment.status)
    eta = shipment.estimated_delivery_date
    context = {
        "brand": BRAND,
        "shipment": shipment,
        "name": name,
        "title": title,
        "tip": tip,
        "old_status": old_status,
        "progress": progress_for_status(shipment.status),
        "route": route_label(shipment),
        "eta": eta.strftime("%Y-%m-%d %H:%M") if eta else "TBD",
    }
    html = _env.get_template("shipment.html").render(**context)
    text = _env.get_template("shipment.txt").render(**context)
    return html, text


def _shipment_messages(
    shipment: Any,
    subject: str,
    admin_recipients: Sequence[str],
    *,
    old_status: str | None = None,
) -> list[EmailMessage]:
    """One message per valid party, admins in bcc.

    When neither party has a valid address the admins get the message
    directly; with no admins either nothing is sent.
    """
    admins = list(admin_recipients)
    messages: list[EmailMessage] = []
    seen: set[str] = set()
    for role in ("sender", "recipient"):
        email = normalize_email(getattr(shipment, f"{role}_email", None))
        if email is None or email in seen:
            continue
        seen.add(email)
        html, text = _render_shipment(
            shipment,
            name=getattr(shipment, f"{role}_name", None),
            old_status=old_status,
        )
        messages.append(
            EmailMessage(
                to=[email],
                subject=subject,
                html=html,
                text=text,
                bcc=[a for a in admins if a != email],
            )
        )
    if messages or not admins:
        return messages
    html, text = _render_shipment(shipment, name=None, old_status=old_status)
    return [EmailMessage(to=admins, subject=subject, html=html, text=text)]


def build_shipment_created_messages(
    shipment: Any,
    admin_recipients: Sequence[str],
) -> list[EmailMessage]:
    subject = f"Shipment Created • {shipment.tracking_number}"
    return _shipment_messages(shipment, subject, admin_recipients)


def build_shipment_updated_messages(
    shipment: Any,
    admin_recipients: Sequence[str],
    *,
    old_status: str | None = None,
) -> list[EmailMessage]:
    subject = (
        f"Shipment Update • {shipment.tracking_number} • {shipment.status}"
    )
    if old_status == shipment.status:
        old_status = None
    return _shipment_messages(
        shipment, subject, admin_recipients, old_status=old_status
    )


def build_contact_message(
    *,
    name: str,
    email: str,
    message: str,
    admin_recipients: Sequence[str],
    phone: str | None = None,
    subject: str | None = None,
    inquiry_type: str | None = None,
) -> EmailMessage | None:
    """Forward a contact form submission to the admin inbox."""
    if not admin_recipients:
        return None
    context = {
        "name": name,
        "email": email,
        "phone": phone,
        "subject": subject,
        "inquiry_type": inquiry_type,
        "message": message,
    }
    return EmailMessage(
        to=list(admin_recipients),
        subject=f"New Contact Message • {name}",
        html=_env.get_template("contact.html").render(**context),
        text=_env.get_template("contact.txt").render(**context),
        reply_to=normalize_email(email),
    )


class NotificationDispatcher:
    """Sends emails without ever failing the caller.

    Failed sends are logged and, when a retry store is configured,
    queued for redelivery by :func:`sandglobal.retry.process_due_notifications`.
    """

    def __init__(
        self,
        sender: MailSender,
        *,
        config: SandGlobalConfig,
        retry_store: NotificationRetryStore | None = None,
    ) -> None:
        self.sender = sender
        self.config = config
        self.retry_store = retry_store

    async def deliver(self, messages: Sequence[EmailMessage]) -> int:
        """Send messages, returning how many went out."""
        if not messages:
            logger.warning("No valid email recipients, notification skipped")
            return 0
        sent = 0
        for message in messages:
            try:
                await self.sender.send(message)
                sent += 1
            except NotificationError as exc:
                logger.warning(
                    "Email to %s failed: %s", ", ".join(message.to), exc
                )
                await self._enqueue(message, str(exc))
        return sent

    async def _enqueue(self, message: EmailMessage, error: str) -> None:
        if self.retry_store is None or not self.config.retry_enabled:
            return
        try:
            retry_id = await self.retry_store.store_failed_notification(
                payload=message.to_payload(),
                error=error,
            )
        except DataStoreError as exc:
            logger.error("Could not queue email for retry: %s", exc)
            return
        logger.info("Email to %s queued as %s", ", ".join(message.to), retry_id)
