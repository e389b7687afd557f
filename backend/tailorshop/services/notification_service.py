"""Notification service for SMS and Email alerts.

``NotificationService`` knows how to deliver a message over a channel;
``OrderNotifier`` turns order and stock events into customer/admin messages.
Both run after the database work has been committed and nothing they return
is relied upon.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import httpx

from tailorshop.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    """Result of a notification attempt."""
    success: bool
    channel: str  # "sms", "email"
    recipient: str
    message: str
    error: Optional[str] = None
    sent_at: Optional[datetime] = None


@dataclass
class Contact:
    """Where to reach a customer or staff member."""
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class OrderNotice:
    """Order fields used in customer messages, copied out of the session."""
    order_id: str
    status: str
    price: float
    delivery_date: datetime
    description: Optional[str] = None

    @property
    def short_id(self) -> str:
        return self.order_id[-6:]

    @property
    def label(self) -> str:
        return self.description or "Tailoring Service"


@dataclass
class MaterialAlert:
    """Material fields used in low-stock alerts."""
    material_id: str
    name: str
    quantity: float
    unit: str
    threshold: float


class NotificationService:
    """Service for sending notifications via SMS and Email."""

    def __init__(
        self,
        sms_provider: str = "local",  # "twilio", "local"
        sms_api_key: Optional[str] = None,
        sms_api_secret: Optional[str] = None,
        sms_from_number: Optional[str] = None,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        email_from: Optional[str] = None,
    ):
        self.sms_provider = sms_provider
        self.sms_api_key = sms_api_key
        self.sms_api_secret = sms_api_secret
        self.sms_from_number = sms_from_number

        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.email_from = email_from

        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def send_sms(self, to: str, message: str) -> NotificationResult:
        """Send one SMS. Falls back to logging when no provider is configured."""
        if self.sms_provider == "twilio":
            return await self._send_twilio_sms(to, message)
        return await self._send_mock_sms(to, message)

    async def _send_twilio_sms(self, to: str, message: str) -> NotificationResult:
        """Send SMS via Twilio."""
        if not self.sms_api_key or not self.sms_api_secret or not self.sms_from_number:
            return NotificationResult(
                success=False,
                channel="sms",
                recipient=to,
                message=message,
                error="Twilio credentials not configured",
            )

        client = await self._get_client()
        account_sid = self.sms_api_key

        try:
            response = await client.post(
                f"https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json",
                auth=(account_sid, self.sms_api_secret),
                data={
                    "To": to,
                    "From": self.sms_from_number,
                    "Body": message,
                },
            )
        except httpx.HTTPError as e:
            return NotificationResult(
                success=False, channel="sms", recipient=to, message=message, error=str(e),
            )

        if response.status_code in (200, 201):
            return NotificationResult(
                success=True,
                channel="sms",
                recipient=to,
                message=message,
                sent_at=datetime.now(timezone.utc),
            )
        return NotificationResult(
            success=False,
            channel="sms",
            recipient=to,
            message=message,
            error=f"Twilio error: {response.status_code} - {response.text}",
        )

    async def _send_mock_sms(self, to: str, message: str) -> NotificationResult:
        """Mock SMS for development - logs warning that no real SMS is sent."""
        logger.warning(
            f"[MOCK SMS] No SMS provider configured. Message NOT actually sent. "
            f"To: {to}, Message: {message}"
        )
        return NotificationResult(
            success=True,
            channel="sms",
            recipient=to,
            message=message,
            sent_at=datetime.now(timezone.utc),
        )

    async def send_email(self, to: str, subject: str, body: str) -> NotificationResult:
        """Send email via SMTP (or mock if not configured)."""
        if not self.smtp_host:
            logger.warning(
                f"[MOCK EMAIL] No SMTP host configured. Email NOT actually sent. "
                f"To: {to}, Subject: {subject}"
            )
            return NotificationResult(
                success=True,
                channel="email",
                recipient=to,
                message=body,
                sent_at=datetime.now(timezone.utc),
            )

        from email.mime.text import MIMEText

        msg = MIMEText(body, "plain")
        msg["Subject"] = subject
        msg["From"] = self.email_from or self.smtp_user
        msg["To"] = to

        try:
            # Run SMTP in thread pool to not block
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._send_smtp_sync, to, msg.as_string())
        except OSError as e:
            return NotificationResult(
                success=False, channel="email", recipient=to, message=body, error=str(e),
            )

        return NotificationResult(
            success=True,
            channel="email",
            recipient=to,
            message=body,
            sent_at=datetime.now(timezone.utc),
        )

    def _send_smtp_sync(self, to: str, msg_string: str):
        """Synchronous SMTP send (called in thread pool)."""
        import smtplib

        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.starttls()
            if self.smtp_user and self.smtp_password:
                server.login(self.smtp_user, self.smtp_password)
            server.sendmail(self.email_from or self.smtp_user, to, msg_string)

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None


class OrderNotifier:
    """Customer, staff and admin messages for order and stock events."""

    def __init__(self, service: NotificationService, shop_name: str = "Tailor Shop"):
        self.service = service
        self.shop_name = shop_name

    async def _deliver(self, contact: Contact, subject: str, body: str, sms: str) -> List[NotificationResult]:
        results = []
        if contact.email:
            results.append(await self.service.send_email(contact.email, subject, body))
        else:
            logger.info(f"No email on file for {contact.name}; skipping email")
        if contact.phone:
            results.append(await self.service.send_sms(contact.phone, sms))
        for result in results:
            if not result.success:
                logger.warning(
                    f"{result.channel} notification to {result.recipient} failed: {result.error}"
                )
        return results

    async def order_created(self, customer: Contact, order: OrderNotice) -> List[NotificationResult]:
        subject = f"Order Confirmation: #{order.short_id}"
        body = (
            f"Dear {customer.name},\n\nThank you for your order!\n\n"
            f"Order ID: {order.order_id}\n"
            f"Description: {order.label}\n"
            f"Total Amount: {order.price:.2f}\n"
            f"Delivery Date: {order.delivery_date:%a %b %d %Y}\n\n"
            f"We will notify you when it is ready.\n\n{self.shop_name}"
        )
        sms = (
            f"Thanks for your order #{order.short_id}! Total: {order.price:.2f}. "
            f"Due: {order.delivery_date:%Y-%m-%d}."
        )
        return await self._deliver(customer, subject, body, sms)

    async def order_status_changed(self, customer: Contact, order: OrderNotice) -> List[NotificationResult]:
        subject = f"Order Update: #{order.short_id} is {order.status}"
        body = (
            f"Dear {customer.name},\n\nThe status of your order #{order.short_id} "
            f"has been updated to: {order.status}.\n\n"
            f"Description: {order.label}\n\nThank you for choosing us!\n\n{self.shop_name}"
        )
        sms = f"Order #{order.short_id} update: Status is now {order.status}."
        return await self._deliver(customer, subject, body, sms)

    async def order_ready(self, customer: Contact, order: OrderNotice) -> List[NotificationResult]:
        subject = f"Your Order #{order.short_id} is Ready!"
        body = (
            f"Dear {customer.name},\n\nYour order for {order.label} is now ready for pickup.\n\n"
            f"Total Amount: {order.price:.2f}\n\nThank you for choosing us!\n\n{self.shop_name}"
        )
        sms = (
            f"Hi {customer.name}, your order #{order.short_id} is ready for pickup! "
            f"Total: {order.price:.2f}."
        )
        return await self._deliver(customer, subject, body, sms)

    async def job_assigned(self, employee: Contact, order: OrderNotice) -> List[NotificationResult]:
        subject = f"New Job Assigned: Order #{order.short_id}"
        body = (
            f"Hello {employee.name},\n\nYou have been assigned a new job.\n\n"
            f"Order ID: {order.order_id}\n"
            f"Delivery Date: {order.delivery_date:%a %b %d %Y}\n\n"
            f"Please check the dashboard for details."
        )
        sms = (
            f"New Job: Order #{order.short_id} assigned to you. "
            f"Due: {order.delivery_date:%Y-%m-%d}."
        )
        return await self._deliver(employee, subject, body, sms)

    async def low_stock(self, material: MaterialAlert, admins: List[Contact]) -> List[NotificationResult]:
        subject = f"Low Stock Alert: {material.name}"
        body = (
            f"Alert: The stock for {material.name} has dropped below the threshold.\n\n"
            f"Current Quantity: {material.quantity} {material.unit}\n"
            f"Threshold: {material.threshold}\n\nPlease restock soon."
        )
        sms = (
            f"Low Stock Alert: {material.name} is low ({material.quantity} {material.unit}). "
            f"Threshold: {material.threshold}."
        )
        results: List[NotificationResult] = []
        for admin in admins:
            results.extend(await self._deliver(admin, subject, body, sms))
        return results


# Singleton instances
_notification_service: Optional[NotificationService] = None
_order_notifier: Optional[OrderNotifier] = None


def get_notification_service() -> NotificationService:
    """Get or create the notification service singleton."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService(
            sms_provider=settings.sms_provider,
            sms_api_key=settings.sms_api_key,
            sms_api_secret=settings.sms_api_secret,
            sms_from_number=settings.sms_from_number,
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_user=settings.smtp_user,
            smtp_password=settings.smtp_password,
            email_from=settings.email_from,
        )
    return _notification_service


def get_order_notifier() -> OrderNotifier:
    """FastAPI dependency: the shared order notifier."""
    global _order_notifier
    if _order_notifier is None:
        _order_notifier = OrderNotifier(get_notification_service(), shop_name=settings.shop_name)
    return _order_notifier
