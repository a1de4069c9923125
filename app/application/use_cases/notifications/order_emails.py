"""Order status emails sent to suppliers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from anyio import to_thread

from app.config import Settings
from app.domain.entities import Order, OrderItem
from app.infrastructure.email import OutgoingEmail, SendGridEmailClient

logger = logging.getLogger(__name__)

NO_NOTES_LABEL = "Aucune note"

_ORDER_DETAILS = """
Détails de la commande:
- Client: {customerName}
- Email: {customerEmail}
- Téléphone: {customerPhone}
- Montant total: €{total}
- Articles: {itemCount} article(s)
- Adresse de livraison: {deliveryAddress}
"""


@dataclass(frozen=True)
class OrderEmailTemplate:
    type: str
    subject: str
    message: str


def _body(intro: str, items_heading: str, closing: str) -> str:
    return (
        "Bonjour {supplierName},\n\n"
        f"{intro}\n"
        f"{_ORDER_DETAILS}\n"
        f"{items_heading}:\n"
        "{orderItems}\n\n"
        "Notes de commande: {orderNotes}\n\n"
        f"{closing}\n\n"
        "Cordialement,\n"
        "L'équipe {companyName}\n"
    )


ORDER_STATUS_TEMPLATES: dict[str, OrderEmailTemplate] = {
    "pending": OrderEmailTemplate(
        type="new_order",
        subject="🆕 Nouvelle Commande Reçue - #{orderNumber}",
        message=_body(
            "Vous avez reçu une nouvelle commande ! Numéro de commande: #{orderNumber}",
            "Articles commandés",
            "Veuillez confirmer cette commande dès que possible.",
        ),
    ),
    "confirmed": OrderEmailTemplate(
        type="order_confirmed",
        subject="✅ Commande Confirmée - #{orderNumber}",
        message=_body(
            "La commande #{orderNumber} a été confirmée et est maintenant en cours de préparation.",
            "Articles à préparer",
            "Temps de préparation estimé: 15-30 minutes",
        ),
    ),
    "preparing": OrderEmailTemplate(
        type="order_preparing",
        subject="👨‍🍳 Préparation en Cours - #{orderNumber}",
        message=_body(
            "La commande #{orderNumber} est actuellement en cours de préparation.",
            "Articles en préparation",
            "Temps de livraison estimé: 20-40 minutes",
        ),
    ),
    "out_for_delivery": OrderEmailTemplate(
        type="order_shipped",
        subject="🚚 En Cours de Livraison - #{orderNumber}",
        message=_body(
            "La commande #{orderNumber} est maintenant en route !",
            "Articles livrés",
            "Temps de livraison estimé: 10-20 minutes",
        ),
    ),
    "delivered": OrderEmailTemplate(
        type="order_delivered",
        subject="🎉 Commande Livrée - #{orderNumber}",
        message=_body(
            "La commande #{orderNumber} a été livrée avec succès !",
            "Articles livrés",
            "Merci pour votre excellent service !",
        ),
    ),
    "cancelled": OrderEmailTemplate(
        type="order_cancelled",
        subject="❌ Commande Annulée - #{orderNumber}",
        message=_body(
            "La commande #{orderNumber} a été annulée.",
            "Articles concernés",
            "Si vous avez des questions concernant cette annulation, "
            "n'hésitez pas à nous contacter.",
        ),
    ),
}


@dataclass(frozen=True)
class EmailDispatcherConfig:
    """Provider settings handed to the dispatcher at construction."""

    api_key: str | None = None
    sender: str | None = None
    template_id: str | None = None
    company_name: str = "Optimizi"
    fallback_recipient: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailDispatcherConfig":
        return cls(
            api_key=settings.sendgrid_api_key,
            sender=settings.sendgrid_sender,
            template_id=settings.sendgrid_template_id,
            company_name=settings.company_name,
            fallback_recipient=settings.supplier_fallback_email,
        )

    def missing_fields(self) -> list[str]:
        missing: list[str] = []
        if not self.api_key:
            missing.append("SENDGRID_API_KEY")
        if not self.sender:
            missing.append("SENDGRID_SENDER")
        return missing


@dataclass(frozen=True)
class RenderedOrderEmail:
    subject: str
    message: str
    params: dict[str, str | int | float]


def format_order_items(items: Sequence[OrderItem]) -> str:
    """Flatten order lines into a bulleted text block."""

    return "\n".join(
        f"• {item.product_name} - Quantité: {item.quantity:g} {item.unit}".rstrip()
        + f" - Prix: €{item.total_price:.2f}"
        for item in items
    )


def fill_placeholders(template: str, values: dict[str, str]) -> str:
    """Replace every ``{name}`` token of ``values`` in ``template``."""

    rendered = template
    for name, value in values.items():
        rendered = rendered.replace("{" + name + "}", value)
    return rendered


def render_order_email(order: Order, *, company_name: str = "Optimizi") -> RenderedOrderEmail | None:
    """Render the email matching ``order.status``; ``None`` when there is no template."""

    template = ORDER_STATUS_TEMPLATES.get(order.status)
    if template is None:
        return None

    order_number = order.reference.upper()
    items_block = format_order_items(order.items)
    address = order.delivery_address.one_line()
    notes = order.order_notes or NO_NOTES_LABEL
    total = f"{order.total:.2f}"

    values = {
        "supplierName": order.fournisseur_name,
        "orderNumber": order_number,
        "customerName": order.user_name,
        "customerEmail": order.user_email,
        "customerPhone": order.user_phone,
        "total": total,
        "itemCount": str(len(order.items)),
        "deliveryAddress": address,
        "orderItems": items_block,
        "orderNotes": notes,
        "companyName": company_name,
    }
    subject = fill_placeholders(template.subject, {"orderNumber": order_number})
    message = fill_placeholders(template.message, values)
    params: dict[str, str | int | float] = {
        "to_name": order.fournisseur_name,
        "subject": subject,
        "message": message,
        "order_id": order_number,
        "status": order.status,
        "status_type": template.type,
        "company_name": company_name,
        "supplier_name": order.fournisseur_name,
        "customer_name": order.user_name,
        "customer_email": order.user_email,
        "customer_phone": order.user_phone,
        "order_total": total,
        "item_count": len(order.items),
        "delivery_address": address,
        "order_items": items_block,
        "order_notes": notes,
    }
    return RenderedOrderEmail(subject=subject, message=message, params=params)


class OrderEmailDispatcher:
    """Send order status emails through a transactional email provider.

    Built once by the application and injected where needed. Until
    :meth:`initialize` succeeds every send returns ``False``.
    """

    def __init__(
        self,
        config: EmailDispatcherConfig,
        *,
        client_factory: Callable[[str, str], SendGridEmailClient] = SendGridEmailClient,
        resolve_supplier_email: Callable[[str], str | None] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._resolve_supplier_email = resolve_supplier_email
        self._client: SendGridEmailClient | None = None

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    def initialize(self) -> bool:
        """Create the provider client once; returns whether it is available."""

        if self._client is not None:
            return True
        if not self.is_configured():
            logger.info(
                "Order email configuration incomplete (%s); emails disabled",
                ", ".join(self._config.missing_fields()),
            )
            return False
        try:
            self._client = self._client_factory(self._config.api_key, self._config.sender)
        except Exception as exc:
            logger.error("Failed to initialize the order email client: %s", exc)
            self._client = None
            return False
        logger.info("Order email client initialized")
        return True

    def is_configured(self) -> bool:
        return not self._config.missing_fields()

    def config_status(self) -> dict[str, object]:
        missing = self._config.missing_fields()
        return {"is_configured": not missing, "missing_fields": missing}

    def _recipient_for(self, order: Order) -> str | None:
        if self._resolve_supplier_email is not None:
            email = self._resolve_supplier_email(order.fournisseur_id)
            if email:
                return email
        return self._config.fallback_recipient

    async def send_order_notification(self, order: Order) -> bool:
        """Email the supplier about ``order``'s current status. Never raises."""

        client = self._client
        if client is None:
            logger.error("Order email client not initialized")
            return False

        rendered = render_order_email(order, company_name=self._config.company_name)
        if rendered is None:
            logger.error("No email template found for status: %s", order.status)
            return False

        recipient = self._recipient_for(order)
        if not recipient:
            logger.error("No email address known for supplier %s", order.fournisseur_id)
            return False

        email = OutgoingEmail(
            recipient=recipient,
            subject=rendered.subject,
            plain_text=rendered.message,
            template_id=self._config.template_id,
            template_data={"to_email": recipient, **rendered.params},
        )
        try:
            await to_thread.run_sync(client.send, email)
        except Exception as exc:
            logger.error("Failed to send order email for order %s: %s", order.id, exc)
            return False

        logger.info("Order email sent for order %s (%s)", order.id, order.status)
        return True

    async def send_bulk_order_notifications(self, orders: Sequence[Order]) -> list[bool]:
        """Send every email concurrently; one failure never stops the others."""

        results = await asyncio.gather(
            *(self.send_order_notification(order) for order in orders),
            return_exceptions=True,
        )
        return [result if isinstance(result, bool) else False for result in results]


__all__ = [
    "EmailDispatcherConfig",
    "NO_NOTES_LABEL",
    "ORDER_STATUS_TEMPLATES",
    "OrderEmailDispatcher",
    "OrderEmailTemplate",
    "RenderedOrderEmail",
    "fill_placeholders",
    "format_order_items",
    "render_order_email",
]
