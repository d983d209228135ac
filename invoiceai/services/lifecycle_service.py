"""
Invoice Lifecycle Service

Status transitions and email delivery for existing invoices. Every operation
re-checks that the invoice belongs to the caller's tenant before reading or
mutating it, and records an activity entry in the same transaction as the
change it describes.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.exceptions import (
    ForbiddenError,
    InvoiceNotFoundError,
    NoClientEmailError,
    NotificationUpstreamError,
    ValidationError,
)
from invoiceai.models.invoice import Invoice, InvoiceStatus
from invoiceai.models.types import utcnow
from invoiceai.principal import TenantScope
from invoiceai.services import invoice_store
from invoiceai.services.company_service import get_company
from invoiceai.services.email_service import EmailService, InvoiceEmailData, email_service
from invoiceai.utils.activity_log import log_activity

logger = logging.getLogger(__name__)

VALID_STATUSES = {s.value for s in InvoiceStatus}


class InvoiceLifecycleService:
    """Moves invoices through draft, sent, paid and cancelled."""

    def __init__(self, db: AsyncSession, mailer: EmailService | None = None):
        self.db = db
        self.mailer = mailer or email_service

    async def get_owned_invoice(self, scope: TenantScope, invoice_id: str) -> Invoice:
        """
        Load an invoice and check it belongs to the caller's tenant.

        Raises InvoiceNotFoundError if it does not exist and ForbiddenError if
        it belongs to another tenant.
        """
        invoice = await invoice_store.get_invoice(invoice_id, self.db)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        if invoice.tenant_id != scope.tenant_id:
            logger.warning(
                "Tenant %s attempted to access invoice %s of another tenant",
                scope.tenant_id,
                invoice_id,
            )
            raise ForbiddenError()
        return invoice

    async def set_status(self, scope: TenantScope, invoice_id: str, new_status: str) -> Invoice:
        """
        Apply a status change.

        ``sent_at`` and ``paid_at`` are stamped only on the first entry into
        sent and paid respectively. Any status may follow any other.
        """
        if isinstance(new_status, InvoiceStatus):
            new_status = new_status.value
        if new_status not in VALID_STATUSES:
            raise ValidationError(f"Invalid status: {new_status}")

        invoice = await self.get_owned_invoice(scope, invoice_id)

        updates = {"status": new_status}
        now = utcnow()
        if new_status == InvoiceStatus.sent.value and invoice.sent_at is None:
            updates["sent_at"] = now
        if new_status == InvoiceStatus.paid.value and invoice.paid_at is None:
            updates["paid_at"] = now

        invoice = await invoice_store.update_invoice(invoice.id, updates, self.db)
        await log_activity(
            self.db,
            tenant_id=scope.tenant_id,
            user_id=scope.user_id,
            action=f"invoice_{new_status}",
            entity_type="invoice",
            entity_id=invoice.id,
            metadata={"invoiceNumber": invoice.invoice_number},
        )
        await self.db.commit()

        logger.info("Invoice %s status set to %s", invoice.invoice_number, new_status)
        return invoice

    async def send(self, scope: TenantScope, invoice_id: str) -> Invoice:
        """
        Email an invoice to its client and mark it sent.

        Nothing is changed unless the email transport reports success.
        """
        invoice = await self.get_owned_invoice(scope, invoice_id)
        if not invoice.client_email:
            raise NoClientEmailError()

        items = await invoice_store.list_invoice_items(invoice.id, self.db)
        company = await get_company(scope.tenant_id, self.db)

        result = await self.mailer.send_invoice_email(InvoiceEmailData.from_invoice(invoice, items, company))
        if not result.success:
            logger.error("Failed to send invoice %s: %s", invoice.invoice_number, result.error)
            raise NotificationUpstreamError(result.error or "Failed to send invoice email")

        updates = {"status": InvoiceStatus.sent.value}
        if invoice.sent_at is None:
            updates["sent_at"] = utcnow()

        invoice = await invoice_store.update_invoice(invoice.id, updates, self.db)
        await log_activity(
            self.db,
            tenant_id=scope.tenant_id,
            user_id=scope.user_id,
            action="invoice_sent",
            entity_type="invoice",
            entity_id=invoice.id,
            metadata={
                "invoiceNumber": invoice.invoice_number,
                "sentTo": invoice.client_email,
                "messageId": result.message_id,
            },
        )
        await self.db.commit()

        logger.info("Invoice %s sent to %s", invoice.invoice_number, invoice.client_email)
        return invoice
