"""
Invoice Generation Service

Turns a free-text work description into a persisted draft invoice:

1. reject a blank description before any external call
2. one language-model call with a fixed JSON output contract
3. parse and strictly validate the returned object
4. compute totals, assign the next invoice number
5. write invoice, items and the activity record in one transaction

Nothing is retried; every failure propagates to the caller.
"""

import json
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.exception_handlers import format_validation_errors
from invoiceai.exceptions import (
    DuplicateResourceError,
    GenerationInvalidError,
    GenerationMalformedError,
    ValidationError,
)
from invoiceai.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from invoiceai.models.types import utcnow
from invoiceai.principal import TenantScope
from invoiceai.schemas.generation import GeneratedInvoice
from invoiceai.services import invoice_store
from invoiceai.services.ai_client import LanguageModelClient
from invoiceai.services.prompts import SYSTEM_PROMPT, build_invoice_prompt
from invoiceai.utils.activity_log import log_activity
from invoiceai.utils.money import MAX_AMOUNT, round_money, to_decimal

logger = logging.getLogger(__name__)


def parse_generated_invoice(raw: str | None) -> GeneratedInvoice:
    """
    Parse and validate raw model output.

    Raises GenerationMalformedError for empty or non-JSON content and
    GenerationInvalidError (with the individual errors) for schema
    violations. Invalid items are never dropped or coerced.
    """
    if not raw or not raw.strip():
        raise GenerationMalformedError("No response from language model")

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GenerationMalformedError(f"Language model returned invalid JSON: {e.msg}") from e

    if not isinstance(parsed, dict):
        raise GenerationMalformedError("Language model did not return a JSON object")

    try:
        return GeneratedInvoice.model_validate(parsed)
    except PydanticValidationError as e:
        errors = format_validation_errors(e)
        logger.warning("Generated invoice failed validation: %s", errors)
        raise GenerationInvalidError(errors=errors) from e


def build_line_items(generated: GeneratedInvoice) -> list[dict]:
    """Line items with quantity, unit price and line total as two-place Decimals."""
    items = []
    for item in generated.items:
        quantity = to_decimal(item.quantity)
        price = to_decimal(item.price)
        items.append(
            {
                "description": item.description,
                "quantity": round_money(quantity),
                "unit_price": round_money(price),
                "total": round_money(quantity * price),
            }
        )
    return items


def items_total(generated: GeneratedInvoice):
    """``round(sum(quantity * price), 2)`` computed in Decimal."""
    return round_money(sum((to_decimal(i.quantity) * to_decimal(i.price) for i in generated.items), to_decimal(0)))


def check_amounts(line_items: list[dict], subtotal) -> None:
    """Raise GenerationInvalidError when a line amount or the invoice total does not fit a stored amount."""
    errors = [
        {
            "field": f"items.{index}.{key}",
            "message": f"Amount must not exceed {MAX_AMOUNT}",
            "type": "amount_out_of_range",
        }
        for index, item in enumerate(line_items)
        for key in ("quantity", "unit_price", "total")
        if item[key] > MAX_AMOUNT
    ]
    if subtotal > MAX_AMOUNT:
        errors.append(
            {"field": "total", "message": f"Invoice total must not exceed {MAX_AMOUNT}", "type": "amount_out_of_range"}
        )
    if errors:
        logger.warning("Generated invoice failed validation: %s", errors)
        raise GenerationInvalidError(errors=errors)


class InvoiceGenerationService:
    """Generates draft invoices from natural-language descriptions."""

    def __init__(self, db: AsyncSession, llm: LanguageModelClient | None = None):
        self.db = db
        self.llm = llm or LanguageModelClient()

    async def generate(
        self,
        scope: TenantScope,
        description: str,
        client_name: str | None = None,
        client_email: str | None = None,
    ) -> tuple[Invoice, list[InvoiceItem]]:
        if not description or not description.strip():
            raise ValidationError("Description is required")

        # Release the connection held by the scope lookup while the model call is in flight
        await self.db.commit()

        raw = await self.llm.complete_json(
            SYSTEM_PROMPT,
            build_invoice_prompt(description.strip(), client_name, client_email),
        )
        generated = parse_generated_invoice(raw)

        line_items = build_line_items(generated)
        subtotal = items_total(generated)
        check_amounts(line_items, subtotal)
        tax = round_money(to_decimal(0))

        try:
            invoice_number = await invoice_store.next_invoice_number(scope.tenant_id, self.db)
            invoice = await invoice_store.create_invoice(
                self.db,
                tenant_id=scope.tenant_id,
                user_id=scope.user_id,
                invoice_number=invoice_number,
                client_name=generated.client.name,
                client_email=generated.client.email or client_email or None,
                client_address=generated.client.address or None,
                status=InvoiceStatus.draft.value,
                currency=generated.currency,
                subtotal=subtotal,
                tax=tax,
                total=subtotal + tax,
                notes=generated.notes or None,
                due_date=generated.due_date,
                issued_date=utcnow(),
            )
            items = await invoice_store.create_invoice_items(invoice.id, line_items, self.db)
            await log_activity(
                self.db,
                tenant_id=scope.tenant_id,
                user_id=scope.user_id,
                action="invoice_created",
                entity_type="invoice",
                entity_id=invoice.id,
                metadata={"invoiceNumber": invoice.invoice_number},
            )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("Invoice number collision for tenant %s: %s", scope.tenant_id, e.orig)
            raise DuplicateResourceError(
                "Invoice number was taken by a concurrent request. Please try again."
            ) from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Generated invoice %s for tenant %s with %d items, total %s %s",
            invoice.invoice_number,
            scope.tenant_id,
            len(items),
            invoice.total,
            invoice.currency,
        )
        return invoice, items
