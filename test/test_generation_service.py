"""
Tests for InvoiceGenerationService

The language model is replaced with an AsyncMock; persistence runs against
the in-memory SQLite database.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from invoiceai.exceptions import (
    DuplicateResourceError,
    GenerationInvalidError,
    GenerationMalformedError,
    GenerationUpstreamError,
    ValidationError,
)
from invoiceai.models.activity_log import ActivityLog
from invoiceai.models.invoice import Invoice, InvoiceItem
from invoiceai.services import invoice_store
from invoiceai.services.generation_service import InvoiceGenerationService
from utils.mocks import WEBSITE_DESCRIPTION, WEBSITE_INVOICE, make_llm


async def _count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestGenerate:
    async def test_scenario_creates_draft_with_totals(self, test_db, scope_a):
        """Test generating the website scenario invoice"""
        service = InvoiceGenerationService(test_db, llm=make_llm())

        invoice, items = await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert invoice.tenant_id == scope_a.tenant_id
        assert invoice.user_id == scope_a.user_id
        assert invoice.status == "draft"
        assert invoice.invoice_number == "INV-0001"
        assert invoice.subtotal == Decimal("600.00")
        assert invoice.total == Decimal("600.00")
        assert invoice.tax == Decimal("0.00")
        assert invoice.currency == "GBP"
        assert invoice.client_name == "Acme Ltd"
        assert invoice.due_date == datetime(2026, 11, 30, tzinfo=timezone.utc)
        assert invoice.issued_date is not None
        assert invoice.sent_at is None and invoice.paid_at is None
        assert [item.total for item in items] == [Decimal("500.00"), Decimal("100.00")]

    async def test_prompt_contains_description_and_hints(self, test_db, scope_a):
        """Test prompt contents"""
        llm = make_llm()
        service = InvoiceGenerationService(test_db, llm=llm)

        await service.generate(scope_a, WEBSITE_DESCRIPTION, client_name="Acme Ltd", client_email="ap@acme.test")

        llm.complete_json.assert_awaited_once()
        system_prompt, user_prompt = llm.complete_json.await_args.args
        assert "JSON" in system_prompt
        assert WEBSITE_DESCRIPTION in user_prompt
        assert "Client Name: Acme Ltd" in user_prompt
        assert "Client Email: ap@acme.test" in user_prompt

    async def test_items_are_persisted_in_order(self, test_db, scope_a):
        """Test item order"""
        service = InvoiceGenerationService(test_db, llm=make_llm())

        invoice, _ = await service.generate(scope_a, WEBSITE_DESCRIPTION)

        stored = await invoice_store.list_invoice_items(invoice.id, test_db)
        assert [item.description for item in stored] == ["Website build", "Training"]
        assert sum(item.total for item in stored) == invoice.total

    async def test_activity_is_logged(self, test_db, scope_a):
        """Test the invoice_created activity entry"""
        service = InvoiceGenerationService(test_db, llm=make_llm())

        invoice, _ = await service.generate(scope_a, WEBSITE_DESCRIPTION)

        result = await test_db.execute(select(ActivityLog).where(ActivityLog.entity_id == invoice.id))
        entry = result.scalars().one()
        assert entry.action == "invoice_created"
        assert entry.entity_type == "invoice"
        assert entry.tenant_id == scope_a.tenant_id
        assert json.loads(entry.metadata_) == {"invoiceNumber": "INV-0001"}

    async def test_numbers_are_sequential_per_tenant(self, test_db, scope_a, scope_b):
        """Test per-tenant invoice numbering"""
        service = InvoiceGenerationService(test_db, llm=make_llm())

        first, _ = await service.generate(scope_a, WEBSITE_DESCRIPTION)
        second, _ = await service.generate(scope_a, WEBSITE_DESCRIPTION)
        other, _ = await service.generate(scope_b, WEBSITE_DESCRIPTION)

        assert first.invoice_number == "INV-0001"
        assert second.invoice_number == "INV-0002"
        assert other.invoice_number == "INV-0001"

    async def test_client_email_hint_used_when_model_omits_it(self, test_db, scope_a):
        """Test client email fallback to the hint"""
        payload = dict(WEBSITE_INVOICE, client={"name": "Acme Ltd"})
        service = InvoiceGenerationService(test_db, llm=make_llm(payload))

        invoice, _ = await service.generate(scope_a, WEBSITE_DESCRIPTION, client_email="hint@acme.test")

        assert invoice.client_email == "hint@acme.test"

    async def test_missing_due_date(self, test_db, scope_a):
        """Test generation without a due date"""
        payload = {k: v for k, v in WEBSITE_INVOICE.items() if k != "due_date"}
        service = InvoiceGenerationService(test_db, llm=make_llm(payload))

        invoice, _ = await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert invoice.due_date is None


class TestGenerateFailures:
    @pytest.mark.parametrize("description", ["", "   ", "\n\t"])
    async def test_blank_description_makes_no_model_call(self, test_db, scope_a, description):
        """Test blank descriptions"""
        llm = make_llm()
        service = InvoiceGenerationService(test_db, llm=llm)

        with pytest.raises(ValidationError) as exc_info:
            await service.generate(scope_a, description)

        assert exc_info.value.status_code == 400
        llm.complete_json.assert_not_awaited()
        assert await _count(test_db, Invoice) == 0

    async def test_missing_items_persists_nothing(self, test_db, scope_a):
        """Test that invalid output writes nothing"""
        payload = {k: v for k, v in WEBSITE_INVOICE.items() if k != "items"}
        service = InvoiceGenerationService(test_db, llm=make_llm(payload))

        with pytest.raises(GenerationInvalidError) as exc_info:
            await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert any(error["field"] == "items" for error in exc_info.value.errors)
        assert await _count(test_db, Invoice) == 0
        assert await _count(test_db, InvoiceItem) == 0
        assert await _count(test_db, ActivityLog) == 0

    async def test_malformed_output_persists_nothing(self, test_db, scope_a):
        """Test that malformed output writes nothing"""
        service = InvoiceGenerationService(test_db, llm=make_llm("not json"))

        with pytest.raises(GenerationMalformedError):
            await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert await _count(test_db, Invoice) == 0

    async def test_upstream_failure_propagates(self, test_db, scope_a):
        """Test model failure propagation"""
        llm = make_llm(side_effect=GenerationUpstreamError("Language model request timed out"))
        service = InvoiceGenerationService(test_db, llm=llm)

        with pytest.raises(GenerationUpstreamError):
            await service.generate(scope_a, WEBSITE_DESCRIPTION)

        llm.complete_json.assert_awaited_once()
        assert await _count(test_db, Invoice) == 0

    async def test_number_collision_rolls_back(self, test_db, scope_a, monkeypatch):
        """Test rollback on an invoice number collision"""
        service = InvoiceGenerationService(test_db, llm=make_llm())
        await service.generate(scope_a, WEBSITE_DESCRIPTION)

        async def stale_number(tenant_id, db):
            return "INV-0001"

        monkeypatch.setattr(invoice_store, "next_invoice_number", stale_number)

        with pytest.raises(DuplicateResourceError) as exc_info:
            await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert exc_info.value.status_code == 409
        assert await _count(test_db, Invoice) == 1
        assert await _count(test_db, InvoiceItem) == 2
        assert await _count(test_db, ActivityLog) == 1


class TestGeneratedAmounts:
    @pytest.mark.parametrize("price", ["Infinity", "-Infinity", "NaN", "1e400"])
    async def test_non_finite_price_is_invalid(self, test_db, scope_a, price):
        """Infinite or NaN amounts are validation errors, not crashes"""
        raw = (
            '{"client": {"name": "Acme"}, "items": [{"description": "Website", "quantity": 1, "price": %s}], '
            '"currency": "GBP"}' % price
        )
        service = InvoiceGenerationService(test_db, llm=make_llm(raw))

        with pytest.raises(GenerationInvalidError) as exc_info:
            await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert exc_info.value.errors[0]["field"] == "items.0.price"
        assert await _count(test_db, Invoice) == 0

    async def test_price_beyond_storable_range(self, test_db, scope_a):
        """A price that cannot be stored is rejected by the schema"""
        payload = dict(WEBSITE_INVOICE, items=[{"description": "Tower", "quantity": 1, "price": 1e9}])
        service = InvoiceGenerationService(test_db, llm=make_llm(payload))

        with pytest.raises(GenerationInvalidError) as exc_info:
            await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert exc_info.value.errors[0]["field"] == "items.0.price"

    async def test_line_total_beyond_storable_range(self, test_db, scope_a):
        """Each factor fits but their product does not"""
        payload = dict(WEBSITE_INVOICE, items=[{"description": "Bulk", "quantity": 50000, "price": 50000}])
        service = InvoiceGenerationService(test_db, llm=make_llm(payload))

        with pytest.raises(GenerationInvalidError) as exc_info:
            await service.generate(scope_a, WEBSITE_DESCRIPTION)

        fields = [error["field"] for error in exc_info.value.errors]
        assert fields == ["items.0.total", "total"]
        assert exc_info.value.status_code == 500
        assert await _count(test_db, Invoice) == 0

    async def test_invoice_total_beyond_storable_range(self, test_db, scope_a):
        """Line totals fit individually but their sum does not"""
        item = {"description": "Phase", "quantity": 1, "price": 60000000}
        payload = dict(WEBSITE_INVOICE, items=[item, item])
        service = InvoiceGenerationService(test_db, llm=make_llm(payload))

        with pytest.raises(GenerationInvalidError) as exc_info:
            await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert [error["field"] for error in exc_info.value.errors] == ["total"]


class TestConnectionUse:
    async def test_model_call_runs_outside_a_transaction(self, test_db, scope_a):
        """The read transaction from the scope lookup is closed before the model call"""
        await test_db.execute(select(Invoice))
        assert test_db.in_transaction()

        seen = []

        async def complete_json(system_prompt, user_prompt):
            seen.append(test_db.in_transaction())
            return json.dumps(WEBSITE_INVOICE)

        llm = make_llm()
        llm.complete_json.side_effect = complete_json
        service = InvoiceGenerationService(test_db, llm=llm)

        invoice, _ = await service.generate(scope_a, WEBSITE_DESCRIPTION)

        assert seen == [False]
        assert invoice.invoice_number == "INV-0001"
