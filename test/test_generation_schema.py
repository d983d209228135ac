"""
Tests for parsing and validating language-model output
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from invoiceai.exceptions import GenerationInvalidError, GenerationMalformedError
from invoiceai.services.generation_service import build_line_items, items_total, parse_generated_invoice
from utils.mocks import WEBSITE_INVOICE


def _with(**changes) -> str:
    payload = json.loads(json.dumps(WEBSITE_INVOICE))
    payload.update(changes)
    return json.dumps(payload)


def _error_fields(exc_info) -> set[str]:
    return {error["field"] for error in exc_info.value.errors}


class TestMalformedOutput:
    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_content(self, raw):
        """Test empty model output"""
        with pytest.raises(GenerationMalformedError) as exc_info:
            parse_generated_invoice(raw)
        assert exc_info.value.message == "No response from language model"

    def test_not_json(self):
        """Test output that is not JSON"""
        with pytest.raises(GenerationMalformedError):
            parse_generated_invoice("Sure! Here is your invoice: {client: ...")

    def test_json_array_is_not_an_invoice(self):
        """Test a JSON array instead of an object"""
        with pytest.raises(GenerationMalformedError):
            parse_generated_invoice(json.dumps([WEBSITE_INVOICE]))

    def test_malformed_is_a_500(self):
        """Test malformed output status code"""
        with pytest.raises(GenerationMalformedError) as exc_info:
            parse_generated_invoice("{")
        assert exc_info.value.status_code == 500


class TestSchemaValidation:
    def test_valid_invoice(self):
        """Test a valid generated invoice"""
        invoice = parse_generated_invoice(json.dumps(WEBSITE_INVOICE))

        assert invoice.client.name == "Acme Ltd"
        assert invoice.client.email == "accounts@acme.test"
        assert [item.description for item in invoice.items] == ["Website build", "Training"]
        assert invoice.currency == "GBP"
        assert invoice.due_date == datetime(2026, 11, 30, tzinfo=timezone.utc)

    def test_missing_items(self):
        """Test output without items"""
        payload = dict(WEBSITE_INVOICE)
        del payload["items"]

        with pytest.raises(GenerationInvalidError) as exc_info:
            parse_generated_invoice(json.dumps(payload))

        assert "items" in _error_fields(exc_info)
        assert exc_info.value.message == "Generated invoice failed validation"

    def test_empty_items(self):
        """Test an empty items list"""
        with pytest.raises(GenerationInvalidError) as exc_info:
            parse_generated_invoice(_with(items=[]))
        assert "items" in _error_fields(exc_info)

    def test_missing_client_name(self):
        """Test output without a client name"""
        with pytest.raises(GenerationInvalidError) as exc_info:
            parse_generated_invoice(_with(client={"email": "a@b.test"}))
        assert "client.name" in _error_fields(exc_info)

    def test_blank_client_name(self):
        """Test a blank client name"""
        with pytest.raises(GenerationInvalidError):
            parse_generated_invoice(_with(client={"name": "   "}))

    @pytest.mark.parametrize("quantity", [0, -1, -0.5])
    def test_non_positive_quantity(self, quantity):
        """Test zero and negative quantities"""
        items = [{"description": "Work", "quantity": quantity, "price": 10}]
        with pytest.raises(GenerationInvalidError) as exc_info:
            parse_generated_invoice(_with(items=items))
        assert "items.0.quantity" in _error_fields(exc_info)

    def test_non_positive_price(self):
        """Test zero and negative prices"""
        items = [{"description": "Work", "quantity": 1, "price": 0}]
        with pytest.raises(GenerationInvalidError) as exc_info:
            parse_generated_invoice(_with(items=items))
        assert "items.0.price" in _error_fields(exc_info)

    def test_numeric_strings_are_not_coerced(self):
        """Test that numeric strings are rejected"""
        items = [{"description": "Work", "quantity": "2", "price": "50"}]
        with pytest.raises(GenerationInvalidError) as exc_info:
            parse_generated_invoice(_with(items=items))
        assert {"items.0.quantity", "items.0.price"} <= _error_fields(exc_info)

    def test_one_bad_item_rejects_the_whole_invoice(self):
        """Test that a single bad item fails the invoice"""
        items = [
            {"description": "Good", "quantity": 1, "price": 10},
            {"description": "Bad", "quantity": 1, "price": -10},
        ]
        with pytest.raises(GenerationInvalidError):
            parse_generated_invoice(_with(items=items))

    def test_currency_defaults_to_gbp(self):
        """Test currency default"""
        payload = dict(WEBSITE_INVOICE)
        del payload["currency"]
        assert parse_generated_invoice(json.dumps(payload)).currency == "GBP"
        assert parse_generated_invoice(_with(currency=None)).currency == "GBP"

    def test_currency_is_uppercased(self):
        """Test currency normalization"""
        assert parse_generated_invoice(_with(currency="eur")).currency == "EUR"

    def test_invalid_currency(self):
        """Test an invalid currency code"""
        with pytest.raises(GenerationInvalidError):
            parse_generated_invoice(_with(currency="pounds"))

    def test_invalid_due_date(self):
        """Test an unparsable due date"""
        with pytest.raises(GenerationInvalidError) as exc_info:
            parse_generated_invoice(_with(due_date="end of the month"))
        assert "due_date" in _error_fields(exc_info)

    def test_blank_optional_fields(self):
        """Test blank optional fields"""
        invoice = parse_generated_invoice(_with(due_date="", client={"name": "Acme", "email": ""}))
        assert invoice.due_date is None
        assert invoice.client.email is None

    def test_unknown_keys_are_ignored(self):
        """Test that unknown keys are ignored"""
        invoice = parse_generated_invoice(_with(tax_rate=20))
        assert not hasattr(invoice, "tax_rate")


class TestTotals:
    def test_scenario_totals(self):
        """Test totals for the website scenario"""
        invoice = parse_generated_invoice(json.dumps(WEBSITE_INVOICE))

        items = build_line_items(invoice)

        assert [item["total"] for item in items] == [Decimal("500.00"), Decimal("100.00")]
        assert items[1]["quantity"] == Decimal("2.00")
        assert items[1]["unit_price"] == Decimal("50.00")
        assert items_total(invoice) == Decimal("600.00")

    def test_float_noise_is_rounded(self):
        """Test that float noise does not reach totals"""
        items = [
            {"description": "A", "quantity": 3, "price": 0.1},
            {"description": "B", "quantity": 1, "price": 0.2},
        ]
        invoice = parse_generated_invoice(_with(items=items))
        assert items_total(invoice) == Decimal("0.50")

    def test_half_up_rounding(self):
        """Test half-up rounding"""
        items = [{"description": "A", "quantity": 1.5, "price": 0.33}]
        invoice = parse_generated_invoice(_with(items=items))
        # 1.5 * 0.33 = 0.495
        assert items_total(invoice) == Decimal("0.50")
