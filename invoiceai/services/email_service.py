"""
Email Service

Renders invoices as self-contained HTML emails and hands them to the Resend
transport. Expected failures (transport not configured, rejected request,
network error, timeout) are reported through EmailDispatchResult; they are
never raised to the caller.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import httpx
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from invoiceai.config import settings
from invoiceai.models.company import Company
from invoiceai.models.invoice import Invoice, InvoiceItem
from invoiceai.utils.money import currency_symbol, format_money, to_decimal

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "Email service not configured. Please set up Resend integration or add RESEND_API_KEY environment variable."
)


@dataclass
class CompanyDetails:
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    tax_number: str | None = None
    logo_url: str | None = None

    @classmethod
    def from_company(cls, company: Company) -> "CompanyDetails":
        return cls(
            name=company.name,
            email=company.email,
            phone=company.phone,
            address=company.address,
            city=company.city,
            state=company.state,
            postal_code=company.postal_code,
            country=company.country,
            tax_number=company.tax_number,
            logo_url=company.logo_url,
        )

    @property
    def address_line(self) -> str:
        parts = [self.address, self.city, self.state, self.postal_code, self.country]
        return ", ".join(p for p in parts if p)


@dataclass
class InvoiceEmailItem:
    description: str
    quantity: str
    unit_price: str
    total: str


@dataclass
class InvoiceEmailData:
    client_name: str
    client_email: str
    invoice_number: str
    total: str
    currency: str
    subtotal: str | None = None
    tax: str | None = None
    due_date: datetime | None = None
    issued_date: datetime | None = None
    items: list[InvoiceEmailItem] = field(default_factory=list)
    company: CompanyDetails | None = None
    notes: str | None = None

    @classmethod
    def from_invoice(
        cls,
        invoice: Invoice,
        items: list[InvoiceItem],
        company: Company | None,
    ) -> "InvoiceEmailData":
        return cls(
            client_name=invoice.client_name,
            client_email=invoice.client_email,
            invoice_number=invoice.invoice_number,
            subtotal=format_money(invoice.subtotal),
            tax=format_money(invoice.tax),
            total=format_money(invoice.total),
            currency=invoice.currency,
            due_date=invoice.due_date,
            issued_date=invoice.issued_date,
            items=[
                InvoiceEmailItem(
                    description=item.description,
                    quantity=_format_quantity(item.quantity),
                    unit_price=format_money(item.unit_price),
                    total=format_money(item.total),
                )
                for item in items
            ],
            company=CompanyDetails.from_company(company) if company else None,
            notes=invoice.notes,
        )


@dataclass
class EmailDispatchResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


def _format_quantity(value) -> str:
    quantity = to_decimal(value)
    if quantity == quantity.to_integral_value():
        return str(quantity.quantize(Decimal(1)))
    return format(quantity.normalize(), "f")


def _format_due_date(value: datetime) -> str:
    """en-GB long date, e.g. "5 March 2026"."""
    return f"{value.day} {value.strftime('%B %Y')}"


class EmailService:
    """Service for rendering and sending invoice emails"""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        from_email: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize email service with Jinja2 template engine"""
        template_dir = Path(__file__).parent.parent / "templates" / "emails"

        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )

        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.api_url = (api_url or settings.resend_api_url).rstrip("/")
        self.from_email = from_email or settings.resend_from_email
        self.timeout = timeout if timeout is not None else settings.email_timeout_seconds
        self._transport = transport

    def render_invoice_email(self, data: InvoiceEmailData) -> str:
        """
        Render the invoice as a self-contained HTML document.

        The subtotal line appears only when it differs from the total and the
        tax line only when tax is positive.
        """
        company = data.company
        company_name = (company.name if company else None) or "Your Company"
        total = to_decimal(data.total)

        template = self.env.get_template("invoice.html")
        return template.render(
            app_name=settings.app_name,
            invoice_number=data.invoice_number,
            client_name=data.client_name,
            company=company,
            company_name=company_name,
            company_address=company.address_line if company else "",
            items=data.items,
            symbol=currency_symbol(data.currency),
            subtotal=data.subtotal,
            tax=data.tax,
            total=data.total,
            show_subtotal=bool(data.subtotal) and to_decimal(data.subtotal) != total,
            show_tax=bool(data.tax) and to_decimal(data.tax) > 0,
            due_date=_format_due_date(data.due_date) if data.due_date else None,
            notes=data.notes,
        )

    async def send_invoice_email(self, data: InvoiceEmailData) -> EmailDispatchResult:
        """
        Send an invoice email through Resend.

        Args:
            data: Invoice, line items and company identity to render

        Returns:
            EmailDispatchResult: success with the transport's message id, or
            failure with a human-readable reason
        """
        if not self.api_key:
            logger.warning("Invoice %s not sent: email transport not configured", data.invoice_number)
            return EmailDispatchResult(success=False, error=NOT_CONFIGURED_MESSAGE)

        company_name = (data.company.name if data.company else None) or "Your Company"

        try:
            html = self.render_invoice_email(data)
        except TemplateError as e:
            logger.error(f"Failed to render invoice email: {e}")
            return EmailDispatchResult(success=False, error=f"Failed to render invoice email: {e}")

        payload = {
            "from": self.from_email,
            "to": [data.client_email],
            "subject": f"Invoice {data.invoice_number} from {company_name}",
            "html": html,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_url}/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.TimeoutException:
            logger.warning("Email transport timed out sending invoice %s", data.invoice_number)
            return EmailDispatchResult(success=False, error="Email transport timed out")
        except httpx.RequestError as e:
            logger.warning("Email transport request failed for invoice %s: %s", data.invoice_number, e)
            return EmailDispatchResult(success=False, error=f"Email transport request failed: {e}")

        if not 200 <= response.status_code < 300:
            reason = _error_message(response)
            logger.warning("Email transport rejected invoice %s: %s", data.invoice_number, reason)
            return EmailDispatchResult(success=False, error=reason)

        message_id = _message_id(response)
        logger.info("Invoice %s emailed to %s (message %s)", data.invoice_number, data.client_email, message_id)
        return EmailDispatchResult(success=True, message_id=message_id)


def _message_id(response: httpx.Response) -> str | None:
    try:
        return response.json().get("id")
    except (ValueError, AttributeError):
        return None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Email transport returned HTTP {response.status_code}"


# Singleton instance
email_service = EmailService()
