"""InvoiceAI: multi-tenant invoicing backend with AI-assisted invoice generation."""

__version__ = "1.0.0"
