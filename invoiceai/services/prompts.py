"""
Language-model prompts for invoice generation.

The output contract is a module-level global so it can be updated without
touching the prompt builders.
"""

# ── OUTPUT CONTRACT ────────────────────────────────────────────────────────────
# Exactly one JSON object. Optional fields may be omitted or null.

INVOICE_JSON_SCHEMA = """
{
  "client": { "name": "string", "email": "string (optional)", "address": "string (optional)" },
  "items": [{ "description": "string", "quantity": number, "price": number }],
  "currency": "GBP",
  "notes": "string (optional)",
  "due_date": "YYYY-MM-DD (optional)"
}
"""

DEFAULT_CURRENCY = "GBP"

SYSTEM_PROMPT = f"""You are an invoice-generation AI model. Extract structured invoice details from natural language descriptions.
Output ONLY valid JSON matching this structure:
{INVOICE_JSON_SCHEMA}
Extract line items with descriptions, quantities, and prices. Quantities and prices must be positive numbers.
If currency is mentioned, use its ISO 4217 code; otherwise default to {DEFAULT_CURRENCY}."""


def build_invoice_prompt(
    description: str,
    client_name: str | None = None,
    client_email: str | None = None,
) -> str:
    """Build the user message embedding the work description and optional client hints."""
    lines = [
        "Generate an invoice from this description:",
        "",
        f"Description: {description}",
    ]
    if client_name:
        lines.append(f"Client Name: {client_name}")
    if client_email:
        lines.append(f"Client Email: {client_email}")
    lines += ["", "Output the invoice data as JSON."]
    return "\n".join(lines)
