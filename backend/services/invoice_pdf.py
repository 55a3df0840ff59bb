"""
Numeris - Invoice PDF

Invoice -> HTML (Jinja2) -> PDF (WeasyPrint).
"""

import logging
from pathlib import Path

from jinja2 import Environment, select_autoescape

from errors import ValidationError
from models.invoice import Invoice, parse_date

logger = logging.getLogger("invoice_pdf")

OUTPUT_DATE_FORMAT = "%b %d, %Y"

INVOICE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Invoice #{{ invoice.invoice_number }}</title>
<style>
  @page { size: A4; margin: 10mm; }
  body { font-family: Arial, Helvetica, sans-serif; font-size: 11pt; color: #212529; }
  h1 { text-align: center; font-size: 16pt; }
  h2 { font-size: 12pt; margin: 12px 0 4px; }
  table.items { width: 100%; border-collapse: collapse; margin-top: 8px; }
  table.items th { background: #dcdcdc; border: 1px solid #000; padding: 4px; }
  table.items td { border: 1px solid #000; padding: 4px; }
  td.num { text-align: right; }
  td.qty { text-align: center; }
  .total { text-align: right; font-weight: bold; margin-top: 10px; }
  .block { white-space: pre-line; }
</style>
</head>
<body>
<h1>Invoice #{{ invoice.invoice_number }}</h1>

<h2>Sender:</h2>
<div class="block">{{ invoice.sender.name }}
{{ invoice.sender.address }}
{{ invoice.sender.email }}</div>

<h2>Customer:</h2>
<div class="block">{{ invoice.customer.name }}
{{ invoice.customer.address }}
{{ invoice.customer.email }}</div>

<h2>Invoice Details:</h2>
<div>Issue Date: {{ issue_date }}</div>
<div>Due Date: {{ due_date }}</div>
<div>Billing Currency: {{ invoice.billing_currency }}</div>

<table class="items">
  <tr><th>Description</th><th>Quantity</th><th>Unit Price</th><th>Total Price</th></tr>
  {% for item in invoice.items %}
  <tr>
    <td>{{ item.description }}</td>
    <td class="qty">{{ item.quantity }}</td>
    <td class="num">{{ "%.2f"|format(item.unit_price) }}</td>
    <td class="num">{{ "%.2f"|format(item.total_price) }}</td>
  </tr>
  {% endfor %}
</table>
{% if invoice.discount %}<div class="total">Discount: {{ "%.2f"|format(invoice.discount) }}%</div>{% endif %}
<div class="total">Total Amount Due: {{ "%.2f"|format(invoice.total_amount_due) }}</div>

<h2>Payment Information:</h2>
<div class="block">Account Name: {{ invoice.payment_info.account_name }}
Account Number: {{ invoice.payment_info.account_number }}
Routing Number: {{ invoice.payment_info.routing_number }}
Bank Name: {{ invoice.payment_info.bank_name }}</div>

{% if invoice.notes %}
<h2>Notes:</h2>
<div class="block">{{ invoice.notes }}</div>
{% endif %}
</body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default_for_string=True))
_template = _env.from_string(INVOICE_TEMPLATE)


def format_date(value: str) -> str:
    return parse_date(value).strftime(OUTPUT_DATE_FORMAT)


def render_invoice_html(invoice: Invoice) -> str:
    try:
        issue_date = format_date(invoice.issue_date)
        due_date = format_date(invoice.due_date)
    except ValueError as e:
        raise ValidationError(f"invalid invoice date format: {e}")
    return _template.render(invoice=invoice, issue_date=issue_date, due_date=due_date)


def generate_invoice_pdf(invoice: Invoice, file_path: str) -> str:
    """Write the invoice PDF to `file_path` and return the path."""
    # Import ici: WeasyPrint charge pango/cairo au premier import
    from weasyprint import HTML

    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    HTML(string=render_invoice_html(invoice)).write_pdf(str(path))
    logger.info(f"Invoice PDF written: {path}")
    return str(path)
