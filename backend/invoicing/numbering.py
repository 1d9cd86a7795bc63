"""Invoice numbers: AAL-AR-<YY>-<NNNN>"""
from backend.core.numbering import year_suffix, next_number

INVOICE_NUMBER_WIDTH = 4


def invoice_number_prefix(today=None):
    return f"AAL-AR-{year_suffix(today)}-"


def generate_invoice_number(offset=0, today=None):
    from .models import Invoice

    prefix = invoice_number_prefix(today)
    return next_number(Invoice.objects.all(), 'number', prefix, INVOICE_NUMBER_WIDTH, offset=offset)
