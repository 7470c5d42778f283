from .invoice import build_invoice_pdf
from .porting import build_porting_pdf
from .quote import build_quote_pdf
from .sla import build_sla_pdf

__all__ = ["build_invoice_pdf", "build_porting_pdf", "build_quote_pdf", "build_sla_pdf"]
