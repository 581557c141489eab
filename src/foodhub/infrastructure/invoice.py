"""Plain-text invoice rendering and a static party directory."""

from __future__ import annotations

from foodhub.application.ports import InvoiceDTO, InvoiceRenderer, PartyDirectory


class StaticPartyDirectory(PartyDirectory):
    """Looks names up in a fixed mapping; unknown ids are shown as-is."""

    def __init__(self, names: dict[str, str] | None = None) -> None:
        self._names = dict(names or {})

    def display_name(self, user_id: str) -> str:
        return self._names.get(user_id, user_id)


class TextInvoiceRenderer(InvoiceRenderer):

    def render(self, invoice: InvoiceDTO) -> str:
        out = [
            f"INVOICE {invoice.order_number}",
            f"Date:     {invoice.issued_on}",
            f"Status:   {invoice.status}",
            f"Supplier: {invoice.supplier_name}",
            f"Bill to:  {invoice.shopkeeper_name}",
            "",
            f"  {'Product':<24} {'Unit':<8} {'Qty':>5} {'Price':>10} {'Total':>10}",
            f"  {'-' * 61}",
        ]
        for line in invoice.lines:
            out.append(
                f"  {line.product_name:<24} {line.unit:<8} {line.quantity:>5} "
                f"{line.price:>10} {line.line_total:>10}"
            )
            if line.returned:
                out.append(f"  {'':<24} {'':<8} {-line.returned:>5} (returned)")
        out.append(f"  {'-' * 61}")
        out.append(f"  {'Total':<40} {invoice.total_amount:>20}")
        out.append("")
        out.append(f"Payment: {invoice.payment_method} ({invoice.payment_status})")
        if invoice.notes:
            out.append(f"Notes:   {invoice.notes}")
        return "\n".join(out) + "\n"
