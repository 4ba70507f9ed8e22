"""Render the selected variant of a quote as a one-or-more page PDF."""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from .coefficients import fence_label, terrain_label
from .models import Quote
from .regions import DEFAULT_TERMS_TEMPLATE
from .reporting import CATEGORY_HEADINGS, format_money, group_items

LOGGER = logging.getLogger(__name__)

MARGIN = 54
LINE_HEIGHT = 14


class _PageWriter:
    """Tracks the cursor and starts a new page when the bottom margin is reached."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.width, self.height = letter
        self.y = self.height - MARGIN
        self.pages = 1

    def ensure_room(self, lines: int = 1) -> None:
        if self.y - lines * LINE_HEIGHT < MARGIN:
            self.pdf.showPage()
            self.pages += 1
            self.y = self.height - MARGIN

    def text(self, value: str, font: str = "Helvetica", size: int = 10, x: float = MARGIN) -> None:
        self.ensure_room()
        self.pdf.setFont(font, size)
        self.pdf.drawString(x, self.y, value)
        self.y -= LINE_HEIGHT

    def row(self, cells, positions, font: str = "Helvetica", size: int = 10) -> None:
        self.ensure_room()
        self.pdf.setFont(font, size)
        for (value, right_aligned), x in zip(cells, positions):
            if right_aligned:
                self.pdf.drawRightString(x, self.y, value)
            else:
                self.pdf.drawString(x, self.y, value)
        self.y -= LINE_HEIGHT

    def gap(self, lines: float = 0.5) -> None:
        self.y -= LINE_HEIGHT * lines


def write_quote_pdf(
    quote: Quote,
    path: Path,
    symbol: str = "$",
    company_name: Optional[str] = None,
    terms: Optional[str] = None,
) -> Path:
    """Write the quote's selected variant to ``path`` and return the path."""

    variant = quote.variant()
    inputs = quote.inputs
    path.parent.mkdir(parents=True, exist_ok=True)
    pdf = canvas.Canvas(str(path), pagesize=letter)
    pdf.setTitle(f"{fence_label(inputs.fence_type)} fence quote")
    page = _PageWriter(pdf)
    right = page.width - MARGIN
    columns = (MARGIN, right - 200, right - 90, right)

    if company_name:
        page.text(company_name, font="Helvetica-Bold", size=16)
    page.text("Fence Quote", font="Helvetica-Bold", size=14)
    page.gap()
    if quote.client_name:
        page.text(f"Prepared for: {quote.client_name}")
    if quote.client_address:
        page.text(quote.client_address)
    page.text(
        f"{fence_label(inputs.fence_type)}, {inputs.length:g} ft at {inputs.height:g} ft high, "
        f"{terrain_label(inputs.terrain).lower()} terrain"
    )
    gates = inputs.gates_standard + inputs.gates_large
    if gates:
        page.text(f"Gates: {inputs.gates_standard} standard, {inputs.gates_large} large")
    if inputs.remove_old:
        page.text("Includes removal of the existing fence")
    page.gap()

    for category, items in group_items(variant).items():
        page.ensure_room(3)
        page.text(CATEGORY_HEADINGS[category], font="Helvetica-Bold", size=11)
        for item in items:
            page.row(
                [
                    (item.name, False),
                    (f"{item.qty:g} {item.unit}", True),
                    (format_money(item.unit_price_cents, symbol), True),
                    (format_money(item.total_cents, symbol), True),
                ],
                columns,
            )
        page.gap()

    page.ensure_room(5)
    totals = [
        ("Subtotal", variant.subtotal),
        (f"Markup ({variant.markup_percent:g}%)", variant.markup_amount),
        ("Tax", variant.tax_amount),
    ]
    for label, amount in totals:
        page.row([(label, True), (format_money(amount, symbol), True)], (columns[2], columns[3]))
    page.row(
        [("Total", True), (format_money(variant.total, symbol), True)],
        (columns[2], columns[3]),
        font="Helvetica-Bold",
        size=12,
    )

    if inputs.notes:
        page.gap()
        page.text("Notes", font="Helvetica-Bold", size=11)
        for line in textwrap.wrap(inputs.notes, width=95):
            page.text(line, size=9)

    page.gap()
    for line in textwrap.wrap(terms or DEFAULT_TERMS_TEMPLATE, width=95):
        page.text(line, size=9)

    pdf.showPage()
    pdf.save()
    LOGGER.debug("Wrote %d page quote PDF to %s", page.pages, path)
    return path


__all__ = ["write_quote_pdf"]
