"""
InvoiceRenderer

Lays out a booking as an invoice and writes it as a PDF:
- Issuer header, customer block, line-item table, grand total
- File name derived from the customer-name slug and the order id
- Atomic write (temp file + replace) so readers never see a partial file
- Deterministic bytes for identical inputs, so regeneration is idempotent

The file is a cache of the booking row; ``ensure`` re-renders it whenever it
has gone missing from storage.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
import logging
import os
from pathlib import Path
import re
import tempfile
import textwrap
from typing import Iterable, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..core.config import settings
from ..core.constants import DEFAULT_CUSTOMER_TYPE, INVOICE_SUFFIX
from ..core.exceptions import ServiceException
from ..domain.booking_draft import CustomerSnapshot, LineItem, compute_total, to_money
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")

# A4 at 100 dpi
PAGE_SIZE = (827, 1169)
PAGE_RESOLUTION = 100.0
MARGIN = 60
TITLE_FONT_SIZE = 30
HEADING_FONT_SIZE = 16
BODY_FONT_SIZE = 13
LINE_SPACING = 20
WRAP_WIDTH = 80

# x offsets of the Product / Quantity / Price / Total columns
COLUMN_X = (MARGIN, 470, 570, 680)
TABLE_HEADERS = ("Product", "Quantity", "Price", "Total")


def slugify_customer_name(name: Optional[str]) -> str:
    """Lowercase, collapse every run of non-alphanumerics to '_', trim underscores."""
    return _NON_SLUG_RE.sub("_", (name or "").lower()).strip("_")


def artifact_filename(customer_name: Optional[str], order_id: str) -> str:
    return f"{slugify_customer_name(customer_name)}-{order_id}{INVOICE_SUFFIX}"


@dataclass(frozen=True)
class InvoiceDocument:
    """Everything printed on an invoice, as text."""

    order_id: str
    title: str
    header_lines: Tuple[str, ...]
    customer_lines: Tuple[str, ...]
    rows: Tuple[Tuple[str, str, str, str], ...]
    grand_total: str
    total_line: str
    issued_at: datetime


@dataclass(frozen=True)
class InvoiceArtifact:
    path: Path
    filename: str
    total: str
    regenerated: bool = field(default=False, compare=False)


class InvoiceRenderer:
    def __init__(
        self,
        storage_dir: Optional[Path] = None,
        *,
        issuer_name: Optional[str] = None,
        issuer_address: Optional[str] = None,
        issuer_phone: Optional[str] = None,
        issuer_email: Optional[str] = None,
        currency_prefix: Optional[str] = None,
    ) -> None:
        self.storage_dir = Path(storage_dir or settings.invoice_storage_dir)
        self.issuer_name = issuer_name or settings.issuer_name
        self.issuer_address = issuer_address or settings.issuer_address
        self.issuer_phone = issuer_phone or settings.issuer_phone
        self.issuer_email = issuer_email or settings.issuer_email
        self.currency_prefix = (
            settings.currency_prefix if currency_prefix is None else currency_prefix
        )

    # Naming

    @staticmethod
    def slugify_customer_name(name: Optional[str]) -> str:
        return slugify_customer_name(name)

    def artifact_filename(self, customer_name: Optional[str], order_id: str) -> str:
        return artifact_filename(customer_name, order_id)

    def artifact_path(self, customer_name: Optional[str], order_id: str) -> Path:
        return self.storage_dir / artifact_filename(customer_name, order_id)

    # Layout

    def money(self, value: Decimal) -> str:
        return f"{self.currency_prefix}{value:.2f}"

    def build_document(
        self,
        order_id: str,
        snapshot: CustomerSnapshot,
        customer_type: Optional[str],
        items: Sequence[LineItem],
        issued_at: datetime,
    ) -> InvoiceDocument:
        total = compute_total(items)
        grand_total = f"{total:.2f}"

        customer_lines = (
            f"Name: {snapshot.customer_name or 'N/A'}",
            f"Contact: {snapshot.mobile_number or 'N/A'}",
            f"Address: {snapshot.address or 'N/A'}",
            f"District: {snapshot.district or 'N/A'}",
            f"State: {snapshot.state or 'N/A'}",
            f"Customer Type: {customer_type or DEFAULT_CUSTOMER_TYPE}",
            f"Order ID: {order_id}",
        )

        rows = []
        for item in items:
            name = item.productname or f"{item.product_type} #{item.product_id}"
            if item.discount:
                name = f"{name} ({item.discount.normalize():f}% off)"
            rows.append(
                (name, str(item.quantity), self.money(item.price), self.money(item.line_total))
            )

        return InvoiceDocument(
            order_id=order_id,
            title="Invoice",
            header_lines=(
                self.issuer_name,
                self.issuer_address,
                f"Phone: {self.issuer_phone}",
                f"Email: {self.issuer_email}",
            ),
            customer_lines=customer_lines,
            rows=tuple(rows),
            grand_total=grand_total,
            total_line=f"Total: {self.currency_prefix}{grand_total}",
            issued_at=issued_at,
        )

    # Rendering

    def render(
        self,
        order_id: str,
        snapshot: CustomerSnapshot,
        customer_type: Optional[str],
        items: Sequence[LineItem],
        issued_at: datetime,
        *,
        reason: str = "created",
    ) -> InvoiceArtifact:
        """
        Render and store the invoice, overwriting any previous file for the order.

        Raises:
            ServiceException: If the document cannot be drawn or written
        """
        document = self.build_document(order_id, snapshot, customer_type, items, issued_at)
        filename = artifact_filename(snapshot.customer_name, order_id)
        target = self.storage_dir / filename

        pages = self._draw_pages(document)
        self._write_pdf(pages, target, document)

        prometheus_metrics.record_invoice_render(reason)
        logger.info("Rendered invoice %s (%s)", filename, reason)
        return InvoiceArtifact(
            path=target,
            filename=filename,
            total=document.grand_total,
            regenerated=reason != "created",
        )

    def render_booking(self, booking: Booking, *, reason: str = "regenerated") -> InvoiceArtifact:
        """Render from the stored booking row."""
        snapshot = CustomerSnapshot(
            customer_name=booking.customer_name,
            address=booking.address,
            mobile_number=booking.mobile_number,
            email=booking.email,
            district=booking.district,
            state=booking.state,
        )
        items = [LineItem.from_json(entry) for entry in booking.products or []]
        return self.render(
            booking.order_id,
            snapshot,
            booking.customer_type,
            items,
            booking.created_at,
            reason=reason,
        )

    def ensure(self, booking: Booking) -> InvoiceArtifact:
        """
        Cached artifact for a booking, re-rendered from the row when missing.

        The returned path may differ from ``booking.pdf``; callers persist it.
        """
        filename = artifact_filename(booking.customer_name, booking.order_id)
        total = f"{to_money(Decimal(booking.total or 0)):.2f}"

        if booking.pdf and Path(booking.pdf).is_file():
            return InvoiceArtifact(path=Path(booking.pdf), filename=filename, total=total)

        target = self.storage_dir / filename
        if target.is_file():
            return InvoiceArtifact(path=target, filename=filename, total=total)

        logger.warning("Invoice for order %s missing from storage, regenerating", booking.order_id)
        return self.render_booking(booking, reason="regenerated")

    def discard(self, artifact: InvoiceArtifact) -> None:
        """Remove an artifact whose booking was never committed."""
        try:
            artifact.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Could not remove orphaned invoice %s: %s", artifact.path, exc)

    def _draw_pages(self, document: InvoiceDocument) -> List[Image.Image]:
        title_font = ImageFont.load_default(size=TITLE_FONT_SIZE)
        heading_font = ImageFont.load_default(size=HEADING_FONT_SIZE)
        body_font = ImageFont.load_default(size=BODY_FONT_SIZE)
        bottom = PAGE_SIZE[1] - MARGIN

        pages: List[Image.Image] = []

        def new_page() -> Tuple[Image.Image, ImageDraw.ImageDraw]:
            page = Image.new("RGB", PAGE_SIZE, "white")
            pages.append(page)
            return page, ImageDraw.Draw(page)

        def table_header(draw: ImageDraw.ImageDraw, y: int) -> int:
            for x, label in zip(COLUMN_X, TABLE_HEADERS):
                draw.text((x, y), label, fill="black", font=heading_font)
            y += LINE_SPACING + 4
            draw.line((MARGIN, y, PAGE_SIZE[0] - MARGIN, y), fill="black", width=1)
            return y + 8

        _, draw = new_page()
        y = MARGIN
        draw.text((MARGIN, y), document.title, fill="black", font=title_font)
        y += TITLE_FONT_SIZE + 16

        for line in _wrapped(document.header_lines):
            draw.text((MARGIN, y), line, fill="black", font=body_font)
            y += LINE_SPACING
        y += LINE_SPACING

        draw.text((MARGIN, y), "Bill To", fill="black", font=heading_font)
        y += LINE_SPACING + 4
        for line in _wrapped(document.customer_lines):
            draw.text((MARGIN, y), line, fill="black", font=body_font)
            y += LINE_SPACING
        y += LINE_SPACING

        y = table_header(draw, y)
        for product, quantity, price, line_total in document.rows:
            name_lines = textwrap.wrap(product, 48) or [""]
            height = LINE_SPACING * len(name_lines)
            if y + height > bottom - LINE_SPACING * 2:
                _, draw = new_page()
                y = table_header(draw, MARGIN)
            for offset, part in enumerate(name_lines):
                draw.text((COLUMN_X[0], y + offset * LINE_SPACING), part, fill="black", font=body_font)
            draw.text((COLUMN_X[1], y), quantity, fill="black", font=body_font)
            draw.text((COLUMN_X[2], y), price, fill="black", font=body_font)
            draw.text((COLUMN_X[3], y), line_total, fill="black", font=body_font)
            y += height

        if y + LINE_SPACING * 2 > bottom:
            _, draw = new_page()
            y = MARGIN
        y += 8
        draw.line((MARGIN, y, PAGE_SIZE[0] - MARGIN, y), fill="black", width=1)
        y += 12
        draw.text((COLUMN_X[2], y), document.total_line, fill="black", font=heading_font)
        return pages

    def _write_pdf(
        self, pages: List[Image.Image], target: Path, document: InvoiceDocument
    ) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        # Fixed dates and metadata keep the bytes identical across re-renders
        stamp = _utc(document.issued_at).timetuple()
        fd, tmp_name = tempfile.mkstemp(dir=self.storage_dir, prefix=".invoice-", suffix=".tmp")
        os.close(fd)
        try:
            pages[0].save(
                tmp_name,
                "PDF",
                resolution=PAGE_RESOLUTION,
                save_all=True,
                append_images=pages[1:],
                title=f"Invoice {document.order_id}",
                author=self.issuer_name,
                subject=document.total_line,
                keywords=f"order:{document.order_id} total:{document.grand_total}",
                creator=self.issuer_name,
                producer=self.issuer_name,
                creationDate=stamp,
                modDate=stamp,
            )
            os.replace(tmp_name, target)
        except (OSError, ValueError) as exc:
            logger.error("Failed to write invoice %s: %s", target.name, exc)
            Path(tmp_name).unlink(missing_ok=True)
            raise ServiceException(
                "Failed to render invoice",
                code="INVOICE_RENDER_FAILED",
                details={"order_id": document.order_id},
            ) from exc


def _wrapped(lines: Iterable[str]) -> List[str]:
    out: List[str] = []
    for line in lines:
        out.extend(textwrap.wrap(line, WRAP_WIDTH) or [""])
    return out


def _utc(value: datetime) -> datetime:
    # Naive timestamps (SQLite) are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
