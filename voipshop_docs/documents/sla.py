from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterator, List, Mapping, Sequence, Tuple

from ..branding import draw_logo_header, load_logo
from ..formatting import safe_float
from ..pagination import overflow_label
from ..pdf_constants import (
    SLA_BG,
    SLA_BLUE,
    SLA_BORDER,
    SLA_DIVIDER,
    SLA_DOT,
    SLA_INK,
    SLA_MUTED,
    SLA_RULE,
)
from ..pricing import derive_sla_services, sla_qty_text
from .base import DocumentRenderer

SLA_FOOTER_H = 26
# Height of the full mandate card, signature row included.
MANDATE_CARD_H = 184
SIGNATURE_ROW_H = 30
MAX_SERVICE_ROWS = 6
DEFAULT_SERVICE_DESCRIPTION = "Hosted PBX incl. porting, provisioning & remote support"
NO_SERVICES_TEXT = (
    "No monthly service lines were supplied. "
    "(Pass `services` OR `itemsMonthly` + `minutesIncluded`.)"
)


@dataclass(frozen=True)
class Box:
    x: float
    w: float


def terms_sections(notice_days: int) -> List[Tuple[str, Sequence[str]]]:
    return [
        (
            "Support & Service Levels",
            (
                "Remote support included at no charge.",
                "On-site support by arrangement; call-out fee R450 per visit (travel/after-hours may apply).",
                "Hours: Mon–Fri 08:30–17:00 SAST; WhatsApp & email support available.",
                "Fault priority targets: P1 outage—response 1h, restore 8h; P2—response 4h, restore 1 business day; "
                "P3/MAC—response 1 business day, target 2–3 business days.",
                "Service is best-effort and may be impacted by external providers (ISP/carrier), local network "
                "quality, Wi-Fi, or power.",
            ),
        ),
        (
            "Fees, Billing & Payments",
            (
                "First invoice payable upfront before activation. Thereafter billed monthly in arrears (end of month).",
                "Payment by debit order or EFT by due date; late payments may suspend service.",
                "Interest on overdue amounts accrues at prime + 6%.",
                "Prices exclude VAT unless stated otherwise.",
                "Usage/call charges (where applicable) are billed in arrears.",
            ),
        ),
        (
            "Customer Responsibilities",
            (
                "Provide stable power, Internet, and site access for installation/support.",
                "Maintain LAN/Wi-Fi security; prevent misuse or fraud.",
                "Use equipment/services lawfully; comply with POPIA for call recording and notices to "
                "employees/customers.",
                "Remain liable for all charges incurred on the account, whether authorised or unauthorised.",
                "Implement QoS/backup power for critical operations (recommended).",
            ),
        ),
        (
            "Equipment, Porting & Warranty",
            (
                "Hardware sold once-off; ownership passes to Customer upon payment.",
                "Manufacturer warranties (typically 12 months, return-to-base) apply; excludes "
                "surges/liquids/abuse/unauthorised firmware.",
                "Loan devices may be offered at VoIP Shop’s discretion and current pricing.",
                "Number porting timelines subject to donor carrier processes; RICA requirements apply.",
            ),
        ),
        (
            "Security, Fair Use & Recording",
            (
                "Customer must safeguard credentials and endpoints; unusual usage may trigger proactive suspensions.",
                "Fair use applies to minutes and inclusive features to prevent abuse and protect network integrity.",
                "If call recording is enabled, Customer is responsible for obtaining all required consents and "
                "retention policies (POPIA).",
                "VoIP Shop may implement fraud controls and routing changes without notice to mitigate risk.",
            ),
        ),
        (
            "Maintenance, Changes & Escalations",
            (
                "Planned maintenance will be scheduled outside business hours where possible; emergency "
                "maintenance may occur at short notice.",
                "Configuration change requests (MACs) are handled as P3 tickets with 2–3 business day targets.",
                "Escalation path available on request; critical incidents prioritised based on impact.",
            ),
        ),
        (
            "Liability, Suspension & Termination",
            (
                "No liability for indirect, consequential, or special damages, including loss of profit or business.",
                "Liability cap: the lesser of 3 months’ service fees or R100,000.",
                f"Month-to-month; either party may cancel on {notice_days} days’ written notice.",
                "Non-payment may lead to suspension until all arrears are settled; upon termination, unpaid fees "
                "are immediately due.",
            ),
        ),
        (
            "General",
            (
                "This SLA forms part of the overall agreement (signed quotes/orders/policies). If conflicts arise, "
                "the latest signed quote/order prevails for pricing/line items.",
                "Changes to this SLA require written agreement by both parties.",
                "Governing law: South Africa; venue: Johannesburg.",
                "If any clause is unenforceable, the remainder remains in force.",
            ),
        ),
    ]


def _joined(first: str, *parts: Tuple[str, Any]) -> str:
    text = first
    for prefix, value in parts:
        if value:
            text += f"{prefix}{value}"
    return text


class SlaRenderer(DocumentRenderer):
    """Two-page agreement: order details and mandate, then terms."""

    margin = 32
    footer_h = SLA_FOOTER_H
    max_pages = 2

    def __init__(self, data: Mapping[str, Any]) -> None:
        super().__init__(data)
        self.left = 40
        self.right = self.page_w - 40
        self.width = self.right - self.left

        today = date.today()
        self.company: Mapping[str, Any] = data.get("company") or {}
        self.customer: Mapping[str, Any] = data.get("customer") or {}
        self.debit_order: Mapping[str, Any] = data.get("debitOrder") or {}
        self.sla_number = data.get("slaNumber") or f"SLA-{today.strftime('%Y%m%d')}"
        self.effective = data.get("effectiveDateISO") or today.isoformat()
        self.notice_days = int(safe_float(data.get("noticeDays"), 30))
        self.vat_rate = safe_float(data.get("vatRate"), 0.15)
        self.monthly_ex = safe_float(data.get("monthlyExVat"))
        monthly_inc = safe_float(data.get("monthlyInclVat"))
        if not monthly_inc and self.monthly_ex:
            monthly_inc = round(self.monthly_ex * (1 + self.vat_rate), 2)
        self.monthly_inc = monthly_inc
        self.service_description = data.get("serviceDescription") or DEFAULT_SERVICE_DESCRIPTION
        self.services = derive_sla_services(
            data.get("services"), data.get("itemsMonthly"), data.get("minutesIncluded")
        )
        self.logo = load_logo(str(self.company.get("logoUrl") or ""))

    # -- flat blocks -------------------------------------------------------

    def move(self, amount: float) -> None:
        self.y += amount

    def rule(self, pad: float = 6) -> None:
        if not self.has_space(pad + 2):
            return
        self.hline(self.y, SLA_BORDER)
        self.move(pad)

    def heading(self, title: str) -> None:
        if not self.has_space(16):
            return
        self.y = self.paragraph(self.left, self.y, title, self.width, 10.5, SLA_INK, bold=True)
        self.move(4)

    def key_value(self, key: str, value: str) -> None:
        if not self.has_space(16):
            return
        mid = self.left + self.width * 0.30
        key_bottom = self.paragraph(self.left, self.y, key, mid - self.left - 6, 8, SLA_MUTED)
        value_bottom = self.paragraph(mid, self.y, value or "—", self.right - mid, 8, SLA_INK, bold=True)
        self.y = max(key_bottom, value_bottom)
        self.move(3.5)

    def bullet(self, x: float, width: float, text: str, size: float = 8, line_gap: float = 0.6) -> bool:
        """Dot plus wrapped text; returns False when it did not fit."""
        height = self.height_of(text, width, size, line_gap=line_gap)
        if not self.has_space(12 + height):
            return False
        self.dot(x + 2.5, self.y + 3.2, 1.1, SLA_DOT)
        self.y = self.paragraph(x + 8, self.y, text, width, size, SLA_MUTED, line_gap=line_gap)
        self.move(4)
        return True

    def fill_line(self, box: Box, label: str, preset: Any = "", line_w: float = 0.0, label_w: float = 0.0) -> None:
        """Label followed by a signature-style rule with an optional prefilled value."""
        if not self.has_space(20):
            return
        label_w = label_w or min(160, max(110, box.w * 0.30))
        line_w = line_w or box.w * 0.6
        self.text(box.x, self.y + 2, self.ellipsized(label, label_w - 8, 8), 8, SLA_MUTED)
        start_x = box.x + label_w
        self.line(start_x, self.y + 12, start_x + line_w, self.y + 12, SLA_RULE, line_width=0.8)
        if preset:
            self.text(start_x + 2, self.y + 3, self.ellipsized(preset, line_w - 6, 8), 8, SLA_INK)
        self.move(18)

    def subheading(self, box: Box, text: str) -> None:
        self.y = self.paragraph(box.x, self.y, text, box.w, 9, SLA_INK, bold=True)
        self.move(6)

    @contextmanager
    def card(self, title: str) -> Iterator[Box]:
        """Outlined card with a title pill; contents are drawn inside the block."""
        top = self.y
        self.y = top + 18
        yield Box(x=self.left + 12, w=self.width - 24)

        # The outline never crosses into the footer band.
        height = min(max(64, self.y + 10 - top), max(0.0, self.page_bottom - self.footer_h - top))
        self.rounded(self.left, top, self.width, height, 10, stroke=SLA_BORDER)
        pill_w = min(200, self.text_width(title, 9, bold=True) + 24)
        self.rounded(self.left + 12, top - 10, pill_w, 20, 10, fill="#FFFFFF", stroke=SLA_BORDER)
        self.text(self.left + 22, top - 5, self.ellipsized(title, pill_w - 20, 9), 9, SLA_INK, bold=True)
        self.y = top + height + 6

    def initials(self, y: float) -> None:
        self.text(self.left, y, "Client Initials:", 8, SLA_MUTED)
        self.line(self.left + 70, y + 10, self.left + 170, y + 10, SLA_RULE, line_width=0.8)

    def footer(self, page: int) -> None:
        self.text(
            self.left,
            self.page_h - 24,
            f"Agreement No: {self.sla_number} • Page {page} of 2",
            7,
            SLA_MUTED,
            width=self.width,
            align="R",
        )

    def header(self, title: str) -> None:
        bottom = draw_logo_header(
            self, self.logo, align="right", title=title, subtitle=str(self.company.get("website") or "")
        )
        self.y = max(bottom, 70)

    # -- page 1 ------------------------------------------------------------

    def draw_agreement_strip(self) -> None:
        if not self.has_space(24):
            return
        self.fill_rect(self.left, self.y, self.width, 20, SLA_BG)
        end_x = self.text(self.left + 10, self.y + 6, f"Agreement No: {self.sla_number}", 9, SLA_BLUE, bold=True)
        self.text(end_x, self.y + 6, f"  •  Effective: {self.effective}", 9, SLA_MUTED)
        self.move(26)

    def draw_parties_summary(self) -> None:
        co = self.company
        cu = self.customer
        self.heading("Parties")
        self.key_value("Provider", _joined(co.get("name") or "VoIP Shop", (" | VAT ", co.get("vat"))))
        self.key_value(
            "Contact",
            _joined(str(co.get("phone") or ""), (" | ", co.get("email")), (" | ", co.get("website"))),
        )
        self.key_value("Address", co.get("address") or "")
        self.move(1.5)
        self.key_value(
            "Customer",
            _joined(cu.get("name") or "Customer", (" | Reg ", cu.get("reg")), (" | VAT ", cu.get("vat"))),
        )
        self.key_value(
            "Contact",
            _joined(str(cu.get("contact") or ""), (" | ", cu.get("phone")), (" | ", cu.get("email"))),
        )
        self.key_value("Address", cu.get("address") or "")
        self.rule(8)

    def draw_parties_card(self) -> None:
        if not self.has_space(210):
            return
        co = self.company
        cu = self.customer
        with self.card("Parties — Details (Fill In)") as box:
            self.subheading(box, "Provider Details (VoIP Shop)")
            self.fill_line(box, "Provider Name", co.get("name") or "VoIP Shop")
            self.fill_line(box, "VAT Number", co.get("vat"))
            self.fill_line(box, "Phone", co.get("phone"))
            self.fill_line(box, "Email", co.get("email"))
            self.fill_line(box, "Website", co.get("website"))
            self.fill_line(box, "Address", co.get("address"), line_w=box.w * 0.72)
            self.move(6)
            self.subheading(box, "Customer Details (Confirm / Fill In)")
            self.fill_line(box, "Customer / Company", cu.get("name") or cu.get("company"))
            self.fill_line(box, "Reg Number", cu.get("reg"))
            self.fill_line(box, "VAT Number", cu.get("vat"))
            self.fill_line(box, "Contact Person", cu.get("contact"))
            self.fill_line(box, "Phone", cu.get("phone"))
            self.fill_line(box, "Email", cu.get("email"))
            self.fill_line(box, "Service Address", cu.get("address"), line_w=box.w * 0.72)

    def draw_services(self) -> None:
        if not self.has_space(140):
            self.heading("Services Ordered (Monthly)")
            if not self.services:
                self.bullet(self.left, self.width - 12, NO_SERVICES_TEXT)
            return

        with self.card("Services Ordered (Monthly)") as box:
            if not self.services:
                self.y = self.paragraph(box.x, self.y, NO_SERVICES_TEXT, box.w, 8, SLA_MUTED)
                self.move(12)
                return

            qty_x, qty_w = box.x + box.w * 0.62, box.w * 0.12
            note_x, note_w = box.x + box.w * 0.76, box.w * 0.24
            self.text(box.x, self.y, "Item", 8, SLA_INK, bold=True)
            self.text(qty_x, self.y, "Qty", 8, SLA_INK, bold=True, width=qty_w, align="R")
            self.text(note_x, self.y, "Notes", 8, SLA_INK, bold=True)
            self.move(self.line_height(8) + 4)
            self.line(box.x, self.y, box.x + box.w, self.y, "#D1D5DB")
            self.move(6)

            for service in self.services[:MAX_SERVICE_ROWS]:
                self.text(box.x, self.y, self.ellipsized(service.get("name"), box.w * 0.60, 8), 8, SLA_MUTED)
                self.text(qty_x, self.y, sla_qty_text(service), 8, SLA_MUTED, width=qty_w, align="R")
                self.text(note_x, self.y, self.ellipsized(service.get("note") or "", note_w, 8), 8, SLA_MUTED)
                self.move(14)

            remaining = len(self.services) - MAX_SERVICE_ROWS
            if remaining > 0:
                self.text(box.x, self.y, overflow_label(remaining), 8, SLA_MUTED, italic=True)
                self.move(10)

    def fee_lines(self) -> List[str]:
        return [
            f"Monthly: R {self.monthly_ex:.2f} ex VAT  •  R {self.monthly_inc:.2f} incl VAT  •  "
            f"VAT {self.vat_rate * 100:.0f}%.",
            f"Scope: {self.service_description}. Once-off (install/hardware/porting) per signed quote.",
            "Billing: First invoice is payable upfront before activation. Thereafter, services are billed "
            "monthly in arrears (end of each month).",
            "Payment via debit order or EFT by due date; late payment may suspend service and accrues interest "
            "at prime + 6%.",
            f"Term: Month-to-month; {self.notice_days}-day written notice to cancel.",
        ]

    def draw_fees(self) -> None:
        if self.has_space(120):
            with self.card("Fees & Billing") as box:
                for line in self.fee_lines():
                    self.bullet(box.x, box.w - 12, line)
            return
        self.heading("Fees & Billing")
        for line in self.fee_lines():
            self.bullet(self.left, self.width - 18, line)

    def draw_mandate(self) -> None:
        title = "Debit Order Mandate (Fill In)"
        if self.has_space(MANDATE_CARD_H):
            with self.card(title) as box:
                self.mandate_lines(box)
            return
        # Not enough room for the card: flat lines that stop at the footer.
        self.heading(title)
        self.mandate_lines(Box(x=self.left, w=self.width))

    def mandate_lines(self, box: Box) -> None:
        d = self.debit_order
        day = d.get("dayOfMonth")
        label_w = 140
        wide = box.w - label_w - 22
        self.fill_line(box, "Account Holder", d.get("accountName"), line_w=wide, label_w=label_w)
        self.fill_line(box, "Bank", d.get("bank"), line_w=wide, label_w=label_w)
        self.fill_line(box, "Branch Code", d.get("branchCode"), line_w=wide, label_w=label_w)
        self.fill_line(box, "Account Number", d.get("accountNumber"), line_w=wide, label_w=label_w)
        self.fill_line(box, "Account Type (e.g., Cheque/Savings)", d.get("accountType"), line_w=wide, label_w=label_w)
        self.fill_line(
            box,
            "Collection Day (1–31)",
            f"Day {day}" if day not in (None, "") else "",
            line_w=160,
            label_w=label_w,
        )
        self.fill_line(box, "Mandate Date (YYYY-MM-DD)", d.get("mandateDateISO"), line_w=200, label_w=label_w)

        if self.has_space(SIGNATURE_ROW_H):
            col_w = (box.w - 20) / 2
            x1, x2 = box.x, box.x + col_w + 20
            sign_y = self.y + 18
            self.text(x1, sign_y - 12, "Customer Signature", 8, SLA_MUTED)
            self.line(x1, sign_y, x1 + col_w, sign_y, SLA_RULE, line_width=0.8)
            self.text(x2, sign_y - 12, "Date", 8, SLA_MUTED)
            self.line(x2, sign_y, x2 + col_w, sign_y, SLA_RULE, line_width=0.8)
            self.y = sign_y + 12

    # -- page 2 ------------------------------------------------------------

    def draw_terms(self) -> None:
        col_gap = 22
        col_w = (self.width - col_gap) / 2
        col_top = self.y
        col_bottom = self.page_bottom - self.footer_h - 6

        column = 0
        self.y = col_top
        for title, bullets in terms_sections(self.notice_days):
            if column > 1:
                break
            if self.y > col_top and self.y + 60 > col_bottom:
                column += 1
                self.y = col_top
                if column > 1:
                    break
            x = self.left + column * (col_w + col_gap)
            self.write_section(x, col_w, col_bottom, title, bullets)
            if self.y + 8 <= col_bottom:
                self.move(6)
            if self.y + 40 > col_bottom and column == 0:
                column = 1
                self.y = col_top

        mid_x = self.left + col_w + col_gap / 2
        self.line(mid_x, col_top - 4, mid_x, col_bottom + 4, SLA_DIVIDER)

    def write_section(self, x: float, col_w: float, col_bottom: float, title: str, bullets: Sequence[str]) -> None:
        self.y = self.paragraph(x, self.y, title, col_w, 9.5, SLA_INK, bold=True)
        self.line(x, self.y + 2, x + col_w, self.y + 2, SLA_BORDER)
        self.move(8)
        for text in bullets:
            needed = 12 + self.height_of(text, col_w - 14, 7.8, line_gap=0.5)
            if self.y + needed > col_bottom:
                break
            self.dot(x + 2.5, self.y + 3.2, 1.1, SLA_DOT)
            self.y = self.paragraph(x + 8, self.y, text, col_w - 12, 7.8, SLA_MUTED, line_gap=0.5)
            self.move(6)

    def draw(self) -> None:
        self.add_page()
        self.header("Service Level Agreement")
        self.draw_agreement_strip()
        self.draw_parties_summary()
        self.draw_parties_card()
        self.draw_services()
        self.draw_fees()
        self.draw_mandate()
        self.initials(self.page_bottom - self.footer_h - 10)
        self.footer(1)

        self.add_page()
        self.header("Terms & Conditions")
        self.draw_terms()
        self.initials(self.page_bottom - self.footer_h - 8)
        self.footer(2)


def build_sla_pdf(params: Mapping[str, Any]) -> bytes:
    """Render the two-page service level agreement to PDF bytes."""
    return SlaRenderer(params).render()
