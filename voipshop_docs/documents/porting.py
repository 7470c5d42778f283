from __future__ import annotations

from typing import Any, Mapping, Optional

from ..branding import load_logo
from ..pdf_constants import PORT_BAND, PORT_RULE, PORT_TEXT
from .base import DocumentRenderer

BLANK = "_____________________________"
LONG_BLANK = "_______________________________________"
BLACK = "#000000"

DECLARATION = (
    "Backspace is hereby authorised to request that my present service provider port the above numbers to "
    "Backspace. I am duly authorised to make this request and to the best of my knowledge the above "
    "information is correct.",
    "I acknowledge that the subscriber shall remain liable in terms of any contract with the present service "
    "provider for so long as it remains in force.",
    "Credits and discounts afforded to the subscriber by the present service provider are not transferrable "
    "to Backspace.",
    "I have been advised of the porting costs and the subscriber agrees to be liable for such costs.",
)

ACKNOWLEDGEMENTS = (
    "We acknowledge that any numbers in the range that are not ported will be lost and cannot be recovered.",
    "We acknowledge that ADSL functionality linked to the number being ported may be lost after porting.",
    "We acknowledge that if we have any other subscriptions (e.g. switchboard or other services) we no longer "
    "need, we have to directly contact our current Service Provider AFTER porting has been completed, and "
    "instruct them to cancel the subscriptions/services.",
)


class PortingRenderer(DocumentRenderer):
    """Porting request form plus the letter of authority to the donor provider."""

    margin = 42
    max_pages = 2

    def __init__(
        self,
        company: Optional[Mapping[str, Any]],
        client: Optional[Mapping[str, Any]],
        port: Optional[Mapping[str, Any]],
    ) -> None:
        super().__init__({"company": company, "client": client, "port": port})
        self.company = company or {}
        self.client = client or {}
        self.port = port or {}
        self.logo = load_logo(str(self.company.get("logoUrl") or ""))

    def numbers_text(self) -> str:
        numbers = self.port.get("numbers")
        if isinstance(numbers, list) and numbers:
            return ", ".join(str(number) for number in numbers)
        return ""

    def title_block(self, title: str, advance: float) -> None:
        self.y = self.margin
        drew_logo = bool(self.logo) and self.image(self.logo, self.left, self.y, width=110)
        title_x = self.left + 120 if drew_logo else self.left
        bottom = self.paragraph(
            title_x, self.y, title, self.right - title_x, 14, BLACK, bold=True, align="R"
        )
        self.y = max(self.y + advance, bottom + 4)

    def para(self, text: str, size: float = 10, gap: float = 10) -> None:
        self.y = self.paragraph(self.left, self.y, text, self.width, size, PORT_TEXT, line_gap=2)
        self.y += gap

    def field(self, label: str, value: Any = "") -> None:
        label_w = 260
        value_x = self.left + label_w + 8
        label_bottom = self.paragraph(self.left, self.y, label, label_w, 10, BLACK, bold=True)
        value_bottom = self.paragraph(
            value_x, self.y, str(value or BLANK), self.right - value_x, 10, PORT_TEXT
        )
        self.y = max(label_bottom, value_bottom) + 10

    def note(self, text: str) -> None:
        self.y = self.paragraph(self.left, self.y, text, self.width, 9, PORT_TEXT) + 8

    def sign_line(self, label: str, width: float) -> None:
        self.text(self.left, self.y + 2, label, 10, BLACK)
        self.line(self.left + 70, self.y + 12, self.left + 70 + width, self.y + 12, PORT_RULE)

    def draw_form(self) -> None:
        company_name = self.company.get("name") or "VoIP Shop"
        port = self.port
        client = self.client

        self.title_block("NON GEOGRAPHIC AND GEOGRAPHIC NUMBER PORTING REQUEST FORM", 26)
        self.para(
            f"This request form authorises {company_name} to request that the service and current telephone "
            f"number(s) specified below be transferred to {company_name}.",
            gap=12,
        )
        self.hline(self.y, PORT_RULE)
        self.y += 12

        authorised = ""
        if port.get("authorisedName"):
            authorised = str(port.get("authorisedName"))
            if port.get("authorisedTitle"):
                authorised += f" — {port.get('authorisedTitle')}"

        self.field("Subscriber Name", client.get("company") or client.get("name"))
        self.field(
            "Name & designation of person authorised to make this request if subscriber is a company",
            authorised,
        )
        self.field("Contact Number", port.get("contactNumber") or client.get("phone"))
        self.field("South African Identity / Passport Number", port.get("idNumber"))
        self.field("Present Service Provider", port.get("provider"))
        self.field("Present Service Provider — Account Number", port.get("accountNumber"))
        self.note("Please attach a copy of your latest invoice to confirm numbers and account status")

        self.field("Service Address", port.get("serviceAddress") or client.get("address"))
        self.field("Geographical Numbers to be ported", self.numbers_text())
        self.field("PBX Location", port.get("pbxLocation"))
        self.note(
            "Please ensure that none of the above mentioned numbers are linked to any video conferencing "
            "services nor are they the target number for any 0800 or 086 service."
        )

        self.y += 6
        self.fill_rect(self.left, self.y, self.width, 18, PORT_BAND)
        self.text(self.left + 6, self.y + 4, "Declaration", 11, BLACK, bold=True)
        self.y += 26
        for number, clause in enumerate(DECLARATION, start=1):
            self.para(f"{number}. {clause}", gap=6)

        self.y += 8
        self.sign_line("Sign:", 220)
        self.y += 20
        self.sign_line("Date:", 130)

    def draw_letter(self) -> None:
        new_provider = self.company.get("name") or "(new service provider)"
        self.title_block("Porting — To whom it may concern", 28)
        self.hline(self.y, PORT_RULE)
        self.y += 14

        self.para(
            f"I, {LONG_BLANK} hereby give permission to {new_provider} to port the following numbers from "
            "the current service provider."
        )
        self.para(f"Current service provider Account No: {self.port.get('accountNumber') or BLANK + '__'}")
        self.para(f"The number/number range(s) we want ported is/are: {self.numbers_text() or BLANK + '__'}.")
        for text in ACKNOWLEDGEMENTS:
            self.para(text)
        self.para("Kind regards,")

        self.y += 6
        self.sign_line("Sign:", 220)
        self.y += 22
        self.sign_line("Full Name:", 260)
        self.y += 22
        self.sign_line("Designation:", 180)

    def draw(self) -> None:
        self.add_page()
        self.draw_form()
        self.add_page()
        self.draw_letter()


def build_porting_pdf(
    company: Optional[Mapping[str, Any]] = None,
    client: Optional[Mapping[str, Any]] = None,
    port: Optional[Mapping[str, Any]] = None,
) -> bytes:
    """Render the porting letter of authority (form and letter) to PDF bytes."""
    return PortingRenderer(company, client, port).render()
