"""Fixed contact details for The North London Piano and its vCard."""

from __future__ import annotations

BUSINESS = {
    "name":       "The North London Piano",
    "street":     "176 Millicent Grove",
    "city":       "London",
    "postcode":   "N13 6HS",
    "country":    "UK",
    "phone":      "020 3441 9463",
    "mobile":     "07711 872 434",
    "email":      "thenorthpiano@googlemail.com",
    "website":    "https://www.pianomoveteam.co.uk",
    "whatsapp":   "447711872434",
}

CONTACT_CARD_PATH = "vcf/The-North-London-Piano.vcf"
CONTACT_CARD_FILENAME = "The-North-London-Piano.vcf"


def address_line() -> str:
    return f"{BUSINESS['street']}, {BUSINESS['city']} {BUSINESS['postcode']}"


def build_vcard() -> bytes:
    phone = BUSINESS["phone"].replace(" ", "")
    mobile = BUSINESS["mobile"].replace(" ", "")
    lines = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"FN:{BUSINESS['name']}",
        f"ORG:{BUSINESS['name']}",
        f"TEL;TYPE=WORK,VOICE:{phone}",
        f"TEL;TYPE=CELL:{mobile}",
        f"EMAIL:{BUSINESS['email']}",
        f"ADR;TYPE=WORK:;;{BUSINESS['street']};{BUSINESS['city']};;{BUSINESS['postcode']};{BUSINESS['country']}",
        f"URL:{BUSINESS['website']}",
        "END:VCARD",
    ]
    return "\n".join(lines).encode("utf-8")
