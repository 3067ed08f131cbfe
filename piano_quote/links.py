"""Slugs, threading ids and the quick-action links used in the emails."""

from __future__ import annotations

import re
from urllib.parse import quote, urlencode

from .models import QuoteRequest


def slugify(name: str) -> str:
    """Lowercase, collapse every non-alphanumeric run to one hyphen, trim hyphens."""
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


def thread_id(slug: str, domain: str) -> str:
    return f"<quote-{slug}@{domain}>"


def steps_text(value) -> str:
    return "" if value is None else str(value)


def calendar_link(q: QuoteRequest) -> str:
    details = (
        f"Customer: {q.full_name}\n"
        f"Phone: {q.phone}\n"
        f"Email: {q.email}\n"
        f"Piano: {q.piano_type or 'Not specified'}\n"
        f"Pickup: {q.pickup_address} ({steps_text(q.pickup_steps)} steps)\n"
        f"Delivery: {q.delivery_address} ({steps_text(q.delivery_steps)} steps)\n\n"
        f"Special: {q.special_requirements or 'None'}"
    )
    params = {
        "action": "TEMPLATE",
        "text": f"Piano Move - {q.full_name}",
        "details": details,
        "location": f"{q.pickup_address} to {q.delivery_address}",
    }
    return "https://calendar.google.com/calendar/render?" + urlencode(params, quote_via=quote)


def whatsapp_link(q: QuoteRequest) -> str:
    digits = re.sub(r"[^0-9]", "", q.phone)
    text = (
        f"Hi {q.full_name}, thank you for your piano moving quote request. "
        "I would like to discuss the details with you."
    )
    return f"https://wa.me/{digits}?text={quote(text, safe='')}"


def tel_link(phone: str) -> str:
    """UK number as an international ``tel:`` link: leading 0 replaced by +44."""
    digits = re.sub(r"[^0-9]", "", re.sub(r"^0", "", phone))
    return f"tel:+44{digits}"


def maps_search_link(address: str) -> str:
    return f"https://www.google.com/maps/search/?api=1&query={quote(address, safe='')}"


def maps_route_link(origin: str, destination: str) -> str:
    return f"https://www.google.com/maps/dir/{quote(origin, safe='')}/{quote(destination, safe='')}"
