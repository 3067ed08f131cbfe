"""Slugs, threading ids, and quick-action links."""
from urllib.parse import parse_qs, urlparse

import pytest

from piano_quote.links import (
    calendar_link,
    maps_route_link,
    slugify,
    tel_link,
    thread_id,
    whatsapp_link,
)


@pytest.mark.parametrize("name,slug", [
    ("Jane Doe", "jane-doe"),
    ("  Jane   DOE!! ", "jane-doe"),
    ("O'Brien-Smith, Mary", "o-brien-smith-mary"),
    ("---", ""),
    ("Zoë 2nd", "zo-2nd"),
])
def test_slugify(name, slug):
    assert slugify(name) == slug


def test_same_name_threads_together():
    assert thread_id(slugify("Jane Doe"), "pianomoveteam.co.uk") == "<quote-jane-doe@pianomoveteam.co.uk>"
    assert thread_id(slugify("JANE  doe"), "pianomoveteam.co.uk") == thread_id(
        slugify("jane doe"), "pianomoveteam.co.uk"
    )


def test_tel_link_uses_uk_prefix():
    assert tel_link("07700 900 000") == "tel:+447700900000"
    assert tel_link("020-3441-9463") == "tel:+442034419463"


def test_whatsapp_link_strips_non_digits(jane):
    link = whatsapp_link(jane)
    assert link.startswith("https://wa.me/07700900000?text=")
    assert "Jane%20Doe" in link


def test_calendar_link_carries_details(jane):
    parsed = urlparse(calendar_link(jane))
    params = parse_qs(parsed.query)
    assert parsed.netloc == "calendar.google.com"
    assert params["action"] == ["TEMPLATE"]
    assert params["text"] == ["Piano Move - Jane Doe"]
    assert params["location"] == ["N1 1AA to SW1A 1AA"]
    assert "Pickup: N1 1AA (3 steps)" in params["details"][0]
    assert "Special: None" in params["details"][0]


def test_route_link_encodes_both_ends():
    assert maps_route_link("N1 1AA", "SW1A 1AA") == "https://www.google.com/maps/dir/N1%201AA/SW1A%201AA"
