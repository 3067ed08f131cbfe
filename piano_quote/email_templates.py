"""HTML bodies for the business notification and the customer acknowledgement."""

from __future__ import annotations

from datetime import datetime, timezone
from html import escape
from urllib.parse import quote as urlquote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .business import BUSINESS, CONTACT_CARD_FILENAME, address_line
from .links import (
    calendar_link,
    maps_route_link,
    maps_search_link,
    steps_text,
    tel_link,
    whatsapp_link,
)
from .models import QuoteRequest

_BUTTON = (
    "display:block;padding:14px 10px;background:#111827;color:#ffffff;"
    "text-align:center;text-decoration:none;border-radius:6px;font-weight:bold;"
)
_LABEL = "padding:8px 12px;color:#6b7280;width:35%;border-bottom:1px solid #eee;"
_VALUE = "padding:8px 12px;color:#111827;font-weight:bold;border-bottom:1px solid #eee;"
_SECTION = "margin:24px 0 8px;font-size:13px;color:#6b7280;text-transform:uppercase;letter-spacing:1px;"


def _london_time(when: datetime) -> str:
    try:
        tz = ZoneInfo("Europe/London")
    except ZoneInfoNotFoundError:
        tz = timezone.utc
    local = when.astimezone(tz)
    return local.strftime("%A, %d %B %Y at %H:%M")


def _row(label: str, value_html: str) -> str:
    return f"<tr><td style='{_LABEL}'>{label}</td><td style='{_VALUE}'>{value_html}</td></tr>"


def _table(rows: list[str]) -> str:
    return f"<table width='100%' cellpadding='0' cellspacing='0'>{''.join(rows)}</table>"


def _button(href: str, label: str) -> str:
    return (
        f"<td width='49%' style='padding:4px;'>"
        f"<a href='{escape(href)}' target='_blank' style='{_BUTTON}'>{label}</a></td>"
    )


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset='utf-8'>"
        "<meta name='viewport' content='width=device-width, initial-scale=1.0'>"
        f"<title>{escape(title)}</title></head>"
        "<body style='margin:0;padding:0;background:#f3f4f6;font-family:Arial,sans-serif;'>"
        "<table width='100%' cellpadding='0' cellspacing='0'><tr><td align='center'>"
        "<table width='600' cellpadding='0' cellspacing='0' "
        "style='background:#ffffff;margin:24px 0;padding:24px;border-radius:8px;'><tr><td>"
        f"{body}"
        "</td></tr></table></td></tr></table></body></html>"
    )


def build_business_email(
    q: QuoteRequest,
    job_reference: str,
    document_url: str,
    photo_count: int,
    received_at: datetime,
) -> str:
    photos_html = ""
    if photo_count > 0:
        plural = "s" if photo_count > 1 else ""
        photos_html = (
            "<p style='background:#fef3c7;padding:10px 14px;border-radius:6px;font-weight:bold;'>"
            f"{photo_count} Customer Photo{plural} Attached</p>"
        )

    special_html = ""
    if q.has_special_requirements:
        special_html = (
            f"<p style='{_SECTION}'>Special Requirements</p>"
            "<div style='background:#fffef0;border-left:3px solid #111827;padding:10px 14px;'>"
            f"<p style='margin:0;white-space:pre-wrap;'>{escape(q.special_requirements)}</p></div>"
        )

    body = (
        "<h1 style='margin:0;font-size:24px;color:#111827;'>New Piano Moving Quote Request</h1>"
        f"<p style='color:#6b7280;margin:4px 0 0;'>{_london_time(received_at)} &middot; "
        f"Ref {escape(job_reference)}</p>"
        f"{photos_html}"

        f"<p style='{_SECTION}'>Quick Actions</p>"
        "<table width='100%' cellpadding='0' cellspacing='0'>"
        f"<tr>{_button(calendar_link(q), 'Add to Calendar')}{_button(tel_link(q.phone), 'Call Now')}</tr>"
        f"<tr>{_button(whatsapp_link(q), 'WhatsApp')}{_button(document_url, 'Print Job Sheet')}</tr>"
        "</table>"

        f"<p style='{_SECTION}'>Customer Information</p>"
        + _table([
            _row("Name", escape(q.full_name)),
            _row("Email", f"<a href='mailto:{escape(q.email)}'>{escape(q.email)}</a>"),
            _row("Phone", f"<a href='tel:{escape(q.phone)}'>{escape(q.phone)}</a>"),
            _row("Piano", escape(q.piano_type or "Not specified")),
        ])
        + f"<p style='{_SECTION}'>Pickup Location</p>"
        + _table([
            _row("Address", escape(q.pickup_address)),
            _row("Steps", escape(steps_text(q.pickup_steps))),
            _row("Maps", f"<a href='{escape(maps_search_link(q.pickup_address))}' "
                         "target='_blank'>Open in Google Maps</a>"),
        ])
        + f"<p style='{_SECTION}'>Delivery Location</p>"
        + _table([
            _row("Address", escape(q.delivery_address)),
            _row("Steps", escape(steps_text(q.delivery_steps))),
            _row("Maps", f"<a href='{escape(maps_search_link(q.delivery_address))}' "
                         "target='_blank'>Open in Google Maps</a>"),
        ])
        + special_html
        + "<p style='margin-top:24px;'>"
        f"<a href='{escape(maps_route_link(q.pickup_address, q.delivery_address))}' target='_blank' "
        f"style='{_BUTTON}'>View Route &amp; Distance</a></p>"
        "<p style='color:#9ca3af;font-size:12px;text-align:center;'>"
        "Piano Move Team &bull; Quote Management</p>"
    )
    return _page("New Piano Moving Quote Request", body)


def build_customer_email(q: QuoteRequest, contact_card_url: str | None) -> str:
    email_subject = urlquote(f"Piano Quote - {q.full_name}", safe="")
    office_tel = "tel:" + BUSINESS["phone"].replace(" ", "")
    whatsapp = (
        f"https://wa.me/{BUSINESS['whatsapp']}"
        "?text=Hi,%20I%20requested%20a%20quote%20for%20moving%20my%20piano"
    )

    contact_card_html = ""
    if contact_card_url:
        contact_card_html = (
            f"<p style='{_SECTION}'>Save Our Contact</p>"
            "<p>Add us to your phone contacts for easy access next time you need us.</p>"
            f"<a href='{escape(contact_card_url)}' download='{CONTACT_CARD_FILENAME}' "
            f"style='{_BUTTON}'>Add to Contacts</a>"
            "<p style='color:#6b7280;font-size:12px;text-align:center;'>"
            "One tap - all our contact info saved!</p>"
        )

    body = (
        f"<h1 style='margin:0;font-size:26px;color:#111827;'>Hi {escape(q.full_name)},</h1>"
        "<p>Thank you for requesting a piano moving quote.</p>"
        "<p>We've received your details and <strong>will contact you shortly</strong> "
        "with a personalized quote.</p>"

        f"<p style='{_SECTION}'>Your Submission</p>"
        + _table([
            _row("Piano Type", escape(q.piano_type or "Not specified")),
            _row("Pickup", f"{escape(q.pickup_address)} "
                           f"<span style='color:#6b7280;'>({escape(steps_text(q.pickup_steps))} steps)</span>"),
            _row("Delivery", f"{escape(q.delivery_address)} "
                             f"<span style='color:#6b7280;'>({escape(steps_text(q.delivery_steps))} steps)</span>"),
        ])
        + f"<p style='{_SECTION}'>Need to Reach Us?</p>"
        "<p>Have questions or want to discuss your piano move? We're here to help!</p>"
        "<table width='100%' cellpadding='0' cellspacing='0'><tr>"
        f"{_button('mailto:' + BUSINESS['email'] + '?subject=' + email_subject, 'Email Us')}"
        f"{_button(office_tel, 'Call Us')}"
        "</tr><tr>"
        f"{_button(whatsapp, 'WhatsApp')}"
        "</tr></table>"
        + contact_card_html
        + "<p style='margin-top:24px;'>Best regards,<br>"
        f"<strong>{BUSINESS['name']} Team</strong></p>"
        "<p style='color:#9ca3af;font-size:12px;'>"
        f"{address_line()}<br><a href='{BUSINESS['website']}'>{BUSINESS['website'].replace('https://', '')}</a></p>"
    )
    return _page("Thank you for your piano moving quote request", body)
