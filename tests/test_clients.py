"""Supabase and Resend clients against httpx.MockTransport."""
import asyncio
import base64
import json

import httpx
import pytest

from piano_quote.mailer import MailerError, ResendMailer
from piano_quote.models import Attachment, OutboundEmail
from piano_quote.supabase_client import SupabaseClient


def _recording_transport(status_code=200, body=None):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json=body if body is not None else {})

    return httpx.MockTransport(handler), seen


def _supabase(transport):
    return SupabaseClient(
        url="https://proj.supabase.co/",
        service_key="service-key",
        bucket="piano-quotes",
        table="quotes",
        transport=transport,
    )


def test_upload_posts_object_and_returns_public_url():
    transport, seen = _recording_transport(body={"Key": "piano-quotes/job-sheets/a.pdf"})
    url = asyncio.run(_supabase(transport).upload("job-sheets/a.pdf", b"%PDF-1.4", "application/pdf"))

    assert url == "https://proj.supabase.co/storage/v1/object/public/piano-quotes/job-sheets/a.pdf"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/storage/v1/object/piano-quotes/job-sheets/a.pdf"
    assert request.headers["x-upsert"] == "false"
    assert request.headers["content-type"] == "application/pdf"
    assert request.headers["authorization"] == "Bearer service-key"
    assert request.content == b"%PDF-1.4"


def test_upload_with_upsert_sets_header():
    transport, seen = _recording_transport()
    asyncio.run(_supabase(transport).upload("vcf/card.vcf", b"BEGIN:VCARD", "text/vcard", upsert=True))
    assert seen[0].headers["x-upsert"] == "true"


def test_duplicate_upload_raises():
    transport, _ = _recording_transport(status_code=409, body={"error": "Duplicate"})
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(_supabase(transport).upload("job-sheets/a.pdf", b"x", "application/pdf"))


def test_insert_quote_posts_single_row():
    transport, seen = _recording_transport(status_code=201)
    asyncio.run(_supabase(transport).insert_quote({"job_ref": "PMT-123456", "customer_name": "Jane Doe"}))

    request = seen[0]
    assert request.url.path == "/rest/v1/quotes"
    assert request.headers["prefer"] == "return=minimal"
    assert json.loads(request.content) == {"job_ref": "PMT-123456", "customer_name": "Jane Doe"}


def test_insert_quote_failure_raises():
    transport, _ = _recording_transport(status_code=400, body={"message": "bad column"})
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(_supabase(transport).insert_quote({"job_ref": "PMT-1"}))


def _email(**overrides):
    data = dict(
        from_email="Piano Quote <quotes@pianomoveteam.co.uk>",
        to=["thenorthpiano@googlemail.com"],
        cc=["gogoo.ltd@gmail.com"],
        reply_to="jane@example.com",
        subject="Piano Quote - Jane Doe + PDF",
        html="<p>hi</p>",
        attachments=[Attachment(filename="Job-Sheet-PMT-1.pdf", content=b"%PDF")],
        headers={"References": "<quote-jane-doe@pianomoveteam.co.uk>"},
    )
    data.update(overrides)
    return OutboundEmail(**data)


def test_send_returns_message_id_and_encodes_attachments():
    transport, seen = _recording_transport(body={"id": "4ef9a417-02e9-4d39-ad75-9611e0fcc33c"})
    mailer = ResendMailer(api_key="re_test", transport=transport)
    message_id = asyncio.run(mailer.send(_email()))

    assert message_id == "4ef9a417-02e9-4d39-ad75-9611e0fcc33c"
    request = seen[0]
    assert str(request.url) == "https://api.resend.com/emails"
    assert request.headers["authorization"] == "Bearer re_test"
    payload = json.loads(request.content)
    assert payload["from"] == "Piano Quote <quotes@pianomoveteam.co.uk>"
    assert payload["cc"] == ["gogoo.ltd@gmail.com"]
    assert payload["reply_to"] == "jane@example.com"
    assert payload["headers"] == {"References": "<quote-jane-doe@pianomoveteam.co.uk>"}
    assert payload["attachments"] == [
        {"filename": "Job-Sheet-PMT-1.pdf", "content": base64.b64encode(b"%PDF").decode()}
    ]


def test_send_omits_empty_optional_fields():
    transport, seen = _recording_transport(body={"id": "abc"})
    mailer = ResendMailer(api_key="re_test", transport=transport)
    asyncio.run(mailer.send(_email(cc=[], reply_to=None, attachments=[], headers={})))
    payload = json.loads(seen[0].content)
    assert set(payload) == {"from", "to", "subject", "html"}


def test_send_error_carries_provider_message():
    transport, _ = _recording_transport(
        status_code=422, body={"statusCode": 422, "name": "validation_error", "message": "Invalid `to` field."}
    )
    mailer = ResendMailer(api_key="re_test", transport=transport)
    with pytest.raises(MailerError) as err:
        asyncio.run(mailer.send(_email()))
    assert err.value.message == "Invalid `to` field."
    assert err.value.status_code == 422


def test_send_without_id_is_an_error():
    transport, _ = _recording_transport(body={})
    mailer = ResendMailer(api_key="re_test", transport=transport)
    with pytest.raises(MailerError):
        asyncio.run(mailer.send(_email()))


def test_unreachable_provider_is_a_mailer_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    mailer = ResendMailer(api_key="re_test", transport=httpx.MockTransport(handler))
    with pytest.raises(MailerError) as err:
        asyncio.run(mailer.send(_email()))
    assert "unreachable" in err.value.message
