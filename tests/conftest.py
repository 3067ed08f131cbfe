"""
Shared pytest fixtures for the piano quote test suite.

The pipeline is exercised against in-memory stand-ins for Supabase and
Resend so no test touches the network.
"""
import base64
from datetime import datetime, timezone

import pytest

from piano_quote.config import Settings
from piano_quote.models import QuoteRequest
from piano_quote.quote_runner import QuoteRunner

FIXED_NOW = datetime(2026, 10, 17, 14, 5, 9, 123000, tzinfo=timezone.utc)


class FakeSupabase:
    """Records uploads and inserts; each stage can be told to fail."""

    def __init__(self, fail_upload=False, fail_card=False, fail_insert=False):
        self.fail_upload = fail_upload
        self.fail_card = fail_card
        self.fail_insert = fail_insert
        self.uploads = []
        self.rows = []
        self.calls = []

    def public_url(self, path):
        return f"https://proj.supabase.co/storage/v1/object/public/piano-quotes/{path}"

    async def upload(self, path, content, content_type, upsert=False, cache_control="3600"):
        self.calls.append(("upload", path))
        if path.endswith(".vcf") and self.fail_card:
            raise RuntimeError("card bucket unavailable")
        if path.endswith(".pdf") and self.fail_upload:
            raise RuntimeError("The resource already exists")
        self.uploads.append({"path": path, "content": content,
                             "content_type": content_type, "upsert": upsert})
        return self.public_url(path)

    async def insert_quote(self, row):
        self.calls.append(("insert", row.get("job_ref")))
        if self.fail_insert:
            raise RuntimeError("relation \"quotes\" does not exist")
        self.rows.append(row)


class FakeMailer:
    """Returns sequential message ids; ``fail_on`` holds 1-based send numbers to refuse."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.sent = []

    async def send(self, message):
        number = len(self.sent) + 1
        self.sent.append(message)
        if number in self.fail_on:
            raise RuntimeError("You can only send testing emails to your own address")
        return f"msg-{number}"


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://proj.supabase.co",
        supabase_key="service-key",
        resend_api_key="re_test",
    )


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def runner(supabase, mailer, settings):
    return QuoteRunner(supabase, mailer, settings, clock=lambda: FIXED_NOW)


@pytest.fixture
def jane_payload():
    return {
        "fullName": "Jane Doe",
        "email": "jane@example.com",
        "phone": "07700900000",
        "pickupAddress": "N1 1AA",
        "pickupSteps": 3,
        "deliveryAddress": "SW1A 1AA",
        "deliverySteps": 0,
    }


@pytest.fixture
def jane(jane_payload):
    return QuoteRequest.model_validate(jane_payload)
