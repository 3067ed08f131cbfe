"""Submission pipeline for a single piano-moving quote request."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from .business import CONTACT_CARD_PATH, build_vcard
from .config import Settings
from .email_templates import build_business_email, build_customer_email
from .errors import (
    AcknowledgementError,
    NotificationError,
    PersistenceError,
    RenderError,
    StorageError,
)
from .job_sheet import render_job_sheet
from .links import slugify, thread_id
from .mailer import ResendMailer
from .models import Attachment, JobRecord, OutboundEmail, QuoteRequest, QuoteResult
from .supabase_client import SupabaseClient
from .validation import decode_attachments, validate_quote

log = logging.getLogger("piano-quote.runner")

JOB_REF_PREFIX = "PMT-"
CUSTOMER_SUBJECT = "Thank you for your piano moving quote request"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_job_reference(now: datetime) -> str:
    """``PMT-`` plus the last six digits of the millisecond clock; readable over the phone."""
    millis = int(now.timestamp() * 1000)
    return f"{JOB_REF_PREFIX}{str(millis)[-6:]}"


def storage_timestamp(now: datetime) -> str:
    iso = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def business_subject(q: QuoteRequest, photo_count: int) -> str:
    photos = f" ({photo_count} photos)" if photo_count > 0 else ""
    return f"Piano Quote - {q.full_name}{photos} + PDF"


class QuoteRunner:
    def __init__(
        self,
        supabase_client: SupabaseClient,
        mailer: ResendMailer,
        settings: Settings,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.supabase_client = supabase_client
        self.mailer = mailer
        self.settings = settings
        self.clock = clock

    async def submit(self, quote: QuoteRequest) -> QuoteResult:
        validate_quote(quote)
        photos = decode_attachments(quote.attachments)

        now = self.clock()
        ref = make_job_reference(now)
        # Names with no ASCII letters or digits thread under the job reference.
        slug = slugify(quote.full_name) or ref.lower()
        record = JobRecord(
            job_reference=ref,
            slug=slug,
            thread_id=thread_id(slug, self.settings.thread_domain),
            timestamp=storage_timestamp(now),
            created_at=now,
            attachment_count=len(photos),
        )
        log.info("Quote %s from %s (%d photos) - generating job sheet", ref, quote.full_name, len(photos))

        try:
            pdf = render_job_sheet(quote, ref, generated_on=now.date())
        except RenderError as exc:
            exc.job_reference = ref
            raise
        except Exception as exc:
            raise RenderError(f"Failed to render job sheet: {exc}", ref) from exc

        record.document_path = f"job-sheets/{ref}-{record.timestamp}.pdf"
        try:
            record.document_url = await self.supabase_client.upload(
                record.document_path, pdf, "application/pdf", upsert=False
            )
        except Exception as exc:
            log.error("Job sheet upload failed for %s: %s", ref, exc)
            raise StorageError("Failed to upload PDF to storage", ref) from exc

        record.contact_card_url = await self._upload_contact_card(ref)

        try:
            await self.supabase_client.insert_quote(self._quote_row(quote, record))
            record.persisted = True
        except Exception as exc:
            if self.settings.require_persistence:
                log.error("Quote row insert failed for %s: %s", ref, exc)
                raise PersistenceError(f"Failed to save quote: {exc}", ref) from exc
            log.warning("Quote row insert failed for %s, continuing with emails: %s", ref, exc)

        try:
            email_id = await self.mailer.send(self._business_email(quote, record, photos, pdf))
        except Exception as exc:
            log.error("Business email failed for %s: %s", ref, exc)
            raise NotificationError(str(exc), ref) from exc
        log.info("Business email sent for %s. ID: %s", ref, email_id)

        customer_email_id = None
        try:
            customer_email_id = await self._send_acknowledgement(quote, record)
        except AcknowledgementError as exc:
            log.error("Customer email failed for %s: %s", ref, exc.message)

        return QuoteResult(
            job_reference=ref,
            document_url=record.document_url,
            contact_card_url=record.contact_card_url,
            attachment_count=record.attachment_count,
            email_id=email_id,
            customer_email_id=customer_email_id,
            persisted=record.persisted,
        )

    async def _send_acknowledgement(self, q: QuoteRequest, record: JobRecord) -> str:
        try:
            message_id = await self.mailer.send(self._customer_email(q, record))
        except Exception as exc:
            raise AcknowledgementError(str(exc), record.job_reference) from exc
        log.info("Customer email sent to %s", q.email)
        return message_id

    async def _upload_contact_card(self, ref: str) -> str:
        try:
            return await self.supabase_client.upload(
                CONTACT_CARD_PATH, build_vcard(), "text/vcard", upsert=True
            )
        except Exception as exc:
            # The card is shared by every quote, so an earlier copy is normally still there.
            log.warning("Contact card upload failed for %s: %s", ref, exc)
            return self.supabase_client.public_url(CONTACT_CARD_PATH)

    def _quote_row(self, q: QuoteRequest, record: JobRecord) -> dict[str, Any]:
        return {
            "job_ref": record.job_reference,
            "customer_name": q.full_name,
            "customer_email": q.email,
            "customer_phone": q.phone,
            "piano_type": q.piano_type,
            "pickup_postcode": q.pickup_address,
            "pickup_steps": q.pickup_steps,
            "delivery_postcode": q.delivery_address,
            "delivery_steps": q.delivery_steps,
            "special_requirements": q.special_requirements,
            "pdf_url": record.document_url,
            "attachments_count": record.attachment_count,
            "created_at": record.created_at.isoformat(),
        }

    def _business_email(
        self, q: QuoteRequest, record: JobRecord, photos: list[Attachment], pdf: bytes
    ) -> OutboundEmail:
        attachments = [*photos, Attachment(filename=f"Job-Sheet-{record.job_reference}.pdf", content=pdf)]
        return OutboundEmail(
            from_email=self.settings.business_from,
            to=self.settings.business_to,
            cc=self.settings.business_cc,
            reply_to=q.email,
            subject=business_subject(q, record.attachment_count),
            html=build_business_email(
                q, record.job_reference, record.document_url or "", record.attachment_count, record.created_at
            ),
            attachments=attachments,
            headers={
                "References": record.thread_id,
                "In-Reply-To": record.thread_id,
                "X-Entity-Ref-ID": f"customer-{record.slug}",
            },
        )

    def _customer_email(self, q: QuoteRequest, record: JobRecord) -> OutboundEmail:
        return OutboundEmail(
            from_email=self.settings.customer_from,
            to=[q.email],
            subject=CUSTOMER_SUBJECT,
            html=build_customer_email(q, record.contact_card_url),
        )


def build_runner(settings: Settings) -> QuoteRunner:
    return QuoteRunner(
        supabase_client=SupabaseClient(
            url=settings.supabase_url,
            service_key=settings.supabase_key,
            bucket=settings.storage_bucket,
            table=settings.quotes_table,
        ),
        mailer=ResendMailer(api_key=settings.resend_api_key, base_url=settings.resend_base_url),
        settings=settings,
    )
