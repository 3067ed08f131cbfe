"""Shared data models for the piano quote pipeline."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class QuoteRequest(BaseModel):
    """Quote request as submitted by the website form.

    Both the camelCase names and the lowercase names the older site form posts
    are accepted. Step counts are kept as received; the job sheet decides
    whether they can be drawn.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    full_name: str = Field("", validation_alias=AliasChoices("fullName", "fullname", "full_name"))
    email: str = ""
    phone: str = ""
    piano_type: str | None = Field(
        None, validation_alias=AliasChoices("pianoType", "pianotype", "piano_type")
    )
    pickup_address: str = Field(
        "", validation_alias=AliasChoices("pickupAddress", "pickup_postcode", "pickup_address")
    )
    pickup_steps: int | float | str | None = Field(
        None, validation_alias=AliasChoices("pickupSteps", "pickup_steps")
    )
    delivery_address: str = Field(
        "", validation_alias=AliasChoices("deliveryAddress", "delivery_postcode", "delivery_address")
    )
    delivery_steps: int | float | str | None = Field(
        None, validation_alias=AliasChoices("deliverySteps", "delivery_steps")
    )
    special_requirements: str | None = Field(
        None,
        validation_alias=AliasChoices(
            "specialRequirements", "specialrequirements", "special_requirements"
        ),
    )
    attachments: list[Any] = Field(default_factory=list)

    @field_validator("full_name", "email", "phone", "pickup_address", "delivery_address", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("attachments", mode="before")
    @classmethod
    def _attachments_list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @property
    def has_special_requirements(self) -> bool:
        return bool(self.special_requirements and self.special_requirements.strip())


class Attachment(BaseModel):
    filename: str
    content: bytes


class OutboundEmail(BaseModel):
    from_email: str
    to: list[str]
    cc: list[str] = Field(default_factory=list)
    reply_to: str | None = None
    subject: str
    html: str
    attachments: list[Attachment] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)


class JobRecord(BaseModel):
    """Everything derived for one accepted submission, filled in stage by stage."""

    job_reference: str
    slug: str
    thread_id: str
    timestamp: str
    created_at: datetime
    document_path: str = ""
    document_url: str | None = None
    contact_card_url: str | None = None
    attachment_count: int = 0
    persisted: bool = False


class QuoteResult(BaseModel):
    job_reference: str
    document_url: str
    contact_card_url: str | None = None
    attachment_count: int
    email_id: str | None = None
    customer_email_id: str | None = None
    persisted: bool = False

    def to_response(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": "Quote sent successfully",
            "jobRef": self.job_reference,
            "pdfUrl": self.document_url,
            "vcfUrl": self.contact_card_url,
            "emailId": self.email_id,
            "customerEmailId": self.customer_email_id,
            "attachments": self.attachment_count,
        }
