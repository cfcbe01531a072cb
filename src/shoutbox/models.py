# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for outgoing Shoutbox messages.

This module defines the request model shared by the HTTP and SMTP
dispatchers and the outcome type returned by the HTTP dispatcher.

Models:
    - Base64Content / RawContent: Tagged attachment content variants
    - Attachment: A file attached to a message
    - EmailOptions: One email send request
    - SendResult: Outcome of one HTTP send
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Base64Content(BaseModel):
    """Attachment content already encoded as base64 text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["base64"] = "base64"
    data: str

    def as_base64(self) -> str:
        return self.data

    def as_bytes(self) -> bytes:
        return base64.b64decode(self.data)


class RawContent(BaseModel):
    """Attachment content as raw bytes."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["raw"] = "raw"
    data: bytes

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def as_bytes(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"RawContent(size={len(self.data)} bytes)"


AttachmentContent = Union[Base64Content, RawContent]


class Attachment(BaseModel):
    """A file attached to a message.

    Attributes:
        filepath: Source location, read when ``content`` is not supplied.
        filename: Name shown to recipients (default: last segment of filepath).
        content_type: MIME type (default: guessed from filename).
        content: Inline content. A ``str`` is taken as base64 text, ``bytes``
            as raw content.
    """

    model_config = ConfigDict(populate_by_name=True)

    filepath: Annotated[
        str,
        Field(description="Source path of the attachment")
    ]
    filename: Annotated[
        str | None,
        Field(default=None, description="Attachment filename")
    ]
    content_type: Annotated[
        str | None,
        Field(default=None, alias="contentType", description="MIME type")
    ]
    content: Annotated[
        AttachmentContent | None,
        Field(default=None, description="Inline base64 text or raw bytes")
    ]

    @field_validator("content", mode="before")
    @classmethod
    def tag_plain_content(cls, v: Any) -> Any:
        """Wrap plain ``str``/``bytes`` into their content variant."""
        if isinstance(v, str):
            return Base64Content(data=v) if v else None
        if isinstance(v, (bytes, bytearray)):
            return RawContent(data=bytes(v)) if v else None
        return v

    @field_serializer("content")
    def serialize_content(self, value: AttachmentContent | None) -> str | None:
        if value is None:
            return None
        return value.as_base64()

    @property
    def is_resolved(self) -> bool:
        return bool(self.filename and self.content_type and self.content is not None)


Recipients = Union[str, list[str]]


class EmailOptions(BaseModel):
    """One email send request.

    Fields may be given by their Python names or by their wire names
    (``from``, ``replyTo``, ``templateContent``).

    Attributes:
        from_: Sender address.
        name: Optional sender display name.
        to: One address or an ordered list of addresses.
        cc: Optional carbon-copy addresses, same shape as ``to``.
        subject: Subject line.
        html: HTML body.
        text: Plain-text body.
        template_content: Opaque template value rendered into ``html``.
        attachments: Files attached to the message.
        reply_to: Reply-To address.
        headers: Extra headers, sent out-of-band from the JSON body.
        tags: Free-form tags carried to the service.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    from_: Annotated[
        str,
        Field(alias="from", min_length=1, description="Sender address")
    ]
    name: Annotated[
        str | None,
        Field(default=None, description="Sender display name")
    ]
    to: Annotated[
        Recipients,
        Field(description="Recipient address or list of addresses")
    ]
    cc: Annotated[
        Recipients | None,
        Field(default=None, description="Carbon-copy address or list of addresses")
    ]
    subject: Annotated[
        str,
        Field(description="Subject line")
    ]
    html: Annotated[
        str | None,
        Field(default=None, description="HTML body")
    ]
    text: Annotated[
        str | None,
        Field(default=None, description="Plain-text body")
    ]
    template_content: Annotated[
        Any,
        Field(default=None, alias="templateContent", exclude=True,
              description="Template value rendered into the HTML body")
    ]
    attachments: Annotated[
        list[Attachment] | None,
        Field(default=None, description="Attachments")
    ]
    reply_to: Annotated[
        str | None,
        Field(default=None, alias="replyTo", description="Reply-To address")
    ]
    headers: Annotated[
        dict[str, str] | None,
        Field(default=None, description="Extra transport headers")
    ]
    tags: Annotated[
        dict[str, str] | None,
        Field(default=None, description="Free-form tags")
    ]

    @field_validator("to")
    @classmethod
    def to_not_empty(cls, v: Recipients) -> Recipients:
        """Validate that at least one recipient is given."""
        if not v:
            raise ValueError("at least one recipient is required")
        return v


def address_list(value: Recipients | None) -> list[str]:
    """Return recipients as a list, keeping caller order and duplicates."""
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


@dataclass
class SendResult:
    """Outcome of one HTTP send.

    Attributes:
        ok: True when the service answered with a 2xx status.
        status: HTTP status code, None when no response was received.
        data: Parsed JSON body of a successful response.
        error: Response text of a rejection, or the exception message.
        exception: The transport exception, for outcomes collected by
            ``Shoutbox.send_emails``.
    """

    ok: bool
    status: int | None = None
    data: Any = None
    error: str | None = None
    exception: BaseException | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "SendResult":
        return cls(ok=False, error=str(exc) or exc.__class__.__name__, exception=exc)

    def __repr__(self) -> str:
        if self.ok:
            return f"SendResult(ok=True, status={self.status})"
        return f"SendResult(ok=False, status={self.status}, error={self.error!r})"
