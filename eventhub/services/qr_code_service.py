"""
QR Code Service
Builds, signs, renders and parses the payload printed on each ticket
"""

import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from typing import Optional
from uuid import UUID

import qrcode

from eventhub.config import settings
from eventhub.core.exceptions import InvalidQRCodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QRPayload:
    """Decoded ticket QR payload"""
    ticket_id: UUID
    booking_id: UUID
    event_id: UUID
    issued_at: datetime


class QRCodeService:
    """
    Payload format: ``ticket|booking|event|yyyyMMddHHmmss|signature``

    The signature is a truncated HMAC-SHA256 of the first four fields, so a
    payload typed up by hand does not verify.
    """

    DELIMITER = "|"
    TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
    FIELD_COUNT = 5

    def __init__(self, signing_key: Optional[str] = None, signature_length: Optional[int] = None):
        self._key = (signing_key or settings.qr_signing_key).encode()
        self._signature_length = signature_length or settings.QR_SIGNATURE_LENGTH

    def _sign(self, message: str) -> str:
        digest = hmac.new(self._key, message.encode(), hashlib.sha256).hexdigest()
        return digest[:self._signature_length]

    def build_payload(
        self,
        ticket_id: UUID,
        booking_id: UUID,
        event_id: UUID,
        issued_at: Optional[datetime] = None
    ) -> str:
        """Build the signed payload string for one ticket"""
        issued_at = issued_at or datetime.now(timezone.utc)
        message = self.DELIMITER.join([
            str(ticket_id),
            str(booking_id),
            str(event_id),
            issued_at.strftime(self.TIMESTAMP_FORMAT),
        ])
        return f"{message}{self.DELIMITER}{self._sign(message)}"

    def parse_payload(self, payload: str) -> QRPayload:
        """Parse and authenticate a scanned payload"""
        parts = (payload or "").strip().split(self.DELIMITER)
        if len(parts) != self.FIELD_COUNT:
            raise InvalidQRCodeError("unexpected field count")

        *fields, signature = parts
        expected = self._sign(self.DELIMITER.join(fields))
        if not hmac.compare_digest(signature, expected):
            raise InvalidQRCodeError("signature mismatch")

        try:
            ticket_id, booking_id, event_id = (UUID(value) for value in fields[:3])
        except ValueError:
            raise InvalidQRCodeError("malformed identifier")

        try:
            issued_at = datetime.strptime(fields[3], self.TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            raise InvalidQRCodeError("malformed timestamp")

        return QRPayload(
            ticket_id=ticket_id,
            booking_id=booking_id,
            event_id=event_id,
            issued_at=issued_at
        )

    def is_valid(self, payload: str) -> bool:
        try:
            self.parse_payload(payload)
        except InvalidQRCodeError:
            return False
        return True

    def render_png(self, payload: str, box_size: int = 10, border: int = 4) -> bytes:
        """Encode the payload as a PNG QR image"""
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_Q,
            box_size=box_size,
            border=border,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()

    def render_base64(self, payload: str) -> str:
        return base64.b64encode(self.render_png(payload)).decode("ascii")


qr_code_service = QRCodeService()
