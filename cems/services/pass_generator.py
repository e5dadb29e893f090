# cems/services/pass_generator.py
"""
Registration passes: signed ticket tokens, QR images and printable PDFs.

Token format (HS256 JWT signed with QR_SIGNING_SECRET):
  eid: event ID
  sub: student user ID
  rtk: random freshness token, makes every registration's token unique
  iat: issued-at timestamp
  v:   token format version

The token is generated once at registration and stored on the
registration row. Passes are always rendered from that stored value, so
re-fetching a pass produces the same QR code and the scanner can check it
against the database.

Files are written to:
  {UPLOADS_DIR}/qr/qr_{registration_id}.png
  {UPLOADS_DIR}/passes/pass_{registration_id}.pdf
"""

import base64
import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from typing import Optional

import jwt
import qrcode
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from cems.core.config import settings
from cems.core.exceptions import DependencyFailure

logger = logging.getLogger(__name__)

TOKEN_VERSION = 2
TOKEN_ALGORITHM = "HS256"


@dataclass
class PassArtifacts:
    token: str
    qr_image: Optional[str] = None
    qr_file_url: Optional[str] = None
    pdf_file_url: Optional[str] = None
    qr_path: Optional[str] = None
    pdf_path: Optional[str] = None

    @property
    def attachment_paths(self) -> list:
        return [p for p in (self.qr_path, self.pdf_path) if p]


class PassGenerator:
    def __init__(
        self,
        secret: Optional[str] = None,
        uploads_dir: Optional[str] = None,
        url_prefix: Optional[str] = None,
    ):
        self.secret = secret or settings.QR_SIGNING_SECRET
        self.uploads_dir = uploads_dir or settings.UPLOADS_DIR
        self.url_prefix = (url_prefix or settings.UPLOADS_URL_PREFIX).rstrip("/")

    # --- tokens ---

    def issue_token(
        self, event_id: str, student_id: str, now: Optional[datetime] = None
    ) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "eid": event_id,
            "sub": student_id,
            "rtk": secrets.token_urlsafe(12),
            "iat": int(now.timestamp()),
            "v": TOKEN_VERSION,
        }
        return jwt.encode(payload, self.secret, algorithm=TOKEN_ALGORITHM)

    def verify_token(self, token: str) -> Optional[dict]:
        """Returns the decoded claims, or None if the signature or shape is invalid."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[TOKEN_ALGORITHM])
        except jwt.InvalidTokenError:
            return None
        if not claims.get("eid") or not claims.get("sub"):
            return None
        return claims

    # --- rendering ---

    def qr_png(self, token: str) -> bytes:
        buffer = BytesIO()
        qrcode.make(token).save(buffer, format="PNG")
        return buffer.getvalue()

    def render(self, registration, event, user) -> PassArtifacts:
        """
        Renders the QR image and the PDF pass from the registration's stored
        token. Failures are logged and leave the corresponding fields empty.
        """
        artifacts = PassArtifacts(token=registration.qr_code)

        try:
            png = self._write_qr(registration, artifacts)
        except DependencyFailure as e:
            logger.error(
                f"QR generation failed for registration {registration.id}: {e.message}",
                exc_info=True,
            )
            return artifacts

        try:
            self._write_pdf(registration, event, user, png, artifacts)
        except DependencyFailure as e:
            logger.error(
                f"PDF generation failed for registration {registration.id}: {e.message}",
                exc_info=True,
            )

        return artifacts

    def _path(self, subdir: str, filename: str) -> str:
        directory = os.path.join(self.uploads_dir, subdir)
        os.makedirs(directory, exist_ok=True)
        return os.path.join(directory, filename)

    def _write_qr(self, registration, artifacts: PassArtifacts) -> bytes:
        filename = f"qr_{registration.id}.png"
        try:
            png = self.qr_png(registration.qr_code)
            path = self._path("qr", filename)
            with open(path, "wb") as fh:
                fh.write(png)
        except (OSError, ValueError) as e:
            raise DependencyFailure(str(e), dependency="qrcode") from e

        artifacts.qr_image = "data:image/png;base64," + base64.b64encode(png).decode("ascii")
        artifacts.qr_path = path
        artifacts.qr_file_url = f"{self.url_prefix}/qr/{filename}"
        return png

    def _write_pdf(self, registration, event, user, png: bytes, artifacts: PassArtifacts):
        filename = f"pass_{registration.id}.pdf"
        try:
            path = self._path("passes", filename)
            self._draw_pdf(path, registration, event, user, png)
        except (OSError, ValueError) as e:
            raise DependencyFailure(str(e), dependency="reportlab") from e

        artifacts.pdf_path = path
        artifacts.pdf_file_url = f"{self.url_prefix}/passes/{filename}"

    def _draw_pdf(self, path: str, registration, event, user, png: bytes):
        width, height = A4
        c = canvas.Canvas(path, pagesize=A4)
        c.setTitle(f"Registration Pass - {event.title}")

        # Frame
        c.setStrokeColorRGB(0.8, 0.8, 0.8)
        c.rect(20 * mm, height - 140 * mm, width - 40 * mm, 120 * mm)

        # Event block
        y = height - 35 * mm
        c.setFont("Helvetica-Bold", 18)
        c.drawString(28 * mm, y, event.title[:60])
        c.setFont("Helvetica", 11)
        y -= 9 * mm
        c.drawString(
            28 * mm,
            y,
            f"{event.event_date.isoformat()}  "
            f"{event.start_time.strftime('%H:%M')} - {event.end_time.strftime('%H:%M')}",
        )
        venue = getattr(event, "venue", None)
        if venue is not None:
            y -= 7 * mm
            c.drawString(28 * mm, y, f"{venue.name}, {venue.location}")

        # Attendee block
        y -= 18 * mm
        c.setFont("Helvetica-Bold", 12)
        c.drawString(28 * mm, y, "Attendee")
        c.setFont("Helvetica", 11)
        y -= 7 * mm
        c.drawString(28 * mm, y, f"{user.first_name} {user.last_name}")
        y -= 6 * mm
        c.drawString(28 * mm, y, user.email)
        if user.student_id:
            y -= 6 * mm
            c.drawString(28 * mm, y, f"Student ID: {user.student_id}")

        c.setFont("Helvetica", 8)
        c.drawString(28 * mm, height - 132 * mm, f"Registration {registration.id}")

        # QR code, right side
        c.drawImage(
            ImageReader(BytesIO(png)),
            width - 80 * mm,
            height - 95 * mm,
            width=50 * mm,
            height=50 * mm,
        )

        c.showPage()
        c.save()


pass_generator = PassGenerator()
