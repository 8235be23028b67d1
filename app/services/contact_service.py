"""Forwarding of facility contact forms to the e-mail provider."""

from html import escape

import httpx
import structlog

from app.config import settings
from app.core.exceptions import ExternalServiceException
from app.schemas.contact import ContactFormRequest, ContactResponse

logger = structlog.get_logger()


def render_contact_email(form: ContactFormRequest) -> str:
    """Render the notification body sent to the sales inbox."""
    rows = [
        ("Facility Name", form.facility_name),
        ("Contact Person", form.contact_name),
        ("Email", str(form.email)),
        ("Phone", form.phone),
        ("Facility Type", form.facility_type),
        ("Facility Size", form.facility_size),
        ("Location", form.location),
    ]
    if form.message:
        rows.append(("Additional Message", form.message))

    details = "\n".join(
        f"<p><strong>{label}:</strong> {escape(value)}</p>" for label, value in rows
    )
    return (
        "<h1>New Interest in SynchoraHealth</h1>\n"
        "<h2>Facility Information</h2>\n"
        f"{details}\n"
        "<hr />\n"
        "<p>This inquiry was submitted via the SynchoraHealth contact form.</p>"
    )


class ContactService:
    """Sends contact form submissions through the Resend HTTP API."""

    TIMEOUT = 10.0

    async def send_contact_email(self, form: ContactFormRequest) -> ContactResponse:
        """
        Forward a contact form.

        Raises:
            ExternalServiceException: If delivery is not configured or fails
        """
        if not settings.resend_api_key:
            raise ExternalServiceException("E-mail delivery is not configured")

        payload = {
            "from": settings.contact_sender,
            "to": [settings.contact_recipient],
            "subject": f"New Facility Interest: {form.facility_name}",
            "html": render_contact_email(form),
        }

        async with httpx.AsyncClient(timeout=self.TIMEOUT) as client:
            try:
                response = await client.post(
                    settings.resend_api_url,
                    headers={"Authorization": f"Bearer {settings.resend_api_key}"},
                    json=payload,
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error("contact_email_failed", facility=form.facility_name, error=str(e))
                raise ExternalServiceException("Failed to send contact email") from e

        logger.info("contact_email_sent", facility=form.facility_name)
        return ContactResponse(success=True, message="Email sent successfully")
