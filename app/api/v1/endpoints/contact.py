"""Public contact form endpoint."""

from fastapi import APIRouter, status

from app.schemas.contact import ContactFormRequest, ContactResponse
from app.services.contact_service import ContactService

router = APIRouter()


@router.post(
    "/contact",
    response_model=ContactResponse,
    status_code=status.HTTP_200_OK,
    summary="Send facility contact form",
)
async def send_contact_form(data: ContactFormRequest) -> ContactResponse:
    """Forward a facility interest form to the sales inbox."""
    return await ContactService().send_contact_email(data)
