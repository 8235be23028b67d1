"""Contact form schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ContactFormRequest(BaseModel):
    """Facility interest form submitted from the public site."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    facility_name: str = Field(..., min_length=1, max_length=200)
    contact_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=20)
    facility_type: str = Field(..., min_length=1, max_length=100)
    facility_size: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)
    message: str | None = Field(None, max_length=2000)


class ContactResponse(BaseModel):
    """Result of forwarding a contact form."""

    success: bool
    message: str
