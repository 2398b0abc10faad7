# schemas.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=20)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=14)


class SigninRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=14)


class ConvertGuestRequest(SignupRequest):
    pass


class ProfileUpdateRequest(BaseModel):
    """Partial profile update.

    A key left out of the body keeps the stored value, a value replaces it and
    an explicit ``null`` clears it. Only ``phone`` and ``profilePicture`` can be
    cleared.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    profile_picture: Optional[str] = Field(None, alias="profilePicture")

    @field_validator("name", "email")
    @classmethod
    def _not_clearable(cls, value):
        if value is None:
            raise ValueError("name and email cannot be cleared")
        return value

    @field_validator("phone", "profile_picture")
    @classmethod
    def _blank_is_clear(cls, value):
        if value is not None and not value.strip():
            return None
        return value

    def changes(self) -> dict:
        """Only the fields the caller actually sent."""
        return {name: getattr(self, name) for name in self.model_fields_set}
