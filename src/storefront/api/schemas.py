"""Pydantic schemas for the API collaborator and the address form boundary."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Envelope every API call answers with.

    Callers branch on ``success``; a response is never assumed to succeed.
    """

    success: bool
    data: Any = None
    message: str | None = None


class AddressForm(BaseModel):
    """Address as submitted by the address form.

    Pincode and phone formats are checked here, before anything reaches the
    address book.
    """

    model_config = {
        "str_strip_whitespace": True,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "type": "home",
                    "name": "Asha Verma",
                    "street": "12 Lake View Road",
                    "city": "Jaipur",
                    "state": "Rajasthan",
                    "pincode": "302001",
                    "phone": "9876543210",
                    "isDefault": True,
                }
            ]
        },
    }

    type: Literal["home", "work", "other"] = "home"
    name: str = Field(..., min_length=2, max_length=50)
    street: str = Field(..., min_length=5, max_length=200)
    city: str = Field(..., min_length=2, max_length=50)
    state: str = Field(..., min_length=2, max_length=50)
    pincode: str = Field(..., pattern=r"^[1-9][0-9]{5}$")
    phone: str = Field(..., pattern=r"^[6-9]\d{9}$")
    is_default: bool = Field(False, alias="isDefault")

    def to_address_fields(self) -> dict:
        """Keyword arguments for ``AddressBookService.add``."""
        return {
            "address_type": self.type,
            "name": self.name,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
            "phone": self.phone,
            "is_default": self.is_default,
        }
