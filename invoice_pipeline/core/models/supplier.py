"""
Supplier model representing the owner of a set of invoices.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class Supplier(BaseModel):
    """
    A supplier, identified by its internal id.

    Attributes:
        internal_id: Natural key from the source file (PK)
        external_id: Identifier in the supplier's own systems
        company_name: Registered company name
        address: Street address
        city: City
        country: Country
        contact_name: Contact person
        phone: Contact phone
        email: Contact email
        bank_code: Bank code
        bank_branch_code: Bank branch code
        bank_account_number: Bank account number
        status: ACTIVE or INACTIVE
        stock_value: Stock value held with the supplier
        withholding_tax: Withholding tax rate
    """

    internal_id: str = Field(..., min_length=1, max_length=50)
    external_id: str | None = Field(None, max_length=50)
    company_name: str = Field(..., max_length=100)
    address: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    country: str = Field(..., max_length=50)
    contact_name: str = Field(..., max_length=100)
    phone: str = Field(..., max_length=20)
    email: str = Field(..., max_length=100)
    bank_code: str = Field(..., max_length=50)
    bank_branch_code: str = Field(..., max_length=50)
    bank_account_number: str
    status: Literal["ACTIVE", "INACTIVE"] = "ACTIVE"
    stock_value: Decimal = Field(..., ge=0)
    withholding_tax: Decimal = Field(..., ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "internal_id": "S1",
                "external_id": "EXT-001",
                "company_name": "Acme Ltd",
                "address": "1 Main Street",
                "city": "London",
                "country": "UK",
                "contact_name": "Jane Roe",
                "phone": "+44 20 0000 0000",
                "email": "jane@acme.example",
                "bank_code": "001",
                "bank_branch_code": "0101",
                "bank_account_number": "12345678",
                "status": "ACTIVE",
                "stock_value": "1500.00",
                "withholding_tax": "2.50"
            }
        }
