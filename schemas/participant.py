from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from fastapi import Query
from pydantic import BaseModel, Field, field_validator, model_validator

from validators.participant import (
    is_valid_email,
    is_valid_name,
    is_valid_national_id,
    is_valid_phone,
)
from validators.reference import (
    is_valid_reference,
    is_valid_ticket_number,
    normalize_reference,
)

MAX_ADMIN_TICKETS = 100


class ParticipantData(BaseModel):
    name: str
    email: str
    phone: str
    national_id: str

    @field_validator("name")
    def validate_name(cls, v: str) -> str:
        if not is_valid_name(v):
            raise ValueError("Name must have at least 2 characters.")
        return v.strip()

    @field_validator("email")
    def validate_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Invalid email address.")
        return v.strip()

    @field_validator("phone")
    def validate_phone(cls, v: str) -> str:
        if not is_valid_phone(v):
            raise ValueError("Phone number must have between 7 and 15 digits.")
        return v.strip()

    @field_validator("national_id")
    def validate_national_id(cls, v: str) -> str:
        if not is_valid_national_id(v):
            raise ValueError("National id must be 6 to 8 digits, optionally prefixed by V or E.")
        return v.strip()


class ParticipantQuery(BaseModel):
    page: int = Query(1, ge=1, description="Page Number")
    limit: int = Query(10, ge=1, le=500, description="Page Size")
    search: Optional[str] = Query(
        None, description="Search by name, email, national id or reference"
    )
    date_from: Optional[date] = Query(None, description="Created from (inclusive)")
    date_to: Optional[date] = Query(None, description="Created until (inclusive)")
    reference: Optional[str] = Query(None, description="Filter by reference code")


class ParticipantExportQuery(BaseModel):
    date_from: Optional[date] = Query(None, description="Created from (inclusive)")
    date_to: Optional[date] = Query(None, description="Created until (inclusive)")
    reference: Optional[str] = Query(None, description="Filter by reference code")


class ParticipantCreateRequest(ParticipantData):
    ticket_count: int = Field(ge=1, le=MAX_ADMIN_TICKETS)
    reference: Optional[str] = None

    @field_validator("reference", mode="before")
    def validate_reference(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if not is_valid_reference(v):
            raise ValueError("Reference must be exactly 6 digits.")
        return normalize_reference(v)


class ParticipantTicketsUpdateRequest(BaseModel):
    add_tickets: Optional[int] = Field(default=None, ge=1, le=MAX_ADMIN_TICKETS)
    remove_tickets: Optional[List[str]] = None

    @field_validator("remove_tickets")
    def validate_remove_tickets(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        invalid = [number for number in v if not is_valid_ticket_number(number)]
        if invalid:
            raise ValueError(f"Invalid ticket numbers: {', '.join(invalid)}")
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.add_tickets and not self.remove_tickets:
            raise ValueError("Either add_tickets or remove_tickets is required.")
        return self


class ParticipantResponseItem(BaseModel):
    id: UUID
    reference: Optional[str] = Field(default=None, validation_alias="reference_code")
    name: str
    email: str
    phone: str
    national_id: str
    tickets: List[str]
    generated_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class ParticipantListResponse(BaseModel):
    participants: List[ParticipantResponseItem]
    total: int
    page: int
    limit: int
