from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from fastapi import Query
from pydantic import BaseModel, Field, field_validator

from validators.reference import is_valid_reference, normalize_reference


class ReferenceAvailability(BaseModel):
    code: str
    used: bool
    ticket_count: int
    ticket_value: Decimal


class ReferenceQuery(BaseModel):
    page: int = Query(1, ge=1, description="Page Number")
    limit: int = Query(10, ge=1, le=500, description="Page Size")
    used: Optional[bool] = Query(None, description="Filter by used flag")
    search: Optional[str] = Query(None, description="Search by reference code")


class ReferenceExportQuery(BaseModel):
    used: Optional[bool] = Query(None, description="Filter by used flag")


class ReferenceCreateRequest(BaseModel):
    reference: str
    ticket_count: int = Field(ge=1)
    ticket_value: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("reference", mode="before")
    def validate_reference(cls, v):
        if not is_valid_reference(v):
            raise ValueError("Reference must be exactly 6 digits.")
        return normalize_reference(v)


class ReferenceBulkItem(BaseModel):
    # validated one by one so a bad row does not reject the whole batch
    reference: Optional[str] = None
    ticket_count: Optional[int] = None
    ticket_value: Optional[Decimal] = None


class ReferenceBulkCreateRequest(BaseModel):
    references: List[ReferenceBulkItem] = Field(min_length=1)


class ReferenceBulkCreateResponse(BaseModel):
    created: int
    errors: List[str]


class ReferenceUpdateRequest(BaseModel):
    ticket_count: Optional[int] = Field(default=None, ge=1)
    ticket_value: Optional[Decimal] = Field(default=None, ge=0)
    used: Optional[bool] = None


class ReferenceResponseItem(BaseModel):
    id: UUID
    reference: str = Field(validation_alias="code")
    ticket_count: int
    ticket_value: float
    used: bool
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class ReferenceListResponse(BaseModel):
    references: List[ReferenceResponseItem]
    total: int
    page: int
    limit: int
