"""
Pydantic schemas for containers.
Integrates with models.container for single source of truth on Enums.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from models.container import (
    ContainerSource,
    ContainerStatus,
    ContainerType,
    normalize_container_number,
)
from schemas.base import CamelModel


class ContainerCreate(CamelModel):
    """
    Gate-in declaration. Format and required-reference checks live in
    ContainerService so direct callers get the same errors as the API.
    """
    container_number: str = Field(..., description="ISO 6346 number, e.g. MSCU1234567")
    type: Optional[ContainerType] = None
    iso_code_id: Optional[str] = None
    shipping_line_id: Optional[str] = None
    client_id: Optional[str] = None
    entry_date: Optional[datetime] = None
    damages: Optional[str] = None
    transporter: Optional[str] = None
    truck_ref: Optional[str] = None
    booking: Optional[str] = None
    vessel: Optional[str] = None
    comments: Optional[str] = None

    @field_validator("container_number", mode="before")
    @classmethod
    def normalize_number(cls, v):
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("Container number must be a string")
        return normalize_container_number(v)


class ContainerUpdate(CamelModel):
    """Descriptive fields only; status and dates change through exits."""
    type: Optional[ContainerType] = None
    iso_code_id: Optional[str] = None
    damages: Optional[str] = None
    transporter: Optional[str] = None
    truck_ref: Optional[str] = None
    booking: Optional[str] = None
    vessel: Optional[str] = None
    client: Optional[str] = None
    comments: Optional[str] = None


class ShippingLineExitRequest(CamelModel):
    booking: str = Field(..., min_length=1)
    vessel: str = Field(..., min_length=1)
    client: str = Field(..., min_length=1)
    comments: Optional[str] = None
    exit_date: Optional[datetime] = None

    @field_validator("booking", "vessel", "client")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v


class ClientExitRequest(CamelModel):
    comments: Optional[str] = None
    exit_date: Optional[datetime] = None


class ContainerQuery(CamelModel):
    """List filters; empty values are treated as absent."""
    status: Optional[ContainerStatus] = None
    shipping_line_id: Optional[str] = None
    type: Optional[ContainerType] = None
    container_number: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1)

    @field_validator("status", "type", "shipping_line_id", "container_number", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ContainerResponse(CamelModel):
    id: str
    container_number: str
    source: ContainerSource
    type: ContainerType
    status: ContainerStatus
    shipping_line_id: Optional[str] = None
    shipping_line_name: Optional[str] = None
    iso_code_id: str
    iso_code: Optional[str] = None
    client_id: Optional[str] = None
    client: Optional[str] = None
    entry_date: datetime
    exit_date: Optional[datetime] = None
    damages: Optional[str] = None
    transporter: Optional[str] = None
    truck_ref: Optional[str] = None
    booking: Optional[str] = None
    vessel: Optional[str] = None
    comments: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ContainerPage(CamelModel):
    """Paginated container list; totals are computed after filtering."""
    items: List[ContainerResponse]
    total: int
    page: int
    limit: int
    total_pages: int
