"""
Container SQLAlchemy model with the yard lifecycle state machine.
"""
import re
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional, cast

from sqlalchemy import Column, DateTime, Enum, Index, String, Text

from core.database import Base
from core.clock import utcnow

# ISO 6346 layout: 3-letter owner code, category identifier U, then 7 digits
# (serial plus check digit). Only the format is checked; the check digit is not verified.
CONTAINER_NUMBER_PATTERN = re.compile(r"^[A-Z]{3}U[0-9]{7}$")


def normalize_container_number(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def is_valid_container_number(value: Optional[str]) -> bool:
    return bool(CONTAINER_NUMBER_PATTERN.match(value or ""))


class ContainerType(PyEnum):
    DRY = "DRY"
    REEFER = "REEFER"


class ContainerStatus(PyEnum):
    """Container status in the yard."""
    IN_PARK = "IN_PARK"
    OUT = "OUT"
    # Reserved for an outbound reservation flow; no transition sets or clears it
    BOOKED = "BOOKED"


class ContainerSource(PyEnum):
    """Who declared the container at the gate."""
    SHIPPING_LINE = "SHIPPING_LINE"
    CLIENT = "CLIENT"


# State transition rules: which states can transition to which
VALID_STATE_TRANSITIONS = {
    ContainerStatus.IN_PARK: [
        ContainerStatus.OUT,
    ],
    ContainerStatus.OUT: [],  # Terminal for this presence; re-entry is a new record
    ContainerStatus.BOOKED: [],
}


class Container(Base):
    """
    One physical presence of a container in the yard.

    Reference ids are plain columns, not foreign keys: deleting a shipping
    line, ISO code or client leaves the id in place, and the names captured
    at entry keep the record readable.
    """
    __tablename__ = "containers"

    __table_args__ = (
        Index("ix_containers_number_status", "container_number", "status"),
    )

    id = Column(String(36), primary_key=True, doc="Allocated identifier, never reused")

    container_number = Column(
        String(11),
        nullable=False,
        index=True,
        doc="ISO 6346 container number, e.g. MSCU1234567"
    )

    source = Column(
        Enum(ContainerSource, native_enum=False),
        nullable=False,
        default=ContainerSource.SHIPPING_LINE,
    )

    type = Column(Enum(ContainerType, native_enum=False), nullable=False)

    status = Column(
        Enum(ContainerStatus, native_enum=False),
        nullable=False,
        default=ContainerStatus.IN_PARK,
        index=True,
    )

    # Non-owning references, with the names resolved at entry time
    shipping_line_id = Column(String(36), nullable=True, index=True)
    shipping_line_name = Column(String(120), nullable=True)
    iso_code_id = Column(String(36), nullable=False)
    iso_code = Column(String(4), nullable=True)
    client_id = Column(String(36), nullable=True)
    client = Column(String(200), nullable=True)

    entry_date = Column(DateTime, nullable=False)
    exit_date = Column(DateTime, nullable=True, doc="Set only when status is OUT")

    # Descriptive fields
    damages = Column(Text, nullable=True)
    transporter = Column(String(120), nullable=True)
    truck_ref = Column(String(60), nullable=True)
    booking = Column(String(60), nullable=True)
    vessel = Column(String(120), nullable=True)
    comments = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    def can_transition_to(self, new_status: ContainerStatus) -> bool:
        current_status = cast(ContainerStatus, self.status)
        return new_status in VALID_STATE_TRANSITIONS.get(current_status, [])

    def touch(self, at_time: Optional[datetime] = None) -> None:
        self.updated_at = at_time or utcnow()

    def __repr__(self) -> str:
        return (
            f"<Container(id={self.id}, container_number={self.container_number}, "
            f"type={self.type.value}, status={self.status.value})>"
        )
