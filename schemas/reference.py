"""
Schemas for yard reference data: shipping lines, ISO codes and clients.
"""
import re
from typing import Annotated, Optional

from pydantic import AfterValidator

from schemas.base import CamelModel

SHIPPING_LINE_CODE_PATTERN = re.compile(r"^[A-Z]{1,3}$")
ISO_CODE_PATTERN = re.compile(r"^[0-9]{2}[A-Z][0-9]$")


def _required_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Field is required")
    return v


def _shipping_line_code(v: str) -> str:
    v = v.strip().upper()
    if not SHIPPING_LINE_CODE_PATTERN.match(v):
        raise ValueError(f"Invalid code: '{v}'. Expected up to 3 letters (e.g., MSK).")
    return v


def _iso_code(v: str) -> str:
    v = v.strip().upper()
    if not ISO_CODE_PATTERN.match(v):
        raise ValueError(f"Invalid ISO code: '{v}'. Expected 2 digits, a letter and a digit (e.g., 22G1).")
    return v


def _client_code(v: str) -> str:
    return v.strip().upper()


RequiredText = Annotated[str, AfterValidator(_required_text)]
ShippingLineCode = Annotated[str, AfterValidator(_shipping_line_code)]
IsoCodeValue = Annotated[str, AfterValidator(_iso_code)]
ClientCode = Annotated[str, AfterValidator(_client_code)]


class ShippingLineCreate(CamelModel):
    name: RequiredText
    code: ShippingLineCode
    active: bool = True


class ShippingLineUpdate(CamelModel):
    name: Optional[RequiredText] = None
    code: Optional[ShippingLineCode] = None
    active: Optional[bool] = None


class ShippingLineResponse(CamelModel):
    id: str
    name: str
    code: str
    active: bool


class IsoCodeCreate(CamelModel):
    code: IsoCodeValue
    description: RequiredText
    active: bool = True


class IsoCodeUpdate(CamelModel):
    code: Optional[IsoCodeValue] = None
    description: Optional[RequiredText] = None
    active: Optional[bool] = None


class IsoCodeResponse(CamelModel):
    id: str
    code: str
    description: str
    active: bool


class ClientCreate(CamelModel):
    name: RequiredText
    code: Optional[ClientCode] = None
    active: bool = True


class ClientUpdate(CamelModel):
    name: Optional[RequiredText] = None
    code: Optional[ClientCode] = None
    active: Optional[bool] = None


class ClientResponse(CamelModel):
    id: str
    name: str
    code: Optional[str] = None
    active: bool
