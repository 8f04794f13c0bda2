"""
Admin endpoints for yard reference data: shipping lines, ISO codes, clients.
"""
from typing import Callable, List, Type

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from api.dependencies import require_admin, require_permission
from api.errors import to_http_exception
from core.database import get_db
from core.exceptions import YardError
from core.security import get_current_user
from schemas.reference import (
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    IsoCodeCreate,
    IsoCodeResponse,
    IsoCodeUpdate,
    ShippingLineCreate,
    ShippingLineResponse,
    ShippingLineUpdate,
)
from services.reference_service import ReferenceService, client_service, iso_code_service, shipping_line_service


def build_reference_router(
    prefix: str,
    service: ReferenceService,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
    can_read: Callable,
    can_create: Callable,
    can_update: Callable,
    can_delete: Callable,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])

    @router.get("", response_model=List[response_schema])
    def list_entities(db: Session = Depends(get_db), current_user=Depends(can_read)):
        return service.list(db)

    @router.get("/{entity_id}", response_model=response_schema)
    def get_entity(entity_id: str, db: Session = Depends(get_db), current_user=Depends(can_read)):
        try:
            return service.get(db, entity_id)
        except YardError as exc:
            raise to_http_exception(exc)

    @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    def create_entity(
        payload: create_schema,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        current_user=Depends(can_create),
    ):
        return service.create(db, payload)

    @router.put("/{entity_id}", response_model=response_schema)
    def update_entity(
        entity_id: str,
        payload: update_schema,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        current_user=Depends(can_update),
    ):
        try:
            return service.update(db, entity_id, payload)
        except YardError as exc:
            raise to_http_exception(exc)

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_entity(entity_id: str, db: Session = Depends(get_db), current_user=Depends(can_delete)):
        try:
            service.delete(db, entity_id)
        except YardError as exc:
            raise to_http_exception(exc)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


shipping_lines_router = build_reference_router(
    "/shipping-lines",
    shipping_line_service,
    ShippingLineCreate,
    ShippingLineUpdate,
    ShippingLineResponse,
    can_read=require_permission("read:shipping-lines"),
    can_create=require_permission("create:shipping-lines"),
    can_update=require_permission("update:shipping-lines"),
    can_delete=require_permission("delete:shipping-lines"),
)

iso_codes_router = build_reference_router(
    "/iso-codes",
    iso_code_service,
    IsoCodeCreate,
    IsoCodeUpdate,
    IsoCodeResponse,
    can_read=require_permission("read:iso-codes"),
    can_create=require_permission("create:iso-codes"),
    can_update=require_permission("update:iso-codes"),
    can_delete=require_permission("delete:iso-codes"),
)

# Entry forms need the client list, so any signed-in user may read it
clients_router = build_reference_router(
    "/clients",
    client_service,
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    can_read=get_current_user,
    can_create=require_admin,
    can_update=require_admin,
    can_delete=require_admin,
)
