from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from api.dependencies import require_permission
from api.errors import to_http_exception
from core.database import get_db
from core.exceptions import YardError
from models.container import ContainerSource, ContainerStatus, ContainerType
from models.user import User
from schemas.container import (
    ClientExitRequest,
    ContainerCreate,
    ContainerPage,
    ContainerQuery,
    ContainerResponse,
    ContainerUpdate,
    ShippingLineExitRequest,
)
from services.container_query_service import ContainerQueryService
from services.container_service import ContainerService

router = APIRouter(prefix="/containers", tags=["containers"])


@router.get("", response_model=ContainerPage)
def list_containers(
    status_filter: Optional[ContainerStatus] = Query(default=None, alias="status"),
    shipping_line_id: Optional[str] = Query(default=None, alias="shippingLineId"),
    type_filter: Optional[ContainerType] = Query(default=None, alias="type"),
    container_number: Optional[str] = Query(default=None, alias="containerNumber"),
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("read:containers")),
):
    """List containers with optional filters, one page at a time."""
    query = ContainerQuery(
        status=status_filter,
        shipping_line_id=shipping_line_id,
        type=type_filter,
        container_number=container_number,
        page=page,
        limit=limit,
    )
    return ContainerQueryService.list_containers(db, query)


@router.post("", response_model=ContainerResponse, status_code=status.HTTP_201_CREATED)
def register_shipping_line_entry(
    container: ContainerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("create:containers")),
):
    """Register a container entering the yard for a shipping line."""
    try:
        return ContainerService.create_container(container, db, source=ContainerSource.SHIPPING_LINE)
    except YardError as exc:
        raise to_http_exception(exc)


@router.post("/client", response_model=ContainerResponse, status_code=status.HTTP_201_CREATED)
def register_client_entry(
    container: ContainerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("create:containers")),
):
    """Register a container entering the yard for a client."""
    try:
        return ContainerService.create_container(container, db, source=ContainerSource.CLIENT)
    except YardError as exc:
        raise to_http_exception(exc)


@router.get("/number/{container_number}", response_model=ContainerResponse)
def get_container_by_number(
    container_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("read:containers")),
):
    """Look up a container by its ISO 6346 number."""
    container = ContainerService.get_by_container_number(container_number, db)
    if container is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Container not found")
    return container


@router.get("/client/number/{container_number}", response_model=ContainerResponse)
def get_client_container_by_number(
    container_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("read:containers")),
):
    """Look up a container held for a client; other containers are reported as not found."""
    container = ContainerService.get_client_container_by_number(container_number, db)
    if container is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client container not found")
    return container


@router.post("/number/{container_number}/exit", response_model=ContainerResponse)
def exit_by_shipping_line(
    container_number: str,
    payload: ShippingLineExitRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("update:containers")),
):
    """Record a shipping-line gate-out (booking, vessel and client)."""
    try:
        return ContainerService.exit_by_shipping_line(container_number, payload, db)
    except YardError as exc:
        raise to_http_exception(exc)


@router.post("/client/number/{container_number}/exit", response_model=ContainerResponse)
def exit_by_client(
    container_number: str,
    payload: ClientExitRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("update:containers")),
):
    """Record a client gate-out."""
    try:
        return ContainerService.exit_by_client(container_number, payload, db)
    except YardError as exc:
        raise to_http_exception(exc)


@router.get("/{container_id}", response_model=ContainerResponse)
def get_container(
    container_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("read:containers")),
):
    """Get container details."""
    try:
        return ContainerService.get_container(container_id, db)
    except YardError as exc:
        raise to_http_exception(exc)


@router.put("/{container_id}", response_model=ContainerResponse)
def update_container(
    container_id: str,
    payload: ContainerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("update:containers")),
):
    """Update descriptive fields of a container record."""
    try:
        return ContainerService.update_container(container_id, payload, db)
    except YardError as exc:
        raise to_http_exception(exc)


@router.delete("/{container_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_container(
    container_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("delete:containers")),
):
    """Delete a container record."""
    try:
        ContainerService.delete_container(container_id, db)
    except YardError as exc:
        raise to_http_exception(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
