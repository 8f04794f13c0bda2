"""
CRUD for yard reference data (shipping lines, ISO codes, clients).
"""
import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import Integer, cast
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from models.client import Client
from models.container import Container
from models.iso_code import IsoCode
from models.shipping_line import ShippingLine
from services import id_allocator

log = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", ShippingLine, IsoCode, Client)


class ReferenceService(Generic[EntityT]):
    """
    Store for one kind of reference entity.

    Deletion is a hard delete with no referential check: containers keep
    the dangling id together with the name captured at entry.
    """

    def __init__(
        self,
        model: Type[EntityT],
        sequence: str,
        label: str,
        container_column: Any,
    ):
        self.model = model
        self.sequence = sequence
        self.label = label
        self.container_column = container_column

    def list(self, db: Session) -> List[EntityT]:
        return db.query(self.model).order_by(cast(self.model.id, Integer)).all()

    def find(self, db: Session, entity_id: str) -> Optional[EntityT]:
        return db.query(self.model).filter(self.model.id == str(entity_id)).first()

    def get(self, db: Session, entity_id: str) -> EntityT:
        entity = self.find(db, entity_id)
        if entity is None:
            raise NotFoundError(self.label, str(entity_id))
        return entity

    def create(self, db: Session, payload: BaseModel) -> EntityT:
        data = payload.model_dump()
        entity = self.model(id=id_allocator.allocate_id(db, self.sequence), **data)
        db.add(entity)
        db.commit()
        db.refresh(entity)
        log.info("Created %s %s", self.label, entity.id)
        return entity

    def update(self, db: Session, entity_id: str, payload: BaseModel) -> EntityT:
        """Shallow merge: only fields present in the payload are replaced."""
        entity = self.get(db, entity_id)
        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and not self.model.__table__.columns[field].nullable:
                continue
            setattr(entity, field, value)

        db.commit()
        db.refresh(entity)
        return entity

    def delete(self, db: Session, entity_id: str) -> None:
        entity = self.get(db, entity_id)
        dangling = db.query(Container).filter(self.container_column == entity.id).count()

        db.delete(entity)
        db.commit()

        if dangling:
            log.warning(
                "Deleted %s %s still referenced by %d container(s); references left dangling",
                self.label, entity_id, dangling,
            )
        else:
            log.info("Deleted %s %s", self.label, entity_id)


shipping_line_service = ReferenceService(
    ShippingLine, id_allocator.SHIPPING_LINES, "Shipping line", Container.shipping_line_id
)
iso_code_service = ReferenceService(
    IsoCode, id_allocator.ISO_CODES, "ISO code", Container.iso_code_id
)
client_service = ReferenceService(
    Client, id_allocator.CLIENTS, "Client", Container.client_id
)

__all__ = ["ReferenceService", "shipping_line_service", "iso_code_service", "client_service"]
