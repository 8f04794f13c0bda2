import logging
from datetime import datetime
from typing import Optional, cast

from sqlalchemy import case
from sqlalchemy.orm import Session

from core.clock import to_utc_naive, utcnow
from core.exceptions import DuplicateEntityError, InvalidStateError, NotFoundError, ValidationError
from models.container import (
    Container,
    ContainerSource,
    ContainerStatus,
    is_valid_container_number,
    normalize_container_number,
)
from schemas.container import ClientExitRequest, ContainerCreate, ContainerUpdate, ShippingLineExitRequest
from services import id_allocator
from services.reference_service import client_service, iso_code_service, shipping_line_service

log = logging.getLogger(__name__)


class ContainerService:
    """Service layer for the container lifecycle: gate-in, exits and record upkeep."""

    @staticmethod
    def create_container(
        container_data: ContainerCreate,
        db: Session,
        source: ContainerSource = ContainerSource.SHIPPING_LINE,
        now: Optional[datetime] = None,
    ) -> Container:
        """Register a container entering the yard; it starts IN_PARK."""
        now = now or utcnow()
        number = normalize_container_number(container_data.container_number)

        if not is_valid_container_number(number):
            raise ValidationError(
                f"Invalid format: '{number}'. Expected 3 letters + U + 7 digits (e.g., MSCU1234567).",
                field="container_number",
            )
        if container_data.type is None:
            raise ValidationError("Container type is required", field="type")
        if not container_data.iso_code_id:
            raise ValidationError("ISO code is required", field="iso_code_id")
        if source == ContainerSource.SHIPPING_LINE and not container_data.shipping_line_id:
            raise ValidationError("Shipping line is required", field="shipping_line_id")
        if source == ContainerSource.CLIENT and not container_data.client_id:
            raise ValidationError("Client is required", field="client_id")
        if container_data.entry_date is None:
            raise ValidationError("Entry date is required", field="entry_date")

        entry_date = to_utc_naive(container_data.entry_date)
        if entry_date > now:
            raise ValidationError("Entry date cannot be in the future", field="entry_date")

        iso_code = iso_code_service.find(db, container_data.iso_code_id)
        if iso_code is None:
            raise ValidationError(f"Unknown ISO code '{container_data.iso_code_id}'", field="iso_code_id")

        shipping_line = None
        if container_data.shipping_line_id:
            shipping_line = shipping_line_service.find(db, container_data.shipping_line_id)
            if shipping_line is None:
                raise ValidationError(
                    f"Unknown shipping line '{container_data.shipping_line_id}'", field="shipping_line_id"
                )

        client = None
        if container_data.client_id:
            client = client_service.find(db, container_data.client_id)
            if client is None:
                raise ValidationError(f"Unknown client '{container_data.client_id}'", field="client_id")

        if ContainerService._find_active(number, db) is not None:
            raise DuplicateEntityError("Container in yard", "container_number", number)

        new_container = Container(
            id=id_allocator.allocate_id(db, id_allocator.CONTAINERS),
            container_number=number,
            source=source,
            type=container_data.type,
            status=ContainerStatus.IN_PARK,
            shipping_line_id=shipping_line.id if shipping_line else None,
            shipping_line_name=shipping_line.name if shipping_line else None,
            iso_code_id=iso_code.id,
            iso_code=iso_code.code,
            client_id=client.id if client else None,
            client=client.name if client else None,
            entry_date=entry_date,
            exit_date=None,
            damages=container_data.damages,
            transporter=container_data.transporter,
            truck_ref=container_data.truck_ref,
            booking=container_data.booking,
            vessel=container_data.vessel,
            comments=container_data.comments,
            created_at=now,
            updated_at=now,
        )

        db.add(new_container)
        db.commit()
        db.refresh(new_container)
        log.info("Container %s entered the yard (%s, id=%s)", number, source.value, new_container.id)
        return new_container

    @staticmethod
    def get_container(container_id: str, db: Session) -> Container:
        container = db.query(Container).filter(Container.id == str(container_id)).first()
        if not container:
            raise NotFoundError("Container", str(container_id))
        return container

    @staticmethod
    def get_by_container_number(container_number: str, db: Session) -> Optional[Container]:
        """
        Return the record for a container number: the one still in the yard
        if any, otherwise the latest past presence, otherwise None.
        """
        number = normalize_container_number(container_number)
        return (
            db.query(Container)
            .filter(Container.container_number == number)
            .order_by(
                case((Container.status == ContainerStatus.OUT, 1), else_=0),
                Container.created_at.desc(),
                Container.entry_date.desc(),
            )
            .first()
        )

    @staticmethod
    def get_client_container_by_number(container_number: str, db: Session) -> Optional[Container]:
        """Like get_by_container_number, but only for containers held for a client."""
        container = ContainerService.get_by_container_number(container_number, db)
        if container is None or not ContainerService._belongs_to_client(container):
            return None
        return container

    @staticmethod
    def _belongs_to_client(container: Container) -> bool:
        return bool(container.client_id or container.client)

    @staticmethod
    def _find_active(number: str, db: Session) -> Optional[Container]:
        return (
            db.query(Container)
            .filter(
                Container.container_number == number,
                Container.status != ContainerStatus.OUT,
            )
            .first()
        )

    @staticmethod
    def update_container(
        container_id: str,
        container_data: ContainerUpdate,
        db: Session,
        now: Optional[datetime] = None,
    ) -> Container:
        """Shallow-merge descriptive fields. Status and dates are never touched here."""
        container = ContainerService.get_container(container_id, db)
        changes = container_data.model_dump(exclude_unset=True)

        if "type" in changes and changes["type"] is None:
            changes.pop("type")
        if "iso_code_id" in changes:
            iso_code_id = changes.pop("iso_code_id")
            if iso_code_id:
                iso_code = iso_code_service.find(db, iso_code_id)
                if iso_code is None:
                    raise ValidationError(f"Unknown ISO code '{iso_code_id}'", field="iso_code_id")
                container.iso_code_id = iso_code.id
                container.iso_code = iso_code.code

        for field, value in changes.items():
            setattr(container, field, value)

        container.touch(now)
        db.commit()
        db.refresh(container)
        return container

    @staticmethod
    def delete_container(container_id: str, db: Session) -> None:
        container = ContainerService.get_container(container_id, db)
        number = container.container_number
        db.delete(container)
        db.commit()
        log.info("Deleted container record %s (%s)", container_id, number)

    @staticmethod
    def exit_by_shipping_line(
        container_number: str,
        exit_data: ShippingLineExitRequest,
        db: Session,
        now: Optional[datetime] = None,
    ) -> Container:
        """Gate-out on behalf of the shipping line (records booking, vessel and client)."""
        changes = exit_data.model_dump(
            include={"booking", "vessel", "client", "comments"}, exclude_unset=True
        )
        return ContainerService._exit(container_number, changes, exit_data.exit_date, db, now)

    @staticmethod
    def exit_by_client(
        container_number: str,
        exit_data: ClientExitRequest,
        db: Session,
        now: Optional[datetime] = None,
    ) -> Container:
        """Gate-out on behalf of a client (records comments only); the container must belong to a client."""
        changes = exit_data.model_dump(include={"comments"}, exclude_unset=True)
        return ContainerService._exit(
            container_number, changes, exit_data.exit_date, db, now, client_owned=True
        )

    @staticmethod
    def _exit(
        container_number: str,
        changes: dict,
        exit_date: Optional[datetime],
        db: Session,
        now: Optional[datetime],
        client_owned: bool = False,
    ) -> Container:
        now = now or utcnow()
        number = normalize_container_number(container_number)

        container = ContainerService.get_by_container_number(number, db)
        if container is None:
            raise NotFoundError("Container", number, key_name="number")

        current_status = cast(ContainerStatus, container.status)
        if not container.can_transition_to(ContainerStatus.OUT):
            raise InvalidStateError(
                f"Container {number} is not in the park (status: {current_status.value})",
                current_status=current_status.value,
            )
        if client_owned and not ContainerService._belongs_to_client(container):
            raise InvalidStateError(
                f"Container {number} does not belong to a client",
                current_status=current_status.value,
            )

        exit_at = to_utc_naive(exit_date) if exit_date else now
        if exit_at > now:
            raise ValidationError("Exit date cannot be in the future", field="exit_date")
        if exit_at < container.entry_date:
            raise ValidationError("Exit date cannot be before the entry date", field="exit_date")

        values = dict(changes)
        values.update(status=ContainerStatus.OUT, exit_date=exit_at, updated_at=now)

        # Compare-and-set: only one concurrent exit can win the IN_PARK -> OUT race
        updated = (
            db.query(Container)
            .filter(Container.id == container.id, Container.status == ContainerStatus.IN_PARK)
            .update(values, synchronize_session=False)
        )
        if updated != 1:
            db.rollback()
            raise InvalidStateError(f"Container {number} has already left the park", current_status="OUT")

        db.commit()
        db.refresh(container)
        log.info("Container %s left the yard at %s (id=%s)", number, exit_at.isoformat(), container.id)
        return container
