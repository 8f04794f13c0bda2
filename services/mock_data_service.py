"""
Mock yard data for offline development.

Seeds the reference tables, two staff accounts and a population of random
containers. Every seeding step is skipped when its table already holds data.
"""
import logging
import random
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from core.clock import utcnow
from models.client import Client
from models.container import Container, ContainerSource, ContainerStatus, ContainerType
from models.iso_code import IsoCode
from models.shipping_line import ShippingLine
from models.user import ALL_PERMISSIONS, User
from services import id_allocator
from services.auth_service import AuthService
from services.config_service import get_mock_container_count, get_mock_data_seed
from services.reference_service import client_service, iso_code_service, shipping_line_service

log = logging.getLogger(__name__)

SHIPPING_LINES = [
    ("Maersk", "MSK"),
    ("MSC", "MSC"),
    ("CMA CGM", "CMA"),
    ("Hapag-Lloyd", "HPL"),
    ("Evergreen", "EGL"),
    ("COSCO", "COS"),
]

ISO_CODES = [
    ("22G1", "20' General Purpose"),
    ("42G1", "40' General Purpose"),
    ("45G1", "40' High Cube"),
    ("22R1", "20' Refrigerated"),
    ("42R1", "40' Refrigerated"),
]

CLIENTS = [
    ("Bolloré Transport & Logistics", "BTL"),
    ("Necotrans", "NCT"),
    ("SDV", "SDV"),
]

USERS = [
    {
        "username": "admin",
        "email": "admin@gestcont.com",
        "password": "admin123",
        "role": "admin",
        "permissions": [ALL_PERMISSIONS],
    },
    {
        "username": "user",
        "email": "user@gestcont.com",
        "password": "user123",
        "role": "user",
        "permissions": [
            "read:containers",
            "create:containers",
            "update:containers",
            "read:shipping-lines",
            "read:iso-codes",
        ],
    },
]

VESSELS = ["MAERSK TEMA", "MSC ANNA", "CMA CGM ANTOINE", "EVER GIVEN"]
TRANSPORTERS = ["TransCo", "FastFreight", "GlobalLogistics", "ExpressCargo"]


def seed_reference_data(db: Session) -> None:
    if db.query(ShippingLine).first() is None:
        for name, code in SHIPPING_LINES:
            db.add(ShippingLine(
                id=id_allocator.allocate_id(db, id_allocator.SHIPPING_LINES),
                name=name, code=code, active=True,
            ))
    if db.query(IsoCode).first() is None:
        for code, description in ISO_CODES:
            db.add(IsoCode(
                id=id_allocator.allocate_id(db, id_allocator.ISO_CODES),
                code=code, description=description, active=True,
            ))
    if db.query(Client).first() is None:
        for name, code in CLIENTS:
            db.add(Client(
                id=id_allocator.allocate_id(db, id_allocator.CLIENTS),
                name=name, code=code, active=True,
            ))
    db.commit()


def seed_users(db: Session) -> None:
    if db.query(User).first() is not None:
        return
    for account in USERS:
        db.add(User(
            id=id_allocator.allocate_id(db, id_allocator.USERS),
            username=account["username"],
            email=account["email"],
            hashed_password=AuthService.get_password_hash(account["password"]),
            role=account["role"],
            permissions=list(account["permissions"]),
            is_active=True,
            created_at=utcnow(),
        ))
    db.commit()


def random_container_number(prefix: str, rng: random.Random) -> str:
    serial = f"{rng.randrange(1_000_000):06d}"
    owner = prefix.upper().ljust(3, "X")[:3]
    return f"{owner}U{serial}{rng.randrange(10)}"


def generate_containers(
    db: Session,
    count: int,
    rng: random.Random,
    now: Optional[datetime] = None,
) -> List[Container]:
    """Insert ``count`` random containers spread over the last 30 days."""
    now = now or utcnow()
    lines = shipping_line_service.list(db)
    iso_codes = iso_code_service.list(db)
    clients = client_service.list(db)
    if not lines or not iso_codes:
        log.warning("Cannot generate mock containers without shipping lines and ISO codes")
        return []

    active_numbers = {
        number for (number,) in db.query(Container.container_number)
        .filter(Container.status != ContainerStatus.OUT)
    }
    created = []
    for _ in range(count):
        line = rng.choice(lines)
        iso_code = rng.choice(iso_codes)
        container_type = rng.choice(list(ContainerType))
        status = rng.choice(list(ContainerStatus))

        number = random_container_number(line.code, rng)
        while status != ContainerStatus.OUT and number in active_numbers:
            number = random_container_number(line.code, rng)
        if status != ContainerStatus.OUT:
            active_numbers.add(number)

        entry_date = now - timedelta(days=rng.randrange(30))
        exit_date = None
        if status == ContainerStatus.OUT:
            exit_date = min(entry_date + timedelta(days=rng.randrange(15)), now)

        client = rng.choice(clients) if clients and status != ContainerStatus.IN_PARK else None

        container = Container(
            id=id_allocator.allocate_id(db, id_allocator.CONTAINERS),
            container_number=number,
            source=ContainerSource.SHIPPING_LINE,
            type=container_type,
            status=status,
            shipping_line_id=line.id,
            shipping_line_name=line.name,
            iso_code_id=iso_code.id,
            iso_code=iso_code.code,
            client_id=client.id if client else None,
            client=client.name if client else None,
            entry_date=entry_date,
            exit_date=exit_date,
            booking=f"BK{rng.randrange(100000)}" if status == ContainerStatus.BOOKED else None,
            vessel=rng.choice(VESSELS) if status == ContainerStatus.OUT else None,
            damages="Minor dents on side panel" if rng.random() > 0.7 else None,
            transporter=rng.choice(TRANSPORTERS),
            truck_ref=f"T-{rng.randrange(1000)}",
            comments="Container needs inspection before next use" if rng.random() > 0.8 else None,
            created_at=entry_date,
            updated_at=exit_date or entry_date,
        )
        db.add(container)
        created.append(container)

    db.commit()
    return created


def seed_mock_data(
    db: Session,
    container_count: Optional[int] = None,
    seed: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Populate an empty store; returns how many containers were generated."""
    seed_reference_data(db)
    seed_users(db)

    generated = 0
    if db.query(Container).first() is None:
        count = get_mock_container_count() if container_count is None else container_count
        rng = random.Random(get_mock_data_seed() if seed is None else seed)
        generated = len(generate_containers(db, count, rng, now))

    log.info("Mock data ready: %d container(s) generated", generated)
    return {"containers_generated": generated}
