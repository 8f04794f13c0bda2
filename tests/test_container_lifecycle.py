from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_container
from core.clock import utcnow
from core.exceptions import DuplicateEntityError, InvalidStateError, NotFoundError, ValidationError
from models.container import Container, ContainerSource, ContainerStatus, ContainerType, is_valid_container_number
from schemas.container import ClientExitRequest, ContainerCreate, ContainerUpdate, ShippingLineExitRequest
from services.container_service import ContainerService


def shipping_line_exit(**overrides) -> ShippingLineExitRequest:
    payload = {"booking": "BK1", "vessel": "MAERSK TEMA", "client": "Acme"}
    payload.update(overrides)
    return ShippingLineExitRequest(**payload)


def test_created_container_is_in_park_without_exit_date(db_session, reference_data):
    container = make_container(db_session, "MSCU1234567")

    assert container.id == "1"
    assert container.status == ContainerStatus.IN_PARK
    assert container.exit_date is None
    assert container.source == ContainerSource.SHIPPING_LINE
    assert container.shipping_line_name == "MSC"
    assert container.iso_code == "22G1"


def test_entry_then_exit_by_shipping_line(db_session, reference_data):
    now = utcnow()
    make_container(db_session, "MSCU1234567", entry_date=now - timedelta(minutes=5), now=now)

    found = ContainerService.get_by_container_number("MSCU1234567", db_session)
    assert found is not None
    assert found.status == ContainerStatus.IN_PARK

    exited = ContainerService.exit_by_shipping_line("MSCU1234567", shipping_line_exit(), db_session, now=now)
    assert exited.status == ContainerStatus.OUT
    assert exited.exit_date == now
    assert exited.booking == "BK1"
    assert exited.vessel == "MAERSK TEMA"
    assert exited.client == "Acme"

    with pytest.raises(InvalidStateError):
        ContainerService.exit_by_shipping_line("MSCU1234567", shipping_line_exit(), db_session, now=now)


def test_client_exit_only_records_comments(db_session, reference_data):
    make_container(db_session, "MSCU7654321", booking="BK-IN", client_id="1")

    exited = ContainerService.exit_by_client(
        "mscu7654321", ClientExitRequest(comments="Collected by owner"), db_session
    )
    assert exited.status == ContainerStatus.OUT
    assert exited.comments == "Collected by owner"
    assert exited.booking == "BK-IN"

    with pytest.raises(InvalidStateError):
        ContainerService.exit_by_client("MSCU7654321", ClientExitRequest(), db_session)


def test_client_exit_refuses_containers_without_a_client(db_session, reference_data):
    make_container(db_session, "MSCU4444444")

    with pytest.raises(InvalidStateError) as exc_info:
        ContainerService.exit_by_client("MSCU4444444", ClientExitRequest(), db_session)
    assert exc_info.value.current_status == "IN_PARK"

    container = ContainerService.get_by_container_number("MSCU4444444", db_session)
    assert container.status == ContainerStatus.IN_PARK
    assert container.exit_date is None


def test_client_lookup_only_finds_client_containers(db_session, reference_data):
    make_container(db_session, "MSCU4444444")
    held = make_container(db_session, "MSCU5555555", client_id="1")

    assert ContainerService.get_client_container_by_number("MSCU4444444", db_session) is None
    assert ContainerService.get_client_container_by_number("mscu5555555", db_session).id == held.id
    assert ContainerService.get_client_container_by_number("MSCU0000000", db_session) is None


def test_exit_of_unknown_number_is_not_found(db_session, reference_data):
    with pytest.raises(NotFoundError):
        ContainerService.exit_by_client("MSCU0000000", ClientExitRequest(), db_session)


def test_booked_container_cannot_exit(db_session, reference_data):
    container = make_container(db_session, "MSCU1111111")
    container.status = ContainerStatus.BOOKED
    db_session.commit()

    with pytest.raises(InvalidStateError) as exc_info:
        ContainerService.exit_by_shipping_line("MSCU1111111", shipping_line_exit(), db_session)
    assert exc_info.value.current_status == "BOOKED"


def test_exit_date_must_fall_between_entry_and_now(db_session, reference_data):
    now = utcnow()
    make_container(db_session, "MSCU2222222", entry_date=now - timedelta(days=2), now=now)

    with pytest.raises(ValidationError):
        ContainerService.exit_by_shipping_line(
            "MSCU2222222", shipping_line_exit(exit_date=now + timedelta(hours=1)), db_session, now=now
        )
    with pytest.raises(ValidationError):
        ContainerService.exit_by_shipping_line(
            "MSCU2222222", shipping_line_exit(exit_date=now - timedelta(days=3)), db_session, now=now
        )

    exited = ContainerService.exit_by_shipping_line(
        "MSCU2222222", shipping_line_exit(exit_date=now - timedelta(days=1)), db_session, now=now
    )
    assert exited.exit_date == now - timedelta(days=1)


def test_aware_exit_date_is_stored_as_utc(db_session, reference_data):
    now = datetime(2026, 3, 15, 12, 0)
    make_container(db_session, "MSCU3333333", entry_date=datetime(2026, 3, 14, 8, 0), now=now, client_id="1")

    plus_two = timezone(timedelta(hours=2))
    exited = ContainerService.exit_by_client(
        "MSCU3333333",
        ClientExitRequest(exit_date=datetime(2026, 3, 15, 10, 30, tzinfo=plus_two)),
        db_session,
        now=now,
    )
    assert exited.exit_date == datetime(2026, 3, 15, 8, 30)


@pytest.mark.parametrize("number", ["MSC1234567", "MSCX1234567", "MSCU123456", "12CU1234567"])
def test_create_rejects_malformed_container_numbers(db_session, reference_data, number):
    with pytest.raises(ValidationError) as exc_info:
        make_container(db_session, number)
    assert exc_info.value.field == "container_number"


def test_number_format_is_checked_but_not_the_check_digit():
    # Same owner code and serial, two different final digits: at most one is the real check digit
    assert is_valid_container_number("MSCU1234560")
    assert is_valid_container_number("MSCU1234561")
    assert not is_valid_container_number("MSCU123456")


def test_create_normalizes_container_number(db_session, reference_data):
    container = make_container(db_session, "  mscu1234567 ")
    assert container.container_number == "MSCU1234567"


def test_create_rejects_future_entry_date(db_session, reference_data):
    now = utcnow()
    with pytest.raises(ValidationError) as exc_info:
        make_container(db_session, "MSCU1234567", entry_date=now + timedelta(days=1), now=now)
    assert exc_info.value.field == "entry_date"


@pytest.mark.parametrize(
    "missing, field",
    [
        ({"type": None}, "type"),
        ({"iso_code_id": None}, "iso_code_id"),
        ({"shipping_line_id": None}, "shipping_line_id"),
        ({"entry_date": None}, "entry_date"),
    ],
)
def test_create_requires_reference_fields(db_session, reference_data, missing, field):
    payload = {
        "container_number": "MSCU1234567",
        "type": ContainerType.DRY,
        "iso_code_id": "1",
        "shipping_line_id": "1",
        "entry_date": utcnow() - timedelta(hours=1),
    }
    payload.update(missing)

    with pytest.raises(ValidationError) as exc_info:
        ContainerService.create_container(ContainerCreate(**payload), db_session)
    assert exc_info.value.field == field


def test_create_rejects_unknown_references(db_session, reference_data):
    with pytest.raises(ValidationError):
        make_container(db_session, "MSCU1234567", shipping_line_id="99")
    with pytest.raises(ValidationError):
        make_container(db_session, "MSCU1234567", iso_code_id="99")


def test_client_entry_requires_client(db_session, reference_data):
    data = ContainerCreate(
        container_number="MSCU1234567",
        type=ContainerType.REEFER,
        iso_code_id="2",
        entry_date=utcnow() - timedelta(hours=1),
    )
    with pytest.raises(ValidationError) as exc_info:
        ContainerService.create_container(data, db_session, source=ContainerSource.CLIENT)
    assert exc_info.value.field == "client_id"

    data.client_id = "1"
    container = ContainerService.create_container(data, db_session, source=ContainerSource.CLIENT)
    assert container.source == ContainerSource.CLIENT
    assert container.client == "Acme"
    assert container.shipping_line_id is None


def test_number_is_unique_while_in_yard_but_can_reenter_after_exit(db_session, reference_data):
    first = make_container(db_session, "MSCU1234567", client_id="1")

    with pytest.raises(DuplicateEntityError):
        make_container(db_session, "MSCU1234567")

    ContainerService.exit_by_client("MSCU1234567", ClientExitRequest(), db_session)
    second = make_container(db_session, "MSCU1234567")

    assert second.id != first.id
    current = ContainerService.get_by_container_number("MSCU1234567", db_session)
    assert current.id == second.id
    assert current.status == ContainerStatus.IN_PARK


def test_get_by_container_number_returns_none_when_absent(db_session, reference_data):
    assert ContainerService.get_by_container_number("MSCU9999999", db_session) is None


def test_update_merges_descriptive_fields_only(db_session, reference_data):
    container = make_container(db_session, "MSCU1234567", transporter="TransCo")
    entry_date = container.entry_date

    updated = ContainerService.update_container(
        container.id,
        ContainerUpdate(damages="Dent on left panel", iso_code_id="2", type=ContainerType.REEFER),
        db_session,
    )
    assert updated.damages == "Dent on left panel"
    assert updated.transporter == "TransCo"
    assert updated.iso_code_id == "2"
    assert updated.iso_code == "42R1"
    assert updated.type == ContainerType.REEFER
    assert updated.status == ContainerStatus.IN_PARK
    assert updated.entry_date == entry_date


def test_update_rejects_unknown_iso_code(db_session, reference_data):
    container = make_container(db_session, "MSCU1234567")
    with pytest.raises(ValidationError):
        ContainerService.update_container(container.id, ContainerUpdate(iso_code_id="42"), db_session)


def test_delete_container_and_ids_are_not_reused(db_session, reference_data):
    first = make_container(db_session, "MSCU1234567")
    ContainerService.delete_container(first.id, db_session)

    with pytest.raises(NotFoundError):
        ContainerService.get_container(first.id, db_session)
    with pytest.raises(NotFoundError):
        ContainerService.delete_container(first.id, db_session)

    second = make_container(db_session, "MSCU1234567")
    assert second.id == "2"


def test_exit_loses_race_when_status_changed_underneath(db_session, reference_data, monkeypatch):
    make_container(db_session, "MSCU1234567", client_id="1")
    original = Container.can_transition_to

    # Another writer moves the record out between our read and our update
    def flip_then_check(self, new_status):
        allowed = original(self, new_status)
        db_session.query(Container).filter(Container.id == self.id).update(
            {"status": ContainerStatus.OUT, "exit_date": utcnow()}, synchronize_session=False
        )
        return allowed

    monkeypatch.setattr(Container, "can_transition_to", flip_then_check)
    with pytest.raises(InvalidStateError):
        ContainerService.exit_by_client("MSCU1234567", ClientExitRequest(), db_session)
