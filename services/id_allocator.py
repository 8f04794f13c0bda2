from sqlalchemy.orm import Session

from models.id_sequence import IdSequence

SHIPPING_LINES = "shipping_lines"
ISO_CODES = "iso_codes"
CLIENTS = "clients"
CONTAINERS = "containers"
USERS = "users"


def allocate_id(db: Session, sequence: str) -> str:
    """
    Return the next id of a named sequence as a string ("1", "2", ...).

    The counter row is locked for the rest of the transaction, so concurrent
    allocators on a real database queue behind each other. Deleting records
    never rewinds the counter.
    """
    row = (
        db.query(IdSequence)
        .filter(IdSequence.name == sequence)
        .with_for_update()
        .first()
    )
    if row is None:
        row = IdSequence(name=sequence, last_value=0)
        db.add(row)

    row.last_value = int(row.last_value or 0) + 1  # type: ignore[assignment]
    db.flush()
    return str(row.last_value)
