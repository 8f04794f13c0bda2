from sqlalchemy import Column, Integer, String

from core.database import Base


class IdSequence(Base):
    """Named counter backing arena-style id allocation; values only ever grow."""
    __tablename__ = "id_sequences"

    name = Column(String(64), primary_key=True)  # type: ignore
    last_value = Column(Integer, nullable=False, default=0)  # type: ignore
