from sqlalchemy import Boolean, Column, String

from core.database import Base


class IsoCode(Base):
    """ISO 6346 size/type code, e.g. 22G1 for a 20' general purpose box."""
    __tablename__ = "iso_codes"

    id = Column(String(36), primary_key=True)  # type: ignore
    code = Column(String(4), nullable=False, index=True)  # type: ignore
    description = Column(String(200), nullable=False)  # type: ignore
    active = Column(Boolean, nullable=False, default=True)  # type: ignore

    def __repr__(self) -> str:
        return f"<IsoCode(id={self.id}, code={self.code})>"
