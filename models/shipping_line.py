from sqlalchemy import Boolean, Column, String

from core.database import Base


class ShippingLine(Base):
    __tablename__ = "shipping_lines"

    id = Column(String(36), primary_key=True)  # type: ignore
    name = Column(String(120), nullable=False)  # type: ignore
    code = Column(String(3), nullable=False, index=True)  # type: ignore
    active = Column(Boolean, nullable=False, default=True)  # type: ignore

    def __repr__(self) -> str:
        return f"<ShippingLine(id={self.id}, code={self.code}, name={self.name})>"
