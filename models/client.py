from sqlalchemy import Boolean, Column, String

from core.database import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True)  # type: ignore
    name = Column(String(200), nullable=False)  # type: ignore
    code = Column(String(20), nullable=True)  # type: ignore
    active = Column(Boolean, nullable=False, default=True)  # type: ignore

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name={self.name})>"
