import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum as SqlEnum, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Root declarative base for SQLAlchemy models."""
    pass


class TimestampedModel(Base):
    """Surrogate key plus created/updated columns shared by mutable tables."""
    __abstract__ = True

    id: Mapped[int] = mapped_column(primary_key=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


def enum_column(enum_cls: type[enum.Enum], length: int) -> SqlEnum:
    """Closed enum stored as its value in a VARCHAR, guarded by a CHECK constraint."""
    return SqlEnum(
        enum_cls,
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        length=length,
        values_callable=lambda members: [member.value for member in members],
        name=f"ck_{enum_cls.__name__.lower()}",
    )
