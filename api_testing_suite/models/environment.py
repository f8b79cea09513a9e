"""
Environment and Variable models for managing environment configurations.

An environment supplies the base URL, default headers and {{variable}}
values used when a test request is built, so the same suite can run
against development, staging or production.
"""

from datetime import datetime
from typing import List

from sqlalchemy import String, Boolean, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base, utcnow


class Environment(Base):
    """
    SQLAlchemy model for environments.

    Only one environment is active at a time. Deleting an environment
    cascades to all its variables.

    Attributes:
        id: Unique identifier for the environment
        name: Human-readable name for the environment
        base_url: Prefix for test URLs that are not absolute
        headers: Headers merged into every test request (they win over
            the test's own headers)
        is_active: Whether this environment is used when none is chosen
        variables: Values for {{key}} placeholders
    """
    __tablename__ = "environments"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    base_url: Mapped[str] = mapped_column(String(1000), default="")
    headers: Mapped[dict] = mapped_column(JSON, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    variables: Mapped[List["Variable"]] = relationship(
        "Variable",
        back_populates="environment",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Variable.id",
    )

    def variable_map(self) -> dict[str, str]:
        """Variables as a key -> value mapping; later duplicates win."""
        return {var.key: var.value for var in self.variables}


class Variable(Base):
    """
    SQLAlchemy model for environment variables.

    Attributes:
        id: Unique identifier for the variable
        environment_id: Reference to parent environment
        key: Variable name (used in {{key}} placeholders)
        value: Variable value to substitute
    """
    __tablename__ = "variables"

    id: Mapped[int] = mapped_column(primary_key=True)
    environment_id: Mapped[int] = mapped_column(
        ForeignKey("environments.id", ondelete="CASCADE")
    )
    key: Mapped[str] = mapped_column(String(255))
    value: Mapped[str] = mapped_column(String(1000))

    environment: Mapped["Environment"] = relationship(
        "Environment",
        back_populates="variables"
    )
