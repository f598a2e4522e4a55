"""Mapped view of the SMTP server's ``users`` and ``domains`` tables.

Only the columns the gateway reads or writes are mapped.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from password_gateway.core.database import Base


class Domain(Base):
    """A mail domain served by the SMTP server."""

    __tablename__ = "domains"

    id: int = Column(Integer, primary_key=True)
    domain: str = Column(String(255), nullable=False, unique=True)

    users = relationship("User", back_populates="domain")


class User(Base):
    """A mailbox owner, keyed by ``(username, domains.domain)``."""

    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True)
    username: str = Column(String(255), nullable=False)
    domain_id: int = Column(Integer, ForeignKey("domains.id"), nullable=False)
    enabled: bool = Column(Boolean, nullable=False, default=True)
    password_initialized: bool = Column(Boolean, nullable=False, default=False)

    domain = relationship("Domain", back_populates="users")
