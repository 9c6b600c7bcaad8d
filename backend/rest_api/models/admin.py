"""
Admin Model.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AccountMixin, AuditMixin, Base, IdType


class Admin(AccountMixin, AuditMixin, Base):
    """
    Platform administrator. Admins never self-register; the default
    admin is created at startup when absent.
    """

    __tablename__ = "admin"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    permissions: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email='{self.email}')>"
