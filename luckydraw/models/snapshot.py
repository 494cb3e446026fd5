"""Database model for archived draw sessions."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    DateTime,
    Integer,
    JSON,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base
from .utils import dt_iso


class SessionSnapshot(Base):
    """Latest persisted record of a named draw session."""

    __tablename__ = "draw_session_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    """Primary key."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Session name the snapshot belongs to."""

    data_key: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    """Uppercase MD5 hex of ``name``, identical to the data file stem."""

    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    """Full session record, including ``checksum`` and ``last_updated``."""

    checksum: Mapped[str] = mapped_column(String(32), nullable=False)
    """Winners checksum copied out of ``payload`` for quick inspection."""

    last_updated: Mapped[str] = mapped_column(String(19), nullable=False)
    """Local ``YYYY-MM-DD HH:MM:SS`` timestamp taken when the record was built."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    """Timestamp when the session was first archived."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    """Timestamp bumped whenever the snapshot is overwritten."""

    __table_args__ = (
        UniqueConstraint("name", name="draw_session_snapshots_name_key"),
    )

    def __init__(
        self,
        *,
        name: str,
        data_key: str,
        payload: dict[str, Any],
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        self.name = name
        self.data_key = data_key
        self.apply_record(payload)
        if created_at is not None:
            self.created_at = created_at
        if updated_at is not None:
            self.updated_at = updated_at

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<SessionSnapshot(id={id}, name={name}, checksum={checksum})>".format(
            id=self.id,
            name=self.name,
            checksum=self.checksum,
        )

    def apply_record(self, payload: dict[str, Any]) -> None:
        """Overwrite the stored record and its denormalized columns."""
        self.payload = payload
        self.checksum = payload["checksum"]
        self.last_updated = payload["last_updated"]

    @classmethod
    def get_by_name(cls, session: Session, name: str) -> Optional["SessionSnapshot"]:
        """Return the snapshot archived for session ``name`` if it exists."""

        return session.scalar(select(cls).where(cls.name == name))

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "data_key": self.data_key,
            "checksum": self.checksum,
            "last_updated": self.last_updated,
            "created_at": dt_iso(self.created_at),
            "updated_at": dt_iso(self.updated_at),
            "payload": self.payload,
        }

    def to_json_str(self) -> str:
        return json.dumps(self.to_json(), ensure_ascii=False)


__all__ = ["SessionSnapshot"]
