"""Versioned resource models used by the storage engine."""

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JsonContentMixin:
    """JSON (de)serialization of the stored resource body."""

    def get_content(self) -> dict[str, Any]:
        """Deserialize content JSON to dict."""
        if not self.content:
            return {}
        try:
            return json.loads(self.content)
        except json.JSONDecodeError:
            return {}

    def set_content(self, content: dict[str, Any]) -> None:
        """Serialize content dict to JSON."""
        self.content = json.dumps(content) if content else None


class Resource(JsonContentMixin, Base):
    """Current version of a stored resource."""

    __tablename__ = "resources"

    # Internal identity, referenced by secondary index tables
    pid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    resource_type: Mapped[str] = mapped_column(String(64), index=True)
    resource_id: Mapped[str] = mapped_column(String(64), index=True)
    version: Mapped[int] = mapped_column(Integer, default=1)

    # Resource body (stored as JSON string)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("resource_type", "resource_id", name="uq_resources_type_id"),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def reference(self) -> str:
        """Versioned reference, e.g. Subscription/abc/_history/2."""
        return f"{self.resource_type}/{self.resource_id}/_history/{self.version}"


class ResourceVersion(JsonContentMixin, Base):
    """Immutable snapshot of one written resource version."""

    __tablename__ = "resource_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    resource_pid: Mapped[int] = mapped_column(
        Integer, ForeignKey("resources.pid"), index=True
    )
    version: Mapped[int] = mapped_column(Integer)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("resource_pid", "version", name="uq_resource_versions_pid_version"),
    )

    @classmethod
    def snapshot(cls, resource: Resource) -> "ResourceVersion":
        """Capture the current state of a resource row."""
        return cls(
            resource_pid=resource.pid,
            version=resource.version,
            content=resource.content,
            updated_at=resource.updated_at,
            deleted_at=resource.deleted_at,
        )
