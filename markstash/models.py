import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.types import DateTime, TypeDecorator

from markstash.extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes, also on backends that drop the offset."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


def new_bookmark_id() -> str:
    return str(uuid.uuid4())


class Bookmark(db.Model):
    __tablename__ = "bookmarks"

    id = db.Column(db.String(36), primary_key=True, default=new_bookmark_id)
    link = db.Column(db.String(256), nullable=False)
    description = db.Column(db.Text, nullable=False)
    favorites = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column("createdAt", UTCDateTime, nullable=False, default=utcnow)
    updated_at = db.Column("updatedAt", UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.Index("ix_bookmarks_created_at", "createdAt"),
        db.Index("ix_bookmarks_favorites", "favorites"),
    )

    def touch(self) -> None:
        now = utcnow()
        if self.updated_at is not None and now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now

    def as_dict(self):
        return {
            "id": self.id,
            "link": self.link,
            "description": self.description,
            "favorites": self.favorites,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
