from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from markstash.extensions import db

logger = logging.getLogger(__name__)


def migrate_guid_column_to_id() -> bool:
    """Rename the primary key of tables created by the old schema from
    ``guid`` to ``id``. Only SQLite databases are upgraded in place."""
    engine = db.engine
    if engine.dialect.name != "sqlite":
        return False

    inspector = inspect(engine)
    if not inspector.has_table("bookmarks"):
        return False

    columns = {column["name"] for column in inspector.get_columns("bookmarks")}
    if "guid" not in columns or "id" in columns:
        return False

    db.session.execute(text('ALTER TABLE bookmarks RENAME COLUMN "guid" TO "id"'))
    db.session.commit()
    logger.info("Renamed bookmarks.guid to bookmarks.id")
    return True
