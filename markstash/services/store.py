from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from markstash.errors import NotFoundError, StoreError
from markstash.extensions import db
from markstash.models import Bookmark, utcnow
from markstash.services.query import FilterSpec, filter_clause, order_clauses

logger = logging.getLogger(__name__)


@contextmanager
def _store_operation(description: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("%s: %s", description, exc)
        raise StoreError(description) from exc


def list_bookmarks(spec: FilterSpec) -> tuple[list[Bookmark], int]:
    with _store_operation("Can't get list of bookmarks"):
        query = Bookmark.query
        clause = filter_clause(spec)
        if clause is not None:
            query = query.filter(clause)
        total = query.order_by(None).count()
        items = (
            query.order_by(*order_clauses(spec))
            .limit(spec.limit)
            .offset(spec.offset)
            .all()
        )
    return items, total


def create_bookmark(link: str, description: str, favorites: bool = False) -> Bookmark:
    with _store_operation("Can't create bookmark"):
        now = utcnow()
        bookmark = Bookmark(
            link=link,
            description=description,
            favorites=favorites,
            created_at=now,
            updated_at=now,
        )
        db.session.add(bookmark)
        db.session.commit()
    logger.info("Created bookmark %s", bookmark.id)
    return bookmark


def get_bookmark(bookmark_id: str) -> Bookmark:
    with _store_operation("Can't get bookmark"):
        bookmark = db.session.get(Bookmark, bookmark_id)
    if bookmark is None:
        raise NotFoundError()
    return bookmark


def update_bookmark(bookmark_id: str, changes: dict) -> Bookmark:
    with _store_operation("Can't update bookmark"):
        bookmark = db.session.get(Bookmark, bookmark_id)
        if bookmark is None:
            raise NotFoundError()
        for field in ("link", "description", "favorites"):
            if field in changes:
                setattr(bookmark, field, changes[field])
        bookmark.touch()
        db.session.commit()
    logger.info("Updated bookmark %s (%s)", bookmark_id, ", ".join(sorted(changes)))
    return bookmark


def delete_bookmark(bookmark_id: str) -> None:
    with _store_operation("Can't delete bookmark"):
        deleted = Bookmark.query.filter_by(id=bookmark_id).delete()
        db.session.commit()
    if deleted == 0:
        raise NotFoundError()
    logger.info("Deleted bookmark %s", bookmark_id)
