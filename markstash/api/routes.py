from __future__ import annotations

import logging

import pydantic
from flask import current_app, jsonify, request

from markstash.api import api_bp
from markstash.errors import MarkstashError, ValidationError
from markstash.services import store
from markstash.services.preview import build_preview, load_sources
from markstash.services.query import build_filter_spec
from markstash.services.schemas import BookmarkCreate, BookmarkPatch
from markstash.services.validators import run_check

logger = logging.getLogger(__name__)


@api_bp.errorhandler(MarkstashError)
def handle_markstash_error(exc: MarkstashError):
    if isinstance(exc, ValidationError):
        logger.info(
            "Rejected %s %s: %s", request.method, request.path, sorted(exc.errors)
        )
    return jsonify(exc.to_payload()), exc.status_code


def _json_payload() -> dict:
    payload = request.get_json(silent=True)
    return {} if payload is None else payload


def _validate_body(schema, payload):
    try:
        return schema.model_validate(
            payload,
            context={"blocked_domains": current_app.config["BLOCKED_DOMAINS"]},
        )
    except pydantic.ValidationError as exc:
        raise ValidationError.from_pydantic(exc) from None


def _validated_id(bookmark_id: str) -> str:
    result = run_check("guid", bookmark_id)
    if not result.ok:
        raise ValidationError.single("id", result.code, result.description)
    return bookmark_id


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok", "service": "Markstash"})


@api_bp.route("/bookmarks", methods=["GET"])
def bookmarks_list():
    spec = build_filter_spec(
        request.args.to_dict(),
        default_limit=current_app.config["DEFAULT_LIST_LIMIT"],
    )
    items, total = store.list_bookmarks(spec)
    return jsonify({"length": total, "data": [item.as_dict() for item in items]})


@api_bp.route("/bookmarks", methods=["POST"])
def bookmarks_create():
    body = _validate_body(BookmarkCreate, _json_payload())
    bookmark = store.create_bookmark(
        link=body.link,
        description=body.description,
        favorites=body.favorites,
    )
    return (
        jsonify(
            {
                "data": {
                    "id": bookmark.id,
                    "createdAt": bookmark.created_at.isoformat(),
                }
            }
        ),
        201,
    )


@api_bp.route("/bookmarks/<bookmark_id>", methods=["GET"])
def bookmarks_preview(bookmark_id: str):
    bookmark = store.get_bookmark(_validated_id(bookmark_id))
    sources = load_sources(
        bookmark.link,
        whois_template=current_app.config["WHOIS_LOOKUP_URL"],
        timeout=current_app.config["PREVIEW_FETCH_TIMEOUT"],
        max_bytes=current_app.config["CONTENT_MAX_BYTES"],
    )
    return jsonify({"data": build_preview(bookmark.description, sources)})


@api_bp.route("/bookmarks/<bookmark_id>", methods=["PATCH"])
def bookmarks_update(bookmark_id: str):
    bookmark_id = _validated_id(bookmark_id)
    body = _validate_body(BookmarkPatch, _json_payload())
    store.update_bookmark(bookmark_id, body.changes())
    return jsonify("Update was successful")


@api_bp.route("/bookmarks/<bookmark_id>", methods=["DELETE"])
def bookmarks_delete(bookmark_id: str):
    store.delete_bookmark(_validated_id(bookmark_id))
    return jsonify("Delete was successful")
