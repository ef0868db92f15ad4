# layout_service/handlers.py
"""
Request entry points. Both take an API-gateway style event

    {"requestContext": {"authorizer": {"claims": {...}}}, "body": "..."}

and answer with a {statusCode, headers, body} envelope whose body is a JSON
string. Every response carries the CORS headers, whatever the status.
"""
import base64
import binascii
import json
import logging
import threading
from typing import Any, Mapping, Optional

from layout_service.google_helpers import DEFAULT_OWNER, DEFAULT_TAGS, create_session_factory
from layout_service.layout_store import LayoutStore, LayoutStoreError
from layout_service.security import claims_from_event, get_security_details
from layout_service.validator import validate_layout_body

logger = logging.getLogger("layout_service")

HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
}

_store_lock = threading.Lock()
_store: Optional[LayoutStore] = None


def get_layout_store() -> LayoutStore:
    global _store
    with _store_lock:
        if _store is None:
            store = LayoutStore(create_session_factory())
            store.create_tables()
            _store = store
        return _store


def set_layout_store(store: Optional[LayoutStore]) -> None:
    global _store
    with _store_lock:
        _store = store


def _response(status_code: int, body: dict) -> dict:
    return {
        "statusCode": status_code,
        "headers": dict(HEADERS),
        "body": json.dumps(body),
    }


def _unauthorized() -> dict:
    return _response(401, {"message": "Unauthorized"})


def _server_error(e: Exception) -> dict:
    # storage errors carry a safe diagnostic, anything else only its class name
    error = str(e) if isinstance(e, LayoutStoreError) else type(e).__name__
    return _response(500, {"message": "Internal server error", "error": error})


def _event_body(event: Mapping[str, Any]):
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            return body
    return body


def _owner_from_claims(claims: Mapping[str, Any]) -> str:
    for key in ("sub", "cognito:username"):
        value = claims.get(key)
        if isinstance(value, str) and value:
            return value
    return DEFAULT_OWNER


def get_all_handler(event: Mapping[str, Any], context=None, store: Optional[LayoutStore] = None) -> dict:
    try:
        claims = claims_from_event(event)
        security = get_security_details(claims)
        if not security.is_authenticated:
            logger.info("get_all: rejected unauthenticated request")
            return _unauthorized()

        # TODO: restrict the scan to the caller's own records for non-admins once ownership rules are agreed
        logger.debug(f"get_all: security={security.as_flags()}")
        items = (store or get_layout_store()).retrieve_all()

        return _response(200, {
            "message": "Payload successfully retrieved",
            "items": items,
        })
    except LayoutStoreError as e:
        logger.error(f"get_all: storage failure: {e}")
        return _server_error(e)
    except Exception as e:
        logger.exception("get_all: unexpected failure")
        return _server_error(e)


def store_handler(event: Mapping[str, Any], context=None, store: Optional[LayoutStore] = None) -> dict:
    try:
        claims = claims_from_event(event)
        security = get_security_details(claims)
        if not security.is_authenticated:
            logger.info("store: rejected unauthenticated request")
            return _unauthorized()

        document, result = validate_layout_body(_event_body(event))
        if not result.valid:
            return _response(400, {
                "message": "Invalid request body",
                "errors": [v.model_dump() for v in result.errors],
            })

        item = (store or get_layout_store()).store(
            document,
            owner=_owner_from_claims(claims),
            tags=DEFAULT_TAGS,
        )

        return _response(200, {
            "message": "Payload successfully stored",
            "item": item,
        })
    except LayoutStoreError as e:
        logger.error(f"store: storage failure: {e}")
        return _server_error(e)
    except Exception as e:
        logger.exception("store: unexpected failure")
        return _server_error(e)
