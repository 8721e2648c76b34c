"""Request-scoped accessors for the app-owned database and cache."""

from fastapi import Request

from errors import ValidationError
from services.cache import TTLCache
from services.database import Database


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


def envelope(data=None, message: str | None = None, pagination: dict | None = None, **extra) -> dict:
    body: dict = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    body.update(extra)
    return body


def positive_id(value: int, label: str) -> int:
    if value <= 0:
        raise ValidationError(f"Invalid {label} ID")
    return value
