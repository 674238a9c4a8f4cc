"""Request/response helpers shared by every controller."""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import wraps
from typing import Any, Type, TypeVar

import pydantic
from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..users.model import SessionUser
from .validators import require_month

logger = logging.getLogger(__name__)

SESSION_KEY = "user"

SchemaT = TypeVar("SchemaT", bound=pydantic.BaseModel)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = SessionUser.from_session(session.get(SESSION_KEY))
        if user is None:
            raise AuthenticationError("ログインが必要です")
        g.user = user
        return view(*args, **kwargs)

    return wrapper


def current_user() -> SessionUser:
    return g.user


def store_session(user: SessionUser) -> None:
    session.clear()
    session.permanent = True
    session[SESSION_KEY] = user.to_session()


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("リクエストボディが不正です")
    return data


def parse_body(schema: Type[SchemaT], data: Any = None) -> SchemaT:
    payload = json_body() if data is None else data
    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        first = details[0] if details else {"field": "", "message": "入力値が不正です"}
        raise ValidationError(f"{first['field']}: {first['message']}", details=details)


def query_month(name: str = "month", *, required: bool = True):
    value = request.args.get(name)
    if value is None and not required:
        return None
    return require_month(value, name)


def query_int(name: str):
    value = request.args.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} は整数で指定してください")


def no_content():
    return "", 204


def configure_session(app: Flask, *, cookie_name: str, secure: bool) -> None:
    app.config.update(
        SESSION_COOKIE_NAME=cookie_name,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=secure,
        PERMANENT_SESSION_LIFETIME=timedelta(days=DEFAULT_SESSION_DAYS),
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if e.status >= 500:
            logger.error("%s: %s", e.code, e.message)
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        code = "NOT_FOUND" if e.code == 404 else "BAD_REQUEST"
        return jsonify({"error": {"code": code, "message": e.description or e.name}}), e.code or 400

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": {"code": "INTERNAL_ERROR", "message": "システムエラーが発生しました"}}), 500
