"""
Identité visiteur — cookie visitor_id, lu ou généré.
Ne pose jamais le cookie : c'est à l'appelant (route API) de le faire si is_new.
"""
import os
import secrets
from typing import Any, NamedTuple, Optional

VISITOR_COOKIE_NAME    = os.getenv("VISITOR_COOKIE_NAME", "visitor_id")
VISITOR_COOKIE_MAX_AGE = 365 * 24 * 3600
VISITOR_ID_LENGTH      = 21


class VisitorIdResult(NamedTuple):
    visitor_id: str
    is_new:     bool


def new_visitor_id() -> str:
    """Id URL-safe de 21 caractères."""
    return secrets.token_urlsafe(16)[:VISITOR_ID_LENGTH]


def _cookie_value(cookie: Any) -> Optional[str]:
    if isinstance(cookie, str):
        return cookie
    return getattr(cookie, "value", None)


def get_or_create_visitor_id(cookies: Any) -> VisitorIdResult:
    """
    cookies : tout objet avec .get(name) → str | objet avec .value | None
    (request.cookies FastAPI, dict, SimpleCookie…).
    """
    existing = _cookie_value(cookies.get(VISITOR_COOKIE_NAME)) if cookies is not None else None
    if existing:
        return VisitorIdResult(visitor_id=existing, is_new=False)
    return VisitorIdResult(visitor_id=new_visitor_id(), is_new=True)
