"""
Anti-forgery tokens for state-changing requests.

A token set is a random cookie token, kept in the ``.AntiForgery`` cookie, and
a signed form token that embeds the cookie token and the username it was issued
for. AJAX callers send both in the ``RequestVerificationToken`` header as
``cookieToken:formToken``; HTML forms post the pair in a hidden field.
"""
import secrets

import jwt
from fastapi import Request, Response
from pydantic import BaseModel

from storefront.core.config import settings

COOKIE_NAME = ".AntiForgery"
HEADER_NAME = "RequestVerificationToken"
FORM_FIELD = "__RequestVerificationToken"
TOKEN_TYPE = "antiforgery"


class AntiforgeryValidationError(Exception):
    pass


class AntiforgeryTokenSet(BaseModel):
    cookie_token: str = ""
    form_token: str = ""

    @property
    def header_value(self) -> str:
        return f"{self.cookie_token}:{self.form_token}"


def parse_token_pair(value: str | None) -> AntiforgeryTokenSet:
    """Split a ``cookieToken:formToken`` value; anything else yields empty tokens."""
    if value:
        parts = value.split(":")
        if len(parts) == 2:
            return AntiforgeryTokenSet(cookie_token=parts[0], form_token=parts[1])
    return AntiforgeryTokenSet()


class Antiforgery:
    def __init__(self, secret: str = settings.ANTIFORGERY_SECRET, algorithm: str = settings.JWT_ALGORITHM):
        self.secret = secret
        self.algorithm = algorithm

    def get_tokens(self, request: Request, username: str | None = None) -> AntiforgeryTokenSet:
        cookie_token = request.cookies.get(COOKIE_NAME) or secrets.token_urlsafe(24)
        form_token = jwt.encode(
            {"type": TOKEN_TYPE, "ct": cookie_token, "sub": username or ""},
            self.secret,
            algorithm=self.algorithm,
        )
        return AntiforgeryTokenSet(cookie_token=cookie_token, form_token=form_token)

    def store_cookie(self, response: Response, tokens: AntiforgeryTokenSet) -> None:
        response.set_cookie(COOKIE_NAME, tokens.cookie_token, httponly=True, samesite="strict")

    def validate_tokens(self, request: Request, tokens: AntiforgeryTokenSet, username: str | None = None) -> None:
        if not tokens.cookie_token or not tokens.form_token:
            raise AntiforgeryValidationError("required anti-forgery token was not supplied")
        if request.cookies.get(COOKIE_NAME) != tokens.cookie_token:
            raise AntiforgeryValidationError("cookie token does not match the anti-forgery cookie")
        try:
            claims = jwt.decode(tokens.form_token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise AntiforgeryValidationError(f"form token is invalid: {exc}") from exc
        if claims.get("type") != TOKEN_TYPE or claims.get("ct") != tokens.cookie_token:
            raise AntiforgeryValidationError("form token was not issued for this cookie token")
        if claims.get("sub", "") != (username or ""):
            raise AntiforgeryValidationError("form token was issued for a different user")

    def validate_request(self, request: Request, username: str | None = None) -> None:
        self.validate_tokens(request, parse_token_pair(request.headers.get(HEADER_NAME)), username)

