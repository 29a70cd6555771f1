import re

import jwt

from storefront.core.config import settings

TOKEN_META = re.compile(r'name="request-verification-token" content="([^"]+)"')
TOKEN_FIELD = re.compile(r'name="__RequestVerificationToken" value="([^"]+)"')


def access_token(email: str = "cust@example.com") -> str:
    return jwt.encode({"sub": email, "role": "customer", "type": "access"},
                      settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(email: str = "cust@example.com") -> dict:
    return {"Authorization": f"Bearer {access_token(email)}"}


def cart_token(client, headers=None) -> str:
    """Load the cart page and return its ``cookieToken:formToken`` header value."""
    resp = client.get("/ShoppingCart", headers=headers or {})
    assert resp.status_code == 200
    return TOKEN_META.search(resp.text).group(1)
