import uuid

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from storefront.cart.shopping_cart import ShoppingCart
from storefront.core.antiforgery import Antiforgery
from storefront.core.auth import get_optional_identity
from storefront.core.config import settings
from storefront.core.telemetry import TelemetryProvider
from storefront.db.session import SessionLocal
from storefront.recommendations.engine import (
    CategoryRecommendationEngine, HttpRecommendationEngine, RecommendationEngine,
)
from storefront.recommendations.repository import ProductRepository

SESSION_COOKIE = "Session"


def get_db():
    db = SessionLocal()
    try: yield db
    finally: db.close()

def get_telemetry(request: Request) -> TelemetryProvider:
    return request.app.state.telemetry

def get_antiforgery() -> Antiforgery:
    return Antiforgery()

def get_product_repository(db: Session = Depends(get_db)) -> ProductRepository:
    return ProductRepository(db)

def get_recommendation_engine(db: Session = Depends(get_db)) -> RecommendationEngine:
    if settings.RECOMMENDATION_ENGINE == "http":
        return HttpRecommendationEngine()
    return CategoryRecommendationEngine(db)


class CartSession:
    """Which cart the caller owns, plus any cookie change the response must carry."""

    def __init__(self, cart_id: str, username: str | None = None,
                 issue_cookie: bool = False, clear_cookie: bool = False):
        self.cart_id = cart_id
        self.username = username
        self.issue_cookie = issue_cookie
        self.clear_cookie = clear_cookie

    def apply(self, response: Response) -> Response:
        if self.issue_cookie:
            response.set_cookie(SESSION_COOKIE, self.cart_id, httponly=True, samesite="lax")
        elif self.clear_cookie:
            response.delete_cookie(SESSION_COOKIE)
        return response


def get_cart_session(request: Request, identity: dict | None = Depends(get_optional_identity),
                     db: Session = Depends(get_db)) -> CartSession:
    anonymous_id = request.cookies.get(SESSION_COOKIE)
    if identity:
        username = identity["sub"]
        if anonymous_id and anonymous_id != username:
            ShoppingCart(db, anonymous_id).migrate_cart(username)
            db.commit()
            return CartSession(username, username, clear_cookie=True)
        return CartSession(username, username)
    if anonymous_id:
        return CartSession(anonymous_id)
    return CartSession(uuid.uuid4().hex, issue_cookie=True)

def get_shopping_cart(session: CartSession = Depends(get_cart_session),
                      db: Session = Depends(get_db)) -> ShoppingCart:
    return ShoppingCart(db, session.cart_id)
