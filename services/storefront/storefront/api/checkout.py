import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.api.deps import (
    CartSession, get_antiforgery, get_cart_session, get_db, get_shopping_cart, get_telemetry,
)
from storefront.cart.costs import calculate_costs
from storefront.cart.shopping_cart import ShoppingCart
from storefront.core.antiforgery import Antiforgery, FORM_FIELD, parse_token_pair
from storefront.core.telemetry import TelemetryProvider
from storefront.db.models import Order, Promo
from storefront.schemas import CheckoutForm
from storefront.web.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter()

def _render_form(request: Request, session: CartSession, antiforgery: Antiforgery,
                 values: dict | None = None, errors: list | None = None, status_code: int = 200):
    tokens = antiforgery.get_tokens(request, session.username)
    response = templates.TemplateResponse(request, "address_and_payment.html", {
        "values": values or {},
        "errors": errors or [],
        "verification_token": tokens.header_value,
        "token_field": FORM_FIELD,
    }, status_code=status_code)
    antiforgery.store_cookie(response, tokens)
    return session.apply(response)

def find_promo(db: Session, code: str) -> Promo | None:
    stmt = select(Promo).where(func.lower(Promo.code) == code.strip().lower(), Promo.active.is_(True))
    return db.execute(stmt).scalars().first()

@router.get("/AddressAndPayment")
def address_and_payment(request: Request,
                        session: CartSession = Depends(get_cart_session),
                        antiforgery: Antiforgery = Depends(get_antiforgery)):
    return _render_form(request, session, antiforgery, values={"email": session.username or ""})

@router.post("/AddressAndPayment")
def place_order(request: Request,
                name: str = Form(""), address: str = Form(""), city: str = Form(""),
                state: str = Form(""), postal_code: str = Form(""), country: str = Form(""),
                phone: str = Form(""), email: str = Form(""), promo_code: str = Form(""),
                verification_token: str = Form("", alias=FORM_FIELD),
                session: CartSession = Depends(get_cart_session),
                cart: ShoppingCart = Depends(get_shopping_cart),
                db: Session = Depends(get_db),
                antiforgery: Antiforgery = Depends(get_antiforgery),
                telemetry: TelemetryProvider = Depends(get_telemetry)):
    antiforgery.validate_tokens(request, parse_token_pair(verification_token), session.username)

    values = {
        "name": name, "address": address, "city": city, "state": state, "postal_code": postal_code,
        "country": country, "phone": phone, "email": email, "promo_code": promo_code,
    }
    try:
        form = CheckoutForm(**values)
    except ValidationError as exc:
        errors = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
        return _render_form(request, session, antiforgery, values, errors, status_code=400)

    if not find_promo(db, form.promo_code):
        logger.info("cart %s: rejected promo code %r", session.cart_id, form.promo_code)
        return _render_form(request, session, antiforgery, values, ["Promo code is not valid"], status_code=400)

    items = cart.get_cart_items()
    if not items:
        return _render_form(request, session, antiforgery, values, ["Your shopping cart is empty"], status_code=400)

    order = Order(
        username=session.cart_id,
        name=form.name, address=form.address, city=form.city, state=form.state,
        postal_code=form.postal_code, country=form.country, phone=form.phone, email=form.email,
    )
    cart.create_order(order)
    db.commit(); db.refresh(order)

    telemetry.track_event("Checkout/Server/Complete", {"OrderId": str(order.id)}, None)
    logger.info("order %s placed by %s for %s", order.id, order.username, order.total)
    return session.apply(RedirectResponse(url=f"/Checkout/Complete/{order.id}", status_code=303))

@router.get("/Complete/{id}")
def complete(id: int, request: Request,
             session: CartSession = Depends(get_cart_session),
             db: Session = Depends(get_db)):
    order = db.get(Order, id)
    if not order or order.username != session.cart_id:
        raise HTTPException(status_code=404, detail="Order not found")
    costs = calculate_costs((d.quantity, d.unit_price) for d in order.details)
    return session.apply(templates.TemplateResponse(request, "complete.html", {
        "order": order,
        "costs": costs.display(),
    }))
