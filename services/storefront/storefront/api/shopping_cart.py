from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from storefront.api.deps import (
    CartSession, get_antiforgery, get_cart_session, get_db, get_shopping_cart, get_telemetry,
)
from storefront.cart.shopping_cart import ShoppingCart
from storefront.core.antiforgery import Antiforgery
from storefront.core.telemetry import Stopwatch, TelemetryProvider
from storefront.db.models import Product
from storefront.schemas import ShoppingCartRemoveResult
from storefront.web.templating import templates

router = APIRouter()

@router.get("")
def index(request: Request,
          session: CartSession = Depends(get_cart_session),
          cart: ShoppingCart = Depends(get_shopping_cart),
          antiforgery: Antiforgery = Depends(get_antiforgery),
          telemetry: TelemetryProvider = Depends(get_telemetry)):
    items = cart.get_cart_items()
    costs = cart.get_costs(items)
    tokens = antiforgery.get_tokens(request, session.username)

    telemetry.track_trace("Cart/Server/Index")

    response = templates.TemplateResponse(request, "shopping_cart.html", {
        "cart_items": items,
        "cart_count": costs.item_count,
        "costs": costs.display(),
        "verification_token": tokens.header_value,
    })
    antiforgery.store_cookie(response, tokens)
    return session.apply(response)

@router.get("/AddToCart/{id}")
def add_to_cart(id: int,
                session: CartSession = Depends(get_cart_session),
                cart: ShoppingCart = Depends(get_shopping_cart),
                db: Session = Depends(get_db),
                telemetry: TelemetryProvider = Depends(get_telemetry)):
    timer = Stopwatch()
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    cart.add_to_cart(product)
    db.commit()

    telemetry.track_event("Cart/Server/Add", None, timer.measurements())
    return session.apply(RedirectResponse(url="/ShoppingCart", status_code=303))

@router.post("/RemoveFromCart/{id}", response_model=ShoppingCartRemoveResult)
def remove_from_cart(id: int, request: Request,
                     session: CartSession = Depends(get_cart_session),
                     cart: ShoppingCart = Depends(get_shopping_cart),
                     db: Session = Depends(get_db),
                     antiforgery: Antiforgery = Depends(get_antiforgery),
                     telemetry: TelemetryProvider = Depends(get_telemetry)):
    antiforgery.validate_request(request, session.username)

    timer = Stopwatch()
    item = cart.get_cart_item(id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not in cart")
    title = item.product.title

    item_count = cart.remove_from_cart(id)
    db.commit()

    telemetry.track_event("Cart/Server/Remove", None, timer.measurements())

    items = cart.get_cart_items()
    costs = cart.get_costs(items)
    copies = "copy" if item_count == 1 else "copies"
    return ShoppingCartRemoveResult(
        message=f"{item_count} {copies} of {title} has been removed from your shopping cart.",
        cart_count=costs.item_count,
        item_count=item_count,
        delete_id=id,
        **costs.display(),
    )
