from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.api.deps import get_db
from storefront.cart.costs import calculate_costs
from storefront.core.auth import get_current_identity
from storefront.db.models import Order, OrderDetail
from storefront.web.templating import templates

router = APIRouter()

@router.get("")
def list_orders(request: Request, identity: dict = Depends(get_current_identity), db: Session = Depends(get_db)):
    orders = db.execute(
        select(Order).where(Order.username == identity["sub"]).order_by(Order.order_date.desc(), Order.id.desc())
    ).scalars().all()
    return templates.TemplateResponse(request, "orders.html", {"orders": orders})

@router.get("/Details/{id}")
def order_details(id: int, request: Request, identity: dict = Depends(get_current_identity),
                  db: Session = Depends(get_db)):
    order = db.execute(
        select(Order)
        .where(Order.id == id)
        .options(selectinload(Order.details).selectinload(OrderDetail.product))
    ).scalars().first()
    if not order or order.username != identity["sub"]:
        raise HTTPException(status_code=404, detail="Order not found")
    costs = calculate_costs((d.quantity, d.unit_price) for d in order.details)
    return templates.TemplateResponse(request, "order_details.html", {"order": order, "costs": costs.display()})
