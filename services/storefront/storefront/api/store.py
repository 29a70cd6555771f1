import json
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.api.deps import get_db
from storefront.core.config import settings
from storefront.core.errors import require_text
from storefront.db.models import Category, OrderDetail, Product
from storefront.web.templating import templates

router = APIRouter()

@router.get("/")
def home(request: Request, db: Session = Depends(get_db)):
    limit = settings.HOME_PAGE_PRODUCTS
    new_products = db.execute(
        select(Product).order_by(Product.created.desc(), Product.id.desc()).limit(limit)
    ).scalars().all()

    sold = func.coalesce(func.sum(OrderDetail.quantity), 0)
    top_selling = db.execute(
        select(Product)
        .outerjoin(OrderDetail, OrderDetail.product_id == Product.id)
        .group_by(Product.id)
        .order_by(sold.desc(), Product.id)
        .limit(limit)
    ).scalars().all()

    return templates.TemplateResponse(request, "home.html", {
        "new_products": new_products,
        "top_selling": top_selling,
    })

@router.get("/Store")
def store_index(request: Request, db: Session = Depends(get_db)):
    categories = db.execute(select(Category).order_by(Category.name)).scalars().all()
    return templates.TemplateResponse(request, "store_index.html", {"categories": categories})

@router.get("/Store/Browse")
def browse(request: Request, categoryId: int, db: Session = Depends(get_db)):
    category = db.get(Category, categoryId)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    products = db.execute(
        select(Product).where(Product.category_id == category.id).order_by(Product.title)
    ).scalars().all()
    return templates.TemplateResponse(request, "browse.html", {"category": category, "products": products})

@router.get("/Store/Details/{id}")
def details(id: int, request: Request, db: Session = Depends(get_db)):
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    try:
        product_details = json.loads(product.product_details or "{}")
    except ValueError:
        product_details = {}
    return templates.TemplateResponse(request, "details.html", {
        "product": product,
        "product_details": product_details,
        "show_recommendations": settings.SHOW_RECOMMENDATIONS,
    })

@router.get("/Search")
def search(request: Request, q: Optional[str] = None, db: Session = Depends(get_db)):
    query = require_text("q", q).strip()
    products = db.execute(
        select(Product).where(Product.title.icontains(query, autoescape=True)).order_by(Product.title)
    ).scalars().all()
    return templates.TemplateResponse(request, "search.html", {"query": query, "products": products})
