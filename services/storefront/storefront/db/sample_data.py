"""Sample catalog used for local development and demos."""
import json
import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.db.models import Category, Product, Promo, Raincheck, Store

logger = logging.getLogger(__name__)

CATEGORIES = [
    ("Brakes", "Pads, rotors and calipers."),
    ("Lighting", "Headlights and bulbs."),
    ("Oil", "Engine oil and filters."),
    ("Wheels & Tires", "Tires and rims for every season."),
]

# (sku, category, recommendation id, title, price, details)
PRODUCTS = [
    ("BRK-001", "Brakes", 1, "Disk and Pad Combo", "25.99", {"Disk Design": "Cross Drill Slotted"}),
    ("BRK-002", "Brakes", 2, "Brake Rotor", "18.99", {"Disk Design": "Slotted"}),
    ("BRK-003", "Brakes", 3, "Brake Disk and Calipers", "43.99", {"Pieces": "6"}),
    ("LIG-001", "Lighting", 4, "Halogen Headlights (2 Pack)", "38.99", {"Light Source": "Halogen"}),
    ("LIG-002", "Lighting", 5, "Bugeye Headlights (2 Pack)", "48.99", {"Light Source": "Halogen"}),
    ("OIL-001", "Oil", 6, "Filter Set", "28.99", {"Filter Type": "Canister and Cartridge"}),
    ("OIL-002", "Oil", 7, "Oil and Filter Combo", "34.49", {"Oil Type": "Synthetic"}),
    ("WHL-001", "Wheels & Tires", 8, "Matte Finish Rim", "75.99", {"Size": "17 in"}),
    ("WHL-002", "Wheels & Tires", 9, "Blue Performance Alloy Rim", "88.99", {"Size": "18 in"}),
]

STORES = ["Redmond", "Seattle", "Bellevue"]

PROMOS = [("FREE", "Demo promo accepted at checkout.")]


def seed(db: Session) -> bool:
    """Insert the sample catalog unless categories already exist. Returns True if rows were added."""
    if db.execute(select(Category.id).limit(1)).first():
        logger.info("Catalog already present; skipping sample data")
        return False

    categories = {name: Category(name=name, description=desc) for name, desc in CATEGORIES}
    db.add_all(categories.values())

    products = []
    for sku, category, rid, title, price, details in PRODUCTS:
        products.append(Product(
            sku_number=sku,
            category=categories[category],
            recommendation_id=rid,
            title=title,
            price=Decimal(price),
            sale_price=Decimal(price),
            product_art_url=f"product_{sku.lower()}.jpg",
            product_details=json.dumps(details),
            inventory=10,
            lead_time=0,
        ))
    db.add_all(products)

    stores = [Store(name=name) for name in STORES]
    db.add_all(stores)
    for i, store in enumerate(stores):
        product = products[i % len(products)]
        db.add(Raincheck(name="Sample customer", store=store, product=product, count=1,
                         sale_price=product.price))

    db.add_all(Promo(code=code, description=desc) for code, desc in PROMOS)
    db.commit()
    logger.info("Seeded %d categories and %d products", len(categories), len(products))
    return True
