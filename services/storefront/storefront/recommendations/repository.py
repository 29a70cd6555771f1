from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.db.models import Product


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def load_products_from_recommendation(self, recommendation_ids: Iterable[str]) -> List[Product]:
        """Products for the given recommendation ids, in the order given.

        Ids that are not numeric or match no product are skipped.
        """
        wanted = []
        for rid in recommendation_ids:
            try:
                wanted.append(int(rid))
            except (TypeError, ValueError):
                continue
        if not wanted:
            return []
        rows = self.db.execute(select(Product).where(Product.recommendation_id.in_(wanted))).scalars().all()
        by_rid = {p.recommendation_id: p for p in rows}
        return [by_rid[rid] for rid in dict.fromkeys(wanted) if rid in by_rid]
