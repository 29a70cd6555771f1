"""
Recommendation engines.

An engine maps a product recommendation id to the recommendation ids of
related products. Ranking is the engine's business; callers only filter.
"""
import logging
from abc import ABC, abstractmethod
from typing import List

import httpx
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.db.models import Product

logger = logging.getLogger(__name__)


class RecommendationEngine(ABC):
    @abstractmethod
    def get_recommendations(self, recommendation_id: str) -> List[str]:
        raise NotImplementedError


class CategoryRecommendationEngine(RecommendationEngine):
    """Recommends other products from the same category, newest first."""

    def __init__(self, db: Session, limit: int = settings.RECOMMENDATION_LIMIT):
        self.db = db
        self.limit = limit

    def get_recommendations(self, recommendation_id):
        source = self.db.execute(
            select(Product).where(Product.recommendation_id == int(recommendation_id))
        ).scalars().first()
        if source is None:
            return []
        stmt = (
            select(Product.recommendation_id)
            .where(Product.category_id == source.category_id, Product.id != source.id)
            .order_by(Product.created.desc(), Product.id.desc())
            .limit(self.limit)
        )
        return [str(rid) for rid in self.db.execute(stmt).scalars().all()]


class HttpRecommendationEngine(RecommendationEngine):
    """Client for an external "frequently bought together" service.

    The service answers ``GET {url}?itemId=<id>`` with a JSON list of
    recommendation ids, or an object holding that list under ``items``.
    """

    def __init__(self, url: str = settings.RECOMMENDATION_URL, api_key: str = settings.RECOMMENDATION_API_KEY,
                 timeout: float = 5.0, transport: httpx.BaseTransport | None = None):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def get_recommendations(self, recommendation_id):
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.get(self.url, params={"itemId": recommendation_id}, headers=headers)
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Recommendation service failed for %s: %s", recommendation_id, exc)
            return []
        if isinstance(body, dict):
            body = body.get("items", [])
        return [str(rid) for rid in body if rid is not None]
