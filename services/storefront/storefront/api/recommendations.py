import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from storefront.api.deps import get_product_repository, get_recommendation_engine
from storefront.core.config import settings
from storefront.core.errors import ArgumentOutOfRangeError, require_text
from storefront.recommendations.engine import RecommendationEngine
from storefront.recommendations.repository import ProductRepository
from storefront.web.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/{recommendation_id}", response_class=HTMLResponse)
def get_recommendations(recommendation_id: str, request: Request,
                        engine: RecommendationEngine = Depends(get_recommendation_engine),
                        repository: ProductRepository = Depends(get_product_repository)):
    if not settings.SHOW_RECOMMENDATIONS:
        return HTMLResponse("")

    require_text("recommendation_id", recommendation_id)
    try:
        query_id = int(recommendation_id)
    except ValueError:
        raise ArgumentOutOfRangeError("recommendation_id", recommendation_id, "Must be an integer")

    recommended_ids = engine.get_recommendations(recommendation_id)
    products = repository.load_products_from_recommendation(recommended_ids)
    products = [p for p in products if p is not None and p.recommendation_id != query_id]
    logger.debug("recommendations for %s: %s", query_id, [p.recommendation_id for p in products])

    return templates.TemplateResponse(request, "_recommendations.html", {"products": products})
