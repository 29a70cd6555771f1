import httpx
import pytest

from storefront.api.deps import get_recommendation_engine
from storefront.core.config import settings
from storefront.main import app
from storefront.recommendations.engine import (
    CategoryRecommendationEngine, HttpRecommendationEngine, RecommendationEngine,
)
from storefront.recommendations.repository import ProductRepository


class FixedEngine(RecommendationEngine):
    def __init__(self, ids):
        self.ids = ids
        self.calls = []

    def get_recommendations(self, recommendation_id):
        self.calls.append(recommendation_id)
        return list(self.ids)


@pytest.fixture
def fixed_engine():
    engine = FixedEngine([])
    app.dependency_overrides[get_recommendation_engine] = lambda: engine
    yield engine
    app.dependency_overrides.pop(get_recommendation_engine, None)


def test_category_engine_recommends_same_category(catalog):
    ids = CategoryRecommendationEngine(catalog).get_recommendations("1")
    assert sorted(ids) == ["2", "3"]


def test_category_engine_unknown_id(catalog):
    assert CategoryRecommendationEngine(catalog).get_recommendations("404") == []


def test_repository_keeps_engine_order_and_skips_unknown(catalog):
    products = ProductRepository(catalog).load_products_from_recommendation(["5", "nope", "99", "4", "5"])
    assert [p.recommendation_id for p in products] == [5, 4]


def test_recommendations_partial_excludes_query_product(client, catalog):
    resp = client.get("/Recommendations/1")
    assert resp.status_code == 200
    assert "Brake Rotor" in resp.text
    assert "Brake Disk and Calipers" in resp.text
    assert "Disk and Pad Combo" not in resp.text
    assert "<html" not in resp.text


def test_engine_results_never_echo_the_query(client, catalog, fixed_engine):
    fixed_engine.ids = ["4", "5", "6"]
    resp = client.get("/Recommendations/5")
    assert fixed_engine.calls == ["5"]
    assert "Halogen Headlights (2 Pack)" in resp.text
    assert "Filter Set" in resp.text
    assert "Bugeye Headlights (2 Pack)" not in resp.text


def test_no_recommendations_renders_nothing(client, catalog, fixed_engine):
    resp = client.get("/Recommendations/1")
    assert resp.status_code == 200
    assert resp.text.strip() == ""


def test_disabled_recommendations_return_empty_body(client, catalog, fixed_engine, monkeypatch):
    monkeypatch.setattr(settings, "SHOW_RECOMMENDATIONS", False)
    fixed_engine.ids = ["2"]
    resp = client.get("/Recommendations/1")
    assert resp.status_code == 200
    assert resp.text == ""
    assert fixed_engine.calls == []


def test_non_numeric_id_is_argument_error(client, catalog, fixed_engine):
    resp = client.get("/Recommendations/abc")
    assert resp.status_code == 400
    assert "recommendation_id" in resp.json()["detail"]


def test_http_engine_reads_list_payload():
    def handler(request: httpx.Request):
        assert request.url.params["itemId"] == "7"
        assert request.headers["Authorization"] == "Bearer k"
        return httpx.Response(200, json=["1", 6, None])

    engine = HttpRecommendationEngine(url="http://reco.test/v1", api_key="k", transport=httpx.MockTransport(handler))
    assert engine.get_recommendations("7") == ["1", "6"]


def test_http_engine_reads_items_object():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"items": ["3"]}))
    engine = HttpRecommendationEngine(url="http://reco.test/v1", api_key="", transport=transport)
    assert engine.get_recommendations("1") == ["3"]


def test_http_engine_degrades_to_empty_on_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    engine = HttpRecommendationEngine(url="http://reco.test/v1", transport=transport)
    assert engine.get_recommendations("1") == []


def test_engine_without_lookup_cannot_be_constructed():
    class Unfinished(RecommendationEngine):
        pass

    with pytest.raises(TypeError):
        Unfinished()
