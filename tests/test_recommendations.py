from __future__ import annotations

from kiosk import Language, OrderHistoryStore, OrderLine, RecommendationEngine, summarize_order
from kiosk.recommendations import analyze_preferences


def test_popular_orders_by_popularity(catalog):
    engine = RecommendationEngine(catalog)
    recs = engine.popular(Language.KO, limit=3)
    assert [rec.id for rec in recs] == ["popular-kimchi-jjigae", "popular-bulgogi", "popular-doenjang-jjigae"]
    assert recs[0].title == "인기 메뉴: 김치찌개"
    assert recs[0].description == "95% 고객 만족도"
    assert recs[0].to_api(Language.KO)["totalPrice"] == 10000


def test_personalized_from_history(catalog, entries):
    history = OrderHistoryStore()
    history.add(summarize_order([OrderLine(entries["bibimbap"], 2)], Language.EN))
    engine = RecommendationEngine(catalog, history)
    recs = engine.personalized(Language.EN)
    assert [rec.id for rec in recs] == ["personalized-bulgogi", "price-match-kimchi-jjigae"]
    assert recs[0].description == "From your favorite category"


def test_personalized_without_history(catalog):
    recs = RecommendationEngine(catalog).personalized(Language.KO)
    assert [rec.id for rec in recs] == ["price-match-kimchi-jjigae"]


def test_analyze_preferences(entries):
    orders = [
        summarize_order([OrderLine(entries["rice"], 3), OrderLine(entries["cola"], 1)], Language.KO),
    ]
    prefs = analyze_preferences(orders)
    assert prefs.favorite_categories == ["side", "beverage"]
    assert prefs.frequent_items == ["rice"]
    assert prefs.average_price == (3 * 2000 + 2500) / 4
