from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fastapi_app.main import create_app
from kiosk import OrderHistoryStore
from kiosk.config import AudioSettings, KioskConfig, SpeechSettings
from kiosk.speech import AzureSpeechService
from kiosk.transcriber import AzureAudioTranscriber


@pytest.fixture
def history():
    return OrderHistoryStore()


@pytest.fixture
def client(history, no_azure_env):
    app = create_app(
        config=KioskConfig(history_path=None),
        history=history,
        speech_service=AzureSpeechService(SpeechSettings()),
        transcriber=AzureAudioTranscriber(AudioSettings()),
    )
    return TestClient(app)


def _voice(client, transcript, session="s1", language="en", **extra):
    body = {"sessionId": session, "transcript": transcript, **extra}
    if language:
        body["language"] = language
    return client.post("/api/order/voice", json=body)


def _items(state):
    return [(item["id"], item["quantity"]) for item in state["items"]]


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_languages(client):
    data = client.get("/api/languages").json()
    assert data["languages"] == ["ko", "en", "zh", "ja"]
    assert data["default"] == "ko"


def test_menu_localized(client):
    data = client.get("/api/menu", params={"lang": "en"}).json()
    assert data["language"] == "en"
    assert {"id": "rice", "name": "Rice"}.items() <= next(m for m in data["menu"] if m["id"] == "rice").items()


def test_menu_by_category(client):
    data = client.get("/api/menu", params={"category": "stew"}).json()
    assert {m["id"] for m in data["menu"]} == {"kimchi-jjigae", "doenjang-jjigae"}


def test_menu_unsupported_language(client):
    res = client.get("/api/menu", params={"lang": "fr"})
    assert res.status_code == 400
    assert "unsupported language" in res.json()["detail"]


def test_voice_order_accumulates(client):
    res = _voice(client, "bulgogi one, rice two")
    data = res.json()
    assert res.status_code == 200
    assert data["accepted"] is True
    assert _items(data["state"]) == [("bulgogi", 1), ("rice", 2)]
    assert data["state"]["total"] == 15000 + 2 * 2000
    assert data["parsed"]["ambiguous"] == ["rice"]

    data = _voice(client, "rice please").json()
    assert _items(data["state"]) == [("bulgogi", 1), ("rice", 3)]
    assert data["reply"] == "1 x Bulgogi, 3 x Rice - total 21,000 won"


def test_voice_order_default_language_is_korean(client):
    data = _voice(client, "비빔밥 하나 주세요", language=None).json()
    assert _items(data["state"]) == [("bibimbap", 1)]
    assert data["state"]["language"] == "ko"


def test_voice_order_interim_is_not_parsed(client):
    data = _voice(client, "bibimbap", isFinal=False).json()
    assert data["accepted"] is False
    assert data["interim"] is True
    assert data["state"]["items"] == []


def test_voice_order_fallback_resolved_against_catalog(client):
    data = _voice(client, "kimchi two").json()
    assert data["accepted"] is True
    assert data["parsed"]["unresolved"] == {"name": "kimchi", "quantity": 2}
    assert _items(data["state"]) == [("kimchi-jjigae", 2)]


def test_voice_order_unmatched_asks_to_repeat(client):
    data = _voice(client, "noodles please").json()
    assert data["accepted"] is False
    assert data["needsRepeat"] is True
    assert data["reply"] == "Sorry, please tell me the menu again."
    assert data["state"]["items"] == []


def test_voice_order_unsupported_language(client):
    res = _voice(client, "bibimbap", language="fr")
    assert res.status_code == 400


def test_edit_quantities(client):
    _voice(client, "two bibimbap and cola")
    state = client.put("/api/order/s1/items/bibimbap", json={"quantity": 5}).json()
    assert _items(state) == [("bibimbap", 5), ("cola", 1)]

    state = client.put("/api/order/s1/items/cola", json={"quantity": 0}).json()
    assert _items(state) == [("bibimbap", 5)]

    state = client.delete("/api/order/s1/items/bibimbap").json()
    assert state["items"] == []
    assert state["total"] == 0


def test_set_quantity_for_missing_line(client):
    assert client.put("/api/order/s1/items/cola", json={"quantity": 2}).status_code == 404
    assert client.put("/api/order/s1/items/cola", json={"quantity": 0}).status_code == 200


def test_add_item_from_menu(client):
    state = client.post("/api/order/s1/items", json={"itemId": "cola", "quantity": 2}).json()
    assert _items(state) == [("cola", 2)]
    assert client.post("/api/order/s1/items", json={"itemId": "pizza"}).status_code == 404


def test_confirm_records_history_and_clears(client, history):
    _voice(client, "bulgogi one, rice two")
    res = client.post("/api/order/s1/confirm")
    assert res.status_code == 200
    order = res.json()["order"]
    assert order["total"] == 19000
    assert order["language"] == "en"
    assert client.get("/api/order/s1").json()["items"] == []
    assert len(history) == 1

    recent = client.get("/api/orders/recent").json()["orders"]
    assert [o["orderId"] for o in recent] == [order["orderId"]]


def test_confirm_empty_order(client):
    assert client.post("/api/order/empty/confirm").status_code == 400


def test_reset_order(client):
    _voice(client, "cola")
    assert client.delete("/api/order/s1").json() == {"ok": True}
    assert client.get("/api/order/s1").json()["items"] == []


def test_sessions_do_not_share_orders(client):
    _voice(client, "cola", session="a")
    _voice(client, "rice", session="b")
    assert _items(client.get("/api/order/a").json()) == [("cola", 1)]
    assert _items(client.get("/api/order/b").json()) == [("rice", 1)]


def test_import_menu_then_order(client):
    payload = {
        "menu": [
            {
                "id": "japchae",
                "name": {"ko": "잡채", "en": "Japchae"},
                "keywords": {"ko": ["잡채"], "en": ["japchae", "glass noodles"]},
                "price": 11000,
                "category": "main",
            }
        ]
    }
    res = client.post("/api/menu/import", json=payload)
    assert res.json() == {"ok": True, "count": 1, "total": 7}
    data = _voice(client, "glass noodles three").json()
    assert _items(data["state"]) == [("japchae", 3)]


def test_import_menu_validation(client):
    assert client.post("/api/menu/import", json={"menu": []}).status_code == 400
    dup = {"menu": [{"id": "x", "price": 1}, {"id": "x", "price": 2}]}
    assert client.post("/api/menu/import", json=dup).status_code == 400
    assert client.post("/api/menu/import", json={"menu": [{"id": "x", "price": -1}]}).status_code == 422


def test_recommendations(client):
    data = client.get("/api/recommendations", params={"lang": "ja", "limit": 2}).json()
    assert data["language"] == "ja"
    assert [rec["id"] for rec in data["popular"]] == ["popular-kimchi-jjigae", "popular-bulgogi"]
    assert data["popular"][0]["title"] == "人気メニュー: キムチチゲ"


def test_transcribe_not_configured(client):
    res = client.post("/api/audio/transcribe", files={"file": ("a.wav", b"RIFF", "audio/wav")})
    assert res.status_code == 503


def test_reading_unknown_sessions_does_not_create_them(client):
    sessions = client.app.state.sessions
    for i in range(5):
        state = client.get(f"/api/order/ghost{i}").json()
        assert state["items"] == []
        assert state["total"] == 0
    client.delete("/api/order/ghost0/items/cola")
    assert client.put("/api/order/ghost1/items/cola", json={"quantity": 0}).status_code == 200
    assert len(sessions) == 0


def test_confirm_and_reset_discard_the_session(client):
    sessions = client.app.state.sessions
    _voice(client, "cola", session="x")
    assert sessions.has_session("x")
    assert client.post("/api/order/x/confirm").status_code == 200
    assert not sessions.has_session("x")

    _voice(client, "rice", session="y")
    client.delete("/api/order/y")
    assert not sessions.has_session("y")
    assert len(sessions) == 0


def test_state_lists_heard_transcripts(client):
    _voice(client, "Cola!")
    assert client.get("/api/order/s1").json()["transcripts"] == ["cola"]


def test_languages_report_menu_coverage(client):
    assert client.get("/api/languages").json()["menuLanguages"] == ["ko", "en", "zh", "ja"]
