from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from kiosk import (
    ConfigurationError,
    Language,
    MenuCatalog,
    MenuEntry,
    OrderHistoryStore,
    OrderLine,
    OrderSession,
    RecommendationEngine,
    SessionStore,
    VoiceOrderParser,
    WindowedKeywordMatcher,
    describe_order,
    resolve_language,
    summarize_order,
)
from kiosk.config import KioskConfig
from kiosk.languages import repeat_prompt
from kiosk.speech import AzureSpeechService
from kiosk.transcriber import AzureAudioTranscriber

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------
class MenuEntryPayload(BaseModel):
    id: str = Field(..., min_length=1)
    name: Dict[str, str] = Field(default_factory=dict)
    keywords: Dict[str, List[str]] = Field(default_factory=dict)
    price: int = Field(0, ge=0)
    category: str = ""
    available: bool = True
    popularity: int = 50

    def to_domain(self) -> MenuEntry:
        return MenuEntry.from_dict(self.model_dump())


class MenuImportBody(BaseModel):
    menu: List[MenuEntryPayload]


class VoiceOrderRequest(BaseModel):
    sessionId: str
    transcript: str = ""
    language: Optional[str] = None
    isFinal: bool = True


class AddItemBody(BaseModel):
    itemId: str
    quantity: int = Field(1, ge=1)


class QuantityBody(BaseModel):
    quantity: int


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------
def create_app(
    config: Optional[KioskConfig] = None,
    catalog: Optional[MenuCatalog] = None,
    history: Optional[OrderHistoryStore] = None,
    speech_service: Optional[AzureSpeechService] = None,
    transcriber: Optional[AzureAudioTranscriber] = None,
) -> FastAPI:
    config = config or KioskConfig.from_env()
    logging.basicConfig(level=config.log_level, format="[%(levelname)s] %(name)s: %(message)s")

    if catalog is None:
        catalog = MenuCatalog()
        loaded = catalog.bootstrap_from_file(config.menu_path)
        logger.info("Loaded %d menu entries from %s", loaded, config.menu_path)
    if history is None:
        history = OrderHistoryStore(config.history_path)
    speech_service = speech_service or AzureSpeechService()
    transcriber = transcriber or AzureAudioTranscriber()

    parser = VoiceOrderParser(
        catalog,
        matcher=WindowedKeywordMatcher(config.quantity_window),
        collapse_overlapping=config.collapse_overlapping,
    )
    sessions = SessionStore(default_language=config.default_language)
    recommender = RecommendationEngine(catalog, history)

    app = FastAPI(title="Senior Voice Kiosk API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.catalog = catalog
    app.state.history = history
    app.state.sessions = sessions
    app.state.parser = parser

    @app.exception_handler(ConfigurationError)
    async def unsupported_language(request: Request, exc: ConfigurationError) -> JSONResponse:
        language = getattr(exc.language, "value", exc.language)
        logger.warning("Unsupported language on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=400, content={"detail": f"unsupported language: {language}"})

    def _language(code: Optional[str]) -> Language:
        return resolve_language(code) if code else config.default_language

    def _state(session_id: str) -> Dict[str, Any]:
        # reads never create a session
        session = sessions.peek(session_id)
        if session is None:
            return OrderSession(session_id=session_id, language=config.default_language).as_state()
        return session.as_state()

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/languages")
    def languages() -> Dict[str, Any]:
        return {
            "languages": [lang.value for lang in Language],
            "default": config.default_language.value,
            "menuLanguages": [lang.value for lang in catalog.keyword_languages()],
        }

    @app.get("/api/menu")
    def get_menu(lang: Optional[str] = None, category: Optional[str] = None) -> Dict[str, Any]:
        language = resolve_language(lang) if lang else None
        entries = catalog.find_by_category(category) if category else catalog.list()
        return {
            "language": language.value if language else None,
            "menu": [entry.to_api(language) for entry in entries],
        }

    @app.post("/api/menu/import")
    def import_menu(body: MenuImportBody) -> Dict[str, Any]:
        if not body.menu:
            raise HTTPException(status_code=400, detail="menu list required")
        try:
            catalog.upsert([item.to_domain() for item in body.menu])
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        logger.info("Imported %d menu entries", len(body.menu))
        return {"ok": True, "count": len(body.menu), "total": len(catalog)}

    @app.post("/api/order/voice")
    def voice_order(req: VoiceOrderRequest) -> Dict[str, Any]:
        language = resolve_language(req.language) if req.language else None
        session = sessions.get_session(req.sessionId, language)
        if not req.isFinal:
            return {"accepted": False, "interim": True, "state": session.as_state()}

        result = parser.parse(req.transcript, session.language)
        session.remember_transcript(result.transcript)

        accepted: List[OrderLine] = list(result.lines)
        if result.low_confidence and result.unresolved is not None:
            entry = catalog.resolve_name(result.unresolved.name, session.language)
            if entry is not None:
                accepted = [OrderLine(menu_entry=entry, quantity=result.unresolved.quantity)]
            else:
                logger.info("Discarded unresolved item %r", result.unresolved.name)

        if accepted:
            session.add(accepted)
            session.last_prompt = describe_order(session.order, session.language)
        else:
            session.last_prompt = repeat_prompt(session.language)
        return {
            "accepted": bool(accepted),
            "needsRepeat": not accepted,
            "added": [line.to_api(session.language) for line in accepted],
            "parsed": result.to_api(session.language),
            "reply": session.last_prompt,
            "state": session.as_state(),
        }

    @app.get("/api/order/{session_id}")
    def get_order(session_id: str) -> Dict[str, Any]:
        return _state(session_id)

    @app.post("/api/order/{session_id}/items")
    def add_item(session_id: str, body: AddItemBody) -> Dict[str, Any]:
        entry = catalog.get(body.itemId)
        if entry is None or not entry.available:
            raise HTTPException(status_code=404, detail=f"unknown menu item: {body.itemId}")
        session = sessions.get_session(session_id)
        session.add([OrderLine(menu_entry=entry, quantity=body.quantity)])
        return session.as_state()

    @app.put("/api/order/{session_id}/items/{item_id}")
    def update_quantity(session_id: str, item_id: str, body: QuantityBody) -> Dict[str, Any]:
        session = sessions.peek(session_id)
        if body.quantity > 0 and (session is None or session.line(item_id) is None):
            raise HTTPException(status_code=404, detail=f"item not in order: {item_id}")
        if session is not None:
            session.set_quantity(item_id, body.quantity)
        return _state(session_id)

    @app.delete("/api/order/{session_id}/items/{item_id}")
    def remove_item(session_id: str, item_id: str) -> Dict[str, Any]:
        session = sessions.peek(session_id)
        if session is not None:
            session.remove(item_id)
        return _state(session_id)

    @app.delete("/api/order/{session_id}")
    def reset_order(session_id: str) -> Dict[str, Any]:
        sessions.clear(session_id)
        return {"ok": True}

    @app.post("/api/order/{session_id}/confirm")
    def confirm_order(session_id: str) -> Dict[str, Any]:
        session = sessions.peek(session_id)
        if session is None or not session.order:
            raise HTTPException(status_code=400, detail="order is empty")
        summary = summarize_order(session.order, session.language)
        history.add(summary)
        sessions.clear(session_id)
        logger.info("Order %s confirmed: %s", summary.order_id, summary.text)
        return {"ok": True, "order": summary.to_dict()}

    @app.get("/api/orders/recent")
    def recent_orders(limit: int = 10) -> Dict[str, Any]:
        return {"orders": [summary.to_dict() for summary in history.recent(limit)]}

    @app.get("/api/recommendations")
    def recommendations(lang: Optional[str] = None, limit: int = 6) -> Dict[str, Any]:
        language = _language(lang)
        return {
            "language": language.value,
            "popular": [rec.to_api(language) for rec in recommender.popular(language, limit)],
            "personalized": [rec.to_api(language) for rec in recommender.personalized(language)],
        }

    @app.post("/api/audio/transcribe")
    async def audio_transcribe(file: UploadFile = File(...), lang: Optional[str] = Form(None)) -> Dict[str, Any]:
        language = _language(lang)
        data = await file.read()
        if speech_service.available:
            speech_result = speech_service.transcribe(data, language)
            if speech_result.error:
                raise HTTPException(status_code=502, detail=speech_result.error)
            return {
                "text": speech_result.text,
                "language": language.value,
                "locale": speech_result.locale,
                "isFinal": True,
            }
        if transcriber.available:
            result = transcriber.transcribe(
                audio=data,
                filename=file.filename or "audio.wav",
                language=language.value,
            )
            if result.get("error"):
                raise HTTPException(status_code=502, detail=result["error"])
            return {"text": result.get("text"), "language": language.value, "isFinal": True}
        raise HTTPException(status_code=503, detail="Audio transcription not configured")

    return app


app = create_app()

# Entry for local dev
# uvicorn fastapi_app.main:app --reload --port 8000
