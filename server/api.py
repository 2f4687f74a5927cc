"""FastAPI server exposing the styling session flow."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from agents.stylist_session import SessionStateError, StylistSession
from models.taxonomy import CHOICES, COMPLEXION_SWATCHES, FABRIC_LABELS, QUICK_PICK_STYLES
from stylist_app.app import VogueStylistApp
from stylist_app.logging_config import configure_logging
from tools.style_gateway import decode_image_payload


class SessionRequest(BaseModel):
    """Optional browser coordinates used to default the regional style."""

    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    metadata: dict | None = Field(None, description="Optional session metadata for tracing")


class ProfileUpdateRequest(BaseModel):
    """Partial update of the style brief; omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    occasion: Optional[str] = None
    gender: Optional[str] = None
    generation: Optional[str] = None
    body_type: Optional[str] = None
    complexion: Optional[str] = None
    fabric: Optional[str] = None
    country_style: Optional[str] = None
    weather: Optional[str] = None


class PhotoRequest(BaseModel):
    """A photo as a ``data:`` URL or bare base64 string."""

    image: str = Field(..., min_length=1)
    mime_type: Optional[str] = None


def create_app(stylist: VogueStylistApp | None = None) -> FastAPI:
    """Build the FastAPI application around a stylist app instance."""

    stylist_app = stylist or VogueStylistApp()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        stylist_app.close()

    api = FastAPI(title="Vogue AI Stylist", version="0.1.0", lifespan=lifespan)
    api.state.stylist = stylist_app

    def _session(session_id: str) -> StylistSession:
        try:
            return stylist_app.get_session(session_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Unknown session") from exc

    @api.get("/healthz")
    async def healthcheck() -> dict:
        """Readiness probe."""

        return {
            "status": "ok",
            "service": "vogue-ai-stylist",
            "environment": stylist_app.config.environment or "local",
            "text_model": stylist_app.config.text_model,
            "image_model": stylist_app.config.image_model,
        }

    @api.get("/options")
    async def options() -> dict:
        """Allowed values for every closed brief field, with display metadata."""

        return {
            "choices": {field_name: list(values) for field_name, values in CHOICES.items()},
            "complexion_swatches": COMPLEXION_SWATCHES,
            "fabric_labels": FABRIC_LABELS,
            "quick_picks": list(QUICK_PICK_STYLES),
            "default_country_style": stylist_app.config.default_country_style,
        }

    @api.post("/sessions")
    async def create_session(request: SessionRequest | None = None) -> dict:
        """Start a session; coordinates trigger a background region lookup."""

        request = request or SessionRequest()
        session = stylist_app.start_session(
            latitude=request.latitude,
            longitude=request.longitude,
            metadata=request.metadata,
        )
        return session.snapshot()

    @api.get("/sessions/{session_id}")
    async def get_session(session_id: str) -> dict:
        return _session(session_id).snapshot()

    @api.delete("/sessions/{session_id}", status_code=204)
    async def delete_session(session_id: str) -> Response:
        _session(session_id)
        stylist_app.end_session(session_id)
        return Response(status_code=204)

    @api.post("/sessions/{session_id}/start")
    async def start_styling(session_id: str) -> dict:
        session = _session(session_id)
        try:
            session.start()
        except SessionStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return session.snapshot()

    @api.patch("/sessions/{session_id}/profile")
    async def update_profile(session_id: str, request: ProfileUpdateRequest) -> dict:
        """Apply field edits to the brief; invalid values leave it unchanged."""

        session = _session(session_id)
        changes = request.model_dump(exclude_unset=True)
        try:
            session.update_profile(**changes)
        except SessionStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return session.snapshot()

    @api.post("/sessions/{session_id}/photo")
    async def analyze_photo(session_id: str, request: PhotoRequest) -> dict:
        """Analyse a photo and merge body type, complexion and regional style."""

        session = _session(session_id)
        try:
            data, declared_mime = decode_image_payload(request.image)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        mime_type = request.mime_type or declared_mime or "image/jpeg"
        try:
            outcome = await session.analyze_photo(data, mime_type)
        except SessionStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"status": outcome.status, "message": outcome.message, "session": session.snapshot()}

    @api.post("/sessions/{session_id}/submit")
    async def submit(session_id: str) -> dict:
        """Generate the outfit and its illustration for the current brief."""

        session = _session(session_id)
        try:
            succeeded = await session.submit()
        except SessionStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return {"status": "ok" if succeeded else "error", "session": session.snapshot()}

    @api.post("/sessions/{session_id}/refine")
    async def refine(session_id: str) -> dict:
        session = _session(session_id)
        try:
            session.refine()
        except SessionStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return session.snapshot()

    @api.get("/sessions/{session_id}/image")
    async def outfit_image(session_id: str) -> Response:
        """Raw illustration bytes; 404 when no image was produced."""

        session = _session(session_id)
        if session.outfit_image is None:
            raise HTTPException(status_code=404, detail="No outfit image available")
        return Response(content=session.outfit_image.data, media_type=session.outfit_image.mime_type)

    @api.get("/sessions/{session_id}/events")
    async def session_events(session_id: str, limit: int = 50) -> dict:
        _session(session_id)
        return {"events": stylist_app.session_manager.get_events(session_id, limit=limit)}

    return api


def get_app() -> FastAPI:
    """ASGI factory: ``uvicorn server.api:get_app --factory``."""

    configure_logging()
    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=8080, reload=False)
