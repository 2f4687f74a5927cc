"""Stylist app bootstrap."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Dict, Optional

from agents.stylist_session import PhotoAnalysisOutcome, StylistSession
from memory.session_store import InMemorySessionStore, SessionManager
from models.preferences import PreferenceProfile
from stylist_app.config import StylistConfig
from stylist_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.geolocation_provider import BigDataCloudGeocoder, ReverseGeocoder
from tools.style_gateway import GeminiStyleGateway, StyleGateway


LOGGER = get_logger(__name__)


class VogueStylistApp:
    """Wires together configuration, the provider gateway, geocoding and sessions."""

    def __init__(
        self,
        config: StylistConfig | None = None,
        gateway: StyleGateway | None = None,
        geocoder: ReverseGeocoder | None = None,
    ) -> None:
        self.config = config or StylistConfig.from_env()
        configure_logging()

        self.gateway = gateway or GeminiStyleGateway.from_config(self.config)
        self.geocoder = geocoder or BigDataCloudGeocoder(
            url=self.config.geocode_url,
            timeout_seconds=self.config.geocode_timeout_seconds,
        )
        self.session_store = InMemorySessionStore(event_limit=self.config.session_event_limit)
        self.session_manager = SessionManager(
            store=self.session_store,
            session_factory=partial(
                StylistSession,
                gateway=self.gateway,
                geocoder=self.geocoder,
                profile=PreferenceProfile(country_style=self.config.default_country_style),
            ),
        )

    def start_session(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        metadata: Dict[str, Any] | None = None,
    ) -> StylistSession:
        """Create a session; when coordinates are given, look up the region in the background.

        Region lookup needs a running event loop, so coordinates are only
        honoured when called from async code.
        """

        session = self.session_manager.start_session(metadata=metadata)
        log_event(LOGGER, logging.INFO, "session_started", session_id=session.session_id)
        if latitude is not None and longitude is not None:
            session.enrich_region(latitude, longitude)
        return session

    def get_session(self, session_id: str) -> StylistSession:
        return self.session_manager.get_session(session_id)

    def end_session(self, session_id: str) -> None:
        self.session_manager.end_session(session_id)

    async def style_once(
        self,
        profile_changes: Dict[str, Any],
        photo: tuple[bytes, str] | None = None,
    ) -> Dict[str, Any]:
        """Run one brief end to end: start, optional photo analysis, edits, submit.

        Manual edits win over photo analysis, so the photo is analysed first.
        """

        session = self.start_session(metadata={"mode": "one-shot"})
        with operation_context("app:style_once", session_id=session.session_id):
            try:
                session.start()
                outcome: PhotoAnalysisOutcome | None = None
                if photo is not None:
                    outcome = await session.analyze_photo(*photo)
                if profile_changes:
                    session.update_profile(**profile_changes)
                succeeded = await session.submit()
                return {
                    "status": "ok" if succeeded else "error",
                    "analysis": outcome.message if outcome else None,
                    "session": session.snapshot(),
                    "image": session.outfit_image,
                }
            finally:
                self.end_session(session.session_id)

    def close(self) -> None:
        self.session_manager.close()


__all__ = ["VogueStylistApp"]
