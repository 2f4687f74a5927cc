"""Session controller driving the welcome, form, loading and result flow."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Set
from uuid import uuid4

from models.preferences import PreferenceProfile
from models.recommendation import Illustration, OutfitRecommendation, PhotoAnalysisResult
from models.taxonomy import QUICK_PICK_STYLES
from stylist_app.logging_config import get_logger, log_event, operation_context
from tools.errors import AnalysisError, GenerationError
from tools.geolocation_provider import ReverseGeocoder
from tools.style_gateway import StyleGateway

LOGGER = get_logger(__name__)

ANALYSIS_APPLIED_MESSAGE = "AI Analysis Complete: We've updated your profile based on your photo!"
ANALYSIS_FAILED_MESSAGE = "Could not analyze image. Please try again or fill manually."
ANALYSIS_DISCARDED_MESSAGE = "Your photo was analyzed after the brief was submitted, so the profile was left as is."

EventSink = Callable[[str, Dict[str, Any]], None]


class SessionState(str, Enum):
    WELCOME = "welcome"
    FORM = "form"
    LOADING = "loading"
    RESULT = "result"


ALLOWED_TRANSITIONS: Dict[SessionState, Set[SessionState]] = {
    SessionState.WELCOME: {SessionState.FORM},
    SessionState.FORM: {SessionState.LOADING},
    SessionState.LOADING: {SessionState.FORM, SessionState.RESULT},
    SessionState.RESULT: {SessionState.FORM},
}

# Where the current regional style came from; geolocation only fills a default.
SOURCE_DEFAULT = "default"
SOURCE_GEOLOCATION = "geolocation"
SOURCE_USER = "user"
SOURCE_PHOTO = "photo"


class SessionStateError(RuntimeError):
    """An action was attempted in a state that does not allow it."""


class InvalidTransition(SessionStateError):
    """The requested state change is not part of the flow."""


class SessionBusy(SessionStateError):
    """A photo analysis is already running for this session."""


@dataclass(frozen=True)
class PhotoAnalysisOutcome:
    """What the user is told after a photo analysis attempt."""

    status: str
    message: str
    result: Optional[PhotoAnalysisResult] = None

    @property
    def applied(self) -> bool:
        return self.status == "applied"


class StylistSession:
    """Owns one style brief and the outputs generated from it.

    The profile, the current recommendation and its illustration are only
    changed through the methods below. Background work (photo analysis and
    region lookup) runs as tracked tasks whose results are applied only if the
    session is still in a state where they make sense.
    """

    def __init__(
        self,
        gateway: StyleGateway,
        geocoder: ReverseGeocoder | None = None,
        profile: PreferenceProfile | None = None,
        session_id: str | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        self.session_id = session_id or uuid4().hex
        self.gateway = gateway
        self.geocoder = geocoder
        self.profile = profile or PreferenceProfile()
        self.state = SessionState.WELCOME
        self.suggestion: Optional[OutfitRecommendation] = None
        self.outfit_image: Optional[Illustration] = None
        self.analyzing = False
        self.country_style_source = SOURCE_DEFAULT
        self._event_sink = event_sink
        self._tasks: Set[asyncio.Task] = set()
        self._submissions = 0

    # -- transitions -------------------------------------------------------

    def _transition(self, target: SessionState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransition(f"Cannot move from {self.state.value} to {target.value}")
        previous = self.state
        self.state = target
        log_event(
            LOGGER,
            logging.INFO,
            "session_transition",
            session_id=self.session_id,
            from_state=previous.value,
            to_state=target.value,
        )
        self._record("transition", {"from": previous.value, "to": target.value})

    def _record(self, event_type: str, payload: Dict[str, Any]) -> None:
        if self._event_sink is not None:
            self._event_sink(event_type, payload)

    def start(self) -> None:
        self._transition(SessionState.FORM)

    def refine(self) -> None:
        """Go back to the brief from a result, keeping every preference."""

        self._transition(SessionState.FORM)

    # -- profile edits -----------------------------------------------------

    def update_profile(self, **changes: Any) -> PreferenceProfile:
        if self.state not in (SessionState.WELCOME, SessionState.FORM):
            raise SessionStateError(f"The brief cannot be edited while in {self.state.value}")
        self.profile = self.profile.update(**changes)
        if "country_style" in changes:
            self.country_style_source = SOURCE_USER
        self._record("profile_updated", {"fields": sorted(changes)})
        return self.profile

    def select_quick_pick(self, style: str) -> PreferenceProfile:
        if style not in QUICK_PICK_STYLES:
            raise ValueError(f"Unknown quick pick '{style}'. Allowed: {list(QUICK_PICK_STYLES)}")
        return self.update_profile(country_style=style)

    # -- main pipeline -----------------------------------------------------

    async def submit(self) -> bool:
        """Generate a recommendation and its illustration for the current brief.

        Returns ``True`` when the session reaches ``result``. A failed
        recommendation puts the session back on the form with no outputs.
        """

        self._transition(SessionState.LOADING)
        self._submissions += 1
        self.suggestion = None
        self.outfit_image = None
        profile = self.profile
        reached_result = False

        with operation_context("session:submit", session_id=self.session_id) as correlation_id:
            try:
                try:
                    suggestion = await self.gateway.generate_recommendation(profile)
                except GenerationError as exc:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "recommendation_failed",
                        session_id=self.session_id,
                        correlation_id=correlation_id,
                        kind=exc.kind,
                        error=str(exc),
                    )
                    self._record("recommendation_failed", {"kind": exc.kind})
                    return False

                image = await self.gateway.generate_illustration(suggestion.image_prompt)
                self.suggestion = suggestion
                self.outfit_image = image
                self._record(
                    "recommendation_generated",
                    {"title": suggestion.title, "items": len(suggestion.items), "has_image": image is not None},
                )
                self._transition(SessionState.RESULT)
                reached_result = True
                return True
            finally:
                if not reached_result and self.state is SessionState.LOADING:
                    self._transition(SessionState.FORM)

    # -- photo analysis side channel --------------------------------------

    async def analyze_photo(self, image_data: bytes, mime_type: str) -> PhotoAnalysisOutcome:
        """Fill body type, complexion and regional style from a photo.

        Only one analysis may run at a time. The result is dropped if the brief
        was submitted while the analysis was in flight.
        """

        if self.state is not SessionState.FORM:
            raise SessionStateError("Photo analysis is only available on the form")
        if self.analyzing:
            raise SessionBusy("A photo analysis is already in progress")

        self.analyzing = True
        submissions_at_start = self._submissions
        task = self._track(asyncio.create_task(self.gateway.analyze_photo(image_data, mime_type)))
        try:
            result = await task
        except AnalysisError as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "photo_analysis_failed",
                session_id=self.session_id,
                kind=exc.kind,
                error=str(exc),
            )
            self._record("photo_analysis", {"status": "failed", "kind": exc.kind})
            return PhotoAnalysisOutcome(status="failed", message=ANALYSIS_FAILED_MESSAGE)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            self._record("photo_analysis", {"status": "cancelled"})
            return PhotoAnalysisOutcome(status="discarded", message=ANALYSIS_DISCARDED_MESSAGE)
        finally:
            self.analyzing = False

        if self.state is not SessionState.FORM or self._submissions != submissions_at_start:
            log_event(
                LOGGER,
                logging.INFO,
                "photo_analysis_discarded",
                session_id=self.session_id,
                state=self.state.value,
            )
            self._record("photo_analysis", {"status": "discarded"})
            return PhotoAnalysisOutcome(status="discarded", message=ANALYSIS_DISCARDED_MESSAGE, result=result)

        self.profile = self.profile.merge_analysis(result)
        self.country_style_source = SOURCE_PHOTO
        log_event(
            LOGGER,
            logging.INFO,
            "photo_analysis_applied",
            session_id=self.session_id,
            body_type=result.body_type,
            complexion=result.complexion,
        )
        self._record("photo_analysis", {"status": "applied"})
        return PhotoAnalysisOutcome(status="applied", message=ANALYSIS_APPLIED_MESSAGE, result=result)

    # -- region enrichment -------------------------------------------------

    def enrich_region(self, latitude: float, longitude: float) -> Optional[asyncio.Task]:
        """Look up the user's country in the background and use it as the default style.

        Must be called from a running event loop. Returns the task, or ``None``
        when no geocoder is configured.
        """

        if self.geocoder is None:
            return None
        task = self._track(
            asyncio.create_task(asyncio.to_thread(self.geocoder.lookup_country, latitude, longitude))
        )
        task.add_done_callback(self._apply_region)
        return task

    def _apply_region(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_event(
                LOGGER,
                logging.WARNING,
                "region_enrichment_failed",
                session_id=self.session_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return
        country = task.result()
        if not country:
            return
        if self.state not in (SessionState.WELCOME, SessionState.FORM) or self.country_style_source != SOURCE_DEFAULT:
            log_event(
                LOGGER,
                logging.INFO,
                "region_enrichment_skipped",
                session_id=self.session_id,
                state=self.state.value,
                source=self.country_style_source,
            )
            return
        try:
            self.profile = self.profile.set_country_style(country)
        except ValueError as exc:
            log_event(LOGGER, logging.WARNING, "region_enrichment_failed", session_id=self.session_id, error=str(exc))
            return
        self.country_style_source = SOURCE_GEOLOCATION
        log_event(LOGGER, logging.INFO, "region_enrichment_applied", session_id=self.session_id, country=country)
        self._record("region_enriched", {"country": country})

    # -- housekeeping ------------------------------------------------------

    def _track(self, task: asyncio.Task) -> asyncio.Task:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel_pending(self) -> None:
        for task in list(self._tasks):
            task.cancel()

    def snapshot(self) -> Dict[str, Any]:
        """JSON-safe view of the session for API responses."""

        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "profile": self.profile.to_dict(),
            "country_style_source": self.country_style_source,
            "analyzing": self.analyzing,
            "suggestion": self.suggestion.to_dict() if self.suggestion else None,
            "has_image": self.outfit_image is not None,
            "image_mime_type": self.outfit_image.mime_type if self.outfit_image else None,
        }


__all__ = [
    "ALLOWED_TRANSITIONS",
    "ANALYSIS_APPLIED_MESSAGE",
    "ANALYSIS_DISCARDED_MESSAGE",
    "ANALYSIS_FAILED_MESSAGE",
    "InvalidTransition",
    "PhotoAnalysisOutcome",
    "SessionBusy",
    "SessionState",
    "SessionStateError",
    "StylistSession",
]
