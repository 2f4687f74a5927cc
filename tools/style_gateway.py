"""Gateway to the generative provider for outfits, photo analysis and illustrations."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel, ValidationError

from logic.prompts import (
    IMAGE_PROMPT_DESCRIPTION,
    illustration_prompt,
    photo_analysis_instruction,
    recommendation_prompt,
)
from logic.validation import PhotoAnalysisPayload, RecommendationPayload, describe_validation_error
from models.preferences import PreferenceProfile
from models.recommendation import Illustration, OutfitItem, OutfitRecommendation, PhotoAnalysisResult
from models.taxonomy import BODY_TYPES, COMPLEXIONS
from stylist_app.config import DEFAULT_IMAGE_MODEL, DEFAULT_TEXT_MODEL, StylistConfig
from stylist_app.logging_config import get_logger, log_event
from tools.errors import AnalysisError, GenerationError, SchemaViolation, TransportError
from tools.observability import instrument_call

LOGGER = get_logger(__name__)
ContractT = TypeVar("ContractT", bound=BaseModel)


def recommendation_schema() -> types.Schema:
    """Structured output contract for the outfit request."""

    text = types.Schema(type=types.Type.STRING)
    item = types.Schema(
        type=types.Type.OBJECT,
        properties={"category": text, "item": text, "reason": text},
        required=["category", "item", "reason"],
    )
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "title": text,
            "description": text,
            "items": types.Schema(type=types.Type.ARRAY, items=item),
            "stylingTips": types.Schema(type=types.Type.ARRAY, items=text),
            "colorPalette": types.Schema(type=types.Type.ARRAY, items=text),
            "imagePrompt": types.Schema(type=types.Type.STRING, description=IMAGE_PROMPT_DESCRIPTION),
        },
        required=["title", "description", "items", "stylingTips", "colorPalette", "imagePrompt"],
    )


def photo_analysis_schema() -> types.Schema:
    """Structured output contract for photo analysis with closed trait values."""

    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "bodyType": types.Schema(type=types.Type.STRING, enum=list(BODY_TYPES)),
            "complexion": types.Schema(type=types.Type.STRING, enum=list(COMPLEXIONS)),
            "suggestedStyle": types.Schema(type=types.Type.STRING),
        },
        required=["bodyType", "complexion", "suggestedStyle"],
    )


def decode_contract(text: Optional[str], contract: Type[ContractT]) -> ContractT:
    """Parse provider text strictly against ``contract`` or raise :class:`SchemaViolation`."""

    if not text or not text.strip():
        raise SchemaViolation("Provider returned an empty response")
    try:
        return contract.model_validate_json(text)
    except ValidationError as exc:
        problems = describe_validation_error(exc)
        raise SchemaViolation(f"{contract.__name__} contract violated: {problems}") from exc


def decode_image_payload(payload: str) -> tuple[bytes, Optional[str]]:
    """Decode a base64 string or ``data:`` URL into bytes and its declared MIME type."""

    mime_type: Optional[str] = None
    encoded = payload.strip()
    if encoded.startswith("data:"):
        header, _, encoded = encoded.partition(",")
        mime_type = header[len("data:"):].split(";", 1)[0] or None
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image payload is not valid base64") from exc
    if not data:
        raise ValueError("Image payload is empty")
    return data, mime_type


def _check_image_input(image_data: bytes, mime_type: str) -> None:
    if not image_data:
        raise ValueError("image_data is required for photo analysis")
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(f"Unsupported MIME type for photo analysis: {mime_type!r}")


class StyleGateway(ABC):
    """The three provider operations the styling flow depends on."""

    @abstractmethod
    async def generate_recommendation(self, profile: PreferenceProfile) -> OutfitRecommendation:
        """Return a complete recommendation or raise :class:`GenerationError`."""

    @abstractmethod
    async def analyze_photo(self, image_data: bytes, mime_type: str) -> PhotoAnalysisResult:
        """Return photo traits or raise :class:`AnalysisError`."""

    @abstractmethod
    async def generate_illustration(self, prompt: str) -> Optional[Illustration]:
        """Return an image, or ``None`` when none was produced. Never raises."""


class GeminiStyleGateway(StyleGateway):
    """google-genai backed gateway; each call is made once, bounded by a timeout."""

    def __init__(
        self,
        api_key: str | None = None,
        text_model: str = DEFAULT_TEXT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        aspect_ratio: str = "3:4",
        request_timeout_seconds: float = 60.0,
        image_timeout_seconds: float = 120.0,
        client: Any | None = None,
    ) -> None:
        self.api_key = api_key
        self.text_model = text_model
        self.image_model = image_model
        self.aspect_ratio = aspect_ratio
        self.request_timeout_seconds = request_timeout_seconds
        self.image_timeout_seconds = image_timeout_seconds
        self._client = client

    @classmethod
    def from_config(cls, config: StylistConfig, client: Any | None = None) -> "GeminiStyleGateway":
        return cls(
            api_key=config.api_key,
            text_model=config.text_model,
            image_model=config.image_model,
            aspect_ratio=config.image_aspect_ratio,
            request_timeout_seconds=config.request_timeout_seconds,
            image_timeout_seconds=config.image_timeout_seconds,
            client=client,
        )

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise TransportError("Gemini API key is not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate(self, model: str, contents: Any, config: types.GenerateContentConfig, timeout: float) -> Any:
        client = self._get_client()
        try:
            return await asyncio.wait_for(
                client.aio.models.generate_content(model=model, contents=contents, config=config),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise TransportError(f"{model} did not answer within {timeout:g}s") from exc
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise TransportError(f"{model} call failed: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            # aiohttp and google-auth transports raise their own types, many of them OSError.
            raise TransportError(f"{model} call failed ({type(exc).__name__}): {exc}") from exc

    @instrument_call("generate_recommendation")
    async def generate_recommendation(self, profile: PreferenceProfile) -> OutfitRecommendation:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=recommendation_schema(),
        )
        try:
            response = await self._generate(
                self.text_model, recommendation_prompt(profile), config, self.request_timeout_seconds
            )
            payload = decode_contract(getattr(response, "text", None), RecommendationPayload)
        except (TransportError, SchemaViolation) as exc:
            raise GenerationError.wrap(exc) from exc
        return payload.to_recommendation()

    @instrument_call("analyze_photo")
    async def analyze_photo(self, image_data: bytes, mime_type: str) -> PhotoAnalysisResult:
        _check_image_input(image_data, mime_type)
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=photo_analysis_schema(),
        )
        contents = [
            types.Part.from_bytes(data=image_data, mime_type=mime_type),
            photo_analysis_instruction(),
        ]
        try:
            response = await self._generate(self.text_model, contents, config, self.request_timeout_seconds)
            payload = decode_contract(getattr(response, "text", None), PhotoAnalysisPayload)
        except (TransportError, SchemaViolation) as exc:
            raise AnalysisError.wrap(exc) from exc
        return payload.to_result()

    @instrument_call("generate_illustration")
    async def generate_illustration(self, prompt: str) -> Optional[Illustration]:
        config = types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio=self.aspect_ratio),
        )
        try:
            response = await self._generate(
                self.image_model, illustration_prompt(prompt), config, self.image_timeout_seconds
            )
            return self._first_inline_image(response)
        except Exception as exc:  # noqa: BLE001
            log_event(
                LOGGER,
                logging.WARNING,
                "illustration_failed",
                model=self.image_model,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return None

    @staticmethod
    def _first_inline_image(response: Any) -> Optional[Illustration]:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return None
        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is None or not inline.data:
                continue
            data = inline.data
            if isinstance(data, str):
                data = base64.b64decode(data)
            return Illustration(data=data, mime_type=inline.mime_type or "image/png")
        return None


# Smallest valid PNG (1x1 transparent pixel).
PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class MockStyleGateway(StyleGateway):
    """Offline deterministic gateway for tests and local runs.

    Responses can be scripted per operation; ``*_error`` arguments make the
    matching call raise. ``analysis_gate`` holds photo analysis until the event
    is set, which lets tests observe the in-flight state.
    """

    def __init__(
        self,
        recommendation: OutfitRecommendation | None = None,
        analysis: PhotoAnalysisResult | None = None,
        illustration: Illustration | None = Illustration(data=PLACEHOLDER_PNG),
        *,
        recommendation_error: Exception | None = None,
        analysis_error: Exception | None = None,
        analysis_gate: asyncio.Event | None = None,
    ) -> None:
        self.recommendation = recommendation
        self.analysis = analysis or PhotoAnalysisResult(
            body_type="average", complexion="medium", suggested_style="Parisian Chic"
        )
        self.illustration = illustration
        self.recommendation_error = recommendation_error
        self.analysis_error = analysis_error
        self.analysis_gate = analysis_gate
        self.calls: Dict[str, int] = {"recommendation": 0, "analysis": 0, "illustration": 0}
        self.last_profile: PreferenceProfile | None = None
        self.last_illustration_prompt: str | None = None

    async def generate_recommendation(self, profile: PreferenceProfile) -> OutfitRecommendation:
        self.calls["recommendation"] += 1
        self.last_profile = profile
        if self.recommendation_error:
            raise self.recommendation_error
        return self.recommendation or self._default_recommendation(profile)

    async def analyze_photo(self, image_data: bytes, mime_type: str) -> PhotoAnalysisResult:
        _check_image_input(image_data, mime_type)
        self.calls["analysis"] += 1
        if self.analysis_gate is not None:
            await self.analysis_gate.wait()
        if self.analysis_error:
            raise self.analysis_error
        return self.analysis

    async def generate_illustration(self, prompt: str) -> Optional[Illustration]:
        self.calls["illustration"] += 1
        self.last_illustration_prompt = prompt
        return self.illustration

    @staticmethod
    def _default_recommendation(profile: PreferenceProfile) -> OutfitRecommendation:
        return OutfitRecommendation(
            title=f"{profile.country_style} {profile.occasion} edit",
            description=f"A {profile.fabric} look for a {profile.body_type} frame.",
            items=(
                OutfitItem(category="Top", item=f"{profile.fabric} shirt", reason="Breathes and drapes well."),
                OutfitItem(category="Shoes", item="Leather loafers", reason="Smart without being stiff."),
            ),
            styling_tips=("Keep accessories minimal.",),
            color_palette=("#F5E6DA", "#2F3E46"),
            image_prompt=f"{profile.gender} model wearing a {profile.fabric} {profile.occasion} outfit",
        )


__all__ = [
    "StyleGateway",
    "GeminiStyleGateway",
    "MockStyleGateway",
    "PLACEHOLDER_PNG",
    "decode_contract",
    "decode_image_payload",
    "photo_analysis_schema",
    "recommendation_schema",
]
