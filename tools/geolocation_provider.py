"""Reverse-geocoding providers used to default the regional style."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests
from pydantic import BaseModel, ValidationError

from stylist_app.config import DEFAULT_GEOCODE_URL

LOGGER = logging.getLogger(__name__)


class _ReverseGeocodeResponse(BaseModel):
    countryName: str = ""
    countryCode: str = ""
    city: str = ""


class ReverseGeocoder(ABC):
    """Maps coordinates to a country name. Lookups are best effort."""

    @abstractmethod
    def lookup_country(self, latitude: float, longitude: float) -> Optional[str]:
        """Return a country name, or ``None`` if it cannot be resolved."""


class BigDataCloudGeocoder(ReverseGeocoder):
    """BigDataCloud client-side reverse geocoding; failures return ``None``."""

    def __init__(
        self,
        url: str = DEFAULT_GEOCODE_URL,
        timeout_seconds: float = 5.0,
        language: str = "en",
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.language = language
        self.session = session or requests.Session()

    def lookup_country(self, latitude: float, longitude: float) -> Optional[str]:
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            LOGGER.warning("Ignoring out-of-range coordinates for reverse geocoding")
            return None

        params = {
            "latitude": latitude,
            "longitude": longitude,
            "localityLanguage": self.language,
        }
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            parsed = _ReverseGeocodeResponse.model_validate(response.json())
        except requests.RequestException as exc:
            LOGGER.error("Reverse geocoding unreachable", exc_info=exc)
            return None
        except ValidationError as exc:
            LOGGER.error("Reverse geocoding payload schema validation failed", exc_info=exc)
            return None

        country = parsed.countryName.strip()
        return country or None


class MockGeocoder(ReverseGeocoder):
    """Offline deterministic geocoder for tests."""

    def __init__(self, country: Optional[str] = "India", error: Exception | None = None) -> None:
        self.country = country
        self.error = error
        self.lookups = 0

    def lookup_country(self, latitude: float, longitude: float) -> Optional[str]:
        self.lookups += 1
        LOGGER.info("Returning mock country", extra={"country": self.country})
        if self.error:
            raise self.error
        return self.country


__all__ = ["ReverseGeocoder", "BigDataCloudGeocoder", "MockGeocoder"]
