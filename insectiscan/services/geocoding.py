"""
Reverse-geocoding collaborator and a bounded lookup around it.

The geocoder itself lives outside the core; the lookup never waits longer
than the configured timeout and never fails the analysis.
"""

import asyncio
import logging
from typing import Optional, Protocol

from insectiscan.config import settings
from insectiscan.models import EnvironmentContext, Placemark
from insectiscan.services.prompt_builder import format_placemark

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def reverse_geocode(
        self, latitude: float, longitude: float
    ) -> Optional[Placemark]: ...


async def resolve_location_text(
    geocoder: Optional[Geocoder],
    context: Optional[EnvironmentContext],
    detailed: bool = True,
    timeout: Optional[float] = None,
) -> Optional[str]:
    """
    Turn a context's coordinates into prompt-ready location text.

    Returns the context's own location_text when set; otherwise asks the
    geocoder, giving up after `timeout` seconds. Any failure yields None.
    """
    if context is None:
        return None
    if context.location_text:
        return context.location_text
    if geocoder is None or not context.has_coordinates:
        return None

    timeout = timeout if timeout is not None else settings.geocode_timeout
    try:
        placemark = await asyncio.wait_for(
            geocoder.reverse_geocode(context.latitude, context.longitude),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("Reverse geocoding timed out after %.1fs", timeout)
        return None
    except Exception as e:
        logger.warning("Reverse geocoding failed: %s", type(e).__name__)
        return None

    if placemark is None:
        return None
    return format_placemark(placemark, detailed=detailed) or None
