"""
Position Provider — wraps a device location source, retries to improve
accuracy and normalizes every failure into a GeolocationError.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .const import (
    GEO_ACCURACY_THRESHOLD,
    GEO_MAX_ATTEMPTS,
    GEO_MAXIMUM_AGE,
    GEO_RETRY_DELAY,
    GEO_TIMEOUT,
)
from .errors import GeolocationError, GeolocationErrorKind
from .models import PositionReading

_LOGGER = logging.getLogger(__name__)

# (high_accuracy, timeout, maximum_age) -> reading
LocationSource = Callable[[bool, float, float], Awaitable[PositionReading]]

_PERMANENT_KINDS = (GeolocationErrorKind.PERMISSION_DENIED, GeolocationErrorKind.UNSUPPORTED)


class StaticLocationSource:
    """Location source returning a fix entered by hand (no positioning hardware)."""

    def __init__(self, lat: float, lng: float, accuracy: float = 0.0) -> None:
        self.reading = PositionReading(lat, lng, accuracy)

    async def __call__(self, high_accuracy: bool, timeout: float, maximum_age: float) -> PositionReading:
        return self.reading


class PositionProvider:
    """
    Acquire a position from a location source.

    Single-shot mode makes one high-accuracy request that refuses cached fixes.
    Enhanced mode repeats the request while the reported accuracy is worse than
    accuracy_threshold and returns the best reading seen.
    """

    def __init__(
        self,
        source: LocationSource | None,
        timeout: float = GEO_TIMEOUT,
        accuracy_threshold: float = GEO_ACCURACY_THRESHOLD,
        max_attempts: int = GEO_MAX_ATTEMPTS,
        retry_delay: float = GEO_RETRY_DELAY,
    ) -> None:
        self.source = source
        self.timeout = timeout
        self.accuracy_threshold = accuracy_threshold
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    @property
    def supported(self) -> bool:
        return self.source is not None

    async def async_acquire(self, enhanced: bool = False) -> PositionReading:
        """Return a position or raise GeolocationError."""
        if enhanced:
            return await self._async_acquire_enhanced()
        return await self._async_single_shot()

    async def _async_single_shot(self) -> PositionReading:
        if self.source is None:
            raise GeolocationError(GeolocationErrorKind.UNSUPPORTED)
        try:
            return await asyncio.wait_for(
                self.source(True, self.timeout, GEO_MAXIMUM_AGE), timeout=self.timeout
            )
        except GeolocationError:
            raise
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise GeolocationError(GeolocationErrorKind.TIMEOUT) from exc
        except Exception as exc:  # noqa: BLE001
            _LOGGER.debug("Location source failed: %s: %s", type(exc).__name__, exc)
            raise GeolocationError(GeolocationErrorKind.UNKNOWN, str(exc) or None) from exc

    async def _async_acquire_enhanced(self) -> PositionReading:
        best: PositionReading | None = None
        last_error: GeolocationError | None = None

        for attempt in range(self.max_attempts):
            try:
                reading = await self._async_single_shot()
            except GeolocationError as err:
                last_error = err
                _LOGGER.debug("Location attempt %s failed: %s", attempt + 1, err.kind.value)
                if err.kind in _PERMANENT_KINDS:
                    break
            else:
                if best is None or reading.accuracy < best.accuracy:
                    best = reading
                if reading.accuracy <= self.accuracy_threshold:
                    return reading
                _LOGGER.debug(
                    "Location attempt %s accuracy %.1f m above %.1f m threshold",
                    attempt + 1, reading.accuracy, self.accuracy_threshold,
                )

            if attempt < self.max_attempts - 1:
                await asyncio.sleep(self.retry_delay)

        if best is not None:
            return best
        raise last_error or GeolocationError(GeolocationErrorKind.UNKNOWN)
