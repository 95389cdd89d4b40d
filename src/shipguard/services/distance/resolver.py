"""Shipping distance resolution from the fixed warehouse origin."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from ...config import settings
from ...data.config_repository import CredentialStore, get_credential_store
from ..errors import FailureKind, FailureLog
from .client import DistanceMatrixClient
from .models import DistanceResult

logger = logging.getLogger(__name__)

OPERATION = "resolve_distance"

_DISTANCE_TEXT = re.compile(r"^\s*(?P<value>\d[\d,]*(?:\.\d+)?|\.\d+)\s*(?P<unit>mi|ft|km|m)?\s*$", re.IGNORECASE)

_TO_MILES = {
    "mi": 1.0,
    "ft": 1.0 / 5280.0,
    "km": 0.621371,
    "m": 1.0 / 1609.344,
}


def parse_miles(text: str) -> float:
    """Parse a formatted distance such as ``"1,204 mi"`` or ``"850 ft"`` into miles."""
    match = _DISTANCE_TEXT.match(text or "")
    if not match:
        raise ValueError(f"Unrecognized distance text '{text}'")
    value = float(match.group("value").replace(",", ""))
    unit = (match.group("unit") or "mi").lower()
    return round(value * _TO_MILES[unit], 2)


def address_components(address: str | None) -> list[str]:
    return [part.strip() for part in (address or "").split(",") if part.strip()]


def _first_element(payload: dict[str, Any]) -> Optional[dict[str, Any]]:
    rows = payload.get("rows") or []
    if not rows:
        return None
    elements = rows[0].get("elements") or []
    return elements[0] if elements else None


class DistanceResolver:
    """Turns a ship-to address into a :class:`DistanceResult`.

    Never raises: every failure is reported to the failure log and an
    unresolved result is returned instead.
    """

    def __init__(
        self,
        client: DistanceMatrixClient | None = None,
        credentials: CredentialStore | None = None,
        failures: FailureLog | None = None,
        min_address_components: int | None = None,
        invalid_city_note: str | None = None,
    ) -> None:
        self._client = client
        self.credentials = credentials or get_credential_store()
        self.failures = failures if failures is not None else FailureLog()
        self.min_address_components = min_address_components or settings.min_address_components
        self.invalid_city_note = invalid_city_note or settings.invalid_city_note

    @property
    def client(self) -> DistanceMatrixClient:
        if self._client is None:
            self._client = DistanceMatrixClient()
        return self._client

    def _fail(self, kind: FailureKind, message: str, error: BaseException | None = None) -> DistanceResult:
        return DistanceResult.unresolved(self.failures.report(kind, OPERATION, message, error))

    def resolve(self, destination: str | None) -> DistanceResult:
        if not destination or not destination.strip():
            logger.debug("Ship address is missing, skipping distance lookup")
            return DistanceResult.unresolved()
        try:
            return self._resolve(destination.strip())
        except Exception as exc:
            return self._fail(FailureKind.UNEXPECTED, f"Distance resolution failed: {exc}", exc)

    def _resolve(self, destination: str) -> DistanceResult:
        try:
            api_key = self.credentials.get_api_key()
        except Exception as exc:
            return self._fail(FailureKind.CONFIGURATION, f"API key lookup failed: {exc}", exc)
        if not api_key:
            return self._fail(FailureKind.CONFIGURATION, "Distance API key not found in configuration.")

        try:
            response = self.client.distance(destination, api_key)
        except ConnectionError as exc:
            return self._fail(FailureKind.EXTERNAL_SERVICE, str(exc), exc)

        if response.status_code != 200:
            return self._fail(
                FailureKind.EXTERNAL_SERVICE,
                f"Distance request failed with status code {response.status_code}",
            )
        payload = response.payload or {}
        if payload.get("status") != "OK":
            detail = payload.get("error_message") or "no error message"
            return self._fail(
                FailureKind.EXTERNAL_SERVICE,
                f"Distance service status {payload.get('status')!r} ({detail})",
            )
        element = _first_element(payload)
        if not element or element.get("status") != "OK":
            status = element.get("status") if element else None
            return self._fail(FailureKind.EXTERNAL_SERVICE, f"No valid distance for destination (element status {status!r})")

        try:
            miles = parse_miles(element["distance"]["text"])
        except (KeyError, TypeError, ValueError) as exc:
            return self._fail(FailureKind.EXTERNAL_SERVICE, f"Malformed distance element: {exc}", exc)

        resolved_address = (payload.get("destination_addresses") or [""])[0] or ""
        logger.debug(f"Calculated distance {miles} miles to '{resolved_address}'")

        if len(address_components(resolved_address)) < self.min_address_components:
            failure = self.failures.report(
                FailureKind.DATA_QUALITY,
                OPERATION,
                f"Resolved address '{resolved_address}' does not include a city",
            )
            return DistanceResult(
                miles=None,
                resolved_address=resolved_address,
                address_ok=False,
                note=self.invalid_city_note,
                failure=failure,
            )

        return DistanceResult(
            miles=miles,
            resolved_address=resolved_address,
            address_ok=True,
            note=resolved_address,
        )
