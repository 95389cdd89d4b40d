import httpx
import pytest

from src.shipguard.services.distance import (
    DistanceMatrixClient,
    DistanceResolver,
    address_components,
    check_health,
    parse_miles,
)
from src.shipguard.services.errors import FailureKind, FailureLog

BASE_URL = "https://distance.test/maps/api/distancematrix/json"
ORIGIN = "8610 Cherry Lane, Laurel, Maryland 20707"


class StaticKey:
    def __init__(self, key):
        self.key = key

    def get_api_key(self):
        return self.key


class BrokenKeyStore:
    def get_api_key(self):
        raise RuntimeError("config table unavailable")


def _payload(text="50.3 mi", address="1 Main St, Columbia, MD 21044, USA", element_status="OK", status="OK"):
    return {
        "status": status,
        "origin_addresses": [ORIGIN],
        "destination_addresses": [address],
        "rows": [{"elements": [{"status": element_status, "distance": {"text": text, "value": 80950}}]}],
    }


def _resolver(handler, key="test-key", max_retries=0):
    requests: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = DistanceMatrixClient(
        base_url=BASE_URL,
        origin=ORIGIN,
        units="imperial",
        timeout=5,
        max_retries=max_retries,
        backoff_seconds=0,
        transport=httpx.MockTransport(recording),
    )
    failures = FailureLog()
    resolver = DistanceResolver(
        client=client,
        credentials=StaticKey(key),
        failures=failures,
        min_address_components=2,
        invalid_city_note="Shipping Distance Error, No Valid City",
    )
    return resolver, failures, requests


@pytest.mark.parametrize(
    "text,expected",
    [("50.3 mi", 50.3), ("1,234 mi", 1234.0), ("12 mi", 12.0), ("5280 ft", 1.0), ("850 ft", 0.16), ("10 km", 6.21)],
)
def test_parse_miles(text, expected):
    assert parse_miles(text) == expected


def test_parse_miles_rejects_unknown_text():
    with pytest.raises(ValueError):
        parse_miles("about an hour")


def test_address_components():
    assert address_components("1 Main St, Columbia, MD 21044, USA") == ["1 Main St", "Columbia", "MD 21044", "USA"]
    assert address_components("Maryland") == ["Maryland"]
    assert address_components(None) == []


def test_successful_resolution_sends_origin_and_units():
    resolver, failures, requests = _resolver(lambda request: httpx.Response(200, json=_payload()))

    result = resolver.resolve("1 Main St Columbia MD")

    assert result.miles == 50.3
    assert result.address_ok
    assert result.note == "1 Main St, Columbia, MD 21044, USA"
    assert failures.failures == []
    params = requests[0].url.params
    assert params["origins"] == ORIGIN
    assert params["destinations"] == "1 Main St Columbia MD"
    assert params["units"] == "imperial"
    assert params["key"] == "test-key"


def test_single_component_address_yields_absent_distance_and_note():
    resolver, failures, _ = _resolver(lambda request: httpx.Response(200, json=_payload(address="USA")))

    result = resolver.resolve("somewhere")

    assert result.miles is None
    assert not result.address_ok
    assert result.note == "Shipping Distance Error, No Valid City"
    assert failures.kinds() == [FailureKind.DATA_QUALITY]


def test_empty_destination_is_unresolved_without_a_request():
    resolver, failures, requests = _resolver(lambda request: httpx.Response(200, json=_payload()))
    result = resolver.resolve("   ")
    assert result.miles is None
    assert requests == []
    assert failures.failures == []


def test_missing_api_key_fails_closed():
    resolver, failures, requests = _resolver(lambda request: httpx.Response(200, json=_payload()), key=None)

    result = resolver.resolve("1 Main St Columbia MD")

    assert result.miles is None
    assert result.failure.kind is FailureKind.CONFIGURATION
    assert requests == []
    assert failures.kinds() == [FailureKind.CONFIGURATION]


def test_credential_store_errors_are_configuration_failures():
    resolver, failures, _ = _resolver(lambda request: httpx.Response(200, json=_payload()))
    resolver.credentials = BrokenKeyStore()
    assert resolver.resolve("1 Main St Columbia MD").miles is None
    assert failures.kinds() == [FailureKind.CONFIGURATION]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="server error"),
        httpx.Response(200, json=_payload(status="REQUEST_DENIED")),
        httpx.Response(200, json=_payload(element_status="NOT_FOUND")),
        httpx.Response(200, json={"status": "OK", "rows": []}),
        httpx.Response(200, json=_payload(text="a long way")),
    ],
)
def test_service_errors_are_unresolved(response):
    resolver, failures, _ = _resolver(lambda request: response)

    result = resolver.resolve("1 Main St Columbia MD")

    assert result.miles is None
    assert failures.kinds() == [FailureKind.EXTERNAL_SERVICE]


def test_transport_errors_are_retried_then_reported():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectTimeout("timed out", request=request)

    resolver, failures, _ = _resolver(handler, max_retries=1)

    result = resolver.resolve("1 Main St Columbia MD")

    assert result.miles is None
    assert len(attempts) == 2
    assert failures.kinds() == [FailureKind.EXTERNAL_SERVICE]


def test_check_health():
    healthy = DistanceMatrixClient(
        base_url=BASE_URL,
        origin=ORIGIN,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=_payload(address=ORIGIN))),
    )
    down = DistanceMatrixClient(
        base_url=BASE_URL,
        origin=ORIGIN,
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )
    assert check_health(api_key="k", client=healthy)
    assert not check_health(api_key="k", client=down)
