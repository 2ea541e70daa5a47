import httpx
import pytest

from app.core.exceptions import InvalidArgument
from app.services.geocoding_service import (
    GeocodeCache,
    GeocodingConfig,
    GeocodingGateway,
    cache_key,
    extract_full_address,
    extract_short_address,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class Upstream:
    """Scripted reverse-geocoding endpoint"""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else {"address": {"suburb": "Phường Hải Châu"}}
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


def _gateway(upstream, clock):
    return GeocodingGateway(
        config=GeocodingConfig(url="https://geo.test/reverse", user_agent="GoGoTest/1.0",
                               referer="https://gogo.test"),
        transport=httpx.MockTransport(upstream),
        clock=clock,
        sleep=clock.sleep,
    )


def test_cache_key_rounds_to_four_decimals():
    assert cache_key("address", 16.05441, 108.20221) == "address_16.0544_108.2022"
    assert cache_key("address", 16.05441, 108.2) != cache_key("address", 16.05451, 108.2)
    assert cache_key("full", 1, 2) == "full_1.0000_2.0000"


def test_cache_ttl_and_fifo_eviction():
    clock = FakeClock()
    cache = GeocodeCache(ttl_seconds=120, max_entries=2, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)  # refresh keeps "a" oldest
    cache.set("c", 3)

    assert "a" not in cache
    assert cache.get("b") == 2
    assert cache.get("c") == 3

    clock.now += 120
    assert cache.get("c") is None


def test_short_address_strips_admin_prefixes():
    assert extract_short_address({"suburb": "Phường Hải Châu 1"}) == "Hải Châu 1"
    assert extract_short_address({"village": "xã Hòa Tiến", "city": "Đà Nẵng"}) == "Hòa Tiến"
    assert extract_short_address({"city": "Thành phố Đà Nẵng"}) == "Đà Nẵng"
    assert extract_short_address({"road": "Bạch Đằng"}) is None


def test_full_address_prefixes_and_fallbacks():
    result = extract_full_address({
        "address": {"village": "Hòa Tiến", "road": "DT605", "county": "Hòa Vang", "state": "Đà Nẵng"},
    })
    assert result.area == "Xã Hòa Tiến"
    assert result.address == "DT605, Xã Hòa Tiến, Hòa Vang, Đà Nẵng"
    assert result.name == ""

    named = extract_full_address({
        "display_name": "Cộng Cà Phê, Bạch Đằng, Đà Nẵng",
        "address": {"city": "Hải Châu", "amenity": "Cộng Cà Phê"},
    })
    assert named.area == "Phường Hải Châu"
    assert named.address == "Cộng Cà Phê, Bạch Đằng, Đà Nẵng"
    assert named.name == "Cộng Cà Phê"

    town = extract_full_address({"name": "Chợ", "address": {"town": "Thị trấn Ái Nghĩa"}})
    assert town.area == "Thị trấn Ái Nghĩa"
    assert town.address == "Chợ"
    assert town.name == "Chợ"


@pytest.mark.asyncio
@pytest.mark.parametrize("lat,lng,message", [
    (None, "108.2", "Latitude and longitude are required"),
    ("16.0", "", "Latitude and longitude are required"),
    ("abc", "108.2", "Invalid latitude or longitude"),
    ("nan", "108.2", "Invalid latitude or longitude"),
])
async def test_rejects_bad_coordinates(lat, lng, message):
    clock = FakeClock()
    upstream = Upstream()
    gateway = _gateway(upstream, clock)

    with pytest.raises(InvalidArgument) as exc:
        await gateway.get_address(lat, lng)

    assert exc.value.message == message
    assert upstream.requests == []
    await gateway.aclose()


@pytest.mark.asyncio
async def test_address_lookup_and_cache_hit():
    clock = FakeClock()
    upstream = Upstream()
    gateway = _gateway(upstream, clock)

    first = await gateway.get_address("16.05441", "108.20221")
    second = await gateway.get_address(16.054412, 108.202209)

    assert first == second == "Hải Châu"
    assert len(upstream.requests) == 1
    request = upstream.requests[0]
    assert request.url.params["lat"] == "16.05441"
    assert request.url.params["format"] == "json"
    assert request.url.params["addressdetails"] == "1"
    assert "namedetails" not in request.url.params
    assert request.headers["user-agent"] == "GoGoTest/1.0"
    assert request.headers["referer"] == "https://gogo.test"
    assert request.headers["accept-language"] == "vi,en"
    await gateway.aclose()


@pytest.mark.asyncio
async def test_cache_expires_after_ttl():
    clock = FakeClock()
    upstream = Upstream()
    gateway = _gateway(upstream, clock)

    await gateway.get_address(16.0544, 108.2022)
    clock.now += 121
    await gateway.get_address(16.0544, 108.2022)

    assert len(upstream.requests) == 2
    await gateway.aclose()


@pytest.mark.asyncio
async def test_calls_are_spaced_by_min_interval():
    clock = FakeClock()
    upstream = Upstream()
    gateway = _gateway(upstream, clock)

    await gateway.get_address(16.0, 108.0)
    clock.now += 0.5
    await gateway.get_address(17.0, 108.0)

    assert clock.sleeps == [pytest.approx(1.5)]
    assert len(upstream.requests) == 2
    await gateway.aclose()


@pytest.mark.asyncio
async def test_no_town_returns_none_and_is_not_cached():
    clock = FakeClock()
    upstream = Upstream(body={"address": {"road": "Bạch Đằng"}})
    gateway = _gateway(upstream, clock)

    assert await gateway.get_address(16.0, 108.0) is None
    clock.now += 5
    assert await gateway.get_address(16.0, 108.0) is None
    assert len(upstream.requests) == 2
    await gateway.aclose()


@pytest.mark.asyncio
async def test_forbidden_opens_breaker_until_cool_down():
    clock = FakeClock()
    upstream = Upstream(status_code=403, body={})
    gateway = _gateway(upstream, clock)

    assert await gateway.get_address(16.0, 108.0) is None
    assert gateway.throttle.blocked

    clock.now += 1800
    assert await gateway.get_address(16.1, 108.0) is None
    full = await gateway.get_full_address(16.2, 108.0)
    assert (full.area, full.address, full.name) == ("", "", "")
    assert len(upstream.requests) == 1
    assert clock.sleeps == []

    clock.now += 1801
    upstream.status_code = 200
    upstream.body = {"address": {"town": "Ái Nghĩa"}}
    assert await gateway.get_address(16.3, 108.0) == "Ái Nghĩa"
    assert not gateway.throttle.blocked
    assert len(upstream.requests) == 2
    await gateway.aclose()


@pytest.mark.asyncio
async def test_other_failures_degrade_to_empty_result():
    clock = FakeClock()
    upstream = Upstream(status_code=500, body={"error": "boom"})
    gateway = _gateway(upstream, clock)

    assert await gateway.get_address(16.0, 108.0) is None
    full = await gateway.get_full_address(16.0, 108.0)
    assert full.model_dump() == {"area": "", "address": "", "name": ""}
    assert not gateway.throttle.blocked
    await gateway.aclose()


@pytest.mark.asyncio
async def test_full_address_requests_names_and_caches():
    clock = FakeClock()
    upstream = Upstream(body={
        "display_name": "Bạch Đằng, Hải Châu, Đà Nẵng",
        "address": {"suburb": "Hải Châu 1", "road": "Bạch Đằng"},
    })
    gateway = _gateway(upstream, clock)

    first = await gateway.get_full_address(16.0, 108.0)
    second = await gateway.get_full_address(16.0, 108.0)

    assert first == second
    assert first.area == "Phường Hải Châu 1"
    assert upstream.requests[0].url.params["namedetails"] == "1"
    assert len(upstream.requests) == 1
    await gateway.aclose()
