"""
Reverse geocoding through a Nominatim-compatible API.

The upstream allows roughly one request per second per client and answers
403 once it decides a client is abusive, so every lookup goes through a small
in-process cache, a minimum-interval limiter and a breaker that stops all
calls for a cool-down period after a 403.
"""
import asyncio
import logging
import math
import re
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

import httpx

from app.core.config import Settings, settings
from app.core.exceptions import InvalidArgument, UpstreamUnavailable
from app.schemas.geocoding import FullAddress

logger = logging.getLogger(__name__)

SHORT_AREA_FIELDS = (
    "suburb", "village", "town", "municipality", "city_district",
    "neighbourhood", "quarter", "hamlet", "city", "county", "district",
)
FULL_AREA_FIELDS = (
    "village", "suburb", "city_district", "city", "town", "municipality",
    "neighbourhood", "quarter", "hamlet", "county", "district",
)
PLACE_NAME_FIELDS = ("amenity", "shop", "restaurant", "cafe")
LOCAL_AREA_MARKERS = ("xã", "phường", "thị trấn", "ward")

_ADMIN_PREFIXES = re.compile(r"(Xã|Commune|Phường|Huyện|Tỉnh|Thành phố)\s*", re.IGNORECASE)


@dataclass
class GeocodingConfig:
    url: str = "https://nominatim.openstreetmap.org/reverse"
    user_agent: str = "GoGoApp/1.0"
    referer: str = ""
    accept_language: str = "vi,en"
    timeout_seconds: float = 10.0
    cache_ttl_seconds: float = 120.0
    cache_max_entries: int = 100
    min_interval_seconds: float = 2.0
    block_seconds: float = 3600.0

    @classmethod
    def from_settings(cls, config: Settings) -> "GeocodingConfig":
        return cls(
            url=config.GEOCODING_URL,
            user_agent=config.GEOCODING_USER_AGENT,
            referer=config.GEOCODING_REFERER,
            accept_language=config.GEOCODING_ACCEPT_LANGUAGE,
            timeout_seconds=config.GEOCODING_TIMEOUT_SECONDS,
            cache_ttl_seconds=config.GEOCODING_CACHE_TTL_SECONDS,
            cache_max_entries=config.GEOCODING_CACHE_MAX_ENTRIES,
            min_interval_seconds=config.GEOCODING_MIN_INTERVAL_SECONDS,
            block_seconds=config.GEOCODING_BLOCK_SECONDS,
        )


class GeocodeCache:
    """
    Bounded TTL cache with insertion-order (FIFO) eviction.

    Re-setting a key replaces its value and timestamp but keeps its original
    position, so the oldest inserted key is always the next one evicted.
    """

    def __init__(self, ttl_seconds: float, max_entries: int, clock: Callable[[], float]):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[Any, float]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (value, self._clock())
        if len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()


class UpstreamThrottle:
    """Minimum spacing between upstream calls plus the 403 breaker"""

    def __init__(
        self,
        min_interval_seconds: float,
        block_seconds: float,
        clock: Callable[[], float],
        sleep: Callable[[float], Awaitable[Any]],
    ):
        self.min_interval_seconds = min_interval_seconds
        self.block_seconds = block_seconds
        self._clock = clock
        self._sleep = sleep
        self.last_call_at: Optional[float] = None
        self.blocked = False
        self.block_until = 0.0

    def is_open(self) -> bool:
        """True while calls are suspended; closes itself once the cool-down is over"""
        if not self.blocked:
            return False
        now = self._clock()
        if now >= self.block_until:
            self.blocked = False
            logger.info("Geocoding block period expired, resuming API calls")
            return False
        logger.warning(f"Geocoding API is blocked. Will retry after {math.ceil(self.block_until - now)}s")
        return True

    async def acquire(self) -> bool:
        """Wait for a call slot. Returns False without waiting while the breaker is open."""
        if self.is_open():
            return False

        if self.last_call_at is not None:
            elapsed = self._clock() - self.last_call_at
            if elapsed < self.min_interval_seconds:
                wait = self.min_interval_seconds - elapsed
                logger.debug(f"Rate limiting: waiting {wait:.3f}s")
                await self._sleep(wait)

        self.last_call_at = self._clock()
        return True

    def trip(self) -> None:
        self.blocked = True
        self.block_until = self._clock() + self.block_seconds
        logger.error(f"Geocoding API blocked (403). Pausing calls for {self.block_seconds:.0f}s")


def cache_key(kind: str, lat: float, lng: float) -> str:
    return f"{kind}_{lat:.4f}_{lng:.4f}"


def parse_coordinates(lat: Any, lng: Any) -> Tuple[float, float]:
    """Validate raw query values into a finite (lat, lng) pair"""
    if lat is None or lng is None or lat == "" or lng == "":
        raise InvalidArgument("Latitude and longitude are required")
    try:
        lat_num, lng_num = float(lat), float(lng)
    except (TypeError, ValueError):
        raise InvalidArgument("Invalid latitude or longitude")
    if not (math.isfinite(lat_num) and math.isfinite(lng_num)):
        raise InvalidArgument("Invalid latitude or longitude")
    return lat_num, lng_num


def _first(address: Dict[str, Any], fields) -> Tuple[Optional[str], Optional[str]]:
    for field in fields:
        value = address.get(field)
        if value:
            return field, value
    return None, None


def extract_short_address(address: Dict[str, Any]) -> Optional[str]:
    """Town-level name without its administrative prefix"""
    _, town = _first(address, SHORT_AREA_FIELDS)
    if not town:
        return None
    return _ADMIN_PREFIXES.sub("", town).strip()


def extract_full_address(data: Dict[str, Any]) -> FullAddress:
    address = data.get("address") or {}
    display_name = data.get("display_name")
    name = data.get("name")

    _, area = _first(address, FULL_AREA_FIELDS)
    if area:
        lowered = area.lower()
        if not any(marker in lowered for marker in LOCAL_AREA_MARKERS):
            if address.get("village"):
                area = f"Xã {area}"
            elif address.get("suburb") or address.get("city_district") or address.get("city"):
                area = f"Phường {area}"
            elif address.get("town"):
                area = f"Thị trấn {area}"
        else:
            area = area.strip()

    if display_name:
        full = display_name
    elif name:
        full = name
    else:
        parts = [address.get("house_number"), address.get("road"), area,
                 address.get("county") or address.get("district"),
                 address.get("state") or address.get("region")]
        full = ", ".join(p for p in parts if p)

    _, poi = _first(address, PLACE_NAME_FIELDS)
    return FullAddress(area=area or "", address=full or "", name=name or poi or "")


class GeocodingGateway:
    """Cached, throttled access to the reverse geocoding API"""

    def __init__(
        self,
        config: Optional[GeocodingConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config or GeocodingConfig.from_settings(settings)
        self.cache = GeocodeCache(self.config.cache_ttl_seconds, self.config.cache_max_entries, clock)
        self.throttle = UpstreamThrottle(
            self.config.min_interval_seconds, self.config.block_seconds, clock, sleep
        )
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=self.config.timeout_seconds,
            headers={
                "User-Agent": self.config.user_agent,
                "Referer": self.config.referer,
                "Accept-Language": self.config.accept_language,
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _fetch(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.get(self.config.url, params=params)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Geocoding request failed: {e}")

        if response.status_code == 403:
            self.throttle.trip()
            raise UpstreamUnavailable("Geocoding API blocked this client")
        if response.status_code != 200:
            raise UpstreamUnavailable(f"Geocoding API returned {response.status_code}: {response.text[:200]}")

        try:
            data = response.json()
        except ValueError:
            raise UpstreamUnavailable("Geocoding API returned invalid JSON")
        if not isinstance(data, dict):
            raise UpstreamUnavailable("Geocoding API returned an unexpected payload")
        return data

    async def _reverse(self, lat: float, lng: float, with_names: bool = False) -> Optional[Dict[str, Any]]:
        """
        One upstream call. Returns the decoded body, or None when the call
        was skipped or failed; a 403 opens the breaker.
        """
        if not await self.throttle.acquire():
            return None

        params = {"lat": lat, "lon": lng, "format": "json", "addressdetails": 1}
        if with_names:
            params["namedetails"] = 1

        try:
            return await self._fetch(params)
        except UpstreamUnavailable as e:
            logger.error(f"Geocoding lookup for ({lat}, {lng}) failed: {e.message}")
            return None

    async def get_address(self, lat: Any, lng: Any) -> Optional[str]:
        """Short area/town name for a point, or None"""
        lat_num, lng_num = parse_coordinates(lat, lng)
        key = cache_key("address", lat_num, lng_num)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Returning cached address for {key}")
            return cached

        data = await self._reverse(lat_num, lng_num)
        if data is None:
            return None

        address = data.get("address")
        if not address:
            logger.warning(f"No address in geocoding response for {key}")
            return None

        town = extract_short_address(address)
        if not town:
            logger.warning(f"No town found in address: {address}")
            return None

        self.cache.set(key, town)
        return town

    async def get_full_address(self, lat: Any, lng: Any) -> FullAddress:
        """Area, display address and place name for a point (empty strings when unknown)"""
        lat_num, lng_num = parse_coordinates(lat, lng)
        key = cache_key("full", lat_num, lng_num)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Returning cached full address for {key}")
            return cached.model_copy()

        data = await self._reverse(lat_num, lng_num, with_names=True)
        if data is None or not data.get("address"):
            return FullAddress()

        result = extract_full_address(data)
        self.cache.set(key, result)
        return result.model_copy()
