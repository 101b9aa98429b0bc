"""Cache instances and key scheme for marketplace reads."""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from apps.core.cache import CacheSweeper, Clock, TTLCache, make_cache_key
from apps.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

SHOP_DIRECTORY_KEY = make_cache_key("shops")
OFFERS_KEY = make_cache_key("offers")


def shop_detail_key(shop_id: int) -> str:
    return make_cache_key("shop_detail", shop_id=int(shop_id))


def distance_key(shop_id: int, lat: float, lon: float) -> str:
    # ~1 m precision keeps jittery GPS readings on the same entry
    return f"distance:{int(shop_id)}:{round(float(lat), 5)}:{round(float(lon), 5)}"


@dataclass
class MarketCaches:
    """Caches shared by every request of one application instance."""

    responses: TTLCache
    distances: TTLCache
    config: Settings
    sweepers: List[CacheSweeper] = field(default_factory=list)

    # --- TTLs per data volatility ---
    @property
    def shops_ttl(self) -> int:
        return self.config.shops_cache_ttl_s

    @property
    def offers_ttl(self) -> int:
        return self.config.offers_cache_ttl_s

    @property
    def shop_detail_ttl(self) -> int:
        return self.config.shop_detail_cache_ttl_s

    # --- Invalidation, called by write handlers before they respond ---
    def invalidate_shop_directory(self) -> None:
        self.responses.invalidate(SHOP_DIRECTORY_KEY)

    def invalidate_offers(self) -> None:
        self.responses.invalidate(OFFERS_KEY)

    def invalidate_shop_detail(self, shop_id: int) -> None:
        self.responses.invalidate(shop_detail_key(shop_id))

    def invalidate_shop_distances(self, shop_id: int) -> int:
        return self.distances.invalidate_pattern(rf"^distance:{int(shop_id)}:")

    def stats(self) -> dict:
        return {
            "responses": self.responses.get_stats(),
            "distances": self.distances.get_stats(),
            "sweepers": {s.name: s.runs for s in self.sweepers},
        }


def create_market_caches(config: Optional[Settings] = None, clock: Clock = time.monotonic) -> MarketCaches:
    """Build the caches and their periodic sweepers."""
    config = config or default_settings
    responses = TTLCache(
        default_ttl_seconds=config.shops_cache_ttl_s,
        max_entries=config.response_cache_max_entries,
        clock=clock,
        name="response_cache",
    )
    distances = TTLCache(
        default_ttl_seconds=None,
        max_entries=config.distance_cache_max_entries,
        clock=clock,
        name="distance_cache",
    )
    sweepers = [
        CacheSweeper(responses.purge_expired, config.response_sweep_interval_s, clock=clock, name="response_sweep"),
        CacheSweeper(distances.clear, config.distance_sweep_interval_s, clock=clock, name="distance_sweep"),
    ]
    logger.info(
        "Caches ready: responses max=%d, distances max=%d swept every %ds",
        config.response_cache_max_entries,
        config.distance_cache_max_entries,
        config.distance_sweep_interval_s,
    )
    return MarketCaches(responses=responses, distances=distances, config=config, sweepers=sweepers)
