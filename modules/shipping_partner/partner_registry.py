from threading import Lock
from typing import List, Optional

from cachetools import TTLCache

from config import PARTNER_CACHE_TTL
from logger import logger

# data
from data.partner_defaults import DEFAULT_PARTNER_CONFIGS, FALLBACK_CARRIERS

# schema
from modules.serviceability.serviceability_schema import Package
from .shipping_partner_schema import Carrier, PartnerConfig


class PartnerRegistry:
    """
    Resolves a carrier to its configuration: TTL cache, then the configuration
    store, then the static default for that carrier. Every quote and booking
    path goes through here.
    """

    def __init__(self, store, ttl: int = PARTNER_CACHE_TTL, cache: TTLCache = None):
        self.store = store
        self._cache = cache if cache is not None else TTLCache(maxsize=64, ttl=ttl)
        self._lock = Lock()

    def resolve(self, carrier_name) -> Optional[PartnerConfig]:
        carrier = Carrier.parse(carrier_name)
        if carrier is None:
            logger.info(msg="unknown carrier {}".format(carrier_name))
            return None

        with self._lock:
            cached = self._cache.get(carrier)
        if cached is not None:
            return cached

        try:
            config = self.store.find_active(carrier)
        except Exception as e:
            logger.error(
                msg="partner config lookup failed for {}: {}".format(carrier.value, str(e))
            )
            # not cached, the next resolve retries the store
            return DEFAULT_PARTNER_CONFIGS.get(carrier)

        if config is None:
            config = DEFAULT_PARTNER_CONFIGS.get(carrier)
            logger.info(msg="using default configuration for {}".format(carrier.value))

        if config is not None:
            with self._lock:
                self._cache[carrier] = config

        return config

    def invalidate(self, carrier_name=None):
        with self._lock:
            if carrier_name is None:
                self._cache.clear()
                return
            carrier = Carrier.parse(carrier_name)
            if carrier is not None:
                self._cache.pop(carrier, None)

    def eligible_carriers(self, package: Package) -> List[Carrier]:
        """Active stored partners whose weight limits admit the package, else the fallback set."""
        weight = package.chargeable_weight

        try:
            configs = self.store.list_active()
        except Exception as e:
            logger.error(msg="partner listing failed: {}".format(str(e)))
            configs = []

        carriers = [
            config.carrier for config in configs if config.weight_limits.admits(weight)
        ]

        if not carriers:
            logger.info(msg="no stored partner admits {} kg, using fallback list".format(weight))
            return list(FALLBACK_CARRIERS)

        return list(dict.fromkeys(carriers))
