import re
from threading import Lock
from typing import Dict, Optional

from cachetools import TTLCache
from sqlalchemy.orm import Session

from config import PINCODE_CACHE_TTL
from logger import logger

# models
from models import Pincode_Mapping

# schema
from .serviceability_schema import PincodeDetails


PINCODE_REGEX = re.compile(r"^\d{6}$")


def is_valid_pincode(pincode) -> bool:
    return bool(PINCODE_REGEX.match(str(pincode or "")))


class PincodeDirectory:
    """Pincode lookups held in memory, used for local runs and tests."""

    def __init__(self, records: Dict[str, dict] = None):
        self._records = {}
        for pincode, record in (records or {}).items():
            self._records[str(pincode)] = PincodeDetails(pincode=str(pincode), **record)

    def lookup(self, pincode: str) -> Optional[PincodeDetails]:
        return self._records.get(str(pincode))


class PincodeService(PincodeDirectory):
    """
    Pincode lookups against pincode_mapping with a TTL cache in front.
    Misses are cached too so unknown pincodes do not hit the database on
    every quote.
    """

    _cache = TTLCache(maxsize=5000, ttl=PINCODE_CACHE_TTL)
    _cache_lock = Lock()

    def __init__(self, db: Session):
        super().__init__()
        self.db = db

    def lookup(self, pincode: str) -> Optional[PincodeDetails]:
        if not is_valid_pincode(pincode):
            return None

        key = str(pincode)
        with self._cache_lock:
            if key in self._cache:
                return self._cache[key]

        row = (
            self.db.query(Pincode_Mapping)
            .filter(
                Pincode_Mapping.pincode == int(key),
                Pincode_Mapping.is_deleted.is_(False),
            )
            .first()
        )

        details = None
        if row is not None:
            details = PincodeDetails(
                pincode=key, city=row.city, state=row.state, district=row.district
            )
        else:
            logger.info(msg="pincode {} not found".format(key))

        with self._cache_lock:
            self._cache[key] = details

        return details

    @classmethod
    def clear_cache(cls):
        with cls._cache_lock:
            cls._cache.clear()
