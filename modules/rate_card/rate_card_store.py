from decimal import Decimal
from typing import Dict, Optional, Tuple

from sqlalchemy.orm import Session

from logger import logger

# models
from models import Rate_Card

# data
from data.rate_cards import DEFAULT_RATE_CARDS

# schema
from modules.serviceability.serviceability_schema import Zone
from modules.shipping_partner.shipping_partner_schema import Carrier, ServiceMode
from .rate_card_schema import RateCardEntry


RateCardKey = Tuple[Carrier, ServiceMode, Zone]


class RateCardStore:
    """Rate cards held in memory, keyed by (carrier, mode, zone)."""

    def __init__(self, entries=None):
        self._entries: Dict[RateCardKey, RateCardEntry] = {}
        for entry in entries or []:
            self.put(entry)

    @classmethod
    def from_defaults(cls, cards: dict = None) -> "RateCardStore":
        cards = DEFAULT_RATE_CARDS if cards is None else cards
        entries = []
        for carrier, modes in cards.items():
            for mode, card in modes.items():
                for zone, rates in card["zones"].items():
                    entries.append(
                        RateCardEntry(
                            carrier=Carrier(carrier),
                            mode=ServiceMode(mode),
                            zone=Zone(zone),
                            slabs=card["slabs"],
                            base=rates["base"],
                            additional=rates["additional"],
                            cod_flat=rates["cod_flat"],
                            cod_percent=rates["cod_percent"],
                        )
                    )
        return cls(entries)

    def put(self, entry: RateCardEntry):
        self._entries[(entry.carrier, entry.mode, entry.zone)] = entry

    def get(self, carrier: Carrier, mode: ServiceMode, zone: Zone) -> Optional[RateCardEntry]:
        return self._entries.get((carrier, mode, zone))

    def modes_for(self, carrier: Carrier):
        return sorted({key[1] for key in self._entries if key[0] == carrier})


class DBRateCardStore(RateCardStore):
    """
    Rate cards from the rate_card table, falling back to the seeded defaults
    for any (carrier, mode, zone) the table does not hold.
    """

    def __init__(self, db: Session, fallback: RateCardStore = None):
        super().__init__()
        self.db = db
        self.fallback = fallback or RateCardStore.from_defaults()

    def get(self, carrier: Carrier, mode: ServiceMode, zone: Zone) -> Optional[RateCardEntry]:
        row = (
            self.db.query(Rate_Card)
            .filter(
                Rate_Card.carrier == carrier.value,
                Rate_Card.mode == mode.value,
                Rate_Card.zone == zone.value,
                Rate_Card.is_deleted.is_(False),
            )
            .first()
        )

        if row is None:
            return self.fallback.get(carrier, mode, zone)

        try:
            return RateCardEntry(
                carrier=carrier,
                mode=mode,
                zone=zone,
                slabs=[Decimal(str(x)) for x in row.slabs],
                base=[Decimal(str(x)) for x in row.base_rates],
                additional=[Decimal(str(x)) for x in row.additional_rates],
                cod_flat=row.cod_flat or 0,
                cod_percent=row.cod_percent or 0,
            )
        except ValueError as e:
            logger.error(
                msg="invalid rate card {}/{}/{}: {}".format(
                    carrier.value, mode.value, zone.value, str(e)
                )
            )
            return self.fallback.get(carrier, mode, zone)

    def modes_for(self, carrier: Carrier):
        stored = {
            row[0]
            for row in self.db.query(Rate_Card.mode)
            .filter(Rate_Card.carrier == carrier.value, Rate_Card.is_deleted.is_(False))
            .all()
        }
        modes = {ServiceMode(mode) for mode in stored if mode in ServiceMode._value2member_map_}
        return sorted(modes | set(self.fallback.modes_for(carrier)))
