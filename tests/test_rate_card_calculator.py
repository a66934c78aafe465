from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.rate_card.rate_card_schema import RateCardEntry
from modules.rate_card.rate_card_store import RateCardStore
from modules.rate_card.rate_card_calculator import RateCardCalculator
from modules.serviceability.serviceability_schema import QuoteSource, Zone
from modules.shipping_partner.shipping_partner_schema import Carrier, ServiceMode


def test_cod_charge_applies_flat_plus_percent_of_running_total(calculator):
    quote = calculator.price_for(
        Carrier.BLUEDART, ServiceMode.AIR, Zone.WITHIN_CITY, 0.5, is_cod=True
    )

    # 37 + 35 + 1.5% of 37 = 72.555
    assert quote.total == Decimal("73")
    assert quote.breakdown.base == Decimal("37.00")
    assert quote.breakdown.cod_charge == Decimal("35.56")
    assert quote.source == QuoteSource.DATABASE


def test_prepaid_has_no_cod_charge(calculator):
    quote = calculator.price_for(
        Carrier.BLUEDART, ServiceMode.AIR, Zone.WITHIN_CITY, 0.5, is_cod=False
    )
    assert quote.total == Decimal("37")
    assert quote.breakdown.cod_charge == Decimal("0")


def test_weight_between_slabs_uses_next_slab(calculator):
    quote = calculator.price_for(
        Carrier.DELHIVERY, ServiceMode.SURFACE, Zone.REST_OF_INDIA, 1.5, is_cod=False
    )
    # 1.5 kg sits in the 2 kg slab
    assert quote.total == Decimal("99")
    assert quote.breakdown.weight_charge == Decimal("0.00")


def test_weight_above_last_slab_bills_additional_half_kilos(calculator):
    quote = calculator.price_for(
        Carrier.DTDC, ServiceMode.SURFACE, Zone.WITHIN_CITY, 11.2, is_cod=False
    )
    # 1.2 kg over the 10 kg slab is three 0.5 kg units at 49
    assert quote.breakdown.weight_charge == Decimal("147.00")
    assert quote.total == Decimal("409")


def test_missing_card_returns_none(calculator):
    assert (
        calculator.price_for(
            Carrier.DTDC, ServiceMode.AIR, Zone.WITHIN_CITY, 1, is_cod=False
        )
        is None
    )


def test_identical_inputs_give_identical_quotes(calculator):
    args = (Carrier.EKART, ServiceMode.AIR, Zone.METRO_TO_METRO, 3.3, True)
    assert calculator.price_for(*args) == calculator.price_for(*args)


def test_price_is_monotonic_in_weight_for_every_seeded_card(rate_card_store):
    calculator = RateCardCalculator(rate_card_store)
    weights = [w / 10 for w in range(1, 251)]

    for carrier in Carrier:
        for mode in rate_card_store.modes_for(carrier):
            for zone in Zone:
                for is_cod in (False, True):
                    totals = [
                        calculator.price_for(carrier, mode, zone, w, is_cod).total
                        for w in weights
                    ]
                    assert totals == sorted(totals), (carrier, mode, zone, is_cod)


def test_estimated_days_defaults_when_not_given(rate_card_store):
    calculator = RateCardCalculator(rate_card_store, default_transit_days=6)
    quote = calculator.price_for(
        Carrier.EKART, ServiceMode.AIR, Zone.WITHIN_STATE, 1, is_cod=False
    )
    assert quote.estimated_days == 6


def test_rate_card_rejects_unordered_slabs():
    with pytest.raises(ValidationError):
        RateCardEntry(
            carrier=Carrier.DTDC,
            mode=ServiceMode.SURFACE,
            zone=Zone.WITHIN_CITY,
            slabs=[Decimal("1"), Decimal("0.5")],
            base=[Decimal("10"), Decimal("20")],
            additional=[Decimal("5"), Decimal("5")],
        )


def test_rate_card_rejects_mismatched_rates():
    with pytest.raises(ValidationError):
        RateCardEntry(
            carrier=Carrier.DTDC,
            mode=ServiceMode.SURFACE,
            zone=Zone.WITHIN_CITY,
            slabs=[Decimal("0.5"), Decimal("1")],
            base=[Decimal("10")],
            additional=[Decimal("5"), Decimal("5")],
        )


def test_store_put_overrides_seeded_entry(rate_card_store):
    rate_card_store.put(
        RateCardEntry(
            carrier=Carrier.DTDC,
            mode=ServiceMode.SURFACE,
            zone=Zone.WITHIN_CITY,
            slabs=[Decimal("1")],
            base=[Decimal("10")],
            additional=[Decimal("4")],
        )
    )
    quote = RateCardCalculator(rate_card_store).price_for(
        Carrier.DTDC, ServiceMode.SURFACE, Zone.WITHIN_CITY, 2, is_cod=False
    )
    assert quote.total == Decimal("18")


def test_default_store_modes():
    store = RateCardStore.from_defaults()
    assert store.modes_for(Carrier.BLUEDART) == [ServiceMode.AIR]
    assert store.modes_for(Carrier.DELHIVERY) == [ServiceMode.SURFACE]
