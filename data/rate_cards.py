"""
Default Rate Cards

Seed for the rate card store when the database holds no card for a
(carrier, mode, zone). Amounts are in rupees.

Structure:
carrier: {
    mode: {
        "slabs": weight breakpoints in kg, strictly increasing,
        "zones": {
            zone: {"base": [...], "additional": [...], "cod_flat": x, "cod_percent": y}
        }
    }
}

"base[i]" is the price up to slabs[i]; "additional[i]" is charged per 0.5 kg
above slabs[i] when the weight exceeds every slab.
"""

from decimal import Decimal


def _zone(base, additional, cod_flat, cod_percent):
    return {
        "base": [Decimal(str(x)) for x in base],
        "additional": [Decimal(str(x)) for x in additional],
        "cod_flat": Decimal(str(cod_flat)),
        "cod_percent": Decimal(str(cod_percent)),
    }


STANDARD_SLABS = [Decimal("0.5"), Decimal("1"), Decimal("2"), Decimal("5"), Decimal("10")]

DEFAULT_RATE_CARDS = {
    "bluedart": {
        "air": {
            "slabs": STANDARD_SLABS,
            "zones": {
                "WITHIN_CITY": _zone([37, 45, 48, 49, 64], [36, 43, 47, 48, 62], 35, 1.5),
                "WITHIN_STATE": _zone([45, 52, 60, 64, 87], [43, 52, 59, 64, 86], 35, 1.5),
                "METRO_TO_METRO": _zone([48, 60, 89, 193, 227], [47, 59, 60, 64, 87], 35, 1.5),
                "REST_OF_INDIA": _zone([49, 64, 99, 193, 369], [48, 63, 64, 64, 64], 35, 1.5),
                "SPECIAL_ZONE": _zone([64, 87, 131, 227, 430], [62, 86, 87, 87, 87], 35, 1.5),
            },
        },
    },
    "delhivery": {
        "surface": {
            "slabs": STANDARD_SLABS,
            "zones": {
                "WITHIN_CITY": _zone([32, 49, 69, 141, 262], [30, 48, 49, 49, 49], 35, 1.75),
                "WITHIN_STATE": _zone([34, 52, 74, 149, 275], [32, 51, 52, 52, 52], 35, 1.75),
                "METRO_TO_METRO": _zone([46, 60, 89, 171, 325], [43, 59, 60, 60, 60], 35, 1.75),
                "REST_OF_INDIA": _zone([49, 64, 99, 193, 369], [46, 63, 64, 64, 64], 35, 1.75),
                "SPECIAL_ZONE": _zone([68, 87, 131, 227, 430], [64, 86, 87, 87, 87], 35, 1.75),
            },
        },
    },
    "dtdc": {
        "surface": {
            "slabs": STANDARD_SLABS,
            "zones": {
                "WITHIN_CITY": _zone([30, 49, 69, 141, 262], [30, 48, 49, 49, 49], 27, 1.25),
                "WITHIN_STATE": _zone([35, 52, 74, 149, 275], [35, 51, 52, 52, 52], 27, 1.25),
                "METRO_TO_METRO": _zone([41, 60, 89, 171, 325], [41, 59, 60, 60, 60], 27, 1.25),
                "REST_OF_INDIA": _zone([49, 64, 99, 193, 369], [49, 63, 64, 64, 64], 27, 1.25),
                "SPECIAL_ZONE": _zone([62, 87, 131, 227, 430], [62, 86, 87, 87, 87], 27, 1.25),
            },
        },
    },
    "ekart": {
        "air": {
            "slabs": STANDARD_SLABS,
            "zones": {
                "WITHIN_CITY": _zone([31, 49, 69, 141, 262], [29, 48, 49, 49, 49], 30, 1.5),
                "WITHIN_STATE": _zone([33, 52, 74, 149, 275], [31, 51, 52, 52, 52], 30, 1.5),
                "METRO_TO_METRO": _zone([38, 60, 89, 171, 325], [36, 59, 60, 60, 60], 30, 1.5),
                "REST_OF_INDIA": _zone([40, 64, 99, 193, 369], [38, 63, 64, 64, 64], 30, 1.5),
                "SPECIAL_ZONE": _zone([45, 87, 131, 227, 430], [43, 86, 87, 87, 87], 30, 1.5),
            },
        },
    },
    "xpressbees": {
        "air": {
            "slabs": STANDARD_SLABS,
            "zones": {
                "WITHIN_CITY": _zone([27, 40, 64, 98, 149], [16, 30, 49, 52, 52], 27, 1.18),
                "WITHIN_STATE": _zone([27, 40, 64, 98, 149], [16, 30, 49, 52, 52], 27, 1.18),
                "METRO_TO_METRO": _zone([37, 58, 69, 110, 161], [34, 35, 60, 20, 20], 27, 1.18),
                "REST_OF_INDIA": _zone([51, 58, 76, 123, 174], [40, 35, 25, 20, 22], 27, 1.18),
                "SPECIAL_ZONE": _zone([55, 69, 89, 149, 238], [47, 69, 89, 149, 22], 27, 1.18),
            },
        },
    },
}
