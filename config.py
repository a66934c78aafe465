import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def parse_method_overrides(raw: str) -> dict:
    """
    Parse "delhivery:DATABASE,dtdc:API" into {"delhivery": "DATABASE", "dtdc": "API"}.
    Malformed pairs are skipped.
    """
    overrides = {}
    for pair in (raw or "").split(","):
        if ":" not in pair:
            continue
        carrier, method = pair.split(":", 1)
        carrier, method = carrier.strip().lower(), method.strip().upper()
        if carrier and method:
            overrides[carrier] = method
    return overrides


# ============================================
# DATABASE
# ============================================

if os.environ.get("DATABASE_URL"):
    DATABASE_URL = os.environ["DATABASE_URL"]
elif os.environ.get("db_host"):
    DATABASE_URL = "%s://%s:%s@%s:%s/%s" % (
        "postgresql",
        os.environ.get("db_user"),
        quote_plus(os.environ.get("db_password", "")),
        os.environ.get("db_host"),
        os.environ.get("db_port", "5432"),
        os.environ.get("db_name"),
    )
else:
    DATABASE_URL = "sqlite:///./rate_engine.db"


# ============================================
# AUTH
# ============================================

JWT_SECRET = os.environ.get("JWT_SECRET", "secret_key")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")


# ============================================
# RATE ENGINE
# ============================================

DEFAULT_RATE_METHOD = os.environ.get("DEFAULT_RATE_METHOD", "API").upper()
RATE_METHOD_OVERRIDES = parse_method_overrides(
    os.environ.get("RATE_METHOD_OVERRIDES", "")
)

# partner configuration cache, seconds
PARTNER_CACHE_TTL = int(os.environ.get("PARTNER_CACHE_TTL", "1800"))
PINCODE_CACHE_TTL = int(os.environ.get("PINCODE_CACHE_TTL", "3600"))

# per carrier call, seconds
CARRIER_HTTP_TIMEOUT = float(os.environ.get("CARRIER_HTTP_TIMEOUT", "15"))
# whole quote fan-out, seconds
QUOTE_FANOUT_DEADLINE = float(os.environ.get("QUOTE_FANOUT_DEADLINE", "25"))

CHARGE_MANUAL_BOOKINGS = env_bool("CHARGE_MANUAL_BOOKINGS", True)
DEFAULT_TRANSIT_DAYS = int(os.environ.get("DEFAULT_TRANSIT_DAYS", "5"))


# ============================================
# CARRIERS
# ============================================

DELHIVERY_BASE_URL = os.environ.get(
    "DELHIVERY_API_URL", "https://staging-express.delhivery.com"
)
DELHIVERY_API_TOKEN = os.environ.get("DELHIVERY_API_TOKEN", "")
DELHIVERY_CLIENT_NAME = os.environ.get("DELHIVERY_CLIENT_NAME", "")
DELHIVERY_WAYBILL_BATCH_MAX = int(os.environ.get("DELHIVERY_WAYBILL_BATCH_MAX", "10000"))

DELHIVERY_B2B_BASE_URL = os.environ.get(
    "DELHIVERY_B2B_API_URL", "https://btob-api-dev.delhivery.com/v3"
)
DELHIVERY_B2B_USERNAME = os.environ.get("DELHIVERY_B2B_USERNAME", "")
DELHIVERY_B2B_PASSWORD = os.environ.get("DELHIVERY_B2B_PASSWORD", "")

XPRESSBEES_BASE_URL = os.environ.get(
    "XPRESSBEES_API_URL", "https://shipment.xpressbees.com"
)
XPRESSBEES_EMAIL = os.environ.get("XPRESSBEES_EMAIL", "")
XPRESSBEES_PASSWORD = os.environ.get("XPRESSBEES_PASSWORD", "")
XPRESSBEES_TOKEN_TTL = int(os.environ.get("XPRESSBEES_TOKEN_TTL", "3600"))

EKART_BASE_URL = os.environ.get("EKART_API_URL", "https://app.elite.ekartlogistics.in")
EKART_CLIENT_ID = os.environ.get("EKART_CLIENT_ID", "")
EKART_USERNAME = os.environ.get("EKART_USERNAME", "")
EKART_PASSWORD = os.environ.get("EKART_PASSWORD", "")
EKART_TOKEN_EXPIRY_BUFFER = int(os.environ.get("EKART_TOKEN_EXPIRY_BUFFER", "300"))

BLUEDART_BASE_URL = os.environ.get(
    "BLUEDART_API_URL", "https://apigateway.bluedart.com/in/transportation"
)
BLUEDART_LOGIN_ID = os.environ.get("BLUEDART_LOGIN_ID", "")
BLUEDART_LICENCE_KEY = os.environ.get("BLUEDART_LICENCE_KEY", "")
BLUEDART_CUSTOMER_CODE = os.environ.get("BLUEDART_CUSTOMER_CODE", "")

DTDC_BASE_URL = os.environ.get("DTDC_API_URL", "https://dtdcapi.shipsy.io")
DTDC_API_KEY = os.environ.get("DTDC_API_KEY", "")
DTDC_CUSTOMER_CODE = os.environ.get("DTDC_CUSTOMER_CODE", "")
DTDC_TRACKING_TOKEN = os.environ.get("DTDC_TRACKING_TOKEN", "")
DTDC_TRACKING_URL = os.environ.get(
    "DTDC_TRACKING_URL", "https://blktracksvc.dtdc.com/dtdc-api/rest/JSONCnTrk/getTrackDetails"
)


# ============================================
# LOGGING
# ============================================

LOG_FILE = os.environ.get("LOG_FILE", "./logger/log.log")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG").upper()
