from datetime import datetime
import pytz
from dateutil import parser as date_parser


IST = pytz.timezone("Asia/Kolkata")

DATE_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%d-%m-%Y %H:%M:%S",  # With seconds
    "%d-%m-%Y %H:%M",  # Without seconds
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%d-%m-%Y %H:%M:%S.%f",  # With milliseconds
    "%d %m %Y %H:%M:%S",
    "%d-%b-%Y %H:%M",  # BlueDart scans
    "%d%m%Y %H%M",  # DTDC actions
]


def parse_datetime(value) -> datetime:
    """
    Parse a carrier timestamp into an aware UTC datetime.

    Accepts datetimes, epoch milliseconds and the string formats carriers send.
    Naive values are taken as IST, which is what every supported carrier reports in.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=pytz.utc)
    else:
        parsed = None
        text = str(value).strip().replace("Z", "+0000")
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

        if parsed is None:
            try:
                parsed = date_parser.parse(str(value), dayfirst=True)
            except (ValueError, OverflowError):
                raise ValueError(f"Invalid datetime format: {value}")

    if parsed.tzinfo is None:
        parsed = IST.localize(parsed)

    return parsed.astimezone(pytz.utc)


def as_utc(value: datetime) -> datetime:
    """Stored timestamps are UTC; some backends hand them back naive."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=pytz.utc)
    return value.astimezone(pytz.utc)
