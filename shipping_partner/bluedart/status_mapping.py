# keyed by ScanType, then ScanCode
status_mapping = {
    "PU": {
        "015": {"status": "in transit", "sub_status": "pickup completed"},
        "001": {"status": "in transit", "sub_status": "in transit"},
        "003": {"status": "in transit", "sub_status": "in transit"},
        "100": {"status": "in transit", "sub_status": "reached at destination hub"},
        "500": {"status": "booked", "sub_status": "pickup scheduled"},
    },
    "UD": {
        "002": {"status": "in transit", "sub_status": "out for delivery"},
        "025": {"status": "exception", "sub_status": "NDR"},
        "074": {"status": "exception", "sub_status": "NDR"},
        "092": {"status": "exception", "sub_status": "lost"},
        "095": {"status": "exception", "sub_status": "damaged"},
    },
    "DL": {
        "000": {"status": "delivered", "sub_status": "delivered"},
        "099": {"status": "delivered", "sub_status": "delivered"},
    },
    "RT": {
        "074": {"status": "exception", "sub_status": "RTO initiated"},
        "001": {"status": "exception", "sub_status": "RTO in transit"},
        "000": {"status": "returned", "sub_status": "RTO delivered"},
    },
}

# used when a code is missing from the table above
scan_type_fallback = {
    "PU": {"status": "in transit", "sub_status": "in transit"},
    "UD": {"status": "in transit", "sub_status": "in transit"},
    "DL": {"status": "delivered", "sub_status": "delivered"},
    "RT": {"status": "exception", "sub_status": "RTO in transit"},
}
