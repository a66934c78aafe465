status_mapping = {
    "FORWARD": {
        "BKD": {"status": "booked", "sub_status": "booked"},
        "SOFTDATA": {"status": "booked", "sub_status": "booked"},
        "PCSC": {"status": "booked", "sub_status": "pickup scheduled"},
        "PCAW": {"status": "booked", "sub_status": "pickup scheduled"},
        "PCUP": {"status": "in transit", "sub_status": "pickup completed"},
        "OBMN": {"status": "in transit", "sub_status": "in transit"},
        "OMBM": {"status": "in transit", "sub_status": "in transit"},
        "IBMN": {"status": "in transit", "sub_status": "in transit"},
        "IMBM": {"status": "in transit", "sub_status": "reached at destination hub"},
        "CDOUT": {"status": "in transit", "sub_status": "in transit"},
        "CDIN": {"status": "in transit", "sub_status": "in transit"},
        "OUTDLV": {"status": "in transit", "sub_status": "out for delivery"},
        "DLV": {"status": "delivered", "sub_status": "delivered"},
        "NONDLV": {"status": "exception", "sub_status": "NDR"},
        "HELDUP": {"status": "exception", "sub_status": "held up"},
        "LOST": {"status": "exception", "sub_status": "lost"},
        "RTO": {"status": "exception", "sub_status": "RTO initiated"},
        "RTOOUTDLV": {"status": "exception", "sub_status": "RTO in transit"},
        "RTODLV": {"status": "returned", "sub_status": "RTO delivered"},
    },
}
