status_mapping = {
    "FORWARD": {
        "PP": {"status": "booked", "sub_status": "pickup pending"},
        "OFP": {"status": "booked", "sub_status": "out for pickup"},
        "PKD": {"status": "in transit", "sub_status": "pickup completed"},
        "IT": {"status": "in transit", "sub_status": "in transit"},
        "RAD": {"status": "in transit", "sub_status": "reached at destination hub"},
        "OFD": {"status": "in transit", "sub_status": "out for delivery"},
        "DL": {"status": "delivered", "sub_status": "delivered"},
        "EX": {"status": "exception", "sub_status": "NDR"},
        "UD": {"status": "exception", "sub_status": "NDR"},
        "LT": {"status": "exception", "sub_status": "lost"},
        "DG": {"status": "exception", "sub_status": "damaged"},
        "RT": {"status": "exception", "sub_status": "RTO initiated"},
        "RT-IT": {"status": "exception", "sub_status": "RTO in transit"},
        "RT-DL": {"status": "returned", "sub_status": "RTO delivered"},
        # status words sent at shipment level
        "pending pickup": {"status": "booked", "sub_status": "pickup pending"},
        "in transit": {"status": "in transit", "sub_status": "in transit"},
        "out for delivery": {"status": "in transit", "sub_status": "out for delivery"},
        "delivered": {"status": "delivered", "sub_status": "delivered"},
        "exception": {"status": "exception", "sub_status": "NDR"},
        "rto": {"status": "exception", "sub_status": "RTO initiated"},
        "rto delivered": {"status": "returned", "sub_status": "RTO delivered"},
    },
}
