status_mapping = {
    # forward leg, keyed by Scan text
    "UD": {
        "Manifested": {"status": "booked", "sub_status": "booked"},
        "Not Picked": {"status": "booked", "sub_status": "pickup pending"},
        "Picked Up": {"status": "in transit", "sub_status": "pickup completed"},
        "In Transit": {"status": "in transit", "sub_status": "in transit"},
        "Pending": {"status": "in transit", "sub_status": "reached at destination hub"},
        "Dispatched": {"status": "in transit", "sub_status": "out for delivery"},
        "Out for Delivery": {"status": "in transit", "sub_status": "out for delivery"},
        "Undelivered": {"status": "exception", "sub_status": "NDR"},
        "Lost": {"status": "exception", "sub_status": "lost"},
    },
    "PP": {
        "Open": {"status": "booked", "sub_status": "pickup pending"},
        "Scheduled": {"status": "booked", "sub_status": "pickup scheduled"},
        "Dispatched": {"status": "booked", "sub_status": "out for pickup"},
    },
    "PU": {
        "In Transit": {"status": "in transit", "sub_status": "pickup completed"},
        "Pending": {"status": "in transit", "sub_status": "in transit"},
        "Dispatched": {"status": "in transit", "sub_status": "in transit"},
    },
    "RT": {
        "In Transit": {"status": "exception", "sub_status": "RTO in transit"},
        "Pending": {"status": "exception", "sub_status": "RTO in transit"},
        "Dispatched": {"status": "exception", "sub_status": "RTO out for delivery"},
    },
    "DL": {
        "Delivered": {"status": "delivered", "sub_status": "delivered"},
        "RTO": {"status": "returned", "sub_status": "RTO delivered"},
        "DTO": {"status": "returned", "sub_status": "RTO delivered"},
    },
    "CN": {
        "Canceled": {"status": "exception", "sub_status": "cancelled"},
        "Closed": {"status": "exception", "sub_status": "cancelled"},
    },
}
