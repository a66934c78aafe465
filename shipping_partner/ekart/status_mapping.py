status_mapping = {
    "FORWARD": {
        "shipment_created": {"status": "booked", "sub_status": "booked"},
        "shipment_pickup_scheduled": {"status": "booked", "sub_status": "pickup scheduled"},
        "shipment_out_for_pickup": {"status": "booked", "sub_status": "out for pickup"},
        "shipment_pickup_complete": {"status": "in transit", "sub_status": "pickup completed"},
        "shipment_dispatched": {"status": "in transit", "sub_status": "in transit"},
        "shipment_received_at_hub": {"status": "in transit", "sub_status": "in transit"},
        "shipment_expected": {"status": "in transit", "sub_status": "in transit"},
        "shipment_out_for_delivery": {"status": "in transit", "sub_status": "out for delivery"},
        "shipment_delivered": {"status": "delivered", "sub_status": "delivered"},
        "shipment_undelivered_attempted": {"status": "exception", "sub_status": "NDR"},
        "shipment_lost": {"status": "exception", "sub_status": "lost"},
        "shipment_damaged": {"status": "exception", "sub_status": "damaged"},
        "shipment_rto_created": {"status": "exception", "sub_status": "RTO initiated"},
        "shipment_rto_in_transit": {"status": "exception", "sub_status": "RTO in transit"},
        "shipment_rto_completed": {"status": "returned", "sub_status": "RTO delivered"},
        "shipment_rto_confirmed": {"status": "returned", "sub_status": "RTO delivered"},
    },
}
