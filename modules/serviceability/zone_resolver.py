from logger import logger

# data
from data.locations import metro_cities, special_zone, normalize_place

# schema
from .serviceability_schema import PincodeDetails, Route, Zone


METRO_CITIES = frozenset(metro_cities)
SPECIAL_ZONE_STATES = frozenset(special_zone)


def classify_zone(origin: PincodeDetails, destination: PincodeDetails) -> Zone:
    """
    First match wins:
    1. destination state in a special zone
    2. same district and state
    3. same state
    4. both cities metro
    5. rest of India
    """
    origin_state = normalize_place(origin.state)
    destination_state = normalize_place(destination.state)

    if destination_state in SPECIAL_ZONE_STATES:
        return Zone.SPECIAL_ZONE

    origin_district = normalize_place(origin.district or origin.city)
    destination_district = normalize_place(destination.district or destination.city)

    if origin_district == destination_district and origin_state == destination_state:
        return Zone.WITHIN_CITY

    if origin_state == destination_state:
        return Zone.WITHIN_STATE

    if (
        normalize_place(origin.city) in METRO_CITIES
        and normalize_place(destination.city) in METRO_CITIES
    ):
        return Zone.METRO_TO_METRO

    return Zone.REST_OF_INDIA


class ZoneResolver:
    def __init__(self, pincodes):
        self.pincodes = pincodes

    def resolve(self, route: Route) -> Zone:
        origin = self.pincodes.lookup(route.origin_pincode)
        destination = self.pincodes.lookup(route.destination_pincode)

        if origin is None or destination is None:
            logger.info(
                msg="zone lookup miss for {} -> {}, using REST_OF_INDIA".format(
                    route.origin_pincode, route.destination_pincode
                )
            )
            return Zone.REST_OF_INDIA

        return classify_zone(origin, destination)
