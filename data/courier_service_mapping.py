import httpx

from modules.shipping_partner.shipping_partner_schema import Carrier

# services
from shipping_partner.bluedart.bluedart import Bluedart
from shipping_partner.delhivery.delhivery import Delhivery
from shipping_partner.dtdc.dtdc import Dtdc
from shipping_partner.ekart.ekart import Ekart
from shipping_partner.xpressbees.xpressbees import Xpressbees

courier_service_mapping = {
    Carrier.DELHIVERY: Delhivery,
    Carrier.XPRESSBEES: Xpressbees,
    Carrier.EKART: Ekart,
    Carrier.BLUEDART: Bluedart,
    Carrier.DTDC: Dtdc,
}


def build_adapters(client: httpx.AsyncClient = None) -> dict:
    """One adapter instance per carrier; instances own their token and waybill state."""
    return {
        carrier: service(client=client)
        for carrier, service in courier_service_mapping.items()
    }
