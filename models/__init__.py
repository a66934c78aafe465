from .pincode_mapping import Pincode_Mapping

from .shipping_partner import Shipping_Partner
from .rate_card import Rate_Card

from .wallet import Wallet
from .wallet_logs import Wallet_Logs

from .order import Order
from .shipment import Shipment
from .shipment_tracking import Shipment_Tracking
