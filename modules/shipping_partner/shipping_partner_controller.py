import http
from fastapi import APIRouter

# schema
from schema.base import GenericResponseModel
from .shipping_partner_schema import PartnerConfigUpdateModel

# utils
from utils.response_handler import build_api_response

# service
from .shipping_partner_service import ShippingPartnerService


shipping_partner_router = APIRouter(tags=["shipping partner"], prefix="/shipping-partner")


@shipping_partner_router.get(
    "/{carrier}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_shipping_partner(carrier: str):
    response: GenericResponseModel = ShippingPartnerService.get_config(carrier)
    return build_api_response(response)


@shipping_partner_router.put(
    "/{carrier}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def update_shipping_partner(carrier: str, changes: PartnerConfigUpdateModel):
    response: GenericResponseModel = ShippingPartnerService.update_config(carrier, changes)
    return build_api_response(response)
