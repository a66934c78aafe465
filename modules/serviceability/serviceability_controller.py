import http
from fastapi import APIRouter

# schema
from schema.base import GenericResponseModel
from modules.serviceability.serviceability_schema import RateQuoteRequestModel

# utils
from utils.response_handler import build_api_response

# services
from .serviceability_service import ServiceabilityService


serviceability_router = APIRouter(tags=["serviceability"], prefix="/serviceability")


@serviceability_router.post(
    "/rates",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_rates(rate_params: RateQuoteRequestModel):
    try:
        response = await ServiceabilityService.get_rates(rate_params)
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while fetching the rates.",
            )
        )


@serviceability_router.get(
    "/zone",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_zone(origin: str, destination: str):
    response: GenericResponseModel = ServiceabilityService.get_zone(origin, destination)
    return build_api_response(response)


@serviceability_router.get(
    "/pincode/{pincode}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_pincode(pincode: str):
    response: GenericResponseModel = ServiceabilityService.get_pincode(pincode)
    return build_api_response(response)
