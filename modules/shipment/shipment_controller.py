import http
from fastapi import APIRouter

from context_manager.context import context_user_data, get_db_session

# schema
from schema.base import GenericResponseModel
from modules.shipment.shipment_schema import BookingRequestModel, TrackingRequestModel

# utils
from utils.response_handler import build_api_response

# services
from .booking_service import BookingService
from .tracking_service import TrackingService


shipment_router = APIRouter(prefix="/shipment", tags=["shipments"])


@shipment_router.post(
    "/book",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def book_shipment(booking_params: BookingRequestModel):
    try:
        service = BookingService.for_session(get_db_session())
        response: GenericResponseModel = await service.book(
            context_user_data.get(), booking_params
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while booking the shipment.",
            )
        )


@shipment_router.post(
    "/track",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def track_shipment(tracking_params: TrackingRequestModel):
    try:
        service = TrackingService.for_session(get_db_session())
        response: GenericResponseModel = await service.refresh(
            tracking_params.reference, tracking_params.carrier
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="Some error occurred while tracking, please try again",
            )
        )
