import http
from fastapi import APIRouter

# schema
from schema.base import GenericResponseModel

# utils
from utils.response_handler import build_api_response

# service
from .wallet_service import WalletService

wallet_router = APIRouter(tags=["wallet"], prefix="/wallet")


@wallet_router.get(
    "/balance",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_wallet_balance():
    response: GenericResponseModel = WalletService.get_balance()
    return build_api_response(response)
