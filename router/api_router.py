from fastapi import APIRouter, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from context_manager.context import build_request_context

security = HTTPBearer()

# utils
from utils.jwt_token_handler import JWTHandler, UserDataModel

# routers
from modules.serviceability.serviceability_controller import serviceability_router
from modules.shipment.shipment_controller import shipment_router
from modules.shipping_partner.shipping_partner_controller import shipping_partner_router
from modules.wallet.wallet_controller import wallet_router


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UserDataModel:
    """
    Decode the bearer token into the principal and place it in the request
    context. Identity and permissions are owned by the auth service.
    """
    return JWTHandler.decode_access_token(credentials.credentials)


# create a common master router for all the routes in the service
CommonRouter = APIRouter(
    prefix="/api/v1",
    dependencies=[Depends(build_request_context), Depends(get_current_user)],
)


# add all the routes to the master router
CommonRouter.include_router(serviceability_router)
CommonRouter.include_router(shipment_router)
CommonRouter.include_router(wallet_router)
CommonRouter.include_router(shipping_partner_router)
