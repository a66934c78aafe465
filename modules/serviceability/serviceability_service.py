import http
from psycopg2 import DatabaseError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import DEFAULT_TRANSIT_DAYS
from context_manager.context import context_user_data, get_db_session
from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.serviceability.serviceability_schema import (
    RateQuoteRequestModel,
    Route,
    ZoneResponseModel,
)

# service
from modules.rate_card.rate_card_calculator import RateCardCalculator
from modules.rate_card.rate_card_store import DBRateCardStore
from modules.shipping_partner.shipping_partner_service import (
    carrier_adapters,
    partner_registry,
)
from .pincode_service import PincodeService, is_valid_pincode
from .rate_orchestrator import RateOrchestrator
from .zone_resolver import ZoneResolver


def build_rate_orchestrator(db: Session) -> RateOrchestrator:
    return RateOrchestrator(
        registry=partner_registry,
        adapters=carrier_adapters,
        calculator=RateCardCalculator(
            DBRateCardStore(db), default_transit_days=DEFAULT_TRANSIT_DAYS
        ),
        zone_resolver=ZoneResolver(PincodeService(db)),
    )


class ServiceabilityService:

    @staticmethod
    async def get_rates(rate_params: RateQuoteRequestModel):
        try:
            orchestrator = build_rate_orchestrator(get_db_session())

            quotes = await orchestrator.quote_all(
                rate_params.to_package(),
                rate_params.to_route(),
                partners=rate_params.partners,
            )

            logger.info(
                extra=context_user_data.get(),
                msg="{} quotes returned".format(len(quotes)),
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=quotes,
                message="successful",
            )

        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching rates: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the rates.",
            )

        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Unhandled error fetching rates: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the rates.",
            )

    @staticmethod
    def get_zone(origin: str, destination: str):
        try:
            if not is_valid_pincode(origin) or not is_valid_pincode(destination):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Invalid pincode",
                )

            route = Route(origin_pincode=origin, destination_pincode=destination)
            zone = ZoneResolver(PincodeService(get_db_session())).resolve(route)

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=ZoneResponseModel(
                    origin_pincode=origin,
                    destination_pincode=destination,
                    zone=zone,
                    zone_code=zone.code,
                ),
                message="successful",
            )

        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error resolving zone: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while resolving the zone.",
            )

    @staticmethod
    def get_pincode(pincode: str):
        try:
            if not is_valid_pincode(pincode):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Invalid pincode",
                )

            details = PincodeService(get_db_session()).lookup(pincode)

            if details is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Pincode not serviceable",
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=details,
                message="successful",
            )

        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching pincode: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the pincode.",
            )
