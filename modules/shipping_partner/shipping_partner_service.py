import http
from psycopg2 import DatabaseError
from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session
from logger import logger

# schema
from schema.base import GenericResponseModel
from .shipping_partner_schema import Carrier, PartnerConfigUpdateModel

# data
from data.courier_service_mapping import build_adapters

from .partner_config_store import PartnerConfigStore
from .partner_registry import PartnerRegistry


# process-wide: the cache outlives requests, the store reads the request session
partner_registry = PartnerRegistry(PartnerConfigStore())

# adapters own their token and waybill state for the life of the process
carrier_adapters = build_adapters()


class ShippingPartnerService:

    @staticmethod
    def get_config(carrier_name: str):
        try:
            config = partner_registry.resolve(carrier_name)

            if config is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Unknown shipping partner",
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=config,
                message="successful",
            )

        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching partner config: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the shipping partner.",
            )

    @staticmethod
    def update_config(carrier_name: str, changes: PartnerConfigUpdateModel):
        try:
            carrier = Carrier.parse(carrier_name)

            if carrier is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Unknown shipping partner",
                )

            db = get_db_session()
            config = PartnerConfigStore(db).update(carrier, changes)

            # commit first so a concurrent resolve cannot re-cache the old row
            db.commit()
            partner_registry.invalidate(carrier)

            logger.info(
                extra=context_user_data.get(),
                msg="partner config updated for {}".format(carrier.value),
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=config,
                message="Shipping partner updated",
            )

        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error updating partner config: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while updating the shipping partner.",
            )

        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Unhandled error updating partner config: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while updating the shipping partner.",
            )
