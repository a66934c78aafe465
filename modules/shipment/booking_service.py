import http
import random
import string
import time
from datetime import timedelta
from decimal import Decimal
from psycopg2 import DatabaseError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import CHARGE_MANUAL_BOOKINGS
from context_manager.context import context_user_data
from database.db import time_now
from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.shipping_partner.shipping_partner_schema import PartnerConfig
from .shipment_schema import (
    BookingRequestModel,
    BookingResult,
    BookingType,
    CarrierBookingResponse,
)

# service
from modules.shipping_partner.shipping_partner_service import (
    carrier_adapters,
    partner_registry,
)
from modules.wallet.wallet_service import WalletLedger
from .shipment_repository import ShipmentRepository

from utils.events import (
    ORDER_STATUS_CHANGED,
    SHIPMENT_BOOKED,
    SHIPMENT_MANUAL_REQUIRED,
    event_publisher,
)


def manual_reference() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return "MB{}{}".format(int(time.time() * 1000), suffix)


def manual_instructions(config: PartnerConfig, reason: str) -> dict:
    return {
        "step1": "Contact {} customer service".format(config.name),
        "step2": "Provide shipment details for manual booking",
        "step3": "Update system with actual AWB received",
        "step4": "Contact support if issues persist",
        "error_reason": reason or "carrier booking failed",
    }


class BookingService:
    """
    Books a selected quote: funds check, one carrier attempt, manual
    placeholder when the carrier fails, then ledger debit and shipment
    record committed together.
    """

    def __init__(
        self,
        registry,
        adapters,
        ledger,
        repository,
        publisher=event_publisher,
        charge_manual: bool = CHARGE_MANUAL_BOOKINGS,
    ):
        self.registry = registry
        self.adapters = adapters
        self.ledger = ledger
        self.repository = repository
        self.publisher = publisher
        self.charge_manual = charge_manual

    @classmethod
    def for_session(cls, db: Session) -> "BookingService":
        return cls(
            registry=partner_registry,
            adapters=carrier_adapters,
            ledger=WalletLedger(db),
            repository=ShipmentRepository(db),
        )

    async def _attempt_carrier(self, request: BookingRequestModel, config) -> CarrierBookingResponse:
        adapter = self.adapters.get(config.carrier)
        if adapter is None:
            return CarrierBookingResponse(
                success=False, message="no integration for {}".format(config.name)
            )

        try:
            return await adapter.book(request.shipment, config)
        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="{} booking raised: {}".format(config.carrier.value, str(e)),
            )
            return CarrierBookingResponse(success=False, message=str(e))

    async def book(self, principal, request: BookingRequestModel) -> GenericResponseModel:
        quote = request.selected_quote
        order_id = request.shipment.order_id
        client_id = principal.client_id

        try:
            config = self.registry.resolve(quote.carrier)
            if config is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Unknown shipping partner",
                )

            if quote.total <= 0:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Invalid quote total",
                )

            # funds check happens before any carrier call
            balance = self.ledger.check_balance(client_id)
            if balance < quote.total:
                logger.info(
                    extra=context_user_data.get(),
                    msg="insufficient balance {} for order {} costing {}".format(
                        balance, order_id, quote.total
                    ),
                )
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Insufficient Balance",
                )

            response = await self._attempt_carrier(request, config)
            estimated_delivery = time_now() + timedelta(
                days=quote.estimated_days or config.estimated_days
            )

            if response.success:
                booking_type = BookingType.AUTOMATED
                amount = quote.total
                result = BookingResult(
                    booking_type=booking_type,
                    carrier=config.carrier,
                    order_id=order_id,
                    awb=response.awb,
                    tracking_url=response.tracking_url or config.tracking_link(response.awb),
                    estimated_delivery=estimated_delivery,
                    amount_charged=amount,
                )
            else:
                booking_type = BookingType.MANUAL_REQUIRED
                amount = quote.total if self.charge_manual else Decimal("0")
                result = BookingResult(
                    booking_type=booking_type,
                    carrier=config.carrier,
                    order_id=order_id,
                    manual_reference=manual_reference(),
                    instructions=manual_instructions(config, response.message),
                    estimated_delivery=estimated_delivery,
                    amount_charged=amount,
                )
                logger.info(
                    extra=context_user_data.get(),
                    msg="manual booking {} issued for order {}: {}".format(
                        result.manual_reference, order_id, response.message
                    ),
                )

            # ledger debit and shipment record commit as one unit
            try:
                if booking_type == BookingType.AUTOMATED or self.charge_manual:
                    result.ledger_entry = self.ledger.debit(
                        client_id,
                        amount,
                        reason="Shipping charge for order {}".format(order_id),
                        reference=result.reference,
                    )
                self.repository.record_booking(client_id, result, quote)
                self.repository.commit()
            except Exception:
                self.repository.rollback()
                raise

            self.publisher.publish(
                SHIPMENT_BOOKED
                if booking_type == BookingType.AUTOMATED
                else SHIPMENT_MANUAL_REQUIRED,
                client_id=client_id,
                order_id=order_id,
                carrier=config.carrier.value,
                reference=result.reference,
            )
            self.publisher.publish(
                ORDER_STATUS_CHANGED,
                client_id=client_id,
                order_id=order_id,
                status="booked",
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=result,
                message="Shipment booked"
                if booking_type == BookingType.AUTOMATED
                else "Manual booking required",
            )

        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error booking shipment: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while booking the shipment.",
            )

        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Unhandled error booking shipment: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An internal server error occurred. Please try again later.",
            )
