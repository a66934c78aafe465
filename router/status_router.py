import http
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from database.db import db_engine
from logger import logger

# service
from modules.shipping_partner.shipping_partner_service import carrier_adapters

StatusRouter = APIRouter(tags=["health_checks"])


# liveness only, no dependencies touched
@StatusRouter.get("/status", status_code=http.HTTPStatus.OK)
async def status_check():
    return JSONResponse(status_code=http.HTTPStatus.OK, content={"status": "OK"})


@StatusRouter.get("/deepstatus", status_code=http.HTTPStatus.OK)
async def deep_status_check():
    """Readiness: the rate database answers and every carrier has an adapter wired."""
    carriers = sorted(carrier.value for carrier in carrier_adapters)

    try:
        with db_engine.connect() as connection:
            is_db_ok = connection.execute(text("SELECT 'true'")).scalar() == "true"
    except SQLAlchemyError as e:
        logger.error(msg="deep status db check failed: {}".format(str(e)))
        is_db_ok = False

    status_code = (
        http.HTTPStatus.OK if is_db_ok else http.HTTPStatus.SERVICE_UNAVAILABLE
    )
    return JSONResponse(
        status_code=status_code,
        content={"db": is_db_ok, "carriers": carriers},
    )
