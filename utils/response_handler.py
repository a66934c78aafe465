from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from schema.base import GenericResponseModel

from context_manager.context import context_user_data

from logger import logger


def build_api_response(generic_response: GenericResponseModel) -> JSONResponse:
    """
    Render a service result as the API envelope {status, message, data}.
    The status code travels as the HTTP status; server-side failures are
    logged as errors so a rejected quote or booking stays at info level.
    """
    status_code = int(generic_response.status_code)

    try:
        content = jsonable_encoder(generic_response, exclude={"status_code"})
    except Exception as e:
        logger.error(
            extra=context_user_data.get(),
            msg="could not encode response: {}".format(str(e)),
        )
        return JSONResponse(
            status_code=status_code,
            content={
                "status": False,
                "message": generic_response.message,
                "data": None,
            },
        )

    log = logger.error if status_code >= 500 else logger.info
    log(
        extra=context_user_data.get(),
        msg="response {}: {}".format(status_code, generic_response.message),
    )

    return JSONResponse(status_code=status_code, content=content)
