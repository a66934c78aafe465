import uvicorn
import asyncio
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from logger import logger
from utils.exception_handler import (
    handle_validation_error,
    handle_request_validation_error,
    custom_http_exception_handler,
)

from router import CommonRouter, DefaultRouter, StatusRouter

from database.db import init_models  # sync DB init

app = FastAPI(title="Carrier Rate Engine")

# Routers
app.include_router(CommonRouter)
app.include_router(StatusRouter)
app.include_router(DefaultRouter)

# Exception handlers
app.add_exception_handler(ValidationError, handle_validation_error)
app.add_exception_handler(RequestValidationError, handle_request_validation_error)
app.add_exception_handler(HTTPException, custom_http_exception_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------
# Startup event
# -------------------------------
@app.on_event("startup")
async def startup_event():
    loop = asyncio.get_running_loop()
    # Initialize DB safely in executor
    await loop.run_in_executor(None, init_models)
    logger.info(msg="database models initialised")


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
