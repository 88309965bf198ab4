"""Alert service entrypoint."""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from services.alert_api.presentation.http.routes import router

app = FastAPI(title="Fire Watch Alert API", version="0.1.0")
app.include_router(router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request,
    error: RequestValidationError,
) -> JSONResponse:
    message = (
        "Invalid alert data"
        if request.url.path.startswith("/alerts")
        else "Invalid request data"
    )
    return JSONResponse(
        status_code=400,
        content={"message": message, "errors": jsonable_encoder(error.errors())},
    )
