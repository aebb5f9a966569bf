"""
HTTP adapter for the webhook interceptor.

Serves a single configured trigger: the request body is read once, run
through ``WebhookInterceptor`` and the augmented payload is returned as
the response body. Trigger lookup and secret storage belong to the host
system; here both come from ``Settings``.

Status codes:
    200  filter passed, body is the augmented payload
    417  declared filter not satisfied
    403  authentication failed
    400  undecodable request or payload
    500  decoded event has no branch augmentation
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .config.settings import Settings
from .utils.exceptions import (
    AuthenticationFailedError,
    InterceptorError,
    RequestBodyError,
    UnsupportedEventTypeError,
    WebhookDecodeError,
)
from .utils.logger import get_logger, setup_logging
from .webhook.handlers import WebhookInterceptor
from .webhook.models import TriggerSecret
from .webhook.request import RawRequest

logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    AuthenticationFailedError: 403,
    WebhookDecodeError: 400,
    RequestBodyError: 400,
    UnsupportedEventTypeError: 500,
}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Interceptor settings (read from the environment if omitted)
    """
    settings = settings or Settings.from_env()
    interceptor = WebhookInterceptor.from_settings(settings)
    secret = TriggerSecret.from_data(
        settings.secret_name,
        {"secretToken": settings.secret_token, "accessToken": settings.access_token},
    )

    app = FastAPI(title="Webhook Interceptor")

    @app.exception_handler(InterceptorError)
    async def interceptor_error_handler(request: Request, exc: InterceptorError) -> JSONResponse:
        status_code = ERROR_STATUS_CODES.get(type(exc), 500)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "trigger": settings.trigger_name}

    @app.post("/")
    async def intercept(request: Request) -> Response:
        body = await request.body()
        raw_request = RawRequest(request.headers, body, method=request.method)

        result = interceptor.handle(raw_request, settings.trigger_name, secret)

        if not result.passed:
            return JSONResponse(
                status_code=417,
                content={
                    "provider": result.provider.value,
                    "event_type": result.event_type,
                    "reason": result.reason.value,
                    "detail": result.detail,
                },
            )
        return Response(content=result.payload, media_type="application/json")

    return app


def main() -> None:
    """Run the interceptor HTTP adapter with uvicorn."""
    settings = Settings.from_env()
    setup_logging(level=settings.log_level, format_type=settings.log_format, log_file=settings.log_file)
    logger.info(
        f"Starting webhook interceptor for trigger {settings.trigger_name}",
        extra={"host": settings.server_host, "port": settings.server_port},
    )
    uvicorn.run(create_app(settings), host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    main()
