import json
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from rakshak.agents.decision_engine import AssistedStrategy, DecisionEngine
from rakshak.agents.notification_dispatcher import NotificationDispatcher
from rakshak.config.settings import Config, get_config
from rakshak.errors import ValidationError
from rakshak.providers.provider_factory import create_reasoning_client
from rakshak.security_middleware import (
    BodySizeLimitMiddleware,
    RateLimitMiddleware,
    RequestContextMiddleware,
)
from rakshak.tools.twilio_client import TwilioSMSGateway
from rakshak.utils.logging_context import setup_logging
from rakshak.validation.input_validator import validate_reading

logger = logging.getLogger("rakshak.server")


def build_decision_engine(config: Config) -> DecisionEngine:
    """Assisted strategy when a reasoning provider is usable, rules otherwise."""
    client = create_reasoning_client(config)
    primary = AssistedStrategy(client) if client is not None else None
    return DecisionEngine(primary=primary)


def build_notification_dispatcher(config: Config) -> NotificationDispatcher:
    gateway = None
    if config.twilio.is_configured:
        gateway = TwilioSMSGateway(
            account_sid=config.twilio.account_sid,
            auth_token=config.twilio.auth_token,
            from_number=config.twilio.phone_number,
            base_url=config.twilio.base_url,
            timeout=config.twilio.timeout_seconds,
        )
    else:
        logger.warning("Twilio not configured; emergency alerts will not be sent")
    if not config.emergency_contact:
        logger.warning("EMERGENCY_CONTACT not set; emergency alerts will not be sent")
    return NotificationDispatcher(gateway=gateway, destination=config.emergency_contact)


def create_app(
    config: Optional[Config] = None,
    engine: Optional[DecisionEngine] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Collaborators are injected so tests can substitute doubles; anything
    not given is built from configuration.
    """
    config = config or get_config()

    app = FastAPI(
        title="Rakshak AI - Accident Detection",
        version="1.0.0",
        description="Classifies vehicle sensor readings and alerts an emergency contact",
    )
    app.state.config = config
    app.state.engine = engine or build_decision_engine(config)
    app.state.dispatcher = dispatcher or build_notification_dispatcher(config)
    app.state.started_at = time.monotonic()

    if config.rate_limit.enabled:
        app.add_middleware(
            RateLimitMiddleware,
            max_requests=config.rate_limit.max_requests,
            window_seconds=config.rate_limit.window_seconds,
        )
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=config.validation.max_body_bytes)
    if config.api.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info(f"Rejected sensor payload: {exc}")
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Server error: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal analysis failure"})

    @app.on_event("shutdown")
    async def shutdown_event():
        primary = app.state.engine.primary
        if isinstance(primary, AssistedStrategy):
            await primary.client.close()
        await app.state.dispatcher.close()

    @app.post("/analyze")
    async def analyze(request: Request, background_tasks: BackgroundTasks):
        """
        Classify one sensor reading.

        The alert, when the verdict qualifies, is sent after the response
        as a background task; its outcome only reaches the logs.
        """
        body = await request.body()
        if len(body) > config.validation.max_body_bytes:
            return JSONResponse(status_code=413, content={"error": "Request body too large"})
        try:
            payload = json.loads(body or b"null")
        except ValueError as e:
            raise ValidationError("Request body must be valid JSON") from e

        reading = validate_reading(payload, config.validation.location_max_length)
        logger.info(
            f"Sensor data: impact={reading.impact:g} speed={reading.speed:g} "
            f"tilt={reading.tilt:g} location={reading.location!r}"
        )

        verdict = await app.state.engine.classify(reading)

        dispatcher: NotificationDispatcher = app.state.dispatcher
        notification = "not_attempted"
        if dispatcher.should_notify(verdict):
            background_tasks.add_task(dispatcher.maybe_notify, verdict, reading.location)
            notification = "scheduled"

        return {"success": True, "data": verdict.to_response(), "notification": notification}

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/metrics")
    async def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


def main():
    import uvicorn

    config = get_config()
    setup_logging(config.api.log_level)
    logger.info(f"Rakshak AI backend live on http://{config.api.host}:{config.api.port}")
    uvicorn.run(create_app(config), host=config.api.host, port=config.api.port)


if __name__ == "__main__":
    main()
