import asyncio
import logging
from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auth import router as auth_router
from core import db, settings
from reports import router as reports_router
from telemetry import router as telemetry_router
from telemetry import service as telemetry_service
from telemetry.subscriber import BrokerUrlError, TelemetrySubscriber

settings.configure_logging()
logger = logging.getLogger(__name__)


def build_subscriber() -> TelemetrySubscriber | None:
    if not settings.mqtt_enabled():
        logger.info("mqtt_disabled")
        return None
    try:
        return TelemetrySubscriber(
            telemetry_service.store(),
            broker_url=settings.mqtt_broker_url(),
            topic=settings.mqtt_topic(),
            qos=settings.mqtt_qos(),
            client_id=settings.mqtt_client_id(),
            reconnect_delays=settings.mqtt_reconnect_delays(),
        )
    except BrokerUrlError:
        # History stays readable without ingestion.
        logger.exception("mqtt_config_invalid url=%s", settings.mqtt_broker_url())
        return None


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Hydrate the message log before anything can append to it.
    telemetry_service.init_store()

    if db.database_configured():
        try:
            await db.init_pool()
            await db.ensure_schema()
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError):
            # History and ingestion keep running; account routes fail per request.
            logger.exception("database_unavailable account_endpoints_unavailable=true")
    else:
        logger.warning("database_not_configured account_endpoints_unavailable=true")

    subscriber = build_subscriber()
    if subscriber is not None:
        subscriber.start()
    try:
        yield
    finally:
        if subscriber is not None:
            subscriber.stop()
        await db.close_pool()
        telemetry_service.reset_store()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(telemetry_router.router, tags=["telemetry"])
app.include_router(reports_router.router, tags=["reports"])
app.include_router(auth_router.router, tags=["auth"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
