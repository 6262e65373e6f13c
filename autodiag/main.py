import structlog
import uvicorn
from fastapi import FastAPI

from autodiag import config
from autodiag.api.diagnose import router as diagnose_router
from autodiag.api.symptoms import router as symptoms_router
from autodiag.log import configure_logging

configure_logging(config.log_level(), config.log_format())
logger = structlog.get_logger(__name__)

app = FastAPI(title="Automotive Symptom Diagnosis API")

app.include_router(diagnose_router)
app.include_router(symptoms_router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.on_event("startup")
def on_startup():
    # Missing credentials are reported per request on /diagnose.
    try:
        config.assistant_settings()
    except config.ConfigurationError as e:
        logger.warning("assistant_not_configured", error=str(e))


def run() -> None:
    uvicorn.run(
        app,
        host=config.server_host(),
        port=config.server_port(),
        log_level=config.log_level().lower(),
    )


if __name__ == "__main__":
    run()
