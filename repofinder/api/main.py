"""FastAPI application for the repo finder.

Serves multi-leg repo detection over HTTP. Ledgers are posted whole to
/detect; /health reports the package version and the detection limits the
service applies when a request carries no settings of its own.
"""

import os

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from repofinder import __version__
from repofinder.api.endpoints import get_detector, router
from repofinder.detector import Detector

logger = structlog.get_logger()

HOST = os.environ.get("REPOFINDER_HOST", "0.0.0.0")
PORT = int(os.environ.get("REPOFINDER_PORT", "8000"))
DEBUG = os.environ.get("REPOFINDER_DEBUG", "false").lower() in ("true", "1", "yes")

# Ledgers are posted in one piece; 50 MB covers a few hundred thousand rows
MAX_REQUEST_SIZE = 50 * 1024 * 1024

app = FastAPI(
    title="Repo Finder",
    description="Detects multi-leg repurchase agreements in settlement ledgers",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject ledgers whose body is larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        logger.warning("ledger_too_large", content_length=int(content_length))
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health(detector_instance: Detector = Depends(get_detector)) -> dict[str, object]:
    """Report liveness, version and the default detection limits."""
    config = detector_instance.config
    return {
        "status": "ok",
        "version": __version__,
        "maturityCap": config.maturity_cap,
        "transactionCap": config.transaction_cap,
        "interestBand": [config.interest_lower, config.interest_upper],
    }


def run() -> None:
    """Run the detection API server.

    Configuration via environment variables:
    - REPOFINDER_HOST: Host to bind to (default: 0.0.0.0)
    - REPOFINDER_PORT: Port to bind to (default: 8000)
    - REPOFINDER_DEBUG: Enable debug/reload mode (default: false)

    Detection limits are read separately, see DetectionConfig.from_env().
    """
    logger.info("repofinder_api_starting", host=HOST, port=PORT, reload=DEBUG)
    uvicorn.run(
        "repofinder.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
