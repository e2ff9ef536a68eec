"""API endpoints for the repo finder."""

import asyncio
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends

from repofinder.detector import Detector, get_default_detector
from repofinder.models.detection import DetectionRequest, DetectionResponse

logger = structlog.get_logger()

router = APIRouter()


def get_detector() -> Detector:
    """Dependency provider for the detector instance.

    Override this in tests to inject a mock detector:
        app.dependency_overrides[get_detector] = lambda: mock_detector

    Returns:
        The detector instance to use for the request.
    """
    return get_default_detector()


@router.post("/detect", response_model_exclude_none=True)
async def detect(
    request: DetectionRequest,
    detector_instance: Detector = Depends(get_detector),
) -> DetectionResponse:
    """Detect multi-leg repos in a ledger.

    Args:
        request: Transactions, upstream claims and optional settings
        detector_instance: Injected detector (via FastAPI Depends)

    Returns:
        DetectionResponse with detected repos and diagnostics.

    Error Handling:
        - Invalid request schema or settings: Returns 422 Validation Error (Pydantic)
        - Deadline already passed: Returns an empty, incomplete response
        - Detector exception: Logs error, returns empty response
    """
    logger.info(
        "received_ledger",
        transactions=len(request.transactions),
        claimed=len(request.claimed),
        custom_settings=request.settings is not None,
    )

    if request.settings is not None:
        detector_instance = Detector(
            config=request.settings.to_config(),
            search=detector_instance.search,
        )

    # Calculate timeout from the request deadline
    timeout_seconds: float | None = None
    if request.deadline is not None:
        deadline = request.deadline
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=UTC)
        remaining = (deadline - datetime.now(UTC)).total_seconds()
        if remaining <= 0:
            logger.warning("request_deadline_passed", deadline=str(request.deadline))
            return DetectionResponse.empty(completed=False)
        # Leave 0.5s buffer for response serialization
        timeout_seconds = max(remaining - 0.5, 0.1)

    ledger = request.ledger
    try:
        loop = asyncio.get_running_loop()
        work = loop.run_in_executor(
            None, detector_instance.detect, ledger, request.claimed, timeout_seconds
        )
        if timeout_seconds is not None:
            # Rounds stop at the deadline on their own; the extra second only
            # covers a single round that overruns it
            result = await asyncio.wait_for(work, timeout=timeout_seconds + 1.0)
        else:
            result = await work
    except TimeoutError:
        logger.warning(
            "detection_timeout",
            timeout_seconds=timeout_seconds,
            message="Detector exceeded deadline, returning empty response",
        )
        return DetectionResponse.empty(completed=False)
    except Exception:
        logger.exception(
            "detection_error",
            transactions=len(request.transactions),
            message="Detector raised an exception, returning empty response",
        )
        return DetectionResponse.empty()

    logger.info(
        "returning_repos",
        repos=len(result.repos),
        completed=result.completed,
    )
    return DetectionResponse.from_result(result)
