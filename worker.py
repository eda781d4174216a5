from typing import Optional
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from config import settings
from metrics import EVENT_PROCESSING_DURATION_SECONDS, EVENTS_NORMALIZED_TOTAL
from normalizer import EventKeyBuilder
from pipeline import NormalizationStage, run_through
from schemas import NormalizeRequest, NormalizeResponse, NormalizerConfig

# ======================================================
# Setup
# ======================================================

router = APIRouter(prefix="/internal/worker", tags=["internal"])
traffic_router = APIRouter(prefix="/internal", tags=["traffic"])

logger = logging.getLogger("eventkey.worker")


# ======================================================
# Security
# ======================================================

def verify_worker_secret(x_control_secret: Optional[str] = Header(None)):
    expected = settings.CONTROL_WORKER_SHARED_SECRET
    if not expected or x_control_secret != expected:
        raise HTTPException(status_code=401, detail="Invalid worker secret")


# ======================================================
# Dependencies
# ======================================================

def get_key_builder(request: Request) -> EventKeyBuilder:
    return request.app.state.key_builder


def get_normalizer_config(request: Request) -> NormalizerConfig:
    return request.app.state.normalizer_config


# ======================================================
# Worker Config Endpoint
# ======================================================

@router.get(
    "/config",
    dependencies=[Depends(verify_worker_secret)],
)
def get_worker_config(config: NormalizerConfig = Depends(get_normalizer_config)):
    """Active normalizer configuration, keyed the way config files are."""
    return config.model_dump(by_alias=True)


# ======================================================
# Traffic Normalization
# ======================================================

@traffic_router.post(
    "/traffic/normalize",
    response_model=NormalizeResponse,
    dependencies=[Depends(verify_worker_secret)],
)
async def normalize_traffic(
    payload: NormalizeRequest,
    builder: EventKeyBuilder = Depends(get_key_builder),
):
    """
    Fill the event key of every event in the batch.

    Guarantees:
    - One event out per event in, same order
    - Events that already carry a key are returned untouched
    """
    stage = NormalizationStage(
        builder,
        observer=EVENT_PROCESSING_DURATION_SECONDS,
        counter=EVENTS_NORMALIZED_TOTAL,
    )
    events = await run_through(stage, payload.events, queue_size=settings.STAGE_QUEUE_SIZE)
    logger.info(f"Normalized batch of {len(events)} event(s)")
    return NormalizeResponse(events=events)
