"""
Prometheus metrics for the normalization stage.

The duration histogram is the stage's observer: one observation per
processed event, already-keyed events included.
"""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

router = APIRouter(tags=["metrics"])


EVENT_PROCESSING_DURATION_SECONDS = Histogram(
    "event_normalizer_processing_duration_seconds",
    "Time spent normalizing a single event, in seconds",
    buckets=(0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1),
)

EVENTS_NORMALIZED_TOTAL = Counter(
    "event_normalizer_events_total",
    "Events passed through the normalization stage",
    ["result"],  # result: computed|skipped|failed
)


@router.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
