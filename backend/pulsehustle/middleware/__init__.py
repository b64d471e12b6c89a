from pulsehustle.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    record_cache_hit,
    record_cache_miss,
    record_gig_created,
    record_matching_job,
    record_operation_failure,
    record_payment,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "record_cache_hit",
    "record_cache_miss",
    "record_gig_created",
    "record_matching_job",
    "record_operation_failure",
    "record_payment",
]
