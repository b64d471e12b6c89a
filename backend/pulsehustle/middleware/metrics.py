"""
Prometheus Metrics

HTTP metrics come from ``PrometheusMiddleware``; domain metrics are bumped by
the services through the small ``record_*`` helpers below. Everything is
registered under the ``pulsehustle`` namespace:

    pulsehustle_http_requests_total{method, route, status}
    pulsehustle_http_request_duration_seconds{method, route}
    pulsehustle_http_requests_in_flight
    pulsehustle_match_cache_lookups_total{result}        hit | miss
    pulsehustle_gigs_created_total
    pulsehustle_payments_recorded_total{status}
    pulsehustle_matching_jobs_total{outcome}             completed | failed
    pulsehustle_matching_job_duration_seconds
    pulsehustle_operation_failures_total{kind}           envelope error_kind

Usage:
    setup_metrics(app)     # middleware + GET /metrics
"""

import time
import logging

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger(__name__)

NAMESPACE = "pulsehustle"
UNMATCHED_ROUTE = "unmatched"

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests by route template and status code",
    ["method", "route", "status"],
    namespace=NAMESPACE,
)

HTTP_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "route"],
    namespace=NAMESPACE,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

HTTP_IN_FLIGHT = Gauge(
    "http_requests_in_flight",
    "Requests currently being served",
    namespace=NAMESPACE,
)

MATCH_CACHE_LOOKUPS = Counter(
    "match_cache_lookups_total",
    "Match listing cache lookups",
    ["result"],
    namespace=NAMESPACE,
)

GIGS_CREATED = Counter(
    "gigs_created_total",
    "Gigs created, directly or through a gig payment",
    namespace=NAMESPACE,
)

PAYMENTS_RECORDED = Counter(
    "payments_recorded_total",
    "Payments recorded by initial status",
    ["status"],
    namespace=NAMESPACE,
)

MATCHING_JOBS = Counter(
    "matching_jobs_total",
    "Matching jobs by final outcome",
    ["outcome"],
    namespace=NAMESPACE,
)

MATCHING_DURATION = Histogram(
    "matching_job_duration_seconds",
    "Time to score and rank profiles for one matching job",
    namespace=NAMESPACE,
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)

OPERATION_FAILURES = Counter(
    "operation_failures_total",
    "Failed service operations by error kind",
    ["kind"],
    namespace=NAMESPACE,
)


def route_template(request: Request) -> str:
    """The matched route path (``/api/gigs/{gig_id}``), never the raw URL."""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        HTTP_IN_FLIGHT.inc()
        started = time.perf_counter()
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            HTTP_IN_FLIGHT.dec()
            route = route_template(request)
            HTTP_LATENCY.labels(method=request.method, route=route).observe(time.perf_counter() - started)
            HTTP_REQUESTS.labels(method=request.method, route=route, status=status).inc()


async def metrics_endpoint(request: Request) -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def setup_metrics(app: FastAPI) -> None:
    app.add_middleware(PrometheusMiddleware)
    app.add_route("/metrics", metrics_endpoint, methods=["GET"])
    logger.info("Prometheus metrics enabled at /metrics")


def record_cache_hit() -> None:
    MATCH_CACHE_LOOKUPS.labels(result="hit").inc()


def record_cache_miss() -> None:
    MATCH_CACHE_LOOKUPS.labels(result="miss").inc()


def record_gig_created() -> None:
    GIGS_CREATED.inc()


def record_payment(status: str) -> None:
    PAYMENTS_RECORDED.labels(status=status).inc()


def record_matching_job(outcome: str, duration: float) -> None:
    MATCHING_JOBS.labels(outcome=outcome).inc()
    MATCHING_DURATION.observe(duration)


def record_operation_failure(kind: str) -> None:
    OPERATION_FAILURES.labels(kind=kind or "internal").inc()
