import time
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# Define metrics (names follow Prometheus conventions)
REQ_COUNT = Counter("http_requests_total", "Total HTTP requests", ["path","method","code"])
REQ_LATENCY = Histogram("http_request_duration_seconds", "Request latency", ["path","method"])

# Outbound integrations
SUBMISSIONS = Counter(
    "rules_engine_submissions_total", "Observation submissions to the rules engine", ["client","outcome"]
)
BATCH_SIZE = Histogram(
    "rules_engine_batch_size", "Observations per batch submission", buckets=(1, 5, 10, 25, 50, 100, 250)
)
ADDRESS_VALIDATIONS = Counter(
    "address_validations_total", "Address validation attempts", ["validator","outcome"]
)

def record_submission(client: str, success: bool) -> None:
    SUBMISSIONS.labels(client=client, outcome="success" if success else "failure").inc()

def record_validation(validator: str, valid: bool) -> None:
    ADDRESS_VALIDATIONS.labels(validator=validator, outcome="valid" if valid else "invalid").inc()

class PromMiddleware(BaseHTTPMiddleware):
    """
    Measures latency and counts requests.
    """
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = time.perf_counter() - start

        # Use raw path to prevent label explosion in a real app (consider templating)
        path = request.url.path
        method = request.method
        code = str(response.status_code)

        REQ_COUNT.labels(path=path, method=method, code=code).inc()
        REQ_LATENCY.labels(path=path, method=method).observe(elapsed)
        return response

async def metrics_endpoint(request: Request):
    """
    GET /v1/metrics, scraped by Prometheus.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
