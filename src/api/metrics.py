from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # Counters register under the name without the _total suffix
        existing = REGISTRY._names_to_collectors
        return existing.get(name) or existing[f"{name}_total"]


REQUESTS_TOTAL = get_or_create_metric(
    "study_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "study_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

DRAFTS_EXTRACTED_TOTAL = get_or_create_metric(
    "study_drafts_extracted_total", "Material drafts produced by extraction", Counter
)

EXTRACTION_FAILURES_TOTAL = get_or_create_metric(
    "study_extraction_failures_total",
    "Extraction turns that ended in an error message",
    Counter,
    labelnames=["kind"],
)

MATERIALS_CREATED_TOTAL = get_or_create_metric(
    "study_materials_created_total",
    "Materials persisted",
    Counter,
    labelnames=["source"],
)
