from prometheus_client import Counter, Histogram, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "momentum_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "momentum_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

ANALYSES_TOTAL = get_or_create_metric(
    "momentum_analyses_total",
    "Inputs analysed, by outcome",
    Counter,
    labelnames=["status"],
)

INTENT_SOURCE_TOTAL = get_or_create_metric(
    "momentum_intent_source_total",
    "Intent results by classifier tier and label",
    Counter,
    labelnames=["source", "intent"],
)

ACTIONS_EXECUTED_TOTAL = get_or_create_metric(
    "momentum_actions_executed_total",
    "Executed actions by category and outcome",
    Counter,
    labelnames=["category", "outcome"],
)

RECENT_ANALYSES = get_or_create_metric(
    "momentum_recent_analyses", "Analyses kept in the recent buffer", Gauge
)
