"""Prometheus metrics for the samples operator."""

from prometheus_client import Counter, Histogram, Gauge, Info

# Reconciliation metrics
RECONCILE_TOTAL = Counter(
    "samples_operator_reconcile_total",
    "Total number of handled events",
    ["event", "status"],
)

RECONCILE_DURATION = Histogram(
    "samples_operator_reconcile_duration_seconds",
    "Time spent handling an event",
    ["event"],
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

RECONCILE_IN_PROGRESS = Gauge(
    "samples_operator_reconcile_in_progress",
    "Number of events currently being handled",
    ["event"],
)

STALE_EVENTS = Counter(
    "samples_operator_stale_events_total",
    "Events dropped because their resourceVersion was not newer",
    ["event"],
)

# Store metrics
STORE_CALLS = Counter(
    "samples_operator_store_calls_total",
    "Total number of resource store calls",
    ["kind", "operation", "status"],
)

SYNCED_OBJECTS = Counter(
    "samples_operator_synced_objects_total",
    "Imagestreams and templates processed during content synchronization",
    ["kind", "operation"],
)

# Condition metrics
CONDITION_UPDATES = Counter(
    "samples_operator_condition_updates_total",
    "Condition writes on the SamplesResource",
    ["condition", "status"],
)

CONDITION_CONFLICTS = Counter(
    "samples_operator_condition_conflicts_total",
    "Condition writes that hit an update conflict",
    ["condition"],
)

# Bootstrap metrics
BOOTSTRAP_ATTEMPTS = Counter(
    "samples_operator_bootstrap_attempts_total",
    "Default SamplesResource creation attempts",
    ["outcome"],
)

# Operator info
OPERATOR_INFO = Info(
    "samples_operator",
    "Information about the samples operator",
)


def set_operator_info(version: str, namespace: str) -> None:
    """Set operator info labels."""
    OPERATOR_INFO.info({"version": version, "namespace": namespace})


def init_metrics() -> None:
    """Initialize all metrics with zero values.

    Prometheus metrics with labels don't appear until used.
    This ensures all metrics are visible immediately at startup.
    """
    events = ["samplesresource", "secret"]
    statuses = ["success", "error"]

    for event in events:
        RECONCILE_IN_PROGRESS.labels(event=event).set(0)
        RECONCILE_DURATION.labels(event=event)
        STALE_EVENTS.labels(event=event)
        for status in statuses:
            RECONCILE_TOTAL.labels(event=event, status=status)

    for kind in ["imagestream", "template"]:
        for operation in ["create", "update", "skip"]:
            SYNCED_OBJECTS.labels(kind=kind, operation=operation)

    for condition in ["SamplesExist", "ImportCredentialsExist"]:
        CONDITION_CONFLICTS.labels(condition=condition)
        for status in ["True", "False", "Unknown"]:
            CONDITION_UPDATES.labels(condition=condition, status=status)

    for outcome in ["created", "already_exists", "skipped", "error"]:
        BOOTSTRAP_ATTEMPTS.labels(outcome=outcome)
