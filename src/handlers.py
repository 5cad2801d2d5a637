"""Kopf handlers for the SamplesResource singleton and its registry secret."""

import logging
import os
import sys
from pathlib import Path
from typing import Any

# Add src directory to path for imports when run as script by Kopf
_src_dir = Path(__file__).parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import kopf
from prometheus_client import start_http_server

from constants import (
    DEFAULT_BOOTSTRAP_DELAY_SECONDS,
    SAMPLES_GROUP,
    SAMPLES_PLURAL,
    SAMPLES_REGISTRY_CREDENTIALS,
    SAMPLES_VERSION,
)
from metrics import init_metrics, set_operator_info
from models import ConditionStatus, ConditionType, OperatorError, SamplesResource
from reconciler import SamplesResourceEvent, SecretEvent
from state import state, get_reconciler
from utils import get_operator_namespace

logger = logging.getLogger(__name__)

# Operator version
OPERATOR_VERSION = "0.1.0"

RESYNC_INTERVAL_SECONDS = float(os.environ.get("SAMPLES_RESYNC_INTERVAL_SECONDS", "60"))


def _is_deleted(event: dict[str, Any]) -> bool:
    return event.get("type") == "DELETED"


def _is_registry_secret(name: str, **_: Any) -> bool:
    return name == SAMPLES_REGISTRY_CREDENTIALS


def _samples_not_applied(body: kopf.Body, **_: Any) -> bool:
    """True while the SamplesExist condition is not True."""
    resource = SamplesResource.from_dict(dict(body))
    return resource.condition(ConditionType.SAMPLES_EXIST).status is not ConditionStatus.TRUE


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure operator settings on startup."""
    # Reduce logging noise
    settings.posting.level = logging.WARNING
    # The SamplesResource and the registry secret both live in the
    # operator namespace; WATCH_NAMESPACE="" with no pod namespace means
    # cluster-wide
    namespace = get_operator_namespace()
    watch_namespace = os.environ.get("WATCH_NAMESPACE", namespace)
    if watch_namespace:
        settings.watching.namespaces = [watch_namespace]
    else:
        settings.watching.clusterwide = True

    # Start Prometheus metrics server
    metrics_port = int(os.environ.get("METRICS_PORT", "9090"))
    try:
        start_http_server(metrics_port)
        logger.info("Prometheus metrics server started on port %d", metrics_port)
    except OSError as e:
        logger.warning("Failed to start metrics server on port %d: %s", metrics_port, e)

    init_metrics()
    set_operator_info(OPERATOR_VERSION, namespace)

    delay = float(
        os.environ.get(
            "SAMPLES_BOOTSTRAP_DELAY_SECONDS", str(DEFAULT_BOOTSTRAP_DELAY_SECONDS)
        )
    )
    state.schedule_bootstrap(delay)

    logger.info("Samples operator started (version %s)", OPERATOR_VERSION)


@kopf.on.cleanup()
def cleanup(**_: Any) -> None:
    """Clean up resources on operator shutdown."""
    logger.info("Samples operator shutting down")
    state.close()


@kopf.on.event(SAMPLES_GROUP, SAMPLES_VERSION, SAMPLES_PLURAL)
def samples_resource_event(
    event: dict[str, Any],
    name: str,
    namespace: str,
    **_: Any,
) -> None:
    """Handle SamplesResource add/modify/delete events."""
    resource = SamplesResource.from_dict(event["object"])
    try:
        get_reconciler().handle(
            SamplesResourceEvent(resource=resource, deleted=_is_deleted(event))
        )
    except OperatorError as e:
        # kopf does not retry event handlers; the resync timer picks this up
        logger.error(f"Failed to reconcile SamplesResource {namespace}/{name}: {e}")


@kopf.on.event("v1", "secrets", when=_is_registry_secret)
def registry_secret_event(
    event: dict[str, Any],
    name: str,
    namespace: str,
    **_: Any,
) -> None:
    """Handle registry credential secret add/modify/delete events."""
    try:
        get_reconciler().handle(
            SecretEvent(secret=dict(event["object"]), deleted=_is_deleted(event))
        )
    except OperatorError as e:
        logger.error(f"Failed to mirror registry secret {namespace}/{name}: {e}")


@kopf.timer(
    SAMPLES_GROUP,
    SAMPLES_VERSION,
    SAMPLES_PLURAL,
    interval=RESYNC_INTERVAL_SECONDS,
    when=_samples_not_applied,
)
def resync_samples_resource(
    body: kopf.Body,
    namespace: str,
    name: str,
    **_: Any,
) -> None:
    """Reprocess a SamplesResource whose last pass did not complete."""
    logger.debug(f"Resyncing SamplesResource: {namespace}/{name}")
    resource = SamplesResource.from_dict(dict(body))
    try:
        get_reconciler().handle(SamplesResourceEvent(resource=resource))
    except OperatorError as e:
        logger.error(f"Resync failed for SamplesResource {namespace}/{name}: {e}")


def main() -> None:
    """Entry point for running the operator."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Kopf will be run via the CLI, but this allows direct invocation for testing
    logger.info("Starting samples operator...")
    logger.info("Use 'kopf run src/handlers.py' to run the operator")
    sys.exit(0)


if __name__ == "__main__":
    main()
