"""Create-or-update of samples objects in the shared namespace."""

import logging
from typing import Any

from constants import OPENSHIFT_NAMESPACE
from metrics import SYNCED_OBJECTS
from models import NotFoundError
from stores import ImageStreamStore, TemplateStore
from utils import object_name, object_resource_version

logger = logging.getLogger(__name__)


def create_or_update(
    store: ImageStreamStore | TemplateStore,
    kind: str,
    body: dict[str, Any],
) -> str:
    """Ensure an object matching body exists in the openshift namespace.

    An existing object is replaced in place, carrying its resourceVersion
    forward so the update passes optimistic concurrency checks.

    Returns:
        "create" or "update"
    """
    name = object_name(body)
    try:
        existing = store.get(OPENSHIFT_NAMESPACE, name)
    except NotFoundError:
        existing = None

    if existing is None:
        store.create(OPENSHIFT_NAMESPACE, body)
        logger.info("Created %s: %s", kind, name)
        operation = "create"
    else:
        body.setdefault("metadata", {})["resourceVersion"] = object_resource_version(
            existing
        )
        store.update(OPENSHIFT_NAMESPACE, body)
        logger.info("Updated %s: %s", kind, name)
        operation = "update"

    SYNCED_OBJECTS.labels(kind=kind, operation=operation).inc()
    return operation
