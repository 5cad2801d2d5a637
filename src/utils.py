"""Utility functions for the samples operator."""

import datetime
import os
from collections.abc import Mapping
from typing import Any

from constants import SERVICE_ACCOUNT_NAMESPACE_FILE


def now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.datetime.now(datetime.UTC).isoformat()


def parse_resource_version(value: str | None) -> int:
    """Convert a resourceVersion to an integer for ordering.

    Missing or non-numeric versions compare as 0.

    Example: '1234' -> 1234, '' -> 0
    """
    try:
        return int(value or "")
    except (ValueError, TypeError):
        return 0


def is_newer_version(incoming: str | None, current: str | None) -> bool:
    """Check whether an incoming resourceVersion is strictly newer."""
    return parse_resource_version(incoming) > parse_resource_version(current)


def object_name(body: Mapping[str, Any]) -> str:
    """Return metadata.name of a Kubernetes object body."""
    return (body.get("metadata") or {}).get("name", "")


def object_resource_version(body: Mapping[str, Any]) -> str:
    """Return metadata.resourceVersion of a Kubernetes object body."""
    return (body.get("metadata") or {}).get("resourceVersion", "")


def get_operator_namespace() -> str:
    """Namespace the operator (and its SamplesResource) lives in.

    POD_NAMESPACE wins; otherwise the service account namespace file is read.
    """
    namespace = os.environ.get("POD_NAMESPACE", "")
    if namespace:
        return namespace
    try:
        with open(SERVICE_ACCOUNT_NAMESPACE_FILE, encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return ""
