"""Status condition management for the SamplesResource.

Conditions are only written when their status actually changes, so repeated
events with the same outcome do not flood the API server with no-op writes.
A write that loses an optimistic concurrency race is retried exactly once
against a freshly fetched copy of the resource.
"""

import logging

from metrics import CONDITION_CONFLICTS, CONDITION_UPDATES
from models import (
    ConditionStatus,
    ConditionType,
    ConditionUpdateError,
    ConflictError,
    FailureKind,
    SamplesResource,
    StoreError,
)
from stores import SamplesResourceStore
from utils import now_iso

logger = logging.getLogger(__name__)


def _apply_condition(
    resource: SamplesResource,
    condition_type: ConditionType,
    status: ConditionStatus,
    now: str,
    message: str = "",
) -> None:
    """Stamp and store a condition transition on resource (in place)."""
    condition = resource.condition(condition_type)
    condition.status = status
    condition.last_update_time = now
    condition.last_transition_time = now
    condition.message = message
    resource.condition_update(condition)


class ConditionManager:
    """Applies condition transitions to the SamplesResource record."""

    def __init__(self, store: SamplesResourceStore) -> None:
        self._store = store

    def _write(
        self, resource: SamplesResource, condition_type: ConditionType
    ) -> SamplesResource:
        stored = self._store.update(resource)
        status = resource.condition(condition_type).status
        CONDITION_UPDATES.labels(
            condition=condition_type.value,
            status=status.value if status else "",
        ).inc()
        return stored

    def set_condition(
        self,
        resource: SamplesResource,
        condition_type: ConditionType,
        status: ConditionStatus,
        message: str = "",
    ) -> SamplesResource:
        """Move a condition to status and persist it.

        The transition is applied to resource in place. Returns the stored
        resource, or resource itself when the condition already had the
        requested status. After a direct write resource also takes the new
        resourceVersion; after a conflict retry it keeps its own, since the
        re-fetched revision may carry a newer spec.

        Any failed write is recorded as an Unknown SamplesExist condition
        (best-effort) before ConditionUpdateError is raised.

        Raises:
            ConditionUpdateError: the write failed, or the single retry after
                a conflict failed.
        """
        if resource.condition(condition_type).status is status:
            return resource

        now = now_iso()
        _apply_condition(resource, condition_type, status, now, message)
        try:
            stored = self._write(resource, condition_type)
        except ConflictError as e:
            logger.warning(
                "Conflict updating %s condition, retrying once: %s",
                condition_type.value,
                e,
            )
            CONDITION_CONFLICTS.labels(condition=condition_type.value).inc()
        except StoreError as e:
            raise self._failed(
                resource,
                e,
                f"failed adding {condition_type.value} condition to samples resource",
            ) from e
        else:
            resource.resource_version = stored.resource_version
            return stored

        try:
            latest = self._store.get(resource.name, resource.namespace)
        except StoreError as e:
            raise self._failed(
                resource, e, "failed to retrieve samples resource after update conflict"
            ) from e

        _apply_condition(latest, condition_type, status, now, message)
        try:
            stored = self._write(latest, condition_type)
        except StoreError as e:
            # just give up this time
            raise self._failed(
                latest, e, "failed to update status after conflict retry"
            ) from e

        # resource keeps its own version; the stored revision may carry a
        # spec the caller never saw
        return stored

    def _failed(
        self, resource: SamplesResource, error: StoreError, description: str
    ) -> ConditionUpdateError:
        """Record a failed condition write and build the error to raise."""
        self.report_failure(resource, FailureKind.SAMPLES_UPDATE_FAILED, error, description)
        return ConditionUpdateError(f"{description}: {error}")

    def report_failure(
        self,
        resource: SamplesResource,
        failure: FailureKind,
        error: Exception,
        description: str,
    ) -> None:
        """Record a failure as an Unknown condition carrying its message.

        The caller still propagates the original error; a failure to write
        the condition is only logged.
        """
        message = f"{description}: {error}"
        logger.error(message)

        condition_type = failure.condition_type
        if resource.condition(condition_type).status is ConditionStatus.UNKNOWN:
            return

        _apply_condition(
            resource, condition_type, ConditionStatus.UNKNOWN, now_iso(), message
        )
        try:
            stored = self._write(resource, condition_type)
        except StoreError as e:
            logger.error("Failed to record error condition on SamplesResource: %s", e)
            return
        resource.resource_version = stored.resource_version
