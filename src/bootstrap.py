"""Default SamplesResource bootstrap.

Shortly after startup the operator creates a default SamplesResource unless
one has already been observed through the event stream. The check and the
create run under the reconciler's lock so a real SamplesResource event being
processed at the same time cannot be overwritten by the default.
"""

import logging
import threading
import time
from collections.abc import Callable

from conditions import ConditionManager
from constants import SAMPLES_RESOURCE_NAME, X86
from context import ReconcileContext
from metrics import BOOTSTRAP_ATTEMPTS
from models import (
    AlreadyExistsError,
    ConditionStatus,
    ConditionType,
    FailureKind,
    InstallType,
    SamplesResource,
    SamplesResourceSpec,
    StoreError,
)
from stores import SamplesResourceStore

logger = logging.getLogger(__name__)


class DelayedTask:
    """One-shot background task fired after a delay.

    A failing run is retried with exponential backoff, bounded by
    max_retries. cancel() is honoured while waiting for the delay or between
    retries, never in the middle of a run.
    """

    def __init__(
        self,
        name: str,
        delay: float,
        func: Callable[[], object],
        max_retries: int = 3,
        retry_delay: float = 1.0,
        backoff: float = 2.0,
    ) -> None:
        self.name = name
        self._delay = delay
        self._func = func
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._backoff = backoff
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def _run(self) -> None:
        try:
            if self._cancelled.wait(self._delay):
                logger.debug("Task %s cancelled before it fired", self.name)
                return

            current_delay = self._retry_delay
            for attempt in range(self._max_retries + 1):
                try:
                    self._func()
                    return
                except Exception as e:
                    if attempt < self._max_retries:
                        logger.warning(
                            "Attempt %d/%d failed for %s: %s. Retrying in %.1fs...",
                            attempt + 1,
                            self._max_retries + 1,
                            self.name,
                            e,
                            current_delay,
                        )
                        if self._cancelled.wait(current_delay):
                            return
                        current_delay *= self._backoff
                    else:
                        logger.error(
                            "All %d attempts failed for %s: %s",
                            self._max_retries + 1,
                            self.name,
                            e,
                        )
        finally:
            self._finished.set()


class DefaultResourceBootstrapper:
    """Creates the default SamplesResource when none has been observed."""

    def __init__(
        self,
        store: SamplesResourceStore,
        conditions: ConditionManager,
        context: ReconcileContext,
        namespace: str,
    ) -> None:
        self._store = store
        self._conditions = conditions
        self._context = context
        self._namespace = namespace

    def default_resource(self) -> SamplesResource:
        """x86_64 only, CentOS distribution."""
        return SamplesResource(
            name=SAMPLES_RESOURCE_NAME,
            namespace=self._namespace,
            spec=SamplesResourceSpec(
                architectures=[X86],
                install_type=InstallType.CENTOS.value,
            ),
        )

    def create_default_if_needed(self) -> bool:
        """Create the default SamplesResource unless one was already seen.

        Returns:
            True if the default resource was created.

        Raises:
            StoreError: creation failed for a reason other than the resource
                already existing.
            ConditionUpdateError: the SamplesExist condition could not be set.
        """
        # the event handler sets samples_resource under the same lock once
        # it has fully processed a SamplesResource
        with self._context.lock:
            if self._context.samples_resource is not None:
                logger.info("SamplesResource already observed, skipping default creation")
                BOOTSTRAP_ATTEMPTS.labels(outcome="skipped").inc()
                return False

            resource = self.default_resource()
            logger.info("Creating default SamplesResource: %s/%s", self._namespace, resource.name)
            start_time = time.monotonic()
            try:
                created = self._store.create(resource)
            except AlreadyExistsError:
                logger.info(
                    "Default SamplesResource already exists, "
                    "not retrying creation"
                )
                BOOTSTRAP_ATTEMPTS.labels(outcome="already_exists").inc()
                return False
            except StoreError as e:
                BOOTSTRAP_ATTEMPTS.labels(outcome="error").inc()
                self._conditions.report_failure(
                    resource,
                    FailureKind.SAMPLES_UPDATE_FAILED,
                    e,
                    "failed creating default resource",
                )
                raise

            created = self._conditions.set_condition(
                created, ConditionType.SAMPLES_EXIST, ConditionStatus.TRUE
            )
            self._context.samples_resource = created
            BOOTSTRAP_ATTEMPTS.labels(outcome="created").inc()
            logger.info(
                "Created default SamplesResource in %.2fs", time.monotonic() - start_time
            )
            return True

    def schedule(self, delay: float) -> DelayedTask:
        """Start the one-shot bootstrap task."""
        task = DelayedTask("samples-bootstrap", delay, self.create_default_if_needed)
        task.start()
        return task
