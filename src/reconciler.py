"""Reconciliation of samples content against the SamplesResource singleton.

Events arrive one at a time: changes to the SamplesResource, and changes to
the registry credential secret. A SamplesResource change walks the content
root for every configured architecture and creates or updates each
imagestream and template in the openshift namespace. The outcome is reported
through the SamplesExist condition; a failed pass leaves the last-applied
resource untouched so the same event can be reprocessed from scratch.
"""

import copy
import logging
import os
import time
from dataclasses import dataclass

from bootstrap import DefaultResourceBootstrapper
from conditions import ConditionManager
from constants import (
    IMAGESTREAMS_DIR,
    SAMPLES_RESOURCE_NAME,
    TEMPLATES_DIR,
    X86,
)
from content import ContentReader, get_base_dir
from context import ReconcileContext
from metrics import (
    RECONCILE_DURATION,
    RECONCILE_IN_PROGRESS,
    RECONCILE_TOTAL,
    STALE_EVENTS,
    SYNCED_OBJECTS,
)
from models import (
    ConditionStatus,
    ConditionType,
    ConfigurationError,
    ContentError,
    FailureKind,
    InstallType,
    OperatorError,
    SamplesResource,
    SamplesResourceSpec,
    SecretBody,
)
from resources.imagestream import ensure_imagestream
from resources.secret import RegistrySecretMirror
from resources.template import ensure_template
from stores import ImageStreamStore, SamplesResourceStore, SecretStore, TemplateStore
from utils import is_newer_version, object_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplesResourceEvent:
    """A SamplesResource was added, modified or deleted."""

    resource: SamplesResource
    deleted: bool = False


@dataclass(frozen=True)
class SecretEvent:
    """A secret in the operator namespace was added, modified or deleted."""

    secret: SecretBody
    deleted: bool = False


Event = SamplesResourceEvent | SecretEvent


class SamplesReconciler:
    """Event dispatcher and content synchronizer."""

    def __init__(
        self,
        samples_store: SamplesResourceStore,
        imagestream_store: ImageStreamStore,
        template_store: TemplateStore,
        secret_store: SecretStore,
        reader: ContentReader,
        namespace: str = "",
        content_root: str | None = None,
        context: ReconcileContext | None = None,
    ) -> None:
        self.context = context or ReconcileContext()
        self.conditions = ConditionManager(samples_store)
        self.secrets = RegistrySecretMirror(secret_store, self.conditions, self.context)
        self.bootstrapper = DefaultResourceBootstrapper(
            samples_store, self.conditions, self.context, namespace
        )
        self._imagestreams = imagestream_store
        self._templates = template_store
        self._reader = reader
        self._content_root = content_root

    def handle(self, event: Event) -> None:
        """Process one event.

        Raises:
            OperatorError: the event could not be fully applied; the failure
                has already been recorded on the SamplesResource.
        """
        if isinstance(event, SecretEvent):
            label = "secret"
            handler = self._handle_secret
        elif isinstance(event, SamplesResourceEvent):
            label = "samplesresource"
            handler = self._handle_samples_resource
        else:
            raise TypeError(f"unsupported event {event!r}")

        start_time = time.monotonic()
        RECONCILE_IN_PROGRESS.labels(event=label).inc()
        try:
            handler(event)
        except Exception:
            RECONCILE_TOTAL.labels(event=label, status="error").inc()
            raise
        else:
            RECONCILE_TOTAL.labels(event=label, status="success").inc()
        finally:
            RECONCILE_DURATION.labels(event=label).observe(time.monotonic() - start_time)
            RECONCILE_IN_PROGRESS.labels(event=label).dec()

    def _handle_secret(self, event: SecretEvent) -> None:
        with self.context.lock:
            current = self.context.samples_resource
            resource = self.secrets.manage(event.deleted, current, event.secret)
            # a re-fetched revision carrying a spec that was never synced
            # must not become the last-applied resource
            if current is not None and resource is not None and resource.spec == current.spec:
                self.context.samples_resource = resource

    def _handle_samples_resource(self, event: SamplesResourceEvent) -> None:
        if event.resource.name != SAMPLES_RESOURCE_NAME:
            logger.debug("Ignoring SamplesResource %s", event.resource.name)
            return

        if event.deleted:
            logger.info("SamplesResource deleted")
            with self.context.lock:
                self.context.samples_resource = None
            self.bootstrapper.create_default_if_needed()
            return

        # the bootstrapper checks samples_resource under this lock, and it
        # is only set once the whole pass below has succeeded
        with self.context.lock:
            current = self.context.samples_resource
            if current is not None and not is_newer_version(
                event.resource.resource_version, current.resource_version
            ):
                logger.debug(
                    "SamplesResource version %s not newer than %s, ignoring",
                    event.resource.resource_version,
                    current.resource_version,
                )
                STALE_EVENTS.labels(event="samplesresource").inc()
                return

            resource = event.resource.copy()

            # a secret event that arrived before any SamplesResource was only
            # cached; mirror it now
            if self.context.registry_secret is not None and not resource.condition_true(
                ConditionType.IMPORT_CREDENTIALS_EXIST
            ):
                try:
                    resource = (
                        self.secrets.manage(False, resource, self.context.registry_secret)
                        or resource
                    )
                except OperatorError as e:
                    # already recorded on ImportCredentialsExist
                    logger.debug("Continuing without mirrored registry secret: %s", e)

            self.context.add_skip_filters(resource.spec)

            requested_spec = copy.deepcopy(resource.spec)
            if not resource.spec.architectures:
                resource.spec.architectures = [X86]
            if not resource.spec.install_type:
                resource.spec.install_type = InstallType.CENTOS.value

            for arch in resource.spec.architectures:
                try:
                    base_dir = get_base_dir(
                        arch, resource.spec.install_type, self._content_root
                    )
                except ConfigurationError as e:
                    self.conditions.report_failure(
                        resource,
                        FailureKind.SAMPLES_UPDATE_FAILED,
                        e,
                        "error determining distro/type",
                    )
                    raise
                try:
                    self.sync_content(base_dir, resource.spec)
                except ContentError as e:
                    self.conditions.report_failure(
                        resource,
                        FailureKind.SAMPLES_UPDATE_FAILED,
                        e,
                        "error reading in content",
                    )
                    raise
                except Exception as e:
                    self.conditions.report_failure(
                        resource,
                        FailureKind.SAMPLES_UPDATE_FAILED,
                        e,
                        "error processing content",
                    )
                    raise

            stored = self.conditions.set_condition(
                resource, ConditionType.SAMPLES_EXIST, ConditionStatus.TRUE
            )
            if stored.spec in (resource.spec, requested_spec):
                self.context.samples_resource = stored
            else:
                # the condition landed on a newer revision whose spec this
                # pass did not apply; keep the event's version so that
                # revision's own event still passes the version gate
                logger.info(
                    "SamplesResource changed to version %s during sync, awaiting its event",
                    stored.resource_version,
                )
                resource.resource_version = event.resource.resource_version
                self.context.samples_resource = resource

    def sync_content(self, base_dir: str, spec: SamplesResourceSpec) -> None:
        """Create or update everything under a content root (must hold lock)."""
        self._sync_directory(base_dir, spec, None)

    def _sync_directory(
        self, directory: str, spec: SamplesResourceSpec, definition_kind: str | None
    ) -> None:
        for entry in self._reader.list(directory):
            path = os.path.join(directory, entry.name)
            if entry.is_dir:
                logger.debug("Processing subdir %s from dir %s", entry.name, directory)
                # the nearest imagestreams/templates ancestor decides the type
                kind = definition_kind
                if entry.name in (IMAGESTREAMS_DIR, TEMPLATES_DIR):
                    kind = entry.name
                self._sync_directory(path, spec, kind)
                continue

            logger.debug("Processing file %s from dir %s", entry.name, directory)
            if definition_kind == IMAGESTREAMS_DIR:
                self._sync_imagestream(path, spec)
            elif definition_kind == TEMPLATES_DIR:
                self._sync_template(path)

    def _sync_imagestream(self, path: str, spec: SamplesResourceSpec) -> None:
        imagestream = self._reader.read_imagestream(path)
        name = object_name(imagestream)
        if name in self.context.skipped_imagestreams:
            logger.debug("Skipping imagestream %s", name)
            SYNCED_OBJECTS.labels(kind="imagestream", operation="skip").inc()
            return
        ensure_imagestream(
            self._imagestreams, imagestream, spec.install_type, spec.samples_registry
        )

    def _sync_template(self, path: str) -> None:
        template = self._reader.read_template(path)
        name = object_name(template)
        if name in self.context.skipped_templates:
            logger.debug("Skipping template %s", name)
            SYNCED_OBJECTS.labels(kind="template", operation="skip").inc()
            return
        ensure_template(self._templates, template)
