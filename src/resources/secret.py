"""Registry credential mirroring into the openshift namespace.

Imagestream imports in the openshift namespace authenticate with a copy of
the registry pull secret created alongside the SamplesResource. Until a
SamplesResource has been seen the secret is only cached, since the target
namespace is not known to be ready.
"""

import copy
import logging
from typing import Any

from conditions import ConditionManager
from constants import OPENSHIFT_NAMESPACE, SAMPLES_REGISTRY_CREDENTIALS
from context import ReconcileContext
from models import (
    ConditionStatus,
    ConditionType,
    FailureKind,
    NotFoundError,
    SamplesResource,
    SecretBody,
    StoreError,
)
from stores import SecretStore
from utils import is_newer_version, object_name, object_resource_version

logger = logging.getLogger(__name__)

# Fields tying a secret to its source namespace and revision
_STRIPPED_METADATA = ("namespace", "resourceVersion", "uid")


def mirror_body(secret: SecretBody) -> dict[str, Any]:
    """Copy of secret with namespace, version and identity removed."""
    body: dict[str, Any] = copy.deepcopy(dict(secret))
    metadata = body.setdefault("metadata", {})
    for key in _STRIPPED_METADATA:
        metadata.pop(key, None)
    return body


class RegistrySecretMirror:
    """Keeps the openshift namespace copy of the registry secret current.

    All methods expect the caller to hold context.lock.
    """

    def __init__(
        self,
        store: SecretStore,
        conditions: ConditionManager,
        context: ReconcileContext,
    ) -> None:
        self._store = store
        self._conditions = conditions
        self._context = context

    def manage(
        self,
        deleted: bool,
        resource: SamplesResource | None,
        secret: SecretBody,
    ) -> SamplesResource | None:
        """Apply a secret event.

        Returns the SamplesResource as stored after the condition update, or
        the resource unchanged when nothing was written.

        Raises:
            StoreError: a secret store call failed (recorded on
                ImportCredentialsExist first).
            ConditionUpdateError: the condition could not be persisted.
        """
        name = object_name(secret)
        if name != SAMPLES_REGISTRY_CREDENTIALS:
            return resource

        if resource is None:
            if deleted:
                self._context.registry_secret = None
                self._context.registry_secret_mirrored = False
            else:
                logger.info("Caching registry secret %s until a SamplesResource exists", name)
                self._context.cache_secret(secret)
            return None

        if deleted:
            self._delete(resource, name)
            new_status = ConditionStatus.FALSE
        else:
            current = self._context.registry_secret
            if (
                current is not None
                and self._context.registry_secret_mirrored
                and not is_newer_version(
                    object_resource_version(secret), object_resource_version(current)
                )
            ):
                logger.debug("Registry secret %s not newer than mirrored copy", name)
                return resource
            self._create_or_update(resource, secret)
            new_status = ConditionStatus.TRUE

        resource = self._conditions.set_condition(
            resource, ConditionType.IMPORT_CREDENTIALS_EXIST, new_status
        )

        if deleted:
            self._context.registry_secret = None
            self._context.registry_secret_mirrored = False
        else:
            self._context.registry_secret = secret
            self._context.registry_secret_mirrored = True
        return resource

    def _delete(self, resource: SamplesResource, name: str) -> None:
        try:
            self._store.delete(OPENSHIFT_NAMESPACE, name)
        except NotFoundError:
            pass
        except StoreError as e:
            self._conditions.report_failure(
                resource,
                FailureKind.SECRET_UPDATE_FAILED,
                e,
                "failed to delete dockerconfig secret in the openshift namespace",
            )
            raise
        logger.info("Deleted registry secret %s from openshift namespace", name)

    def _create_or_update(self, resource: SamplesResource, secret: SecretBody) -> None:
        name = object_name(secret)
        body = mirror_body(secret)
        try:
            existing = self._store.get(OPENSHIFT_NAMESPACE, name)
        except NotFoundError:
            existing = None
        except StoreError as e:
            self._conditions.report_failure(
                resource,
                FailureKind.SECRET_UPDATE_FAILED,
                e,
                "failed to get registry dockerconfig secret in openshift namespace",
            )
            raise

        try:
            if existing is not None:
                logger.info("Updating registry secret %s in openshift namespace", name)
                self._store.update(OPENSHIFT_NAMESPACE, body)
            else:
                logger.info("Creating registry secret %s in openshift namespace", name)
                self._store.create(OPENSHIFT_NAMESPACE, body)
        except StoreError as e:
            self._conditions.report_failure(
                resource,
                FailureKind.SECRET_UPDATE_FAILED,
                e,
                "failed to create/update registry dockerconfig secret in openshift namespace",
            )
            raise
