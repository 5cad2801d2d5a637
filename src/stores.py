"""Resource store adapters.

Each resource kind the reconciler touches is reached through a small port
(get/create/update, plus delete for secrets). The Kubernetes implementations
translate API failures into the operator's StoreError hierarchy so callers
can branch on NotFoundError, ConflictError and AlreadyExistsError without
knowing about HTTP status codes.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from kubernetes.client import ApiException, CoreV1Api, CustomObjectsApi

from constants import (
    IMAGE_GROUP,
    IMAGE_VERSION,
    IMAGESTREAM_PLURAL,
    SAMPLES_GROUP,
    SAMPLES_PLURAL,
    SAMPLES_VERSION,
    TEMPLATE_GROUP,
    TEMPLATE_PLURAL,
    TEMPLATE_VERSION,
)
from metrics import STORE_CALLS
from models import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    SamplesResource,
    StoreError,
)
from utils import object_name

logger = logging.getLogger(__name__)


def _store_error(
    exc: ApiException, kind: str, namespace: str, name: str, operation: str
) -> StoreError:
    """Map an ApiException onto the StoreError hierarchy."""
    message = f"{operation} failed: ({exc.status}) {exc.reason}"
    if exc.status == 404:
        return NotFoundError(kind, namespace, name, message)
    if exc.status == 409:
        # The API server answers 409 both for duplicate creates and for
        # stale resourceVersions on update
        if operation == "create":
            return AlreadyExistsError(kind, namespace, name, message)
        return ConflictError(kind, namespace, name, message)
    return StoreError(kind, namespace, name, message)


@contextmanager
def _translate_errors(
    kind: str, namespace: str, name: str, operation: str
) -> Generator[None, None, None]:
    """Translate ApiException raised inside the block (context manager).

    Usage:
        with _translate_errors("imagestream", "openshift", "ruby", "get"):
            # make API call
    """
    try:
        yield
    except ApiException as e:
        STORE_CALLS.labels(kind=kind, operation=operation, status="error").inc()
        raise _store_error(e, kind, namespace, name, operation) from e
    STORE_CALLS.labels(kind=kind, operation=operation, status="success").inc()


# =============================================================================
# Ports
# =============================================================================


class ImageStreamStore(ABC):
    """Imagestreams keyed by namespace and name."""

    @abstractmethod
    def get(self, namespace: str, name: str) -> dict[str, Any]: ...

    @abstractmethod
    def create(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def update(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]: ...


class TemplateStore(ABC):
    """Templates keyed by namespace and name."""

    @abstractmethod
    def get(self, namespace: str, name: str) -> dict[str, Any]: ...

    @abstractmethod
    def create(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def update(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]: ...


class SecretStore(ABC):
    """Secrets keyed by namespace and name."""

    @abstractmethod
    def get(self, namespace: str, name: str) -> dict[str, Any]: ...

    @abstractmethod
    def create(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def update(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def delete(self, namespace: str, name: str) -> None: ...


class SamplesResourceStore(ABC):
    """The SamplesResource control-plane record."""

    @abstractmethod
    def get(self, name: str, namespace: str) -> SamplesResource: ...

    @abstractmethod
    def create(self, resource: SamplesResource) -> SamplesResource: ...

    @abstractmethod
    def update(self, resource: SamplesResource) -> SamplesResource: ...


# =============================================================================
# Kubernetes implementations
# =============================================================================


class _KubeCustomObjectStore:
    """Namespaced custom objects of one group/version/plural."""

    group = ""
    version = ""
    plural = ""
    kind = ""

    def __init__(self, api: CustomObjectsApi) -> None:
        self._api = api

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        with _translate_errors(self.kind, namespace, name, "get"):
            return self._api.get_namespaced_custom_object(
                self.group, self.version, namespace, self.plural, name
            )

    def create(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        with _translate_errors(self.kind, namespace, object_name(body), "create"):
            return self._api.create_namespaced_custom_object(
                self.group, self.version, namespace, self.plural, body
            )

    def update(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        name = object_name(body)
        with _translate_errors(self.kind, namespace, name, "update"):
            return self._api.replace_namespaced_custom_object(
                self.group, self.version, namespace, self.plural, name, body
            )


class KubeImageStreamStore(_KubeCustomObjectStore, ImageStreamStore):
    group = IMAGE_GROUP
    version = IMAGE_VERSION
    plural = IMAGESTREAM_PLURAL
    kind = "imagestream"


class KubeTemplateStore(_KubeCustomObjectStore, TemplateStore):
    group = TEMPLATE_GROUP
    version = TEMPLATE_VERSION
    plural = TEMPLATE_PLURAL
    kind = "template"


class KubeSecretStore(SecretStore):
    """Secrets through the core API, returned as plain dicts."""

    kind = "secret"

    def __init__(self, api: CoreV1Api) -> None:
        self._api = api

    def _to_dict(self, secret: Any) -> dict[str, Any]:
        return self._api.api_client.sanitize_for_serialization(secret)

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        with _translate_errors(self.kind, namespace, name, "get"):
            return self._to_dict(self._api.read_namespaced_secret(name, namespace))

    def create(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        with _translate_errors(self.kind, namespace, object_name(body), "create"):
            return self._to_dict(self._api.create_namespaced_secret(namespace, body))

    def update(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        name = object_name(body)
        with _translate_errors(self.kind, namespace, name, "update"):
            return self._to_dict(
                self._api.replace_namespaced_secret(name, namespace, body)
            )

    def delete(self, namespace: str, name: str) -> None:
        with _translate_errors(self.kind, namespace, name, "delete"):
            self._api.delete_namespaced_secret(name, namespace)


class KubeSamplesResourceStore(SamplesResourceStore):
    """SamplesResource custom objects, converted to the dataclass model."""

    kind = "samplesresource"

    def __init__(self, api: CustomObjectsApi) -> None:
        self._api = api

    def get(self, name: str, namespace: str) -> SamplesResource:
        with _translate_errors(self.kind, namespace, name, "get"):
            body = self._api.get_namespaced_custom_object(
                SAMPLES_GROUP, SAMPLES_VERSION, namespace, SAMPLES_PLURAL, name
            )
        return SamplesResource.from_dict(body)

    def create(self, resource: SamplesResource) -> SamplesResource:
        with _translate_errors(self.kind, resource.namespace, resource.name, "create"):
            body = self._api.create_namespaced_custom_object(
                SAMPLES_GROUP,
                SAMPLES_VERSION,
                resource.namespace,
                SAMPLES_PLURAL,
                resource.to_dict(),
            )
        return SamplesResource.from_dict(body)

    def update(self, resource: SamplesResource) -> SamplesResource:
        with _translate_errors(self.kind, resource.namespace, resource.name, "update"):
            body = self._api.replace_namespaced_custom_object(
                SAMPLES_GROUP,
                SAMPLES_VERSION,
                resource.namespace,
                SAMPLES_PLURAL,
                resource.name,
                resource.to_dict(),
            )
        return SamplesResource.from_dict(body)
