"""Domain models for the samples operator.

This module defines typed data structures for the SamplesResource singleton,
the external resource bodies it manages, and the operator's exceptions.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NotRequired, TypedDict

from constants import SAMPLES_API_VERSION, SAMPLES_RESOURCE_KIND


# =============================================================================
# Enums for constrained values
# =============================================================================


class InstallType(Enum):
    """Samples distribution installed into the cluster."""

    CENTOS = "centos"
    RHEL = "rhel"


class ConditionStatus(Enum):
    """Kubernetes condition status."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ConditionType(Enum):
    """Conditions reported on the SamplesResource."""

    SAMPLES_EXIST = "SamplesExist"
    IMPORT_CREDENTIALS_EXIST = "ImportCredentialsExist"


class FailureKind(Enum):
    """Failure categories, each recorded on the condition it degrades."""

    SAMPLES_UPDATE_FAILED = "SamplesUpdateFailed"
    SECRET_UPDATE_FAILED = "SecretUpdateFailed"

    @property
    def condition_type(self) -> ConditionType:
        if self is FailureKind.SECRET_UPDATE_FAILED:
            return ConditionType.IMPORT_CREDENTIALS_EXIST
        return ConditionType.SAMPLES_EXIST


# =============================================================================
# TypedDicts for external resource bodies (read from files / the API server)
# =============================================================================


class ImageStreamSpec(TypedDict, total=False):
    """Imagestream spec.

    Each tag may carry a "from" pull reference; "from" is a Python keyword,
    so tags stay plain dicts.
    """

    dockerImageRepository: str
    tags: list[dict[str, Any]]


class ImageStreamDefinition(TypedDict):
    """Imagestream body as stored in a content file."""

    apiVersion: NotRequired[str]
    kind: NotRequired[str]
    metadata: dict[str, Any]
    spec: NotRequired[ImageStreamSpec]


class TemplateDefinition(TypedDict):
    """Template body as stored in a content file."""

    apiVersion: NotRequired[str]
    kind: NotRequired[str]
    metadata: dict[str, Any]
    objects: NotRequired[list[dict[str, Any]]]
    parameters: NotRequired[list[dict[str, Any]]]


class SecretBody(TypedDict):
    """Registry credential secret body."""

    metadata: dict[str, Any]
    type: NotRequired[str]
    data: NotRequired[dict[str, str]]


# =============================================================================
# Dataclasses for the SamplesResource singleton
# =============================================================================


@dataclass
class Condition:
    """Kubernetes-style condition.

    A condition that has never been written has no status, so any requested
    status counts as a change.
    """

    type: str
    status: ConditionStatus | None = None
    last_update_time: str = ""
    last_transition_time: str = ""
    reason: str = ""
    message: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dict for Kubernetes status."""
        result = {
            "type": self.type,
            "status": self.status.value if self.status else "",
            "lastUpdateTime": self.last_update_time,
            "lastTransitionTime": self.last_transition_time,
        }
        if self.reason:
            result["reason"] = self.reason
        if self.message:
            result["message"] = self.message
        return result

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> "Condition":
        """Create from Kubernetes status dict."""
        try:
            status = ConditionStatus(data.get("status", ""))
        except ValueError:
            status = None
        return cls(
            type=data.get("type", ""),
            status=status,
            last_update_time=data.get("lastUpdateTime", ""),
            last_transition_time=data.get("lastTransitionTime", ""),
            reason=data.get("reason", ""),
            message=data.get("message", ""),
        )


@dataclass
class SamplesResourceSpec:
    """Desired samples configuration.

    install_type is kept as the raw string so that an unsupported value
    reaches base directory resolution and is reported there.
    """

    architectures: list[str] = field(default_factory=list)
    install_type: str = ""
    samples_registry: str = ""
    skipped_templates: list[str] = field(default_factory=list)
    skipped_imagestreams: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for the Kubernetes spec."""
        result: dict[str, Any] = {}
        if self.architectures:
            result["architectures"] = list(self.architectures)
        if self.install_type:
            result["installType"] = self.install_type
        if self.samples_registry:
            result["samplesRegistry"] = self.samples_registry
        if self.skipped_templates:
            result["skippedTemplates"] = list(self.skipped_templates)
        if self.skipped_imagestreams:
            result["skippedImagestreams"] = list(self.skipped_imagestreams)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SamplesResourceSpec":
        """Create from the Kubernetes spec dict."""
        data = data or {}
        return cls(
            architectures=list(data.get("architectures") or []),
            install_type=data.get("installType") or "",
            samples_registry=data.get("samplesRegistry") or "",
            skipped_templates=list(data.get("skippedTemplates") or []),
            skipped_imagestreams=list(data.get("skippedImagestreams") or []),
        )


@dataclass
class SamplesResource:
    """The SamplesResource singleton as seen by the reconciler."""

    name: str
    namespace: str = ""
    resource_version: str = ""
    spec: SamplesResourceSpec = field(default_factory=SamplesResourceSpec)
    conditions: list[Condition] = field(default_factory=list)
    # Remaining metadata (uid, labels, ...) carried through updates untouched
    metadata: dict[str, Any] = field(default_factory=dict)

    def condition(self, condition_type: ConditionType) -> Condition:
        """Return a copy of the named condition, or a blank one."""
        for cond in self.conditions:
            if cond.type == condition_type.value:
                return copy.copy(cond)
        return Condition(type=condition_type.value)

    def condition_update(self, condition: Condition) -> None:
        """Store a condition, replacing any existing one of the same type."""
        for i, cond in enumerate(self.conditions):
            if cond.type == condition.type:
                self.conditions[i] = condition
                return
        self.conditions.append(condition)

    def condition_true(self, condition_type: ConditionType) -> bool:
        return self.condition(condition_type).status is ConditionStatus.TRUE

    def copy(self) -> "SamplesResource":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a Kubernetes object body."""
        metadata = dict(self.metadata)
        metadata["name"] = self.name
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version
        else:
            metadata.pop("resourceVersion", None)
        body: dict[str, Any] = {
            "apiVersion": SAMPLES_API_VERSION,
            "kind": SAMPLES_RESOURCE_KIND,
            "metadata": metadata,
            "spec": self.spec.to_dict(),
        }
        if self.conditions:
            body["status"] = {"conditions": [c.to_dict() for c in self.conditions]}
        return body

    @classmethod
    def from_dict(cls, body: dict[str, Any]) -> "SamplesResource":
        """Create from a Kubernetes object body."""
        metadata = copy.deepcopy(dict(body.get("metadata") or {}))
        name = metadata.pop("name", "")
        namespace = metadata.pop("namespace", "")
        resource_version = metadata.pop("resourceVersion", "")
        status = body.get("status") or {}
        return cls(
            name=name,
            namespace=namespace,
            resource_version=resource_version,
            spec=SamplesResourceSpec.from_dict(body.get("spec")),
            conditions=[
                Condition.from_dict(c) for c in status.get("conditions") or []
            ],
            metadata=metadata,
        )


# =============================================================================
# Exceptions
# =============================================================================


class OperatorError(Exception):
    """Base exception for operator errors."""

    pass


class StoreError(OperatorError):
    """A resource store call failed."""

    def __init__(self, kind: str, namespace: str, name: str, message: str) -> None:
        self.kind = kind
        self.namespace = namespace
        self.name = name
        target = f"{namespace}/{name}" if namespace else name
        super().__init__(f"{kind} {target}: {message}")


class NotFoundError(StoreError):
    """The requested object does not exist."""

    pass


class ConflictError(StoreError):
    """Optimistic concurrency failure on update."""

    pass


class AlreadyExistsError(StoreError):
    """Create failed because the object already exists."""

    pass


class ConfigurationError(OperatorError):
    """Unsupported architecture or install type."""

    pass


class ContentError(OperatorError):
    """A definition file could not be read or parsed."""

    pass


class ConditionUpdateError(OperatorError):
    """A condition could not be persisted on the SamplesResource."""

    pass
