"""Reconciliation context shared by the event handlers and the bootstrapper."""

import threading
from dataclasses import dataclass, field

from models import SamplesResource, SamplesResourceSpec, SecretBody


@dataclass
class ReconcileContext:
    """Last-applied state of the reconciler.

    The lock serializes SamplesResource processing, secret handling and the
    bootstrapper's check-then-create, which all read and write the fields
    below. Skip filters only ever grow for the lifetime of the process.
    """

    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    samples_resource: SamplesResource | None = None
    # At most one registry credential, either pending (seen before any
    # SamplesResource) or mirrored into the openshift namespace
    registry_secret: SecretBody | None = None
    registry_secret_mirrored: bool = False
    skipped_imagestreams: set[str] = field(default_factory=set)
    skipped_templates: set[str] = field(default_factory=set)

    def add_skip_filters(self, spec: SamplesResourceSpec) -> None:
        """Accumulate skipped names from a spec (must hold lock)."""
        self.skipped_imagestreams.update(spec.skipped_imagestreams)
        self.skipped_templates.update(spec.skipped_templates)

    def cache_secret(self, secret: SecretBody) -> None:
        """Hold a secret until a SamplesResource exists (must hold lock)."""
        self.registry_secret = secret
        self.registry_secret_mirrored = False

    def has_pending_secret(self) -> bool:
        return self.registry_secret is not None and not self.registry_secret_mirrored
