"""Shared operator state - thread-safe singleton for Kubernetes clients and the reconciler."""

import threading
from dataclasses import dataclass, field

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config

from bootstrap import DelayedTask
from content import FileContentReader
from reconciler import SamplesReconciler
from stores import (
    KubeImageStreamStore,
    KubeSamplesResourceStore,
    KubeSecretStore,
    KubeTemplateStore,
)
from utils import get_operator_namespace


@dataclass
class OperatorState:
    """Thread-safe operator state container.

    This class provides thread-safe access to shared operator resources:
    - Kubernetes API clients
    - The samples reconciler and its pending bootstrap task

    All handlers should use the global `state` instance rather than
    creating their own clients.
    """

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _k8s_core_api: k8s_client.CoreV1Api | None = field(default=None, repr=False)
    _k8s_custom_api: k8s_client.CustomObjectsApi | None = field(default=None, repr=False)
    _k8s_configured: bool = field(default=False, repr=False)
    _reconciler: SamplesReconciler | None = field(default=None, repr=False)
    _bootstrap_task: DelayedTask | None = field(default=None, repr=False)

    def _ensure_k8s_config(self) -> None:
        """Ensure Kubernetes configuration is loaded (must hold lock)."""
        if not self._k8s_configured:
            try:
                k8s_config.load_incluster_config()
            except k8s_config.ConfigException:
                k8s_config.load_kube_config()
            self._k8s_configured = True

    def _core_api(self) -> k8s_client.CoreV1Api:
        """Must hold lock."""
        self._ensure_k8s_config()
        if self._k8s_core_api is None:
            self._k8s_core_api = k8s_client.CoreV1Api()
        return self._k8s_core_api

    def _custom_api(self) -> k8s_client.CustomObjectsApi:
        """Must hold lock."""
        self._ensure_k8s_config()
        if self._k8s_custom_api is None:
            self._k8s_custom_api = k8s_client.CustomObjectsApi()
        return self._k8s_custom_api

    def get_reconciler(self) -> SamplesReconciler:
        """Get or create the reconciler wired to the cluster (thread-safe)."""
        with self._lock:
            if self._reconciler is None:
                custom_api = self._custom_api()
                self._reconciler = SamplesReconciler(
                    samples_store=KubeSamplesResourceStore(custom_api),
                    imagestream_store=KubeImageStreamStore(custom_api),
                    template_store=KubeTemplateStore(custom_api),
                    secret_store=KubeSecretStore(self._core_api()),
                    reader=FileContentReader(),
                    namespace=get_operator_namespace(),
                )
            return self._reconciler

    def schedule_bootstrap(self, delay: float) -> DelayedTask:
        """Schedule the default SamplesResource bootstrap once per process."""
        reconciler = self.get_reconciler()
        with self._lock:
            if self._bootstrap_task is None:
                self._bootstrap_task = reconciler.bootstrapper.schedule(delay)
            return self._bootstrap_task

    def close(self) -> None:
        """Cancel the bootstrap task if it has not fired yet."""
        with self._lock:
            if self._bootstrap_task is not None:
                self._bootstrap_task.cancel()
                self._bootstrap_task = None


# Global operator state singleton
state = OperatorState()


def get_reconciler() -> SamplesReconciler:
    """Get the shared samples reconciler."""
    return state.get_reconciler()
