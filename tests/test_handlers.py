"""Tests for the kopf event handlers."""

import handlers
from fakes import make_resource, make_secret
from models import ConfigurationError
from reconciler import SamplesResourceEvent, SecretEvent


class _RecordingReconciler:
    def __init__(self, error=None):
        self.events = []
        self.error = error

    def handle(self, event):
        self.events.append(event)
        if self.error is not None:
            raise self.error


def _resource_body(**conditions):
    body = make_resource("7").to_dict()
    if conditions:
        body["status"] = {
            "conditions": [{"type": t, "status": s} for t, s in conditions.items()]
        }
    return body


class TestFilters:
    """Tests for handler filter helpers."""

    def test_is_deleted(self):
        assert handlers._is_deleted({"type": "DELETED"})
        assert not handlers._is_deleted({"type": "MODIFIED"})
        assert not handlers._is_deleted({"type": None})

    def test_is_registry_secret(self):
        assert handlers._is_registry_secret(name="samples-registry-credentials")
        assert not handlers._is_registry_secret(name="default-token")

    def test_samples_not_applied(self):
        assert handlers._samples_not_applied(body=_resource_body())
        assert handlers._samples_not_applied(body=_resource_body(SamplesExist="Unknown"))
        assert not handlers._samples_not_applied(body=_resource_body(SamplesExist="True"))


class TestEventHandlers:
    """Tests for event routing into the reconciler."""

    def test_samples_resource_event(self, monkeypatch):
        reconciler = _RecordingReconciler()
        monkeypatch.setattr(handlers, "get_reconciler", lambda: reconciler)

        handlers.samples_resource_event(
            event={"type": "ADDED", "object": _resource_body()},
            name="cluster",
            namespace="samples",
        )

        (event,) = reconciler.events
        assert isinstance(event, SamplesResourceEvent)
        assert event.resource.resource_version == "7"
        assert not event.deleted

    def test_samples_resource_delete_event(self, monkeypatch):
        reconciler = _RecordingReconciler()
        monkeypatch.setattr(handlers, "get_reconciler", lambda: reconciler)

        handlers.samples_resource_event(
            event={"type": "DELETED", "object": _resource_body()},
            name="cluster",
            namespace="samples",
        )

        assert reconciler.events[0].deleted

    def test_reconcile_error_is_logged(self, monkeypatch, caplog):
        reconciler = _RecordingReconciler(error=ConfigurationError("bad arch"))
        monkeypatch.setattr(handlers, "get_reconciler", lambda: reconciler)

        handlers.samples_resource_event(
            event={"type": "MODIFIED", "object": _resource_body()},
            name="cluster",
            namespace="samples",
        )

        assert "bad arch" in caplog.text

    def test_registry_secret_event(self, monkeypatch):
        reconciler = _RecordingReconciler()
        monkeypatch.setattr(handlers, "get_reconciler", lambda: reconciler)
        secret = make_secret("3")

        handlers.registry_secret_event(
            event={"type": "MODIFIED", "object": secret},
            name="samples-registry-credentials",
            namespace="samples",
        )

        (event,) = reconciler.events
        assert isinstance(event, SecretEvent)
        assert event.secret == secret

    def test_resync_reprocesses_body(self, monkeypatch):
        reconciler = _RecordingReconciler()
        monkeypatch.setattr(handlers, "get_reconciler", lambda: reconciler)

        handlers.resync_samples_resource(
            body=_resource_body(SamplesExist="Unknown"),
            namespace="samples",
            name="cluster",
        )

        (event,) = reconciler.events
        assert event.resource.name == "cluster"
        assert not event.deleted
