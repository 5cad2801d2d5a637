"""Tests for the Kubernetes store adapters."""

from unittest.mock import MagicMock

import pytest
from kubernetes.client import ApiException

from fakes import OPERATOR_NAMESPACE, make_imagestream, make_resource, make_secret
from models import AlreadyExistsError, ConflictError, NotFoundError, StoreError
from stores import (
    KubeImageStreamStore,
    KubeSamplesResourceStore,
    KubeSecretStore,
    KubeTemplateStore,
)


class TestCustomObjectStores:
    """Tests for imagestream and template stores."""

    def test_get(self):
        api = MagicMock()
        api.get_namespaced_custom_object.return_value = make_imagestream("ruby")

        body = KubeImageStreamStore(api).get("openshift", "ruby")

        assert body["metadata"]["name"] == "ruby"
        api.get_namespaced_custom_object.assert_called_once_with(
            "image.openshift.io", "v1", "openshift", "imagestreams", "ruby"
        )

    def test_get_not_found(self):
        api = MagicMock()
        api.get_namespaced_custom_object.side_effect = ApiException(
            status=404, reason="Not Found"
        )

        with pytest.raises(NotFoundError, match="imagestream openshift/ruby"):
            KubeImageStreamStore(api).get("openshift", "ruby")

    def test_create_conflict_is_already_exists(self):
        api = MagicMock()
        api.create_namespaced_custom_object.side_effect = ApiException(
            status=409, reason="Conflict"
        )

        with pytest.raises(AlreadyExistsError):
            KubeTemplateStore(api).create("openshift", {"metadata": {"name": "rails"}})

    def test_update_uses_body_name(self):
        api = MagicMock()
        body = make_imagestream("ruby")

        KubeImageStreamStore(api).update("openshift", body)

        api.replace_namespaced_custom_object.assert_called_once_with(
            "image.openshift.io", "v1", "openshift", "imagestreams", "ruby", body
        )

    def test_update_conflict(self):
        api = MagicMock()
        api.replace_namespaced_custom_object.side_effect = ApiException(
            status=409, reason="Conflict"
        )

        with pytest.raises(ConflictError):
            KubeImageStreamStore(api).update("openshift", make_imagestream("ruby"))

    def test_server_error(self):
        api = MagicMock()
        api.create_namespaced_custom_object.side_effect = ApiException(
            status=500, reason="Internal Server Error"
        )

        with pytest.raises(StoreError) as excinfo:
            KubeImageStreamStore(api).create("openshift", make_imagestream("ruby"))

        assert type(excinfo.value) is StoreError
        assert "(500) Internal Server Error" in str(excinfo.value)


class TestKubeSecretStore:
    """Tests for KubeSecretStore."""

    def _api(self):
        api = MagicMock()
        api.api_client.sanitize_for_serialization.side_effect = lambda obj: obj
        return api

    def test_get(self):
        api = self._api()
        api.read_namespaced_secret.return_value = make_secret("3")

        secret = KubeSecretStore(api).get("openshift", "samples-registry-credentials")

        assert secret["metadata"]["resourceVersion"] == "3"
        api.read_namespaced_secret.assert_called_once_with(
            "samples-registry-credentials", "openshift"
        )

    def test_delete_not_found(self):
        api = self._api()
        api.delete_namespaced_secret.side_effect = ApiException(status=404, reason="gone")

        with pytest.raises(NotFoundError):
            KubeSecretStore(api).delete("openshift", "samples-registry-credentials")

    def test_update(self):
        api = self._api()
        body = make_secret("3")
        api.replace_namespaced_secret.return_value = body

        assert KubeSecretStore(api).update("openshift", body) == body
        api.replace_namespaced_secret.assert_called_once_with(
            "samples-registry-credentials", "openshift", body
        )


class TestKubeSamplesResourceStore:
    """Tests for KubeSamplesResourceStore."""

    def test_create_round_trips_model(self):
        api = MagicMock()
        api.create_namespaced_custom_object.side_effect = (
            lambda group, version, namespace, plural, body: {
                **body,
                "metadata": {**body["metadata"], "resourceVersion": "1"},
            }
        )

        created = KubeSamplesResourceStore(api).create(
            make_resource(install_type="centos")
        )

        assert created.resource_version == "1"
        assert created.spec.install_type == "centos"
        args = api.create_namespaced_custom_object.call_args.args
        assert args[:4] == (
            "samplesoperator.config.openshift.io",
            "v1alpha1",
            OPERATOR_NAMESPACE,
            "samplesresources",
        )

    def test_update_conflict(self):
        api = MagicMock()
        api.replace_namespaced_custom_object.side_effect = ApiException(
            status=409, reason="Conflict"
        )

        with pytest.raises(ConflictError, match="samplesresource"):
            KubeSamplesResourceStore(api).update(make_resource("4"))

    def test_get_not_found(self):
        api = MagicMock()
        api.get_namespaced_custom_object.side_effect = ApiException(status=404)

        with pytest.raises(NotFoundError):
            KubeSamplesResourceStore(api).get("cluster", OPERATOR_NAMESPACE)
