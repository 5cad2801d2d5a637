"""Tests for data models."""

from models import (
    Condition,
    ConditionStatus,
    ConditionType,
    ConflictError,
    FailureKind,
    NotFoundError,
    SamplesResource,
    SamplesResourceSpec,
    StoreError,
)


class TestCondition:
    """Tests for Condition dataclass."""

    def test_to_dict(self):
        condition = Condition(
            type="SamplesExist",
            status=ConditionStatus.TRUE,
            last_update_time="2024-01-01T00:00:00+00:00",
            last_transition_time="2024-01-01T00:00:00+00:00",
        )
        result = condition.to_dict()

        assert result == {
            "type": "SamplesExist",
            "status": "True",
            "lastUpdateTime": "2024-01-01T00:00:00+00:00",
            "lastTransitionTime": "2024-01-01T00:00:00+00:00",
        }

    def test_to_dict_with_message(self):
        condition = Condition(
            type="SamplesExist", status=ConditionStatus.UNKNOWN, message="broken"
        )

        assert condition.to_dict()["message"] == "broken"

    def test_from_dict(self):
        condition = Condition.from_dict(
            {"type": "ImportCredentialsExist", "status": "False", "message": "gone"}
        )

        assert condition.type == "ImportCredentialsExist"
        assert condition.status is ConditionStatus.FALSE
        assert condition.message == "gone"

    def test_from_dict_unknown_status_string(self):
        condition = Condition.from_dict({"type": "SamplesExist", "status": ""})

        assert condition.status is None


class TestSamplesResourceSpec:
    """Tests for SamplesResourceSpec dataclass."""

    def test_from_dict(self):
        spec = SamplesResourceSpec.from_dict(
            {
                "architectures": ["x86_64", "ppc64le"],
                "installType": "rhel",
                "samplesRegistry": "registry.example.com",
                "skippedTemplates": ["t1"],
                "skippedImagestreams": ["i1", "i2"],
            }
        )

        assert spec.architectures == ["x86_64", "ppc64le"]
        assert spec.install_type == "rhel"
        assert spec.samples_registry == "registry.example.com"
        assert spec.skipped_templates == ["t1"]
        assert spec.skipped_imagestreams == ["i1", "i2"]

    def test_from_dict_empty(self):
        spec = SamplesResourceSpec.from_dict(None)

        assert spec == SamplesResourceSpec()

    def test_to_dict_omits_empty_fields(self):
        spec = SamplesResourceSpec(architectures=["x86_64"])

        assert spec.to_dict() == {"architectures": ["x86_64"]}


class TestSamplesResource:
    """Tests for SamplesResource dataclass."""

    def _body(self):
        return {
            "apiVersion": "samplesoperator.config.openshift.io/v1alpha1",
            "kind": "SamplesResource",
            "metadata": {
                "name": "cluster",
                "namespace": "samples",
                "resourceVersion": "42",
                "uid": "abc",
            },
            "spec": {"architectures": ["x86_64"], "installType": "centos"},
            "status": {
                "conditions": [
                    {"type": "SamplesExist", "status": "True"},
                ]
            },
        }

    def test_from_dict(self):
        resource = SamplesResource.from_dict(self._body())

        assert resource.name == "cluster"
        assert resource.namespace == "samples"
        assert resource.resource_version == "42"
        assert resource.metadata == {"uid": "abc"}
        assert resource.spec.install_type == "centos"
        assert resource.condition_true(ConditionType.SAMPLES_EXIST)

    def test_to_dict_keeps_metadata(self):
        body = SamplesResource.from_dict(self._body()).to_dict()

        assert body["apiVersion"] == "samplesoperator.config.openshift.io/v1alpha1"
        assert body["kind"] == "SamplesResource"
        assert body["metadata"] == {
            "name": "cluster",
            "namespace": "samples",
            "resourceVersion": "42",
            "uid": "abc",
        }
        assert body["status"]["conditions"][0]["status"] == "True"

    def test_to_dict_without_version(self):
        body = SamplesResource(name="cluster", namespace="samples").to_dict()

        assert "resourceVersion" not in body["metadata"]
        assert "status" not in body

    def test_condition_missing_is_blank(self):
        resource = SamplesResource(name="cluster")
        condition = resource.condition(ConditionType.IMPORT_CREDENTIALS_EXIST)

        assert condition.type == "ImportCredentialsExist"
        assert condition.status is None
        assert not resource.condition_true(ConditionType.IMPORT_CREDENTIALS_EXIST)

    def test_condition_returns_copy(self):
        resource = SamplesResource.from_dict(self._body())
        condition = resource.condition(ConditionType.SAMPLES_EXIST)
        condition.status = ConditionStatus.FALSE

        assert resource.condition_true(ConditionType.SAMPLES_EXIST)

    def test_condition_update_replaces(self):
        resource = SamplesResource.from_dict(self._body())
        resource.condition_update(
            Condition(type="SamplesExist", status=ConditionStatus.UNKNOWN)
        )

        assert len(resource.conditions) == 1
        assert resource.conditions[0].status is ConditionStatus.UNKNOWN

    def test_condition_update_appends(self):
        resource = SamplesResource.from_dict(self._body())
        resource.condition_update(
            Condition(type="ImportCredentialsExist", status=ConditionStatus.TRUE)
        )

        types = {c.type for c in resource.conditions}
        assert types == {"SamplesExist", "ImportCredentialsExist"}


class TestFailureKind:
    """Tests for FailureKind condition mapping."""

    def test_samples_update_failed(self):
        assert FailureKind.SAMPLES_UPDATE_FAILED.condition_type is ConditionType.SAMPLES_EXIST

    def test_secret_update_failed(self):
        assert (
            FailureKind.SECRET_UPDATE_FAILED.condition_type
            is ConditionType.IMPORT_CREDENTIALS_EXIST
        )


class TestStoreError:
    """Tests for the store exception hierarchy."""

    def test_message_includes_target(self):
        error = NotFoundError("imagestream", "openshift", "ruby", "get failed")

        assert str(error) == "imagestream openshift/ruby: get failed"
        assert isinstance(error, StoreError)

    def test_message_without_namespace(self):
        error = ConflictError("samplesresource", "", "cluster", "update failed")

        assert str(error) == "samplesresource cluster: update failed"
