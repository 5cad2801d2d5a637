"""Shared fixtures: fake stores, a content tree on disk, and a reconciler."""

from pathlib import Path

import pytest

from content import FileContentReader
from fakes import (
    OPERATOR_NAMESPACE,
    FakeImageStreamStore,
    FakeSamplesResourceStore,
    FakeSecretStore,
    FakeTemplateStore,
    make_imagestream,
    make_template,
    write_json,
)
from reconciler import SamplesReconciler


@pytest.fixture
def samples_store() -> FakeSamplesResourceStore:
    return FakeSamplesResourceStore()


@pytest.fixture
def imagestream_store() -> FakeImageStreamStore:
    return FakeImageStreamStore()


@pytest.fixture
def template_store() -> FakeTemplateStore:
    return FakeTemplateStore()


@pytest.fixture
def secret_store() -> FakeSecretStore:
    return FakeSecretStore()


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """okd-x86_64 with imagestream "a" and template "b"."""
    root = tmp_path / "content"
    write_json(
        root / "okd-x86_64" / "imagestreams" / "a.json",
        make_imagestream("a", "docker.io/centos/a"),
    )
    write_json(root / "okd-x86_64" / "templates" / "b.json", make_template("b"))
    return root


@pytest.fixture
def reconciler(
    samples_store: FakeSamplesResourceStore,
    imagestream_store: FakeImageStreamStore,
    template_store: FakeTemplateStore,
    secret_store: FakeSecretStore,
    content_root: Path,
) -> SamplesReconciler:
    return SamplesReconciler(
        samples_store=samples_store,
        imagestream_store=imagestream_store,
        template_store=template_store,
        secret_store=secret_store,
        reader=FileContentReader(),
        namespace=OPERATOR_NAMESPACE,
        content_root=str(content_root),
    )
