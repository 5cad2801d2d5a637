"""Imagestream management for the samples operator."""

import copy
import logging
from typing import Any

from constants import CENTOS_REGISTRIES, DOCKER_IMAGE_KIND, RHEL_REGISTRIES
from models import ImageStreamDefinition, InstallType
from resources.apply import create_or_update
from stores import ImageStreamStore

logger = logging.getLogger(__name__)


def registries_for(install_type: str) -> tuple[str, ...]:
    """Upstream registries recognized for a distribution."""
    if install_type == InstallType.RHEL.value:
        return RHEL_REGISTRIES
    if install_type == InstallType.CENTOS.value:
        return CENTOS_REGISTRIES
    return ()


def replace_registry(pull_spec: str, registries: tuple[str, ...], override: str) -> str:
    """Point a pull spec at the override registry.

    A recognized upstream registry prefix is replaced; anything else gets the
    override prepended.

    Example: ('docker.io/foo/bar', ('docker.io',), 'R') -> 'R/foo/bar'
             ('quay.io/foo/bar', ('docker.io',), 'R') -> 'R/quay.io/foo/bar'
    """
    for registry in registries:
        if pull_spec.startswith(registry):
            return override + pull_spec[len(registry):]
    return f"{override}/{pull_spec}"


def update_pull_specs(
    imagestream: ImageStreamDefinition, install_type: str, samples_registry: str
) -> dict[str, Any]:
    """Return a copy of imagestream with pull specs rewritten.

    Only the repository and tags pulling directly from an image are touched;
    tags referencing other imagestreams are left alone. Without a registry
    override the copy is unchanged.
    """
    result: dict[str, Any] = copy.deepcopy(dict(imagestream))
    if not samples_registry:
        return result

    registries = registries_for(install_type)
    spec = result.get("spec") or {}

    repository = spec.get("dockerImageRepository")
    if repository:
        spec["dockerImageRepository"] = replace_registry(
            repository, registries, samples_registry
        )

    for tag in spec.get("tags") or []:
        ref = tag.get("from")
        if ref and ref.get("kind") == DOCKER_IMAGE_KIND and ref.get("name"):
            ref["name"] = replace_registry(ref["name"], registries, samples_registry)

    return result


def ensure_imagestream(
    store: ImageStreamStore,
    imagestream: ImageStreamDefinition,
    install_type: str,
    samples_registry: str,
) -> str:
    """Create or update an imagestream with registry overrides applied."""
    body = update_pull_specs(imagestream, install_type, samples_registry)
    return create_or_update(store, "imagestream", body)
