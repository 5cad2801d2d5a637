"""Samples content on disk.

Content roots hold imagestream and template definitions as JSON files laid
out as <root>/imagestreams/... and <root>/templates/..., one root per
architecture and distribution.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, cast

from constants import (
    DEFAULT_CONTENT_ROOT,
    PPC,
    PPC64_OCP_CONTENT_DIR,
    X86,
    X86_OCP_CONTENT_DIR,
    X86_OKD_CONTENT_DIR,
)
from models import (
    ConfigurationError,
    ContentError,
    ImageStreamDefinition,
    InstallType,
    TemplateDefinition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentEntry:
    """A file or subdirectory inside a content directory."""

    name: str
    is_dir: bool


class ContentReader(ABC):
    """Lists content directories and parses definition files."""

    @abstractmethod
    def list(self, directory: str) -> list[ContentEntry]: ...

    @abstractmethod
    def read_imagestream(self, path: str) -> ImageStreamDefinition: ...

    @abstractmethod
    def read_template(self, path: str) -> TemplateDefinition: ...


class FileContentReader(ContentReader):
    """Reads content from the local filesystem."""

    def list(self, directory: str) -> list[ContentEntry]:
        """List a directory in lexical order."""
        try:
            with os.scandir(directory) as it:
                entries = [ContentEntry(e.name, e.is_dir()) for e in it]
        except OSError as e:
            raise ContentError(f"error listing directory {directory}: {e}") from e
        return sorted(entries, key=lambda e: e.name)

    def _read_json(self, path: str) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ContentError(f"error reading file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ContentError(f"error reading file {path}: not a JSON object")
        return data

    def read_imagestream(self, path: str) -> ImageStreamDefinition:
        return cast(ImageStreamDefinition, self._read_json(path))

    def read_template(self, path: str) -> TemplateDefinition:
        return cast(TemplateDefinition, self._read_json(path))


def get_content_root() -> str:
    """Parent directory of all content roots (SAMPLES_CONTENT_ROOT env)."""
    return os.environ.get("SAMPLES_CONTENT_ROOT", DEFAULT_CONTENT_ROOT)


def get_base_dir(arch: str, install_type: str, content_root: str | None = None) -> str:
    """Resolve the content root for an architecture and install type.

    Raises:
        ConfigurationError: unsupported architecture, unsupported
            combination, or invalid install type.
    """
    root = content_root if content_root is not None else get_content_root()

    if arch not in (X86, PPC):
        raise ConfigurationError(
            f"architecture {arch} unsupported; only support {X86} and {PPC}"
        )

    try:
        distribution = InstallType(install_type)
    except ValueError:
        raise ConfigurationError(
            f"invalid install type {install_type} specified, should be rhel or centos"
        ) from None

    if arch == X86:
        if distribution is InstallType.RHEL:
            return os.path.join(root, X86_OCP_CONTENT_DIR)
        return os.path.join(root, X86_OKD_CONTENT_DIR)

    if distribution is InstallType.CENTOS:
        raise ConfigurationError(
            f"{PPC} architecture and centos install are not currently supported"
        )
    return os.path.join(root, PPC64_OCP_CONTENT_DIR)
