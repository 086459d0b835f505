from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from pathlib import Path

import yaml
from pydantic import ValidationError

from toolbox.config import RegistryConfig
from toolbox.errors import (
    DuplicateOrganizationError,
    EmptyRegistryError,
    IdentityMismatchError,
    SchemaError,
    UnsupportedVersionError,
)
from toolbox.schemas import Organization

logger = logging.getLogger(__name__)

OrganizationMap = dict[str, Organization]
OrganizationLoader = Callable[[Path], Organization]


def format_validation_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    if location:
        return f"{location}: {error['msg']}"
    return str(error["msg"])


def parse_organization(path: Path) -> Organization:
    """Parse one record file against the organization schema only."""
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SchemaError(path=path, details=f"invalid YAML: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise SchemaError(path=path, details=f"file is not UTF-8: {exc}") from exc

    if not isinstance(payload, dict):
        raise SchemaError(path=path, details="record must be a YAML mapping")

    try:
        return Organization.model_validate(payload)
    except ValidationError as exc:
        raise SchemaError(path=path, details=format_validation_error(exc)) from exc


def load_organization(path: Path, *, config: RegistryConfig) -> Organization:
    """Parse a record and enforce the invariants local to that record.

    The declared API version must be supported, and ``metadata.orgId`` must
    equal both the file name (without extension) and ``spec.id``.
    """
    logger.debug("Checking organization file: %s", path)
    org = parse_organization(path)

    if org.api_version != config.api_version:
        raise UnsupportedVersionError(
            path=path,
            api_version=org.api_version,
            supported=config.api_version,
        )

    file_id = path.stem
    if org.metadata.org_id != file_id:
        raise IdentityMismatchError(
            path=path,
            org_id=file_id,
            field="metadata orgId",
            value=org.metadata.org_id,
        )
    if org.metadata.org_id != org.spec.id:
        raise IdentityMismatchError(
            path=path,
            org_id=file_id,
            field="spec id",
            value=org.spec.id,
        )

    return org


def gather_organization_files(registry_path: Path, *, config: RegistryConfig) -> list[Path]:
    orgs_root = registry_path / config.orgs_dir
    if not orgs_root.is_dir():
        return []

    files: set[Path] = set()
    for pattern in config.record_patterns:
        for path in orgs_root.glob(pattern):
            if path.is_file():
                files.add(path)
    return sorted(files)


def assemble_registry(
    registry_path: Path,
    *,
    config: RegistryConfig,
    loader: OrganizationLoader | None = None,
) -> OrganizationMap:
    """Load every organization record under the registry into an id-keyed map.

    ``loader`` defaults to :func:`load_organization`; pass
    :func:`parse_organization` to skip the version and identity checks.
    """
    if loader is None:
        loader = partial(load_organization, config=config)

    orgs: OrganizationMap = {}
    sources: dict[str, Path] = {}

    for path in gather_organization_files(registry_path, config=config):
        org = loader(path)
        if org.id in orgs:
            raise DuplicateOrganizationError(
                org_id=org.id,
                path=path,
                previous_path=sources[org.id],
            )
        orgs[org.id] = org
        sources[org.id] = path

    if not orgs:
        raise EmptyRegistryError(path=registry_path)

    logger.debug("Loaded %d organizations from %s", len(orgs), registry_path)
    return orgs
