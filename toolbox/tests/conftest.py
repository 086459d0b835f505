from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from toolbox.config import CERTIFICATES_DIR, ORGS_DIR, SUPPORTED_API_VERSION


def org_payload(
    org_id: str,
    *,
    name: str | None = None,
    nebula: list[dict[str, Any]] | None = None,
    telephony: dict[str, Any] | None = None,
    api_version: str = SUPPORTED_API_VERSION,
    spec_id: str | None = None,
) -> dict[str, Any]:
    services: dict[str, Any] = {}
    if nebula is not None:
        services["nebula"] = nebula
    if telephony is not None:
        services["telephony"] = telephony

    spec: dict[str, Any] = {
        "id": spec_id or org_id,
        "name": name or f"{org_id.title()} Hackspace",
    }
    if services:
        spec["services"] = services

    return {
        "apiVersion": api_version,
        "kind": "Organization",
        "metadata": {"orgId": org_id},
        "spec": spec,
    }


class RegistryBuilder:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.orgs_dir = root / ORGS_DIR
        self.certificates_dir = root / CERTIFICATES_DIR
        self.orgs_dir.mkdir(parents=True)
        self.certificates_dir.mkdir(parents=True)

    def write_org(self, org_id: str, *, filename: str | None = None, **kwargs: Any) -> Path:
        path = self.orgs_dir / (filename or f"{org_id}.yaml")
        path.write_text(yaml.safe_dump(org_payload(org_id, **kwargs), sort_keys=False), encoding="utf-8")
        return path

    def write_raw(self, filename: str, text: str) -> Path:
        path = self.orgs_dir / filename
        path.write_text(text, encoding="utf-8")
        return path

    def write_certificate(self, fingerprint: str) -> Path:
        path = self.certificates_dir / f"{fingerprint}.crt"
        path.write_text("-----BEGIN NEBULA CERTIFICATE-----\n", encoding="utf-8")
        return path


@pytest.fixture
def registry(tmp_path: Path) -> RegistryBuilder:
    return RegistryBuilder(tmp_path / "registry")
