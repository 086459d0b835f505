from __future__ import annotations

import ipaddress
import os
from collections.abc import Mapping

from pydantic import field_validator

from toolbox.schemas import ToolboxBaseModel

SUPPORTED_API_VERSION = "hackfed/v1"
NEBULA_NETWORK = "fd79:7636:1f08:883d::/64"
ORGS_DIR = "orgs"
RECORD_PATTERNS = ("*.yaml", "*.yml")
CERTIFICATES_DIR = "nebula/certificates"
CERTIFICATE_SUFFIX = ".crt"
DEFAULT_CERTIFICATE_PROBE_WORKERS = 8
DEFAULT_DIRECTORY_OUTPUT = "telephony-directory.json"


def _validate_relative_path(value: str) -> str:
    path = value.strip()
    if path.startswith("/"):
        raise ValueError("path must be relative")
    path = path.rstrip("/")
    if not path:
        raise ValueError("path must be non-empty")
    if ".." in path.split("/"):
        raise ValueError("path cannot contain '..'")
    return path


def _parse_int(raw: str, *, env_var: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{env_var} must be an integer") from exc


class RegistryConfig(ToolboxBaseModel):
    api_version: str = SUPPORTED_API_VERSION
    nebula_network: str = NEBULA_NETWORK
    orgs_dir: str = ORGS_DIR
    record_patterns: tuple[str, ...] = RECORD_PATTERNS
    certificates_dir: str = CERTIFICATES_DIR
    certificate_probe_workers: int = DEFAULT_CERTIFICATE_PROBE_WORKERS

    @field_validator("api_version")
    @classmethod
    def validate_api_version(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("api_version must be non-empty")
        return text

    @field_validator("nebula_network")
    @classmethod
    def validate_nebula_network(cls, value: str) -> str:
        try:
            network = ipaddress.ip_network(value.strip())
        except ValueError as exc:
            raise ValueError(f"nebula_network must be a CIDR block: {exc}") from exc
        return str(network)

    @field_validator("orgs_dir", "certificates_dir")
    @classmethod
    def validate_paths(cls, value: str) -> str:
        return _validate_relative_path(value)

    @field_validator("record_patterns")
    @classmethod
    def validate_record_patterns(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        patterns = tuple(item.strip() for item in value if item.strip())
        if not patterns:
            raise ValueError("record_patterns must contain at least one glob")
        return patterns

    @field_validator("certificate_probe_workers")
    @classmethod
    def validate_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("certificate_probe_workers must be >= 1")
        return value

    @property
    def network(self) -> ipaddress.IPv4Network | ipaddress.IPv6Network:
        return ipaddress.ip_network(self.nebula_network)


def load_registry_config_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    base_config: RegistryConfig | None = None,
) -> RegistryConfig:
    env = dict(os.environ if environ is None else environ)
    config = base_config or RegistryConfig()
    payload = config.model_dump(mode="python")

    if "TOOLBOX_API_VERSION" in env:
        payload["api_version"] = env["TOOLBOX_API_VERSION"]
    if "TOOLBOX_NEBULA_NETWORK" in env:
        payload["nebula_network"] = env["TOOLBOX_NEBULA_NETWORK"]
    if "TOOLBOX_ORGS_DIR" in env:
        payload["orgs_dir"] = env["TOOLBOX_ORGS_DIR"]
    if "TOOLBOX_CERTIFICATES_DIR" in env:
        payload["certificates_dir"] = env["TOOLBOX_CERTIFICATES_DIR"]
    if "TOOLBOX_CERTIFICATE_PROBE_WORKERS" in env:
        payload["certificate_probe_workers"] = _parse_int(
            env["TOOLBOX_CERTIFICATE_PROBE_WORKERS"],
            env_var="TOOLBOX_CERTIFICATE_PROBE_WORKERS",
        )

    return RegistryConfig.model_validate(payload)
