from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ORG_ID_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
FINGERPRINT_RE = re.compile(r"^[A-Za-z0-9]+$")


class ToolboxBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


def validate_non_empty(value: str) -> str:
    text = value.strip()
    if not text:
        raise ValueError("must be non-empty")
    return text


class OrganizationMetadata(ToolboxBaseModel):
    org_id: str = Field(alias="orgId")

    @field_validator("org_id")
    @classmethod
    def validate_org_id(cls, value: str) -> str:
        text = value.strip()
        if not ORG_ID_RE.match(text):
            raise ValueError("orgId must be lowercase letters, digits, '-' or '_'")
        return text


class Lighthouse(ToolboxBaseModel):
    endpoints: list[str] | None = None


class NebulaNode(ToolboxBaseModel):
    address: str
    certificates: list[str] = Field(default_factory=list)
    lighthouse: Lighthouse | None = None

    @field_validator("address")
    @classmethod
    def validate_address(cls, value: str) -> str:
        return validate_non_empty(value)

    @field_validator("certificates")
    @classmethod
    def validate_certificates(cls, value: list[str]) -> list[str]:
        for fingerprint in value:
            if not FINGERPRINT_RE.match(fingerprint):
                raise ValueError(f"certificate fingerprint must be alphanumeric: {fingerprint!r}")
        return value


class TelephonyExchange(ToolboxBaseModel):
    id: str
    address: str
    codecs: list[str] = Field(default_factory=list)
    protocol: str

    @field_validator("id", "address", "protocol")
    @classmethod
    def validate_non_empty_text(cls, value: str) -> str:
        return validate_non_empty(value)


class TelephonyPrefix(ToolboxBaseModel):
    prefix: str
    exchange: str

    @field_validator("prefix", "exchange")
    @classmethod
    def validate_non_empty_text(cls, value: str) -> str:
        return validate_non_empty(value)


class TelephonyService(ToolboxBaseModel):
    exchanges: list[TelephonyExchange] = Field(default_factory=list)
    prefixes: list[TelephonyPrefix] = Field(default_factory=list)
    phonebook: list[Any] = Field(default_factory=list)


class OrganizationServices(ToolboxBaseModel):
    nebula: list[NebulaNode] | None = None
    telephony: TelephonyService | None = None


class OrganizationSpec(ToolboxBaseModel):
    id: str
    name: str
    services: OrganizationServices | None = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        text = value.strip()
        if not ORG_ID_RE.match(text):
            raise ValueError("id must be lowercase letters, digits, '-' or '_'")
        return text

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return validate_non_empty(value)


class Organization(ToolboxBaseModel):
    """One registry record as written in ``orgs/<id>.yaml``."""

    api_version: str = Field(alias="apiVersion")
    kind: Literal["Organization"] = "Organization"
    metadata: OrganizationMetadata
    spec: OrganizationSpec

    @property
    def id(self) -> str:
        return self.spec.id

    @property
    def nebula_nodes(self) -> list[NebulaNode]:
        if self.spec.services is None:
            return []
        return self.spec.services.nebula or []

    @property
    def telephony(self) -> TelephonyService | None:
        if self.spec.services is None:
            return None
        return self.spec.services.telephony


class TelephonyDirectoryExchange(ToolboxBaseModel):
    id: str
    endpoint: str
    protocol: str
    codecs: list[str]
    prefixes: list[str]


class TelephonyDirectoryOrg(ToolboxBaseModel):
    org_id: str = Field(alias="orgId")
    name: str
    phonebooks: list[Any] = Field(default_factory=list)
    exchanges: list[TelephonyDirectoryExchange] = Field(default_factory=list)


class TelephonyDirectory(ToolboxBaseModel):
    orgs: list[TelephonyDirectoryOrg] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_orgs(self) -> "TelephonyDirectory":
        seen: set[str] = set()
        for org in self.orgs:
            if org.org_id in seen:
                raise ValueError(f"duplicate orgId in directory: {org.org_id}")
            seen.add(org.org_id)
        return self
