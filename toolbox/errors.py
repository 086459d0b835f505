from __future__ import annotations

from pathlib import Path


class RegistryError(RuntimeError):
    """Base class for registry check and load failures."""

    org_id: str | None
    path: str | None

    def __init__(
        self,
        message: str,
        *,
        org_id: str | None = None,
        path: Path | str | None = None,
    ) -> None:
        self.org_id = org_id
        self.path = None if path is None else str(path)
        if org_id:
            message = f"({org_id}) {message}"
        super().__init__(message)

    def as_dict(self) -> dict[str, str | None]:
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "org_id": self.org_id,
            "path": self.path,
        }


class SchemaError(RegistryError):
    def __init__(self, *, path: Path | str, details: str) -> None:
        super().__init__(f"invalid organization record {path}: {details}", path=path)


class UnsupportedVersionError(RegistryError):
    def __init__(self, *, path: Path | str, api_version: str, supported: str) -> None:
        super().__init__(
            f"unsupported API version {api_version!r} in {path} (expected {supported!r})",
            path=path,
        )
        self.api_version = api_version


class IdentityMismatchError(RegistryError):
    def __init__(self, *, path: Path | str, org_id: str, field: str, value: str) -> None:
        super().__init__(f"{field} mismatch {value!r}", org_id=org_id, path=path)
        self.field = field
        self.value = value


class EmptyRegistryError(RegistryError):
    """Raised when a registry holds no organization records. Not a violation."""

    def __init__(self, *, path: Path | str) -> None:
        super().__init__(f"no organizations found in registry {path}", path=path)


class DuplicateOrganizationError(RegistryError):
    def __init__(self, *, org_id: str, path: Path | str, previous_path: Path | str) -> None:
        super().__init__(
            f"organization id already defined by {previous_path}",
            org_id=org_id,
            path=path,
        )
        self.previous_path = str(previous_path)


class NebulaServiceError(RegistryError):
    """Base class for overlay network violations."""


class InvalidAddressError(NebulaServiceError):
    def __init__(self, *, org_id: str, address: str) -> None:
        super().__init__(f"invalid Nebula address: {address}", org_id=org_id)
        self.address = address


class AddressOutOfRangeError(NebulaServiceError):
    def __init__(self, *, org_id: str, address: str, network: str) -> None:
        super().__init__(f"Nebula address {address} is outside {network}", org_id=org_id)
        self.address = address
        self.network = network


class DuplicateAddressError(NebulaServiceError):
    def __init__(self, *, org_id: str, address: str) -> None:
        super().__init__(f"duplicate Nebula address found: {address}", org_id=org_id)
        self.address = address


class MissingCertificateError(NebulaServiceError):
    def __init__(self, *, org_id: str, fingerprint: str, path: Path | str) -> None:
        super().__init__(f"Nebula certificate not found: {fingerprint}", org_id=org_id, path=path)
        self.fingerprint = fingerprint


class InvalidEndpointError(NebulaServiceError):
    def __init__(self, *, org_id: str, endpoint: str, reason: str) -> None:
        super().__init__(f"invalid Lighthouse endpoint {endpoint!r}: {reason}", org_id=org_id)
        self.endpoint = endpoint


class TelephonyServiceError(RegistryError):
    """Base class for telephony violations."""


class DuplicateExchangeError(TelephonyServiceError):
    def __init__(self, *, org_id: str, exchange_id: str) -> None:
        super().__init__(f"duplicate Telephony exchange ID found: {exchange_id}", org_id=org_id)
        self.exchange_id = exchange_id


class InvalidExchangeAddressError(TelephonyServiceError):
    def __init__(self, *, org_id: str, exchange_id: str, address: str, reason: str) -> None:
        super().__init__(
            f"invalid address {address!r} for exchange {exchange_id}: {reason}",
            org_id=org_id,
        )
        self.exchange_id = exchange_id
        self.address = address


class DuplicateGlobalPrefixError(TelephonyServiceError):
    def __init__(self, *, org_id: str, prefix: str) -> None:
        super().__init__(f"duplicate Telephony prefix found: {prefix}", org_id=org_id)
        self.prefix = prefix


class DuplicateLocalPrefixError(TelephonyServiceError):
    def __init__(self, *, org_id: str, prefix: str) -> None:
        super().__init__(
            f"duplicate Telephony prefix found within organization: {prefix}",
            org_id=org_id,
        )
        self.prefix = prefix


class UnknownExchangeReferenceError(TelephonyServiceError):
    def __init__(self, *, org_id: str, prefix: str, exchange_id: str) -> None:
        super().__init__(
            f"Telephony prefix {prefix} references unknown exchange: {exchange_id}",
            org_id=org_id,
        )
        self.prefix = prefix
        self.exchange_id = exchange_id
