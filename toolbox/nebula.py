from __future__ import annotations

import ipaddress
import logging
from pathlib import Path

from toolbox.config import RegistryConfig
from toolbox.endpoints import parse_endpoint
from toolbox.errors import (
    AddressOutOfRangeError,
    DuplicateAddressError,
    InvalidAddressError,
    InvalidEndpointError,
    MissingCertificateError,
)
from toolbox.loader import OrganizationMap
from toolbox.probes import first_missing_certificate, probe_certificates
from toolbox.schemas import NebulaNode

logger = logging.getLogger(__name__)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def check_nebula_node(
    org_id: str,
    node: NebulaNode,
    *,
    network: ipaddress.IPv4Network | ipaddress.IPv6Network,
    certificates_root: Path,
    seen_addresses: set[IPAddress],
    max_workers: int,
) -> IPAddress:
    try:
        address = ipaddress.ip_address(node.address)
    except ValueError as exc:
        raise InvalidAddressError(org_id=org_id, address=node.address) from exc

    # Overlay addresses carry no zone id (fe80::1%eth0).
    if isinstance(address, ipaddress.IPv6Address) and address.scope_id is not None:
        raise InvalidAddressError(org_id=org_id, address=node.address)

    if address.version != network.version or address not in network:
        raise AddressOutOfRangeError(org_id=org_id, address=node.address, network=str(network))

    if address in seen_addresses:
        raise DuplicateAddressError(org_id=org_id, address=node.address)

    results = probe_certificates(certificates_root, node.certificates, max_workers=max_workers)
    missing = first_missing_certificate(results)
    if missing is not None:
        raise MissingCertificateError(org_id=org_id, fingerprint=missing.fingerprint, path=missing.path)

    if node.lighthouse is not None:
        for endpoint in node.lighthouse.endpoints or []:
            try:
                parse_endpoint(endpoint, scheme="nebula")
            except ValueError as exc:
                raise InvalidEndpointError(org_id=org_id, endpoint=endpoint, reason=str(exc)) from exc

    return address


def check_nebula_service(
    orgs: OrganizationMap,
    *,
    registry_path: Path,
    config: RegistryConfig,
    seen_addresses: set[IPAddress] | None = None,
) -> set[IPAddress]:
    """Check every overlay node across the registry, stopping at the first violation.

    Returns the accumulated set of node addresses.
    """
    addresses: set[IPAddress] = set() if seen_addresses is None else seen_addresses
    network = config.network
    certificates_root = registry_path / config.certificates_dir

    for org_id, org in orgs.items():
        for node in org.nebula_nodes:
            address = check_nebula_node(
                org_id,
                node,
                network=network,
                certificates_root=certificates_root,
                seen_addresses=addresses,
                max_workers=config.certificate_probe_workers,
            )
            addresses.add(address)
            logger.debug("(%s) Nebula node ok: %s", org_id, address)

    return addresses
