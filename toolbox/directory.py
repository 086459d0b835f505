from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from toolbox.config import RegistryConfig
from toolbox.errors import EmptyRegistryError
from toolbox.loader import OrganizationMap, assemble_registry, parse_organization
from toolbox.schemas import (
    Organization,
    TelephonyDirectory,
    TelephonyDirectoryExchange,
    TelephonyDirectoryOrg,
    TelephonyService,
)

logger = logging.getLogger(__name__)


def map_exchange_prefixes(telephony: TelephonyService) -> dict[str, list[str]]:
    exchange_prefixes: dict[str, list[str]] = {}
    for prefix in telephony.prefixes:
        prefixes = exchange_prefixes.setdefault(prefix.exchange, [])
        if prefix.prefix not in prefixes:
            prefixes.append(prefix.prefix)
    return exchange_prefixes


def build_directory_org(org: Organization, telephony: TelephonyService) -> TelephonyDirectoryOrg:
    exchange_prefixes = map_exchange_prefixes(telephony)

    exchanges: dict[str, TelephonyDirectoryExchange] = {}
    for exchange in telephony.exchanges:
        exchanges[exchange.id] = TelephonyDirectoryExchange(
            id=exchange.id,
            endpoint=exchange.address,
            protocol=exchange.protocol,
            codecs=list(exchange.codecs),
            prefixes=list(exchange_prefixes.get(exchange.id, [])),
        )

    return TelephonyDirectoryOrg(
        org_id=org.spec.id,
        name=org.spec.name,
        phonebooks=list(telephony.phonebook),
        exchanges=list(exchanges.values()),
    )


def build_telephony_directory(orgs: OrganizationMap) -> TelephonyDirectory:
    """Project the registry into the consolidated telephony directory.

    Organizations without a telephony service are left out. Every declared
    exchange is listed, with the prefixes routed to it (possibly none).
    """
    directory_orgs: list[TelephonyDirectoryOrg] = []
    for org in orgs.values():
        telephony = org.telephony
        if telephony is None:
            continue
        directory_orgs.append(build_directory_org(org, telephony))
        logger.debug("Added organization: %s (%s)", org.spec.name, org.spec.id)

    return TelephonyDirectory(orgs=directory_orgs)


def render_telephony_directory(directory: TelephonyDirectory) -> str:
    payload = directory.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def write_telephony_directory(directory: TelephonyDirectory, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_telephony_directory(directory), encoding="utf-8")
    return output_path


def generate_telephony_directory(
    registry_path: Path,
    output_path: Path,
    *,
    config: RegistryConfig,
) -> dict[str, Any]:
    logger.info("Generating telephony directory from registry at: %s", registry_path)

    try:
        orgs = assemble_registry(registry_path, config=config, loader=parse_organization)
    except EmptyRegistryError:
        logger.warning("No organizations found in registry!")
        orgs = {}

    directory = build_telephony_directory(orgs)
    write_telephony_directory(directory, output_path)
    logger.info("Wrote telephony directory to: %s", output_path)
    return {
        "ok": True,
        "registry": str(registry_path),
        "output": str(output_path),
        "organizations": len(directory.orgs),
    }
