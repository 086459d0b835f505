from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from toolbox.config import RegistryConfig
from toolbox.errors import EmptyRegistryError
from toolbox.loader import OrganizationMap, assemble_registry
from toolbox.nebula import check_nebula_service
from toolbox.telephony import check_telephony_service

logger = logging.getLogger(__name__)


def count_checked(orgs: OrganizationMap) -> dict[str, int]:
    nebula_nodes = 0
    exchanges = 0
    prefixes = 0
    for org in orgs.values():
        nebula_nodes += len(org.nebula_nodes)
        if org.telephony is not None:
            exchanges += len(org.telephony.exchanges)
            prefixes += len(org.telephony.prefixes)
    return {
        "organizations": len(orgs),
        "nebula_nodes": nebula_nodes,
        "telephony_exchanges": exchanges,
        "telephony_prefixes": prefixes,
    }


def run_check(registry_path: Path, *, config: RegistryConfig) -> dict[str, Any]:
    """Check the registry and return a result payload.

    The first violation is raised as a :class:`toolbox.errors.RegistryError`.
    An empty registry is reported as a successful result with a warning.
    """
    logger.info("Checking registry at: %s", registry_path)

    try:
        orgs = assemble_registry(registry_path, config=config)
    except EmptyRegistryError as exc:
        logger.warning("No organizations found in registry!")
        return {
            "ok": True,
            "registry": str(registry_path),
            "warning": str(exc),
            "checked": count_checked({}),
        }

    check_nebula_service(orgs, registry_path=registry_path, config=config)
    check_telephony_service(orgs)

    logger.info("Registry check completed successfully.")
    return {
        "ok": True,
        "registry": str(registry_path),
        "checked": count_checked(orgs),
    }
