from __future__ import annotations

import logging

from toolbox.endpoints import parse_endpoint
from toolbox.errors import (
    DuplicateExchangeError,
    DuplicateGlobalPrefixError,
    DuplicateLocalPrefixError,
    InvalidExchangeAddressError,
    UnknownExchangeReferenceError,
)
from toolbox.loader import OrganizationMap
from toolbox.schemas import TelephonyService

logger = logging.getLogger(__name__)


def check_exchanges(org_id: str, telephony: TelephonyService) -> set[str]:
    exchange_ids: set[str] = set()
    for exchange in telephony.exchanges:
        if exchange.id in exchange_ids:
            raise DuplicateExchangeError(org_id=org_id, exchange_id=exchange.id)

        try:
            parse_endpoint(exchange.address, scheme="sip")
        except ValueError as exc:
            raise InvalidExchangeAddressError(
                org_id=org_id,
                exchange_id=exchange.id,
                address=exchange.address,
                reason=str(exc),
            ) from exc

        exchange_ids.add(exchange.id)
    return exchange_ids


def check_prefixes(
    org_id: str,
    telephony: TelephonyService,
    *,
    exchange_ids: set[str],
    seen_prefixes: set[str],
) -> set[str]:
    org_prefixes: set[str] = set()
    for prefix in telephony.prefixes:
        # Local first: seen_prefixes also holds this organization's prefixes.
        if prefix.prefix in org_prefixes:
            raise DuplicateLocalPrefixError(org_id=org_id, prefix=prefix.prefix)
        if prefix.prefix in seen_prefixes:
            raise DuplicateGlobalPrefixError(org_id=org_id, prefix=prefix.prefix)
        if prefix.exchange not in exchange_ids:
            raise UnknownExchangeReferenceError(
                org_id=org_id,
                prefix=prefix.prefix,
                exchange_id=prefix.exchange,
            )

        seen_prefixes.add(prefix.prefix)
        org_prefixes.add(prefix.prefix)
    return org_prefixes


def check_telephony_service(
    orgs: OrganizationMap,
    *,
    seen_prefixes: set[str] | None = None,
) -> set[str]:
    """Check telephony exchanges and prefixes across the registry.

    Exchanges of an organization are checked before its prefixes, so prefix
    references always resolve against that organization's full exchange set.
    Returns the accumulated set of dialing prefixes.
    """
    prefixes: set[str] = set() if seen_prefixes is None else seen_prefixes

    for org_id, org in orgs.items():
        telephony = org.telephony
        if telephony is None:
            continue

        exchange_ids = check_exchanges(org_id, telephony)
        org_prefixes = check_prefixes(
            org_id,
            telephony,
            exchange_ids=exchange_ids,
            seen_prefixes=prefixes,
        )
        logger.debug(
            "(%s) Telephony ok: %d exchanges, %d prefixes",
            org_id,
            len(exchange_ids),
            len(org_prefixes),
        )

    return prefixes
