from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass
from pathlib import Path

from toolbox.config import CERTIFICATE_SUFFIX


@dataclass(frozen=True)
class CertificateProbeResult:
    fingerprint: str
    path: Path
    exists: bool


def certificate_path(certificates_root: Path, fingerprint: str) -> Path:
    return certificates_root / f"{fingerprint}{CERTIFICATE_SUFFIX}"


def probe_certificate(certificates_root: Path, fingerprint: str) -> CertificateProbeResult:
    path = certificate_path(certificates_root, fingerprint)
    return CertificateProbeResult(fingerprint=fingerprint, path=path, exists=path.is_file())


def probe_certificates(
    certificates_root: Path,
    fingerprints: list[str],
    *,
    max_workers: int,
) -> list[CertificateProbeResult]:
    """Check certificate files in parallel; results keep the order of ``fingerprints``."""
    if not fingerprints:
        return []

    workers = max(1, min(max_workers, len(fingerprints)))
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(probe_certificate, certificates_root, fingerprint)
            for fingerprint in fingerprints
        ]
        return [future.result() for future in futures]


def first_missing_certificate(results: list[CertificateProbeResult]) -> CertificateProbeResult | None:
    for result in results:
        if not result.exists:
            return result
    return None
