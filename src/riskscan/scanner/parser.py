"""Turn raw analyzer text into validated Finding records."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

from riskscan.errors import MalformedResponseError
from riskscan.scanner.models import Finding, RiskScore

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = (
    "vulnerability",
    "risk_score",
    "filename",
    "explanation",
    "recommendation",
)


def parse_findings(
    text: str,
    workspace_root: str | Path | None = None,
) -> list[Finding]:
    """Parse an analyzer response; malformed input yields no findings."""
    try:
        records = load_envelope(text)
    except MalformedResponseError as e:
        logger.warning("Discarding analyzer response: %s", e)
        return []

    findings: list[Finding] = []
    for index, record in enumerate(records):
        finding = _build_finding(record, index)
        if finding is None:
            continue
        if workspace_root is not None:
            normalized = normalize_filename(finding.filename, workspace_root)
            if normalized != finding.filename:
                finding = replace(finding, filename=normalized)
        findings.append(finding)
    return findings


def load_envelope(text: str) -> list[Any]:
    """Strictly decode ``{"findings": [...]}`` and return the raw records."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError("top-level value is not an object")
    records = data.get("findings")
    if not isinstance(records, list):
        raise MalformedResponseError("'findings' is missing or not an array")
    return records


def normalize_filename(filename: str, workspace_root: str | Path) -> str:
    """Rewrite an absolute path under the workspace root as root-relative."""
    root = os.fspath(workspace_root).rstrip("/\\")
    if not root or not os.path.isabs(filename):
        return filename
    if filename == root:
        return filename

    prefix = root + os.sep
    if not filename.startswith(prefix) and not filename.startswith(root + "/"):
        return filename
    return filename[len(root) :].lstrip("/\\")


def _build_finding(record: Any, index: int) -> Finding | None:
    if not isinstance(record, dict):
        logger.warning("Finding #%d is not an object, skipped", index)
        return None

    missing = [
        name for name in _REQUIRED_FIELDS if not isinstance(record.get(name), str)
    ]
    if missing:
        logger.warning(
            "Finding #%d missing fields %s, skipped", index, ", ".join(missing)
        )
        return None

    try:
        risk = RiskScore(record["risk_score"].strip().lower())
    except ValueError:
        logger.warning(
            "Finding #%d has unknown risk_score %r, skipped",
            index,
            record["risk_score"],
        )
        return None

    lines_raw = record.get("lines_affected", [])
    if not isinstance(lines_raw, list) or not all(
        isinstance(n, int) and not isinstance(n, bool) and n > 0 for n in lines_raw
    ):
        logger.warning(
            "Finding #%d has invalid lines_affected %r, skipped", index, lines_raw
        )
        return None

    reference = record.get("reference")
    if reference is not None and not isinstance(reference, str):
        reference = None

    return Finding(
        vulnerability=record["vulnerability"],
        risk_score=risk,
        filename=record["filename"],
        lines_affected=tuple(lines_raw),
        explanation=record["explanation"],
        recommendation=record["recommendation"],
        reference=reference,
    )
