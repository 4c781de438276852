"""Submission metadata validation.

Checks the audit trail attached to each submission: required fields, field
formats and that the referenced contact file exists.
"""

import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rich.console import Console

from cdmgate.config import GateConfig
from cdmgate.discovery import find_json_files
from cdmgate.timestamps import parse_iso
from cdmgate.validation.framework import BatchResult, BatchRunner, Violation, ViolationKind

logger = logging.getLogger(__name__)

TITLE = "Metadata Validation Results"
SUBJECT = "metadata"
DETAIL_KIND = "Invalid metadata"

REQUIRED_FIELDS = ("submissionId", "processedAt", "gitBranch", "gitCommitMessage")

SUBMISSION_ID_PATTERN = re.compile(r"^[0-9]{13}-[a-z0-9]{9}$")
BRANCH_PATTERN = re.compile(
    r"^(contact|feature|hotfix)-[a-z0-9]{8}-[0-9]{4}-[0-9]{2}-[0-9]{2}t[0-9]{2}-[0-9]{2}-[0-9]{2}-[0-9]{3}z$",
    re.IGNORECASE,
)
VERSION_PATTERN = re.compile(r"^[0-9]+\.[0-9]+$")
NAMESPACE_PATTERN = re.compile(r"^[a-z]+(\.[a-z]+)*\.[a-z]+$")


def _is_record_count(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer() and value >= 0
    return isinstance(value, int) and value >= 0


class MetadataValidator:
    """Validates submission metadata against a contacts directory."""

    def __init__(self, contacts_dir: Path, now: datetime | None = None):
        """Initialize the validator.

        Args:
            contacts_dir: Directory that must hold the referenced contact files
            now: Reference time for the future-timestamp check (default: wall clock)
        """
        self.contacts_dir = Path(contacts_dir)
        self.now = now

    def __call__(self, data: Any, path: Path | None = None) -> list[Violation]:
        return self.validate(data)

    def validate(self, metadata: Any) -> list[Violation]:
        if not isinstance(metadata, dict):
            return [Violation(ViolationKind.STRUCTURAL, "Metadata record must be a JSON object")]

        violations: list[Violation] = []

        def semantic(message: str) -> None:
            violations.append(Violation(ViolationKind.SEMANTIC, message))

        for field_name in REQUIRED_FIELDS:
            if not metadata.get(field_name):
                violations.append(
                    Violation(ViolationKind.STRUCTURAL, f"Missing required metadata field: {field_name}")
                )

        submission_id = metadata.get("submissionId")
        if submission_id:
            if not isinstance(submission_id, str) or not SUBMISSION_ID_PATTERN.fullmatch(submission_id):
                semantic(f"Invalid submissionId format: {submission_id}")

        processed_at = metadata.get("processedAt")
        if processed_at:
            if parse_iso(processed_at) is None:
                semantic(f"Invalid processedAt timestamp: {processed_at}")
            # Staleness is unbounded; only timestamps in the future are rejected.
            instant = parse_iso(processed_at, strict=False)
            if instant is not None and instant > (self.now or datetime.now(UTC)):
                semantic("processedAt timestamp cannot be in the future")

        branch = metadata.get("gitBranch")
        if branch:
            if not isinstance(branch, str) or not BRANCH_PATTERN.fullmatch(branch):
                semantic(f"Git branch does not follow naming convention: {branch}")

        version = metadata.get("version")
        if version:
            if not isinstance(version, str) or not VERSION_PATTERN.fullmatch(version):
                semantic(f"Invalid CDM schema version format: {version}")

        namespace = metadata.get("namespace")
        if namespace:
            if not isinstance(namespace, str) or not NAMESPACE_PATTERN.fullmatch(namespace):
                semantic(f"Invalid CDM namespace format: {namespace}")

        if "recordCount" in metadata and not _is_record_count(metadata["recordCount"]):
            semantic(f"Invalid recordCount: {metadata['recordCount']}")

        if submission_id:
            violations.extend(self._check_contact_reference(metadata.get("contactId")))

        return violations

    def _check_contact_reference(self, contact_id: Any) -> list[Violation]:
        if not contact_id or not isinstance(contact_id, str):
            return [Violation(ViolationKind.REFERENTIAL, "Metadata does not name a contactId to cross-reference")]

        expected = self.contacts_dir / f"{contact_id}.json"
        if not expected.is_file():
            return [Violation(ViolationKind.REFERENTIAL, f"Referenced data file not found: {expected}")]
        return []


def validate_metadata(metadata: Any, contacts_dir: Path, now: datetime | None = None) -> list[Violation]:
    return MetadataValidator(contacts_dir, now=now).validate(metadata)


def run_metadata_validation(
    root: Path,
    config: GateConfig | None = None,
    console: Console | None = None,
) -> BatchResult:
    """Validate every metadata file under the submissions directory and write the log."""
    config = config or GateConfig()
    files = find_json_files(root, config.paths.submissions_dir)

    validator = MetadataValidator(config.contacts_path(root))
    runner = BatchRunner(TITLE, SUBJECT, DETAIL_KIND, validator, root=root, console=console)
    result = runner.run(files)
    result.write_log(config.output_path(root, config.logs.metadata_log))
    return result
