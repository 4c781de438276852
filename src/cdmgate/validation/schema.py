"""CDM schema validation for contact records.

A contact is first checked against the structural ``ContactRecord`` model.
Only a structurally valid contact goes on to the CDM compliance rules, which
are all evaluated so every problem is reported in one run.
"""

import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console

from cdmgate.config import GateConfig
from cdmgate.discovery import find_json_files
from cdmgate.models.contact import ContactRecord, structural_errors
from cdmgate.timestamps import parse_iso
from cdmgate.validation.framework import BatchResult, BatchRunner, Violation, ViolationKind

logger = logging.getLogger(__name__)

TITLE = "CDM Schema Validation Results"
SUBJECT = "contact data"
DETAIL_KIND = "Invalid"

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def validate_contact(data: Any, path: Path | None = None) -> list[Violation]:
    """Validate one parsed contact record.

    Returns:
        Structural violations if the shape is wrong, otherwise the CDM
        compliance violations (empty when the contact is valid).
    """
    try:
        contact = ContactRecord.model_validate(data)
    except ValidationError as e:
        return [Violation(ViolationKind.STRUCTURAL, message) for message in structural_errors(e)]

    return [
        Violation(ViolationKind.SEMANTIC, f"CDM Compliance: {message}")
        for message in cdm_compliance_errors(contact)
    ]


def cdm_compliance_errors(contact: ContactRecord) -> list[str]:
    errors = []

    if not UUID_PATTERN.fullmatch(contact.contact_id):
        errors.append("contactId must be valid UUID format")

    if contact.email_address != contact.email_address.lower():
        errors.append("emailAddress must be lowercase")

    created = modified = None
    if contact.created_on:
        created = parse_iso(contact.created_on)
        if created is None:
            errors.append("createdOn must be valid ISO date")
    if contact.modified_on:
        modified = parse_iso(contact.modified_on)
        if modified is None:
            errors.append("modifiedOn must be valid ISO date")

    if created is not None and modified is not None and modified < created:
        errors.append("modifiedOn cannot be before createdOn")

    return errors


def run_schema_validation(
    root: Path,
    config: GateConfig | None = None,
    console: Console | None = None,
) -> BatchResult:
    """Validate every contact file under the contacts directory and write the log."""
    config = config or GateConfig()
    files = find_json_files(root, config.paths.contacts_dir)

    runner = BatchRunner(TITLE, SUBJECT, DETAIL_KIND, validate_contact, root=root, console=console)
    result = runner.run(files)
    result.write_log(config.output_path(root, config.logs.schema_log))
    return result
