"""Sample submissions for trying the pipeline locally.

Writes one valid and one invalid contact plus one valid and one invalid
metadata record, so a full run exercises both the passing and failing paths.
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from cdmgate.config import GateConfig
from cdmgate.timestamps import format_iso

logger = logging.getLogger(__name__)


def sample_records(now: datetime | None = None) -> dict[str, dict[str, dict]]:
    """Sample records keyed by directory kind and file stem."""
    now = now or datetime.now(UTC)
    stamp = format_iso(now)
    millis = int(now.timestamp() * 1000)

    contacts = {
        "valid-contact": {
            "contactId": "123e4567-e89b-12d3-a456-426614174000",
            "fullName": "John Doe",
            "emailAddress": "john.doe@example.com",
            "phoneNumber": "+1-555-123-4567",
            "company": "Tech Corp",
            "jobTitle": "Developer",
            "department": "IT",
            "country": "US",
            "stateProvince": "CA",
            "city": "San Francisco",
            "preferredContactMethod": "email",
            "isActive": True,
            "createdOn": stamp,
            "modifiedOn": stamp,
            "createdBy": "sample-data",
            "modifiedBy": "sample-data",
        },
        "invalid-contact": {
            "contactId": "invalid-uuid",
            "fullName": "",
            "emailAddress": "invalid-email",
            "phoneNumber": "123",
            "country": "XX",
            "jobTitle": "Manager",
            "createdOn": "invalid-date",
            "modifiedOn": stamp,
        },
    }
    metadata = {
        "valid-metadata": {
            "submissionId": f"{millis:013d}-abcd12345",
            "processedAt": stamp,
            "gitBranch": "contact-12345678-2024-01-01t12-00-00-000z",
            "gitCommitMessage": "Add contact: John Doe",
            "contactId": "valid-contact",
            "version": "1.0",
            "namespace": "com.example.cdm",
            "recordCount": 1,
            "entityName": "Contact",
        },
        "invalid-metadata": {
            "submissionId": "invalid-format",
            "processedAt": "invalid-date",
            "gitBranch": "invalid branch name",
        },
    }
    return {"contacts": contacts, "metadata": metadata}


def write_sample_data(
    root: Path,
    config: GateConfig | None = None,
    force: bool = False,
    now: datetime | None = None,
) -> list[Path]:
    """Write the sample records under the configured input directories.

    Existing files are left alone unless ``force`` is set.

    Returns:
        Paths of the files actually written
    """
    config = config or GateConfig()
    records = sample_records(now)
    targets = {
        "contacts": config.contacts_path(root),
        "metadata": config.submissions_path(root),
    }

    written = []
    for kind, directory in targets.items():
        directory.mkdir(parents=True, exist_ok=True)
        for stem, record in records[kind].items():
            path = directory / f"{stem}.json"
            if path.exists() and not force:
                logger.info(f"Keeping existing sample file {path}")
                continue
            path.write_text(json.dumps(record, indent=2) + "\n", encoding="utf-8")
            written.append(path)

    return written
