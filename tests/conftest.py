"""Shared fixtures for cdmgate tests."""

import json
from pathlib import Path

import pytest

from cdmgate.timestamps import iso_now


def _write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def write_json():
    """Write a JSON document, creating parent directories."""
    return _write_json


@pytest.fixture
def valid_contact():
    """A contact that passes both the schema and the business rules."""
    return {
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
        "createdOn": "2024-01-01T12:00:00.000Z",
        "modifiedOn": "2024-01-02T08:30:00.000Z",
        "createdBy": "test-user",
        "modifiedBy": "test-user",
    }


@pytest.fixture
def invalid_contact():
    """A contact failing both the schema and the business rules."""
    return {
        "fullName": "",
        "emailAddress": "invalid-email",
        "country": "XX",
        "jobTitle": "Manager",
    }


@pytest.fixture
def valid_metadata():
    """Metadata referencing ``valid-contact.json``."""
    return {
        "submissionId": "1704110400000-abcd12345",
        "processedAt": iso_now(),
        "gitBranch": "contact-12345678-2024-01-01t12-00-00-000z",
        "gitCommitMessage": "Add contact: John Doe",
        "contactId": "valid-contact",
        "version": "1.0",
        "namespace": "com.example.cdm",
        "recordCount": 1,
    }


@pytest.fixture
def repo(tmp_path):
    """Empty repository root with the default input directories."""
    (tmp_path / "data" / "contacts").mkdir(parents=True)
    (tmp_path / "metadata" / "submissions").mkdir(parents=True)
    return tmp_path
