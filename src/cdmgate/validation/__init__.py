"""Validation layer for submitted contact data and metadata.

Three independent validators share one batch framework: each discovers its
files, validates every record, writes a log and reports a CI exit code.
"""

from .business_rules import BUSINESS_RULES, BusinessRulesValidator, validate_business_rules
from .framework import (
    BatchResult,
    BatchRunner,
    FileResult,
    Violation,
    ViolationKind,
)
from .metadata import MetadataValidator, validate_metadata
from .schema import validate_contact

__all__ = [
    "BatchResult",
    "BatchRunner",
    "FileResult",
    "Violation",
    "ViolationKind",
    "validate_contact",
    "BUSINESS_RULES",
    "BusinessRulesValidator",
    "validate_business_rules",
    "MetadataValidator",
    "validate_metadata",
]
