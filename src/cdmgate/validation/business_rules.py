"""Business rules validation for contact records.

Ten independent policy rules, all evaluated for every contact. Lookup tables
live in ``BUSINESS_RULES`` so adding a blocked domain, a country or a phone
pattern needs no code change.
"""

import logging
import re
from pathlib import Path
from typing import Any

from rich.console import Console

from cdmgate.config import GateConfig
from cdmgate.discovery import find_json_files
from cdmgate.validation.framework import BatchResult, BatchRunner, Violation, ViolationKind

logger = logging.getLogger(__name__)

TITLE = "Business Rules Validation Results"
SUBJECT = "contact data"
DETAIL_KIND = "Rule violation"

_NANP = re.compile(r"^\+?1?[\-\s]?\(?[0-9]{3}\)?[\-\s]?[0-9]{3}[\-\s]?[0-9]{4}$")

BUSINESS_RULES: dict[str, Any] = {
    "blocked_email_domains": frozenset({
        "tempmail.com",
        "10minutemail.com",
        "throwaway.email",
        "guerrillamail.com",
        "mailinator.com",
        "yopmail.com",
    }),
    "allowed_countries": ("US", "CA", "UK", "FR", "DE", "AU", "JP", "MA"),
    "phone_number_patterns": {
        "US": _NANP,
        "CA": _NANP,
        "UK": re.compile(r"^\+?44[\-\s]?[0-9]{4}[\-\s]?[0-9]{6}$"),
        "FR": re.compile(r"^\+?33[\-\s]?[0-9]{1}[\-\s]?[0-9]{8}$"),
        "DE": re.compile(r"^\+?49[\-\s]?[0-9]{3,4}[\-\s]?[0-9]{7,8}$"),
        "MA": re.compile(r"^\+?212[0-9]{9}$"),
    },
    "personal_email_domains": frozenset({"gmail.com", "yahoo.com", "hotmail.com", "outlook.com"}),
    "valid_tags": frozenset({"customer", "prospect", "partner", "vendor", "employee", "consultant"}),
    "max_free_tag_length": 20,
    "sensitive_note_patterns": (
        re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),  # SSN
        re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b"),  # card number
        re.compile(r"password", re.IGNORECASE),
        re.compile(r"ssn", re.IGNORECASE),
        re.compile(r"social security", re.IGNORECASE),
    ),
}


def _text(contact: dict, key: str) -> str | None:
    value = contact.get(key)
    if not value:
        return None
    return value if isinstance(value, str) else str(value)


def email_domain(email: str) -> str | None:
    _, sep, domain = email.partition("@")
    return domain.lower() if sep else None


def normalize_email(email: str) -> str:
    return email.strip().lower()


class BusinessRulesValidator:
    """Applies the business rules to contacts of a single validation run.

    The instance remembers every email address it has seen, so uniqueness is
    enforced within one run only. Use a fresh instance per run.
    """

    def __init__(self, rules: dict[str, Any] | None = None):
        self.rules = rules or BUSINESS_RULES
        self.seen_emails: dict[str, Path | None] = {}

    def __call__(self, data: Any, path: Path | None = None) -> list[Violation]:
        return self.validate(data, path)

    def validate(self, contact: Any, path: Path | None = None) -> list[Violation]:
        if not isinstance(contact, dict):
            return [Violation(ViolationKind.STRUCTURAL, "Contact record must be a JSON object")]

        messages: list[str] = []
        email = _text(contact, "emailAddress")
        country = _text(contact, "country")
        phone = _text(contact, "phoneNumber")
        company = _text(contact, "company")
        full_name = _text(contact, "fullName")

        # Rule 1: blocked email domains
        if email:
            domain = email_domain(email)
            if domain in self.rules["blocked_email_domains"]:
                messages.append(f"Blocked email domain: {domain}")

        # Rule 2: phone format for the contact's country
        if phone and country:
            pattern = self.rules["phone_number_patterns"].get(country)
            if pattern is not None and not pattern.fullmatch(phone):
                messages.append(f"Invalid phone format for {country}: {phone}")

        # Rule 3: business contacts need a company
        if _text(contact, "jobTitle") and not company:
            messages.append("Job title requires company name for business contacts")

        # Rule 4: geographic consistency
        if country == "US" and _text(contact, "city") and not _text(contact, "stateProvince"):
            messages.append("US contacts with city must specify state/province")

        # Rule 5: country allow-list
        if country and country not in self.rules["allowed_countries"]:
            messages.append(f"Country not in allowed list: {country}")

        # Rule 6: name quality
        if full_name:
            if "test" in full_name.lower() and "test" not in (email or ""):
                messages.append('Potential test data detected (name contains "test" but email does not)')
            if len(full_name.split()) < 2:
                messages.append("Full name should include both first and last name")

        # Rule 7: personal email for a business contact is informational only
        if email and company and email_domain(email) in self.rules["personal_email_domains"]:
            logger.info(f"Personal email domain used for business contact: {email}")

        # Rule 8: tags
        tags = contact.get("tags")
        if isinstance(tags, list):
            invalid_tags = [
                tag for tag in tags
                if isinstance(tag, str)
                and tag.lower() not in self.rules["valid_tags"]
                and len(tag) > self.rules["max_free_tag_length"]
            ]
            if invalid_tags:
                messages.append(f"Invalid or overly long tags: {', '.join(invalid_tags)}")

        # Rule 9: sensitive data in notes
        notes = _text(contact, "notes")
        if notes and any(p.search(notes) for p in self.rules["sensitive_note_patterns"]):
            messages.append("Notes field contains potentially sensitive information")

        # Rule 10: email uniqueness within this run
        if email:
            key = normalize_email(email)
            if key in self.seen_emails:
                messages.append(f"Duplicate email address detected: {email}")
            else:
                self.seen_emails[key] = path

        return [Violation(ViolationKind.SEMANTIC, message) for message in messages]


def validate_business_rules(contact: Any, path: Path | None = None) -> list[Violation]:
    """Validate a single contact in isolation (no cross-file duplicate check)."""
    return BusinessRulesValidator().validate(contact, path)


def run_business_rules_validation(
    root: Path,
    config: GateConfig | None = None,
    console: Console | None = None,
) -> BatchResult:
    """Validate every contact file against the business rules and write the log."""
    config = config or GateConfig()
    files = find_json_files(root, config.paths.contacts_dir)

    validator = BusinessRulesValidator()
    runner = BatchRunner(TITLE, SUBJECT, DETAIL_KIND, validator, root=root, console=console)
    result = runner.run(files)
    result.write_log(config.output_path(root, config.logs.business_rules_log))
    return result
