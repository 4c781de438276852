"""Tests for the contact business rules."""

import logging

import pytest

from cdmgate.validation.business_rules import (
    BUSINESS_RULES,
    BusinessRulesValidator,
    normalize_email,
    run_business_rules_validation,
    validate_business_rules,
)
from cdmgate.validation.framework import ViolationKind


def _messages(contact):
    return [v.message for v in validate_business_rules(contact)]


class TestIndividualRules:
    """Test each rule in isolation."""

    def test_valid_contact(self, valid_contact):
        assert _messages(valid_contact) == []

    @pytest.mark.parametrize("domain", sorted(BUSINESS_RULES["blocked_email_domains"]))
    def test_blocked_domain(self, valid_contact, domain):
        valid_contact["emailAddress"] = f"john.doe@{domain}"
        assert _messages(valid_contact) == [f"Blocked email domain: {domain}"]

    def test_blocked_domain_case_insensitive(self, valid_contact):
        valid_contact["emailAddress"] = "john.doe@MAILINATOR.com"
        assert _messages(valid_contact) == ["Blocked email domain: mailinator.com"]

    def test_phone_pattern_for_country(self, valid_contact):
        valid_contact["phoneNumber"] = "123"
        assert _messages(valid_contact) == ["Invalid phone format for US: 123"]

    @pytest.mark.parametrize("country,phone", [
        ("UK", "+44 1234 567890"),
        ("FR", "+33 1 23456789"),
        ("DE", "+49 301 1234567"),
        ("MA", "+212612345678"),
        ("CA", "(416) 555-0199"),
    ])
    def test_phone_patterns_accept_valid_numbers(self, valid_contact, country, phone):
        valid_contact.update({"country": country, "phoneNumber": phone})
        assert _messages(valid_contact) == []

    @pytest.mark.parametrize("country,phone", [
        ("MA", "+212612345678\n"),
        ("US", "+1-555-123-4567\n"),
        ("UK", "+44 1234 567890\n"),
    ])
    def test_phone_with_trailing_newline(self, valid_contact, country, phone):
        valid_contact.update({"country": country, "phoneNumber": phone, "stateProvince": "CA"})
        assert _messages(valid_contact) == [f"Invalid phone format for {country}: {phone}"]

    def test_phone_check_skipped_for_country_without_pattern(self, valid_contact):
        valid_contact.update({"country": "JP", "phoneNumber": "12"})
        assert _messages(valid_contact) == []

    def test_job_title_requires_company(self, valid_contact):
        del valid_contact["company"]
        assert _messages(valid_contact) == ["Job title requires company name for business contacts"]

    def test_non_string_job_title_requires_company(self, valid_contact):
        del valid_contact["company"]
        valid_contact["jobTitle"] = 5
        assert _messages(valid_contact) == ["Job title requires company name for business contacts"]

    def test_us_city_requires_state(self, valid_contact):
        valid_contact["stateProvince"] = ""
        assert _messages(valid_contact) == ["US contacts with city must specify state/province"]

    def test_non_us_city_without_state(self, valid_contact):
        valid_contact.update({"country": "FR", "phoneNumber": "+33 1 23456789", "stateProvince": None})
        assert _messages(valid_contact) == []

    def test_country_allow_list(self, valid_contact):
        valid_contact.update({"country": "XX"})
        assert _messages(valid_contact) == ["Country not in allowed list: XX"]

    def test_non_string_country_checked(self, valid_contact):
        valid_contact["country"] = 123
        assert _messages(valid_contact) == ["Country not in allowed list: 123"]

    def test_test_name_with_regular_email(self, valid_contact):
        valid_contact["fullName"] = "Test User"
        assert _messages(valid_contact) == [
            'Potential test data detected (name contains "test" but email does not)'
        ]

    def test_test_name_with_test_email(self, valid_contact):
        valid_contact.update({"fullName": "Test User", "emailAddress": "test.user@example.com"})
        assert _messages(valid_contact) == []

    def test_single_token_name(self, valid_contact):
        valid_contact["fullName"] = "  Madonna  "
        assert _messages(valid_contact) == ["Full name should include both first and last name"]

    def test_personal_email_is_informational(self, valid_contact, caplog):
        valid_contact["emailAddress"] = "john.doe@gmail.com"

        with caplog.at_level(logging.INFO, logger="cdmgate"):
            assert _messages(valid_contact) == []

        assert "Personal email domain used for business contact" in caplog.text

    def test_long_unknown_tags_rejected(self, valid_contact):
        long_tag = "a-very-long-unknown-tag-name"
        valid_contact["tags"] = ["Customer", "vip", long_tag]
        assert _messages(valid_contact) == [f"Invalid or overly long tags: {long_tag}"]

    def test_short_unknown_tags_allowed(self, valid_contact):
        valid_contact["tags"] = ["vip", "newsletter"]
        assert _messages(valid_contact) == []

    @pytest.mark.parametrize("notes", [
        "SSN is 123-45-6789",
        "Card 4111 1111 1111 1111",
        "Card 4111111111111111",
        "Her Password is hunter2",
        "asked for ssn",
        "Social Security on file",
    ])
    def test_sensitive_notes(self, valid_contact, notes):
        valid_contact["notes"] = notes
        assert _messages(valid_contact) == ["Notes field contains potentially sensitive information"]

    def test_harmless_notes(self, valid_contact):
        valid_contact["notes"] = "Met at the 2024 conference, call back in May."
        assert _messages(valid_contact) == []

    def test_non_object_record(self):
        violations = validate_business_rules("just a string")
        assert [v.kind for v in violations] == [ViolationKind.STRUCTURAL]


class TestRuleCombination:
    """Test that rules are evaluated independently."""

    def test_end_to_end_invalid_contact(self, invalid_contact):
        messages = _messages(invalid_contact)

        assert "Job title requires company name for business contacts" in messages
        assert "Country not in allowed list: XX" in messages

    def test_all_violations_reported(self, valid_contact):
        valid_contact.update({
            "emailAddress": "test@yopmail.com",
            "company": "",
            "country": "US",
            "stateProvince": None,
            "fullName": "Cher",
            "notes": "password: hunter2",
        })
        messages = _messages(valid_contact)
        assert len(messages) == 5


class TestDuplicateEmails:
    """Test email uniqueness within a single run."""

    def test_second_occurrence_flagged(self, valid_contact):
        validator = BusinessRulesValidator()
        assert validator.validate(dict(valid_contact)) == []

        second = dict(valid_contact, emailAddress="  JOHN.DOE@example.com ")
        messages = [v.message for v in validator.validate(second)]
        assert messages == ["Duplicate email address detected:   JOHN.DOE@example.com "]

    def test_fresh_validator_forgets(self, valid_contact):
        BusinessRulesValidator().validate(valid_contact)
        assert BusinessRulesValidator().validate(valid_contact) == []

    def test_normalize_email(self):
        assert normalize_email(" A.B@Example.COM ") == "a.b@example.com"


class TestBusinessRulesRun:
    """Test a full business rules run."""

    def test_duplicate_in_run(self, repo, write_json, valid_contact):
        contacts = repo / "data" / "contacts"
        write_json(contacts / "a.json", valid_contact)
        write_json(contacts / "b.json", valid_contact)

        result = run_business_rules_validation(repo)

        assert [r.is_valid for r in result.file_results] == [True, False]
        assert result.exit_code == 1
        assert not (repo / "validation-cache").exists()

        log = (repo / "business-rules-validation.log").read_text(encoding="utf-8")
        assert "❌ Rule violation: data/contacts/b.json" in log

    def test_single_file_valid(self, repo, write_json, valid_contact):
        write_json(repo / "data" / "contacts" / "a.json", valid_contact)

        result = run_business_rules_validation(repo)

        assert result.passed
        assert not (repo / "validation-cache").exists()

    def test_duplicates_do_not_leak_between_runs(self, repo, write_json, valid_contact):
        write_json(repo / "data" / "contacts" / "a.json", valid_contact)

        first = run_business_rules_validation(repo)
        second = run_business_rules_validation(repo)

        assert first.passed and second.passed

    def test_malformed_json_does_not_abort(self, repo, write_json, valid_contact):
        contacts = repo / "data" / "contacts"
        (contacts / "a.json").write_text("[1, 2", encoding="utf-8")
        write_json(contacts / "b.json", valid_contact)

        result = run_business_rules_validation(repo)

        assert result.total == 2
        assert result.valid == 1
        assert result.file_results[0].violations[0].kind == ViolationKind.PARSE

    def test_empty_directory(self, repo):
        result = run_business_rules_validation(repo)

        assert result.exit_code == 0
        log = (repo / "business-rules-validation.log").read_text(encoding="utf-8")
        assert "No contact data files found to validate" in log
