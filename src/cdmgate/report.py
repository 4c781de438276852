"""Validation report aggregation.

Reads the three validator logs, classifies each validator as passed, failed or
unknown and renders one combined report as JSON and Markdown. A validator whose
log is missing or unreadable is ``unknown``, which fails the overall status.
"""

import logging
import os
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from cdmgate.config import GateConfig
from cdmgate.discovery import count_json_files
from cdmgate.timestamps import format_iso
from cdmgate.validation.framework import FAILED_PHRASE, FAILURE_MARKER

logger = logging.getLogger(__name__)

SUCCESS_PHRASE = "validation checks passed!"
SUMMARY_PREFIXES = ("Total files:", "Valid files:", "Invalid files:")


class ValidatorStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    UNKNOWN = "unknown"


class ValidatorOutcome(BaseModel):
    """Status, issue lines and count summary parsed from one validator log."""
    status: ValidatorStatus = ValidatorStatus.UNKNOWN
    details: list[str] = Field(default_factory=list)
    summary: str = ""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class FileCount(BaseModel):
    total: int = 0
    contacts: int = 0
    metadata: int = 0


class ValidationResults(BaseModel):
    cdm_schema: ValidatorOutcome = Field(alias="cdmSchema", default_factory=ValidatorOutcome)
    business_rules: ValidatorOutcome = Field(alias="businessRules", default_factory=ValidatorOutcome)
    metadata: ValidatorOutcome = Field(default_factory=ValidatorOutcome)
    file_count: FileCount = Field(alias="fileCount", default_factory=FileCount)

    model_config = ConfigDict(populate_by_name=True)

    def outcomes(self) -> dict[str, ValidatorOutcome]:
        return {
            "cdmSchema": self.cdm_schema,
            "businessRules": self.business_rules,
            "metadata": self.metadata,
        }


class ValidationReport(BaseModel):
    """Combined report for one pull request."""
    timestamp: str
    pull_request: str = Field(alias="pullRequest", default="unknown")
    repository: str = "cdm-data"
    branch: str = "unknown"
    commit: str = "unknown"
    validation_results: ValidationResults = Field(
        alias="validationResults", default_factory=ValidationResults
    )

    model_config = ConfigDict(populate_by_name=True)

    @property
    def all_passed(self) -> bool:
        """Passed only when every validator positively reported success."""
        return all(
            outcome.status == ValidatorStatus.PASSED.value
            for outcome in self.validation_results.outcomes().values()
        )

    @property
    def exit_code(self) -> int:
        return 0 if self.all_passed else 1

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def parse_validation_output(content: str) -> ValidatorOutcome:
    """Classify a validator log and extract its issue and summary lines."""
    if SUCCESS_PHRASE in content:
        status = ValidatorStatus.PASSED
    elif FAILED_PHRASE in content:
        status = ValidatorStatus.FAILED
    else:
        status = ValidatorStatus.UNKNOWN

    lines = content.splitlines()
    details = [
        line.strip() for line in lines
        if FAILURE_MARKER in line or "Error:" in line or "violation" in line
    ]
    summary = "\n".join(line.strip() for line in lines if line.strip().startswith(SUMMARY_PREFIXES))

    return ValidatorOutcome(status=status, details=details, summary=summary)


def read_validator_log(log_path: Path) -> ValidatorOutcome:
    """Parse a validator log; a missing or unreadable log is ``unknown``."""
    log_path = Path(log_path)
    if not log_path.is_file():
        logger.warning(f"Validation log not found: {log_path}")
        return ValidatorOutcome()

    try:
        content = log_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read validation log {log_path}: {e}")
        return ValidatorOutcome()

    return parse_validation_output(content)


def count_files(root: Path, config: GateConfig) -> FileCount:
    """Count submitted files directly, independent of the validators' own counts."""
    contacts = count_json_files(root, config.paths.contacts_dir)
    metadata = count_json_files(root, config.paths.submissions_dir)
    return FileCount(total=contacts + metadata, contacts=contacts, metadata=metadata)


def build_report(
    root: Path,
    config: GateConfig | None = None,
    env: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> ValidationReport:
    """Assemble the report from the validator logs and the environment."""
    config = config or GateConfig()
    env = os.environ if env is None else env

    results = ValidationResults(
        cdm_schema=read_validator_log(config.output_path(root, config.logs.schema_log)),
        business_rules=read_validator_log(config.output_path(root, config.logs.business_rules_log)),
        metadata=read_validator_log(config.output_path(root, config.logs.metadata_log)),
        file_count=count_files(root, config),
    )

    sha = env.get("GITHUB_SHA")
    return ValidationReport(
        timestamp=format_iso(now or datetime.now(UTC)),
        pull_request=env.get("GITHUB_EVENT_PULL_REQUEST_NUMBER") or "unknown",
        repository=env.get("GITHUB_REPOSITORY") or config.report.default_repository,
        branch=env.get("GITHUB_HEAD_REF") or "unknown",
        commit=sha[:8] if sha else "unknown",
        validation_results=results,
    )


VALIDATION_SECTIONS = (
    ("cdmSchema", "CDM Schema Validation", "📋"),
    ("businessRules", "Business Rules Validation", "📏"),
    ("metadata", "Metadata Validation", "📊"),
)


def render_markdown(report: ValidationReport) -> str:
    """Render the human-readable report."""
    results = report.validation_results
    out: list[str] = []

    out.append("# CDM Validation Report\n")
    out.append(f"**Generated:** {report.timestamp}")
    out.append(f"**Pull Request:** #{report.pull_request}")
    out.append(f"**Branch:** {report.branch}")
    out.append(f"**Repository:** {report.repository}")
    out.append(f"**Commit:** {report.commit}\n")

    out.append("## Overall Status\n")
    if report.all_passed:
        out.append("✅ **PASSED** - All validation checks successful\n")
    else:
        out.append("❌ **FAILED** - One or more validation checks failed\n")

    out.append("## File Statistics\n")
    out.append(f"- **Total Files:** {results.file_count.total}")
    out.append(f"- **Contact Data Files:** {results.file_count.contacts}")
    out.append(f"- **Metadata Files:** {results.file_count.metadata}\n")

    out.append("## Validation Results\n")
    outcomes = results.outcomes()
    for key, title, emoji in VALIDATION_SECTIONS:
        outcome = outcomes[key]
        out.append(f"### {emoji} {title}\n")

        if outcome.status == ValidatorStatus.PASSED.value:
            out.append("✅ **Status:** PASSED\n")
        elif outcome.status == ValidatorStatus.FAILED.value:
            out.append("❌ **Status:** FAILED\n")
            if outcome.details:
                out.append("**Issues Found:**")
                out.extend(f"- {detail}" for detail in outcome.details)
                out.append("")
        else:
            out.append("⚠️ **Status:** UNKNOWN (validation did not run)\n")

        if outcome.summary:
            out.append(f"**Summary:**\n```\n{outcome.summary}\n```\n")

    out.append("## Next Steps\n")
    if report.all_passed:
        out.append("This pull request has passed all validation checks and is ready for review and merge.\n")
        out.append("### Automated Actions")
        out.append("- ✅ CDM schema compliance verified")
        out.append("- ✅ Business rules compliance verified")
        out.append("- ✅ Metadata integrity verified")
        out.append("- ✅ Ready for downstream integration upon merge\n")
    else:
        out.append("This pull request has validation failures that must be addressed before merge.\n")
        out.append("### Required Actions")
        out.append("- ❌ Fix validation errors listed above")
        out.append("- 🔄 Push corrected files to trigger re-validation")
        out.append("- 👀 Request review once all validations pass\n")

    out.append("---")
    out.append("*This report was automatically generated by the CDM validation pipeline.*")
    return "\n".join(out) + "\n"


def write_reports(report: ValidationReport, root: Path, config: GateConfig | None = None) -> dict[str, Path]:
    """Write the JSON and Markdown reports; returns their paths by format."""
    config = config or GateConfig()
    json_path = config.output_path(root, config.logs.report_json)
    markdown_path = config.output_path(root, config.logs.report_markdown)
    json_path.parent.mkdir(parents=True, exist_ok=True)

    json_path.write_text(report.to_json() + "\n", encoding="utf-8")
    markdown_path.write_text(render_markdown(report), encoding="utf-8")
    logger.info(f"Validation report written to {json_path} and {markdown_path}")

    return {"json": json_path, "markdown": markdown_path}


def generate_report(
    root: Path,
    config: GateConfig | None = None,
    env: Mapping[str, str] | None = None,
) -> ValidationReport:
    report = build_report(root, config, env)
    write_reports(report, root, config)
    return report
