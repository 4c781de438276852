"""Configuration management for cdmgate using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".cdmgate.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class PathsConfig(BaseModel):
    """Input and output directories, relative to the repository root."""
    contacts_dir: str = Field(alias="contactsDir", default="data/contacts")
    submissions_dir: str = Field(alias="submissionsDir", default="metadata/submissions")
    output_dir: str = Field(alias="outputDir", default=".")

    @field_validator("contacts_dir", "submissions_dir", "output_dir")
    @classmethod
    def validate_relative(cls, v):
        if not v or not v.strip():
            raise ValueError("directory must not be empty")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LogsConfig(BaseModel):
    """Names of the validator logs and the aggregated reports."""
    schema_log: str = Field(alias="schemaLog", default="cdm-validation.log")
    business_rules_log: str = Field(alias="businessRulesLog", default="business-rules-validation.log")
    metadata_log: str = Field(alias="metadataLog", default="metadata-validation.log")
    report_json: str = Field(alias="reportJson", default="validation-report.json")
    report_markdown: str = Field(alias="reportMarkdown", default="validation-report.md")

    model_config = ConfigDict(populate_by_name=True)


class ReportConfig(BaseModel):
    """Report aggregator settings."""
    default_repository: str = Field(alias="defaultRepository", default="cdm-data")

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class GateConfig(BaseModel):
    """Complete cdmgate configuration model."""
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logs: LogsConfig = Field(default_factory=LogsConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")

    def contacts_path(self, root: Path) -> Path:
        return root / self.paths.contacts_dir

    def submissions_path(self, root: Path) -> Path:
        return root / self.paths.submissions_dir

    def output_path(self, root: Path, file_name: str) -> Path:
        """Resolve a log or report file name inside the output directory."""
        return root / self.paths.output_dir / file_name


def load_config(config_path: str | Path | None = None) -> GateConfig:
    """Load the gate configuration.

    Without an explicit path the nearest ``.cdmgate.json`` above the working
    directory is used, and defaults apply when there is none. An explicit
    path that does not exist raises ``FileNotFoundError``; unreadable or
    invalid content raises ``ValueError``.
    """
    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            return GateConfig()
    elif not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        data = json.loads(Path(config_path).read_text(encoding="utf-8"))
        return GateConfig.model_validate(data)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}")


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Return the nearest config file in ``start_dir`` or its parents."""
    start = Path(start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def resolve_root(root: Path | None, config_path: Path | None = None) -> Path:
    """Pick the repository root for a run.

    An explicit root wins; otherwise the directory holding the config file,
    otherwise the current working directory.
    """
    if root is not None:
        return Path(root).resolve()
    if config_path is None:
        config_path = find_config_file()
    if config_path is not None:
        return Path(config_path).resolve().parent
    return Path.cwd().resolve()
