"""Core batch validation framework.

Every validator follows the same contract: discover files, validate each one,
count the outcome, write a log ending in a fixed phrase and exit 0 or 1. The
log phrases are parsed by the report aggregator and must not change.
"""

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

PASSED_PHRASE = "All validation checks passed!"
FAILED_PHRASE = "validation failed!"
FAILURE_MARKER = "❌"


class ViolationKind(str, Enum):
    """Categories of reasons a file can fail validation."""
    PARSE = "ParseError"
    STRUCTURAL = "StructuralViolation"
    SEMANTIC = "SemanticViolation"
    REFERENTIAL = "ReferentialViolation"
    UNEXPECTED = "UnexpectedError"


@dataclass
class Violation:
    """One human-readable reason a record failed validation."""
    kind: ViolationKind
    message: str

    def __str__(self) -> str:
        return self.message


RecordValidator = Callable[[Any, Path], list[Violation]]


@dataclass
class FileResult:
    """Outcome of validating a single file."""
    path: Path
    display_path: str
    violations: list[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def to_dict(self) -> dict:
        return {
            "path": self.display_path,
            "valid": self.is_valid,
            "violations": [
                {"kind": v.kind.value, "message": v.message} for v in self.violations
            ],
        }


@dataclass
class BatchResult:
    """Results of one validation run across a discovered file set."""
    title: str
    subject: str
    detail_kind: str
    file_results: list[FileResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.file_results)

    @property
    def valid(self) -> int:
        return sum(1 for r in self.file_results if r.is_valid)

    @property
    def invalid(self) -> int:
        return self.total - self.valid

    @property
    def passed(self) -> bool:
        return self.invalid == 0

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = every file valid (or none found), 1 = any invalid."""
        return 0 if self.passed else 1

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "title": self.title,
            "status": "passed" if self.passed else "failed",
            "exit_code": self.exit_code,
            "total": self.total,
            "valid": self.valid,
            "invalid": self.invalid,
            "files": [r.to_dict() for r in self.file_results],
        }

    def render_log(self) -> str:
        """Render the plain-text log the report aggregator reads."""
        lines = [self.title, "=" * len(self.title)]
        if self.total == 0:
            lines.append(f"No {self.subject} files found to validate")
        lines.append(f"Total files: {self.total}")
        lines.append(f"Valid files: {self.valid}")
        lines.append(f"Invalid files: {self.invalid}")

        failed = [r for r in self.file_results if not r.is_valid]
        if failed:
            lines.append("")
            lines.append("Details:")
            for r in failed:
                lines.append(f"{FAILURE_MARKER} {self.detail_kind}: {r.display_path}")

        lines.append("")
        lines.append(PASSED_PHRASE if self.passed else FAILED_PHRASE)
        return "\n".join(lines) + "\n"

    def write_log(self, log_path: Path) -> Path:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.write_text(self.render_log(), encoding="utf-8")
        logger.debug(f"Wrote validation log to {log_path}")
        return log_path


class BatchRunner:
    """Runs one record validator over a set of JSON files.

    Per-file problems never abort the batch: malformed JSON becomes a
    ``ParseError`` violation and any other exception an ``UnexpectedError``
    violation for that file.
    """

    def __init__(
        self,
        title: str,
        subject: str,
        detail_kind: str,
        validate_record: RecordValidator,
        root: Path | None = None,
        console: Console | None = None,
    ):
        """Initialize the runner.

        Args:
            title: Log title, e.g. "CDM Schema Validation Results"
            subject: Noun used in the empty-input line, e.g. "contact data"
            detail_kind: Label on each failing file's log line
            validate_record: Callable taking the parsed JSON and its path
            root: Repository root; file paths are shown relative to it
            console: Optional rich console for per-file progress output
        """
        self.title = title
        self.subject = subject
        self.detail_kind = detail_kind
        self.validate_record = validate_record
        self.root = Path(root) if root is not None else None
        self.console = console

    def run(self, files: Iterable[Path]) -> BatchResult:
        result = BatchResult(self.title, self.subject, self.detail_kind)
        files = list(files)

        logger.info(f"{self.title.removesuffix(' Results')}: {len(files)} file(s) to validate")

        for file_path in files:
            result.file_results.append(self.validate_file(file_path))

        logger.info(
            f"Validation completed: {result.valid} valid, {result.invalid} invalid "
            f"of {result.total}"
        )
        return result

    def validate_file(self, file_path: Path) -> FileResult:
        file_result = FileResult(Path(file_path), self._display(file_path))
        self._print(f"[dim]Validating {escape(file_result.display_path)}...[/dim]")

        try:
            with open(file_path, encoding="utf-8") as f:
                data = json.load(f)
            file_result.violations.extend(self.validate_record(data, Path(file_path)))
        except json.JSONDecodeError as e:
            file_result.violations.append(
                Violation(ViolationKind.PARSE, f"Invalid JSON: {e}")
            )
        except Exception as e:
            logger.error(f"Error processing {file_result.display_path}: {e}")
            file_result.violations.append(
                Violation(ViolationKind.UNEXPECTED, f"Error processing file: {e}")
            )

        if file_result.is_valid:
            self._print(f"[green]✅ Passed:[/green] {escape(file_result.display_path)}")
        else:
            self._print(f"[red]{FAILURE_MARKER} Failed:[/red] {escape(file_result.display_path)}")
            for violation in file_result.violations:
                self._print(f"   - [{violation.kind.value}] {violation.message}", markup=False)
        return file_result

    def _display(self, file_path: Path) -> str:
        path = Path(file_path)
        if self.root is not None:
            try:
                return path.resolve().relative_to(self.root.resolve()).as_posix()
            except ValueError:
                pass
        return path.as_posix()

    def _print(self, message: str, markup: bool = True) -> None:
        if self.console is not None:
            self.console.print(message, markup=markup, highlight=False)
