"""
Validator configuration for tasklist-validator.

Supports configuration via:
1. Environment variables (highest priority)
2. TOML config file (tasklist-validator.toml)
3. Default values (lowest priority)

Environment variables:
- TASKLIST_VALIDATOR_CONFIG_FILE: Path to TOML config file
- TASKLIST_VALIDATOR_MAX_FUNCTIONS_PER_MODULE: KPI maximum for functions per module
- TASKLIST_VALIDATOR_MAX_LINES_PER_FUNCTION: KPI maximum for lines per function
- TASKLIST_VALIDATOR_MAX_CALL_DEPTH: KPI maximum for call depth
- TASKLIST_VALIDATOR_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

TOML layout:

    [validation]
    valid_statuses = ["Planned", "In Progress", "Review", "Completed", "Blocked"]
    valid_priorities = ["Critical", "High", "Medium", "Low"]
    id_pattern = '^[A-Z]{2,4}[0-9]{3,4}(-[0-9]+|[a-z])?$'
    rating_pattern = '^[1-5](\\.[0-9])?\\s*(\\(partial\\))?$'

    [kpi]
    max_functions_per_module = 8
    max_lines_per_function = 15
    max_call_depth = 3
    max_cyclomatic_complexity = 10

    [categories.core]
    range = [1, 99]
    sections = ["**Architecture Notes**", "**Complexity Assessment**"]

    [sections]
    required = ["**Description**", "**Status**", "**Priority**"]
    error_handling_references = ["error-handling", "error-handling-main"]

    [sections.references]
    "**Test Requirements**" = ["test-requirements"]

    [tables]
    active_heading = "## Current Tasks"
    completed_heading = "## Completed Tasks"

    [logging]
    level = "INFO"
"""

import logging
import os
import re
from dataclasses import dataclass, field
from importlib.metadata import version as get_package_version, PackageNotFoundError
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from tasklist_validator.core.errors import ConfigError


logger = logging.getLogger(__name__)


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("tasklist-validator")
    except PackageNotFoundError:
        return "0.1.0"  # Fallback for dev without install


PACKAGE_VERSION = _get_version()

DEFAULT_CONFIG_FILES = ("tasklist-validator.toml", ".tasklist-validator.toml")

DEFAULT_STATUSES: Tuple[str, ...] = ("Planned", "In Progress", "Review", "Completed", "Blocked")
DEFAULT_PRIORITIES: Tuple[str, ...] = ("Critical", "High", "Medium", "Low")
DEFAULT_ID_PATTERN = r"^[A-Z]{2,4}[0-9]{3,4}(-[0-9]+|[a-z])?$"
DEFAULT_RATING_PATTERN = r"^[1-5](\.[0-9])?\s*(\(partial\))?$"

DEFAULT_REQUIRED_SECTIONS: Tuple[str, ...] = (
    "**Description**",
    "**Simplicity Progression Plan**",
    "**Simplicity Principle**",
    "**Abstraction Evaluation**",
    "**Requirements**",
    "**Test Requirements**",
    "**Integration Test Scenarios**",
    "**Typing Requirements**",
    "**Status**",
    "**Priority**",
)

# Required section -> placeholder names that stand in for it
DEFAULT_SECTION_REFERENCES: Dict[str, Tuple[str, ...]] = {
    "**Test Requirements**": ("test-requirements",),
    "**Integration Test Scenarios**": ("test-requirements",),
    "**Typing Requirements**": ("typing-requirements",),
}

DEFAULT_COMPLETION_SECTIONS: Tuple[str, ...] = (
    "**Implementation Notes**",
    "**Complexity Assessment**",
    "**Maintenance Impact**",
    "**Error Handling Implementation**",
)

DEFAULT_ERROR_HANDLING_SECTIONS: Tuple[str, ...] = (
    "**Error Handling**",
    "**Core Principles**",
    "**Error Implementation**",
    "**Error Examples**",
)

DEFAULT_SUBTASK_ERROR_HANDLING_SECTIONS: Tuple[str, ...] = (
    "**Error Handling**",
    "**Task-Specific Approach**",
    "**Error Reporting**",
)

# Placeholders that stand in for the error-handling sections at each level
DEFAULT_ERROR_HANDLING_REFERENCES: Tuple[str, ...] = ("error-handling", "error-handling-main")

DEFAULT_SUBTASK_ERROR_HANDLING_REFERENCES: Tuple[str, ...] = (
    "error-handling-subtask",
    "subtask-error-handling",
    "def-error-handling-subtask",
)


@dataclass(frozen=True)
class CategoryRange:
    """A numeric band of task IDs mapped to a category.

    Attributes:
        name: Category name (e.g. "core")
        minimum: Lowest task number in the band (inclusive)
        maximum: Highest task number in the band (inclusive)
        sections: Additional section markers required for tasks in this category
    """

    name: str
    minimum: int
    maximum: int
    sections: Tuple[str, ...] = ()

    def contains(self, number: int) -> bool:
        return self.minimum <= number <= self.maximum

    def overlaps(self, other: "CategoryRange") -> bool:
        return self.minimum <= other.maximum and other.minimum <= self.maximum

    def describe(self) -> str:
        return f"{self.name} ({self.minimum}-{self.maximum})"


DEFAULT_CATEGORY_RANGES: Tuple[CategoryRange, ...] = (
    CategoryRange("core", 1, 99, ("**Architecture Notes**", "**Complexity Assessment**")),
    CategoryRange(
        "features", 100, 199, ("**Abstraction Evaluation**", "**Simplicity Progression Plan**")
    ),
    CategoryRange("documentation", 200, 299, ("**Content Strategy**", "**Audience Analysis**")),
    CategoryRange("testing", 300, 399, ("**Test Strategy**", "**Coverage Requirements**")),
)


@dataclass(frozen=True)
class KpiMetric:
    """A numeric code-quality metric declared in a task's KPI section.

    Attributes:
        key: Stable identifier used in findings
        label: Case-insensitive label as written in documents ("Lines per function")
        limit: Configured maximum (inclusive)
        required: Whether every KPI section must declare the metric
    """

    key: str
    label: str
    limit: int
    required: bool = True

    @property
    def pattern(self) -> Pattern[str]:
        return re.compile(rf"{re.escape(self.label)}\s*:\s*(\d+)", re.IGNORECASE)


def _parse_positive_int(value: Any, key: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a positive integer, got {value!r}", key=key) from exc
    if isinstance(value, bool) or number <= 0:
        raise ConfigError(f"{key} must be a positive integer, got {value!r}", key=key)
    return number


def _string_tuple(value: Any, key: str) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConfigError(f"{key} must be a list of strings", key=key)
    if not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings", key=key)
    return tuple(value)


@dataclass
class ValidatorConfig:
    """Validation rules with support for env vars and TOML overrides."""

    # Enumerations and grammars
    valid_statuses: Tuple[str, ...] = DEFAULT_STATUSES
    valid_priorities: Tuple[str, ...] = DEFAULT_PRIORITIES
    id_pattern: str = DEFAULT_ID_PATTERN
    rating_pattern: str = DEFAULT_RATING_PATTERN

    # Code quality KPIs
    max_functions_per_module: int = 8
    max_lines_per_function: int = 15
    max_call_depth: int = 3
    max_cyclomatic_complexity: int = 10

    # Task categories, consulted in order
    category_ranges: Tuple[CategoryRange, ...] = DEFAULT_CATEGORY_RANGES
    category_reference_template: str = "{category}-sections"

    # Section requirements
    required_sections: Tuple[str, ...] = DEFAULT_REQUIRED_SECTIONS
    section_references: Dict[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_SECTION_REFERENCES)
    )
    completion_sections: Tuple[str, ...] = DEFAULT_COMPLETION_SECTIONS
    error_handling_sections: Tuple[str, ...] = DEFAULT_ERROR_HANDLING_SECTIONS
    subtask_error_handling_sections: Tuple[str, ...] = DEFAULT_SUBTASK_ERROR_HANDLING_SECTIONS
    error_handling_references: Tuple[str, ...] = DEFAULT_ERROR_HANDLING_REFERENCES
    subtask_error_handling_references: Tuple[str, ...] = DEFAULT_SUBTASK_ERROR_HANDLING_REFERENCES
    kpi_reference_pattern: str = r"kpis?\b"

    # Summary tables
    active_table_heading: str = "## Current Tasks"
    completed_table_heading: str = "## Completed Tasks"

    # Logging
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        self.validate()

    @property
    def id_regex(self) -> Pattern[str]:
        return re.compile(self.id_pattern)

    @property
    def rating_regex(self) -> Pattern[str]:
        return re.compile(self.rating_pattern)

    def kpi_metrics(self) -> Tuple[KpiMetric, ...]:
        """KPI metrics in the order they are reported."""
        return (
            KpiMetric("functions_per_module", "Functions per module", self.max_functions_per_module),
            KpiMetric("lines_per_function", "Lines per function", self.max_lines_per_function),
            KpiMetric("call_depth", "Call depth", self.max_call_depth),
            KpiMetric(
                "cyclomatic_complexity",
                "Cyclomatic complexity",
                self.max_cyclomatic_complexity,
                required=False,
            ),
        )

    def category_for(self, number: int) -> Optional[CategoryRange]:
        """Return the first category range containing ``number``."""
        for category in self.category_ranges:
            if category.contains(number):
                return category
        return None

    def category_reference(self, category: CategoryRange) -> str:
        return self.category_reference_template.format(category=category.name)

    def validate(self) -> None:
        """Check internal consistency.

        Raises:
            ConfigError: If any value is out of range or patterns do not compile.
        """
        if not self.valid_statuses:
            raise ConfigError("valid_statuses must not be empty", key="valid_statuses")
        if not self.valid_priorities:
            raise ConfigError("valid_priorities must not be empty", key="valid_priorities")

        for key in (
            "max_functions_per_module",
            "max_lines_per_function",
            "max_call_depth",
            "max_cyclomatic_complexity",
        ):
            _parse_positive_int(getattr(self, key), key)

        for key in (
            "id_pattern",
            "rating_pattern",
            "kpi_reference_pattern",
        ):
            try:
                re.compile(getattr(self, key))
            except re.error as exc:
                raise ConfigError(f"{key} is not a valid regular expression: {exc}", key=key) from exc

        for category in self.category_ranges:
            if category.minimum > category.maximum:
                raise ConfigError(
                    f"Category '{category.name}' has min {category.minimum} above max {category.maximum}",
                    key="category_ranges",
                )
        for index, category in enumerate(self.category_ranges):
            for other in self.category_ranges[index + 1 :]:
                if category.overlaps(other):
                    raise ConfigError(
                        f"Category ranges overlap: {category.describe()} and {other.describe()}",
                        key="category_ranges",
                    )

    @classmethod
    def from_toml_dict(cls, data: Mapping[str, Any]) -> "ValidatorConfig":
        """Create config from a parsed TOML document.

        Args:
            data: Dict from TOML parsing

        Returns:
            ValidatorConfig instance
        """
        config = cls()
        config._apply_toml(data)
        config.validate()
        return config

    @classmethod
    def from_toml(cls, path: Path) -> "ValidatorConfig":
        config = cls()
        config._load_toml(Path(path))
        config.validate()
        return config

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ValidatorConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. TOML config file
        3. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("TASKLIST_VALIDATOR_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            for default_path in DEFAULT_CONFIG_FILES:
                if Path(default_path).exists():
                    config._load_toml(Path(default_path))
                    break

        config._load_env()
        config.validate()
        return config

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

        logger.debug("Loaded validator config from %s", path)
        self._apply_toml(data)

    def _apply_toml(self, data: Mapping[str, Any]) -> None:
        if "validation" in data:
            section = data["validation"]
            if "valid_statuses" in section:
                self.valid_statuses = _string_tuple(section["valid_statuses"], "valid_statuses")
            if "valid_priorities" in section:
                self.valid_priorities = _string_tuple(section["valid_priorities"], "valid_priorities")
            if "id_pattern" in section:
                self.id_pattern = str(section["id_pattern"])
            if "rating_pattern" in section:
                self.rating_pattern = str(section["rating_pattern"])

        if "kpi" in data:
            section = data["kpi"]
            for key in (
                "max_functions_per_module",
                "max_lines_per_function",
                "max_call_depth",
                "max_cyclomatic_complexity",
            ):
                if key in section:
                    setattr(self, key, _parse_positive_int(section[key], key))

        if "categories" in data:
            self.category_ranges = _parse_categories(data["categories"])

        if "sections" in data:
            section = data["sections"]
            if "required" in section:
                self.required_sections = _string_tuple(section["required"], "sections.required")
            if "completion" in section:
                self.completion_sections = _string_tuple(section["completion"], "sections.completion")
            if "error_handling" in section:
                self.error_handling_sections = _string_tuple(
                    section["error_handling"], "sections.error_handling"
                )
            if "subtask_error_handling" in section:
                self.subtask_error_handling_sections = _string_tuple(
                    section["subtask_error_handling"], "sections.subtask_error_handling"
                )
            if "error_handling_references" in section:
                self.error_handling_references = _string_tuple(
                    section["error_handling_references"], "sections.error_handling_references"
                )
            if "subtask_error_handling_references" in section:
                self.subtask_error_handling_references = _string_tuple(
                    section["subtask_error_handling_references"],
                    "sections.subtask_error_handling_references",
                )
            if "references" in section:
                self.section_references = {
                    name: _string_tuple(refs, f"sections.references.{name}")
                    for name, refs in section["references"].items()
                }

        if "tables" in data:
            section = data["tables"]
            if "active_heading" in section:
                self.active_table_heading = str(section["active_heading"])
            if "completed_heading" in section:
                self.completed_table_heading = str(section["completed_heading"])

        if "logging" in data and "level" in data["logging"]:
            self.log_level = str(data["logging"]["level"]).upper()

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if value := os.environ.get("TASKLIST_VALIDATOR_MAX_FUNCTIONS_PER_MODULE"):
            self.max_functions_per_module = _parse_positive_int(value, "max_functions_per_module")

        if value := os.environ.get("TASKLIST_VALIDATOR_MAX_LINES_PER_FUNCTION"):
            self.max_lines_per_function = _parse_positive_int(value, "max_lines_per_function")

        if value := os.environ.get("TASKLIST_VALIDATOR_MAX_CALL_DEPTH"):
            self.max_call_depth = _parse_positive_int(value, "max_call_depth")

        if level := os.environ.get("TASKLIST_VALIDATOR_LOG_LEVEL"):
            self.log_level = level.upper()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid_statuses": list(self.valid_statuses),
            "valid_priorities": list(self.valid_priorities),
            "id_pattern": self.id_pattern,
            "rating_pattern": self.rating_pattern,
            "kpi": {metric.key: metric.limit for metric in self.kpi_metrics()},
            "category_ranges": [
                {"name": c.name, "min": c.minimum, "max": c.maximum, "sections": list(c.sections)}
                for c in self.category_ranges
            ],
            "active_table_heading": self.active_table_heading,
            "completed_table_heading": self.completed_table_heading,
        }


def _parse_categories(data: Mapping[str, Any]) -> Tuple[CategoryRange, ...]:
    categories: List[CategoryRange] = []
    for name, entry in data.items():
        if not isinstance(entry, Mapping) or "range" not in entry:
            raise ConfigError(f"Category '{name}' needs a range = [min, max] entry", key="categories")
        bounds = entry["range"]
        if not isinstance(bounds, Sequence) or isinstance(bounds, str) or len(bounds) != 2:
            raise ConfigError(f"Category '{name}' range must be [min, max]", key="categories")
        minimum, maximum = bounds
        if not isinstance(minimum, int) or not isinstance(maximum, int):
            raise ConfigError(f"Category '{name}' range bounds must be integers", key="categories")
        sections = _string_tuple(entry.get("sections", []), f"categories.{name}.sections")
        categories.append(CategoryRange(name, minimum, maximum, sections))
    return tuple(categories)
