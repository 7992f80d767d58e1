"""
Root pytest configuration and shared fixtures.

Provides the canonical task list document and helpers for building
variations of it.
"""

from pathlib import Path
from typing import Tuple

import pytest

from tasklist_validator.config import ValidatorConfig
from tasklist_validator.core.document import Document
from tasklist_validator.core.tasks import TableOrigin, TaskDetail, extract_table_tasks, extract_task_details
from tasklist_validator.core.references import extract_references
from tasklist_validator.core.validators.base import ValidationContext

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CANONICAL_PATH = FIXTURES_DIR / "canonical_tasklist.md"


def line_of(text: str, needle: str) -> int:
    """Return the 1-based number of the first line containing ``needle``."""
    for number, line in enumerate(text.split("\n"), start=1):
        if needle in line:
            return number
    raise AssertionError(f"{needle!r} not found")


def build_context(text: str, config: ValidatorConfig = None) -> Tuple[ValidationContext, Tuple[TaskDetail, ...]]:
    """Extract everything validators need from ``text``."""
    config = config or ValidatorConfig()
    document = Document.from_text(text)
    details = tuple(extract_task_details(document))
    stubs = (
        extract_table_tasks(document, config.active_table_heading, TableOrigin.ACTIVE).stubs
        + extract_table_tasks(document, config.completed_table_heading, TableOrigin.COMPLETED).stubs
    )
    context = ValidationContext(
        tasks=details,
        stubs=stubs,
        references=extract_references(document),
        config=config,
    )
    return context, details


@pytest.fixture
def canonical_path() -> Path:
    return CANONICAL_PATH


@pytest.fixture
def canonical_text() -> str:
    return CANONICAL_PATH.read_text(encoding="utf-8")


@pytest.fixture
def canonical_document(canonical_text: str) -> Document:
    return Document.from_text(canonical_text, source=str(CANONICAL_PATH))


@pytest.fixture
def config() -> ValidatorConfig:
    return ValidatorConfig()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep TASKLIST_VALIDATOR_* variables from the host out of tests."""
    for name in (
        "TASKLIST_VALIDATOR_CONFIG_FILE",
        "TASKLIST_VALIDATOR_MAX_FUNCTIONS_PER_MODULE",
        "TASKLIST_VALIDATOR_MAX_LINES_PER_FUNCTION",
        "TASKLIST_VALIDATOR_MAX_CALL_DEPTH",
        "TASKLIST_VALIDATOR_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def find_line():
    return line_of


@pytest.fixture
def make_context():
    return build_context
