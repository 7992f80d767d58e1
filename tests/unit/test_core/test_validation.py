"""End-to-end tests for whole-document validation.

Every test starts from the canonical task list fixture, which passes all
default validators, and introduces one defect.
"""

import pytest

from tasklist_validator import format_result, validate_document, validate_file, validate_text
from tasklist_validator.config import ValidatorConfig
from tasklist_validator.core.document import Document
from tasklist_validator.core.pipeline import minimal_validators
from tasklist_validator.core.results import ErrorKind, Severity

PRJ001_ROW = "| PRJ001 | Build the parser | In Progress | High |"
PRJ003_ROW = "| PRJ003 | Project scaffolding | Completed | @dev | 4.5 |"


def _kinds(result):
    return [error.kind for error in result.errors]


class TestCanonicalTemplate:
    """Tests for the well-formed template."""

    def test_canonical_passes(self, canonical_document):
        result = validate_document(canonical_document)

        assert result.valid, format_result(result)
        assert result.errors == ()
        assert result.warnings == ()
        assert result.task_count == 2

    def test_canonical_file_passes(self, canonical_path):
        result = validate_file(canonical_path)
        assert format_result(result) == "TaskList validation passed! (2 tasks validated)"

    def test_checked_checkbox_without_rating_passes(self, canonical_text):
        """The template's checked checkbox subtask has no rating and still passes."""
        assert "- [x] Tidy module imports [PRJ001a]" in canonical_text
        assert validate_text(canonical_text).valid

    def test_placeholders_used_before_definitions(self, canonical_text, find_line):
        assert find_line(canonical_text, "{{error-handling}}") < find_line(
            canonical_text, "## #{{error-handling}}"
        )
        assert validate_text(canonical_text).valid

    def test_completed_table_task_needs_no_detail_section(self, canonical_text):
        assert "### PRJ003" not in canonical_text
        assert not validate_text(canonical_text).has_error_kind(ErrorKind.MISSING_DETAIL_SECTION)


class TestConcreteScenarios:
    """Tests for the documented failure scenarios."""

    def test_duplicate_row_in_active_table(self, canonical_text):
        text = canonical_text.replace("PRJ", "ABC")
        row = "| ABC001 | Build the parser | In Progress | High |"
        text = text.replace(row, row + "\n" + row)

        result = validate_text(text)

        assert not result.valid
        duplicates = [e for e in result.errors if e.kind == ErrorKind.DUPLICATE_ID]
        assert len(duplicates) == 1
        assert duplicates[0].message == "Duplicate task IDs found: ABC001 (lines 7, 8)"
        assert "Duplicate task IDs found: ABC001" in format_result(result)

    def test_invalid_status_names_task_and_value(self, canonical_text):
        text = canonical_text.replace("**Status**: Planned\n**Priority**: Medium", "**Status**: Done\n**Priority**: Medium")

        result = validate_text(text)

        assert not result.valid
        (error,) = [e for e in result.errors if e.kind == ErrorKind.INVALID_STATUS]
        assert error.task_id == "PRJ002"
        assert "PRJ002" in error.message
        assert "Done" in error.message

    def test_undefined_placeholder_reports_line(self, canonical_text, find_line):
        text = canonical_text.replace(
            "Export validation results.", "Export validation results. {{undefined-ref}}"
        )
        expected_line = find_line(text, "{{undefined-ref}}")

        result = validate_text(text)

        assert not result.valid
        (error,) = result.errors
        assert error.kind == ErrorKind.MISSING_REFERENCE_DEFINITION
        assert "undefined-ref" in error.message
        assert error.line_number == expected_line
        assert f"at line {expected_line}" in error.message

    def test_completed_numbered_subtask_without_rating(self, canonical_text):
        text = canonical_text.replace("**Review Rating**: 4.5\n", "")

        result = validate_text(text)

        assert not result.valid
        (error,) = result.errors
        assert error.kind == ErrorKind.MISSING_REVIEW_RATING
        assert "missing review rating" in error.message
        assert "PRJ001-1" in error.message

    def test_kpi_over_limit(self, canonical_text):
        text = canonical_text.replace("- Lines per function: 15", "- Lines per function: 20", 1)

        result = validate_text(text)

        (error,) = result.errors
        assert error.kind == ErrorKind.KPI_EXCEEDS_LIMIT
        assert "20" in error.message and "15" in error.message


class TestProperties:
    """Tests for properties that hold across documents."""

    def test_duplicate_across_tables_reported_once(self, canonical_text):
        """A completed-table row repeating an active ID yields one finding naming both rows."""
        duplicate = "| PRJ001 | Build the parser | Completed | @dev | 4 |"
        text = canonical_text.replace(PRJ003_ROW, PRJ003_ROW + "\n" + duplicate)

        result = validate_text(text)

        duplicates = [e for e in result.errors if e.kind == ErrorKind.DUPLICATE_ID]
        assert len(duplicates) == 1
        assert duplicates[0].message == "Duplicate task IDs found: PRJ001 (lines 7, 15)"

    @pytest.mark.parametrize(
        "old,new",
        [("(PRJ001-2)", "(XYZ001-2)"), ("[PRJ001a]", "[XYZ001a]")],
        ids=["numbered", "checkbox"],
    )
    def test_prefix_mismatch_detected_for_both_formats(self, canonical_text, old, new):
        result = validate_text(canonical_text.replace(old, new))

        (error,) = result.errors
        assert error.kind == ErrorKind.SUBTASK_PREFIX_MISMATCH
        assert error.severity == Severity.CRITICAL
        assert error.task_id == "PRJ001"
        assert "prefix 'XYZ' does not match parent task 'PRJ001' prefix 'PRJ'" in error.message

    @pytest.mark.parametrize("value,valid", [(3, True), (4, False)])
    def test_kpi_boundary(self, canonical_text, value, valid):
        text = canonical_text.replace("- Call depth: 3", f"- Call depth: {value}", 1)
        result = validate_text(text)

        assert result.valid is valid
        if not valid:
            assert result.errors[0].message == "Task 'PRJ001' exceeds Call depth limit: 4 > 3"

    def test_critical_halts_only_that_task(self, canonical_text):
        text = canonical_text.replace("[PRJ001a]", "[XYZ001a]").replace(
            "**Status**: Planned\n**Priority**: Medium", "**Status**: Done\n**Priority**: Medium"
        )
        # PRJ001 also loses its KPI section, which would be an ERROR if its chain kept running
        text = text.replace("**Code Quality KPIs**\n", "**Quality Notes**\n", 1)

        result = validate_text(text)

        assert [(e.task_id, e.kind) for e in result.errors] == [
            ("PRJ001", ErrorKind.SUBTASK_PREFIX_MISMATCH),
            ("PRJ002", ErrorKind.INVALID_STATUS),
        ]

    def test_errors_sorted_by_task_then_priority(self, canonical_text):
        text = canonical_text.replace("**Priority**: Medium", "**Priority**: Someday").replace(
            "- PRJ003", "- PRJ404"
        )
        text = text.replace("- Lines per function: 15", "- Lines per function: 99", 1)

        result = validate_text(text)

        assert [(e.task_id, e.kind) for e in result.errors] == [
            ("PRJ001", ErrorKind.KPI_EXCEEDS_LIMIT),
            ("PRJ002", ErrorKind.INVALID_PRIORITY),
            ("PRJ002", ErrorKind.INVALID_DEPENDENCY),
        ]

    def test_validation_is_repeatable(self, canonical_document):
        first = validate_document(canonical_document)
        second = validate_document(canonical_document)
        assert first == second


class TestTableChecks:
    """Tests for fatal and table-level conditions."""

    def test_no_tasks_is_fatal(self):
        result = validate_text("# Empty\n\nNothing to see.\n")

        (error,) = result.errors
        assert error.kind == ErrorKind.NO_TASKS_FOUND
        assert error.severity == Severity.CRITICAL
        assert result.task_count == 0

    def test_invalid_table_ids_are_fatal_and_listed(self, canonical_text):
        text = canonical_text.replace("| PRJ002 |", "| PRJ2 |").replace("| PRJ003 |", "| prj003 |")

        result = validate_text(text)

        (error,) = result.errors
        assert error.kind == ErrorKind.INVALID_ID_FORMAT
        assert error.message == (
            "Invalid task ID format:\n"
            "  Line 8: PRJ2 (invalid format)\n"
            "  Line 14: prj003 (invalid format)"
        )
        assert error.context["fatal"] is True
        assert error.context["rows"] == [{"line": 8, "id": "PRJ2"}, {"line": 14, "id": "prj003"}]

    def test_unreadable_file_is_fatal(self, tmp_path):
        result = validate_file(tmp_path / "nope.md")

        (error,) = result.errors
        assert error.kind == ErrorKind.IO_FAILURE
        assert not result.valid

    def test_active_task_without_detail(self, canonical_text):
        text = canonical_text.replace(PRJ001_ROW, PRJ001_ROW + "\n| PRJ004 | New | Planned | Low |")

        result = validate_text(text)

        (error,) = result.errors
        assert error.kind == ErrorKind.MISSING_DETAIL_SECTION
        assert error.task_id == "PRJ004"
        assert error.line_number == 8

    def test_subtask_rows_need_no_detail(self, canonical_text):
        text = canonical_text.replace(PRJ001_ROW, PRJ001_ROW + "\n| PRJ001-2 | Step | Planned | Low |")
        assert validate_text(text).valid

    def test_missing_separator_row_warns(self, canonical_text):
        text = canonical_text.replace("|----|-------------|--------|----------|\n", "", 1)

        result = validate_text(text)

        assert result.valid
        (warning,) = result.warnings
        assert warning.kind == ErrorKind.MALFORMED_TABLE


class TestOptions:
    """Tests for config and validator selection."""

    def test_minimal_validators_skip_other_rules(self, canonical_text):
        text = canonical_text.replace("- Lines per function: 15", "- Lines per function: 20", 1)
        assert validate_text(text, validators=minimal_validators()).valid

    def test_config_limits_apply(self, canonical_text):
        text = canonical_text.replace("- Lines per function: 15", "- Lines per function: 20", 1)
        config = ValidatorConfig(max_lines_per_function=20)
        assert validate_text(text, config=config).valid

    def test_custom_table_headings(self, canonical_text):
        text = canonical_text.replace("## Current Tasks", "## Open Work")
        config = ValidatorConfig(active_table_heading="## Open Work")
        assert validate_document(Document.from_text(text), config=config).valid
