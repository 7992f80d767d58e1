"""Tests for the individual task validators.

Each validator is exercised directly against small documents, without the
pipeline or the table-level checks.
"""

import pytest

from tasklist_validator.config import ValidatorConfig
from tasklist_validator.core.results import ErrorKind, Severity
from tasklist_validator.core.tasks import TableOrigin
from tasklist_validator.core.validators import (
    CategoryValidator,
    DependencyValidator,
    IdValidator,
    KpiValidator,
    SectionValidator,
    StatusValidator,
    SubtaskValidator,
)
from tasklist_validator.core.validators.base import BaseValidator
from tasklist_validator.core.validators.dependencies import find_cycles


def _task_doc(*body: str, task_id: str = "ABC001", table_status: str = "Planned") -> str:
    return "\n".join(
        [
            "## Current Tasks",
            "",
            "| ID | Description | Status |",
            "|----|-------------|--------|",
            f"| {task_id} | Task | {table_status} |",
            "",
            f"### {task_id}: Task",
            *body,
        ]
    )


class TestIdValidator:
    """Tests for ID grammar, uniqueness and prefixes."""

    def test_valid_ids_pass(self, make_context):
        context, (task,) = make_context(
            _task_doc("#### 1. Step (ABC001-1)", "- [ ] Minor [ABC001a]")
        )
        result = IdValidator().validate(task, context)
        assert result.valid
        assert result.warnings == ()

    def test_invalid_task_id_is_critical(self, make_context):
        context, (task,) = make_context(_task_doc(task_id="ABCDE001"))
        result = IdValidator().validate(task, context)

        assert result.has_critical
        assert result.errors[0].kind == ErrorKind.INVALID_ID_FORMAT

    def test_missing_subtask_id_reports_line(self, make_context):
        text = _task_doc("#### 1. Step without id")
        context, (task,) = make_context(text)
        result = IdValidator().validate(task, context)

        error = result.errors[0]
        assert error.kind == ErrorKind.INVALID_ID_FORMAT
        assert error.severity == Severity.CRITICAL
        assert error.line_number == 8

    @pytest.mark.parametrize(
        "subtask_line",
        ["#### 1. Step (XYZ001-1)", "- [ ] Minor [XYZ001a]"],
        ids=["numbered", "checkbox"],
    )
    def test_prefix_mismatch_same_for_both_formats(self, make_context, subtask_line):
        """Numbered and checkbox subtasks report prefix mismatches the same way."""
        context, (task,) = make_context(_task_doc(subtask_line))
        result = IdValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.SUBTASK_PREFIX_MISMATCH
        assert error.severity == Severity.CRITICAL
        assert error.message.endswith("does not match parent task 'ABC001' prefix 'ABC'")
        assert error.line_number == 8

    def test_duplicate_subtask_ids(self, make_context):
        context, (task,) = make_context(
            _task_doc("#### 1. Step (ABC001-1)", "#### 2. Again (ABC001-1)")
        )
        result = IdValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.DUPLICATE_ID
        assert "ABC001-1 (lines 8, 9)" in error.message

    def test_mixed_prefixes_warning(self, make_context):
        text = _task_doc() + "\n\n### XYZ002: Other\n"
        context, tasks = make_context(text)
        result = IdValidator().validate(tasks[0], context)

        assert result.valid
        assert result.warnings[0].kind == ErrorKind.MIXED_PREFIXES
        assert IdValidator(warn_mixed_prefixes=False).validate(tasks[0], context).warnings == ()


class TestStatusValidator:
    """Tests for status and priority values."""

    def test_invalid_status_names_value(self, make_context):
        context, (task,) = make_context(_task_doc("**Status**: Done", "**Priority**: High"))
        result = StatusValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.INVALID_STATUS
        assert "ABC001" in error.message
        assert "'Done'" in error.message
        assert error.line_number == 8

    def test_status_on_next_line(self, make_context):
        context, (task,) = make_context(_task_doc("**Status**", "Planned", "**Priority**", "Low"))
        assert StatusValidator().validate(task, context).valid

    def test_invalid_priority(self, make_context):
        context, (task,) = make_context(_task_doc("**Status**: Planned", "**Priority**: Urgent"))
        result = StatusValidator().validate(task, context)
        assert result.errors[0].kind == ErrorKind.INVALID_PRIORITY

    def test_absent_fields_are_not_reported_here(self, make_context):
        context, (task,) = make_context(_task_doc("**Description**"))
        assert StatusValidator().validate(task, context).valid

    def test_in_progress_needs_subtasks(self, make_context):
        context, (task,) = make_context(
            _task_doc("**Status**: In Progress", table_status="In Progress")
        )
        result = StatusValidator().validate(task, context)
        assert result.errors[0].kind == ErrorKind.MISSING_SUBTASKS

    def test_in_progress_with_checkbox_subtask(self, make_context):
        context, (task,) = make_context(
            _task_doc("**Status**: In Progress", "- [ ] Step [ABC001a]", table_status="In Progress")
        )
        assert StatusValidator().validate(task, context).valid

    def test_table_mismatch_is_warning(self, make_context):
        context, (task,) = make_context(_task_doc("**Status**: Blocked"))
        result = StatusValidator().validate(task, context)

        assert result.valid
        (warning,) = result.warnings
        assert warning.kind == ErrorKind.STATUS_MISMATCH
        assert warning.line_number == 5

    def test_custom_statuses(self, make_context):
        config = ValidatorConfig(valid_statuses=("Todo", "Done"))
        context, (task,) = make_context(_task_doc("**Status**: Done", table_status="Done"), config)
        assert StatusValidator().validate(task, context).valid

    def test_mismatch_reported_for_each_table(self, make_context):
        text = _task_doc("**Status**: Blocked") + (
            "\n\n## Completed Tasks\n\n| ID | D | Status |\n|---|---|---|\n| ABC001 | T | Completed |\n"
        )
        context, tasks = make_context(text)
        result = StatusValidator().validate(tasks[0], context)

        assert [w.context["table_status"] for w in result.warnings] == ["Planned", "Completed"]


class TestValidationContext:
    """Tests for context lookups and the validator base class."""

    def test_stub_for_filters_by_table(self, make_context):
        text = _task_doc() + "\n\n## Completed Tasks\n\n| ID | D | Status |\n|---|---|---|\n| ABC001 | T | Completed |\n"
        context, _ = make_context(text)

        assert context.stub_for("ABC001").origin == TableOrigin.ACTIVE
        assert context.stub_for("ABC001", TableOrigin.COMPLETED).raw_status == "Completed"
        assert context.stub_for("ABC999") is None

    def test_validator_without_validate_cannot_be_built(self):
        class Incomplete(BaseValidator):
            name = "incomplete"

        with pytest.raises(TypeError):
            Incomplete()


REQUIRED_BODY = (
    "**Description**",
    "**Simplicity Progression Plan**",
    "**Simplicity Principle**",
    "**Abstraction Evaluation**",
    "**Requirements**",
    "{{test-requirements}}",
    "{{typing-requirements}}",
    "{{error-handling}}",
    "**Status**: Planned",
    "**Priority**: Low",
)


class TestSectionValidator:
    """Tests for required, completion and error-handling sections."""

    def test_complete_task_passes(self, make_context):
        context, (task,) = make_context(_task_doc(*REQUIRED_BODY))
        assert SectionValidator().validate(task, context).valid

    def test_missing_required_section(self, make_context):
        body = tuple(line for line in REQUIRED_BODY if line != "**Description**")
        context, (task,) = make_context(_task_doc(*body))
        result = SectionValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.MISSING_REQUIRED_SECTION
        assert error.context["section"] == "**Description**"

    def test_placeholder_stands_in_for_two_sections(self, make_context):
        """Without {{test-requirements}} both test sections are missing."""
        body = tuple(line for line in REQUIRED_BODY if line != "{{test-requirements}}")
        context, (task,) = make_context(_task_doc(*body))
        result = SectionValidator().validate(task, context)

        assert {e.context["section"] for e in result.errors} == {
            "**Test Requirements**",
            "**Integration Test Scenarios**",
        }

    def test_literal_sections_instead_of_placeholder(self, make_context):
        body = tuple(line for line in REQUIRED_BODY if line != "{{typing-requirements}}")
        context, (task,) = make_context(_task_doc(*body, "**Typing Requirements**"))
        assert SectionValidator().validate(task, context).valid

    def test_completed_task_needs_completion_sections(self, make_context):
        body = tuple(line.replace("Planned", "Completed") for line in REQUIRED_BODY)
        context, (task,) = make_context(_task_doc(*body, table_status="Completed"))
        result = SectionValidator().validate(task, context)

        assert {e.kind for e in result.errors} == {ErrorKind.MISSING_COMPLETION_SECTION}
        assert len(result.errors) == 4

    def test_completed_table_listing_counts_as_completed(self, make_context):
        text = _task_doc(*REQUIRED_BODY) + "\n\n## Completed Tasks\n\n| ID | D | Status |\n|---|---|---|\n| ABC001 | T | Completed |\n"
        context, tasks = make_context(text)
        result = SectionValidator().validate(tasks[0], context)
        assert result.has_error_kind(ErrorKind.MISSING_COMPLETION_SECTION)

    def test_error_handling_sections_without_placeholder(self, make_context):
        body = tuple(line for line in REQUIRED_BODY if line != "{{error-handling}}")
        context, (task,) = make_context(_task_doc(*body, "**Error Handling**", "**Core Principles**"))
        result = SectionValidator().validate(task, context)

        assert {e.context["section"] for e in result.errors} == {
            "**Error Implementation**",
            "**Error Examples**",
        }
        assert {e.kind for e in result.errors} == {ErrorKind.MISSING_ERROR_HANDLING}

    @pytest.mark.parametrize("name", ["error-handling", "error-handling-main"])
    def test_main_error_handling_placeholders(self, make_context, name):
        body = tuple(line.replace("{{error-handling}}", f"{{{{{name}}}}}") for line in REQUIRED_BODY)
        context, (task,) = make_context(_task_doc(*body))
        assert SectionValidator().validate(task, context).valid

    def test_unlisted_error_handling_placeholder_is_not_accepted(self, make_context):
        body = tuple(line.replace("{{error-handling}}", "{{otp-error-handling}}") for line in REQUIRED_BODY)
        context, (task,) = make_context(_task_doc(*body))
        result = SectionValidator().validate(task, context)

        assert len(result.errors) == 4
        assert {e.kind for e in result.errors} == {ErrorKind.MISSING_ERROR_HANDLING}

    def test_subtask_placeholder_does_not_cover_main_task(self, make_context):
        body = tuple(line for line in REQUIRED_BODY if line != "{{error-handling}}")
        context, (task,) = make_context(
            _task_doc(*body, "#### 1. Step (ABC001-1)", "**Status**: Planned", "{{error-handling-subtask}}")
        )
        result = SectionValidator().validate(task, context)

        assert result.has_error_kind(ErrorKind.MISSING_ERROR_HANDLING)
        assert len(result.errors) == 4

    def test_subtask_sections_do_not_cover_main_task(self, make_context):
        """Error-handling markers written inside a numbered subtask belong to that subtask."""
        body = tuple(line for line in REQUIRED_BODY if line != "{{error-handling}}")
        context, (task,) = make_context(
            _task_doc(
                *body,
                "#### 1. Step (ABC001-1)",
                "**Status**: Planned",
                "**Error Handling**",
                "**Core Principles**",
                "**Error Implementation**",
                "**Error Examples**",
            )
        )
        result = SectionValidator().validate(task, context)
        assert len(result.errors) == 4

    def test_configured_main_placeholder(self, make_context):
        config = ValidatorConfig(error_handling_references=("failure-modes",))
        body = tuple(line.replace("{{error-handling}}", "{{failure-modes}}") for line in REQUIRED_BODY)
        context, (task,) = make_context(_task_doc(*body), config)
        assert SectionValidator().validate(task, context).valid


class TestSubtaskValidator:
    """Tests for subtask rules."""

    def test_checked_checkbox_needs_no_rating(self, make_context):
        context, (task,) = make_context(_task_doc("- [x] Done item [ABC001a]"))
        assert SubtaskValidator().validate(task, context).valid

    def test_completed_numbered_without_rating(self, make_context):
        context, (task,) = make_context(
            _task_doc("#### 1. Step (ABC001-1)", "**Status**: Completed", "{{error-handling-subtask}}")
        )
        result = SubtaskValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.MISSING_REVIEW_RATING
        assert error.message == "Completed subtask ABC001-1 is missing review rating"

    @pytest.mark.parametrize("rating", ["4", "4.5", "5 (partial)", "3.2(partial)"])
    def test_valid_ratings(self, make_context, rating):
        context, (task,) = make_context(
            _task_doc(
                "#### 1. Step (ABC001-1)",
                "**Status**: Completed",
                f"**Review Rating**: {rating}",
                "{{error-handling-subtask}}",
            )
        )
        assert SubtaskValidator().validate(task, context).valid

    @pytest.mark.parametrize("rating", ["6", "0", "4.55", "great"])
    def test_invalid_ratings(self, make_context, rating):
        context, (task,) = make_context(
            _task_doc(
                "#### 1. Step (ABC001-1)",
                "**Status**: Completed",
                f"**Review Rating**: {rating}",
                "{{error-handling-subtask}}",
            )
        )
        result = SubtaskValidator().validate(task, context)
        assert result.errors[0].kind == ErrorKind.INVALID_REVIEW_RATING

    def test_numbered_needs_status_and_error_handling(self, make_context):
        context, (task,) = make_context(_task_doc("#### 1. Step (ABC001-1)", "Some text"))
        result = SubtaskValidator().validate(task, context)

        sections = [e.context["section"] for e in result.errors]
        assert sections == [
            "**Status**",
            "**Error Handling**",
            "**Task-Specific Approach**",
            "**Error Reporting**",
        ]
        assert {e.kind for e in result.errors} == {ErrorKind.MISSING_SUBTASK_SECTION}

    @pytest.mark.parametrize(
        "name", ["error-handling-subtask", "subtask-error-handling", "def-error-handling-subtask"]
    )
    def test_subtask_error_handling_placeholders(self, make_context, name):
        context, (task,) = make_context(
            _task_doc("#### 1. Step (ABC001-1)", "**Status**: Planned", f"{{{{{name}}}}}")
        )
        assert SubtaskValidator().validate(task, context).valid

    def test_main_placeholder_does_not_cover_subtask(self, make_context):
        """A main-task {{error-handling}} after the last subtask still leaves the subtask uncovered."""
        context, (task,) = make_context(
            _task_doc("#### 1. Step (ABC001-1)", "**Status**: Planned", "", "{{error-handling}}")
        )
        result = SubtaskValidator().validate(task, context)

        assert [e.context["section"] for e in result.errors] == [
            "**Error Handling**",
            "**Task-Specific Approach**",
            "**Error Reporting**",
        ]

    @pytest.mark.parametrize("rating", ["", "-"], ids=["empty", "dash"])
    def test_blank_rating_counts_as_missing(self, make_context, rating):
        context, (task,) = make_context(
            _task_doc(
                "#### 1. Step (ABC001-1)",
                "**Status**: Completed",
                f"**Review Rating**: {rating}",
                "{{error-handling-subtask}}",
            )
        )
        result = SubtaskValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.MISSING_REVIEW_RATING

    def test_invalid_subtask_status(self, make_context):
        context, (task,) = make_context(
            _task_doc("#### 1. Step (ABC001-1)", "**Status**: Finished", "{{error-handling-subtask}}")
        )
        result = SubtaskValidator().validate(task, context)
        assert result.errors[0].kind == ErrorKind.INVALID_STATUS
        assert result.errors[0].task_id == "ABC001-1"

    def test_rating_is_read_from_own_subtask_only(self, make_context):
        context, (task,) = make_context(
            _task_doc(
                "#### 1. Step (ABC001-1)",
                "**Status**: Completed",
                "{{error-handling-subtask}}",
                "#### 2. Next (ABC001-2)",
                "**Status**: Planned",
                "**Review Rating**: 5",
                "{{error-handling-subtask}}",
            )
        )
        result = SubtaskValidator().validate(task, context)
        (error,) = result.errors
        assert error.task_id == "ABC001-1"

    @pytest.mark.parametrize(
        "subtask_line",
        ["#### 1. Step (XYZ001-1)", "- [ ] Minor [XYZ001a]"],
        ids=["numbered", "checkbox"],
    )
    def test_prefix_mismatch(self, make_context, subtask_line):
        context, (task,) = make_context(
            _task_doc(subtask_line, "**Status**: Planned", "{{error-handling-subtask}}")
        )
        result = SubtaskValidator().validate(task, context)
        assert result.errors[0].kind == ErrorKind.SUBTASK_PREFIX_MISMATCH


def _two_tasks(first_deps: str, second_deps: str) -> str:
    return "\n".join(
        [
            "## Current Tasks",
            "",
            "| ID | Description | Status |",
            "|----|-------------|--------|",
            "| ABC001 | One | Planned |",
            "| ABC002 | Two | Planned |",
            "",
            "### ABC001: One",
            f"**Dependencies**: {first_deps}",
            "",
            "### ABC002: Two",
            f"**Dependencies**: {second_deps}",
            "#### 1. Step (ABC002-1)",
        ]
    )


class TestDependencyValidator:
    """Tests for dependency existence and cycles."""

    @pytest.mark.parametrize("value", ["None", "none", "", "{{def-no-dependencies}}"])
    def test_no_dependencies(self, make_context, value):
        context, tasks = make_context(_two_tasks(value, "None"))
        assert DependencyValidator().validate(tasks[0], context).valid

    def test_known_task_and_subtask_ids(self, make_context):
        context, tasks = make_context(_two_tasks("ABC002, ABC002-1", "None"))
        assert DependencyValidator().validate(tasks[0], context).valid

    def test_unknown_dependency(self, make_context):
        context, tasks = make_context(_two_tasks("ABC002, ABC999", "None"))
        result = DependencyValidator().validate(tasks[0], context)

        (error,) = result.errors
        assert error.kind == ErrorKind.INVALID_DEPENDENCY
        assert "ABC999" in error.message
        assert error.line_number == 9

    def test_bullet_list(self, make_context):
        text = _two_tasks("", "None").replace(
            "**Dependencies**: \n", "**Dependencies**\n- ABC002\n- ABC404\n"
        )
        context, tasks = make_context(text)
        result = DependencyValidator().validate(tasks[0], context)
        assert [e.context["dependency"] for e in result.errors] == ["ABC404"]

    def test_self_dependency(self, make_context):
        context, tasks = make_context(_two_tasks("ABC001", "None"))
        result = DependencyValidator().validate(tasks[0], context)
        assert result.errors[0].kind == ErrorKind.CIRCULAR_DEPENDENCY

    def test_cycle_reported_once(self, make_context):
        """A two-task cycle is reported by its smallest member only."""
        context, tasks = make_context(_two_tasks("ABC002", "ABC001"))
        validator = DependencyValidator()

        first = validator.validate(tasks[0], context)
        second = validator.validate(tasks[1], context)

        assert first.errors[0].message == "Circular dependency detected: ABC001 -> ABC002 -> ABC001"
        assert second.valid

    def test_cycles_sharing_a_task_are_each_reported(self, make_context):
        text = "\n".join(
            [
                "## Current Tasks",
                "",
                "| ID | Description | Status |",
                "|----|-------------|--------|",
                "| ABC001 | One | Planned |",
                "| ABC002 | Two | Planned |",
                "| ABC003 | Three | Planned |",
                "",
                "### ABC001: One",
                "**Dependencies**: ABC002",
                "",
                "### ABC002: Two",
                "**Dependencies**: ABC001, ABC003",
                "",
                "### ABC003: Three",
                "**Dependencies**: ABC002",
            ]
        )
        context, tasks = make_context(text)
        validator = DependencyValidator()

        messages = [
            error.message for task in tasks for error in validator.validate(task, context).errors
        ]

        assert messages == [
            "Circular dependency detected: ABC001 -> ABC002 -> ABC001",
            "Circular dependency detected: ABC002 -> ABC003 -> ABC002",
        ]


class TestFindCycles:
    """Tests for cycle enumeration over the dependency graph."""

    def test_each_cycle_found_from_its_smallest_member(self):
        graph = {"A": ["B"], "B": ["A", "C"], "C": ["A"]}

        assert find_cycles("A", graph) == [["A", "B", "A"], ["A", "B", "C", "A"]]
        assert find_cycles("B", graph) == []
        assert find_cycles("C", graph) == []

    def test_acyclic(self):
        assert find_cycles("A", {"A": ["B"], "B": ["C"], "C": []}) == []


class TestCategoryValidator:
    """Tests for category range dispatch."""

    def test_core_sections_required(self, make_context):
        context, (task,) = make_context(_task_doc("**Architecture Notes**"))
        result = CategoryValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.MISSING_CATEGORY_SECTION
        assert error.context == {"category": "core", "section": "**Complexity Assessment**"}

    def test_category_placeholder(self, make_context):
        context, (task,) = make_context(_task_doc("{{testing-sections}}", task_id="ABC301"))
        assert CategoryValidator().validate(task, context).valid

    def test_documentation_category(self, make_context):
        context, (task,) = make_context(_task_doc("**Content Strategy**", task_id="ABC250"))
        result = CategoryValidator().validate(task, context)
        assert result.errors[0].context["section"] == "**Audience Analysis**"

    def test_out_of_range(self, make_context):
        context, (task,) = make_context(_task_doc(task_id="ABC0450"))
        result = CategoryValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.CATEGORY_OUT_OF_RANGE
        assert "450" in error.message


def _kpi_doc(*kpi_lines: str) -> str:
    return _task_doc("**Code Quality KPIs**", *kpi_lines, "", "**Status**: Planned")


class TestKpiValidator:
    """Tests for code quality KPI limits."""

    def test_values_at_limit_pass(self, make_context):
        context, (task,) = make_context(
            _kpi_doc("- Functions per module: 8", "- Lines per function: 15", "- Call depth: 3")
        )
        assert KpiValidator().validate(task, context).valid

    def test_limit_plus_one_fails(self, make_context):
        context, (task,) = make_context(
            _kpi_doc("- Functions per module: 8", "- Lines per function: 16", "- Call depth: 3")
        )
        result = KpiValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.KPI_EXCEEDS_LIMIT
        assert "16" in error.message and "15" in error.message

    def test_lines_per_function_twenty(self, make_context):
        context, (task,) = make_context(
            _kpi_doc("- Functions per module: 4", "- Lines per function: 20", "- Call depth: 2")
        )
        result = KpiValidator().validate(task, context)
        assert result.errors[0].message == "Task 'ABC001' exceeds Lines per function limit: 20 > 15"

    def test_case_insensitive_labels(self, make_context):
        context, (task,) = make_context(
            _kpi_doc("- FUNCTIONS PER MODULE: 2", "- lines per function: 3", "- call depth: 1")
        )
        assert KpiValidator().validate(task, context).valid

    def test_missing_metric(self, make_context):
        context, (task,) = make_context(_kpi_doc("- Functions per module: 2", "- Call depth: 1"))
        result = KpiValidator().validate(task, context)

        (error,) = result.errors
        assert error.kind == ErrorKind.MISSING_KPI
        assert error.context["metric"] == "lines_per_function"

    def test_section_ends_at_blank_line(self, make_context):
        text = _task_doc(
            "**Code Quality KPIs**",
            "- Functions per module: 2",
            "",
            "- Lines per function: 3",
            "- Call depth: 1",
        )
        context, (task,) = make_context(text)
        result = KpiValidator().validate(task, context)
        assert len(result.errors) == 2

    def test_missing_section(self, make_context):
        context, (task,) = make_context(_task_doc("**Status**: Planned"))
        result = KpiValidator().validate(task, context)
        assert result.errors[0].kind == ErrorKind.MISSING_KPI

    def test_kpi_placeholder_skips_check(self, make_context):
        context, (task,) = make_context(_task_doc("{{elixir-kpis}}"))
        assert KpiValidator().validate(task, context).valid

    def test_optional_cyclomatic_complexity(self, make_context):
        context, (task,) = make_context(
            _kpi_doc(
                "- Functions per module: 2",
                "- Lines per function: 3",
                "- Call depth: 1",
                "- Cyclomatic complexity: 11",
            )
        )
        result = KpiValidator().validate(task, context)
        assert result.errors[0].context["metric"] == "cyclomatic_complexity"

    def test_configured_limit(self, make_context):
        config = ValidatorConfig(max_lines_per_function=25)
        context, (task,) = make_context(
            _kpi_doc("- Functions per module: 4", "- Lines per function: 20", "- Call depth: 2"),
            config,
        )
        assert KpiValidator().validate(task, context).valid
