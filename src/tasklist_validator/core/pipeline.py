"""
Ordered validator chain.

Validators run highest priority first. All findings are collected, but a
result carrying a CRITICAL error stops the chain for the current task only;
sibling tasks are still validated in full.
"""

import logging
from typing import Iterable, List, Sequence

from tasklist_validator.core.results import ValidationResult
from tasklist_validator.core.tasks import TaskDetail
from tasklist_validator.core.validators import VALIDATOR_REGISTRY
from tasklist_validator.core.validators.base import ValidationContext, Validator, context_dict

logger = logging.getLogger(__name__)


def sort_validators(validators: Iterable[Validator]) -> List[Validator]:
    """Order by priority, highest first; equal priorities keep their given order."""
    return sorted(validators, key=lambda validator: -validator.priority)


def default_validators() -> List[Validator]:
    return sort_validators(cls() for cls in VALIDATOR_REGISTRY.values())


def minimal_validators() -> List[Validator]:
    """ID and status checks only."""
    return build_validators(["id", "status"])


def build_validators(names: Iterable[str]) -> List[Validator]:
    """Instantiate registered validators by name.

    Raises:
        ValueError: If a name is not registered.
    """
    validators = []
    for name in names:
        key = name.strip()
        if key not in VALIDATOR_REGISTRY:
            raise ValueError(
                f"Unknown validator '{key}'. Available: {', '.join(sorted(VALIDATOR_REGISTRY))}"
            )
        validators.append(VALIDATOR_REGISTRY[key]())
    return sort_validators(validators)


def run(
    task: TaskDetail,
    context: ValidationContext,
    validators: Sequence[Validator],
) -> ValidationResult:
    """Run the chain over one task."""
    results = []
    for validator in sort_validators(validators):
        result = validator.validate(task, context)
        results.append(result)
        if result.has_critical:
            logger.debug(
                "Task %s: critical finding from %s, skipping remaining validators",
                task.id,
                validator.name,
            )
            break
    return ValidationResult.combine(results)


def run_many(
    tasks: Iterable[TaskDetail],
    context: ValidationContext,
    validators: Sequence[Validator],
) -> ValidationResult:
    """Run the chain over every task and combine the results in task order."""
    ordered = sort_validators(validators)
    logger.debug(
        "Running %s over %s",
        ", ".join(v.name for v in ordered),
        context_dict(context),
    )
    return ValidationResult.combine(run(task, context, ordered) for task in tasks)
