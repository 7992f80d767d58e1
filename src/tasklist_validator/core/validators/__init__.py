"""
Built-in task validators.

Each validator checks one rule family for a single task. The registry maps
the short names accepted by ``build_validators`` and the CLI
``--validators`` option to validator classes.
"""

from typing import Dict, Type

from tasklist_validator.core.validators.base import (
    BaseValidator,
    ValidationContext,
    Validator,
)
from tasklist_validator.core.validators.category import CategoryValidator
from tasklist_validator.core.validators.dependencies import DependencyValidator
from tasklist_validator.core.validators.ids import IdValidator
from tasklist_validator.core.validators.kpi import KpiValidator
from tasklist_validator.core.validators.sections import SectionValidator
from tasklist_validator.core.validators.status import StatusValidator
from tasklist_validator.core.validators.subtasks import SubtaskValidator

VALIDATOR_REGISTRY: Dict[str, Type[BaseValidator]] = {
    IdValidator.name: IdValidator,
    StatusValidator.name: StatusValidator,
    SectionValidator.name: SectionValidator,
    SubtaskValidator.name: SubtaskValidator,
    DependencyValidator.name: DependencyValidator,
    CategoryValidator.name: CategoryValidator,
    KpiValidator.name: KpiValidator,
}

__all__ = [
    "BaseValidator",
    "CategoryValidator",
    "DependencyValidator",
    "IdValidator",
    "KpiValidator",
    "SectionValidator",
    "StatusValidator",
    "SubtaskValidator",
    "VALIDATOR_REGISTRY",
    "ValidationContext",
    "Validator",
]
