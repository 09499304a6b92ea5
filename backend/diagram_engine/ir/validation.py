from dataclasses import dataclass
from typing import List
from .errors import ValidationIssue


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[ValidationIssue]

    @classmethod
    def success(cls):
        return cls(is_valid=True, errors=[])

    @classmethod
    def failure(cls, errors: List[ValidationIssue]):
        return cls(is_valid=False, errors=errors)

    @property
    def first_error(self) -> ValidationIssue:
        return self.errors[0]
