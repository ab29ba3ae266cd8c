"""
GCE Provision - Base Validator

Pre-flight checks run before anything is created. A failed check stops
the create with a ValidationError that lists every problem at once.

Pattern: Create a new validator by inheriting from BaseValidator
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from gce_provision.core.config import ProvisioningConfig
from gce_provision.core.exceptions import ValidationError


@dataclass
class ValidationResult:
    """
    Outcome of one pre-flight check.

    Attributes:
        validator_name: Name of the check (for display)
        passed: Whether the check passed
        message: One line describing the outcome
        fix: What the operator should do about a failure
        details: Extra data for debug output
    """
    validator_name: str
    passed: bool
    message: str
    fix: Optional[str] = None
    details: Optional[dict] = None

    def __str__(self):
        status = "[OK]" if self.passed else "[X]"
        return f"{status} {self.validator_name}: {self.message}"


class ValidationResults:
    """Results of one pre-flight run."""

    def __init__(self):
        self.results: List[ValidationResult] = []

    def add(self, result: ValidationResult):
        self.results.append(result)

    def all_passed(self) -> bool:
        return all(r.passed for r in self.results)

    def get_failures(self) -> List[ValidationResult]:
        return [r for r in self.results if not r.passed]

    def raise_for_failures(self):
        """
        Raise if any check failed.

        Raises:
            ValidationError: Naming every failed check, with their fixes
        """
        failures = self.get_failures()
        if not failures:
            return

        fixes = [f"{r.validator_name}: {r.fix}" for r in failures if r.fix]
        raise ValidationError(
            ', '.join(r.validator_name for r in failures),
            '\n'.join(f"  [X] {r.validator_name}: {r.message}" for r in failures),
            fix='\n  '.join(fixes) if fixes else None
        )


class BaseValidator(ABC):
    """
    Base class for pre-flight checks on a ProvisioningConfig.

    Example:
        class DiskSizeValidator(BaseValidator):
            @property
            def name(self):
                return "Disk Size"

            def validate(self):
                if self.config.disk_size >= 10:
                    return self.ok("Disk size OK")
                return self.fail("Disk too small", fix="Set disk_size to 10 or more")
    """

    def __init__(self, config: ProvisioningConfig):
        self.config = config

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name of the check."""
        pass

    @abstractmethod
    def validate(self) -> ValidationResult:
        """Run the check."""
        pass

    def ok(self, message: str, **details) -> ValidationResult:
        return ValidationResult(self.name, True, message, details=details or None)

    def fail(self, message: str, fix: str = None, **details) -> ValidationResult:
        return ValidationResult(self.name, False, message, fix=fix, details=details or None)


class ValidationRunner:
    """
    Runs validators in order and collects their results.

    Example:
        runner = ValidationRunner()
        runner.add(RequiredConfigValidator(config))
        runner.add(PublicKeyValidator(config))

        runner.run_all(logger).raise_for_failures()
    """

    def __init__(self):
        self.validators: List[BaseValidator] = []

    def add(self, validator: BaseValidator):
        self.validators.append(validator)

    def run_all(self, logger=None) -> ValidationResults:
        """
        Run every validator, even after a failure.

        Args:
            logger: Optional logger; each result is logged at INFO

        Returns:
            ValidationResults
        """
        results = ValidationResults()

        for validator in self.validators:
            result = validator.validate()
            results.add(result)

            if logger:
                logger.info(f"  {result}")
                if result.details:
                    logger.debug(f"    {result.details}")

        return results
