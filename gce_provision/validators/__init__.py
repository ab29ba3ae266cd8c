"""
GCE Provision - Validators Module

Pre-flight checks that run before anything is created.

Usage:
    from gce_provision.validators import default_validation_runner

    runner = default_validation_runner(config)
    results = runner.run_all(logger)

    if not results.all_passed():
        results.raise_for_failures()
"""

from gce_provision.validators.base import (
    BaseValidator,
    ValidationResult,
    ValidationResults,
    ValidationRunner
)
from gce_provision.validators.config import (
    InstanceSettingsValidator,
    PublicKeyValidator,
    RequiredConfigValidator
)
from gce_provision.validators.credentials import CredentialsValidator


def default_validation_runner(config, auth=None) -> ValidationRunner:
    """Runner with every pre-flight check for a create."""
    runner = ValidationRunner()
    runner.add(RequiredConfigValidator(config))
    runner.add(InstanceSettingsValidator(config))
    runner.add(PublicKeyValidator(config))
    runner.add(CredentialsValidator(config, auth))
    return runner


__all__ = [
    # Base classes
    'BaseValidator',
    'ValidationResult',
    'ValidationResults',
    'ValidationRunner',

    # Validators
    'RequiredConfigValidator',
    'InstanceSettingsValidator',
    'PublicKeyValidator',
    'CredentialsValidator',
    'default_validation_runner',
]
