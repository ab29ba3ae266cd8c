"""
GCE Provision - Configuration Validators

Checks on the configuration that need no API access.
"""

from pathlib import Path

from gce_provision.core.config import REQUIRED_OPTIONS
from gce_provision.utils.naming import is_valid_name
from gce_provision.validators.base import BaseValidator, ValidationResult

MIN_DISK_SIZE_GB = 10
MAX_DISK_SIZE_GB = 65536


class RequiredConfigValidator(BaseValidator):
    """
    Validates that every required option is set.

    Required: google_client_email, google_project, image_name
    """

    @property
    def name(self) -> str:
        return "Required Options"

    def validate(self) -> ValidationResult:
        missing = self.config.missing_options()
        if missing:
            return self.fail(
                f"Missing: {', '.join(missing)}",
                fix=f"Set {', '.join(missing)} in the config file or on the command line",
                missing=missing
            )
        return self.ok(f"All of {', '.join(REQUIRED_OPTIONS)} set")


class InstanceSettingsValidator(BaseValidator):
    """
    Validates values Compute Engine would reject anyway.

    This checks:
    1. disk_size is between 10 and 65536 GB
    2. A preset inst_name follows the naming rules
    3. A username is known (needed for SSH)
    """

    @property
    def name(self) -> str:
        return "Instance Settings"

    def validate(self) -> ValidationResult:
        config = self.config
        problems = []

        if not MIN_DISK_SIZE_GB <= config.disk_size <= MAX_DISK_SIZE_GB:
            problems.append(
                f"disk_size must be between {MIN_DISK_SIZE_GB} and {MAX_DISK_SIZE_GB} GB"
            )

        if config.inst_name and not is_valid_name(config.inst_name):
            problems.append(f"inst_name '{config.inst_name}' is not a valid instance name")

        if not config.username:
            problems.append("username is not set and the current user is unknown")

        if problems:
            return self.fail('; '.join(problems))
        return self.ok("Instance settings are valid")


class PublicKeyValidator(BaseValidator):
    """
    Validates that public_key_path, when set, points to a readable file.
    """

    @property
    def name(self) -> str:
        return "SSH Public Key"

    def validate(self) -> ValidationResult:
        if not self.config.public_key_path:
            return self.ok("No public key configured")

        key_path = Path(self.config.public_key_path).expanduser()
        if not key_path.is_file():
            return self.fail(
                f"Public key not found: {key_path}",
                fix="ssh-keygen -t ed25519, or fix public_key_path"
            )

        return self.ok(f"Using {key_path}")
