"""
GCE Provision - Credentials Validator

Validates that Google Cloud credentials are present and valid.
"""

from gce_provision.core.auth import AuthManager
from gce_provision.core.exceptions import AuthenticationError
from gce_provision.validators.base import BaseValidator, ValidationResult


class CredentialsValidator(BaseValidator):
    """
    Validates that Google Cloud credentials can be loaded.

    Uses the same lookup as AuthManager: the configured JSON key file
    first, then Application Default Credentials.

    Common failure reasons:
    - User hasn't run: gcloud auth application-default login
    - google_json_key_location points to a missing file
    - A P12 key was configured
    """

    def __init__(self, config, auth: AuthManager = None):
        """
        Args:
            config: Provisioning configuration
            auth: AuthManager to check (default: a new one for config)
        """
        super().__init__(config)
        self.auth = auth or AuthManager(config)

    @property
    def name(self) -> str:
        """Display name for this validator."""
        return "Credentials & Authentication"

    def validate(self) -> ValidationResult:
        try:
            credentials, project = self.auth.get_credentials()
        except AuthenticationError as e:
            return self.fail(str(e).split('\n')[0], fix=e.fix)

        return self.ok(
            f"Authenticated (project: {self.config.google_project or project})",
            credentials_type=type(credentials).__name__
        )
