"""
GCE Provision - Custom Exception Classes

This module defines all custom exceptions used in GCE Provision.
Each exception provides a clear error message, with troubleshooting
steps where the operator can act on them.
"""


class GCEProvisionError(Exception):
    """
    Base exception for all GCE Provision errors.

    All custom exceptions inherit from this, making it easy to catch
    any GCE Provision-specific error with a single except clause.
    """
    pass


class ConfigError(GCEProvisionError):
    """
    Raised when the provisioning configuration is invalid.

    Common causes:
    - A required option (google_client_email, google_project, image_name) is missing
    - An unknown option was given in a config file
    """

    def __init__(self, message: str, missing: list = None):
        """
        Args:
            message: Error description
            missing: Names of required options that were not set
        """
        self.missing = missing or []

        full_message = f"{message}"
        if missing:
            full_message += f"\n\nMissing required options:"
            for option in missing:
                full_message += f"\n  - {option}"

        super().__init__(full_message)


class AuthenticationError(GCEProvisionError):
    """
    Raised when authentication fails.

    Common causes:
    - No credentials configured
    - Credentials expired
    - Key file not found or unreadable
    """

    def __init__(self, message: str, fix: str = None):
        """
        Args:
            message: Error description
            fix: Suggested fix command (e.g., "gcloud auth application-default login")
        """
        self.fix = fix
        full_message = f"{message}"
        if fix:
            full_message += f"\n\nFix: {fix}"
        super().__init__(full_message)


class ValidationError(GCEProvisionError):
    """
    Raised when pre-flight validation fails.
    """

    def __init__(self, validator_name: str, message: str, fix: str = None):
        """
        Args:
            validator_name: Name of the validator that failed
            message: What failed
            fix: Suggested fix
        """
        self.validator_name = validator_name
        self.fix = fix

        full_message = f"Validation failed: {validator_name}\n{message}"
        if fix:
            full_message += f"\n\nFix: {fix}"

        super().__init__(full_message)


class NameGenerationError(GCEProvisionError):
    """
    Raised when a generated instance name does not satisfy the
    Compute Engine naming rules.

    Seeing this means the name generator has a bug; the base name
    itself can never produce an invalid result.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid generated instance name: {name}")


class NoAvailableZoneError(GCEProvisionError):
    """
    Raised when no zone in the requested region is UP.

    Nothing has been created when this is raised, so the whole
    create can be retried from scratch.
    """

    def __init__(self, region: str, project: str = None):
        """
        Args:
            region: Region prefix that was searched (or 'any')
            project: Project whose zones were listed
        """
        self.region = region
        self.project = project

        message = f"No up zones in region '{region}'"
        message += f"\n\nTroubleshooting:"
        message += f"\n  1. Check the region spelling (e.g. us-central1)"
        message += f"\n  2. Set zone_name explicitly, or use region 'any'"
        if project:
            message += f"\n\nList zones:"
            message += f"\n  gcloud compute zones list --project={project}"

        super().__init__(message)


class ProviderError(GCEProvisionError):
    """
    Raised when the Compute Engine API (or its transport) reports a failure.

    Examples:
    - HTTP errors (auth, quota, bad request)
    - Network errors talking to the API
    - A zone operation that finished with errors
    """

    def __init__(self, action: str, reason: str):
        """
        Args:
            action: What we were trying to do (e.g., 'Create disk my-disk')
            reason: Why it failed
        """
        self.action = action
        self.reason = reason

        super().__init__(f"{action} failed: {reason}")


class ActionFailedError(GCEProvisionError):
    """
    Uniform error raised by the lifecycle orchestrator when a provider
    call fails during create or destroy.

    The message is the message of the underlying error; the original
    exception is kept on ``original`` and chained as ``__cause__``.
    """

    def __init__(self, message: str, original: Exception = None):
        self.original = original
        super().__init__(message)


class DiskTimeoutError(GCEProvisionError):
    """
    Raised when a disk does not become READY in time.

    The disk may still exist and is NOT deleted automatically.
    """

    def __init__(self, disk_name: str, zone: str, timeout: float):
        self.disk_name = disk_name
        self.zone = zone
        self.timeout = timeout

        message = f"Timeout waiting for disk '{disk_name}' in zone '{zone}' (>{timeout}s)"
        message += f"\n\nThe disk may have been created. Check and delete it if needed:"
        message += f"\n  gcloud compute disks delete {disk_name} --zone={zone}"

        super().__init__(message)


class ProvisioningTimeoutError(GCEProvisionError):
    """
    Raised when an instance does not become reachable in time.

    This happens after the instance (and its disk) exist. Run destroy
    before trying to create again.
    """

    def __init__(self, stage: str, target: str, timeout: float):
        """
        Args:
            stage: What we were waiting for (e.g., 'instance RUNNING', 'sshd')
            target: Instance name or host we were waiting on
            timeout: Seconds we waited
        """
        self.stage = stage
        self.target = target
        self.timeout = timeout

        message = f"Timeout waiting for {stage} on '{target}' (>{timeout}s)"
        message += f"\n\nThe instance exists and may need to be destroyed manually."

        super().__init__(message)


class ProvisioningCancelledError(GCEProvisionError):
    """
    Raised when a wait is cancelled by the caller.

    Remaining stages are abandoned; nothing is cleaned up.
    """

    def __init__(self, description: str):
        self.description = description
        super().__init__(f"Cancelled while waiting for {description}")
