"""
GCE Provision - Base Operation

This module provides the base class for all operations.
Each operation does ONE remote thing and blocks until it is finished.

Operations do not roll back. If a later step fails, whatever an earlier
operation created stays in place and is reported to the operator.
"""

import threading
from abc import ABC, abstractmethod

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from gce_provision.core.config import ProvisioningConfig
from gce_provision.core.exceptions import ProviderError
from gce_provision.utils.logger import log_api_call
from gce_provision.utils.polling import Backoff, wait_until

# Failures that mean "the API or its transport said no". OSError covers
# socket.gaierror, TimeoutError and ssl.SSLError raised by httplib2.
PROVIDER_ERRORS = (HttpError, httplib2.HttpLib2Error, GoogleAuthError, OSError)


def http_status(error: Exception):
    """HTTP status of an HttpError, None for anything else."""
    if isinstance(error, HttpError):
        return getattr(error.resp, 'status', None)
    return None


class BaseOperation(ABC):
    """
    Base class for all operations.

    Every operation must:
    1. Inherit from this class
    2. Implement the execute() method
    3. Implement the name property

    Example usage:
        operation = CreateDiskOperation(compute, project, zone, config, logger)
        disk = operation.execute(disk_name='my-instance')
    """

    def __init__(self, compute, project: str, zone: str = None,
                 config: ProvisioningConfig = None, logger=None,
                 cancel_event: threading.Event = None):
        """
        Initialize operation.

        Args:
            compute: GCP compute client
            project: GCP project ID
            zone: GCP zone (None for project-wide operations)
            config: Provisioning config (timeouts, poll intervals)
            logger: Optional logger for debug output
            cancel_event: Optional event that aborts any wait when set
        """
        self.compute = compute
        self.project = project
        self.zone = zone
        self.config = config or ProvisioningConfig()
        self.logger = logger
        self.cancel_event = cancel_event

    @abstractmethod
    def execute(self, **kwargs):
        """
        Execute the operation.

        Returns:
            The resource handle produced by the operation

        Raises:
            ProviderError: If the API call fails
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Human-readable name of this operation.

        Used for display and logging.
        """
        pass

    def _log_debug(self, message: str):
        """Log debug message if logger available."""
        if self.logger:
            self.logger.debug(message)

    def _log_info(self, message: str):
        """Log info message if logger available."""
        if self.logger:
            self.logger.info(message)

    def _log_error(self, message: str):
        """Log error message if logger available."""
        if self.logger:
            self.logger.error(message)

    def _backoff(self) -> Backoff:
        return Backoff(
            initial=self.config.poll_interval,
            factor=self.config.poll_backoff,
            maximum=self.config.poll_max_interval
        )

    def _call(self, method_name: str, request, allow_missing: bool = False):
        """
        Execute an API request.

        Args:
            method_name: API method for logs and errors (e.g., 'disks.insert')
            request: Request object from the discovery client
            allow_missing: Return None instead of raising on HTTP 404

        Returns:
            The API response (dict), or None for a tolerated 404

        Raises:
            ProviderError: If the request fails
        """
        try:
            return request.execute()
        except PROVIDER_ERRORS as e:
            if allow_missing and http_status(e) == 404:
                self._log_debug(f"{method_name}: not found")
                return None
            self._log_error(f"{method_name} failed: {str(e)}")
            raise ProviderError(method_name, str(e)) from e

    def _wait(self, predicate, timeout, description: str):
        """Poll predicate with the configured backoff."""
        return wait_until(
            predicate,
            timeout=timeout,
            backoff=self._backoff(),
            description=description,
            cancel_event=self.cancel_event,
            logger=self.logger
        )

    def _wait_for_operation(self, operation: dict, action: str) -> dict:
        """
        Wait for a zone operation to finish and check it for errors.

        Args:
            operation: Operation resource returned by an insert/delete call
            action: What the operation does (for errors)

        Returns:
            The finished operation resource

        Raises:
            ProviderError: If the operation finished with errors
            PollTimeoutError: If it did not finish within operation_timeout
        """
        op_name = operation.get('name')

        def get_finished():
            log_api_call(self.logger, 'zoneOperations.get', project=self.project,
                         zone=self.zone, operation=op_name)
            current = self._call(
                'zoneOperations.get',
                self.compute.zoneOperations().get(
                    project=self.project,
                    zone=self.zone,
                    operation=op_name
                )
            )
            return current if current.get('status') == 'DONE' else None

        if operation.get('status') == 'DONE' or not op_name:
            finished = operation
        else:
            finished = self._wait(get_finished, self.config.operation_timeout,
                                  f"operation {op_name}")

        errors = finished.get('error', {}).get('errors', [])
        if errors:
            reason = '; '.join(
                f"{err.get('code', 'ERROR')}: {err.get('message', '')}" for err in errors
            )
            raise ProviderError(action, reason)

        return finished
