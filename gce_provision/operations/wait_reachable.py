"""
GCE Provision - Wait Reachable Operation

Waits for an instance to be RUNNING, resolves its address, then waits
for sshd to accept connections on that address.
"""

import socket
import threading
from typing import Callable, Optional

from gce_provision.core.exceptions import ProviderError, ProvisioningTimeoutError
from gce_provision.core.resources import Instance, instance_address
from gce_provision.operations.base import BaseOperation
from gce_provision.utils.logger import log_api_call
from gce_provision.utils.polling import Backoff, PollTimeoutError, wait_until

CONNECT_TIMEOUT = 5  # seconds per TCP attempt

# (hostname, username) -> None, raising on failure
SSHWaiter = Callable[[str, Optional[str]], None]


def port_open(hostname: str, port: int, connect_timeout: float = CONNECT_TIMEOUT) -> bool:
    """True if a TCP connection to hostname:port succeeds."""
    try:
        with socket.create_connection((hostname, port), timeout=connect_timeout):
            return True
    except OSError:
        return False


def wait_for_sshd(hostname: str, username: str = None, port: int = 22,
                  timeout: Optional[float] = 600, backoff: Backoff = None,
                  cancel_event: threading.Event = None, logger=None):
    """
    Wait until sshd accepts TCP connections.

    Args:
        hostname: Address to connect to
        username: Login user (only logged; the TCP check doesn't authenticate)
        port: SSH port
        timeout: Maximum seconds to wait (None waits forever)
        backoff: Interval strategy between attempts
        cancel_event: Optional event that aborts the wait
        logger: Optional logger

    Raises:
        ProvisioningTimeoutError: If sshd doesn't answer in time
        ProvisioningCancelledError: If cancelled
    """
    target = f"{username}@{hostname}:{port}" if username else f"{hostname}:{port}"
    if logger:
        logger.debug(f"Waiting for sshd at {target}")

    try:
        wait_until(
            lambda: port_open(hostname, port),
            timeout=timeout,
            backoff=backoff,
            description=f"sshd at {target}",
            cancel_event=cancel_event,
            logger=logger
        )
    except PollTimeoutError as e:
        raise ProvisioningTimeoutError('sshd', hostname, e.timeout) from e


class WaitReachableOperation(BaseOperation):
    """
    Waits for an instance to become reachable.

    Order matters: the hostname is only read after the instance is
    RUNNING, and sshd is only checked after the hostname is known.
    """

    def __init__(self, *args, ssh_waiter: SSHWaiter = None, **kwargs):
        """
        Args:
            ssh_waiter: Callable(hostname, username) that blocks until SSH
                        answers. Defaults to a TCP check on config.ssh_port.
            *args, **kwargs: See BaseOperation
        """
        super().__init__(*args, **kwargs)
        self.ssh_waiter = ssh_waiter or self._default_ssh_waiter

    @property
    def name(self) -> str:
        """Display name for this operation."""
        return "Wait Reachable"

    def _default_ssh_waiter(self, hostname: str, username: str = None):
        wait_for_sshd(
            hostname,
            username,
            port=self.config.ssh_port,
            timeout=self.config.ssh_timeout,
            backoff=self._backoff(),
            cancel_event=self.cancel_event,
            logger=self.logger
        )

    def wait_for_ready(self, instance: Instance) -> str:
        """
        Wait until the instance is RUNNING.

        Args:
            instance: Instance handle

        Returns:
            Public IP, or private IP if there is no public one

        Raises:
            ProvisioningTimeoutError: If not RUNNING within config.ready_timeout
            ProviderError: If the API call fails
        """

        def get_running():
            log_api_call(self.logger, 'instances.get', project=self.project,
                         zone=instance.zone, instance=instance.name)
            data = self._call(
                'instances.get',
                self.compute.instances().get(
                    project=self.project,
                    zone=instance.zone,
                    instance=instance.name
                )
            )
            self._log_debug(f"Instance {instance.name} status: {data.get('status')}")
            return data if data.get('status') == 'RUNNING' else None

        try:
            data = self._wait(get_running, self.config.ready_timeout,
                              f"instance {instance.name} RUNNING")
        except PollTimeoutError as e:
            raise ProvisioningTimeoutError('instance RUNNING', instance.name, e.timeout) from e

        hostname = instance_address(data)
        if not hostname:
            raise ProviderError('instances.get', f"instance {instance.name} has no network address")
        self._log_debug(f"Instance {instance.name} address: {hostname}")
        return hostname

    def wait_for_ssh(self, hostname: str):
        """Block until SSH answers at hostname."""
        self.ssh_waiter(hostname, self.config.username)

    def execute(self, instance: Instance) -> str:
        """
        Wait for RUNNING, then for SSH.

        Args:
            instance: Instance handle

        Returns:
            The resolved hostname
        """
        hostname = self.wait_for_ready(instance)
        self.wait_for_ssh(hostname)
        return hostname
