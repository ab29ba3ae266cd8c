"""
GCE Provision - Create Instance Operation

Creates an instance booting from a disk we created.
"""

from pathlib import Path

from gce_provision.core.exceptions import ConfigError, ProvisioningTimeoutError
from gce_provision.core.resources import Disk, Instance
from gce_provision.operations.base import BaseOperation
from gce_provision.utils.logger import log_api_call
from gce_provision.utils.polling import PollTimeoutError

SCOPE_PREFIX = 'https://www.googleapis.com/auth/'


def expand_scopes(scopes) -> list:
    """Expand scope aliases ('compute-ro') to full scope URLs."""
    return [s if s.startswith('https://') else SCOPE_PREFIX + s for s in scopes]


def read_public_key(path: str) -> str:
    """Contents of an SSH public key file, stripped."""
    key_path = Path(path).expanduser()
    try:
        return key_path.read_text().strip()
    except OSError as e:
        raise ConfigError(f"Cannot read public key {key_path}: {e}")


class CreateInstanceOperation(BaseOperation):
    """
    Creates an instance from a boot disk.

    The instance handle is returned as soon as the insert operation is
    done; waiting for RUNNING is WaitReachableOperation's job.
    """

    @property
    def name(self) -> str:
        """Display name for this operation."""
        return "Create Instance"

    def build_body(self, instance_name: str, disk: Disk, public_key: str = None) -> dict:
        """
        Request body for instances.insert().

        Args:
            instance_name: Name for the new instance
            disk: Boot disk
            public_key: SSH public key (default: read from config.public_key_path)

        Returns:
            dict instance resource
        """
        config = self.config

        body = {
            'name': instance_name,
            'machineType': f'zones/{self.zone}/machineTypes/{config.machine_type}',
            'disks': [disk.as_boot_disk(config.autodelete_disk)],
            'networkInterfaces': [{
                'network': f'global/networks/{config.network}',
                'accessConfigs': [
                    {'name': 'External NAT', 'type': 'ONE_TO_ONE_NAT'}
                ]
            }],
            'tags': {'items': list(config.tags)},
            'scheduling': {
                'preemptible': config.preemptible,
                'onHostMaintenance': config.host_maintenance,
                'automaticRestart': config.auto_restart
            }
        }

        if config.service_accounts:
            body['serviceAccounts'] = [{
                'email': 'default',
                'scopes': expand_scopes(config.service_accounts)
            }]

        if public_key is None and config.public_key_path:
            public_key = read_public_key(config.public_key_path)
        if public_key:
            body['metadata'] = {
                'items': [
                    {'key': 'ssh-keys', 'value': f'{config.username}:{public_key}'}
                ]
            }

        return body

    def insert(self, instance_name: str, disk: Disk, public_key: str = None) -> dict:
        """
        Send instances.insert() without waiting for it.

        Once this returns, the instance may exist even if the operation
        later fails or times out.

        Returns:
            The insert operation resource

        Raises:
            ProviderError: If the API rejects the request
        """
        body = self.build_body(instance_name, disk, public_key)
        self._log_debug(f"  Machine type: {self.config.machine_type}")
        self._log_debug(f"  Scheduling: {body['scheduling']}")

        log_api_call(self.logger, 'instances.insert', project=self.project,
                     zone=self.zone, name=instance_name)
        return self._call(
            'instances.insert',
            self.compute.instances().insert(
                project=self.project,
                zone=self.zone,
                body=body
            )
        )

    def wait_for_insert(self, instance_name: str, operation: dict) -> Instance:
        """
        Wait for the insert operation to finish.

        Raises:
            ProviderError: If the operation finished with errors
            ProvisioningTimeoutError: If it doesn't finish within operation_timeout
        """
        try:
            finished = self._wait_for_operation(operation, f"Create instance {instance_name}")
        except PollTimeoutError as e:
            raise ProvisioningTimeoutError('instance insert', instance_name, e.timeout) from e

        return Instance(
            name=instance_name,
            zone=self.zone,
            id=finished.get('targetId')
        )

    def execute(self, instance_name: str, disk: Disk, public_key: str = None) -> Instance:
        """
        Create the instance.

        Args:
            instance_name: Name for the new instance
            disk: Boot disk created by CreateDiskOperation
            public_key: SSH public key (default: read from config.public_key_path)

        Returns:
            Instance handle

        Raises:
            ProviderError: If the API rejects the instance
            ProvisioningTimeoutError: If the insert operation doesn't finish in time
        """
        self._log_debug(f"Executing {self.name}: {instance_name}")

        operation = self.insert(instance_name, disk, public_key)
        return self.wait_for_insert(instance_name, operation)
