"""
GCE Provision - Destroy Instance Operation

Looks an instance up by identity and deletes it if it still exists.
An instance that is already gone is not an error.
"""

from typing import Optional

from gce_provision.core.resources import Instance, short_name
from gce_provision.operations.base import BaseOperation
from gce_provision.utils.logger import log_api_call


class DestroyInstanceOperation(BaseOperation):
    """
    Deletes an instance.

    The delete request is issued and not waited on; the boot disk goes
    with the instance when it was created with autodelete.
    """

    @property
    def name(self) -> str:
        """Display name for this operation."""
        return "Destroy Instance"

    def find_instance(self, server_id: str, zone: str = None) -> Optional[Instance]:
        """
        Look an instance up by identity.

        Args:
            server_id: Instance name recorded at create time
            zone: Zone recorded at create time. When unknown, every zone
                  is searched with an aggregated list.

        Returns:
            Instance handle, or None if it doesn't exist
        """
        if zone:
            log_api_call(self.logger, 'instances.get', project=self.project,
                         zone=zone, instance=server_id)
            data = self._call(
                'instances.get',
                self.compute.instances().get(
                    project=self.project,
                    zone=zone,
                    instance=server_id
                ),
                allow_missing=True
            )
            if data is None:
                return None
            return Instance(name=data['name'], zone=zone, id=data.get('id'))

        request = self.compute.instances().aggregatedList(
            project=self.project,
            filter=f'name = "{server_id}"'
        )
        while request is not None:
            log_api_call(self.logger, 'instances.aggregatedList',
                         project=self.project, name=server_id)
            response = self._call('instances.aggregatedList', request)
            for scope, scoped in response.get('items', {}).items():
                for data in scoped.get('instances', []):
                    if data.get('name') == server_id:
                        return Instance(
                            name=server_id,
                            zone=short_name(data.get('zone', scope)),
                            id=data.get('id')
                        )
            request = self.compute.instances().aggregatedList_next(
                previous_request=request,
                previous_response=response
            )

        return None

    def execute(self, server_id: str, zone: str = None) -> bool:
        """
        Delete the instance if it exists.

        Args:
            server_id: Instance name recorded at create time
            zone: Zone recorded at create time (optional)

        Returns:
            True if a delete was issued, False if the instance was already gone

        Raises:
            ProviderError: If lookup or delete fails
        """
        self._log_debug(f"Executing {self.name}: {server_id}")

        instance = self.find_instance(server_id, zone)
        if instance is None:
            self._log_debug(f"Instance {server_id} not found, nothing to delete")
            return False

        log_api_call(self.logger, 'instances.delete', project=self.project,
                     zone=instance.zone, instance=instance.name)
        operation = self._call(
            'instances.delete',
            self.compute.instances().delete(
                project=self.project,
                zone=instance.zone,
                instance=instance.name
            ),
            allow_missing=True
        )

        if operation is None:
            return False

        self._log_debug(f"Delete operation: {operation.get('name')}")
        return True
