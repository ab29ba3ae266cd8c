"""
GCE Provision - Create Disk Operation

Creates a boot disk from an image and waits until it is READY.

If a later step fails the disk is NOT deleted; the orchestrator reports
it as left behind.
"""

import time

from gce_provision.core.exceptions import DiskTimeoutError
from gce_provision.core.resources import Disk
from gce_provision.operations.base import BaseOperation
from gce_provision.utils.logger import log_api_call
from gce_provision.utils.polling import PollTimeoutError


def resolve_image(image_name: str, project: str) -> str:
    """
    Source image reference for disks.insert().

    Args:
        image_name: Image name, or a full/partial image URL
        project: Project that owns a bare image name

    Returns:
        The reference unchanged if it contains '/', else
        'projects/<project>/global/images/<image_name>'

    Example:
        resolve_image('debian-12', 'my-project')
        # 'projects/my-project/global/images/debian-12'
    """
    if '/' in image_name:
        return image_name
    return f'projects/{project}/global/images/{image_name}'


class CreateDiskOperation(BaseOperation):
    """
    Creates a new disk from an image.
    """

    @property
    def name(self) -> str:
        """Display name for this operation."""
        return "Create Disk"

    def execute(self, disk_name: str, size_gb: int = None,
                source_image: str = None) -> Disk:
        """
        Create a new disk and wait for it to become READY.

        Args:
            disk_name: Name for the new disk
            size_gb: Size in GB (default: config.disk_size)
            source_image: Source image reference (default: resolved config.image_name)

        Returns:
            Disk handle

        Raises:
            ProviderError: If the API rejects the disk
            DiskTimeoutError: If the disk isn't READY within config.disk_timeout
        """

        size_gb = size_gb or self.config.disk_size
        source_image = source_image or resolve_image(
            self.config.image_name,
            self.config.image_project or self.project
        )

        self._log_debug(f"Executing {self.name}: {disk_name}")
        self._log_debug(f"  Size: {size_gb}GB, Image: {source_image}")

        disk_body = {
            'name': disk_name,
            'sizeGb': str(size_gb),
            'sourceImage': source_image
        }

        log_api_call(self.logger, 'disks.insert', project=self.project,
                     zone=self.zone, name=disk_name)
        operation = self._call(
            'disks.insert',
            self.compute.disks().insert(
                project=self.project,
                zone=self.zone,
                body=disk_body
            )
        )

        start_time = time.time()

        def get_ready_disk():
            disk = self._call(
                'disks.get',
                self.compute.disks().get(
                    project=self.project,
                    zone=self.zone,
                    disk=disk_name
                ),
                allow_missing=True
            )
            if disk and disk.get('status') == 'READY':
                return disk
            return None

        try:
            self._wait_for_operation(operation, f"Create disk {disk_name}")
            disk = self._wait(get_ready_disk, self.config.disk_timeout,
                              f"disk {disk_name} READY")
        except PollTimeoutError as e:
            self._log_error(str(e))
            raise DiskTimeoutError(disk_name, self.zone, e.timeout) from e

        duration = time.time() - start_time
        self._log_debug(f"Disk created in {duration:.2f}s")

        return Disk(
            name=disk_name,
            zone=self.zone,
            self_link=disk.get('selfLink') or f'projects/{self.project}/zones/{self.zone}/disks/{disk_name}'
        )
