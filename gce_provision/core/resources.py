"""
GCE Provision - Resource Handles

Small value objects for the Compute Engine resources we create or read.
Handles only carry identity; status and addresses are read fresh from
the API every time they are needed.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Zone:
    """A zone as returned by zones().list()."""
    name: str
    status: str

    @property
    def is_up(self) -> bool:
        return self.status == 'UP'

    @classmethod
    def from_api(cls, item: dict) -> 'Zone':
        return cls(name=item['name'], status=item.get('status', ''))


@dataclass(frozen=True)
class Disk:
    """A disk we created. Owned by us until attached as a boot disk."""
    name: str
    zone: str
    self_link: str

    def as_boot_disk(self, autodelete: bool = True) -> dict:
        """
        Attached-disk entry for instances().insert().

        Args:
            autodelete: Delete the disk together with the instance

        Returns:
            dict for the instance body's 'disks' list
        """
        return {
            'boot': True,
            'autoDelete': autodelete,
            'mode': 'READ_WRITE',
            'type': 'PERSISTENT',
            'deviceName': self.name,
            'source': self.self_link,
        }


@dataclass(frozen=True)
class Instance:
    """An instance we created or looked up."""
    name: str
    zone: str
    id: Optional[str] = None

    @property
    def identity(self) -> str:
        """Identity stored in InstanceState.server_id."""
        return self.name


def instance_address(instance_data: dict) -> Optional[str]:
    """
    Public IP of an instance, falling back to its private IP.

    Args:
        instance_data: Instance resource from instances().get()

    Returns:
        The first NAT IP found, else the first network IP, else None
    """
    interfaces = instance_data.get('networkInterfaces', [])

    for interface in interfaces:
        for access_config in interface.get('accessConfigs', []):
            if access_config.get('natIP'):
                return access_config['natIP']

    for interface in interfaces:
        if interface.get('networkIP'):
            return interface['networkIP']

    return None


def short_name(url: str) -> str:
    """Last path segment of a resource URL ('.../zones/us-central1-a' -> 'us-central1-a')."""
    return url.rstrip('/').split('/')[-1]
