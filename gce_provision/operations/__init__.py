"""
GCE Provision - Operations Module

This module provides the individual remote operations.
Each operation does ONE thing and blocks until it is finished.

Usage:
    from gce_provision.operations import (
        SelectZoneOperation,
        CreateDiskOperation,
        CreateInstanceOperation,
        WaitReachableOperation,
        DestroyInstanceOperation
    )

    zone = SelectZoneOperation(compute, project).execute(region='us-central1')
    disk = CreateDiskOperation(compute, project, zone, config).execute(disk_name='my-vm')
"""

from gce_provision.operations.base import PROVIDER_ERRORS, BaseOperation
from gce_provision.operations.select_zone import SelectZoneOperation
from gce_provision.operations.create_disk import CreateDiskOperation
from gce_provision.operations.create_instance import CreateInstanceOperation
from gce_provision.operations.wait_reachable import WaitReachableOperation, wait_for_sshd
from gce_provision.operations.destroy_instance import DestroyInstanceOperation

__all__ = [
    # Base classes
    'BaseOperation',
    'PROVIDER_ERRORS',

    # Operations
    'SelectZoneOperation',
    'CreateDiskOperation',
    'CreateInstanceOperation',
    'WaitReachableOperation',
    'DestroyInstanceOperation',
    'wait_for_sshd',
]
