"""GCE Provision - Create and destroy a Compute Engine test instance.

Provisions one instance for a test run and tears it down afterwards:
- Create: boot disk + instance, then wait until SSH answers
- Destroy: delete the recorded instance, always safe to re-run

Example usage:
    >>> from gce_provision import create_provisioning_config, create_instance, destroy_instance
    >>> config = create_provisioning_config(
    ...     google_client_email='ci@my-project.iam.gserviceaccount.com',
    ...     google_project='my-project',
    ...     image_name='debian-12-bookworm-v20240110',
    ... )
    >>> state = create_instance(config)
    >>> destroy_instance(config)
"""

from gce_provision.core.config import (
    VERSION,
    ProvisioningConfig,
    create_provisioning_config,
    load_config_file,
)
from gce_provision.main import create_instance, destroy_instance
from gce_provision.orchestration import InstanceState, LifecycleOrchestrator, StateFile

__version__ = VERSION
__author__ = "GCE Provision Team"

__all__ = [
    'ProvisioningConfig',
    'create_provisioning_config',
    'load_config_file',
    'create_instance',
    'destroy_instance',
    'InstanceState',
    'LifecycleOrchestrator',
    'StateFile',
]
