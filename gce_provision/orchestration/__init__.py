"""
GCE Provision - Orchestration Module

Coordinates the create and destroy workflows.
"""

from gce_provision.orchestration.lifecycle import LifecycleOrchestrator
from gce_provision.orchestration.state import (
    InstanceState,
    LifecycleStage,
    ResourceLedger,
    StateFile,
)

__all__ = [
    'LifecycleOrchestrator',
    'InstanceState',
    'LifecycleStage',
    'ResourceLedger',
    'StateFile',
]
