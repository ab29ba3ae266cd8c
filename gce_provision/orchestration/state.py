"""
GCE Provision - Lifecycle State

Tracks where an instance is in its lifecycle:
- InstanceState: the record persisted between create and destroy
- StateFile: JSON persistence for InstanceState
- LifecycleStage: stages the orchestrator moves through
- ResourceLedger: remote resources created during one run
"""

import json
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from gce_provision.core.exceptions import ConfigError


class LifecycleStage(Enum):
    """Stages of the create/destroy state machine."""
    ABSENT = 'ABSENT'
    CREATING = 'CREATING'
    WAITING_READY = 'WAITING_READY'
    WAITING_SSH = 'WAITING_SSH'
    READY = 'READY'
    DESTROYING = 'DESTROYING'
    FAILED = 'FAILED'


@dataclass
class InstanceState:
    """
    Persisted record of the instance.

    server_id is set once the instance exists, hostname once it is
    reachable. server_id alone decides whether create and destroy have
    anything to do.
    """
    server_id: Optional[str] = None
    hostname: Optional[str] = None
    zone: Optional[str] = None

    @property
    def exists(self) -> bool:
        return self.server_id is not None

    def clear(self):
        """Forget the instance."""
        self.server_id = None
        self.hostname = None
        self.zone = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> 'InstanceState':
        return cls(
            server_id=data.get('server_id'),
            hostname=data.get('hostname'),
            zone=data.get('zone')
        )


class StateFile:
    """
    Stores an InstanceState as JSON.

    Writes go to a temporary file that replaces the real one, so a
    crash mid-write never leaves a truncated state file.

    Example:
        state_file = StateFile('.gce-provision/default.json')
        state = state_file.load()
        ...
        state_file.save(state)
    """

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> InstanceState:
        """Read the state, or an empty one if the file doesn't exist."""
        if not self.path.exists():
            return InstanceState()

        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read state file {self.path}: {e}")

        return InstanceState.from_dict(data)

    def save(self, state: InstanceState):
        """Write the state."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')

        with open(tmp_path, 'w') as f:
            json.dump(state.to_dict(), f, indent=2, sort_keys=True)
            f.write('\n')

        os.replace(tmp_path, self.path)


@dataclass
class CreatedResource:
    """A remote resource created during a run."""
    kind: str
    name: str
    zone: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def __str__(self):
        return f"{self.kind} {self.name} (zone {self.zone})"


class ResourceLedger:
    """
    Records remote resources created during a run.

    Nothing is rolled back automatically. When a run fails, the ledger
    lists what was left behind so the operator can clean it up.

    Example:
        ledger = ResourceLedger()
        ledger.add('disk', 'my-instance', 'us-central1-a')
        ledger.add('instance', 'my-instance', 'us-central1-a')

        for resource in ledger.resources:
            print(resource)
    """

    def __init__(self):
        self.resources: List[CreatedResource] = []
        self.start_time = datetime.now()

    def add(self, kind: str, name: str, zone: str):
        self.resources.append(CreatedResource(kind=kind, name=name, zone=zone))

    def cleanup_commands(self, project: str) -> List[str]:
        """gcloud commands that delete everything in the ledger, newest first."""
        commands = []
        for resource in reversed(self.resources):
            group = 'instances' if resource.kind == 'instance' else 'disks'
            commands.append(
                f"gcloud compute {group} delete {resource.name} "
                f"--zone={resource.zone} --project={project}"
            )
        return commands

    def get_summary(self) -> str:
        duration = (datetime.now() - self.start_time).total_seconds()
        return f"Resources created: {len(self.resources)} (took {duration:.1f}s)"
