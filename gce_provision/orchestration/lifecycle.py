"""
GCE Provision - Lifecycle Orchestrator

Coordinates the create and destroy workflows:

Create:
1. Resolve instance name and zone (once per run)
2. Create boot disk
3. Create instance, record its identity
4. Wait for RUNNING, record hostname
5. Wait for SSH

Destroy:
1. Look the instance up by recorded identity
2. Delete it if it still exists
3. Clear the recorded identity

Provider failures are re-raised as ActionFailedError. Nothing is rolled
back: resources created before a failure are listed for the operator.
"""

import random
import threading

from gce_provision.core.config import ProvisioningConfig
from gce_provision.core.exceptions import ActionFailedError, GCEProvisionError, ProviderError
from gce_provision.operations import (
    PROVIDER_ERRORS,
    CreateDiskOperation,
    CreateInstanceOperation,
    DestroyInstanceOperation,
    SelectZoneOperation,
    WaitReachableOperation,
)
from gce_provision.operations.create_instance import read_public_key
from gce_provision.operations.wait_reachable import SSHWaiter
from gce_provision.orchestration.state import (
    InstanceState,
    LifecycleStage,
    ResourceLedger,
    StateFile,
)
from gce_provision.utils.logger import log_state_change
from gce_provision.utils.naming import generate_instance_name
from gce_provision.utils.progress import create_progress_tracker


class LifecycleOrchestrator:
    """
    Orchestrates create and destroy for a single instance.

    The orchestrator is the only thing that changes an InstanceState.
    Callers must not run create and destroy on the same state at the
    same time.

    Example:
        orchestrator = LifecycleOrchestrator(
            compute=compute,
            project=project,
            config=config,
            state_file=StateFile('.gce-provision/default.json'),
            logger=logger
        )

        state = orchestrator.state_file.load()
        orchestrator.create(state)
        print(state.hostname)

        orchestrator.destroy(state)
    """

    def __init__(self, compute, project: str, config: ProvisioningConfig,
                 state_file: StateFile = None, logger=None,
                 cancel_event: threading.Event = None,
                 ssh_waiter: SSHWaiter = None,
                 show_progress: bool = False,
                 rng: random.Random = None):
        """
        Initialize lifecycle orchestrator.

        Args:
            compute: GCP compute client
            project: GCP project ID
            config: Provisioning configuration
            state_file: Where to persist state after every change (optional)
            logger: Optional logger
            cancel_event: Optional event that aborts any wait when set
            ssh_waiter: Optional Callable(hostname, username) used instead of
                        the built-in TCP check once the instance is RUNNING
            show_progress: Draw a progress bar during create
            rng: Random generator for zone selection (for tests)
        """
        self.compute = compute
        self.project = project
        self.config = config
        self.state_file = state_file
        self.logger = logger
        self.cancel_event = cancel_event
        self.ssh_waiter = ssh_waiter
        self.show_progress = show_progress
        self.rng = rng

        self.stage = LifecycleStage.ABSENT
        self.failed_stage = None
        self.ledger = ResourceLedger()

    def _log_info(self, message: str):
        """Log info message."""
        if self.logger:
            self.logger.info(message)

    def _log_debug(self, message: str):
        """Log debug message."""
        if self.logger:
            self.logger.debug(message)

    def _log_warning(self, message: str):
        """Log warning message."""
        if self.logger:
            self.logger.warning(message)

    def _set_stage(self, stage: LifecycleStage):
        log_state_change(self.logger, 'instance', self.stage.value, stage.value)
        self.stage = stage

    def _persist(self, state: InstanceState):
        if self.state_file is not None:
            self.state_file.save(state)
            self._log_debug(f"State saved to {self.state_file.path}")

    def _operation_kwargs(self, zone: str = None) -> dict:
        return dict(
            compute=self.compute,
            project=self.project,
            zone=zone,
            config=self.config,
            logger=self.logger,
            cancel_event=self.cancel_event
        )

    def _fail(self):
        """Move to FAILED, remembering which stage the run stopped in."""
        self.failed_stage = self.stage
        self._set_stage(LifecycleStage.FAILED)

    def _report_leftovers(self):
        """Tell the operator which resources this run left behind."""
        if not self.ledger.resources:
            return
        self._log_warning("Resources created before the failure were NOT deleted:")
        for resource in self.ledger.resources:
            self._log_warning(f"  - {resource}")
        self._log_warning("Delete them manually if they are not needed:")
        for command in self.ledger.cleanup_commands(self.project):
            self._log_warning(f"  {command}")

    def resolve_placement(self) -> ProvisioningConfig:
        """
        Fix the instance name and zone for this run.

        Each is resolved only if unset, so calling this again changes
        nothing.

        Returns:
            The resolved configuration (also stored on self.config)

        Raises:
            NameGenerationError: If name generation breaks the naming rules
            NoAvailableZoneError: If no zone is UP in the region
        """
        if not self.config.inst_name:
            self.config = self.config.with_instance_name(
                generate_instance_name(self.config.base_name)
            )
            self._log_debug(f"Generated instance name: {self.config.inst_name}")

        if not self.config.zone_name:
            zone_name = SelectZoneOperation(**self._operation_kwargs()).execute(
                region=self.config.region,
                rng=self.rng
            )
            self.config = self.config.with_zone(zone_name)

        return self.config

    def create(self, state: InstanceState) -> InstanceState:
        """
        Create the instance and wait until SSH answers.

        Does nothing if state already records an instance.

        Args:
            state: Instance state, updated in place

        Returns:
            The same state object

        Raises:
            ConfigError: If required options are missing or the public key is unreadable
            NameGenerationError, NoAvailableZoneError: Before anything is created
            ActionFailedError: If the Compute Engine API fails
            DiskTimeoutError, ProvisioningTimeoutError: If a wait runs out
            ProvisioningCancelledError: If cancel_event is set
        """
        if state.exists:
            self._log_debug(f"Instance <{state.server_id}> already exists, nothing to create")
            return state

        self.config.validate()
        public_key = None
        if self.config.public_key_path:
            public_key = read_public_key(self.config.public_key_path)

        progress = create_progress_tracker(
            total_steps=5,
            desc="Create instance",
            enabled=self.show_progress
        )
        progress.start()

        try:
            self._set_stage(LifecycleStage.CREATING)

            # Step 1: Name and zone
            progress.update_step("Selecting zone")
            config = self.resolve_placement()
            self._log_info(f"  Instance: {config.inst_name}")
            self._log_info(f"  Zone: {config.zone_name}")
            progress.advance()

            # Step 2: Boot disk
            progress.update_step("Creating boot disk")
            self._log_info("  Creating boot disk...")
            disk = CreateDiskOperation(**self._operation_kwargs(config.zone_name)).execute(
                disk_name=config.inst_name
            )
            self.ledger.add('disk', disk.name, disk.zone)
            progress.advance()

            # Step 3: Instance
            progress.update_step("Creating instance")
            self._log_info("  Creating instance...")
            creator = CreateInstanceOperation(**self._operation_kwargs(config.zone_name))
            operation = creator.insert(config.inst_name, disk, public_key)

            # Accepted: record identity before waiting, so destroy finds it
            self.ledger.add('instance', config.inst_name, config.zone_name)
            state.server_id = config.inst_name
            state.zone = config.zone_name
            self._persist(state)

            instance = creator.wait_for_insert(config.inst_name, operation)
            self._log_info(f"GCE instance <{state.server_id}> created.")
            progress.advance()

            # Step 4: RUNNING
            self._set_stage(LifecycleStage.WAITING_READY)
            progress.update_step("Waiting for instance")
            waiter = WaitReachableOperation(
                ssh_waiter=self.ssh_waiter,
                **self._operation_kwargs(config.zone_name)
            )
            state.hostname = waiter.wait_for_ready(instance)
            self._persist(state)
            self._log_info(f"  (server ready) {state.hostname}")
            progress.advance()

            # Step 5: SSH
            self._set_stage(LifecycleStage.WAITING_SSH)
            progress.update_step("Waiting for SSH")
            waiter.wait_for_ssh(state.hostname)
            self._log_info("  (ssh ready)")
            progress.advance()

            self._set_stage(LifecycleStage.READY)
            self._log_debug(self.ledger.get_summary())
            return state

        except (ProviderError,) + PROVIDER_ERRORS as e:
            self._fail()
            self._report_leftovers()
            raise ActionFailedError(str(e), original=e) from e

        except GCEProvisionError:
            self._fail()
            self._report_leftovers()
            raise

        finally:
            progress.finish()

    def destroy(self, state: InstanceState) -> InstanceState:
        """
        Delete the instance recorded in state.

        Does nothing if state records no instance. An instance that is
        already gone is fine: the state is cleared either way.

        Args:
            state: Instance state, updated in place

        Returns:
            The same state object

        Raises:
            ActionFailedError: If lookup or delete fails (state is kept)
        """
        if not state.exists:
            self._log_debug("No instance recorded, nothing to destroy")
            return state

        self._set_stage(LifecycleStage.DESTROYING)
        server_id = state.server_id

        try:
            operation = DestroyInstanceOperation(**self._operation_kwargs(state.zone))
            deleted = operation.execute(server_id=server_id, zone=state.zone)
        except (ProviderError,) + PROVIDER_ERRORS as e:
            self._fail()
            raise ActionFailedError(str(e), original=e) from e

        if deleted:
            self._log_info(f"GCE instance <{server_id}> destroyed.")
        else:
            self._log_info(f"GCE instance <{server_id}> was already gone.")

        state.clear()
        self._persist(state)
        self._set_stage(LifecycleStage.ABSENT)
        return state
