"""
GCE Provision - Main Entry Point

Simple entry points for create and destroy.

Usage:
    from gce_provision.main import create_instance, destroy_instance

    config = load_config_file('.gce-provision.yml')

    # Create an instance and wait for SSH
    state = create_instance(config, state_path='.gce-provision/default.json')

    # Tear it down
    destroy_instance(config, state_path='.gce-provision/default.json')
"""

from pathlib import Path
from typing import Optional

from gce_provision.core.auth import AuthManager
from gce_provision.core.config import ProvisioningConfig
from gce_provision.core.exceptions import GCEProvisionError
from gce_provision.orchestration import InstanceState, LifecycleOrchestrator, StateFile
from gce_provision.utils.logger import print_header, setup_logging
from gce_provision.validators import default_validation_runner

STATE_DIR = '.gce-provision'


def default_state_path(config: ProvisioningConfig) -> Path:
    """State file used when none is given: .gce-provision/<base_name>.json"""
    return Path(STATE_DIR) / f"{config.base_name}.json"


def create_instance(config: ProvisioningConfig, state_path=None,
                    debug: bool = False, ssh_waiter=None,
                    show_progress: bool = True,
                    auth: AuthManager = None) -> Optional[InstanceState]:
    """
    Create an instance and wait until SSH answers.

    This will:
    1. Validate configuration and credentials
    2. Pick an instance name and zone (unless configured)
    3. Create the boot disk
    4. Create the instance (identity saved to the state file at once)
    5. Wait for the instance to be RUNNING, then for SSH

    Nothing is rolled back on failure; resources left behind are logged.

    Args:
        config: Provisioning configuration
        state_path: State file (default: .gce-provision/<base_name>.json)
        debug: Enable debug logging
        ssh_waiter: Optional Callable(hostname, username) replacing the TCP check
        show_progress: Draw a progress bar
        auth: Optional AuthManager (default: one built from config)

    Returns:
        The instance state, or None if the run failed

    Example:
        >>> state = create_instance(config, debug=True)
        >>> state.hostname
        '203.0.113.7'
    """

    logger = setup_logging(
        level='DEBUG' if debug else config.log_level,
        log_file=config.log_file,
        debug=debug
    )

    print_header(logger, "GCE Provision - Create")
    logger.info(f"Project: {config.google_project}")
    logger.info(f"Image: {config.image_name}")
    logger.info("")

    state_file = StateFile(state_path or default_state_path(config))

    try:
        state = state_file.load()
        if state.exists:
            logger.info(f"Instance <{state.server_id}> already exists ({state.hostname})")
            return state

        auth = auth or AuthManager(config, logger)

        # Step 1: Validate
        logger.info("Pre-flight Validation:")
        default_validation_runner(config, auth).run_all(logger).raise_for_failures()

        compute, project = auth.get_client(config.google_project)
        logger.debug(f"Authenticated to project: {project}")

        orchestrator = LifecycleOrchestrator(
            compute=compute,
            project=project,
            config=config,
            state_file=state_file,
            logger=logger,
            ssh_waiter=ssh_waiter,
            show_progress=show_progress
        )

        # Step 2: Create
        logger.info("")
        logger.info("Creating Instance:")
        orchestrator.create(state)

        logger.info("")
        print_header(logger, "[OK] Instance is ready!")
        logger.info(f"Connect via SSH: ssh {config.username}@{state.hostname}")
        logger.info(f"State saved to: {state_file.path}")
        logger.info("")
        return state

    except GCEProvisionError as e:
        logger.error("")
        logger.error(str(e))
        if debug:
            logger.exception("Full traceback:")
        return None


def destroy_instance(config: ProvisioningConfig, state_path=None,
                     debug: bool = False, auth: AuthManager = None) -> bool:
    """
    Destroy the instance recorded in the state file.

    Safe to run again: a missing instance or an empty state is not an error.

    Args:
        config: Provisioning configuration
        state_path: State file (default: .gce-provision/<base_name>.json)
        debug: Enable debug logging
        auth: Optional AuthManager (default: one built from config)

    Returns:
        True if the state is clear afterwards, False if the run failed

    Example:
        >>> destroy_instance(config)
        True
    """

    logger = setup_logging(
        level='DEBUG' if debug else config.log_level,
        log_file=config.log_file,
        debug=debug
    )

    print_header(logger, "GCE Provision - Destroy")

    state_file = StateFile(state_path or default_state_path(config))

    try:
        state = state_file.load()
        if not state.exists:
            logger.info("No instance recorded, nothing to destroy.")
            return True

        logger.info(f"Instance: {state.server_id}")
        if state.zone:
            logger.info(f"Zone: {state.zone}")
        logger.info("")

        auth = auth or AuthManager(config, logger)
        compute, project = auth.get_client(config.google_project)

        orchestrator = LifecycleOrchestrator(
            compute=compute,
            project=project,
            config=config,
            state_file=state_file,
            logger=logger
        )
        orchestrator.destroy(state)

        logger.info("[OK] Destroy completed.")
        return True

    except GCEProvisionError as e:
        logger.error("")
        logger.error(str(e))
        if debug:
            logger.exception("Full traceback:")
        return False
