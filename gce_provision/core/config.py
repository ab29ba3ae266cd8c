"""
GCE Provision - Configuration Management

This module manages configuration options for provisioning runs.

A ProvisioningConfig is built once per run and never mutated. When the
orchestrator resolves the instance name or zone it derives a new config
with dataclasses.replace() and keeps that for the rest of the run.
"""

import getpass
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Tuple

import yaml

from gce_provision.core.exceptions import ConfigError

# Version for usage tracking
VERSION = '1.0.0'

REQUIRED_OPTIONS = ('google_client_email', 'google_project', 'image_name')


def _default_username() -> Optional[str]:
    """Login name of the current OS user, or None if it can't be determined."""
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return None


def _as_tuple(value):
    """List option as a tuple; a single string is one item, not characters."""
    if value is None or isinstance(value, tuple):
        return value
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class ProvisioningConfig:
    """
    Configuration for a provisioning run.

    This stores all options that can be customized for creating and
    destroying an instance. Makes it easy to pass configuration around
    without many parameters.

    Example:
        config = ProvisioningConfig(
            google_client_email='ci@my-project.iam.gserviceaccount.com',
            google_project='my-project',
            image_name='debian-12-bookworm-v20240110',
            preemptible=True
        )
    """

    # Required settings
    google_client_email: Optional[str] = None
    google_project: Optional[str] = None
    image_name: Optional[str] = None

    # Credentials (ADC is used when neither is set)
    google_json_key_location: Optional[str] = None
    google_key_location: Optional[str] = None

    # Placement
    area: str = 'us-central1'
    region: Optional[str] = None  # Defaults to area
    zone_name: Optional[str] = None  # Resolved by zone selection when unset

    # Instance settings
    inst_name: Optional[str] = None  # Generated from base_name when unset
    base_name: str = 'default'
    machine_type: str = 'n1-standard-1'
    network: str = 'default'
    tags: Tuple[str, ...] = ()
    service_accounts: Optional[Tuple[str, ...]] = None
    preemptible: bool = False
    auto_restart: bool = False

    # Boot disk settings
    disk_size: int = 10
    autodelete_disk: bool = True
    image_project: Optional[str] = None  # Defaults to google_project

    # SSH settings
    username: Optional[str] = field(default_factory=_default_username)
    public_key_path: Optional[str] = None
    ssh_port: int = 22

    # Timeout settings (in seconds, None waits forever)
    operation_timeout: Optional[float] = 300  # 5 minutes
    disk_timeout: Optional[float] = 300  # 5 minutes
    ready_timeout: Optional[float] = 600  # 10 minutes
    ssh_timeout: Optional[float] = 600  # 10 minutes

    # Polling settings
    poll_interval: float = 1.0
    poll_backoff: float = 1.5
    poll_max_interval: float = 15.0

    # Logging settings
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    def __post_init__(self):
        # Frozen: normalise through object.__setattr__
        if self.region is None:
            object.__setattr__(self, 'region', self.area)
        for name in ('tags', 'service_accounts'):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

    @property
    def host_maintenance(self) -> str:
        """Preemptible instances can't live-migrate."""
        return 'TERMINATE' if self.preemptible else 'MIGRATE'

    def missing_options(self) -> list:
        """Names of required options that are not set."""
        return [name for name in REQUIRED_OPTIONS if not getattr(self, name)]

    def validate(self):
        """
        Check that all required options are set.

        Raises:
            ConfigError: If any required option is missing
        """
        missing = self.missing_options()
        if missing:
            raise ConfigError("Configuration is incomplete", missing=missing)

    def with_instance_name(self, name: str) -> 'ProvisioningConfig':
        """Return a copy with the instance name fixed."""
        return replace(self, inst_name=name)

    def with_zone(self, zone_name: str) -> 'ProvisioningConfig':
        """Return a copy with the zone fixed."""
        return replace(self, zone_name=zone_name)


def config_options() -> list:
    """Names of every option ProvisioningConfig accepts."""
    return [f.name for f in fields(ProvisioningConfig)]


def create_provisioning_config(**kwargs) -> ProvisioningConfig:
    """
    Create a provisioning configuration with custom options.

    Args:
        **kwargs: Configuration options (any field from ProvisioningConfig).
                  Options set to None fall back to their defaults.

    Returns:
        ProvisioningConfig: Configuration object

    Raises:
        ConfigError: If an unknown option is given

    Example:
        config = create_provisioning_config(
            google_project='my-project',
            image_name='my-image',
            disk_size=20
        )
    """
    known = set(config_options())
    unknown = sorted(k for k in kwargs if k not in known)
    if unknown:
        raise ConfigError(f"Unknown configuration options: {', '.join(unknown)}")

    return ProvisioningConfig(**{k: v for k, v in kwargs.items() if v is not None})


def load_config_file(path, **overrides) -> ProvisioningConfig:
    """
    Load a provisioning configuration from a YAML file.

    The file holds a flat mapping of option names to values. Keyword
    overrides that are not None win over values from the file.

    Args:
        path: Path to the YAML file
        **overrides: Options that replace values from the file

    Returns:
        ProvisioningConfig: Configuration object

    Raises:
        ConfigError: If the file can't be read or contains unknown options

    Example:
        config = load_config_file('.gce-provision.yml', zone_name='us-central1-b')
    """
    config_path = Path(path)

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    data.update({k: v for k, v in overrides.items() if v is not None})
    return create_provisioning_config(**data)
