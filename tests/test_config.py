"""Tests for provisioning configuration."""

import dataclasses

import pytest

from gce_provision.core.config import (
    ProvisioningConfig,
    create_provisioning_config,
    load_config_file,
)
from gce_provision.core.exceptions import ConfigError


def test_defaults():
    config = ProvisioningConfig()

    assert config.area == 'us-central1'
    assert config.region == 'us-central1'
    assert config.autodelete_disk is True
    assert config.disk_size == 10
    assert config.machine_type == 'n1-standard-1'
    assert config.network == 'default'
    assert config.inst_name is None
    assert config.service_accounts is None
    assert config.tags == ()
    assert config.zone_name is None
    assert config.preemptible is False
    assert config.auto_restart is False


def test_region_defaults_to_area():
    assert ProvisioningConfig(area='europe-west1').region == 'europe-west1'
    assert ProvisioningConfig(area='europe-west1', region='any').region == 'any'


def test_config_is_immutable():
    config = ProvisioningConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.zone_name = 'us-central1-a'


def test_resolution_returns_new_config():
    config = ProvisioningConfig()
    resolved = config.with_zone('us-central1-f').with_instance_name('suite-1')

    assert config.zone_name is None
    assert resolved.zone_name == 'us-central1-f'
    assert resolved.inst_name == 'suite-1'


def test_lists_are_stored_as_tuples():
    config = ProvisioningConfig(tags=['web', 'ssh'], service_accounts=['compute-ro'])
    assert config.tags == ('web', 'ssh')
    assert config.service_accounts == ('compute-ro',)


@pytest.mark.parametrize('preemptible, policy', [(True, 'TERMINATE'), (False, 'MIGRATE')])
def test_host_maintenance_follows_preemptible(preemptible, policy):
    assert ProvisioningConfig(preemptible=preemptible).host_maintenance == policy


def test_validate_reports_missing_required_options():
    config = ProvisioningConfig(google_project='p')

    with pytest.raises(ConfigError) as excinfo:
        config.validate()

    assert excinfo.value.missing == ['google_client_email', 'image_name']


def test_create_config_ignores_none_and_rejects_unknown():
    config = create_provisioning_config(machine_type=None, disk_size=20)
    assert config.machine_type == 'n1-standard-1'
    assert config.disk_size == 20

    with pytest.raises(ConfigError, match='flavor'):
        create_provisioning_config(flavor='large')


def test_load_config_file(tmp_path):
    path = tmp_path / 'provision.yml'
    path.write_text(
        "google_project: my-project\n"
        "google_client_email: ci@my-project.iam.gserviceaccount.com\n"
        "image_name: debian-12\n"
        "tags: [web, ssh]\n"
        "disk_size: 30\n"
    )

    config = load_config_file(path, disk_size=50, zone_name=None)

    assert config.google_project == 'my-project'
    assert config.tags == ('web', 'ssh')
    assert config.disk_size == 50
    assert config.zone_name is None
    config.validate()


def test_scalar_list_options_are_single_items(tmp_path):
    path = tmp_path / 'provision.yml'
    path.write_text("tags: web\nservice_accounts: compute-ro\n")

    config = load_config_file(path)

    assert config.tags == ('web',)
    assert config.service_accounts == ('compute-ro',)
    assert ProvisioningConfig(tags='ssh').tags == ('ssh',)


def test_load_config_file_errors(tmp_path):
    with pytest.raises(ConfigError, match='Cannot read'):
        load_config_file(tmp_path / 'missing.yml')

    bad = tmp_path / 'bad.yml'
    bad.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError, match='mapping'):
        load_config_file(bad)

    unknown = tmp_path / 'unknown.yml'
    unknown.write_text("colour: blue\n")
    with pytest.raises(ConfigError, match='colour'):
        load_config_file(unknown)
