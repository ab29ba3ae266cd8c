"""Tests for zone selection."""

import random

import pytest

from conftest import http_error
from gce_provision.core.exceptions import NoAvailableZoneError, ProviderError
from gce_provision.core.resources import Zone
from gce_provision.operations.select_zone import SelectZoneOperation, eligible_zones, zone_pattern


def select(compute, region, rng=None):
    return SelectZoneOperation(compute, 'p').execute(region=region, rng=rng)


def test_single_eligible_zone_is_selected(fake_compute):
    for _ in range(10):
        assert select(fake_compute, 'us-central1') == 'us-central1-a'


def test_any_region_with_all_zones_down_fails(fake_compute):
    fake_compute.zone_pages = [[
        {'name': 'us-central1-a', 'status': 'DOWN'},
        {'name': 'europe-west1-b', 'status': 'DOWN'},
    ]]

    with pytest.raises(NoAvailableZoneError, match="region 'any'"):
        select(fake_compute, 'any')


def test_any_region_picks_among_all_up_zones(fake_compute):
    picked = {select(fake_compute, 'any', random.Random(seed)) for seed in range(50)}
    assert picked == {'us-central1-a', 'europe-west1-a'}


def test_region_must_be_followed_by_hyphen(fake_compute):
    fake_compute.zone_pages = [[{'name': 'us-central10-a', 'status': 'UP'}]]

    with pytest.raises(NoAvailableZoneError):
        select(fake_compute, 'us-central1')


def test_zone_list_pages_are_followed(fake_compute):
    fake_compute.zone_pages = [
        [{'name': 'asia-east1-a', 'status': 'UP'}],
        [{'name': 'us-east1-b', 'status': 'UP'}],
    ]

    assert select(fake_compute, 'us-east1') == 'us-east1-b'
    assert fake_compute.methods_called() == ['zones.list', 'zones.list']


def test_api_failure_is_a_provider_error(fake_compute):
    fake_compute.errors['zones.list'] = http_error(403, 'forbidden')

    with pytest.raises(ProviderError, match='zones.list'):
        select(fake_compute, 'us-central1')


def test_region_is_matched_literally():
    zones = [Zone('us-central1-a', 'UP'), Zone('usXcentral1-a', 'UP')]
    assert [z.name for z in eligible_zones(zones, 'us.central1')] == []
    assert zone_pattern('any').match('europe-west1-a')
    assert not zone_pattern('any').match('1zone-a')
