"""Tests for instance name generation."""

import re
from unittest.mock import patch

import pytest

from gce_provision.core.exceptions import NameGenerationError
from gce_provision.utils import naming
from gce_provision.utils.naming import generate_instance_name, is_valid_name

NAME_RE = re.compile(r'^[a-z]([-a-z0-9]*[a-z0-9])?$')

BASE_NAMES = [
    'default-ubuntu-2204',
    'Default Ubuntu 22.04',
    'UPPER_case_Suite',
    '1-starts-with-digit',
    '-leading-hyphen',
    'trailing-hyphen-',
    'ünïcödé',
    '',
    'a' * 200,
    'server.example.com',
]


@pytest.mark.parametrize('base_name', BASE_NAMES)
def test_generated_name_follows_naming_rules(base_name):
    name = generate_instance_name(base_name)
    assert NAME_RE.match(name)
    assert len(name) <= 63


def test_generated_names_are_unique():
    first = generate_instance_name('default-centos-7')
    second = generate_instance_name('default-centos-7')
    assert first != second
    assert is_valid_name(first) and is_valid_name(second)


def test_name_is_lowercased_and_sanitised():
    name = generate_instance_name('My Suite_1')
    assert name.startswith('my-suite-1-')


def test_name_gets_letter_prefix_when_needed():
    assert generate_instance_name('42').startswith('t42-')
    assert generate_instance_name('-x').startswith('t-x-')


def test_base_is_truncated_to_26_characters():
    name = generate_instance_name('b' * 40)
    base, _, suffix = name.partition('-')
    assert base == 'b' * 26
    assert len(suffix) == 36
    assert len(name) == 63


def test_invalid_result_raises():
    with patch.object(naming, 'is_valid_name', return_value=False):
        with pytest.raises(NameGenerationError, match='Invalid generated instance name'):
            generate_instance_name('suite')


def test_is_valid_name():
    assert is_valid_name('a')
    assert is_valid_name('abc-123')
    assert not is_valid_name('abc-')
    assert not is_valid_name('1abc')
    assert not is_valid_name('Abc')
    assert not is_valid_name('a' * 64)
