"""
GCE Provision - Instance Names

Compute Engine names must start with a lowercase letter, contain only
lowercase letters, digits and hyphens, not end with a hyphen and be at
most 63 characters long.
"""

import re
import uuid

from gce_provision.core.exceptions import NameGenerationError

MAX_NAME_LENGTH = 63
BASE_NAME_LENGTH = 26  # uuid4 is 36 chars, plus one hyphen

NAME_PATTERN = re.compile(r'^[a-z]([-a-z0-9]*[a-z0-9])?$')


def is_valid_name(name: str) -> bool:
    """Check a name against the Compute Engine naming rules."""
    return len(name) <= MAX_NAME_LENGTH and NAME_PATTERN.match(name) is not None


def generate_instance_name(base_name: str) -> str:
    """
    Build a unique instance name from a human-readable identifier.

    Args:
        base_name: Identifier such as a test suite name ('Default Ubuntu-22.04')

    Returns:
        Name like 'default-ubuntu-22-04-3f2b...' (different on every call)

    Raises:
        NameGenerationError: If the result breaks the naming rules
    """
    name = re.sub(r'[^-a-z0-9]', '-', base_name.lower())
    if not re.match(r'^[a-z]', name):
        name = 't' + name

    generated = f"{name[:BASE_NAME_LENGTH]}-{uuid.uuid4()}"

    if not is_valid_name(generated):
        raise NameGenerationError(generated)

    return generated
