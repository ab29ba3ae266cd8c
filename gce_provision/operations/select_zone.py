"""
GCE Provision - Select Zone Operation

Picks a random UP zone in the requested region.
"""

import random
import re

from gce_provision.core.exceptions import NoAvailableZoneError
from gce_provision.core.resources import Zone
from gce_provision.operations.base import BaseOperation
from gce_provision.utils.logger import log_api_call

ANY_REGION = 'any'


def zone_pattern(region: str):
    """
    Regex a zone name must match to belong to region.

    'any' accepts every '<letters>-...' zone; anything else must be
    followed by a hyphen ('us-central1' matches 'us-central1-a').
    """
    if region == ANY_REGION:
        return re.compile(r'^[a-z]+-')
    return re.compile(rf'^{re.escape(region)}-')


def eligible_zones(zones, region: str) -> list:
    """Zones that are UP and belong to region."""
    pattern = zone_pattern(region)
    return [z for z in zones if z.is_up and pattern.match(z.name)]


class SelectZoneOperation(BaseOperation):
    """
    Lists the project's zones and picks one that is UP in the region.

    Selection among several candidates is uniformly random.
    """

    @property
    def name(self) -> str:
        """Display name for this operation."""
        return "Select Zone"

    def list_zones(self) -> list:
        """All zones visible to the project, following pagination."""
        zones = []
        request = self.compute.zones().list(project=self.project)

        while request is not None:
            log_api_call(self.logger, 'zones.list', project=self.project)
            response = self._call('zones.list', request)
            zones.extend(Zone.from_api(item) for item in response.get('items', []))
            request = self.compute.zones().list_next(
                previous_request=request,
                previous_response=response
            )

        return zones

    def execute(self, region: str, rng: random.Random = None) -> str:
        """
        Select a zone.

        Args:
            region: Region prefix (e.g., 'us-central1') or 'any'
            rng: Optional random generator (for tests)

        Returns:
            Name of the selected zone

        Raises:
            NoAvailableZoneError: If no zone is UP in the region
            ProviderError: If listing zones fails
        """
        self._log_debug(f"Executing {self.name}: region={region}")

        candidates = eligible_zones(self.list_zones(), region)
        self._log_debug(f"Candidate zones: {[z.name for z in candidates]}")

        if not candidates:
            raise NoAvailableZoneError(region, self.project)

        zone = (rng or random).choice(candidates)
        self._log_debug(f"Selected zone: {zone.name}")
        return zone.name
