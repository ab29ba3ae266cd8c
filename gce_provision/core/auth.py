"""
GCE Provision - Authentication Manager

This module handles Google Cloud authentication and client creation.
Credentials come from a service account JSON key when one is configured,
otherwise from Application Default Credentials.
"""

import google.auth
from google.auth.exceptions import DefaultCredentialsError, GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from googleapiclient import discovery
from googleapiclient.errors import Error as ApiClientError
import googleapiclient.http
import google_auth_httplib2
import httplib2

from gce_provision.core.exceptions import AuthenticationError
from gce_provision.core.config import ProvisioningConfig, VERSION

COMPUTE_SCOPES = ['https://www.googleapis.com/auth/compute']


class AuthManager:
    """
    Manages Google Cloud authentication and API client creation.

    This class:
    1. Loads credentials from the configured key file, or ADC
    2. Validates and refreshes credentials if needed
    3. Creates an authenticated Compute Engine API client
    4. Provides clear error messages when authentication fails

    Usage:
        auth = AuthManager(config)
        compute, project = auth.get_client()
    """

    def __init__(self, config: ProvisioningConfig = None, logger=None):
        """
        Initialize the authentication manager.

        Args:
            config: Provisioning config holding key locations and project
            logger: Optional logger
        """
        self.config = config or ProvisioningConfig()
        self.logger = logger
        self._credentials = None
        self._project = None
        self._compute = None

    def _log_debug(self, message: str):
        if self.logger:
            self.logger.debug(message)

    def get_credentials(self):
        """
        Get and validate Google Cloud credentials.

        Lookup order:
        1. google_json_key_location from config (service account key)
        2. Application Default Credentials (GOOGLE_APPLICATION_CREDENTIALS,
           gcloud application-default login, GCE metadata server)

        Returns:
            tuple: (credentials, project_id)

        Raises:
            AuthenticationError: If credentials not found or invalid
        """

        if self.config.google_key_location:
            raise AuthenticationError(
                "P12 keys (google_key_location) are not supported",
                fix="Create a JSON key and set google_json_key_location"
            )

        if self.config.google_json_key_location:
            return self._credentials_from_key_file(self.config.google_json_key_location)

        try:
            credentials, project = google.auth.default(scopes=COMPUTE_SCOPES)
        except DefaultCredentialsError:
            raise AuthenticationError(
                "No credentials found. You need to authenticate first.",
                fix="gcloud auth application-default login"
            )

        # Validate credentials
        if not credentials.valid:
            # Try to refresh if possible
            try:
                self._log_debug("Refreshing credentials...")
                credentials.refresh(Request())
            except GoogleAuthError as e:
                raise AuthenticationError(
                    f"Credentials are invalid and refresh failed: {e}",
                    fix="gcloud auth application-default login"
                )

        return credentials, project

    def _credentials_from_key_file(self, key_path: str):
        """Load service account credentials from a JSON key file."""
        try:
            credentials = service_account.Credentials.from_service_account_file(
                key_path,
                scopes=COMPUTE_SCOPES
            )
        except (OSError, ValueError) as e:
            raise AuthenticationError(
                f"Cannot load service account key {key_path}: {e}",
                fix="Check google_json_key_location points to a JSON key file"
            )

        email = self.config.google_client_email
        if email and credentials.service_account_email != email:
            self._log_debug(
                f"Key file account {credentials.service_account_email} "
                f"differs from google_client_email {email}"
            )

        return credentials, credentials.project_id

    def get_client(self, project=None):
        """
        Get authenticated Google Compute Engine API client.

        Args:
            project: GCP project ID (optional). Defaults to google_project
                     from config, then the project from credentials.

        Returns:
            tuple: (compute_client, project_id)

        Raises:
            AuthenticationError: If authentication fails

        Example:
            auth = AuthManager(config)
            compute, project = auth.get_client()

            zones = compute.zones().list(project=project).execute()
        """

        # Get credentials if we don't have them yet
        if not self._credentials:
            self._credentials, self._project = self.get_credentials()

        project = project or self.config.google_project or self._project

        # Create compute client if we don't have one yet
        if not self._compute:
            credentials = self._credentials

            def _request_builder(http, *args, **kwargs):
                """Inject User-Agent header for usage tracking."""
                headers = kwargs.setdefault('headers', {})
                headers['user-agent'] = f'gce_provision-{VERSION}'
                auth_http = google_auth_httplib2.AuthorizedHttp(
                    credentials,
                    http=httplib2.Http()
                )
                return googleapiclient.http.HttpRequest(auth_http, *args, **kwargs)

            try:
                self._compute = discovery.build(
                    'compute',
                    'v1',
                    credentials=credentials,
                    cache_discovery=False,
                    requestBuilder=_request_builder
                )
            except (httplib2.HttpLib2Error, ApiClientError, OSError) as e:
                raise AuthenticationError(
                    f"Failed to create GCP API client: {str(e)}"
                )

        return self._compute, project

    def is_authenticated(self):
        """
        Check if we have valid credentials.

        Returns:
            bool: True if authenticated, False otherwise
        """
        try:
            self.get_credentials()
            return True
        except AuthenticationError:
            return False
