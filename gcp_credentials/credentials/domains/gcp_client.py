"""GCP Secret Manager client wrapper."""
import os
import logging
from typing import Optional, Dict, Any, List
from google.cloud import secretmanager

from .config_loader import load_config, get_tag_aliases, ConfigError, DEFAULT_TAG_ALIASES
from .models import SecretMetadata

logger = logging.getLogger(__name__)

# Loaded on first GCP use so that commands like --help work without a config file
_CONFIG: Optional[Dict[str, Any]] = None
_CONFIG_LOADED = False


def _get_config() -> Dict[str, Any]:
    """
    Lazy load configuration on first use.

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If config file is invalid
        FileNotFoundError: If config file is missing
    """
    global _CONFIG, _CONFIG_LOADED

    if not _CONFIG_LOADED:
        _CONFIG = load_config()
        _CONFIG_LOADED = True

        service_account_path = _CONFIG['authentication']['service_account_path']
        os.environ['GOOGLE_APPLICATION_CREDENTIALS'] = service_account_path
        logger.info(f"Set GOOGLE_APPLICATION_CREDENTIALS from config: {service_account_path}")

    return _CONFIG


def reset_config() -> None:
    """Forget the loaded configuration so the next GCP call reloads it."""
    global _CONFIG, _CONFIG_LOADED
    _CONFIG = None
    _CONFIG_LOADED = False


class GCPSecretClient:
    """Wrapper around GCP Secret Manager client."""

    def __init__(self):
        self._client = None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_project_id(self) -> Optional[str]:
        """
        Get GCP project ID from environment variable or config.

        Priority order:
        1. GCP_PROJECT environment variable (allows override)
        2. Config file

        Returns:
            Project ID string, or None if not found
        """
        gcp_project_env = os.getenv("GCP_PROJECT")
        if gcp_project_env:
            logger.debug(f"Using GCP_PROJECT from environment: {gcp_project_env}")
            return gcp_project_env

        try:
            config = _get_config()
        except (ConfigError, FileNotFoundError) as e:
            logger.error(f"Failed to load config: {e}")
            return None

        project_id = config['gcp']['project_id']
        logger.debug(f"Using project_id from config: {project_id}")
        return project_id

    def get_tag_aliases(self) -> Dict[str, str]:
        """Store-key to tag-key aliases from config, or the defaults without one."""
        try:
            return get_tag_aliases(_get_config())
        except (ConfigError, FileNotFoundError) as e:
            logger.debug(f"Using default tag aliases: {e}")
            return dict(DEFAULT_TAG_ALIASES)

    def fetch_payload(self, secret_name: str, project_id: str, quiet: bool = False) -> Optional[bytes]:
        """
        Fetch the latest version payload of a secret.

        Args:
            secret_name: Name of the secret
            project_id: GCP project ID
            quiet: If True, suppress warning logs

        Returns:
            Raw payload bytes or None if fetch fails
        """
        try:
            name = f"projects/{project_id}/secrets/{secret_name}/versions/latest"
            response = self.client.access_secret_version(request={"name": name})
            return response.payload.data
        except Exception as e:
            if not quiet:
                logger.warning(f"GCP fetch failed for {secret_name}: {e}")
            return None

    def fetch_metadata(self, secret_name: str, project_id: str, quiet: bool = False) -> Optional[SecretMetadata]:
        """
        Fetch labels and annotations of a secret.

        Args:
            secret_name: Name of the secret
            project_id: GCP project ID
            quiet: If True, suppress warning logs

        Returns:
            SecretMetadata or None if fetch fails
        """
        try:
            name = f"projects/{project_id}/secrets/{secret_name}"
            secret = self.client.get_secret(request={"name": name})
            return SecretMetadata(labels=dict(secret.labels), annotations=dict(secret.annotations))
        except Exception as e:
            if not quiet:
                logger.warning(f"GCP metadata fetch failed for {secret_name}: {e}")
            return None

    def list_secret_names(self, project_id: str, label_filter: Optional[str] = None) -> List[str]:
        """
        List secret names in a project.

        Args:
            project_id: GCP project ID
            label_filter: Optional Secret Manager filter expression, e.g. "labels.team=ci"

        Returns:
            Secret names (the last path segment of each secret resource name)
        """
        request = {"parent": f"projects/{project_id}"}
        if label_filter:
            request["filter"] = label_filter
        return [secret.name.rsplit("/", 1)[-1] for secret in self.client.list_secrets(request=request)]
