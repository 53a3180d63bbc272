"""Configuration loader for gcp-credentials."""
import os
import logging
from pathlib import Path
from typing import Any, Dict, Tuple
import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GCP_CREDENTIALS_CONFIG"

# GCP label and annotation keys cannot contain ':', so the username tag is
# stored under a different key and renamed when the secret is read
DEFAULT_TAG_ALIASES = {
    "jenkins-credentials-username": "jenkins:credentials:username",
}


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    return Path.home() / ".config" / "gcp-credentials" / "config.yml"


def get_config_location() -> Tuple[Path, str]:
    """
    Get the config file path and where it came from, without checking it exists.

    Returns:
        (path, source) where source is "env" or "default"
    """
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser(), "env"
    return default_config_path(), "default"


def _get_config_path() -> str:
    """
    Get config file path.

    Priority order:
    1. GCP_CREDENTIALS_CONFIG environment variable
    2. Default location: ~/.config/gcp-credentials/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        config_path = Path(env_path).expanduser()
        if config_path.exists():
            logger.info(f"Using config from {CONFIG_ENV_VAR}: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from {CONFIG_ENV_VAR} doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        f"   export {CONFIG_ENV_VAR}=/path/to/your/config.yml\n"
    )


def _validate_tag_aliases(config: Dict[str, Any], config_path: str) -> None:
    section = config.get('credentials')
    if section is None:
        return
    if not isinstance(section, dict):
        raise ConfigError(f"'credentials' section in config at {config_path} must be a mapping")

    aliases = section.get('tag_aliases', {})
    if not isinstance(aliases, dict):
        raise ConfigError("'credentials.tag_aliases' must be a mapping of store key to tag key")
    for key, value in aliases.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ConfigError(f"Invalid tag alias {key!r}: {value!r} (keys and values must be strings)")


def get_tag_aliases(config: Dict[str, Any]) -> Dict[str, str]:
    """
    Get store-key to tag-key aliases from a loaded config.

    Returns:
        Aliases from 'credentials.tag_aliases', or the defaults if not configured
    """
    section = config.get('credentials') or {}
    aliases = section.get('tag_aliases')
    if aliases is None:
        return dict(DEFAULT_TAG_ALIASES)
    return dict(aliases)


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with keys:
        - authentication: dict with type and service_account_path
        - gcp: dict with project_id
        - credentials (optional): dict with tag_aliases

    Raises:
        FileNotFoundError: If no config file can be located
        ConfigError: If config file is invalid or service account file doesn't exist
    """
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    if 'authentication' not in config:
        raise ConfigError(
            f"Missing 'authentication' section in config at {config_path}\n"
            f"Required format:\n"
            f"authentication:\n"
            f"  type: service_account\n"
            f"  service_account_path: /path/to/service-account.json"
        )

    auth = config['authentication']

    if 'type' not in auth:
        raise ConfigError("Missing 'authentication.type' in config")

    if auth['type'] != 'service_account':
        raise ConfigError(
            f"Unsupported authentication type: {auth['type']}\n"
            f"Only 'service_account' is supported."
        )

    if 'service_account_path' not in auth:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )

    service_account_path = auth['service_account_path']

    if not os.path.isfile(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )

    if 'gcp' not in config:
        raise ConfigError(
            f"Missing 'gcp' section in config at {config_path}\n"
            f"Required format:\n"
            f"gcp:\n"
            f"  project_id: your-project-id"
        )

    if 'project_id' not in config['gcp']:
        raise ConfigError("Missing 'gcp.project_id' in config")

    _validate_tag_aliases(config, config_path)

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using project ID: {config['gcp']['project_id']}")

    return config
