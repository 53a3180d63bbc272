"""Workflow turning stored secrets into multi-shape credentials."""
import os
import logging
from typing import Dict, List, Mapping, Optional

from ..domains.errors import SecretNotFoundError
from ..domains.gcp_client import GCPSecretClient
from ..domains.models import CredentialResult, SecretMetadata
from ..domains.resolver import SecretCredentials
from ..domains.secret_value import SecretValue

logger = logging.getLogger(__name__)

DESCRIPTION_ANNOTATION = "description"


def build_tags(metadata: Optional[SecretMetadata], tag_aliases: Mapping[str, str]) -> Dict[str, str]:
    """
    Build the tag map of a secret from its labels and annotations.

    Annotations take precedence over labels with the same key. Keys listed in
    tag_aliases are renamed to their tag key.

    Args:
        metadata: Labels and annotations of the secret, or None
        tag_aliases: Store-key to tag-key mapping

    Returns:
        Tag map
    """
    if metadata is None:
        return {}

    merged = {**metadata.labels, **metadata.annotations}
    tags = {}
    for key, value in merged.items():
        tags[tag_aliases.get(key, key)] = value
    return tags


def get_credentials(secret_name: str, project_id: Optional[str] = None, quiet: bool = False) -> SecretCredentials:
    """
    Fetch a secret and wrap it as multi-shape credentials.

    Args:
        secret_name: Name of the secret to fetch
        project_id: GCP project ID (auto-detected if not provided)
        quiet: If True, suppress fallback warnings

    Returns:
        SecretCredentials for the secret

    Raises:
        SecretNotFoundError: If the secret is in neither the environment nor GCP

    Behavior:
        - Checks environment variables first; such secrets are text with no tags
        - Falls back to GCP Secret Manager, reading payload, labels and annotations
        - Nothing is cached; every call reads the secret again
    """
    env_value = os.getenv(secret_name)
    if env_value:
        if not quiet:
            logger.info(f"Using secret '{secret_name}' from environment")
        return SecretCredentials(secret_name, "", {}, SecretValue.text(env_value))

    client = GCPSecretClient()

    if not project_id:
        project_id = client.get_project_id() or "unknown"

    payload = client.fetch_payload(secret_name, project_id, quiet=quiet)
    if payload is None:
        raise SecretNotFoundError(f"Secret '{secret_name}' not found in GCP or env")

    metadata = client.fetch_metadata(secret_name, project_id, quiet=quiet)
    tags = build_tags(metadata, client.get_tag_aliases())
    description = metadata.annotations.get(DESCRIPTION_ANNOTATION, "") if metadata else ""

    logger.debug(f"Fetched secret '{secret_name}' from project {project_id} with tags {sorted(tags)}")
    return SecretCredentials(secret_name, description, tags, SecretValue.from_payload(payload))


def resolve_credential(secret_name: str, shape: str, project_id: Optional[str] = None,
                       quiet: bool = False) -> CredentialResult:
    """
    Fetch a secret and resolve one credential shape from it.

    Args:
        secret_name: Name of the secret to fetch
        shape: Credential shape (see resolver.SHAPES)
        project_id: GCP project ID (auto-detected if not provided)
        quiet: If True, suppress fallback warnings

    Returns:
        CredentialResult with the value or the reason it is unavailable

    Raises:
        SecretNotFoundError: If the secret cannot be fetched
        ValueError: If the shape is unknown
    """
    credentials = get_credentials(secret_name, project_id, quiet=quiet)
    return credentials.resolve(shape)


def list_credentials(project_id: Optional[str] = None, label_filter: Optional[str] = None) -> List[str]:
    """
    List the secret names that can be used as credentials.

    Args:
        project_id: GCP project ID (auto-detected if not provided)
        label_filter: Optional Secret Manager filter expression

    Returns:
        Secret names, sorted
    """
    client = GCPSecretClient()
    if not project_id:
        project_id = client.get_project_id() or "unknown"
    return sorted(client.list_secret_names(project_id, label_filter=label_filter))
