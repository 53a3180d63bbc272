"""Errors raised while resolving credentials."""
from typing import Optional

_DEFAULT_MESSAGES = {
    "secret": "The secret is binary and cannot be used as a text secret",
    "username": "No username tag 'jenkins:credentials:username' is set on the secret",
    "privateKey": "The secret is not a recognised private key",
    "keyStore": "The secret is not a PKCS#12 key store with an empty password",
}


class CredentialUnavailable(Exception):
    """A credential field cannot be supplied from the secret as it currently is."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        self.message = message or _DEFAULT_MESSAGES.get(field, f"Credential field '{field}' is unavailable")
        super().__init__(field, self.message)

    def __str__(self):
        return f"{self.field}: {self.message}"

    def __eq__(self, other):
        if not isinstance(other, CredentialUnavailable):
            return NotImplemented
        return self.field == other.field and self.message == other.message

    def __hash__(self):
        return hash((self.field, self.message))


class SecretNotFoundError(Exception):
    """Secret not found in GCP Secret Manager or the environment."""
    pass
