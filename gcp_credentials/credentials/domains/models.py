"""Domain models for credential resolution."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from cryptography.hazmat.primitives import serialization

from .errors import CredentialUnavailable


class Secret:
    """Opaque secret handle; the plain text is only available on request."""

    __slots__ = ("_value",)

    def __init__(self, value: str):
        self._value = value

    def get_plain_text(self) -> str:
        return self._value

    def __eq__(self, other):
        if not isinstance(other, Secret):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash(self._value)

    def __bool__(self):
        return bool(self._value)

    def __repr__(self):
        return "Secret(****)" if self._value else "Secret()"

    __str__ = __repr__


# Returned where a shape has no secret to offer (e.g. the password of a certificate)
NO_SECRET = Secret("")


def _key_der(private_key) -> Optional[bytes]:
    if private_key is None:
        return None
    return private_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )


@dataclass(frozen=True, eq=False)
class KeyStore:
    """Contents of a PKCS#12 container loaded from a binary secret."""
    private_key: Optional[Any] = None
    certificate: Optional[Any] = None
    additional_certificates: Tuple[Any, ...] = ()
    friendly_name: Optional[str] = None

    def __eq__(self, other):
        # private key objects have no value equality, compare their encoding
        if not isinstance(other, KeyStore):
            return NotImplemented
        return (
            _key_der(self.private_key) == _key_der(other.private_key)
            and self.certificate == other.certificate
            and tuple(self.additional_certificates) == tuple(other.additional_certificates)
            and self.friendly_name == other.friendly_name
        )

    def __hash__(self):
        return hash((self.friendly_name, self.certificate, tuple(self.additional_certificates)))

    @property
    def entries(self) -> List[Tuple[str, str]]:
        """(alias, kind) pairs, kind being 'key' or 'certificate'."""
        alias = self.friendly_name or "1"
        result = []
        if self.private_key is not None:
            result.append((alias, "key"))
        elif self.certificate is not None:
            result.append((alias, "certificate"))
        for index, _cert in enumerate(self.additional_certificates, start=1):
            result.append((f"{alias}-ca-{index}", "certificate"))
        return result

    def __len__(self):
        return len(self.entries)


@dataclass(frozen=True)
class CredentialResult:
    """Outcome of resolving one credential shape: a value or the reason it is unavailable."""
    shape: str
    value: Any = None
    error: Optional[CredentialUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


@dataclass
class SecretMetadata:
    """Labels and annotations attached to a secret in GCP Secret Manager."""
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
