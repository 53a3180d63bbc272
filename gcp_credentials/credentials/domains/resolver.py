"""Multi-shape credentials backed by a single stored secret.

A secret does not declare its type. Each accessor checks, when it is called,
whether the payload and tags satisfy that credential shape, and raises
CredentialUnavailable if they don't. The same secret can therefore be used
as several shapes at once, e.g. a text secret with a username tag is both a
string secret and a username/password pair.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional

from cryptography.hazmat.primitives.serialization import pkcs12

from . import key_validator
from .errors import CredentialUnavailable
from .models import NO_SECRET, CredentialResult, KeyStore, Secret
from .secret_value import SecretValue

logger = logging.getLogger(__name__)

USERNAME_TAG = "jenkins:credentials:username"

# PKCS#12 containers need a password, even an empty one
NO_PASSWORD = b""


class TextSecretProvider(ABC):
    @abstractmethod
    def as_secret(self) -> Secret:
        ...


class UsernamePasswordProvider(ABC):
    @abstractmethod
    def as_username(self) -> str:
        ...

    @abstractmethod
    def as_password(self) -> Secret:
        ...


class PrivateKeyProvider(ABC):
    @abstractmethod
    def as_username(self) -> str:
        ...

    @abstractmethod
    def as_private_keys(self) -> List[str]:
        ...

    @abstractmethod
    def as_passphrase(self) -> Secret:
        ...

    def as_private_key(self) -> str:
        """First private key. Prefer as_private_keys()."""
        return self.as_private_keys()[0]


class KeyStoreProvider(ABC):
    @abstractmethod
    def as_key_store(self) -> KeyStore:
        ...

    @abstractmethod
    def as_password(self) -> Secret:
        ...


class SecretCredentials(TextSecretProvider, UsernamePasswordProvider, PrivateKeyProvider, KeyStoreProvider):
    """
    Credentials backed by one secret and its tags.

    Nothing is validated at construction time. Accessors are pure functions
    of (tags, value), so they can be called repeatedly and from several
    threads without synchronisation.
    """

    def __init__(self, id: str, description: str, tags: Optional[Mapping[str, str]], value: SecretValue):
        if not isinstance(value, SecretValue):
            raise TypeError(f"value must be a SecretValue, got {type(value).__name__}")
        self._id = id
        self._description = description or ""
        self._tags = dict(tags or {})
        self._value = value

    @property
    def id(self) -> str:
        return self._id

    @property
    def description(self) -> str:
        return self._description

    @property
    def name(self) -> str:
        """Display name of the credential."""
        return self._id

    @property
    def tags(self) -> Dict[str, str]:
        return dict(self._tags)

    def _text(self) -> Optional[str]:
        return self._value.match(lambda text: text, lambda data: None)

    def _binary(self) -> Optional[bytes]:
        return self._value.match(lambda text: None, lambda data: data)

    def as_secret(self) -> Secret:
        text = self._text()
        if text is None:
            raise CredentialUnavailable("secret")
        return Secret(text)

    def as_password(self) -> Secret:
        text = self._text()
        if USERNAME_TAG not in self._tags or text is None:
            # no username or a binary payload: this is a certificate, whose password is empty
            return NO_SECRET
        return Secret(text)

    def as_username(self) -> str:
        if USERNAME_TAG not in self._tags:
            raise CredentialUnavailable("username")
        return self._tags[USERNAME_TAG]

    def as_passphrase(self) -> Secret:
        return NO_SECRET

    def as_private_keys(self) -> List[str]:
        text = self._text()
        if text is None or not key_validator.is_valid(text):
            logger.debug(f"Credential '{self._id}' is not a private key")
            raise CredentialUnavailable("privateKey")
        return [text]

    def as_key_store(self) -> KeyStore:
        data = self._binary()
        if data is None:
            raise CredentialUnavailable("keyStore")
        try:
            loaded = pkcs12.load_pkcs12(data, NO_PASSWORD)
        except Exception:
            logger.debug(f"Credential '{self._id}' is not a loadable key store")
            raise CredentialUnavailable("keyStore") from None

        certificate = loaded.cert.certificate if loaded.cert is not None else None
        friendly_name = loaded.cert.friendly_name if loaded.cert is not None else None
        return KeyStore(
            private_key=loaded.key,
            certificate=certificate,
            additional_certificates=tuple(c.certificate for c in loaded.additional_certs),
            friendly_name=friendly_name.decode("UTF-8", errors="replace") if friendly_name else None,
        )

    def resolve(self, shape: str) -> CredentialResult:
        """
        Resolve one credential shape without raising.

        Args:
            shape: One of SHAPES

        Returns:
            CredentialResult holding the value, or the CredentialUnavailable error

        Raises:
            ValueError: If the shape name is unknown
        """
        if shape not in SHAPES:
            raise ValueError(f"Unknown credential shape '{shape}'. Expected one of: {', '.join(SHAPES)}")
        try:
            return CredentialResult(shape=shape, value=SHAPES[shape](self))
        except CredentialUnavailable as e:
            return CredentialResult(shape=shape, error=e)

    def __repr__(self):
        return f"SecretCredentials(id={self._id!r}, tags={sorted(self._tags)!r}, value={self._value!r})"


SHAPES: Dict[str, Callable[[SecretCredentials], Any]] = {
    "secret": SecretCredentials.as_secret,
    "username": SecretCredentials.as_username,
    "password": SecretCredentials.as_password,
    "passphrase": SecretCredentials.as_passphrase,
    "private-key": SecretCredentials.as_private_keys,
    "keystore": SecretCredentials.as_key_store,
}
