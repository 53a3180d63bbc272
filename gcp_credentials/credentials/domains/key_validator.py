"""Classify whether a text blob looks like a private key.

Three strategies are tried and the blob is valid if any of them matches:
legacy PEM key pairs (RSA/DSA/EC), PKCS#8 private keys, and OpenSSH private
keys. OpenSSH keys are only checked at the envelope level (label and
non-empty content), not parsed.
"""
import base64
import binascii
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import load_der_private_key

LEGACY_KEY_PAIR_LABELS = ("RSA PRIVATE KEY", "DSA PRIVATE KEY", "EC PRIVATE KEY")
PKCS8_LABEL = "PRIVATE KEY"
OPENSSH_LABEL = "OPENSSH PRIVATE KEY"

_BEGIN = "-----BEGIN "
_END = "-----END "
_DASHES = "-----"


class PemError(ValueError):
    """Malformed PEM block."""
    pass


@dataclass
class PemBlock:
    label: str
    headers: Dict[str, str] = field(default_factory=dict)
    content: bytes = b""


def read_pem_block(text: str) -> Optional[PemBlock]:
    """
    Read the first PEM block from text.

    Lines before the first BEGIN line are skipped.

    Args:
        text: Text that may contain a PEM block

    Returns:
        The first block, or None if there is no BEGIN line

    Raises:
        PemError: If the block is unterminated or its body is not base64
    """
    lines = iter(text.splitlines())

    label = None
    for line in lines:
        line = line.strip()
        if line.startswith(_BEGIN) and line.endswith(_DASHES) and len(line) > len(_BEGIN) + len(_DASHES):
            label = line[len(_BEGIN):-len(_DASHES)]
            break
    if label is None:
        return None

    end_line = f"{_END}{label}{_DASHES}"
    headers = {}
    body = []
    for line in lines:
        line = line.strip()
        if line == end_line:
            break
        if line.startswith(_END):
            raise PemError(f"Mismatched END line for {label}: {line}")
        if ":" in line and not body:
            name, _, value = line.partition(":")
            headers[name.strip()] = value.strip()
            continue
        if line:
            body.append(line)
    else:
        raise PemError(f"{end_line} not found")

    try:
        content = base64.b64decode("".join(body), validate=True)
    except (binascii.Error, ValueError) as e:
        raise PemError(f"Invalid base64 content in {label} block") from e

    return PemBlock(label=label, headers=headers, content=content)


def _loads_unencrypted_key(der: bytes) -> bool:
    try:
        load_der_private_key(der, password=None)
    except UnsupportedAlgorithm:
        # well-formed key of an algorithm this cryptography build cannot load
        return True
    except Exception:
        # encrypted or malformed key material
        return False
    return True


def is_legacy_key_pair(text: str) -> bool:
    """Legacy 'RSA/DSA/EC PRIVATE KEY' block holding an unencrypted key pair."""
    try:
        block = read_pem_block(text)
    except PemError:
        return False
    if block is None or block.label not in LEGACY_KEY_PAIR_LABELS:
        return False
    if "Proc-Type" in block.headers:
        # encrypted key pair, not usable without a passphrase
        return False
    return _loads_unencrypted_key(block.content)


def is_pkcs8_private_key(text: str) -> bool:
    """Unencrypted PKCS#8 'PRIVATE KEY' block."""
    try:
        block = read_pem_block(text)
    except PemError:
        return False
    if block is None or block.label != PKCS8_LABEL:
        return False
    return _loads_unencrypted_key(block.content)


def is_openssh_private_key(text: str) -> bool:
    """'OPENSSH PRIVATE KEY' block with some content. Envelope check only."""
    try:
        block = read_pem_block(text)
    except PemError:
        return False
    return block is not None and block.label == OPENSSH_LABEL and len(block.content) > 0


Validator = Callable[[str], bool]


class ValidatorChain:
    """A blob is valid if any validator in the chain accepts it."""

    def __init__(self, validators: List[Validator]):
        self._validators = list(validators)

    def is_valid(self, text: str) -> bool:
        if not isinstance(text, str):
            return False
        return any(validator(text) for validator in self._validators)


_chain = ValidatorChain([is_legacy_key_pair, is_pkcs8_private_key, is_openssh_private_key])


def is_valid(text: str) -> bool:
    """
    Check whether text is a recognisable private key encoding.

    Never raises.

    Args:
        text: Candidate private key

    Returns:
        True if any of the key format validators accepts the text
    """
    return _chain.is_valid(text)
