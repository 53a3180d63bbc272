"""Tests for multi-shape credential resolution."""
import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from gcp_credentials.credentials.domains.errors import CredentialUnavailable
from gcp_credentials.credentials.domains.models import NO_SECRET, CredentialResult, KeyStore, Secret
from gcp_credentials.credentials.domains.resolver import (
    SHAPES,
    USERNAME_TAG,
    KeyStoreProvider,
    PrivateKeyProvider,
    SecretCredentials,
    TextSecretProvider,
    UsernamePasswordProvider,
)
from gcp_credentials.credentials.domains.secret_value import SecretValue

RANDOM_BYTES = random.Random(1234).randbytes(512)


def text_credentials(text, tags=None):
    return SecretCredentials("my-secret", "A secret", tags or {}, SecretValue.text(text))


def binary_credentials(data, tags=None):
    return SecretCredentials("my-cert", "A certificate", tags or {}, SecretValue.binary(data))


def _outcome(credentials, shape):
    """Value of an accessor, or the field of the failure it raised."""
    try:
        return ("ok", SHAPES[shape](credentials))
    except CredentialUnavailable as e:
        return ("unavailable", e.field)


class TestIdentity:
    """Test suite for identity and metadata accessors."""

    def test_id_description_and_name(self):
        credentials = text_credentials("x")
        assert credentials.id == "my-secret"
        assert credentials.description == "A secret"
        assert credentials.name == "my-secret"

    def test_tags_are_copied(self):
        tags = {"team": "ci"}
        credentials = text_credentials("x", tags)
        tags["team"] = "changed"
        assert credentials.tags == {"team": "ci"}

    def test_value_must_be_secret_value(self):
        with pytest.raises(TypeError):
            SecretCredentials("id", "", {}, "plain string")

    def test_implements_every_capability(self):
        credentials = text_credentials("x")
        for interface in (TextSecretProvider, UsernamePasswordProvider, PrivateKeyProvider, KeyStoreProvider):
            assert isinstance(credentials, interface)

    def test_repr_hides_payload(self):
        assert "hunter2" not in repr(text_credentials("hunter2"))


class TestStringSecret:
    """Test suite for as_secret."""

    @pytest.mark.parametrize("text", ["hunter2", "", "line1\nline2\t\x00\x1b[0m", "ünïcødé"])
    def test_round_trip(self, text):
        assert text_credentials(text).as_secret().get_plain_text() == text

    def test_binary_is_unavailable(self):
        with pytest.raises(CredentialUnavailable) as exc_info:
            binary_credentials(b"\x00").as_secret()
        assert exc_info.value.field == "secret"


class TestUsernamePassword:
    """Test suite for as_username and as_password."""

    def test_no_username_tag(self):
        credentials = text_credentials("hunter2")

        with pytest.raises(CredentialUnavailable) as exc_info:
            credentials.as_username()
        assert exc_info.value.field == "username"

        assert credentials.as_password() == NO_SECRET

    def test_with_username_tag(self):
        credentials = text_credentials("hunter2", {USERNAME_TAG: "joe"})
        assert credentials.as_username() == "joe"
        assert credentials.as_password() == Secret("hunter2")
        assert credentials.as_password().get_plain_text() == "hunter2"

    def test_text_with_username_is_also_a_string_secret(self):
        credentials = text_credentials("hunter2", {USERNAME_TAG: "joe"})
        assert credentials.as_secret().get_plain_text() == "hunter2"

    def test_empty_username(self):
        assert text_credentials("pw", {USERNAME_TAG: ""}).as_username() == ""

    def test_other_tags_do_not_provide_username(self):
        with pytest.raises(CredentialUnavailable):
            text_credentials("pw", {"username": "joe"}).as_username()

    def test_binary_certificate_password_is_empty(self):
        assert binary_credentials(b"\x00").as_password() == NO_SECRET

    def test_binary_with_username_tag_password_is_empty(self):
        credentials = binary_credentials(b"\x00", {USERNAME_TAG: "joe"})
        assert credentials.as_password() == NO_SECRET
        assert credentials.resolve("password").ok


class TestPassphrase:
    """Test suite for as_passphrase."""

    def test_always_no_secret(self, openssh_pem):
        assert text_credentials(openssh_pem).as_passphrase() == NO_SECRET
        assert text_credentials("x", {USERNAME_TAG: "joe"}).as_passphrase() == NO_SECRET
        assert binary_credentials(RANDOM_BYTES).as_passphrase() == NO_SECRET


class TestPrivateKeys:
    """Test suite for as_private_keys."""

    def test_valid_keys(self, legacy_rsa_pem, pkcs8_pem, openssh_pem):
        for blob in (legacy_rsa_pem, pkcs8_pem, openssh_pem):
            credentials = text_credentials(blob, {USERNAME_TAG: "git"})
            assert credentials.as_private_keys() == [blob]
            assert credentials.as_private_key() == blob
            assert credentials.as_username() == "git"

    @pytest.mark.parametrize("text", ["", "hello world"])
    def test_invalid_key(self, text):
        with pytest.raises(CredentialUnavailable) as exc_info:
            text_credentials(text).as_private_keys()
        assert exc_info.value.field == "privateKey"

    def test_binary_is_not_a_private_key(self):
        with pytest.raises(CredentialUnavailable) as exc_info:
            binary_credentials(RANDOM_BYTES).as_private_keys()
        assert exc_info.value.field == "privateKey"


class TestKeyStore:
    """Test suite for as_key_store."""

    def test_key_and_certificate(self, keystore_bytes, certificate):
        key_store = binary_credentials(keystore_bytes).as_key_store()
        assert isinstance(key_store, KeyStore)
        assert key_store.private_key is not None
        assert key_store.certificate == certificate
        assert key_store.friendly_name == "test"
        assert key_store.entries == [("test", "key")]

    def test_certificates_only(self, ca_only_keystore_bytes):
        key_store = binary_credentials(ca_only_keystore_bytes).as_key_store()
        assert key_store.private_key is None
        assert len(key_store.additional_certificates) == 1
        assert len(key_store) == 1

    def test_random_bytes(self):
        with pytest.raises(CredentialUnavailable) as exc_info:
            binary_credentials(RANDOM_BYTES).as_key_store()
        assert exc_info.value.field == "keyStore"

    def test_wrong_password(self, password_keystore_bytes):
        with pytest.raises(CredentialUnavailable) as exc_info:
            binary_credentials(password_keystore_bytes).as_key_store()
        assert exc_info.value.field == "keyStore"

    def test_parser_error_is_not_chained(self):
        with pytest.raises(CredentialUnavailable) as exc_info:
            binary_credentials(RANDOM_BYTES).as_key_store()
        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__

    def test_text_is_not_a_key_store(self, pkcs8_pem):
        with pytest.raises(CredentialUnavailable) as exc_info:
            text_credentials(pkcs8_pem).as_key_store()
        assert exc_info.value.field == "keyStore"

    def test_empty_key_store_has_no_entries(self):
        assert len(KeyStore()) == 0
        assert KeyStore().entries == []

    def test_loads_container_without_entries(self, empty_keystore_bytes):
        key_store = binary_credentials(empty_keystore_bytes).as_key_store()
        assert len(key_store) == 0
        assert key_store.entries == []
        assert key_store == KeyStore()

    def test_loads_container_encrypted_under_empty_password(self, empty_password_keystore_bytes):
        key_store = binary_credentials(empty_password_keystore_bytes).as_key_store()
        assert key_store.private_key is not None
        assert key_store.certificate is not None
        assert [kind for _, kind in key_store.entries] == ["key"]


class TestResolve:
    """Test suite for the result-returning resolve()."""

    def test_success(self):
        result = text_credentials("pw", {USERNAME_TAG: "joe"}).resolve("username")
        assert result == CredentialResult(shape="username", value="joe")
        assert result.ok
        assert result.unwrap() == "joe"

    def test_failure(self):
        result = text_credentials("pw").resolve("private-key")
        assert not result.ok
        assert result.error.field == "privateKey"
        with pytest.raises(CredentialUnavailable):
            result.unwrap()

    def test_unknown_shape(self):
        with pytest.raises(ValueError):
            text_credentials("pw").resolve("token")


class TestIdempotenceAndConcurrency:
    """Accessors are pure functions of their inputs."""

    @pytest.fixture
    def cases(self, openssh_pem, keystore_bytes):
        return [
            text_credentials("hunter2"),
            text_credentials("hunter2", {USERNAME_TAG: "joe"}),
            text_credentials(openssh_pem, {USERNAME_TAG: "git"}),
            binary_credentials(keystore_bytes),
            binary_credentials(RANDOM_BYTES),
        ]

    def test_repeated_calls_agree(self, cases):
        for credentials in cases:
            for shape in SHAPES:
                assert _outcome(credentials, shape) == _outcome(credentials, shape)

    def test_concurrent_calls_match_sequential(self, cases):
        for credentials in cases:
            expected = {shape: _outcome(credentials, shape) for shape in SHAPES}
            work = [shape for shape in SHAPES for _ in range(8)]

            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(lambda shape: (shape, _outcome(credentials, shape)), work))

            for shape, outcome in results:
                assert outcome == expected[shape]
