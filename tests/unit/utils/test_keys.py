"""Unit tests for utils.keys module.

Tests:
- load_keys_from_env() with hex and nsec keys, missing and empty variables
- KeysConfig loading keys from the environment
- sign_record() producing a verifiable signature, owner mismatch
- verify_record_signature() rejecting missing, malformed, tampered,
  and foreign signatures
"""

import json

import pytest
from nostr_sdk import Keys

from uns.exceptions import SignatureError
from uns.models.record import NetworkRecord
from uns.utils.keys import (
    ENV_PRIVATE_KEY,
    KeysConfig,
    load_keys_from_env,
    sign_record,
    verify_record_signature,
)


def _record(keys: Keys, owner: str | None = None) -> NetworkRecord:
    return NetworkRecord(
        network="carol",
        owner=owner if owner is not None else keys.public_key().to_hex(),
        subdomains={".home": "https://carol.home"},
        timestamp=1722949200,
    )


# =============================================================================
# Key Loading
# =============================================================================


class TestLoadKeysFromEnv:
    def test_hex_key(self, monkeypatch: pytest.MonkeyPatch, owner_keys: Keys) -> None:
        monkeypatch.setenv(ENV_PRIVATE_KEY, owner_keys.secret_key().to_hex())
        keys = load_keys_from_env()
        assert keys.public_key().to_hex() == owner_keys.public_key().to_hex()

    def test_nsec_key(self, monkeypatch: pytest.MonkeyPatch, owner_keys: Keys) -> None:
        monkeypatch.setenv("OTHER_KEY", owner_keys.secret_key().to_bech32())
        keys = load_keys_from_env("OTHER_KEY")
        assert keys.public_key().to_hex() == owner_keys.public_key().to_hex()

    def test_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(ENV_PRIVATE_KEY, raising=False)
        with pytest.raises(ValueError, match=ENV_PRIVATE_KEY):
            load_keys_from_env()

    def test_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_PRIVATE_KEY, "")
        with pytest.raises(ValueError):
            load_keys_from_env()


class TestKeysConfig:
    def test_loads_from_env(self, monkeypatch: pytest.MonkeyPatch, owner_keys: Keys) -> None:
        monkeypatch.setenv(ENV_PRIVATE_KEY, owner_keys.secret_key().to_hex())
        config = KeysConfig()
        assert config.keys.public_key().to_hex() == owner_keys.public_key().to_hex()

    def test_explicit_keys(self, owner_keys: Keys) -> None:
        assert KeysConfig(keys=owner_keys).keys is owner_keys

    def test_missing_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(ENV_PRIVATE_KEY, raising=False)
        with pytest.raises(ValueError):
            KeysConfig()


# =============================================================================
# Signing and Verification
# =============================================================================


class TestSignRecord:
    def test_signature_is_event_json(self, owner_keys: Keys) -> None:
        signed = sign_record(_record(owner_keys), owner_keys)
        assert signed.signature is not None
        event = json.loads(signed.signature)
        assert event["kind"] == 30078
        assert event["pubkey"] == owner_keys.public_key().to_hex()
        assert event["content"] == signed.signing_payload()

    def test_verifies(self, owner_keys: Keys) -> None:
        assert verify_record_signature(sign_record(_record(owner_keys), owner_keys))

    def test_npub_owner(self, owner_keys: Keys) -> None:
        record = _record(owner_keys, owner=owner_keys.public_key().to_bech32())
        assert verify_record_signature(sign_record(record, owner_keys))

    def test_wrong_key_rejected(self, owner_keys: Keys) -> None:
        with pytest.raises(SignatureError, match="does not match owner"):
            sign_record(_record(owner_keys), Keys.generate())

    def test_non_key_owner_rejected(self, owner_keys: Keys) -> None:
        with pytest.raises(SignatureError):
            sign_record(_record(owner_keys, owner="did:key:carol"), owner_keys)


class TestVerifyRecordSignature:
    def test_unsigned(self, owner_keys: Keys) -> None:
        assert not verify_record_signature(_record(owner_keys))

    def test_malformed(self, owner_keys: Keys) -> None:
        assert not verify_record_signature(_record(owner_keys).with_signature("not-an-event"))

    def test_non_key_owner(self, owner_keys: Keys) -> None:
        signed = sign_record(_record(owner_keys), owner_keys)
        foreign = NetworkRecord(
            network=signed.network,
            owner="did:key:carol",
            subdomains=dict(signed.subdomains),
            timestamp=signed.timestamp,
            signature=signed.signature,
        )
        assert not verify_record_signature(foreign)

    def test_content_changed(self, owner_keys: Keys) -> None:
        signed = sign_record(_record(owner_keys), owner_keys)
        edited = signed.with_subdomain(".evil", "https://evil.example", now=1)
        assert not verify_record_signature(edited.with_signature(signed.signature or ""))

    def test_other_author(self, owner_keys: Keys) -> None:
        mallory = Keys.generate()
        theirs = sign_record(_record(mallory), mallory)
        mine = _record(owner_keys).with_signature(theirs.signature or "")
        assert not verify_record_signature(mine)

    def test_forged_event(self, owner_keys: Keys) -> None:
        signed = sign_record(_record(owner_keys), owner_keys)
        event = json.loads(signed.signature or "")
        event["sig"] = "0" * 128
        assert not verify_record_signature(signed.with_signature(json.dumps(event)))
