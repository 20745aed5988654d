"""Owner key loading and network record signing.

A record signature is the JSON of a signed Nostr event (kind 30078, NIP-78
application data) whose content is the record's
[signing_payload()][uns.models.record.NetworkRecord.signing_payload]. The
event's author must be the record owner, so a signature carries both the
proof and the identity it proves.

Keys are loaded from environment variables and never from configuration
files. Both ``nsec1`` (bech32) and 64-character hex private keys are
accepted.

Examples:
    ```python
    keys = load_keys_from_env("UNS_PRIVATE_KEY")
    record = NetworkRecord(network="alice", owner=keys.public_key().to_hex())
    signed = sign_record(record, keys)
    verify_record_signature(signed)  # True
    ```
"""

from __future__ import annotations

import logging
import os
from typing import Any

from nostr_sdk import Event, EventBuilder, Keys, Kind, PublicKey
from pydantic import BaseModel, Field, model_validator

from uns.exceptions import SignatureError
from uns.models.constants import EventKind
from uns.models.record import NetworkRecord


logger = logging.getLogger("uns.utils.keys")

# Environment variable holding the owner private key (default used by KeysConfig)
ENV_PRIVATE_KEY = "UNS_PRIVATE_KEY"  # pragma: allowlist secret


def load_keys_from_env(env_var: str = ENV_PRIVATE_KEY) -> Keys:
    """Load Nostr keys from an environment variable.

    Args:
        env_var: Name of the variable holding an ``nsec1`` or hex private key.

    Raises:
        ValueError: If the variable is not set or is empty.
        nostr_sdk.NostrError: If the key value is malformed.
    """
    value = os.getenv(env_var)

    if not value:
        raise ValueError(
            f"{env_var} environment variable is required. Generate one with: openssl rand -hex 32"
        )

    return Keys.parse(value)


class KeysConfig(BaseModel):
    """Configuration holding the owner keys used by registry write commands.

    Keys are loaded from ``UNS_PRIVATE_KEY`` during validation unless
    passed explicitly.

    Raises:
        ValueError: If no keys are given and the variable is not set.
    """

    model_config = {"arbitrary_types_allowed": True}

    keys: Keys = Field(description="Keys loaded from UNS_PRIVATE_KEY env (required)")

    @model_validator(mode="before")
    @classmethod
    def _load_keys_from_env(cls, data: Any) -> Any:
        if isinstance(data, dict) and "keys" not in data:
            data["keys"] = load_keys_from_env(ENV_PRIVATE_KEY)
        return data


def _owner_hex(owner: str) -> str | None:
    """Normalize an owner reference (hex or ``npub1``) to hex, if it is a public key."""
    try:
        return PublicKey.parse(owner).to_hex()
    except Exception:  # noqa: BLE001 -- nostr_sdk raises its own error type for bad keys
        return None


def sign_record(record: NetworkRecord, keys: Keys) -> NetworkRecord:
    """Return a copy of *record* signed by *keys*.

    Raises:
        SignatureError: If *keys* do not belong to the record owner.
    """
    signer = keys.public_key().to_hex()
    if _owner_hex(record.owner) != signer:
        raise SignatureError(
            f"Signing key {signer} does not match owner {record.owner}",
            network=record.network,
        )

    event = EventBuilder(Kind(EventKind.APP_DATA), record.signing_payload()).sign_with_keys(keys)
    return record.with_signature(event.as_json())


def verify_record_signature(record: NetworkRecord) -> bool:
    """Check that *record* carries a valid signature by its owner.

    The signature must parse as a Nostr event, verify, be authored by the
    owner, and sign exactly the record's signing payload.
    """
    if not record.signature:
        return False

    owner = _owner_hex(record.owner)
    if owner is None:
        logger.debug("signature_owner_invalid network=%s", record.network)
        return False

    try:
        event = Event.from_json(record.signature)
    except Exception:  # noqa: BLE001 -- malformed signatures simply fail verification
        logger.debug("signature_unparsable network=%s", record.network)
        return False

    if not event.verify():
        logger.debug("signature_invalid network=%s", record.network)
        return False
    if event.author().to_hex() != owner:
        logger.debug("signature_wrong_author network=%s", record.network)
        return False
    return event.content() == record.signing_payload()
