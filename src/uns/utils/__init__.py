"""HTTP transport and owner key management.

The utils layer sits in the middle of the diamond DAG, depending only on
[uns.models][uns.models] and [uns.exceptions][uns.exceptions]. It provides
the low-level network and cryptographic helpers used by
[uns.registries][uns.registries] and [uns.services][uns.services].

Attributes:
    http: Bounded JSON reading and the remote resolver ``GET /resolve``
        call.
    keys: Owner key loading from environment variables (nsec1 bech32 or
        hex) and Nostr-event signatures over network records.

Note:
    The utils layer has **zero** imports from ``uns.core`` or
    ``uns.services``.

Examples:
    ```python
    from uns.utils.http import fetch_resolution
    from uns.utils.keys import KeysConfig, sign_record
    ```
"""
