"""Plutus script helpers."""

import cbor2


def apply_double_cbor_encoding(script: str) -> str:
    """
    Make sure a script is CBOR encoded twice (bytes of bytes of flat program).

    Already double-encoded scripts are returned unchanged, anything else is
    wrapped once more.
    """
    raw = bytes.fromhex(script)
    try:
        inner = cbor2.loads(raw)
        if isinstance(inner, bytes) and isinstance(cbor2.loads(inner), bytes):
            return script
    except (cbor2.CBORDecodeError, ValueError):
        pass
    return cbor2.dumps(raw).hex()
