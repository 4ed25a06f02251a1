"""Blockfrost REST backend."""

from .client import BlockfrostClient
from .provider import BlockfrostProvider
from .schema import decode_response

__all__ = ["BlockfrostClient", "BlockfrostProvider", "decode_response"]
