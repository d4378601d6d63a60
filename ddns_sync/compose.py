# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

from . import ip
from .errors import InvalidAddress

PREFIX_BYTES = 7

POOL_PREFIX_LENGTH = '/120'


def compose(address: bytes, suffix: str) -> bytes:
    """
    Build a full address from the 56 bit prefix of `address`
    and the configured `suffix` (which fills the remaining 9 bytes).
    """
    if len(address) < PREFIX_BYTES:
        raise InvalidAddress('Need at least {} prefix bytes, got {}'.format(PREFIX_BYTES, len(address)))
    return bytes(address[:PREFIX_BYTES]) + ip.parse_partial(suffix)


def network_address(prefix: bytes, suffix: str) -> str:
    # The host byte is left as configured, the pool gets the literal address
    return ip.serialize(compose(prefix, suffix)) + POOL_PREFIX_LENGTH


def compose_text(address: str, suffix: str) -> str:
    return ip.serialize(compose(ip.parse(address), suffix))
