# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import ipaddress
import string
import typing

from .errors import InvalidAddress, SuffixTooLarge

ADDRESS_BYTES = 16
HEXTETS = 8
SUFFIX_BYTES = 9

COMPRESSION = '::'

HEX_DIGITS = set(string.hexdigits)


def normalise_ip_address(ip: str):
    return ipaddress.ip_address(ip).compressed


def split_tokens(text: str) -> typing.Tuple[typing.List[str], typing.List[str], bool]:
    """
    Split address text on the (single) '::' marker.

    Returns the left tokens, the right tokens and whether a marker was seen.
    """
    parts = text.split(COMPRESSION)
    if len(parts) > 2:
        raise InvalidAddress('More than one "::" in {!r}'.format(text))
    left = parts[0].split(':') if parts[0] else []
    right = parts[1].split(':') if len(parts) == 2 and parts[1] else []
    for token in left + right:
        if not 1 <= len(token) <= 4 or not set(token) <= HEX_DIGITS:
            raise InvalidAddress('Invalid hex token {!r} in {!r}'.format(token, text))
    return left, right, len(parts) == 2


def parse(text: str) -> bytes:
    if '.' in text:
        raise InvalidAddress('IPv6 with embedded IPv4 not supported: {!r}'.format(text))
    left, right, compressed = split_tokens(text)
    missing = HEXTETS - (len(left) + len(right))
    if missing < 0 or (compressed and missing == 0) or (not compressed and missing != 0):
        raise InvalidAddress('{!r} does not expand to {} hextets'.format(text, HEXTETS))
    hextets = [int(token, 16) for token in left] + [0] * missing + [int(token, 16) for token in right]
    return b''.join(hextet.to_bytes(2, 'big') for hextet in hextets)


def serialize(data: bytes) -> str:
    if len(data) != ADDRESS_BYTES:
        raise InvalidAddress('Expected {} bytes, got {}'.format(ADDRESS_BYTES, len(data)))
    hextets = [int.from_bytes(data[i:i + 2], 'big') for i in range(0, ADDRESS_BYTES, 2)]

    # Longest run of zero hextets, the first one wins a tie
    best_start, best_length = -1, 0
    run_start, run_length = -1, 0
    for index, hextet in enumerate(hextets + [None]):
        if hextet == 0:
            if run_length == 0:
                run_start = index
            run_length += 1
            continue
        if run_length > best_length:
            best_start, best_length = run_start, run_length
        run_length = 0

    text = ['{:x}'.format(hextet) for hextet in hextets]
    if best_length < 2:
        return ':'.join(text)
    left = ':'.join(text[:best_start])
    right = ':'.join(text[best_start + best_length:])
    return left + COMPRESSION + right


def tokens_to_bytes(tokens: typing.List[str]) -> bytes:
    # One or two digits make a byte, three or four make two
    result = b''
    for token in tokens:
        if len(token) % 2:
            token = '0' + token
        result += bytes.fromhex(token)
    return result


def parse_partial(text: str) -> bytes:
    if not text:
        return bytes(SUFFIX_BYTES)
    left, right, _ = split_tokens(text)
    left_bytes = tokens_to_bytes(left)
    right_bytes = tokens_to_bytes(right)
    total = len(left_bytes) + len(right_bytes)
    if total > SUFFIX_BYTES:
        raise SuffixTooLarge('Suffix {!r} expands to {} bytes > {} bytes allowed'.format(
            text, total, SUFFIX_BYTES
        ))
    return left_bytes + bytes(SUFFIX_BYTES - total) + right_bytes
