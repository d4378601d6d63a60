from __future__ import annotations

import pytest

from ddns_sync import ip
from ddns_sync.compose import compose, compose_text, network_address
from ddns_sync.errors import InvalidAddress, SuffixTooLarge


def test_compose_keeps_seven_prefix_bytes() -> None:
    address = ip.parse("2001:0db8:0000:0000:0000:0000:0000:0001")
    assert address[:7] == bytes.fromhex("20010db8000000")
    composed = compose(address, "::1")
    assert len(composed) == 16
    assert composed == address
    assert ip.serialize(composed) == "2001:db8::1"


def test_compose_replaces_everything_after_the_prefix() -> None:
    composed = compose(ip.parse("2001:db8:1:2345:6789:abcd:ef01:2345"), "::1")
    assert ip.serialize(composed) == "2001:db8:1:2300::1"


def test_compose_suffix_starts_at_byte_seven() -> None:
    composed = compose(ip.parse("2001:db8:aaaa:bbbb::"), "de")
    assert ip.serialize(composed) == "2001:db8:aaaa:bbde::"


def test_compose_accepts_bare_prefix() -> None:
    prefix = ip.parse("2a01:e0a:1:2::")[:7]
    assert ip.serialize(compose(prefix, "::1:2")) == "2a01:e0a:1::102"


def test_compose_rejects_short_prefix() -> None:
    with pytest.raises(InvalidAddress):
        compose(bytes(6), "::1")


def test_compose_propagates_suffix_errors() -> None:
    with pytest.raises(SuffixTooLarge):
        compose(bytes(16), "1234:5678:9abc:def0:1234")


def test_network_address_appends_prefix_length() -> None:
    prefix = ip.parse("2001:db8::abcd")[:7]
    assert network_address(prefix, "de::") == "2001:db8:0:de::/120"


def test_network_address_keeps_host_byte() -> None:
    prefix = ip.parse("2001:db8::abcd")[:7]
    assert network_address(prefix, "::1") == "2001:db8::1/120"


def test_compose_text() -> None:
    assert compose_text("2001:db8::abcd", "::1") == "2001:db8::1"
