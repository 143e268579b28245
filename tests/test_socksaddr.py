import ipaddress

import pytest

from singcommon.socksaddr import (
    Metadata,
    Socksaddr,
    is_domain_name,
    network_from_addr,
    parse_addr,
    parse_socksaddr,
    parse_socksaddr_host_port,
    parse_socksaddr_host_port_str,
    socksaddr_from,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("example.com", True),
        (".", True),
        ("", False),
        ("12345", False),
        ("a-.com", False),
        ("-a.com", False),
        ("a..b", False),
        ("under_score.example.com", True),
        ("bad name.com", False),
        ("a" * 63 + ".com", True),
        ("a" * 64 + ".com", False),
    ],
)
def test_is_domain_name(name, expected):
    assert is_domain_name(name) is expected


def test_parse_ipv4():
    addr = parse_socksaddr("1.2.3.4:80")
    assert addr == Socksaddr(ipaddress.IPv4Address("1.2.3.4"), 80)
    assert addr.is_ipv4() and not addr.is_ipv6()


def test_parse_ipv6_brackets():
    addr = parse_socksaddr("[::1]:443")
    assert addr.addr == ipaddress.IPv6Address("::1")
    assert addr.port == 443
    assert addr.is_ipv6()


def test_parse_fqdn():
    addr = parse_socksaddr("example.com:8080")
    assert addr.fqdn == "example.com"
    assert addr.port == 8080
    assert addr.is_fqdn() and not addr.is_ip()


def test_parse_without_port():
    assert parse_socksaddr("example.com") == Socksaddr(fqdn="example.com")
    assert parse_socksaddr("[::1]").addr == ipaddress.IPv6Address("::1")


def test_parse_bad_port_is_zero():
    assert parse_socksaddr_host_port_str("example.com", "abc").port == 0


def test_parse_host_port_ip_and_name():
    assert parse_socksaddr_host_port("10.0.0.1", 22).addr == ipaddress.IPv4Address("10.0.0.1")
    assert parse_socksaddr_host_port("example.com", 22).fqdn == "example.com"


def test_parse_addr():
    assert parse_addr("[::1]") == ipaddress.IPv6Address("::1")
    assert parse_addr("example.com") is None


@pytest.mark.parametrize("text", ["1.2.3.4:80", "[::1]:53", "example.com:443"])
def test_string_round_trip(text):
    addr = parse_socksaddr(text)
    assert str(addr) == text
    assert parse_socksaddr(str(addr)) == addr


def test_unwrap_mapped():
    mapped = Socksaddr(ipaddress.IPv6Address("::ffff:1.2.3.4"), 80)
    assert mapped.is_ipv6()
    unwrapped = mapped.unwrap()
    assert unwrapped == Socksaddr(ipaddress.IPv4Address("1.2.3.4"), 80)
    assert unwrapped.unwrap() == unwrapped


def test_check_bad_addr():
    with pytest.raises(ValueError):
        Socksaddr(ipaddress.IPv6Address("::ffff:1.2.3.4"), 1).check_bad_addr()
    with pytest.raises(ValueError):
        Socksaddr(ipaddress.IPv4Address("1.2.3.4"), 1, "example.com").check_bad_addr()


def test_validity_and_network():
    empty = Socksaddr()
    assert not empty.is_valid()
    assert empty.network() == "socks"
    assert socksaddr_from(ipaddress.IPv4Address("1.1.1.1"), 5).is_valid()


def test_port_range():
    with pytest.raises(ValueError):
        Socksaddr(port=70000)


def test_network_from_addr():
    assert network_from_addr("udp", ipaddress.IPv4Address("0.0.0.0")) == "udp4"
    assert network_from_addr("udp", ipaddress.IPv4Address("1.1.1.1")) == "udp"
    assert network_from_addr("tcp", None) == "tcp"


def test_metadata_defaults():
    meta = Metadata(protocol="socks")
    assert meta.protocol == "socks"
    assert meta.source == Socksaddr()
    assert not meta.destination.is_valid()