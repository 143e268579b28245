"""Socket addresses that carry either an IP address or a domain name, with parsing helpers."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_PORT_PATTERN = re.compile(r"[+-]?[0-9]+")
_IPV4_UNSPECIFIED = ipaddress.IPv4Address("0.0.0.0")


class AddressFamily(IntEnum):
    """Address kinds, numbered as in the SOCKS protocol."""

    IPV4 = 0x01
    FQDN = 0x03
    IPV6 = 0x04


def is_domain_name(domain: str) -> bool:
    """Tell whether domain is a syntactically valid DNS name.

    Labels are letters, digits, '_' and '-', at most 63 bytes each, and the name
    must hold at least one non-digit. The root name "." is valid.
    """
    if domain == ".":
        return True
    data = domain.encode("utf-8", "surrogateescape")
    length = len(data)
    if length == 0 or length > 254 or (length == 254 and data[-1] != ord(".")):
        return False
    last = ord(".")
    non_numeric = False
    part_len = 0
    for c in data:
        if ord("a") <= c <= ord("z") or ord("A") <= c <= ord("Z") or c == ord("_"):
            non_numeric = True
            part_len += 1
        elif ord("0") <= c <= ord("9"):
            part_len += 1
        elif c == ord("-"):
            if last == ord("."):
                return False
            part_len += 1
            non_numeric = True
        elif c == ord("."):
            if last in (ord("."), ord("-")):
                return False
            if part_len > 63 or part_len == 0:
                return False
            part_len = 0
        else:
            return False
        last = c
    if last == ord("-") or part_len > 63:
        return False
    return non_numeric


@dataclass(frozen=True)
class Socksaddr:
    """A port together with an IP address or a domain name."""

    addr: Optional[IPAddress] = None
    port: int = 0
    fqdn: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")

    def network(self) -> str:
        return "socks"

    def is_ip(self) -> bool:
        return self.addr is not None

    def is_ipv4(self) -> bool:
        return isinstance(self.addr, ipaddress.IPv4Address)

    def is_ipv6(self) -> bool:
        return isinstance(self.addr, ipaddress.IPv6Address)

    def _is_4in6(self) -> bool:
        return isinstance(self.addr, ipaddress.IPv6Address) and self.addr.ipv4_mapped is not None

    def unwrap(self) -> "Socksaddr":
        """Turn an IPv4-mapped IPv6 address into the plain IPv4 address."""
        if isinstance(self.addr, ipaddress.IPv6Address) and self.addr.ipv4_mapped is not None:
            return Socksaddr(self.addr.ipv4_mapped, self.port)
        return self

    def is_fqdn(self) -> bool:
        return is_domain_name(self.fqdn)

    def is_valid(self) -> bool:
        return self.is_ip() or self.is_fqdn()

    def addr_string(self) -> str:
        """The IP address in text form, or the domain name."""
        if self.addr is not None:
            return str(self.addr)
        return self.fqdn

    def check_bad_addr(self) -> None:
        """Raise ValueError for a mapped address or one holding both an IP and a name."""
        if self._is_4in6() or (self.addr is not None and self.fqdn != ""):
            raise ValueError("bad socksaddr")

    def __str__(self) -> str:
        host = self.addr_string()
        if ":" in host:
            host = f"[{host}]"
        return f"{host}:{self.port}"


@dataclass(frozen=True)
class Metadata:
    """Protocol name with the source and destination of a connection."""

    protocol: str = ""
    source: Socksaddr = field(default_factory=Socksaddr)
    destination: Socksaddr = field(default_factory=Socksaddr)


def _unwrap_ipv6_address(address: str) -> str:
    if len(address) > 2 and address[0] == "[" and address[-1] == "]":
        return address[1:-1]
    return address


def _split_host_port(hostport: str) -> tuple[str, str]:
    i = hostport.rfind(":")
    if i < 0:
        raise ValueError(f"missing port in address: {hostport}")
    j = k = 0
    if hostport[0] == "[":
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address: {hostport}")
        if end + 1 == len(hostport):
            raise ValueError(f"missing port in address: {hostport}")
        if end + 1 != i:
            if hostport[end + 1] == ":":
                raise ValueError(f"too many colons in address: {hostport}")
            raise ValueError(f"missing port in address: {hostport}")
        host = hostport[1:end]
        j, k = 1, end + 1
    else:
        host = hostport[:i]
        if ":" in host:
            raise ValueError(f"too many colons in address: {hostport}")
    if "[" in hostport[j:]:
        raise ValueError(f"unexpected '[' in address: {hostport}")
    if "]" in hostport[k:]:
        raise ValueError(f"unexpected ']' in address: {hostport}")
    return host, hostport[i + 1:]


def _parse_ip(text: str) -> Optional[IPAddress]:
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def parse_addr(address: str) -> Optional[IPAddress]:
    """Parse an IP address, allowing IPv6 in brackets; None when it is not one."""
    return _parse_ip(_unwrap_ipv6_address(address))


def parse_socksaddr_host_port(host: str, port: int) -> Socksaddr:
    """Build an address from a host that is an IP address or otherwise a name."""
    port &= 0xFFFF
    ip = parse_addr(host)
    if ip is None:
        return Socksaddr(fqdn=host, port=port)
    return Socksaddr(ip, port)


def parse_socksaddr_host_port_str(host: str, port_str: str) -> Socksaddr:
    """Like parse_socksaddr_host_port; a port that is not a number counts as 0."""
    port = int(port_str) if _PORT_PATTERN.fullmatch(port_str) else 0
    return parse_socksaddr_host_port(host, port)


def parse_socksaddr(address: str) -> Socksaddr:
    """Parse 'host:port' or '[v6]:port'; without a port the whole text is the host."""
    try:
        host, port = _split_host_port(address)
    except ValueError:
        return parse_socksaddr_host_port(address, 0)
    return parse_socksaddr_host_port_str(host, port)


def socksaddr_from(addr: IPAddress, port: int) -> Socksaddr:
    return Socksaddr(addr, port)


def network_from_addr(network: str, addr: Optional[IPAddress]) -> str:
    """Append '4' to the network name when addr is the unspecified IPv4 address."""
    if addr == _IPV4_UNSPECIFIED:
        return network + "4"
    return network