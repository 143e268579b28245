"""Binary encoding of socket addresses: a family byte, the address, and a port."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import replace
from typing import Any, Mapping, Optional

from .buffer import Buffer
from .exceptions import cause
from .socksaddr import AddressFamily, Socksaddr, parse_socksaddr_host_port

MAX_SOCKSADDR_LENGTH = 2 + 255 + 2
MAX_IP_SOCKSADDR_LENGTH = 1 + 16 + 2


def _read_exact(reader: Any, n: int) -> bytes:
    data = bytearray()
    while len(data) < n:
        chunk = reader.read(n - len(data))
        if not chunk:
            raise EOFError("unexpected EOF" if data else "EOF")
        data += chunk
    return bytes(data)


def read_socks_string(reader: Any) -> str:
    """Read a string preceded by its one-byte length."""
    length = _read_exact(reader, 1)[0]
    return _read_exact(reader, length).decode("utf-8", "surrogateescape")


def write_socks_string(buffer: Buffer, text: str) -> None:
    """Write a string preceded by its one-byte length; at most 255 bytes."""
    data = text.encode("utf-8", "surrogateescape")
    if len(data) > 255:
        raise ValueError("fqdn too long")
    buffer.write_byte(len(data))
    buffer.write(data)


class Serializer:
    """Reads and writes addresses using a chosen byte for each address family."""

    def __init__(
        self,
        family_bytes: Optional[Mapping[int, AddressFamily]] = None,
        port_first: bool = False,
    ) -> None:
        self._family_map: dict[int, AddressFamily] = dict(family_bytes or {})
        self._family_byte_map: dict[AddressFamily, int] = {
            family: value for value, family in self._family_map.items()
        }
        self.port_first = port_first

    def write_address(self, buffer: Buffer, addr: Socksaddr) -> None:
        if addr.is_ipv4():
            family = AddressFamily.IPV4
        elif addr.is_ipv6():
            family = AddressFamily.IPV6
        else:
            family = AddressFamily.FQDN
        buffer.write_byte(self._family_byte_map.get(family, 0))
        if addr.addr is not None:
            buffer.write(addr.addr.packed)
        else:
            write_socks_string(buffer, addr.fqdn)

    def address_len(self, addr: Socksaddr) -> int:
        if addr.is_ipv4():
            return 5
        if addr.is_ipv6():
            return 17
        return 2 + len(addr.fqdn.encode("utf-8", "surrogateescape"))

    def write_port(self, writer: Any, port: int) -> None:
        writer.write(struct.pack(">H", port))

    def write_addr_port(self, writer: Any, destination: Socksaddr) -> None:
        """Write address and port, in the configured order, to a Buffer or any writer."""
        if isinstance(writer, Buffer):
            self._write_addr_port_into(writer, destination)
            return
        with Buffer.new_size(self.addr_port_len(destination)) as buffer:
            self._write_addr_port_into(buffer, destination)
            writer.write(bytes(buffer.bytes()))

    def _write_addr_port_into(self, buffer: Buffer, destination: Socksaddr) -> None:
        if self.port_first:
            self.write_port(buffer, destination.port)
            self.write_address(buffer, destination)
        else:
            self.write_address(buffer, destination)
            self.write_port(buffer, destination.port)

    def addr_port_len(self, destination: Socksaddr) -> int:
        return self.address_len(destination) + 2

    def read_address(self, reader: Any) -> Socksaddr:
        """Read a family byte and the address that follows; the port is left 0."""
        family_byte = _read_exact(reader, 1)[0]
        family = self._family_map.get(family_byte)
        if family is AddressFamily.FQDN:
            try:
                fqdn = read_socks_string(reader)
            except EOFError as err:
                raise cause(err, "read fqdn") from err
            return parse_socksaddr_host_port(fqdn, 0)
        if family is AddressFamily.IPV4:
            try:
                raw = _read_exact(reader, 4)
            except EOFError as err:
                raise cause(err, "read ipv4 address") from err
            return Socksaddr(ipaddress.IPv4Address(raw))
        if family is AddressFamily.IPV6:
            try:
                raw = _read_exact(reader, 16)
            except EOFError as err:
                raise cause(err, "read ipv6 address") from err
            return Socksaddr(ipaddress.IPv6Address(raw)).unwrap()
        raise ValueError(f"unknown address family: {family_byte}")

    def read_port(self, reader: Any) -> int:
        try:
            raw = _read_exact(reader, 2)
        except EOFError as err:
            raise cause(err, "read port") from err
        return struct.unpack(">H", raw)[0]

    def read_addr_port(self, reader: Any) -> Socksaddr:
        """Read address and port in the configured order."""
        if self.port_first:
            port = self.read_port(reader)
            addr = self.read_address(reader)
        else:
            addr = self.read_address(reader)
            port = self.read_port(reader)
        return replace(addr, port=port)


SOCKSADDR_SERIALIZER = Serializer(
    {
        0x01: AddressFamily.IPV4,
        0x04: AddressFamily.IPV6,
        0x03: AddressFamily.FQDN,
    }
)