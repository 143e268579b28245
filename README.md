# singcommon

Small utilities for network proxy software. The package uses only the standard library.

## Modules

- `singcommon.format`: `to_string` joins strings, booleans, integers, errors and objects with their own `__str__` into one message. `None` becomes `"nil"` and any other kind raises `TypeError`. The module also has `map_to_string` and `seconds`.
- `singcommon.exceptions`: `CauseError` ("message: cause"), `ExtendedError` ("cause: message") and `MultiError` (members joined with `" | "`). The helpers are `new_error`, `cause`, `extend` and `join_errors`. `join_errors` drops `None` and repeated messages, then returns `None`, the single error, or a `MultiError`. The rest are `expand`, `expand_all`, `append_error`, `unwrap`, `cast`, `is_multi`, `is_timeout`, `is_closed`, `is_canceled` and `is_closed_or_canceled`. `is_multi` accepts exception classes, exception instances or errno numbers as targets.
- `singcommon.cond`: collection helpers `find`, `flat_map`, `filter_not_none`, `filter_not_default`, `uniq`, `uniq_by`, `sort_by`, `min_by`, `max_by` and `reverse`. It also has `closer` and `CloseWrapper`, which turn a function into a closable object. `close_all` closes every object it is given and re-raises the last error. `start_all` calls `start()` on each object and stops at the first failure.
- `singcommon.alloc`: `Allocator` hands out views over pooled blocks of 2**n bytes, up to 64 KiB. The module also has `get`, `put` and `make`.
- `singcommon.buffer`: `Buffer` is a window over a byte block, with room in front for headers. It has read and write cursors, reference counting and `release()`, which returns pooled storage; the `with` statement calls `release()` on exit. Constructors are `Buffer.new`, `new_packet`, `new_size`, `wrap` and `with_data`. When a buffer has no room left, methods raise `ShortBufferError`. The module also has `len_multi`, `to_slice_multi`, `copy_multi`, `release_multi` and `encode_hex_string`.
- `singcommon.batch`: `Batch` runs keyed functions on threads, with an optional limit on how many run at once. It records a `Result` for every key. `wait()` raises the first failure as a `BatchError`. `wait_and_get_result()` returns the results together with that error.
- `singcommon.auth`: `User`, `Authenticator` and `new_authenticator`. `new_authenticator` returns `None` when the user list is empty.
- `singcommon.socksaddr`: `Socksaddr` holds a port with either an IP address or a domain name. The module also has `Metadata`, the `AddressFamily` enum and the helpers `parse_socksaddr`, `parse_socksaddr_host_port`, `parse_socksaddr_host_port_str`, `parse_addr`, `socksaddr_from`, `is_domain_name` and `network_from_addr`.
- `singcommon.serializer`: `Serializer` reads and writes a family byte, an address and a port, with the port first if you ask for it. `SOCKSADDR_SERIALIZER` uses the SOCKS family bytes. The module also has `read_socks_string` and `write_socks_string`.
- `singcommon.abx`: `Reader` and `new_reader` turn an ABX binary XML document into `StartElement`, `EndElement`, `CharData`, `Directive` and `Comment` tokens. Malformed data raises `AbxError`.
- `singcommon.domain`: `Matcher` matches names exactly against a domain list, or by their ending against a suffix list. It is built on `SuccinctSet`, a compact trie.
- `singcommon.lrucache`: `LruCache` is a thread-safe LRU cache. It takes an optional maximum age in seconds, a maximum size, refresh-on-read, stale reads and an eviction callback.
- `singcommon.canceler`: `Instance` is an idle timer. It calls a cancel function once the timeout passes without `update()`, or when it is closed.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from singcommon.auth import User, new_authenticator
from singcommon.buffer import Buffer
from singcommon.domain import Matcher
from singcommon.lrucache import LruCache
from singcommon.serializer import SOCKSADDR_SERIALIZER
from singcommon.socksaddr import parse_socksaddr

matcher = Matcher(["example.com"], ["example.org"])
assert matcher.match("example.com")
assert matcher.match("www.example.org")

addr = parse_socksaddr("[::1]:1080")
print(addr.addr_string(), addr.port)  # ::1 1080

with Buffer.new_size(32) as buffer:
    SOCKSADDR_SERIALIZER.write_addr_port(buffer, parse_socksaddr("127.0.0.1:80"))
    assert bytes(buffer.bytes()) == b"\x01\x7f\x00\x00\x01\x00P"

cache = LruCache(max_size=2)
for key, value in [("a", 1), ("b", 2), ("c", 3)]:
    cache.store(key, value)
assert cache.items() == [("b", 2), ("c", 3)]

password = "password"
auth = new_authenticator([User("alice", password)])
assert auth.verify("alice", password)
```

## What it does not do

The package holds only the building blocks listed above. It opens no sockets, and it has no connection wrappers or stream-copying helpers. It sets no socket options, runs no proxy server or client, and provides no command-line program.