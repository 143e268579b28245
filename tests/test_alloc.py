import pytest

from singcommon.alloc import Allocator, get, make, put


@pytest.mark.parametrize("size", [1, 2, 3, 100, 1024, 1025, 40000, 65536])
def test_get_returns_requested_length_with_power_of_two_capacity(size):
    view = get(size)
    capacity = len(view.obj)
    assert len(view) == size
    assert capacity >= size
    assert capacity & (capacity - 1) == 0
    assert capacity < 2 * size or capacity == size


@pytest.mark.parametrize("size", [0, -1, 65537])
def test_get_rejects_bad_sizes(size):
    with pytest.raises(ValueError, match="alloc bad size"):
        get(size)


def test_get_error_message_names_size():
    with pytest.raises(ValueError) as info:
        Allocator().get(0)
    assert str(info.value) == "alloc bad size: 0"


@pytest.mark.parametrize("block", [bytearray(3), bytearray(0), bytearray(131072), b"\x00\x00"])
def test_put_rejects_wrong_capacity(block):
    with pytest.raises(ValueError, match="incorrect buffer size"):
        put(block)


def test_put_then_get_reuses_block():
    allocator = Allocator()
    first = allocator.get(100)
    first[0] = 7
    allocator.put(first)
    again = allocator.get(100)
    assert again.obj is first.obj
    assert len(again) == 100


def test_put_accepts_plain_power_of_two_bytearray():
    allocator = Allocator()
    block = bytearray(256)
    allocator.put(block)
    assert allocator.get(200).obj is block


def test_make_rounds_capacity_up():
    view = make(3)
    assert len(view) == 3
    assert len(view.obj) == 4


def test_make_top_class_and_beyond():
    assert len(make(40000).obj) == 65535
    big = make(70000)
    assert len(big) == 70000
    assert len(big.obj) == 70000


def test_make_zero_and_negative():
    assert len(make(0)) == 0
    with pytest.raises(ValueError):
        make(-5)