#!/usr/bin/env python3
"""
Test script for the serialization bridge and its frame format.
"""

import io
import struct
import threading
from dataclasses import dataclass

from memdbgvis.core.bridge import decode_payload, hex_dump, object_to_bytes
from memdbgvis.core.protocol import FRAME_HEADER_FMT, FRAME_MAGIC, IO_ERROR_MESSAGE, NOT_SERIALIZABLE_MESSAGE
from memdbgvis.core.types import PayloadStatus


@dataclass
class Point:
    x: int
    y: int
    label: str = ""


class FailingBuffer(io.BytesIO):
    def write(self, data):
        raise OSError("device full")


def test_plain_object_recoverable():
    """Plain data comes back intact"""
    print("=== Test 1: Plain Object ===")
    original = {"points": [Point(1, 2, "a"), Point(3, 4)], "ratio": 0.5, "raw": b"\x00\x01", "none": None}
    payload = decode_payload(object_to_bytes(original))
    assert payload.ok
    assert payload.status == PayloadStatus.OK
    assert payload.load() == original
    print("✓ Plain object recoverable\n")


def test_not_serializable_sentinel():
    """Unpicklable objects produce the not-serializable sentinel"""
    print("=== Test 2: Not Serializable ===")

    def local_function():
        pass

    for obj in (threading.Lock(), lambda: None, local_function, {"nested": [threading.Lock()]}):
        payload = decode_payload(object_to_bytes(obj))
        assert payload.status == PayloadStatus.NOT_SERIALIZABLE, (obj, payload.status)
        assert payload.body == NOT_SERIALIZABLE_MESSAGE
        assert not payload.ok
    print("✓ Sentinel for unpicklable objects\n")


def test_io_error_sentinel():
    """An I/O fault on the buffer produces the I/O sentinel"""
    print("=== Test 3: I/O Error ===")
    payload = decode_payload(object_to_bytes({"a": 1}, buffer=FailingBuffer()))
    assert payload.status == PayloadStatus.IO_ERROR
    assert payload.body == IO_ERROR_MESSAGE

    closed = io.BytesIO()
    closed.close()
    assert decode_payload(object_to_bytes([1, 2, 3], buffer=closed)).status == PayloadStatus.IO_ERROR
    print("✓ Sentinel for I/O faults\n")


def test_sentinel_text_is_not_ambiguous():
    """Serializing the sentinel text itself is still a genuine payload"""
    print("=== Test 4: Sentinel Lookalike ===")
    payload = decode_payload(object_to_bytes(NOT_SERIALIZABLE_MESSAGE))
    assert payload.ok
    assert payload.load() == NOT_SERIALIZABLE_MESSAGE

    error = decode_payload(object_to_bytes(threading.Lock()))
    try:
        error.load()
    except ValueError:
        pass
    else:
        raise AssertionError("load() on a sentinel payload should raise")
    print("✓ Sentinels are tagged\n")


def test_malformed_frames_rejected():
    print("=== Test 5: Malformed Frames ===")
    good = object_to_bytes("hello")
    bad_frames = [
        b"",
        good[:5],
        b"XXXX" + good[4:],
        good[:4] + b"\x09" + good[5:],
        good + b"extra",
        good[:-1],
        struct.pack(FRAME_HEADER_FMT, FRAME_MAGIC, 1, 7, 0),
    ]
    for frame in bad_frames:
        try:
            decode_payload(frame)
        except ValueError:
            continue
        raise AssertionError(f"frame accepted: {frame!r}")
    print("✓ Malformed frames rejected\n")


def test_hex_dump():
    print("=== Test 6: Hex Dump ===")
    assert hex_dump(b"") == ""
    assert hex_dump(b"\x00\xff\x10A") == "00 ff 10 41"
    print("✓ Hex dump works\n")


class RefusesReduce:
    def __reduce__(self):
        raise RuntimeError("cannot reduce")


class RefusesState:
    def __getstate__(self):
        raise KeyError("state")


class Unfinished:
    def __reduce_ex__(self, protocol):
        raise NotImplementedError


def test_object_hooks_raising():
    """Errors from the object's own pickling hooks stay inside the bridge"""
    print("=== Test 7: Raising Pickling Hooks ===")
    for obj in (RefusesReduce(), RefusesState(), Unfinished(), [1, RefusesReduce()]):
        payload = decode_payload(object_to_bytes(obj))
        assert payload.status == PayloadStatus.NOT_SERIALIZABLE, (obj, payload.status)
        assert payload.body == NOT_SERIALIZABLE_MESSAGE
    print("✓ Hook errors become sentinels\n")


def test_reused_buffer():
    """A shared scratch buffer only frames the current object"""
    print("=== Test 8: Reused Buffer ===")
    buf = io.BytesIO()
    assert decode_payload(object_to_bytes(1, buffer=buf)).load() == 1
    assert decode_payload(object_to_bytes(2, buffer=buf)).load() == 2

    prefilled = io.BytesIO(b"stale bytes")
    prefilled.seek(0, io.SEEK_END)
    assert decode_payload(object_to_bytes({"k": "v"}, buffer=prefilled)).load() == {"k": "v"}
    print("✓ Reused buffer frames only new bytes\n")


def main():
    """Run all tests"""
    print("=" * 60)
    print("Testing Serialization Bridge")
    print("=" * 60 + "\n")

    try:
        test_plain_object_recoverable()
        test_not_serializable_sentinel()
        test_io_error_sentinel()
        test_sentinel_text_is_not_ambiguous()
        test_malformed_frames_rejected()
        test_hex_dump()
        test_object_hooks_raising()
        test_reused_buffer()

        print("=" * 60)
        print("✅ All tests passed!")
        print("=" * 60)

    except AssertionError as e:
        print(f"\n❌ Test failed: {e}")
        return 1
    except Exception as e:
        print(f"\n❌ Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    exit(main())
