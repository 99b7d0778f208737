"""
EPP Framing

Frame readers and writers for the two wire variants:

- RFC 5734: each message carries a 4-byte big-endian length header that
  counts the header itself.
- Legacy: no header, a message ends with the closing ``</epp>`` tag.
"""

import re
import struct

from epp_session.exceptions import EPPFrameError


# Maximum frame size (10MB)
MAX_FRAME_SIZE = 10 * 1024 * 1024

HEADER_SIZE = 4

# Closing root tag, with or without a namespace prefix
EPP_TERMINATOR = re.compile(rb"</(?:[\w.-]+:)?epp\s*>")
FRAME_END = re.compile(rb"</(?:[\w.-]+:)?epp\s*>\s*\Z")

READ_CHUNK = 4096


def encode_frame(data: bytes) -> bytes:
    """
    Prefix data with the RFC 5734 length header.

    Raises:
        EPPFrameError: If the framed message exceeds MAX_FRAME_SIZE
    """
    total_length = len(data) + HEADER_SIZE
    if total_length > MAX_FRAME_SIZE:
        raise EPPFrameError(f"Frame too large: {total_length} bytes (max {MAX_FRAME_SIZE})")
    return struct.pack("!I", total_length) + data


def decode_frame_header(header: bytes) -> int:
    """
    Return the total frame length announced by a 4-byte header.

    Raises:
        EPPFrameError: If the header is malformed or out of range
    """
    if len(header) != HEADER_SIZE:
        raise EPPFrameError(f"Invalid header length: {len(header)} (expected {HEADER_SIZE})")

    length = struct.unpack("!I", header)[0]
    if length < HEADER_SIZE:
        raise EPPFrameError(f"Frame length too small: {length}")
    if length > MAX_FRAME_SIZE:
        raise EPPFrameError(f"Frame length too large: {length}")
    return length


class FrameReader:
    """
    Buffered reader for length-prefixed frames.

    ``read_func(n)`` must return up to n bytes, or b"" once the peer closed.
    """

    def __init__(self, read_func):
        self.read_func = read_func
        self.buffer = b""

    def _fill(self, size: int, closed_message: str) -> None:
        while len(self.buffer) < size:
            chunk = self.read_func(READ_CHUNK)
            if not chunk:
                raise EPPFrameError(closed_message)
            self.buffer += chunk

    def read_frame(self) -> bytes:
        """
        Read the next complete frame and return its payload.

        Raises:
            EPPFrameError: If the connection closes mid-frame or the header is invalid
        """
        self._fill(HEADER_SIZE, "Connection closed" if not self.buffer else "Connection closed with partial header")

        total_length = decode_frame_header(self.buffer[:HEADER_SIZE])
        self._fill(total_length, "Connection closed with partial frame")

        payload = self.buffer[HEADER_SIZE:total_length]
        self.buffer = self.buffer[total_length:]
        return payload


class FrameWriter:
    """Writer for length-prefixed frames."""

    def __init__(self, write_func):
        self.write_func = write_func

    def write_frame(self, data: bytes) -> int:
        """
        Write one framed message, returning the bytes written including the header.

        Raises:
            EPPFrameError: If the underlying write makes no progress
        """
        return _write_all(self.write_func, encode_frame(data))


class TerminatedFrameReader:
    """
    Buffered reader for legacy frames delimited by the closing ``</epp>`` tag.
    """

    def __init__(self, read_func):
        self.read_func = read_func
        self.buffer = b""

    def read_frame(self) -> bytes:
        """
        Read up to and including the next ``</epp>``.

        Raises:
            EPPFrameError: If the connection closes first or the message grows too large
        """
        while True:
            match = EPP_TERMINATOR.search(self.buffer)
            if match:
                end = match.end()
                payload = self.buffer[:end].strip()
                self.buffer = self.buffer[end:]
                return payload

            if len(self.buffer) > MAX_FRAME_SIZE:
                raise EPPFrameError(f"Frame length too large: {len(self.buffer)}")

            chunk = self.read_func(READ_CHUNK)
            if not chunk:
                if self.buffer.strip():
                    raise EPPFrameError("Connection closed with partial frame")
                raise EPPFrameError("Connection closed")
            self.buffer += chunk


class TerminatedFrameWriter:
    """Writer for legacy frames; the XML document is sent as-is."""

    def __init__(self, write_func):
        self.write_func = write_func

    def write_frame(self, data: bytes) -> int:
        if len(data) > MAX_FRAME_SIZE:
            raise EPPFrameError(f"Frame too large: {len(data)} bytes (max {MAX_FRAME_SIZE})")
        if not FRAME_END.search(data):
            raise EPPFrameError("Legacy frame must end with </epp>")
        return _write_all(self.write_func, data)


def _write_all(write_func, frame: bytes) -> int:
    total_written = 0
    while total_written < len(frame):
        written = write_func(frame[total_written:])
        if written is None or written <= 0:
            raise EPPFrameError("Failed to write frame")
        total_written += written
    return total_written
