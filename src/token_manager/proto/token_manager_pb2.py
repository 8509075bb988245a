"""Hand-written protobuf message stubs for the token manager service.

These are lightweight message classes that mirror ``token_manager.proto``
using **standard protobuf wire encoding**. They produce bytes identical to
``protoc``-generated code, making them compatible with any standard gRPC
client or server for the ``token_manage.TokenManager`` service.

Wire format reference (proto3):
- Varint fields: tag = (field_number << 3 | 0), then LEB128-encoded value
- Length-delimited fields: tag = (field_number << 3 | 2), then varint length, then raw bytes
- Default-valued fields (0, False, empty string) are omitted from the wire

If the proto definition changes, update these stubs or regenerate with
``grpc_tools.protoc``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

UINT64_MAX = 2**64 - 1

# ---------------------------------------------------------------------------
# Protobuf wire-format helpers
# ---------------------------------------------------------------------------


def _encode_varint(value: int) -> bytes:
    """Encode an unsigned 64-bit integer as a protobuf varint (LEB128).

    Args:
        value: Integer in ``[0, UINT64_MAX]``.

    Returns:
        LEB128-encoded bytes.

    Raises:
        ValueError: If *value* does not fit in an unsigned 64-bit field.
    """
    if value < 0 or value > UINT64_MAX:
        raise ValueError(f"value {value} does not fit in uint64")
    parts: list[int] = []
    while value > 0x7F:
        parts.append((value & 0x7F) | 0x80)
        value >>= 7
    parts.append(value & 0x7F)
    return bytes(parts)


def _decode_varint(data: bytes, offset: int) -> tuple[int, int]:
    """Decode a varint from bytes at the given offset.

    Args:
        data: Raw bytes.
        offset: Starting position.

    Returns:
        Tuple of (decoded_value, new_offset). The value is truncated to
        64 bits, as protobuf runtimes do.
    """
    result = 0
    shift = 0
    while True:
        b = data[offset]
        result |= (b & 0x7F) << shift
        offset += 1
        if not (b & 0x80):
            break
        shift += 7
    return result & UINT64_MAX, offset


def _encode_tag(field_number: int, wire_type: int) -> bytes:
    """Encode a protobuf field tag.

    Args:
        field_number: The proto field number (1-based).
        wire_type: 0 = varint, 2 = length-delimited.

    Returns:
        Varint-encoded tag bytes.
    """
    return _encode_varint((field_number << 3) | wire_type)


def _varint_field(field_number: int, value: int) -> bytes:
    """Encode a varint field, or nothing if it holds the default 0."""
    if value == 0:
        return b""
    return _encode_tag(field_number, 0) + _encode_varint(value)


def _string_field(field_number: int, value: str) -> bytes:
    """Encode a string field, or nothing if it is empty."""
    if not value:
        return b""
    raw = value.encode("utf-8")
    return _encode_tag(field_number, 2) + _encode_varint(len(raw)) + raw


def _iter_fields(data: bytes) -> Iterator[tuple[int, int | bytes]]:
    """Yield ``(field_number, value)`` for every varint or length-delimited field.

    Fixed-width fields are skipped; an unknown wire type stops parsing.
    """
    offset = 0
    while offset < len(data):
        tag, offset = _decode_varint(data, offset)
        field_number = tag >> 3
        wire_type = tag & 0x07
        if wire_type == 0:
            value, offset = _decode_varint(data, offset)
            yield field_number, value
        elif wire_type == 2:
            length, offset = _decode_varint(data, offset)
            yield field_number, data[offset : offset + length]
            offset += length
        elif wire_type == 5:
            offset += 4  # Skip unknown 32-bit fields
        elif wire_type == 1:
            offset += 8  # Skip unknown 64-bit fields
        else:
            break  # Unknown wire type, stop parsing


def _decode_id_only(data: bytes) -> str:
    """Extract ``string id = 1`` from a request carrying only an id."""
    token_id = ""
    for field_number, value in _iter_fields(data):
        if field_number == 1 and isinstance(value, bytes):
            token_id = value.decode("utf-8")
    return token_id


def _decode_single_varint(data: bytes) -> int:
    """Extract varint field 1 from a single-field response."""
    result = 0
    for field_number, value in _iter_fields(data):
        if field_number == 1 and isinstance(value, int):
            result = value
    return result


# ---------------------------------------------------------------------------
# Message classes
# ---------------------------------------------------------------------------


@dataclass
class CreateTokenRequest:
    """Create request. Field 1: ``string id``."""

    id: str = ""

    def SerializeToString(self) -> bytes:  # noqa: N802
        return _string_field(1, self.id)

    @classmethod
    def FromString(cls, data: bytes) -> CreateTokenRequest:  # noqa: N802
        return cls(id=_decode_id_only(data))


@dataclass
class CreateTokenResponse:
    """Create response. Field 1: ``bool success``."""

    success: bool = False

    def SerializeToString(self) -> bytes:  # noqa: N802
        return _varint_field(1, int(self.success))

    @classmethod
    def FromString(cls, data: bytes) -> CreateTokenResponse:  # noqa: N802
        return cls(success=bool(_decode_single_varint(data)))


@dataclass
class WriteTokenRequest:
    """Write request.

    Attributes:
        id: Token id (proto field 1, string).
        name: Hash salt (proto field 2, string).
        low: Observation range start (proto field 3, uint64).
        mid: Range split point (proto field 4, uint64).
        high: Decision range end (proto field 5, uint64).
    """

    id: str = ""
    name: str = ""
    low: int = 0
    mid: int = 0
    high: int = 0

    def SerializeToString(self) -> bytes:  # noqa: N802
        """Serialize to standard protobuf wire format."""
        return b"".join(
            (
                _string_field(1, self.id),
                _string_field(2, self.name),
                _varint_field(3, self.low),
                _varint_field(4, self.mid),
                _varint_field(5, self.high),
            )
        )

    @classmethod
    def FromString(cls, data: bytes) -> WriteTokenRequest:  # noqa: N802
        """Deserialize from standard protobuf wire format."""
        msg = cls()
        for field_number, value in _iter_fields(data):
            if isinstance(value, bytes):
                if field_number == 1:
                    msg.id = value.decode("utf-8")
                elif field_number == 2:
                    msg.name = value.decode("utf-8")
            elif field_number == 3:
                msg.low = value
            elif field_number == 4:
                msg.mid = value
            elif field_number == 5:
                msg.high = value
        return msg


@dataclass
class WriteTokenResponse:
    """Write response. Field 1: ``uint64 partial``."""

    partial: int = 0

    def SerializeToString(self) -> bytes:  # noqa: N802
        return _varint_field(1, self.partial)

    @classmethod
    def FromString(cls, data: bytes) -> WriteTokenResponse:  # noqa: N802
        return cls(partial=_decode_single_varint(data))


@dataclass
class ReadTokenRequest:
    """Read request. Field 1: ``string id``."""

    id: str = ""

    def SerializeToString(self) -> bytes:  # noqa: N802
        return _string_field(1, self.id)

    @classmethod
    def FromString(cls, data: bytes) -> ReadTokenRequest:  # noqa: N802
        return cls(id=_decode_id_only(data))


@dataclass
class ReadTokenResponse:
    """Read response. Field 1: ``uint64 final``."""

    final: int = 0

    def SerializeToString(self) -> bytes:  # noqa: N802
        return _varint_field(1, self.final)

    @classmethod
    def FromString(cls, data: bytes) -> ReadTokenResponse:  # noqa: N802
        return cls(final=_decode_single_varint(data))


@dataclass
class DropTokenRequest:
    """Drop request. Field 1: ``string id``."""

    id: str = ""

    def SerializeToString(self) -> bytes:  # noqa: N802
        return _string_field(1, self.id)

    @classmethod
    def FromString(cls, data: bytes) -> DropTokenRequest:  # noqa: N802
        return cls(id=_decode_id_only(data))


@dataclass
class DropTokenResponse:
    """Drop response. Field 1: ``bool success``."""

    success: bool = False

    def SerializeToString(self) -> bytes:  # noqa: N802
        return _varint_field(1, int(self.success))

    @classmethod
    def FromString(cls, data: bytes) -> DropTokenResponse:  # noqa: N802
        return cls(success=bool(_decode_single_varint(data)))
