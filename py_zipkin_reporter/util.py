import random
import struct
from typing import Optional

from py_zipkin_reporter.span import Identifier


def generate_identifier() -> Identifier:
    """Returns a random 64 bit Identifier.

    This matches the default identity generator of the host tracing runtime:
    8 random bytes in big endian order, printed as 16 hex characters.

    :returns: new Identifier
    """
    return identifier_from_hex(f"{random.getrandbits(64):016x}")


def identifier_from_hex(hex_string: str) -> Identifier:
    """Builds an Identifier out of its hex representation.

    :param hex_string: even-length hex string, such as '17133d482ba4f605'
    :returns: Identifier whose bytes are the decoded hex string
    """
    return Identifier(string=hex_string, bytes=bytes.fromhex(hex_string))


def is_empty_identifier(identifier: Optional[Identifier]) -> bool:
    """Whether the identifier is missing altogether, as on root spans."""
    return identifier is None or not getattr(identifier, "bytes", None)


def identifier_to_long(identifier: Optional[Identifier]) -> int:
    """Converts an Identifier to the signed 64 bit int used by Zipkin.

    The first 8 bytes are read as a big endian signed long. Identifiers that
    are missing, aren't bytes or are shorter than 8 bytes all map to 0.

    Examples:
        b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x07' => 7
        b'\\xb6\\xdb\\xb1\\xc2\\xb3\\x62\\xbf\\x51' => -5270423489115668655

    :param identifier: Identifier to convert
    :returns: signed int representation
    """
    if identifier is None:
        return 0
    raw = getattr(identifier, "bytes", None)
    if not isinstance(raw, (bytes, bytearray, memoryview)) or len(raw) < 8:
        return 0
    return struct.unpack("!q", bytes(raw[:8]))[0]


def signed_int_to_unsigned_hex(signed_int: int) -> str:
    """Converts a signed int value to a 64-bit hex string.

    Examples:
        1662740067609015813  => '17133d482ba4f605'
        -5270423489115668655 => 'b6dbb1c2b362bf51'

    :param signed_int: an int to convert
    :returns: unsigned hex string
    """
    return "{:016x}".format(struct.unpack("Q", struct.pack("q", signed_int))[0])


def epoch_micros(instant_ns: int) -> int:
    """Converts an instant in nanoseconds since epoch to microseconds."""
    return instant_ns // 1000


def micros_between(start_ns: int, end_ns: int) -> int:
    """Microseconds elapsed between two instants, truncated toward zero."""
    elapsed = end_ns - start_ns
    if elapsed < 0:
        return -(-elapsed // 1000)
    return elapsed // 1000
