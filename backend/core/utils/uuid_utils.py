"""
UUID utilities with UUIDv7 support for time-ordered identifiers
"""
import uuid
import time
import random
from typing import Union


def uuid7() -> uuid.UUID:
    """
    Generate a UUIDv7 (time-ordered UUID)

    UUIDv7 format:
    - 48-bit timestamp (milliseconds since Unix epoch)
    - 4-bit version (0111)
    - 2-bit variant (10)
    - remaining bits random
    """
    timestamp_ms = int(time.time() * 1000)
    timestamp_bytes = timestamp_ms.to_bytes(6, byteorder='big')

    uuid_bytes = bytearray(timestamp_bytes + random.randbytes(10))

    # Set version (4 bits) to 0111 (7)
    uuid_bytes[6] = (uuid_bytes[6] & 0x0f) | 0x70

    # Set variant (2 bits) to 10
    uuid_bytes[8] = (uuid_bytes[8] & 0x3f) | 0x80

    return uuid.UUID(bytes=bytes(uuid_bytes))


def uuid7_str() -> str:
    """Generate UUIDv7 as string"""
    return str(uuid7())


def is_uuid7(uuid_obj: Union[str, uuid.UUID]) -> bool:
    """Check if UUID is version 7"""
    if isinstance(uuid_obj, str):
        try:
            uuid_obj = uuid.UUID(uuid_obj)
        except ValueError:
            return False

    return uuid_obj.version == 7


def extract_timestamp_from_uuid7(uuid_obj: Union[str, uuid.UUID]) -> int:
    """
    Extract timestamp (milliseconds since Unix epoch) from UUIDv7
    Returns 0 if not a valid UUIDv7
    """
    if isinstance(uuid_obj, str):
        try:
            uuid_obj = uuid.UUID(uuid_obj)
        except ValueError:
            return 0

    if not is_uuid7(uuid_obj):
        return 0

    return int.from_bytes(uuid_obj.bytes[:6], byteorder='big')
