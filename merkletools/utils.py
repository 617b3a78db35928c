import re

from merkletools.exceptions import InvalidEncodingError


HEX_PREFIX = '0x'

_hex_pattern = re.compile(r'^(?:[0-9A-Fa-f]{2})+$')

bytes_types = (bytes, bytearray, memoryview)


def is_hex(value):
  """Whether `value` is a non-empty, even-length hexadecimal string."""
  return isinstance(value, str) and _hex_pattern.match(value) is not None


def is_hex_prefixed(value):
  return value[:2] == HEX_PREFIX


def add_hex_prefix(value):
  return value if is_hex_prefixed(value) else HEX_PREFIX + value


def strip_hex_prefix(value):
  return value[2:] if is_hex_prefixed(value) else value


def to_bytes(value):
  """Coerces a leaf, a root or a sibling value to canonical bytes.

  :param value: raw bytes (returned as they are) or a hexadecimal string.
  :raises InvalidEncodingError: the value is a malformed hexadecimal
    string or neither bytes nor str.
  """
  if isinstance(value, bytes):
    return value
  if isinstance(value, bytes_types):
    return bytes(value)
  if is_hex(value):
    return bytes.fromhex(value)
  raise InvalidEncodingError(value)


def to_text_bytes(value):
  # pre-hashed values are hashed as text, not decoded from hex
  if isinstance(value, str):
    return value.encode('utf-8')
  if isinstance(value, bytes_types):
    return bytes(value)
  raise InvalidEncodingError(value)


def to_hex(value):
  return to_bytes(value).hex()
