class MerkleError(Exception):
  """Base class for every error raised by merkletools."""


class InvalidEncodingError(MerkleError, ValueError):
  """A value is neither raw bytes nor a valid hexadecimal string.

  Attributes:
    value: the offending input.
  """

  def __init__(self, value):
    self.value = value
    super().__init__(f'Bad hex value - {value!r}')


class ConfigurationError(MerkleError, ValueError):
  """The requested hash algorithm is unknown or unsupported."""
