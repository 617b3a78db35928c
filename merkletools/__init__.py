__version__ = '1.0'

__all__ = [
    "MerkleTools",
    "HashAlgorithm",
    "Hasher",
    "Sibling",
    "LEFT",
    "RIGHT",
    "validate_proof",
    "MerkleError",
    "InvalidEncodingError",
    "ConfigurationError",
    "beautify",
    "jsonify",
    "export",
]

from merkletools.exceptions import *
from merkletools.merkle import (
    MerkleTools,
    HashAlgorithm,
    Hasher,
    Sibling,
    LEFT,
    RIGHT,
    validate_proof,
)
from merkletools.format import *
