# -*- coding: utf-8 -*-

"""Merkle trees with compact inclusion proofs.

Sample code snippet:

>>> from merkletools import MerkleTools
>>> tree = MerkleTools(hashtype='sha256')
>>> tree.add_leaves(['a1' * 32, 'b2' * 32])
>>> tree.make_tree()
>>> tree.get_proof(0)
[<Sibling right b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2>]
>>> tree.validate_proof(tree.get_proof(0), tree.get_leaf(0), tree.get_merkle_root())
True

License: MIT, see LICENSE for more details.
"""

import enum
import functools
import hashlib
import logging

from collections.abc import Mapping

from merkletools import utils
from merkletools.exceptions import ConfigurationError, InvalidEncodingError


logger = logging.getLogger(__name__)

# used to indicate whether a sibling is the left or right node of its pair
LEFT, RIGHT = tuple(range(2))

_labels = {LEFT: 'left', RIGHT: 'right'}


class HashAlgorithm(enum.Enum):
  """Hash algorithms a tree can be configured with."""

  SHA256 = 'sha256'
  SHA3_224 = 'sha3-224'
  SHA3_256 = 'sha3-256'
  SHA3_384 = 'sha3-384'
  SHA3_512 = 'sha3-512'

  @classmethod
  def from_name(cls, name):
    """Looks up an algorithm by identifier, e.g. 'SHA3-256' or 'sha3_256'.

    :raises ConfigurationError: the identifier is unknown.
    """
    if isinstance(name, cls):
      return name
    if isinstance(name, str):
      key = name.strip().lower().replace('_', '-')
      for algorithm in cls:
        if algorithm.value == key:
          return algorithm
    raise ConfigurationError(f'Unsupported hash algorithm: {name!r}')


def _digest(constructor):
  def _hashfunc(data):
    return constructor(data).digest()
  return _hashfunc


_registry = {
  HashAlgorithm.SHA256: _digest(hashlib.sha256),
  HashAlgorithm.SHA3_224: _digest(hashlib.sha3_224),
  HashAlgorithm.SHA3_256: _digest(hashlib.sha3_256),
  HashAlgorithm.SHA3_384: _digest(hashlib.sha3_384),
  HashAlgorithm.SHA3_512: _digest(hashlib.sha3_512),
}


def _hash_from_hex(func):
  """A decorator that converts hashes from hexadecimal strings to bytes.

  :param func: a hash function that returns either bytes or
    a hexadecimal string.
  :return _wrapper: a function that always returns bytes.
  """
  @functools.wraps(func)
  def _wrapper(data):
    return utils.to_bytes(func(data))
  return _wrapper


class Hasher(object):
  """Hashes leaves and concatenated pairs of nodes.

  Attributes:
    algorithm: the HashAlgorithm in use, None if a custom function was given.
    hashfunc: a function that consumes bytes and returns their digest.
  """

  def __init__(self, hashtype=HashAlgorithm.SHA256):
    if isinstance(hashtype, (str, HashAlgorithm)):
      self.algorithm = HashAlgorithm.from_name(hashtype)
      self._hashfunc = _registry[self.algorithm]
    elif callable(hashtype):
      self.algorithm = None
      self._hashfunc = _hash_from_hex(hashtype)
    else:
      raise ConfigurationError(
        f'Expected an algorithm name or callable, got {type(hashtype)}'
      )

  @property
  def hashfunc(self):
    return self._hashfunc

  def hash(self, data):
    return self._hashfunc(data)

  def hash_pair(self, left, right, double_hash=False):
    """Hashes the concatenation of two nodes, twice if `double_hash` is set."""
    digest = self._hashfunc(left + right)
    if double_hash:
      digest = self._hashfunc(digest)
    return digest

  def __repr__(self):
    classname = self.__class__.__name__
    if self.algorithm is None:
      return f'{classname}({self._hashfunc.__wrapped__})'
    return f'{classname}({self.algorithm.value})'

  def __str__(self):
    return repr(self)


def _init_hasher(hashobj):
  if hashobj is None:
    return Hasher()
  if isinstance(hashobj, Hasher):
    return hashobj
  return Hasher(hashobj)


class Sibling(object):
  """A single step of an inclusion proof.

  Attributes:
    hash: the bytes of the sibling node.
    type: LEFT if the sibling precedes the running hash, RIGHT otherwise.
  """

  __slots__ = ('hash', 'type',)

  def __init__(self, hash, type):
    if type not in _labels:
      raise ValueError(f'Invalid sibling type: {type!r}')
    self.hash = utils.to_bytes(hash)
    self.type = type

  @property
  def left(self):
    return self.hash.hex() if self.type == LEFT else None

  @property
  def right(self):
    return self.hash.hex() if self.type == RIGHT else None

  def as_dict(self):
    return {_labels[self.type]: self.hash.hex()}

  @classmethod
  def from_dict(cls, record):
    """Reads a `{'left': hex}` or `{'right': hex}` record.

    :raises ValueError: the record carries neither or both tags.
    """
    sibling = _as_sibling(record)
    if sibling is None:
      raise ValueError(f'Malformed sibling record: {record!r}')
    return sibling

  def __eq__(self, other):
    if isinstance(other, Mapping):
      try:
        other = _as_sibling(other)
      except InvalidEncodingError:
        return False
    return (
      isinstance(other, Sibling)
      and self.hash == other.hash
      and self.type == other.type
    )

  __hash__ = None

  def __repr__(self):
    return f'<{type(self).__name__} {_labels[self.type]} {self.hash.hex()}>'

  def __str__(self):
    return repr(self)


def _as_sibling(entry):
  # None stands for a record that is neither left nor right
  if isinstance(entry, Sibling):
    return entry
  if not isinstance(entry, Mapping):
    return None
  tagged = [
    (type, entry[label]) for type, label in _labels.items()
    if entry.get(label)
  ]
  if len(tagged) != 1:
    return None
  type, value = tagged[0]
  return Sibling(value, type)


# Level building strategies
def _pairwise(iterable):
  a = iter(iterable)
  return zip(a, a)


def _next_level(hasher, level, double_hash=False):
  """Hashes adjacent pairs; a trailing odd node is promoted unhashed."""
  nodes = [hasher.hash_pair(l, r, double_hash) for l, r in _pairwise(level)]
  if len(level) % 2 != 0:
    nodes.append(level[-1])
  return nodes


def _next_btc_level(hasher, level, double_hash=False):
  """Bitcoin style: an odd level gets its last node duplicated, then
  every pair is hashed.

  The level is padded in place, so the duplicate shows up
  as a right sibling in proofs.
  """
  if len(level) % 2 != 0:
    level.append(level[-1])
  return [hasher.hash_pair(l, r, double_hash) for l, r in _pairwise(level)]


def _build_levels(hasher, leaves, next_level, double_hash=False):
  """Folds the leaves into a stack of levels, root level first.

  :return: an empty list if there are no leaves.
  """
  if not leaves:
    return []
  levels = [list(leaves)]
  while len(levels[0]) > 1:
    levels.insert(0, next_level(hasher, levels[0], double_hash))
  return levels


def validate_proof(proof, target_hash, merkle_root, hasher=None, double_hash=False):
  """Verifies that a leaf is included in a tree with the given root.

  :param proof: a sequence of Sibling objects or
    `{'left': hex}` / `{'right': hex}` records, leaf level first.
  :param target_hash: the leaf, as bytes or a hexadecimal string.
  :param merkle_root: the root provided by a trusted authority.
  :param hasher: a Hasher, an algorithm name or a hash function.
  :param double_hash: whether the tree was built with double hashing.
  :return: True if replaying the proof yields `merkle_root`.
    A malformed proof entry makes it False rather than raising.
  """
  hasher = _init_hasher(hasher)
  target_hash = utils.to_bytes(target_hash)
  merkle_root = utils.to_bytes(merkle_root)

  proof = list(proof)
  # no siblings, single leaf tree, so the leaf should also be the root
  if not proof:
    return target_hash == merkle_root

  proof_hash = target_hash
  for entry in proof:
    sibling = _as_sibling(entry)
    if sibling is None:
      logger.debug('Malformed proof entry: %r', entry)
      return False
    if sibling.type == LEFT:
      proof_hash = hasher.hash_pair(sibling.hash, proof_hash, double_hash)
    else:
      proof_hash = hasher.hash_pair(proof_hash, sibling.hash, double_hash)
  return proof_hash == merkle_root


class _Tree(object):
  """State owned by a single MerkleTools instance."""

  __slots__ = ('leaves', 'levels', 'is_ready',)

  def __init__(self):
    self.leaves = []
    self.levels = []
    self.is_ready = False


class MerkleTools(object):
  """Collects leaves, builds a Merkle tree over them and derives proofs.

  Instances are not thread-safe: build once, then read proofs.

  Usage::
    >>> import merkletools
    >>> tree = merkletools.MerkleTools(hashtype='sha3-256')
    >>> tree.add_leaves(get_transactions(), pre_hash=True)
    >>> tree.make_btc_tree(double_hash=True)
    >>> tree
      <MerkleTools[5bd48ab93e7ed1e4fbf4b2d91ab7a4b39cf13a0c35a1bd36bf5e2a0dd5c5bb8e]>
  """

  def __init__(self, hashtype=HashAlgorithm.SHA256):
    """
    :param hashtype: a HashAlgorithm, its name, a Hasher instance
        or a hash function consuming bytes.
    :raises ConfigurationError: the algorithm is not supported.
    """
    self._hasher = _init_hasher(hashtype)
    self._tree = _Tree()

  def reset_tree(self):
    """Discards all leaves and levels."""
    self._tree = _Tree()
    logger.debug('Tree reset')

  def _to_leaf(self, value, pre_hash):
    if pre_hash:
      return self._hasher.hash(utils.to_text_bytes(value))
    return utils.to_bytes(value)

  def add_leaf(self, value, pre_hash=False):
    """Appends a leaf to the tree.

    :param value: bytes or a hexadecimal string.
    :param pre_hash: hash the value first; strings are then hashed
      as UTF-8 text instead of being decoded from hex.
    """
    leaf = self._to_leaf(value, pre_hash)
    self._tree.is_ready = False
    self._tree.leaves.append(leaf)

  def add_leaves(self, values, pre_hash=False):
    """Appends several leaves, preserving their order.

    Nothing is appended if any of the values is invalid.
    """
    leaves = [self._to_leaf(value, pre_hash) for value in values]
    if not leaves:
      return
    self._tree.is_ready = False
    self._tree.leaves.extend(leaves)

  def get_leaf(self, index):
    leaves = self._tree.leaves
    if index < 0 or index >= len(leaves):
      return None
    return leaves[index]

  def get_leaf_count(self):
    return len(self._tree.leaves)

  def get_tree_ready_state(self):
    return self._tree.is_ready

  def _make(self, next_level, double_hash, variant):
    tree = self._tree
    tree.is_ready = False
    tree.levels = _build_levels(self._hasher, tree.leaves, next_level, double_hash)
    tree.is_ready = True
    logger.debug(
      'Built %s tree: %d leaves, %d levels, double_hash=%s',
      variant, len(tree.leaves), len(tree.levels), double_hash
    )

  def make_tree(self, double_hash=False):
    """Builds the tree; an odd trailing node is carried up unhashed."""
    self._make(_next_level, double_hash, 'standard')

  def make_btc_tree(self, double_hash=False):
    """Builds a Bitcoin style tree; an odd trailing node is duplicated."""
    self._make(_next_btc_level, double_hash, 'btc')

  def get_merkle_root(self):
    tree = self._tree
    if not tree.is_ready or not tree.levels:
      return None
    return tree.levels[0][0]

  def get_proof(self, index):
    """Provides an inclusion proof for the leaf at `index`.

    :return: a list of Sibling objects ordered from the leaf level
      up to the level below the root, or None if the tree is not
      ready or the index is out of bounds.
    """
    tree = self._tree
    if not tree.is_ready:
      return None
    if index < 0 or index >= len(tree.leaves):
      return None

    proof = []
    # walk from the leaf level up to the root's children
    for level in tree.levels[:0:-1]:
      count = len(level)
      # an odd end node has no pair at this level
      if index == count - 1 and count % 2 != 0:
        index //= 2
        continue
      if index % 2:
        proof.append(Sibling(level[index - 1], LEFT))
      else:
        proof.append(Sibling(level[index + 1], RIGHT))
      index //= 2
    return proof

  def validate_proof(self, proof, target_hash, merkle_root, double_hash=False):
    """Verifies a proof with this tree's hash algorithm.

    Does not read the tree itself; see `merkletools.validate_proof`.
    """
    return validate_proof(
      proof,
      target_hash,
      merkle_root,
      self._hasher,
      double_hash
    )

  @property
  def is_ready(self):
    return self._tree.is_ready

  @property
  def hasher(self):
    return self._hasher

  @property
  def leaves(self):
    return list(self._tree.leaves)

  @property
  def hexleaves(self):
    """Returns the leaves of the tree as hexadecimal strings."""
    return [leaf.hex() for leaf in self._tree.leaves]

  @property
  def levels(self):
    """Returns a copy of the levels, root level first."""
    return [list(level) for level in self._tree.levels]

  @property
  def merkle_root(self):
    root = self.get_merkle_root()
    if root is None:
      return None
    return root.hex()

  def __len__(self):
    """Returns the number of leaves in the tree."""
    return len(self._tree.leaves)

  def __repr__(self):
    return f'<{self.__class__.__name__}[{self.merkle_root}]>'

  def __str__(self):
    return repr(self)
