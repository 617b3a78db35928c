# -*- coding: utf-8 -*-
import argparse
import os
from datetime import datetime

from merkletools import MerkleTools, beautify


def _get_seconds(start):
  return (datetime.now() - start).total_seconds()


def _print_times(average, total, max_t, min_t):
  print(f' Average time: {average} seconds.')
  print(f' Total time: {total} seconds.')
  print(f' Longest time: {max_t} seconds.')
  print(f' Shortest time: {min_t} seconds.')


def main():
  parser = argparse.ArgumentParser()
  parser.add_argument(
    '-s', '--size',
    help='Number of leaves',
    dest='size',
    type=int,
    default=75000
  )

  parser.add_argument(
    '-r', '--rounds',
    help='How many times the tree is built, proven and reset',
    dest='rounds',
    type=int,
    default=3
  )

  parser.add_argument(
    '-t', '--hashtype',
    help='Hash algorithm, e.g. sha256 or sha3-256',
    dest='hashtype',
    default='sha256'
  )

  parser.add_argument(
    '--btc',
    help='Build Bitcoin style trees',
    action='store_true',
    dest='btc'
  )

  parser.add_argument(
    '-p', '--print',
    help='''
     Beautify the whole tree.
     Recommended to use when the size of the tree is less than 10.
     ''',
    action='store_true',
    dest='printable'
  )

  args = parser.parse_args()
  size, rounds = args.size, args.rounds

  # random 32 byte hashes to use as leaves
  leaves = [os.urandom(32).hex() for _ in range(size)]
  tree = MerkleTools(hashtype=args.hashtype)
  build = tree.make_btc_tree if args.btc else tree.make_tree

  total, start_t = 0.0, datetime.now()
  max_t = min_t = None
  for _ in range(rounds):
    cycle_t = datetime.now()
    tree.add_leaves(leaves)
    build()
    root = tree.get_merkle_root()
    for index in range(size):
      proof = tree.get_proof(index)
      if not tree.validate_proof(proof, tree.get_leaf(index), root):
        exit(f'Failed inclusion proof: {index}')
    if args.printable:
      beautify(tree)
    tree.reset_tree()
    seconds = _get_seconds(cycle_t)
    if max_t is None:
      max_t = min_t = seconds
    else:
      max_t = max(max_t, seconds)
      min_t = min(min_t, seconds)
    total += seconds

  print(f'Build, prove and verify times ({size} leaves, {rounds} rounds):')
  _print_times(
    average=(total / float(rounds)),
    total=_get_seconds(start_t),
    max_t=max_t,
    min_t=min_t
  )


if __name__ == '__main__':
  main()
