import io

from merkletools import utils
from merkletools.merkle import MerkleTools

from anytree import AnyNode, RenderTree
from anytree.exporter import DotExporter, JsonExporter


__all__ = ['beautify', 'export', 'jsonify']


def _get_printable_tree(tree):
  if not isinstance(tree, MerkleTools):
    raise TypeError(f'Expected MerkleTools, got {type(tree)}')
  levels = tree.levels
  if not tree.is_ready or not levels:
    raise ValueError('The tree has not been built yet')
  root = AnyNode(name=utils.to_hex(levels[0][0]))
  parents = [root]
  # node i of a level hangs below node i // 2 of the level above
  for level in levels[1:]:
    parents = [
      AnyNode(name=utils.to_hex(node), parent=parents[index // 2])
      for index, node in enumerate(level)
    ]
  return root


def export(tree, filename, ext='json', **kwargs):
  parent = _get_printable_tree(tree)
  if ext == 'json':
    with io.open(f'{filename}.json', mode='w+', encoding='utf-8') as fp:
      JsonExporter(**kwargs).write(parent, fp)
  else:
    DotExporter(parent, **kwargs).to_picture(f'{filename}.{ext}')


def jsonify(tree, **kwargs):
  parent = _get_printable_tree(tree)
  return JsonExporter(**kwargs).export(parent)


def beautify(tree):
  parent = _get_printable_tree(tree)
  for pre, fill, node in RenderTree(parent):
    print(f'{pre}{node.name}')
