"""
Typed tree contract consumed by the analyzer.
"""

from widgetscope.tree.loader import dump_tree, load_tree
from widgetscope.tree.nodes import ClassDeclaration, MethodDeclaration, Node, Program
from widgetscope.tree.printer import to_source
from widgetscope.tree.visitor import TreeVisitor, walk

__all__ = [
  "ClassDeclaration",
  "MethodDeclaration",
  "Node",
  "Program",
  "TreeVisitor",
  "dump_tree",
  "load_tree",
  "to_source",
  "walk",
]
