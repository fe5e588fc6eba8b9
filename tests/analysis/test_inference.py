"""
Tests for initializer type inference.
"""

import pytest

from widgetscope.analysis.inference import infer_type
from widgetscope.tree.nodes import (
  ArrayLiteral,
  BinaryExpression,
  CallExpression,
  Identifier,
  Literal,
  NewExpression,
  ObjectLiteral,
)


@pytest.mark.parametrize(
  "expr, expected",
  [
    (None, "dynamic"),
    (Literal(value=None), "Null"),
    (Literal(value=True), "bool"),
    (Literal(value=3), "int"),
    (Literal(value=3.5), "double"),
    (Literal(value="s"), "String"),
    (ArrayLiteral(), "List"),
    (ObjectLiteral(), "Map"),
    (NewExpression(callee=Identifier(name="Controller")), "Controller"),
    (CallExpression(callee=Identifier(name="Duration")), "Duration"),
    (CallExpression(callee=Identifier(name="compute")), "dynamic"),
    (Identifier(name="initial"), "initial"),
    (BinaryExpression(operator="+", left=Literal(value=1), right=Literal(value=2)), "dynamic"),
  ],
)
def test_infer_type(expr, expected):
  assert infer_type(expr) == expected
