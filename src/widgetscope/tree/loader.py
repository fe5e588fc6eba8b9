"""
Tree Loading.

Validates the parser's JSON output into a typed :class:`Program`.
"""

import json
from typing import Union

from pydantic import ValidationError

from widgetscope.errors import InvalidTreeError
from widgetscope.tree.nodes import Program


def load_tree(data: Union[Program, dict, str, bytes, None]) -> Program:
  """
  Builds a typed Program from the parser output.

  Args:
      data: A Program model, the decoded JSON object, or JSON text/bytes.

  Returns:
      Program: The validated tree root.

  Raises:
      InvalidTreeError: If the root is absent, not an object, has no
          ``body`` list, or does not validate.
  """
  if data is None:
    raise InvalidTreeError("No tree supplied")

  if isinstance(data, Program):
    return data

  if isinstance(data, (str, bytes)):
    try:
      data = json.loads(data)
    except ValueError as e:
      raise InvalidTreeError(f"Tree is not valid JSON: {e}") from e

  if not isinstance(data, dict):
    raise InvalidTreeError(f"Tree root must be an object, got {type(data).__name__}")

  body = data.get("body")
  if not isinstance(body, list):
    raise InvalidTreeError("Tree root has no 'body' list")

  root_type = data.get("type", "Program")
  if root_type != "Program":
    raise InvalidTreeError(f"Tree root must be a Program, got '{root_type}'")

  try:
    return Program.model_validate(data)
  except ValidationError as e:
    raise InvalidTreeError(f"Tree failed validation: {e}") from e


def dump_tree(program: Program) -> dict:
  """Serializes a Program back to the parser's camelCase shape."""
  return program.model_dump(by_alias=True, exclude_none=True)


