"""
Typed Node Models for the Widget Source Tree.

The tree is produced by an external parser and consumed here. Each node tag
from the parser's JSON output maps onto one Pydantic model, and every
statement or expression slot is a closed tagged union selected by the
``type`` field.

Tags the analyzer does not model are not rejected: they are captured as
:class:`OpaqueNode` so that one unsupported construct does not sink the whole
analysis. Opaque nodes have no children and print as ``<Tag>``.

Field names follow Python conventions, with aliases for the parser's
camelCase keys (``superClass``, ``initialValue``, ``typeArguments``...).
"""

from typing import Annotated, Any, Iterator, List, Literal as NodeTag, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator
from pydantic.alias_generators import to_camel


class SourceLocation(BaseModel):
  """Line/column position reported by the parser."""

  model_config = ConfigDict(extra="ignore", frozen=True)

  line: int = 0
  column: int = 0


class Node(BaseModel):
  """
  Base class for all tree nodes.

  Subclasses declare a ``type`` literal (the tag) and override
  :meth:`children` to yield their direct child nodes in source order.
  """

  model_config = ConfigDict(
    extra="ignore",
    populate_by_name=True,
    alias_generator=to_camel,
  )

  location: Optional[SourceLocation] = None

  @model_validator(mode="before")
  @classmethod
  def _drop_nulls(cls, data: Any) -> Any:
    # Parsers emit explicit nulls for absent slots; treat them as missing.
    if isinstance(data, dict):
      return {k: v for k, v in data.items() if v is not None}
    return data

  def children(self) -> Iterator["Node"]:
    """Yields direct child nodes in source order."""
    return iter(())


def _yield_all(*slots: Any) -> Iterator[Node]:
  """Flattens optional nodes and node lists into one iterator."""
  for slot in slots:
    if slot is None:
      continue
    if isinstance(slot, list):
      for item in slot:
        if item is not None:
          yield item
    else:
      yield slot


class OpaqueNode(Node):
  """A node whose tag is not part of the modelled grammar."""

  model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

  type: str = "Opaque"


# --- Leaf expressions ---


class Identifier(Node):
  type: NodeTag["Identifier"] = "Identifier"
  name: str


class Literal(Node):
  type: NodeTag["Literal"] = "Literal"
  value: Union[bool, int, float, str, None] = None
  raw: Optional[str] = None


# --- Compound expressions ---


class CallExpression(Node):
  type: NodeTag["CallExpression"] = "CallExpression"
  callee: "Expression"
  args: List["Expression"] = Field(default_factory=list)
  type_arguments: List[str] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.callee, self.args)


class NewExpression(Node):
  type: NodeTag["NewExpression"] = "NewExpression"
  callee: "Expression"
  args: List["Expression"] = Field(default_factory=list)
  type_arguments: List[str] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.callee, self.args)


class MemberExpression(Node):
  type: NodeTag["MemberExpression"] = "MemberExpression"
  object: "Expression"
  property: "Expression"
  computed: bool = False
  optional: bool = False

  def children(self) -> Iterator[Node]:
    return _yield_all(self.object, self.property)


class AssignmentExpression(Node):
  type: NodeTag["AssignmentExpression"] = "AssignmentExpression"
  operator: str = "="
  left: "Expression"
  right: "Expression"

  def children(self) -> Iterator[Node]:
    return _yield_all(self.left, self.right)


class UpdateExpression(Node):
  type: NodeTag["UpdateExpression"] = "UpdateExpression"
  operator: str = "++"
  argument: "Expression"
  prefix: bool = False

  def children(self) -> Iterator[Node]:
    return _yield_all(self.argument)


class BinaryExpression(Node):
  type: NodeTag["BinaryExpression"] = "BinaryExpression"
  operator: str
  left: "Expression"
  right: "Expression"

  def children(self) -> Iterator[Node]:
    return _yield_all(self.left, self.right)


class UnaryExpression(Node):
  type: NodeTag["UnaryExpression"] = "UnaryExpression"
  operator: str
  argument: "Expression"

  def children(self) -> Iterator[Node]:
    return _yield_all(self.argument)


class ConditionalExpression(Node):
  type: NodeTag["ConditionalExpression"] = "ConditionalExpression"
  test: "Expression"
  consequent: "Expression"
  alternate: "Expression"

  def children(self) -> Iterator[Node]:
    return _yield_all(self.test, self.consequent, self.alternate)


class Parameter(Node):
  type: NodeTag["Parameter"] = "Parameter"
  name: "Identifier"
  optional: bool = False
  default_value: Optional["Expression"] = None

  def children(self) -> Iterator[Node]:
    return _yield_all(self.name, self.default_value)


class ArrowFunctionExpression(Node):
  type: NodeTag["ArrowFunctionExpression"] = "ArrowFunctionExpression"
  params: List["ParameterLike"] = Field(default_factory=list)
  body: "FunctionBody"
  is_async: bool = False

  def children(self) -> Iterator[Node]:
    return _yield_all(self.params, self.body)


class Property(Node):
  type: NodeTag["Property"] = "Property"
  key: "Expression"
  value: Optional["Expression"] = None

  def children(self) -> Iterator[Node]:
    return _yield_all(self.key, self.value)


class ObjectLiteral(Node):
  type: NodeTag["ObjectLiteral"] = "ObjectLiteral"
  properties: List[Property] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.properties)


class ArrayLiteral(Node):
  type: NodeTag["ArrayLiteral"] = "ArrayLiteral"
  elements: List["Expression"] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.elements)


# --- Statements ---


class ExpressionStatement(Node):
  type: NodeTag["ExpressionStatement"] = "ExpressionStatement"
  expression: "Expression"

  def children(self) -> Iterator[Node]:
    return _yield_all(self.expression)


class ReturnStatement(Node):
  type: NodeTag["ReturnStatement"] = "ReturnStatement"
  argument: Optional["Expression"] = None

  def children(self) -> Iterator[Node]:
    return _yield_all(self.argument)


class BlockStatement(Node):
  type: NodeTag["BlockStatement"] = "BlockStatement"
  body: List["Statement"] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.body)


class VariableDeclarator(Node):
  type: NodeTag["VariableDeclarator"] = "VariableDeclarator"
  id: "Expression"
  init: Optional["Expression"] = None

  def children(self) -> Iterator[Node]:
    return _yield_all(self.id, self.init)


class VariableDeclaration(Node):
  type: NodeTag["VariableDeclaration"] = "VariableDeclaration"
  kind: str = "var"
  declarations: List[VariableDeclarator] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.declarations)


class IfStatement(Node):
  type: NodeTag["IfStatement"] = "IfStatement"
  test: "Expression"
  consequent: "Statement"
  alternate: Optional["Statement"] = None

  def children(self) -> Iterator[Node]:
    return _yield_all(self.test, self.consequent, self.alternate)


# --- Declarations ---


class FieldDeclaration(Node):
  type: NodeTag["FieldDeclaration"] = "FieldDeclaration"
  key: Identifier
  initial_value: Optional["Expression"] = None
  is_static: bool = False

  def children(self) -> Iterator[Node]:
    return _yield_all(self.key, self.initial_value)


class MethodDeclaration(Node):
  type: NodeTag["MethodDeclaration"] = "MethodDeclaration"
  key: Identifier
  params: List["ParameterLike"] = Field(default_factory=list)
  body: Optional["FunctionBody"] = None
  is_static: bool = False
  is_async: bool = False
  kind: str = "method"

  def children(self) -> Iterator[Node]:
    return _yield_all(self.key, self.params, self.body)

  @property
  def name(self) -> str:
    return self.key.name


class ClassBody(Node):
  type: NodeTag["ClassBody"] = "ClassBody"
  fields: List[FieldDeclaration] = Field(default_factory=list)
  methods: List[MethodDeclaration] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.fields, self.methods)


class ClassDeclaration(Node):
  """
  A top-level class.

  ``super_class`` is absent for plain value classes. The parser reports
  generic parents such as ``State<Counter>`` with the full text in
  ``super_class.name``.
  """

  type: NodeTag["ClassDeclaration"] = "ClassDeclaration"
  id: Identifier
  super_class: Optional[Identifier] = None
  body: ClassBody = Field(default_factory=ClassBody)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.id, self.super_class, self.body)

  @property
  def name(self) -> str:
    return self.id.name

  @property
  def parent_type(self) -> Optional[str]:
    return self.super_class.name if self.super_class else None

  def find_method(self, name: str) -> Optional[MethodDeclaration]:
    """Returns the first method called ``name``, if declared."""
    for method in self.body.methods:
      if method.key.name == name:
        return method
    return None


class FunctionDeclaration(Node):
  type: NodeTag["FunctionDeclaration"] = "FunctionDeclaration"
  id: Optional[Identifier] = None
  params: List["ParameterLike"] = Field(default_factory=list)
  body: Optional[BlockStatement] = None
  is_async: bool = False

  def children(self) -> Iterator[Node]:
    return _yield_all(self.id, self.params, self.body)

  @property
  def name(self) -> str:
    return self.id.name if self.id else "anonymous"


class ImportSpecifier(Node):
  type: NodeTag["ImportSpecifier"] = "ImportSpecifier"
  imported: Optional[Identifier] = None
  local: Optional[Identifier] = None

  def children(self) -> Iterator[Node]:
    return _yield_all(self.imported, self.local)


class ImportDeclaration(Node):
  type: NodeTag["ImportDeclaration"] = "ImportDeclaration"
  source: Optional[Literal] = None
  specifiers: List[ImportSpecifier] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.source, self.specifiers)


# --- Tagged unions ---

_EXPRESSION_TYPES = (
  Identifier,
  Literal,
  CallExpression,
  NewExpression,
  MemberExpression,
  AssignmentExpression,
  UpdateExpression,
  BinaryExpression,
  UnaryExpression,
  ConditionalExpression,
  ArrowFunctionExpression,
  ObjectLiteral,
  ArrayLiteral,
)

_STATEMENT_TYPES = (
  ExpressionStatement,
  ReturnStatement,
  BlockStatement,
  VariableDeclaration,
  IfStatement,
  ClassDeclaration,
  FunctionDeclaration,
  ImportDeclaration,
)


def _tag_of(cls: type) -> str:
  return cls.model_fields["type"].default


def _make_discriminator(known: frozenset):
  def _discriminate(value: Any) -> str:
    if isinstance(value, dict):
      tag = value.get("type")
    else:
      tag = getattr(value, "type", None)
    return tag if tag in known else "Opaque"

  return Discriminator(_discriminate)


def _tagged_union(types: tuple):
  members = tuple(Annotated[cls, Tag(_tag_of(cls))] for cls in types) + (Annotated[OpaqueNode, Tag("Opaque")],)
  known = frozenset(_tag_of(cls) for cls in types)
  return Annotated[Union[members], _make_discriminator(known)]


Expression = _tagged_union(_EXPRESSION_TYPES)
Statement = _tagged_union(_STATEMENT_TYPES)
ParameterLike = _tagged_union((Parameter, Identifier))
FunctionBody = _tagged_union((BlockStatement,) + _EXPRESSION_TYPES)


class Program(Node):
  """Root of a parsed source file."""

  type: NodeTag["Program"] = "Program"
  body: List[Statement] = Field(default_factory=list)

  def children(self) -> Iterator[Node]:
    return _yield_all(self.body)

  def classes(self) -> List[ClassDeclaration]:
    return [n for n in self.body if isinstance(n, ClassDeclaration)]

  def functions(self) -> List[FunctionDeclaration]:
    return [n for n in self.body if isinstance(n, FunctionDeclaration)]

  def imports(self) -> List[ImportDeclaration]:
    return [n for n in self.body if isinstance(n, ImportDeclaration)]

  def find_class(self, name: str) -> Optional[ClassDeclaration]:
    for cls in self.classes():
      if cls.name == name:
        return cls
    return None


for _model in (
  *_EXPRESSION_TYPES,
  *_STATEMENT_TYPES,
  Parameter,
  Property,
  VariableDeclarator,
  FieldDeclaration,
  MethodDeclaration,
  ClassBody,
  ImportSpecifier,
  Program,
):
  _model.model_rebuild()
