"""ESTree node tables, predicates and builders."""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

Node = dict[str, Any]

# Child fields of every node type, in evaluation order. The ordering oracle
# relies on this order to compare two diverging fields of one parent.
VISITOR_KEYS: dict[str, tuple[str, ...]] = {
	# Program structure
	"Program": ("body",),
	"BlockStatement": ("body",),
	"EmptyStatement": (),
	"ExpressionStatement": ("expression",),
	"Directive": ("expression",),
	"DebuggerStatement": (),
	"WithStatement": ("object", "body"),
	# Control flow
	"ReturnStatement": ("argument",),
	"LabeledStatement": ("label", "body"),
	"BreakStatement": ("label",),
	"ContinueStatement": ("label",),
	"IfStatement": ("test", "consequent", "alternate"),
	"SwitchStatement": ("discriminant", "cases"),
	"SwitchCase": ("test", "consequent"),
	"ThrowStatement": ("argument",),
	"TryStatement": ("block", "handler", "finalizer"),
	"CatchClause": ("param", "body"),
	"WhileStatement": ("test", "body"),
	"DoWhileStatement": ("body", "test"),
	"ForStatement": ("init", "test", "update", "body"),
	"ForInStatement": ("left", "right", "body"),
	"ForOfStatement": ("left", "right", "body"),
	# Declarations
	"FunctionDeclaration": ("id", "params", "body"),
	"VariableDeclaration": ("declarations",),
	"VariableDeclarator": ("id", "init"),
	"ClassDeclaration": ("id", "superClass", "body"),
	"ClassExpression": ("id", "superClass", "body"),
	"ClassBody": ("body",),
	"MethodDefinition": ("key", "value"),
	"ClassProperty": ("key", "value"),
	"FieldDefinition": ("key", "value"),
	"PropertyDefinition": ("key", "value"),
	# Expressions
	"Identifier": (),
	"Literal": (),
	"ThisExpression": (),
	"Super": (),
	"Import": (),
	"ArrayExpression": ("elements",),
	"ObjectExpression": ("properties",),
	"Property": ("key", "value"),
	"FunctionExpression": ("id", "params", "body"),
	"ArrowFunctionExpression": ("params", "body"),
	"UnaryExpression": ("argument",),
	"UpdateExpression": ("argument",),
	"BinaryExpression": ("left", "right"),
	"AssignmentExpression": ("left", "right"),
	"LogicalExpression": ("left", "right"),
	"MemberExpression": ("object", "property"),
	"ConditionalExpression": ("test", "consequent", "alternate"),
	"CallExpression": ("callee", "arguments"),
	"NewExpression": ("callee", "arguments"),
	"SequenceExpression": ("expressions",),
	"YieldExpression": ("argument",),
	"AwaitExpression": ("argument",),
	"TemplateLiteral": ("quasis", "expressions"),
	"TaggedTemplateExpression": ("tag", "quasi"),
	"TemplateElement": (),
	"SpreadElement": ("argument",),
	"RestElement": ("argument",),
	"MetaProperty": ("meta", "property"),
	# Patterns
	"ObjectPattern": ("properties",),
	"ArrayPattern": ("elements",),
	"AssignmentPattern": ("left", "right"),
	# Modules
	"ImportDeclaration": ("specifiers", "source"),
	"ImportSpecifier": ("local", "imported"),
	"ImportDefaultSpecifier": ("local",),
	"ImportNamespaceSpecifier": ("local",),
	"ExportNamedDeclaration": ("declaration", "specifiers", "source"),
	"ExportSpecifier": ("local", "exported"),
	"ExportDefaultDeclaration": ("declaration",),
	"ExportAllDeclaration": ("source",),
	# JSX
	"JSXElement": ("openingElement", "children", "closingElement"),
	"JSXOpeningElement": ("name", "attributes"),
	"JSXClosingElement": ("name",),
	"JSXAttribute": ("name", "value"),
	"JSXSpreadAttribute": ("argument",),
	"JSXExpressionContainer": ("expression",),
	"JSXEmptyExpression": (),
	"JSXIdentifier": (),
	"JSXMemberExpression": ("object", "property"),
	"JSXNamespacedName": ("namespace", "name"),
	"JSXText": (),
	"JSXOpeningFragment": (),
	"JSXClosingFragment": (),
	"JSXFragment": ("openingFragment", "children", "closingFragment"),
}

FUNCTION_TYPES = frozenset(
	{"FunctionDeclaration", "FunctionExpression", "ArrowFunctionExpression"}
)
LOOP_TYPES = frozenset(
	{
		"ForStatement",
		"ForInStatement",
		"ForOfStatement",
		"WhileStatement",
		"DoWhileStatement",
	}
)
CLASS_TYPES = frozenset({"ClassDeclaration", "ClassExpression"})
CLASS_PROPERTY_TYPES = frozenset(
	{"ClassProperty", "FieldDefinition", "PropertyDefinition"}
)

_TYPE_ONLY_PREFIXES = ("TS", "Type", "Flow", "Declare", "Interface", "Opaque")
# Typed wrappers around runtime expressions; only their annotations are skipped
_RUNTIME_TYPED_NODES = frozenset(
	{
		"TypeCastExpression",
		"TSAsExpression",
		"TSSatisfiesExpression",
		"TSNonNullExpression",
		"TSTypeAssertion",
		"TSInstantiationExpression",
	}
)
_TYPE_ONLY_FIELDS = (
	"typeAnnotation",
	"returnType",
	"typeParameters",
	"typeArguments",
	"predicate",
)
_NON_CHILD_FIELDS = (
	"leadingComments",
	"trailingComments",
	"innerComments",
	"comments",
	"loc",
	"range",
)

_COMPAT_TAG = re.compile(r"^[a-z]|-")


def is_function(node: Node | None) -> bool:
	return node is not None and node.get("type") in FUNCTION_TYPES


def is_loop(node: Node | None) -> bool:
	return node is not None and node.get("type") in LOOP_TYPES


def is_type_only(node: Node | None) -> bool:
	"""Type annotations carry no runtime bindings and are never walked."""
	if node is None:
		return False
	kind = node.get("type", "")
	if kind in _RUNTIME_TYPED_NODES:
		return False
	return kind.startswith(_TYPE_ONLY_PREFIXES) or kind.endswith("TypeAnnotation")


def is_compat_tag(name: str | None) -> bool:
	"""Raw markup tags (`div`, `my-element`) as opposed to components."""
	return bool(name) and name != "this" and _COMPAT_TAG.search(name) is not None


def is_node(value: Any) -> bool:
	return isinstance(value, dict) and "type" in value


def child_keys(node: Node) -> tuple[str, ...]:
	keys = VISITOR_KEYS.get(node["type"])
	if keys is not None:
		return keys
	# Unknown node kinds are walked in declaration order so references
	# inside them are never missed
	return tuple(
		k
		for k, v in node.items()
		if k not in _TYPE_ONLY_FIELDS
		and k not in _NON_CHILD_FIELDS
		and (is_node(v) or (isinstance(v, list) and any(is_node(i) for i in v)))
	)


def iter_children(node: Node) -> Iterator[tuple[str, int | None, Node]]:
	"""Yield `(key, index, child)` for every child node in visitor order."""
	for key in child_keys(node):
		value = node.get(key)
		if isinstance(value, list):
			for i, item in enumerate(value):
				if is_node(item):
					yield key, i, item
		elif is_node(value):
			yield key, None, value


def is_referenced(node: Node, parent: Node | None, key: str | None) -> bool:
	"""Whether an Identifier/JSXIdentifier at `parent[key]` reads a binding."""
	if parent is None:
		return True
	kind = parent["type"]
	if node["type"] == "JSXIdentifier":
		if kind == "JSXMemberExpression":
			return key == "object"
		if kind in ("JSXOpeningElement", "JSXClosingElement"):
			return not is_compat_tag(node.get("name"))
		return False
	if kind == "MemberExpression":
		return key == "object" or bool(parent.get("computed"))
	if kind in ("Property", "MethodDefinition") or kind in CLASS_PROPERTY_TYPES:
		if key == "key":
			return bool(parent.get("computed"))
		# Shorthand pattern values are bindings, handled by the scope crawler
		return True
	if kind in ("LabeledStatement", "BreakStatement", "ContinueStatement"):
		return False
	if kind == "MetaProperty":
		return False
	if kind in ("ImportSpecifier", "ImportDefaultSpecifier", "ImportNamespaceSpecifier"):
		return False
	if kind == "ExportSpecifier":
		return key == "local"
	if kind in FUNCTION_TYPES or kind in CLASS_TYPES:
		return key not in ("id", "params")
	if kind == "CatchClause":
		return key != "param"
	if kind == "VariableDeclarator":
		return key != "id"
	if kind == "JSXAttribute":
		return key != "name"
	return True


# =============================================================================
# Builders
# =============================================================================


def identifier(name: str) -> Node:
	return {"type": "Identifier", "name": name}


def this_expression() -> Node:
	return {"type": "ThisExpression"}


def string_literal(value: str) -> Node:
	return {"type": "Literal", "value": value, "raw": None}


def call_expression(callee: Node, arguments: list[Node]) -> Node:
	return {"type": "CallExpression", "callee": callee, "arguments": arguments}


def return_statement(argument: Node | None) -> Node:
	return {"type": "ReturnStatement", "argument": argument}


def block_statement(body: list[Node]) -> Node:
	return {"type": "BlockStatement", "body": body}


def function_declaration(name: str, params: list[Node], body: Node) -> Node:
	return {
		"type": "FunctionDeclaration",
		"id": identifier(name),
		"params": params,
		"body": body,
		"generator": False,
		"async": False,
		"expression": False,
	}


def import_declaration(local: str, imported: str, source: str) -> Node:
	return {
		"type": "ImportDeclaration",
		"specifiers": [
			{
				"type": "ImportSpecifier",
				"local": identifier(local),
				"imported": identifier(imported),
			}
		],
		"source": string_literal(source),
	}


def describe(node: Node | None) -> str:
	"""Short source-like rendering of simple expressions for messages."""
	if node is None:
		return ""
	kind = node["type"]
	if kind == "Literal":
		raw = node.get("raw")
		return raw if raw is not None else repr(node.get("value"))
	if kind in ("Identifier", "JSXIdentifier"):
		return node["name"]
	if kind in ("ThisExpression", "Super"):
		return "this" if kind == "ThisExpression" else "super"
	if kind == "MetaProperty":
		return f"{node['meta']['name']}.{node['property']['name']}"
	if kind == "MemberExpression":
		obj = describe(node["object"])
		prop = describe(node["property"])
		return f"{obj}[{prop}]" if node.get("computed") else f"{obj}.{prop}"
	if kind == "CallExpression":
		args = ", ".join(describe(a) for a in node["arguments"])
		return f"{describe(node['callee'])}({args})"
	return f"__{kind}__"
