"""
ESTree -> JavaScript/JSX printer.

Prints programs with two-space indentation. Literals keep their source text
when the parser recorded it; synthesized nodes are printed canonically.
Statement-level comments are preserved, each comment printed once.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any

from reflective_bind.errors import StructuralInvariantError

Node = dict[str, Any]

INDENT = "  "

_PRECEDENCE: dict[str, int] = {
	# Comma
	",": 1,
	# Assignment, arrow functions, yield
	"=": 2,
	# Ternary
	"?:": 4,
	# Logical
	"??": 5,
	"||": 6,
	"&&": 7,
	# Bitwise
	"|": 8,
	"^": 9,
	"&": 10,
	# Equality
	"==": 11,
	"!=": 11,
	"===": 11,
	"!==": 11,
	# Relational
	"<": 12,
	"<=": 12,
	">": 12,
	">=": 12,
	"instanceof": 12,
	"in": 12,
	# Shift
	"<<": 13,
	">>": 13,
	">>>": 13,
	# Additive
	"+": 14,
	"-": 14,
	# Multiplicative
	"*": 15,
	"/": 15,
	"%": 15,
	# Exponentiation (right-assoc)
	"**": 16,
	# Unary
	"!": 17,
	"typeof": 17,
	"await": 17,
	# Postfix update
	"++": 18,
	# Call, member, new
	"()": 19,
	# Primary
	".": 20,
}

_PRIMARY = _PRECEDENCE["."]
_CALL = _PRECEDENCE["()"]
_UNARY = _PRECEDENCE["!"]
_ASSIGN = _PRECEDENCE["="]

# Statements whose printed form would be misread as a declaration or block
_AMBIGUOUS_STATEMENT_STARTS = ("{", "function", "async function", "class", "let [")


def emit(node: Node) -> str:
	"""Print any ESTree node; programs end with a single newline."""
	printer = Printer()
	if node["type"] == "Program":
		printer.program(node)
	elif _is_statement(node):
		printer.statement(node)
	else:
		printer.expr(node)
	code = "".join(printer.out)
	if node["type"] == "Program":
		code = code.rstrip("\n") + "\n" if code.strip() else ""
	return code


def _is_statement(node: Node) -> bool:
	kind = node["type"]
	return kind.endswith(("Statement", "Declaration"))


def _escape_string(s: str) -> str:
	"""Escape for double-quoted JS string literals."""
	return (
		s.replace("\\", "\\\\")
		.replace('"', '\\"')
		.replace("\n", "\\n")
		.replace("\r", "\\r")
		.replace("\t", "\\t")
		.replace("\b", "\\b")
		.replace("\f", "\\f")
		.replace("\v", "\\v")
		.replace("\x00", "\\x00")
		.replace("\u2028", "\\u2028")
		.replace("\u2029", "\\u2029")
	)


def precedence(node: Node) -> int:
	"""Operator precedence (higher = binds tighter). Default: primary (20)."""
	kind = node["type"]
	if kind == "SequenceExpression":
		return _PRECEDENCE[","]
	if kind in ("AssignmentExpression", "ArrowFunctionExpression", "YieldExpression"):
		return _ASSIGN
	if kind == "ConditionalExpression":
		return _PRECEDENCE["?:"]
	if kind in ("BinaryExpression", "LogicalExpression"):
		return _PRECEDENCE.get(node["operator"], 0)
	if kind in ("UnaryExpression", "AwaitExpression"):
		return _UNARY
	if kind == "UpdateExpression":
		return _UNARY if node.get("prefix") else _PRECEDENCE["++"]
	if kind in ("CallExpression", "NewExpression", "MemberExpression"):
		return _CALL
	if kind == "TaggedTemplateExpression":
		return _CALL
	return _PRIMARY


class Printer:
	"""Appends JavaScript text for ESTree nodes to `out`."""

	out: list[str]
	indent: int
	_seen_comments: set[tuple[int, int] | int]
	# Set while printing a `for` init, where a bare `in` would end the init
	_no_in: bool

	def __init__(self) -> None:
		self.out = []
		self.indent = 0
		self._seen_comments = set()
		self._no_in = False

	def pad(self) -> str:
		return INDENT * self.indent

	def capture(self, fn: Callable[[], None]) -> str:
		saved = self.out
		self.out = []
		try:
			fn()
			return "".join(self.out)
		finally:
			self.out = saved

	# =========================================================================
	# Comments
	# =========================================================================

	def _comment_key(self, comment: Node) -> tuple[int, int] | int:
		rng = comment.get("range")
		if rng:
			return (rng[0], rng[1])
		return id(comment)

	def _comment_text(self, comment: Node) -> str:
		if comment["type"] == "Line":
			return "//" + comment["value"]
		return "/*" + comment["value"] + "*/"

	def _unseen(self, comments: Sequence[Node] | None) -> list[Node]:
		fresh: list[Node] = []
		for comment in comments or ():
			key = self._comment_key(comment)
			if key in self._seen_comments:
				continue
			self._seen_comments.add(key)
			fresh.append(comment)
		return fresh

	def leading_comments(self, node: Node) -> None:
		for comment in self._unseen(node.get("leadingComments")):
			self.out.append(self.pad() + self._comment_text(comment) + "\n")

	def trailing_comments(self, node: Node) -> None:
		end_line = (node.get("loc") or {}).get("end", {}).get("line")
		for comment in self._unseen(node.get("trailingComments")):
			start_line = (comment.get("loc") or {}).get("start", {}).get("line")
			if end_line is not None and start_line == end_line:
				self.out.append(" " + self._comment_text(comment))
			else:
				self.out.append("\n" + self.pad() + self._comment_text(comment))

	# =========================================================================
	# Statements
	# =========================================================================

	def program(self, node: Node) -> None:
		self.statements(node["body"])

	def statements(self, body: Sequence[Node]) -> None:
		for stmt in body:
			self.statement(stmt)
			self.out.append("\n")

	def statement(self, node: Node, pad: bool = True) -> None:
		"""Print one statement without its trailing newline."""
		self.leading_comments(node)
		if pad:
			self.out.append(self.pad())
		method = getattr(self, "stmt_" + node["type"], None)
		if method is None:
			raise StructuralInvariantError(
				f"Cannot print statement of type {node['type']!r}", node
			)
		method(node)
		self.trailing_comments(node)

	def block(self, node: Node) -> None:
		if not node["body"]:
			self.out.append("{}")
			return
		self.out.append("{\n")
		self.indent += 1
		self.statements(node["body"])
		self.indent -= 1
		self.out.append(self.pad() + "}")

	def clause_body(self, node: Node) -> None:
		"""Body of if/for/while: blocks stay on the line, others are indented."""
		if node["type"] == "BlockStatement":
			self.out.append(" ")
			self.statement(node, pad=False)
		elif node["type"] == "EmptyStatement":
			self.out.append(";")
		else:
			self.out.append("\n")
			self.indent += 1
			self.statement(node)
			self.indent -= 1

	def stmt_BlockStatement(self, node: Node) -> None:
		self.block(node)

	def stmt_EmptyStatement(self, node: Node) -> None:
		self.out.append(";")

	def stmt_DebuggerStatement(self, node: Node) -> None:
		self.out.append("debugger;")

	def stmt_ExpressionStatement(self, node: Node) -> None:
		text = self.capture(lambda: self.expr(node["expression"]))
		if text.startswith(_AMBIGUOUS_STATEMENT_STARTS):
			text = f"({text})"
		self.out.append(text + ";")

	stmt_Directive = stmt_ExpressionStatement

	def stmt_VariableDeclaration(self, node: Node) -> None:
		self.variable_declaration(node)
		self.out.append(";")

	def variable_declaration(self, node: Node) -> None:
		self.out.append(node["kind"] + " ")
		for i, decl in enumerate(node["declarations"]):
			if i:
				self.out.append(", ")
			self.expr(decl["id"])
			if decl.get("init") is not None:
				self.out.append(" = ")
				self.expr(decl["init"], _ASSIGN)

	def stmt_FunctionDeclaration(self, node: Node) -> None:
		self.function(node)

	def stmt_ClassDeclaration(self, node: Node) -> None:
		self.class_(node)

	def stmt_ReturnStatement(self, node: Node) -> None:
		if node.get("argument") is None:
			self.out.append("return;")
			return
		self.out.append("return ")
		self.expr(node["argument"])
		self.out.append(";")

	def stmt_ThrowStatement(self, node: Node) -> None:
		self.out.append("throw ")
		self.expr(node["argument"])
		self.out.append(";")

	def stmt_BreakStatement(self, node: Node) -> None:
		label = node.get("label")
		self.out.append(f"break {label['name']};" if label else "break;")

	def stmt_ContinueStatement(self, node: Node) -> None:
		label = node.get("label")
		self.out.append(f"continue {label['name']};" if label else "continue;")

	def stmt_LabeledStatement(self, node: Node) -> None:
		self.out.append(node["label"]["name"] + ": ")
		self.statement(node["body"], pad=False)

	def stmt_IfStatement(self, node: Node) -> None:
		self.out.append("if (")
		self.expr(node["test"])
		self.out.append(")")
		self.clause_body(node["consequent"])
		alternate = node.get("alternate")
		if alternate is None:
			return
		if node["consequent"]["type"] == "BlockStatement":
			self.out.append(" else")
		else:
			self.out.append("\n" + self.pad() + "else")
		if alternate["type"] == "IfStatement":
			self.out.append(" ")
			self.statement(alternate, pad=False)
		else:
			self.clause_body(alternate)

	def stmt_SwitchStatement(self, node: Node) -> None:
		self.out.append("switch (")
		self.expr(node["discriminant"])
		self.out.append(") {\n")
		self.indent += 1
		for case in node["cases"]:
			self.leading_comments(case)
			if case.get("test") is None:
				self.out.append(self.pad() + "default:")
			else:
				self.out.append(self.pad() + "case ")
				self.expr(case["test"])
				self.out.append(":")
			consequent = case["consequent"]
			if len(consequent) == 1 and consequent[0]["type"] == "BlockStatement":
				self.out.append(" ")
				self.statement(consequent[0], pad=False)
				self.out.append("\n")
				continue
			self.out.append("\n")
			self.indent += 1
			self.statements(consequent)
			self.indent -= 1
		self.indent -= 1
		self.out.append(self.pad() + "}")

	def stmt_TryStatement(self, node: Node) -> None:
		self.out.append("try ")
		self.block(node["block"])
		handler = node.get("handler")
		if handler is not None:
			self.out.append(" catch ")
			if handler.get("param") is not None:
				self.out.append("(")
				self.expr(handler["param"])
				self.out.append(") ")
			self.block(handler["body"])
		if node.get("finalizer") is not None:
			self.out.append(" finally ")
			self.block(node["finalizer"])

	def stmt_WhileStatement(self, node: Node) -> None:
		self.out.append("while (")
		self.expr(node["test"])
		self.out.append(")")
		self.clause_body(node["body"])

	def stmt_DoWhileStatement(self, node: Node) -> None:
		self.out.append("do")
		self.clause_body(node["body"])
		if node["body"]["type"] == "BlockStatement":
			self.out.append(" while (")
		else:
			self.out.append("\n" + self.pad() + "while (")
		self.expr(node["test"])
		self.out.append(");")

	def stmt_ForStatement(self, node: Node) -> None:
		self.out.append("for (")
		init = node.get("init")
		if init is not None:
			self._no_in = True
			try:
				if init["type"] == "VariableDeclaration":
					self.variable_declaration(init)
				else:
					self.expr(init)
			finally:
				self._no_in = False
		self.out.append(";")
		if node.get("test") is not None:
			self.out.append(" ")
			self.expr(node["test"])
		self.out.append(";")
		if node.get("update") is not None:
			self.out.append(" ")
			self.expr(node["update"])
		self.out.append(")")
		self.clause_body(node["body"])

	def _for_x(self, node: Node, keyword: str) -> None:
		self.out.append("for (")
		left = node["left"]
		if left["type"] == "VariableDeclaration":
			self.variable_declaration(left)
		else:
			self.expr(left)
		self.out.append(f" {keyword} ")
		self.expr(node["right"], _ASSIGN if keyword == "of" else 0)
		self.out.append(")")
		self.clause_body(node["body"])

	def stmt_ForInStatement(self, node: Node) -> None:
		self._for_x(node, "in")

	def stmt_ForOfStatement(self, node: Node) -> None:
		self._for_x(node, "of")

	def stmt_WithStatement(self, node: Node) -> None:
		self.out.append("with (")
		self.expr(node["object"])
		self.out.append(")")
		self.clause_body(node["body"])

	# -------------------------------------------------------------------------
	# Modules
	# -------------------------------------------------------------------------

	def _source(self, node: Node) -> str:
		raw = node.get("raw")
		return raw if raw else f'"{_escape_string(node["value"])}"'

	def stmt_ImportDeclaration(self, node: Node) -> None:
		specifiers = node.get("specifiers") or []
		if not specifiers:
			self.out.append(f"import {self._source(node['source'])};")
			return
		parts: list[str] = []
		named: list[str] = []
		for spec in specifiers:
			local = spec["local"]["name"]
			if spec["type"] == "ImportDefaultSpecifier":
				parts.append(local)
			elif spec["type"] == "ImportNamespaceSpecifier":
				parts.append(f"* as {local}")
			else:
				imported = spec["imported"]["name"]
				named.append(local if imported == local else f"{imported} as {local}")
		if named:
			parts.append("{ " + ", ".join(named) + " }")
		self.out.append(
			f"import {', '.join(parts)} from {self._source(node['source'])};"
		)

	def _export_specifiers(self, node: Node) -> str:
		names: list[str] = []
		for spec in node.get("specifiers") or []:
			local = spec["local"]["name"]
			exported = spec["exported"]["name"]
			names.append(local if local == exported else f"{local} as {exported}")
		return "{ " + ", ".join(names) + " }" if names else "{}"

	def stmt_ExportNamedDeclaration(self, node: Node) -> None:
		declaration = node.get("declaration")
		if declaration is not None:
			self.out.append("export ")
			self.statement(declaration, pad=False)
			return
		text = "export " + self._export_specifiers(node)
		if node.get("source") is not None:
			text += " from " + self._source(node["source"])
		self.out.append(text + ";")

	def stmt_ExportDefaultDeclaration(self, node: Node) -> None:
		declaration = node["declaration"]
		self.out.append("export default ")
		if declaration["type"] in ("FunctionDeclaration", "ClassDeclaration"):
			self.statement(declaration, pad=False)
		else:
			self.expr(declaration, _ASSIGN)
			self.out.append(";")

	def stmt_ExportAllDeclaration(self, node: Node) -> None:
		self.out.append(f"export * from {self._source(node['source'])};")

	# =========================================================================
	# Functions and classes
	# =========================================================================

	def params(self, params: Sequence[Node]) -> None:
		self.out.append("(")
		for i, param in enumerate(params):
			if i:
				self.out.append(", ")
			self.expr(param, _ASSIGN)
		self.out.append(")")

	def function(self, node: Node) -> None:
		if node.get("async"):
			self.out.append("async ")
		self.out.append("function")
		if node.get("generator"):
			self.out.append("*")
		if node.get("id") is not None:
			self.out.append(" " + node["id"]["name"])
		elif node["type"] == "FunctionExpression":
			self.out.append(" ")
		self.params(node["params"])
		self.out.append(" ")
		self.block(node["body"])

	def arrow(self, node: Node) -> None:
		if node.get("async"):
			self.out.append("async ")
		params = node["params"]
		if len(params) == 1 and params[0]["type"] == "Identifier":
			self.out.append(params[0]["name"])
		else:
			self.params(params)
		self.out.append(" => ")
		body = node["body"]
		if body["type"] == "BlockStatement":
			self.block(body)
		elif body["type"] == "ObjectExpression":
			self.out.append("(")
			self.expr(body)
			self.out.append(")")
		else:
			self.expr(body, _ASSIGN)

	def class_(self, node: Node) -> None:
		self.out.append("class")
		if node.get("id") is not None:
			self.out.append(" " + node["id"]["name"])
		if node.get("superClass") is not None:
			self.out.append(" extends ")
			self.expr(node["superClass"], _CALL)
		self.out.append(" ")
		members = node["body"]["body"]
		if not members:
			self.out.append("{}")
			return
		self.out.append("{\n")
		self.indent += 1
		for member in members:
			self.leading_comments(member)
			self.out.append(self.pad())
			self.class_member(member)
			self.out.append("\n")
		self.indent -= 1
		self.out.append(self.pad() + "}")

	def property_key(self, node: Node) -> None:
		if node.get("computed"):
			self.out.append("[")
			self.expr(node["key"], _ASSIGN)
			self.out.append("]")
		else:
			self.expr(node["key"])

	def method(self, node: Node, fn: Node) -> None:
		kind = node.get("kind")
		if fn.get("async"):
			self.out.append("async ")
		if fn.get("generator"):
			self.out.append("*")
		if kind in ("get", "set"):
			self.out.append(kind + " ")
		self.property_key(node)
		self.params(fn["params"])
		self.out.append(" ")
		self.block(fn["body"])

	def class_member(self, node: Node) -> None:
		if node.get("static"):
			self.out.append("static ")
		if node["type"] == "MethodDefinition":
			self.method(node, node["value"])
			return
		# Class fields
		self.property_key(node)
		if node.get("value") is not None:
			self.out.append(" = ")
			self.expr(node["value"], _ASSIGN)
		self.out.append(";")

	# =========================================================================
	# Expressions
	# =========================================================================

	def expr(self, node: Node, min_prec: int = 0) -> None:
		"""Print an expression, parenthesized if it binds looser than min_prec."""
		needs_parens = precedence(node) < min_prec or (
			self._no_in
			and node["type"] == "BinaryExpression"
			and node["operator"] == "in"
		)
		if needs_parens:
			self.out.append("(")
		method = getattr(self, "expr_" + node["type"], None)
		if method is None:
			raise StructuralInvariantError(
				f"Cannot print expression of type {node['type']!r}", node
			)
		method(node)
		if needs_parens:
			self.out.append(")")

	def expr_Identifier(self, node: Node) -> None:
		self.out.append(node["name"])

	def expr_ThisExpression(self, node: Node) -> None:
		self.out.append("this")

	def expr_Super(self, node: Node) -> None:
		self.out.append("super")

	def expr_Import(self, node: Node) -> None:
		self.out.append("import")

	def expr_Literal(self, node: Node) -> None:
		raw = node.get("raw")
		if raw is not None:
			self.out.append(raw)
			return
		regex = node.get("regex")
		if regex:
			self.out.append(f"/{regex['pattern']}/{regex.get('flags', '')}")
			return
		value = node.get("value")
		if value is None:
			self.out.append("null")
		elif isinstance(value, bool):
			self.out.append("true" if value else "false")
		elif isinstance(value, str):
			self.out.append(f'"{_escape_string(value)}"')
		elif isinstance(value, float) and value.is_integer():
			self.out.append(str(int(value)))
		else:
			self.out.append(json.dumps(value))

	def expr_TemplateLiteral(self, node: Node) -> None:
		self.out.append("`")
		quasis = node["quasis"]
		expressions = node["expressions"]
		for i, quasi in enumerate(quasis):
			self.out.append(quasi["value"]["raw"])
			if i < len(expressions):
				self.out.append("${")
				self.expr(expressions[i])
				self.out.append("}")
		self.out.append("`")

	def expr_TaggedTemplateExpression(self, node: Node) -> None:
		self.expr(node["tag"], _CALL)
		self.expr_TemplateLiteral(node["quasi"])

	def expr_ArrayExpression(self, node: Node) -> None:
		self.out.append("[")
		elements = node["elements"]
		for i, element in enumerate(elements):
			if i:
				self.out.append(", ")
			if element is not None:
				self.expr(element, _ASSIGN)
		# A trailing hole needs its own comma
		if elements and elements[-1] is None:
			self.out.append(",")
		self.out.append("]")

	expr_ArrayPattern = expr_ArrayExpression

	def expr_ObjectExpression(self, node: Node) -> None:
		properties = node["properties"]
		if not properties:
			self.out.append("{}")
			return
		self.out.append("{ ")
		for i, prop in enumerate(properties):
			if i:
				self.out.append(", ")
			if prop["type"] == "Property":
				self.object_property(prop)
			else:
				self.expr(prop, _ASSIGN)
		self.out.append(" }")

	expr_ObjectPattern = expr_ObjectExpression

	def object_property(self, node: Node) -> None:
		value = node["value"]
		if node.get("kind") in ("get", "set") or node.get("method"):
			self.method(node, value)
			return
		if node.get("shorthand") and not node.get("computed"):
			key_name = node["key"].get("name")
			if value["type"] == "Identifier" and value["name"] == key_name:
				self.out.append(key_name)
				return
			if (
				value["type"] == "AssignmentPattern"
				and value["left"]["type"] == "Identifier"
				and value["left"]["name"] == key_name
			):
				self.expr(value)
				return
		self.property_key(node)
		self.out.append(": ")
		self.expr(value, _ASSIGN)

	def expr_FunctionExpression(self, node: Node) -> None:
		self.function(node)

	def expr_ArrowFunctionExpression(self, node: Node) -> None:
		self.arrow(node)

	def expr_ClassExpression(self, node: Node) -> None:
		self.class_(node)

	def expr_SequenceExpression(self, node: Node) -> None:
		for i, item in enumerate(node["expressions"]):
			if i:
				self.out.append(", ")
			self.expr(item, _ASSIGN)

	def expr_UnaryExpression(self, node: Node) -> None:
		op = node["operator"]
		argument = node["argument"]
		self.out.append(op)
		if op.isalpha():
			self.out.append(" ")
		elif (
			argument["type"] in ("UnaryExpression", "UpdateExpression")
			and argument["operator"][0] == op
			and argument.get("prefix", True)
		):
			# `- -x`, `+ ++x`
			self.out.append(" ")
		self.expr(argument, _UNARY)

	def expr_UpdateExpression(self, node: Node) -> None:
		if node.get("prefix"):
			self.out.append(node["operator"])
			self.expr(node["argument"], _UNARY)
		else:
			self.expr(node["argument"], _PRECEDENCE["++"])
			self.out.append(node["operator"])

	def expr_AwaitExpression(self, node: Node) -> None:
		self.out.append("await ")
		self.expr(node["argument"], _UNARY)

	def expr_YieldExpression(self, node: Node) -> None:
		self.out.append("yield*" if node.get("delegate") else "yield")
		if node.get("argument") is not None:
			self.out.append(" ")
			self.expr(node["argument"], _ASSIGN)

	def expr_BinaryExpression(self, node: Node) -> None:
		op = node["operator"]
		prec = _PRECEDENCE.get(op, 0)
		right_assoc = op == "**"
		left = node["left"]
		# `(-a) ** b` must keep its parentheses
		if right_assoc and left["type"] in ("UnaryExpression", "AwaitExpression"):
			self.out.append("(")
			self.expr(left)
			self.out.append(")")
		else:
			self.expr(left, prec + 1 if right_assoc else prec)
		self.out.append(f" {op} ")
		self.expr(node["right"], prec if right_assoc else prec + 1)

	expr_LogicalExpression = expr_BinaryExpression

	def expr_AssignmentExpression(self, node: Node) -> None:
		left = node["left"]
		if left["type"] == "ObjectPattern":
			# Only reachable in parenthesized statement position
			self.expr(left)
		else:
			self.expr(left, _CALL)
		self.out.append(f" {node['operator']} ")
		self.expr(node["right"], _ASSIGN)

	def expr_AssignmentPattern(self, node: Node) -> None:
		self.expr(node["left"])
		self.out.append(" = ")
		self.expr(node["right"], _ASSIGN)

	def expr_ConditionalExpression(self, node: Node) -> None:
		self.expr(node["test"], _PRECEDENCE["?:"] + 1)
		self.out.append(" ? ")
		self.expr(node["consequent"], _ASSIGN)
		self.out.append(" : ")
		self.expr(node["alternate"], _ASSIGN)

	def arguments(self, args: Sequence[Node]) -> None:
		self.out.append("(")
		for i, arg in enumerate(args):
			if i:
				self.out.append(", ")
			self.expr(arg, _ASSIGN)
		self.out.append(")")

	def expr_CallExpression(self, node: Node) -> None:
		callee = node["callee"]
		if callee["type"] in ("FunctionExpression", "ClassExpression"):
			self.out.append("(")
			self.expr(callee)
			self.out.append(")")
		else:
			self.expr(callee, _CALL)
		self.arguments(node["arguments"])

	def expr_NewExpression(self, node: Node) -> None:
		self.out.append("new ")
		callee = node["callee"]
		if _contains_call(callee) or precedence(callee) < _CALL:
			self.out.append("(")
			self.expr(callee)
			self.out.append(")")
		else:
			self.expr(callee, _CALL)
		self.arguments(node["arguments"])

	def expr_MemberExpression(self, node: Node) -> None:
		obj = node["object"]
		if obj["type"] == "Literal" and isinstance(obj.get("raw"), str) and (
			obj["raw"].isdigit()
		):
			# `1..toString()` reads badly, `(1).toString()` does not
			self.out.append("(")
			self.expr(obj)
			self.out.append(")")
		elif obj["type"] in ("FunctionExpression", "ClassExpression", "ObjectExpression"):
			self.out.append("(")
			self.expr(obj)
			self.out.append(")")
		else:
			self.expr(obj, _CALL)
		if node.get("computed"):
			self.out.append("[")
			self.expr(node["property"])
			self.out.append("]")
		else:
			self.out.append("." + node["property"]["name"])

	def expr_MetaProperty(self, node: Node) -> None:
		self.out.append(f"{node['meta']['name']}.{node['property']['name']}")

	def expr_SpreadElement(self, node: Node) -> None:
		self.out.append("...")
		self.expr(node["argument"], _ASSIGN)

	expr_RestElement = expr_SpreadElement

	# =========================================================================
	# JSX
	# =========================================================================

	def expr_JSXElement(self, node: Node) -> None:
		self.expr_JSXOpeningElement(node["openingElement"])
		if node["openingElement"].get("selfClosing"):
			return
		for child in node["children"]:
			self.jsx_child(child)
		closing = node.get("closingElement")
		if closing is not None:
			self.out.append("</")
			self.jsx_name(closing["name"])
			self.out.append(">")

	def expr_JSXFragment(self, node: Node) -> None:
		self.out.append("<>")
		for child in node["children"]:
			self.jsx_child(child)
		self.out.append("</>")

	def expr_JSXOpeningElement(self, node: Node) -> None:
		self.out.append("<")
		self.jsx_name(node["name"])
		for attr in node["attributes"]:
			self.out.append(" ")
			if attr["type"] == "JSXSpreadAttribute":
				self.out.append("{...")
				self.expr(attr["argument"], _ASSIGN)
				self.out.append("}")
			else:
				self.jsx_attribute(attr)
		self.out.append(" />" if node.get("selfClosing") else ">")

	def jsx_name(self, node: Node) -> None:
		kind = node["type"]
		if kind == "JSXIdentifier":
			self.out.append(node["name"])
		elif kind == "JSXMemberExpression":
			self.jsx_name(node["object"])
			self.out.append(".")
			self.jsx_name(node["property"])
		elif kind == "JSXNamespacedName":
			self.jsx_name(node["namespace"])
			self.out.append(":")
			self.jsx_name(node["name"])
		else:
			raise StructuralInvariantError(f"Unexpected JSX name {kind!r}", node)

	def jsx_attribute(self, node: Node) -> None:
		self.jsx_name(node["name"])
		value = node.get("value")
		if value is None:
			return
		self.out.append("=")
		if value["type"] == "Literal":
			raw = value.get("raw")
			self.out.append(raw if raw else f'"{value["value"]}"')
		else:
			self.jsx_child(value)

	def jsx_child(self, node: Node) -> None:
		kind = node["type"]
		if kind == "JSXText":
			raw = node.get("raw")
			self.out.append(raw if raw is not None else node.get("value", ""))
		elif kind == "JSXExpressionContainer":
			self.out.append("{")
			if node["expression"]["type"] != "JSXEmptyExpression":
				self.expr(node["expression"])
			self.out.append("}")
		elif kind == "JSXSpreadChild":
			self.out.append("{...")
			self.expr(node["expression"])
			self.out.append("}")
		else:
			self.expr(node)


def _contains_call(node: Node) -> bool:
	cur: Node | None = node
	while cur is not None:
		if cur["type"] == "CallExpression":
			return True
		if cur["type"] == "MemberExpression":
			cur = cur["object"]
		elif cur["type"] == "TaggedTemplateExpression":
			cur = cur["tag"]
		else:
			return False
	return False
