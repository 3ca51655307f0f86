"""Tests for the scope crawl, bindings and node paths."""

from __future__ import annotations

import pytest
from reflective_bind.errors import StalePathError, StructuralInvariantError
from reflective_bind.nodes import identifier
from reflective_bind.parser import parse
from reflective_bind.paths import NodePath
from reflective_bind.scope import (
	UidGenerator,
	UnitIndex,
	binding_identifiers,
	crawl,
)


def index_of(source: str) -> UnitIndex:
	return crawl(parse(source))


def first(index: UnitIndex, kind: str) -> NodePath:
	return next(p for p in index if p.node["type"] == kind)


def function_decl(index: UnitIndex, name: str) -> NodePath:
	return next(
		p
		for p in index
		if p.node["type"] == "FunctionDeclaration" and p.node["id"]["name"] == name
	)


# =============================================================================
# Declarations
# =============================================================================


class TestDeclarations:
	def test_let_is_block_scoped(self):
		index = index_of("function g() { if (x) { let a = 1; } }")
		decl = first(index, "VariableDeclarator")
		assert decl.scope.kind == "block"
		assert decl.scope.has_own_binding("a")
		assert not function_decl(index, "g").scope.has_own_binding("a")

	def test_var_lands_in_function_scope(self):
		index = index_of("function g() { if (x) { var a = 1; } }")
		g = function_decl(index, "g")
		binding = g.scope.bindings["a"]
		assert binding.kind == "var"
		assert binding.path.node["type"] == "VariableDeclarator"

	def test_function_declaration_binds_in_enclosing_scope(self):
		index = index_of("function outer() { function inner() {} }")
		outer = function_decl(index, "outer")
		assert index.program_scope.bindings["outer"].kind == "hoisted"
		assert outer.scope.bindings["inner"].kind == "hoisted"
		assert not index.program_scope.has_own_binding("inner")

	def test_params(self):
		index = index_of("function g(a, { b }, ...c) {}")
		bindings = function_decl(index, "g").scope.bindings
		assert {name: b.kind for name, b in bindings.items()} == {
			"a": "param",
			"b": "param",
			"c": "param",
		}
		assert bindings["a"].path.node["type"] == "Identifier"
		assert bindings["b"].path.node["type"] == "ObjectPattern"

	def test_imports_are_module_bindings(self):
		index = index_of(
			'import React, { useState as useS } from "react";\nimport * as ns from "x";'
		)
		bindings = index.program_scope.bindings
		assert sorted(bindings) == ["React", "ns", "useS"]
		assert all(b.kind == "module" for b in bindings.values())

	def test_catch_param(self):
		index = index_of("try { run(); } catch (err) { log(err); }")
		clause = first(index, "CatchClause")
		binding = clause.scope.bindings["err"]
		assert clause.scope.kind == "catch"
		assert binding.path.node is clause.node

	def test_class_expression_name_is_local(self):
		index = index_of("const C = class Named {};")
		cls = first(index, "ClassExpression")
		assert cls.scope.bindings["Named"].kind == "local"
		assert sorted(index.program_scope.bindings) == ["C"]

	def test_lookup_walks_outwards(self):
		index = index_of("let a = 1;\nfunction g() { let b = a; }")
		inner = next(
			p
			for p in index
			if p.node["type"] == "VariableDeclarator" and p.node["id"]["name"] == "b"
		)
		binding = inner.scope.get_binding("a")
		assert binding is not None
		assert binding.scope is index.program_scope
		assert inner.scope.get_binding("missing") is None


def test_binding_identifiers_of_nested_pattern():
	program = parse("const { a, b: [c, ...d], e = 1 } = obj;")
	pattern = program["body"][0]["declarations"][0]["id"]
	assert [n["name"] for n in binding_identifiers(pattern)] == ["a", "c", "d", "e"]


def test_member_targets_bind_nothing():
	program = parse("obj.x = 1;")
	target = program["body"][0]["expression"]["left"]
	assert binding_identifiers(target) == []


# =============================================================================
# Constant violations
# =============================================================================


class TestConstantViolations:
	def test_assignment_update_and_for_of(self):
		index = index_of("let a = 1;\na = 2;\na++;\nfor (a of xs) {}")
		binding = index.program_scope.bindings["a"]
		assert [p.node["type"] for p in binding.constant_violations] == [
			"AssignmentExpression",
			"UpdateExpression",
			"ForOfStatement",
		]
		assert binding.reassignable

	def test_destructuring_assignment(self):
		index = index_of("let a, b;\n[a, { b }] = pair;")
		bindings = index.program_scope.bindings
		assert len(bindings["a"].constant_violations) == 1
		assert len(bindings["b"].constant_violations) == 1

	def test_var_redeclaration_is_a_violation(self):
		index = index_of("var a = 1;\nvar a = 2;")
		binding = index.program_scope.bindings["a"]
		assert len(binding.constant_violations) == 1
		assert binding.constant_violations[0].node["type"] == "VariableDeclarator"

	def test_assignment_before_declaration_is_found(self):
		index = index_of("function g() { a = 2; }\nvar a = 1;")
		binding = index.program_scope.bindings["a"]
		assert len(binding.constant_violations) == 1

	def test_const_is_not_reassignable(self):
		index = index_of("const a = 1;\nlet b = 2;")
		bindings = index.program_scope.bindings
		assert not bindings["a"].reassignable
		assert bindings["b"].reassignable

	def test_shadowed_assignment_targets_inner_binding(self):
		index = index_of("let a = 1;\nfunction g() { let a = 2; a = 3; }")
		assert index.program_scope.bindings["a"].constant_violations == []


# =============================================================================
# Index and paths
# =============================================================================


class TestUnitIndex:
	def test_preorder(self):
		index = index_of("let a = b;")
		assert [p.node["type"] for p in index] == [
			"Program",
			"VariableDeclaration",
			"VariableDeclarator",
			"Identifier",
			"Identifier",
		]

	def test_names_include_jsx_identifiers(self):
		index = index_of("const el = <Button onClick={handle} />;")
		assert {"el", "Button", "onClick", "handle"} <= index.names

	def test_type_only_nodes_are_skipped(self):
		later = {"type": "GenericTypeAnnotation", "id": identifier("Later"), "typeParameters": None}
		program = {
			"type": "Program",
			"sourceType": "module",
			"body": [
				# type T = Later;
				{"type": "TypeAlias", "id": identifier("T"), "typeParameters": None, "right": later},
				# (a: Later);
				{
					"type": "ExpressionStatement",
					"expression": {
						"type": "TypeCastExpression",
						"expression": identifier("a"),
						"typeAnnotation": {"type": "TypeAnnotation", "typeAnnotation": later},
					},
				},
			],
		}
		index = crawl(program)
		assert "a" in index.names
		assert "T" not in index.names
		assert "Later" not in index.names
		assert [p.node["type"] for p in index][1:] == [
			"ExpressionStatement",
			"TypeCastExpression",
			"Identifier",
		]

	def test_path_of_unknown_node_raises(self):
		index = index_of("let a = 1;")
		with pytest.raises(StructuralInvariantError):
			index.path_of(identifier("a"))
		assert index.find(identifier("a")) is None

	def test_invalidate_makes_paths_stale(self):
		index = index_of("let a = 1;")
		path = first(index, "VariableDeclarator")
		index.invalidate()
		with pytest.raises(StalePathError):
			_ = path.node
		assert index.find(path._node) is None

	def test_crawl_requires_program(self):
		with pytest.raises(StructuralInvariantError):
			crawl(identifier("a"))


class TestNodePath:
	def test_ancestry_ends_at_program(self):
		index = index_of("function g() { return a; }")
		ret = first(index, "ReturnStatement")
		assert [p.node["type"] for p in ret.ancestry()] == [
			"ReturnStatement",
			"BlockStatement",
			"FunctionDeclaration",
			"Program",
		]

	def test_field_initializer(self):
		index = index_of("class K { x = a; y = b; m() {} }")
		a = next(p for p in index if p.node.get("name") == "a")
		b = next(p for p in index if p.node.get("name") == "b")
		assert a.is_field_initializer
		assert b.is_field_initializer
		assert a.type == "Identifier"
		key = next(p for p in index if p.node.get("name") == "x")
		assert not key.is_field_initializer
		assert not first(index, "FunctionExpression").is_field_initializer

	def test_replace_with_list_slot(self):
		program = parse("a;\nb;")
		index = crawl(program)
		stmt = next(p for p in index if p.key == "body" and p.index == 1)
		replacement = {"type": "EmptyStatement"}
		new_path = stmt.replace_with(replacement)
		assert program["body"][1] is replacement
		assert new_path.node is replacement
		assert new_path.index == 1
		with pytest.raises(StalePathError):
			_ = stmt.node

	def test_replace_with_field(self):
		program = parse("a = b;")
		index = crawl(program)
		right = next(p for p in index if p.key == "right")
		right.replace_with(identifier("c"))
		assert program["body"][0]["expression"]["right"]["name"] == "c"

	def test_replace_root_raises(self):
		index = index_of("a;")
		with pytest.raises(StructuralInvariantError):
			first(index, "Program").replace_with(identifier("x"))


# =============================================================================
# Unique names
# =============================================================================


class TestUidGenerator:
	def test_sequence(self):
		uids = UidGenerator()
		assert [uids.generate() for _ in range(3)] == ["_temp", "_temp2", "_temp3"]

	def test_avoids_observed_names(self):
		uids = UidGenerator()
		uids.observe({"_rbHoisted", "_rbHoisted2"})
		assert uids.generate("rbHoisted") == "_rbHoisted3"

	def test_normalizes_base_name(self):
		uids = UidGenerator()
		assert uids.generate("_foo12") == "_foo"
		assert uids.generate("a-b") == "_ab"
		assert uids.generate("") == "_temp"
