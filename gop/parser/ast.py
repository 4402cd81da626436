# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from gop.token import NO_POS, Pos


class Expr:
	pos: Pos


class Stmt:
	pos: Pos


@dataclass
class Name(Expr):
	pos: Pos
	name: str


@dataclass
class BasicLit(Expr):
	"""Literal kept in source spelling; kind is INT, FLOAT or STRING."""

	pos: Pos
	kind: str
	value: str


@dataclass
class ParenExpr(Expr):
	pos: Pos
	x: Expr


@dataclass
class SelectorExpr(Expr):
	pos: Pos
	x: Expr
	sel: str


@dataclass
class CallExpr(Expr):
	pos: Pos
	func: Expr
	args: List[Expr] = field(default_factory=list)
	# Command-style call: `println "hi", x` (no parentheses in the source).
	command: bool = False


@dataclass
class IndexExpr(Expr):
	pos: Pos
	x: Expr
	index: Expr


@dataclass
class UnaryExpr(Expr):
	pos: Pos
	op: str
	x: Expr


@dataclass
class BinaryExpr(Expr):
	pos: Pos
	op: str
	x: Expr
	y: Expr


@dataclass
class SliceLit(Expr):
	pos: Pos
	elts: List[Expr] = field(default_factory=list)


@dataclass
class TypeExpr:
	pos: Pos
	text: str


@dataclass
class ExprStmt(Stmt):
	pos: Pos
	x: Expr


@dataclass
class AssignStmt(Stmt):
	"""`:=`, `=` and the arithmetic assignment operators share one node."""

	pos: Pos
	lhs: List[Expr]
	tok: str
	rhs: List[Expr]


@dataclass
class IncDecStmt(Stmt):
	pos: Pos
	x: Expr
	tok: str


@dataclass
class ReturnStmt(Stmt):
	pos: Pos
	results: List[Expr] = field(default_factory=list)


@dataclass
class BranchStmt(Stmt):
	pos: Pos
	tok: str


@dataclass
class BlockStmt(Stmt):
	pos: Pos
	stmts: List[Stmt] = field(default_factory=list)


@dataclass
class IfStmt(Stmt):
	pos: Pos
	cond: Expr
	body: BlockStmt
	else_: Optional[Stmt] = None


@dataclass
class ForStmt(Stmt):
	pos: Pos
	body: BlockStmt
	init: Optional[Stmt] = None
	cond: Optional[Expr] = None
	post: Optional[Stmt] = None


@dataclass
class RangeStmt(Stmt):
	pos: Pos
	key: Expr
	value: Optional[Expr]
	x: Expr
	body: BlockStmt


@dataclass
class ImportSpec:
	pos: Pos
	path: str
	name: Optional[str] = None


@dataclass
class Param:
	pos: Pos
	name: str
	type: Optional[TypeExpr] = None


@dataclass
class FuncDecl:
	pos: Pos
	name: str
	params: List[Param]
	result: Optional[TypeExpr]
	body: BlockStmt


@dataclass
class File:
	"""One parsed source file. `stmts` holds script-mode top-level statements."""

	filename: str
	package: str = "main"
	package_pos: Pos = NO_POS
	imports: List[ImportSpec] = field(default_factory=list)
	decls: List[FuncDecl] = field(default_factory=list)
	stmts: List[Stmt] = field(default_factory=list)


@dataclass
class Package:
	name: str
	files: Dict[str, File] = field(default_factory=dict)
