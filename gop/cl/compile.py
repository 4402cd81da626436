# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from gop.gox import BodyWriter, GoFunc, GoPackage
from gop.parser import ast as A
from gop.token import NO_POS, FileSet, Pos, Position

logger = logging.getLogger(__name__)

DBG_FLAG_IMPORT = 1 << 0
DBG_FLAG_DECL = 1 << 1
DBG_FLAG_STMT = 1 << 2
DBG_FLAG_ALL = DBG_FLAG_IMPORT | DBG_FLAG_DECL | DBG_FLAG_STMT

# Script-level builtins and their `fmt` counterparts.
BUILTINS: Dict[str, str] = {
	"print": "Print",
	"println": "Println",
	"printf": "Printf",
	"sprint": "Sprint",
	"sprintln": "Sprintln",
	"sprintf": "Sprintf",
	"errorf": "Errorf",
}

_LIT_TYPES = {"INT": "int", "FLOAT": "float64", "STRING": "string"}


@dataclass(frozen=True)
class Config:
	"""Lowering options. `debug_flags` is a mask of the DBG_FLAG_* values."""

	debug_flags: int = 0


class CompileError(ValueError):
	def __init__(self, message: str, *, position: Position, pos: Pos = NO_POS) -> None:
		super().__init__(message)
		self.message = message
		self.position = position
		self.pos = pos

	def __str__(self) -> str:
		if not self.position.filename and not self.position.is_valid():
			return self.message
		return f"{self.position}: {self.message}"


def new_package(pkg_path: str, pkg: A.Package, fset: FileSet, conf: Optional[Config] = None) -> GoPackage:
	"""
	Lower a parsed `main` package into a Go package.

	Top-level statements of all files (in file-name order) form the body of
	`func main()`. Raises `CompileError` on the first problem found.
	"""
	if pkg is None:
		raise CompileError("no package to compile", position=Position())
	return _Compiler(pkg_path, pkg, fset, conf or Config()).compile()


class GoLowerer:
	"""Default `Lowerer` capability."""

	def lower(self, pkg_path: str, pkg: A.Package, fset: FileSet, conf: Config) -> GoPackage:
		return new_package(pkg_path, pkg, fset, conf)


class _Compiler:
	def __init__(self, pkg_path: str, pkg: A.Package, fset: FileSet, conf: Config) -> None:
		self.pkg = pkg
		self.fset = fset
		self.flags = conf.debug_flags
		self.out = GoPackage(name="main", path=pkg_path)
		self.funcs: Dict[str, A.FuncDecl] = {}
		self._fmt_name: Optional[str] = None

	def _error(self, message: str, pos: Pos) -> CompileError:
		return CompileError(message, position=self.fset.position(pos), pos=pos)

	def _trace(self, flag: int, msg: str, *args: object) -> None:
		if self.flags & flag:
			logger.debug(msg, *args)

	def compile(self) -> GoPackage:
		files = [self.pkg.files[name] for name in sorted(self.pkg.files)]
		for f in files:
			for decl in f.decls:
				prev = self.funcs.get(decl.name)
				if prev is not None:
					raise self._error(
						f"{decl.name} redeclared in this block\n\tprevious declaration at {self.fset.position(prev.pos)}",
						decl.pos,
					)
				self.funcs[decl.name] = decl

		for f in files:
			for spec in f.imports:
				self._trace(DBG_FLAG_IMPORT, "import %s (%s)", spec.path, self.fset.position(spec.pos))
				self.out.add_import(spec.path, spec.name)
				if spec.path == "fmt" and self._fmt_name is None:
					self._fmt_name = spec.name or "fmt"

		for f in files:
			for decl in f.decls:
				self.out.funcs.append(self._compile_func(decl))

		script: List[A.Stmt] = [stmt for f in files for stmt in f.stmts]
		if script:
			if "main" in self.funcs:
				raise self._error(
					"func main cannot be declared in a package with top-level statements",
					self.funcs["main"].pos,
				)
			self._trace(DBG_FLAG_DECL, "func main (%d top-level statements)", len(script))
			w = BodyWriter()
			for stmt in script:
				self._stmt(w, stmt)
			self.out.funcs.append(GoFunc(name="main", body=w.lines))
		elif "main" not in self.funcs:
			pos = next((f.package_pos for f in files if f.package_pos != NO_POS), NO_POS)
			raise self._error("function main is undeclared in the main package", pos)
		return self.out

	def _compile_func(self, decl: A.FuncDecl) -> GoFunc:
		self._trace(DBG_FLAG_DECL, "func %s (%s)", decl.name, self.fset.position(decl.pos))
		w = BodyWriter()
		for stmt in decl.body.stmts:
			self._stmt(w, stmt)
		return GoFunc(
			name=decl.name,
			params=[(p.name, p.type.text if p.type is not None else "") for p in decl.params],
			result=decl.result.text if decl.result is not None else None,
			body=w.lines,
		)

	def _fmt(self) -> str:
		if self._fmt_name is None:
			self.out.add_import("fmt")
			self._fmt_name = "fmt"
		return self._fmt_name

	def _builtin(self, name: str) -> Optional[str]:
		if name in BUILTINS and name not in self.funcs:
			return f"{self._fmt()}.{BUILTINS[name]}"
		return None

	# Statements

	def _stmt(self, w: BodyWriter, stmt: A.Stmt) -> None:
		self._trace(DBG_FLAG_STMT, "%s at %s", type(stmt).__name__, self.fset.position(stmt.pos))
		if isinstance(stmt, A.ExprStmt):
			if isinstance(stmt.x, A.Name):
				builtin = self._builtin(stmt.x.name)
				if builtin is not None:
					w.line(f"{builtin}()")
					return
			w.line(self._expr(stmt.x))
		elif isinstance(stmt, A.AssignStmt):
			w.line(self._simple(stmt))
		elif isinstance(stmt, A.IncDecStmt):
			w.line(self._simple(stmt))
		elif isinstance(stmt, A.ReturnStmt):
			if stmt.results:
				w.line("return " + self._exprs(stmt.results))
			else:
				w.line("return")
		elif isinstance(stmt, A.BranchStmt):
			w.line(stmt.tok)
		elif isinstance(stmt, A.BlockStmt):
			w.line("{")
			self._body(w, stmt)
			w.line("}")
		elif isinstance(stmt, A.IfStmt):
			self._if(w, stmt, "if")
			w.line("}")
		elif isinstance(stmt, A.ForStmt):
			w.line(self._for_header(stmt) + " {")
			self._body(w, stmt.body)
			w.line("}")
		elif isinstance(stmt, A.RangeStmt):
			names = self._expr(stmt.key)
			if stmt.value is not None:
				names += ", " + self._expr(stmt.value)
			w.line(f"for {names} := range {self._expr(stmt.x)} {{")
			self._body(w, stmt.body)
			w.line("}")
		else:
			raise self._error(f"unsupported statement {type(stmt).__name__}", stmt.pos)

	def _body(self, w: BodyWriter, block: A.BlockStmt) -> None:
		w.indent()
		for stmt in block.stmts:
			self._stmt(w, stmt)
		w.dedent()

	def _if(self, w: BodyWriter, stmt: A.IfStmt, keyword: str) -> None:
		w.line(f"{keyword} {self._expr(stmt.cond)} {{")
		self._body(w, stmt.body)
		if isinstance(stmt.else_, A.IfStmt):
			self._if(w, stmt.else_, "} else if")
		elif isinstance(stmt.else_, A.BlockStmt):
			w.line("} else {")
			self._body(w, stmt.else_)

	def _for_header(self, stmt: A.ForStmt) -> str:
		if stmt.init is None and stmt.post is None:
			if stmt.cond is None:
				return "for"
			return f"for {self._expr(stmt.cond)}"
		init = self._simple(stmt.init) if stmt.init is not None else ""
		cond = self._expr(stmt.cond) if stmt.cond is not None else ""
		post = self._simple(stmt.post) if stmt.post is not None else ""
		return f"for {init}; {cond}; {post}".rstrip()

	def _simple(self, stmt: A.Stmt) -> str:
		if isinstance(stmt, A.AssignStmt):
			return f"{self._exprs(stmt.lhs)} {stmt.tok} {self._exprs(stmt.rhs)}"
		if isinstance(stmt, A.IncDecStmt):
			return f"{self._expr(stmt.x)}{stmt.tok}"
		if isinstance(stmt, A.ExprStmt):
			return self._expr(stmt.x)
		raise self._error(f"{type(stmt).__name__} is not allowed in a for clause", stmt.pos)

	# Expressions

	def _exprs(self, exprs: List[A.Expr]) -> str:
		return ", ".join(self._expr(e) for e in exprs)

	def _expr(self, e: A.Expr) -> str:
		if isinstance(e, A.Name):
			return e.name
		if isinstance(e, A.BasicLit):
			return e.value
		if isinstance(e, A.ParenExpr):
			return f"({self._expr(e.x)})"
		if isinstance(e, A.SelectorExpr):
			return f"{self._expr(e.x)}.{e.sel}"
		if isinstance(e, A.CallExpr):
			func = None
			if isinstance(e.func, A.Name):
				func = self._builtin(e.func.name)
			if func is None:
				func = self._expr(e.func)
			return f"{func}({self._exprs(e.args)})"
		if isinstance(e, A.IndexExpr):
			return f"{self._expr(e.x)}[{self._expr(e.index)}]"
		if isinstance(e, A.UnaryExpr):
			return f"{e.op}{self._expr(e.x)}"
		if isinstance(e, A.BinaryExpr):
			return f"{self._expr(e.x)} {e.op} {self._expr(e.y)}"
		if isinstance(e, A.SliceLit):
			return f"[]{_slice_elem_type(e.elts)}{{{self._exprs(e.elts)}}}"
		raise self._error(f"unsupported expression {type(e).__name__}", e.pos)


def _literal_type(e: A.Expr) -> Optional[str]:
	if isinstance(e, A.BasicLit):
		return _LIT_TYPES.get(e.kind)
	if isinstance(e, A.Name) and e.name in ("true", "false"):
		return "bool"
	if isinstance(e, A.UnaryExpr) and e.op == "-":
		inner = _literal_type(e.x)
		return inner if inner in ("int", "float64") else None
	if isinstance(e, A.ParenExpr):
		return _literal_type(e.x)
	return None


def _slice_elem_type(elts: List[A.Expr]) -> str:
	kinds = {_literal_type(e) for e in elts}
	if not elts or None in kinds:
		return "any"
	if kinds == {"int", "float64"}:
		return "float64"
	if len(kinds) == 1:
		return kinds.pop()
	return "any"
