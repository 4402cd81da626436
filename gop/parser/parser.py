# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from gop.token import File as TokenFile, Pos, Position

from .ast import (
	AssignStmt,
	BasicLit,
	BinaryExpr,
	BlockStmt,
	BranchStmt,
	CallExpr,
	Expr,
	ExprStmt,
	File,
	ForStmt,
	FuncDecl,
	IfStmt,
	ImportSpec,
	IncDecStmt,
	IndexExpr,
	Name,
	Param,
	ParenExpr,
	RangeStmt,
	ReturnStmt,
	SelectorExpr,
	SliceLit,
	Stmt,
	TypeExpr,
	UnaryExpr,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


class ParserError(ValueError):
	"""
	Syntax error in a Go+ source file.

	Carries the resolved `Position` so the driver can print `file:line:col`
	without access to the FileSet that produced it.
	"""

	def __init__(self, message: str, *, position: Position, pos: Pos = 0) -> None:
		super().__init__(message)
		self.message = message
		self.position = position
		self.pos = pos

	def __str__(self) -> str:
		return f"{self.position}: {self.message}"


class TerminatorInserter:
	always_accept = ("NEWLINE", "SEMI")

	# Go's rule: a newline ends the statement after an identifier, a literal,
	# one of the keywords break/continue/return, `++`/`--`, or a closing bracket.
	TERMINABLE = {
		"NAME",
		"INT",
		"FLOAT",
		"STRING",
		"RAW_STRING",
		"RETURN",
		"BREAK",
		"CONTINUE",
		"INC",
		"DEC",
		"RPAR",
		"RSQB",
		"RBRACE",
	}

	def __init__(self) -> None:
		self._reset()

	def _reset(self) -> None:
		self.paren_depth = 0
		self.bracket_depth = 0
		self.can_terminate = False

	def process(self, stream):
		"""
		Insert `TERMINATOR` tokens for statement boundaries.

		An explicit `;` always terminates. A newline terminates only when the
		previous token can end a statement and we're not inside parentheses or
		brackets, so multi-line call arguments and import groups need no
		trailing commas or semicolons.
		"""
		self._reset()
		for token in stream:
			ttype = token.type

			if ttype == "NEWLINE":
				if self._should_emit_terminator():
					yield Token.new_borrow_pos("TERMINATOR", token.value, token)
					self.can_terminate = False
				continue

			if ttype == "SEMI":
				yield Token.new_borrow_pos("TERMINATOR", token.value, token)
				self.can_terminate = False
				continue

			yield token
			self._update_depth(ttype)
			self.can_terminate = ttype in self.TERMINABLE

	def _update_depth(self, ttype: str) -> None:
		if ttype == "LPAR":
			self.paren_depth += 1
		elif ttype == "RPAR" and self.paren_depth:
			self.paren_depth -= 1
		elif ttype == "LSQB":
			self.bracket_depth += 1
		elif ttype == "RSQB" and self.bracket_depth:
			self.bracket_depth -= 1

	def _should_emit_terminator(self) -> bool:
		return self.paren_depth == 0 and self.bracket_depth == 0 and self.can_terminate


class CommandCallMarker:
	"""
	Rewrite a statement-leading `NAME` into `CMD_NAME` when the next token
	starts an operand directly (identifier or literal).

	    println "hello", name     ->  CMD_NAME STRING COMMA NAME
	    println("hello")          ->  NAME LPAR ...        (ordinary call)
	    x := 1                    ->  NAME DEFINE ...      (not a command)

	Operands that begin with `(`, `[` or a unary operator are not accepted as
	the first command argument; `println -1` parses as `println - 1`.
	"""

	STMT_START = {"TERMINATOR", "LBRACE"}
	OPERAND_START = {"NAME", "INT", "FLOAT", "STRING", "RAW_STRING"}

	def process(self, stream):
		prev_type: Optional[str] = None
		pending: Optional[Token] = None
		for token in stream:
			if pending is not None:
				if token.type in self.OPERAND_START:
					yield Token.new_borrow_pos("CMD_NAME", pending.value, pending)
				else:
					yield pending
				pending = None
			if token.type == "NAME" and (prev_type is None or prev_type in self.STMT_START):
				pending = token
				prev_type = token.type
				continue
			prev_type = token.type
			yield token
		if pending is not None:
			yield pending


class GopPostLex:
	"""Combined post-lexer: terminator insertion, then command-call marking."""

	always_accept = TerminatorInserter.always_accept

	def __init__(self) -> None:
		self._terminators = TerminatorInserter()
		self._commands = CommandCallMarker()

	def process(self, stream):
		return self._commands.process(self._terminators.process(stream))


_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
	postlex=GopPostLex(),
)


def parse_source(src: str, tfile: TokenFile) -> File:
	"""
	Parse one source text registered as `tfile` in a FileSet.

	Raises `ParserError` on the first syntax error.
	"""
	try:
		tree = _PARSER.parse(src)
	except UnexpectedInput as err:
		raise _syntax_error(err, tfile) from err
	return _Builder(tfile).build_file(tree)


def _syntax_error(err: UnexpectedInput, tfile: TokenFile) -> ParserError:
	offset = getattr(err, "pos_in_stream", None)
	if not isinstance(offset, int) or offset < 0 or offset > tfile.size:
		offset = tfile.size
	pos = tfile.pos(offset)
	if isinstance(err, UnexpectedToken):
		message = f"syntax error: unexpected {_describe_token(err.token)}"
	elif isinstance(err, UnexpectedCharacters):
		message = f"syntax error: invalid character {err.char!r}"
	else:
		message = "syntax error: unexpected end of file"
	return ParserError(message, position=tfile.position(pos), pos=pos)


def _describe_token(tok: Token) -> str:
	if tok.type == "$END":
		return "EOF"
	if tok.type == "TERMINATOR":
		return "newline" if tok.value == "\n" else "';'"
	if tok.type in ("NAME", "CMD_NAME"):
		return f"name {tok.value}"
	if tok.type in ("INT", "FLOAT", "STRING", "RAW_STRING"):
		return f"literal {tok.value}"
	return repr(tok.value)


class _Builder:
	"""Turns the lark parse tree of one file into `gop.parser.ast` nodes."""

	def __init__(self, tfile: TokenFile) -> None:
		self.tfile = tfile

	def _pos(self, node: Tree | Token) -> Pos:
		if isinstance(node, Token):
			offset = node.start_pos
		else:
			offset = getattr(node.meta, "start_pos", None)
		if offset is None:
			return 0
		return self.tfile.pos(offset)

	def _error(self, message: str, node: Tree | Token) -> ParserError:
		pos = self._pos(node)
		return ParserError(message, position=self.tfile.position(pos), pos=pos)

	def build_file(self, tree: Tree) -> File:
		f = File(filename=self.tfile.name)
		seen_package = False
		seen_other = False
		for child in _trees(tree):
			kind = child.data
			if kind == "package_clause":
				if seen_package:
					raise self._error("duplicate package clause", child)
				if seen_other:
					raise self._error("package clause must be the first declaration in the file", child)
				seen_package = True
				f.package = _token(child, "NAME").value
				f.package_pos = self._pos(child)
				continue
			if kind == "import_decl":
				if f.decls or f.stmts:
					raise self._error("imports must appear before other declarations", child)
				seen_other = True
				f.imports.extend(self._build_import_specs(child))
				continue
			seen_other = True
			if kind == "func_decl":
				f.decls.append(self._build_func(child))
			else:
				f.stmts.append(self._build_stmt(child))
		return f

	def _build_import_specs(self, tree: Tree) -> List[ImportSpec]:
		specs: List[ImportSpec] = []
		for spec in _trees(tree, "import_spec"):
			alias = _maybe_token(spec, "NAME")
			lit = _maybe_token(spec, "STRING") or _token(spec, "RAW_STRING")
			specs.append(
				ImportSpec(
					pos=self._pos(spec),
					path=lit.value[1:-1],
					name=alias.value if alias is not None else None,
				)
			)
		return specs

	def _build_func(self, tree: Tree) -> FuncDecl:
		name = _token(tree, "NAME").value
		params: List[Param] = []
		param_list = next(_trees(tree, "param_list"), None)
		if param_list is not None:
			params = self._build_params(param_list)
		result_node = next(_trees(tree, "type_expr"), None)
		result = self._build_type(result_node) if result_node is not None else None
		body = self._build_block(next(_trees(tree, "block")))
		return FuncDecl(pos=self._pos(tree), name=name, params=params, result=result, body=body)

	def _build_params(self, tree: Tree) -> List[Param]:
		params: List[Param] = []
		for node in _trees(tree, "param"):
			type_node = next(_trees(node, "type_expr"), None)
			params.append(
				Param(
					pos=self._pos(node),
					name=_token(node, "NAME").value,
					type=self._build_type(type_node) if type_node is not None else None,
				)
			)
		# Go grouping: `a, b int` gives both parameters the trailing type.
		pending: List[Param] = []
		for param in params:
			pending.append(param)
			if param.type is not None:
				for earlier in pending:
					earlier.type = param.type
				pending = []
		if pending:
			raise self._error(f"missing type for parameter {pending[-1].name}", tree)
		return params

	def _build_type(self, tree: Tree) -> TypeExpr:
		inner = next(_trees(tree, "type_expr"), None)
		if inner is not None:
			return TypeExpr(pos=self._pos(tree), text="[]" + self._build_type(inner).text)
		names = [tok.value for tok in _tokens(tree, "NAME")]
		return TypeExpr(pos=self._pos(tree), text=".".join(names))

	def _build_block(self, tree: Tree) -> BlockStmt:
		return BlockStmt(pos=self._pos(tree), stmts=[self._build_stmt(child) for child in _trees(tree)])

	def _build_stmt(self, tree: Tree) -> Stmt:
		kind = tree.data
		if kind == "expr_stmt":
			return ExprStmt(pos=self._pos(tree), x=self._build_expr(_first_tree(tree)))
		if kind == "command_stmt":
			cmd = _token(tree, "CMD_NAME")
			args = self._build_expr_list(next(_trees(tree, "expr_list")))
			call = CallExpr(
				pos=self._pos(cmd),
				func=Name(pos=self._pos(cmd), name=cmd.value),
				args=args,
				command=True,
			)
			return ExprStmt(pos=call.pos, x=call)
		if kind == "define_stmt":
			lhs_node, rhs_node = list(_trees(tree, "expr_list"))
			lhs = self._build_expr_list(lhs_node)
			for target in lhs:
				if not isinstance(target, Name):
					raise self._error("non-name on left side of :=", tree)
			return AssignStmt(pos=self._pos(tree), lhs=lhs, tok=":=", rhs=self._build_expr_list(rhs_node))
		if kind == "assign_stmt":
			lhs_node, rhs_node = list(_trees(tree, "expr_list"))
			op = _maybe_token(tree, "EQUAL") or _token(tree, "ASSIGN_OP")
			return AssignStmt(
				pos=self._pos(tree),
				lhs=self._build_expr_list(lhs_node),
				tok=op.value,
				rhs=self._build_expr_list(rhs_node),
			)
		if kind == "incdec_stmt":
			op = _maybe_token(tree, "INC") or _token(tree, "DEC")
			return IncDecStmt(pos=self._pos(tree), x=self._build_expr(_first_tree(tree)), tok=op.value)
		if kind == "return_stmt":
			results_node = next(_trees(tree, "expr_list"), None)
			results = self._build_expr_list(results_node) if results_node is not None else []
			return ReturnStmt(pos=self._pos(tree), results=results)
		if kind == "branch_stmt":
			tok = next(t for t in tree.children if isinstance(t, Token))
			return BranchStmt(pos=self._pos(tree), tok=tok.value)
		if kind == "block":
			return self._build_block(tree)
		if kind == "if_stmt":
			return self._build_if(tree)
		if kind == "for_stmt":
			return self._build_for(tree)
		raise self._error(f"unsupported statement: {kind}", tree)

	def _build_if(self, tree: Tree) -> IfStmt:
		parts = list(_trees(tree))
		cond = self._build_expr(parts[0])
		body = self._build_block(parts[1])
		else_: Optional[Stmt] = None
		if len(parts) > 2:
			tail = parts[2]
			else_ = self._build_if(tail) if tail.data == "if_stmt" else self._build_block(tail)
		return IfStmt(pos=self._pos(tree), cond=cond, body=body, else_=else_)

	def _build_for(self, tree: Tree) -> Stmt:
		pos = self._pos(tree)
		if _maybe_token(tree, "RANGE") is not None:
			keys_node, x_node, body_node = list(_trees(tree))
			keys = self._build_expr_list(keys_node)
			if len(keys) > 2 or not all(isinstance(k, Name) for k in keys):
				raise self._error("range clause permits at most two iteration names", tree)
			return RangeStmt(
				pos=pos,
				key=keys[0],
				value=keys[1] if len(keys) > 1 else None,
				x=self._build_expr(x_node),
				body=self._build_block(body_node),
			)

		# Split children on TERMINATOR tokens: zero separators means `for {}` or
		# `for cond {}`, two separators mean the three-clause form.
		sections: List[List[Tree]] = [[]]
		for child in tree.children:
			if isinstance(child, Token):
				if child.type == "TERMINATOR":
					sections.append([])
				continue
			sections[-1].append(child)
		body_tree = sections[-1].pop()
		body = self._build_block(body_tree)
		if len(sections) == 1:
			cond_nodes = sections[0]
			cond = self._build_expr(cond_nodes[0]) if cond_nodes else None
			return ForStmt(pos=pos, body=body, cond=cond)
		init_nodes, cond_nodes, post_nodes = sections
		return ForStmt(
			pos=pos,
			body=body,
			init=self._build_stmt(init_nodes[0]) if init_nodes else None,
			cond=self._build_expr(cond_nodes[0]) if cond_nodes else None,
			post=self._build_stmt(post_nodes[0]) if post_nodes else None,
		)

	def _build_expr_list(self, tree: Tree) -> List[Expr]:
		return [self._build_expr(child) for child in _trees(tree)]

	def _build_expr(self, node: Tree) -> Expr:
		kind = node.data
		pos = self._pos(node)
		if kind == "name":
			return Name(pos=pos, name=_first_token(node).value)
		if kind == "int_lit":
			return BasicLit(pos=pos, kind="INT", value=_first_token(node).value)
		if kind == "float_lit":
			return BasicLit(pos=pos, kind="FLOAT", value=_first_token(node).value)
		if kind == "string_lit":
			return BasicLit(pos=pos, kind="STRING", value=_first_token(node).value)
		if kind == "paren":
			return ParenExpr(pos=pos, x=self._build_expr(_first_tree(node)))
		if kind == "slice_lit":
			args = next(_trees(node, "call_args"), None)
			return SliceLit(pos=pos, elts=self._build_expr_list(args) if args is not None else [])
		if kind == "selector":
			return SelectorExpr(pos=pos, x=self._build_expr(_first_tree(node)), sel=_token(node, "NAME").value)
		if kind == "call":
			trees = list(_trees(node))
			args_node = next((t for t in trees[1:] if t.data == "call_args"), None)
			return CallExpr(
				pos=pos,
				func=self._build_expr(trees[0]),
				args=self._build_expr_list(args_node) if args_node is not None else [],
			)
		if kind == "index":
			x_node, index_node = list(_trees(node))
			return IndexExpr(pos=pos, x=self._build_expr(x_node), index=self._build_expr(index_node))
		if kind == "unary":
			return UnaryExpr(pos=pos, op=_first_token(node).value, x=self._build_expr(_first_tree(node)))
		if kind in ("or_expr", "and_expr", "cmp_expr", "add_expr", "mul_expr"):
			return self._fold_binary(node)
		raise self._error(f"unsupported expression: {kind}", node)

	def _fold_binary(self, node: Tree) -> Expr:
		children = node.children
		expr = self._build_expr(children[0])
		for i in range(1, len(children), 2):
			op = children[i]
			right = self._build_expr(children[i + 1])
			expr = BinaryExpr(pos=self._pos(op), op=op.value, x=expr, y=right)
		return expr


def _trees(tree: Tree, name: Optional[str] = None) -> Iterator[Tree]:
	for child in tree.children:
		if isinstance(child, Tree) and (name is None or child.data == name):
			yield child


def _tokens(tree: Tree, ttype: str) -> Iterator[Token]:
	for child in tree.children:
		if isinstance(child, Token) and child.type == ttype:
			yield child


def _maybe_token(tree: Tree, ttype: str) -> Optional[Token]:
	return next(_tokens(tree, ttype), None)


def _token(tree: Tree, ttype: str) -> Token:
	tok = _maybe_token(tree, ttype)
	if tok is None:
		raise ValueError(f"{tree.data} node missing {ttype} token")
	return tok


def _first_token(tree: Tree) -> Token:
	tok = next((c for c in tree.children if isinstance(c, Token)), None)
	if tok is None:
		raise ValueError(f"{tree.data} node has no token children")
	return tok


def _first_tree(tree: Tree) -> Tree:
	child = next(_trees(tree), None)
	if child is None:
		raise ValueError(f"{tree.data} node has no subtree children")
	return child
