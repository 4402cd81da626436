# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging

import pytest

from gop import cl, gox
from gop.parser import ast
from gop.parser.parser import parse_source
from gop.token import FileSet


def _package(*sources: tuple[str, str]) -> tuple[ast.Package, FileSet]:
	fset = FileSet()
	pkg = ast.Package(name="main")
	for name, src in sources:
		pkg.files[name] = parse_source(src, fset.add_file(name, src))
	return pkg, fset


def _lower(src: str, conf: cl.Config | None = None) -> str:
	pkg, fset = _package(("a.gop", src))
	return gox.render(cl.new_package("", pkg, fset, conf))


def test_hello_world() -> None:
	assert _lower('println "hello"\n') == (
		"// Code generated by gop; DO NOT EDIT.\n"
		"\n"
		"package main\n"
		"\n"
		'import "fmt"\n'
		"\n"
		"func main() {\n"
		'\tfmt.Println("hello")\n'
		"}\n"
	)


def test_funcs_precede_synthesized_main() -> None:
	out = _lower("func add(a, b int) int {\n\treturn a + b\n}\nprintln add(1, 2)\n")
	assert out.index("func add(a int, b int) int {") < out.index("func main() {")
	assert "\tfmt.Println(add(1, 2))\n" in out


def test_declared_main_without_statements() -> None:
	out = _lower("func main() {\n\tx := 1\n\tx++\n}\n")
	assert "func main() {\n\tx := 1\n\tx++\n}\n" in out
	assert "import" not in out


def test_main_declared_alongside_statements() -> None:
	with pytest.raises(cl.CompileError) as excinfo:
		_lower("func main() {\n}\nprintln 1\n")
	assert excinfo.value.message == "func main cannot be declared in a package with top-level statements"
	assert str(excinfo.value).startswith("a.gop:1:1: ")


def test_no_main_at_all() -> None:
	with pytest.raises(cl.CompileError) as excinfo:
		_lower("package main\nfunc helper() {\n}\n")
	assert excinfo.value.message == "function main is undeclared in the main package"
	assert excinfo.value.position.line == 1


def test_duplicate_func_across_files() -> None:
	pkg, fset = _package(("a.gop", "func f() {\n}\n"), ("b.gop", 'func f() {\n}\nprintln "x"\n'))

	with pytest.raises(cl.CompileError) as excinfo:
		cl.new_package("", pkg, fset)

	assert str(excinfo.value) == "b.gop:1:1: f redeclared in this block\n\tprevious declaration at a.gop:1:1"


def test_fmt_alias_is_reused() -> None:
	out = _lower('import f "fmt"\nprintf "%d\\n", 1\n')
	assert 'import f "fmt"\n' in out
	assert '\tf.Printf("%d\\n", 1)\n' in out


def test_user_func_shadows_builtin() -> None:
	out = _lower("func println(n int) {\n}\nprintln 1\n")
	assert "\tprintln(1)\n" in out
	assert "fmt" not in out


def test_bare_builtin_statement() -> None:
	assert "\tfmt.Println()\n" in _lower("println\n")


def test_imports_are_grouped_and_sorted() -> None:
	out = _lower('import "strings"\nprintln strings.ToUpper("a")\n')
	assert 'import (\n\t"fmt"\n\t"strings"\n)\n' in out


@pytest.mark.parametrize(
	"literal, expected",
	[
		("[1, 2]", "[]int{1, 2}"),
		("[1, 2.5]", "[]float64{1, 2.5}"),
		('["a", `b`]', '[]string{"a", `b`}'),
		("[true, false]", "[]bool{true, false}"),
		("[-1, (2)]", "[]int{-1, (2)}"),
		('[1, "a"]', '[]any{1, "a"}'),
		("[x]", "[]any{x}"),
		("[]", "[]any{}"),
	],
)
def test_slice_literal_types(literal: str, expected: str) -> None:
	assert f"\txs := {expected}\n" in _lower(f"xs := {literal}\n")


def test_control_flow_lowering() -> None:
	out = _lower(
		"""
sum := 0
for i := 0; i < 5; i++ {
	if i % 2 == 0 {
		continue
	} else if i > 3 {
		break
	} else {
		sum += i
	}
}
for _, v := range [1, 2] {
	sum = sum + v
}
for sum < 100 {
	sum *= 2
}
for {
	break
}
"""
	)
	body = out[out.index("func main() {") :]
	assert body == (
		"func main() {\n"
		"\tsum := 0\n"
		"\tfor i := 0; i < 5; i++ {\n"
		"\t\tif i % 2 == 0 {\n"
		"\t\t\tcontinue\n"
		"\t\t} else if i > 3 {\n"
		"\t\t\tbreak\n"
		"\t\t} else {\n"
		"\t\t\tsum += i\n"
		"\t\t}\n"
		"\t}\n"
		"\tfor _, v := range []int{1, 2} {\n"
		"\t\tsum = sum + v\n"
		"\t}\n"
		"\tfor sum < 100 {\n"
		"\t\tsum *= 2\n"
		"\t}\n"
		"\tfor {\n"
		"\t\tbreak\n"
		"\t}\n"
		"}\n"
	)


def test_debug_flags_trace_lowering(caplog: pytest.LogCaptureFixture) -> None:
	caplog.set_level(logging.DEBUG, logger="gop.cl")

	_lower('import "os"\nprintln os.Args\n', cl.Config(debug_flags=cl.DBG_FLAG_ALL))

	messages = [r.getMessage() for r in caplog.records if r.name == "gop.cl.compile"]
	assert messages[0] == "import os (a.gop:1:8)"
	assert "func main (1 top-level statements)" in messages
	assert any(m.startswith("ExprStmt at a.gop:2:1") for m in messages)


def test_no_tracing_without_flags(caplog: pytest.LogCaptureFixture) -> None:
	caplog.set_level(logging.DEBUG, logger="gop.cl")

	_lower('println "quiet"\n')

	assert [r for r in caplog.records if r.name == "gop.cl.compile"] == []
