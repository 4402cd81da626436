# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Go+ → Go lowering.

`new_package` turns the parsed `main` package into a `gox.GoPackage`. The
entry point is `gop.cl.compile`; this module re-exports the public surface.
"""

from __future__ import annotations

from .compile import (
	DBG_FLAG_ALL,
	DBG_FLAG_DECL,
	DBG_FLAG_IMPORT,
	DBG_FLAG_STMT,
	CompileError,
	Config,
	GoLowerer,
	new_package,
)

__all__ = [
	"DBG_FLAG_ALL",
	"DBG_FLAG_DECL",
	"DBG_FLAG_IMPORT",
	"DBG_FLAG_STMT",
	"CompileError",
	"Config",
	"GoLowerer",
	"new_package",
]
