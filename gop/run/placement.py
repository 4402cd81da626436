# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from gop.errors import WriteError

from .interfaces import Writer
from .target import Target

logger = logging.getLogger(__name__)

# Directory runs: the generated file joins the package it was generated from.
AUTOGEN_FILENAME = "gop_autogen.go"
# Single-file runs: keep the source directory clean.
BUILD_DIRNAME = ".gop"


def output_location(target: Target) -> Path:
	if target.is_dir:
		return target.path / AUTOGEN_FILENAME
	return target.path.parent / BUILD_DIRNAME / (target.path.name + ".go")


def save_artifact(path: Path, artifact: Any, writer: Writer) -> None:
	"""Create the parent directory tree (idempotent) and write the artifact."""
	try:
		path.parent.mkdir(parents=True, exist_ok=True)
		writer.write(path, artifact)
	except Exception as err:
		raise WriteError(f"saving generated file failed: {err}", path=str(path)) from err
	logger.debug("wrote %s", path)


__all__ = ["AUTOGEN_FILENAME", "BUILD_DIRNAME", "output_location", "save_artifact"]
