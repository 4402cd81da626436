# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Go+ to Go compiler driver (`gop run`)."""

__version__ = "0.1.0"
