"""Voote contract toolchain: compile, deploy and verify."""

__version__ = "0.1.0"
