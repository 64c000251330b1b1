"""Compile, run and track progress through a set of small Rust exercises."""

__version__ = "5.5.1"
__all__ = ["__version__"]