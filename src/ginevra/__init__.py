"""Ginevra, a single-pass #define preprocessor for C and C++ sources."""

from __future__ import annotations

__version__ = "0.1.0"


def preprocess(
    source: str,
    defines: dict[str, str] | None = None,
    eager: bool = False,
) -> str:
    """Scan source text, record #define directives, and substitute defined names."""
    from ginevra.expand import preprocess as _preprocess

    return _preprocess(source, defines=defines, eager=eager)
