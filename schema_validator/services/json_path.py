"""Resolve a JSON pointer against a document into concrete path segments."""

from __future__ import annotations

from typing import Any, Union

from jsonpointer import JsonPointer


def parse_path(document: Any, pointer: str) -> list[Union[str, int]]:
    """
    Parse ``pointer`` and walk ``document`` alongside it.

    Segments addressing a list element become ints, all others stay
    strings. Segments past the end of the document are kept as strings.
    """
    path: list[Union[str, int]] = []
    current = document

    for part in JsonPointer(pointer).parts:
        if isinstance(current, list) and part.isdigit():
            index = int(part)
            path.append(index)
            current = current[index] if index < len(current) else None
        elif isinstance(current, dict):
            path.append(part)
            current = current.get(part)
        else:
            path.append(part)
            current = None

    return path
