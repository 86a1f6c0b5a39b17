"""Path-string utilities for logical template paths.

Logical paths always use ``/`` separators regardless of platform, and the root
directory is spelled ``"."``. Nothing here touches the filesystem.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path

from sitestack.domain.constants import INDEX_TEMPLATE_NAME, ROOT_DIRECTORY


def normalize(path: str) -> str:
    """Normalize separators and redundant segments; the empty path becomes ``"."``."""
    if not path:
        return ROOT_DIRECTORY
    return posixpath.normpath(path.replace("\\", "/"))


def relative_to_cwd(path: str, cwd: str | Path | None = None) -> str:
    """Strip the working directory from an absolute path, then normalize."""
    if os.path.isabs(path):
        path = os.path.relpath(path, os.fspath(cwd) if cwd is not None else os.getcwd())
    return normalize(path)


def extension(path: str) -> str:
    return posixpath.splitext(path)[1]


def strip_ext(path: str) -> str:
    return posixpath.splitext(path)[0]


def dirname(path: str) -> str:
    return posixpath.dirname(path.rstrip("/")) or ROOT_DIRECTORY


def basename(path: str) -> str:
    return posixpath.basename(path.rstrip("/"))


def join(*parts: str) -> str:
    return posixpath.normpath(posixpath.join(*parts))


def relative(start: str, target: str) -> str:
    return posixpath.relpath(target, start)


def is_within(prefix: str, path: str) -> bool:
    """True if ``path`` equals ``prefix`` or is nested under it."""
    rel = relative(prefix, path)
    return not (rel == ".." or rel.startswith("../"))


def ancestor_chain(path: str) -> list[str]:
    """List the templates a leaf is transcluded through, leaf first.

    ``a/b/c`` yields ``a/b/c``, ``a/b/index``, ``a/index``, ``index``. A leaf
    that is itself a directory index is not repeated.
    """
    leaf = strip_ext(normalize(path))
    chain = [leaf]
    directory = dirname(leaf)
    if basename(leaf) != INDEX_TEMPLATE_NAME:
        chain.append(join(directory, INDEX_TEMPLATE_NAME))

    while directory != ROOT_DIRECTORY:
        parent = dirname(directory)
        if parent == directory:
            break
        directory = parent
        chain.append(join(directory, INDEX_TEMPLATE_NAME))

    return chain
