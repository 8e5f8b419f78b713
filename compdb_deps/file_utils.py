#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""File and path utilities for canonicalizing and enumerating project files."""

import os
import logging
from typing import Iterator

from compdb_deps.constants import HEADER_EXTENSIONS

logger = logging.getLogger(__name__)

__all__ = ["canonicalize_path", "walk_files", "is_header_file", "is_within_directory"]


def canonicalize_path(path: str) -> str:
    """Return the absolute path of an existing file or directory with symlinks resolved.

    Args:
        path: Path to canonicalize (relative paths are taken against the current directory)

    Returns:
        Canonical absolute path

    Raises:
        FileNotFoundError: If the path does not exist on disk
    """
    real_path = os.path.realpath(path)
    if not os.path.exists(real_path):
        raise FileNotFoundError(f"No such file or directory: '{path}'")
    return real_path


def walk_files(root: str) -> Iterator[str]:
    """Recursively yield every regular file below root, depth first.

    Symlinks are neither yielded nor descended into. An error while listing any
    directory aborts the walk and propagates to the caller.

    Args:
        root: Directory to walk

    Yields:
        Path of each file found (root joined with the relative path)

    Raises:
        OSError: If a directory cannot be listed
    """
    with os.scandir(root) as entries:
        # Materialize before recursing so only one directory handle is open per level
        children = list(entries)

    for entry in children:
        if entry.is_file(follow_symlinks=False):
            yield entry.path
        elif entry.is_dir(follow_symlinks=False):
            yield from walk_files(entry.path)


def is_header_file(filepath: str) -> bool:
    """Check if a file has one of the tracked header extensions (.h, .hpp)."""
    return filepath.endswith(HEADER_EXTENSIONS)


def is_within_directory(path: str, directory: str) -> bool:
    """Check if path lies inside directory (both expected to be absolute).

    Examples:
        >>> is_within_directory("/proj/src/a.h", "/proj/src")
        True
        >>> is_within_directory("/proj/srcx/a.h", "/proj/src")
        False
    """
    return path.startswith(directory.rstrip(os.sep) + os.sep)
