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
"""Resolution of raw #include names to files on disk.

Includes are looked up in the include search directories taken from the
compilation database. Two conventions common in modular C++ trees are honored:

- Files below a module's ``src/`` or ``include/`` tree often write includes
  relative to their own directory. Such an include is first tried rewritten
  relative to the tree root, then as written.
- A search directory named ``src`` holds a module's private headers. It only
  serves includes coming from files inside that same directory.

Resolution order across search directories is the order they were first seen
in the compilation database.
"""

import os
import logging
from typing import List, Optional, Sequence

from compdb_deps.constants import PRIVATE_SEARCH_DIR_NAME, RELATIVE_INCLUDE_ROOTS
from compdb_deps.file_utils import is_within_directory

logger = logging.getLogger(__name__)

__all__ = ["HeaderResolver", "find_relative_include_root", "include_candidates", "is_private_search_dir"]


def is_private_search_dir(search_dir: str) -> bool:
    """Check if a search directory is private (its last path component is exactly 'src')."""
    return os.path.basename(search_dir.rstrip(os.sep)) == PRIVATE_SEARCH_DIR_NAME


def find_relative_include_root(directory: str) -> Optional[str]:
    """Find the nearest proper ancestor of directory named 'src', else the nearest named 'include'.

    Args:
        directory: Absolute directory of the including file

    Returns:
        The ancestor path, or None if there is none
    """
    for root_name in RELATIVE_INCLUDE_ROOTS:
        ancestor = os.path.dirname(directory)
        while True:
            if os.path.basename(ancestor) == root_name:
                return ancestor
            parent = os.path.dirname(ancestor)
            if parent == ancestor:
                break
            ancestor = parent
    return None


def include_candidates(including_file: str, raw_include: str) -> List[str]:
    """Return the relative paths to look up for an include, most specific first.

    Example:
        >>> include_candidates("/proj/src/mod/a.cpp", "b.h")
        ['mod/b.h', 'b.h']
        >>> include_candidates("/proj/lib/a.cpp", "b.h")
        ['b.h']
    """
    file_dir = os.path.dirname(including_file)
    include_root = find_relative_include_root(file_dir)
    if include_root is None:
        return [raw_include]

    rewritten = os.path.join(os.path.relpath(file_dir, include_root), raw_include)
    if rewritten == raw_include:
        return [raw_include]
    return [rewritten, raw_include]


class HeaderResolver:
    """Resolve includes against an ordered collection of canonical search directories.

    Instances are immutable and safe to share between scan threads.
    """

    def __init__(self, search_dirs: Sequence[str]) -> None:
        self.search_dirs = tuple(search_dirs)
        self._private = tuple(is_private_search_dir(d) for d in self.search_dirs)

    def resolve(self, including_file: str, raw_include: str) -> Optional[str]:
        """Resolve one include directive to the canonical path of an existing file.

        Args:
            including_file: Canonical path of the file containing the directive
            raw_include: Name between the quotes or angle brackets

        Returns:
            Canonical path of the included file, or None if it is not found in any
            applicable search directory (system or external header, or missing)
        """
        for candidate in include_candidates(including_file, raw_include):
            for search_dir, private in zip(self.search_dirs, self._private):
                if private and not is_within_directory(including_file, search_dir):
                    continue

                path = os.path.join(search_dir, candidate)
                if not os.path.isfile(path):
                    continue

                resolved = os.path.realpath(path)
                if private and not is_within_directory(resolved, search_dir):
                    continue
                return resolved

        logger.debug("Unresolved include '%s' in %s", raw_include, including_file)
        return None
