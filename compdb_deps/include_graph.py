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
"""Concurrent construction of the direct #include graph of a C/C++ project."""

import re
import time
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from compdb_deps.constants import DEFAULT_BATCH_SIZE, DEFAULT_MAX_WORKERS
from compdb_deps.file_utils import canonicalize_path, is_header_file, walk_files
from compdb_deps.header_resolver import HeaderResolver

logger = logging.getLogger(__name__)

__all__ = ["IncludeGraphScanResult", "parse_include_directive", "discover_files", "scan_file", "scan_include_graph", "build_include_graph"]

# #include "name.h" or #include <name.hpp>; macro-expanded includes are not matched
INCLUDE_DIRECTIVE_PATTERN = re.compile(r'^[ \t]*#[ \t]*include[ \t]*(?:"([\w./+\-]+\.(?:h|hpp))"|<([\w./+\-]+\.(?:h|hpp))>)')


@dataclass
class IncludeGraphScanResult:
    """Result from scanning a project's files for include directives.

    Attributes:
        graph: Mapping of each successfully scanned file to the files it directly includes
        discovered_count: Number of files selected for scanning
        failed_files: Files that could not be read (absent from graph)
        scan_time: Time taken to discover and scan all files (in seconds)
    """

    graph: Dict[str, Set[str]]
    discovered_count: int
    failed_files: List[str] = field(default_factory=list)
    scan_time: float = 0.0

    @property
    def edge_count(self) -> int:
        return sum(len(deps) for deps in self.graph.values())


def parse_include_directive(line: str) -> Optional[str]:
    """Return the included name if line is a quoted or angled include of a .h/.hpp file.

    Example:
        >>> parse_include_directive('  #  include "core/types.hpp"')
        'core/types.hpp'
        >>> parse_include_directive("#include <vector>") is None
        True
    """
    match = INCLUDE_DIRECTIVE_PATTERN.match(line)
    if match is None:
        return None
    return match.group(1) or match.group(2)


def discover_files(sources: Iterable[str], search_dirs: Iterable[str], matcher: Callable[[str], bool]) -> Set[str]:
    """Collect every file to scan: tracked sources plus headers found under the search directories.

    Paths are canonicalized before filtering; files that no longer exist are
    dropped. A search directory that fails to list is logged and the remaining
    directories are still walked.

    Args:
        sources: Source files from the compilation database
        search_dirs: Canonical include search directories
        matcher: Project membership test

    Returns:
        Set of canonical file paths
    """
    files: Set[str] = set()

    for source in sources:
        try:
            path = canonicalize_path(source)
        except FileNotFoundError:
            logger.debug("Dropping missing source %s", source)
            continue
        if matcher(path):
            files.add(path)

    source_count = len(files)

    for search_dir in search_dirs:
        try:
            for file_path in walk_files(search_dir):
                if not is_header_file(file_path):
                    continue
                try:
                    path = canonicalize_path(file_path)
                except FileNotFoundError:
                    logger.debug("Dropping dangling header %s", file_path)
                    continue
                if matcher(path):
                    files.add(path)
        except OSError as e:
            logger.warning("Failed to walk include directory %s: %s", search_dir, e)

    logger.info("Discovered %s files (%s sources, %s additional headers)", len(files), source_count, len(files) - source_count)
    return files


def scan_file(path: str, resolver: HeaderResolver, matcher: Callable[[str], bool]) -> Set[str]:
    """Return the project files directly included by path.

    Raises:
        OSError: If the file cannot be opened or read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    includes: Set[str] = set()

    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            raw_include = parse_include_directive(line)
            if raw_include is None:
                continue
            resolved = resolver.resolve(path, raw_include)
            if resolved is not None and matcher(resolved):
                includes.add(resolved)

    return includes


def scan_include_graph(
    sources: Iterable[str],
    search_dirs: Iterable[str],
    matcher: Callable[[str], bool],
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
) -> IncludeGraphScanResult:
    """Discover and scan all project files, bounding the number of scans in flight.

    Files are submitted to a thread pool in batches of at most batch_size, and
    each batch is drained completely before the next one is submitted. A file
    that fails to scan is logged and left out of the graph.

    Args:
        sources: Source files from the compilation database
        search_dirs: Canonical include search directories, in resolution order
        matcher: Project membership test, applied to scanned files and include targets
        batch_size: Maximum number of concurrent scans
        max_workers: Thread pool size (None = executor default)

    Returns:
        IncludeGraphScanResult with the graph and scan statistics

    Raises:
        ValueError: If batch_size is less than 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    start_time = time.time()
    search_dirs = list(search_dirs)
    files = sorted(discover_files(sources, search_dirs, matcher))
    resolver = HeaderResolver(search_dirs)

    graph: Dict[str, Set[str]] = {}
    failed_files: List[str] = []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for batch_start in range(0, len(files), batch_size):
            batch = files[batch_start : batch_start + batch_size]
            futures = {executor.submit(scan_file, path, resolver, matcher): path for path in batch}

            for future in as_completed(futures):
                path = futures[future]
                try:
                    graph[path] = future.result()
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning("Failed to scan %s: %s", path, e)
                    failed_files.append(path)

            logger.debug("Scanned %s/%s files", min(batch_start + batch_size, len(files)), len(files))

    elapsed = time.time() - start_time
    logger.info("Scanned %s files in %.2fs (%s failed)", len(files), elapsed, len(failed_files))

    return IncludeGraphScanResult(graph=graph, discovered_count=len(files), failed_files=sorted(failed_files), scan_time=elapsed)


def build_include_graph(
    sources: Iterable[str],
    search_dirs: Iterable[str],
    matcher: Callable[[str], bool],
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
) -> Dict[str, Set[str]]:
    """Build the direct include graph; see scan_include_graph() for details.

    Files that only ever appear as include targets (never scanned themselves)
    are values in the graph but never keys.
    """
    return scan_include_graph(sources, search_dirs, matcher, batch_size=batch_size, max_workers=max_workers).graph
