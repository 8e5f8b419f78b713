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
"""Reading tracked sources and include search directories from compile_commands.json."""

import os
import re
import shlex
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from compdb_deps.constants import CompilationDatabaseError, RecordDecodeError
from compdb_deps.file_utils import canonicalize_path
from compdb_deps.json_stream import iter_json_array

logger = logging.getLogger(__name__)

__all__ = ["CompileCommand", "CompilationDatabase", "extract_include_flags", "read_compilation_database"]

# "-I" optionally followed by one space, then a path made of word, '-', '/' and '.' characters,
# bounded by whitespace or the start/end of the command
INCLUDE_FLAG_PATTERN = re.compile(r"(?<!\S)-I ?([\w\-/.]+)(?!\S)")


@dataclass
class CompileCommand:
    """One compiler invocation from the compilation database.

    Attributes:
        file: Source file as written in the database (may be relative)
        command: Full compiler command line
        directory: Working directory of the compiler invocation, if recorded
    """

    file: str
    command: str
    directory: Optional[str] = None

    @classmethod
    def from_json(cls, entry: Any) -> "CompileCommand":
        """Build a CompileCommand from one decoded database entry.

        Entries using the "arguments" list form instead of a "command" string are
        accepted; the arguments are joined into an equivalent command line.

        Raises:
            RecordDecodeError: If the entry is not an object or lacks "file" or a command
        """
        if not isinstance(entry, dict):
            raise RecordDecodeError(f"Expected a JSON object, got {type(entry).__name__}")

        file_path = entry.get("file")
        if not isinstance(file_path, str):
            raise RecordDecodeError("missing field `file`")

        command = entry.get("command")
        if command is None:
            arguments = entry.get("arguments")
            if not isinstance(arguments, list) or not all(isinstance(arg, str) for arg in arguments):
                raise RecordDecodeError(f"missing field `command` for {file_path}")
            command = shlex.join(arguments)
        elif not isinstance(command, str):
            raise RecordDecodeError(f"field `command` must be a string for {file_path}")

        directory = entry.get("directory")
        if directory is not None and not isinstance(directory, str):
            raise RecordDecodeError(f"field `directory` must be a string for {file_path}")

        return cls(file=file_path, command=command, directory=directory)


@dataclass
class CompilationDatabase:
    """Sources and search directories collected from a compilation database.

    Attributes:
        sources: Canonical paths of tracked source files, in database order (may repeat)
        search_dirs: Canonical include search directories, deduplicated, in first-seen order
    """

    sources: List[str]
    search_dirs: Tuple[str, ...]


def extract_include_flags(command: str) -> List[str]:
    """Extract the raw paths of all -I flags in a compiler command line.

    Both "-Ipath" and "-I path" forms are recognized.

    Example:
        >>> extract_include_flags("g++ -Iinclude -I src/foo -O2 -c a.cpp")
        ['include', 'src/foo']
    """
    return [match.group(1) for match in INCLUDE_FLAG_PATTERN.finditer(command)]


def read_compilation_database(
    compile_commands_path: str, matcher: Callable[[str], bool], skip_invalid_records: bool = False
) -> CompilationDatabase:
    """Stream a compilation database and collect tracked sources and include directories.

    Relative -I paths are resolved against the directory containing the database.
    Include directories that do not exist are logged and dropped. Sources and
    directories are only kept when matcher accepts their canonical path.

    Args:
        compile_commands_path: Path to compile_commands.json
        matcher: Project membership test (e.g. a ProjectFilter)
        skip_invalid_records: If True, entries with a wrong shape (missing fields) are
                              logged and skipped instead of aborting the read.
                              Invalid JSON syntax is always fatal.

    Returns:
        CompilationDatabase with sources and search directories

    Raises:
        CompilationDatabaseError: If the database cannot be opened or read
        MalformedInputError: If the database is not a JSON array
        RecordDecodeError: If an entry cannot be decoded (and skip_invalid_records is False)
    """
    db_dir = os.path.dirname(os.path.abspath(compile_commands_path))

    sources: List[str] = []
    search_dirs: Dict[str, None] = {}
    # Raw -I token -> canonical directory (None if rejected); the same flags repeat across most entries
    resolved_flags: Dict[str, Optional[str]] = {}
    entry_count = 0
    skipped_count = 0

    try:
        f = open(compile_commands_path, "rb")
    except OSError as e:
        raise CompilationDatabaseError(f"Cannot open compilation database '{compile_commands_path}': {e}") from e

    with f:
        try:
            for entry in iter_json_array(f):
                entry_count += 1
                try:
                    compile_command = CompileCommand.from_json(entry)
                except RecordDecodeError as e:
                    if not skip_invalid_records:
                        raise RecordDecodeError(f"Entry {entry_count} of {compile_commands_path}: {e}") from e
                    logger.warning("Skipping entry %s of %s: %s", entry_count, compile_commands_path, e)
                    skipped_count += 1
                    continue

                source = _resolve_source(compile_command, db_dir)
                if source is None or not matcher(source):
                    continue
                sources.append(source)

                for flag in extract_include_flags(compile_command.command):
                    if flag not in resolved_flags:
                        resolved_flags[flag] = _resolve_search_dir(flag, db_dir, matcher)
                    search_dir = resolved_flags[flag]
                    if search_dir is not None:
                        search_dirs[search_dir] = None
        except OSError as e:
            raise CompilationDatabaseError(f"Failed to read compilation database '{compile_commands_path}': {e}") from e

    logger.info(
        "Read %s entries from %s: %s tracked sources, %s search directories (%s skipped)",
        entry_count,
        compile_commands_path,
        len(sources),
        len(search_dirs),
        skipped_count,
    )
    return CompilationDatabase(sources=sources, search_dirs=tuple(search_dirs))


def _resolve_source(compile_command: CompileCommand, db_dir: str) -> Optional[str]:
    base_dir = os.path.join(db_dir, compile_command.directory) if compile_command.directory else db_dir
    try:
        return canonicalize_path(os.path.join(base_dir, compile_command.file))
    except FileNotFoundError:
        logger.debug("Source file does not exist: %s", compile_command.file)
        return None


def _resolve_search_dir(flag: str, db_dir: str, matcher: Callable[[str], bool]) -> Optional[str]:
    try:
        search_dir = canonicalize_path(os.path.join(db_dir, flag))
    except FileNotFoundError as e:
        logger.warning("Ignoring include directory -I%s: %s", flag, e)
        return None

    if not matcher(search_dir):
        logger.debug("Include directory outside project: %s", search_dir)
        return None
    return search_dir
