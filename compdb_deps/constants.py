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
"""Shared constants for compdb-deps.

This module provides centralized constants used by the reader, the graph builder
and the command line tool, together with the exception hierarchy the tool uses
to report fatal conditions.
"""

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Build System Constants
# =============================================================================

COMPILE_COMMANDS_JSON = "compile_commands.json"  # Standard compilation database filename
DEPENDENCIES_JSON = "dependencies.json"  # Output written next to the compilation database

# Only these header extensions are discovered under search directories and matched in #include lines
HEADER_EXTENSIONS = (".h", ".hpp")

# Directory names used by the header resolver
PRIVATE_SEARCH_DIR_NAME = "src"  # A search directory with this name only serves files inside it
RELATIVE_INCLUDE_ROOTS = ("src", "include")  # Ancestor names includes may be written relative to

# =============================================================================
# Performance Constants
# =============================================================================

DEFAULT_BATCH_SIZE = 1000  # Maximum number of file scans in flight at once
DEFAULT_MAX_WORKERS = None  # None = ThreadPoolExecutor default
READ_CHUNK_SIZE = 64 * 1024  # Bytes read at a time from the compilation database

# =============================================================================
# Graph Export Constants
# =============================================================================

SUPPORTED_GRAPH_FORMATS = [".graphml", ".gexf", ".json"]

# =============================================================================
# Exception Classes
# =============================================================================


class CompDbError(Exception):
    """Base exception for all compdb-deps errors.

    All exceptions carry an exit_code attribute that indicates what exit code
    the program should use when this error is caught at the main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(CompDbError):
    """Raised when input validation fails (arguments, paths, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class ArgumentError(ValidationError):
    """Raised when command-line arguments are invalid."""


class ProjectRootError(ValidationError):
    """Raised when the project root does not exist or is not a directory."""


# Compilation database errors (EXIT_RUNTIME_ERROR)
class CompilationDatabaseError(CompDbError):
    """Raised when the compilation database cannot be opened or read."""


class MalformedInputError(CompilationDatabaseError):
    """Raised when the database is not shaped like a single JSON array."""


class RecordDecodeError(CompilationDatabaseError):
    """Raised when a single array element cannot be decoded into a record."""
