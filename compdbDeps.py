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
"""Derive the direct #include dependency graph of a C/C++ project from compile_commands.json.

Version: 1.0.0

PURPOSE:
    Answers "which headers/sources does file X directly include?" for an entire
    codebase without running a compiler or preprocessor. Headers that are never
    compiled themselves are found by walking the include search directories.

WHAT IT DOES:
    - Streams compile_commands.json one entry at a time (bounded memory)
    - Collects tracked sources and -I search directories inside the project
    - Finds every .h/.hpp below the search directories
    - Resolves each #include to a file on disk, honoring src/ and include/ tree
      conventions and private src/ search directories
    - Scans files concurrently in bounded batches
    - Writes dependencies.json next to the compilation database

METHOD:
    Plain text scanning of #include lines. Macros and conditional compilation are
    not evaluated and only direct (one-hop) dependencies are reported.

OUTPUT:
    dependencies.json: JSON object mapping each scanned file's absolute path to
    the sorted list of absolute paths it directly includes. Files that could not
    be read are absent. Overwritten on every run.

REQUIREMENTS:
    - Python 3.8+
    - colorama, packaging
    - networkx (for --graph-export)

EXAMPLES:
    # Graph for the project in the current directory
    ./compdbDeps.py . -c build/compile_commands.json

    # Exclude third-party code and use 8 scan threads
    ./compdbDeps.py ~/src/engine -c ~/src/engine/build/compile_commands.json --exclude "ThirdParty/*" -j 8

    # Also export a GraphML file for visualization
    ./compdbDeps.py . --graph-export deps.graphml
"""
import os
import sys
import argparse
import logging
from typing import Optional

from compdb_deps.color_utils import Colors, print_info, print_success, print_warning
from compdb_deps.compile_db import read_compilation_database
from compdb_deps.constants import (
    COMPILE_COMMANDS_JSON,
    DEFAULT_BATCH_SIZE,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    ArgumentError,
    CompDbError,
    ProjectRootError,
)
from compdb_deps.export_utils import default_output_path, export_dependency_graph, write_dependencies_json
from compdb_deps.include_graph import scan_include_graph
from compdb_deps.package_verification import require_package
from compdb_deps.project_filter import ProjectRootFilter


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse and return command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Build the direct #include dependency graph of a C/C++ project from its compilation database.",
        epilog="""
Only files inside PROJECT_ROOT with ASCII file names become graph nodes.
Include search directories come from the -I flags of the compile commands;
relative -I paths are resolved against the directory holding the database.

The result is written to dependencies.json next to the compilation database
unless --output is given.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("project", metavar="PROJECT_ROOT", help="Root directory of the project to track")

    parser.add_argument(
        "-c", "--compilations", default=COMPILE_COMMANDS_JSON, help=f"Path to the compilation database (default: {COMPILE_COMMANDS_JSON})"
    )

    parser.add_argument("-o", "--output", help="Output file (default: dependencies.json next to the compilation database)")

    parser.add_argument(
        "--batch-size", type=int, default=DEFAULT_BATCH_SIZE, help=f"Maximum number of files scanned concurrently (default: {DEFAULT_BATCH_SIZE})"
    )

    parser.add_argument("-j", "--jobs", type=int, default=None, help="Number of scan threads (default: Python thread pool default)")

    parser.add_argument(
        "--exclude",
        type=str,
        action="append",
        metavar="PATTERN",
        help="Exclude files matching glob pattern relative to PROJECT_ROOT (can be used multiple times). "
        'Examples: "ThirdParty/*", "*/test/*", "*_generated.h"',
    )

    parser.add_argument(
        "--skip-invalid-records", action="store_true", help="Log and skip compilation database entries missing required fields instead of aborting"
    )

    parser.add_argument("--graph-export", metavar="FILE", help="Also export the graph via NetworkX (.graphml, .gexf or .json)")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")

    return parser.parse_args(argv)


def validate_arguments(args: argparse.Namespace) -> str:
    """Validate command line arguments and paths.

    Args:
        args: Parsed command line arguments

    Returns:
        Canonical project root

    Raises:
        ArgumentError: If a numeric option is out of range
        ProjectRootError: If the project root is not an existing directory
    """
    if args.batch_size < 1:
        raise ArgumentError(f"--batch-size must be at least 1, got {args.batch_size}")

    if args.jobs is not None and args.jobs < 1:
        raise ArgumentError(f"--jobs must be at least 1, got {args.jobs}")

    project_root = os.path.realpath(args.project)
    if not os.path.isdir(project_root):
        raise ProjectRootError(f"'{args.project}' is not a directory")

    logging.info("Project root: %s", project_root)
    return project_root


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the dependency graph tool.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    args: argparse.Namespace = parse_arguments(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")

    if args.no_color:
        Colors.disable()

    project_root = validate_arguments(args)

    if args.graph_export:
        require_package("networkx", "graph export")

    matcher = ProjectRootFilter(project_root, args.exclude)

    print_info(f"Parsing compile commands: {args.compilations}")
    database = read_compilation_database(args.compilations, matcher, skip_invalid_records=args.skip_invalid_records)
    print(f"Found {len(database.sources)} sources, {len(database.search_dirs)} include directories")

    if not database.sources:
        print_warning("No tracked sources found; check PROJECT_ROOT and --exclude patterns")

    print_info("Generating include graph...")
    result = scan_include_graph(database.sources, database.search_dirs, matcher, batch_size=args.batch_size, max_workers=args.jobs)

    print(f"{len(result.graph)} nodes, {result.edge_count} edges ({result.scan_time:.2f}s)")
    if result.failed_files:
        print_warning(f"{len(result.failed_files)} files could not be read and were left out")

    output = args.output or default_output_path(args.compilations)
    write_dependencies_json(output, result.graph)
    print_success(f"Wrote {output}")

    if args.graph_export and not export_dependency_graph(args.graph_export, result.graph):
        return 1

    return 0


def run(argv: Optional[list] = None) -> int:
    """Run main() and map exceptions to exit codes.

    Entry point for both the console script and direct execution.

    Returns:
        Exit code (see compdb_deps.constants)
    """
    try:
        return main(argv)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print(f"\n{Colors.YELLOW}Interrupted by user{Colors.RESET}")
        return EXIT_KEYBOARD_INTERRUPT
    except CompDbError as e:
        logging.error(str(e))
        print(f"\n{Colors.RED}Error: {e}{Colors.RESET}")
        return e.exit_code
    except OSError as e:
        logging.error("I/O error: %s", e)
        print(f"\n{Colors.RED}I/O error: {e}{Colors.RESET}")
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        logging.critical("Unexpected error: %s", e, exc_info=True)
        print(f"\n{Colors.RED}Fatal error: {e}{Colors.RESET}")
        print(f"{Colors.YELLOW}Run with --verbose for more details{Colors.RESET}")
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(run())
