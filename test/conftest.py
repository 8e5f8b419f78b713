"""Pytest configuration and shared fixtures for compdb-deps tests.

The cpp_project fixture lays out a small modular C++ tree:

    <root>/
        build/compile_commands.json
        core/include/core/types.hpp      public header
        core/src/core/impl.h             private header of core
        core/src/core/engine.cpp         includes "core/types.hpp", "impl.h", <vector>
        app/src/main.cpp                 includes <core/types.hpp>, "core/impl.h" (private, unresolved)
        docs/readme.h                    not below any search directory
"""

import os
import sys
import tempfile
import shutil
from pathlib import Path
from typing import Generator
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from cpp_fixtures import CppProject, write_compile_commands, write_file  # noqa: E402


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a canonical temporary directory for tests.

    Scope: function (default)
    Use for: File I/O operations that need isolation
    """
    tmpdir = os.path.realpath(tempfile.mkdtemp(prefix="compdb_deps_test_"))
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def cpp_project(temp_dir: str) -> CppProject:
    """Create the small C++ project described in the module docstring.

    Scope: function
    Dependencies: temp_dir
    """
    project = CppProject(temp_dir)

    write_file(
        project.types_hpp,
        """#pragma once
#include <cstdint>

using Id = std::uint32_t;
""",
    )
    write_file(
        project.impl_h,
        """#pragma once
#include "core/types.hpp"
""",
    )
    write_file(
        project.engine_cpp,
        """#include "core/types.hpp"
#include "impl.h"
#include <vector>

int run() { return 0; }
""",
    )
    write_file(
        project.main_cpp,
        """#include <core/types.hpp>
#include "core/impl.h"

int main() { return 0; }
""",
    )
    write_file(project.readme_h, "// not reachable\n")

    write_compile_commands(
        project.compile_commands,
        [
            {
                "directory": project.build_dir,
                "command": "g++ -I../core/include -I../core/src -O2 -c ../core/src/core/engine.cpp -o engine.o",
                "file": "../core/src/core/engine.cpp",
            },
            {
                "directory": project.build_dir,
                "command": "g++ -I../core/include -I ../app/src -I../missing -I/usr/include -c ../app/src/main.cpp -o main.o",
                "file": "../app/src/main.cpp",
            },
        ],
    )

    return project
