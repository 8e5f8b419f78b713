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
"""Version checks for compdb-deps runtime dependencies.

Minimum versions are based on Ubuntu 24.04 LTS or actual code requirements,
whichever is higher.
"""

import sys
import logging
from importlib.metadata import version, PackageNotFoundError
from typing import Dict, Optional, Tuple

from packaging.version import parse

from compdb_deps.color_utils import print_error
from compdb_deps.constants import EXIT_RUNTIME_ERROR

logger = logging.getLogger(__name__)

__all__ = ["PACKAGE_REQUIREMENTS", "check_package_version", "require_package"]

# Package version requirements (minimum versions)
PACKAGE_REQUIREMENTS: Dict[str, str] = {
    "networkx": "2.8.8",  # Ubuntu 24.04 LTS (graph export)
    "packaging": "24.0",  # Ubuntu 24.04 LTS (required for this module itself)
    "colorama": "0.4.6",  # Ubuntu 24.04 LTS (colored output)
}


def check_package_version(package_name: str, min_version: Optional[str] = None, raise_on_error: bool = True) -> Tuple[bool, bool, Optional[str]]:
    """Check if a package is installed and meets minimum version requirement.

    Args:
        package_name: PyPI package name (e.g., 'networkx')
        min_version: Minimum required version string (e.g., '2.8.8').
                    If None, uses PACKAGE_REQUIREMENTS.
        raise_on_error: If True, raises ImportError on failure

    Returns:
        Tuple of (is_installed, meets_version, installed_version or None)

    Raises:
        ValueError: If no minimum version is known for the package
        ImportError: If raise_on_error=True and package is missing or too old
    """
    if min_version is None:
        min_version = PACKAGE_REQUIREMENTS.get(package_name)
        if min_version is None:
            raise ValueError(f"No version requirement specified for {package_name}")

    try:
        installed_version = version(package_name)
    except PackageNotFoundError as exc:
        if raise_on_error:
            raise ImportError(f"{package_name} is not installed. Install with: pip install '{package_name}>={min_version}'") from exc
        return False, False, None

    meets_version = parse(installed_version) >= parse(min_version)
    if not meets_version and raise_on_error:
        raise ImportError(
            f"{package_name} {installed_version} is too old. "
            f"Version >={min_version} is required. "
            f"Upgrade with: pip install --upgrade '{package_name}>={min_version}'"
        )

    return True, meets_version, installed_version


def require_package(package_name: str, context: str = "this tool") -> None:
    """Exit with a helpful message if a package is missing or too old.

    Args:
        package_name: PyPI package name (e.g., 'networkx')
        context: Description of what needs the package (e.g., "graph export")

    Exits:
        With EXIT_RUNTIME_ERROR (2) if package is missing or too old
    """
    try:
        check_package_version(package_name)
    except ValueError:
        print_error(f"Unknown package '{package_name}' - no version requirement defined")
        sys.exit(EXIT_RUNTIME_ERROR)
    except ImportError as e:
        logger.error("Package check failed for %s: %s", context, e)
        print_error(f"{package_name} is required for {context}.")
        print(str(e), file=sys.stderr)
        sys.exit(EXIT_RUNTIME_ERROR)
