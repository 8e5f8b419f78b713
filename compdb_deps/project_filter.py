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
"""Project membership tests applied to every path before it enters the graph."""

import os
import fnmatch
import logging
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

__all__ = ["ProjectFilter", "ProjectRootFilter", "AcceptAllFilter"]


class ProjectFilter:
    """Membership test deciding whether an absolute path belongs to the tracked project.

    The same filter instance is shared by the compilation database reader and the
    include graph builder, and is read concurrently by scan workers, so
    implementations must not mutate state in matches().
    """

    def matches(self, path: str) -> bool:
        """Return True if path is part of the tracked project."""
        raise NotImplementedError

    def __call__(self, path: str) -> bool:
        return self.matches(path)


class AcceptAllFilter(ProjectFilter):
    """Filter accepting every absolute path."""

    def matches(self, path: str) -> bool:
        return os.path.isabs(path)


class ProjectRootFilter(ProjectFilter):
    """Accept absolute paths under a project root with an ASCII file name.

    Optional exclude patterns are fnmatch globs tested against the path relative
    to the project root (e.g. "ThirdParty/*", "*/test/*", "*_generated.h").

    Attributes:
        project_root: Canonical project root directory
        exclude_patterns: Glob patterns rejecting otherwise matching paths
    """

    def __init__(self, project_root: str, exclude_patterns: Optional[Sequence[str]] = None) -> None:
        self.project_root = project_root.rstrip(os.sep) or os.sep
        self.exclude_patterns: List[str] = list(exclude_patterns or [])

    def __repr__(self) -> str:
        return f"ProjectRootFilter({self.project_root!r}, exclude_patterns={self.exclude_patterns!r})"

    def matches(self, path: str) -> bool:
        if not os.path.isabs(path):
            return False

        if path != self.project_root and not path.startswith(self.project_root.rstrip(os.sep) + os.sep):
            return False

        if not os.path.basename(path).isascii():
            return False

        if self.exclude_patterns:
            rel_path = os.path.relpath(path, self.project_root)
            for pattern in self.exclude_patterns:
                if fnmatch.fnmatch(rel_path, pattern):
                    logger.debug("Excluding %s (pattern '%s')", path, pattern)
                    return False

        return True
