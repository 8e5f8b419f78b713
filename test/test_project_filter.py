#!/usr/bin/env python3
"""Tests for compdb_deps/project_filter.py"""

import pytest

from compdb_deps.project_filter import AcceptAllFilter, ProjectFilter, ProjectRootFilter


class TestProjectRootFilter:
    """Test the default project membership policy."""

    def test_accepts_files_under_root(self) -> None:
        matcher = ProjectRootFilter("/proj")
        assert matcher.matches("/proj/src/a.cpp")
        assert matcher("/proj/include/a.h")

    def test_accepts_root_itself(self) -> None:
        assert ProjectRootFilter("/proj").matches("/proj")

    def test_rejects_outside_root(self) -> None:
        matcher = ProjectRootFilter("/proj")
        assert not matcher.matches("/usr/include/stdio.h")
        assert not matcher.matches("/project/a.h")

    def test_rejects_relative_paths(self) -> None:
        assert not ProjectRootFilter("/proj").matches("proj/a.h")

    def test_rejects_non_ascii_file_name(self) -> None:
        assert not ProjectRootFilter("/proj").matches("/proj/src/héllo.h")

    def test_non_ascii_directory_allowed(self) -> None:
        """Test that only the file name must be ASCII."""
        assert ProjectRootFilter("/proj").matches("/proj/modulé/a.h")

    def test_trailing_separator_on_root(self) -> None:
        assert ProjectRootFilter("/proj/").matches("/proj/a.h")

    def test_filesystem_root(self) -> None:
        assert ProjectRootFilter("/").matches("/anything/a.h")


class TestProjectRootFilterExcludes:
    """Test exclude patterns."""

    @pytest.mark.parametrize(
        "path",
        ["/proj/ThirdParty/zlib/zlib.h", "/proj/core/test/t.cpp", "/proj/core/api_generated.h"],
    )
    def test_excluded(self, path: str) -> None:
        matcher = ProjectRootFilter("/proj", exclude_patterns=["ThirdParty/*", "*/test/*", "*_generated.h"])
        assert not matcher.matches(path)

    def test_not_excluded(self) -> None:
        matcher = ProjectRootFilter("/proj", exclude_patterns=["ThirdParty/*"])
        assert matcher.matches("/proj/core/ThirdPartyAdapter.h")

    def test_no_patterns(self) -> None:
        assert ProjectRootFilter("/proj", exclude_patterns=None).exclude_patterns == []


class TestOtherFilters:
    """Test the filter interface and the accept-all filter."""

    def test_accept_all(self) -> None:
        matcher = AcceptAllFilter()
        assert matcher.matches("/usr/include/stdio.h")
        assert not matcher.matches("relative.h")

    def test_base_filter_is_abstract(self) -> None:
        with pytest.raises(NotImplementedError):
            ProjectFilter().matches("/a.h")
