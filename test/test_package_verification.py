#!/usr/bin/env python3
"""Tests for compdb_deps/package_verification.py"""

import pytest

from compdb_deps.package_verification import PACKAGE_REQUIREMENTS, check_package_version, require_package


class TestCheckPackageVersion:
    """Test check_package_version function."""

    def test_installed_package(self) -> None:
        is_installed, meets_version, installed_version = check_package_version("packaging")
        assert is_installed
        assert meets_version
        assert installed_version

    def test_missing_package_no_raise(self) -> None:
        result = check_package_version("definitely-not-a-real-package-xyz", "1.0", raise_on_error=False)
        assert result == (False, False, None)

    def test_missing_package_raises(self) -> None:
        with pytest.raises(ImportError, match="not installed"):
            check_package_version("definitely-not-a-real-package-xyz", "1.0")

    def test_too_old_raises(self) -> None:
        with pytest.raises(ImportError, match="too old"):
            check_package_version("packaging", "99999.0")

    def test_too_old_no_raise(self) -> None:
        is_installed, meets_version, _ = check_package_version("packaging", "99999.0", raise_on_error=False)
        assert is_installed
        assert not meets_version

    def test_unknown_requirement(self) -> None:
        with pytest.raises(ValueError):
            check_package_version("definitely-not-a-real-package-xyz")


class TestRequirePackage:
    """Test require_package function."""

    def test_known_packages(self) -> None:
        assert set(PACKAGE_REQUIREMENTS) == {"networkx", "packaging", "colorama"}

    def test_satisfied(self) -> None:
        require_package("networkx", "graph export")

    def test_unknown_package_exits(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            require_package("definitely-not-a-real-package-xyz")
        assert exc_info.value.code == 2

    def test_too_old_exits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(PACKAGE_REQUIREMENTS, "networkx", "99999.0")
        with pytest.raises(SystemExit) as exc_info:
            require_package("networkx", "graph export")
        assert exc_info.value.code == 2
