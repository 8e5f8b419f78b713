#!/usr/bin/env python3
"""Tests for compdb_deps/export_utils.py"""

import os
import json
from typing import Dict, Set

import networkx as nx
import pytest

from compdb_deps.export_utils import (
    default_output_path,
    dependency_graph_to_networkx,
    export_dependency_graph,
    graph_to_json_dict,
    write_dependencies_json,
)


@pytest.fixture
def sample_graph() -> Dict[str, Set[str]]:
    return {
        "/proj/src/a.cpp": {"/proj/src/b.h", "/proj/include/c.hpp"},
        "/proj/src/b.h": set(),
        "/proj/include/d.h": {"/proj/include/c.hpp"},
    }


class TestDefaultOutputPath:
    """Test default_output_path function."""

    def test_next_to_database(self) -> None:
        assert default_output_path("/proj/build/compile_commands.json") == "/proj/build/dependencies.json"

    def test_relative_database(self, temp_dir: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(temp_dir)
        assert default_output_path("compile_commands.json") == os.path.join(temp_dir, "dependencies.json")


class TestWriteDependenciesJson:
    """Test the dependencies.json writer."""

    def test_sorted_lists(self, sample_graph: Dict[str, Set[str]]) -> None:
        data = graph_to_json_dict(sample_graph)
        assert list(data) == sorted(sample_graph)
        assert data["/proj/src/a.cpp"] == ["/proj/include/c.hpp", "/proj/src/b.h"]
        assert data["/proj/src/b.h"] == []

    def test_written_file(self, temp_dir: str, sample_graph: Dict[str, Set[str]]) -> None:
        output = os.path.join(temp_dir, "dependencies.json")
        write_dependencies_json(output, sample_graph)

        with open(output, encoding="utf-8") as f:
            text = f.read()

        assert json.loads(text) == graph_to_json_dict(sample_graph)
        assert "\n  " in text  # pretty-printed

    def test_overwrites_existing_file(self, temp_dir: str) -> None:
        output = os.path.join(temp_dir, "dependencies.json")
        with open(output, "w", encoding="utf-8") as f:
            f.write('{"stale": ["entry"], "more": []}')

        write_dependencies_json(output, {"/proj/a.h": set()})

        with open(output, encoding="utf-8") as f:
            assert json.load(f) == {"/proj/a.h": []}

    def test_unwritable_location_raises(self, temp_dir: str) -> None:
        with pytest.raises(OSError):
            write_dependencies_json(os.path.join(temp_dir, "missing", "out.json"), {})


class TestDependencyGraphToNetworkx:
    """Test conversion to a NetworkX DiGraph."""

    def test_nodes_and_edges(self, sample_graph: Dict[str, Set[str]]) -> None:
        directed_graph = dependency_graph_to_networkx(sample_graph)

        assert set(directed_graph.nodes()) == {"/proj/src/a.cpp", "/proj/src/b.h", "/proj/include/c.hpp", "/proj/include/d.h"}
        assert directed_graph.number_of_edges() == 3
        assert directed_graph.has_edge("/proj/src/a.cpp", "/proj/src/b.h")
        assert not directed_graph.has_edge("/proj/src/b.h", "/proj/src/a.cpp")

    def test_scanned_attribute(self, sample_graph: Dict[str, Set[str]]) -> None:
        """Test that include-only targets are marked as not scanned."""
        directed_graph = dependency_graph_to_networkx(sample_graph)

        assert directed_graph.nodes["/proj/src/b.h"]["scanned"] is True
        assert directed_graph.nodes["/proj/include/c.hpp"]["scanned"] is False
        assert directed_graph.nodes["/proj/include/c.hpp"]["label"] == "c.hpp"


class TestExportDependencyGraph:
    """Test NetworkX based exports."""

    def test_graphml(self, temp_dir: str, sample_graph: Dict[str, Set[str]]) -> None:
        output = os.path.join(temp_dir, "deps.graphml")
        assert export_dependency_graph(output, sample_graph)
        loaded = nx.read_graphml(output)
        assert loaded.number_of_nodes() == 4
        assert loaded.number_of_edges() == 3

    def test_gexf(self, temp_dir: str, sample_graph: Dict[str, Set[str]]) -> None:
        output = os.path.join(temp_dir, "deps.gexf")
        assert export_dependency_graph(output, sample_graph)
        assert os.path.exists(output)

    def test_json(self, temp_dir: str, sample_graph: Dict[str, Set[str]]) -> None:
        output = os.path.join(temp_dir, "deps.json")
        assert export_dependency_graph(output, sample_graph)
        with open(output, encoding="utf-8") as f:
            data = json.load(f)
        assert data["directed"] is True
        assert len(data["nodes"]) == 4

    def test_unsupported_extension_defaults_to_graphml(self, temp_dir: str, sample_graph: Dict[str, Set[str]]) -> None:
        output = os.path.join(temp_dir, "deps.xyz")
        assert export_dependency_graph(output, sample_graph)
        assert os.path.exists(output + ".graphml")

    def test_failure_reported(self, temp_dir: str, sample_graph: Dict[str, Set[str]]) -> None:
        assert not export_dependency_graph(os.path.join(temp_dir, "missing", "deps.json"), sample_graph)
