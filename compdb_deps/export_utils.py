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
"""Export utilities for writing the include graph to various file formats."""

import os
import json
import logging
from typing import Any, Dict, List, Mapping, Set

import networkx as nx
from networkx.readwrite import json_graph

from compdb_deps.color_utils import print_error, print_success
from compdb_deps.constants import DEPENDENCIES_JSON

logger = logging.getLogger(__name__)

__all__ = ["default_output_path", "graph_to_json_dict", "write_dependencies_json", "dependency_graph_to_networkx", "export_dependency_graph"]


def default_output_path(compile_commands_path: str) -> str:
    """Return the dependencies.json path next to the compilation database."""
    return os.path.join(os.path.dirname(os.path.abspath(compile_commands_path)), DEPENDENCIES_JSON)


def graph_to_json_dict(graph: Mapping[str, Set[str]]) -> Dict[str, List[str]]:
    """Convert the graph to plain JSON types with sorted keys and dependency lists."""
    return {path: sorted(graph[path]) for path in sorted(graph)}


def write_dependencies_json(filename: str, graph: Mapping[str, Set[str]]) -> None:
    """Write the include graph as a pretty-printed JSON object, replacing any existing file.

    Args:
        filename: Output filename
        graph: Mapping of each file to the files it directly includes

    Raises:
        OSError: If the file cannot be written
    """
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(graph_to_json_dict(graph), f, indent=2)
        f.write("\n")

    logger.info("Wrote %s nodes to %s", len(graph), filename)


def dependency_graph_to_networkx(graph: Mapping[str, Set[str]]) -> "nx.DiGraph[Any]":
    """Build a NetworkX directed graph with an edge from each file to each file it includes.

    Include targets that were never scanned become nodes with scanned=False.
    """
    directed_graph: "nx.DiGraph[Any]" = nx.DiGraph()

    for path, deps in graph.items():
        directed_graph.add_node(path, scanned=True)
        for dep in deps:
            if dep not in graph:
                directed_graph.add_node(dep, scanned=False)
            directed_graph.add_edge(path, dep)

    for node in directed_graph.nodes():
        directed_graph.nodes[node]["label"] = os.path.basename(node)

    return directed_graph


def export_dependency_graph(filename: str, graph: Mapping[str, Set[str]]) -> bool:
    """Export the include graph through NetworkX.

    Supports: GraphML (.graphml), GEXF (.gexf), node-link JSON (.json)

    Node attributes:
        - label: File basename
        - scanned: Whether the file was scanned itself (False for include-only targets)

    Args:
        filename: Output filename (extension determines format)
        graph: Mapping of each file to the files it directly includes

    Returns:
        True if the export succeeded
    """
    ext = os.path.splitext(filename)[1].lower()

    try:
        directed_graph = dependency_graph_to_networkx(graph)

        if ext == ".graphml":
            nx.write_graphml(directed_graph, filename)
        elif ext == ".gexf":
            nx.write_gexf(directed_graph, filename)
        elif ext == ".json":
            data = json_graph.node_link_data(directed_graph)
            with open(filename, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        else:
            logger.warning("Unsupported graph format: %s. Defaulting to GraphML.", ext)
            filename = filename + ".graphml"
            nx.write_graphml(directed_graph, filename)

        logger.info("Exported dependency graph to %s", filename)
        print_success(f"Exported dependency graph to {filename}")
        return True

    except (OSError, nx.NetworkXError) as e:
        logger.error("Failed to export graph: %s", e)
        print_error(f"Failed to export graph: {e}")
        return False
