"""
Graph export and analysis utilities.
"""

import os
import logging
import pickle
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import networkx as nx
import pandas as pd
from dotenv import load_dotenv

from .nodes import (
    BioSource,
    CellularLocation,
    Control,
    EntityReference,
    ModificationFeature,
    Node,
    PhysicalEntity,
    Process,
    Xref,
)
from .store import CanonicalStore

load_dotenv()

logger = logging.getLogger(__name__)

LIST_SEPARATOR = "|"
DEFAULT_OUTPUT_DIR = "./data/graphs"


def node_attributes(node: Node) -> Dict[str, Any]:
    """
    Flatten a node into GraphML-friendly attributes (strings only, lists joined with '|').
    """
    attrs = {
        'node_type': node.node_type,
        'display_name': node.display_name or "",
        'names': LIST_SEPARATOR.join(node.names),
        'comments': LIST_SEPARATOR.join(node.comments),
    }

    if isinstance(node, Xref):
        attrs.update(db=node.db, xref_id=node.id, xref_type=node.xref_type)
    elif isinstance(node, BioSource):
        attrs['taxon_id'] = node.taxon_id
    elif isinstance(node, (CellularLocation, ModificationFeature)):
        attrs['term'] = node.term
    elif isinstance(node, EntityReference):
        attrs['reference_type'] = node.reference_type
    elif isinstance(node, PhysicalEntity):
        attrs['entity_type'] = node.entity_type
        attrs['state'] = node.state or ""
    elif isinstance(node, Process):
        attrs['direction'] = node.direction
    elif isinstance(node, Control):
        attrs['control_type'] = node.control_type.value if node.control_type is not None else ""

    return attrs


class GraphBuilder:
    """Export canonical stores as directed multigraphs."""

    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        """
        Initialize graph builder.

        Args:
            output_dir: Directory to save graphs (CTD_GRAPH_DIR by default)
        """
        self.output_dir = Path(output_dir or os.getenv("CTD_GRAPH_DIR", DEFAULT_OUTPUT_DIR))
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.graph = None

    def build_graph(self, store: CanonicalStore) -> nx.MultiDiGraph:
        """
        Build a graph with one node per store entry and one edge per link.

        Args:
            store: Canonical store

        Returns:
            NetworkX MultiDiGraph keyed by canonical keys
        """
        G = nx.MultiDiGraph(xml_base=store.xml_base)

        for node in store:
            G.add_node(node.uri, **node_attributes(node))

        missing = 0
        for node in store:
            for relation, target in node.links():
                if target.uri not in G:
                    # removed from the store (e.g. pruned); keep the edge readable anyway
                    G.add_node(target.uri, **node_attributes(target))
                    missing += 1
                G.add_edge(node.uri, target.uri, key=relation, relation=relation)

        if missing:
            logger.warning(f"{missing} linked nodes were not registered in the store")

        logger.info(f"Built graph with {G.number_of_nodes()} nodes and {G.number_of_edges()} edges")

        self.graph = G
        return G

    def save_graph(self, graph: nx.MultiDiGraph, filename: str, format: str = "both") -> List[Path]:
        """
        Save graph to disk.

        Args:
            graph: NetworkX graph to save
            filename: Base filename (without extension)
            format: Save format ('graphml', 'pickle', or 'both')

        Returns:
            List of saved file paths
        """
        if format not in ('graphml', 'pickle', 'both'):
            raise ValueError(f"Unsupported format: {format}")

        saved_paths = []

        if format in ['graphml', 'both']:
            graphml_path = self.output_dir / f"{filename}.graphml"
            nx.write_graphml(graph, graphml_path)
            saved_paths.append(graphml_path)
            logger.info(f"Saved graph to {graphml_path}")

        if format in ['pickle', 'both']:
            pickle_path = self.output_dir / f"{filename}.pkl"
            with open(pickle_path, 'wb') as f:
                pickle.dump(graph, f)
            saved_paths.append(pickle_path)
            logger.info(f"Saved graph to {pickle_path}")

        return saved_paths

    def load_graph(self, filename: str, format: str = "pickle") -> nx.MultiDiGraph:
        """
        Load graph from disk.

        Args:
            filename: Base filename (with or without extension)
            format: Load format ('graphml' or 'pickle')

        Returns:
            Loaded NetworkX graph
        """
        if format == "graphml":
            if not filename.endswith('.graphml'):
                filename += '.graphml'
            path = self.output_dir / filename
            graph = nx.read_graphml(path, force_multigraph=True)

        elif format == "pickle":
            if not filename.endswith('.pkl'):
                filename += '.pkl'
            path = self.output_dir / filename
            with open(path, 'rb') as f:
                graph = pickle.load(f)

        else:
            raise ValueError(f"Unsupported format: {format}")

        logger.info(f"Loaded graph from {path}")
        return graph


class GraphAnalyzer:
    """Summarize exported process graphs."""

    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        self.output_dir = Path(output_dir or os.getenv("CTD_GRAPH_DIR", DEFAULT_OUTPUT_DIR))
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def node_type_counts(self, graph: nx.MultiDiGraph) -> pd.Series:
        """Number of nodes per node type, most frequent first."""
        types = [data.get('node_type', 'unknown') for _, data in graph.nodes(data=True)]
        return pd.Series(types, dtype=str).value_counts()

    def relation_counts(self, graph: nx.MultiDiGraph) -> pd.Series:
        """Number of edges per relation."""
        relations = [data.get('relation', 'unknown') for _, _, data in graph.edges(data=True)]
        return pd.Series(relations, dtype=str).value_counts()

    def compute_basic_stats(self, graph: nx.MultiDiGraph) -> Dict[str, Any]:
        """
        Compute basic graph statistics.

        Args:
            graph: NetworkX graph

        Returns:
            Dictionary of statistics
        """
        stats = {
            'num_nodes': graph.number_of_nodes(),
            'num_edges': graph.number_of_edges(),
            'density': nx.density(graph),
            'num_components': nx.number_weakly_connected_components(graph) if graph.number_of_nodes() else 0,
        }

        for node_type, count in self.node_type_counts(graph).items():
            stats[f'num_{node_type}'] = int(count)

        return stats

    def export_node_table(self, graph: nx.MultiDiGraph, filename: str = "nodes.csv") -> Path:
        """
        Export node attributes and degrees to CSV.

        Args:
            graph: NetworkX graph
            filename: Output filename

        Returns:
            Path to generated CSV file
        """
        csv_path = self.output_dir / filename

        rows = []
        for node, data in graph.nodes(data=True):
            rows.append({
                'node': node,
                'node_type': data.get('node_type', 'unknown'),
                'display_name': data.get('display_name', ''),
                'in_degree': graph.in_degree(node),
                'out_degree': graph.out_degree(node),
            })

        df = pd.DataFrame(rows, columns=['node', 'node_type', 'display_name', 'in_degree', 'out_degree'])
        df.to_csv(csv_path, index=False)

        logger.info(f"Exported node table to {csv_path}")
        return csv_path

    def generate_summary_report(self, graph: nx.MultiDiGraph,
                                output_file: str = "graph_summary.txt") -> Path:
        """
        Write node/edge statistics and per-type counts to a text report.

        Returns:
            Path to generated report
        """
        report_path = self.output_dir / output_file

        with open(report_path, 'w') as f:
            f.write("CTD Process Graph Report\n")
            f.write("=" * 50 + "\n\n")

            f.write("Basic Statistics:\n")
            f.write("-" * 20 + "\n")
            for key, value in self.compute_basic_stats(graph).items():
                f.write(f"{key}: {value}\n")
            f.write("\n")

            f.write("Edges per relation:\n")
            f.write("-" * 20 + "\n")
            for relation, count in self.relation_counts(graph).items():
                f.write(f"{relation}: {count}\n")

        logger.info(f"Generated summary report: {report_path}")
        return report_path
