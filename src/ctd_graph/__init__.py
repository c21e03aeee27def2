"""
CTD Graph: Compile CTD chemical-gene interactions into biological-process graphs.

This package provides tools for:
1. Reading the structured interaction XML and the gene/chemical vocabularies
2. Compiling (nested) interactions into processes and the controls over them
3. Deduplicating and merging everything into one canonical store
4. Exporting the store as a networkx graph (GraphML/pickle)
"""

__version__ = "0.1.0"

from .codes import ActionCode, GeneForm, describe
from .records import InteractionRecord, LeafActor, NestedActor
from .store import CanonicalStore
from .entities import EntityResolver
from .controls import ControlBuilder
from .filters import TaxonomyFilter
from .convert import InteractionConverter, GeneConverter, ChemicalConverter, convert_files
from .graph import GraphBuilder, GraphAnalyzer

__all__ = [
    "ActionCode",
    "GeneForm",
    "describe",
    "InteractionRecord",
    "LeafActor",
    "NestedActor",
    "CanonicalStore",
    "EntityResolver",
    "ControlBuilder",
    "TaxonomyFilter",
    "InteractionConverter",
    "GeneConverter",
    "ChemicalConverter",
    "convert_files",
    "GraphBuilder",
    "GraphAnalyzer",
]
