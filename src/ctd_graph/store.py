"""
Canonicalization store: the get-or-create registry every builder goes through.
"""

import os
import logging
from typing import Callable, Dict, Iterator, List, Optional, Type, TypeVar

from dotenv import load_dotenv

from .nodes import Complex, Control, EntityReference, Interaction, Node, PhysicalEntity, Process

load_dotenv()

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=Node)


class CanonicalKeyConflict(ValueError):
    """A key is already registered for a node of another kind."""


class CanonicalStore:
    """
    Arena of graph nodes addressed by integer handles, with a map from canonical key to handle.

    A key maps to at most one node for the lifetime of the store, so building the same concept
    twice returns the same node.
    """

    def __init__(self, xml_base: Optional[str] = None):
        """
        Initialize an empty store.

        Args:
            xml_base: Base URI of the produced graph
        """
        self.xml_base = xml_base or os.getenv("CTD_XML_BASE", "http://www.ctdbase.org/#")
        self._nodes: List[Optional[Node]] = []
        self._handles: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, key: str) -> bool:
        return key in self._handles

    def __iter__(self) -> Iterator[Node]:
        return (node for node in self._nodes if node is not None)

    def get(self, key: str, kind: Type[N] = Node) -> Optional[N]:
        """Return the node registered under key, or None."""
        handle = self._handles.get(key)
        if handle is None:
            return None

        node = self._nodes[handle]
        if not isinstance(node, kind):
            raise CanonicalKeyConflict(
                f"Key {key} holds a {type(node).__name__}, not a {kind.__name__}"
            )
        return node

    def get_or_create(self, key: str, kind: Type[N], builder: Callable[[str], N]) -> N:
        """
        Return the node registered under key, building and registering it first if needed.

        Args:
            key: Canonical key (becomes the node uri)
            kind: Expected node class
            builder: Called with the key when nothing is registered yet; never called twice per key

        Returns:
            The canonical node
        """
        node = self.get(key, kind)
        if node is not None:
            logger.debug(f"Found previously created {kind.__name__}: {key}")
            return node

        node = builder(key)
        # the builder may have registered the key while recursing
        existing = self.get(key, kind)
        if existing is not None:
            return existing

        self.add(node)
        return node

    def add(self, node: Node) -> Node:
        """Register a node under its uri."""
        if node.uri in self._handles:
            raise CanonicalKeyConflict(f"Key {node.uri} is already registered")

        node.handle = len(self._nodes)
        self._nodes.append(node)
        self._handles[node.uri] = node.handle
        return node

    def node_at(self, handle: int) -> Optional[Node]:
        return self._nodes[handle]

    def remove(self, node: Node) -> bool:
        """Drop a node from the store; links other nodes hold to it are left untouched."""
        handle = self._handles.get(node.uri)
        if handle is None or self._nodes[handle] is not node:
            return False

        del self._handles[node.uri]
        self._nodes[handle] = None
        node.handle = None
        return True

    def nodes(self, kind: Type[N] = Node) -> List[N]:
        return [node for node in self if isinstance(node, kind)]

    @property
    def processes(self) -> List[Process]:
        return self.nodes(Process)

    @property
    def controls(self) -> List[Control]:
        return self.nodes(Control)

    @property
    def entities(self) -> List[Node]:
        return [node for node in self if isinstance(node, (PhysicalEntity, Complex, EntityReference))]

    @property
    def interactions(self) -> List[Interaction]:
        return self.nodes(Interaction)

    def referenced(self) -> Dict[str, int]:
        """Count incoming links per node uri."""
        counts: Dict[str, int] = {}
        for node in self:
            for _, target in node.links():
                counts[target.uri] = counts.get(target.uri, 0) + 1
        return counts

    def remove_dangling(self, kind: Type[Node] = EntityReference) -> List[Node]:
        """
        Remove nodes of the given kind that no other node links to.

        Args:
            kind: Node class to prune (entity references by default)

        Returns:
            Removed nodes
        """
        incoming = self.referenced()
        removed = [node for node in self.nodes(kind) if incoming.get(node.uri, 0) == 0]
        for node in removed:
            self.remove(node)

        logger.info(f"Removed {len(removed)} dangling {kind.__name__} nodes")
        return removed

    def merge(self, other: "CanonicalStore") -> int:
        """
        Fold another store into this one.

        Nodes under new keys are adopted and relinked to the canonical nodes of this store;
        nodes under known keys hand their names, comments and xrefs to the node kept here.

        Returns:
            Number of adopted nodes
        """
        canonical: Dict[str, Node] = {}
        adopted = []
        absorbed = []

        for node in other:
            kept = self.get(node.uri, Node)
            if kept is None:
                adopted.append(node)
                canonical[node.uri] = node
            else:
                if type(kept) is not type(node):
                    raise CanonicalKeyConflict(
                        f"Cannot merge {type(node).__name__} into {type(kept).__name__} at {node.uri}"
                    )
                kept.absorb(node)
                canonical[node.uri] = kept
                absorbed.append(kept)

        for node in adopted:
            node.relink(canonical)
            self.add(node)

        # kept nodes may have picked up duplicates of xrefs known here
        for node in absorbed:
            node.relink(canonical)

        logger.info(f"Merged {len(adopted)} new nodes ({len(other) - len(adopted)} already known)")
        return len(adopted)
