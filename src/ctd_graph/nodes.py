"""
Graph nodes produced by the interaction compiler.

Nodes link to each other by reference; every node is registered in exactly one
CanonicalStore under its uri (the canonical key).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional, Tuple

from .codes import ControlType


@dataclass(eq=False)
class Node:
    uri: str
    display_name: Optional[str] = None
    names: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    xrefs: List["Xref"] = field(default_factory=list)
    handle: Optional[int] = field(default=None, repr=False)

    # field name -> edge relation
    LINK_FIELDS: ClassVar[Dict[str, str]] = {"xrefs": "xref"}

    @property
    def node_type(self) -> str:
        return type(self).__name__

    def add_name(self, name: str):
        if name and name not in self.names:
            self.names.append(name)

    def add_comment(self, comment: str):
        if comment and comment not in self.comments:
            self.comments.append(comment)

    def add_xref(self, xref: "Xref"):
        if all(existing is not xref for existing in self.xrefs):
            self.xrefs.append(xref)

    def links(self) -> Iterator[Tuple[str, "Node"]]:
        """Yield (relation, target) for every node this node points to."""
        for attr, relation in self.LINK_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, list):
                for target in value:
                    yield relation, target
            else:
                yield relation, value

    def relink(self, canonical: Dict[str, "Node"]):
        """Point links at the canonical node registered under the same uri, where there is one."""
        for attr in self.LINK_FIELDS:
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, list):
                relinked = []
                for target in value:
                    target = canonical.get(target.uri, target)
                    if all(target is not kept for kept in relinked):
                        relinked.append(target)
                setattr(self, attr, relinked)
            else:
                setattr(self, attr, canonical.get(value.uri, value))

    def absorb(self, other: "Node"):
        """Take over names, comments and xrefs of a duplicate of this node."""
        if not self.display_name and other.display_name:
            self.display_name = other.display_name
        for name in other.names:
            self.add_name(name)
        for comment in other.comments:
            self.add_comment(comment)
        for xref in other.xrefs:
            if all(existing.uri != xref.uri for existing in self.xrefs):
                self.xrefs.append(xref)


@dataclass(eq=False)
class Xref(Node):
    db: str = ""
    id: str = ""
    xref_type: str = "relationship"

    LINK_FIELDS: ClassVar[Dict[str, str]] = {}

    @property
    def node_type(self) -> str:
        return f"{self.xref_type.capitalize()}Xref"


@dataclass(eq=False)
class BioSource(Node):
    taxon_id: str = ""


@dataclass(eq=False)
class CellularLocation(Node):
    term: str = ""


@dataclass(eq=False)
class ModificationFeature(Node):
    term: str = ""


@dataclass(eq=False)
class EntityReference(Node):
    """State-independent description of a molecule."""

    reference_type: str = "EntityReference"

    @property
    def node_type(self) -> str:
        return self.reference_type


@dataclass(eq=False)
class PhysicalEntity(Node):
    """One occurrence of a molecule, optionally in a given state or location."""

    entity_type: str = "PhysicalEntity"
    reference: Optional[EntityReference] = None
    state: Optional[str] = None
    location: Optional[CellularLocation] = None
    features: List[ModificationFeature] = field(default_factory=list)

    LINK_FIELDS: ClassVar[Dict[str, str]] = {
        "xrefs": "xref",
        "reference": "entity_reference",
        "location": "cellular_location",
        "features": "feature",
    }

    @property
    def node_type(self) -> str:
        return self.entity_type


@dataclass(eq=False)
class Complex(Node):
    components: List[Node] = field(default_factory=list)

    LINK_FIELDS: ClassVar[Dict[str, str]] = {"xrefs": "xref", "components": "component"}


class ProcessKind(Enum):
    CONVERSION = "Conversion"
    TRANSPORT = "Transport"
    DEGRADATION = "Degradation"
    SYNTHESIS = "Synthesis"
    TEMPLATE_REACTION = "TemplateReaction"
    COMPLEX_ASSEMBLY = "ComplexAssembly"
    REACTION = "Reaction"


@dataclass(eq=False)
class Interaction(Node):
    """Common base of processes and controls."""

    organisms: List[BioSource] = field(default_factory=list)

    @property
    def outputs(self) -> List[Node]:
        return []


@dataclass(eq=False)
class Process(Interaction):
    kind: ProcessKind = ProcessKind.REACTION
    left: List[Node] = field(default_factory=list)
    right: List[Node] = field(default_factory=list)
    products: List[Node] = field(default_factory=list)
    direction: str = "LEFT_TO_RIGHT"

    LINK_FIELDS: ClassVar[Dict[str, str]] = {
        "xrefs": "xref",
        "organisms": "organism",
        "left": "left",
        "right": "right",
        "products": "product",
    }

    @property
    def node_type(self) -> str:
        return self.kind.value

    @property
    def outputs(self) -> List[Node]:
        """Entities produced by the process (right-hand side or template products)."""
        if self.kind is ProcessKind.TEMPLATE_REACTION:
            return list(self.products)
        return list(self.right)


@dataclass(eq=False)
class Control(Interaction):
    controlled: Optional[Interaction] = None
    controllers: List[Node] = field(default_factory=list)
    control_type: Optional[ControlType] = None

    LINK_FIELDS: ClassVar[Dict[str, str]] = {
        "xrefs": "xref",
        "organisms": "organism",
        "controlled": "controlled",
        "controllers": "controller",
    }

    @property
    def node_type(self) -> str:
        if isinstance(self.controlled, Process) and self.controlled.kind is ProcessKind.TEMPLATE_REACTION:
            return "TemplateReactionRegulation"
        if isinstance(self.controlled, Control):
            return "Modulation"
        return "Control"

    def add_controller(self, controller: Node):
        if all(existing is not controller for existing in self.controllers):
            self.controllers.append(controller)

    @property
    def outputs(self) -> List[Node]:
        return self.controlled.outputs if self.controlled is not None else []
