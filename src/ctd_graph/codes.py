"""
Controlled vocabularies of the interaction document: action codes, gene forms and actor kinds.
"""

import logging
from enum import Enum
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)


class ActorKind(Enum):
    """Kind of an interaction participant."""

    INTERACTION = "ixn"
    GENE = "gene"
    CHEMICAL = "chemical"

    @classmethod
    def from_type(cls, value: str) -> "ActorKind":
        """Map the `type` attribute of an actor element to an ActorKind."""
        value = value.strip().lower()
        if value == "interaction":
            return cls.INTERACTION
        return cls(value)


class ControlType(Enum):
    ACTIVATION = "ACTIVATION"
    INHIBITION = "INHIBITION"

    @classmethod
    def from_degree(cls, degree: Optional[str], inverted: bool = False) -> Optional["ControlType"]:
        """
        Translate an action degree sign into a control type.

        Args:
            degree: '+', '-' or anything else (unknown)
            inverted: Whether the sign is flipped (e.g. increased stability inhibits degradation)

        Returns:
            ControlType, or None when the degree carries no polarity
        """
        if not degree:
            return None

        sign = degree[0]
        if sign not in ("+", "-"):
            return None

        if inverted:
            sign = "-" if sign == "+" else "+"

        return cls.ACTIVATION if sign == "+" else cls.INHIBITION


class ActionDescription(NamedTuple):
    type_name: str
    description: str
    parent_code: Optional["ActionCode"]

    @property
    def text(self) -> str:
        """Human-readable comment text."""
        if self.parent_code is None:
            return self.description
        return f"{self.description} [{self.parent_code.type_name}]"


class ActionCode(Enum):
    """Interaction verbs. Each member holds (type name, description, parent code name)."""

    ABU = ("abundance", "The abundance of a chemical (if chemical synthesis is not known).", None)
    ACT = ("activity", "An elemental function of a molecule.", None)
    B = ("binding", "A molecular interaction.", None)
    W = ("cotreatment", "Involving the use of two or more chemicals simultaneously.", None)
    EXP = ("expression", "The expression of a gene product.", None)
    FOL = ("folding", "The bending and positioning of a molecule to achieve conformational integrity.", None)
    LOC = ("localization", "Part of the cell where a molecule resides.", None)
    MET = ("metabolic processing", "The biochemical alteration of a molecule's structure (does not include "
           "changes in expression, stability, folding, localization, splicing, or transport).", None)
    ACE = ("acetylation", "The addition of an acetyl group.", "MET")
    ACY = ("acylation", "The addition of an acyl group.", "MET")
    ALK = ("alkylation", "The addition of an alkyl group.", "MET")
    AMI = ("amination", "The addition of an amine group.", "MET")
    CAR = ("carbamoylation", "The addition of a carbamoyl group.", "MET")
    COX = ("carboxylation", "The addition of a carboxyl group.", "MET")
    CSY = ("chemical synthesis", "A biochemical event resulting in a new chemical product.", "MET")
    DEG = ("degradation", "Catabolism or breakdown.", "MET")
    CLV = ("cleavage", "The processing or splitting of a molecule, not necessarily leading to the "
           "destruction of the molecule.", "DEG")
    HYD = ("hydrolysis", "The splitting of a molecule via the specific use of water.", "CLV")
    ETH = ("ethylation", "The addition of an ethyl group.", "MET")
    GLT = ("glutathionylation", "The addition of a glutathione group.", "MET")
    GYC = ("glycation", "The non-enzymatic addition of a sugar.", "MET")
    GLY = ("glycosylation", "The addition of a sugar group.", "MET")
    GLC = ("glucuronidation", "The addition of a sugar group to form a glucuronide, typically part of an "
           "inactivating or detoxifying reaction.", "GLY")
    NGL = ("N-linked glycosylation", "The addition of a sugar group to an amide nitrogen.", "GLY")
    OGL = ("O-linked glycosylation", "The addition of a sugar group to a hydroxyl group.", "GLY")
    HDX = ("hydroxylation", "The addition of a hydroxy group.", "MET")
    LIP = ("lipidation", "The addition of a lipid group.", "MET")
    FAR = ("farnesylation", "The addition of a farnesyl group.", "LIP")
    GER = ("geranoylation", "The addition of a geranoyl group.", "LIP")
    MYR = ("myristoylation", "The addition of a myristoyl group.", "LIP")
    PAL = ("palmitoylation", "The addition of a palmitoyl group.", "LIP")
    PRE = ("prenylation", "The addition of a prenyl group.", "LIP")
    MYL = ("methylation", "The addition of a methyl group.", "MET")
    NIT = ("nitrosation", "The addition of a nitroso or nitrosyl group.", "MET")
    NUC = ("nucleotidylation", "The addition of a nucleotidyl group.", "MET")
    OXD = ("oxidation", "The loss of electrons.", "MET")
    PHO = ("phosphorylation", "The addition of a phosphate group.", "MET")
    RED = ("reduction", "The gain of electrons.", "MET")
    RIB = ("ribosylation", "The addition of a ribosyl group.", "MET")
    ARB = ("ADP-ribosylation", "The addition of a ADP-ribosyl group.", "RIB")
    SUL = ("sulfation", "The addition of a sulfate group.", "MET")
    SUM = ("sumoylation", "The addition of a SUMO group.", "MET")
    UBQ = ("ubiquitination", "The addition of an ubiquitin group.", "MET")
    MUT = ("mutagenesis", "The genetic alteration of a gene product.", None)
    RXN = ("reaction", "Any general biochemical or molecular event.", None)
    REC = ("response to substance", "Resistance or sensitivity to a substance.", None)
    SPL = ("splicing", "The removal of introns to generate mRNA.", None)
    STA = ("stability", "Overall molecular integrity.", None)
    TRT = ("transport", "The movement of a molecule into or out of a cell.", None)
    SEC = ("secretion", "The movement of a molecule out of a cell (by less specific means than export).", "TRT")
    EXT = ("export", "The movement of a molecule out of a cell (by more specific means than secretion).", "SEC")
    UPT = ("uptake", "The movement of a molecule into a cell (by less specific means than import).", "TRT")
    IMT = ("import", "The movement of a molecule into a cell (by more specific means than uptake).", "UPT")

    def __init__(self, type_name: str, description: str, parent_name: Optional[str]):
        self.type_name = type_name
        self.description = description
        self._parent_name = parent_name

    @property
    def parent(self) -> Optional["ActionCode"]:
        return ActionCode[self._parent_name] if self._parent_name else None

    @property
    def is_grouping(self) -> bool:
        """Binding and cotreatment treat all actors symmetrically."""
        return self in (ActionCode.B, ActionCode.W)

    @classmethod
    def from_code(cls, code: str) -> "ActionCode":
        """Look up a code attribute (case-insensitive); raises ValueError when unknown."""
        try:
            return cls[code.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown action code: {code!r}") from None


def describe(code: ActionCode) -> ActionDescription:
    """Return the type name, description and parent code of an action code."""
    return ActionDescription(code.type_name, code.description, code.parent)


class GeneForm(Enum):
    """Sub-forms of a gene actor: (label, entity type, reference type)."""

    THREE_UTR = ("3' UTR", "RnaRegion", "RnaRegionReference")
    FIVE_UTR = ("5' UTR", "RnaRegion", "RnaRegionReference")
    MRNA = ("mRNA", "Rna", "RnaReference")
    PROTEIN = ("protein", "Protein", "ProteinReference")
    GENE = ("gene", "Rna", "RnaReference")
    PROMOTER = ("promoter", "DnaRegion", "DnaRegionReference")
    MUTANT_FORM = ("mutant form", "Rna", "RnaReference")
    ENHANCER = ("enhancer", "DnaRegion", "DnaRegionReference")
    POLYMORPHISM = ("polymorphism", "Dna", "DnaReference")
    EXON = ("exon", "RnaRegion", "RnaRegionReference")
    SNP = ("SNP", "Dna", "DnaReference")
    INTRON = ("intron", "RnaRegion", "RnaRegionReference")
    MODIFIED_FORM = ("modified form", "Protein", "ProteinReference")
    ALTERNATIVE_FORM = ("alternative form", "Protein", "ProteinReference")
    POLYA_TAIL = ("polyA tail", "RnaRegion", "RnaRegionReference")

    def __init__(self, label: str, entity_type: str, reference_type: str):
        self.label = label
        self.entity_type = entity_type
        self.reference_type = reference_type

    @property
    def key(self) -> str:
        """Form component of canonical keys."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "GeneForm":
        """Find the form for a (case-insensitive) label such as "mRNA" or "3' UTR"."""
        wanted = label.strip().lower()
        for form in cls:
            if form.label.lower() == wanted or form.name.lower() == wanted.replace(" ", "_"):
                return form
        raise ValueError(f"Unknown gene form: {label!r}")


# Chemicals are not gene forms but share the same (key, entity type, reference type) triple
CHEMICAL_FORM_KEY = "chemical"
CHEMICAL_ENTITY_TYPE = "SmallMolecule"
CHEMICAL_REFERENCE_TYPE = "SmallMoleculeReference"
