"""Test configuration and utilities."""

import tempfile
from pathlib import Path
import pytest

from ctd_graph.codes import ActionCode, ActorKind
from ctd_graph.records import Action, InteractionRecord, LeafActor, NestedActor, Taxon


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep settings from a local .env out of the tests."""
    for name in ("CTD_TAXONOMY", "CTD_MAX_NESTING_DEPTH", "CTD_XML_BASE", "CTD_GRAPH_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CTD_SHOW_PROGRESS", "0")


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        data_dir = Path(temp_dir) / "data"
        data_dir.mkdir()
        (data_dir / "raw").mkdir()
        (data_dir / "graphs").mkdir()
        yield str(data_dir)


def _gene(gene_id, name, form=None):
    return LeafActor(id=f"GENE:{gene_id}", kind=ActorKind.GENE, name=name, form=form)


def _chemical(mesh_id, name):
    return LeafActor(id=f"MESH:{mesh_id}", kind=ActorKind.CHEMICAL, name=name)


def _ixn(ixn_id, code, *actors, degree="1", taxa=(), references=()):
    return InteractionRecord(
        id=str(ixn_id),
        actors=tuple(actors),
        actions=(Action(code=code, degree=degree),),
        taxa=tuple(Taxon(id=t) for t in taxa),
        references=tuple(references),
    )


@pytest.fixture
def gene():
    """Factory for gene actors."""
    return _gene


@pytest.fixture
def chemical():
    """Factory for chemical actors."""
    return _chemical


@pytest.fixture
def ixn():
    """Factory for interaction records."""
    return _ixn


@pytest.fixture
def nested():
    """Factory wrapping an interaction record as an actor."""
    return lambda interaction: NestedActor(interaction=interaction)


@pytest.fixture
def expression_ixn():
    """PD 0325901 results in decreased expression of PEG3 mRNA."""
    return _ixn(4963086, ActionCode.EXP,
                _chemical("C500032", "PD 0325901"),
                _gene(5178, "PEG3", "mRNA"),
                degree="-", taxa=("9606",), references=("21930934",))


@pytest.fixture
def stability_ixn():
    """Sodium arsenite results in increased stability of MAP3K8 mRNA."""
    return _ixn(4695456, ActionCode.STA,
                _chemical("C017947", "sodium arsenite"),
                _gene(1326, "MAP3K8", "mRNA"),
                degree="+", taxa=("9606",))


@pytest.fixture
def binding_ixn():
    """Two genes and a chemical bind."""
    return _ixn(100, ActionCode.B,
                _gene(7157, "TP53", "protein"),
                _gene(4193, "MDM2", "protein"),
                _chemical("C482599", "nutlin 3"),
                degree="1")


SAMPLE_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<ixns>
  <ixn id="4963086">
    <taxon id="9606">Homo sapiens</taxon>
    <reference pmid="21930934"/>
    <axn code="exp" degreecode="-" position="1"/>
    <actor type="chemical" id="MESH:C500032" position="1">PD 0325901</actor>
    <actor type="gene" id="GENE:5178" form="mRNA" position="2">PEG3</actor>
  </ixn>
  <ixn id="4695456">
    <taxon id="9606">Homo sapiens</taxon>
    <axn code="sta" degreecode="+" position="1"/>
    <actor type="chemical" id="MESH:C017947" position="1">sodium arsenite</actor>
    <actor type="gene" id="GENE:1326" form="mRNA" position="2">MAP3K8</actor>
  </ixn>
  <ixn id="5000001">
    <taxon id="10090">Mus musculus</taxon>
    <axn code="act" degreecode="-" position="1"/>
    <actor type="ixn" id="5000002" position="1">
      <axn code="w" degreecode="1" position="1"/>
      <actor type="chemical" id="MESH:D000082" position="1">Acetaminophen</actor>
      <actor type="chemical" id="MESH:D003907" position="2">Dexamethasone</actor>
    </actor>
    <actor type="gene" id="GENE:7157" form="protein" position="2">TP53</actor>
  </ixn>
  <ixn id="5000003">
    <axn code="zzz" degreecode="+" position="1"/>
    <actor type="chemical" id="MESH:D000082" position="1">Acetaminophen</actor>
    <actor type="gene" id="GENE:7157" position="2">TP53</actor>
  </ixn>
</ixns>
"""

SAMPLE_GENES = """# Comparative Toxicogenomics Database (CTD)
# Fields:
# GeneSymbol,GeneName,GeneID,AltGeneIDs,Synonyms,BioGRIDIDs,PharmGKBIDs,UniProtIDs
PEG3,paternally expressed 3,5178,,PW1|ZSCAN24,111234,PA33062,Q9GZU2
MAP3K8,mitogen-activated protein kinase kinase kinase 8,1326,,COT|TPL2,107728,,P41279
TP53,tumor protein p53,7157,,P53|LFS1,113010,PA36679,P04637|K7PPA8
"""

SAMPLE_CHEMICALS = """# Comparative Toxicogenomics Database (CTD)
# Fields:
# ChemicalName,ChemicalID,CasRN,Definition,ParentIDs,TreeNumbers,ParentTreeNumbers,Synonyms,DrugBankIDs
Acetaminophen,MESH:D000082,103-90-2,Analgesic antipyretic,MESH:D000700,D02.065.199,D02.065,Paracetamol|Tylenol,DB00316
sodium arsenite,MESH:C017947,7784-46-5,,MESH:D001151,,,,
"""


@pytest.fixture
def sample_xml_file(temp_data_dir):
    """Structured interaction document with nested and unknown-code interactions."""
    path = Path(temp_data_dir) / "raw" / "chem_gene_ixns_struct.xml"
    path.write_bytes(SAMPLE_XML)
    return path


@pytest.fixture
def sample_gene_file(temp_data_dir):
    path = Path(temp_data_dir) / "raw" / "CTD_genes.csv"
    path.write_text(SAMPLE_GENES)
    return path


@pytest.fixture
def sample_chemical_file(temp_data_dir):
    path = Path(temp_data_dir) / "raw" / "CTD_chemicals.csv"
    path.write_text(SAMPLE_CHEMICALS)
    return path
