"""Test the action code, gene form and control type vocabularies."""

import pytest
from ctd_graph.codes import ActionCode, ActorKind, ControlType, GeneForm, describe


class TestActionCode:
    """Test the action code taxonomy."""

    def test_all_codes_present(self):
        """Test that every interaction verb is known."""
        assert len(ActionCode) == 53

    def test_from_code_is_case_insensitive(self):
        assert ActionCode.from_code("exp") is ActionCode.EXP
        assert ActionCode.from_code(" Pho ") is ActionCode.PHO

    def test_from_code_unknown(self):
        """Test that unknown codes raise ValueError."""
        with pytest.raises(ValueError):
            ActionCode.from_code("zzz")

    def test_parents(self):
        """Test the parent hierarchy of action codes."""
        assert ActionCode.IMT.parent is ActionCode.UPT
        assert ActionCode.UPT.parent is ActionCode.TRT
        assert ActionCode.HYD.parent is ActionCode.CLV
        assert ActionCode.CLV.parent is ActionCode.DEG
        assert ActionCode.PHO.parent is ActionCode.MET
        assert ActionCode.EXP.parent is None

    def test_grouping_codes(self):
        assert ActionCode.B.is_grouping
        assert ActionCode.W.is_grouping
        assert not ActionCode.EXP.is_grouping

    def test_describe(self):
        """Test description text with and without a parent."""
        description = describe(ActionCode.PHO)
        assert description.type_name == "phosphorylation"
        assert description.parent_code is ActionCode.MET
        assert description.text == "The addition of a phosphate group. [metabolic processing]"

        assert describe(ActionCode.EXP).text == "The expression of a gene product."


class TestGeneForm:
    """Test gene form lookup."""

    def test_from_label(self):
        assert GeneForm.from_label("mRNA") is GeneForm.MRNA
        assert GeneForm.from_label("3' UTR") is GeneForm.THREE_UTR
        assert GeneForm.from_label("polyA tail") is GeneForm.POLYA_TAIL
        assert GeneForm.from_label("Protein") is GeneForm.PROTEIN

    def test_from_label_unknown(self):
        with pytest.raises(ValueError):
            GeneForm.from_label("plasmid")

    def test_types(self):
        """Test entity and reference types of forms."""
        assert GeneForm.MRNA.entity_type == "Rna"
        assert GeneForm.PROMOTER.reference_type == "DnaRegionReference"
        assert GeneForm.SNP.entity_type == "Dna"
        assert GeneForm.MRNA.key == "mrna"


class TestControlType:
    """Test degree to control type translation."""

    def test_signs(self):
        assert ControlType.from_degree("+") is ControlType.ACTIVATION
        assert ControlType.from_degree("-") is ControlType.INHIBITION
        assert ControlType.from_degree("1") is None
        assert ControlType.from_degree("") is None

    def test_inverted(self):
        assert ControlType.from_degree("+", inverted=True) is ControlType.INHIBITION
        assert ControlType.from_degree("-", inverted=True) is ControlType.ACTIVATION
        assert ControlType.from_degree("1", inverted=True) is None


class TestActorKind:
    def test_from_type(self):
        assert ActorKind.from_type("ixn") is ActorKind.INTERACTION
        assert ActorKind.from_type("interaction") is ActorKind.INTERACTION
        assert ActorKind.from_type("Gene") is ActorKind.GENE

        with pytest.raises(ValueError):
            ActorKind.from_type("disease")
