"""Test reading of the interaction document and vocabularies."""

import gzip
import io
import pytest
from lxml import etree
from ctd_graph.codes import ActionCode, ActorKind
from ctd_graph.ingest import ChemicalVocabularyReader, GeneVocabularyReader, InteractionDocumentReader, VocabularyReader


class TestInteractionDocumentReader:
    """Test streaming interaction records out of XML."""

    def test_read(self, sample_xml_file):
        """Test that every top-level interaction is read."""
        records = list(InteractionDocumentReader().read(sample_xml_file))

        assert [r.id for r in records] == ["4963086", "4695456", "5000001", "5000003"]

        first = records[0]
        assert first.action_code is ActionCode.EXP
        assert first.degree == "-"
        assert [t.id for t in first.taxa] == ["9606"]
        assert first.taxa[0].name == "Homo sapiens"
        assert first.references == ("21930934",)

        chemical, gene = first.actors
        assert chemical.kind is ActorKind.CHEMICAL
        assert chemical.id == "MESH:C500032"
        assert chemical.name == "PD 0325901"
        assert gene.form == "mRNA"
        assert gene.name == "PEG3"

    def test_nested_actor(self, sample_xml_file):
        """Test that actors of type ixn become nested interactions."""
        record = list(InteractionDocumentReader().read(sample_xml_file))[2]

        nested = record.actors[0]
        assert nested.is_nested
        assert nested.id == "5000002"
        assert nested.interaction.action_code is ActionCode.W
        assert [a.name for a in nested.interaction.actors] == ["Acetaminophen", "Dexamethasone"]
        assert not record.actors[1].is_nested

    def test_unknown_code_becomes_reaction(self, sample_xml_file):
        record = list(InteractionDocumentReader().read(sample_xml_file))[3]
        assert record.action_code is ActionCode.RXN
        assert record.degree == "+"
        assert record.actors[1].form is None

    def test_read_gzip(self, sample_xml_file, temp_data_dir):
        gz_path = sample_xml_file.with_suffix(".xml.gz")
        with gzip.open(gz_path, 'wb') as f:
            f.write(sample_xml_file.read_bytes())

        assert len(list(InteractionDocumentReader().read(gz_path))) == 4

    def test_read_file_object(self, sample_xml_file):
        records = list(InteractionDocumentReader().read(io.BytesIO(sample_xml_file.read_bytes())))
        assert len(records) == 4

    def test_malformed_document(self):
        with pytest.raises(etree.XMLSyntaxError):
            list(InteractionDocumentReader().read(io.BytesIO(b"<ixns><ixn id='1'>")))


class TestVocabularyReader:
    """Test vocabulary CSV parsing."""

    def test_read_genes(self, sample_gene_file):
        df = GeneVocabularyReader().read(sample_gene_file)

        assert list(df['gene_id']) == ["5178", "1326", "7157"]
        assert df.loc[0, 'gene_symbol'] == "PEG3"
        assert df.loc[1, 'pharmgkb_ids'] == ""

    def test_read_chemicals(self, sample_chemical_file):
        df = ChemicalVocabularyReader().read(sample_chemical_file)

        assert list(df['chemical_id']) == ["MESH:D000082", "MESH:C017947"]
        assert df.loc[0, 'cas_rn'] == "103-90-2"

    def test_rows_without_id_are_skipped(self, temp_data_dir):
        path = f"{temp_data_dir}/genes.csv"
        with open(path, 'w') as f:
            f.write("PEG3,paternally expressed 3,5178,,,,,\n")
            f.write("NOID,no identifier,,,,,,\n")

        df = GeneVocabularyReader().read(path)
        assert list(df['gene_symbol']) == ["PEG3"]

    def test_split_field(self):
        assert VocabularyReader.split_field("P04637|K7PPA8") == ["P04637", "K7PPA8"]
        assert VocabularyReader.split_field("") == []
        assert VocabularyReader.split_field("a||b ") == ["a", "b"]
