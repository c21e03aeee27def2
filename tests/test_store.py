"""Test the canonicalization store."""

import pytest
from ctd_graph.nodes import EntityReference, Node, PhysicalEntity, Xref
from ctd_graph.store import CanonicalKeyConflict, CanonicalStore


class TestCanonicalStore:
    """Test get-or-create, removal and pruning."""

    def test_init(self):
        store = CanonicalStore(xml_base="http://example.org/#")
        assert store.xml_base == "http://example.org/#"
        assert len(store) == 0

    def test_default_xml_base(self):
        assert CanonicalStore().xml_base == "http://www.ctdbase.org/#"

    def test_get_or_create_invokes_builder_once(self):
        """Test that the builder runs only for the first request of a key."""
        store = CanonicalStore()
        calls = []

        def build(key):
            calls.append(key)
            return Xref(uri=key, db="MeSH", id="D000082")

        first = store.get_or_create("xref_1", Xref, build)
        second = store.get_or_create("xref_1", Xref, build)

        assert first is second
        assert calls == ["xref_1"]
        assert len(store) == 1
        assert first.handle == 0
        assert store.node_at(first.handle) is first

    def test_kind_mismatch(self):
        store = CanonicalStore()
        store.add(Xref(uri="k"))

        with pytest.raises(CanonicalKeyConflict):
            store.get("k", PhysicalEntity)

    def test_add_duplicate_key(self):
        store = CanonicalStore()
        store.add(Node(uri="k"))

        with pytest.raises(CanonicalKeyConflict):
            store.add(Node(uri="k"))

    def test_builder_registering_same_key(self):
        """Test that a key registered while the builder recursed wins."""
        store = CanonicalStore()
        inner = Node(uri="k")

        def build(key):
            store.add(inner)
            return Node(uri=key)

        assert store.get_or_create("k", Node, build) is inner
        assert len(store) == 1

    def test_remove(self):
        store = CanonicalStore()
        node = store.add(Node(uri="k"))

        assert store.remove(node)
        assert "k" not in store
        assert list(store) == []
        assert not store.remove(node)

    def test_remove_dangling(self):
        """Test that only unreferenced entity references are pruned."""
        store = CanonicalStore()
        used = store.add(EntityReference(uri="ref_used", reference_type="ProteinReference"))
        store.add(EntityReference(uri="ref_unused", reference_type="ProteinReference"))
        store.add(PhysicalEntity(uri="p", entity_type="Protein", reference=used))

        removed = store.remove_dangling()

        assert [node.uri for node in removed] == ["ref_unused"]
        assert "ref_used" in store
        assert "p" in store


class TestMerge:
    """Test folding stores into each other."""

    def test_merge_adopts_and_relinks(self):
        """Test that adopted nodes point at the nodes already kept."""
        final = CanonicalStore()
        kept_xref = final.add(Xref(uri="xref_gene_1", db="NCBI Gene", id="1"))

        other = CanonicalStore()
        duplicate_xref = other.add(Xref(uri="xref_gene_1", db="NCBI Gene", id="1"))
        reference = EntityReference(uri="ref_protein_gene_1", reference_type="ProteinReference")
        reference.add_xref(duplicate_xref)
        other.add(reference)

        adopted = final.merge(other)

        assert adopted == 1
        merged = final.get("ref_protein_gene_1", EntityReference)
        assert merged.xrefs[0] is kept_xref
        assert len(final) == 2

    def test_merge_absorbs_known_nodes(self):
        """Test that known nodes pick up names and comments of their duplicates."""
        final = CanonicalStore()
        kept = final.add(EntityReference(uri="ref", reference_type="RnaReference"))
        kept.add_name("PEG3 mRNA")

        other = CanonicalStore()
        duplicate = other.add(EntityReference(uri="ref", reference_type="RnaReference"))
        duplicate.add_name("PEG3")
        duplicate.add_comment("paternally expressed 3")

        assert final.merge(other) == 0
        assert kept.names == ["PEG3 mRNA", "PEG3"]
        assert kept.comments == ["paternally expressed 3"]

    def test_merge_type_conflict(self):
        final = CanonicalStore()
        final.add(Xref(uri="k"))
        other = CanonicalStore()
        other.add(Node(uri="k"))

        with pytest.raises(CanonicalKeyConflict):
            final.merge(other)
