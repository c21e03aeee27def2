"""
Converters turning CTD input files into canonical stores, and the merge of their results.
"""

import os
import logging
from typing import Iterable, Optional

from dotenv import load_dotenv
from lxml import etree
from tqdm import tqdm

from .codes import CHEMICAL_FORM_KEY, CHEMICAL_REFERENCE_TYPE, GeneForm
from .controls import ControlBuilder
from .entities import get_or_create_xref, reference_key
from .filters import TaxonomyFilter
from .ingest import (
    ChemicalVocabularyReader,
    GeneVocabularyReader,
    InteractionDocumentReader,
    Source,
    VocabularyReader,
)
from .naming import assign_name
from .normalize import XrefNormalizer
from .nodes import EntityReference
from .processes import ConversionError
from .records import InteractionRecord
from .store import CanonicalStore

load_dotenv()

logger = logging.getLogger(__name__)


class Converter:
    """Base class of the per-file converters."""

    def __init__(self, xml_base: Optional[str] = None, show_progress: Optional[bool] = None):
        """
        Args:
            xml_base: Base URI of the produced stores
            show_progress: Whether to display progress bars (CTD_SHOW_PROGRESS by default)
        """
        self.xml_base = xml_base
        if show_progress is None:
            show_progress = os.getenv("CTD_SHOW_PROGRESS", "1") not in ("0", "false", "False", "")
        self.show_progress = show_progress

    def create_store(self) -> CanonicalStore:
        return CanonicalStore(xml_base=self.xml_base)

    def convert(self, source: Source) -> CanonicalStore:
        raise NotImplementedError


class InteractionConverter(Converter):
    """Convert a structured interaction document into processes and controls."""

    def __init__(self, taxonomy: Optional[str] = None, max_depth: Optional[int] = None, **kwargs):
        """
        Args:
            taxonomy: Taxonomy filter value (id, 'defined', 'undefined' or None)
            max_depth: Maximum nesting depth of interactions
        """
        super().__init__(**kwargs)
        self.taxonomy_filter = TaxonomyFilter(taxonomy)
        self.max_depth = max_depth
        self.reader = InteractionDocumentReader()

    def convert(self, source: Source) -> CanonicalStore:
        """
        Convert one interaction document.

        A document that cannot be parsed yields an empty store.
        """
        store = self.create_store()
        try:
            self.convert_records(self.reader.read(source), store)
        except (etree.XMLSyntaxError, OSError) as e:
            logger.error(f"Could not read the interaction document {source} ({e})")
            return self.create_store()
        return store

    def convert_records(self,
                        records: Iterable[InteractionRecord],
                        store: Optional[CanonicalStore] = None) -> CanonicalStore:
        """
        Convert already parsed interaction records.

        Args:
            records: Top-level interaction records
            store: Store to fill (a new one by default)

        Returns:
            The filled store
        """
        if store is None:
            store = self.create_store()
        builder = ControlBuilder(store, self.taxonomy_filter, max_depth=self.max_depth)
        if self.taxonomy_filter.enabled:
            logger.info(f"Keeping interactions about taxonomy '{self.taxonomy_filter.taxonomy}'")

        total = converted = 0
        for record in tqdm(records, desc="Converting interactions", disable=not self.show_progress):
            total += 1
            try:
                result = builder.build_interaction(record)
            except ConversionError as e:
                logger.error(f"Could not convert Ixn #{record.id}: {e}; skipping it")
                continue
            if result is not None:
                converted += 1

        logger.info(f"Converted {converted} of {total} interactions into {len(store)} nodes")
        return store


class VocabularyConverter(Converter):
    """Base class of the gene and chemical vocabulary converters."""

    reader: VocabularyReader

    def __init__(self, normalizer: Optional[XrefNormalizer] = None, **kwargs):
        super().__init__(**kwargs)
        self.normalizer = normalizer or XrefNormalizer()

    def convert(self, source: Source) -> CanonicalStore:
        df = self.reader.read(source)
        store = self.create_store()

        for row in tqdm(df.itertuples(index=False), total=len(df),
                        desc=f"Converting {type(self).__name__}", disable=not self.show_progress):
            self.convert_row(store, row)

        logger.info(f"Vocabulary conversion is complete. Added "
                    f"{len(store.nodes(EntityReference))} entity references")
        return store

    def convert_row(self, store: CanonicalStore, row):
        raise NotImplementedError


class GeneConverter(VocabularyConverter):
    """Create one entity reference per gene form for every gene of the vocabulary."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.reader = GeneVocabularyReader()

    def convert_row(self, store: CanonicalStore, row):
        gene_id = row.gene_id.strip()
        actor_id = f"gene:{gene_id}"

        if reference_key(GeneForm.PROTEIN.key, actor_id) in store:
            logger.warning(f"Already had the gene {gene_id}. Skipping it.")
            return

        for form in GeneForm:
            reference = EntityReference(uri=reference_key(form.key, actor_id), reference_type=form.reference_type)
            assign_name(reference, row.gene_symbol)
            for synonym in VocabularyReader.split_field(row.synonyms):
                reference.add_name(synonym)
            reference.add_comment(row.gene_name)

            reference.add_xref(get_or_create_xref(store, "NCBI Gene", gene_id))
            # alternative NCBI Gene ids are left out, they inflate the graph
            for db, column in (("BioGRID", row.biogrid_ids),
                               ("PharmGKB Gene", row.pharmgkb_ids),
                               ("UniProt", row.uniprot_ids)):
                for identifier in VocabularyReader.split_field(column):
                    reference.add_xref(get_or_create_xref(store, db, identifier))

            store.add(reference)


class ChemicalConverter(VocabularyConverter):
    """Create a small molecule reference for every chemical of the vocabulary."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.reader = ChemicalVocabularyReader()

    def convert_row(self, store: CanonicalStore, row):
        chemical_id = row.chemical_id.strip()
        key = reference_key(CHEMICAL_FORM_KEY, chemical_id)

        if key in store:
            logger.warning(f"We already added chemical {chemical_id}. Skipping it.")
            return

        reference = EntityReference(uri=key, reference_type=CHEMICAL_REFERENCE_TYPE)
        assign_name(reference, row.chemical_name)
        for synonym in VocabularyReader.split_field(row.synonyms):
            reference.add_name(synonym)
        reference.add_comment(row.definition)

        split = self.normalizer.split_curie(chemical_id)
        if split is not None:
            reference.add_xref(get_or_create_xref(store, split[0], split[1], xref_type="unification"))
        else:
            logger.warning(f"Chemical id '{chemical_id}' has no namespace; no unification xref")

        for drugbank_id in VocabularyReader.split_field(row.drugbank_ids):
            reference.add_xref(get_or_create_xref(store, "DrugBank", drugbank_id))

        for parent_id in VocabularyReader.split_field(row.parent_ids):
            parent = self.normalizer.split_curie(parent_id)
            if parent is not None:
                reference.add_xref(get_or_create_xref(store, parent[0], parent[1]))

        if row.cas_rn.strip():
            reference.add_xref(get_or_create_xref(store, "CAS", row.cas_rn.strip()))

        store.add(reference)


def convert_files(interactions: Optional[Source] = None,
                  genes: Optional[Source] = None,
                  chemicals: Optional[Source] = None,
                  taxonomy: Optional[str] = None,
                  remove_dangling: bool = False,
                  xml_base: Optional[str] = None,
                  show_progress: Optional[bool] = None) -> CanonicalStore:
    """
    Convert each given input separately and merge the results.

    Args:
        interactions: Structured interaction XML
        genes: Gene vocabulary CSV
        chemicals: Chemical vocabulary CSV
        taxonomy: Taxonomy filter for interactions
        remove_dangling: Drop entity references nothing links to after merging
        xml_base: Base URI of the graph

    Returns:
        Merged store
    """
    final = CanonicalStore(xml_base=xml_base)

    steps = (
        (interactions, lambda: InteractionConverter(taxonomy=taxonomy, xml_base=xml_base, show_progress=show_progress)),
        (genes, lambda: GeneConverter(xml_base=xml_base, show_progress=show_progress)),
        (chemicals, lambda: ChemicalConverter(xml_base=xml_base, show_progress=show_progress)),
    )
    for source, make_converter in steps:
        if source is None:
            continue
        converter = make_converter()
        logger.info(f"Using {type(converter).__name__} to convert: {source}")
        final.merge(converter.convert(source))

    if remove_dangling:
        removed = final.remove_dangling(EntityReference)
        logger.info(f"Removed {len(removed)} dangling entity references from the graph")

    return final

