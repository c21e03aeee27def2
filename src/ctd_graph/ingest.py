"""
Readers for the CTD input files: the structured interaction XML and the gene/chemical vocabularies.
"""

import gzip
import logging
from pathlib import Path
from typing import IO, Iterator, List, Optional, Union

import pandas as pd
from lxml import etree

from .codes import ActionCode, ActorKind
from .records import Action, Actor, InteractionRecord, LeafActor, NestedActor, Taxon

logger = logging.getLogger(__name__)

Source = Union[str, Path, IO[bytes]]

INTRA_FIELD_SEPARATOR = "|"


def _local(tag) -> str:
    """Strip the namespace from an element tag."""
    return etree.QName(tag).localname if isinstance(tag, str) else ""


def _open_source(source: Source):
    """Open a path (gzip-aware) or pass a file object through."""
    if isinstance(source, (str, Path)):
        path = Path(source)
        if path.suffix == '.gz':
            return gzip.open(path, 'rb')
        return open(path, 'rb')
    return source


class InteractionDocumentReader:
    """Stream interaction records out of a CTD chem_gene_ixns_struct XML document."""

    def read(self, source: Source) -> Iterator[InteractionRecord]:
        """
        Parse interactions one at a time.

        Args:
            source: Path to the XML file (optionally .gz) or a binary file object

        Yields:
            InteractionRecord per top-level <ixn> element

        Raises:
            lxml.etree.XMLSyntaxError: If the document is not well-formed
        """
        handle = _open_source(source)
        try:
            for _, element in etree.iterparse(handle, events=("end",), tag="{*}ixn"):
                # nested interactions are <actor type="ixn"> elements, never <ixn>
                record = self.parse_interaction(element)
                element.clear()
                while element.getprevious() is not None:
                    del element.getparent()[0]
                if record is not None:
                    yield record
        finally:
            if handle is not source:
                handle.close()

    def parse_interaction(self, element) -> Optional[InteractionRecord]:
        """Build an InteractionRecord from an <ixn> element."""
        ixn_id = element.get("id")
        if not ixn_id:
            logger.warning("Found an <ixn> without an id; skipping it")
            return None

        actors: List[Actor] = []
        actions: List[Action] = []
        taxa: List[Taxon] = []
        references: List[str] = []

        for child in element:
            tag = _local(child.tag)
            if tag == "actor":
                actor = self.parse_actor(child)
                if actor is not None:
                    actors.append(actor)
            elif tag == "axn":
                actions.append(self.parse_action(child, ixn_id))
            elif tag == "taxon":
                taxa.append(Taxon(id=child.get("id", "").strip(), name=(child.text or "").strip()))
            elif tag == "reference":
                pmid = child.get("pmid")
                if pmid:
                    references.append(pmid.strip())

        return InteractionRecord(
            id=ixn_id.strip(),
            actors=tuple(actors),
            actions=tuple(actions),
            taxa=tuple(taxa),
            references=tuple(references),
        )

    def parse_actor(self, element) -> Optional[Actor]:
        """Build a LeafActor, or a NestedActor for <actor type="ixn">."""
        actor_id = (element.get("id") or "").strip()
        form = element.get("form") or None

        try:
            kind = ActorKind.from_type(element.get("type", ""))
        except ValueError:
            logger.warning(f"Actor {actor_id} has an unknown type '{element.get('type')}'; skipping it")
            return None

        if kind is ActorKind.INTERACTION:
            nested = self.parse_interaction(element)
            if nested is None:
                return None
            return NestedActor(interaction=nested, form=form)

        name = "".join(element.itertext()).strip()
        return LeafActor(id=actor_id, kind=kind, name=name or actor_id, form=form)

    def parse_action(self, element, ixn_id: str) -> Action:
        """Build an Action; unknown codes fall back to the generic reaction code."""
        code_attr = element.get("code", "")
        try:
            code = ActionCode.from_code(code_attr)
        except ValueError:
            logger.warning(f"Ixn #{ixn_id} has unknown action code '{code_attr}'; treating it as a reaction")
            code = ActionCode.RXN

        text = (element.text or "").strip() or None
        return Action(code=code, degree=(element.get("degreecode") or "1").strip() or "1", text=text)


class VocabularyReader:
    """Parse a CTD vocabulary CSV into a DataFrame of string columns."""

    COLUMNS: List[str] = []
    ID_COLUMN: str = ""

    def read(self, source: Source) -> pd.DataFrame:
        """
        Parse the vocabulary file.

        Args:
            source: Path to the CSV (optionally .gz) or a file object

        Returns:
            DataFrame with one row per vocabulary entry
        """
        logger.info(f"Parsing vocabulary file: {source}")

        df = pd.read_csv(
            source,
            header=None,
            names=self.COLUMNS,
            index_col=False,
            dtype=str,
            keep_default_na=False,
            on_bad_lines='skip',
            compression='infer' if isinstance(source, (str, Path)) else None,
        )
        df = df.fillna("")

        # Skip commented lines
        df = df[~df[self.COLUMNS[0]].str.startswith("#")]

        missing = df[self.ID_COLUMN].str.strip() == ""
        if missing.any():
            logger.warning(f"Skipping {int(missing.sum())} rows without {self.ID_COLUMN}")
            df = df[~missing]

        df = df.reset_index(drop=True)
        logger.info(f"Parsed {len(df)} vocabulary rows")
        return df

    @staticmethod
    def split_field(value: str) -> List[str]:
        """Split a '|'-separated field, dropping empty items."""
        return [item.strip() for item in value.split(INTRA_FIELD_SEPARATOR) if item.strip()]


class GeneVocabularyReader(VocabularyReader):
    COLUMNS = [
        'gene_symbol', 'gene_name', 'gene_id', 'alt_gene_ids',
        'synonyms', 'biogrid_ids', 'pharmgkb_ids', 'uniprot_ids',
    ]
    ID_COLUMN = 'gene_id'


class ChemicalVocabularyReader(VocabularyReader):
    COLUMNS = [
        'chemical_name', 'chemical_id', 'cas_rn', 'definition', 'parent_ids',
        'tree_numbers', 'parent_tree_numbers', 'synonyms', 'drugbank_ids',
    ]
    ID_COLUMN = 'chemical_id'
