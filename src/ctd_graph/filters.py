"""
Organism-based filtering of interactions.
"""

import os
import logging
from typing import Optional

from dotenv import load_dotenv

from .records import InteractionRecord

load_dotenv()

logger = logging.getLogger(__name__)


class TaxonomyFilter:
    """Admit or reject top-level interactions by their declared organisms."""

    DEFINED = "defined"
    UNDEFINED = "undefined"

    def __init__(self, taxonomy: Optional[str] = None):
        """
        Initialize taxonomy filter.

        Args:
            taxonomy: Taxonomy id to keep (e.g. '9606'), 'defined' for interactions declaring
                any organism, 'undefined' for interactions declaring none, or None to keep all.
                Falls back to the CTD_TAXONOMY environment variable.
        """
        if taxonomy is None:
            taxonomy = os.getenv("CTD_TAXONOMY") or None
        self.taxonomy = taxonomy.strip() if taxonomy else None

    @property
    def enabled(self) -> bool:
        return self.taxonomy is not None

    def accepts(self, interaction: InteractionRecord) -> bool:
        """Whether the interaction passes the filter."""
        if self.taxonomy is None:
            return True

        declared = [taxon.id for taxon in interaction.taxa]
        wanted = self.taxonomy.lower()

        if wanted == self.DEFINED:
            admitted = bool(declared)
        elif wanted == self.UNDEFINED:
            admitted = not declared
        else:
            admitted = any(taxon_id.lower() == wanted for taxon_id in declared)

        if not admitted:
            logger.info(f"Ixn #{interaction.id} is not about taxonomy '{self.taxonomy}'; skipping")
        return admitted
