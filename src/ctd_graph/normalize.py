"""
Normalization of cross-reference namespaces and identifiers.
"""

import logging
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class XrefNormalizer:
    """Map the namespace prefixes used in actor ids to database names."""

    def __init__(self, extra_namespaces: Optional[Dict[str, str]] = None):
        """
        Initialize normalizer.

        Args:
            extra_namespaces: Additional (lower-case prefix -> database name) mappings
        """
        self.namespaces = {
            'gene': 'NCBI Gene',
            'ncbigene': 'NCBI Gene',
            'mesh': 'MeSH',
            'c': 'MeSH',
            'cas': 'CAS',
            'drugbank': 'DrugBank',
            'uniprot': 'UniProt',
            'biogrid': 'BioGRID',
            'pharmgkb': 'PharmGKB Gene',
            'taxonomy': 'taxonomy',
            'pubmed': 'pubmed',
        }
        if extra_namespaces:
            self.namespaces.update({k.lower(): v for k, v in extra_namespaces.items()})

    def normalize_namespace(self, namespace: str) -> str:
        """Return the database name for a namespace prefix (unknown prefixes are kept)."""
        namespace = namespace.strip()
        return self.namespaces.get(namespace.lower(), namespace)

    def split_curie(self, curie: str) -> Optional[Tuple[str, str]]:
        """
        Split "namespace:identifier" into (database, identifier).

        Returns:
            (database, identifier), or None when there is no namespace prefix
        """
        if not curie or ':' not in curie:
            return None

        namespace, identifier = curie.split(':', 1)
        if not namespace.strip() or not identifier.strip():
            return None

        return self.normalize_namespace(namespace), identifier.strip()
