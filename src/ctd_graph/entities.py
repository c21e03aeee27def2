"""
Resolution of gene and chemical actors into entity references and per-occurrence instances.
"""

import logging
from typing import Optional, Tuple

from .codes import (
    CHEMICAL_ENTITY_TYPE,
    CHEMICAL_FORM_KEY,
    CHEMICAL_REFERENCE_TYPE,
    ActorKind,
    GeneForm,
)
from .naming import assign_name, name_of_actor, sanitize_id
from .normalize import XrefNormalizer
from .nodes import BioSource, CellularLocation, EntityReference, ModificationFeature, PhysicalEntity, Xref
from .records import LeafActor, Taxon
from .store import CanonicalStore

logger = logging.getLogger(__name__)


class InvalidActorKind(TypeError):
    """A nested interaction was handed to the entity resolver."""


def reference_key(form_key: str, actor_id: str) -> str:
    return sanitize_id(f"ref_{form_key}_{actor_id.lower()}")


def xref_key(xref_type: str, db: str, identifier: str) -> str:
    return sanitize_id(f"{xref_type}xref_{db}_{identifier}")


def get_or_create_xref(store: CanonicalStore, db: str, identifier: str,
                       xref_type: str = "relationship") -> Xref:
    """Return the (xref type, database, identifier) cross-reference, creating it once."""
    def build(key: str) -> Xref:
        return Xref(uri=key, db=db, id=identifier, xref_type=xref_type)

    return store.get_or_create(xref_key(xref_type, db, identifier), Xref, build)


def get_or_create_publication(store: CanonicalStore, pmid: str) -> Xref:
    return get_or_create_xref(store, "pubmed", str(pmid).strip(), xref_type="publication")


def get_or_create_biosource(store: CanonicalStore, taxon: Taxon) -> BioSource:
    """Return the organism node for a taxon, creating it the first time it is declared."""
    def build(key: str) -> BioSource:
        source = BioSource(uri=key, taxon_id=taxon.id)
        assign_name(source, taxon.name or f"taxonomy:{taxon.id}")
        source.add_xref(get_or_create_xref(store, "taxonomy", taxon.id, xref_type="unification"))
        return source

    return store.get_or_create(sanitize_id(f"taxonomy_{taxon.id}"), BioSource, build)


def get_or_create_location(store: CanonicalStore, term: str) -> CellularLocation:
    def build(key: str) -> CellularLocation:
        location = CellularLocation(uri=key, term=term)
        assign_name(location, term)
        return location

    return store.get_or_create(sanitize_id(f"location_{term}"), CellularLocation, build)


class EntityResolver:
    """Map leaf actors to canonical entity references and instances."""

    def __init__(self, store: CanonicalStore, normalizer: Optional[XrefNormalizer] = None):
        """
        Initialize resolver.

        Args:
            store: Store receiving the nodes
            normalizer: Cross-reference namespace normalizer
        """
        self.store = store
        self.normalizer = normalizer or XrefNormalizer()

    def effective_form(self, actor: LeafActor) -> Tuple[str, str, str]:
        """
        Determine (form key, entity type, reference type) of an actor.

        Chemicals are always chemicals whatever form they declare; genes default to protein.
        """
        if actor.kind is ActorKind.CHEMICAL:
            return CHEMICAL_FORM_KEY, CHEMICAL_ENTITY_TYPE, CHEMICAL_REFERENCE_TYPE

        if not actor.form:
            form = GeneForm.PROTEIN
        else:
            try:
                form = GeneForm.from_label(actor.form)
            except ValueError:
                logger.warning(f"Unknown form '{actor.form}' of gene {actor.id}; using protein")
                form = GeneForm.PROTEIN

        return form.key, form.entity_type, form.reference_type

    def resolve(self,
                actor: LeafActor,
                state: Optional[str] = None,
                location: Optional[str] = None,
                component_of: Optional[str] = None) -> PhysicalEntity:
        """
        Resolve an actor into an instance bound to its entity reference.

        Args:
            actor: Gene or chemical actor
            state: State label of the instance (e.g. "active")
            location: Cellular location term of the instance
            component_of: Key of a complex (plus position) the instance is a member of;
                members get their own instance

        Returns:
            Canonical PhysicalEntity
        """
        if actor.kind is ActorKind.INTERACTION:
            raise InvalidActorKind(f"Actor {actor.id} is an interaction, not a molecule")

        form_key, entity_type, reference_type = self.effective_form(actor)
        reference = self._get_or_create_reference(actor, form_key, reference_type)

        parts = [actor.id.lower(), form_key]
        if state:
            parts.append(state)
        if location:
            parts.append(location)
        if component_of:
            parts.append(component_of)
        key = sanitize_id("_".join(parts))

        def build(uri: str) -> PhysicalEntity:
            entity = PhysicalEntity(uri=uri, entity_type=entity_type, reference=reference, state=state)
            assign_name(entity, name_of_actor(actor))
            if state:
                if actor.kind is ActorKind.CHEMICAL:
                    entity.display_name = f"{entity.display_name or name_of_actor(actor)} ({state})"
                else:
                    entity.features.append(self._get_or_create_feature(uri, state))
            if location:
                entity.location = get_or_create_location(self.store, location)
            return entity

        return self.store.get_or_create(key, PhysicalEntity, build)

    def _get_or_create_reference(self, actor: LeafActor, form_key: str, reference_type: str) -> EntityReference:
        def build(uri: str) -> EntityReference:
            reference = EntityReference(uri=uri, reference_type=reference_type)
            assign_name(reference, name_of_actor(actor))

            split = self.normalizer.split_curie(actor.id)
            if split is None:
                logger.info(f"No namespace in actor id '{actor.id}'; not adding a cross-reference")
            else:
                db, identifier = split
                reference.add_xref(get_or_create_xref(self.store, db, identifier))
            return reference

        return self.store.get_or_create(reference_key(form_key, actor.id), EntityReference, build)

    def _get_or_create_feature(self, entity_key: str, term: str) -> ModificationFeature:
        def build(uri: str) -> ModificationFeature:
            feature = ModificationFeature(uri=uri, term=term)
            assign_name(feature, term)
            return feature

        return self.store.get_or_create(sanitize_id(f"feature_{entity_key}"), ModificationFeature, build)
