"""
Compilation of interactions into controls over processes.

The control builder is the entry point of the recursive compiler: it filters top-level
interactions, asks the ProcessBuilder for the controlled process, turns the first actor into
controllers (recursing through nested interactions) and annotates the result.
"""

import os
import logging
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from .codes import ActionCode, ControlType
from .entities import EntityResolver, get_or_create_biosource, get_or_create_publication
from .filters import TaxonomyFilter
from .naming import assign_name, name_of_interaction, sanitize_id
from .nodes import Control, Interaction, Node
from .processes import (
    ConversionError,
    InteractionCycleError,
    NestingTooDeep,
    ProcessBuilder,
    check_nesting,
)
from .records import Actor, InteractionRecord
from .store import CanonicalStore

load_dotenv()

logger = logging.getLogger(__name__)

__all__ = [
    "ControlBuilder",
    "ConversionError",
    "InteractionCycleError",
    "NestingTooDeep",
]

# Increased stability means less degradation
SIGN_INVERTED_CODES = (ActionCode.STA,)


class ControlBuilder:
    """Build controls (or bare processes for binding/cotreatment) from interaction records."""

    def __init__(self,
                 store: CanonicalStore,
                 taxonomy_filter: Optional[TaxonomyFilter] = None,
                 resolver: Optional[EntityResolver] = None,
                 max_depth: Optional[int] = None):
        """
        Initialize control builder.

        Args:
            store: Store receiving the nodes
            taxonomy_filter: Organism filter applied to top-level interactions
            resolver: Resolver for gene/chemical actors
            max_depth: Maximum nesting depth of interactions
        """
        self.store = store
        self.filter = taxonomy_filter or TaxonomyFilter()
        self.resolver = resolver or EntityResolver(store)
        self.max_depth = max_depth if max_depth is not None else int(os.getenv("CTD_MAX_NESTING_DEPTH", 16))
        self.processes = ProcessBuilder(store, self.resolver, self)

    def build_interaction(self,
                          interaction: InteractionRecord,
                          ancestors: Tuple[str, ...] = ()) -> Optional[Interaction]:
        """
        Convert an interaction into graph nodes.

        Args:
            interaction: Interaction record
            ancestors: Ids of the enclosing interactions (empty for top-level records)

        Returns:
            The outermost node (Control, or the process itself for binding/cotreatment),
            or None when the interaction is malformed or filtered out
        """
        if len(interaction.actors) < 2:
            logger.warning(f"Ixn #{interaction.id} has less than two actors; skipping this interaction")
            return None

        if not ancestors and not self.filter.accepts(interaction):
            return None

        check_nesting(interaction, ancestors, self.max_depth)

        code = interaction.action_code
        if code.is_grouping:
            result = self.processes.build(interaction, code, interaction.actors[0], ancestors)
        else:
            result = self.build_control(interaction, ancestors)

        if result is not None:
            self._annotate(result, interaction)
        return result

    def build_control(self, interaction: InteractionRecord, ancestors: Tuple[str, ...] = ()) -> Optional[Control]:
        """Build the control of actor[0] over the process acting on actor[1]."""
        key = sanitize_id(f"control_{interaction.id}")
        existing = self.store.get(key, Control)
        if existing is not None:
            return existing

        code = interaction.action_code
        controller_actor, target = interaction.actors[0], interaction.actors[1]

        controlled = self.processes.build(interaction, code, target, ancestors)
        if controlled is None:
            logger.warning(f"Ixn #{interaction.id}: nothing to control; skipping this interaction")
            return None

        controllers = self.controllers_from_actor(controller_actor, ancestors + (interaction.id,))
        # a nested target is the inner control itself, not the degraded product
        inverted = code in SIGN_INVERTED_CODES and not target.is_nested
        control_type = ControlType.from_degree(interaction.degree, inverted=inverted)

        def build(uri: str) -> Control:
            control = Control(uri=uri, controlled=controlled, control_type=control_type)
            for controller in controllers:
                control.add_controller(controller)
            assign_name(control, name_of_interaction(interaction))
            return control

        return self.store.get_or_create(key, Control, build)

    def controllers_from_actor(self, actor: Actor, ancestors: Tuple[str, ...] = ()) -> List[Node]:
        """
        Turn an actor into controllers.

        A molecule is its own controller. A nested binding contributes its complex, a nested
        cotreatment each of its actors, and any other nested interaction its products (or, when
        it has none, its own controllers).
        """
        if not actor.is_nested:
            return [self.resolver.resolve(actor)]

        nested = actor.interaction
        code = nested.action_code

        if code is ActionCode.B:
            check_nesting(nested, ancestors, self.max_depth)
            return [self.processes.build_complex(nested, ancestors)]

        if code is ActionCode.W:
            check_nesting(nested, ancestors, self.max_depth)
            controllers: List[Node] = []
            for sub_actor in nested.actors:
                for controller in self.controllers_from_actor(sub_actor, ancestors + (nested.id,)):
                    if all(controller is not existing for existing in controllers):
                        controllers.append(controller)
            return controllers

        result = self.build_interaction(nested, ancestors)
        if result is None:
            return []

        outputs = result.outputs
        if outputs:
            return outputs

        if isinstance(result, Control):
            return list(result.controllers)

        return []

    def _annotate(self, node: Interaction, interaction: InteractionRecord):
        """Attach publications and organisms declared by the interaction."""
        for pmid in interaction.references:
            node.add_xref(get_or_create_publication(self.store, pmid))

        for taxon in interaction.taxa:
            source = get_or_create_biosource(self.store, taxon)
            if all(source is not existing for existing in node.organisms):
                node.organisms.append(source)
