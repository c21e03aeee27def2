"""
Action-code dispatch: the process (or cotreatment control) each interaction produces.
"""

import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from .codes import ActionCode, ControlType, describe
from .entities import EntityResolver
from .naming import assign_name, name_of_interaction, sanitize_id
from .nodes import Complex, Control, Interaction, Node, Process, ProcessKind
from .records import Actor, InteractionRecord
from .store import CanonicalStore

if TYPE_CHECKING:
    from .controls import ControlBuilder

logger = logging.getLogger(__name__)

EXTRACELLULAR_MATRIX = "extracellular matrix"

# State carried by the right-hand instance; modification codes use their type name
STATE_LABELS = {
    ActionCode.ACT: "active",
    ActionCode.MUT: "mutated",
    ActionCode.SPL: "spliced",
    ActionCode.FOL: "folded",
}

MODIFICATION_CODES = (
    ActionCode.ACE, ActionCode.ACY, ActionCode.ALK, ActionCode.AMI, ActionCode.CAR,
    ActionCode.COX, ActionCode.ETH, ActionCode.GLT, ActionCode.GYC, ActionCode.GLY,
    ActionCode.GLC, ActionCode.NGL, ActionCode.OGL, ActionCode.HDX, ActionCode.LIP,
    ActionCode.FAR, ActionCode.GER, ActionCode.MYR, ActionCode.PAL, ActionCode.PRE,
    ActionCode.MYL, ActionCode.NIT, ActionCode.NUC, ActionCode.OXD, ActionCode.PHO,
    ActionCode.RED, ActionCode.RIB, ActionCode.ARB, ActionCode.SUL, ActionCode.SUM,
    ActionCode.UBQ, ActionCode.CLV,
)

# (left location, right location)
TRANSPORT_LOCATIONS = {
    ActionCode.EXT: (None, EXTRACELLULAR_MATRIX),
    ActionCode.SEC: (None, EXTRACELLULAR_MATRIX),
    ActionCode.UPT: (EXTRACELLULAR_MATRIX, None),
    ActionCode.IMT: (EXTRACELLULAR_MATRIX, None),
    ActionCode.TRT: (None, None),
    ActionCode.LOC: (None, None),
}

# Stability is modelled as the degradation it prevents
DEGRADATION_CODES = (ActionCode.DEG, ActionCode.HYD, ActionCode.STA)


class ConversionError(Exception):
    """An interaction record cannot be converted; the record is skipped."""


class InteractionCycleError(ConversionError):
    """A nested interaction reuses the id of one of its ancestors."""


class NestingTooDeep(ConversionError):
    """Interactions are nested deeper than allowed."""


def check_nesting(interaction: InteractionRecord, ancestors: Tuple[str, ...], max_depth: int):
    """Raise when entering the interaction would revisit an ancestor or exceed max_depth."""
    if interaction.id in ancestors:
        chain = " > ".join(ancestors + (interaction.id,))
        raise InteractionCycleError(f"Ixn #{interaction.id} is nested in itself: {chain}")
    if len(ancestors) > max_depth:
        raise NestingTooDeep(f"Ixn #{interaction.id} is nested {len(ancestors)} levels deep (max {max_depth})")


Handler = Callable[[str, InteractionRecord, ActionCode, Actor, Tuple[str, ...]], Interaction]


class ProcessBuilder:
    """Build the process an interaction describes, dispatching on its action code."""

    def __init__(self, store: CanonicalStore, resolver: EntityResolver, controls: "ControlBuilder"):
        """
        Initialize process builder.

        Args:
            store: Store receiving the nodes
            resolver: Resolver for gene/chemical actors
            controls: Control builder used for nested interactions
        """
        self.store = store
        self.resolver = resolver
        self.controls = controls

        self.handlers: Dict[ActionCode, Handler] = {
            ActionCode.B: self._build_binding,
            ActionCode.W: self._build_cotreatment,
            ActionCode.EXP: self._build_expression,
            ActionCode.CSY: self._build_synthesis,
        }
        for code in list(STATE_LABELS) + list(MODIFICATION_CODES):
            self.handlers[code] = self._build_state_change
        for code in DEGRADATION_CODES:
            self.handlers[code] = self._build_degradation
        for code in TRANSPORT_LOCATIONS:
            self.handlers[code] = self._build_transport
        # everything else (reaction, response, abundance, metabolic processing) is a generic reaction

    def process_key(self, interaction: InteractionRecord, code: ActionCode, target: Actor) -> str:
        """Canonical key of the process built for (code, target)."""
        if code.is_grouping:
            return sanitize_id(f"process_{interaction.id}")
        form_key, _, _ = self.resolver.effective_form(target)
        return sanitize_id(f"process_{code.name}_{target.id.lower()}_{form_key}")

    def build(self,
              interaction: InteractionRecord,
              code: ActionCode,
              target: Actor,
              ancestors: Tuple[str, ...] = ()) -> Optional[Interaction]:
        """
        Build (or find) the process of an interaction acting on target.

        A nested interaction as target is converted on its own and returned in place of a new
        process, annotated with the description of the outer action.

        Args:
            interaction: Interaction record
            code: Action code to dispatch on
            target: Actor the action applies to (ignored for binding and cotreatment)
            ancestors: Ids of the interactions enclosing this one

        Returns:
            Process, cotreatment Control, nested result, or None if the nested interaction
            produced nothing
        """
        if target.is_nested and not code.is_grouping:
            result = self.controls.build_interaction(target.interaction, ancestors + (interaction.id,))
            if result is not None:
                result.add_comment(describe(code).text)
            return result

        handler = self.handlers.get(code, self._build_reaction)

        def build(uri: str) -> Interaction:
            node = handler(uri, interaction, code, target, ancestors)
            node.add_comment(describe(code).text)
            return node

        return self.store.get_or_create(self.process_key(interaction, code, target), Interaction, build)

    def _name_process(self, process: Process, interaction: InteractionRecord):
        assign_name(process, name_of_interaction(interaction, suppress_first_actor=True))

    def _build_expression(self, uri, interaction, code, target, ancestors) -> Process:
        process = Process(uri=uri, kind=ProcessKind.TEMPLATE_REACTION, direction="FORWARD")
        process.products.append(self.resolver.resolve(target))
        self._name_process(process, interaction)
        return process

    def _build_state_change(self, uri, interaction, code, target, ancestors) -> Process:
        state = STATE_LABELS.get(code, code.type_name)
        process = Process(uri=uri, kind=ProcessKind.CONVERSION)
        process.left.append(self.resolver.resolve(target))
        process.right.append(self.resolver.resolve(target, state=state))
        self._name_process(process, interaction)
        return process

    def _build_degradation(self, uri, interaction, code, target, ancestors) -> Process:
        process = Process(uri=uri, kind=ProcessKind.DEGRADATION)
        process.left.append(self.resolver.resolve(target))
        self._name_process(process, interaction)
        return process

    def _build_synthesis(self, uri, interaction, code, target, ancestors) -> Process:
        process = Process(uri=uri, kind=ProcessKind.SYNTHESIS)
        process.right.append(self.resolver.resolve(target))
        self._name_process(process, interaction)
        return process

    def _build_transport(self, uri, interaction, code, target, ancestors) -> Process:
        left_location, right_location = TRANSPORT_LOCATIONS[code]
        process = Process(uri=uri, kind=ProcessKind.TRANSPORT)
        process.left.append(self.resolver.resolve(target, location=left_location))
        process.right.append(self.resolver.resolve(target, location=right_location))
        self._name_process(process, interaction)
        return process

    def _build_reaction(self, uri, interaction, code, target, ancestors) -> Process:
        logger.debug(f"No dedicated handler for {code.type_name}; Ixn #{interaction.id} becomes a generic reaction")
        process = Process(uri=uri, kind=ProcessKind.REACTION)
        process.left.append(self.resolver.resolve(target))
        self._name_process(process, interaction)
        return process

    def _build_cotreatment(self, uri, interaction, code, target, ancestors) -> Control:
        control = Control(uri=uri, control_type=ControlType.from_degree(interaction.degree))
        for actor in interaction.actors:
            for controller in self.controls.controllers_from_actor(actor, ancestors + (interaction.id,)):
                control.add_controller(controller)
        assign_name(control, name_of_interaction(interaction))
        return control

    def _build_binding(self, uri, interaction, code, target, ancestors) -> Process:
        complex_ = self.build_complex(interaction, ancestors)
        process = Process(uri=uri, kind=ProcessKind.COMPLEX_ASSEMBLY)
        process.left.extend(complex_.components)
        process.right.append(complex_)
        assign_name(process, name_of_interaction(interaction))
        return process

    def build_complex(self, interaction: InteractionRecord, ancestors: Tuple[str, ...] = ()) -> Complex:
        """
        Build (or find) the complex formed by a binding interaction.

        Molecules become fresh member instances, nested cotreatments are flattened into their
        actors and other nested interactions contribute their products.
        """
        def build(uri: str) -> Complex:
            components: List[Node] = []
            self._flatten(interaction, ancestors + (interaction.id,), uri, components)
            complex_ = Complex(uri=uri, components=components)
            assign_name(complex_, name_of_interaction(interaction))
            assign_name(complex_, "/".join(c.display_name or c.uri for c in components))
            return complex_

        return self.store.get_or_create(sanitize_id(f"complex_{interaction.id}"), Complex, build)

    def _flatten(self, interaction: InteractionRecord, ancestors: Tuple[str, ...],
                 complex_key: str, components: List[Node]):
        for actor in interaction.actors:
            if not actor.is_nested:
                member = self.resolver.resolve(actor, component_of=f"{complex_key}_{len(components)}")
                components.append(member)
                continue

            nested = actor.interaction
            if nested.action_code is ActionCode.W:
                check_nesting(nested, ancestors, self.controls.max_depth)
                self._flatten(nested, ancestors + (nested.id,), complex_key, components)
                continue

            result = self.controls.build_interaction(nested, ancestors)
            if result is None:
                logger.warning(f"Nested Ixn #{nested.id} produced nothing to bind")
                continue
            for output in result.outputs:
                if all(output is not existing for existing in components):
                    components.append(output)
