"""
Immutable records of the parsed interaction document.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .codes import ActionCode, ActorKind


@dataclass(frozen=True)
class Taxon:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Action:
    """An action (verb) of an interaction."""

    code: ActionCode
    degree: str = "1"
    text: Optional[str] = None

    @property
    def phrase(self) -> str:
        """Verb phrase used in interaction names."""
        if self.text:
            return self.text
        if self.degree.startswith("+"):
            return f"results in increased {self.code.type_name} of"
        if self.degree.startswith("-"):
            return f"results in decreased {self.code.type_name} of"
        return f"affects {self.code.type_name} of"


@dataclass(frozen=True)
class LeafActor:
    """A gene or chemical participant."""

    id: str
    kind: ActorKind
    name: str
    form: Optional[str] = None

    @property
    def is_nested(self) -> bool:
        return False


@dataclass(frozen=True)
class NestedActor:
    """A participant that is itself an interaction."""

    interaction: "InteractionRecord"
    form: Optional[str] = None

    @property
    def id(self) -> str:
        return self.interaction.id

    @property
    def kind(self) -> ActorKind:
        return ActorKind.INTERACTION

    @property
    def is_nested(self) -> bool:
        return True


Actor = Union[LeafActor, NestedActor]


@dataclass(frozen=True)
class InteractionRecord:
    """
    One interaction: ordered actors, actions (only the first is honored),
    declared organisms and supporting publications.
    """

    id: str
    actors: Tuple[Actor, ...]
    actions: Tuple[Action, ...] = ()
    taxa: Tuple[Taxon, ...] = ()
    references: Tuple[str, ...] = field(default=())

    @property
    def action(self) -> Optional[Action]:
        return self.actions[0] if self.actions else None

    @property
    def action_code(self) -> ActionCode:
        """Code of the first action; interactions without one are generic reactions."""
        action = self.action
        return action.code if action is not None else ActionCode.RXN

    @property
    def degree(self) -> str:
        action = self.action
        return action.degree if action is not None else "1"
