"""
Human-readable names for actors, interactions and the nodes built from them.
"""

import re
from typing import Union
from urllib.parse import quote_plus

from .nodes import Node
from .records import InteractionRecord, LeafActor, NestedActor

# Longer names are kept in the name list only
DISPLAY_NAME_LIMIT = 50


def name_of_actor(actor: Union[LeafActor, NestedActor]) -> str:
    """
    Name an actor: "<name> <form>" for molecules, "[<interaction name>]" for nested interactions.
    """
    if actor.is_nested:
        return f"[{name_of_interaction(actor.interaction)}]"

    if actor.form:
        return f"{actor.name} {actor.form}"
    return actor.name


def name_of_interaction(interaction: InteractionRecord, suppress_first_actor: bool = False) -> str:
    """
    Name an interaction from its actors and action.

    Binding and cotreatment list every actor: "A binds to B, C". Other interactions read
    "A <verb phrase> B". With suppress_first_actor the controlling actor is left out and the
    degree-neutral "<type name> of B" is returned, which is how processes are named.

    Args:
        interaction: Interaction record
        suppress_first_actor: Name only what happens to the target

    Returns:
        Interaction name
    """
    actors = interaction.actors
    if not actors:
        return "n/a"

    action = interaction.action
    phrase = action.phrase if action is not None else "n/a"
    code = interaction.action_code

    if code.is_grouping:
        rest = ", ".join(name_of_actor(actor) for actor in actors[1:])
        if suppress_first_actor:
            return f"{code.type_name} of {', '.join(name_of_actor(actor) for actor in actors)}"
        return f"{name_of_actor(actors[0])} {phrase} {rest}".rstrip()

    target = name_of_actor(actors[1]) if len(actors) > 1 else "n/a"
    if suppress_first_actor:
        return f"{code.type_name} of {target}"
    return f"{name_of_actor(actors[0])} {phrase} {target}"


def sanitize_id(value: str) -> str:
    """URL-encode a key and replace whatever is not a word character or '-' with '_'."""
    return re.sub(r"[^-\w]", "_", quote_plus(value))


def assign_name(node: Node, name: str):
    """Record a name on a node; short names also become its display name."""
    if not name:
        return
    node.add_name(name)
    if len(name) < DISPLAY_NAME_LIMIT:
        node.display_name = name
