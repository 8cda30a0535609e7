"""
structupdate.combine — Combine command trees.

The fluent builders (chain, macro) accumulate one command per method call.
Each call contributes a single-branch tree; merge_commands folds it into
the tree built so far.

ALGORITHM:
    • SubTree + SubTree   → merge key by key; keys on one side only are kept
                            as they are, shared keys merge recursively
    • anything + Invocation → the newer invocation replaces the older node
    • Invocation + SubTree  → the newer sub-tree replaces the invocation

So the last call addressing a given path wins, and calls addressing
disjoint paths all survive.
"""

import logging
from typing import Any, Optional

from .config import UpdateOptions
from .core import CommandNode, Invocation, SubTree, parse_commands

logger = logging.getLogger(__name__)


def merge_commands(base: Any, addition: Any,
                   options: Optional[UpdateOptions] = None) -> CommandNode:
    """
    Merge ``addition`` into ``base`` and return the combined tree.

    Both arguments may be raw command mappings or parsed nodes.  Neither is
    modified.
    """
    base = parse_commands(base, options)
    addition = parse_commands(addition, options)
    return _merge_recursive(base, addition, ())


def _merge_recursive(base: CommandNode, addition: CommandNode, path: tuple) -> CommandNode:
    if isinstance(base, SubTree) and isinstance(addition, SubTree):
        return _merge_subtrees(base, addition, path)

    if isinstance(base, Invocation) or (isinstance(base, SubTree) and base.children):
        logger.debug("Command at %s replaced by %r",
                     "/".join(str(p) for p in path) or "(root)", addition)
    return addition


def _merge_subtrees(base: SubTree, addition: SubTree, path: tuple) -> SubTree:
    merged = dict(base.children)

    for key, node in addition.children.items():
        if key in merged:
            merged[key] = _merge_recursive(merged[key], node, path + (key,))
        else:
            merged[key] = node

    return SubTree(merged)
