"""Conflict enumeration over finished edit histories."""

from __future__ import annotations

from patchscope.analysis.models import Conflict, ConflictKind, EditHistory


def enumerate_conflicts(history: EditHistory) -> list[Conflict]:
    """Walk every slot history and report conflicting edit pairs.

    For each edit after the first that discards the prior implementation
    (overwrite or override):

    - a ``replace`` conflict with the preceding edit, unless the two are
      structurally identical re-declarations;
    - an ``outdated`` conflict with every patching edit registered as an
      alias of this slot before this edit was recorded.

    Order follows the histories: slots in first-edit order, edits in load
    order, replace before outdated.
    """
    conflicts: list[Conflict] = []
    for key, edits in history.methods.items():
        aliases = history.aliases.get(key, ())
        for index in range(1, len(edits)):
            edit = edits[index]
            if not edit.style.replaces:
                continue
            if edit.changed:
                conflicts.append(Conflict(ConflictKind.REPLACE, edits[index - 1], edit))
            for record in aliases[: edit.alias_count]:
                conflicts.append(
                    Conflict(ConflictKind.OUTDATED, history.resolve(key, record), edit)
                )
    return conflicts
