# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

"""Reconciliation of a freshly built class with its previous version.

Schema-derived members always win.  Everything else found in the
previous file is carried over unless a member of the same name already
exists.  A generated member renamed by hand therefore survives as an
orphan next to the regenerated one until it is removed manually.

Statements that are not members of a known kind, such as nested
classes or module-level helpers, are carried over as source text.
"""

from __future__ import annotations
from typing import (
    TYPE_CHECKING,
)

import logging

from ._classmodel import AddResult, ClassModel

if TYPE_CHECKING:
    from ._classmodel import ClassInventory
    from ._existing import ExistingClassSnapshot


logger = logging.getLogger(__name__)


def _log_add(kind: str, name: str, result: AddResult) -> None:
    if result is AddResult.Added:
        logger.debug("preserving %s %s", kind, name)
    else:
        logger.debug(
            "%s %s is generated, skipping old definition", kind, name
        )


def merge(
    generated: ClassInventory,
    snapshot: ExistingClassSnapshot | None,
) -> ClassInventory:
    if snapshot is None:
        return generated

    model = ClassModel.from_inventory(generated)
    model.set_abstract(generated.is_abstract or snapshot.is_abstract)

    for use in snapshot.uses:
        model.add_use(use)
    for mixin in snapshot.mixins:
        _log_add("mixin", mixin, model.add_mixin(mixin))
    # Decorators, final included, keep working because their imports
    # are carried over as well.
    for decorator in snapshot.decorators:
        model.add_decorator(decorator)

    for const in snapshot.constants:
        _log_add("constant", const.name, model.add_constant(const))
    for prop in snapshot.properties:
        _log_add("property", prop.name, model.add_property(prop))
    for method in snapshot.methods:
        _log_add("method", method.name, model.add_method(method))
    for block in snapshot.blocks:
        _log_add("statement", block.label, model.add_block(block))

    for block in snapshot.prologue:
        _log_add("statement", block.label, model.add_module_block(block))
    for block in snapshot.epilogue:
        _log_add(
            "statement",
            block.label,
            model.add_module_block(block, after_class=True),
        )

    return model.freeze()
