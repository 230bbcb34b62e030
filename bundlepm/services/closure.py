"""
Dependency closure: expand one requested reference into everything it needs.
"""
from __future__ import annotations

import logging
from typing import Dict, Set

from bundlepm.domain.entities import Catalog, resolve_reference
from bundlepm.domain.models import ClosureResult, PackageReference

logger = logging.getLogger(__name__)


def close(root: PackageReference, catalog: Catalog) -> ClosureResult:
    """
    Compute the transitive set of references required by ``root``.

    Fixed-point breadth expansion over an ordered working set: each pass
    resolves every member not yet expanded, marks the ones that do not resolve
    as unresolvable and unions the dependencies of the rest into the set. It
    stops once a pass adds nothing. Cycles end on their own because a
    reference already in the set contributes nothing when rediscovered.

    ``resolved`` keeps first-discovery order so install order is reproducible.
    """
    # dict as an insertion-ordered set
    working: Dict[PackageReference, None] = {root: None}
    expanded: Set[PackageReference] = set()
    unresolvable: Dict[PackageReference, None] = {}

    previous_size = 0
    while previous_size < len(working):
        previous_size = len(working)

        for ref in list(working):
            if ref in expanded or ref in unresolvable:
                continue
            expanded.add(ref)

            pkg = resolve_reference(ref, catalog)
            if pkg is None:
                logger.debug(f"Unresolvable reference: {ref}")
                unresolvable[ref] = None
                continue

            for dep in pkg.dependencies:
                working.setdefault(dep, None)

    result = ClosureResult(
        resolved=[ref for ref in working if ref not in unresolvable],
        unresolvable=list(unresolvable),
    )
    logger.debug(
        f"Closure of {root}: {len(result.resolved)} resolved, {len(result.unresolvable)} unresolvable"
    )
    return result
