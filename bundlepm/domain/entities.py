from typing import Dict, Iterable, List, Optional
import logging

from bundlepm.domain.models import (
    Package,
    PackageList,
    PackageReference,
    Problem,
    make_reference,
    split_reference,
)

logger = logging.getLogger(__name__)


class Catalog:
    """
    In-memory index over every package list known for one invocation.

    Built once per command from the package-list cache and never mutated
    afterwards; ``problems`` holds whatever went wrong while building it.
    """

    def __init__(self, package_lists: Iterable[PackageList], problems: Optional[List[Problem]] = None):
        self._lists: Dict[str, PackageList] = {}
        self._packages: Dict[str, Dict[str, Package]] = {}
        self.problems: List[Problem] = list(problems or [])

        for package_list in package_lists:
            if package_list.name in self._lists:
                logger.warning(f"Duplicate package list {package_list.name}, keeping the first one")
                continue
            self._lists[package_list.name] = package_list

            by_name: Dict[str, Package] = {}
            for pkg in package_list.packages:
                # First declaration wins.
                by_name.setdefault(pkg.name, pkg)
            self._packages[package_list.name] = by_name

    @property
    def package_lists(self) -> List[PackageList]:
        return list(self._lists.values())

    def get_list(self, name: str) -> Optional[PackageList]:
        return self._lists.get(name)

    def resolve(self, ref: PackageReference) -> Optional[Package]:
        parts = split_reference(ref)
        if parts is None:
            return None
        list_name, package_name = parts
        packages = self._packages.get(list_name)
        if packages is None:
            return None
        return packages.get(package_name)

    def references(self) -> List[PackageReference]:
        """Every package reference, in list order then package order."""
        return [
            make_reference(list_name, package_name)
            for list_name, packages in self._packages.items()
            for package_name in packages
        ]

    def __len__(self) -> int:
        return len(self._lists)


def resolve_reference(ref: PackageReference, catalog: Catalog) -> Optional[Package]:
    """
    Look up a single package by "<list>/<package>".

    Returns None when the reference is malformed or either name is unknown.
    """
    return catalog.resolve(ref)
