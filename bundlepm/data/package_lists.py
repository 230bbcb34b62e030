"""
Package-list cache and Catalog loading.

Cached lists are stored at PACKAGE_LIST_CACHE_DIR/{list name}.json, one record
per list, written as canonical JSON.
"""
from __future__ import annotations

import json
import logging
from typing import List, Optional

import yaml
from pydantic import ValidationError

from bundlepm.data.repository import PACKAGE_LIST_CACHE_DIR
from bundlepm.domain.entities import Catalog
from bundlepm.domain.models import PackageList, Problem
from bundlepm.storage.file_store import FileStore

logger = logging.getLogger(__name__)


class MalformedRecordError(ValueError):
    """A payload could not be parsed into a PackageList."""


def parse_package_list(text: str) -> PackageList:
    """
    Parse a package-list payload.

    JSON is the canonical form; anything json rejects is given to the YAML
    parser so lists can also be published as YAML.
    """
    try:
        raw = json.loads(text)
    except ValueError:
        try:
            raw = yaml.safe_load(text)
        except (yaml.YAMLError, ValueError) as e:
            # ValueError: timestamp-shaped scalars that are not real dates
            raise MalformedRecordError(f"not valid JSON or YAML: {e}") from e

    if not isinstance(raw, dict):
        raise MalformedRecordError(f"expected an object, got {type(raw).__name__}")

    try:
        return PackageList.model_validate(raw)
    except ValidationError as e:
        raise MalformedRecordError(str(e)) from e


class PackageListCache:
    """Reads and writes cached package lists through a FileStore."""

    def __init__(self, store: FileStore, cache_dir: str = PACKAGE_LIST_CACHE_DIR):
        self._store = store
        self._cache_dir = cache_dir.rstrip("/")

    def _get_list_path(self, name: str) -> str:
        return f"{self._cache_dir}/{name}.json"

    async def save(self, package_list: PackageList) -> str:
        """Cache a list under its declared name, replacing any previous copy."""
        path = self._get_list_path(package_list.name)
        await self._store.write(path, package_list.model_dump_json(indent=2))
        return path

    async def load_all(self, problems: Optional[List[Problem]] = None) -> List[PackageList]:
        """
        Load every cached list.

        A record that fails to parse is logged, appended to ``problems`` and
        skipped; the other lists still load.
        """
        package_lists: List[PackageList] = []
        for path in await self._store.list(self._cache_dir):
            try:
                package_lists.append(parse_package_list(await self._store.read(path)))
            except ValueError as e:
                # MalformedRecordError, or UnicodeDecodeError from a binary entry
                logger.error(f"Failed to parse cached package list {path}: {e}")
                if problems is not None:
                    problems.append(Problem(kind="malformed_record", subject=path, detail=str(e)))
        return package_lists


async def load_catalog(store: FileStore) -> Catalog:
    """Build the Catalog for this invocation from the package-list cache."""
    problems: List[Problem] = []
    package_lists = await PackageListCache(store).load_all(problems)
    catalog = Catalog(package_lists, problems)
    logger.debug(f"Loaded catalog with {len(catalog)} package lists ({len(problems)} skipped)")
    return catalog
