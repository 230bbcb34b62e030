"""
Refresh the package-list cache from the configured source URLs.
"""
from __future__ import annotations

import logging
from typing import Iterable

from bundlepm.data.package_lists import MalformedRecordError, PackageListCache, parse_package_list
from bundlepm.domain.models import Problem, UpdateReport
from bundlepm.services.http_client import HttpFetcher
from bundlepm.storage.file_store import FileStore

logger = logging.getLogger(__name__)


class PackageListUpdater:
    """Pulls every configured package list and caches the ones that parse."""

    def __init__(self, store: FileStore, fetcher: HttpFetcher):
        self.cache = PackageListCache(store)
        self.fetcher = fetcher

    async def refresh(self, urls: Iterable[str]) -> UpdateReport:
        """
        Best-effort refresh: a URL that fails to download or parse is logged
        and skipped, the others are still cached.
        """
        report = UpdateReport()

        for url in urls:
            url = url.strip()
            if not url:
                continue

            response = await self.fetcher.fetch(url)
            if not response.ok:
                logger.warning(f"Failed to fetch package list from {url}")
                report.problems.append(
                    Problem(
                        kind="transport_failure",
                        subject=url,
                        detail=response.error or f"HTTP {response.status_code}",
                    )
                )
                continue

            try:
                package_list = parse_package_list(response.body)
            except MalformedRecordError as e:
                logger.warning(f"Failed to parse package list from {url}: {e}")
                report.problems.append(Problem(kind="malformed_record", subject=url, detail=str(e)))
                continue

            try:
                await self.cache.save(package_list)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to cache package list {package_list.name}: {e}")
                report.problems.append(Problem(kind="write_failure", subject=url, detail=str(e)))
                continue

            logger.info(f"Successfully parsed package list: {package_list.name}")
            report.updated.append(package_list.name)

        return report
