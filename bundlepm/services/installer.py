"""
Installation engine: materialize resolved packages onto the target filesystem.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from bundlepm.data.ledger import InstallLedger
from bundlepm.domain.entities import Catalog, resolve_reference
from bundlepm.domain.models import (
    FileFailure,
    InstallReport,
    PackageReference,
    Problem,
    RemoveReport,
)
from bundlepm.domain.path_utils import normalize_file_path
from bundlepm.services.closure import close
from bundlepm.services.http_client import HttpFetcher
from bundlepm.storage.file_store import FileStore

logger = logging.getLogger(__name__)


class InstallationService:
    """
    Installs and removes packages.

    File-level failures are recorded and skipped; a package whose manifest was
    processed is recorded in the ledger even if some of its files failed.
    There is no rollback.
    """

    def __init__(
        self,
        store: FileStore,
        fetcher: Optional[HttpFetcher] = None,
        ledger: Optional[InstallLedger] = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.ledger = ledger or InstallLedger(store)

    async def install_package(self, root: PackageReference, catalog: Catalog) -> InstallReport:
        """
        Resolve the closure of ``root`` and install it.

        Nothing is fetched or written when any reference in the closure is
        unresolvable.
        """
        closure = close(root, catalog)

        if closure.unresolvable:
            status = "not_found" if root in closure.unresolvable else "unresolvable"
            if status == "not_found":
                logger.error(f"Package not found: {root}")
            else:
                logger.error(f"Unresolvable dependencies for {root}: {', '.join(closure.unresolvable)}")
            return InstallReport(
                requested=root,
                status=status,
                resolved=closure.resolved,
                unresolvable=closure.unresolvable,
                problems=[
                    Problem(
                        kind="unresolvable_dependency_set",
                        subject=root,
                        detail=", ".join(closure.unresolvable),
                    )
                ],
            )

        logger.info(f"Installing packages: {', '.join(closure.resolved)}")
        report = await self.install(closure.resolved, catalog)
        report.requested = root
        report.resolved = closure.resolved
        return report

    async def install(self, references: Iterable[PackageReference], catalog: Catalog) -> InstallReport:
        """
        Fetch and write every manifest file of every reference, in order, then
        union the processed references into the ledger.
        """
        if self.fetcher is None:
            raise RuntimeError("InstallationService needs an HttpFetcher to install packages")

        report = InstallReport()

        for ref in references:
            pkg = resolve_reference(ref, catalog)
            if pkg is None:
                # The closure saw it moments ago; report and carry on.
                logger.error(f"Package disappeared from the catalog during install: {ref}")
                report.problems.append(
                    Problem(kind="reference_not_found", subject=ref, detail="missing at install time")
                )
                continue

            for file_name, file_url in pkg.manifest.items():
                response = await self.fetcher.fetch(file_url)
                if not response.ok:
                    logger.warning(f"Failed to download file {file_name} from {file_url}")
                    report.file_failures.append(
                        FileFailure(
                            reference=ref,
                            path=file_name,
                            url=file_url,
                            kind="transport_failure",
                            detail=response.error or f"HTTP {response.status_code}",
                        )
                    )
                    continue

                target_path = normalize_file_path(file_name)
                try:
                    await self.store.write(target_path, response.body)
                except (OSError, ValueError) as e:
                    logger.error(f"Failed to write {target_path} for {ref}: {e}")
                    report.file_failures.append(
                        FileFailure(
                            reference=ref,
                            path=file_name,
                            url=file_url,
                            kind="write_failure",
                            detail=str(e),
                        )
                    )
                    continue

                report.files_written.append(target_path)
                logger.info(f"Downloaded file {file_name} from {file_url}")

            report.installed.append(ref)

        await self.ledger.add(report.installed)
        return report

    async def remove_package(self, ref: PackageReference, catalog: Catalog) -> RemoveReport:
        """
        Delete every file in the package's manifest.

        The ledger is left untouched: it records declared installs, not which
        files are currently present.
        """
        pkg = resolve_reference(ref, catalog)
        if pkg is None:
            logger.error(f"Package not found: {ref}")
            return RemoveReport(requested=ref, status="not_found")

        report = RemoveReport(requested=ref)
        for file_name in pkg.manifest:
            target_path = normalize_file_path(file_name)
            try:
                removed = await self.store.remove(target_path)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to remove {target_path}: {e}")
                removed = False

            if removed:
                report.files_removed.append(target_path)
            else:
                report.files_missing.append(target_path)
        return report
