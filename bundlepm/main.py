from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional

from pydantic import ValidationError

from bundlepm.core.dependencies import get_file_store, get_settings
from bundlepm.data.ledger import InstallLedger
from bundlepm.data.package_lists import load_catalog
from bundlepm.data.repository import SOURCE_URLS_PATH, ensure_initialized, load_source_urls
from bundlepm.domain.entities import resolve_reference
from bundlepm.domain.models import ClientSettings, Package
from bundlepm.services.http_client import HttpFetcher
from bundlepm.services.installer import InstallationService
from bundlepm.services.updater import PackageListUpdater
from bundlepm.storage.file_store import FileStore

logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

USAGE_STRING = "\n".join(
    [
        "Usage: bundlepm <command>",
        "",
        "Commands:",
        f"    bundlepm update                                 Update package lists from urls stored in {SOURCE_URLS_PATH}",
        "    bundlepm info <package list>/<package name>     Print information on a package",
        "    bundlepm list-packages                          List all known packages",
        "    bundlepm installed                              List all installed packages",
        "    bundlepm install <package list>/<package name>  Install the specified package",
        "    bundlepm remove <package list>/<package name>   Remove all files associated with the specified package",
        "    bundlepm help                                   Display this help message",
    ]
)


def format_package(pkg: Package) -> str:
    lines = [
        f"Name: {pkg.name}",
        f"Description: {pkg.description}",
        f"Version: {pkg.version}",
        f"Author: {pkg.author}",
        "Dependencies:",
        *[f"    {dep}" for dep in pkg.dependencies],
        "Manifest:",
        *[f"    {file_name}: {url}" for file_name, url in pkg.manifest.items()],
    ]
    return "\n".join(lines)


def _require_ref(args: argparse.Namespace) -> Optional[str]:
    if not args.ref:
        print("Please specify a package.")
        return None
    return args.ref


async def cmd_help(args: argparse.Namespace, store: FileStore, settings: ClientSettings) -> int:
    print(USAGE_STRING)
    return 0


async def cmd_update(args: argparse.Namespace, store: FileStore, settings: ClientSettings) -> int:
    print("Updating package lists...")
    urls = await load_source_urls(store)
    if not urls:
        print(f"No package list URLs configured in {SOURCE_URLS_PATH}")
        return 0

    async with HttpFetcher(timeout=settings.http_timeout_seconds) as fetcher:
        report = await PackageListUpdater(store, fetcher).refresh(urls)

    for name in report.updated:
        print(f"Updated package list: {name}")
    for problem in report.problems:
        print(f"Skipped {problem.subject}: {problem.detail}")
    return 0


async def cmd_info(args: argparse.Namespace, store: FileStore, settings: ClientSettings) -> int:
    ref = _require_ref(args)
    if ref is None:
        return 1

    catalog = await load_catalog(store)
    pkg = resolve_reference(ref, catalog)
    if pkg is None:
        print(f"Package not found: {ref}")
        return 1

    print("Package:")
    print("\n".join(f"    {line}" for line in format_package(pkg).split("\n")))
    return 0


async def cmd_list_packages(args: argparse.Namespace, store: FileStore, settings: ClientSettings) -> int:
    catalog = await load_catalog(store)
    for ref in catalog.references():
        print(ref)
    return 0


async def cmd_installed(args: argparse.Namespace, store: FileStore, settings: ClientSettings) -> int:
    installed = await InstallLedger(store).load()
    if not installed:
        print("No packages installed.")
        return 0
    for ref in installed:
        print(ref)
    return 0


async def cmd_install(args: argparse.Namespace, store: FileStore, settings: ClientSettings) -> int:
    ref = _require_ref(args)
    if ref is None:
        return 1

    catalog = await load_catalog(store)
    async with HttpFetcher(timeout=settings.http_timeout_seconds) as fetcher:
        report = await InstallationService(store, fetcher).install_package(ref, catalog)

    if report.status == "not_found":
        print(f"Package not found: {ref}")
        return 1
    if report.status == "unresolvable":
        print(f"Unresolvable dependencies: {len(report.unresolvable)}")
        for dep in report.unresolvable:
            print(f"    {dep}")
        return 1

    print(f"Installed packages: {', '.join(report.resolved)}")
    for path in report.files_written:
        print(f"Wrote {path}")
    for failure in report.file_failures:
        print(f"Failed to download file {failure.path} from {failure.url} ({failure.detail})")
    for problem in report.problems:
        print(f"Skipped {problem.subject}: {problem.detail}")
    print(f"Package installed: {ref}")
    return 0


async def cmd_remove(args: argparse.Namespace, store: FileStore, settings: ClientSettings) -> int:
    ref = _require_ref(args)
    if ref is None:
        return 1

    catalog = await load_catalog(store)
    report = await InstallationService(store).remove_package(ref, catalog)
    if report.status == "not_found":
        print(f"Package not found: {ref}")
        return 1

    for path in report.files_removed:
        print(f"Removed {path}")
    for path in report.files_missing:
        print(f"Not present: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="bundlepm")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    p.set_defaults(func=cmd_help)

    sub = p.add_subparsers(dest="command")

    sp = sub.add_parser("help", help="Display this help message")
    sp.set_defaults(func=cmd_help)

    sp = sub.add_parser("update", help="Update package lists")
    sp.set_defaults(func=cmd_update)

    sp = sub.add_parser("info", help="Print information on a package")
    sp.add_argument("ref", nargs="?")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("list-packages", help="List all known packages")
    sp.set_defaults(func=cmd_list_packages)

    sp = sub.add_parser("installed", help="List all installed packages")
    sp.set_defaults(func=cmd_installed)

    sp = sub.add_parser("install", help="Install a package and its dependencies")
    sp.add_argument("ref", nargs="?")
    sp.set_defaults(func=cmd_install)

    sp = sub.add_parser("remove", help="Remove the files of a package")
    sp.add_argument("ref", nargs="?")
    sp.set_defaults(func=cmd_remove)

    return p


async def _dispatch(args: argparse.Namespace, settings: ClientSettings) -> int:
    store = get_file_store()
    await ensure_initialized(store, settings.default_list_urls)
    return await args.func(args, store, settings)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}")
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.WARNING),
        format=LOG_FORMAT,
    )

    try:
        return asyncio.run(_dispatch(args, settings))
    except KeyboardInterrupt:
        return 130
    except (OSError, ValueError) as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
