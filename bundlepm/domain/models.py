"""
Pydantic models for the package manager.

This module defines all data models used throughout the application, including:
- Package lists, packages and their manifests
- Runtime settings
- Result records returned by the catalog, closure, install and update engines

All models use Pydantic for validation, serialization, and type safety.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


REFERENCE_SEPARATOR = "/"

# A "<listName>/<packageName>" address, e.g. "core/base".
PackageReference = str

# Logical destination path -> source URL.
Manifest = Dict[str, str]


def split_reference(ref: PackageReference) -> Optional[Tuple[str, str]]:
    """
    Split a reference into (list name, package name).

    Returns None for anything that is not exactly two non-empty segments.
    """
    parts = ref.split(REFERENCE_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def make_reference(list_name: str, package_name: str) -> PackageReference:
    return f"{list_name}{REFERENCE_SEPARATOR}{package_name}"


def _check_name(value: str) -> str:
    if REFERENCE_SEPARATOR in value:
        raise ValueError(f"name must not contain '{REFERENCE_SEPARATOR}': {value!r}")
    return value


# ---------------------------------------------------------------------------
# Catalog Records
# ---------------------------------------------------------------------------


class Package(BaseModel):
    """
    A named, versioned bundle of files plus metadata and a dependency list.

    The version is informational only; dependencies are exact references.
    """

    name: str = Field(min_length=1, description="Package name, unique within its list.")
    description: str = Field(default="", description="Brief description of the package.")
    version: str = Field(default="", description="Current version string (not used for resolution).")
    author: str = Field(default="", description="Author of the package.")
    dependencies: List[PackageReference] = Field(
        default_factory=list,
        description="References of packages this package depends on, in declaration order.",
    )
    manifest: Manifest = Field(
        default_factory=dict,
        description="Destination file path -> source URL for every file the package installs.",
    )

    @field_validator("name")
    @classmethod
    def name_has_no_separator(cls, value: str) -> str:
        return _check_name(value)


class PackageList(BaseModel):
    """
    A named collection of packages, the unit fetched from a single URL and cached.
    """

    name: str = Field(min_length=1, description="List name, unique within a catalog.")
    packages: List[Package] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_has_no_separator(cls, value: str) -> str:
        return _check_name(value)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class ClientSettings(BaseModel):
    """
    Runtime configuration, assembled from environment variables.
    """

    root_dir: str = Field(description="Directory the virtual filesystem is rooted at.")
    default_list_urls: List[str] = Field(
        default_factory=list,
        description="Package list URLs written into a freshly initialized configuration file.",
    )
    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout applied to every HTTP GET.",
    )
    log_level: str = Field(default="WARNING")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


ProblemKind = Literal[
    "reference_not_found",
    "unresolvable_dependency_set",
    "transport_failure",
    "malformed_record",
    "write_failure",
]


class Problem(BaseModel):
    """A failure that was absorbed locally and reported instead of raised."""

    kind: ProblemKind
    subject: str = Field(description="Reference, URL or path the problem is about.")
    detail: str = ""


class FetchResponse(BaseModel):
    """
    Outcome of a single HTTP GET.

    status_code is 0 when the request never produced a response.
    """

    url: str
    status_code: int
    body: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class ClosureResult(BaseModel):
    resolved: List[PackageReference] = Field(
        default_factory=list,
        description="Every resolvable reference, in first-discovery order.",
    )
    unresolvable: List[PackageReference] = Field(default_factory=list)


class FileFailure(BaseModel):
    reference: PackageReference
    path: str
    url: str
    kind: ProblemKind
    detail: str = ""


class InstallReport(BaseModel):
    """
    Everything an install request did.

    A reference appears in ``installed`` even when some of its files failed;
    those failures are listed in ``file_failures``.
    """

    requested: Optional[PackageReference] = None
    status: Literal["installed", "not_found", "unresolvable"] = "installed"
    resolved: List[PackageReference] = Field(default_factory=list)
    unresolvable: List[PackageReference] = Field(default_factory=list)
    installed: List[PackageReference] = Field(default_factory=list)
    files_written: List[str] = Field(default_factory=list)
    file_failures: List[FileFailure] = Field(default_factory=list)
    problems: List[Problem] = Field(default_factory=list)


class RemoveReport(BaseModel):
    requested: PackageReference
    status: Literal["removed", "not_found"] = "removed"
    files_removed: List[str] = Field(default_factory=list)
    files_missing: List[str] = Field(default_factory=list)


class UpdateReport(BaseModel):
    updated: List[str] = Field(default_factory=list, description="Names of the lists written to the cache.")
    problems: List[Problem] = Field(default_factory=list)
