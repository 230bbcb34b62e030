"""
Tests for package records, reference resolution and catalog loading.
"""

import json

import pytest
from pydantic import ValidationError

from bundlepm.data.package_lists import (
    MalformedRecordError,
    PackageListCache,
    load_catalog,
    parse_package_list,
)
from bundlepm.data.repository import PACKAGE_LIST_CACHE_DIR
from bundlepm.domain.entities import Catalog, resolve_reference
from bundlepm.domain.models import Package, PackageList, split_reference


class TestReferences:
    @pytest.mark.parametrize(
        "ref,expected",
        [
            ("core/base", ("core", "base")),
            ("core", None),
            ("/base", None),
            ("core/", None),
            ("core/base/extra", None),
            ("", None),
        ],
    )
    def test_split_reference(self, ref, expected):
        assert split_reference(ref) == expected

    def test_package_name_cannot_contain_separator(self):
        with pytest.raises(ValidationError):
            Package(name="a/b")

    def test_list_name_is_required(self):
        with pytest.raises(ValidationError):
            PackageList(name="")


class TestParsePackageList:
    def test_parse_json(self, core_list):
        parsed = parse_package_list(core_list.model_dump_json())
        assert parsed == core_list

    def test_parse_yaml(self):
        text = "\n".join(
            [
                "name: extras",
                "packages:",
                "  - name: colors",
                "    version: '2.1'",
                "    dependencies: [core/base]",
                "    manifest:",
                "      /lib/colors.js: https://example.com/colors.js",
            ]
        )
        parsed = parse_package_list(text)
        assert parsed.name == "extras"
        assert parsed.packages[0].dependencies == ["core/base"]
        assert parsed.packages[0].manifest == {"/lib/colors.js": "https://example.com/colors.js"}

    def test_missing_fields_default(self):
        parsed = parse_package_list(json.dumps({"name": "bare", "packages": [{"name": "p"}]}))
        pkg = parsed.packages[0]
        assert pkg.dependencies == []
        assert pkg.manifest == {}
        assert pkg.description == ""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "not: [valid",
            "[1, 2, 3]",
            "2020-13-45",
            "name: 2020-13-45\npackages: []",
            json.dumps({"packages": []}),
            json.dumps({"name": "x", "packages": [{"description": "no name"}]}),
        ],
    )
    def test_malformed_payloads(self, text):
        with pytest.raises(MalformedRecordError):
            parse_package_list(text)


class TestCatalog:
    def test_resolve_existing_package(self, catalog):
        pkg = resolve_reference("core/tool", catalog)
        assert pkg is not None
        assert pkg.dependencies == ["core/base"]

    def test_unknown_package_in_known_list(self, catalog):
        assert resolve_reference("core/missing", catalog) is None

    def test_unknown_list(self, catalog):
        assert resolve_reference("nope/base", catalog) is None

    def test_malformed_reference(self, catalog):
        assert resolve_reference("core", catalog) is None
        assert resolve_reference("core/base/x", catalog) is None

    def test_references_in_catalog_order(self, core_list):
        other = PackageList(name="extras", packages=[Package(name="colors")])
        catalog = Catalog([core_list, other])
        assert catalog.references() == ["core/base", "core/tool", "extras/colors"]

    def test_first_duplicate_package_wins(self):
        package_list = PackageList(
            name="dup",
            packages=[Package(name="p", version="1"), Package(name="p", version="2")],
        )
        catalog = Catalog([package_list])
        assert resolve_reference("dup/p", catalog).version == "1"
        assert catalog.references() == ["dup/p"]


class TestLoadCatalog:
    @pytest.mark.asyncio
    async def test_load_from_cache(self, store, core_list):
        await PackageListCache(store).save(core_list)

        catalog = await load_catalog(store)

        assert catalog.references() == ["core/base", "core/tool"]
        assert catalog.problems == []

    @pytest.mark.asyncio
    async def test_empty_cache(self, store):
        catalog = await load_catalog(store)
        assert len(catalog) == 0
        assert catalog.references() == []

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_skipped(self, store, core_list):
        await PackageListCache(store).save(core_list)
        await store.write(f"{PACKAGE_LIST_CACHE_DIR}/broken.json", "{not json")

        catalog = await load_catalog(store)

        assert resolve_reference("core/base", catalog) is not None
        assert len(catalog.problems) == 1
        assert catalog.problems[0].kind == "malformed_record"
        assert catalog.problems[0].subject.endswith("broken.json")

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_skipped(self, store, core_list):
        await PackageListCache(store).save(core_list)
        bad = store.root_dir / PACKAGE_LIST_CACHE_DIR.lstrip("/") / "bad.json"
        bad.write_bytes(b"\xff\xfe\x00garbage")

        catalog = await load_catalog(store)

        assert catalog.references() == ["core/base", "core/tool"]
        assert [(p.kind, p.subject) for p in catalog.problems] == [
            ("malformed_record", f"{PACKAGE_LIST_CACHE_DIR}/bad.json")
        ]

    @pytest.mark.asyncio
    async def test_invalid_date_entry_is_skipped(self, store, core_list):
        await PackageListCache(store).save(core_list)
        await store.write(f"{PACKAGE_LIST_CACHE_DIR}/dated.json", "2020-13-45")

        catalog = await load_catalog(store)

        assert catalog.references() == ["core/base", "core/tool"]
        assert len(catalog.problems) == 1
