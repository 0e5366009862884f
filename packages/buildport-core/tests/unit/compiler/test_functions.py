"""Unit tests for function bundle materialization."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from buildport_core.compiler.functions import (
    FUNCTION_CONFIG_FILE,
    ROUTE_METADATA_FILE,
    FunctionMaterializer,
    build_api_descriptors,
    build_page_descriptors,
)
from buildport_core.errors import MaterializationError
from buildport_core.schemas import (
    API_METHODS,
    PAGE_METHODS,
    ApiFunction,
    FunctionDescriptor,
    FunctionKind,
    OutputConfig,
    Page,
)

HANDLER = "@vercel/gatsby-plugin-vercel-builder/handlers/ssr-handler.js"


class TestBuildPageDescriptors:
    """Tests for build_page_descriptors."""

    def test_static_pages_skipped(self) -> None:
        """Only SSR and DSG pages get a descriptor."""
        pages = [
            Page(path="/", mode="SSG"),
            Page(path="/dash", mode="SSR"),
            Page(path="/later", mode="DSG"),
        ]
        descriptors = build_page_descriptors(pages, "", HANDLER)
        assert [d.route for d in descriptors] == ["/dash", "/later"]
        assert [d.deferred for d in descriptors] == [False, True]
        assert all(d.kind is FunctionKind.PAGE_FUNCTION for d in descriptors)
        assert all(d.methods == PAGE_METHODS for d in descriptors)

    def test_bundle_name(self) -> None:
        """Bundles are named after the page path's index.html."""
        (descriptor,) = build_page_descriptors([Page(path="/dash/", mode="SSR")], "", HANDLER)
        assert descriptor.bundle_name == "dash/index.html"

    def test_root_page_bundle_name(self) -> None:
        """The root page bundle sits directly in the functions dir."""
        (descriptor,) = build_page_descriptors([Page(path="/", mode="SSR")], "", HANDLER)
        assert descriptor.bundle_name == "index.html"

    def test_prefix_applied(self) -> None:
        """The path prefix is prepended to route and bundle."""
        (descriptor,) = build_page_descriptors([Page(path="/dash", mode="SSR")], "docs", HANDLER)
        assert descriptor.route == "/docs/dash"
        assert descriptor.bundle_name == "docs/dash/index.html"

    def test_no_dynamic_pages(self) -> None:
        """Static-only sites produce no descriptors."""
        assert build_page_descriptors([Page(path="/", mode="SSG")], "", HANDLER) == []


class TestBuildApiDescriptors:
    """Tests for build_api_descriptors."""

    def test_match_path_used_as_route(self, tmp_path: Path) -> None:
        """The framework's matchPath becomes the public route."""
        fn = ApiFunction(function_route="users/[id]", match_path="/api/users/:id")
        (descriptor,) = build_api_descriptors([fn], "", tmp_path)
        assert descriptor.route == "/api/users/:id"
        assert descriptor.bundle_name == "api/users/[id]"
        assert descriptor.methods == API_METHODS
        assert descriptor.source_file == tmp_path / "users/[id].js"
        assert descriptor.entry_module == "./handler.js"

    def test_route_defaults_below_api(self, tmp_path: Path) -> None:
        """Without matchPath the route is /api/<function route>."""
        (descriptor,) = build_api_descriptors([ApiFunction(function_route="hello")], "", tmp_path)
        assert descriptor.route == "/api/hello"

    def test_compiled_file_paths(self, tmp_path: Path) -> None:
        """Absolute compiled paths win over relative ones."""
        fn = ApiFunction(
            function_route="hello",
            relative_compiled_file_path="hello.js",
            absolute_compiled_file_path="/abs/hello.js",
        )
        (descriptor,) = build_api_descriptors([fn], "", tmp_path)
        assert descriptor.source_file == Path("/abs/hello.js")

    def test_prefix_applied(self, tmp_path: Path) -> None:
        """The path prefix applies to API routes too."""
        (descriptor,) = build_api_descriptors(
            [ApiFunction(function_route="hello")], "docs", tmp_path
        )
        assert descriptor.route == "/docs/api/hello"
        assert descriptor.bundle_name == "docs/api/hello"


class TestFunctionMaterializer:
    """Tests for FunctionMaterializer."""

    @pytest.mark.asyncio
    async def test_materialize_pages_writes_bundle(self, output_config: OutputConfig) -> None:
        """An SSR page yields a bundle with config, route metadata and entry."""
        materializer = FunctionMaterializer(output_config)
        (bundle,) = await materializer.materialize_pages([Page(path="/dash", mode="SSR")], "")

        assert bundle.bundle_dir == output_config.functions_dir.resolve() / "dash/index.html.func"
        vc_config = json.loads((bundle.bundle_dir / FUNCTION_CONFIG_FILE).read_text())
        assert vc_config == {
            "runtime": "nodejs18.x",
            "handler": "index.js",
            "launcherType": "Nodejs",
            "shouldAddHelpers": True,
        }
        route = json.loads((bundle.bundle_dir / ROUTE_METADATA_FILE).read_text())
        assert route["path"] == "/dash"
        assert route["methods"] == ["GET", "HEAD"]
        entry = (bundle.bundle_dir / "index.js").read_text()
        assert 'require("@vercel/gatsby-plugin-vercel-builder/handlers/ssr-handler.js")' in entry
        assert 'createHandler("/dash"' in entry

    @pytest.mark.asyncio
    async def test_deferred_page_gets_prerender_config(self, output_config: OutputConfig) -> None:
        """DSG bundles get a sibling prerender config."""
        materializer = FunctionMaterializer(output_config)
        (bundle,) = await materializer.materialize_pages([Page(path="/later", mode="DSG")], "")
        prerender = bundle.bundle_dir.parent / "index.html.prerender-config.json"
        assert json.loads(prerender.read_text()) == {"expiration": False}

    @pytest.mark.asyncio
    async def test_ssr_page_has_no_prerender_config(self, output_config: OutputConfig) -> None:
        """SSR bundles are never cached."""
        materializer = FunctionMaterializer(output_config)
        (bundle,) = await materializer.materialize_pages([Page(path="/dash", mode="SSR")], "")
        assert not (bundle.bundle_dir.parent / "index.html.prerender-config.json").exists()

    @pytest.mark.asyncio
    async def test_empty_inputs_create_nothing(self, output_config: OutputConfig) -> None:
        """No pages and no functions means no functions directory."""
        materializer = FunctionMaterializer(output_config)
        assert await materializer.materialize_pages([Page(path="/", mode="SSG")], "") == []
        assert await materializer.materialize_api([], "") == []
        assert not output_config.functions_dir.exists()

    @pytest.mark.asyncio
    async def test_materialize_api_writes_bundle(
        self, output_config: OutputConfig, tmp_path: Path
    ) -> None:
        """An API function yields a self-contained bundle."""
        compiled = tmp_path / "hello.js"
        compiled.write_text("module.exports = (req, res) => res.send('hi');")
        materializer = FunctionMaterializer(output_config)
        (bundle,) = await materializer.materialize_api(
            [ApiFunction(function_route="hello", absolute_compiled_file_path=str(compiled))],
            "",
        )
        assert bundle.kind is FunctionKind.API_FUNCTION
        assert bundle.bundle_dir.name == "hello.func"
        assert bundle.bundle_dir.parent.name == "api"
        assert (bundle.bundle_dir / "handler.js").read_text() == compiled.read_text()
        entry = (bundle.bundle_dir / "index.js").read_text()
        assert 'require("./handler.js")' in entry
        assert str(tmp_path) not in entry
        route = json.loads((bundle.bundle_dir / ROUTE_METADATA_FILE).read_text())
        assert route["methods"] == list(API_METHODS)

    @pytest.mark.asyncio
    async def test_missing_compiled_api_file(self, output_config: OutputConfig) -> None:
        """An API function without its compiled file fails and writes no bundle."""
        materializer = FunctionMaterializer(output_config)
        with pytest.raises(MaterializationError, match="not found") as exc_info:
            await materializer.materialize_api(
                [ApiFunction(function_route="hello", relative_compiled_file_path="hello.js")],
                "",
            )
        assert exc_info.value.target == "/api/hello"
        assert not (output_config.functions_dir / "api" / "hello.func").exists()

    @pytest.mark.asyncio
    async def test_bundles_returned_in_order(self, output_config: OutputConfig) -> None:
        """Bundles come back in page order regardless of write timing."""
        pages = [Page(path=f"/p{i}", mode="SSR") for i in range(10)]
        bundles = await FunctionMaterializer(output_config).materialize_pages(pages, "")
        assert [b.route for b in bundles] == [f"/p{i}" for i in range(10)]

    @pytest.mark.asyncio
    async def test_rewrite_is_idempotent(self, output_config: OutputConfig) -> None:
        """Writing the same bundle twice yields identical files."""
        materializer = FunctionMaterializer(output_config)
        pages = [Page(path="/dash", mode="SSR")]
        (first,) = await materializer.materialize_pages(pages, "")
        before = (first.bundle_dir / "index.js").read_bytes()
        (second,) = await materializer.materialize_pages(pages, "")
        assert (second.bundle_dir / "index.js").read_bytes() == before

    def test_bundle_dir_rejects_escaping_paths(self, output_config: OutputConfig) -> None:
        """A page path cannot write outside the functions directory."""
        descriptor = FunctionDescriptor(
            kind=FunctionKind.PAGE_FUNCTION,
            source_path="/../../etc",
            path_prefix="",
            route="/../../etc",
            bundle_name="../../etc/index.html",
            methods=PAGE_METHODS,
            entry_module=HANDLER,
        )
        with pytest.raises(MaterializationError, match="escapes"):
            FunctionMaterializer(output_config).bundle_dir(descriptor)

    @pytest.mark.asyncio
    async def test_write_failure_raises_materialization_error(
        self, output_config: OutputConfig
    ) -> None:
        """An unwritable functions directory surfaces as MaterializationError."""
        output_config.output_dir.mkdir(parents=True)
        output_config.functions_dir.write_text("not a directory")
        with pytest.raises(MaterializationError) as exc_info:
            await FunctionMaterializer(output_config).materialize_pages(
                [Page(path="/dash", mode="SSR")], ""
            )
        assert exc_info.value.target == "/dash"
