"""Build-state models for buildport.

This module defines the validated shape of the framework's store state
as consumed after a build:
- Page: one rendered route, discriminated by PageMode
- Redirect: a declared URL redirect
- ApiFunction: one API endpoint declaration
- SiteConfig: site-wide path prefix and trailing-slash policy
- BuildState: the complete payload (pages as ordered (path, page) pairs)

The framework's internal state is not a stable contract, so unknown keys
are tolerated everywhere and only the fields the compiler reads are
checked. Input keys are camelCase (as the framework writes them); Python
attributes are snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
    model_validator,
)


class PageMode(str, Enum):
    """Rendering mode of a page.

    Values are the framework's own short codes. Input may use either the
    value ("SSR") or the member name ("SERVER_SIDE_RENDERED").
    """

    STATIC = "SSG"
    SERVER_SIDE_RENDERED = "SSR"
    DEFERRED_STATIC_GENERATION = "DSG"


class TrailingSlash(str, Enum):
    """Site-wide trailing slash policy.

    Only ``always`` and ``never`` force a value on the platform; ``ignore``
    and ``legacy`` leave the decision to the platform default.
    """

    always = "always"
    never = "never"
    ignore = "ignore"
    legacy = "legacy"


class Page(BaseModel):
    """A single rendered page.

    Mode-specific rendering metadata (component path, context, slices)
    is kept as extra fields and never interpreted here.

    Attributes:
        path: Canonical URL path of the page.
        mode: Rendering mode. SSR and DSG pages need a function bundle.

    Example:
        >>> page = Page(path="/dash", mode="SSR")
        >>> page.requires_function
        True
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    path: StrictStr = Field(
        ...,
        min_length=1,
        description="Canonical URL path of the page",
    )
    mode: PageMode = Field(
        ...,
        description="Rendering mode (SSG, SSR or DSG)",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def accept_mode_names(cls, value: Any) -> Any:
        """Map member names (e.g. SERVER_SIDE_RENDERED) onto mode values."""
        if isinstance(value, str) and value in PageMode.__members__:
            return PageMode[value]
        return value

    @field_validator("path")
    @classmethod
    def require_absolute_path(cls, value: str) -> str:
        """Page paths are site-absolute."""
        if not value.startswith("/"):
            raise ValueError(f"page path must start with '/': {value!r}")
        return value

    @property
    def requires_function(self) -> bool:
        """Whether this page is served by a serverless function."""
        return self.mode in (
            PageMode.SERVER_SIDE_RENDERED,
            PageMode.DEFERRED_STATIC_GENERATION,
        )


class Redirect(BaseModel):
    """A redirect declared by the site.

    Attributes:
        from_path: Source path pattern (may contain parameters).
        to_path: Destination path or URL (may reference parameters).
        is_permanent: Permanent (308) vs temporary (307) redirect.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    from_path: StrictStr = Field(..., alias="fromPath")
    to_path: StrictStr = Field(..., alias="toPath")
    is_permanent: StrictBool = Field(default=False, alias="isPermanent")


class ApiFunction(BaseModel):
    """An API endpoint declared by the site.

    Attributes:
        function_route: Route of the function below ``/api`` (e.g. "users/[id]").
        match_path: Parameterised public path, when the framework computed one.
        original_absolute_file_path: Source file of the function.
        relative_compiled_file_path: Compiled file, relative to the functions cache.
        absolute_compiled_file_path: Compiled file, absolute.
        plugin_name: Plugin that declared the function.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    function_route: StrictStr = Field(..., min_length=1, alias="functionRoute")
    match_path: StrictStr | None = Field(default=None, alias="matchPath")
    original_absolute_file_path: StrictStr | None = Field(
        default=None, alias="originalAbsoluteFilePath"
    )
    relative_compiled_file_path: StrictStr | None = Field(
        default=None, alias="relativeCompiledFilePath"
    )
    absolute_compiled_file_path: StrictStr | None = Field(
        default=None, alias="absoluteCompiledFilePath"
    )
    plugin_name: StrictStr | None = Field(default=None, alias="pluginName")


class SiteConfig(BaseModel):
    """Site-wide settings relevant to output generation.

    Attributes:
        path_prefix: Prefix prepended to every site and function path.
        trailing_slash: Trailing slash policy, or None when unset.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    path_prefix: StrictStr = Field(default="", alias="pathPrefix")
    trailing_slash: TrailingSlash | None = Field(default=None, alias="trailingSlash")

    @field_validator("path_prefix", mode="before")
    @classmethod
    def default_empty_prefix(cls, value: Any) -> Any:
        """The framework stores an unset prefix as null."""
        return "" if value is None else value

    @field_validator("trailing_slash", mode="before")
    @classmethod
    def lowercase_trailing_slash(cls, value: Any) -> Any:
        """Accept ALWAYS/NEVER spellings."""
        if isinstance(value, str):
            return value.lower()
        return value

    @property
    def prefix(self) -> str:
        """Path prefix without surrounding slashes ("" when unset)."""
        return self.path_prefix.strip("/")


class BuildState(BaseModel):
    """Validated build-state payload.

    Pages arrive as an ordered list of ``(path, page)`` pairs; see
    :func:`buildport_core.compiler.state_adapter.project_pages`.

    Attributes:
        pages: Ordered page table.
        redirects: Redirects in declaration order.
        functions: API function declarations.
        config: Site configuration.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    pages: list[tuple[StrictStr, Page]] = Field(
        ...,
        description="Ordered (path, page) pairs",
    )
    redirects: list[Redirect] = Field(
        default_factory=list,
        description="Redirects in declaration order",
    )
    functions: list[ApiFunction] = Field(
        default_factory=list,
        description="API function declarations",
    )
    config: SiteConfig = Field(
        default_factory=SiteConfig,
        description="Site configuration",
    )

    @field_validator("config", mode="before")
    @classmethod
    def default_missing_config(cls, value: Any) -> Any:
        return {} if value is None else value

    @model_validator(mode="after")
    def check_unique_page_paths(self) -> BuildState:
        """Reject repeated keys and function pages sharing a bundle.

        ``/a`` and ``/a/`` are distinct keys but would be served by the
        same ``a/index.html`` function.
        """
        seen: set[str] = set()
        bundles: dict[str, str] = {}
        for key, page in self.pages:
            if key in seen:
                raise ValueError(f"duplicate page path: {key}")
            seen.add(key)
            if not page.requires_function:
                continue
            bundle = page.path.strip("/")
            if bundle in bundles:
                raise ValueError(
                    f"pages {bundles[bundle]!r} and {page.path!r} map to the same function"
                )
            bundles[bundle] = page.path
        return self

    def dynamic_pages(self) -> list[Page]:
        """Return SSR and DSG pages in page-table order."""
        return [page for _key, page in self.pages if page.requires_function]
