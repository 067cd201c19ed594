"""Pydantic models for the cargo configuration document.

The model covers the sections quickchange edits. Cargo grows new keys
with every release, so every section accepts unknown keys
(``extra="allow"``) and hands them back on serialization after the known
fields. Field aliases carry the hyphenated TOML key names. Parsed
documents are validated by alias only, so an underscore spelling found in
a file stays an unknown key instead of being renamed on save; keyword
construction in code also accepts the Python field name.

Flexible cargo values (``opt-level = 3`` vs ``opt-level = "s"``,
``debug = true`` vs ``debug = 2``) are modelled as unions; pydantic keeps
the type found in the file.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _clean(value: Any) -> Any:
    """Drop unset and empty values from a known field's value.

    ``None`` and ``""`` disappear, lists lose their ``None``/``""`` items,
    and lists or tables left empty disappear too. Returns ``None`` when
    nothing remains.
    """
    if isinstance(value, _Section):
        value = value.toml_items()
        return value or None
    if isinstance(value, dict):
        cleaned = {k: v for k, v in ((k, _clean(v)) for k, v in value.items()) if v is not None}
        return cleaned or None
    if isinstance(value, list):
        cleaned = [v for v in (_clean(item) for item in value) if v is not None]
        return cleaned or None
    if value == "":
        return None
    return value


class _Section(BaseModel):
    """Base for every document section.

    Unknown keys are kept. Keyword construction accepts either the Python
    field name or the TOML key (``SourceEntry(replace_with="x")``);
    validation of parsed TOML goes through ``model_validate`` and only
    recognises the TOML key.
    """

    model_config = ConfigDict(extra="allow")

    def __init__(self, /, **data: Any) -> None:
        for name, field in type(self).model_fields.items():
            if field.alias and field.alias != name and name in data:
                value = data.pop(name)
                data.setdefault(field.alias, value)
        super().__init__(**data)

    def toml_items(self) -> dict[str, Any]:
        """Known fields by TOML key with empty values dropped, then extras as-is."""
        items: dict[str, Any] = {}
        for name, field in type(self).model_fields.items():
            value = _clean(getattr(self, name))
            if value is not None:
                items[field.alias or name] = value
        items.update(self.model_extra or {})
        return items


class SourceEntry(_Section):
    """One ``[source.<name>]`` replacement rule."""

    registry: str | None = None
    replace_with: str | None = Field(default=None, alias="replace-with")
    local_registry: str | None = Field(default=None, alias="local-registry")
    directory: str | None = None
    git: str | None = None
    branch: str | None = None
    tag: str | None = None
    rev: str | None = None


class RegistryConfig(_Section):
    """``[registry]`` defaults."""

    default: str | None = None
    token: str | None = None
    global_credential_providers: list[str] | None = Field(
        default=None, alias="global-credential-providers"
    )


class NetConfig(_Section):
    """``[net]`` network settings."""

    offline: bool | None = None
    git_fetch_with_cli: bool | None = Field(default=None, alias="git-fetch-with-cli")
    retry: int | None = None


class HttpConfig(_Section):
    """``[http]`` transport settings."""

    proxy: str | None = None
    check_revoke: bool | None = Field(default=None, alias="check-revoke")
    multiplexing: bool | None = None
    timeout: int | None = None
    cainfo: str | None = None
    low_speed_limit: int | None = Field(default=None, alias="low-speed-limit")


class HttpsConfig(_Section):
    """``[https]`` proxy override."""

    proxy: str | None = None


class BuildConfig(_Section):
    """``[build]`` settings.

    Attributes:
        jobs: Parallel job count, or a string such as ``"default"``.
        rustflags: Either a list of flags or a single space-separated string.

    """

    jobs: int | str | None = None
    target: str | list[str] | None = None
    target_dir: str | None = Field(default=None, alias="target-dir")
    rustc_wrapper: str | None = Field(default=None, alias="rustc-wrapper")
    rustflags: list[str] | str | None = None
    rustdocflags: list[str] | str | None = None
    incremental: bool | None = None


class TargetConfig(_Section):
    """One ``[target.<triple>]`` entry."""

    linker: str | None = None
    ar: str | None = None
    rustflags: list[str] | str | None = None
    runner: str | list[str] | None = None


class EnvObject(_Section):
    """Table form of an ``[env]`` entry."""

    value: str
    force: bool | None = None
    relative: bool | None = None


class ProfileConfig(_Section):
    """One ``[profile.<name>]`` build profile."""

    opt_level: int | str | None = Field(default=None, alias="opt-level")
    lto: bool | str | None = None
    codegen_units: int | None = Field(default=None, alias="codegen-units")
    debug: bool | int | str | None = None
    strip: bool | str | None = None
    panic: str | None = None
    incremental: bool | None = None
    trim_paths: bool | str | list[str] | None = Field(default=None, alias="trim-paths")


class DocConfig(_Section):
    """``[doc]`` documentation settings."""

    browser: str | list[str] | None = None


class RegistryEntry(_Section):
    """One ``[registries.<name>]`` alternate registry."""

    index: str | None = None
    token: str | None = None
    credential_provider: str | list[str] | None = Field(
        default=None, alias="credential-provider"
    )


class CargoConfig(_Section):
    """Root cargo ``config.toml`` document.

    Attributes:
        source: Source replacement rules keyed by source name.
        registry: Registry defaults.
        net: Network settings.
        http: HTTP transport settings.
        https: HTTPS proxy settings.
        build: Build settings.
        target: Per-target settings keyed by target triple or cfg expression.
        env: Environment variables injected into build scripts and rustc.
        profile: Build profiles keyed by profile name.
        alias: Command aliases.
        doc: Documentation settings.
        registries: Alternate registries keyed by name.

    Unknown top-level keys are kept in ``model_extra``.

    """

    source: dict[str, SourceEntry] | None = None
    registry: RegistryConfig | None = None
    net: NetConfig | None = None
    http: HttpConfig | None = None
    https: HttpsConfig | None = None
    build: BuildConfig | None = None
    target: dict[str, TargetConfig] | None = None
    env: dict[str, str | EnvObject] | None = None
    profile: dict[str, ProfileConfig] | None = None
    alias: dict[str, str | list[str]] | None = None
    doc: DocConfig | None = None
    registries: dict[str, RegistryEntry] | None = None

    def to_toml_dict(self) -> dict[str, Any]:
        """Dump to a plain dict keyed by TOML names.

        Unset fields, empty strings, empty arrays and tables left empty are
        omitted from known fields. Unknown keys are returned unchanged.
        """
        return self.toml_items()
