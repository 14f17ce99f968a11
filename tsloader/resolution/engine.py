"""Specifier resolution engine.

Resolution order (first match wins):
1. Specifiers reaching into node_modules, and URL specifiers - host default, wholesale
2. Tilde alias - expand against the repository root, then resolve again
3. Glob - virtual aggregate module (no filesystem access)
4. Workspace alias - package export map, final
5. Trailing slash - directory fallback
6. Paths mapping (bare specifiers, importer outside node_modules)
7. Typed-source counterpart (typed importers only)
8. Host default, with extension/directory fallback

Every step is expressed against the step protocol in ``steps.py``; host
outcomes come back as ``Found``/``Missing`` so each fallback decision is an
explicit match.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace

from ..config.settings import LoaderSettings
from ..config.tsconfig import PathsMappingIndex
from ..config.tsconfig import TsconfigFile
from ..config.tsconfig import load_tsconfig
from ..errors import AliasResolutionError
from ..errors import LoaderError
from ..errors import ModuleNotFoundError
from ..errors import UnsupportedDirectoryImportError
from ..manifests import ManifestCache
from ..manifests import ModuleTypeCache
from ..models import DEPENDENCY_SEGMENT
from ..models import ResolutionContext
from ..models import ResolvedModule
from ..models import Specifier
from ..models import SpecifierKind
from ..workspace import WorkspaceAliasTable
from .aliases import TildeAliasResolver
from .aliases import WorkspaceAliasResolver
from .classifier import classify
from .classifier import file_url_to_path
from .formats import detect_format
from .globs import VirtualGlobModule
from .steps import AsyncDefaultResolve
from .steps import DefaultResolve
from .steps import Found
from .steps import HostResolve
from .steps import Missing
from .steps import Outcome
from .steps import Steps
from .steps import run_async
from .steps import run_sync
from .type_priority import typed_counterparts

logger = logging.getLogger(__name__)

FALLBACK_EXTENSIONS = (".js", ".json", ".ts", ".tsx", ".jsx")


def _strip_appended(error: LoaderError, appended: str) -> LoaderError:
    """Drop text a fallback appended so the error names what the caller wrote."""
    stripped = error.with_message(error.message.replace(f"{appended}'", "'"))
    specifier = stripped.details.get("specifier")
    if isinstance(specifier, str) and specifier.endswith(appended):
        stripped.details["specifier"] = specifier[: -len(appended)]
    return stripped


class ResolutionEngine:
    """Resolves specifiers on behalf of a host loader.

    The engine owns its caches; two engines never share state.

    Attributes:
        settings: Static loader configuration
        paths_index: Paths mapping from the tsconfig, if any
        workspace: Workspace package table, if a descriptor exists
        manifests: Memoised package.json reads
        module_types: Memoised per-directory module types
    """

    def __init__(
        self,
        settings: LoaderSettings,
        *,
        tsconfig: TsconfigFile | None = None,
        workspace: WorkspaceAliasTable | None = None,
        manifests: ManifestCache | None = None,
        module_types: ModuleTypeCache | None = None,
    ):
        self.settings = settings
        self.tsconfig = tsconfig
        self.paths_index = PathsMappingIndex.from_tsconfig(tsconfig) if tsconfig else None
        self.workspace = workspace
        self.manifests = manifests if manifests is not None else ManifestCache()
        self.module_types = module_types if module_types is not None else ModuleTypeCache()
        self.tilde = TildeAliasResolver(settings.repository_root)
        self.workspace_aliases = (
            WorkspaceAliasResolver(workspace, settings.workspace_namespace) if workspace is not None else None
        )

    @classmethod
    def from_settings(cls, settings: LoaderSettings, manifests: ManifestCache | None = None) -> ResolutionEngine:
        """Build an engine, loading the tsconfig and workspace table once."""
        tsconfig = load_tsconfig(settings.tsconfig_path) if settings.tsconfig_path else None
        workspace = WorkspaceAliasTable.discover(settings.repository_root, settings.workspace_descriptor)
        return cls(settings, tsconfig=tsconfig, workspace=workspace, manifests=manifests)

    def resolve_sync(self, specifier: str, context: ResolutionContext, default_resolve: DefaultResolve) -> ResolvedModule:
        """Resolve without suspending (script-style loaders)."""
        steps = self.resolve_steps(specifier, self._with_conditions(context), detect=False)
        return run_sync(steps, default_resolve, self.manifests)

    async def resolve_async(
        self, specifier: str, context: ResolutionContext, default_resolve: AsyncDefaultResolve
    ) -> ResolvedModule:
        """Resolve cooperatively (module loaders); also detects the module format."""
        steps = self.resolve_steps(specifier, self._with_conditions(context), detect=True)
        return await run_async(steps, default_resolve, self.manifests)

    def _with_conditions(self, context: ResolutionContext) -> ResolutionContext:
        if not self.settings.conditions:
            return context
        extra = tuple(c for c in self.settings.conditions if c not in context.conditions)
        return replace(context, conditions=context.conditions + extra)

    def resolve_steps(self, specifier: str, context: ResolutionContext, detect: bool) -> Steps[ResolvedModule]:
        """Full resolution as a step generator.

        Args:
            specifier: Specifier as written by the importer
            context: Resolution context
            detect: Fill in a missing format with the format detector

        Raises:
            NotFoundError: Every strategy failed (first error, cleaned up)
            AliasResolutionError: Malformed or unknown alias
            ManifestParseError: Malformed manifest on the resolution path
        """
        outcome = yield from self._resolve(specifier, context)
        if isinstance(outcome, Missing):
            raise outcome.error

        resolved = outcome.module
        if detect and resolved.format is None and not resolved.virtual and os.path.isabs(resolved.path):
            fmt = yield from detect_format(resolved.path, self.module_types)
            resolved = resolved.model_copy(update={"format": fmt})

        logger.debug(f"[resolve] {specifier} -> {resolved.path} ({resolved.format})")
        return resolved

    def _resolve(self, raw: str, context: ResolutionContext) -> Steps[Outcome]:
        if DEPENDENCY_SEGMENT in raw.replace(os.sep, "/"):
            return (yield HostResolve(raw, context))

        specifier = classify(raw, self.settings.workspace_namespace)

        if specifier.kind == SpecifierKind.URL:
            return (yield HostResolve(raw, context))

        if raw.startswith("file:"):
            raw = file_url_to_path(raw)
            specifier = Specifier(raw, SpecifierKind.ABSOLUTE)

        if specifier.kind == SpecifierKind.TILDE_ALIAS:
            expanded = self.tilde.expand(raw, context)
            return (yield from self._resolve(expanded, context))

        if specifier.kind == SpecifierKind.GLOB:
            virtual = VirtualGlobModule.from_specifier(raw, context.importer)
            return Found(ResolvedModule(path=virtual.path, format="module", short_circuit=True))

        if specifier.kind == SpecifierKind.WORKSPACE_ALIAS:
            if self.workspace_aliases is None:
                raise AliasResolutionError(raw, "no workspace descriptor was found")
            return Found((yield from self.workspace_aliases.resolve(raw, context)))

        if raw.endswith("/"):
            return (yield from self._try_directory(raw, context))

        if specifier.kind == SpecifierKind.BARE and self.paths_index and not context.in_dependency_boundary:
            for candidate in self.paths_index.candidates(raw):
                found = yield from self._resolve_candidate(candidate, context)
                if found is not None:
                    logger.debug(f"[resolve] {raw} -> {candidate} (paths)")
                    return found

        found = yield from self._type_priority(specifier, context)
        if found is not None:
            return found

        return (yield from self._base(raw, context))

    def _resolve_candidate(self, candidate: str, context: ResolutionContext) -> Steps[Found | None]:
        """Try one paths-mapping substitution: typed counterpart, then base resolution."""
        found = yield from self._type_priority(Specifier(candidate, SpecifierKind.ABSOLUTE), context)
        if found is not None:
            return found
        outcome = yield from self._base(candidate, context)
        return outcome if isinstance(outcome, Found) else None

    def _type_priority(self, specifier: Specifier, context: ResolutionContext) -> Steps[Found | None]:
        """Prefer ``foo.ts`` over ``foo.js`` when a typed file imports ``./foo(.js)``."""
        if not context.importer_is_typed:
            return None
        for candidate in typed_counterparts(specifier.raw, specifier.is_path):
            outcome = yield HostResolve(candidate, context)
            if isinstance(outcome, Found):
                return outcome
        return None

    def _base(self, raw: str, context: ResolutionContext) -> Steps[Outcome]:
        outcome = yield HostResolve(raw, context)
        if isinstance(outcome, Found) or context.recursive:
            return outcome

        if isinstance(outcome.error, UnsupportedDirectoryImportError):
            return (yield from self._try_directory(raw, context))

        if isinstance(outcome.error, ModuleNotFoundError):
            retry = yield from self._try_extensions(raw, context)
            if isinstance(retry, Found):
                return retry

        return outcome

    def _try_extensions(self, raw: str, context: ResolutionContext) -> Steps[Outcome]:
        nested = context.as_recursive()
        first: Missing | None = None
        for extension in FALLBACK_EXTENSIONS:
            outcome = yield from self._resolve(raw + extension, nested)
            if isinstance(outcome, Found):
                return outcome
            if first is None:
                first = Missing(_strip_appended(outcome.error, extension))
        return first

    def _try_directory(self, raw: str, context: ResolutionContext) -> Steps[Outcome]:
        explicit = raw.endswith("/")
        append_index = "index" if explicit else "/index"

        outcome = yield from self._try_extensions(raw + append_index, context)
        if isinstance(outcome, Found):
            return outcome

        if not explicit:
            retry = yield from self._try_extensions(raw, context)
            if isinstance(retry, Found):
                return retry

        return Missing(_strip_appended(outcome.error, append_index))
