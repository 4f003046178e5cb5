"""Ordered registry of bundle sources."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from skill_bundles.bundles.normalizer import scan_source
from skill_bundles.errors import BundleNotFoundError, SourceUnavailableError
from skill_bundles.models import (
    BundleListing,
    NormalizationResult,
    Source,
    SourceBundle,
    SourceKind,
)
from skill_bundles.sources.materializer import GitMaterializer, IRemoteMaterializer
from skill_bundles.utils import compact_home_path, expand_user_path

logger = logging.getLogger(__name__)


class SourceRegistry:
    def __init__(
        self,
        sources: list[Source],
        materializer: Optional[IRemoteMaterializer] = None,
    ) -> None:
        self._sources = sorted(sources, key=lambda item: item.priority)
        self._materializer = materializer or GitMaterializer()

    @property
    def sources(self) -> list[Source]:
        return list(self._sources)

    def get_source(self, ident: str) -> Optional[Source]:
        for source in self._sources:
            if ident in (source.name, source.location):
                return source
        return None

    def resolve_path(self, source: Source) -> Path:
        if source.kind == SourceKind.GIT:
            return self._materializer.materialize(source.location)
        return expand_user_path(source.location)

    def scan(self, source: Source) -> NormalizationResult:
        path = self.resolve_path(source)
        if not path.exists():
            logger.debug("source path %s does not exist", path)
            return NormalizationResult()
        return scan_source(path)

    def list_bundles(self, strict: bool = True) -> BundleListing:
        """List bundles across sources in priority order.

        A bundle name already claimed by a higher-priority source is dropped
        with a warning. With ``strict`` an unavailable source aborts the
        listing; otherwise it is recorded and skipped.
        """
        listing = BundleListing()
        claimed: dict[str, Source] = {}
        for source in self._sources:
            try:
                result = self.scan(source)
            except SourceUnavailableError as exc:
                if strict:
                    raise
                listing.errors.append(exc)
                continue

            listing.errors.extend(result.problems)
            listing.skipped.extend(result.warnings)
            for bundle in result.bundles:
                owner = claimed.get(bundle.name)
                if owner is not None:
                    listing.skipped.append(
                        f"Bundle '{bundle.name}' from {source.display} shadowed by "
                        f"{owner.display}"
                    )
                    continue
                claimed[bundle.name] = source
                listing.bundles.append(SourceBundle(source=source, bundle=bundle))
        return listing

    def find_bundle(self, name: str, source_ident: Optional[str] = None) -> SourceBundle:
        candidates = self._sources
        if source_ident is not None:
            source = self.get_source(source_ident)
            candidates = [source] if source is not None else []

        searched: list[str] = []
        for source in candidates:
            searched.append(self.display_source(source))
            for bundle in self.scan(source).bundles:
                if bundle.name == name:
                    return SourceBundle(source=source, bundle=bundle)
        raise BundleNotFoundError(name, searched)

    def cached_path(self, source: Source) -> Optional[Path]:
        if source.kind == SourceKind.GIT:
            return self._materializer.cached_path(source.location)
        return expand_user_path(source.location)

    def known_bundle_names(self) -> set[str]:
        """Bundle names from sources readable without cloning anything.

        Git sources that were never materialized are skipped.
        """
        names: set[str] = set()
        for source in self._sources:
            path = self.cached_path(source)
            if path is None:
                logger.debug("%s not materialized; skipping", source.display)
                continue
            names.update(bundle.name for bundle in scan_source(path).bundles)
        return names

    @staticmethod
    def display_source(source: Source) -> str:
        if source.kind == SourceKind.LOCAL:
            return compact_home_path(expand_user_path(source.location))
        return source.location
