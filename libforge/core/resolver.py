"""Reference Resolver — classifies a reference and picks its fetch strategy.

Parsing is total (``parse_reference`` either yields one variant or raises
``UnresolvedReferenceError``), and dispatch is a lookup keyed by the
variant's ``kind``, so an unmatched reference can never fall through.
``uuid`` references are followed through the registry until a concrete
variant is reached, bounded by ``max_depth``.
"""

from __future__ import annotations

import logging

from libforge.core.errors import UnresolvedReferenceError
from libforge.core.fetchers import SourceFetcher, UuidLookup
from libforge.models.references import PackageReference, UuidRef, parse_reference

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Maps a reference to exactly one ``SourceFetcher``.

    Parameters
    ----------
    fetchers:
        Strategy per concrete variant kind: ``"github"``, ``"file"``, ``"url"``.
    uuid_lookup:
        Registry client used to follow ``uuid:`` references.
    max_depth:
        Maximum number of uuid indirections before giving up.
    """

    def __init__(
        self,
        fetchers: dict[str, SourceFetcher],
        uuid_lookup: UuidLookup,
        *,
        max_depth: int = 8,
    ) -> None:
        self._fetchers = dict(fetchers)
        self._uuid_lookup = uuid_lookup
        self._max_depth = max_depth

    def classify(self, ref: str) -> PackageReference:
        """Parse *ref* into its typed variant."""
        return parse_reference(ref)

    def resolve(
        self, ref: str | PackageReference, _depth: int = 0
    ) -> tuple[PackageReference, SourceFetcher]:
        """Return the concrete reference and the fetcher that handles it.

        Raises
        ------
        UnresolvedReferenceError
            If *ref* is unrecognized, names an unknown uuid, or the uuid
            chain is deeper than ``max_depth``.
        FetchError
            If the registry cannot be reached.
        """
        reference = self.classify(ref) if isinstance(ref, str) else ref

        if isinstance(reference, UuidRef):
            if _depth >= self._max_depth:
                raise UnresolvedReferenceError(
                    f"uuid '{reference.uuid}' exceeds {self._max_depth} levels of indirection"
                )
            return self.resolve(self._uuid_lookup.lookup(reference), _depth + 1)

        fetcher = self._fetchers.get(reference.kind)
        if fetcher is None:
            raise UnresolvedReferenceError(
                f"No fetch strategy registered for '{reference.kind}' references"
            )
        logger.debug("Resolved %s via %s", reference, type(fetcher).__name__)
        return reference, fetcher
