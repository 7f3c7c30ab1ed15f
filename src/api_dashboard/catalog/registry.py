"""Read-only registry of endpoint descriptors."""

from collections.abc import Iterable, Iterator

from api_dashboard.catalog.base import EndpointDescriptor
from api_dashboard.errors import CatalogError


class EndpointCatalog:
    """Ordered, immutable collection of endpoints.

    Lookups always compare method and path together: the same path can be
    served by several methods (``/api/api-keys`` is both listed and created).
    """

    def __init__(self, endpoints: Iterable[EndpointDescriptor]):
        self._endpoints = tuple(endpoints)
        self._by_key: dict[tuple[str, str], EndpointDescriptor] = {}
        for ep in self._endpoints:
            if ep.key in self._by_key:
                raise CatalogError(f"Duplicate endpoint: {ep.label}")
            self._by_key[ep.key] = ep

        groups: dict[str, list[EndpointDescriptor]] = {}
        for ep in self._endpoints:
            groups.setdefault(ep.category, []).append(ep)
        self._by_category = {name: tuple(eps) for name, eps in groups.items()}

    def __len__(self) -> int:
        return len(self._endpoints)

    def __iter__(self) -> Iterator[EndpointDescriptor]:
        return iter(self._endpoints)

    def all(self) -> tuple[EndpointDescriptor, ...]:
        return self._endpoints

    def by_category(self) -> dict[str, tuple[EndpointDescriptor, ...]]:
        """Map category name to its endpoints, categories in order of first appearance."""
        return dict(self._by_category)

    def categories(self) -> list[str]:
        return list(self._by_category)

    def find(self, path: str, method: str) -> EndpointDescriptor | None:
        return self._by_key.get((method.upper(), path))

    def default(self) -> EndpointDescriptor:
        """First endpoint of the first category."""
        if not self._endpoints:
            raise CatalogError("Catalog is empty")
        first_category = next(iter(self._by_category))
        return self._by_category[first_category][0]
