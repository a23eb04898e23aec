"""Paginated listing with optional type and name filters.

Without filters the store's own pagination is used as is. With filters the
full registry is snapshotted, filtered in memory and sliced here, which means
the requested page has to be checked against the filtered result rather than
against the whole registry.
"""

from __future__ import annotations

from typing import Optional, Protocol

from appregistry.registry.models import AppRegistration, ApplicationType, Page, PageRequest


class PageableRegistry(Protocol):
    def find_all(self) -> list[AppRegistration]:
        ...

    def find_page(self, request: PageRequest) -> Page:
        ...


def filter_page(
    registry: PageableRegistry,
    request: PageRequest,
    type: Optional[ApplicationType] = None,
    search: Optional[str] = None,
) -> Page:
    """Return one page of registrations matching ``type`` and ``search``.

    ``search`` matches as a case-sensitive substring of the name. The
    reported total is the number of matching registrations.
    """
    if type is None and search is None:
        return registry.find_page(request)

    matches = [
        r
        for r in registry.find_all()
        if (type is None or r.type == type) and (not search or search in r.name)
    ]
    return slice_page(matches, request)


def slice_page(registrations: list[AppRegistration], request: PageRequest) -> Page:
    """Cut ``request`` out of ``registrations``.

    A request that starts past the end of the list (someone was on a deep
    page and then narrowed the filter) is served as the first page instead of
    an empty one.
    """
    count = len(registrations)
    to = min(count, request.offset + request.size)

    if request.offset <= to:
        served = request
    else:
        served = PageRequest(page=0, size=request.size)
        to = min(count, request.size)

    return Page(
        content=registrations[served.offset : to],
        request=served,
        total_elements=count,
    )
