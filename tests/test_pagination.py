"""Tests for filtered pagination."""

from appregistry.registry.models import AppRegistration, ApplicationType, Page, PageRequest
from appregistry.registry.pagination import filter_page, slice_page


class FakeRegistry:
    def __init__(self, registrations):
        self.registrations = sorted(registrations)
        self.find_all_calls = 0
        self.find_page_calls = 0

    def find_all(self):
        self.find_all_calls += 1
        return list(self.registrations)

    def find_page(self, request):
        self.find_page_calls += 1
        content = self.registrations[request.offset : request.offset + request.size]
        return Page(content=content, request=request, total_elements=len(self.registrations))


def _apps(type: ApplicationType, *names: str) -> list[AppRegistration]:
    return [AppRegistration(name=n, type=type, uri=f"maven://io.example:{n}:1.0") for n in names]


def _names(page: Page) -> list[str]:
    return [r.name for r in page.content]


def test_unfiltered_listing_uses_store_pagination():
    reg = FakeRegistry(_apps(ApplicationType.SOURCE, "a", "b", "c"))
    page = filter_page(reg, PageRequest(page=1, size=2))

    assert reg.find_page_calls == 1
    assert reg.find_all_calls == 0
    assert _names(page) == ["c"]
    assert page.total_elements == 3


def test_type_filter_reports_filtered_total():
    reg = FakeRegistry(
        _apps(ApplicationType.SOURCE, "http", "file", "jdbc")
        + _apps(ApplicationType.SINK, "log", "file")
    )
    page = filter_page(reg, PageRequest(page=0, size=10), type=ApplicationType.SINK)

    assert reg.find_all_calls == 1
    assert reg.find_page_calls == 0
    assert _names(page) == ["file", "log"]
    assert page.total_elements == 2
    assert all(r.type == ApplicationType.SINK for r in page.content)


def test_search_is_case_sensitive_substring():
    reg = FakeRegistry(_apps(ApplicationType.PROCESSOR, "transform", "Transformer", "filter"))
    page = filter_page(reg, PageRequest(page=0, size=10), search="trans")

    assert _names(page) == ["transform"]
    assert page.total_elements == 1


def test_type_and_search_combined():
    reg = FakeRegistry(
        _apps(ApplicationType.SOURCE, "file", "ftp") + _apps(ApplicationType.SINK, "file", "ftp")
    )
    page = filter_page(reg, PageRequest(), type=ApplicationType.SOURCE, search="fi")

    assert [(r.type, r.name) for r in page.content] == [(ApplicationType.SOURCE, "file")]


def test_empty_search_only_applies_type():
    reg = FakeRegistry(_apps(ApplicationType.TASK, "timestamp", "composed"))
    page = filter_page(reg, PageRequest(), search="")

    assert reg.find_all_calls == 1
    assert page.total_elements == 2


def test_page_never_exceeds_size():
    reg = FakeRegistry(_apps(ApplicationType.SOURCE, *[f"app{i:02d}" for i in range(23)]))
    for page_number in range(6):
        page = filter_page(reg, PageRequest(page=page_number, size=5), type=ApplicationType.SOURCE)
        assert len(page.content) <= 5
        assert page.total_elements == 23


def test_requested_page_in_range_is_served():
    registrations = _apps(ApplicationType.SOURCE, *[f"app{i}" for i in range(10)])
    page = slice_page(registrations, PageRequest(page=1, size=5))

    assert _names(page) == [f"app{i}" for i in range(5, 10)]
    assert page.number == 1


def test_partial_last_page():
    registrations = _apps(ApplicationType.SOURCE, *[f"app{i}" for i in range(7)])
    page = slice_page(registrations, PageRequest(page=1, size=5))

    assert _names(page) == ["app5", "app6"]
    assert page.number == 1
    assert page.total_pages == 2


def test_page_past_filtered_results_resets_to_first_page():
    registrations = _apps(ApplicationType.SOURCE, *[f"app{i}" for i in range(10)])
    page = slice_page(registrations, PageRequest(page=5, size=5))

    assert _names(page) == [f"app{i}" for i in range(5)]
    assert page.number == 0
    assert page.total_elements == 10


def test_narrowing_filter_on_deep_page_resets_to_first_page():
    reg = FakeRegistry(
        _apps(ApplicationType.SOURCE, *[f"s{i:02d}" for i in range(40)])
        + _apps(ApplicationType.SINK, "log", "jdbc")
    )
    page = filter_page(reg, PageRequest(page=3, size=10), type=ApplicationType.SINK)

    assert _names(page) == ["jdbc", "log"]
    assert page.number == 0
    assert page.total_elements == 2


def test_offset_equal_to_count_is_an_empty_page_not_a_reset():
    registrations = _apps(ApplicationType.SOURCE, *[f"app{i}" for i in range(10)])
    page = slice_page(registrations, PageRequest(page=2, size=5))

    assert page.content == []
    assert page.number == 2


def test_zero_size_gives_empty_page():
    registrations = _apps(ApplicationType.SOURCE, "a", "b")
    page = slice_page(registrations, PageRequest(page=0, size=0))

    assert page.content == []
    assert page.total_elements == 2


def test_no_matches_gives_empty_page_for_any_offset():
    reg = FakeRegistry(_apps(ApplicationType.SOURCE, "a", "b"))
    for page_number in (0, 4):
        page = filter_page(reg, PageRequest(page=page_number, size=5), type=ApplicationType.TASK)
        assert page.content == []
        assert page.total_elements == 0
