"""Tests for resource loading and the download cache."""

import threading

import pytest

from appregistry.resources.loader import (
    LOCK_STRIPES,
    CachingResourceLoader,
    FileResource,
    MavenCoordinates,
    ResourceError,
    ResourceLoader,
    UnsupportedResourceError,
    UrlResource,
)


def test_file_uri_and_plain_path(tmp_path):
    target = tmp_path / "apps.properties"
    target.write_text("source.a=file:///a.jar\n")
    loader = ResourceLoader()

    by_uri = loader.get_resource(target.as_uri())
    by_path = loader.get_resource(str(target))

    assert isinstance(by_uri, FileResource)
    assert by_uri.read_text() == "source.a=file:///a.jar\n"
    assert by_path.read_bytes() == by_uri.read_bytes()


def test_missing_file_raises_resource_error(tmp_path):
    resource = ResourceLoader().get_resource((tmp_path / "missing.yaml").as_uri())
    with pytest.raises(ResourceError):
        resource.read_bytes()


def test_http_uri_gives_url_resource():
    resource = ResourceLoader(timeout=3.0).get_resource("https://example.com/apps.properties")
    assert isinstance(resource, UrlResource)
    assert resource.timeout == 3.0


def test_maven_uri_resolves_against_remote_repository():
    loader = ResourceLoader(maven_remote_repository="https://repo.example.com/maven2/")
    resource = loader.get_resource("maven://org.example.apps:http-source:2.1.0")

    assert resource.url == (
        "https://repo.example.com/maven2/org/example/apps/http-source/2.1.0/http-source-2.1.0.jar"
    )


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("maven://g.h:a:1.0", MavenCoordinates("g.h", "a", "1.0")),
        ("maven://g:a:pom:1.0", MavenCoordinates("g", "a", "1.0", extension="pom")),
        (
            "maven://g:a:jar:metadata:1.0",
            MavenCoordinates("g", "a", "1.0", extension="jar", classifier="metadata"),
        ),
    ],
)
def test_maven_coordinates(uri, expected):
    assert MavenCoordinates.parse(uri) == expected


def test_maven_classifier_in_filename():
    coordinates = MavenCoordinates.parse("maven://g:a:jar:metadata:1.0")
    assert coordinates.filename == "a-1.0-metadata.jar"


def test_bad_maven_coordinates():
    with pytest.raises(UnsupportedResourceError):
        MavenCoordinates.parse("maven://only:two")


def test_unsupported_scheme():
    with pytest.raises(UnsupportedResourceError):
        ResourceLoader().get_resource("docker:springcloud/http-source:latest")


def test_caching_loader_downloads_once(tmp_path, monkeypatch):
    downloads = []

    def fake_download(self, target):
        downloads.append(self.url)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"properties: []\n")

    monkeypatch.setattr(UrlResource, "download_to", fake_download)
    loader = CachingResourceLoader(tmp_path / "cache")
    uri = "https://example.com/meta/app-metadata.yaml"

    assert not loader.is_cached(uri)
    first = loader.get_resource(uri)
    second = loader.get_resource(uri)

    assert downloads == [uri]
    assert loader.is_cached(uri)
    assert isinstance(first, FileResource)
    assert first.path == second.path
    assert first.read_bytes() == b"properties: []\n"
    assert first.description == uri


def test_caching_loader_shares_concurrent_download(tmp_path, monkeypatch):
    downloads = []
    started = threading.Event()
    release = threading.Event()

    def slow_download(self, target):
        downloads.append(self.url)
        started.set()
        release.wait(timeout=5)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"x")

    monkeypatch.setattr(UrlResource, "download_to", slow_download)
    loader = CachingResourceLoader(tmp_path / "cache")
    uri = "maven://g:a:1.0"

    threads = [threading.Thread(target=loader.get_resource, args=(uri,)) for _ in range(3)]
    for t in threads:
        t.start()
    assert started.wait(timeout=5)
    release.set()
    for t in threads:
        t.join(timeout=5)

    assert len(downloads) == 1


def test_caching_loader_passes_files_through(tmp_path):
    target = tmp_path / "meta.yaml"
    target.write_text("properties: []\n")
    loader = CachingResourceLoader(tmp_path / "cache")

    resource = loader.get_resource(target.as_uri())

    assert resource.path == target
    assert not any((tmp_path / "cache").iterdir())


def test_caching_loader_lock_set_is_bounded(tmp_path):
    loader = CachingResourceLoader(tmp_path / "cache")

    locks = {id(loader._lock_for(f"https://example.com/{i}.jar")) for i in range(500)}

    assert len(locks) <= LOCK_STRIPES
    assert loader._lock_for("maven://g:a:1.0") is loader._lock_for("maven://g:a:1.0")
