from __future__ import annotations

from dataclasses import dataclass

import pytest

from fleetlink.urls import UrlResolver


@dataclass
class StaticAddress:
    address: str | None = None

    def get_current_address(self) -> str | None:
        return self.address


def _resolver(address: str | None = "http://10.0.0.5:5000") -> UrlResolver:
    return UrlResolver(StaticAddress(address))


@pytest.mark.parametrize("path", [None, ""])
def test_empty_input_gives_none(path: str | None) -> None:
    assert _resolver().resolve(path) is None


def test_storage_url_is_routed_through_proxy() -> None:
    resolved = _resolver().resolve("http://10.0.0.5:9000/docs/license.png")
    assert resolved == "http://10.0.0.5/storage/docs/license.png"


def test_storage_url_keeps_its_own_host() -> None:
    resolved = _resolver("http://192.168.0.111:5000").resolve(
        "https://100.99.182.57:9000/stsc-documents/vehicles/lexus.jpg"
    )
    assert resolved == "https://100.99.182.57/storage/stsc-documents/vehicles/lexus.jpg"


def test_storage_url_rewritten_even_without_backend() -> None:
    resolved = _resolver(None).resolve("http://10.0.0.5:9000/docs/license.png")
    assert resolved == "http://10.0.0.5/storage/docs/license.png"


def test_other_absolute_urls_pass_through() -> None:
    url = "https://cdn.example.com:8443/img/a.png"
    assert _resolver().resolve(url) == url


def test_uppercase_scheme_is_still_absolute() -> None:
    url = "HTTPS://cdn.example.com/a.png"
    assert _resolver().resolve(url) == url


def test_relative_path_joined_to_backend() -> None:
    assert _resolver().resolve("uploads/a.png") == "http://10.0.0.5:5000/uploads/a.png"


def test_leading_slash_not_doubled() -> None:
    assert _resolver("http://10.0.0.5:5000/").resolve("/uploads/a.png") == "http://10.0.0.5:5000/uploads/a.png"


def test_relative_path_without_backend_gives_none() -> None:
    assert _resolver(None).resolve("uploads/a.png") is None


def test_custom_storage_port_and_prefix() -> None:
    urls = UrlResolver(StaticAddress("http://10.0.0.5:5000"), storage_port=9100, storage_prefix="/minio/")

    assert urls.resolve("http://10.0.0.5:9100/b/k.pdf") == "http://10.0.0.5/minio/b/k.pdf"
    assert urls.resolve("http://10.0.0.5:9000/b/k.pdf") == "http://10.0.0.5:9000/b/k.pdf"


def test_resolver_reads_address_at_call_time() -> None:
    address = StaticAddress(None)
    urls = UrlResolver(address)
    assert urls("uploads/a.png") is None

    address.address = "http://10.0.0.9:5000"
    assert urls("uploads/a.png") == "http://10.0.0.9:5000/uploads/a.png"
