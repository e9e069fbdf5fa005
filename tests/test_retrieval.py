"""Tests for the document cache and retriever."""

import asyncio
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

from schemata_registry.errors import RetrievalError
from schemata_registry.retrieval import DocumentCache, DocumentRetriever


def _response(status_code: int = 200, text: str = "") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


class TestDocumentCache:
    """Tests for DocumentCache."""

    def test_put_get_and_delete(self) -> None:
        """Entries can be stored, read back and removed."""
        cache = DocumentCache()
        assert cache.get("Order:1.0.0") is None

        cache.put("Order:1.0.0", {"type": "object"})
        assert cache.get("Order:1.0.0") == {"type": "object"}
        assert "Order:1.0.0" in cache
        assert len(cache) == 1

        assert cache.delete("Order:1.0.0") is True
        assert cache.delete("Order:1.0.0") is False
        assert "Order:1.0.0" not in cache

    def test_clear_with_prefix(self) -> None:
        """Clearing by prefix only removes matching keys."""
        cache = DocumentCache()
        cache.put("hydration:Order:1.0.0", {})
        cache.put("hydration:Order:2.0.0", {})
        cache.put("Order:1.0.0", {})

        assert cache.clear("hydration:") == 2
        assert cache.keys() == ["Order:1.0.0"]
        assert cache.clear() == 1
        assert len(cache) == 0


class TestLocalRetrieval:
    """Tests for reading documents from disk."""

    def test_get_from_local(self, tmp_path: Path) -> None:
        """Local reads return the file text."""
        path = tmp_path / "schema.json"
        path.write_text('{"type": "object"}', encoding="utf-8")

        retriever = DocumentRetriever()
        assert asyncio.run(retriever.get_from_local(str(path))) == '{"type": "object"}'

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing file raises RetrievalError naming the path."""
        path = str(tmp_path / "missing.json")
        retriever = DocumentRetriever()

        with pytest.raises(RetrievalError) as exc_info:
            asyncio.run(retriever.get_from_local(path))

        assert exc_info.value.source == path

    def test_get_from_cache_or_local_memoizes(self, tmp_path: Path) -> None:
        """The second read is served from the cache even if the file is gone."""
        path = tmp_path / "available.json"
        path.write_text("{}", encoding="utf-8")
        retriever = DocumentRetriever()

        first = asyncio.run(retriever.get_from_cache_or_local("schemas:available", str(path)))
        path.unlink()
        second = asyncio.run(retriever.get_from_cache_or_local("schemas:available", str(path)))

        assert first == second == "{}"
        assert retriever.get_from_cache("schemas:available") == "{}"

    def test_uncached_read_does_not_fill_cache(self, tmp_path: Path) -> None:
        """get_from_source never touches the cache."""
        path = tmp_path / "doc.json"
        path.write_text("[]", encoding="utf-8")
        cache = DocumentCache()
        retriever = DocumentRetriever(cache)

        assert asyncio.run(retriever.get_from_source(str(path), local=True)) == "[]"
        assert len(cache) == 0


class TestRemoteRetrieval:
    """Tests for fetching documents over HTTP."""

    def test_get_from_uri(self) -> None:
        """Remote reads return the response text and close the response."""
        response = _response(text='{"Order": ["1.0.0"]}')
        retriever = DocumentRetriever(timeout=3.5)

        with patch("schemata_registry.retrieval.requests.get", return_value=response) as mock_get:
            text = asyncio.run(retriever.get_from_uri("https://example.com/available.json"))

        assert text == '{"Order": ["1.0.0"]}'
        mock_get.assert_called_once_with("https://example.com/available.json", timeout=3.5)
        response.close.assert_called_once()

    def test_http_error_raises(self) -> None:
        """Non-200 responses raise RetrievalError."""
        response = _response(status_code=404)
        retriever = DocumentRetriever()

        with patch("schemata_registry.retrieval.requests.get", return_value=response):
            with pytest.raises(RetrievalError) as exc_info:
                asyncio.run(retriever.get_from_uri("https://example.com/missing.json"))

        assert "404" in str(exc_info.value)
        assert exc_info.value.source == "https://example.com/missing.json"
        response.close.assert_called_once()

    def test_connection_error_raises(self) -> None:
        """Request exceptions are wrapped in RetrievalError."""
        retriever = DocumentRetriever()

        with patch(
            "schemata_registry.retrieval.requests.get",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            with pytest.raises(RetrievalError) as exc_info:
                asyncio.run(retriever.get_from_uri("https://example.com/available.json"))

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    def test_get_from_cache_or_uri_fetches_once(self) -> None:
        """Repeated cache-or-fetch calls only hit the network once."""
        retriever = DocumentRetriever()

        with patch("schemata_registry.retrieval.requests.get", return_value=_response(text="{}")) as mock_get:
            asyncio.run(retriever.get_from_cache_or_uri("Order:1.0.0", "https://example.com/schema.json"))
            asyncio.run(retriever.get_from_cache_or_source("Order:1.0.0", "https://example.com/schema.json", False))

        assert mock_get.call_count == 1

    def test_save_to_cache_overrides_fetch(self) -> None:
        """A saved document is returned without fetching."""
        retriever = DocumentRetriever()
        retriever.save_to_cache("Order:1.0.0", {"type": "object"})

        with patch("schemata_registry.retrieval.requests.get") as mock_get:
            document = asyncio.run(retriever.get_from_cache_or_uri("Order:1.0.0", "https://example.com/schema.json"))

        assert document == {"type": "object"}
        mock_get.assert_not_called()
