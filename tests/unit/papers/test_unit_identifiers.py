# tests/unit/papers/test_unit_identifiers.py — v2
"""Tests for papers/identifiers.py — parsing, detection, blob names, URLs."""

from __future__ import annotations

from urllib.parse import unquote

import pytest

from paperchat.core.errors import RequestValidationError
from paperchat.papers.identifiers import (
    PDF_PROXY_PATH,
    derive_blob_name,
    detect_paper_source,
    get_paper_urls,
    get_source_config,
    parse_paper_id,
    require_valid_reference,
)


class TestDeriveBlobName:
    def test_arxiv(self):
        assert derive_blob_name("arxiv", "2301.12345") == "arxiv-2301-12345"

    def test_old_style_arxiv(self):
        assert derive_blob_name("arxiv", "cs/0211011") == "arxiv-cs-0211011"

    def test_doi_lowercased(self):
        assert (
            derive_blob_name("biorxiv", "10.1101/2025.03.13.642940V2")
            == "biorxiv-10-1101-2025-03-13-642940v2"
        )

    def test_deterministic(self):
        assert derive_blob_name("arxiv", "2301.12345") == derive_blob_name("arxiv", "2301.12345")


class TestDetectPaperSource:
    @pytest.mark.parametrize(
        "paper_id,expected",
        [
            ("2301.12345", "arxiv"),
            ("1706.03762", "arxiv"),
            ("math-ph/0506203", "arxiv"),
            ("2301.12345.pdf", "arxiv"),
            ("10.1101/2023.12.06.23299426v1", "medrxiv"),
            ("10.1101/2025.03.13.642940v2", "biorxiv"),
            ("10.1101/2025.03.13.642940v2.full.pdf", "biorxiv"),
            ("not-a-paper", None),
        ],
    )
    def test_detection(self, paper_id, expected):
        assert detect_paper_source(paper_id) == expected


class TestParsePaperId:
    def test_arxiv_new_style(self):
        ref = parse_paper_id("2301.12345", "arxiv")
        assert ref.is_valid
        assert ref.external_id == "2301.12345"
        assert ref.derived_blob_name == "arxiv-2301-12345"
        assert ref.category is None
        assert ref.canonical_key == "arxiv:2301.12345"

    def test_arxiv_old_style_category(self):
        ref = parse_paper_id("cs/0211011", "arxiv")
        assert ref.is_valid
        assert ref.category == "cs"

    def test_strips_pdf_suffix(self):
        assert parse_paper_id("2301.12345.pdf", "arxiv").external_id == "2301.12345"

    def test_path_segments_joined(self):
        ref = parse_paper_id(["10.1101", "2025.03.13.642940v2"], "biorxiv")
        assert ref.is_valid
        assert ref.external_id == "10.1101/2025.03.13.642940v2"

    def test_rxiv_metadata(self):
        ref = parse_paper_id("10.1101/2023.12.06.23299426v1.full.pdf", "medrxiv")
        assert ref.is_valid
        assert ref.external_id == "10.1101/2023.12.06.23299426v1"
        assert ref.date == "2023.12.06"
        assert ref.version == "v1"

    def test_auto_detect(self):
        ref = parse_paper_id("10.1101/2025.03.13.642940v2")
        assert ref.source == "biorxiv"
        assert ref.is_valid

    def test_invalid_for_source(self):
        ref = parse_paper_id("2301.12345", "medrxiv")
        assert not ref.is_valid
        assert ref.derived_blob_name == ""

    def test_undetectable(self):
        assert not parse_paper_id("hello world").is_valid

    def test_empty(self):
        assert not parse_paper_id("", "arxiv").is_valid

    def test_unknown_source(self):
        with pytest.raises(RequestValidationError, match="Unsupported paper source"):
            parse_paper_id("2301.12345", "pubmed")


class TestRequireValidReference:
    def test_missing(self):
        with pytest.raises(RequestValidationError, match="Missing paper ID"):
            require_valid_reference("", "arxiv")

    def test_invalid(self):
        with pytest.raises(RequestValidationError) as exc_info:
            require_valid_reference("123", "arxiv")
        assert str(exc_info.value) == (
            "Invalid arxiv paper ID format: 123 (e.g., 2510.01309 or cs/0211011)"
        )

    def test_invalid_biorxiv_names_expected_shape(self):
        with pytest.raises(RequestValidationError, match=r"e\.g\., 10\.1101/2025\.03\.13\.642940v2"):
            require_valid_reference("10.1101/nope", "biorxiv")

    def test_undetected_source(self):
        with pytest.raises(RequestValidationError) as exc_info:
            require_valid_reference("not-a-paper", None)
        assert str(exc_info.value) == "Invalid paper ID format: not-a-paper"

    def test_valid(self):
        assert require_valid_reference("2301.12345", "arxiv").is_valid


class TestGetPaperUrls:
    def test_arxiv(self):
        urls = get_paper_urls(parse_paper_id("2301.12345", "arxiv"))
        assert urls.pdf_url == "https://arxiv.org/pdf/2301.12345"
        assert urls.abstract_url == "https://arxiv.org/abs/2301.12345"
        assert urls.file_name == "arxiv-2301-12345"
        assert "file=https%3A%2F%2Farxiv.org%2Fpdf%2F2301.12345" in urls.viewer_url

    def test_rxiv_goes_through_proxy(self):
        ref = parse_paper_id("10.1101/2025.03.13.642940v2", "biorxiv")
        urls = get_paper_urls(ref, base_url="https://paperchat.test/")
        assert urls.pdf_url == (
            "https://www.biorxiv.org/content/10.1101/2025.03.13.642940v2.full.pdf"
        )
        viewer_target = unquote(urls.viewer_url.split("file=", 1)[1].split("&", 1)[0])
        assert viewer_target.startswith(f"https://paperchat.test{PDF_PROXY_PATH}?id=")
        assert "source=biorxiv" in viewer_target

    def test_source_config(self):
        assert get_source_config("medrxiv").display_name == "medRxiv"
