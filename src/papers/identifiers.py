# src/papers/identifiers.py — v2
"""Paper identifier parsing, source detection and URL derivation.

Supported sources:
  - arXiv: new style ``YYMM.NNNNN`` (2301.12345) or old style
    ``category/YYMMnnn`` (cs/0211011, math-ph/0506203)
  - medRxiv: ``10.1101/YYYY.MM.DD.NNNNNNNNvN``
  - bioRxiv: ``10.1101/YYYY.MM.DD.NNNNNNvN``
"""

from __future__ import annotations

import re
from urllib.parse import quote

from paperchat.core.errors import RequestValidationError
from paperchat.papers.models import DocumentReference, PaperSource, PaperUrls, SourceConfig

_PDFJS_VIEWER = "https://mozilla.github.io/pdf.js/web/viewer.html"
PDF_PROXY_PATH = "/api/pdf-proxy"

SOURCE_CONFIGS: dict[str, SourceConfig] = {
    "arxiv": SourceConfig(
        name="arxiv",
        display_name="arXiv",
        base_url="https://arxiv.org",
        id_pattern=re.compile(r"^(\d{4}\.\d{4,5}|[a-z-]+/\d{7})$", re.IGNORECASE),
        pattern_description="e.g., 2510.01309 or cs/0211011",
        strip_suffix=".pdf",
        via_proxy=False,
    ),
    "medrxiv": SourceConfig(
        name="medrxiv",
        display_name="medRxiv",
        base_url="https://www.medrxiv.org",
        id_pattern=re.compile(r"^10\.1101/\d{4}\.\d{2}\.\d{2}\.\d{8}v\d+$", re.IGNORECASE),
        pattern_description="e.g., 10.1101/2023.12.06.23299426v1",
        strip_suffix=".full.pdf",
        via_proxy=True,
    ),
    "biorxiv": SourceConfig(
        name="biorxiv",
        display_name="bioRxiv",
        base_url="https://www.biorxiv.org",
        id_pattern=re.compile(r"^10\.1101/\d{4}\.\d{2}\.\d{2}\.\d{6}v\d+$", re.IGNORECASE),
        pattern_description="e.g., 10.1101/2025.03.13.642940v2",
        strip_suffix=".full.pdf",
        via_proxy=True,
    ),
}

# Detection order matters only for overlapping patterns; these do not overlap.
_DETECTION_ORDER: tuple[str, ...] = ("arxiv", "medrxiv", "biorxiv")


def get_source_config(source: str) -> SourceConfig:
    """Return the config for ``source`` or raise a validation error."""
    try:
        return SOURCE_CONFIGS[source]
    except KeyError:
        raise RequestValidationError(
            f"Unsupported paper source: {source!r}. "
            f"Supported: {', '.join(sorted(SOURCE_CONFIGS))}"
        ) from None


def detect_paper_source(paper_id: str) -> PaperSource | None:
    """Guess the source of a bare identifier from its shape."""
    for name in _DETECTION_ORDER:
        config = SOURCE_CONFIGS[name]
        if config.id_pattern.match(paper_id.removesuffix(config.strip_suffix)):
            return config.name
    return None


def derive_blob_name(source: str, external_id: str) -> str:
    """Deterministic remote name for a paper: same identifier, same name.

    ``arxiv:2301.12345`` → ``arxiv-2301-12345``.
    """
    return f"{source}-{re.sub(r'[./]', '-', external_id).lower()}"


def parse_paper_id(
    raw: str | list[str] | None, source: str | None = None
) -> DocumentReference:
    """Parse and validate a paper identifier.

    Args:
        raw: Identifier as a string, or path segments to be joined with "/"
            (DOIs arrive split when taken from a URL path).
        source: Explicit source tag. When None the source is auto-detected.

    Returns:
        DocumentReference; ``is_valid`` is False when the identifier does
        not match the source's pattern.
    """
    if isinstance(raw, list):
        text = "/".join(raw)
    else:
        text = (raw or "").strip()

    if source is None:
        detected = detect_paper_source(text)
        if detected is None:
            return DocumentReference(external_id=text, source="arxiv", is_valid=False)
        source = detected

    config = get_source_config(source)
    if text.endswith(config.strip_suffix):
        text = text[: -len(config.strip_suffix)]

    if not text or not config.id_pattern.match(text):
        return DocumentReference(external_id=text, source=config.name, is_valid=False)

    if config.name == "arxiv":
        category = text.split("/", 1)[0] if "/" in text else None
        return DocumentReference(
            external_id=text,
            source="arxiv",
            is_valid=True,
            derived_blob_name=derive_blob_name("arxiv", text),
            category=category,
        )

    # 10.1101/2025.03.13.642940v2 → date 2025.03.13, version v2
    parts = text.removeprefix("10.1101/").split(".")
    date = ".".join(parts[:3]) if len(parts) >= 3 else None
    version_match = re.match(r"^(\d+)(v\d+)$", parts[-1])
    return DocumentReference(
        external_id=text,
        source=config.name,
        is_valid=True,
        derived_blob_name=derive_blob_name(config.name, text),
        date=date,
        version=version_match.group(2) if version_match else None,
    )


def require_valid_reference(
    raw: str | list[str] | None, source: str | None
) -> DocumentReference:
    """parse_paper_id, raising RequestValidationError for anything invalid."""
    if not raw:
        raise RequestValidationError("Missing paper ID")
    reference = parse_paper_id(raw, source)
    if not reference.is_valid:
        if source is None:
            raise RequestValidationError(f"Invalid paper ID format: {reference.external_id}")
        config = get_source_config(source)
        raise RequestValidationError(
            f"Invalid {source} paper ID format: {reference.external_id} "
            f"({config.pattern_description})"
        )
    return reference


def get_paper_urls(reference: DocumentReference, base_url: str | None = None) -> PaperUrls:
    """Upstream PDF, abstract and viewer URLs for a paper.

    Args:
        reference: A valid reference.
        base_url: Public origin of this service, used to build absolute
            proxy URLs for sources the viewer cannot fetch directly.
    """
    config = SOURCE_CONFIGS[reference.source]
    paper_id = reference.external_id

    if reference.source == "arxiv":
        pdf_url = f"{config.base_url}/pdf/{paper_id}"
        abstract_url = f"{config.base_url}/abs/{paper_id}"
    else:
        pdf_url = f"{config.base_url}/content/{paper_id}.full.pdf"
        abstract_url = f"{config.base_url}/content/{paper_id}"

    if config.via_proxy:
        origin = (base_url or "").rstrip("/")
        viewer_target = (
            f"{origin}{PDF_PROXY_PATH}?id={quote(paper_id, safe='')}&source={reference.source}"
        )
    else:
        viewer_target = pdf_url

    return PaperUrls(
        pdf_url=pdf_url,
        abstract_url=abstract_url,
        viewer_url=f"{_PDFJS_VIEWER}?file={quote(viewer_target, safe='')}&sidebarViewOnLoad=0",
        file_name=reference.derived_blob_name,
    )
