"""Standardized API response wrappers."""

from __future__ import annotations

from typing import Any

from tendermatch_shared.models.matching import Page


def wrap_response(
    data: Any,
    *,
    total_count: int | None = None,
    page_size: int | None = None,
    page: int | None = None,
    page_count: int | None = None,
    source: str | None = None,
    extra: dict[str, Any] | None = None,
    links: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Build a standardized API response dict."""
    meta = {
        "total_count": total_count,
        "page_size": page_size,
        "page": page,
        "page_count": page_count,
        "source": source,
        **(extra or {}),
    }
    return {
        "data": data,
        "meta": {k: v for k, v in meta.items() if v is not None},
        "links": links or {},
    }


def wrap_page(
    page: Page,
    path: str,
    params: dict[str, Any] | None = None,
    *,
    source: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Wrap a Page of pydantic models, with prev/next links."""
    return wrap_response(
        [item.model_dump(mode="json") for item in page.items],
        total_count=page.total_count,
        page_size=page.page_size,
        page=page.page,
        page_count=page.page_count,
        source=source,
        extra=extra,
        links=build_links(path, params or {}, page.page, page.page_count),
    )


def build_links(path: str, params: dict[str, Any], page: int, page_count: int) -> dict[str, str]:
    """self/prev/next links; None-valued params are dropped."""
    base = "&".join(f"{k}={v}" for k, v in params.items() if v is not None)

    def link(n: int) -> str:
        query = f"{base}&page={n}" if base else f"page={n}"
        return f"{path}?{query}"

    links = {"self": link(page)}
    if page > 1:
        links["prev"] = link(page - 1)
    if page < page_count:
        links["next"] = link(page + 1)
    return links


def error_body(message: str, *, details: Any = None, error: str = "Request failed") -> dict[str, Any]:
    """Error body in the shape the tender proxy has always returned."""
    return {"error": error, "message": message, "details": details}
