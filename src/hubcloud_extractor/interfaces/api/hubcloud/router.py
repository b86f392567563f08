"""Hubcloud extraction endpoint."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from hubcloud_extractor.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["hubcloud"])

SOURCE_NAME = "custom-hubcloud-api"


@router.get("/hubcloud")
async def extract_hubcloud(request: Request, url: str | None = None) -> JSONResponse:
    """Resolve a hubcloud landing page into direct stream links.

    Upstream problems do not fail the request: the extractor reports them
    as an empty ``links`` list.  A 500 is only returned when something
    outside the extractor breaks.

    Args:
        request: FastAPI request (for accessing app state).
        url: Landing page URL to resolve.

    Returns:
        200 with ``{success, links, count, source}``, 400 when ``url`` is
        missing, 500 on unexpected errors.
    """
    if not url:
        log.warning("hubcloud_missing_url")
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": 'Missing "url" query parameter.',
            },
        )

    state = cast(AppState, request.app.state)
    log.info("hubcloud_request", url=url)

    try:
        links = await state.extract_uc.execute(url)
    except Exception as e:
        log.error("hubcloud_api_error", url=url, error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "An error occurred during extraction.",
                "error": str(e),
            },
        )

    return JSONResponse(
        content={
            "links": [link.to_dict() for link in links],
            "success": True,
            "count": len(links),
            "source": SOURCE_NAME,
        }
    )
