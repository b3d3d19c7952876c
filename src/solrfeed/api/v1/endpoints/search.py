"""Search endpoint — OpenSearch/Atom feed of Solr results.

Query parameters follow the description document's template::

    /v1/search?q={searchTerms}&start={startIndex?}&count={count?}&sort={sfdc:sortField?}

Optional template parameters left unfilled by a consumer arrive as empty
strings and are treated as absent.  ``start`` is zero based.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from solrfeed.api.deps import get_service
from solrfeed.core.atom import ATOM_MEDIA_TYPE
from solrfeed.core.exceptions import InvalidRequestError, RecordError, UpstreamQueryError
from solrfeed.core.service import FeedService

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_COUNT = 10


@router.get(
    "/search",
    summary="OpenSearch Feed",
    description=(
        "Run a free-text query against the configured Solr collection and return "
        "one page of results as an Atom feed with OpenSearch paging elements "
        "(`totalResults`, zero-based `startIndex`, `itemsPerPage`) and vendor "
        "extension elements per entry."
    ),
    response_class=Response,
    responses={
        200: {"description": "Atom feed", "content": {ATOM_MEDIA_TYPE: {}}},
        400: {"description": "Unsupported sort field"},
        422: {"description": "Invalid paging parameters"},
        500: {"description": "A record failed translation in strict mode"},
        502: {"description": "The search backend failed or timed out"},
    },
)
async def search(
    q: str = Query(description="Search terms"),
    start: str | None = Query(default=None, description="Zero-based index of the first result"),
    count: str | None = Query(default=None, description="Number of results per page"),
    sort: str | None = Query(default=None, description="Sort clause, e.g. 'date desc'"),
    service: FeedService = Depends(get_service),
) -> Response:
    """Return one page of search results as an Atom feed."""
    start_index = _optional_int("start", start, default=0, minimum=0)
    page_size = _optional_int("count", count, default=DEFAULT_COUNT, minimum=1)
    sort_clause = sort.strip() if sort else None

    try:
        body = await service.search_feed(q, start=start_index, count=page_size, sort=sort_clause or None)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except UpstreamQueryError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except RecordError as e:
        logger.error("Feed translation aborted: %s", e)
        raise HTTPException(
            status_code=500,
            detail=f"Feed translation failed: {e!s}",
        ) from e

    return Response(content=body, media_type=f"{ATOM_MEDIA_TYPE}; charset=utf-8")


def _optional_int(name: str, value: str | None, *, default: int, minimum: int) -> int:
    """Parse an optional template parameter, treating empty strings as absent."""
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Parameter '{name}' must be an integer") from e
    if parsed < minimum:
        raise HTTPException(status_code=422, detail=f"Parameter '{name}' must be >= {minimum}")
    return parsed
