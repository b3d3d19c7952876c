"""Description endpoint — Publishes the OpenSearch description document."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from solrfeed.api.deps import get_service
from solrfeed.core.description import DESCRIPTION_MEDIA_TYPE
from solrfeed.core.service import FeedService

router = APIRouter()


@router.get(
    "/opensearch.xml",
    summary="OpenSearch Description",
    description=(
        "Returns the OpenSearch description document: the zero-based query URL "
        "template, advertised record types with their sortable fields, "
        "encodings, and the maximum-results ceiling."
    ),
    response_class=Response,
    responses={200: {"content": {DESCRIPTION_MEDIA_TYPE: {}}}},
)
async def opensearch_description(
    service: FeedService = Depends(get_service),
) -> Response:
    """Serve the description document."""
    return Response(
        content=service.description_document(),
        media_type=f"{DESCRIPTION_MEDIA_TYPE}; charset=utf-8",
    )
