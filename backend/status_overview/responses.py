"""JSON responses carrying the configured cross-origin headers."""

from fastapi import Response, status

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


def cors_json_response(payload: str, link_root: str) -> Response:
    """Wrap an already serialized JSON payload.

    CORS headers are only added when *link_root* (``scheme://authority`` of
    the configured overview link) is non-empty.
    """
    headers = {"Content-Type": JSON_CONTENT_TYPE}
    if link_root:
        headers["Access-Control-Allow-Origin"] = link_root
        headers["Access-Control-Allow-Credentials"] = "true"
    return Response(content=payload, status_code=status.HTTP_200_OK, headers=headers)
