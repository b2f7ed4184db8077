"""
Server-side helpers for binary RPC endpoints on worker nodes.
"""

import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import Response
import msgspec

from chatgate.base_schemas import RPC_CONTENT_TYPE, S, RPCStruct, decode_message, encode_message


logger = logging.getLogger(__name__)


class RPCResponse(Response):
    media_type = RPC_CONTENT_TYPE

    def __init__(self, message: RPCStruct, status_code: int = 200) -> None:
        super().__init__(content=encode_message(message), status_code=status_code)


async def read_message(request: Request, message_type: type[S]) -> S:
    """
    Decode the request body as a binary message of ``message_type``.

    Raises:
        HTTPException: 415 for a non-binary content type, 400 for a malformed body
    """
    content_type = request.headers.get("content-type", "")
    if content_type and not content_type.startswith(RPC_CONTENT_TYPE):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Expected {RPC_CONTENT_TYPE}, got {content_type}",
        )

    body = await request.body()
    try:
        return decode_message(body, message_type)
    except msgspec.DecodeError as e:
        logger.warning("Malformed %s on %s: %s", message_type.__name__, request.url.path, e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Malformed {message_type.__name__}: {e}",
        ) from e
