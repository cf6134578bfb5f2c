"""Envelope -> HTTP response."""

from fastapi.responses import JSONResponse

from app.resources.envelope import Envelope


def to_response(envelope: Envelope) -> JSONResponse:
    return JSONResponse(status_code=envelope.status, content=envelope.to_dict())
