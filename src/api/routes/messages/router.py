"""Endpoint de envio outbound (POST /send).

Aceita `{destination, body, kind}` e também os nomes
`{to, message, type}`.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from api.routes.dependencies import get_container
from api.routes.errors import error_response
from app.protocols.models import SendRequest
from utils.errors import SendFailedError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


class SendMessageBody(BaseModel):
    """Corpo da requisição de envio.

    Campos ausentes viram string vazia para que a validação de domínio
    respeite a ordem sessão → campos → tipo.
    """

    model_config = ConfigDict(populate_by_name=True)

    destination: str = Field(default="", validation_alias=AliasChoices("destination", "to"))
    body: str = Field(default="", validation_alias=AliasChoices("body", "message"))
    kind: str = Field(default="text", validation_alias=AliasChoices("kind", "type"))

    def to_request(self) -> SendRequest:
        return SendRequest(destination=self.destination, body=self.body, kind=self.kind)


class SendMessageResponse(BaseModel):
    success: bool = True
    message_id: str = Field(serialization_alias="messageId")
    destination: str


@router.post("/send")
async def send_message(payload: SendMessageBody, request: Request) -> JSONResponse:
    """Valida e envia uma mensagem de texto."""
    use_case = get_container(request).send_message
    try:
        result = await use_case.execute(payload.to_request())
    except (ValidationError, SendFailedError) as exc:
        return error_response(exc)

    response = SendMessageResponse(message_id=result.message_id, destination=result.destination)
    return JSONResponse(content=response.model_dump(by_alias=True))
