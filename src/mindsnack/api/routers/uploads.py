"""Upload signing for the admin editor.

The browser uploads images straight to the image provider; it only asks
this service to sign the parameters, since the API secret must never leave
the server.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from mindsnack.api.deps import StateDep
from mindsnack.api.errors import ServiceUnavailableError
from mindsnack.signing import sign_upload_params

router = APIRouter(prefix="/uploads", tags=["uploads"])


class SignRequest(BaseModel):
    model_config = {"populate_by_name": True}

    params_to_sign: dict[str, Any] = Field(alias="paramsToSign")


class SignResponse(BaseModel):
    signature: str


@router.post("/sign", response_model=SignResponse)
async def sign_upload(body: SignRequest, state: StateDep) -> SignResponse:
    """Sign upload parameters (e.g. ``timestamp`` and ``folder``)."""
    secret = state.settings.cloudinary_api_secret
    if not secret:
        raise ServiceUnavailableError("Image uploads are not configured")
    return SignResponse(signature=sign_upload_params(body.params_to_sign, secret))
