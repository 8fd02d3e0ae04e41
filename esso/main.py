#!/usr/bin/env python3
"""
Esso - Example Application

A thin FastAPI app showing the plugin end to end:
1. POST /auth exchanges demo credentials for a token
2. Routes on the private router require that token
3. GET / stays public

Run with: ESSO_SECRET=... python -m esso.main
"""

import logging
import os
import secrets
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from pydantic import BaseModel

from esso.config.provider import ConfigProvider, EnvConfigProvider, EssoOptions
from esso.errors import Forbidden
from esso.logging_config import get_logging_config
from esso.plugin import Esso

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    """Demo credentials."""
    user: str
    password: str


class TokenResponse(BaseModel):
    token: str


def create_app(options: Optional[EssoOptions] = None, config_provider: Optional[ConfigProvider] = None) -> FastAPI:
    """
    Build the example application.

    Args:
        options: Plugin options; loaded from the environment when omitted
        config_provider: Source of options when ``options`` is omitted
    """
    if options is None:
        options = (config_provider or EnvConfigProvider()).get_esso_options()

    esso = Esso(options)
    app = FastAPI(title="Esso example")
    esso.register(app)
    app.state.esso = esso

    demo_user = os.getenv("ESSO_DEMO_USER", "John")
    demo_password = os.getenv("ESSO_DEMO_PASSWORD", "123")

    generate_auth_token = getattr(esso, options.rename.generate_auth_token)
    require_authentication = getattr(esso, options.rename.require_authentication)

    public = APIRouter()

    @public.get("/")
    async def index():
        return {"public": True}

    @public.get("/health")
    async def health():
        return {"status": "ok"}

    @public.post("/auth", response_model=TokenResponse)
    async def login(body: LoginRequest):
        valid_user = secrets.compare_digest(body.user.encode(), demo_user.encode())
        valid_password = secrets.compare_digest(body.password.encode(), demo_password.encode())
        if not (valid_user and valid_password):
            logger.warning(f"Failed login for user {body.user!r}")
            raise Forbidden()

        # keep the payload small: it travels with every request
        token = await generate_auth_token({"user": body.user})
        return TokenResponse(token=token)

    private = APIRouter()
    require_authentication(private)

    @private.get("/test")
    async def private_test(request: Request):
        auth = esso.auth(request)
        return {"private": True, "message": f"Hello, {auth.get('user')}!"}

    app.include_router(public)
    app.include_router(private)
    return app


if __name__ == "__main__":
    options = EnvConfigProvider().get_esso_options()
    uvicorn.run(
        create_app(options),
        host=os.getenv("ESSO_HOST", "0.0.0.0"),
        port=int(os.getenv("ESSO_PORT", "3000")),
        log_config=get_logging_config(options.header_name, os.getenv("LOG_LEVEL", "INFO")),
    )
