"""HTTP surface of the request proxy: POST /api/playground."""

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from api_playground.config import get_settings
from api_playground.errors import ValidationError
from api_playground.parser.base import ProxyTarget
from api_playground.proxy import RequestProxy


def create_app(proxy: RequestProxy | None = None) -> FastAPI:
    """Build the proxy application. ``proxy`` is injectable for tests."""
    if proxy is None:
        proxy = RequestProxy(timeout=get_settings().proxy_timeout)

    app = FastAPI(title="api-playground proxy")

    @app.post("/api/playground")
    async def playground(target: ProxyTarget) -> JSONResponse:
        try:
            envelope = await proxy.execute(target)
        except ValidationError as e:
            return JSONResponse({"error": str(e)}, status_code=400)

        status_code = 500 if envelope.status == 0 else 200
        return JSONResponse(envelope.to_wire(), status_code=status_code)

    return app
