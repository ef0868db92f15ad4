import os
import json
import logging
from typing import Optional, Any
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from layout_service.handlers import get_all_handler, store_handler
from layout_service.panel_schema import panel_json_schema

logger = logging.getLogger("layout_service")

# Identity claims are attached by the upstream authorizer (API gateway / auth proxy)
CLAIMS_HEADER = os.getenv("CLAIMS_HEADER", "X-Authorizer-Claims")

app = FastAPI(title="Panel Layout Service")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", CLAIMS_HEADER],
)


def _claims_from_request(request: Request) -> Optional[dict[str, Any]]:
    raw = request.headers.get(CLAIMS_HEADER)
    if raw is None:
        return None
    try:
        claims = json.loads(raw)
    except ValueError:
        logger.info(f"Ignoring undecodable {CLAIMS_HEADER} header")
        return None
    return claims if isinstance(claims, dict) else None


def _to_event(request: Request, body: Optional[bytes] = None) -> dict:
    event: dict[str, Any] = {"requestContext": {}, "body": body}
    claims = _claims_from_request(request)
    if claims is not None:
        event["requestContext"]["authorizer"] = {"claims": claims}
    return event


def _to_response(envelope: dict) -> Response:
    return Response(
        content=envelope["body"],
        status_code=envelope["statusCode"],
        headers=envelope["headers"],
        media_type="application/json",
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/layouts/schema")
async def layout_schema():
    return panel_json_schema()


@app.get("/layouts")
async def get_layouts(request: Request):
    envelope = await run_in_threadpool(get_all_handler, _to_event(request))
    return _to_response(envelope)


@app.post("/layouts")
async def post_layout(request: Request):
    body = await request.body()
    envelope = await run_in_threadpool(store_handler, _to_event(request, body))
    return _to_response(envelope)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
