from __future__ import annotations

from typing import Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from pydantic import BaseModel, Field

from agent.agent import ChatRelay
from agent.errors import RelayError, ValidationError
from config.settings import get_settings


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("tutor_relay")

app = FastAPI(title="DSA Tutor Relay", version="1.0.0")

# The browser client may be served from any origin.
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=".*",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One relay, and so one conversation, for the life of the process.
app.state.relay = ChatRelay()


class ChatRequest(BaseModel):
    message: Optional[str] = Field(default=None, description="User's latest message")


class ChatResponse(BaseModel):
    reply: str


def get_relay(request: Request) -> ChatRelay:
    return request.app.state.relay


@app.exception_handler(RelayError)
async def relay_error_handler(_request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("Rejected malformed request: %s", exc.errors())
    error = ValidationError()
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


@app.post("/", response_model=ChatResponse)
async def chat(
    req: Optional[ChatRequest] = None,
    relay: ChatRelay = Depends(get_relay),
) -> ChatResponse:
    message = req.message if req is not None else None
    logger.info(
        "Incoming chat: message_len=%s transcript_turns=%s",
        len(message or ""),
        len(relay.transcript),
    )
    reply = await relay.handle_message(message)
    return ChatResponse(reply=reply)


@app.post("/reset")
def reset(relay: ChatRelay = Depends(get_relay)) -> Dict[str, bool]:
    return relay.reset()


@app.get("/health")
def health():
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    settings = get_settings()
    logger.info("Server is running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
