import argparse
import logging
import sys
from typing import Sequence

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

# --- shared core -----------------------------------------------------------
from decoder_core import (
    PROFILE_NAMES,
    DecoderOptions,
    LogLevel,
    decode_document,
    read_document,
    setup_logging,
)

# --- domain-specific helpers ----------------------------------------------
from hafas.extension_header import HafasServiceError
from hafas.helpers import HafasDecodeError
from hafas.serialization import result_to_dict, to_json_bytes

from journey_store import JourneyStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CLI / argparse helpers
# ---------------------------------------------------------------------------


def parse_args(argv: Sequence[str] | None = None):
    p = argparse.ArgumentParser("HAFAS Journey Server")
    p.add_argument(
        "input_path",
        nargs="*",
        default=[],
        help="Binary documents to load at startup ('-' for stdin)",
    )
    p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p.add_argument("--port", type=int, default=8000, help="Web server port")
    p.add_argument(
        "--cors",
        nargs="*",
        default=["*"],
        help="Allowed CORS origins (default: '*')",
    )
    p.add_argument(
        "--profile",
        default="default",
        choices=PROFILE_NAMES,
        help="Default provider profile",
    )
    p.add_argument(
        "-l",
        "--log-level",
        default=LogLevel.INFO.value,
        choices=[lvl.value for lvl in LogLevel],
        help="Logging level",
    )
    return p.parse_args(argv)


def _error_payload(exc: HafasDecodeError) -> dict:
    payload = {"error": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, HafasServiceError):
        payload["code"] = exc.code
    return payload


# ---------------------------------------------------------------------------
# Startup loader - pushes journeys into JourneyStore
# ---------------------------------------------------------------------------


def load_documents(
    paths: Sequence[str], store: JourneyStore, options: DecoderOptions
) -> None:
    """Decode every document in *paths* and upsert its journeys into *store*."""
    for path in paths:
        try:
            result = decode_document(read_document(path), options)
        except (OSError, HafasDecodeError) as exc:
            logger.error("Cannot load %s: %s", path, exc)
            continue
        logger.info("Loaded %d journeys from %s", store.extend(result), path)


# ---------------------------------------------------------------------------
# FastAPI app factory
# ---------------------------------------------------------------------------


def build_app(
    store: JourneyStore,
    allowed_origins: list[str],
    default_profile: str = "default",
) -> FastAPI:
    app = FastAPI(title="HAFAS Journey Server", default_response_class=ORJSONResponse)

    # CORS ------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    # Routes ----------------------------------------------------------------
    @app.get("/health")
    async def health():
        return {"status": "ok", "journeys": len(store)}

    @app.get("/journeys", response_class=Response)
    async def journeys():
        """Return all stored journeys as JSON (bytes, UTF-8)."""
        return Response(store.to_json_bytes(), media_type="application/json")

    @app.post("/journeys", response_class=Response)
    async def decode_journeys(
        request: Request,
        profile: str = default_profile,
        isolate_failures: bool = False,
    ):
        """Decode the binary document in the request body."""
        if profile not in PROFILE_NAMES:
            return ORJSONResponse(
                {"error": "UnknownProfile", "message": f"Unknown profile '{profile}'"},
                status_code=400,
            )
        options = DecoderOptions(profile=profile, isolate_failures=isolate_failures)
        try:
            result = await run_in_threadpool(
                decode_document, await request.body(), options
            )
        except HafasDecodeError as exc:
            logger.warning("Rejected document: %s", exc)
            return ORJSONResponse(_error_payload(exc), status_code=422)

        store.extend(result)
        return Response(
            to_json_bytes(result_to_dict(result)), media_type="application/json"
        )

    @app.delete("/journeys")
    async def clear_journeys():
        store.clear()
        return {"status": "ok", "journeys": 0}

    return app


# ---------------------------------------------------------------------------
# Main routine
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(LogLevel(args.log_level))

    store = JourneyStore()
    load_documents(args.input_path, store, DecoderOptions(profile=args.profile))

    logging.info("Journey server 👉 http://%s:%d", args.host, args.port)

    uvicorn.run(
        build_app(store, args.cors, args.profile),
        host=args.host,
        port=args.port,
        log_level="info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
