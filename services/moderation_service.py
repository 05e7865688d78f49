# The standalone FastAPI moderation service
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from modguard.core.config_loader import load_config
from modguard.core.engine import ModerationEngine
from modguard.core.errors import RequestValidationError
from modguard.utils.logging_setup import configure_logging

logger = logging.getLogger("modguard.service")


class Req(BaseModel):
    message: Optional[str] = None


def create_app(engine: Optional[ModerationEngine] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "engine", None) is None:
            app.state.engine = ModerationEngine(load_config())
        yield
        await app.state.engine.aclose()

    app = FastAPI(title="modguard", lifespan=lifespan)
    app.state.engine = engine
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/")
    async def moderate(request: Request):
        content_type = request.headers.get("content-type", "")
        if not content_type.startswith("application/json"):
            return JSONResponse({"error": "Expected a JSON body."}, status_code=406)

        try:
            body: Any = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body."}, status_code=400)

        try:
            req = Req(**body) if isinstance(body, dict) else Req()
            result = await request.app.state.engine.analyze_async(req.message)
        except RequestValidationError as e:
            return JSONResponse({"error": e.message}, status_code=e.status_code)
        except ValidationError:
            return JSONResponse({"error": "Message must be a string."}, status_code=400)
        except Exception as e:
            logger.exception("[service] Error in moderation request")
            return JSONResponse(
                {"error": "Internal server error.", "details": str(e)},
                status_code=500,
            )
        return result.to_dict()

    return app


app = create_app()


def main():
    import uvicorn

    configure_logging(os.environ.get("MODGUARD_LOG_LEVEL", "INFO"))
    uvicorn.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8080")),
    )


if __name__ == "__main__":
    main()
