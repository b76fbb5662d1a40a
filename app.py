from contextlib import asynccontextmanager

from fastapi import FastAPI

from transmute import __version__
from transmute.config import PORT, UPLOAD_PATH
from transmute.router import router as convert_router
from transmute.utils.codec_runtime import CodecRuntime, CodecSettings, lifespan_codec_runtime
from transmute.utils.logging_config import get_logger
from transmute.utils.output_store import OutputStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: codec runtime and output store setup."""
    runtime = CodecRuntime(CodecSettings.from_env())
    app.state.output_store = OutputStore(UPLOAD_PATH)

    async with lifespan_codec_runtime(runtime):
        app.state.codec_runtime = runtime
        logger.info(f"Serving converted files from {UPLOAD_PATH}")
        yield


app = FastAPI(title="transmute", version=__version__, lifespan=lifespan)

app.include_router(convert_router)


@app.get("/ping")
async def general_ping():
    return {"success": True, "data": "PONG!"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
