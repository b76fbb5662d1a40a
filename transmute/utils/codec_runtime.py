"""
Process-wide codec runtime.

The codec libraries used by the converters carry process-wide state: Pillow's
plugin registry and decompression-bomb limit, PyMuPDF's object store, and the
ffmpeg binary pydub shells out to. This module configures them once at
startup, owns the worker pool conversions run on, and releases both at
shutdown.

Use ``lifespan_codec_runtime()`` in the FastAPI lifespan so the runtime is
started exactly once per process.
"""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Callable, Optional

import fitz
import PIL
from PIL import Image
from pydub import AudioSegment

from .. import config
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CodecSettings:
    """Codec options shared by every converter."""
    concurrency: int = 1
    pdf_render_dpi: int = 150
    audio_bitrate: str = "192k"
    ffmpeg_path: Optional[str] = None
    max_image_pixels: Optional[int] = None

    @classmethod
    def from_env(cls) -> "CodecSettings":
        """Build settings from the environment-driven values in ``transmute.config``."""
        return cls(
            concurrency=config.CODEC_CONCURRENCY,
            pdf_render_dpi=config.PDF_RENDER_DPI,
            audio_bitrate=config.AUDIO_BITRATE,
            ffmpeg_path=config.FFMPEG_BINARY,
            max_image_pixels=config.MAX_IMAGE_PIXELS,
        )


DEFAULT_CODEC_SETTINGS = CodecSettings()


class CodecRuntime:
    """
    Scoped owner of codec library configuration and the conversion worker pool.

    Converters never read process globals; they receive the runtime (and
    through it the settings) from the converter factory.
    """

    def __init__(self, settings: Optional[CodecSettings] = None):
        self.settings = settings or DEFAULT_CODEC_SETTINGS
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def started(self) -> bool:
        return self._executor is not None

    def startup(self) -> None:
        """Configure the codec libraries and start the worker pool."""
        if self.started:
            logger.debug("Codec runtime already started")
            return

        Image.init()
        if self.settings.max_image_pixels:
            Image.MAX_IMAGE_PIXELS = self.settings.max_image_pixels

        if self.settings.ffmpeg_path:
            AudioSegment.converter = self.settings.ffmpeg_path

        self._executor = ThreadPoolExecutor(
            max_workers=max(1, self.settings.concurrency),
            thread_name_prefix="codec",
        )
        logger.info(
            f"Codec runtime started (workers={self.settings.concurrency}, "
            f"pymupdf={fitz.version[0]}, pillow={PIL.__version__})"
        )

    def shutdown(self) -> None:
        """Stop the worker pool and release cached codec resources."""
        if not self.started:
            return

        self._executor.shutdown(wait=True)
        self._executor = None
        fitz.TOOLS.store_shrink(100)
        logger.info("Codec runtime stopped")

    async def run(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run a blocking callable on the worker pool.

        Raises:
            RuntimeError: If the runtime has not been started
        """
        if not self.started:
            raise RuntimeError("Codec runtime is not started")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args, **kwargs))


@asynccontextmanager
async def lifespan_codec_runtime(runtime: CodecRuntime):
    """
    Context manager for codec runtime lifecycle management.

    Use this in FastAPI lifespan events to ensure the runtime is started once
    and shut down on exit.
    """
    runtime.startup()
    try:
        yield runtime
    finally:
        runtime.shutdown()
