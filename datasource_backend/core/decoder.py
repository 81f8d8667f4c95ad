"""
Lazy acquisition of the response decoder.

The decoding routine pulls in pandas (and pyarrow for Arrow frames), so its
module is only imported the first time a response has to be decoded. The
import runs in a worker thread and is shared by every query waiting on it.
"""

import asyncio
import importlib
import logging
from typing import Any, Callable

from .. import config

logger = logging.getLogger(__name__)

DecodeFunction = Callable[[Any], Any]


def load_function(path: str) -> DecodeFunction:
    """Import a `module:function` path."""
    module_name, _, attr = path.partition(":")
    if not attr:
        raise ValueError(f"Invalid decoder path {path!r}, expected 'module:function'")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


class LazyDecoder:
    def __init__(self, path: str | None = None):
        self._path = path
        self._decode: DecodeFunction | None = None
        self._lock: asyncio.Lock | None = None

    @property
    def path(self) -> str:
        return self._path or config.DECODER

    async def get(self) -> DecodeFunction:
        if self._decode is not None:
            return self._decode
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._decode is None:
                logger.debug("Loading decoder %s", self.path)
                self._decode = await asyncio.to_thread(load_function, self.path)
        return self._decode

    def reset(self) -> None:
        # the lock stays, a load in progress keeps it
        self._decode = None

    async def decode(self, body: Any) -> Any:
        decode = await self.get()
        return decode(body)


default_decoder = LazyDecoder()
