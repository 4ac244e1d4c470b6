"""Barcode decoding with pyzbar (zbar)."""

import asyncio
import importlib
import logging
from dataclasses import dataclass, field
from types import ModuleType

import cv2
import numpy as np

from checkin_tracker.domain.scanning import DecodeEngineError

logger = logging.getLogger(__name__)

_COLOR_NDIM = 3


@dataclass
class PyzbarDecoder:
    """Decodes the first barcode found in a BGR or grayscale frame."""

    zbar: ModuleType
    symbols: list[object] = field(default_factory=list)

    async def decode(self, frame: np.ndarray) -> str | None:
        """Decode in a worker thread; None when nothing readable is found."""
        return await asyncio.to_thread(self._decode_blocking, frame)

    def _decode_blocking(self, frame: np.ndarray) -> str | None:
        gray = (
            cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
            if frame.ndim == _COLOR_NDIM
            else frame
        )
        for result in self.zbar.decode(gray, symbols=self.symbols or None):
            text = result.data.decode("utf-8", errors="replace").strip()
            if text:
                return text
        return None


async def load_pyzbar_decoder(symbologies: list[str]) -> PyzbarDecoder:
    """Import pyzbar and its native zbar library on first use.

    The native library is resolved at import time; a missing library is
    reported as DecodeEngineError.
    """
    try:
        zbar = await asyncio.to_thread(importlib.import_module, "pyzbar.pyzbar")
    except (ImportError, OSError) as exc:
        raise DecodeEngineError(f"zbar library unavailable: {exc}") from exc
    symbols = []
    for name in symbologies:
        symbol = getattr(zbar.ZBarSymbol, name, None)
        if symbol is None:
            raise DecodeEngineError(f"Unknown barcode symbology: {name}")
        symbols.append(symbol)
    logger.info("Barcode decoder ready", extra={"symbologies": symbologies})
    return PyzbarDecoder(zbar=zbar, symbols=symbols)
