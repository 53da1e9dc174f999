"""
Abstract interface for signal output sinks (console, file, socket, ...)
"""

from abc import ABC, abstractmethod

from core.models.signals import AlignedSignal, Signal


class BaseSignalEmitter(ABC):
    """
    Signal sink interface

    The engine hands every non-NEUTRAL Signal and every accepted
    AlignedSignal to the emitter. Emitter failures never affect the engine.

    Implementations:
    - LoggingSignalEmitter, JsonlSignalEmitter, CompositeSignalEmitter
      (services/screener/emitter.py)
    """

    @abstractmethod
    def emit_signal(self, signal: Signal) -> None:
        """Output a single-timeframe signal"""

    @abstractmethod
    def emit_aligned(self, aligned: AlignedSignal) -> None:
        """Output a primary/secondary aligned signal"""

    def close(self) -> None:
        """Release any resources (files, sockets). Default: nothing to release"""
