"""
Signal emitters - console (logging), JSON-lines file, fan-out

Output sinks are side effects only: the engine never depends on their
success, and a failing sink never blocks the others.
"""

import json
import logging
from pathlib import Path

from core.interfaces.emitter import BaseSignalEmitter
from core.models.signals import AlignedSignal, Signal

logger = logging.getLogger(__name__)


class LoggingSignalEmitter(BaseSignalEmitter):
    """Console output through the `screener.signals` logger"""

    def __init__(self, signal_logger: logging.Logger | None = None):
        self.logger = signal_logger or logging.getLogger("screener.signals")

    def emit_signal(self, signal: Signal) -> None:
        strength = f" ({signal.strength})" if signal.strength else ""
        self.logger.info(
            f"[{signal.timestamp}] {signal.pair} ({signal.timeframe}) - "
            f"{signal.signal.value}{strength} | Score: {signal.score:.2f}"
        )

    def emit_aligned(self, aligned: AlignedSignal) -> None:
        self.logger.info(
            f"🎯 ALIGNED {aligned.pair} {aligned.direction} | "
            f"Confidence: {aligned.confidence:.1f} | "
            f"{aligned.primary.signal.timeframe}: {aligned.primary.signal.signal.value}, "
            f"{aligned.secondary.signal.timeframe}: {aligned.secondary.signal.signal.value}"
        )


class JsonlSignalEmitter(BaseSignalEmitter):
    """
    Append-only JSON lines file

    One object per line: {"type": "signal" | "aligned", ...payload}
    """

    def __init__(self, file_path: str):
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.file_path, "a", encoding="utf-8")

    def emit_signal(self, signal: Signal) -> None:
        self._write({"type": "signal", **signal.to_dict()})

    def emit_aligned(self, aligned: AlignedSignal) -> None:
        self._write({"type": "aligned", **aligned.to_dict()})

    def _write(self, record: dict) -> None:
        if self._file.closed:
            logger.warning(f"Dropping signal, {self.file_path} already closed")
            return
        self._file.write(json.dumps(record) + "\n")
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class CompositeSignalEmitter(BaseSignalEmitter):
    """Fan out to several emitters; a failing emitter is logged and skipped"""

    def __init__(self, emitters: list[BaseSignalEmitter]):
        self.emitters = list(emitters)

    def emit_signal(self, signal: Signal) -> None:
        for emitter in self.emitters:
            try:
                emitter.emit_signal(signal)
            except Exception as e:
                logger.error(f"✗ {type(emitter).__name__} failed on signal: {e}", exc_info=True)

    def emit_aligned(self, aligned: AlignedSignal) -> None:
        for emitter in self.emitters:
            try:
                emitter.emit_aligned(aligned)
            except Exception as e:
                logger.error(
                    f"✗ {type(emitter).__name__} failed on aligned signal: {e}", exc_info=True
                )

    def close(self) -> None:
        for emitter in self.emitters:
            try:
                emitter.close()
            except Exception as e:
                logger.error(f"✗ Failed to close {type(emitter).__name__}: {e}")


def create_emitter(output_config) -> CompositeSignalEmitter:
    """
    Build the emitter described by OutputConfig

    Args:
        output_config: config.loader.OutputConfig

    Returns:
        CompositeSignalEmitter with the enabled sinks (possibly none)
    """
    emitters: list[BaseSignalEmitter] = []
    if output_config.console:
        emitters.append(LoggingSignalEmitter())
    if output_config.file:
        emitters.append(JsonlSignalEmitter(output_config.file_path))
    return CompositeSignalEmitter(emitters)
