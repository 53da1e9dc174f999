"""
Screener Service - Real-time dual-timeframe screening

Flow:
- Feed delivers closed candles per (pair, timeframe)
- CandleValidator rejects malformed / out-of-order candles
- ScreenerEngine updates indicators, scores, aligns, emits
- Periodic cleanup evicts stale aligner entries (inactive pairs)

Feed disconnects are retried with bounded exponential backoff; indicator
state survives reconnects (a gap in candles never resets indicators).

The candle transport and the scorer are supplied by the embedding
application:

    service = ScreenerService.from_settings(feed=my_feed, scorer=my_scorer)
    await service.start()
"""

import asyncio
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config.loader import ScreenerConfig
from config.settings import Settings, get_settings
from core.interfaces.emitter import BaseSignalEmitter
from core.interfaces.market_data import BaseCandleFeed, FeedConnectionError
from core.interfaces.scoring import BaseSignalScorer
from core.models.market_data import Candle
from core.validators.market_data import CandleValidator
from services.screener.aligner import TimeframeAligner, now_ms
from services.screener.emitter import create_emitter
from services.screener.engine import ScreenerEngine

logger = logging.getLogger(__name__)

_fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """
    Console (stdout) + rotating error log

    Args:
        settings: Source of LOG_LEVEL / LOG_DIR (default: get_settings())
    """
    settings = settings or get_settings()
    Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(settings.LOG_LEVEL)
    console.setFormatter(logging.Formatter(_fmt))

    error_file = RotatingFileHandler(
        settings.ERROR_LOG_FILE,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3,
    )
    error_file.setLevel(logging.ERROR)
    error_file.setFormatter(logging.Formatter(_fmt))

    logging.basicConfig(level=settings.LOG_LEVEL, handlers=[console, error_file], force=True)


class ScreenerService:
    """
    Screener Service - feed wiring, cleanup timer, reconnect, shutdown

    Runs on a single event loop: candle callbacks are synchronous, so the
    cleanup task never interleaves with an aligner update.
    """

    def __init__(
        self,
        config: ScreenerConfig,
        feed: BaseCandleFeed,
        scorer: BaseSignalScorer,
        emitter: BaseSignalEmitter | None = None,
        clock=now_ms,
    ):
        """
        Initialize service

        Args:
            config: Frozen screener config
            feed: Candle transport
            scorer: Readings bundle → ScoreResult
            emitter: Signal sink (default: built from config.output)
            clock: Epoch-ms clock for the aligner
        """
        self.config = config
        self.feed = feed
        self.running = False
        self._stopped = False
        self._cleanup_task: asyncio.Task | None = None

        # Initialize components
        self.aligner = TimeframeAligner(clock=clock)
        self.engine = ScreenerEngine(config, scorer, aligner=self.aligner)
        self.validator = CandleValidator()

        # Fail fast on bad indicator config, before opening sinks or touching the feed
        self.engine.register_pairs()
        self.emitter = emitter if emitter is not None else create_emitter(config.output)
        self.engine.emitter = self.emitter
        self.feed.on_candle(self.handle_candle)

    @classmethod
    def from_settings(
        cls,
        feed: BaseCandleFeed,
        scorer: BaseSignalScorer,
        settings: Settings | None = None,
        emitter: BaseSignalEmitter | None = None,
    ) -> "ScreenerService":
        """Build a service from screener.yaml (via Settings)"""
        settings = settings or get_settings()
        return cls(settings.SCREENER, feed, scorer, emitter=emitter)

    def handle_candle(self, pair: str, timeframe: str, candle: Candle) -> None:
        """
        Feed callback: validate, then run the engine

        Errors are logged per candle; one bad candle never stops the feed.
        """
        if not self.running:
            return

        is_valid, error = self.validator.validate_candle(pair, timeframe, candle)
        if not is_valid:
            logger.warning(f"Rejected candle {pair}/{timeframe}: {error}")
            return

        try:
            self.engine.on_candle(pair, timeframe, candle)
        except Exception as e:
            logger.error(f"Failed to process {pair}/{timeframe} candle: {e}", exc_info=True)

    def reconnect_delay(self, attempt: int) -> float:
        """
        Backoff before reconnect attempt N (1-based), in seconds

        reconnect_delay_ms × 2^(N-1), capped at max_reconnect_delay_ms.
        """
        feed_config = self.config.feed
        delay_ms = feed_config.reconnect_delay_ms * (2 ** (attempt - 1))
        return min(delay_ms, feed_config.max_reconnect_delay_ms) / 1000

    def _subscribe_all(self) -> None:
        for pair in self.config.pairs:
            self.feed.subscribe(pair, self.config.timeframes.primary)
            self.feed.subscribe(pair, self.config.timeframes.secondary)

    async def _run_feed(self) -> None:
        """
        Connect, subscribe and deliver until a clean stop

        Raises:
            FeedConnectionError: When reconnect attempts are exhausted
        """
        max_attempts = self.config.feed.max_reconnect_attempts
        attempt = 0

        while self.running:
            try:
                await self.feed.connect()
                if not self.running:
                    # stop() ran while connecting
                    await self.feed.stop()
                    return

                self._subscribe_all()
                attempt = 0
                logger.info(f"✅ Feed connected: {len(self.feed.subscriptions)} subscriptions")

                await self.feed.start()
                # Clean return: end of stream or stop()
                return

            except Exception as e:
                if not self.running:
                    return

                attempt += 1
                if max_attempts and attempt > max_attempts:
                    raise FeedConnectionError(
                        f"Feed reconnect failed after {max_attempts} attempts: {e}"
                    ) from e

                delay = self.reconnect_delay(attempt)
                logger.error(f"✗ Feed connection error: {e}")
                logger.info(f"Reconnecting in {delay:.1f}s (attempt {attempt})...")
                await asyncio.sleep(delay)

    async def _cleanup_loop(self) -> None:
        """Evict stale aligner entries every cleanup_interval_ms"""
        alignment = self.config.alignment
        interval = alignment.cleanup_interval_ms / 1000

        while self.running:
            await asyncio.sleep(interval)
            removed = self.aligner.cleanup(alignment.cleanup_max_age_ms)
            if removed:
                logger.info(f"🧹 Cleanup removed {removed} stale aligner entries")

    async def start(self) -> None:
        """Run until the feed ends, stop() is called, or reconnects are exhausted"""
        timeframes = self.config.timeframes

        logger.info("=" * 60)
        logger.info("Screener Service started")
        logger.info("=" * 60)
        logger.info(f"  Pairs: {', '.join(self.config.pairs)}")
        logger.info(f"  Timeframes: {timeframes.primary} (primary) / {timeframes.secondary}")
        logger.info(
            f"  Indicators: {', '.join(self.config.indicators.enabled_indicators())}"
        )
        logger.info(f"  Min confidence: {self.config.screening.min_confidence}")
        logger.info("=" * 60)

        self.running = True
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

        try:
            await self._run_feed()
        except FeedConnectionError as e:
            logger.error(f"❌ Fatal feed error: {e}")
            raise
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Graceful shutdown (idempotent)"""
        if self._stopped:
            return
        self._stopped = True

        logger.info("🛑 Stopping Screener Service...")
        self.running = False

        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass

        try:
            await self.feed.stop()
        except Exception as e:
            logger.error(f"Failed to stop feed: {e}")

        self.emitter.close()

        stats = self.engine.get_stats()
        logger.info(
            f"📊 Candles: {stats['candles_processed']}, "
            f"signals: {stats['signals_generated']}, "
            f"aligned: {stats['aligned_signals']}, "
            f"runtime: {stats['runtime_seconds']:.0f}s"
        )
        logger.info(f"📊 Validation: {self.validator.get_stats()}")
        logger.info("✅ Screener Service stopped")

    def request_stop(self) -> None:
        """Schedule stop() from a signal handler"""
        logger.info("⚠️ Received shutdown signal")
        asyncio.get_running_loop().create_task(self.stop())


def install_signal_handlers(service: ScreenerService) -> None:
    """Route SIGINT/SIGTERM to service.request_stop()"""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, service.request_stop)


async def main(feed: BaseCandleFeed, scorer: BaseSignalScorer) -> None:
    """
    Entry point for embedding applications

    Configures logging from Settings, builds the service from screener.yaml
    and runs it until shutdown.
    """
    settings = get_settings()
    configure_logging(settings)

    service = ScreenerService.from_settings(feed=feed, scorer=scorer, settings=settings)
    install_signal_handlers(service)

    await service.start()
