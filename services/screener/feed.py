"""
In-process candle feed backed by asyncio.Queue

Used by tests and by applications that already own a transport and only
need to hand closed candles to the screener:

    feed = QueueCandleFeed()
    await feed.put("XBTUSDTM", "5m", candle)
    await feed.end_of_stream()
"""

import asyncio
import logging

from core.interfaces.market_data import BaseCandleFeed, FeedConnectionError
from core.models.market_data import Candle

logger = logging.getLogger(__name__)


class QueueCandleFeed(BaseCandleFeed):
    """
    Candle feed reading (pair, timeframe, candle) items from a queue

    A None item marks end-of-stream: start() returns normally.
    """

    def __init__(self, maxsize: int = 0):
        super().__init__()
        self.queue: asyncio.Queue[tuple[str, str, Candle] | None] = asyncio.Queue(maxsize)
        self.connected = False

    async def connect(self) -> None:
        self.connected = True
        logger.info("✓ Queue feed connected")

    async def start(self) -> None:
        """
        Deliver queued candles until end-of-stream or stop()

        Raises:
            FeedConnectionError: If called before connect()
        """
        if not self.connected:
            raise FeedConnectionError("Queue feed not connected")

        self.running = True
        while self.running:
            item = await self.queue.get()
            if item is None:
                logger.info("Queue feed reached end of stream")
                break

            pair, timeframe, candle = item
            try:
                self._notify_candle(pair, timeframe, candle)
            except Exception as e:
                logger.error(f"Error processing candle {pair}/{timeframe}: {e}", exc_info=True)
                continue

        self.running = False

    async def stop(self) -> None:
        """Stop delivering; wakes a start() blocked on an empty queue"""
        self.running = False
        self.connected = False
        try:
            self.queue.put_nowait(None)
        except asyncio.QueueFull:
            # start() sees running=False after its next item
            pass
        logger.info("Queue feed stopping...")

    async def put(self, pair: str, timeframe: str, candle: Candle) -> None:
        await self.queue.put((pair, timeframe, candle))

    def put_nowait(self, pair: str, timeframe: str, candle: Candle) -> None:
        self.queue.put_nowait((pair, timeframe, candle))

    async def end_of_stream(self) -> None:
        await self.queue.put(None)
