"""
Abstract base class for candle feeds

Transport-agnostic interface for anything that delivers closed candles
per (pair, timeframe): exchange WebSockets, message queues, in-process queues.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from core.models.market_data import Candle

CandleCallback = Callable[[str, str, Candle], None]


class FeedConnectionError(ConnectionError):
    """Raised when a feed cannot (re)connect"""


class BaseCandleFeed(ABC):
    """
    Abstract base class for candle feeds

    Delivery guarantee:
    - Candles for one (pair, timeframe) are delivered in arrival order
    - A callback is never invoked concurrently with itself

    Callbacks are plain (synchronous) functions so a candle is processed in
    full before the next one is read.

    Example:
        >>> feed = QueueCandleFeed()
        >>> feed.on_candle(engine.on_candle)
        >>> await feed.connect()
        >>> feed.subscribe("XBTUSDTM", "5m")
        >>> await feed.start()
    """

    def __init__(self):
        self.callbacks: list[CandleCallback] = []
        self.subscriptions: set[tuple[str, str]] = set()
        self.running = False

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish the connection

        Raises:
            FeedConnectionError: If connection fails
        """

    @abstractmethod
    async def start(self) -> None:
        """
        Deliver candles until stop() is called or the connection drops

        Returns normally on a clean stop; raises FeedConnectionError (or the
        transport's error) when the connection is lost.
        """

    @abstractmethod
    async def stop(self) -> None:
        """Stop delivering and release the upstream subscription"""

    def subscribe(self, pair: str, timeframe: str) -> None:
        """Subscribe to candles for one (pair, timeframe)"""
        self.subscriptions.add((pair, timeframe))

    def unsubscribe(self, pair: str, timeframe: str) -> None:
        """Drop a subscription (no-op if absent)"""
        self.subscriptions.discard((pair, timeframe))

    def on_candle(self, callback: CandleCallback) -> None:
        """Register a candle callback: callback(pair, timeframe, candle)"""
        self.callbacks.append(callback)

    def _notify_candle(self, pair: str, timeframe: str, candle: Candle) -> None:
        """Dispatch one candle to every callback, in registration order"""
        if (pair, timeframe) not in self.subscriptions:
            return
        for callback in self.callbacks:
            callback(pair, timeframe, candle)
