"""Lazily loaded, shareable sub-word encoder.

Provides:
    - EncoderContext: explicit encoder holder with warm_up/reset/is_ready
    - get_default_encoder_context(): process-wide shared context
    - reset_default_encoder_context(): drop the shared context

Loading a tiktoken encoding may download and parse a BPE table, so the load
runs in a worker thread and is memoized as a single asyncio task. Every
concurrent first-time caller awaits that same task. Once loaded, encoding is
synchronous.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

import tiktoken

from agent_context.core.errors import EncoderLoadError, EncoderNotReadyError

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "o200k_base"


class EncoderContext:
    """Holds one lazily loaded encoder.

    Attributes:
        encoding_name: Name passed to the loader (a tiktoken encoding name)

    Example:
        context = EncoderContext()
        await context.warm_up()
        tokens = context.encode("Hello, world!")
    """

    def __init__(
        self,
        encoding_name: str = DEFAULT_ENCODING,
        *,
        loader: Optional[Callable[[str], Any]] = None,
    ):
        """Initialize the context without loading anything.

        Args:
            encoding_name: Encoding to load on first use
            loader: Callable returning an object with ``encode(text)``.
                Defaults to ``tiktoken.get_encoding``.
        """
        self.encoding_name = encoding_name
        self._loader = loader or tiktoken.get_encoding
        self._encoder: Any = None
        self._pending: Optional[asyncio.Task] = None
        self._generation = 0
        self.load_count = 0

    def is_ready(self) -> bool:
        """Whether an encoder is currently loaded."""
        return self._encoder is not None

    @property
    def encoder(self) -> Any:
        if self._encoder is None:
            raise EncoderNotReadyError(
                f"Encoder '{self.encoding_name}' is not loaded; await warm_up() first",
                encoding_name=self.encoding_name,
            )
        return self._encoder

    async def warm_up(self) -> Any:
        """Load the encoder, or join the load already in flight.

        Returns:
            The loaded encoder

        Raises:
            EncoderLoadError: If this load attempt failed. Every caller
                awaiting the same attempt receives the error; the next call
                starts a fresh load.
        """
        if self._encoder is not None:
            return self._encoder
        pending = self._pending
        if pending is not None and (
            pending.done() or pending.get_loop() is not asyncio.get_running_loop()
        ):
            # Abandoned attempt: cancelled, or left behind by a closed event loop.
            logger.debug(f"Discarding abandoned load of encoder '{self.encoding_name}'")
            self._pending = None
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load(self._generation))
        # shield: one caller giving up must not cancel the load for the others
        return await asyncio.shield(self._pending)

    async def _load(self, generation: int) -> Any:
        self.load_count += 1
        logger.info(f"Loading encoder '{self.encoding_name}'")
        try:
            encoder = await asyncio.to_thread(self._loader, self.encoding_name)
        except Exception as exc:
            logger.error(f"Failed to load encoder '{self.encoding_name}': {exc}")
            raise EncoderLoadError(
                f"Failed to load encoder '{self.encoding_name}': {exc}",
                encoding_name=self.encoding_name,
            ) from exc
        finally:
            # Every exit, cancellation included, releases the attempt.
            if generation == self._generation:
                self._pending = None

        if generation == self._generation:
            self._encoder = encoder
            logger.debug(f"Encoder '{self.encoding_name}' ready")
        return encoder

    def reset(self) -> None:
        """Forget the loaded encoder and any pending load.

        A load still in flight completes for its own awaiters but is not
        installed; the next warm_up() starts over.
        """
        self._encoder = None
        self._pending = None
        self._generation += 1

    def encode(self, text: str) -> int:
        """Number of tokens in ``text`` (0 for empty text)."""
        if not text:
            return 0
        # Special-token strings in user content are counted as plain text.
        return len(self.encoder.encode(text, disallowed_special=()))


_default_context: Optional[EncoderContext] = None


def get_default_encoder_context() -> EncoderContext:
    """Get the process-wide shared encoder context.

    The encoding name comes from the global configuration on first use.
    """
    global _default_context
    if _default_context is None:
        from agent_context.config import get_config

        _default_context = EncoderContext(get_config().encoding_name)
    return _default_context


def reset_default_encoder_context() -> None:
    """Drop the process-wide shared encoder context."""
    global _default_context
    if _default_context is not None:
        _default_context.reset()
    _default_context = None
