import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 8


class Message:
    """A request for a search provider actor.

    ``reply`` is set by :meth:`Mailbox.request` and resolved by the actor once
    the message is processed.
    """

    reply: Optional[asyncio.Future] = None

    def resolve(self, result) -> None:
        if self.reply is not None and not self.reply.done():
            self.reply.set_result(result)

    def fail(self, error: BaseException) -> None:
        if self.reply is not None and not self.reply.done():
            self.reply.set_exception(error)


@dataclass
class Refresh(Message):
    pass


@dataclass
class InitialSearch(Message):
    terms: Sequence[str]


@dataclass
class SubsearchResult(Message):
    previous: Sequence[str]
    terms: Sequence[str]


@dataclass
class ResultMetadata(Message):
    ids: Sequence[str]


@dataclass
class Activate(Message):
    id: str


class Mailbox:
    """Bounded FIFO channel feeding exactly one actor.

    Senders suspend while the mailbox is full; nothing is ever dropped.
    """

    def __init__(self, application_id: str, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Mailbox capacity must be positive, got {capacity}")
        self.application_id = application_id
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def send(self, message: Message) -> None:
        if self._queue.full():
            logger.debug(
                "Mailbox of app %s is full, waiting for a free slot", self.application_id
            )
        await self._queue.put(message)

    async def receive(self) -> Message:
        message = await self._queue.get()
        self._queue.task_done()
        return message

    async def request(self, message: Message):
        """Send ``message`` and wait for the actor's reply."""
        message.reply = asyncio.get_running_loop().create_future()
        await self.send(message)
        return await message.reply
