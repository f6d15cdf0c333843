# -*- coding: utf-8 -*-
"""
    SessionRegistry
    ~~~~~~~~~~~~~~~~~~
    运行中 Session 状态，由 collaborator 推送事件驱动

    Log:
        2026-10-20 0.2.1 Me2sY  DownloadFailedEvent 结束下载状态

        2026-09-25 0.2.0 Me2sY  单消费者队列，严格按到达顺序处理

        2026-09-17 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.2.1'

__all__ = [
    'SessionRegistry'
]

import asyncio
from typing import Awaitable, Callable, Set

from loguru import logger

from scrcpyhub.core.events import (
    SessionStatus, DownloadingEvent, DownloadProgressEvent, DownloadCompleteEvent, DownloadFailedEvent,
    StatusEvent, status_event_from_payload
)


class SessionRegistry:
    """
        Devices with a running scrcpy session

        Entries are only added or removed by SessionStatus events and are
        never filtered by the discovery snapshot.
    """

    def __init__(
            self,
            on_download_complete: Callable[[str], Awaitable] = None,
            on_check_binary: Callable[[], Awaitable] = None,
    ):
        """
        :param on_download_complete: refresh devices, called with the unpack path
        :param on_check_binary: re-check scrcpy availability
        """
        self.on_download_complete = on_download_complete
        self.on_check_binary = on_check_binary

        self.running: Set[str] = set()

        self.is_downloading = False
        self.download_progress = 0
        self.status = ''

        self._queue: asyncio.Queue | None = None
        self._consumer: asyncio.Task | None = None

    def __repr__(self):
        return f"SessionRegistry > running: {sorted(self.running)}"

    def is_running(self, device_id: str) -> bool:
        return device_id in self.running

    @property
    def is_started(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    def start(self):
        if self.is_started:
            return
        self._queue = asyncio.Queue()
        self._consumer = asyncio.create_task(self._consume())

    async def close(self):
        if self._consumer is None:
            return
        self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass
        self._consumer = None
        self._queue = None

    def feed(self, event: StatusEvent | dict):
        """
            Listener for collaborator status events
        :param event: event object or raw {device, running} / {type, ...} payload
        :return:
        """
        if isinstance(event, dict):
            parsed = status_event_from_payload(event)
            if parsed is None:
                logger.warning(f"Unknown status payload => {event}")
                return
            event = parsed

        if self._queue is None:
            raise RuntimeError('SessionRegistry not started')

        self._queue.put_nowait(event)

    async def drain(self):
        """
            等待已入队事件处理完毕
        :return:
        """
        if self._queue is not None:
            await self._queue.join()

    async def _consume(self):
        while True:
            event = await self._queue.get()
            try:
                await self.handle(event)
            except Exception as e:
                logger.exception(f"Status event {event} failed => {e}")
            finally:
                self._queue.task_done()

    async def handle(self, event: StatusEvent):
        if isinstance(event, SessionStatus):
            if event.running:
                self.running.add(event.device)
            else:
                self.running.discard(event.device)
            logger.info(f"Session {event.device} running={event.running}")

        elif isinstance(event, DownloadingEvent):
            self.is_downloading = True
            self.status = event.message

        elif isinstance(event, DownloadProgressEvent):
            self.download_progress = event.percent

        elif isinstance(event, DownloadCompleteEvent):
            self.is_downloading = False
            self.status = 'Download Complete'
            if self.on_download_complete:
                await self.on_download_complete(event.message)
            if self.on_check_binary:
                await self.on_check_binary()

        elif isinstance(event, DownloadFailedEvent):
            self.is_downloading = False
            self.status = f"Download Error: {event.message}"
