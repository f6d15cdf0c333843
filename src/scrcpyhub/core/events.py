# -*- coding: utf-8 -*-
"""
    Events
    ~~~~~~~~~~~~~~~~~~
    collaborator 推送事件及订阅

    Log:
        2026-10-20 0.1.1 Me2sY
            1. 新增 DownloadFailedEvent，下载失败经队列结束下载状态
            2. percent 非法时视为未知事件

        2026-09-17 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.1.1'

__all__ = [
    'SessionStatus',
    'DownloadingEvent', 'DownloadProgressEvent', 'DownloadCompleteEvent', 'DownloadFailedEvent',
    'StatusEvent', 'status_event_from_payload',
    'EventSource'
]

from dataclasses import dataclass
from typing import Callable, List, Union


@dataclass(frozen=True)
class SessionStatus:
    device: str
    running: bool


@dataclass(frozen=True)
class DownloadingEvent:
    message: str


@dataclass(frozen=True)
class DownloadProgressEvent:
    percent: int


@dataclass(frozen=True)
class DownloadCompleteEvent:
    message: str


@dataclass(frozen=True)
class DownloadFailedEvent:
    message: str


StatusEvent = Union[
    SessionStatus, DownloadingEvent, DownloadProgressEvent, DownloadCompleteEvent, DownloadFailedEvent
]


def status_event_from_payload(payload: dict) -> StatusEvent | None:
    """
        {device, running} | {type: downloading|download-progress|download-complete|download-error, ...}
    :param payload:
    :return: None for payloads that carry neither shape
    """
    if payload.get('device') and isinstance(payload.get('running'), bool):
        return SessionStatus(payload['device'], payload['running'])

    _type = payload.get('type')
    if _type == 'downloading':
        return DownloadingEvent(payload.get('message', ''))
    elif _type == 'download-progress':
        try:
            return DownloadProgressEvent(int(payload.get('percent', 0)))
        except (TypeError, ValueError):
            return None
    elif _type == 'download-complete':
        return DownloadCompleteEvent(payload.get('message', ''))
    elif _type == 'download-error':
        return DownloadFailedEvent(payload.get('message', ''))

    return None


class EventSource:
    """
        In-process listeners, fired in registration order
    """

    def __init__(self):
        self._handlers: List[Callable] = []

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def __len__(self):
        return len(self._handlers)

    def add(self, handler: Callable) -> 'EventSource':
        self._handlers.append(handler)
        return self

    def remove(self, handler: Callable) -> 'EventSource':
        self._handlers.remove(handler)
        return self

    def fire(self, *args, **kwargs):
        for handler in list(self._handlers):
            handler(*args, **kwargs)
