# -*- coding: utf-8 -*-
"""
    LogStream
    ~~~~~~~~~~~~~~~~~~
    用户可见日志缓冲区

    Log:
        2026-09-20 0.2.0 Me2sY
            1. 修正窗口大小，append 后严格保留最近 N 条
            2. 新增 export，保存日志报告

        2026-09-14 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.2.0'

__all__ = [
    'LogStream'
]

from collections import deque
import pathlib
from typing import Callable, List

from loguru import logger


class LogStream:
    """
        Bounded append-only log buffer
    """

    DEFAULT_WINDOW = 100

    def __init__(self, window: int = DEFAULT_WINDOW):
        if window < 1:
            raise ValueError('LogStream window must be > 0')

        self.window = window
        self._entries = deque(maxlen=window)
        self._listeners: List[Callable[[str], None]] = []

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self):
        return f"LogStream > {len(self._entries)}/{self.window}"

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def append(self, *entries: str):
        """
            追加日志，超出窗口时丢弃最旧条目
        :param entries:
        :return:
        """
        for entry in entries:
            entry = str(entry)
            self._entries.append(entry)
            logger.debug(entry)
            for listener in self._listeners:
                listener(entry)

    def extend_lines(self, text: str):
        """
            Append every line of a block of collaborator output
        :param text:
        :return:
        """
        self.append(*text.split('\n'))

    def clear(self):
        self._entries.clear()

    def subscribe(self, listener: Callable[[str], None]):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[str], None]):
        self._listeners.remove(listener)

    def export(self, path: pathlib.Path | str) -> pathlib.Path:
        """
            保存日志报告
        :param path:
        :return:
        """
        path = pathlib.Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text('\n'.join(self._entries), encoding='utf-8')
        logger.info(f"Log report saved to {path}")
        return path
