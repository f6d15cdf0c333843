# -*- coding: utf-8 -*-
"""
    HistoryStore
    ~~~~~~~~~~~~~~~~~~
    最近连接记录

    Log:
        2026-10-20 0.1.1 Me2sY  加载时去重

        2026-09-15 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.1.1'

__all__ = [
    'is_endpoint',
    'HistoryStore'
]

from typing import List

from loguru import logger

from scrcpyhub.utils import KVManager


def is_endpoint(device_id: str) -> bool:
    """
        host:port
    :param device_id:
    :return:
    """
    return isinstance(device_id, str) and ':' in device_id


class HistoryStore:
    """
        MRU list of network endpoints
    """

    KEY = 'history'
    N_RECENT_RECORDS = 10

    def __init__(self, kvm: KVManager):
        self.kvm = kvm

        records = kvm.get(self.KEY, [])
        if not isinstance(records, list):
            logger.warning(f"Failed to parse history => {records!r}")
            records = []

        records = list(dict.fromkeys(_ for _ in records if is_endpoint(_)))
        self._records: List[str] = records[:self.N_RECENT_RECORDS]

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    @property
    def records(self) -> List[str]:
        return list(self._records)

    def add(self, endpoint: str) -> bool:
        """
            更新最近连接记录
        :param endpoint:
        :return: False if endpoint is not host:port
        """
        if not is_endpoint(endpoint):
            return False

        try:
            self._records.remove(endpoint)
        except ValueError:
            pass

        self._records.insert(0, endpoint)
        self._records = self._records[:self.N_RECENT_RECORDS]
        self.kvm.set(self.KEY, self._records)
        return True

    def clear(self):
        self._records = []
        self.kvm.delete(self.KEY)
