# -*- coding: utf-8 -*-
"""
    配置管理工具
    ~~~~~~~~~~~~~~~~~~
    SQLite KeyValue 存储，Value 以 JSON 保存

    Log:
        2026-09-30 0.3.0 Me2sY  Value 改用 JSON 编码，支持指定数据库路径

        2026-09-14 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.3.0'

__all__ = [
    'KeyValue', 'KVManager',
    'kv_global'
]

from dataclasses import dataclass
from functools import lru_cache
import json
import pathlib
import sqlite3
from typing import Any, Tuple

from scrcpyhub.utils.params import Param


@dataclass
class KeyValue:
    """
        值记录
    """

    key: str
    value: Any
    info: str = ''

    @classmethod
    def _encode(cls, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False)

    @classmethod
    def _decode(cls, data: str | bytes) -> Any:
        return json.loads(data)

    @classmethod
    def loads(cls, record: Tuple[str, str, str]) -> 'KeyValue':
        return cls(record[0], cls._decode(record[1]), record[2])

    def dumps(self) -> Tuple[str, str, str]:
        return self.key, self._encode(self.value), self.info


class KVManager:
    """
        使用 SQLite3 进行 KeyValue 管理
        每个 KVManager 对应一个数据库文件中的一张表
    """

    def __init__(self, table_name: str, db_path: pathlib.Path | str | None = None):
        """
            独立KV表
        :param table_name:
        :param db_path: 默认 Param.PATH_CONFIGS / kvm_<table_name>.db
        """
        self.table_name = ('kvm_' + str(table_name)[:60]) if table_name else "kvm_unknown"

        if db_path is None:
            db_path = Param.PATH_CONFIGS / f"{self.table_name}.db"

        self.db_path = pathlib.Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._run_check()

    def __repr__(self):
        return f"KVManager > {self.table_name}@{self.db_path}"

    def get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _run_check(self):
        """
            初始化检查
        :return:
        """
        with self.get_connection() as db:
            db.execute(
                f"""
                    CREATE TABLE IF NOT EXISTS
                    {self.table_name} (
                        k    TEXT not null constraint {self.table_name}_pk primary key,
                        v    TEXT,
                        info TEXT
                    );
                """
            )

    def get(self, key: str, default_value: Any = None) -> Any:
        """
            获取值
        :param key:
        :param default_value: 默认值
        :return:
        """
        db = self.get_connection()
        try:
            values = db.execute(f"SELECT * FROM {self.table_name} WHERE k = ?", (key,)).fetchone()
        finally:
            db.close()

        if values is None:
            return default_value
        else:
            return KeyValue.loads(values).value

    def set(self, key: str, value: Any, info: str = '') -> None:
        """
            设置值
        :param key:
        :param value:
        :param info:
        :return:
        """
        with self.get_connection() as db:
            db.execute(f"INSERT OR REPLACE INTO {self.table_name} VALUES(?, ?, ?)", KeyValue(key, value, info).dumps())

    def delete(self, key: str) -> None:
        with self.get_connection() as db:
            db.execute(f"DELETE FROM {self.table_name} WHERE k = ?", (key,))


@lru_cache(maxsize=1)
def kv_global() -> KVManager:
    """
        全局 KV，首次使用时创建
    :return:
    """
    return KVManager('global')
