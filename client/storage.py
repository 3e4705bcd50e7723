"""本地持久化端口

保存两样东西：自增计数器（modCounter）和文件名映射（modMappings，
分配名 -> 原始名）。ModStore 是端口，MemoryStore 用于测试，
SqliteStore 落盘到本地 SQLite 文件，跨会话保留。
"""
import json
from typing import Protocol

import database


COUNTER_KEY = "modCounter"
MAPPING_KEY = "modMappings"


class ModStore(Protocol):
    """计数器 + 映射存储"""

    def get_counter(self) -> int: ...

    def set_counter(self, value: int) -> None: ...

    def get_mapping(self) -> dict[str, str]: ...

    def set_mapping(self, mapping: dict[str, str]) -> None: ...


class MemoryStore:
    """内存实现"""

    def __init__(self, counter: int = 0, mapping: dict[str, str] | None = None):
        self._counter = counter
        self._mapping = dict(mapping or {})

    def get_counter(self) -> int:
        return self._counter

    def set_counter(self, value: int) -> None:
        self._counter = value

    def get_mapping(self) -> dict[str, str]:
        return dict(self._mapping)

    def set_mapping(self, mapping: dict[str, str]) -> None:
        self._mapping = dict(mapping)


class SqliteStore:
    """SQLite 实现，值以字符串保存在 kv_store 表"""

    def __init__(self, db_path: str):
        self.db_path = db_path
        database.init_database(db_path)

    def get_counter(self) -> int:
        raw = database.kv_get(COUNTER_KEY, db_path=self.db_path)
        return int(raw or "0")

    def set_counter(self, value: int) -> None:
        database.kv_set(COUNTER_KEY, str(value), db_path=self.db_path)

    def get_mapping(self) -> dict[str, str]:
        raw = database.kv_get(MAPPING_KEY, db_path=self.db_path)
        return json.loads(raw or "{}")

    def set_mapping(self, mapping: dict[str, str]) -> None:
        database.kv_set(MAPPING_KEY, json.dumps(mapping), db_path=self.db_path)


class NameMapping:
    """分配名 -> 原始名

    只增不删；同一个分配名再次写入会覆盖原值。
    """

    def __init__(self, store: ModStore):
        self.store = store

    def record(self, assigned_name: str, original_name: str):
        # 读-改-写，不是原子操作（仅多进程同时写入时会丢更新）
        mapping = self.store.get_mapping()
        mapping[assigned_name] = original_name
        self.store.set_mapping(mapping)

    def lookup(self, assigned_name: str) -> str | None:
        return self.store.get_mapping().get(assigned_name)

    def __len__(self) -> int:
        return len(self.store.get_mapping())

    def __contains__(self, assigned_name: str) -> bool:
        return assigned_name in self.store.get_mapping()
