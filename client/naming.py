"""文件重命名

上传前把用户的文件名换成确定性的新名字，避免重名，
也避免把原始文件名直接发到服务端。
"""
import time
from pathlib import Path
from typing import Callable

from .config import ClientConfig
from .errors import InvalidFileType, NoFileSelected
from .storage import ModStore, NameMapping


def validate_extension(filename: str | None, allowed_extension: str = ".jar") -> str:
    """检查文件后缀，返回原文件名"""
    if not filename:
        raise NoFileSelected("no file selected")
    if not filename.lower().endswith(allowed_extension.lower()):
        raise InvalidFileType(filename, allowed_extension)
    return filename


def _extension(original_name: str) -> str:
    return Path(original_name).suffix.lstrip(".")


class CounterRenamer:
    """modN.<ext>，N 为持久化的自增计数"""

    def __init__(self, store: ModStore):
        self.store = store

    def next_name(self, original_name: str) -> str:
        counter = self.store.get_counter() + 1
        self.store.set_counter(counter)
        return f"mod{counter}.{_extension(original_name)}"


class TimestampRenamer:
    """mod<毫秒时间戳>.<ext>"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock

    def next_name(self, original_name: str) -> str:
        stamp = int(self.clock() * 1000)
        return f"mod{stamp}.{_extension(original_name)}"


def make_renamer(config: ClientConfig, store: ModStore):
    """根据配置创建重命名策略"""
    if config.rename_strategy == "timestamp":
        return TimestampRenamer()
    return CounterRenamer(store)


def rename(original_name: str, renamer, mapping: NameMapping) -> str:
    """生成新名字并记录映射"""
    new_name = renamer.next_name(original_name)
    mapping.record(new_name, original_name)
    return new_name
