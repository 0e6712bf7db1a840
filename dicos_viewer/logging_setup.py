# -*- coding: utf-8 -*-
"""
日志配置。
- JsonFormatter：每条记录输出一行 JSON（time / level / msg / 附加字段）
- ContextFilter + append_context：基于 contextvars 的上下文字段，自动附加到每条记录
- rolling_file_handler：按大小滚动、gzip 压缩的日志文件
核心 Model 不记录日志；加载与 ViewModel 通过 logging.getLogger(__name__) 记录。
"""

import contextlib
import contextvars
import glob
import gzip
import json
import logging
import os
import shutil
import sys
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Dict, Iterator, Optional, TextIO

# 上下文字段，例如 {"git": "abc123"}；用不可变 dict 副本保证各上下文互不影响
_context_attrs: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "dicos_viewer_log_context", default={}
)

# LogRecord 自带属性，不作为附加字段输出
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

ROLLING_MAX_BYTES = 500 * 1024 * 1024
ROLLING_BACKUPS = 10
ROLLING_MAX_AGE_DAYS = 14


def append_context(**attrs) -> contextvars.Token:
    """在当前上下文追加字段，返回可用于 reset_context 的 token。"""
    merged = dict(_context_attrs.get())
    merged.update(attrs)
    return _context_attrs.set(merged)


def reset_context(token: contextvars.Token) -> None:
    _context_attrs.reset(token)


def current_context() -> Dict[str, object]:
    return dict(_context_attrs.get())


@contextlib.contextmanager
def context_scope(**attrs) -> Iterator[None]:
    """with 作用域内追加上下文字段，退出时恢复。"""
    token = append_context(**attrs)
    try:
        yield
    finally:
        reset_context(token)


class ContextFilter(logging.Filter):
    """把上下文字段写入 LogRecord；记录上已有的同名字段（extra=）优先。"""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context_attrs.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """一行一个 JSON 对象。"""

    def __init__(self, source: bool = False):
        super().__init__()
        self._source = source

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if self._source:
            payload["source"] = f"{record.pathname}:{record.lineno}"
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                payload.setdefault(key, value)
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _gzip_namer(name: str) -> str:
    return name + ".gz"


def _gzip_rotator(source: str, dest: str) -> None:
    """压缩刚滚动出去的日志文件，并删除超过保留天数的备份。"""
    with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.remove(source)
    cutoff = time.time() - ROLLING_MAX_AGE_DAYS * 24 * 3600
    for backup in glob.glob(glob.escape(source) + ".*.gz"):
        if os.path.getmtime(backup) < cutoff:
            os.remove(backup)


def rolling_file_handler(path: str) -> RotatingFileHandler:
    """按大小滚动的文件日志：单文件 500 MB，保留 10 个 gzip 备份，备份最多保留 14 天。"""
    handler = RotatingFileHandler(
        path,
        maxBytes=ROLLING_MAX_BYTES,
        backupCount=ROLLING_BACKUPS,
        encoding="utf-8",
    )
    handler.namer = _gzip_namer
    handler.rotator = _gzip_rotator
    return handler


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    source: bool = False,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    配置根 logger：标准输出（JSON 或纯文本）+ 可选滚动文件。
    重复调用会替换之前由本函数安装的 handler。
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_dicos_viewer", False):
            root.removeHandler(handler)
            handler.close()

    if json_format:
        formatter: logging.Formatter = JsonFormatter(source=source)
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    handlers = [logging.StreamHandler(stream if stream is not None else sys.stdout)]
    if log_file:
        handlers.append(rolling_file_handler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(ContextFilter())
        handler._dicos_viewer = True
        root.addHandler(handler)

    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return root
