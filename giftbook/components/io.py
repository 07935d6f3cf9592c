"""
文件路径：giftbook/components/io.py

说明：文件与路径相关的通用能力，以及字体/图片资源的默认字节提供者。
"""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse
from urllib.request import urlopen

from ..models import ResourceSource
from ..variables import (
    PATH_LOGS_DIR,
    PATH_OUTPUT_DIR,
    CONST_ENCODING,
    CONST_FETCH_TIMEOUT_S,
    CONST_OUTPUT_PREFIX_DEFAULT,
    CONST_OUTPUT_SUFFIX,
    ERR_FILE_NOT_FOUND,
    ERR_PATH_NOT_WRITABLE,
    ERR_RESOURCE_FETCH_FAILED,
)


_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\s]+')


def fetch_bytes(source: ResourceSource) -> bytes:
    """默认资源提供者：把字节 / 本地路径 / file:// / http(s):// 来源读成字节。

    失败时抛出异常，由调用方（文档装配器）捕获并回退。
    """
    if source is None:
        raise ValueError(f"[{ERR_RESOURCE_FETCH_FAILED}] 资源来源为空")
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, Path):
        return source.read_bytes()

    text = str(source).strip()
    parsed = urlparse(text)
    if parsed.scheme in ("http", "https"):
        with urlopen(text, timeout=CONST_FETCH_TIMEOUT_S) as resp:  # noqa: S310
            return resp.read()
    if parsed.scheme == "file":
        return Path(unquote(parsed.path)).read_bytes()
    return Path(text).expanduser().read_bytes()


class FileHandler:
    """文件与路径相关的通用处理器。"""

    @staticmethod
    def ensure_project_dirs() -> None:
        """确保项目运行所需目录存在：logs/output。"""
        for d in (PATH_LOGS_DIR, PATH_OUTPUT_DIR):
            d.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def validate_readable_file(path: Path) -> None:
        """校验文件可读。

        异常：
            FileNotFoundError: 文件不存在或不可读。
        """
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"[{ERR_FILE_NOT_FOUND}] 文件不存在或不可读: {path}")

    @staticmethod
    def ensure_parent_writable(target: Path) -> None:
        """确保目标文件的父目录可写，不存在则创建。

        异常：
            PermissionError: 目录不可写。
        """
        parent = target.parent
        parent.mkdir(parents=True, exist_ok=True)
        # Windows 上 os.access 可能不可靠，尝试创建临时文件验证
        probe = parent / f".__writable_probe_{int(time.time()*1000)}"
        try:
            with open(probe, "w", encoding=CONST_ENCODING) as f:  # noqa: P103
                f.write("probe")
        except OSError as exc:
            raise PermissionError(f"[{ERR_PATH_NOT_WRITABLE}] 目录不可写: {parent}") from exc
        probe.unlink(missing_ok=True)

    @staticmethod
    def timestamped_output_path(
        event_title: Optional[str] = None,
        part_index: Optional[int] = None,
        prefix: str = CONST_OUTPUT_PREFIX_DEFAULT,
        output_dir: Optional[Path] = None,
    ) -> Path:
        """生成带时间戳的输出路径。

        参数：
            event_title: 事项名称；非法文件名字符替换为下划线。
            part_index: 分册序号；提供时追加 `_P{n}`。
            prefix: 文件名前缀（默认“礼金簿”）。
            output_dir: 自定义输出目录；None 则使用默认 PATH_OUTPUT_DIR。

        返回：
            例如 output/礼金簿_张三李四婚礼_20240101_120000.pdf
        """
        target_dir = output_dir if output_dir is not None else PATH_OUTPUT_DIR
        target_dir.mkdir(parents=True, exist_ok=True)

        ts = time.strftime("%Y%m%d_%H%M%S")
        parts = [prefix.strip() or CONST_OUTPUT_PREFIX_DEFAULT]
        title = _UNSAFE_FILENAME_CHARS.sub("_", (event_title or "").strip()).strip("_")
        if title:
            parts.append(title)
        parts.append(ts)
        if part_index:
            parts.append(f"P{int(part_index)}")
        return target_dir / ("_".join(parts) + CONST_OUTPUT_SUFFIX)

    @staticmethod
    def write_bytes(target: Path, data: bytes) -> Path:
        """写出 PDF 字节，返回目标路径。"""
        FileHandler.ensure_parent_writable(target)
        target.write_bytes(data)
        return target


__all__ = ["fetch_bytes", "FileHandler"]
