"""
文件路径：giftbook/processors/engines/__init__.py

说明：绘制引擎：`reportlab.py`（默认）与 `pymupdf.py`，两者消费同一套绘制指令。
"""

from typing import List

__all__: List[str] = []
