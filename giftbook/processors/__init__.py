"""
文件路径：giftbook/processors/__init__.py

说明：
- 礼簿排版处理器包：
  - ledger.py（作废过滤、位置索引、礼金/礼品拆分与汇总）
  - fitter.py（单元格自适应排字，横排/竖排）
  - layout.py（封面/礼金页/礼品附录/统计页/封底分页排版）
  - engines/{reportlab.py, pymupdf.py}（绘制指令序列化为 PDF）
"""

from typing import List

__all__: List[str] = []
