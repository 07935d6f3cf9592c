"""
文件路径：giftbook/models.py

模块职责：
- 定义礼簿排版核心使用的数据结构：礼金记录、带位置索引的记录、排版选项、绘制指令与渲染页。
- 所有结构在每次 generate() 调用内新建、用后丢弃，不做持久化。

说明：
- 金额统一使用 Decimal；字符串/数字的宽松转换属于录入层（data_handler），不在此处处理。
- 绘制指令坐标采用 ReportLab 坐标系（左下角为原点，单位 pt）。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .variables import (
    CONST_DEFAULT_GIFT_LABEL,
    CONST_DEFAULT_TITLE,
    CONST_ITEMS_PER_PAGE_DEFAULT,
    CONST_PAYMENT_LABELS,
    CONST_WRAP_MODE_CHAR,
    STYLE_LETTER_SPACING,
    STYLE_PAGE_SIZE,
)


RGB = Tuple[float, float, float]

# 资源来源：原始字节 / 本地路径 / URL 字符串；None 表示未提供
ResourceSource = Union[bytes, bytearray, str, Path, None]


class PaymentMethod(Enum):
    """收款方式，取值与原始录入编码一致（1 现金 2 微信 3 支付宝 4 其他）。"""

    CASH = 1
    MOBILE_PAY = 2
    THIRD_PARTY_WALLET = 3
    OTHER = 4

    @property
    def label(self) -> str:
        return CONST_PAYMENT_LABELS[self.value]

    @classmethod
    def from_code(cls, code: Any) -> "PaymentMethod":
        """按编码或中文标签解析，无法识别时归为“其他”。"""
        if isinstance(code, PaymentMethod):
            return code
        token = str(code).strip().replace("_", "").upper()
        for member in cls:
            if code == member.label or token == member.name.replace("_", ""):
                return member
        try:
            return cls(int(code))
        except (TypeError, ValueError):
            return cls.OTHER


@dataclass(frozen=True)
class GiftRecord:
    """一条礼金/礼品记录（只读输入）。"""

    name: str
    amount: Decimal = Decimal("0")
    payment_method: PaymentMethod = PaymentMethod.CASH
    gift_description: Optional[str] = None
    voided: bool = False

    @property
    def is_monetary(self) -> bool:
        return self.amount > 0

    @property
    def has_gift(self) -> bool:
        return bool(self.gift_description and self.gift_description.strip())


@dataclass(frozen=True)
class ProcessedRecord:
    """已过滤作废并附加“第 P 页第 N 人”位置索引的记录。"""

    record: GiftRecord
    position_index: str

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def amount(self) -> Decimal:
        return self.record.amount

    @property
    def payment_method(self) -> PaymentMethod:
        return self.record.payment_method

    @property
    def gift_description(self) -> Optional[str]:
        return self.record.gift_description


@dataclass
class FontSources:
    """各文字角色的字体来源。未提供的角色按原有规则继承：
    礼品标签/正文/金额 → 主字体，封面 → 正文字体。
    """

    main: ResourceSource = None
    gift_label: ResourceSource = None
    formal: ResourceSource = None
    amount: ResourceSource = None
    cover: ResourceSource = None


@dataclass
class ImageSources:
    cover: ResourceSource = None
    background: ResourceSource = None
    back_cover: ResourceSource = None


@dataclass
class LayoutOptions:
    """单次生成的排版配置。

    style_overrides 结构与原礼簿样式配置一致，例如：
        {"name": {"fontSize": 22, "color": "#333"}, "pageInfo": {"themeColor": "rgb(236,64,60)"}}
    """

    title: str = CONST_DEFAULT_TITLE
    subtitle: str = ""
    gift_label: str = CONST_DEFAULT_GIFT_LABEL
    items_per_page: int = CONST_ITEMS_PER_PAGE_DEFAULT
    print_cover: bool = True
    show_cover_title: bool = True
    print_appendix: bool = True
    print_summary: bool = True
    print_back_cover: bool = False
    part_index: Optional[int] = None
    total_parts: Optional[int] = None
    grand_total_amount: Optional[Decimal] = None
    grand_total_givers: Optional[int] = None
    solemn: bool = False
    letter_spacing: float = STYLE_LETTER_SPACING
    style_overrides: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    appendix_wrap_mode: str = CONST_WRAP_MODE_CHAR
    fonts: FontSources = field(default_factory=FontSources)
    images: ImageSources = field(default_factory=ImageSources)
    generated_at: Optional[datetime] = None

    @property
    def is_multi_part(self) -> bool:
        return bool(self.part_index and self.total_parts)


# =============================
# 绘制指令
# =============================
@dataclass(frozen=True)
class DrawText:
    text: str
    x: float
    y: float
    size: float
    font: str
    color: RGB
    opacity: float = 1.0


@dataclass(frozen=True)
class DrawLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: RGB
    thickness: float = 1.0


@dataclass(frozen=True)
class DrawRect:
    x: float
    y: float
    width: float
    height: float
    color: RGB
    line_width: float = 1.0


@dataclass(frozen=True)
class DrawImage:
    key: str
    x: float
    y: float
    width: float
    height: float


DrawOp = Union[DrawText, DrawLine, DrawRect, DrawImage]


@dataclass
class RenderedPage:
    section: str
    ops: List[DrawOp] = field(default_factory=list)
    width: float = STYLE_PAGE_SIZE[0]
    height: float = STYLE_PAGE_SIZE[1]

    def texts(self) -> List[DrawText]:
        return [op for op in self.ops if isinstance(op, DrawText)]


@dataclass(frozen=True)
class ImageAsset:
    """已解码的图片资源；白事模式下为灰度版本。同一次生成内各页只读共享。"""

    key: str
    data: bytes
    width: int
    height: int


__all__ = [
    "RGB",
    "ResourceSource",
    "PaymentMethod",
    "GiftRecord",
    "ProcessedRecord",
    "FontSources",
    "ImageSources",
    "LayoutOptions",
    "DrawText",
    "DrawLine",
    "DrawRect",
    "DrawImage",
    "DrawOp",
    "RenderedPage",
    "ImageAsset",
]
