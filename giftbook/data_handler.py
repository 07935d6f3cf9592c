"""
文件路径：giftbook/data_handler.py

模块职责：
- 读取礼金记录（JSON / CSV），并把宽松的录入字段转换为 GiftRecord（金额转 Decimal、收款方式编码、作废标记）。
- 加载礼簿样式覆盖配置（config/styles.json）。
- 生成示例记录，便于命令行快速试排。

说明：
- 仅依赖标准库与 `giftbook/variables.py`、`giftbook/components`，不直接依赖排版模块。

变量引用说明（来自 giftbook/variables.py）：
- PATH_STYLES_JSON, CONST_ENCODING, ERR_CONFIG_LOAD_FAILED, ERR_DATA_INVALID

组件调用说明（供业务模块）：
- load_records_json / load_records_csv：读取批量礼金记录
- record_from_mapping：单条录入字典 → GiftRecord
- load_style_config：读取样式覆盖
"""

from __future__ import annotations

import csv
import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .components import get_logger, style_overrides_from_mapping, to_decimal
from .models import GiftRecord, PaymentMethod
from .variables import (
    PATH_STYLES_JSON,
    CONST_ENCODING,
    ERR_CONFIG_LOAD_FAILED,
    ERR_DATA_INVALID,
)


logger = get_logger(__name__)

# 录入字段别名：英文键与中文表头均可
_FIELD_ALIASES: Dict[str, tuple] = {
    "name": ("name", "姓名", "宾客", "名字"),
    "amount": ("amount", "金额", "礼金"),
    "payment_type": ("payment_type", "payment_method", "收款类型", "收款方式"),
    "gift": ("gift", "gift_description", "礼品", "礼物"),
    "voided": ("voided", "作废", "状态"),
}
_TRUTHY = {"1", "true", "yes", "y", "是", "作废", "已作废"}


def _json_loads_strip_bom(content: str):
    """解析 JSON 字符串，自动去除 UTF-8 BOM。"""
    if content.startswith("\ufeff"):
        content = content.lstrip("\ufeff")
    return json.loads(content)


def _pick(raw: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_ALIASES[field]:
        if key in raw:
            value = raw[key]
            if isinstance(value, str):
                value = value.strip()
            if value is not None and value != "":
                return value
    return None


def _as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


def record_from_mapping(raw: Mapping[str, Any]) -> GiftRecord:
    """把一条录入字典转换为 GiftRecord。

    规则：
    - 姓名必填，去除首尾空白；
    - 金额缺省为 0，字符串中的千分位逗号与 ¥ 符号会被去除；
    - 收款方式按编码（1~4）或中文标签解析，缺省为现金；
    - 作废标记接受 true/1/是/作废 等写法。

    异常：
        ValueError：缺少姓名或金额无法解析。
    """
    name = _pick(raw, "name")
    if name is None:
        raise ValueError(f"[{ERR_DATA_INVALID}] 记录缺少姓名：{dict(raw)!r}")

    amount_raw = _pick(raw, "amount")
    if amount_raw is None:
        amount = Decimal("0")
    elif isinstance(amount_raw, str):
        amount = to_decimal(amount_raw.replace(",", "").replace("¥", "").replace("￥", ""))
    else:
        amount = to_decimal(amount_raw)

    payment_raw = _pick(raw, "payment_type")
    payment = PaymentMethod.CASH if payment_raw is None else PaymentMethod.from_code(payment_raw)

    gift = _pick(raw, "gift")
    return GiftRecord(
        name=str(name),
        amount=amount,
        payment_method=payment,
        gift_description=None if gift is None else str(gift),
        voided=_as_flag(_pick(raw, "voided")),
    )


def _records_from_items(items: List[Any], source: Path) -> List[GiftRecord]:
    results: List[GiftRecord] = []
    for i, obj in enumerate(items, start=1):
        if not isinstance(obj, dict):
            logger.warning("跳过非对象记录：%s 第 %s 条", source, i)
            continue
        try:
            results.append(record_from_mapping(obj))
        except ValueError as exc:
            raise RuntimeError(f"[{ERR_CONFIG_LOAD_FAILED}] {source} 第 {i} 条记录无效: {exc}") from exc
    return results


def load_records_json(path: Path) -> List[GiftRecord]:
    """从 JSON 文件加载礼金记录。

    支持两种结构：
    - 数组：[{"name": "张三", "amount": 100, "payment_type": 2}, {...}]
    - 对象：{"records": [ ... ]}
    """
    content = path.read_text(encoding=CONST_ENCODING)
    data = _json_loads_strip_bom(content)
    if isinstance(data, dict) and "records" in data and isinstance(data["records"], list):
        items = data["records"]
    elif isinstance(data, list):
        items = data
    else:
        raise RuntimeError(f"[{ERR_CONFIG_LOAD_FAILED}] 记录 JSON 结构需为数组或包含 records 数组的对象")
    return _records_from_items(items, path)


def load_records_csv(path: Path) -> List[GiftRecord]:
    """从 CSV 文件加载礼金记录（首行为表头，可用英文键或 姓名/金额/收款类型/礼品/状态）。"""
    # utf-8-sig：兼容 Excel 导出的带 BOM 文件
    with path.open("r", encoding="utf-8-sig", newline="") as f:  # noqa: P103
        reader = csv.DictReader(f)
        rows = [{str(k).strip(): v for k, v in row.items() if k is not None} for row in reader if row]
    return _records_from_items(rows, path)


def load_records(path: Path) -> List[GiftRecord]:
    """按扩展名选择 JSON / CSV 读取。"""
    if path.suffix.lower() == ".csv":
        return load_records_csv(path)
    return load_records_json(path)


def load_style_config(config_path: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """加载礼簿样式覆盖 JSON。

    参数：
        config_path: 配置路径；默认读取 `config/styles.json`。

    返回：
        文字角色 → {fontSize, color} 的映射；文件不存在时返回空映射。
    """
    path = config_path or PATH_STYLES_JSON
    if not path.exists():
        logger.warning("找不到样式配置文件，将使用默认样式：%s", path)
        return {}
    try:
        content = path.read_text(encoding=CONST_ENCODING)
        data = _json_loads_strip_bom(content)
        return style_overrides_from_mapping(data)
    except Exception as exc:  # noqa: BLE001
        raise RuntimeError(f"[{ERR_CONFIG_LOAD_FAILED}] 样式配置加载失败: {exc}") from exc


def make_example_records(count: int = 15) -> List[GiftRecord]:
    """生成示例记录：金额、收款方式轮换，含一条作废与若干纯礼品记录。"""
    surnames = "赵钱孙李周吴郑王冯陈褚卫蒋沈韩杨"
    given = ["伟", "芳", "秀英", "建国", "丽", "强", "敏", "静", "磊", "欣怡"]
    methods = list(PaymentMethod)
    records: List[GiftRecord] = []
    for i in range(count):
        name = surnames[i % len(surnames)] + given[i % len(given)]
        if i % 7 == 6:
            records.append(GiftRecord(name=name, gift_description="红酒两瓶、喜糖一盒"))
            continue
        records.append(
            GiftRecord(
                name=name,
                amount=Decimal(200 + (i % 5) * 100),
                payment_method=methods[i % len(methods)],
                voided=(i == 4),
            )
        )
    return records


__all__ = [
    "record_from_mapping",
    "load_records_json",
    "load_records_csv",
    "load_records",
    "load_style_config",
    "make_example_records",
]
