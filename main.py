"""
文件路径：main.py

命令行入口：
- 功能：读取礼金记录（JSON/CSV），排版生成礼金簿 PDF（封面、礼金页、礼品附录、统计页、封底），输出到 output 目录。
- 依赖：`giftbook/gift_registry.py`、`giftbook/data_handler.py`、`giftbook/components`、`giftbook/variables.py`。

快速使用示例：
    # 1) 生成一份示例记录并直接排版
    python main.py --make-example

    # 2) 使用记录文件生成礼簿
    python main.py --records examples/records.json --title 张三李四婚礼 --subtitle 二〇二四年十月

    # 3) 白事模式 + 每 500 条分一册并合并为一个文件
    python main.py --records data.csv --solemn --split-size 500 --merge-parts

运行说明：
- 记录文件：JSON 为数组或 {"records": [...]}；CSV 首行表头可用 name/amount/payment_type/gift/voided
  或 姓名/金额/收款类型/礼品/状态。
- 字体：未指定 --font-main 时依次尝试 config/fonts/main.ttf 与系统常见中文字体，
  均不可用时回退到 ReportLab 内置 STSong-Light。
- 样式：--styles-json 指定 {"giftBookStyles": {...}} 覆盖字号与配色；默认读取 config/styles.json（可选）。

变量引用说明（来自 giftbook/variables.py）：
- PATH_FONT_FILE, PATH_EXAMPLE_RECORDS_JSON, CONST_ITEMS_PER_PAGE_DEFAULT, CONST_ENGINE_*, CONST_ENCODING

组件调用说明：
- get_logger, FileHandler.ensure_project_dirs/validate_readable_file/timestamped_output_path/write_bytes
- load_records, load_style_config, make_example_records
- GiftRegistryPDF.generate_parts, merge_documents
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from giftbook.components import FileHandler, get_logger, pick_preferred_cjk_font
from giftbook.data_handler import load_records, load_style_config, make_example_records
from giftbook.gift_registry import GiftRegistryPDF, merge_documents
from giftbook.models import FontSources, GiftRecord, ImageSources, LayoutOptions
from giftbook.variables import (
    PATH_EXAMPLE_RECORDS_JSON,
    PATH_FONT_FILE,
    CONST_DEFAULT_GIFT_LABEL,
    CONST_DEFAULT_TITLE,
    CONST_ENCODING,
    CONST_ENGINE_DEFAULT,
    CONST_ENGINE_PYMUPDF,
    CONST_ENGINE_REPORTLAB,
    CONST_ITEMS_PER_PAGE_DEFAULT,
    CONST_WRAP_MODE_CHAR,
    CONST_WRAP_MODE_WORD,
)


logger = get_logger(__name__)


def _ensure_example_records() -> Path:
    """若 `examples/records.json` 不存在，则生成一份示例记录（含作废与纯礼品记录）。"""
    path = PATH_EXAMPLE_RECORDS_JSON
    if path.exists():
        return path
    path.parent.mkdir(parents=True, exist_ok=True)
    items = []
    for r in make_example_records():
        items.append(
            {
                "name": r.name,
                "amount": str(r.amount),
                "payment_type": r.payment_method.value,
                "gift": r.gift_description,
                "voided": r.voided,
            }
        )
    path.write_text(json.dumps({"records": items}, ensure_ascii=False, indent=2), encoding=CONST_ENCODING)
    logger.info("已生成示例记录：%s", path)
    return path


def _default_main_font() -> Optional[Path]:
    """主字体默认来源：config/fonts/main.ttf > 系统常见中文 TTF > None（内置回退）。"""
    if PATH_FONT_FILE and PATH_FONT_FILE.exists():
        return PATH_FONT_FILE
    preferred = pick_preferred_cjk_font()
    if preferred:
        logger.info("自动选用系统中文字体：%s", preferred)
    else:
        logger.warning("未找到可嵌入的中文字体，将使用内置 STSong-Light（不嵌入）")
    return preferred


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="礼金簿 PDF 生成工具（封面 + 礼金页 + 礼品附录 + 统计页）")
    parser.add_argument("--records", type=Path, default=None, help="礼金记录 JSON/CSV 路径")
    parser.add_argument("--output", type=Path, default=None, help="输出 PDF 路径（可省略，自动生成带时间戳的文件名）")
    parser.add_argument("--output-dir", dest="output_dir", type=Path, default=None, help="自动命名时的输出目录（默认 output/）")
    parser.add_argument("--title", type=str, default=CONST_DEFAULT_TITLE, help="封面标题 / 事项名称")
    parser.add_argument("--subtitle", type=str, default="", help="封面副标题（如日期）")
    parser.add_argument("--gift-label", dest="gift_label", type=str, default=CONST_DEFAULT_GIFT_LABEL, help="礼金页标签文字")
    parser.add_argument("--items-per-page", dest="items_per_page", type=int, default=CONST_ITEMS_PER_PAGE_DEFAULT, help="每页人数")
    parser.add_argument("--styles-json", dest="styles_json", type=Path, default=None, help="样式覆盖 JSON（默认 config/styles.json）")
    parser.add_argument("--solemn", action="store_true", help="白事模式：配色统一为深灰，图片转灰度")
    parser.add_argument("--letter-spacing", dest="letter_spacing", type=float, default=None, help="竖排字间距（pt）")
    parser.add_argument("--wrap-mode", dest="wrap_mode", choices=[CONST_WRAP_MODE_CHAR, CONST_WRAP_MODE_WORD], default=CONST_WRAP_MODE_CHAR, help="礼品附录换行方式")
    parser.add_argument("--font-main", dest="font_main", type=str, default=None, help="主字体（TTF 路径或 URL）")
    parser.add_argument("--font-label", dest="font_label", type=str, default=None, help="礼签字体")
    parser.add_argument("--font-formal", dest="font_formal", type=str, default=None, help="正文字体（页脚、附录、统计页）")
    parser.add_argument("--font-amount", dest="font_amount", type=str, default=None, help="大写金额字体")
    parser.add_argument("--font-cover", dest="font_cover", type=str, default=None, help="封面字体")
    parser.add_argument("--cover-image", dest="cover_image", type=str, default=None, help="封面图片（路径或 URL）")
    parser.add_argument("--background-image", dest="background_image", type=str, default=None, help="礼金页背景图片")
    parser.add_argument("--back-cover-image", dest="back_cover_image", type=str, default=None, help="封底图片")
    parser.add_argument("--no-cover", dest="no_cover", action="store_true", help="不输出封面")
    parser.add_argument("--hide-cover-title", dest="hide_cover_title", action="store_true", help="封面不绘制标题文字")
    parser.add_argument("--no-appendix", dest="no_appendix", action="store_true", help="不输出礼品附录")
    parser.add_argument("--no-summary", dest="no_summary", action="store_true", help="不输出统计页")
    parser.add_argument("--back-cover", dest="back_cover", action="store_true", help="输出封底（需提供封底图片）")
    parser.add_argument("--split-size", dest="split_size", type=int, default=0, help="每册记录条数，0 表示不分册")
    parser.add_argument("--merge-parts", dest="merge_parts", action="store_true", help="分册后合并为一个 PDF")
    parser.add_argument("--engine", type=str, choices=[CONST_ENGINE_REPORTLAB, CONST_ENGINE_PYMUPDF], default=CONST_ENGINE_DEFAULT, help="渲染引擎：reportlab/pymupdf")
    parser.add_argument("--make-example", action="store_true", help="生成示例记录并排版")
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> LayoutOptions:
    """由命令行参数组装排版选项。"""
    fonts = FontSources(
        main=args.font_main or _default_main_font(),
        gift_label=args.font_label,
        formal=args.font_formal,
        amount=args.font_amount,
        cover=args.font_cover,
    )
    images = ImageSources(cover=args.cover_image, background=args.background_image, back_cover=args.back_cover_image)
    options = LayoutOptions(
        title=args.title,
        subtitle=args.subtitle,
        gift_label=args.gift_label,
        items_per_page=args.items_per_page,
        print_cover=not args.no_cover,
        show_cover_title=not args.hide_cover_title,
        print_appendix=not args.no_appendix,
        print_summary=not args.no_summary,
        print_back_cover=args.back_cover,
        solemn=args.solemn,
        style_overrides=load_style_config(args.styles_json),
        appendix_wrap_mode=args.wrap_mode,
        fonts=fonts,
        images=images,
    )
    if args.letter_spacing is not None:
        options.letter_spacing = args.letter_spacing
    return options


def _write_outputs(args: argparse.Namespace, parts: List[bytes]) -> List[Path]:
    if len(parts) == 1 or args.merge_parts:
        data = parts[0] if len(parts) == 1 else merge_documents(parts)
        target = args.output or FileHandler.timestamped_output_path(args.title, output_dir=args.output_dir)
        return [FileHandler.write_bytes(target, data)]

    outputs: List[Path] = []
    for i, data in enumerate(parts, start=1):
        if args.output is not None:
            target = args.output.with_name(f"{args.output.stem}_P{i}{args.output.suffix or '.pdf'}")
        else:
            target = FileHandler.timestamped_output_path(args.title, part_index=i, output_dir=args.output_dir)
        outputs.append(FileHandler.write_bytes(target, data))
    return outputs


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    FileHandler.ensure_project_dirs()

    records_path: Optional[Path] = args.records
    if args.make_example or records_path is None:
        if records_path is None and not args.make_example:
            logger.warning("未提供 --records，将使用示例记录以便体验。")
        records_path = _ensure_example_records()

    FileHandler.validate_readable_file(records_path)
    records: List[GiftRecord] = load_records(records_path)
    if not records:
        raise SystemExit("未从记录文件中解析到任何记录")

    options = build_options(args)
    logger.info("排版选项：%s", {k: v for k, v in asdict(options).items() if k not in ("fonts", "images", "style_overrides")})

    generator = GiftRegistryPDF(engine=args.engine)
    parts = generator.generate_parts(records, options, event_title=args.title, split_size=args.split_size)
    outputs = _write_outputs(args, parts)

    stats = generator.last_generation_stats or {}
    print("礼簿生成完成，共 {} 个文件：".format(len(outputs)))
    for p in outputs:
        print(f" - {p}")
    if stats:
        print(f"最后一册：{stats.get('pages')} 页，有效礼金 {stats.get('monetary')} 条，礼品 {stats.get('gifts')} 条")


if __name__ == "__main__":
    main()
