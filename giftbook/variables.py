"""
文件路径：giftbook/variables.py

模块职责：
- 统一管理全局跨模块变量，确保模块化、无冲突、可追溯，可复用。
- 变量命名规范：{分类前缀}_{描述性名称}（全大写+下划线）。
  - PATH_：路径相关
  - STYLE_：样式相关（页面几何、字号、配色）
  - CONST_：通用常量
  - ERR_：错误码

使用说明：
- 业务模块严禁定义新的全局变量，必须从本模块导入所需常量。
- 目录路径均使用 pathlib.Path 对象表示，使用时如需字符串请显式 str() 转换。
- 坐标单位均为 pt，原点在页面左下角（与 ReportLab 一致）。
"""

from pathlib import Path
from typing import Dict, Optional, Tuple


# =============================
# 路径（PATH_）
# =============================
# 项目根目录：定位到当前文件（variables.py）的上两级目录
PATH_ROOT: Path = Path(__file__).resolve().parents[1]

# 各功能目录
PATH_CONFIG_DIR: Path = PATH_ROOT / "config"
PATH_FONTS_DIR: Path = PATH_CONFIG_DIR / "fonts"
PATH_EXAMPLES_DIR: Path = PATH_ROOT / "examples"
PATH_OUTPUT_DIR: Path = PATH_ROOT / "output"
PATH_LOGS_DIR: Path = PATH_ROOT / "logs"

# 关键文件路径
PATH_LOG_FILE: Path = PATH_LOGS_DIR / "app.log"  # 应用运行日志
PATH_STYLES_JSON: Path = PATH_CONFIG_DIR / "styles.json"  # 礼簿样式覆盖（可选）
PATH_EXAMPLE_RECORDS_JSON: Path = PATH_EXAMPLES_DIR / "records.json"  # 示例礼金记录

# 字体文件（优先使用可嵌入的 TTF，避免阅读器方块）
PATH_FONT_FILE: Optional[Path] = PATH_FONTS_DIR / "main.ttf"


# =============================
# 样式（STYLE_）
# =============================
# A4 横向
STYLE_PAGE_SIZE: Tuple[float, float] = (841.89, 595.28)

# 边距：礼金页 / 附录页 / 页脚
STYLE_GRID_MARGINS: Dict[str, float] = {"top": 28.0, "bottom": 35.0, "left": 30.0, "right": 30.0}
STYLE_APPENDIX_MARGINS: Dict[str, float] = {"top": 70.0, "bottom": 45.0, "left": 60.0, "right": 60.0}
STYLE_FOOTER_MARGIN_X: float = 30.0
STYLE_FOOTER_Y: float = 17.0

# 礼金页格子划分
STYLE_GIFT_LABEL_RATIO: float = 0.15  # “贺礼”标签带占表格高度比例
STYLE_NUMERIC_AMOUNT_HEIGHT: float = 25.0  # 数字金额带固定高度
STYLE_NUMERIC_AMOUNT_OFFSET: float = 5.0  # 数字金额带距表格底边
STYLE_GRID_BORDER_WIDTH: float = 2.0
STYLE_GRID_LINE_WIDTH: float = 1.0

# 附录表格
STYLE_APPENDIX_TITLE_SIZE: float = 28.0
STYLE_APPENDIX_TITLE_GAP: float = 40.0
STYLE_APPENDIX_HEADER_HEIGHT: float = 28.0
STYLE_APPENDIX_HEADER_SIZE: float = 14.0
STYLE_APPENDIX_ROW_SIZE: float = 11.0
STYLE_APPENDIX_ROW_MIN_HEIGHT: float = 30.0
STYLE_APPENDIX_ROW_PADDING: float = 10.0
STYLE_APPENDIX_TEXT_INSET: float = 5.0
STYLE_APPENDIX_WRAP_INSET: float = 12.0  # 备注列换行宽度 = 列宽 - 12
STYLE_APPENDIX_NAME_COL: float = 120.0
STYLE_APPENDIX_POSITION_COL: float = 160.0
STYLE_APPENDIX_BORDER_WIDTH: float = 1.2
STYLE_APPENDIX_CELL_LINE_WIDTH: float = 0.8

# 统计页
STYLE_SUMMARY_COLUMNS: Tuple[float, float, float] = (120.0, 180.0, 280.0)
STYLE_SUMMARY_HEADER_SIZE: float = 16.0
STYLE_SUMMARY_ROW_SIZE: float = 14.0
STYLE_SUMMARY_SUBLINE_SIZE: float = 12.0
STYLE_SUMMARY_ROW_PITCH: float = 50.0
STYLE_SUMMARY_NOTE_SIZE: float = 12.0
STYLE_SUMMARY_TABLE_OFFSET: float = 60.0  # 标题基线到表头基线
STYLE_SUMMARY_HEADER_GAP: float = 50.0  # 表头到分隔线
STYLE_SUMMARY_RULE_GAP: float = 40.0  # 分隔线到首行
STYLE_SUMMARY_SUBLINE_DROP: float = 22.0  # 金额第二行（中文大写）下移量
STYLE_SUMMARY_NOTE_OFFSET: float = 50.0  # 注释距底边距

# 封面
STYLE_COVER_TITLE_Y: float = 115.0
STYLE_COVER_SUBTITLE_Y: float = 80.0
STYLE_COVER_BADGE_X: float = 90.0
STYLE_COVER_BADGE_TOP_OFFSET: float = 120.0
STYLE_COVER_BADGE_EXTRA_SIZE: float = 20.0
STYLE_COVER_BADGE_OPACITY: float = 0.9

# 各文字角色默认字号：(初始字号, 最小字号)
STYLE_NAME_SIZE: Tuple[float, float] = (20.0, 8.0)
STYLE_LABEL_SIZE: Tuple[float, float] = (20.0, 8.0)
STYLE_AMOUNT_SIZE: Tuple[float, float] = (20.0, 8.0)
STYLE_NUMERIC_SIZE: Tuple[float, float] = (12.0, 6.0)
STYLE_COVER_TEXT_SIZE: float = 30.0
STYLE_PAGE_INFO_SIZE: float = 12.0

# 配色（十六进制）。红事（喜庆）为默认调色板，白事（肃穆）整体切换为深灰
STYLE_FESTIVE_COLORS: Dict[str, str] = {
    "name": "#333333",
    "label": "#cc0000",
    "amount": "#333333",
    "coverText": "#f5d4ab",
    "themeColor": "#ec403c",
    "baseColor": "#1f2937",
}
STYLE_SOLEMN_COLOR: str = "#353637"
STYLE_MUTED_COLOR: str = "#808080"  # 统计页注释文字

# 竖排文字字间距 / 列间距（pt）
STYLE_LETTER_SPACING: float = 4.0


# =============================
# 常量（CONST_）
# =============================
CONST_ENCODING: str = "utf-8"  # 文件读写默认编码
CONST_DEFAULT_TITLE: str = "礼金簿"
CONST_DEFAULT_GIFT_LABEL: str = "贺礼"
CONST_ITEMS_PER_PAGE_DEFAULT: int = 12

# 自适应排版
CONST_FIT_RATIO: float = 0.9  # 文字可用区域占单元格比例
CONST_FIT_STEP: float = 0.5  # 字号递减步长
CONST_MAX_VERTICAL_COLUMNS: int = 3  # 竖排最多列数
CONST_BASELINE_NUDGE_DIVISOR: float = 10.0  # 横排基线微调：字高 / 10
CONST_LINE_GAP: float = 4.0  # 换行行距附加值（与字号同单位）
CONST_WRAP_MODE_CHAR: str = "char"  # 逐字换行（中文）
CONST_WRAP_MODE_WORD: str = "word"  # 按词换行（西文）
CONST_IDEOGRAPHIC_SPACE: str = "\u3000"  # 两字姓名中间的全角空格

# 位置索引格式
CONST_POSITION_INDEX_FORMAT: str = "第{page}页第{row}人"

# 收款方式标签（键与原始录入编码一致）
CONST_PAYMENT_LABELS: Dict[int, str] = {1: "现金", 2: "微信", 3: "支付宝", 4: "其他"}

# 各区段标识
CONST_SECTION_COVER: str = "cover"
CONST_SECTION_GRID: str = "grid"
CONST_SECTION_APPENDIX: str = "appendix"
CONST_SECTION_SUMMARY: str = "summary"
CONST_SECTION_BACK_COVER: str = "back_cover"
CONST_SECTION_BLANK: str = "blank"  # 所有区段均为空时的占位页

# 渲染引擎
CONST_ENGINE_REPORTLAB: str = "reportlab"
CONST_ENGINE_PYMUPDF: str = "pymupdf"
CONST_ENGINE_DEFAULT: str = CONST_ENGINE_REPORTLAB

# 资源并发拉取线程数
CONST_FETCH_WORKERS: int = 8
CONST_FETCH_TIMEOUT_S: float = 15.0

# 白事灰度图 JPEG 质量
CONST_GRAYSCALE_JPEG_QUALITY: int = 92

# 输出命名
CONST_OUTPUT_PREFIX_DEFAULT: str = "礼金簿"
CONST_OUTPUT_SUFFIX: str = ".pdf"
CONST_TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M:%S"  # 页脚生成日期格式

# 字体回退：ReportLab 内置 CJK 字体（不嵌入），再不行退到 Helvetica
CONST_FALLBACK_CJK_FONT: str = "STSong-Light"
CONST_FALLBACK_LATIN_FONT: str = "Helvetica"
# PyMuPDF 内置 CJK 字体名（对应 STSong-Light 回退）
CONST_PYMUPDF_CJK_FONT: str = "china-s"
CONST_PYMUPDF_LATIN_FONT: str = "helv"

# 常见中文字体候选路径（用于自动探测，按顺序优先；仅接受 TTF）
CONST_CANDIDATE_CJK_FONT_PATHS: Tuple[str, ...] = (
    # Windows 常见字体
    "C:/Windows/Fonts/simhei.ttf",  # 黑体
    "C:/Windows/Fonts/simkai.ttf",  # 楷体
    # macOS 常见字体
    "/System/Library/Fonts/STSong.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "/Library/Fonts/SimSun.ttf",
    # Linux 常见字体
    "/usr/share/fonts/truetype/arphic/ukai.ttf",
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttf",
)

# 日志格式（供 logging.basicConfig 使用）
CONST_LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONST_LOG_DATEFMT: str = "%Y-%m-%d %H:%M:%S"


# =============================
# 错误码（ERR_）
# =============================
# 1xxx：文件/路径相关
ERR_FILE_NOT_FOUND: int = 1001  # 输入文件不存在
ERR_PATH_NOT_WRITABLE: int = 1003  # 目标路径不可写

# 2xxx：资源/排版相关
ERR_RESOURCE_FETCH_FAILED: int = 2001  # 字体/图片拉取失败
ERR_FONT_REGISTER_FAILED: int = 2002  # 字体注册失败
ERR_IMAGE_DECODE_FAILED: int = 2003  # 图片解码失败

# 3xxx：合并/写入相关
ERR_PDF_MERGE_FAILED: int = 3001  # PDF 合并失败
ERR_PDF_WRITE_FAILED: int = 3002  # PDF 写入失败

# 4xxx：配置/数据相关
ERR_CONFIG_LOAD_FAILED: int = 4001  # 配置加载失败
ERR_DATA_INVALID: int = 4002  # 输入数据非法


# =============================
# 导出声明
# =============================
__all__ = [name for name in list(globals()) if name.isupper() and name.split("_", 1)[0] in {"PATH", "STYLE", "CONST", "ERR"}]
