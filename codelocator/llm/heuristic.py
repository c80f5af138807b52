"""Deterministic keyword-driven analyzer used when no model is available.

Everything this module reports is illustrative: file paths come from
substring probes on the structure transcript and line ranges are
synthetic. Callers must treat the result as non-authoritative.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..models import FeatureEntry, FeatureReport, Location

FEATURE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "用户": ("用户", "用户管理", "用户注册", "用户登录", "用户信息"),
    "商品": ("商品", "商品管理", "商品列表", "商品详情", "商品分类"),
    "订单": ("订单", "订单处理", "订单管理", "订单状态", "订单列表"),
    "支付": ("支付", "支付处理", "支付方式", "支付状态", "支付验证"),
    "消息": ("消息", "消息发送", "消息接收", "消息列表", "消息管理"),
    "频道": ("频道", "频道创建", "频道管理", "频道列表"),
    "评论": ("评论", "评论管理", "评论列表", "评论发布"),
    "文章": ("文章", "文章发布", "文章管理", "文章列表"),
    "博客": ("博客", "博客系统", "博客管理"),
    "聊天": ("聊天", "聊天系统", "聊天功能"),
    "社交": ("社交", "社交媒体", "社交功能"),
    "电商": ("电商", "电商系统", "电商平台"),
}

ACTION_VERBS: Tuple[str, ...] = ("创建", "发送", "查询", "列表", "删除", "更新", "管理", "处理")

GENERIC_FEATURE = "基础功能"

FUNCTION_NAMES: Tuple[Tuple[str, str], ...] = (
    ("用户", "userManagement"),
    ("注册", "userRegistration"),
    ("登录", "userLogin"),
    ("商品", "productManagement"),
    ("订单", "orderProcessing"),
    ("支付", "paymentProcessing"),
    ("消息", "messageHandler"),
    ("频道", "channelManagement"),
    ("评论", "commentSystem"),
    ("文章", "articleManagement"),
    ("博客", "blogSystem"),
    ("电商", "ecommerceSystem"),
    ("聊天", "chatSystem"),
    ("社交", "socialMedia"),
)


@dataclass(frozen=True)
class PathProbe:
    """A transcript substring and the location it stands for."""

    needle: str
    path: str
    span: int


PATH_PROBES: Tuple[PathProbe, ...] = (
    PathProbe("src/main.js", "src/main.js", 50),
    PathProbe("src/services/", "src/services/channel.js", 28),
    PathProbe("index.js", "index.js", 24),
)


@dataclass(frozen=True)
class Ecosystem:
    manifest: str
    name: str
    install_command: str
    entrypoints: Tuple[str, ...]
    start_command: str


ECOSYSTEMS: Tuple[Ecosystem, ...] = (
    Ecosystem("package.json", "Node.js", "npm install", ("src/main.js", "index.js"), "npm start"),
    Ecosystem(
        "requirements.txt",
        "Python",
        "pip install -r requirements.txt",
        ("main.py", "app.py"),
        "python {entrypoint}",
    ),
    Ecosystem("Cargo.toml", "Rust", "cargo build", ("src/main.rs",), "cargo run"),
)

_NON_ASCII_LETTERS = re.compile(r"[^a-zA-Z]")


@dataclass(frozen=True)
class _SyntheticLocation:
    path: str
    start: int
    end: int


class HeuristicAnalyzer:
    """Maps a problem description to features without calling any model.

    Never raises: every input, including empty strings, yields at least
    one feature entry and a non-empty execution plan.
    """

    def analyze(self, problem_description: str, transcript: str) -> FeatureReport:
        description = problem_description or ""
        structure = transcript or ""

        features = extract_features(description)
        locations = probe_locations(structure)
        entries = [
            FeatureEntry(
                feature_description=f"实现{feature}功能",
                implementation_location=[
                    Location(
                        file=location.path,
                        function=function_name_for(feature),
                        lines=f"{location.start}-{location.end}",
                    )
                    for location in locations
                ],
            )
            for feature in features
        ]
        return FeatureReport(
            feature_analysis=entries,
            execution_plan_suggestion=build_execution_plan(structure),
        )


def extract_features(description: str) -> List[str]:
    """Categories hit by the description, else action verbs, else a generic feature."""
    found = [
        category
        for category, keywords in FEATURE_KEYWORDS.items()
        if any(keyword in description for keyword in keywords)
    ]
    if not found:
        found = [verb for verb in ACTION_VERBS if verb in description]
    return found or [GENERIC_FEATURE]


def probe_locations(transcript: str, probes: Sequence[PathProbe] = PATH_PROBES) -> List[_SyntheticLocation]:
    """Assign back-to-back synthetic line ranges to every probe the transcript mentions."""
    locations: List[_SyntheticLocation] = []
    line = 1
    for probe in probes:
        if probe.needle not in transcript:
            continue
        locations.append(_SyntheticLocation(probe.path, line, line + probe.span - 1))
        line += probe.span
    return locations


def function_name_for(feature: str) -> str:
    for key, name in FUNCTION_NAMES:
        if key in feature:
            return name
    return _NON_ASCII_LETTERS.sub("", feature) + "Handler"


def build_execution_plan(transcript: str) -> str:
    """Templated run instructions keyed on the manifest and entrypoint the transcript mentions."""
    steps: List[Tuple[str, str]] = []
    intro = ""
    ecosystem = next((eco for eco in ECOSYSTEMS if _mentions_path(transcript, eco.manifest)), None)

    if ecosystem is not None:
        intro = f"这是一个{ecosystem.name}项目。"
        steps.append(("安装依赖", _shell_block(ecosystem.install_command)))
        entrypoint = next(
            (entry for entry in ecosystem.entrypoints if _mentions_path(transcript, entry)), None
        )
        if entrypoint is not None:
            command = ecosystem.start_command.format(entrypoint=entrypoint)
            steps.append(("启动服务", _shell_block(command)))

    steps.append(
        (
            "访问服务",
            "   - 默认端口：3000\n"
            "   - 健康检查：http://localhost:3000/api/health\n"
            "   - API文档：http://localhost:3000/api/info",
        )
    )
    steps.append(("测试功能", "   - 使用Postman或curl测试API端点\n   - 查看生成的测试代码"))

    sections = [intro] if intro else []
    sections.extend(
        f"{number}. {title}：\n{body}" for number, (title, body) in enumerate(steps, start=1)
    )
    return "\n\n".join(sections) + "\n"


def _mentions_path(transcript: str, path: str) -> bool:
    """True when ``path`` appears as a whole path or a trailing path segment."""
    pattern = rf"(?:^|[\s/]){re.escape(path)}(?![\w.])"
    return re.search(pattern, transcript, re.MULTILINE) is not None


def _shell_block(command: str) -> str:
    return f"   ```bash\n   {command}\n   ```"


__all__ = [
    "ACTION_VERBS",
    "FEATURE_KEYWORDS",
    "HeuristicAnalyzer",
    "PATH_PROBES",
    "build_execution_plan",
    "extract_features",
    "function_name_for",
    "probe_locations",
]
