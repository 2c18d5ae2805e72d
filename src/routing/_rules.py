"""Static rule tables for content-type, difficulty, and context heuristics.

Tables are plain data; the classifiers apply one generic scorer to them.
Patterns are matched case-insensitively against the cleaned query text,
keywords against its token list.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from src.routing._models import ContentType

# --- Rule set container ---


class RuleSet:
    """Weighted regex rules plus flat keywords for one content type."""

    def __init__(
        self,
        patterns: Iterable[tuple[str, str, float]],
        keywords: Iterable[str] = (),
        keyword_weight: float = 0.1,
    ) -> None:
        self.patterns: list[tuple[str, re.Pattern[str], float]] = [
            (name, re.compile(pattern, re.IGNORECASE), weight)
            for name, pattern, weight in patterns
        ]
        self.keywords: frozenset[str] = frozenset(k.lower() for k in keywords)
        self.keyword_weight = keyword_weight

    def add_pattern(self, name: str, pattern: str, weight: float) -> None:
        """Append a rule; raises re.error for an invalid pattern."""
        self.patterns.append((name, re.compile(pattern, re.IGNORECASE), weight))

    def __len__(self) -> int:
        return len(self.patterns) + len(self.keywords)


# --- Content-type rule tables ---

# (signal name, regex, weight)
_CODING_PATTERNS: list[tuple[str, str, float]] = [
    ("code_block", r"```[\s\S]*?```|~~~[\s\S]*?~~~", 0.9),
    ("code_syntax", r"\b(?:function|class|const|let|var|def|import|export)\s*[\(\{=]", 0.85),
    (
        "language",
        r"\b(?:javascript|typescript|python|java|react|node\.?js|express|sql|html|css"
        r"|php|ruby|golang|rust|kotlin|swift)\b|(?<!\w)c(?:\+\+|#)",
        0.8,
    ),
    (
        "build_code_artifact",
        r"\b(?:write|create|build|implement|develop|code|debug|fix|refactor)\s+"
        r"(?:a|an|the|this|my)?\s*(?:\w+\s+)?"
        r"(?:function|class|method|component|api|app|script|program|module|endpoint"
        r"|database|query|website)s?\b",
        0.85,
    ),
    (
        "dev_verb",
        r"\b(?:how\s+to\s+)?(?:code|program|implement|develop|debug|refactor|compile)\b",
        0.7,
    ),
    ("error_terms", r"\b(?:error|bug|exception|crash|stack\s*trace|traceback)\b", 0.6),
    ("typed_error", r"\b(?:syntax|runtime|compilation|type)\s+error\b", 0.9),
    ("algorithms", r"\b(?:algorithms?|data\s+structures?|recursion|big[\s-]?o)\b", 0.75),
    ("backend_terms", r"\b(?:api|endpoint|database|schema|migration)\b", 0.6),
]

_CODING_KEYWORDS = [
    "code",
    "function",
    "class",
    "debug",
    "implement",
    "programming",
    "software",
    "compile",
    "script",
]

_IMAGE_PATTERNS: list[tuple[str, str, float]] = [
    (
        "image_request",
        r"\b(?:create|generate|make|draw|design|paint|render|produce)\s+(?:me\s+)?"
        r"(?:an?\s+|the\s+|some\s+)?(?:\w+\s+)?"
        r"(?:image|picture|illustration|artwork|logo|icon|drawing|painting|photo"
        r"|portrait|wallpaper)s?\b",
        0.9,
    ),
    ("show_image", r"\b(?:show|display)\s+me\s+(?:an?\s+)?(?:image|picture|photo)", 0.85),
    ("draw_opener", r"^(?:draw|sketch|paint|illustrate)\b", 0.8),
    ("visual_terms", r"\b(?:visual|graphic|artwork|painting|sketch|drawing|rendering)\b", 0.6),
    ("design_assets", r"\b(?:banner|poster|thumbnail|avatar|profile\s+picture|logo)s?\b", 0.7),
    (
        "art_style",
        r"\b(?:realistic|cartoon|anime|abstract|minimalist|vintage|watercolor|photorealistic)"
        r"\s+(?:style|art|image|portrait)",
        0.8,
    ),
    ("style_of", r"\bin\s+the\s+style\s+of\b", 0.75),
]

_IMAGE_KEYWORDS = [
    "image",
    "picture",
    "visual",
    "draw",
    "illustration",
    "photo",
    "artwork",
    "logo",
]

_TEXT_PATTERNS: list[tuple[str, str, float]] = [
    ("question_opener", r"^(?:what|how|why|when|where|who|which|is|are|does|do|can\s+you)\s", 0.7),
    (
        "explanation",
        r"\b(?:explain|describe|tell\s+me|help\s+me\s+understand|what\s+is|what\s+are"
        r"|meaning\s+of|define)\b",
        0.75,
    ),
    ("analysis", r"\b(?:analy[sz]e|compare|contrast|evaluate|assess|review|summari[sz]e)\b", 0.8),
    (
        "pros_cons",
        r"\b(?:pros\s+and\s+cons|advantages\s+and\s+disadvantages|benefits\s+and\s+drawbacks)\b",
        0.75,
    ),
    (
        "writing",
        r"\b(?:write|compose|draft)\s+(?:me\s+)?(?:a|an|the)?\s*(?:\w+\s+)?"
        r"(?:letter|email|essay|article|report|summary|story|poem|speech|blog\s+post)\b",
        0.8,
    ),
    ("editing", r"\b(?:improve|edit|revise|proofread|rephrase|translate)\s+(?:this|my)\b", 0.75),
    ("greeting", r"^(?:hi|hello|hey|good\s+(?:morning|afternoon|evening))\b", 0.9),
    ("politeness", r"\b(?:thank\s+you|thanks|please|sorry)\b", 0.3),
]

_TEXT_KEYWORDS = [
    "explain",
    "help",
    "question",
    "answer",
    "information",
    "advice",
    "suggestion",
    "history",
    "meaning",
]


def default_rule_sets() -> dict[ContentType, RuleSet]:
    """Fresh copy of the built-in content-type rule sets."""
    return {
        ContentType.CODING: RuleSet(_CODING_PATTERNS, _CODING_KEYWORDS),
        ContentType.IMAGE: RuleSet(_IMAGE_PATTERNS, _IMAGE_KEYWORDS),
        ContentType.TEXT: RuleSet(_TEXT_PATTERNS, _TEXT_KEYWORDS),
    }


CONTENT_TYPE_RULES: dict[ContentType, RuleSet] = default_rule_sets()

# --- Difficulty indicators ---

HARD_INDICATORS: list[tuple[str, re.Pattern[str]]] = [
    (name, re.compile(pattern, re.IGNORECASE))
    for name, pattern in [
        ("architecture", r"\barchitect(?:ure|ures|ing)?\b"),
        ("distributed", r"\bdistributed\b"),
        ("scalability", r"\bscal(?:able|ability|ing)\b"),
        ("optimization", r"\boptimi[sz](?:e|es|ed|ing|ation|ations)\b"),
        ("microservices", r"\bmicro-?services?\b"),
        ("enterprise", r"\benterprise\b"),
        ("advanced", r"\badvanced\b"),
        ("comprehensive", r"\bcomprehensive\b"),
        ("concurrency", r"\b(?:concurren(?:t|cy)|multi-?thread(?:ed|ing)?|parallelism)\b"),
        ("performance", r"\bperformance\b"),
        ("machine_learning", r"\b(?:machine\s+learning|deep\s+learning|neural\s+networks?)\b"),
        ("algorithms", r"\balgorithms?\b"),
        ("security", r"\b(?:security|cryptograph(?:y|ic)|encryption)\b"),
        (
            "infrastructure",
            r"\b(?:kubernetes|infrastructure|high\s+availability|fault[\s-]toleran(?:t|ce))\b",
        ),
        ("complexity", r"\b(?:complex|sophisticated|in-depth|trade-?offs?)\b"),
        ("system_design", r"\b(?:system\s+design|event\s+sourcing|cqrs|design\s+patterns?)\b"),
    ]
]

EASY_INDICATORS: list[tuple[str, re.Pattern[str]]] = [
    (name, re.compile(pattern, re.IGNORECASE))
    for name, pattern in [
        ("what_is", r"\bwhat\s+(?:is|are)\b"),
        ("simple", r"\bsimple\b"),
        ("basic", r"\bbasics?\b"),
        ("beginner", r"\bbeginners?\b"),
        ("introduction", r"\bintro(?:duction)?\b"),
        ("tutorial", r"\btutorial\b"),
        ("hello_world", r"\bhello\s+world\b"),
        ("example", r"\bexample\s+of\b"),
        ("definition", r"\b(?:define|definition\s+of)\b"),
        ("quick", r"\bquick(?:ly)?\b"),
    ]
]

# --- Context markers ---

FOLLOW_UP_MARKERS: list[tuple[str, re.Pattern[str]]] = [
    (name, re.compile(pattern, re.IGNORECASE))
    for name, pattern in [
        ("also", r"\balso\b"),
        ("more_about", r"\bmore\s+about\b"),
        ("can_you", r"\bcan\s+you\b"),
        ("what_about", r"\bwhat\s+about\b"),
        ("tell_me_more", r"\btell\s+me\s+more\b"),
        ("additionally", r"\b(?:additionally|furthermore|moreover)\b"),
        ("continue", r"\b(?:continue|elaborate|expand\s+on)\b"),
        ("as_well", r"\bas\s+well\b"),
        ("conjunction_opener", r"^(?:and|so|then)\b"),
    ]
]

CORRECTION_MARKERS: list[tuple[str, re.Pattern[str]]] = [
    (name, re.compile(pattern, re.IGNORECASE))
    for name, pattern in [
        ("no_opener", r"^no\s*[,.!]"),
        (
            "thats_wrong",
            r"\bthat(?:['’]?s|\s+is)\s+(?:wrong|incorrect|not\s+(?:right|correct|what))",
        ),
        ("fix_the", r"\bfix\s+the\b"),
        ("incorrect", r"\bincorrect\b"),
        ("not_quite_right", r"\bnot\s+quite\s+right\b"),
        ("try_again", r"\btry\s+again\b"),
        ("i_meant", r"\bi\s+meant\b"),
        ("actually_opener", r"^actually\b"),
    ]
]


def matched_names(text: str, table: Iterable[tuple[str, re.Pattern[str]]]) -> list[str]:
    """Names of all entries in ``table`` whose pattern occurs in ``text``."""
    return [name for name, pattern in table if pattern.search(text)]


def count_routing_rules(rule_sets: Mapping[ContentType, RuleSet] | None = None) -> int:
    """Total number of static rules across all heuristic tables."""
    sets = rule_sets if rule_sets is not None else CONTENT_TYPE_RULES
    return (
        sum(len(rule_set) for rule_set in sets.values())
        + len(HARD_INDICATORS)
        + len(EASY_INDICATORS)
        + len(FOLLOW_UP_MARKERS)
        + len(CORRECTION_MARKERS)
    )
