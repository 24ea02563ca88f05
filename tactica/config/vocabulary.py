"""
Tactica - Game Vocabulary
==========================
Keyword tables consumed by the query interpreter and the keyword
scorer.  Everything here is plain data so the classification rules can
be reviewed and extended without touching the rule engine.

Ordering matters: every tuple of ``(keyword, value)`` pairs is scanned
top-down and the first hit wins.

Exports
-------
STOP_WORDS, DOMAIN_ABBREVIATIONS,
UPGRADE_KEYWORDS, UPGRADE_KEYWORD_PAIRS, UPGRADE_ITEM_TYPES, UPGRADE_FOCUS,
ATTACK_KEYWORDS, ATTACK_TYPES, ATTACK_PURPOSES, UNIT_NAMES,
BASE_KEYWORDS, BASE_KEYWORD_PAIRS, BASE_TYPES,
RESOURCE_KEYWORDS, RESOURCE_GOALS.
"""

# ══════════════════════════════════════════════════════════════════════
#  KEYWORD EXTRACTION
# ══════════════════════════════════════════════════════════════════════

STOP_WORDS: frozenset[str] = frozenset({
    "a", "about", "an", "and", "are", "as", "at", "be", "by", "for", "from", "how",
    "i", "in", "is", "it", "of", "on", "or", "that", "the", "this", "to", "was",
    "what", "when", "where", "who", "will", "with", "can", "you", "me", "my",
    "should", "would", "could", "need", "regarding", "tell",
})

# Kept even though they are shorter than the minimum keyword length
DOMAIN_ABBREVIATIONS: tuple[str, ...] = ("th", "war", "coc")


# ══════════════════════════════════════════════════════════════════════
#  UPGRADE PRIORITY
# ══════════════════════════════════════════════════════════════════════

UPGRADE_KEYWORDS: tuple[str, ...] = ("upgrade", "priority", "what should i upgrade", "upgrade first", "upgrade next", "what to upgrade")
UPGRADE_KEYWORD_PAIRS: tuple[tuple[str, str], ...] = (("max", "first"), ("focus", "upgrade"))

UPGRADE_ITEM_TYPES: tuple[tuple[str, str], ...] = (
    ("troop", "troop"), ("army", "troop"),
    ("spell", "spell"),
    ("hero", "hero"),
    ("defense", "defense"), ("building", "defense"), ("structure", "defense"),
    ("tower", "defense"), ("cannon", "defense"), ("mortar", "defense"),
)

UPGRADE_FOCUS: tuple[tuple[str, str], ...] = (
    ("offense", "offense"), ("attack", "offense"), ("troop", "offense"), ("spell", "offense"), ("army", "offense"),
    ("defense", "defense"), ("defend", "defense"), ("wall", "defense"), ("protect", "defense"),
)


# ══════════════════════════════════════════════════════════════════════
#  ATTACK STRATEGY
# ══════════════════════════════════════════════════════════════════════

ATTACK_KEYWORDS: tuple[str, ...] = (
    "attack", "strategy", "army", "raid", "war attack", "attack plan", "composition",
    "how to beat", "how to attack", "best troops for", "troop comp",
)

ATTACK_TYPES: tuple[tuple[str, str], ...] = (
    ("air", "air"), ("dragon", "air"), ("balloon", "air"), ("hound", "air"),
    ("ground", "ground"), ("hog", "ground"), ("giant", "ground"), ("golem", "ground"),
    ("pekka", "ground"), ("barbarian", "ground"), ("archer", "ground"),
)

ATTACK_PURPOSES: tuple[tuple[str, str], ...] = (
    ("farm", "farming"), ("loot", "farming"),
    ("war", "war"), ("clan war", "war"),
    ("trophy", "trophy"), ("push", "trophy"),
)

# Scanned in this order; the first listed name found in the text wins
UNIT_NAMES: tuple[str, ...] = (
    "barbarian", "archer", "giant", "goblin", "wall breaker",
    "balloon", "wizard", "healer", "dragon", "pekka", "baby dragon",
    "miner", "electro dragon", "yeti", "dragon rider", "hog rider",
    "valkyrie", "golem", "witch", "lava hound", "bowler", "ice golem",
    "headhunter",
)


# ══════════════════════════════════════════════════════════════════════
#  BASE DESIGN
# ══════════════════════════════════════════════════════════════════════

BASE_KEYWORDS: tuple[str, ...] = (
    "base", "layout", "design", "village layout", "base plan", "defense layout",
    "base design", "village setup", "how to build",
)
BASE_KEYWORD_PAIRS: tuple[tuple[str, str], ...] = (("arrange", "defense"), ("place", "building"))

BASE_TYPES: tuple[tuple[str, str], ...] = (
    ("farm", "farming"), ("loot", "farming"),
    ("war", "war"), ("clan war", "war"),
    ("trophy", "trophy"), ("push", "trophy"),
    ("hybrid", "hybrid"),
)


# ══════════════════════════════════════════════════════════════════════
#  RESOURCE MANAGEMENT
# ══════════════════════════════════════════════════════════════════════

RESOURCE_KEYWORDS: tuple[str, ...] = (
    "resource", "gold", "elixir", "dark elixir", "save", "spend", "economy",
    "farm", "loot", "best way to get", "how to get more",
)

RESOURCE_GOALS: tuple[tuple[str, str], ...] = (
    ("save", "saving"), ("store", "saving"),
    ("farm", "farming"), ("collect", "farming"), ("get", "farming"),
    ("spend", "spending"), ("use", "spending"),
)
