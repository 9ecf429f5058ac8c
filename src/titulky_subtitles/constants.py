"""Static vocabularies and tables used by the signature extractor and scorer."""

from __future__ import annotations

import re
from typing import Dict, List, Tuple

UNKNOWN = "unknown"

EXPLICIT_METADATA = "explicit-metadata"
SIZE_ESTIMATE = "size-estimate"
TITLE_GUESS = "title-guess"

# Order matters: the first tag found in the text wins.
SOURCE_TAGS: List[str] = [
    "bluray",
    "bdrip",
    "remux",
    "web-dl",
    "webdl",
    "webrip",
    "hdtv",
    "dvdrip",
    "dvdscr",
    "hdcam",
    "cam",
    "ts",
]

SOURCE_GROUPS: List[frozenset] = [
    frozenset({"bluray", "bdrip", "remux"}),
    frozenset({"web-dl", "webdl", "webrip"}),
    frozenset({"dvdrip", "dvdscr"}),
    frozenset({"hdcam", "cam", "ts"}),
]

QUALITY_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("2160p", re.compile(r"2160p|4k", re.IGNORECASE)),
    ("1080p", re.compile(r"1080p", re.IGNORECASE)),
    ("720p", re.compile(r"720p", re.IGNORECASE)),
    ("480p", re.compile(r"480p", re.IGNORECASE)),
    ("360p", re.compile(r"360p", re.IGNORECASE)),
]

QUALITY_ALIASES: Dict[str, Tuple[str, ...]] = {
    "2160p": ("4k", "2160p", "uhd"),
    "1080p": ("1080p", "fhd", "fullhd"),
    "720p": ("720p", "hd"),
    "480p": ("480p", "sd"),
}

CODEC_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("x264", re.compile(r"x\.?264", re.IGNORECASE)),
    ("x265", re.compile(r"x\.?265", re.IGNORECASE)),
    ("h264", re.compile(r"h[\. ]?264", re.IGNORECASE)),
    ("h265", re.compile(r"h[\. ]?265", re.IGNORECASE)),
    ("hevc", re.compile(r"hevc", re.IGNORECASE)),
    ("avc", re.compile(r"(?<![a-z])avc(?![a-z])", re.IGNORECASE)),
    ("xvid", re.compile(r"xvid", re.IGNORECASE)),
    ("divx", re.compile(r"divx", re.IGNORECASE)),
]

AUDIO_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("dts-hd", re.compile(r"dts[\-\. ]?hd", re.IGNORECASE)),
    ("dts", re.compile(r"dts", re.IGNORECASE)),
    ("truehd", re.compile(r"true[\-\. ]?hd", re.IGNORECASE)),
    ("atmos", re.compile(r"atmos", re.IGNORECASE)),
    ("dd5.1", re.compile(r"ddp?[\. ]?5[\. ]1", re.IGNORECASE)),
    ("ac3", re.compile(r"ac3", re.IGNORECASE)),
    ("aac", re.compile(r"aac", re.IGNORECASE)),
    ("mp3", re.compile(r"mp3", re.IGNORECASE)),
    ("flac", re.compile(r"flac", re.IGNORECASE)),
]

RELEASE_GROUP_PATTERNS: List[re.Pattern] = [
    re.compile(r"-([A-Za-z0-9]+)(?:\.[A-Za-z0-9]{2,4})?\s*$"),
    re.compile(r"\[([^\[\]]+)\]"),
    re.compile(r"\{([^{}]+)\}"),
]
MIN_RELEASE_GROUP_LENGTH = 3

EDITION_KEYWORDS: List[str] = [
    "extended",
    "director",
    "directors",
    "special",
    "edition",
    "cut",
    "uncut",
    "unrated",
    "theatrical",
    "ultimate",
    "remastered",
    "anniversary",
    "collectors",
    "limited",
    "deluxe",
    "redux",
    "final",
    "complete",
    "definitive",
    "alternate",
    "international",
]

SEQUEL_WORDS: frozenset = frozenset(
    {
        "reloaded",
        "revolutions",
        "resurrection",
        "begins",
        "returns",
        "rises",
        "awakens",
        "forever",
        "reborn",
        "origins",
        "legacy",
        "part",
        "ii",
        "iii",
        "iv",
        "v",
    }
)
SEQUEL_NUMBER_RE = re.compile(r"\b(?:[2-9]|10)\b")
TITLE_ARTICLES_RE = re.compile(r"\b(?:the|a|an)\b")

# GB per hour ranges: quality -> source -> (min, max, base confidence)
SIZE_TABLE: Dict[str, Dict[str, Tuple[float, float, int]]] = {
    "2160p": {
        "remux": (25.0, 80.0, 90),
        "bdrip": (8.0, 25.0, 85),
        "web-dl": (6.0, 15.0, 80),
        "webrip": (4.0, 10.0, 75),
    },
    "1080p": {
        "remux": (15.0, 50.0, 90),
        "bdrip": (4.0, 15.0, 85),
        "web-dl": (3.0, 8.0, 80),
        "webrip": (2.0, 6.0, 75),
        "hdtv": (1.0, 4.0, 70),
    },
    "720p": {
        "bdrip": (2.0, 8.0, 85),
        "web-dl": (1.5, 4.0, 80),
        "webrip": (1.0, 3.0, 75),
        "hdtv": (0.5, 2.0, 70),
    },
    "480p": {
        "dvdrip": (0.7, 2.0, 80),
        "webrip": (0.3, 1.0, 75),
        "hdtv": (0.2, 0.8, 70),
    },
}
DEFAULT_SIZE_QUALITY = "1080p"
DEFAULT_DURATION_MINUTES = 120
MIN_DURATION_HOURS = 0.5
BYTES_PER_GB = 1024 ** 3

# Heuristic overrides, GB per hour.
CAM_OVERRIDE_GBPH = 0.5
CAM_OVERRIDE_CONFIDENCE = 60
REMUX_OVERRIDE_GBPH = 50.0
REMUX_OVERRIDE_CONFIDENCE = 85

EXPLICIT_CONFIDENCE = 95
TITLE_GUESS_CONFIDENCE = 50

# Real-Debrid file names: looser source aliases, checked in order, then a
# resolution-based guess.
DEBRID_SOURCE_ALIASES: List[Tuple[str, Tuple[str, ...]]] = [
    ("bluray", ("bluray", "blu-ray", "bdrip", "bd-rip", "brrip", "br-rip")),
    ("remux", ("remux",)),
    ("web-dl", ("web-dl", "webdl", "web.dl")),
    ("webrip", ("webrip", "web-rip", "web.rip")),
    ("hdtv", ("hdtv", "hdtvrip")),
    ("dvdrip", ("dvdrip", "dvd-rip")),
    ("cam", ("cam", "hdcam", "hd-cam", "camrip")),
    ("ts", ("ts", "hdts", "hd-ts", "telesync")),
]
DEBRID_RESOLUTION_SOURCES: List[Tuple[str, str]] = [
    ("2160p", "bluray"),
    ("4k", "bluray"),
    ("1080p", "web-dl"),
    ("720p", "webrip"),
]
DEBRID_SOURCE_CONFIDENCE = 80

# Scorer weights
W_SOURCE = 0.40
W_QUALITY = 0.25
W_CODEC = 0.15
W_RELEASE_GROUP = 0.10
W_TITLE = 0.10
NEUTRAL_SCORE = 50.0
CODEC_MIN_CONFIDENCE = 70
EXPLICIT_BONUS = 5.0
SIZE_ESTIMATE_BONUS = 2.0
SIZE_ESTIMATE_BONUS_MIN_CONFIDENCE = 60

NOISE_THRESHOLD = 2.0

MAX_VERSION_TEXT_LENGTH = 100
