"""Province/district extraction and URL slugs.

Region classification is driven by ordered rule tables so the policy can be
inspected and tested on its own. Tables are evaluated top to bottom and the
first hit wins.
"""
from __future__ import annotations

import re
from typing import Dict, List, Pattern, Tuple
from urllib.parse import quote, unquote

# Short province names, matched as substrings of the address in this order
SIDO_SHORT_NAMES: Tuple[str, ...] = (
    "서울", "부산", "대구", "인천", "광주", "대전", "울산", "세종",
    "경기", "강원", "충북", "충남", "전북", "전남", "경북", "경남", "제주",
)

# Full legal names, matched as an address prefix when no short name is found
SIDO_FULL_NAMES: Tuple[Tuple[str, str], ...] = (
    ("서울특별시", "서울"),
    ("부산광역시", "부산"),
    ("대구광역시", "대구"),
    ("인천광역시", "인천"),
    ("광주광역시", "광주"),
    ("대전광역시", "대전"),
    ("울산광역시", "울산"),
    ("세종특별자치시", "세종"),
    ("경기도", "경기"),
    ("강원특별자치도", "강원"),
    ("강원도", "강원"),
    ("충청북도", "충북"),
    ("충청남도", "충남"),
    ("전라북도", "전북"),
    ("전북특별자치도", "전북"),
    ("전라남도", "전남"),
    ("경상북도", "경북"),
    ("경상남도", "경남"),
    ("제주특별자치도", "제주"),
)

# (pattern, label) pairs. Metropolitan cities are tried before provinces.
SIGUNGU_RULES: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"(?:특별시|광역시|특별자치시)\s+(\S+[구군])"), "metropolitan"),
    (re.compile(r"(?:특별자치도|도)\s+(\S+[시군구])"), "province"),
)

# District assigned when no rule matches
OTHER_SIGUNGU: str = "기타"

# Catalog ordering: larger markets first
SIDO_PRIORITY: Tuple[str, ...] = (
    "서울", "경기", "부산", "인천", "대구", "대전", "광주", "울산", "세종",
    "강원", "충북", "충남", "전북", "전남", "경북", "경남", "제주",
)

SIDO_SLUGS: Dict[str, str] = {
    "서울": "seoul",
    "경기": "gyeonggi",
    "부산": "busan",
    "인천": "incheon",
    "대구": "daegu",
    "대전": "daejeon",
    "광주": "gwangju",
    "울산": "ulsan",
    "세종": "sejong",
    "강원": "gangwon",
    "충북": "chungbuk",
    "충남": "chungnam",
    "전북": "jeonbuk",
    "전남": "jeonnam",
    "경북": "gyeongbuk",
    "경남": "gyeongnam",
    "제주": "jeju",
}

SLUG_SIDOS: Dict[str, str] = {slug: sido for sido, slug in SIDO_SLUGS.items()}


def extract_sido(address: str) -> str:
    """Return the short province name for ``address`` or ``""``."""
    for sido in SIDO_SHORT_NAMES:
        if sido in address:
            return sido
    for full_name, short_name in SIDO_FULL_NAMES:
        if address.startswith(full_name):
            return short_name
    return ""


def match_sigungu(address: str) -> Tuple[str, str]:
    """Return ``(district, rule label)``; the label is ``""`` when nothing matched."""
    for pattern, label in SIGUNGU_RULES:
        match = pattern.search(address)
        if match:
            return match.group(1), label
    return "", ""


def extract_sigungu(address: str) -> str:
    district, _ = match_sigungu(address)
    return district or OTHER_SIGUNGU


def sido_rank(sido: str) -> int:
    try:
        return SIDO_PRIORITY.index(sido)
    except ValueError:
        return len(SIDO_PRIORITY)


def sido_to_slug(sido: str) -> str:
    return SIDO_SLUGS.get(sido, sido.lower())


def slug_to_sido(slug: str) -> str:
    return SLUG_SIDOS.get(slug, slug)


def sigungu_to_slug(sigungu: str) -> str:
    # encodeURIComponent leaves these characters alone as well
    return quote(sigungu, safe="-_.!~*'()")


def slug_to_sigungu(slug: str) -> str:
    return unquote(slug)


def all_sido_slugs() -> List[str]:
    return [SIDO_SLUGS[sido] for sido in SIDO_PRIORITY]


__all__ = [
    "SIDO_SHORT_NAMES",
    "SIDO_FULL_NAMES",
    "SIGUNGU_RULES",
    "OTHER_SIGUNGU",
    "SIDO_PRIORITY",
    "SIDO_SLUGS",
    "extract_sido",
    "extract_sigungu",
    "match_sigungu",
    "sido_rank",
    "sido_to_slug",
    "slug_to_sido",
    "sigungu_to_slug",
    "slug_to_sigungu",
    "all_sido_slugs",
]
