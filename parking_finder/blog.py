"""Jekyll blog posts generated from landmark aggregates."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Mapping

from . import config
from .fees import format_fee
from .models import LandmarkAggregate, LotSummary

logger = logging.getLogger(__name__)

SAVING_TIPS = (
    "**무료 주차장 우선 확인**: {name} 근처에는 {free}곳의 무료 주차장이 있습니다. "
    "조금 걸어야 하더라도 무료 주차장을 이용하면 비용을 크게 절약할 수 있습니다.",
    "**공영 주차장 이용**: 공영 주차장은 민영보다 평균 30~50% 저렴합니다.",
    "**일 최대 요금 확인**: 장시간 주차 시에는 일 최대 요금이 설정된 주차장을 선택하면 "
    "예상치 못한 요금 폭탄을 피할 수 있습니다.",
    "**주말·공휴일 요금 확인**: 일부 공영 주차장은 주말에 무료 또는 할인 요금을 적용합니다.",
    "**대중교통 병행**: 주차비가 부담된다면 외곽 무료 주차장에 주차 후 대중교통으로 이동하는 것도 좋은 방법입니다.",
)


def _rate(fee: int, minutes: int, default_minutes: int) -> str:
    return f"{format_fee(fee)}/{minutes or default_minutes}분"


def _daily_cell(lot: LotSummary, show_column: bool) -> str:
    if not show_column:
        return ""
    if lot.daily_max > 0:
        return f"{format_fee(lot.daily_max)} | "
    return "- | "


def _front_matter(data: LandmarkAggregate, date: str) -> str:
    name = data.landmark.name
    title = f"{name} 근처 주차장 요금 비교 - 무료·공영 주차장 총정리 ({date[:4]})"
    excerpt = (
        f"{name} 근처 주차장 {data.total}곳의 요금과 위치를 비교합니다. "
        f"무료 주차장 {data.free}곳, 공영 주차장 {data.public}곳의 운영시간과 요금 정보를 한눈에 확인하세요."
    )
    tags = "\n".join(f"  - {tag}" for tag in ("주차장", name, "주차요금", "무료주차장", "공영주차장"))
    return (
        "---\n"
        "layout: single\n"
        f'title: "{title}"\n'
        f"date: {date}\n"
        f"last_modified_at: {date}T12:00:00+09:00\n"
        "categories:\n"
        "  - parking\n"
        "tags:\n"
        f"{tags}\n"
        "author: Daniel\n"
        f'excerpt: "{excerpt}"\n'
        "toc: true\n"
        "toc_sticky: true\n"
        'toc_label: "목차"\n'
        "---\n\n"
    )


def _overview(data: LandmarkAggregate) -> str:
    lm = data.landmark
    free_ratio = (data.free * 200 + data.total) // (data.total * 2) if data.total else 0
    text = (
        f"## {lm.name} 근처 주차장 현황\n\n"
        f"{lm.name}({lm.description}) 반경 1km 이내에는 **총 {data.total}곳**의 주차장이 있습니다.\n\n"
        "| 구분 | 수량 |\n"
        "|------|------|\n"
        f"| 전체 주차장 | **{data.total}곳** |\n"
        f"| 무료 주차장 | {data.free}곳 ({free_ratio}%) |\n"
        f"| 유료 주차장 | {data.paid}곳 |\n"
        f"| 공영 주차장 | {data.public}곳 |\n\n"
    )
    if data.paid > 0 and data.avg_base_fee > 0:
        text += (
            f"### {lm.name} 주차장 평균 요금\n\n"
            "| 항목 | 금액 |\n"
            "|------|------|\n"
            f"| 평균 기본요금 | **{format_fee(data.avg_base_fee)}** |\n"
            f"| 평균 추가요금 | {format_fee(data.avg_add_fee)} |\n"
        )
        if data.avg_daily_max > 0:
            text += f"| 평균 일 최대요금 | {format_fee(data.avg_daily_max)} |\n"
        text += (
            "\n> 기본요금은 최초 주차 시간(보통 30분)에 대한 요금이며, "
            "이후 추가 시간(보통 10분)당 추가요금이 부과됩니다.\n\n"
        )
    return text


def _free_section(data: LandmarkAggregate) -> str:
    if data.free == 0 or not data.top_free:
        return ""
    name = data.landmark.name
    show_capacity = bool(data.top_free[0].capacity)
    intro = f" 가장 가까운 {len(data.top_free)}곳을 소개합니다." if data.free > config.TOP_N else ""
    lines = [
        f"## {name} 근처 무료 주차장\n",
        f"{name} 주변에는 **{data.free}곳의 무료 주차장**이 있습니다.{intro}\n",
        f"| 주차장명 | 주소 | {'수용대수 | ' if show_capacity else ''}거리 |",
        f"|----------|------|{'---------|' if show_capacity else ''}------|",
    ]
    for lot in data.top_free:
        capacity = f"{lot.capacity}대 | " if lot.capacity else ""
        lines.append(f"| {lot.name} | {lot.address} | {capacity}{lot.distance}m |")
    lines.append("\n> 무료 주차장은 주말이나 공휴일에 혼잡할 수 있으므로 여유 있게 도착하는 것을 추천합니다.\n\n")
    return "\n".join(lines)


def _public_section(data: LandmarkAggregate) -> str:
    if not data.top_public:
        return ""
    name = data.landmark.name
    show_daily = any(lot.daily_max > 0 for lot in data.top_public)
    lines = [
        f"## {name} 근처 공영 주차장 요금\n",
        "공영 주차장은 지방자치단체가 운영하여 민영 주차장보다 요금이 저렴한 편입니다.\n",
        f"| 주차장명 | 기본요금 | 추가요금 | {'일 최대 | ' if show_daily else ''}거리 |",
        f"|----------|----------|----------|{'---------|' if show_daily else ''}------|",
    ]
    for lot in data.top_public:
        lines.append(
            f"| {lot.name} | {_rate(lot.base_fee, lot.base_time, 30)} | {_rate(lot.add_fee, lot.add_time, 10)} | "
            f"{_daily_cell(lot, show_daily)}{lot.distance}m |"
        )
    return "\n".join(lines) + "\n\n"


def _cheapest_section(data: LandmarkAggregate) -> str:
    if not data.cheapest:
        return ""
    name = data.landmark.name
    show_daily = any(lot.daily_max > 0 for lot in data.cheapest)
    lines = [
        f"## {name} 근처 저렴한 주차장 TOP {len(data.cheapest)}\n",
        "요금이 가장 저렴한 유료 주차장을 정리했습니다.\n",
        f"| 순위 | 주차장명 | 유형 | 기본요금 | 추가요금 | {'일 최대 | ' if show_daily else ''}거리 |",
        f"|------|----------|------|----------|----------|{'---------|' if show_daily else ''}------|",
    ]
    for rank, lot in enumerate(data.cheapest, start=1):
        lines.append(
            f"| {rank} | {lot.name} | {lot.parking_type} | {_rate(lot.base_fee, lot.base_time, 30)} | "
            f"{_rate(lot.add_fee, lot.add_time, 10)} | {_daily_cell(lot, show_daily)}{lot.distance}m |"
        )
    return "\n".join(lines) + "\n\n"


def _tips_section(data: LandmarkAggregate) -> str:
    name = data.landmark.name
    tips = "\n".join(
        f"{index}. {tip.format(name=name, free=data.free)}" for index, tip in enumerate(SAVING_TIPS, start=1)
    )
    return f"## {name} 주차 요금 절약 팁\n\n{tips}\n\n"


def _faq_section(data: LandmarkAggregate) -> str:
    name = data.landmark.name
    avg = format_fee(data.avg_base_fee) if data.avg_base_fee > 0 else "무료 주차장 위주"
    cheapest = ""
    if data.cheapest:
        first = data.cheapest[0]
        cheapest = f"가장 저렴한 주차장은 {first.name}으로 {_rate(first.base_fee, first.base_time, 30)}입니다."
    nearest_free = ""
    if data.top_free:
        nearest_free = f" 가장 가까운 무료 주차장은 {data.top_free[0].name}({data.top_free[0].distance}m)입니다."
    return (
        "## 자주 묻는 질문\n\n"
        f"### {name} 근처 주차장 요금은 얼마인가요?\n\n"
        f"{name} 근처 유료 주차장의 평균 기본요금은 **{avg}**입니다. {cheapest}\n\n"
        f"### {name} 근처에 무료 주차장이 있나요?\n\n"
        f"네, {name} 반경 1km 이내에 **{data.free}곳의 무료 주차장**이 있습니다.{nearest_free}\n\n"
        f"### {name} 근처 공영 주차장은 몇 곳인가요?\n\n"
        f"{name} 반경 1km 이내에 **{data.public}곳의 공영 주차장**이 있습니다. "
        "공영 주차장은 지자체가 운영하여 민영 주차장보다 요금이 저렴합니다.\n\n"
    )


def _links_section(data: LandmarkAggregate) -> str:
    name = data.landmark.name
    site = config.SITE_URL
    host = site.split("://", 1)[-1]
    return (
        "## 더 많은 주차장 정보\n\n"
        f"위 정보는 한국교통안전공단 데이터를 기반으로 작성되었습니다. {name} 근처의 "
        "**더 상세한 주차장 정보와 실시간 요금 비교**는 아래 사이트에서 확인할 수 있습니다.\n\n"
        f"- [전국 주차장 검색 및 요금 비교 - {host}]({site})\n"
        f"- [무료 주차장 찾기]({site}/free/)\n"
        f"- [주차 요금 비교하기]({site}/compare/)\n"
    )


def render_post(data: LandmarkAggregate, date: str) -> str:
    """Markdown (with front matter) for one landmark."""
    return "".join(
        (
            _front_matter(data, date),
            _overview(data),
            _free_section(data),
            _public_section(data),
            _cheapest_section(data),
            _tips_section(data),
            _faq_section(data),
            _links_section(data),
        )
    )


def post_filename(slug: str, date: str) -> str:
    return f"{date}-parking-near-{slug}.md"


def generate_posts(
    aggregates: Mapping[str, LandmarkAggregate] | Iterable[LandmarkAggregate],
    output_dir: Path | str,
    date: str,
    *,
    min_total: int = config.MIN_LANDMARK_LOTS,
) -> List[Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    entries = aggregates.values() if isinstance(aggregates, Mapping) else aggregates

    written: List[Path] = []
    for data in entries:
        if data.total < min_total:
            continue
        path = output_dir / post_filename(data.landmark.slug, date)
        path.write_text(render_post(data, date), encoding="utf-8")
        written.append(path)
        logger.info("[%s] %s -> %s", len(written), data.landmark.name, path.name)

    logger.info("Generated %s posts in %s", len(written), output_dir)
    return written


__all__ = ["render_post", "generate_posts", "post_filename"]
