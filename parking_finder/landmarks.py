"""Landmark proximity aggregates."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from . import config
from .geo import NearbyLot, distance_m, find_near
from .models import Landmark, LandmarkAggregate, LotSummary, ParkingLot

logger = logging.getLogger(__name__)


def _lm(name: str, slug: str, lat: float, lng: float, category: str, description: str) -> Landmark:
    return Landmark(name=name, slug=slug, lat=lat, lng=lng, category=category, description=description)


# Ordered by search volume
LANDMARKS: Sequence[Landmark] = (
    # 서울 역세권
    _lm("강남역", "gangnam-station", 37.4979, 127.0276, "서울 역세권", "서울 최대 상업지구"),
    _lm("서울역", "seoul-station", 37.5547, 126.9707, "서울 역세권", "KTX·지하철 환승 허브"),
    _lm("홍대입구역", "hongdae-station", 37.5571, 126.9246, "서울 역세권", "홍대 문화거리 중심"),
    _lm("잠실역", "jamsil-station", 37.5133, 127.1001, "서울 역세권", "롯데월드·올림픽공원 인접"),
    _lm("명동역", "myeongdong-station", 37.5609, 126.9862, "서울 역세권", "쇼핑·관광 중심지"),
    _lm("여의도역", "yeouido-station", 37.5216, 126.9243, "서울 역세권", "금융·방송 중심지"),
    _lm("신촌역", "sinchon-station", 37.5553, 126.9366, "서울 역세권", "대학가 밀집 지역"),
    _lm("건대입구역", "kondae-station", 37.5404, 127.0693, "서울 역세권", "건국대·커먼그라운드"),
    _lm("합정역", "hapjeong-station", 37.5497, 126.9139, "서울 역세권", "망원·합정 카페거리"),
    _lm("종로3가역", "jongno3-station", 37.5710, 126.9920, "서울 역세권", "종묘·인사동·탑골공원"),
    _lm("이태원역", "itaewon-station", 37.5346, 126.9946, "서울 역세권", "이태원 맛집·카페 거리"),
    _lm("삼성역", "samsung-station", 37.5089, 127.0637, "서울 역세권", "코엑스·현대백화점"),
    # 서울 랜드마크
    _lm("코엑스", "coex", 37.5120, 127.0590, "서울 랜드마크", "전시·컨벤션·쇼핑몰"),
    _lm("동대문시장", "dongdaemun-market", 37.5670, 127.0095, "서울 랜드마크", "패션·원단 도매시장"),
    _lm("광화문", "gwanghwamun", 37.5760, 126.9769, "서울 랜드마크", "경복궁·광화문광장"),
    _lm("남대문시장", "namdaemun-market", 37.5592, 126.9773, "서울 랜드마크", "전통시장·수입 상품"),
    _lm("가로수길", "garosugil", 37.5199, 127.0231, "서울 랜드마크", "신사동 카페·패션 거리"),
    _lm("북촌한옥마을", "bukchon-hanok", 37.5827, 126.9836, "서울 랜드마크", "전통 한옥 관광지"),
    _lm("여의도 한강공원", "yeouido-hangang", 37.5270, 126.9340, "서울 랜드마크", "봄꽃·불꽃축제 명소"),
    _lm("잠실 롯데월드", "lotte-world", 37.5112, 127.0981, "서울 랜드마크", "테마파크·쇼핑몰"),
    # 서울 병원
    _lm("서울아산병원", "asan-hospital", 37.5268, 127.1084, "서울 병원", "송파구 대형 종합병원"),
    _lm("삼성서울병원", "samsung-hospital", 37.4881, 127.0855, "서울 병원", "강남구 대형 종합병원"),
    _lm("세브란스병원", "severance-hospital", 37.5622, 126.9410, "서울 병원", "신촌 연세의료원"),
    _lm("서울대병원", "snuh-hospital", 37.5796, 126.9990, "서울 병원", "종로구 국립대병원"),
    # 수도권
    _lm("수원역", "suwon-station", 37.2660, 127.0001, "수도권", "경기 남부 교통 중심"),
    _lm("인천공항", "incheon-airport", 37.4602, 126.4407, "수도권", "국제공항 장기주차"),
    _lm("판교역", "pangyo-station", 37.3947, 127.1113, "수도권", "IT 기업 밀집 지역"),
    _lm("일산 킨텍스", "kintex", 37.6709, 126.7451, "수도권", "전시·컨벤션센터"),
    _lm("분당 서현역", "seohyeon-station", 37.3846, 127.1231, "수도권", "분당 중심 상업지구"),
    # 지방 주요 도시
    _lm("부산역", "busan-station", 35.1152, 129.0405, "지방", "KTX 부산 도착역"),
    _lm("해운대", "haeundae", 35.1587, 129.1604, "지방", "부산 대표 해수욕장"),
    _lm("서면역", "seomyeon-station", 35.1579, 129.0597, "지방", "부산 최대 번화가"),
    _lm("대구역", "daegu-station", 35.8791, 128.6283, "지방", "대구 도심 중심"),
    _lm("동성로", "dongseongro", 35.8694, 128.5966, "지방", "대구 대표 번화가"),
    _lm("인천역", "incheon-station", 37.4734, 126.6214, "지방", "차이나타운·월미도"),
    _lm("대전역", "daejeon-station", 36.3326, 127.4343, "지방", "충청권 교통 중심"),
    _lm("광주 충장로", "chungjangro", 35.1490, 126.9190, "지방", "광주 대표 상권"),
)


def round_mean(values: Sequence[int]) -> int:
    """Mean rounded half up; 0 for an empty sequence."""
    if not values:
        return 0
    total, count = sum(values), len(values)
    return (2 * total + count) // (2 * count)


def _summary(hit: NearbyLot) -> LotSummary:
    lot = hit.lot
    return LotSummary(
        name=lot.name,
        address=lot.address,
        distance=distance_m(hit.distance_km),
        capacity=lot.capacity,
        parking_type=lot.parking_type.label,
        weekday_open=lot.weekday_open,
        weekday_close=lot.weekday_close,
        base_time=lot.base_time,
        base_fee=lot.base_fee,
        add_time=lot.add_time,
        add_fee=lot.add_fee,
        daily_max=lot.daily_max,
    )


def build_landmark_aggregate(
    landmark: Landmark,
    lots: Iterable[ParkingLot],
    radius_km: float = config.LANDMARK_RADIUS_KM,
) -> LandmarkAggregate:
    nearby = find_near(lots, landmark.lat, landmark.lng, radius_km, max_count=None, metric="haversine")

    free_hits = [hit for hit in nearby if hit.lot.is_free]
    paid_hits = [hit for hit in nearby if not hit.lot.is_free]
    public_hits = [hit for hit in nearby if hit.lot.is_public]

    priced = [hit for hit in paid_hits if hit.lot.base_fee > 0]
    # each mean covers the paid lots with a positive value for that field
    add_fees = [hit.lot.add_fee for hit in paid_hits if hit.lot.add_fee > 0]
    daily_caps = [hit.lot.daily_max for hit in paid_hits if hit.lot.daily_max > 0]
    cheapest = sorted(priced, key=lambda hit: hit.lot.base_fee)
    top_n = config.TOP_N

    return LandmarkAggregate(
        landmark=landmark,
        total=len(nearby),
        free=len(free_hits),
        paid=len(paid_hits),
        public=len(public_hits),
        avg_base_fee=round_mean([hit.lot.base_fee for hit in priced]),
        avg_add_fee=round_mean(add_fees),
        avg_daily_max=round_mean(daily_caps),
        top_free=[_summary(hit) for hit in free_hits[:top_n]],
        top_public=[_summary(hit) for hit in public_hits if not hit.lot.is_free][:top_n],
        cheapest=[_summary(hit) for hit in cheapest[:top_n]],
    )


def build_landmark_aggregates(
    lots: Sequence[ParkingLot],
    landmarks: Iterable[Landmark] = LANDMARKS,
    radius_km: float = config.LANDMARK_RADIUS_KM,
) -> Dict[str, LandmarkAggregate]:
    results: Dict[str, LandmarkAggregate] = {}
    for landmark in landmarks:
        aggregate = build_landmark_aggregate(landmark, lots, radius_km)
        results[landmark.slug] = aggregate
        logger.info(
            "%s: %s lots (free %s, paid %s, public %s)",
            landmark.name,
            aggregate.total,
            aggregate.free,
            aggregate.paid,
            aggregate.public,
        )
    return results


class LandmarkDirectory:
    """Read side of the landmark artifact.

    Landmarks with fewer than ``min_lots`` lots nearby are treated as missing.
    """

    def __init__(self, aggregates: Mapping[str, LandmarkAggregate], *, min_lots: int = config.MIN_LANDMARK_LOTS) -> None:
        self._aggregates = dict(aggregates)
        self.min_lots = min_lots

    def _visible(self, aggregate: LandmarkAggregate) -> bool:
        return aggregate.total >= self.min_lots

    def all(self) -> List[LandmarkAggregate]:
        return [aggregate for aggregate in self._aggregates.values() if self._visible(aggregate)]

    def slugs(self) -> List[str]:
        return [slug for slug, aggregate in self._aggregates.items() if self._visible(aggregate)]

    def get(self, slug: str) -> Optional[LandmarkAggregate]:
        aggregate = self._aggregates.get(slug)
        if aggregate is None or not self._visible(aggregate):
            return None
        return aggregate

    def raw(self, slug: str) -> Optional[LandmarkAggregate]:
        """Lookup without the minimum-lot filter."""
        return self._aggregates.get(slug)


def find_landmark(slug: str, landmarks: Iterable[Landmark] = LANDMARKS) -> Optional[Landmark]:
    for landmark in landmarks:
        if landmark.slug == slug:
            return landmark
    return None


__all__ = [
    "LANDMARKS",
    "LandmarkDirectory",
    "build_landmark_aggregate",
    "build_landmark_aggregates",
    "find_landmark",
    "round_mean",
]
