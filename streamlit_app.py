"""Interactive explorer for Korean public parking lots."""
from __future__ import annotations

import os
from typing import Iterable, Optional

import pandas as pd
import pydeck as pdk
import streamlit as st

from parking_finder import config
from parking_finder.catalog import CatalogIndex, build_catalog_index, region_frame
from parking_finder.fees import calculate_fee, fee_table, format_duration, format_fee
from parking_finder.landmarks import LandmarkDirectory
from parking_finder.models import ParkingLot, ParkingType
from parking_finder.storage import DataStore

FREE_COLOR = [34, 160, 90, 200]
PAID_COLOR = [79, 70, 229, 200]


def lots_to_frame(lots: Iterable[ParkingLot], minutes: int = 60) -> pd.DataFrame:
    """Flatten lots into map/table rows with the fee for ``minutes`` of parking."""
    rows = [
        {
            "id": lot.id,
            "name": lot.name,
            "address": lot.address,
            "sido": lot.sido,
            "sigungu": lot.sigungu,
            "parking_type": lot.parking_type.label,
            "capacity": lot.capacity,
            "is_free": lot.is_free,
            "fee": calculate_fee(lot, minutes),
            "lat": lot.lat,
            "lng": lot.lng,
            "color": FREE_COLOR if lot.is_free else PAID_COLOR,
        }
        for lot in lots
    ]
    columns = ["id", "name", "address", "sido", "sigungu", "parking_type", "capacity", "is_free", "fee", "lat", "lng", "color"]
    return pd.DataFrame(rows, columns=columns)


@st.cache_resource
def load_index(data_dir: Optional[str] = None) -> CatalogIndex:
    store = DataStore(data_dir or config.DATA_DIR)
    return build_catalog_index(store.load_catalog())


@st.cache_resource
def load_landmarks(data_dir: Optional[str] = None) -> LandmarkDirectory:
    store = DataStore(data_dir or config.DATA_DIR)
    return LandmarkDirectory(store.load_landmarks())


def _deck(frame: pd.DataFrame, mapbox_token: Optional[str]) -> pdk.Deck:
    scatter_layer = pdk.Layer(
        "ScatterplotLayer",
        data=frame,
        get_position="[lng, lat]",
        get_fill_color="color",
        get_radius=40,
        pickable=True,
    )
    layers = []
    if not mapbox_token:
        layers.append(
            pdk.Layer(
                "TileLayer",
                data="https://tile.openstreetmap.org/{z}/{x}/{y}.png",
                min_zoom=0,
                max_zoom=19,
                tile_size=256,
            )
        )
    layers.append(scatter_layer)

    return pdk.Deck(
        map_style="mapbox://styles/mapbox/light-v11" if mapbox_token else None,
        initial_view_state=pdk.ViewState(
            latitude=float(frame["lat"].mean()),
            longitude=float(frame["lng"].mean()),
            zoom=11,
        ),
        layers=layers,
        tooltip={
            "html": "<b>{name}</b><br />{address}<br />{parking_type} · {fee}원",
            "style": {"backgroundColor": "rgba(15,23,42,0.85)", "color": "white", "fontSize": "14px"},
        },
    )


def main() -> None:
    st.set_page_config(page_title="전국 주차장 찾기", layout="wide")
    st.title("전국 공영·무료 주차장")
    st.caption("한국교통안전공단 주차정보 데이터 기반 주차장 검색 및 요금 계산")

    mapbox_token = os.environ.get("MAPBOX_API_KEY")
    if mapbox_token:
        pdk.settings.mapbox_api_key = mapbox_token

    index = load_index()
    if index.total == 0:
        st.warning("Catalog not found. Run `python -m parking_finder.cli build` to create it first.")
        st.stop()

    regions = index.regions()
    with st.sidebar:
        st.header("Filters")
        sido = st.selectbox("시도", options=[region.sido for region in regions])
        sigungu_options = ["전체"] + index.sigungu_list(sido)
        sigungu = st.selectbox("시군구", options=sigungu_options, index=0)
        free_only = st.checkbox("무료 주차장만", value=False)
        type_labels = {parking_type.label: parking_type for parking_type in ParkingType}
        selected_types = st.multiselect("유형", options=list(type_labels), default=list(type_labels))
        minutes = st.select_slider("주차 시간", options=list(config.QUICK_DURATIONS), value=60, format_func=format_duration)

    if sigungu == "전체":
        lots = index.free(sido) if free_only else index.by_sido(sido)
    else:
        lots = index.free(sido, sigungu) if free_only else index.by_sigungu(sido, sigungu)
    wanted = {type_labels[label] for label in selected_types}
    lots = [lot for lot in lots if lot.parking_type in wanted]

    if not lots:
        st.warning("No parking lots match the selected filters.")
        st.stop()

    frame = lots_to_frame(lots, minutes)
    metric_cols = st.columns(4)
    metric_cols[0].metric("주차장", f"{len(frame):,}")
    metric_cols[1].metric("무료", f"{int(frame['is_free'].sum()):,}")
    metric_cols[2].metric("총 주차면", f"{int(frame['capacity'].sum()):,}")
    paid = frame[~frame["is_free"]]
    metric_cols[3].metric(f"{format_duration(minutes)} 평균 요금", format_fee(int(paid["fee"].mean())) if not paid.empty else "-")

    map_tab, table_tab, fee_tab, landmark_tab = st.tabs(["지도", "목록", "요금 계산기", "근처 주차장"])

    with map_tab:
        st.pydeck_chart(_deck(frame, mapbox_token), use_container_width=True)

    with table_tab:
        st.dataframe(
            frame.drop(columns=["color"]).sort_values("fee"),
            use_container_width=True,
        )
        st.caption("지역별 현황")
        st.dataframe(region_frame(index.by_sido(sido)), use_container_width=True)

    with fee_tab:
        names = {f"{lot.name} ({lot.sigungu})": lot for lot in lots}
        choice = st.selectbox("주차장", options=list(names))
        lot = names[choice]
        if lot.is_free:
            st.success("이 주차장은 무료입니다.")
        else:
            custom = st.number_input("주차 시간 (분)", min_value=0, max_value=1440, value=60, step=10)
            st.metric(f"{format_duration(int(custom))} 주차 시", format_fee(calculate_fee(lot, int(custom))))
            st.table(pd.DataFrame(fee_table(lot), columns=["minutes", "fee"]))
            if lot.daily_max > 0:
                st.caption(f"일 최대 요금: {format_fee(lot.daily_max)}")
        st.caption("가까운 다른 주차장")
        st.dataframe(lots_to_frame(index.nearest_others(lot), minutes).drop(columns=["color"]), use_container_width=True)

    with landmark_tab:
        directory = load_landmarks()
        aggregates = directory.all()
        if not aggregates:
            st.info("Landmark data not found. Run `python -m parking_finder.cli landmarks` to build it.")
        else:
            by_name = {aggregate.landmark.name: aggregate for aggregate in aggregates}
            aggregate = by_name[st.selectbox("장소", options=list(by_name))]
            cols = st.columns(4)
            cols[0].metric("전체", aggregate.total)
            cols[1].metric("무료", aggregate.free)
            cols[2].metric("유료", aggregate.paid)
            cols[3].metric("평균 기본요금", format_fee(aggregate.avg_base_fee))
            st.dataframe(pd.DataFrame([entry.to_dict() for entry in aggregate.cheapest]), use_container_width=True)


if __name__ == "__main__":
    main()
