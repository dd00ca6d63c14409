import streamlit as st
from core.formatting import importance_stars, importance_label


def importance_input(label: str = "重要程度", value: int = 3, key: str = None) -> int:
    """1-5 星的重要程度选择器"""
    return st.select_slider(
        label,
        options=[1, 2, 3, 4, 5],
        value=value,
        format_func=lambda v: f"{importance_stars(v)} {importance_label(v)}",
        key=key,
    )


def render_importance(importance: int):
    st.caption(f"{importance_stars(importance)} {importance_label(importance)}")
