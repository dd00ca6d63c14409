"""
周期总结页面 (Summary View)
按日/周/月/年生成 AI 总结报告，并提供报告与原始事件记录的导出。
"""
import streamlit as st
from core.formatting import format_date_range
from core.periods import PERIOD_NAMES, get_period_window, now_local
from infra.storage import event_store
from infra.utils.export import (
    build_period_events_export, export_period_summary_markdown, export_filename, export_as_pdf,
)
from services.summary_service import SummaryService
from ui_components.common import PageContext, navigate, notify, run_action

REPORT_KEY = "period_report"
EVENTS_EXPORT_KEY = "period_events_export"


def _render_report(report):
    period_name = PERIOD_NAMES[report.period]
    st.success(f"{format_date_range(report.window)} · 共 {report.event_count} 个事件")
    with st.container(border=True):
        st.markdown(report.summary)

    markdown = export_period_summary_markdown(report)
    c1, c2 = st.columns(2)
    c1.download_button(
        "📥 下载 Markdown",
        data=markdown.encode("utf-8"),
        file_name=export_filename("总结", report.period, report.window, "md"),
        mime="text/markdown",
        width="stretch",
    )
    if c2.button("📄 生成 PDF", width="stretch"):
        ok, pdf_bytes = run_action(export_as_pdf, f"{period_name}总结报告", markdown,
                                   spinner_text="正在生成 PDF...", error_message="PDF 生成失败")
        if ok:
            c2.download_button(
                "📥 下载 PDF",
                data=pdf_bytes,
                file_name=export_filename("总结", report.period, report.window, "pdf"),
                mime="application/pdf",
                width="stretch",
            )


def render_summary_view(ctx: PageContext):
    if st.button("← 返回首页"):
        navigate("/")
    st.header("📊 周期总结")

    period = st.radio("总结周期", list(PERIOD_NAMES.keys()), horizontal=True,
                      format_func=lambda p: f"{PERIOD_NAMES[p]}总结")
    window = get_period_window(period, now_local())
    st.caption(f"时间范围：{format_date_range(window)}")

    c1, c2 = st.columns(2)
    if c1.button("✨ 生成总结", type="primary", width="stretch"):
        st.session_state.pop(REPORT_KEY, None)
        ok, report = run_action(SummaryService.generate_period_report, ctx.backend, ctx.identity, period,
                                spinner_text="AI 正在生成总结报告...", error_message="无法生成总结报告，请稍后重试")
        if ok:
            st.session_state[REPORT_KEY] = report
            notify(f"已生成{format_date_range(report.window)}的总结报告")

    if c2.button("📦 导出全部事件", width="stretch"):
        st.session_state.pop(EVENTS_EXPORT_KEY, None)
        ok, events = run_action(event_store.get_events_with_records_by_date_range,
                                ctx.backend, ctx.identity, window.start, window.end,
                                spinner_text="正在整理事件...", error_message="导出失败，请稍后重试")
        if ok and not events:
            notify("该时间段内没有事件记录", icon="⚠️")
        elif ok:
            st.session_state[EVENTS_EXPORT_KEY] = build_period_events_export(period, window, events)

    exported = st.session_state.get(EVENTS_EXPORT_KEY)
    if exported and exported.matches(period, window):
        st.download_button("📥 下载事件记录", data=exported.content.encode("utf-8"), file_name=exported.file_name,
                           mime="text/markdown")

    report = st.session_state.get(REPORT_KEY)
    if report and report.period == period:
        _render_report(report)
