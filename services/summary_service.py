"""
AI 总结业务服务 (Summary Service)
封装三类 AI 调用：单条进展整理、事件闭环总结、周期总结报告。
所有模型调用异常都会被转换为 LLMOperationError，页面层据此给出统一提示。
"""
import logging
from datetime import datetime
from typing import List, Optional
from chains import create_record_summary_chain, create_event_summary_chain, create_period_summary_chain
from core.schemas import Identity, EventRecord, PeriodEvent, PeriodReport, DateWindow
from core.exceptions import LLMOperationError, EmptyPeriodError, ConfigurationError
from core.formatting import format_date
from core.periods import PERIOD_NAMES, get_period_window
from infra.storage import event_store
from infra.storage.backend import Backend

logger = logging.getLogger(__name__)


def _invoke(chain_factory, inputs: dict, step_name: str) -> str:
    """构建并执行链；配置错误原样抛出，其余异常统一包装。"""
    try:
        chain = chain_factory()
        result = chain.invoke(inputs)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.error(f"AI 步骤 '{step_name}' 执行失败: {e}", exc_info=True)
        raise LLMOperationError(f"AI 处理失败，请稍后重试 ({e})") from e
    result = (result or "").strip()
    if not result:
        raise LLMOperationError(f"AI 步骤 '{step_name}' 返回了空结果")
    return result


class SummaryService:
    @staticmethod
    def summarize_record(content: str) -> str:
        """整理用户输入的一条进展"""
        return _invoke(create_record_summary_chain, {"content": content}, "record_summarizer")

    @staticmethod
    def summarize_event(title: str, records: List[EventRecord]) -> str:
        """根据标题与按时间排列的进展记录生成闭环总结"""
        return _invoke(create_event_summary_chain, {"title": title, "records": records}, "event_summarizer")

    @staticmethod
    def summarize_period(period: str, window: DateWindow, events: List[PeriodEvent]) -> str:
        inputs = {
            "period_name": PERIOD_NAMES[period],
            "start_date": format_date(window.start),
            "end_date": format_date(window.end),
            "events": events,
        }
        return _invoke(create_period_summary_chain, inputs, "period_summarizer")

    @staticmethod
    def generate_period_report(backend: Backend, identity: Optional[Identity], period: str,
                               now: Optional[datetime] = None) -> PeriodReport:
        """
        生成周期总结报告。

        Args:
            period (str): day / week / month / year。
            now (datetime): 锚定时间，默认为本地当前时间。

        Raises:
            EmptyPeriodError: 时间段内没有任何事件。
            LLMOperationError: 模型调用失败。
        """
        window = get_period_window(period, now)
        events = event_store.get_events_with_records_by_date_range(backend, identity, window.start, window.end)
        if not events:
            raise EmptyPeriodError("该时间段内没有事件记录")

        period_events = [PeriodEvent.from_event(e) for e in events]
        logger.info(f"正在生成{PERIOD_NAMES[period]}总结，事件数: {len(period_events)}")
        summary = SummaryService.summarize_period(period, window, period_events)
        return PeriodReport(period=period, window=window, event_count=len(events), summary=summary)
