"""
事件总结链模块 (Summary Chains)
定义进展整理、事件闭环总结与周期总结三条 AI 处理链。
"""
import json
from langchain_core.runnables import RunnablePassthrough
from langchain_core.output_parsers import StrOutputParser
from infra.llm.factory import get_llm
from prompts import get_prompt_template
from core.formatting import format_datetime

def format_records_for_prompt(records) -> str:
    """把进展记录渲染为带序号和时间的纯文本列表"""
    if not records:
        return "（暂无进展记录）"
    lines = []
    for i, record in enumerate(records, 1):
        lines.append(f"{i}. [{format_datetime(record.created_at)}] {record.display_text}")
    return "\n".join(lines)

def create_record_summary_chain():
    """创建进展整理链"""
    prompt = get_prompt_template("record_summarizer")
    return prompt | get_llm("record_summarizer", temperature=0.3) | StrOutputParser()

def create_event_summary_chain():
    """创建事件闭环总结链"""
    prompt = get_prompt_template("event_summarizer")
    return (
        RunnablePassthrough.assign(
            records_text=lambda x: format_records_for_prompt(x.get("records", [])),
            record_count=lambda x: len(x.get("records", [])),
        )
        | prompt | get_llm("event_summarizer", temperature=0.5) | StrOutputParser()
    )

def create_period_summary_chain():
    """创建周期总结链"""
    prompt = get_prompt_template("period_summarizer")
    return (
        RunnablePassthrough.assign(
            events_json=lambda x: json.dumps([e.to_dict() for e in x["events"]], ensure_ascii=False, indent=2),
            event_count=lambda x: len(x["events"]),
        )
        | prompt | get_llm("period_summarizer", temperature=0.5) | StrOutputParser()
    )
