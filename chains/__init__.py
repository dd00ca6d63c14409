from chains.summaries import (
    create_record_summary_chain, create_event_summary_chain,
    create_period_summary_chain, format_records_for_prompt
)
