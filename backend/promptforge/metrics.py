from __future__ import annotations

from prometheus_client import Counter

# Persistence metrics
conversations_saved_total = Counter(
    "promptforge_conversations_saved_total",
    "Total conversation snapshot saves",
    ["outcome"],
)

conversations_deleted_total = Counter(
    "promptforge_conversations_deleted_total",
    "Total conversation deletions",
)

history_records_total = Counter(
    "promptforge_history_records_total",
    "Total history records written",
    ["success"],
)

# Prompt library metrics
prompts_used_total = Counter(
    "promptforge_prompts_used_total",
    "Total saved prompt loads",
)

# Execution metrics
executions_total = Counter(
    "promptforge_executions_total",
    "Total canned executions served",
    ["endpoint"],
)
