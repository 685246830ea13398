"""Classification, execution, logging and summary extraction.

Nothing in lib/ depends on the hook envelope; hooks/ builds on top of it.
"""

from command_filter.lib.classifier import classify
from command_filter.lib.executor import CommandRequest, ExecutionResult, execute
from command_filter.lib.log_store import LogRecord, LogStore, LogStoreError
from command_filter.lib.rules import DEFAULT_RULES, Category, ClassifierRule
from command_filter.lib.summarizers import Summary, summarize

__all__ = [
    "DEFAULT_RULES",
    "Category",
    "ClassifierRule",
    "CommandRequest",
    "ExecutionResult",
    "LogRecord",
    "LogStore",
    "LogStoreError",
    "Summary",
    "classify",
    "execute",
    "summarize",
]
