"""Job Completion Aggregator - Reports build results to chats and pull requests."""

from buildit.completion.aggregator import CompletionAggregator

__all__ = ["CompletionAggregator"]
