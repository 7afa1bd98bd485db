"""Broker adapter module."""

from .adapter import IBrokerAdapter, KafkaBrokerAdapter, UNKNOWN_SESSION_KEY, partition_key

__all__ = ["IBrokerAdapter", "KafkaBrokerAdapter", "UNKNOWN_SESSION_KEY", "partition_key"]
