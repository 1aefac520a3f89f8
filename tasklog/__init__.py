"""tasklog: a personal ledger of task times grouped by working day."""

__version__ = "0.1.0"
