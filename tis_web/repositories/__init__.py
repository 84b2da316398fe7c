from .history_repository import HistoryRepository

__all__ = ["HistoryRepository"]
