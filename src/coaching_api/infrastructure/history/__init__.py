from coaching_api.infrastructure.history.history_tracker import HistoryTracker

__all__ = ["HistoryTracker"]
