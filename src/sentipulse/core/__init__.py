"""Core modules for Sentipulse."""

from .models import *
from .config import settings
from .aggregator import StatsAggregator
from .scoring import smooth, brand_sentiment, net_sentiment_score

__all__ = [
    "settings",
    "InputRecord",
    "SentimentResult",
    "ClassifiedComment",
    "AnalysisStats",
    "ExportedAnalysis",
    "SavedProject",
    "StatsAggregator",
    "smooth",
    "brand_sentiment",
    "net_sentiment_score",
]
