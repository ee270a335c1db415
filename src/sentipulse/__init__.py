"""Sentipulse - batch sentiment analysis with live statistics and comparison."""

__version__ = "1.0.0"

from .core.models import *
from .core.config import settings
from .core.comparison import compare
from .core.scheduler import SentimentPipeline
from .services.classifier import ClassifierFactory

__all__ = [
    "settings",
    "compare",
    "SentimentPipeline",
    "ClassifierFactory",
]
