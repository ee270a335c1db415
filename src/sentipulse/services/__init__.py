"""Services for Sentipulse."""

from .classifier import ClassifierFactory, OpenAIClassifier, LexiconClassifier
from .project_store import ProjectStore

__all__ = [
    "ClassifierFactory",
    "OpenAIClassifier",
    "LexiconClassifier",
    "ProjectStore",
]
