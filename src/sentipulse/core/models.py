"""Data models for Sentipulse."""

import math
from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any, Union

from .constants import ColumnConstants, SentimentConstants


def _to_millis(seconds: Optional[float]) -> Optional[int]:
    if seconds is None:
        return None
    return int(round(seconds * 1000))


def _from_millis(millis: Any) -> Optional[float]:
    if millis is None:
        return None
    return float(millis) / 1000.0


def _number(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(number) else number


def _flag(value: Any) -> bool:
    """Booleans as-is; anything else only for "true", "1" or "yes"."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ColumnConstants.VERIFIED_TRUE_VALUES


@dataclass
class InputRecord:
    """A single row selected for classification."""
    text: str
    is_verified: bool = False
    engagement: float = 0.0


@dataclass
class Dataset:
    """Rows and column names produced by the ingestion layer."""
    rows: List[Dict[str, Any]]
    columns: List[str]
    source: str = ""


@dataclass(frozen=True)
class SentimentResult:
    """Classifier output for one text."""
    sentiment: str
    score: float

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls(sentiment=SentimentConstants.NEUTRAL, score=0.0)


@dataclass(frozen=True)
class PendingComment:
    """Marker for the batch currently awaiting the classifier."""
    id: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class ClassifiedComment:
    """A classified record. `id` is 1-based in input order."""
    id: int
    text: str
    sentiment: str
    score: float
    is_verified: bool = False
    engagement: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "sentiment": self.sentiment,
            "score": self.score,
            "isVerified": self.is_verified,
            "engagement": self.engagement,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassifiedComment":
        sentiment = str(data.get("sentiment") or SentimentConstants.NEUTRAL).lower()
        if sentiment not in SentimentConstants.LABELS:
            sentiment = SentimentConstants.NEUTRAL
        return cls(
            id=int(data.get("id", 0)),
            text=str(data.get("text", "")),
            sentiment=sentiment,
            score=_number(data.get("score")),
            is_verified=_flag(data.get("isVerified")),
            engagement=_number(data.get("engagement")),
        )


def _comment_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Union[ClassifiedComment, PendingComment]]:
    if not data:
        return None
    if "sentiment" in data:
        return ClassifiedComment.from_dict(data)
    return PendingComment(id=int(data.get("id", 0)), text=str(data.get("text", "")))


@dataclass
class AnalysisStats:
    """Running summary of one analysis run.

    Mutated only by the stats aggregator while a run is active. Times are
    epoch seconds; they are written as epoch milliseconds on export.
    """
    total: int = 0
    processed: int = 0
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    verified_total: int = 0
    verified_positive: int = 0
    verified_negative: int = 0
    verified_neutral: int = 0
    total_engagement: float = 0.0
    average_engagement: float = 0.0
    current_score: float = 0.0
    score_history: List[float] = field(default_factory=list)
    current_comment: Optional[Union[ClassifiedComment, PendingComment]] = None
    start_time: float = 0.0
    end_time: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None

    @property
    def progress_percent(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.processed / self.total * 100

    def snapshot(self) -> "AnalysisStats":
        """Copy that later folds will not touch."""
        return replace(self, score_history=list(self.score_history))

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "total": self.total,
            "processed": self.processed,
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
            "verifiedTotal": self.verified_total,
            "verifiedPositive": self.verified_positive,
            "verifiedNegative": self.verified_negative,
            "verifiedNeutral": self.verified_neutral,
            "totalEngagement": self.total_engagement,
            "averageEngagement": self.average_engagement,
            "currentScore": self.current_score,
            "scoreHistory": list(self.score_history),
            "startTime": _to_millis(self.start_time),
        }
        if self.current_comment is not None:
            data["currentComment"] = self.current_comment.to_dict()
        if self.end_time is not None:
            data["endTime"] = _to_millis(self.end_time)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisStats":
        return cls(
            total=int(data.get("total", 0) or 0),
            processed=int(data.get("processed", 0) or 0),
            positive=int(data.get("positive", 0) or 0),
            negative=int(data.get("negative", 0) or 0),
            neutral=int(data.get("neutral", 0) or 0),
            verified_total=int(data.get("verifiedTotal", 0) or 0),
            verified_positive=int(data.get("verifiedPositive", 0) or 0),
            verified_negative=int(data.get("verifiedNegative", 0) or 0),
            verified_neutral=int(data.get("verifiedNeutral", 0) or 0),
            total_engagement=_number(data.get("totalEngagement")),
            average_engagement=_number(data.get("averageEngagement")),
            current_score=_number(data.get("currentScore")),
            score_history=[_number(s) for s in (data.get("scoreHistory") or [])],
            current_comment=_comment_from_dict(data.get("currentComment")),
            start_time=_from_millis(data.get("startTime")) or 0.0,
            end_time=_from_millis(data.get("endTime")),
        )


@dataclass
class ExportMetadata:
    """Metadata written alongside an exported analysis."""
    column_analyzed: str
    evaluation_time: float
    processing_speed: Union[str, float]
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columnAnalyzed": self.column_analyzed,
            "evaluationTime": self.evaluation_time,
            "processingSpeed": self.processing_speed,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportMetadata":
        return cls(
            column_analyzed=str(data.get("columnAnalyzed", "")),
            evaluation_time=_number(data.get("evaluationTime")),
            processing_speed=data.get("processingSpeed", 0),
            timestamp=str(data.get("timestamp", "")),
        )


@dataclass
class ExportedAnalysis:
    """The interchange format: metadata, final stats and classified comments."""
    metadata: ExportMetadata
    stats: AnalysisStats
    comments: List[ClassifiedComment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata.to_dict(),
            "stats": self.stats.to_dict(),
            "comments": [c.to_dict() for c in self.comments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportedAnalysis":
        return cls(
            metadata=ExportMetadata.from_dict(data["metadata"]),
            stats=AnalysisStats.from_dict(data["stats"]),
            comments=[ClassifiedComment.from_dict(c) for c in data["comments"]],
        )


@dataclass
class SavedProject:
    """A named, dated wrapper around an exported analysis."""
    id: str
    name: str
    date: str
    data: ExportedAnalysis

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedProject":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            date=str(data.get("date", "")),
            data=ExportedAnalysis.from_dict(data["data"]),
        )
