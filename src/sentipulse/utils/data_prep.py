"""Data preparation for export and import."""

import datetime
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from ..core.constants import FileConstants, SentimentConstants
from ..core.exceptions import InvalidAnalysisFileError
from ..core.models import AnalysisStats, ClassifiedComment, ExportMetadata, ExportedAnalysis
from ..core.scoring import brand_sentiment, evaluation_time, net_sentiment_score, processing_speed

logger = logging.getLogger(__name__)


def build_export(column_analyzed: str, stats: AnalysisStats, comments: Sequence[ClassifiedComment],
                 timestamp: str = None) -> ExportedAnalysis:
    """Wrap final stats and comments with metadata. Timing fields are derived here."""
    return ExportedAnalysis(
        metadata=ExportMetadata(
            column_analyzed=column_analyzed,
            evaluation_time=evaluation_time(stats),
            processing_speed=processing_speed(stats),
            timestamp=timestamp or datetime.datetime.now(datetime.timezone.utc).isoformat(),
        ),
        stats=stats.snapshot(),
        comments=list(comments),
    )


def prepare_export(analysis: ExportedAnalysis) -> Dict[str, Any]:
    """Serializable export data; stats also carry brandSentiment and netSentimentScore."""
    data = analysis.to_dict()
    data["stats"]["brandSentiment"] = brand_sentiment(analysis.stats)
    data["stats"]["netSentimentScore"] = net_sentiment_score(analysis.stats)
    return data


def export_to_json(analysis: ExportedAnalysis, filename: Union[str, Path]) -> None:
    """Export analysis to JSON file."""
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(prepare_export(analysis), f, indent=2, ensure_ascii=False)
    logger.info(f"Exported analysis of {len(analysis.comments)} comments to {filename}")


def _csv_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _csv_quote(value: str) -> str:
    return '"' + str(value).replace('"', '""') + '"'


def comments_to_csv(comments: Sequence[ClassifiedComment]) -> str:
    """CSV text with header id,text,sentiment,score,isVerified,engagement."""
    lines = [",".join(FileConstants.CSV_EXPORT_HEADERS)]
    for c in comments:
        lines.append(",".join([
            str(c.id),
            _csv_quote(c.text),
            _csv_quote(c.sentiment),
            str(c.score),
            "Yes" if c.is_verified else "No",
            _csv_number(c.engagement or 0),
        ]))
    return "\n".join(lines)


def export_comments_csv(comments: Sequence[ClassifiedComment], filename: Union[str, Path]) -> None:
    """Write classified comments to a CSV file."""
    with open(filename, "w", encoding="utf-8", newline="") as f:
        f.write(comments_to_csv(comments))
    logger.info(f"Exported {len(comments)} comments to {filename}")


def validate_export_dict(data: Any) -> ExportedAnalysis:
    """Check for the metadata/stats/comments triad and build the analysis."""
    if not isinstance(data, dict) or not all(data.get(k) is not None for k in ("metadata", "stats", "comments")):
        raise InvalidAnalysisFileError("Invalid comparison file. Please upload an exported JSON analysis.")
    if not isinstance(data["metadata"], dict) or not isinstance(data["stats"], dict) \
            or not isinstance(data["comments"], list):
        raise InvalidAnalysisFileError("Invalid comparison file. Please upload an exported JSON analysis.")
    try:
        return ExportedAnalysis.from_dict(data)
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise InvalidAnalysisFileError(f"Exported analysis is malformed: {e}") from e


def load_exported_analysis(filename: Union[str, Path]) -> ExportedAnalysis:
    """Load a previously exported analysis from JSON."""
    try:
        with open(filename, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidAnalysisFileError(f"Error parsing JSON file: {e}") from e
    return validate_export_dict(data)


def filter_comments(comments: Sequence[ClassifiedComment], verified: str = "all",
                    sentiments: Sequence[str] = ()) -> List[ClassifiedComment]:
    """
    Filter by verified status ("all", "verified", "unverified") and by a set
    of sentiment classes. An empty sentiment set keeps every class.
    """
    if verified not in ("all", "verified", "unverified"):
        raise ValueError(f"Unknown verified filter: {verified}")
    unknown = set(sentiments) - set(SentimentConstants.LABELS)
    if unknown:
        raise ValueError(f"Unknown sentiment classes: {sorted(unknown)}")

    out = []
    for c in comments:
        if verified == "verified" and not c.is_verified:
            continue
        if verified == "unverified" and c.is_verified:
            continue
        if sentiments and c.sentiment not in sentiments:
            continue
        out.append(c)
    return out
