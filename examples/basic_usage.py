"""Basic usage examples for Sentipulse."""

import sys

from sentipulse import ClassifierFactory, ExportedAnalysis, SentimentPipeline, compare
from sentipulse.core.scoring import brand_sentiment, net_sentiment_score, smooth
from sentipulse.services.ingestion import build_records, default_columns, load_file
from sentipulse.utils.data_prep import export_to_json, filter_comments


def example_analysis(path):
    """Example: classify one file and export it."""
    print(f"Analyzing {path}")

    dataset = load_file(path)
    if isinstance(dataset, ExportedAnalysis):
        print(f"{path} is already an exported analysis")
        return dataset

    columns = default_columns(dataset.columns)
    print(f"Detected columns: {columns}")

    records = build_records(dataset, columns["text"], columns["verified"], columns["engagement"])
    pipeline = SentimentPipeline(ClassifierFactory.create(), batch_size=10, delay_ms=1000)
    pipeline.run(
        records,
        columns["text"],
        on_update=lambda s: print(f"  {s.processed}/{s.total} net score {s.current_score:.1f}"),
    )
    analysis = pipeline.export()

    print(f"Brand sentiment: {brand_sentiment(analysis.stats):.1f}%")
    print(f"Net sentiment score: {net_sentiment_score(analysis.stats):.1f}")
    trend = smooth(analysis.stats.score_history)
    if trend:
        print(f"Final rolling score: {trend[-1]:.1f}")

    negative_verified = filter_comments(analysis.comments, verified="verified", sentiments=["negative"])
    print(f"Negative comments from verified users: {len(negative_verified)}")

    out = f"sentiment_analysis_{columns['text']}.json"
    export_to_json(analysis, out)
    print(f"Exported to {out}")
    return analysis


def example_comparison(first, second):
    """Example: compare two analyses side by side."""
    result = compare(first, second, labels=("First", "Second"))
    for row in result.metrics:
        print(f"  {row.metric}: {row.first:.1f} vs {row.second:.1f}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python basic_usage.py <file> <other file>")
        sys.exit(1)

    a = example_analysis(sys.argv[1])
    b = example_analysis(sys.argv[2])
    example_comparison(a, b)
