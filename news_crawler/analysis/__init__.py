"""Post-crawl analysis: relevance, near-duplicates, ranking."""

from .aggregate import dominant_terms, extract_top_articles
from .relevance import FullTextExtractor, filter_irrelevant, is_article_relevant
from .similarity import SimilarityDeduper, text_similarity
from .topics import main_topics

__all__ = [
    "FullTextExtractor",
    "SimilarityDeduper",
    "dominant_terms",
    "extract_top_articles",
    "filter_irrelevant",
    "is_article_relevant",
    "main_topics",
    "text_similarity",
]
