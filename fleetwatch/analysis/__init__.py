"""Transcript analysis: parsing activity records and classifying utterances.

Components:
- AnalysisConfig: Pydantic settings for windows and thresholds
- TranscriptEntry / TranscriptSummary: Parsed record and folded signals
- HelpRule / HELP_RULES / match_help_rule: Ordered needs-help rule table
- parse_record / summarize_transcript: Stateless parser functions
"""

from fleetwatch.analysis.config import AnalysisConfig
from fleetwatch.analysis.parser import parse_record, parse_timestamp, summarize_transcript
from fleetwatch.analysis.patterns import HELP_RULES, HelpRule, match_help_rule
from fleetwatch.analysis.schemas import TranscriptEntry, TranscriptSummary

__all__ = [
    "AnalysisConfig",
    "HELP_RULES",
    "HelpRule",
    "TranscriptEntry",
    "TranscriptSummary",
    "match_help_rule",
    "parse_record",
    "parse_timestamp",
    "summarize_transcript",
]
