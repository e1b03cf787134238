"""
JSONL to logfmt conversion.
"""
