"""
Configuration settings for the JSONL to logfmt conversion pipeline.

Every setting can be overridden from the environment or a `.env` file.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

from logfmt_encoder.options import EncoderOptions

load_dotenv()

# Base directory
BASE_DIR = Path(__file__).parent


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Input / output
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
INPUT_FILE = Path(os.getenv("INPUT_FILE", str(DATA_DIR / "records.jsonl")))
OUTPUT_FILE = Path(os.getenv("OUTPUT_FILE", str(DATA_DIR / "records.logfmt")))

# State file for resuming interrupted conversions
STATE_DIR = Path(os.getenv("STATE_DIR", str(BASE_DIR / "state")))
STATE_FILE = Path(os.getenv("STATE_FILE", str(STATE_DIR / "converter_state.json")))

# Records written per batch
BATCH_SIZE = int(os.getenv("BATCH_SIZE", "100"))

# Encoder behaviour
NESTED_KEYS = os.getenv("NESTED_KEYS", "flat").lower()  # "flat" or "dotted"
TERMINATE_EMPTY_RECORDS = _env_bool("TERMINATE_EMPTY_RECORDS", True)
ESCAPE_CONTROL = _env_bool("ESCAPE_CONTROL", True)
ESCAPE_KEYS = _env_bool("ESCAPE_KEYS", False)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "text").lower()  # "text" or "logfmt"
LOG_FILE = os.getenv("LOG_FILE", "converter.log")


def encoder_options() -> EncoderOptions:
    """Build encoder options from the settings above."""
    return EncoderOptions(
        nested_keys=NESTED_KEYS,
        terminate_empty_records=TERMINATE_EMPTY_RECORDS,
        escape_control=ESCAPE_CONTROL,
        escape_keys=ESCAPE_KEYS,
    )
