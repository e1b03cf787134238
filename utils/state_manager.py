"""
State management for resuming interrupted conversion runs.
"""
import json
import logging
from pathlib import Path
from typing import Dict
from datetime import datetime

logger = logging.getLogger(__name__)


class StateManager:
    """Tracks how far each input file has been converted."""

    def __init__(self, state_file: Path):
        """
        Initialize state manager.

        Args:
            state_file: Path to the state file
        """
        self.state_file = Path(state_file)
        self.state: Dict = self._load_state()

    def _load_state(self) -> Dict:
        """Load state from file or return empty state."""
        if self.state_file.exists():
            try:
                with open(self.state_file, 'r', encoding='utf-8') as f:
                    state = json.load(f)
                    logger.info(f"Loaded state from {self.state_file}")
                    return state
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Failed to load state: {e}. Starting fresh.")
                return self._empty_state()
        return self._empty_state()

    def _empty_state(self) -> Dict:
        """Return empty state structure."""
        return {
            "last_updated": None,
            "inputs": {},
            "total_records_written": 0,
        }

    def save_state(self):
        """Save current state to file."""
        try:
            state_to_save = {
                **self.state,
                "last_updated": datetime.now().isoformat()
            }
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, 'w', encoding='utf-8') as f:
                json.dump(state_to_save, f, indent=2, ensure_ascii=False)

            logger.debug(f"State saved to {self.state_file}")
        except IOError as e:
            logger.error(f"Failed to save state: {e}")

    def _input_state(self, input_file: str) -> Dict:
        inputs = self.state.setdefault("inputs", {})
        if input_file not in inputs:
            inputs[input_file] = {
                "lines_processed": 0,
                "records_written": 0,
                "records_skipped": 0,
            }
        return inputs[input_file]

    def get_lines_processed(self, input_file: str) -> int:
        """Number of input lines already converted for a file."""
        return self.state.get("inputs", {}).get(input_file, {}).get("lines_processed", 0)

    def record_progress(self, input_file: str, lines_processed: int, written: int, skipped: int):
        """
        Record a converted batch.

        Args:
            input_file: Input file the batch came from
            lines_processed: Total lines consumed so far
            written: Records written in this batch
            skipped: Records skipped in this batch
        """
        entry = self._input_state(input_file)
        entry["lines_processed"] = lines_processed
        entry["records_written"] += written
        entry["records_skipped"] += skipped
        self.state["total_records_written"] = self.state.get("total_records_written", 0) + written
        self.save_state()

    def reset(self):
        """Reset state (for testing or fresh start)."""
        self.state = self._empty_state()
        if self.state_file.exists():
            self.state_file.unlink()
        logger.info("State reset")
