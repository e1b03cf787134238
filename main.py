"""
Main entry point for the JSONL to logfmt conversion pipeline.
"""
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from tqdm import tqdm

from converter.jsonl_converter import JsonlConverter
from logfmt_encoder.logging_formatter import LogfmtFormatter
from utils.state_manager import StateManager
import config

logger = logging.getLogger(__name__)


def configure_logging():
    """Log to a file and stdout, as plain text or logfmt."""
    handlers = [
        logging.FileHandler(config.LOG_FILE),
        logging.StreamHandler(sys.stdout)
    ]
    if config.LOG_FORMAT == "logfmt":
        formatter = LogfmtFormatter()
        for handler in handlers:
            handler.setFormatter(formatter)
        logging.basicConfig(level=config.LOG_LEVEL, handlers=handlers)
    else:
        logging.basicConfig(
            level=config.LOG_LEVEL,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers
        )


class _Batch:
    """Records waiting to be written, plus the lines they came from."""

    def __init__(self):
        self.records: List[Dict] = []
        self.failed_lines = 0


def _flush(batch: _Batch, converter: JsonlConverter, output_file: Path,
           state_manager: StateManager, input_key: str, lines_processed: int) -> int:
    written = converter.save_to_logfmt(batch.records, str(output_file)) if batch.records else 0
    skipped = batch.failed_lines + len(batch.records) - written
    state_manager.record_progress(input_key, lines_processed, written, skipped)
    batch.records = []
    batch.failed_lines = 0
    return written


def run_pipeline(
    input_file: Path,
    output_file: Path,
    state_manager: StateManager,
    converter: Optional[JsonlConverter] = None,
    batch_size: int = config.BATCH_SIZE
) -> int:
    """
    Convert a JSONL file into a logfmt file, resuming where a previous run stopped.

    Args:
        input_file: JSONL input
        output_file: logfmt output, appended to
        state_manager: Progress store
        converter: Converter to use, defaults to one built from config
        batch_size: Records written per batch

    Returns:
        Number of records written by this run
    """
    converter = converter or JsonlConverter(config.encoder_options())
    input_key = str(Path(input_file).resolve())

    skip = state_manager.get_lines_processed(input_key)
    if skip:
        logger.info(f"Resuming {input_file} after line {skip}")

    output_file.parent.mkdir(parents=True, exist_ok=True)
    batch = _Batch()
    total_written = 0
    processed = skip

    with open(input_file, 'r', encoding='utf-8') as f:
        try:
            for line_number, line in enumerate(
                tqdm(f, desc=f"Converting {input_file.name}", unit="lines"),
                1
            ):
                if line_number <= skip:
                    continue

                record = converter.parse_line(line, line_number)
                if record is not None:
                    batch.records.append(record)
                elif line.strip():
                    batch.failed_lines += 1

                processed = line_number
                if len(batch.records) >= batch_size:
                    total_written += _flush(batch, converter, output_file,
                                            state_manager, input_key, processed)
        except KeyboardInterrupt:
            # keep what was already read before handing the interrupt back
            if processed > skip:
                _flush(batch, converter, output_file, state_manager, input_key, processed)
            raise

    if processed > skip:
        total_written += _flush(batch, converter, output_file,
                                state_manager, input_key, processed)
    return total_written


def main(argv: Optional[List[str]] = None):
    """Main execution function."""
    argv = sys.argv[1:] if argv is None else argv
    input_file = Path(argv[0]) if len(argv) > 0 else config.INPUT_FILE
    output_file = Path(argv[1]) if len(argv) > 1 else config.OUTPUT_FILE

    configure_logging()
    logger.info("=" * 60)
    logger.info("JSONL to logfmt Conversion Pipeline")
    logger.info("=" * 60)

    state_manager = StateManager(config.STATE_FILE)

    try:
        written = run_pipeline(input_file, output_file, state_manager)
        logger.info("=" * 60)
        logger.info("Pipeline completed successfully!")
        logger.info(f"Records written this run: {written}")
        logger.info(f"Output file: {output_file}")
        logger.info("=" * 60)
    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user. State saved. Resume by running again.")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Pipeline failed with error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
