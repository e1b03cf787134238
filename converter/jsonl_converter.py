"""
Convert JSON Lines records into logfmt records.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from logfmt_encoder.errors import LogfmtError
from logfmt_encoder.options import EncoderOptions
from logfmt_encoder.record_encoder import RecordEncoder
from logfmt_encoder.walker import walk

logger = logging.getLogger(__name__)


class JsonlConverter:
    """Turns JSON objects into logfmt lines."""

    def __init__(self, options: Optional[EncoderOptions] = None):
        """
        Initialize converter.

        Args:
            options: Encoder options used for every record
        """
        self.options = options

    def parse_line(self, line: str, line_number: int = 0) -> Optional[Dict[str, Any]]:
        """
        Parse one JSONL line.

        Args:
            line: Raw line from the input file
            line_number: Line number, used in log messages

        Returns:
            The decoded object, or None if the line is blank, malformed or not an object
        """
        line = line.strip()
        if not line:
            return None
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse line {line_number}: {e}")
            return None
        if not isinstance(record, dict):
            logger.error(f"Line {line_number} is a JSON {type(record).__name__}, expected an object")
            return None
        return record

    def encode_record(self, record: Dict[str, Any]) -> Optional[bytes]:
        """
        Encode one record as a terminated logfmt line.

        Returns:
            The encoded line, or None if the record cannot be encoded
        """
        buf = bytearray()
        encoder = RecordEncoder(buf, self.options)
        try:
            walk(record, encoder)
            encoder.next()
        except LogfmtError as e:
            logger.error(f"Failed to encode record: {e}")
            return None
        return bytes(buf)

    def save_to_logfmt(self, records: List[Dict[str, Any]], output_file: str) -> int:
        """
        Append records to a logfmt file.

        Records that fail to encode are skipped; nothing of them reaches the file.
        The batch is encoded first and appended with a single write.

        Args:
            records: List of decoded JSON objects
            output_file: Path to output logfmt file

        Returns:
            Number of records written
        """
        batch = bytearray()
        written = 0
        for record in records:
            if record is None:
                continue
            line = self.encode_record(record)
            if line is None:
                continue
            batch += line
            written += 1

        try:
            with open(output_file, "ab") as f:
                f.write(batch)

            logger.info(f"Saved {written} records to {output_file}")
        except OSError as e:
            logger.error(f"Failed to save to {output_file}: {e}")
            raise
        return written
