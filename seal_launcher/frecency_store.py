"""Persisted usage history ("frecency") for ranking."""
import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from seal_launcher.models import FrecencyRecord

logger = logging.getLogger(__name__)


class EntryStore:
    """Maps item identifiers to usage statistics, backed by a JSON file.

    The file holds ``{"<id>": {"count": int, "last_used": int}, ...}``.
    Persistence is best-effort: read and write failures are logged and the
    in-memory map stays authoritative for the rest of the process.
    """

    def __init__(
        self,
        path: Path,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the store.

        Args:
            path: Location of the usage history JSON file
            enabled: When False, record() is a no-op and score() returns 0
            clock: Wall-clock source in seconds since the epoch
        """
        self.path = Path(path)
        self.enabled = enabled
        self._clock = clock
        self._records: Dict[str, FrecencyRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._records

    def load(self) -> "EntryStore":
        """Load usage history from disk.

        A missing or unparsable file yields an empty history.

        Returns:
            The store, for chaining
        """
        self._records = {}

        try:
            raw_bytes = self.path.read_bytes()
        except FileNotFoundError:
            return self
        except OSError as e:
            logger.warning("Could not read usage history %s: %s", self.path, e)
            return self

        try:
            data = json.loads(raw_bytes.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(
                "Failed to parse usage history %s (%d bytes): %s; starting fresh",
                self.path,
                len(raw_bytes),
                e,
            )
            return self

        if not isinstance(data, dict):
            logger.warning("Usage history %s is not a JSON object; starting fresh", self.path)
            return self

        for item_id, raw in data.items():
            if not isinstance(raw, dict):
                continue
            try:
                self._records[str(item_id)] = FrecencyRecord(
                    count=int(raw.get("count", 0)),
                    last_used=int(raw.get("last_used", 0)),
                )
            except (TypeError, ValueError, OverflowError):
                logger.debug("Skipping malformed usage record for %r", item_id)

        return self

    def save(self) -> bool:
        """Write the full history to disk atomically.

        Returns:
            True if the write succeeded
        """
        payload = {item_id: record.to_dict() for item_id, record in self._records.items()}
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f)
            temp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write usage history %s: %s", self.path, e)
            return False
        return True

    def record(self, item_id: Optional[str]) -> Optional[FrecencyRecord]:
        """Record one selection of ``item_id`` and persist.

        Args:
            item_id: Identifier of the selected item

        Returns:
            The updated record, or None when tracking is disabled or id is empty
        """
        if not self.enabled or not item_id:
            return None

        record = self._records.get(item_id)
        if record is None:
            record = self._records[item_id] = FrecencyRecord()

        record.count += 1
        # last_used never moves backwards, even if the clock does
        record.last_used = max(record.last_used, int(self._clock()))

        self.save()
        return record

    def score(self, item_id: Optional[str]) -> int:
        """Last-used timestamp for ``item_id``, or 0 if never used."""
        if not self.enabled or not item_id:
            return 0
        record = self._records.get(item_id)
        return record.last_used if record else 0

    def get(self, item_id: str) -> Optional[FrecencyRecord]:
        return self._records.get(item_id)

    def clear(self) -> None:
        """Forget all usage history and persist the empty map."""
        self._records = {}
        self.save()
        logger.info("Usage history cleared")

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {item_id: record.to_dict() for item_id, record in self._records.items()}
