"""
Result sink.

Keeps the URL of the last successful upload and tells the user about
every finished job.
"""
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from ..logging import get_logger
from .models import UploadResult

logger = get_logger('transferpy.upload.sink')

Notifier = Callable[[str], None]


class ResultSink:
    """
    Captures upload results.

    The last-result slot holds a single URL and is overwritten by every
    successful upload. ``record`` never raises: notifier and state file
    errors are logged and dropped.

    Example:
        >>> sink = ResultSink(notifier=print)
        >>> sink.record(result)
        File "notes.txt" uploaded: https://transfer.sh/abc/notes.txt
        >>> sink.last_url
        'https://transfer.sh/abc/notes.txt'
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        state_file: Optional[Union[str, Path]] = None
    ):
        """
        Initialize the sink.

        Args:
            notifier: Receives the human readable message (logger by default)
            state_file: Optional file keeping the last URL across processes
        """
        self._notifier = notifier
        self._state_file = Path(state_file).expanduser() if state_file else None
        self._lock = threading.Lock()
        self._last_url: Optional[str] = None

    @property
    def last_url(self) -> Optional[str]:
        """Returns the URL of the last successful upload."""
        with self._lock:
            if self._last_url is None and self._state_file is not None:
                try:
                    self._last_url = self._state_file.read_text(encoding='utf-8').strip() or None
                except OSError as e:
                    logger.debug(f"No saved URL in {self._state_file}: {e}")
            return self._last_url

    def record(self, result: UploadResult) -> None:
        """Store and announce a job result."""
        if result.ok:
            with self._lock:
                self._last_url = result.url
                self._persist(result.url)
            self._notify(f'File "{result.remote_filename}" uploaded: {result.url}')
        else:
            self._notify(f'File "{result.remote_filename}" upload failed: {result.error}')

    def _persist(self, url: str) -> None:
        if self._state_file is None:
            return
        try:
            self._state_file.parent.mkdir(parents=True, exist_ok=True)
            self._state_file.write_text(url + '\n', encoding='utf-8')
        except OSError as e:
            logger.warning(f"Could not save last URL to {self._state_file}: {e}")

    def _notify(self, message: str) -> None:
        if self._notifier is None:
            logger.info(message)
            return
        try:
            self._notifier(message)
        except Exception as e:
            logger.warning(f"Notifier failed: {e}")
