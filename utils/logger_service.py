import csv
import logging
import os
from datetime import datetime
from typing import List, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
ACTIVITY_HEADER = ["Timestamp", "User", "Action", "Details"]
DEFAULT_USER = "Viewer"


def configure_logging(level=logging.INFO):
    """Single stream handler on the root logger. Safe to call more than once."""
    root = logging.getLogger()
    if not any(getattr(h, '_family_tree', False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._family_tree = True
        root.addHandler(handler)
    root.setLevel(level)


class LoggerService:
    """
    Activity log. Every entry goes to the standard logger; when log_file is set it is also
    appended to a CSV file with one row per action.
    """

    def __init__(self, log_file: Optional[str] = None, user: str = DEFAULT_USER):
        self.log_file = log_file
        self.user = user
        self.logger = logging.getLogger("family_tree.activity")

        if self.log_file and not os.path.exists(self.log_file):
            directory = os.path.dirname(self.log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.log_file, 'w', newline='', encoding='utf-8') as f:
                csv.writer(f).writerow(ACTIVITY_HEADER)

    def log(self, action: str, details: str):
        self.logger.info("%s: %s", action, details)
        if not self.log_file:
            return

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            with open(self.log_file, 'a', newline='', encoding='utf-8') as f:
                csv.writer(f).writerow([timestamp, self.user, action, details])
        except OSError:
            self.logger.exception("Could not append to activity log %s", self.log_file)

    def get_recent_logs(self, limit: int = 20) -> List[List[str]]:
        if not self.log_file or not os.path.exists(self.log_file):
            return []
        with open(self.log_file, 'r', encoding='utf-8') as f:
            rows = list(csv.reader(f))
        if len(rows) < 2:
            return []
        return rows[1:][-limit:][::-1]
