from dataclasses import dataclass, field
from typing import Optional, List, Dict
from livefeed.core.contracts import Recognition

STAT_KEYS = ("admitted", "dropped", "failed", "published")


@dataclass
class StatusStore:
    last_results: List[Recognition] = field(default_factory=list)
    last_text: str = ""
    last_error: Optional[str] = None
    stats: Dict[str, int] = field(default_factory=lambda: {k: 0 for k in STAT_KEYS})
    log_capacity: int = 200
    logs: List[str] = field(default_factory=list)

    def set_results(self, results: List[Recognition], text: str):
        # swapped as a whole so readers on another thread never see a half-written list
        self.last_results = list(results)
        self.last_text = text

    def count(self, key: str, n: int = 1):
        self.stats[key] = self.stats.get(key, 0) + n

    def log(self, msg: str):
        self.logs.append(msg)
        if len(self.logs) > self.log_capacity:
            self.logs = self.logs[-self.log_capacity:]
