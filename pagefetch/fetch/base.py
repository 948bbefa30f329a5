from dataclasses import dataclass, field
from typing import List, Optional

@dataclass(frozen=True)
class FetchRequest:
    url: str
    timeout: float = 20.0
    max_chars: int = 0  # 0 = unlimited

@dataclass(frozen=True)
class RawPage:
    url: str
    final_url: str
    status_code: int
    body: bytes
    encoding: Optional[str]
    fetched_at: str  # ISO 8601
    redirects: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class FetchResult:
    url: str
    title: str
    content: str
