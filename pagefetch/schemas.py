from pydantic import BaseModel, Field
from typing import Optional

class ContentRequest(BaseModel):
    url: str
    timeout: int = Field(default=20, description="Overall fetch timeout in seconds (minimum 1)")
    max_chars: int = Field(default=20000, description="Max characters of content, 0 for no limit")

class ContentResponse(BaseModel):
    url: str
    title: Optional[str] = Field(None, description="Page title, omitted when none was found")
    content: Optional[str] = None
    error: Optional[str] = Field(None, description="Failure message when the fetch did not succeed")
