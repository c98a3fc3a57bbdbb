from __future__ import annotations

from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class SendIn(BaseModel):
    step: str
    message: Optional[str] = None
    template: Optional[str] = None


class ExportIn(BaseModel):
    title: str
    description: Optional[str] = None
    images: Optional[List[Any]] = None
    slug: Optional[str] = None


class SettingsIn(BaseModel):
    api_key: str


class NonceOut(BaseModel):
    nonce: str


class GenerateOut(BaseModel):
    success: bool
    message: str
    theme_slug: Optional[str] = None
    theme_name: Optional[str] = None
    activate_url: Optional[str] = None
    customize_url: Optional[str] = None
    ai_enhanced: Optional[bool] = None

    def public(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
