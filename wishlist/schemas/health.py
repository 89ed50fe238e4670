from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ServiceStatus(BaseModel):
    status: Literal["ok"] = "ok"
    service: str
    version: str
    environment: str
    store: str
