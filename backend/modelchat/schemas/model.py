# modelchat/schemas/model.py
from pydantic import BaseModel


class ModelInfo(BaseModel):
    id: str
    name: str
    provider: str


class HealthStatus(BaseModel):
    status: str
    database: bool
    version: str
