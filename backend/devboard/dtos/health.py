from pydantic import BaseModel


class RootResponse(BaseModel):
    status: str = "ok"
    message: str
    version: str


class HealthResponse(BaseModel):
    status: str
    database: str
    version: str
