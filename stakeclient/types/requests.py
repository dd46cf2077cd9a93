from typing import Optional

from pydantic import BaseModel, Field


class ConnectRequest(BaseModel):
    backend: str = Field(description="Backend kind: local-simulated, native-extension or bridged-provider")


class SignRequest(BaseModel):
    message: str = Field(description="Message to sign with the active wallet")


class RefreshRequest(BaseModel):
    custom_endpoint: Optional[str] = Field(default=None, description="Endpoint to try before the candidates")


class BalanceAdjustRequest(BaseModel):
    delta: str = Field(description="Signed amount added to the local wallet balance")
