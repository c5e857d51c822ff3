"""MFA enrollment schemas"""
from pydantic import BaseModel, Field


class MFASetupResponse(BaseModel):
    secret: str
    qrCode: str = Field(..., description="PNG QR code as a data: URI")
    otpauthUrl: str


class MFAVerifyRequest(BaseModel):
    totpCode: str = Field(..., min_length=6, max_length=6)


class MFAStatusResponse(BaseModel):
    success: bool = True
    mfa_enabled: bool
