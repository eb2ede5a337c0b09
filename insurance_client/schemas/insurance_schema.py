"""
Pydantic schemas for the client's command surface and display views.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from insurance_client.core.records import ClaimStatus
from insurance_client.core.activity_log import Severity


class PolicyView(BaseModel):
    """Display-ready projection of one policy."""
    policy_id: int = Field(..., description="Sequential policy identifier")
    holder: str = Field(..., description="Policyholder address")
    premium: str = Field(..., description="Premium as a decimal string")
    coverage: str = Field(..., description="Coverage as a decimal string")
    active: bool = Field(..., description="Whether the contract reports the policy active")
    expiry: Optional[int] = Field(None, description="Expiry timestamp, when the contract exposes one")

    class Config:
        json_schema_extra = {
            "example": {
                "policy_id": 0,
                "holder": "0x1111111111111111111111111111111111111111",
                "premium": "1.5",
                "coverage": "10",
                "active": True,
                "expiry": 1767225600,
            }
        }


class ClaimView(BaseModel):
    """Display-ready projection of one claim."""
    claim_id: int
    policy_id: int
    claimant: str
    amount: str = Field(..., description="Claimed amount as a decimal string")
    approved: bool
    paid: bool
    status: ClaimStatus


class IssuePolicyRequest(BaseModel):
    holder: str = Field("", description="Policyholder address")
    premium: str = Field("", description="Premium, e.g. '1.5'")
    coverage: str = Field("", description="Coverage, e.g. '10'")
    duration: Union[int, str] = Field("", description="Policy duration in days")


class PayPremiumRequest(BaseModel):
    policy_id: Union[int, str] = ""
    amount: str = ""


class SubmitClaimRequest(BaseModel):
    policy_id: Union[int, str] = ""
    amount: str = ""


class FundRequest(BaseModel):
    amount: str = ""


class TxOutcomeResponse(BaseModel):
    """Result of one state-changing command."""
    operation: str
    status: str
    summary: str
    fields: Dict[str, Any] = Field(default_factory=dict)
    reason: Optional[str] = None
    source: Optional[str] = Field(None, description="'event' or 'fallback' reconciliation")
    tx_hash: Optional[str] = None


class ConnectionResponse(BaseModel):
    connected: bool
    account: Optional[str] = None
    label: str
    authorization: Optional[str] = None
    message: str


class RefreshResponse(BaseModel):
    policies: List[PolicyView] = Field(default_factory=list)
    claims: List[ClaimView] = Field(default_factory=list)


class ActivityEntryResponse(BaseModel):
    timestamp: datetime
    severity: Severity
    message: str
