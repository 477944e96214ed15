"""
Database Schemas for the wallet API

Each Pydantic model represents a MongoDB collection. Collection name is the
lowercase of the class name (e.g., Auth -> "auth").
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class Auth(BaseModel):
    """Identities collection schema
    Collection name: "auth"
    """
    emailAddress: str = Field(..., description="Login email address")
    password: str = Field(..., description="BCrypt password hash")
    fullname: Optional[str] = Field(None, description="Full name")


class User(BaseModel):
    """Wallet accounts collection schema
    Collection name: "user"
    """
    owner: str = Field(..., description="ObjectId reference to auth._id, unique per account")
    balance: float = Field(0, description="Available balance")
    pending: float = Field(0, description="Amount awaiting settlement")
    transactionNum: int = Field(0, description="Number of transactions made")
    earnings: float = Field(0, description="Lifetime earnings")
    transactions: List[str] = Field(default_factory=list, description="ObjectId references to transaction._id, oldest first")


class Transaction(BaseModel):
    """Transactions collection schema
    Collection name: "transaction"
    """
    owner: str = Field(..., description="ObjectId reference to auth._id of the account holder")
    transactionID: str = Field(..., description="External transaction reference")
    status: Optional[str] = Field(None, description="Delivery status, free-form")
    deliveredOn: Optional[str] = Field(None, description="'<year> - <month0> - <day>' of the last status change")


def account_defaults() -> Dict[str, Any]:
    return {
        name: field.get_default(call_default_factory=True)
        for name, field in User.model_fields.items()
        if not field.is_required()
    }


# ----------------------
# Request bodies
# ----------------------
# Fields are optional so that missing values reach the handlers' own checks
# instead of being rejected with 422.

class OwnerRequest(BaseModel):
    ownerID: Optional[str] = None


class ChangePasswordRequest(OwnerRequest):
    newPassword: Optional[str] = None


class ChangeEmailRequest(OwnerRequest):
    newEmailAddress: Optional[str] = None


class UpdateBalanceRequest(OwnerRequest):
    emailAddress: Optional[str] = None
    amount: Optional[Union[float, str]] = None


class UpdateTransactionStatusRequest(OwnerRequest):
    status: Optional[str] = None
    transactionID: Optional[str] = None
    emailAddress: Optional[str] = None
