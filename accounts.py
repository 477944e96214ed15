import logging
import math
from datetime import datetime
from functools import lru_cache
from typing import Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from passlib.context import CryptContext
from pymongo.database import Database

from auth import auth_scheme, resolve_owner_id
from config import Settings, get_settings
from database import (
    find_account_by_owner,
    find_auth_by_email,
    find_auth_by_id,
    find_transaction,
    get_db,
    populate_account,
    save_account,
    save_auth,
    save_transaction,
    serialize,
)
from errors import NO_PERMISSION, AppError, NotFound, OperationalError, Unauthorized, ValidationError
from schemas import (
    ChangeEmailRequest,
    ChangePasswordRequest,
    OwnerRequest,
    UpdateBalanceRequest,
    UpdateTransactionStatusRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

FETCH_FAILED = "Error fetching data, please try again later."
PASSWORD_FAILED = "Error occurred while updating password. Please try again later."
EMAIL_FAILED = "Error occurred while updating email address. Please try again later."
BALANCE_FAILED = "Error occurred while updating balance. Please try again later."
STATUS_FAILED = "Error occurred while updating transaction status. Please try again later."


@lru_cache(maxsize=None)
def password_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def delivered_on_stamp(now: Optional[datetime] = None) -> str:
    """Format a local date as '<year> - <month> - <day>' with a zero-based month."""
    now = now or datetime.now()
    return f"{now.year} - {now.month - 1} - {now.day}"


def coerce_amount(amount: Union[float, str]) -> Union[int, float]:
    value = float(amount.strip() if isinstance(amount, str) else amount)
    if not math.isfinite(value):
        raise ValueError(f"amount is not a finite number: {amount!r}")
    # BSON ints are 8 bytes; larger integral values stay doubles
    if value.is_integer() and abs(value) < 2 ** 63:
        return int(value)
    return value


# ----------------------
# Account holder
# ----------------------
@router.post("/user/info")
def get_user_info(
    payload: OwnerRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    database: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    owner_id = resolve_owner_id(payload.ownerID, credentials, settings)
    try:
        account = find_account_by_owner(database, owner_id)
        if not account:
            raise OperationalError(FETCH_FAILED)
        return serialize(populate_account(database, account))
    except AppError:
        raise
    except Exception as exc:
        logger.warning("Fetching account for %s failed: %s", owner_id, exc)
        raise OperationalError(FETCH_FAILED) from exc


@router.post("/user/change-password", status_code=201)
def change_password(
    payload: ChangePasswordRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    database: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    owner_id = resolve_owner_id(payload.ownerID, credentials, settings)
    new_password = payload.newPassword or ""

    if len(new_password) < settings.password_min_len:
        raise ValidationError(
            f"Password length cannot be less than {settings.password_min_len} characters"
        )

    try:
        auth_doc = find_auth_by_id(database, owner_id)
        if not auth_doc:
            raise OperationalError(PASSWORD_FAILED)

        auth_doc["password"] = password_context(settings.bcrypt_rounds).hash(new_password)
        save_auth(database, auth_doc, "password")
    except AppError:
        raise
    except Exception as exc:
        logger.warning("Password update for %s failed: %s", owner_id, exc)
        raise OperationalError(PASSWORD_FAILED) from exc

    return {"message": "Password modified successfully"}


@router.post("/user/change-email", status_code=201)
def change_email(
    payload: ChangeEmailRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    database: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    owner_id = resolve_owner_id(payload.ownerID, credentials, settings)
    new_email = payload.newEmailAddress

    if not new_email:
        raise ValidationError(
            "Invalid email address provided, please provide correct email address and try again."
        )

    try:
        auth_doc = find_auth_by_id(database, owner_id)
        if not auth_doc:
            raise OperationalError(EMAIL_FAILED)

        if auth_doc.get("emailAddress") == new_email:
            return JSONResponse(
                status_code=200,
                content={"message": "The email address provided is your current email address."},
            )

        auth_doc["emailAddress"] = new_email
        save_auth(database, auth_doc, "emailAddress")
    except AppError:
        raise
    except Exception as exc:
        logger.warning("Email update for %s failed: %s", owner_id, exc)
        raise OperationalError(EMAIL_FAILED) from exc

    # TODO: send a verification mail to the new address once a mailer is wired in
    logger.info("Verification mail for %s not sent: no mailer configured", new_email)

    return {
        "message": f"Email address successfully modified to {new_email}. "
                   "Check the email address for verification mail"
    }


# ----------------------
# Owner administration
# ----------------------
@router.post("/owner/update-balance", status_code=201)
def update_balance(
    payload: UpdateBalanceRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    database: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    owner_id = resolve_owner_id(payload.ownerID, credentials, settings)

    if not owner_id:
        raise Unauthorized(NO_PERMISSION)

    if not payload.emailAddress or not payload.amount:
        raise ValidationError(
            "Incomplete information provided. Please provide Email address and Amount."
        )

    try:
        caller = find_auth_by_id(database, owner_id)
        if not caller:
            raise OperationalError(BALANCE_FAILED)

        # Case-insensitive, unlike the transaction status check.
        if (caller.get("emailAddress") or "").lower() != settings.owner_email.lower():
            raise Unauthorized(NO_PERMISSION)

        target = find_auth_by_email(database, payload.emailAddress)
        if not target:
            raise OperationalError(BALANCE_FAILED)

        account = find_account_by_owner(database, target["_id"])
        if not account:
            raise OperationalError(BALANCE_FAILED)

        # Overwrites the balance; this is not a credit.
        account["balance"] = coerce_amount(payload.amount)
        save_account(database, account, "balance")
    except AppError:
        raise
    except Exception as exc:
        logger.warning("Balance update for %s failed: %s", payload.emailAddress, exc)
        raise OperationalError(BALANCE_FAILED) from exc

    logger.info("Balance for %s set to %s", payload.emailAddress, account["balance"])
    return {"message": f"Balance for user. {payload.emailAddress} has been modified successfully."}


@router.post("/owner/update-transaction-status", status_code=201)
def update_transaction_status(
    payload: UpdateTransactionStatusRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    database: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    owner_id = resolve_owner_id(payload.ownerID, credentials, settings)

    if not owner_id:
        raise Unauthorized(NO_PERMISSION)

    if not (payload.emailAddress and payload.transactionID and payload.status):
        raise ValidationError(
            "Incomplete information provided. Please provide Email address and Status and TransactionID."
        )

    try:
        caller = find_auth_by_id(database, owner_id)
        if not caller:
            raise OperationalError(STATUS_FAILED)

        if caller.get("emailAddress") != settings.owner_email:
            raise Unauthorized(NO_PERMISSION)

        target = find_auth_by_email(database, payload.emailAddress)
        if not target:
            raise NotFound("No user found with the given email address.", status_code=200)

        tx = find_transaction(database, target["_id"], payload.transactionID)
        if not tx:
            raise NotFound(
                "No transaction found with the given info. "
                "Please confirm the Email Address and Transaction ID and try again",
                status_code=200,
            )

        tx["status"] = payload.status
        tx["deliveredOn"] = delivered_on_stamp()
        save_transaction(database, tx, "status", "deliveredOn")
    except AppError:
        raise
    except Exception as exc:
        logger.warning("Status update for %s/%s failed: %s", payload.emailAddress, payload.transactionID, exc)
        raise OperationalError(STATUS_FAILED) from exc

    logger.info("Transaction %s of %s marked %s", payload.transactionID, payload.emailAddress, payload.status)
    return {"message": "Transaction status has been modified successfully"}
