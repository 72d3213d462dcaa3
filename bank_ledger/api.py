"""
FastAPI REST API Module

HTTP surface over the banking system: registration and login, opening
and closing accounts, deposits, withdrawals, transfers and history.
Amounts travel as decimal strings. Services answer with None/False on
rejection; this module turns those into 4xx responses.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .accounts import Account, CheckingAccount, ProductType, SavingsAccount
from .bank import BankingSystem
from .config import get_config
from .logging_config import setup_logging


# Pydantic models for API requests
class RegisterRequest(BaseModel):
    username: str
    password: str
    full_name: str
    email: str


class LoginRequest(BaseModel):
    username: str
    password: str


class CreateAccountRequest(BaseModel):
    product_type: str = Field(..., description="Product type (checking, savings)")
    initial_balance: str = Field("0", description="Decimal amount as string")
    overdraft_limit: Optional[str] = None  # Checking only
    interest_rate: Optional[str] = None    # Savings only, annual rate as decimal string


class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")
    description: Optional[str] = None


class TransferRequest(BaseModel):
    from_account_number: str
    to_account_number: str
    amount: str = Field(..., description="Decimal amount as string")
    description: Optional[str] = None


def account_to_dict(account: Account) -> Dict[str, Any]:
    result = {
        "account_number": account.account_number,
        "account_type": account.account_type,
        "balance": str(account.balance),
        "is_active": account.is_active,
        "created_at": account.created_at.isoformat(),
        "transaction_count": len(account.transactions),
    }
    if isinstance(account, CheckingAccount):
        result["overdraft_limit"] = str(account.overdraft_limit)
        result["monthly_withdrawals"] = account.monthly_withdrawals
    elif isinstance(account, SavingsAccount):
        result["interest_rate"] = str(account.interest_rate)
        result["withdrawals_this_month"] = account.withdrawals_this_month
        result["withdrawal_penalty"] = str(account.withdrawal_penalty)
    return result


# Global banking system instance
banking_system = BankingSystem()


app = FastAPI(
    title="Bank Ledger API",
    description="Checking and savings accounts with an append-only transaction history",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_banking_system() -> BankingSystem:
    return banking_system


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/users", status_code=status.HTTP_201_CREATED)
async def register_user(
    request: RegisterRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Register a new user"""
    user = system.auth_service.register(
        request.username, request.password, request.full_name, request.email
    )
    if user is None:
        raise HTTPException(status_code=400, detail="Registration rejected")
    return {"user_id": user.user_id, "message": "User registered successfully"}


@app.post("/auth/login")
async def login(
    request: LoginRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    user = system.auth_service.login(request.username, request.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return user.to_dict()


@app.get("/users/{user_id}")
async def get_user(
    user_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    user = system.auth_service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user.to_dict()


@app.post("/users/{user_id}/accounts", status_code=status.HTTP_201_CREATED)
async def open_account(
    user_id: str,
    request: CreateAccountRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Open a checking or savings account for a user"""
    user = system.auth_service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    try:
        product_type = ProductType(request.product_type.lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown product type: {request.product_type}")

    account = system.account_service.create_account(
        user,
        request.initial_balance,
        product_type,
        overdraft_limit=request.overdraft_limit,
        interest_rate=request.interest_rate
    )
    if account is None:
        raise HTTPException(status_code=400, detail="Account could not be opened")
    return account_to_dict(account)


@app.get("/accounts/{account_number}")
async def get_account(
    account_number: str,
    system: BankingSystem = Depends(get_banking_system)
):
    account = system.account_service.get_account(account_number)
    if account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    return account_to_dict(account)


@app.post("/accounts/{account_number}/close")
async def close_account(
    account_number: str,
    system: BankingSystem = Depends(get_banking_system)
):
    if not system.account_service.close_account(account_number):
        raise HTTPException(status_code=404, detail="Account not found")
    return {"message": "Account closed"}


@app.post("/accounts/{account_number}/deposit")
async def deposit(
    account_number: str,
    request: AmountRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    ok = system.transaction_service.deposit(
        account_number, request.amount, request.description or "Deposit"
    )
    if not ok:
        raise HTTPException(status_code=400, detail="Deposit rejected")
    return account_to_dict(system.account_service.get_account(account_number))


@app.post("/accounts/{account_number}/withdraw")
async def withdraw(
    account_number: str,
    request: AmountRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    ok = system.transaction_service.withdraw(
        account_number, request.amount, request.description or "Withdrawal"
    )
    if not ok:
        raise HTTPException(status_code=400, detail="Withdrawal rejected")
    return account_to_dict(system.account_service.get_account(account_number))


@app.post("/transfers")
async def transfer(
    request: TransferRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    ok = system.transaction_service.transfer(
        request.from_account_number,
        request.to_account_number,
        request.amount,
        request.description
    )
    if not ok:
        raise HTTPException(status_code=400, detail="Transfer rejected")
    return {
        "from": account_to_dict(system.account_service.get_account(request.from_account_number)),
        "to": account_to_dict(system.account_service.get_account(request.to_account_number)),
    }


@app.get("/accounts/{account_number}/transactions")
async def get_transactions(
    account_number: str,
    limit: Optional[int] = Query(None, ge=1),
    system: BankingSystem = Depends(get_banking_system)
):
    """Transaction history, oldest first; `limit` keeps only the most recent"""
    if not system.account_service.account_exists(account_number):
        raise HTTPException(status_code=404, detail="Account not found")

    if limit is None:
        records = system.transaction_service.get_transaction_history(account_number)
    else:
        records = system.transaction_service.get_recent_transactions(account_number, limit)
    return {"account_number": account_number, "transactions": [r.to_dict() for r in records]}


@app.get("/transactions/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    record = system.transaction_service.get_transaction(transaction_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return record.to_dict()


@app.post("/admin/interest")
async def post_monthly_interest(system: BankingSystem = Depends(get_banking_system)):
    credited = system.apply_monthly_interest()
    return {"credited": {number: str(amount) for number, amount in credited.items()}}


@app.post("/admin/reset-withdrawals")
async def reset_withdrawals(system: BankingSystem = Depends(get_banking_system)):
    return {"accounts_reset": system.reset_monthly_withdrawals()}


@app.get("/admin/stats")
async def system_stats(system: BankingSystem = Depends(get_banking_system)):
    return system.get_system_stats()


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format)
    uvicorn.run(
        "bank_ledger.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
