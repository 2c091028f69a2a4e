"""Company settings and bank account routes."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.models.bank_account import BankAccount
from backend.app.models.company_settings import CompanySettings
from backend.app.models.invoice import Invoice
from backend.app.schemas.bank_account import BankAccountCreate, BankAccountRead
from backend.app.schemas.company_settings import CompanySettingsRead, CompanySettingsUpdate

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/")
async def get_company_settings(db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    settings = db.query(CompanySettings).first()
    if not settings:
        return {}
    return CompanySettingsRead.model_validate(settings)


@router.post("/", response_model=CompanySettingsRead)
async def save_company_settings(
    payload: CompanySettingsUpdate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    settings = db.query(CompanySettings).first()
    if settings is None:
        settings = CompanySettings()
        db.add(settings)
        response.status_code = status.HTTP_201_CREATED
    for field, value in payload.model_dump().items():
        setattr(settings, field, value)
    db.commit()
    db.refresh(settings)
    return settings


@router.get("/bank-accounts", response_model=List[BankAccountRead])
async def list_bank_accounts(db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    return (
        db.query(BankAccount)
        .order_by(BankAccount.is_default.desc(), BankAccount.account_name.asc())
        .all()
    )


@router.post("/bank-accounts", response_model=BankAccountRead, status_code=status.HTTP_201_CREATED)
async def create_bank_account(
    payload: BankAccountCreate, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)
):
    # Only one account can be the default
    if payload.is_default:
        db.query(BankAccount).update({BankAccount.is_default: False})
    account = BankAccount(**payload.model_dump())
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@router.delete("/bank-accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bank_account(account_id: int, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    account = db.query(BankAccount).filter(BankAccount.id == account_id).first()
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bank account not found")
    invoice_count = db.query(func.count(Invoice.id)).filter(Invoice.bank_account_id == account_id).scalar() or 0
    if invoice_count > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot delete bank account used by existing invoices ({invoice_count})",
        )
    db.delete(account)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
