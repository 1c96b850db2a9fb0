#!/usr/bin/env python

"""
    API routes for Bibliolend,
    including the loan, sanction and copy endpoints.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from bibliolend.core.db import get_db
from bibliolend.core.lending import LendingService
from bibliolend.core.overdue import due_date
from bibliolend.core.results import Result
from bibliolend.core.exceptions import DatabaseInsertError, TransientStorageConflict
from bibliolend.routes.schemas import LoanRequest, SanctionRequest, CopyRequest
from bibliolend.schemas.loan import Loan, LoanStatus, BorrowerOverdue
from bibliolend.schemas.sanction import Sanction
from bibliolend.schemas.copy import Copy

logger = logging.getLogger(__name__)

router = APIRouter()


def get_lending(db=Depends(get_db)) -> LendingService:
    return LendingService(db)


def failure(result: Result) -> JSONResponse:
    return JSONResponse(status_code=result.error.status_code, content=result.error.as_dict())


def _copy(copy) -> dict:
    return Copy(
        id=copy.id, location=copy.location, status=copy.status.value,
        book_id=copy.book_id, updated_at=copy.updated_at,
    ).model_dump(mode="json")


def _sanction(lending: LendingService, sanction) -> dict:
    out = Sanction.model_validate(sanction)
    out.days_remaining = lending.sanctions.days_remaining(sanction)
    return out.model_dump(mode="json")


def _loans(loans):
    return [Loan.model_validate(loan).model_dump(mode="json") for loan in loans]


@router.post("/loans", status_code=status.HTTP_201_CREATED)
def create_loan(body: LoanRequest, lending: LendingService = Depends(get_lending)):
    try:
        result = lending.create_loan(body.borrower_id, body.copy_id, date=body.date)
    except DatabaseInsertError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not result.ok:
        return failure(result)
    return {"loan_id": result.value.id, "loan": Loan.model_validate(result.value).model_dump(mode="json")}


@router.put("/loans/{loan_id}/return", status_code=status.HTTP_200_OK)
def return_loan(loan_id: int, lending: LendingService = Depends(get_lending)):
    result = lending.return_loan(loan_id)
    if not result.ok:
        return failure(result)
    return {"success": True, "loan": Loan.model_validate(result.value).model_dump(mode="json")}


@router.get("/loans/active")
def active_loans(borrower_id: Optional[int] = None, lending: LendingService = Depends(get_lending)):
    return _loans(lending.active_loans(borrower_id))


@router.get("/loans/overdue")
def overdue_loans(lending: LendingService = Depends(get_lending)):
    return [
        BorrowerOverdue.model_validate(entry).model_dump(mode="json")
        for entry in lending.overdue_report()
    ]


@router.get("/loans/{loan_id}")
def get_loan(loan_id: int, lending: LendingService = Depends(get_lending)):
    result = lending.get_loan(loan_id)
    if not result.ok:
        return failure(result)
    loan = result.value
    standing = lending.standing(loan)
    return LoanStatus(
        loan=Loan.model_validate(loan),
        due_date=due_date(loan.loan_date, lending.loan_period_days),
        days_remaining=standing.days_remaining if standing else None,
        band=standing.band.value if standing else None,
        days_late=lending.days_late(loan),
    ).model_dump(mode="json")


@router.get("/loans")
def all_loans(borrower_id: Optional[int] = None, lending: LendingService = Depends(get_lending)):
    return _loans(lending.all_loans(borrower_id))


@router.post("/sanctions", status_code=status.HTTP_201_CREATED)
def apply_sanction(body: SanctionRequest, lending: LendingService = Depends(get_lending)):
    result = lending.apply_sanction(
        body.borrower_id, body.reason, body.duration_days, body.issued_by)
    if not result.ok:
        return failure(result)
    return _sanction(lending, result.value)


@router.get("/sanctions")
def active_sanctions(lending: LendingService = Depends(get_lending)):
    return [_sanction(lending, s) for s in lending.active_sanctions()]


@router.post("/sanctions/sweep")
def sweep_sanctions(lending: LendingService = Depends(get_lending)):
    return {"swept": lending.sweep_sanctions()}


@router.get("/sanctions/{borrower_id}")
def get_sanction(borrower_id: int, lending: LendingService = Depends(get_lending)):
    result = lending.get_sanction(borrower_id)
    if not result.ok:
        return failure(result)
    return _sanction(lending, result.value)


@router.delete("/sanctions/{borrower_id}", status_code=status.HTTP_200_OK)
def remove_sanction(borrower_id: int, lending: LendingService = Depends(get_lending)):
    result = lending.remove_sanction(borrower_id)
    if not result.ok:
        return failure(result)
    return {"success": True}


@router.post("/copies", status_code=status.HTTP_201_CREATED)
def add_copy(body: CopyRequest, lending: LendingService = Depends(get_lending)):
    result = lending.add_copy(body.location, body.book_id)
    if not result.ok:
        return failure(result)
    return _copy(result.value)


@router.get("/copies/free")
def free_copies(book_id: Optional[int] = None, lending: LendingService = Depends(get_lending)):
    return [_copy(c) for c in lending.free_copies(book_id)]


@router.get("/copies/{copy_id}")
def get_copy(copy_id: int, lending: LendingService = Depends(get_lending)):
    result = lending.get_copy(copy_id)
    if not result.ok:
        return failure(result)
    return _copy(result.value)


async def storage_conflict_handler(request, exc: TransientStorageConflict):
    logger.warning(f"{request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": "transient_storage_conflict", "detail": str(exc)},
    )
