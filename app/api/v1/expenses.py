from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_storage
from app.storage import schemas
from app.storage.schemas import to_naive_utc
from app.storage.service import Storage

router = APIRouter(tags=["Despesas"])


@router.get("/expenses", response_model=list[schemas.Expense])
def list_expenses(
    property_id: Optional[str] = Query(None, alias="propertyId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    storage: Storage = Depends(get_storage),
):
    if start_date and end_date:
        return storage.list_expenses_by_date_range(to_naive_utc(start_date), to_naive_utc(end_date))
    if property_id:
        return storage.list_expenses_by_property(property_id)
    return storage.list_expenses()


@router.get("/expenses/{expense_id}", response_model=schemas.Expense)
def get_expense(expense_id: str, storage: Storage = Depends(get_storage)):
    expense = storage.get_expense(expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Despesa nao encontrada")
    return expense


@router.post("/expenses", response_model=schemas.Expense, status_code=status.HTTP_201_CREATED)
def create_expense(payload: schemas.ExpenseCreate, storage: Storage = Depends(get_storage)):
    return storage.create_expense(payload)


@router.patch("/expenses/{expense_id}", response_model=schemas.Expense)
def update_expense(expense_id: str, payload: schemas.ExpenseUpdate, storage: Storage = Depends(get_storage)):
    expense = storage.update_expense(expense_id, payload)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Despesa nao encontrada")
    return expense


@router.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: str, storage: Storage = Depends(get_storage)):
    if not storage.delete_expense(expense_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Despesa nao encontrada")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
