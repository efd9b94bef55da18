from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_storage
from app.storage import schemas
from app.storage.service import Storage

router = APIRouter(tags=["Manutencao"])


@router.get("/maintenance", response_model=list[schemas.MaintenanceTask])
def list_tasks(
    property_id: Optional[str] = Query(None, alias="propertyId"),
    storage: Storage = Depends(get_storage),
):
    if property_id:
        return storage.list_maintenance_tasks_by_property(property_id)
    return storage.list_maintenance_tasks()


@router.get("/maintenance/{task_id}", response_model=schemas.MaintenanceTask)
def get_task(task_id: str, storage: Storage = Depends(get_storage)):
    task = storage.get_maintenance_task(task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tarefa de manutencao nao encontrada")
    return task


@router.post("/maintenance", response_model=schemas.MaintenanceTask, status_code=status.HTTP_201_CREATED)
def create_task(payload: schemas.MaintenanceTaskCreate, storage: Storage = Depends(get_storage)):
    return storage.create_maintenance_task(payload)


@router.patch("/maintenance/{task_id}", response_model=schemas.MaintenanceTask)
def update_task(task_id: str, payload: schemas.MaintenanceTaskUpdate, storage: Storage = Depends(get_storage)):
    task = storage.update_maintenance_task(task_id, payload)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tarefa de manutencao nao encontrada")
    return task


@router.delete("/maintenance/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, storage: Storage = Depends(get_storage)):
    if not storage.delete_maintenance_task(task_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tarefa de manutencao nao encontrada")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
