import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.deps import get_storage
from app.storage import schemas
from app.storage.service import Storage

logger = logging.getLogger("staydesk.properties")

router = APIRouter(tags=["Imoveis"])


@router.get("/properties", response_model=list[schemas.Property])
def list_properties(storage: Storage = Depends(get_storage)):
    return storage.list_properties()


@router.get("/properties/{property_id}", response_model=schemas.Property)
def get_property(property_id: str, storage: Storage = Depends(get_storage)):
    item = storage.get_property(property_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Imovel nao encontrado")
    return item


@router.post("/properties", response_model=schemas.Property, status_code=status.HTTP_201_CREATED)
def create_property(payload: schemas.PropertyCreate, storage: Storage = Depends(get_storage)):
    item = storage.create_property(payload)
    logger.info("property created property_id=%s", item.id)
    return item


@router.patch("/properties/{property_id}", response_model=schemas.Property)
def update_property(property_id: str, payload: schemas.PropertyUpdate, storage: Storage = Depends(get_storage)):
    item = storage.update_property(property_id, payload)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Imovel nao encontrado")
    return item


@router.delete("/properties/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(property_id: str, storage: Storage = Depends(get_storage)):
    if not storage.delete_property(property_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Imovel nao encontrado")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
