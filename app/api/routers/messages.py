# app/api/routers/messages.py
from sqlalchemy.orm import Session

from app.api.message_router import MessageRouter
from app.api.routers.products import get_service
from app.domain.schemas import ProductCreate, ProductPatch, ProductRef

router = MessageRouter()


def _ref(data) -> ProductRef:
    #akceptujemy samo id albo {"id": n}
    if isinstance(data, dict):
        return ProductRef.model_validate(data)
    return ProductRef.model_validate({"id": data})


@router.pattern("add_product")
def add_product(data, db: Session):
    payload = ProductCreate.model_validate(data)
    return get_service(db).create_product(payload).model_dump(mode="json")


@router.pattern("get_products")
def get_products(data, db: Session):
    return [p.model_dump(mode="json") for p in get_service(db).list_products()]


@router.pattern("get_product")
def get_product(data, db: Session):
    return get_service(db).get_product(_ref(data).id).model_dump(mode="json")


@router.pattern("update_product")
def update_product(data, db: Session):
    patch = ProductPatch.model_validate(data)
    return get_service(db).update_product(patch.id, patch.changes()).model_dump(mode="json")


@router.pattern("remove_product")
def remove_product(data, db: Session):
    return get_service(db).remove_product(_ref(data).id).model_dump(mode="json")
