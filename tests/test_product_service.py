from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.data.database import Base
from app.domain.errors import ProductNotFound
from app.domain.schemas import ProductCreate, ProductUpdate, ProductPatch
from app.repos.product_repo import ProductRepo
from app.services.product_service import ProductService


@pytest.fixture
def service(db):
    return ProductService(ProductRepo(db))


def test_create_assigns_unique_ids(service):
    first = service.create_product(ProductCreate(name="Widget", price=10))
    second = service.create_product(ProductCreate(name="Gadget", price=5, description="small"))

    assert first.id == 1
    assert second.id == 2
    assert second.description == "small"


def test_list_returns_products_in_insertion_order(service):
    for name in ("a", "b", "c"):
        service.create_product(ProductCreate(name=name, price=1))

    assert [p.name for p in service.list_products()] == ["a", "b", "c"]


def test_get_returns_same_fields(service):
    created = service.create_product(ProductCreate(name="Widget", price=10))

    assert service.get_product(created.id) == created


def test_get_unknown_raises_not_found(service):
    with pytest.raises(ProductNotFound) as exc:
        service.get_product(42)

    assert exc.value.product_id == 42
    assert str(exc.value) == "Product 42 not found"


def test_update_changes_only_given_fields(service):
    created = service.create_product(ProductCreate(name="Widget", price=10, description="blue"))

    updated = service.update_product(created.id, ProductUpdate(price=12))

    assert updated.id == created.id
    assert updated.price == 12
    assert updated.name == "Widget"
    assert updated.description == "blue"


def test_update_can_clear_description(service):
    created = service.create_product(ProductCreate(name="Widget", price=10, description="blue"))

    updated = service.update_product(created.id, ProductUpdate(description=None))

    assert updated.description is None


def test_update_unknown_raises_not_found(service):
    with pytest.raises(ProductNotFound):
        service.update_product(7, ProductUpdate(price=1))


def test_remove_is_permanent(service):
    created = service.create_product(ProductCreate(name="Widget", price=10))

    removed = service.remove_product(created.id)

    assert removed == created
    with pytest.raises(ProductNotFound):
        service.get_product(created.id)
    with pytest.raises(ProductNotFound):
        service.remove_product(created.id)
    assert service.list_products() == []


def test_ids_are_not_reused_after_delete(service):
    first = service.create_product(ProductCreate(name="a", price=1))
    service.remove_product(first.id)

    second = service.create_product(ProductCreate(name="b", price=1))

    assert second.id != first.id


def test_create_rejects_unknown_and_missing_fields():
    with pytest.raises(ValidationError):
        ProductCreate.model_validate({"name": "Widget", "price": 1, "colour": "red"})
    with pytest.raises(ValidationError):
        ProductCreate.model_validate({"name": "Widget"})
    with pytest.raises(ValidationError):
        ProductCreate.model_validate({"name": "Widget", "price": -1})


def test_update_rejects_null_for_required_fields():
    with pytest.raises(ValidationError):
        ProductUpdate.model_validate({"price": None})
    with pytest.raises(ValidationError):
        ProductUpdate.model_validate({"name": None})


def test_patch_splits_id_from_changes():
    patch = ProductPatch.model_validate({"id": 3, "price": 12})

    assert patch.id == 3
    assert patch.changes().model_dump(exclude_unset=True) == {"price": 12}


@pytest.fixture
def file_sessions(tmp_path):
    """Osobna baza w pliku, kazdy watek dostaje wlasne polaczenie."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'products.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


def test_concurrent_writes_keep_ids_unique(file_sessions):
    def create(i):
        db = file_sessions()
        try:
            return ProductService(ProductRepo(db)).create_product(ProductCreate(name=f"p{i}", price=i)).id
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(create, range(40)))

    assert len(set(ids)) == 40

    db = file_sessions()
    try:
        service = ProductService(ProductRepo(db))
        listed = service.list_products()
        assert sorted(p.id for p in listed) == sorted(ids)

        def bump(product_id):
            session = file_sessions()
            try:
                return ProductService(ProductRepo(session)).update_product(product_id, ProductUpdate(price=999))
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=8) as pool:
            updated = list(pool.map(bump, ids))

        assert {p.id for p in updated} == set(ids)
        db.expire_all()
        assert all(p.price == 999 for p in service.list_products())
    finally:
        db.close()
