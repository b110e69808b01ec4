# app/services/product_service.py
import threading
from typing import List

from app.data.models.product import ProductModel
from app.domain.errors import ProductNotFound
from app.domain.schemas import ProductCreate, ProductUpdate, ProductOut
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)

#komendy (create/update/remove) ida po kolei, niezaleznie od transportu
_write_lock = threading.Lock()


class ProductService:
    """
    Jedyny interfejs CRUD dla produktow.
    Router HTTP i handlery komend TCP tylko tlumacza request i wolaja ten serwis.
    """

    def __init__(self, repo: ProductRepo):
        self.repo = repo

    #query
    def list_products(self) -> List[ProductOut]:
        return [ProductOut.model_validate(p) for p in self.repo.list_products()]

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._require(product_id))

    #commands
    def create_product(self, payload: ProductCreate) -> ProductOut:
        with _write_lock:
            created = self.repo.create_product(ProductModel(**payload.model_dump()))
        logger.info(f"Utworzono produkt {created.id}")
        return ProductOut.model_validate(created)

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductOut:
        changes = payload.model_dump(exclude_unset=True)
        with _write_lock:
            product = self._require(product_id)
            updated = self.repo.update_product(product, changes)
        logger.info(f"Zaktualizowano produkt {product_id}, pola: {sorted(changes)}")
        return ProductOut.model_validate(updated)

    def remove_product(self, product_id: int) -> ProductOut:
        with _write_lock:
            product = self._require(product_id)
            #snapshot przed commitem, potem wiersza juz nie ma
            removed = ProductOut.model_validate(product)
            self.repo.delete_product(product)
        logger.info(f"Usunieto produkt {product_id}")
        return removed

    def _require(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise ProductNotFound(product_id)
        return product
