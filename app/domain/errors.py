# app/domain/errors.py


class ProductNotFound(ValueError):
    """Operacja odwoluje sie do nieistniejacego id produktu."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class UnknownPattern(LookupError):
    """Brak handlera dla komendy z kanalu TCP."""

    def __init__(self, cmd):
        super().__init__(f"There is no matching message handler defined for {cmd!r}")
        self.cmd = cmd


class RemoteError(Exception):
    """Odpowiedz z kanalu TCP zawierala `err` (po stronie klienta)."""

    def __init__(self, err):
        if isinstance(err, dict):
            message = err.get("message", str(err))
            self.code = err.get("code")
        else:
            message = str(err)
            self.code = None
        super().__init__(message)
        self.err = err
