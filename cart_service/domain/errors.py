# cart_service/domain/errors.py


class CartBusyError(RuntimeError):
    """Nie udalo sie zalozyc locka na koszyk po wszystkich probach."""

    def __init__(self, customer_id: str):
        super().__init__(
            "Koszyk jest wlasnie modyfikowany przez inne zadanie, sprobuj ponownie za chwile"
        )
        self.customer_id = customer_id


class NotFoundError(LookupError):
    pass


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: str):
        super().__init__(f"Klient {customer_id} nie istnieje")


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        super().__init__(f"Produkt {product_id} nie istnieje")


class CartNotFoundError(NotFoundError):
    def __init__(self, customer_id: str):
        super().__init__(f"Koszyk klienta {customer_id} nie istnieje")


class CartItemNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        super().__init__(f"Produktu {product_id} nie ma w koszyku")


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str):
        super().__init__(f"Zamowienie {order_id} nie istnieje")


class CartValidationError(ValueError):
    pass


class InsufficientStockError(CartValidationError):
    def __init__(self, product_id: str, available: int, requested: int):
        super().__init__(
            f"Brak wystarczajacej ilosci produktu {product_id}. "
            f"Dostepne: {available}, zadane: {requested}"
        )
        self.available = available
        self.requested = requested


class EmptyCartError(CartValidationError):
    def __init__(self, customer_id: str):
        super().__init__(f"Koszyk klienta {customer_id} jest pusty")


class CustomerInactiveError(PermissionError):
    def __init__(self, customer_id: str, status: str):
        super().__init__(f"Klient {customer_id} nie moze skladac zamowien (status: {status})")
        self.status = status
