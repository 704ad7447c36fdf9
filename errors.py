"""
Error taxonomy for catalog, order and storage operations.

Every error carries a human readable message plus the offending
field/id/value so the caller can correct the request.
"""
from typing import Any, Dict, List, Optional


class ShopError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        return {}


# Request problems (bad request)

class ValidationError(ShopError):
    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])

    def details(self) -> Dict[str, Any]:
        return {"fields": self.fields} if self.fields else {}


class InvalidStatusError(ValidationError):
    def __init__(self, status: Any, valid: List[str]):
        super().__init__(f"Invalid status. Valid statuses: {', '.join(valid)}", ["status"])
        self.status = status


class UnknownProductError(ShopError):
    def __init__(self, product_id: Any):
        super().__init__(f"Product with ID {product_id} not found")
        self.product_id = product_id

    def details(self) -> Dict[str, Any]:
        return {"productId": self.product_id}


class InvalidQuantityError(ShopError):
    def __init__(self, product_name: str, quantity: Any):
        super().__init__(f"Invalid quantity for product: {product_name}")
        self.product_name = product_name
        self.quantity = quantity

    def details(self) -> Dict[str, Any]:
        return {"product": self.product_name, "quantity": self.quantity}


class TotalMismatchError(ShopError):
    def __init__(self, computed: float, provided: float):
        super().__init__("Order total mismatch")
        self.computed = computed
        self.provided = provided

    def details(self) -> Dict[str, Any]:
        return {"calculated": self.computed, "provided": self.provided}


class DuplicateNameError(ShopError):
    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(message or "Product with this name already exists")
        self.name = name

    def details(self) -> Dict[str, Any]:
        return {"name": self.name}


class DuplicateEmailError(DuplicateNameError):
    def __init__(self, email: str):
        super().__init__(email, "User already exists with this email")


class InvalidQueryError(ShopError):
    def __init__(self, message: str, parameter: str):
        super().__init__(message)
        self.parameter = parameter

    def details(self) -> Dict[str, Any]:
        return {"parameter": self.parameter}


# Lookup and access

class NotFoundError(ShopError):
    def __init__(self, entity: str, record_id: Any = None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.record_id = record_id


class AuthenticationError(ShopError):
    pass


class ForbiddenError(ShopError):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


# Storage

class StorageError(ShopError):
    def __init__(self, collection: str, reason: str):
        super().__init__(f"Storage failure on '{collection}': {reason}")
        self.collection = collection
        self.reason = reason


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass
