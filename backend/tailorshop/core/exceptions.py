"""Domain exceptions raised by the service layer.

Every error carries an HTTP status code and a short ``kind`` string; the
handler registered in ``tailorshop.main`` renders them as
``{"detail": message, "kind": kind}``.
"""

from typing import Iterable, Optional


class ShopError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(ShopError):
    status_code = 404
    kind = "not_found"

    entity = "Record"

    def __init__(self, entity_id: Optional[str] = None, message: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(message or f"{self.entity} not found")


class OrderNotFound(NotFoundError):
    entity = "Order"


class MaterialNotFound(NotFoundError):
    entity = "Material"


class CustomerNotFound(NotFoundError):
    entity = "Customer"


class StyleNotFound(NotFoundError):
    entity = "Style"


class ItemTypeNotFound(NotFoundError):
    entity = "Item type"


class SupplierNotFound(NotFoundError):
    entity = "Supplier"


class PurchaseOrderNotFound(NotFoundError):
    entity = "Purchase order"


class TransactionNotFound(NotFoundError):
    entity = "Transaction"


class EmployeeNotFound(NotFoundError):
    entity = "Employee"


class JobNotFound(NotFoundError):
    entity = "Job"


class InvalidInputError(ShopError):
    status_code = 400
    kind = "validation"


class InvalidMeasurementFieldError(InvalidInputError):
    """A measurement snapshot key is not part of the item-type template."""

    def __init__(self, field: str, allowed: Iterable[str]):
        self.field = field
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid measurement field: {field}. "
            f"Allowed fields: {', '.join(self.allowed)}"
        )


class BusinessRuleError(ShopError):
    status_code = 400
    kind = "business_rule"


class InsufficientStockError(BusinessRuleError):
    """Raised when a material does not hold enough stock for a reservation."""

    def __init__(self, material_id: str, material_name: str, available: float, required: float):
        self.material_id = material_id
        self.material_name = material_name
        self.available = available
        self.required = required
        super().__init__(f"Insufficient stock for material: {material_name}")


class NegativeStockError(BusinessRuleError):
    def __init__(self, material_name: str):
        self.material_name = material_name
        super().__init__("Stock cannot be negative")


class StockChangedError(BusinessRuleError):
    """Another request kept changing the material while a new level was being set."""

    status_code = 409
    kind = "conflict"

    def __init__(self, material_name: str):
        self.material_name = material_name
        super().__init__(f"Stock level of {material_name} changed during the update, please retry")


class FinalizedRecordError(BusinessRuleError):
    """The record reached a final state and can no longer change."""


class AlreadyPaidError(BusinessRuleError):
    pass
