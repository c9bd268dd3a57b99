"""
Domain exceptions for the warehouse ledger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class WarehouseError(Exception):
    """Base exception for all warehouse errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(WarehouseError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Lookup Exceptions
class NotFoundError(WarehouseError):
    """Referenced entity is absent or outside the caller's tenant scope."""

    def __init__(self, entity: str, entity_id: Any, code: str | None = None):
        super().__init__(
            f"{entity} not found: {entity_id}",
            code=code or "NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class MovementNotFoundError(NotFoundError):
    """Ledger row not found."""

    def __init__(self, movement_id: int):
        super().__init__("Movement", movement_id, code="MOVEMENT_NOT_FOUND")


class ExitTransactionNotFoundError(NotFoundError):
    """Exit transaction not found."""

    def __init__(self, transaction_id: int):
        super().__init__("Exit transaction", transaction_id, code="EXIT_TRANSACTION_NOT_FOUND")


class MaterialNotFoundError(NotFoundError):
    """Material not found."""

    def __init__(self, material_id: int):
        super().__init__("Material", material_id, code="MATERIAL_NOT_FOUND")


class ReferenceNotFoundError(NotFoundError):
    """Category, supplier, employee, third party or cost center not found."""

    def __init__(self, kind: str, entity_id: int):
        super().__init__(kind.replace("_", " ").capitalize(), entity_id, code="REFERENCE_NOT_FOUND")
        self.details["kind"] = kind


# Inventory Exceptions
class InventoryError(WarehouseError):
    """Base exception for stock ledger rule violations."""

    pass


class InsufficientStockError(InventoryError):
    """Requested exit exceeds what the open lots can supply."""

    def __init__(self, material_id: int, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for material {material_id}: "
            f"available {available}, requested {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "material_id": material_id,
                "available": available,
                "requested": requested,
            },
        )
        self.material_id = material_id
        self.available = available
        self.requested = requested


class StaleStockVersionError(InventoryError):
    """A material's stock_version moved between planning and writing."""

    def __init__(self, material_id: int, expected: int, actual: int | None):
        super().__init__(
            f"Stock version of material {material_id} is {actual}, expected {expected}",
            code="STALE_STOCK_VERSION",
            details={"material_id": material_id, "expected": expected, "actual": actual},
        )
        self.material_id = material_id


class StockConflictError(InventoryError):
    """Concurrent ledger writes kept invalidating an exit plan."""

    def __init__(self, material_id: int, attempts: int):
        super().__init__(
            f"Stock of material {material_id} changed concurrently; "
            f"gave up after {attempts} attempts",
            code="STOCK_CONFLICT",
            details={"material_id": material_id, "attempts": attempts},
        )
        self.material_id = material_id


class MaterialInUseError(InventoryError):
    """Material still has ledger rows."""

    def __init__(self, material_id: int, movements: int):
        super().__init__(
            f"Material {material_id} has {movements} movements and cannot be deleted",
            code="MATERIAL_IN_USE",
            details={"material_id": material_id, "movements": movements},
        )


class DuplicateCodeError(WarehouseError):
    """Natural key already used inside the tenant."""

    def __init__(self, kind: str, code: str):
        super().__init__(
            f"{kind.replace('_', ' ').capitalize()} code already exists: {code}",
            code="DUPLICATE_CODE",
            details={"kind": kind, "code": code},
        )


# Validation Exceptions
class ValidationError(WarehouseError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )
        self.field = field


class ConfigurationError(WarehouseError):
    """Configuration error."""

    pass


# Warnings
class ConsistencyRepairedWarning(UserWarning):
    """The cached stock counter drifted from the ledger and was rewritten."""

    def __init__(self, material_id: int, cached: int, computed: int):
        super().__init__(
            f"Material {material_id} stock repaired: {cached} -> {computed}"
        )
        self.material_id = material_id
        self.cached = cached
        self.computed = computed
