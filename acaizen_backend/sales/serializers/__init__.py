from .sale import SaleSerializer

__all__ = [
    "SaleSerializer",
]
