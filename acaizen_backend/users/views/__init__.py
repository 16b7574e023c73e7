from .employees import EmployeeViewSet
from .me import MeView

__all__ = [
    "EmployeeViewSet",
    "MeView",
]
