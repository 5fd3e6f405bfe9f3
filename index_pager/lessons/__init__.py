"""Customer lessons: the tutorial queries run on top of the pager."""

from index_pager.lessons.customers import CustomerLesson
from index_pager.lessons.models import Customer, CustomerRecord
from index_pager.lessons.stores import (
    CustomerStore,
    MemoryCustomerStore,
    SqlCustomerStore,
    open_store,
)

__all__ = [
    "Customer",
    "CustomerLesson",
    "CustomerRecord",
    "CustomerStore",
    "MemoryCustomerStore",
    "SqlCustomerStore",
    "open_store",
]
