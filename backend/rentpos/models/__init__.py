from .employees import Employee, EmployeeLog
from .products import Product, RentalProduct
from .customers import Customer, Coupon
from .sales import SalesTransaction, SalesTransactionItem
from .rentals import RentalTransaction, RentalTransactionItem, ReturnTransaction, ReturnTransactionItem
from .auth import SessionToken

__all__ = [
    'Employee', 'EmployeeLog',
    'Product', 'RentalProduct',
    'Customer', 'Coupon',
    'SalesTransaction', 'SalesTransactionItem',
    'RentalTransaction', 'RentalTransactionItem',
    'ReturnTransaction', 'ReturnTransactionItem',
    'SessionToken',
]
