from enum import Enum

class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"   # First installment received
    PAID = "paid"
    FAILED = "failed"
    OVERDUE = "overdue"   # Derived on read, never stored
