from enum import Enum

class PaymentMethod(str, Enum):
    MOBILE_MONEY = "mobile_money"
    INSTALLMENT = "installment"
