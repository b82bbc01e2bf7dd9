from enum import Enum

class ProductCondition(str, Enum):
    LIKE_NEW = "like_new"
    GOOD = "good"
    FAIR = "fair"
    VINTAGE = "vintage"
