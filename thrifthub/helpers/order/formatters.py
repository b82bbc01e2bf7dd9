from datetime import date, datetime
from decimal import Decimal
from typing import Union
from babel.numbers import format_currency as babel_format_currency
from babel.dates import format_date as babel_format_date, format_datetime as babel_format_datetime

def format_currency(value: Union[Decimal, float], locale_str: str = 'en_GH') -> str:
    return babel_format_currency(value, 'GHS', locale=locale_str)

def format_ghana_date(value: date, locale_str: str = 'en_GH') -> str:
    return babel_format_date(value, "EEE, d MMM yyyy", locale=locale_str)

def format_ghana_datetime(value: datetime, locale_str: str = 'en_GH') -> str:
    return babel_format_datetime(value, "dd/MM/yyyy HH:mm", locale=locale_str)
