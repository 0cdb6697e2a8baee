import math

import numpy as np

from config import CURRENCY_SYMBOL


def format_currency(amount):
    """
    Format a number as GBP currency
    """
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        amount = 0.0
    if not math.isfinite(amount):
        amount = 0.0
    if amount < 0:
        return f"-{CURRENCY_SYMBOL}{-amount:,.2f}"
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


def format_units(units):
    """
    Format a unit count with thousands separators, dropping a trailing .0

    Args:
        units (float): Number of units

    Returns:
        str: e.g. "1,250" or "12.5"
    """
    if float(units).is_integer():
        return f"{int(units):,}"
    return f"{units:,.2f}".rstrip('0').rstrip('.')


def format_percent(value):
    """Format a percentage with one decimal place"""
    return f"{value:.1f}%"


def format_input(value):
    """
    Text for an editable numeric box: the exact stored value, positional
    notation so it parses back to the same number ("2.555", "7", "0.00001")
    """
    return np.format_float_positional(float(value), trim='-')
