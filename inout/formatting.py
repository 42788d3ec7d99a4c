"""Display formatting shared by the app and the exports.

Amounts always render with en-US grouping and two decimals, whatever the
selected currency.
"""

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


def format_currency(amount: float, currency: str = "USD") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    # round first so -0.004 does not render as "-$0.00"
    rounded = round(amount, 2)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def format_signed_currency(amount: float, tx_type: str, currency: str = "USD") -> str:
    prefix = "+" if tx_type == "income" else "-"
    return f"{prefix}{format_currency(amount, currency)}"


def format_percent(value: float, signed: bool = False) -> str:
    text = f"{value:.1f}%"
    if signed and value > 0:
        return f"+{text}"
    return text
