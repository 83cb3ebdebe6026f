"""
Input adapters for price histories.

price_csv : parse_price_csv() — ``date,price`` CSV → PriceSeries.
"""
