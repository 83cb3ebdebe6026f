"""
Plain-text reporting for the CLI.

formatters : format_forecast_table() + format_correlation_matrix().
"""
