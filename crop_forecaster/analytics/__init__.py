"""
Series analytics.

series_stats       : mean, volatility, correlation, moving_average, mape.
correlation_matrix : CorrelationCell grid + strength labels for the heatmap.
"""
