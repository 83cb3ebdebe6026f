"""
Domain models (pydantic, frozen).

crop     : Commodity, PricePoint, PriceSeries — inputs from the catalog and
           storage collaborators.
forecast : ForecastParameters, Forecast, ForecastPath — engine request/response.
"""
