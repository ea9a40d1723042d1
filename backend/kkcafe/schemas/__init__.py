from kkcafe.schemas.drink import DeleteResponse, Drink, ErrorResponse, HealthResponse

__all__ = ["DeleteResponse", "Drink", "ErrorResponse", "HealthResponse"]
