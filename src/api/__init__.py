"""Request handling package."""

from src.api.handlers import ApiResponse, FinanceApi

__all__ = ["ApiResponse", "FinanceApi"]
