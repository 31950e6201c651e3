"""
Response utility for consistent API responses
"""
from typing import Any
from fastapi.responses import JSONResponse
from fastapi import status
from pydantic import BaseModel
from decimal import Decimal
from enum import Enum
from uuid import UUID
from datetime import datetime, date


class Response(JSONResponse):
    """
    Standardized API response wrapper: {success, data, message}
    Inherits from JSONResponse to be directly returnable from FastAPI routes
    """

    def __init__(
        self,
        success: bool = True,
        data: Any = None,
        message: str = "Success",
        status_code: int = status.HTTP_200_OK,
        **kwargs
    ):
        response_data = {
            "success": success,
            "data": self._serialize_data(data),
            "message": message
        }

        super().__init__(
            content=response_data,
            status_code=status_code,
            **kwargs
        )

    def _serialize_data(self, data: Any) -> Any:
        """
        Convert Pydantic models and other non-serializable objects to JSON-serializable format
        """
        if data is None:
            return None
        elif isinstance(data, BaseModel):
            # Aliases carry the camelCase wire names
            return data.model_dump(mode='json', by_alias=True)
        elif isinstance(data, UUID):
            return str(data)
        elif isinstance(data, Decimal):
            return str(data)
        elif isinstance(data, Enum):
            return data.value
        elif isinstance(data, (datetime, date)):
            return data.isoformat()
        elif isinstance(data, (list, tuple)):
            return [self._serialize_data(item) for item in data]
        elif isinstance(data, dict):
            return {key: self._serialize_data(value) for key, value in data.items()}
        else:
            return data

    @staticmethod
    def success(
        data: Any = None,
        message: str = "Success",
        status_code: int = status.HTTP_200_OK,
    ) -> "Response":
        """
        Create a successful response
        """
        return Response(
            success=True,
            data=data,
            message=message,
            status_code=status_code,
        )
