from pydantic import BaseModel
from typing import TypeVar, Generic, Optional

# Define a generic type for the data payload
DataType = TypeVar("DataType")


class APIResponse(BaseModel, Generic[DataType]):
    success: bool
    message: str
    data: Optional[DataType] = None

    class Config:
        from_attributes = True
