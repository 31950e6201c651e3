from sqlalchemy import Column, String
from core.database import BaseModel, CHAR_LENGTH, GUID


class Shop(BaseModel):
    __tablename__ = "shops"
    __table_args__ = {'extend_existing': True}

    shop_name = Column(String(CHAR_LENGTH), unique=True, nullable=False)
    owner_id = Column(GUID(), nullable=False, index=True)
