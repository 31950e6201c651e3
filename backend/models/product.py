from sqlalchemy import Column, String, Numeric
from core.database import BaseModel, CHAR_LENGTH, GUID


class Product(BaseModel):
    """Catalog read model: only the fields negotiation needs."""
    __tablename__ = "products"
    __table_args__ = {'extend_existing': True}

    name = Column(String(CHAR_LENGTH), nullable=False, index=True)
    selling_price = Column(Numeric(12, 2), nullable=False)
    # Floor price: the lowest proposal the owning shop accepts.
    min_negotiable_price = Column(Numeric(12, 2), nullable=False)
    shop_id = Column(GUID(), nullable=False, index=True)
