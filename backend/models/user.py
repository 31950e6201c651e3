from sqlalchemy import Column, String
from core.database import BaseModel, CHAR_LENGTH

CONSUMER_ROLE = "user"
SHOP_OWNER_ROLE = "shopOwner"


class User(BaseModel):
    """Read model of an identity-service account (consumer or shop owner)."""
    __tablename__ = "users"
    __table_args__ = {'extend_existing': True}

    name = Column(String(CHAR_LENGTH), nullable=False)
    email = Column(String(CHAR_LENGTH), unique=True,
                   index=True, nullable=False)
    role = Column(String(50), default=CONSUMER_ROLE, nullable=False)  # user, shopOwner

    @property
    def is_consumer(self) -> bool:
        return self.role == CONSUMER_ROLE

    @property
    def is_shop_owner(self) -> bool:
        return self.role == SHOP_OWNER_ROLE
