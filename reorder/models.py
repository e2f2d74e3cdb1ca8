from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint, func
from sqlalchemy.orm import relationship

from .auth import hash_password
from .db import Base


def new_id() -> str:
    return uuid4().hex


# Membership of products in lists; the autoincrement id keeps insertion order
list_products = Table(
    "reorder_list_products",
    Base.metadata,
    Column("id", Integer, primary_key=True),
    Column("list_id", String(32), ForeignKey("reorder_lists.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("product_id", String(32), ForeignKey("reorder_products.id", ondelete="CASCADE"), nullable=False, index=True),
    UniqueConstraint("list_id", "product_id", name="uq_list_product"),
)


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    @property
    def password(self):
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, plaintext: str):
        # Hash only happens on assignment, so unrelated updates keep the stored hash
        self.password_hash = hash_password(plaintext)


class ReorderList(Base):
    __tablename__ = "reorder_lists"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_list_user_name"),)

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    products = relationship(
        "ReorderProduct",
        secondary=list_products,
        order_by=list_products.c.id,
    )


class ReorderProduct(Base):
    __tablename__ = "reorder_products"
    __table_args__ = (UniqueConstraint("list_id", "sku", name="uq_product_list_sku"),)

    id = Column(String(32), primary_key=True, default=new_id)
    sku = Column(String(100), nullable=False)
    name = Column(String(200), nullable=False)
    reorder_quantity = Column(Integer, nullable=False)
    # Back-reference to the owning list; survives list deletion as NULL
    list_id = Column(String(32), ForeignKey("reorder_lists.id", ondelete="SET NULL"), nullable=True, index=True)
