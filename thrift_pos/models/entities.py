# ==============================================================================
# DOMAIN ENTITIES - SQLAlchemy table mappings
# ==============================================================================
# Tables: category, supplier, lot, product, sale, sale_item, operator.
# Keys are opaque UUID strings. Money columns are Numeric(12, 2).
# ==============================================================================

import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    CheckConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

CENTS = Decimal("0.01")


def new_id():
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC timestamp (the same on SQLite and PostgreSQL)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_money(value):
    """Converts a number or numeric string to a Decimal rounded to cents."""
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    else:
        amount = Decimal(str(value).strip())
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _money_out(value):
    return None if value is None else float(value)


def _ts_out(value):
    return value.isoformat() if value else None


# ==============================================================================
# ENUMERATIONS
# ==============================================================================

class PaymentMethod(str, enum.Enum):
    """Accepted payment methods."""
    CASH = "cash"
    PROMPTPAY = "promptpay"
    KHONLAKHRUENG = "khonlakhrueng"

    @property
    def label(self):
        return PAYMENT_METHOD_LABELS[self]

    @classmethod
    def parse(cls, value):
        """Returns the member for a value, or None if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return None


PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.PROMPTPAY: "PromptPay",
    PaymentMethod.KHONLAKHRUENG: "Khon La Khrueng",
}


# ==============================================================================
# REFERENCE ENTITIES
# ==============================================================================

class Category(Base):
    __tablename__ = "category"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    products = relationship("Product", back_populates="category")

    def to_dict(self):
        return {"id": self.id, "name": self.name}


class Supplier(Base):
    __tablename__ = "supplier"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False)
    phone = Column(String(40), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    lots = relationship("Lot", back_populates="supplier")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "notes": self.notes,
        }


# ==============================================================================
# LOTS AND PRODUCTS
# ==============================================================================

class Lot(Base):
    """
    A batch of stock bought from one supplier.

    total_cost = purchase_cost + washing_cost, and cost_per_item spreads it
    over the declared total_items, not over the products cataloged so far.
    """
    __tablename__ = "lot"

    id = Column(String(36), primary_key=True, default=new_id)
    lot_number = Column(String(20), nullable=False, unique=True)
    supplier_id = Column(String(36), ForeignKey("supplier.id"), nullable=False, index=True)

    purchase_cost = Column(Numeric(12, 2), nullable=False)
    washing_cost = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total_cost = Column(Numeric(12, 2), nullable=False)
    total_items = Column(Integer, nullable=False)
    cost_per_item = Column(Numeric(12, 2), nullable=False)

    purchase_date = Column(DateTime, nullable=False, default=utcnow)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    supplier = relationship("Supplier", back_populates="lots")
    products = relationship(
        "Product",
        back_populates="lot",
        order_by="Product.created_at.desc()",
    )

    __table_args__ = (
        CheckConstraint("total_items > 0", name="ck_lot_total_items_positive"),
    )

    def to_dict(self, with_products=False):
        data = {
            "id": self.id,
            "lot_number": self.lot_number,
            "supplier_id": self.supplier_id,
            "supplier": self.supplier.to_dict() if self.supplier else None,
            "purchase_cost": _money_out(self.purchase_cost),
            "washing_cost": _money_out(self.washing_cost),
            "total_cost": _money_out(self.total_cost),
            "total_items": self.total_items,
            "cost_per_item": _money_out(self.cost_per_item),
            "purchase_date": _ts_out(self.purchase_date),
            "notes": self.notes,
        }
        if with_products:
            data["products"] = [p.to_dict() for p in self.products]
        return data


class Product(Base):
    """
    A single catalogued item.

    The barcode is assigned once, at creation, and never changes.
    is_sold implies stock_quantity == 0.
    """
    __tablename__ = "product"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    barcode = Column(String(64), nullable=True, unique=True)

    category_id = Column(String(36), ForeignKey("category.id"), nullable=True, index=True)
    lot_id = Column(String(36), ForeignKey("lot.id"), nullable=True, index=True)

    cost_price = Column(Numeric(12, 2), nullable=False)
    selling_price = Column(Numeric(12, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=1)

    is_sold = Column(Boolean, nullable=False, default=False)
    sold_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    category = relationship("Category", back_populates="products")
    lot = relationship("Lot", back_populates="products")

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_product_stock_non_negative"),
        Index("ix_product_is_sold", "is_sold"),
    )

    @property
    def margin(self):
        return to_money(self.selling_price) - to_money(self.cost_price)

    @property
    def margin_percent(self):
        """Margin as a percentage of the selling price (0 when price is 0)."""
        price = to_money(self.selling_price)
        if price <= 0:
            return Decimal("0.00")
        return (self.margin / price * 100).quantize(CENTS, rounding=ROUND_HALF_UP)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "barcode": self.barcode,
            "category_id": self.category_id,
            "category": self.category.name if self.category else None,
            "lot_id": self.lot_id,
            "cost_price": _money_out(self.cost_price),
            "selling_price": _money_out(self.selling_price),
            "margin": float(self.margin),
            "margin_percent": float(self.margin_percent),
            "stock_quantity": self.stock_quantity,
            "is_sold": bool(self.is_sold),
            "sold_at": _ts_out(self.sold_at),
            "created_at": _ts_out(self.created_at),
        }


# ==============================================================================
# SALES
# ==============================================================================

class Sale(Base):
    __tablename__ = "sale"

    id = Column(String(36), primary_key=True, default=new_id)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(
        Enum(
            PaymentMethod,
            name="payment_method_enum",
            native_enum=False,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
    )

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    def to_dict(self):
        return {
            "id": self.id,
            "total_amount": _money_out(self.total_amount),
            "payment_method": self.payment_method.value,
            "payment_method_label": self.payment_method.label,
            "created_at": _ts_out(self.created_at),
            "items": [item.to_dict() for item in self.items],
        }


class SaleItem(Base):
    """Line of a sale; unit_price is a snapshot taken at checkout."""
    __tablename__ = "sale_item"

    id = Column(String(36), primary_key=True, default=new_id)
    sale_id = Column(String(36), ForeignKey("sale.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("product.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_item_quantity_positive"),
    )

    @property
    def line_total(self):
        return to_money(self.unit_price) * self.quantity

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "unit_price": _money_out(self.unit_price),
            "line_total": float(self.line_total),
        }


# ==============================================================================
# OPERATORS
# ==============================================================================

class Operator(Base):
    """Person allowed to log in. Passwords are stored as werkzeug hashes."""
    __tablename__ = "operator"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(80), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
