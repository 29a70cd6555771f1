from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey, Numeric, UniqueConstraint
from datetime import datetime
from decimal import Decimal
from storefront.db.session import Base

class Category(Base):
    __tablename__ = 'categories'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default='')
    image_url: Mapped[str] = mapped_column(String(1024), default='')
    products = relationship('Product', back_populates='category')

class Product(Base):
    __tablename__ = 'products'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sku_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey('categories.id'), nullable=False)
    recommendation_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(240), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    sale_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    product_art_url: Mapped[str] = mapped_column(String(1024), default='')
    description: Mapped[str] = mapped_column(Text, default='')
    product_details: Mapped[str] = mapped_column(Text, default='{}')  # JSON object: attribute name -> value
    inventory: Mapped[int] = mapped_column(Integer, default=0)
    lead_time: Mapped[int] = mapped_column(Integer, default=0)
    created: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    category = relationship('Category', back_populates='products')

class CartItem(Base):
    __tablename__ = 'cart_items'
    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cart_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey('products.id', ondelete='CASCADE'), nullable=False)
    count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    date_created: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    product = relationship('Product')

class Order(Base):
    __tablename__ = 'orders'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_date: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    username: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(120), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(32), nullable=False)
    country: Mapped[str] = mapped_column(String(64), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal('0.00'))
    processed: Mapped[bool] = mapped_column(Boolean, default=False)
    details = relationship('OrderDetail', back_populates='order', cascade='all, delete-orphan')

class OrderDetail(Base):
    __tablename__ = 'order_details'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey('products.id'), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    order = relationship('Order', back_populates='details')
    product = relationship('Product')

class Store(Base):
    __tablename__ = 'stores'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    rainchecks = relationship('Raincheck', back_populates='store', cascade='all, delete-orphan')

class Raincheck(Base):
    __tablename__ = 'rainchecks'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    store_id: Mapped[int] = mapped_column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey('products.id', ondelete='CASCADE'), nullable=False)
    count: Mapped[int] = mapped_column(Integer, default=1)
    sale_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    store = relationship('Store', back_populates='rainchecks')
    product = relationship('Product')

class Promo(Base):
    __tablename__ = 'promos'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default='')
    active: Mapped[bool] = mapped_column(Boolean, default=True)
