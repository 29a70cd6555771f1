from pydantic import BaseModel, Field, EmailStr

class ShoppingCartRemoveResult(BaseModel):
    message: str
    cart_sub_total: str
    cart_shipping: str
    cart_tax: str
    cart_total: str
    cart_count: int
    item_count: int
    delete_id: int

class CheckoutForm(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    address: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=120)
    state: str = Field(min_length=1, max_length=120)
    postal_code: str = Field(min_length=1, max_length=32)
    country: str = Field(min_length=1, max_length=64)
    phone: str = Field(min_length=1, max_length=32)
    email: EmailStr
    promo_code: str = Field(min_length=1, max_length=64)

