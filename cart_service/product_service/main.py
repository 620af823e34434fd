# product_service/main.py
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

app = FastAPI(title="Product Service (dev mock)")


PRODUCTS = {
    "1": {"id": "1", "name": "Keyboard", "price": 199.99, "stock": 25, "category": "peripherals"},
    "2": {"id": "2", "name": "Mouse", "price": 49.50, "stock": 100, "category": "peripherals"},
    "3": {"id": "3", "name": "Monitor", "price": 899.00, "stock": 5, "category": "displays"},
}


class StockChange(BaseModel):
    delta: int


@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@app.post("/products/{product_id}/stock")
def change_stock(product_id: str, payload: StockChange):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    new_stock = product["stock"] + payload.delta
    if new_stock < 0:
        raise HTTPException(
            status_code=409,
            detail={"message": "Insufficient stock", "available": product["stock"]},
        )

    product["stock"] = new_stock
    return product
