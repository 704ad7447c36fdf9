from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Depends, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from passlib.context import CryptContext

from catalog import Catalog
from config import settings
from database import COLLECTIONS, RecordStore
from errors import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ShopError,
    StorageError,
)
from guard import Caller, CUSTOMER
from logger import get_logger
from orders import DEFAULT_PAGE_SIZE, OrderRepository
from schemas import (
    LoginInput,
    OrderCreate,
    ProductIn,
    ProductUpdate,
    ProfileUpdate,
    RegisterInput,
    StatusUpdate,
)
from users import UserDirectory, public

log = get_logger("api")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

app = FastAPI(title="Shop API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error mapping: most specific class first, anything else is a bad request
ERROR_STATUS = [
    (AuthenticationError, 401),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (StorageError, 500),
]


def status_for(exc: ShopError) -> int:
    for cls, code in ERROR_STATUS:
        if isinstance(exc, cls):
            return code
    return 400


@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    code = status_for(exc)
    if code == 500:
        log.error(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=500, content={"detail": "Storage failure, please retry later"})
    return JSONResponse(status_code=code, content={"detail": exc.message, **exc.details()})


# Utilities

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


# Dependencies

_store = RecordStore(settings.data_dir)


def get_store() -> RecordStore:
    return _store


def get_current_user(authorization: Optional[str] = Header(default=None),
                     store: RecordStore = Depends(get_store)) -> Dict[str, Any]:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1]
    payload = decode_token(token)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = UserDirectory(store).find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def get_caller(current_user: dict = Depends(get_current_user)) -> Caller:
    return Caller(user_id=current_user["id"], role=current_user.get("role", CUSTOMER))


def get_catalog(store: RecordStore = Depends(get_store)) -> Catalog:
    return Catalog(store)


def get_orders(store: RecordStore = Depends(get_store)) -> OrderRepository:
    return OrderRepository(store)


def token_response(user: Dict[str, Any]) -> Dict[str, Any]:
    token = create_access_token({"sub": str(user["id"])})
    return {"access_token": token, "token_type": "bearer", "user": public(user)}


# Routes
@app.get("/")
def read_root():
    return {"message": "Shop API"}


@app.get("/test")
def test_storage(store: RecordStore = Depends(get_store)):
    response = {
        "backend": "✅ Running",
        "storage": "❌ Not Available",
        "data_dir": str(store.data_dir),
        "collections": {},
    }
    if store.data_dir.is_dir():
        response["storage"] = "✅ Available"
        response["collections"] = {
            name: len(store.load(name)) for name in COLLECTIONS if store.path_for(name).exists()
        }
    return response


# Auth
@app.post("/api/auth/register", status_code=201)
def register(payload: RegisterInput, store: RecordStore = Depends(get_store)):
    user = UserDirectory(store).create(payload.name, payload.email, hash_password(payload.password))
    log.info(f"Registered user {user['id']}")
    return token_response(user)


@app.post("/api/auth/login")
def login(payload: LoginInput, store: RecordStore = Depends(get_store)):
    user = UserDirectory(store).find_by_email(payload.email)
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        raise AuthenticationError("Invalid email or password")
    return token_response(user)


@app.get("/api/auth/profile")
def profile(current_user: dict = Depends(get_current_user)):
    return {"user": public(current_user)}


@app.put("/api/auth/profile")
def update_profile(data: ProfileUpdate, current_user: dict = Depends(get_current_user),
                   store: RecordStore = Depends(get_store)):
    user = UserDirectory(store).update_profile(current_user["id"], name=data.name, email=data.email)
    return {"user": public(user)}


# Products
@app.get("/api/products")
def list_products(category: Optional[str] = None, search: Optional[str] = None,
                  page: int = 1, limit: Optional[int] = None, catalog: Catalog = Depends(get_catalog)):
    return catalog.list(category=category, search=search, page=page, limit=limit)


@app.get("/api/products/featured")
def featured_products(catalog: Catalog = Depends(get_catalog)):
    return catalog.featured()


@app.get("/api/products/categories")
def product_categories(catalog: Catalog = Depends(get_catalog)):
    return catalog.distinct_categories()


@app.get("/api/products/{product_id}")
def get_product(product_id: int, catalog: Catalog = Depends(get_catalog)):
    return catalog.find_by_id(product_id)


@app.post("/api/products", status_code=201)
def create_product(data: ProductIn, caller: Caller = Depends(get_caller), catalog: Catalog = Depends(get_catalog)):
    return catalog.create(data, caller)


@app.put("/api/products/{product_id}")
def update_product(product_id: int, data: ProductUpdate, caller: Caller = Depends(get_caller),
                   catalog: Catalog = Depends(get_catalog)):
    return catalog.update(product_id, data, caller)


@app.delete("/api/products/{product_id}")
def delete_product(product_id: int, caller: Caller = Depends(get_caller), catalog: Catalog = Depends(get_catalog)):
    return catalog.delete(product_id, caller)


# Orders
@app.post("/api/orders", status_code=201)
def create_order(data: OrderCreate, orders: OrderRepository = Depends(get_orders)):
    return orders.create(data)


@app.get("/api/orders")
def list_orders(status: Optional[str] = None, search: Optional[str] = None, page: int = 1,
                limit: int = DEFAULT_PAGE_SIZE, caller: Caller = Depends(get_caller),
                orders: OrderRepository = Depends(get_orders)):
    return orders.list(caller, status=status, search=search, page=page, limit=limit)


@app.get("/api/orders/my-orders")
def my_orders(status: Optional[str] = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE,
              caller: Caller = Depends(get_caller), orders: OrderRepository = Depends(get_orders)):
    return orders.list(caller, status=status, page=page, limit=limit, own_only=True)


@app.get("/api/orders/stats/summary")
def order_stats(caller: Caller = Depends(get_caller), orders: OrderRepository = Depends(get_orders)):
    return orders.stats_summary(caller)


@app.get("/api/orders/{order_id}")
def get_order(order_id: int, caller: Caller = Depends(get_caller), orders: OrderRepository = Depends(get_orders)):
    return orders.get_by_id(order_id, caller)


@app.put("/api/orders/{order_id}/status")
def update_order_status(order_id: int, data: StatusUpdate, caller: Caller = Depends(get_caller),
                        orders: OrderRepository = Depends(get_orders)):
    return orders.update_status(order_id, data.status, caller)


@app.delete("/api/orders/{order_id}")
def delete_order(order_id: int, caller: Caller = Depends(get_caller), orders: OrderRepository = Depends(get_orders)):
    return orders.delete(order_id, caller)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
