import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from relations_db import chats as chat_ops
from relations_db import relationships as rel
from relations_db.connect_db import get_client, get_database
from relations_db.errors import RelationsError
from relations_db.ids import stringify_id

from . import views
from .schemas import (
    AddressIn,
    CustomerIn,
    CustomerOrderRef,
    CustomerOut,
    CustomerPopulatedOut,
    OrderIn,
    OrderOut,
    PostIn,
    PostOut,
    PostPopulatedOut,
    UserIn,
    UserOut,
)

logger = logging.getLogger(__name__)

API_TOKEN = os.getenv("API_TOKEN", "giveAccess")


def db_conn(request: Request):
    return request.app.state.db


# ======== Utility helpers ========
def _order_out(doc: dict) -> OrderOut:
    return OrderOut(**stringify_id(doc))


def _customer_out(doc: dict, populated: bool):
    d = stringify_id(doc)
    if populated:
        d["orders"] = [_order_out(o) if o is not None else None for o in d.get("orders", [])]
        return CustomerPopulatedOut(**d)
    d["orders"] = [str(o) for o in d.get("orders", [])]
    return CustomerOut(**d)


def _user_out(doc: dict) -> UserOut:
    return UserOut(**stringify_id(doc))


def _post_out(doc: dict, populated: bool):
    d = stringify_id(doc)
    if populated:
        d["user"] = _user_out(d["user"]) if d.get("user") is not None else None
        return PostPopulatedOut(**d)
    d["user"] = str(d["user"])
    return PostOut(**d)


# ======== Greetings ========
greetings = APIRouter(tags=["Greetings"])


@greetings.get("/", response_class=PlainTextResponse)
def home():
    return "Add '/ghost' on your route or add '/$yourname' on the route"


@greetings.get("/ghost", response_class=PlainTextResponse)
def ghost():
    return "👻👻 I'm the ghost"


@greetings.get("/api/ping", response_class=PlainTextResponse)
def ping():
    return "pong"


# registered after every other router so it only catches unclaimed paths
welcome = APIRouter(tags=["Greetings"])


@welcome.get("/{name}", response_class=PlainTextResponse)
def welcome_name(name: str):
    return f"Have a warm welcome here {name}"


# ======== Chats ========
chats_router = APIRouter(prefix="/chats", tags=["Chats"])


def _chat_or_404(db, chat_id: str) -> dict:
    chat = chat_ops.get_chat(db, chat_id)
    if chat is None:
        raise HTTPException(status_code=404, detail="Chat not found")
    return chat


def _redirect_to_index() -> RedirectResponse:
    return RedirectResponse(url="/chats", status_code=status.HTTP_303_SEE_OTHER)


@chats_router.get("", response_class=HTMLResponse)
def list_chats(db=Depends(db_conn)):
    return views.render_index(chat_ops.list_chats(db))


@chats_router.get("/new", response_class=HTMLResponse)
def new_chat_form():
    return views.render_new()


@chats_router.get("/{chat_id}", response_class=HTMLResponse)
def show_chat(chat_id: str, db=Depends(db_conn)):
    return views.render_show(_chat_or_404(db, chat_id))


@chats_router.get("/{chat_id}/edit", response_class=HTMLResponse)
def edit_chat_form(chat_id: str, db=Depends(db_conn)):
    return views.render_edit(_chat_or_404(db, chat_id))


@chats_router.post("")
def create_chat(
    sender: str = Form(alias="from", min_length=1, max_length=255),
    recipient: str = Form(alias="to", min_length=1, max_length=255),
    message: str = Form(default="", max_length=50),
    db=Depends(db_conn),
):
    chat_id = chat_ops.create_chat(db, sender, recipient, message)
    logger.info("Created chat %s", chat_id)
    return _redirect_to_index()


@chats_router.patch("/{chat_id}")
def update_chat(chat_id: str, message: str = Form(max_length=50), db=Depends(db_conn)):
    if chat_ops.update_message(db, chat_id, message) is None:
        raise HTTPException(status_code=404, detail="Chat not found")
    return _redirect_to_index()


@chats_router.delete("/{chat_id}")
def delete_chat(chat_id: str, db=Depends(db_conn)):
    if chat_ops.delete_chat(db, chat_id) is None:
        raise HTTPException(status_code=404, detail="Chat not found")
    return _redirect_to_index()


@chats_router.post("/{chat_id}")
def override_chat(
    chat_id: str,
    method: str = Form(alias="_method"),
    message: Optional[str] = Form(default=None, max_length=50),
    db=Depends(db_conn),
):
    """HTML forms only send GET/POST; ``_method`` picks PATCH or DELETE."""
    method = method.upper()
    if method == "PATCH":
        if message is None:
            raise HTTPException(status_code=400, detail="message is required")
        return update_chat(chat_id, message, db)
    if method == "DELETE":
        return delete_chat(chat_id, db)
    raise HTTPException(status_code=405, detail=f"Unsupported _method {method}")


# ======== Orders ========
orders_router = APIRouter(prefix="/orders", tags=["Orders"])


@orders_router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_orders(payload: Union[list[OrderIn], OrderIn], db=Depends(db_conn)):
    items = payload if isinstance(payload, list) else [payload]
    ids = rel.insert_orders(db, [o.model_dump() for o in items])
    return {"status": "created", "order_ids": [str(i) for i in ids]}


@orders_router.get("", response_model=list[OrderOut])
def list_orders(db=Depends(db_conn)):
    return [_order_out(d) for d in rel.list_orders(db)]


@orders_router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db=Depends(db_conn)):
    doc = rel.get_order(db, order_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Order not found")
    return _order_out(doc)


@orders_router.delete("/{order_id}", response_model=dict)
def delete_order(order_id: str, db=Depends(db_conn)):
    if not rel.delete_order(db, order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    return {"deleted": 1}


# ======== Customers ========
customers_router = APIRouter(prefix="/customers", tags=["Customers"])


@customers_router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerIn, db=Depends(db_conn)):
    customer_id = rel.create_customer(db, payload.name, payload.orders, check_refs=True)
    return _customer_out(rel.get_customer(db, customer_id, populate_orders=False), populated=False)


@customers_router.get("")
def list_customers(populate: bool = True, db=Depends(db_conn)):
    return [_customer_out(d, populate) for d in rel.list_customers(db, populate_orders=populate)]


@customers_router.get("/{customer_id}")
def get_customer(customer_id: str, populate: bool = True, keep_missing: bool = False, db=Depends(db_conn)):
    doc = rel.get_customer(db, customer_id, populate_orders=populate, keep_missing=keep_missing)
    if not doc:
        raise HTTPException(status_code=404, detail="Customer not found")
    return _customer_out(doc, populate)


@customers_router.post("/{customer_id}/orders", response_model=CustomerOut)
def add_customer_order(customer_id: str, payload: CustomerOrderRef, db=Depends(db_conn)):
    if rel.get_order(db, payload.order_id) is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if not rel.add_order_to_customer(db, customer_id, payload.order_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return _customer_out(rel.get_customer(db, customer_id, populate_orders=False), populated=False)


# ======== Users & posts ========
users_router = APIRouter(prefix="/users", tags=["Users"])


def _user_or_404(db, user_id: str) -> dict:
    doc = rel.get_user(db, user_id)
    if not doc:
        raise HTTPException(status_code=404, detail="User not found")
    return doc


@users_router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserIn, db=Depends(db_conn)):
    user_id = rel.create_user(
        db,
        payload.username,
        payload.email,
        [a.model_dump() for a in payload.addresses],
    )
    return _user_out(rel.get_user(db, user_id))


@users_router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db=Depends(db_conn)):
    return _user_out(_user_or_404(db, user_id))


@users_router.post("/{user_id}/addresses", response_model=UserOut)
def add_address(user_id: str, payload: AddressIn, db=Depends(db_conn)):
    if not rel.add_address(db, user_id, payload.model_dump()):
        raise HTTPException(status_code=404, detail="User not found")
    return _user_out(rel.get_user(db, user_id))


@users_router.post("/{user_id}/posts", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_posts(user_id: str, payload: list[PostIn], db=Depends(db_conn)):
    _user_or_404(db, user_id)
    ids = rel.create_posts(db, user_id, [p.model_dump() for p in payload])
    return {"status": "created", "post_ids": [str(i) for i in ids]}


@users_router.get("/{user_id}/posts", response_model=list[PostOut])
def list_user_posts(user_id: str, db=Depends(db_conn)):
    _user_or_404(db, user_id)
    return [_post_out(d, populated=False) for d in rel.list_posts_for_user(db, user_id)]


posts_router = APIRouter(prefix="/posts", tags=["Posts"])


@posts_router.get("/{post_id}")
def get_post(post_id: str, populate: bool = True, db=Depends(db_conn)):
    doc = rel.get_post(db, post_id, populate_user=populate)
    if not doc:
        raise HTTPException(status_code=404, detail="Post not found")
    return _post_out(doc, populate)


# ======== Health ========
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=dict)
def health(db=Depends(db_conn)):
    try:
        db.client.admin.command("ping")
        return {"status": "ok"}
    except PyMongoError:
        raise HTTPException(status_code=503, detail="db ping failed")


# ======== App ========
def _install_middleware(app: FastAPI, api_token: str):
    @app.middleware("http")
    async def request_time(request: Request, call_next):
        request.state.time = datetime.now(timezone.utc).isoformat()
        logger.info("%s %s at %s", request.method, request.url.path, request.state.time)
        response = await call_next(request)
        response.headers["X-Request-Time"] = request.state.time
        return response

    # added last so it runs first: denied requests are not timed
    @app.middleware("http")
    async def token_gate(request: Request, call_next):
        path = request.url.path
        if path == "/api" or path.startswith("/api/"):
            if request.query_params.get("token") != api_token:
                return PlainTextResponse("Access Denied", status_code=status.HTTP_403_FORBIDDEN)
        return await call_next(request)


def _install_error_handlers(app: FastAPI):
    @app.exception_handler(RelationsError)
    async def relations_error(request: Request, exc: RelationsError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConnectionFailure)
    async def store_unreachable(request: Request, exc: ConnectionFailure):
        logger.error("Store unreachable on %s %s: %s", request.method, request.url.path, exc)
        return PlainTextResponse("Database unavailable", status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    # server-side rejections: validator failures (code 121), duplicate keys
    @app.exception_handler(OperationFailure)
    async def store_rejected(request: Request, exc: OperationFailure):
        logger.warning("Store rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=400, content={"detail": str(exc), "code": exc.code})

    @app.exception_handler(PyMongoError)
    async def store_error(request: Request, exc: PyMongoError):
        logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
        return PlainTextResponse("Database error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(database=None, api_token: Optional[str] = None) -> FastAPI:
    """Build the app.

    Without ``database`` a client is opened on startup and closed on
    shutdown; tests pass an in-memory database instead.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        if database is None:
            client = get_client()
            app.state.db = get_database(client)
        try:
            yield
        finally:
            if client is not None:
                client.close()
                logger.info("MongoDB client closed")

    app = FastAPI(title="Relationship Vault API (Mongo)", version="1.0.0", lifespan=lifespan)
    if database is not None:
        app.state.db = database

    _install_middleware(app, api_token or API_TOKEN)
    _install_error_handlers(app)

    app.include_router(greetings)
    app.include_router(health_router)
    app.include_router(chats_router)
    app.include_router(orders_router)
    app.include_router(customers_router)
    app.include_router(users_router)
    app.include_router(posts_router)
    app.include_router(welcome)
    return app


app = create_app()
