"""
测试配置文件
提供测试所需的fixtures和配置
"""

import os

# 必须在导入配置之前设置，避免测试写入本地数据库文件
os.environ.setdefault("DATABASE_URL", "duckdb://:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from ..app import create_app
from ..core.database import DatabaseManager, get_db
from ..core.security import security_manager
from ..models.menu import Addon, MenuItem, MenuItemCreate, RestaurantCreate
from ..models.order import Address, OrderStatus
from ..models.user import Actor, UserRole
from ..schemas.order import CheckoutItem, CheckoutRequest
from ..services.loyalty_service import LoyaltyService
from ..services.menu_service import MenuService
from ..services.order_service import OrderService
from ..services.social_service import FavoriteService, ReviewService


@pytest.fixture
def test_db():
    """测试数据库（内存）"""
    db = DatabaseManager(":memory:")
    db.init_database()
    yield db
    db.close()


@pytest.fixture
def order_service(test_db):
    return OrderService(test_db)


@pytest.fixture
def menu_service(test_db):
    return MenuService(test_db)


@pytest.fixture
def loyalty_service(test_db):
    return LoyaltyService(test_db)


@pytest.fixture
def favorite_service(test_db):
    return FavoriteService(test_db)


@pytest.fixture
def review_service(test_db):
    return ReviewService(test_db)


@pytest.fixture
def owner():
    """餐厅店主"""
    return Actor(user_id=100, role=UserRole.RESTAURANT)


@pytest.fixture
def other_owner():
    return Actor(user_id=101, role=UserRole.RESTAURANT)


@pytest.fixture
def customer():
    return Actor(user_id=1, role=UserRole.CUSTOMER)


@pytest.fixture
def other_customer():
    return Actor(user_id=2, role=UserRole.CUSTOMER)


@pytest.fixture
def driver():
    return Actor(user_id=200, role=UserRole.DRIVER)


@pytest.fixture
def other_driver():
    return Actor(user_id=201, role=UserRole.DRIVER)


@pytest.fixture
def sample_restaurant(menu_service, owner):
    """示例餐厅"""
    return menu_service.create_restaurant(owner, RestaurantCreate(
        name="川味小馆",
        description="正宗川菜",
        cuisine=["川菜", "中餐"],
        delivery_time="30-40分钟",
    ))


@pytest.fixture
def sample_menu(menu_service, owner, sample_restaurant):
    """示例菜单：带加料的主菜、普通菜、已下架的菜"""
    rid = sample_restaurant.restaurant_id
    noodles = menu_service.add_menu_item(owner, rid, MenuItemCreate(
        name="担担面",
        price=Decimal("10.00"),
        category="面食",
        is_popular=True,
        addons=[
            Addon(id="egg", name="加蛋", price=Decimal("1.50")),
            Addon(id="beef", name="加牛肉", price=Decimal("4.00")),
        ],
    ))
    rice = menu_service.add_menu_item(owner, rid, MenuItemCreate(
        name="米饭",
        price=Decimal("1.25"),
        category="主食",
    ))
    sold_out = menu_service.add_menu_item(owner, rid, MenuItemCreate(
        name="水煮鱼",
        price=Decimal("38.00"),
        is_available=False,
    ))
    return {"noodles": noodles, "rice": rice, "sold_out": sold_out}


@pytest.fixture
def address():
    return Address(street="人民路1号", city="成都", state="四川", zip_code="610000")


@pytest.fixture
def checkout_request(sample_menu, address):
    """小计23.00的下单请求：担担面(10.00 + 加蛋1.50) x 2"""

    def _build(points_to_redeem: int = 0, **overrides) -> CheckoutRequest:
        items = overrides.pop("items", None) or [
            CheckoutItem(menu_item_id=sample_menu["noodles"].menu_item_id, quantity=2, addon_ids=["egg"])
        ]
        return CheckoutRequest(items=items, points_to_redeem=points_to_redeem,
                               delivery_address=address, **overrides)

    return _build


@pytest.fixture
def placed_order(order_service, customer, checkout_request):
    """已下单（pending）的订单"""
    return order_service.place_order(customer, checkout_request())


@pytest.fixture
def ready_order(order_service, owner, placed_order):
    """已推进到待取餐（ready）的订单"""
    for status in (OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.READY):
        order_service.change_status(owner, placed_order.order_id, status)
    return order_service.get_order(placed_order.order_id)


def make_menu_item(menu_item_id: int = 1, restaurant_id: int = 1, price: str = "10.00",
                   addons=None, name: str = "测试菜品") -> MenuItem:
    """构造不落库的菜品"""
    return MenuItem(
        menu_item_id=menu_item_id,
        restaurant_id=restaurant_id,
        name=name,
        price=Decimal(price),
        addons=addons or [],
    )


@pytest.fixture
def app_instance(test_db):
    """测试应用：数据库依赖替换为测试库"""
    app = create_app()
    app.dependency_overrides[get_db] = lambda: test_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_instance):
    """测试客户端"""
    return TestClient(app_instance)


def auth_headers_for(actor: Actor) -> dict:
    token = security_manager.create_jwt_token(actor.user_id, actor.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer):
    return auth_headers_for(customer)


@pytest.fixture
def owner_headers(owner):
    return auth_headers_for(owner)


@pytest.fixture
def driver_headers(driver):
    return auth_headers_for(driver)
