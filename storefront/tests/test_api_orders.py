"""
API集成测试
通过HTTP接口走完 浏览 -> 报价 -> 下单 -> 配送 -> 评价 的流程
"""

from decimal import Decimal

import pytest

from ..models.menu import MenuItemCreate, RestaurantCreate
from .conftest import auth_headers_for

API = "/api/v1"


@pytest.fixture
def order_payload(sample_menu):
    return {
        "items": [
            {"menu_item_id": sample_menu["noodles"].menu_item_id, "quantity": 2, "addon_ids": ["egg"]}
        ],
        "delivery_address": {"street": "人民路1号", "city": "成都"},
    }


class TestPublicAPI:

    def test_health(self, client):
        """测试健康检查"""
        response = client.get("/health")
        assert response.status_code == 200
        assert "status" in response.json()

    def test_list_restaurants(self, client, sample_restaurant):
        """测试餐厅列表"""
        response = client.get(f"{API}/restaurants")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [r["name"] for r in data["data"]] == ["川味小馆"]

    def test_missing_restaurant_404(self, client):
        """测试餐厅不存在返回404"""
        response = client.get(f"{API}/restaurants/9999")

        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    def test_menu(self, client, sample_restaurant, sample_menu):
        """测试匿名查看菜单只含可售菜品"""
        response = client.get(f"{API}/restaurants/{sample_restaurant.restaurant_id}/menu")

        assert response.status_code == 200
        assert [i["name"] for i in response.json()["data"]] == ["担担面", "米饭"]

    def test_cart_quote(self, client, order_payload):
        """测试购物车报价（1000积分抵扣10元）"""
        response = client.post(f"{API}/cart/quote", json={"items": order_payload["items"],
                                                          "points_to_redeem": 1000})

        assert response.status_code == 200
        data = response.json()["data"]
        assert Decimal(str(data["subtotal"])) == Decimal("23.00")
        assert Decimal(str(data["points_discount"])) == Decimal("10.00")
        assert Decimal(str(data["total"])) == Decimal("17.83")


class TestOrderFlowAPI:

    def test_requires_token(self, client, order_payload):
        """测试未携带token下单返回401"""
        response = client.post(f"{API}/orders", json=order_payload)

        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTHENTICATION_REQUIRED"

    def test_invalid_token(self, client, order_payload):
        """测试无效token返回401"""
        response = client.post(f"{API}/orders", json=order_payload,
                               headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_request_validation(self, client, customer_headers):
        """测试请求参数校验失败返回422"""
        response = client.post(f"{API}/orders", json={"items": []}, headers=customer_headers)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_full_flow(self, client, customer_headers, owner_headers, driver_headers, driver, order_payload):
        """测试下单、制作、配送、送达、评价的完整流程"""
        response = client.post(f"{API}/orders", json=order_payload, headers=customer_headers)
        assert response.status_code == 200
        order = response.json()["data"]
        assert order["status"] == "pending"
        order_id = order["order_id"]

        for status in ("confirmed", "preparing", "ready"):
            response = client.post(f"{API}/orders/{order_id}/status", json={"status": status},
                                   headers=owner_headers)
            assert response.status_code == 200
            assert response.json()["data"]["status"] == status

        response = client.get(f"{API}/orders/available", headers=driver_headers)
        assert [o["order_id"] for o in response.json()["data"]] == [order_id]

        response = client.post(f"{API}/orders/{order_id}/accept", headers=driver_headers)
        assert response.status_code == 200
        assert response.json()["data"]["driver_id"] == driver.user_id

        response = client.put(f"{API}/orders/{order_id}/location", json={"lat": 30.66, "lng": 104.06},
                              headers=driver_headers)
        assert response.status_code == 200

        response = client.get(f"{API}/orders/{order_id}", headers=customer_headers)
        assert response.json()["data"]["driver_location"]["lat"] == pytest.approx(30.66)

        response = client.post(f"{API}/orders/{order_id}/status", json={"status": "delivered"},
                               headers=driver_headers)
        assert response.json()["data"]["status"] == "delivered"

        response = client.post(f"{API}/reviews", json={"order_id": order_id, "rating": 5, "comment": "很快"},
                               headers=customer_headers)
        assert response.status_code == 200

        response = client.get(f"{API}/restaurants/{order['restaurant_id']}/reviews")
        data = response.json()["data"]
        assert data["review_count"] == 1
        assert data["average_rating"] == pytest.approx(5.0)

    def test_invalid_transition_409(self, client, customer_headers, owner_headers, order_payload):
        """测试非法状态流转返回409"""
        order_id = client.post(f"{API}/orders", json=order_payload,
                               headers=customer_headers).json()["data"]["order_id"]

        response = client.post(f"{API}/orders/{order_id}/status", json={"status": "delivered"},
                               headers=owner_headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"

    def test_cannot_view_others_order(self, client, customer_headers, other_customer, order_payload):
        """测试不能查看他人订单"""
        order_id = client.post(f"{API}/orders", json=order_payload,
                               headers=customer_headers).json()["data"]["order_id"]

        response = client.get(f"{API}/orders/{order_id}", headers=auth_headers_for(other_customer))
        assert response.status_code == 403

    def test_missing_order_404(self, client, owner_headers):
        """测试订单不存在返回404"""
        response = client.post(f"{API}/orders/9999/status", json={"status": "confirmed"},
                               headers=owner_headers)
        assert response.status_code == 404

    def test_available_orders_drivers_only(self, client, customer_headers):
        """测试只有配送员能查看待接订单"""
        response = client.get(f"{API}/orders/available", headers=customer_headers)
        assert response.status_code == 403


class TestLoyaltyAPI:

    def test_balance_and_redeem(self, client, customer_headers, order_payload):
        """测试下单获得积分后使用积分"""
        client.post(f"{API}/orders", json=order_payload, headers=customer_headers)

        response = client.get(f"{API}/loyalty", headers=customer_headers)
        assert response.json()["data"]["points"] == 23

        response = client.post(f"{API}/loyalty/redeem", json={"points": 10}, headers=customer_headers)
        assert response.status_code == 200

        response = client.get(f"{API}/loyalty/transactions", headers=customer_headers)
        assert [t["type"] for t in response.json()["data"]] == ["redeemed", "earned"]

    def test_redeem_over_balance(self, client, customer_headers):
        """测试积分不足返回400"""
        response = client.post(f"{API}/loyalty/redeem", json={"points": 10}, headers=customer_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "INSUFFICIENT_POINTS"

    def test_cart_mismatch_error_code(self, client, customer_headers, menu_service, other_owner,
                                      sample_menu, order_payload):
        """测试跨餐厅下单返回购物车餐厅不一致"""
        other = menu_service.create_restaurant(other_owner, RestaurantCreate(name="汉堡店"))
        burger = menu_service.add_menu_item(other_owner, other.restaurant_id,
                                            MenuItemCreate(name="汉堡", price=Decimal("8.00")))
        order_payload["items"].append({"menu_item_id": burger.menu_item_id})

        response = client.post(f"{API}/orders", json=order_payload, headers=customer_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "CART_RESTAURANT_MISMATCH"


class TestFavoritesAPI:

    def test_toggle(self, client, customer_headers, sample_restaurant):
        """测试收藏与取消收藏"""
        body = {"restaurant_id": sample_restaurant.restaurant_id}

        response = client.post(f"{API}/favorites/toggle", json=body, headers=customer_headers)
        assert response.json()["data"]["is_favorite"] is True

        response = client.get(f"{API}/favorites", headers=customer_headers)
        assert [r["name"] for r in response.json()["data"]["restaurants"]] == ["川味小馆"]

        response = client.post(f"{API}/favorites/toggle", json=body, headers=customer_headers)
        assert response.json()["data"]["is_favorite"] is False

    def test_check(self, client, customer_headers, sample_restaurant):
        """查询单个目标的收藏状态"""
        check = f"{API}/favorites/check?restaurant_id={sample_restaurant.restaurant_id}"
        assert client.get(check, headers=customer_headers).json()["data"]["is_favorite"] is False

        client.post(f"{API}/favorites/toggle", json={"restaurant_id": sample_restaurant.restaurant_id},
                    headers=customer_headers)
        assert client.get(check, headers=customer_headers).json()["data"]["is_favorite"] is True

    def test_check_requires_single_target(self, client, customer_headers):
        """不指定目标返回400"""
        response = client.get(f"{API}/favorites/check", headers=customer_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_FAVORITE_TARGET"


class TestMenuUpdateAPI:

    @pytest.mark.parametrize("body", [{"is_available": None}, {"price": None}, {"name": None}])
    def test_null_update_rejected(self, client, owner_headers, sample_restaurant, sample_menu, body):
        """显式置空必填字段返回422，菜品和菜单不受影响"""
        response = client.patch(f"{API}/menu-items/{sample_menu['rice'].menu_item_id}", json=body,
                                headers=owner_headers)
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

        response = client.get(f"{API}/restaurants/{sample_restaurant.restaurant_id}/menu")
        assert response.status_code == 200
        assert [i["name"] for i in response.json()["data"]] == ["担担面", "米饭"]

    def test_partial_update(self, client, owner_headers, sample_menu):
        """只更新提交的字段"""
        response = client.patch(f"{API}/menu-items/{sample_menu['rice'].menu_item_id}",
                                json={"price": "1.50"}, headers=owner_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert Decimal(str(data["price"])) == Decimal("1.50")
        assert data["is_available"] is True


class TestReviewsAPI:

    def test_eligibility_and_own_reviews(self, client, customer_headers, owner_headers, driver_headers,
                                         order_payload):
        """送达后可评价，评价后出现在自己的评价列表中且不可再评价"""
        order_id = client.post(f"{API}/orders", json=order_payload,
                               headers=customer_headers).json()["data"]["order_id"]
        eligibility = f"{API}/reviews/eligibility/{order_id}"
        assert client.get(eligibility, headers=customer_headers).json()["data"]["can_review"] is False

        for status in ("confirmed", "preparing", "ready"):
            client.post(f"{API}/orders/{order_id}/status", json={"status": status}, headers=owner_headers)
        client.post(f"{API}/orders/{order_id}/accept", headers=driver_headers)
        client.post(f"{API}/orders/{order_id}/status", json={"status": "delivered"}, headers=driver_headers)
        assert client.get(eligibility, headers=customer_headers).json()["data"]["can_review"] is True

        client.post(f"{API}/reviews", json={"order_id": order_id, "rating": 4}, headers=customer_headers)

        response = client.get(f"{API}/reviews", headers=customer_headers)
        assert [r["order_id"] for r in response.json()["data"]] == [order_id]
        assert client.get(eligibility, headers=customer_headers).json()["data"]["can_review"] is False

    def test_own_reviews_requires_token(self, client):
        """查看自己的评价需要登录"""
        assert client.get(f"{API}/reviews").status_code == 401


class TestHandOffAPI:

    def test_unknown_driver_400(self, client, customer_headers, owner_headers, order_payload):
        """交付给不存在的配送员返回400"""
        order_id = client.post(f"{API}/orders", json=order_payload,
                               headers=customer_headers).json()["data"]["order_id"]
        for status in ("confirmed", "preparing", "ready"):
            client.post(f"{API}/orders/{order_id}/status", json={"status": status}, headers=owner_headers)

        response = client.post(f"{API}/orders/{order_id}/status",
                               json={"status": "out_for_delivery", "driver_id": 999}, headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "DRIVER_NOT_FOUND"

    def test_hand_off_to_registered_driver(self, client, customer_headers, owner_headers, driver_headers,
                                           driver, order_payload):
        """配送员查看过待接订单后，餐厅可以交付给他"""
        order_id = client.post(f"{API}/orders", json=order_payload,
                               headers=customer_headers).json()["data"]["order_id"]
        for status in ("confirmed", "preparing", "ready"):
            client.post(f"{API}/orders/{order_id}/status", json={"status": status}, headers=owner_headers)
        client.get(f"{API}/orders/available", headers=driver_headers)

        response = client.post(f"{API}/orders/{order_id}/status",
                               json={"status": "out_for_delivery", "driver_id": driver.user_id},
                               headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["data"]["driver_id"] == driver.user_id
