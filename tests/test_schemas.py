import dataclasses

import pytest

from composer.schemas import ExecutionResult, OrderRequest, Side, SignedOrder


def test_order_request_from_wire_keys():
    order = OrderRequest.from_dict(
        {
            "provider": "polymarket",
            "marketIdOrSlug": 519068,
            "positionIdOrName": "YES",
            "buyOrSell": "sell",
            "usdcFlowAbs": "6",
        }
    )
    assert order.market_id_or_slug == "519068"
    assert order.buy_or_sell is Side.SELL
    assert order.usdc_flow_abs == 6.0


def test_order_request_from_snake_case_keys():
    order = OrderRequest.from_dict(
        {
            "provider": "polymarket",
            "market_id_or_slug": "will-xai-have-the-top-ai-model-on-december-31",
            "position_id_or_name": "NO",
            "buy_or_sell": "BUY",
            "usdc_flow_abs": 2.5,
        }
    )
    assert order.buy_or_sell is Side.BUY
    assert order.position_id_or_name == "NO"


def test_order_request_to_dict_is_camel_case():
    order = OrderRequest("polymarket", "535793", "YES", Side.SELL, 6)
    assert order.to_dict() == {
        "provider": "polymarket",
        "marketIdOrSlug": "535793",
        "positionIdOrName": "YES",
        "buyOrSell": "SELL",
        "usdcFlowAbs": 6.0,
    }


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"provider": ""}, "provider"),
        ({"market_id_or_slug": "  "}, "market_id_or_slug"),
        ({"buy_or_sell": "HOLD"}, "BUY or SELL"),
        ({"usdc_flow_abs": 0}, "positive"),
        ({"usdc_flow_abs": -6}, "positive"),
        ({"usdc_flow_abs": "six"}, "number"),
        ({"usdc_flow_abs": float("nan")}, "finite"),
        ({"usdc_flow_abs": float("inf")}, "finite"),
        ({"usdc_flow_abs": "-inf"}, "finite"),
    ],
)
def test_order_request_validation(kwargs, message):
    base = {
        "provider": "polymarket",
        "market_id_or_slug": "519068",
        "position_id_or_name": "YES",
        "buy_or_sell": "SELL",
        "usdc_flow_abs": 6,
    }
    base.update(kwargs)
    with pytest.raises(ValueError, match=message):
        OrderRequest(**base)


@pytest.mark.parametrize(
    "field, value",
    [
        ("positionIdOrName", True),
        ("positionIdOrName", False),
        ("marketIdOrSlug", 1.5),
        ("provider", ["polymarket"]),
    ],
)
def test_order_request_from_dict_rejects_non_string_identifiers(field, value):
    data = {
        "provider": "polymarket",
        "marketIdOrSlug": "519068",
        "positionIdOrName": "YES",
        "buyOrSell": "SELL",
        "usdcFlowAbs": 6,
    }
    data[field] = value
    with pytest.raises(ValueError, match=field):
        OrderRequest.from_dict(data)


def test_order_request_is_immutable():
    order = OrderRequest("polymarket", "519068", "YES", Side.SELL, 6)
    with pytest.raises(dataclasses.FrozenInstanceError):
        order.usdc_flow_abs = 10


def test_signed_order_to_dict():
    order = OrderRequest("polymarket", "519068", "YES", Side.SELL, 6)
    signed = SignedOrder(request=order, payload={"nonce": 1}, signature="0xabc", signer="0x1")
    d = signed.to_dict()
    assert d["request"]["marketIdOrSlug"] == "519068"
    assert d["order"] == {"nonce": 1}
    assert d["signature"] == "0xabc"


def test_execution_result_from_success_response():
    result = ExecutionResult.from_response(
        {"success": True, "orderId": "ord-1", "status": "open", "txHash": "0xdead"}
    )
    assert result.success
    assert result.order_id == "ord-1"
    assert result.tx_hash == "0xdead"
    assert result.error == ""


def test_execution_result_from_error_response():
    result = ExecutionResult.from_response({"status": "error", "error": "market closed"})
    assert not result.success
    assert result.error == "market closed"
    assert result.raw_response["status"] == "error"
