"""Tests for the HTTP endpoints."""

from decimal import Decimal

from tests.helpers import DAI, ROUTER, TEST_PRIVATE_KEY, USDC


class TestStatus:
    def test_status(self, client):
        response = client.post("/")

        assert response.status_code == 200
        data = response.json()
        assert data["network"] == "mainnet"
        assert data["rpcUrl"] == "http://fake-node:8545"
        assert data["connection"] is True
        assert data["timestamp"] > 0

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestBalances:
    def test_balances_in_token_units(self, client, fake_client, owner):
        fake_client.native_balances[owner] = 3 * 10**18
        fake_client.token_balances[(USDC, owner)] = 25_500_000

        response = client.post(
            "/eth/balances", json={"privateKey": TEST_PRIVATE_KEY, "tokenList": ["USDC"]}
        )

        assert response.status_code == 200
        assert response.json()["balances"] == {"ETH": "3", "USDC": "25.5"}

    def test_token_list_as_json_string(self, client):
        response = client.post(
            "/eth/balances", json={"privateKey": TEST_PRIVATE_KEY, "tokenList": '["DAI"]'}
        )
        assert response.status_code == 200
        assert set(response.json()["balances"]) == {"ETH", "DAI"}

    def test_unknown_symbols_are_skipped(self, client):
        response = client.post(
            "/eth/balances", json={"privateKey": TEST_PRIVATE_KEY, "tokenList": ["NOPE"]}
        )
        assert response.status_code == 200
        assert set(response.json()["balances"]) == {"ETH"}

    def test_invalid_private_key(self, client):
        response = client.post("/eth/balances", json={"privateKey": "0x1234", "tokenList": []})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"


class TestAllowances:
    def test_allowances_for_router(self, client, fake_client, owner):
        fake_client.allowances[(DAI, owner, ROUTER)] = 10**18

        response = client.post(
            "/eth/allowances",
            json={"privateKey": TEST_PRIVATE_KEY, "tokenList": ["DAI", "USDC", "ETH"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["spender"] == ROUTER
        assert data["approvals"] == {"DAI": "1", "USDC": "0"}

    def test_wrong_connector(self, client):
        response = client.post(
            "/eth/allowances",
            json={"privateKey": TEST_PRIVATE_KEY, "tokenList": ["DAI"], "connector": "sushi"},
        )

        assert response.status_code == 400
        assert "connector" in response.json()["message"]


class TestApprove:
    def test_unlimited_by_default(self, client):
        response = client.post("/eth/approve", json={"privateKey": TEST_PRIVATE_KEY, "token": "DAI"})

        assert response.status_code == 200
        data = response.json()
        assert data["tokenAddress"] == DAI
        assert data["spender"] == ROUTER
        assert data["amount"] == "unlimited"
        assert data["txHash"].startswith("0x")

    def test_explicit_amount(self, client, fake_client):
        response = client.post(
            "/eth/approve",
            json={"privateKey": TEST_PRIVATE_KEY, "token": "USDC", "amount": "12.5"},
        )

        assert response.status_code == 200
        assert response.json()["amount"] == "12.5"
        assert fake_client.count("send_raw_transaction") == 1

    def test_native_rejected(self, client):
        response = client.post("/eth/approve", json={"privateKey": TEST_PRIVATE_KEY, "token": "ETH"})
        assert response.status_code == 400

    def test_unknown_token(self, client):
        response = client.post("/eth/approve", json={"privateKey": TEST_PRIVATE_KEY, "token": "NOPE"})

        assert response.status_code == 404
        assert response.json()["error"] == "asset_not_found"


class TestPoll:
    TX_HASH = "0x" + "ab" * 32

    def test_pending(self, client):
        response = client.post("/eth/poll", json={"txHash": self.TX_HASH})

        assert response.status_code == 200
        data = response.json()
        assert data["txHash"] == self.TX_HASH
        assert data["confirmed"] is False
        assert data["receipt"] is None

    def test_confirmed(self, client, fake_client):
        fake_client.mine(self.TX_HASH, block_number=123)

        response = client.post("/eth/poll", json={"txHash": self.TX_HASH})

        data = response.json()
        assert data["confirmed"] is True
        assert data["receipt"]["blockNumber"] == 123
        assert data["receipt"]["status"] is True
        assert data["receipt"]["failure"] is None

    def test_reverted_without_deadline(self, client, fake_client):
        fake_client.mine(self.TX_HASH, status=0)

        receipt = client.post("/eth/poll", json={"txHash": self.TX_HASH}).json()["receipt"]

        assert receipt["status"] is False
        assert receipt["failure"] == "reverted"

    def test_malformed_hash(self, client):
        response = client.post("/eth/poll", json={"txHash": "0x1234"})
        assert response.status_code == 422


class TestPrice:
    def test_sell(self, client, dai_usdc_pool):
        response = client.post(
            "/uniswap/price", json={"base": "DAI", "quote": "USDC", "amount": "1", "side": "sell"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["route"] == ["DAI", "USDC"]
        expected = Decimal(data["expectedAmount"])
        # 2 USDC per DAI less the 0.3% fee
        assert Decimal("1.99") < expected < Decimal("2")
        assert Decimal(data["price"]) == expected

    def test_buy(self, client, dai_usdc_pool):
        response = client.post(
            "/uniswap/price", json={"base": "DAI", "quote": "USDC", "amount": "2", "side": "buy"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["route"] == ["USDC", "DAI"]
        assert Decimal("4") < Decimal(data["expectedAmount"]) < Decimal("4.02")
        assert Decimal(data["price"]) > Decimal("2")

    def test_bridged_route(self, client, fake_client, dai, weth, usdc):
        fake_client.add_pair(dai, 2_000_000 * 10**18, weth, 1000 * 10**18)
        fake_client.add_pair(weth, 1000 * 10**18, usdc, 2_000_000 * 10**6)

        response = client.post(
            "/uniswap/price", json={"base": "DAI", "quote": "USDC", "amount": "1", "side": "sell"}
        )

        assert response.json()["route"] == ["DAI", "WETH", "USDC"]

    def test_no_liquidity(self, client):
        response = client.post(
            "/uniswap/price", json={"base": "DAI", "quote": "USDC", "amount": "1", "side": "sell"}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "no_liquidity"

    def test_amount_below_one_unit(self, client, dai_usdc_pool):
        response = client.post(
            "/uniswap/price",
            json={"base": "USDC", "quote": "DAI", "amount": "0.0000001", "side": "sell"},
        )
        assert response.status_code == 400

    def test_drains_pool(self, client, dai_usdc_pool):
        response = client.post(
            "/uniswap/price",
            json={"base": "DAI", "quote": "USDC", "amount": "1000000", "side": "buy"},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "insufficient_liquidity"


class TestTrade:
    def trade(self, client, **overrides):
        body = {
            "privateKey": TEST_PRIVATE_KEY,
            "base": "DAI",
            "quote": "USDC",
            "amount": "1",
            "side": "sell",
        }
        body.update(overrides)
        return client.post("/uniswap/trade", json=body)

    def test_sell_submits(self, client, fake_client, dai_usdc_pool):
        response = self.trade(client)

        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "swapExactTokensForTokens"
        assert data["gasLimit"] == 1_200_000
        assert data["gasPrice"] == "50"
        assert data["txHash"].startswith("0x")
        assert Decimal(data["boundAmount"]) == Decimal(data["expectedAmount"])
        assert fake_client.count("send_raw_transaction") == 1

    def test_buy_with_native_quote(self, client, fake_client, weth, usdc):
        fake_client.add_pair(weth, 1000 * 10**18, usdc, 2_000_000 * 10**6)

        response = self.trade(client, base="USDC", quote="ETH", amount="100", gasPrice="7")

        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "swapETHForExactTokens"
        assert data["gasPrice"] == "7"

    def test_limit_price_rejects_sell(self, client, fake_client, dai_usdc_pool):
        response = self.trade(client, limitPrice="2.5")

        assert response.status_code == 422
        assert response.json()["error"] == "price_limit_exceeded"
        assert fake_client.count("send_raw_transaction") == 0

    def test_limit_price_accepts_sell(self, client, dai_usdc_pool):
        assert self.trade(client, limitPrice="1.5").status_code == 200

    def test_limit_price_rejects_buy(self, client, fake_client, dai_usdc_pool):
        response = self.trade(client, side="buy", limitPrice="1.9")

        assert response.status_code == 422
        assert fake_client.count("send_raw_transaction") == 0

    def test_invalid_private_key(self, client, fake_client, dai_usdc_pool):
        response = self.trade(client, privateKey="not-a-key")

        assert response.status_code == 400
        assert fake_client.calls == []

    def test_recipient_must_be_address(self, client, dai_usdc_pool):
        assert self.trade(client, recipient="0x1234").status_code == 422

    def test_late_swap_polls_as_stale_quote(self, client, fake_client, dai_usdc_pool):
        data = self.trade(client).json()
        fake_client.mine(data["txHash"], status=0, timestamp=data["deadline"] + 600)

        receipt = client.post("/eth/poll", json={"txHash": data["txHash"]}).json()["receipt"]

        assert receipt["status"] is False
        assert receipt["failure"] == "stale_quote"
