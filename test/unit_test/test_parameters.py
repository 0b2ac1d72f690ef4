"""
Unit tests for tool parameter models
"""

import unittest

from pydantic import ValidationError

from uniswap_plugin.parameters import (
    AddLiquidityParameters,
    CollectFeesParameters,
    GetNewPoolsParameters,
    GetPoolInfoParameters,
    GetPositionsParameters,
    RemoveLiquidityParameters,
    ScanPoolsParameters,
    SwapAndAddLiquidityParameters,
    SwapExactInputParameters,
    SwapExactOutputParameters,
)

WETH = "0x4200000000000000000000000000000000000006"
USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


def token(address, decimals=18, symbol=""):
    return {"address": address, "decimals": decimals, "symbol": symbol}


class TestAddLiquidityParameters(unittest.TestCase):

    def valid(self, **overrides):
        args = {
            "token0": token(WETH, 18, "WETH"),
            "token1": token(USDC, 6, "USDC"),
            "fee": 3000,
            "amount0Desired": "1000000000000000000",
            "amount1Desired": "3000000000",
            "tickLower": -120,
            "tickUpper": 120,
        }
        args.update(overrides)
        return args

    def test_camel_case_arguments(self):
        params = AddLiquidityParameters.model_validate(self.valid())

        self.assertEqual(params.amount0_desired, "1000000000000000000")
        self.assertEqual(params.tick_lower, -120)
        self.assertEqual(params.slippage_tolerance, 50)

    def test_snake_case_arguments(self):
        params = AddLiquidityParameters(
            token0=token(WETH),
            token1=token(USDC, 6),
            fee=500,
            amount0_desired="1",
            amount1_desired="2",
            tick_lower=-10,
            tick_upper=10,
        )
        self.assertEqual(params.fee, 500)

    def test_addresses_are_checksummed(self):
        params = AddLiquidityParameters.model_validate(self.valid(token1=token(USDC.lower(), 6)))
        self.assertEqual(params.token1.address, USDC)

    def test_integer_amounts_accepted(self):
        params = AddLiquidityParameters.model_validate(self.valid(amount0Desired=10 ** 18))
        self.assertEqual(params.amount0_desired, str(10 ** 18))

    def test_rejects_decimal_amount(self):
        with self.assertRaises(ValidationError):
            AddLiquidityParameters.model_validate(self.valid(amount0Desired="1.5"))

    def test_rejects_non_ascii_digits(self):
        for amount in ("\u00b2", "\u0661\u0662", "-1", ""):
            with self.assertRaises(ValidationError):
                AddLiquidityParameters.model_validate(self.valid(amount1Desired=amount))

    def test_rejects_unknown_fee_tier(self):
        with self.assertRaises(ValidationError):
            AddLiquidityParameters.model_validate(self.valid(fee=2500))

    def test_rejects_misaligned_ticks(self):
        with self.assertRaises(ValidationError):
            AddLiquidityParameters.model_validate(self.valid(tickLower=-100))

    def test_rejects_inverted_range(self):
        with self.assertRaises(ValidationError):
            AddLiquidityParameters.model_validate(self.valid(tickLower=120, tickUpper=-120))

    def test_rejects_same_token(self):
        with self.assertRaises(ValidationError):
            AddLiquidityParameters.model_validate(self.valid(token1=token(WETH)))

    def test_rejects_bad_address(self):
        with self.assertRaises(ValidationError):
            AddLiquidityParameters.model_validate(self.valid(token0=token("0x1234")))

    def test_slippage_bounds(self):
        with self.assertRaises(ValidationError):
            AddLiquidityParameters.model_validate(self.valid(slippageTolerance=10001))


class TestRemoveLiquidityParameters(unittest.TestCase):

    def test_max_liquidity(self):
        for value in ("max", "MAX", "MaxUint128"):
            params = RemoveLiquidityParameters.model_validate({"tokenId": 1, "liquidity": value})
            self.assertEqual(params.liquidity, "max")
            self.assertTrue(params.removes_all)

    def test_uint128_max_removes_all(self):
        params = RemoveLiquidityParameters.model_validate({"tokenId": 1, "liquidity": str(2 ** 128 - 1)})
        self.assertTrue(params.removes_all)

    def test_partial_liquidity(self):
        params = RemoveLiquidityParameters.model_validate({"tokenId": 1, "liquidity": "5000"})
        self.assertFalse(params.removes_all)
        self.assertEqual(params.slippage_tolerance, 1)

    def test_rejects_zero_liquidity(self):
        with self.assertRaises(ValidationError):
            RemoveLiquidityParameters.model_validate({"tokenId": 1, "liquidity": "0"})

    def test_slippage_is_percent(self):
        params = RemoveLiquidityParameters.model_validate({"tokenId": 1, "liquidity": "1", "slippageTolerance": 2.5})
        self.assertEqual(params.slippage_tolerance, 2.5)

        with self.assertRaises(ValidationError):
            RemoveLiquidityParameters.model_validate({"tokenId": 1, "liquidity": "1", "slippageTolerance": 150})


class TestSwapParameters(unittest.TestCase):

    def test_exact_input(self):
        params = SwapExactInputParameters.model_validate({
            "tokenIn": token(WETH),
            "tokenOut": token(USDC, 6),
            "fee": 500,
            "amountIn": "1000",
            "amountOutMinimum": "0",
        })
        self.assertEqual(params.sqrt_price_limit_x96, "0")

    def test_exact_output_requires_bounds(self):
        with self.assertRaises(ValidationError):
            SwapExactOutputParameters.model_validate({
                "tokenIn": token(WETH),
                "tokenOut": token(USDC, 6),
                "fee": 500,
                "amountOut": "1000",
            })

    def test_rejects_same_tokens(self):
        with self.assertRaises(ValidationError):
            SwapExactInputParameters.model_validate({
                "tokenIn": token(WETH),
                "tokenOut": token(WETH.lower()),
                "fee": 500,
                "amountIn": "1",
                "amountOutMinimum": "1",
            })

    def test_rejects_superscript_amount(self):
        with self.assertRaises(ValidationError):
            SwapExactInputParameters.model_validate({
                "tokenIn": token(WETH),
                "tokenOut": token(USDC, 6),
                "fee": 500,
                "amountIn": "\u00b2",
                "amountOutMinimum": "0",
            })


class TestQueryParameters(unittest.TestCase):

    def test_collect_fees(self):
        self.assertEqual(CollectFeesParameters.model_validate({"tokenId": 42}).token_id, 42)

    def test_positions_owner_optional(self):
        self.assertIsNone(GetPositionsParameters.model_validate({}).owner)
        params = GetPositionsParameters.model_validate({"owner": USDC.lower()})
        self.assertEqual(params.owner, USDC)

    def test_pool_info_fee_optional(self):
        params = GetPoolInfoParameters.model_validate({"token0Address": WETH, "token1Address": USDC})
        self.assertIsNone(params.fee)

        with self.assertRaises(ValidationError):
            GetPoolInfoParameters.model_validate({"token0Address": WETH, "token1Address": USDC, "fee": 1})

    def test_scan_pools_aliases(self):
        params = ScanPoolsParameters.model_validate({
            "minLiquidity": 100000,
            "minVolume24h": 50000,
            "minFeeAPR": 10,
        })
        self.assertEqual(params.min_volume_24h, 50000)
        self.assertEqual(params.min_fee_apr, 10)
        self.assertIsNone(params.token0)

    def test_new_pools_limit(self):
        self.assertEqual(GetNewPoolsParameters.model_validate({}).limit, 20)
        with self.assertRaises(ValidationError):
            GetNewPoolsParameters.model_validate({"limit": 101})

    def test_swap_and_add(self):
        params = SwapAndAddLiquidityParameters.model_validate({
            "token0Address": WETH,
            "token1Address": USDC,
            "amount0Desired": "10",
            "amount1Desired": "20",
            "tickLower": -60,
            "tickUpper": 60,
            "slippageTolerance": 100,
        })
        self.assertEqual(params.slippage_tolerance, 100)


class TestSchemas(unittest.TestCase):
    """The JSON schema handed to the model uses camelCase names"""

    def test_add_liquidity_schema(self):
        schema = AddLiquidityParameters.model_json_schema()

        self.assertIn("amount0Desired", schema["properties"])
        self.assertIn("tickLower", schema["properties"])
        self.assertIn("slippageTolerance", schema["properties"])
        self.assertNotIn("slippageTolerance", schema["required"])
        self.assertTrue(schema["properties"]["tickLower"]["description"])

    def test_scan_schema_aliases(self):
        properties = ScanPoolsParameters.model_json_schema()["properties"]
        self.assertIn("minVolume24h", properties)
        self.assertIn("minFeeAPR", properties)


if __name__ == "__main__":
    unittest.main()
