"""
Unit tests for UniswapService (wallet client and subgraph mocked)
"""

import unittest
from decimal import Decimal
from unittest.mock import MagicMock

from uniswap_plugin.config import Config
from uniswap_plugin.errors import (
    ErrorCode,
    ParameterError,
    PoolUnavailable,
    PositionNotFound,
    TransactionError,
    WalletError,
)
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
from uniswap_plugin.protocols.uniswap.constants import MAX_UINT128, MAX_UINT256, ZERO_ADDRESS
from uniswap_plugin.protocols.uniswap.service import UniswapService
from uniswap_plugin.types import Chain, PoolInfo, Position, TxReceipt, TxStatus

OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
WETH = "0x4200000000000000000000000000000000000006"
USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
POOL = "0xd0b53D9277642d899DF5C87A3966A349A798F224"
NPM = "0x03a520b32C04BF3bEEf7BEb72E919cf822Ed34f1"
ROUTER = "0x2626664c2603336E57B271c5C0b26F421741e481"
Q96 = 2 ** 96

WETH_DATA = {"id": WETH.lower(), "symbol": "WETH", "name": "Wrapped Ether", "decimals": "18"}
USDC_DATA = {"id": USDC.lower(), "symbol": "USDC", "name": "USD Coin", "decimals": "6"}


def make_pool(fee=500, fees_usd="500", volume_usd="1000000", pool_id=POOL):
    return PoolInfo.from_subgraph({
        "id": pool_id.lower(),
        "token0": WETH_DATA,
        "token1": USDC_DATA,
        "feeTier": str(fee),
        "liquidity": "1000000000",
        "sqrtPrice": str(Q96),
        "tick": "0",
        "feesUSD": fees_usd,
        "volumeUSD": volume_usd,
    }, chain_id=8453)


def make_position(token_id=77, liquidity="5000"):
    return Position.from_subgraph({
        "id": str(token_id),
        "owner": OWNER.lower(),
        "liquidity": liquidity,
        "depositedToken0": "1.5",
        "depositedToken1": "3000",
        "withdrawnToken0": "0.5",
        "withdrawnToken1": "3500",
        "token0": WETH_DATA,
        "token1": USDC_DATA,
        "pool": {"id": POOL.lower(), "feeTier": "500"},
        "tickLower": {"tickIdx": "-600"},
        "tickUpper": {"tickIdx": "600"},
    }, chain_id=8453)


def token(address, decimals, symbol):
    return {"address": address, "decimals": decimals, "symbol": symbol}


class MockWallet:
    """Wallet client double recording every transaction"""

    def __init__(self, chain_id=8453, reads=None):
        self.chain = Chain(type="evm", id=chain_id)
        self.reads = {
            "allowance": 0,
            "getPool": POOL,
            "slot0": (Q96, 0, 0, 1, 1, 0, True),
            "liquidity": 10 ** 20,
            "collect": (5, 6),
        }
        self.reads.update(reads or {})
        self.read_calls = []
        self.sent = []
        self.waited = []

    def get_chain(self):
        return self.chain

    def get_address(self):
        return OWNER

    def read(self, address, abi, function_name, args=()):
        self.read_calls.append((address, function_name, list(args)))
        return self.reads[function_name]

    def send_transaction(self, transaction):
        self.sent.append(transaction)
        return {"hash": f"0x{len(self.sent):064x}"}

    def wait_for_transaction_receipt(self, tx_hash):
        self.waited.append(tx_hash)
        return TxReceipt(tx_hash=tx_hash, status=TxStatus.SUCCESS)

    def functions_sent(self):
        return [tx.function_name for tx in self.sent]


class ServiceTestCase(unittest.TestCase):

    def setUp(self):
        self.config = Config()
        self.config.tx.exact_approvals = False
        self.dex_query = MagicMock()
        self.dex_query.get_pool.return_value = make_pool()
        self.service = UniswapService(self.config, dex_query=self.dex_query)


class TestAddLiquidity(ServiceTestCase):

    def params(self, **overrides):
        args = {
            # Given in reverse pool order
            "token0": token(USDC, 6, "USDC"),
            "token1": token(WETH, 18, "WETH"),
            "fee": 3000,
            "amount0Desired": str(3000 * 10 ** 6),
            "amount1Desired": str(10 ** 18),
            "tickLower": -600,
            "tickUpper": 600,
        }
        args.update(overrides)
        return AddLiquidityParameters.model_validate(args)

    def test_mint_with_sorted_tokens(self):
        wallet = MockWallet()

        tx_hash = self.service.add_liquidity(wallet, self.params())

        self.assertEqual(wallet.functions_sent(), ["approve", "approve", "mint"])
        self.assertEqual(tx_hash, f"0x{3:064x}")

        mint = wallet.sent[-1]
        self.assertEqual(mint.to, NPM)
        self.assertEqual(mint.gas, self.config.evm.lp_gas_limit)
        mint_params = mint.args[0]
        self.assertEqual(mint_params[0], WETH)
        self.assertEqual(mint_params[1], USDC)
        self.assertEqual(mint_params[2], 3000)
        self.assertEqual(mint_params[3:5], (-600, 600))
        self.assertEqual(mint_params[5], 10 ** 18)
        self.assertEqual(mint_params[6], 3000 * 10 ** 6)
        self.assertEqual(mint_params[9], OWNER)
        # Minimums are below the desired amounts
        self.assertLess(mint_params[7], mint_params[5])
        self.assertLessEqual(mint_params[8], mint_params[6])

        # Factory lookup uses pool order
        _, _, get_pool_args = next(c for c in wallet.read_calls if c[1] == "getPool")
        self.assertEqual(get_pool_args, [WETH, USDC, 3000])

    def test_approvals_wait_for_receipts(self):
        wallet = MockWallet()

        self.service.add_liquidity(wallet, self.params())

        approve_weth, approve_usdc = wallet.sent[0], wallet.sent[1]
        self.assertEqual(approve_weth.to, WETH)
        self.assertEqual(approve_weth.args, [NPM, MAX_UINT256])
        self.assertEqual(approve_usdc.to, USDC)
        self.assertEqual(wallet.waited, [f"0x{1:064x}", f"0x{2:064x}"])

    def test_exact_approvals(self):
        self.config.tx.exact_approvals = True
        wallet = MockWallet()

        self.service.add_liquidity(wallet, self.params())

        self.assertEqual(wallet.sent[0].args, [NPM, 10 ** 18])

    def test_existing_allowance_skips_approve(self):
        wallet = MockWallet(reads={"allowance": MAX_UINT256})

        self.service.add_liquidity(wallet, self.params())

        self.assertEqual(wallet.functions_sent(), ["mint"])

    def test_failed_approval(self):
        wallet = MockWallet()
        wallet.wait_for_transaction_receipt = MagicMock(side_effect=TransactionError.reverted("0x1"))

        with self.assertRaises(TransactionError) as ctx:
            self.service.add_liquidity(wallet, self.params())

        self.assertEqual(ctx.exception.code, ErrorCode.TX_APPROVAL_FAILED)
        self.assertNotIn("mint", wallet.functions_sent())

    def test_missing_pool(self):
        wallet = MockWallet(reads={"getPool": ZERO_ADDRESS})

        with self.assertRaises(PoolUnavailable):
            self.service.add_liquidity(wallet, self.params())
        self.assertEqual(wallet.sent, [])

    def test_uninitialized_pool(self):
        wallet = MockWallet(reads={"slot0": (0, 0, 0, 0, 0, 0, False)})

        with self.assertRaises(PoolUnavailable) as ctx:
            self.service.add_liquidity(wallet, self.params())
        self.assertEqual(ctx.exception.code, ErrorCode.POOL_INVALID_STATE)

    def test_default_chain_when_wallet_has_none(self):
        wallet = MockWallet(chain_id=None)

        self.service.add_liquidity(wallet, self.params())

        # Base Sepolia position manager
        self.assertEqual(wallet.sent[-1].to, "0x27F971cb582BF9E50F397e4d29a5C7A34f11faA2")


class TestRemoveLiquidity(ServiceTestCase):

    def setUp(self):
        super().setUp()
        self.dex_query.get_positions_by_owner.return_value = [make_position(12), make_position(77)]

    def test_remove_all(self):
        wallet = MockWallet()

        tx_hash = self.service.remove_liquidity(
            wallet, RemoveLiquidityParameters.model_validate({"tokenId": 77, "liquidity": "max"})
        )

        self.assertEqual(wallet.functions_sent(), ["decreaseLiquidity", "collect"])
        self.assertEqual(tx_hash, f"0x{2:064x}")
        self.assertEqual(wallet.waited, [f"0x{1:064x}"])

        token_id, liquidity, min0, min1, deadline = wallet.sent[0].args[0]
        self.assertEqual((token_id, liquidity), (77, 5000))
        # 1.0 WETH remaining less 1%
        self.assertEqual(min0, 990000000000000000)
        # More USDC withdrawn than deposited: nothing left to protect
        self.assertEqual(min1, 0)
        self.assertGreater(deadline, 0)

        self.assertEqual(wallet.sent[1].args[0], (77, OWNER, MAX_UINT128, MAX_UINT128))
        self.dex_query.get_positions_by_owner.assert_called_once_with(8453, OWNER)

    def test_partial_removal_scales_minimums(self):
        wallet = MockWallet()

        self.service.remove_liquidity(
            wallet, RemoveLiquidityParameters.model_validate({"tokenId": 77, "liquidity": "2500"})
        )

        _, liquidity, min0, _, _ = wallet.sent[0].args[0]
        self.assertEqual(liquidity, 2500)
        self.assertEqual(min0, 495000000000000000)

    def test_oversized_request_is_clamped(self):
        wallet = MockWallet()

        self.service.remove_liquidity(
            wallet, RemoveLiquidityParameters.model_validate({"tokenId": 77, "liquidity": "999999"})
        )

        self.assertEqual(wallet.sent[0].args[0][1], 5000)

    def test_unknown_position(self):
        with self.assertRaises(PositionNotFound) as ctx:
            self.service.remove_liquidity(
                MockWallet(), RemoveLiquidityParameters.model_validate({"tokenId": 99, "liquidity": "max"})
            )
        self.assertEqual(ctx.exception.code, ErrorCode.POSITION_NOT_FOUND)

    def test_empty_position(self):
        self.dex_query.get_positions_by_owner.return_value = [make_position(77, liquidity="0")]

        with self.assertRaises(PositionNotFound) as ctx:
            self.service.remove_liquidity(
                MockWallet(), RemoveLiquidityParameters.model_validate({"tokenId": 77, "liquidity": "max"})
            )
        self.assertEqual(ctx.exception.code, ErrorCode.POSITION_EMPTY)

    def test_requires_chain_id(self):
        with self.assertRaises(WalletError) as ctx:
            self.service.remove_liquidity(
                MockWallet(chain_id=None), RemoveLiquidityParameters.model_validate({"tokenId": 77, "liquidity": "max"})
            )
        self.assertEqual(ctx.exception.code, ErrorCode.WALLET_CHAIN_ID_MISSING)


class TestCollectFees(ServiceTestCase):

    def test_collect(self):
        wallet = MockWallet(reads={"collect": (1234, 5678)})

        result = self.service.collect_fees(wallet, CollectFeesParameters(token_id=77))

        self.assertEqual(result.token_id, 77)
        self.assertEqual((result.amount0, result.amount1), (1234, 5678))
        self.assertEqual(result.tx_hash, f"0x{1:064x}")

        collect = wallet.sent[0]
        self.assertEqual(collect.to, NPM)
        self.assertEqual(collect.function_name, "collect")
        self.assertEqual(collect.args[0], (77, OWNER, MAX_UINT128, MAX_UINT128))
        # Simulated with the same arguments
        self.assertIn((NPM, "collect", [(77, OWNER, MAX_UINT128, MAX_UINT128)]), wallet.read_calls)


class TestSwapAndAddLiquidity(ServiceTestCase):

    def params(self, **overrides):
        args = {
            "token0Address": USDC,
            "token1Address": WETH,
            "amount0Desired": str(3000 * 10 ** 6),
            "amount1Desired": str(10 ** 18),
            "tickLower": -60,
            "tickUpper": 60,
            "slippageTolerance": 50,
        }
        args.update(overrides)
        return SwapAndAddLiquidityParameters.model_validate(args)

    def test_multicall(self):
        wallet = MockWallet()

        tx_hash = self.service.swap_and_add_liquidity(wallet, self.params())

        self.assertEqual(tx_hash, f"0x{3:064x}")
        multicall = wallet.sent[-1]
        self.assertEqual(multicall.to, NPM)
        self.assertIsNone(multicall.abi)
        self.assertEqual(multicall.value, 0)
        self.assertTrue(multicall.data.startswith("0xac9650d8"))

        # Amounts mapped onto pool order before approving
        self.assertEqual(wallet.sent[0].to, WETH)
        self.dex_query.get_pool.assert_called_once_with(8453, USDC, WETH, None)

    def test_ticks_checked_against_pool_fee(self):
        self.dex_query.get_pool.return_value = make_pool(fee=3000)

        with self.assertRaises(ParameterError) as ctx:
            self.service.swap_and_add_liquidity(MockWallet(), self.params(tickLower=-50, tickUpper=50))

        self.assertEqual(ctx.exception.code, ErrorCode.INVALID_PARAMETERS)
        self.assertIn("multiples of 60", ctx.exception.message)

    def test_missing_pool(self):
        self.dex_query.get_pool.return_value = None

        with self.assertRaises(PoolUnavailable):
            self.service.swap_and_add_liquidity(MockWallet(), self.params())


class TestSwaps(ServiceTestCase):

    def test_swap_exact_input(self):
        wallet = MockWallet()
        params = SwapExactInputParameters.model_validate({
            "tokenIn": token(WETH, 18, "WETH"),
            "tokenOut": token(USDC, 6, "USDC"),
            "fee": 500,
            "amountIn": str(10 ** 17),
            "amountOutMinimum": "290000000",
        })

        result = self.service.swap_exact_input(wallet, params)

        self.assertEqual(wallet.functions_sent(), ["approve", "exactInputSingle"])
        self.assertEqual(wallet.sent[0].args, [ROUTER, MAX_UINT256])
        swap = wallet.sent[1]
        self.assertEqual(swap.to, ROUTER)
        self.assertEqual(swap.gas, self.config.evm.swap_gas_limit)
        self.assertEqual(swap.args[0], (WETH, USDC, 500, OWNER, 10 ** 17, 290000000, 0))
        self.assertEqual(result.tx_hash, f"0x{2:064x}")
        self.assertEqual(result.amount_in, str(10 ** 17))

    def test_swap_exact_output_approves_maximum(self):
        self.config.tx.exact_approvals = True
        wallet = MockWallet()
        params = SwapExactOutputParameters.model_validate({
            "tokenIn": token(USDC, 6, "USDC"),
            "tokenOut": token(WETH, 18, "WETH"),
            "fee": 500,
            "amountOut": str(10 ** 17),
            "amountInMaximum": "310000000",
        })

        result = self.service.swap_exact_output(wallet, params)

        self.assertEqual(wallet.sent[0].args, [ROUTER, 310000000])
        self.assertEqual(wallet.sent[1].function_name, "exactOutputSingle")
        self.assertEqual(wallet.sent[1].args[0][4:6], (10 ** 17, 310000000))
        self.assertEqual(result.amount_out, str(10 ** 17))

    def test_swap_without_pool(self):
        self.dex_query.get_pool.return_value = None
        wallet = MockWallet()
        params = SwapExactInputParameters.model_validate({
            "tokenIn": token(WETH, 18, "WETH"),
            "tokenOut": token(USDC, 6, "USDC"),
            "fee": 100,
            "amountIn": "1",
            "amountOutMinimum": "0",
        })

        with self.assertRaises(PoolUnavailable):
            self.service.swap_exact_input(wallet, params)
        self.assertEqual(wallet.sent, [])


class TestReads(ServiceTestCase):

    def test_get_positions_defaults_to_wallet(self):
        self.dex_query.get_positions_by_owner.return_value = [make_position()]

        positions = self.service.get_positions(MockWallet(), GetPositionsParameters())

        self.assertEqual(len(positions), 1)
        self.dex_query.get_positions_by_owner.assert_called_once_with(8453, OWNER)

    def test_get_positions_for_owner(self):
        self.dex_query.get_positions_by_owner.return_value = []
        other = "0x0000000000000000000000000000000000000001"

        self.service.get_positions(MockWallet(), GetPositionsParameters(owner=other))

        self.dex_query.get_positions_by_owner.assert_called_once_with(8453, other)

    def test_get_pool_info(self):
        pool = self.service.get_pool_info(
            MockWallet(), GetPoolInfoParameters(token0_address=WETH, token1_address=USDC, fee=500)
        )

        self.assertEqual(pool.fee, 500)
        self.dex_query.get_pool.assert_called_once_with(8453, WETH, USDC, 500)

    def test_get_pool_info_missing(self):
        self.dex_query.get_pool.return_value = None

        with self.assertRaises(PoolUnavailable):
            self.service.get_pool_info(MockWallet(), GetPoolInfoParameters(token0_address=WETH, token1_address=USDC))

    def test_scan_pools_filters_and_sorts(self):
        self.dex_query.get_high_fee_pools.return_value = [
            make_pool(fees_usd="500").with_fee_apr(),
            make_pool(fees_usd="100").with_fee_apr(),
            make_pool(fees_usd="1000").with_fee_apr(),
        ]
        params = ScanPoolsParameters.model_validate({
            "minLiquidity": 1000,
            "minVolume24h": 5000,
            "minFeeAPR": 10,
            "token0": USDC,
            "token1": WETH,
        })

        pools = self.service.scan_pools(MockWallet(), params)

        self.assertEqual([p.fee_apr for p in pools], [Decimal("36.5"), Decimal("18.25")])
        self.dex_query.get_high_fee_pools.assert_called_once_with(
            8453, min_liquidity=1000, min_volume=5000, token0=WETH, token1=USDC
        )

    def test_get_new_pools(self):
        self.dex_query.get_new_pools.return_value = [make_pool()]

        pools = self.service.get_new_pools(MockWallet(), GetNewPoolsParameters(limit=5))

        self.assertEqual(len(pools), 1)
        self.dex_query.get_new_pools.assert_called_once_with(8453, first=5)


if __name__ == "__main__":
    unittest.main()
