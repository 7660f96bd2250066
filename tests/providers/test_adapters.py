import base64
from unittest.mock import AsyncMock

import pytest

from balance_bench.chains import ALL_CHAINS, ChainId
from balance_bench.models import Balance
from balance_bench.providers import (
    PROVIDER_REGISTRY,
    AnkrAdapter,
    BitQueryAdapter,
    BlockchairAdapter,
    CovalentHQAdapter,
    DebankAdapter,
    MoralisAdapter,
    ZerionAdapter,
    get_provider_class,
)
from balance_bench.settings import BenchmarkSettings

ADDRESS = "0x1d17371f4502357942b199cb0de90c6821f01fa5"


@pytest.fixture
def settings():
    return BenchmarkSettings(
        bitquery_api_key="bq-key",
        covalenthq_api_key="cov-key",
        debank_access_key="db-key",
        moralis_api_key="mo-key",
        zerion_user_key="user",
        zerion_user_pass="pass",
    )


def test_registry_lists_every_provider():
    assert set(PROVIDER_REGISTRY) == {
        "ankr",
        "bitquery",
        "blockchair",
        "covalenthq",
        "debank",
        "moralis",
        "zerion",
    }
    assert get_provider_class("ANKR") is AnkrAdapter
    with pytest.raises(ValueError, match="Unknown provider"):
        get_provider_class("etherscan")


@pytest.mark.parametrize("adapter_cls", list(PROVIDER_REGISTRY.values()))
def test_default_headers_are_json(adapter_cls, settings):
    adapter = adapter_cls(settings, ALL_CHAINS)
    assert adapter.headers()["Content-Type"] == "application/json"


def test_chain_codes_translate_both_ways(settings):
    adapter = CovalentHQAdapter(settings, ALL_CHAINS)

    assert adapter.chain_for_code("137") == ChainId.POLYGON
    assert adapter.code_for_chain(ChainId.RONIN) == "2020"
    assert adapter.code_for_chain(ChainId.BITCOIN) is None


def test_querying_chains_limited_to_supported_benchmark_chains(settings):
    adapter = DebankAdapter(
        settings, [ChainId.SOLANA, ChainId.AVALANCHE, ChainId.ETHEREUM]
    )

    assert adapter.querying_chain_codes == ["avax", "eth"]
    assert [s.chain for s in adapter.request_specs(ADDRESS)] == [
        ChainId.AVALANCHE,
        ChainId.ETHEREUM,
    ]


def test_ankr_request_and_transform(settings):
    adapter = AnkrAdapter(settings, [ChainId.BSC])

    (spec,) = adapter.request_specs(ADDRESS)
    assert spec.chain == ChainId.BSC
    assert spec.body["method"] == "ankr_getAccountBalance"
    assert spec.body["params"] == {"blockchain": "bsc", "walletAddress": ADDRESS}

    balances = adapter.transform_response(
        ChainId.BSC,
        {
            "result": {
                "assets": [
                    {"tokenSymbol": "BNB", "balance": "1.5", "balanceUsd": "300"}
                ]
            }
        },
    )
    assert balances == [
        Balance(amount="1.5", token="BNB", amount_usd="300", chain=ChainId.BSC)
    ]
    assert adapter.transform_response(ChainId.BSC, {"error": "boom"}) == []


def test_bitquery_builds_chain_specific_queries(settings):
    adapter = BitQueryAdapter(settings, [ChainId.POLYGON, ChainId.BITCOIN])

    polygon, bitcoin = adapter.request_specs(ADDRESS)

    assert "ethereum(network: matic)" in polygon.body["query"]
    assert ADDRESS in polygon.body["query"]
    assert "bitcoin(network: bitcoin)" in bitcoin.body["query"]
    assert adapter.headers()["X-API-KEY"] == "bq-key"


def test_bitquery_transforms(settings):
    adapter = BitQueryAdapter(settings, ALL_CHAINS)

    evm = adapter.transform_response(
        ChainId.ETHEREUM,
        {
            "data": {
                "ethereum": {
                    "address": [
                        {"balances": [{"currency": {"symbol": "ETH"}, "value": 0.5}]}
                    ]
                }
            }
        },
    )
    solana = adapter.transform_response(
        ChainId.SOLANA, {"data": {"solana": {"address": [{"balance": 12}]}}}
    )
    bitcoin = adapter.transform_response(
        ChainId.BITCOIN, {"data": {"bitcoin": {"outputs": [{"value": 0.1}]}}}
    )

    assert evm == [Balance(amount="0.5", token="ETH", chain=ChainId.ETHEREUM)]
    assert solana == [Balance(amount="12", token="SOL", chain=ChainId.SOLANA)]
    assert bitcoin == [Balance(amount="0.1", token="BTC", chain=ChainId.BITCOIN)]


def test_blockchair_urls_and_transform(settings):
    adapter = BlockchairAdapter(settings, [ChainId.ETHEREUM, ChainId.BITCOIN])

    eth_spec, btc_spec = adapter.request_specs(ADDRESS)
    assert eth_spec.url.startswith(
        f"https://api.blockchair.com/ethereum/dashboards/address/{ADDRESS}?"
    )
    assert "erc_20=true" in eth_spec.url
    assert "key=" not in eth_spec.url
    assert "/btc/" in btc_spec.url

    erc20 = adapter.transform_response(
        ChainId.ETHEREUM,
        {
            "data": {
                ADDRESS: {
                    "layer_2": {
                        "erc_20": [
                            {
                                "token_symbol": "USDT",
                                "token_decimals": 6,
                                "balance_approximate": 10.0,
                                "balance_usd": 10.0,
                            }
                        ]
                    }
                }
            }
        },
    )
    btc = adapter.transform_response(
        ChainId.BITCOIN, {"data": {"bc1q": {"address": {"balance": 1000}}}}
    )

    assert erc20 == [
        Balance(
            amount="10.0",
            decimals=6,
            token="USDT",
            amount_usd="10.0",
            chain=ChainId.ETHEREUM,
        )
    ]
    assert btc == [
        Balance(amount="1000", decimals=8, token="BTC", chain=ChainId.BITCOIN)
    ]


def test_covalenthq_passes_key_and_parses_decimals(settings):
    adapter = CovalentHQAdapter(settings, [ChainId.ETHEREUM])

    (spec,) = adapter.request_specs(ADDRESS)
    assert spec.url == (
        f"https://api.covalenthq.com/v1/1/address/{ADDRESS}/balances_v2/?key=cov-key"
    )

    balances = adapter.transform_response(
        ChainId.ETHEREUM,
        {
            "data": {
                "items": [
                    {
                        "contract_ticker_symbol": "LINK",
                        "balance": "100",
                        "quote": 7.5,
                        "contract_decimals": "18",
                    }
                ]
            }
        },
    )
    assert balances == [
        Balance(
            amount="100",
            decimals=18,
            token="LINK",
            amount_usd="7.5",
            chain=ChainId.ETHEREUM,
        )
    ]


def test_debank_request(settings):
    adapter = DebankAdapter(settings, [ChainId.POLYGON])

    (spec,) = adapter.request_specs(ADDRESS)

    assert spec.url == (
        f"https://pro-openapi.debank.com/v1/user/token_list?id={ADDRESS}&chain_id=matic"
    )
    assert adapter.headers()["AccessKey"] == "db-key"
    assert adapter.transform_response(ChainId.POLYGON, None) == []


@pytest.mark.asyncio
async def test_moralis_evm_adds_native_balance(settings):
    adapter = MoralisAdapter(settings, [ChainId.POLYGON])
    (spec,) = adapter.request_specs(ADDRESS)
    send = AsyncMock(
        side_effect=[
            [{"symbol": "USDC", "balance": "5", "decimals": "6"}],
            {"balance": "42"},
        ]
    )

    balances = await adapter.collect(spec, send)

    assert send.await_count == 2
    native_spec = send.await_args_list[1].args[0]
    assert native_spec.url == (
        f"https://deep-index.moralis.io/api/v2/{ADDRESS}/balance?chain=polygon"
    )
    assert native_spec.address == ADDRESS
    assert balances == [
        Balance(amount="42", decimals=18, token="MATIC", chain=ChainId.POLYGON),
        Balance(amount="5", decimals=6, token="USDC", chain=ChainId.POLYGON),
    ]


@pytest.mark.asyncio
async def test_moralis_solana_uses_portfolio(settings):
    adapter = MoralisAdapter(settings, [ChainId.SOLANA])
    solana_address = "AT3MJdtURZvWisMciEUW1Ngt6EqAxF2CbUo94PszW7Ko"
    (spec,) = adapter.request_specs(solana_address)
    send = AsyncMock(
        return_value={
            "tokens": [
                {"associatedTokenAddress": "Ata1", "amount": "3", "decimals": 9}
            ],
            "nativeBalance": {"solana": "1.25"},
        }
    )

    balances = await adapter.collect(spec, send)

    assert "solana-gateway.moralis.io" in spec.url
    assert send.await_count == 1
    assert [b.token for b in balances] == ["Ata1", "SOL"]
    assert adapter.headers()["X-API-Key"] == "mo-key"


def test_zerion_single_batched_request(settings):
    adapter = ZerionAdapter(settings, [ChainId.POLYGON, ChainId.ARBITRUM])

    specs = adapter.request_specs(ADDRESS)

    assert len(specs) == 1
    assert specs[0].chain == ChainId.ETHEREUM
    assert specs[0].url.startswith(f"https://api.zerion.io/v1/wallets/{ADDRESS}/")
    expected = base64.b64encode(b"user:pass").decode()
    assert adapter.headers()["Authorization"] == f"Basic {expected}"


def test_zerion_without_supported_chains_issues_nothing(settings):
    adapter = ZerionAdapter(settings, [ChainId.RONIN])

    assert adapter.request_specs(ADDRESS) == []
