import copy
import dataclasses

import pytest

from conftest import DAY
from tvl.chains import (
    ChainRecord,
    aggregate_extra_tvl,
    build_chain_records,
    category_exists,
    chain_categories,
    count_protocols_per_chain,
    group_by_parent,
    market_cap,
    prev_tvl_from_chart,
    select_chains,
    tvl_at_offsets,
)


class TestPrevTvlFromChart:

    def test_offsets(self, chain_charts, now):
        eth = chain_charts["Ethereum"]["tvl"]
        assert prev_tvl_from_chart(eth, 0, now) == 130
        assert prev_tvl_from_chart(eth, 1, now) == 129
        assert prev_tvl_from_chart(eth, 7, now) == 123
        assert prev_tvl_from_chart(eth, 30, now) == 100

    def test_no_point_before_offset(self, chain_charts, now):
        assert prev_tvl_from_chart(chain_charts["Polygon"]["tvl"], 7, now) is None

    def test_empty_chart(self, now):
        assert prev_tvl_from_chart([], 0, now) is None
        assert prev_tvl_from_chart(None, 0, now) is None

    def test_gap_uses_latest_earlier_point(self, now):
        chart = [[now - 10 * DAY, 1.0], [now - 3 * DAY, 2.0], [now, 3.0]]
        assert prev_tvl_from_chart(chart, 1, now) == 2.0
        assert prev_tvl_from_chart(chart, 7, now) == 1.0

    def test_point_exactly_at_offset(self, now):
        chart = [[now - DAY, 5.0], [now - DAY + 1, 6.0]]
        assert prev_tvl_from_chart(chart, 1, now) == 5.0

    def test_tvl_at_offsets(self, chain_charts, now):
        assert tvl_at_offsets(chain_charts["Polygon"]["tvl"], now) == {
            "tvl": 50.0,
            "tvlPrevDay": 40.0,
            "tvlPrevWeek": None,
            "tvlPrevMonth": None,
        }


def test_count_protocols_per_chain(protocols):
    counts = count_protocols_per_chain(protocols)
    assert counts["Ethereum"] == 3
    assert counts["Polygon"] == 2
    assert counts["Solana"] == 0


class TestAggregateExtraTvl:

    def test_sums_across_protocols(self):
        protocols = [
            {"chainTvls": {"X-pool2": {"tvl": 10}}},
            {"chainTvls": {"X-pool2": {"tvl": 10}}},
        ]
        extra = aggregate_extra_tvl(protocols)
        assert extra["X"]["pool2"]["tvl"] == 20
        assert extra["X"]["pool2"] == {"tvl": 20, "tvlPrevDay": 0, "tvlPrevWeek": 0, "tvlPrevMonth": 0}

    def test_fixture_protocols(self, protocols):
        extra = aggregate_extra_tvl(protocols)
        assert extra == {
            "Ethereum": {
                "borrowed": {"tvl": 50, "tvlPrevDay": 40, "tvlPrevWeek": 30, "tvlPrevMonth": 20},
                "staking": {"tvl": 5, "tvlPrevDay": 0, "tvlPrevWeek": 0, "tvlPrevMonth": 0},
            },
            "Polygon": {
                "pool2": {"tvl": 20, "tvlPrevDay": 10, "tvlPrevWeek": 4, "tvlPrevMonth": 0},
            },
        }

    def test_category_lowercased(self):
        protocols = [
            {"chainTvls": {"X-Staking": {"tvl": 1}}},
            {"chainTvls": {"X-staking": {"tvl": 2, "tvlPrevDay": None}}},
        ]
        assert aggregate_extra_tvl(protocols)["X"]["staking"]["tvl"] == 3

    def test_input_not_mutated(self, protocols):
        before = copy.deepcopy(protocols)
        aggregate_extra_tvl(protocols)
        assert protocols == before

    def test_empty(self):
        assert aggregate_extra_tvl([]) == {}
        assert aggregate_extra_tvl([{"name": "no sections"}]) == {}


class TestBuildChainRecords:

    @pytest.fixture
    def records(self, chain_charts, chain_meta, mcaps, protocols, now):
        chains = ["Ethereum", "Polygon", "Solana", "zkSync Era"]
        return build_chain_records(chains, chain_charts, chain_meta, mcaps, protocols, now=now)

    def test_sorted_by_tvl(self, records):
        assert [r.name for r in records] == ["Ethereum", "Polygon", "zkSync Era", "Solana"]

    def test_ethereum_record(self, records):
        eth = records[0]
        assert eth.symbol == "ETH"
        assert (eth.tvl, eth.tvl_prev_day, eth.tvl_prev_week, eth.tvl_prev_month) == (130, 129, 123, 100)
        assert eth.change_1d == pytest.approx((130 - 129) / 129 * 100)
        assert eth.change_1m == pytest.approx(30.0)
        assert eth.mcap == 240_000_000_000
        assert eth.protocols == 3
        assert set(eth.extra_tvl) == {"borrowed", "staking"}

    def test_missing_data_defaults(self, records):
        by_name = {r.name: r for r in records}
        polygon = by_name["Polygon"]
        assert polygon.mcap is None  # zero market cap reads as missing
        assert polygon.change_7d is None

        solana = by_name["Solana"]
        assert solana.tvl is None
        assert solana.mcap is None
        assert solana.protocols == 0
        assert solana.extra_tvl == {}

        zk = by_name["zkSync Era"]
        assert zk.symbol == "-"
        assert zk.mcap is None

    def test_records_are_frozen(self, records):
        with pytest.raises(dataclasses.FrozenInstanceError):
            records[0].tvl = 0

    def test_as_dict_keys(self, records):
        row = records[0].as_dict()
        assert set(row) == {
            "name", "symbol", "tvl", "tvlPrevDay", "tvlPrevWeek", "tvlPrevMonth",
            "mcap", "protocols", "extraTvl", "change_1d", "change_7d", "change_1m",
        }
        assert row["tvlPrevMonth"] == 100

    def test_extra_tvl_is_read_only_copy(self, chain_meta, chain_charts, mcaps, now):
        extra = {"Ethereum": {"staking": {"tvl": 1, "tvlPrevDay": 0, "tvlPrevWeek": 0, "tvlPrevMonth": 0}}}
        record = ChainRecord.from_chart(
            "Ethereum", chain_charts["Ethereum"]["tvl"], chain_meta["Ethereum"], mcaps, 3, extra["Ethereum"], now=now
        )
        extra["Ethereum"]["staking"]["tvl"] = 99
        assert record.extra_tvl["staking"]["tvl"] == 1
        with pytest.raises(TypeError):
            record.extra_tvl["pool2"] = {}
        with pytest.raises(TypeError):
            record.extra_tvl["staking"]["tvl"] = 2
        row = record.as_dict()
        assert row["extraTvl"] == {"staking": {"tvl": 1, "tvlPrevDay": 0, "tvlPrevWeek": 0, "tvlPrevMonth": 0}}
        assert type(row["extraTvl"]["staking"]) is dict


def test_chain_record_from_chart_without_meta(now):
    rec = ChainRecord.from_chart("Nowhere", None, None, {}, 0, None, now=now)
    assert rec.symbol == "-"
    assert rec.tvl is None
    assert rec.change_1d is None


def test_market_cap():
    mcaps = {"a": {"usd_market_cap": 5}, "b": {}}
    assert market_cap("a", mcaps) == 5
    assert market_cap("b", mcaps) is None
    assert market_cap("c", mcaps) is None
    assert market_cap(None, mcaps) is None


class TestGroupByParent:

    def test_children_grouped(self, chain_meta):
        chains = ["Ethereum", "Polygon", "zkSync Era"]
        assert group_by_parent(chains, chain_meta) == {"Ethereum": {"zkSync Era"}}

    def test_chain_without_parent_never_appears(self, chain_meta):
        grouping = group_by_parent(["Ethereum", "Polygon", "Solana"], chain_meta)
        assert grouping == {}

    def test_multiple_children_and_unknown_chain(self):
        meta = {
            "A": {"parent": "P"},
            "B": {"parent": "P"},
            "C": {"parent": "Q"},
            "D": {},
        }
        grouping = group_by_parent(["A", "B", "C", "D", "Unknown"], meta)
        assert grouping == {"P": {"A", "B"}, "Q": {"C"}}
        for children in grouping.values():
            assert "D" not in children
            assert "Unknown" not in children


def test_chain_categories(chain_meta):
    assert chain_categories(chain_meta) == ["EVM", "Rollup"]


def test_category_exists(chain_meta):
    assert category_exists("All", chain_meta)
    assert category_exists("Non-EVM", chain_meta)
    assert category_exists("Rollup", chain_meta)
    assert not category_exists("Cosmos", chain_meta)


class TestSelectChains:

    CHAINS = ["Ethereum", "Polygon", "Syscoin", "Solana", "zkSync Era"]

    def test_all_excludes_syscoin(self, chain_meta):
        assert select_chains(self.CHAINS, "All", chain_meta) == ["Ethereum", "Polygon", "Solana", "zkSync Era"]

    def test_non_evm(self, chain_meta):
        assert select_chains(self.CHAINS, "Non-EVM", chain_meta) == ["Solana"]

    def test_declared_category(self, chain_meta):
        assert select_chains(self.CHAINS, "Rollup", chain_meta) == ["Polygon", "zkSync Era"]

    def test_chain_missing_from_meta(self):
        assert select_chains(["X"], "Non-EVM", {}) == ["X"]
        assert select_chains(["X"], "EVM", {}) == []
