import pytest

from meshsim.block import Block
from meshsim.blockgraph import Blockgraph
from meshsim.transaction import Transaction

GENESIS_HASH = b"0" + b"1" * 31


@pytest.fixture
def graph():
    return Blockgraph()


def make_tx(payload, ts=1.0):
    return Transaction(payload=payload, timestamp=ts)


def make_block(parents, txs=(), index=1, group_id=None):
    return Block(index=index, parents=parents, transactions=list(txs), group_id=group_id)


def test_new_graph_holds_genesis(graph):
    assert graph.blocks_count == 1
    assert graph.all_block_hashes() == [GENESIS_HASH]
    assert graph.has_block(GENESIS_HASH)


def test_genesis_group_is_zero_padded(graph):
    assert graph.get_group_id(GENESIS_HASH) == b"0" * 32


def test_unknown_group_id(graph):
    assert graph.get_group_id(b"missing") == b"0000"


def test_get_block_missing_raises(graph):
    with pytest.raises(KeyError):
        graph.get_block(b"missing")


def test_add_block_and_duplicate(graph):
    tx = make_tx(b"abc")
    block = make_block([GENESIS_HASH], [tx])
    graph.add_block(block)
    graph.add_block(block)
    assert graph.blocks_count == 2
    assert graph.txs_count == 1
    assert graph.txs_byte_size == tx.size
    assert graph.get_block(block.hash) == block
    assert block in graph


def test_byte_size_is_sum_of_blocks(graph):
    block = make_block([GENESIS_HASH], [make_tx(b"x"), make_tx(b"yz")])
    graph.add_block(block)
    expected = sum(b.size for b in graph.blocks.values())
    assert graph.byte_size() == expected


def test_childless(graph):
    block = make_block([GENESIS_HASH])
    graph.add_block(block)
    assert graph.childless_block_list() == [block.hash]
    assert graph.childless_blocks() == [block]
    assert graph.is_childless(block)
    assert not graph.is_childless(graph.get_block(GENESIS_HASH))


def test_get_children_lists_parents_of_block(graph):
    block = make_block([GENESIS_HASH])
    graph.add_block(block)
    assert graph.get_children(block) == [GENESIS_HASH]
    assert graph.get_children(graph.get_block(GENESIS_HASH)) == []


def test_blocks_from_group(graph):
    block = make_block([GENESIS_HASH], group_id=b"g1")
    graph.add_block(block)
    assert graph.blocks_from_group(block.group_id) == [block]
    assert graph.blocks_from_group(b"nothing") == []


def test_transaction_queries(graph, capsys):
    shared = make_tx(b"shared")
    other = make_tx(b"other")
    first = make_block([GENESIS_HASH], [shared], index=1)
    second = make_block([first.hash], [shared, other], index=2)
    graph.add_block(first)
    graph.add_block(second)
    assert graph.is_tx_in_bg(shared)
    assert not graph.is_tx_in_bg(make_tx(b"absent"))
    assert graph.count_rep_tx(shared) == 2
    assert graph.count_rep_tx(other) == 1
    assert graph.compute_transaction_repetition() == 1
    assert "Ocurrences : 2" in capsys.readouterr().out


def test_mean_tx_per_block_uses_integer_division(graph):
    graph.add_block(make_block([GENESIS_HASH], [make_tx(b"a"), make_tx(b"b"), make_tx(b"c")]))
    assert graph.mean_tx_per_block() == float(3 // 2)