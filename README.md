# meshsim

`meshsim` is a discrete-event simulation of a mobile mesh network. One leader
node (node 1) sends a growing block of data to the other nodes in its group.
Each follower replies with the term it received. If a group member has not
replied for the current term, the leader sends the data to it again. Group
membership follows the radio topology, and the topology changes as the
mobility scenarios move the nodes.

The package also contains a blockgraph data model: transactions, blocks and a
graph of blocks. Each of these has a fixed binary form and a CRC-based hash.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running an experiment

The `meshsim` command builds an experiment and runs it:

```
meshsim --help
meshsim --nNodes 15 --sTime 900 --nScen 3
```

| Option | Default | Meaning |
|---|---|---|
| `--nNodes` | 10 | number of nodes |
| `--sTime` | 600 | simulated time, in seconds |
| `--txGen` | 2.5 | time between transactions; must be positive |
| `--mMobility` | 1 | 1 constant position, 2 random walk, 3 constant velocity, 4 group random walk |
| `--mLoss` | 2 | 1 Friis, 2 range (100 m), 3 log distance, 4 fixed |
| `--nScen` | 1 | movement scenario used with mobility model 1 |
| `--speed` | 2.0 | node speed, in m/s |

The values are checked before the experiment starts:

- there may be at most 50 nodes;
- the simulated time may be at most 7200 s;
- the mobility model, the loss model and the scenario must each be between 1
  and 4;
- scenario 1 needs at least 3 nodes, scenario 2 at least 4, and scenarios 3
  and 4 at least 9.

If a value is invalid, the command prints the reason and exits with status 1.
Mobility model 4 also needs 10, 15, 30 or 50 nodes.

The same experiment can be run from Python. In that case an invalid value
raises `ValueError`:

```python
from meshsim.experiment import Experiment

experiment = Experiment(
    n_nodes=10,
    sim_time=600,
    time_between_txn=2.5,
    mobility_model=1,
    loss_model=2,
    scenario=1,
    speed=2.0,
)
experiment.run()
```

### Timeline of a run

An experiment follows this timeline:

- The mobility applications start at 5 s.
- The data-dissemination applications (`meshsim.central.Central`) start at 6 s.
- From 7 s onwards, the topology is checked every second.
- All applications stop at `sim_time`.
- The simulation runs until `sim_time + 30`.

At the end, `run()` writes the trace file to
`scratch/b4mesh/Traces/BlockInfo.txt`, creating the directories if needed. To
write the file somewhere else, set `experiment.trace_path` before calling
`run()`.

Progress and debug messages go through the standard `logging` module.

### Mobility

With mobility model 1 (constant position), mobility leaders move once every
5 s and their followers are placed on them:

1. All nodes move together as one group.
2. The nodes split into two groups, then merge again (1-2-1).
3. The nodes split into three groups, then merge again.
4. The nodes split twice and merge twice (1-2-3-2-1).

When a leader crosses the edge of the area, it is moved 10 m back inside and
its direction reverses.

The other mobility models behave as follows:

- Model 2 moves every node at a constant speed, with a new random heading
  every 20 s, inside a 500 m × 500 m area.
- Model 4 moves only the group leaders this way, and the followers stay where
  they are.
- Model 3 does not move the nodes.

### Reachability and groups

Only the range loss model (`--mLoss 2`) limits reach. Under it, two nodes hear
each other directly when they are at most 100 m apart. The other loss models
let every node reach every other node.

A node's group is the set of nodes it can reach over any number of hops. When
that set changes, `meshsim.group.GroupTracker` decides whether to accept the
change:

- If the previous change was at least 10 s ago, the change is accepted.
- Otherwise, the change is accepted only if the new group differs enough from
  the current one.

An accepted change is passed to the node's `Central` application.

## Library

### Simulation core

`meshsim.sim` provides two classes:

- `Simulator`: `schedule(delay, callback, *args)`, `schedule_now(...)` and
  `run(until)`. Events run in time order, and events at the same time run in
  the order they were scheduled.
- `Network`: `bind(address, handler)` and `send(source, destination, data)`.
  Delivery goes through the simulator. An optional `reachable(source,
  destination)` function can drop datagrams.

### Applications

The application modules are:

- `meshsim.central`: `Central` and `install_central(...)`.
- `meshsim.mobility`: `B4MeshMobility`, `Vector`, `MobilityKind` and
  `install_mobility(...)`.
- `meshsim.group`: `GroupTracker`, `GroupChange`, `calculate_group_id(group)`
  and `detect_nature_change(old_group, new_group)`. The result of
  `detect_nature_change` is one of NONE, SPLIT, MERGE or ARBITRARY.

### Packets

`meshsim.packet.ApplicationPacket` has a 5-byte header that holds the total
size and the service, `Service.DATA` or `Service.REPLY`. It offers:

- `ApplicationPacket.data(term, data_size)`: the term followed by `data_size`
  random bytes.
- `ApplicationPacket.reply(term)`: the term only.
- `from_bytes(data)` and `serialize()`: read and write the binary form.
- `term`: the term stored in the packet, or -1 if the payload is too short to
  hold one.

### Data model

```python
from meshsim.transaction import Transaction
from meshsim.block import Block, BlockType
from meshsim.blockgraph import Blockgraph

tx = Transaction(payload=b"hello", timestamp=1.0)
block = Block(b"1", 1, 0, BlockType.REGULAR, b"0", [], 1.0, [tx])

graph = Blockgraph()          # starts with a genesis block
graph.add_block(block)
print(graph.childless_block_list())
print(Block.from_bytes(block.serialize()) == block)
```

A transaction's hash is computed from its content. A block keeps the hash it
is given, padded to 32 bytes. A block created without a hash gets one computed
from its content. Changing a field through its property recomputes the hash.

`Blockgraph` ignores a block whose hash is already present. It offers these
queries:

- `get_block`, which raises `KeyError` for an unknown hash
- `get_children`
- `childless_blocks`
- `blocks_from_group`
- `is_tx_in_bg`
- `count_rep_tx`
- `compute_transaction_repetition`
- `mean_tx_per_block`
- `byte_size`

### Traces and helpers

`meshsim.traces.B4MTraces` records the following:

- bytes and messages sent, received and dropped, summed per timestamp;
- election and configuration-change delays;
- block-creation records.

`print_summary()` and `print_raft_summary()` return text reports.
`export_results(path)` writes the block-creation records to a file.

`meshsim.utils` provides `hashing`, `dump`, `tokenize`, `list_dir`, and the
fixed-seed draws `poisson_rand` and `uniform_rand`.

## What it does not do

- The experiment never generates transactions or blocks. `--txGen` is checked
  but not otherwise used.
- The applications do not record anything in the traces, so the exported file
  holds only its header line.
- The radio is not modelled beyond the 100 m range rule. Apart from that rule,
  there is no signal loss, interference or data rate, and sends never fail.
- The simulator keeps no statistics and produces no animation or capture
  files.