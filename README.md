# ordkit

Tools for ordinal theory: numbering and naming individual satoshis, working
out their rarity, parsing ordinal notation and other command-line objects, and
building and reading inscription envelopes in witness scripts. It has no
dependencies beyond the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

The `ordkit` command prints JSON to standard output. On a parse error it prints
`error: ...` to standard error and exits with status 1.

```
ordkit epochs                 # {"starting_sats": [...]}: first sat of each reward epoch
ordkit parse nvtdijuwxlp      # {"object": "0"}
ordkit parse "1°0′0″0‴"
ordkit parse 1.1
ordkit parse 0%
```

`parse` recognises sat names, decimal, degree and percentile notation,
integers, addresses, 64-digit hashes, inscription ids, outpoints and
satpoints, and prints the object in its canonical text form.

## Library

### Sats and rarity (`ordkit.sat`)

```python
from ordkit.sat import Sat, Rarity, subsidy, starting_sat, epoch_starting_sats

sat = Sat.parse("nvtdijuwxlp")   # also "0", "0.0", "0°0′0″0‴", "0%"
sat.name()          # "nvtdijuwxlp"
str(sat.degree())   # "0°0′0″0‴"
str(sat.decimal())  # "0.0"
sat.percentile()    # "0%"
sat.rarity()        # Rarity.MYTHIC
Rarity.parse("rare")

subsidy(0)          # 5000000000
starting_sat(1)     # Sat(n=5000000000)
```

`Sat` also offers `height()`, `epoch()`, `cycle()`, `period()`, `third()`,
`epoch_position()` and `is_common()`, and compares and adds with plain
integers. `Sat.SUPPLY` and `Sat.LAST` give the total supply and the last sat.

### Identifiers (`ordkit.outpoint`)

```python
from ordkit.outpoint import InscriptionId, OutPoint, SatPoint, Txid

InscriptionId.parse("1111111111111111111111111111111111111111111111111111111111111111i1")
point = SatPoint.parse("1111111111111111111111111111111111111111111111111111111111111111:1:1")
SatPoint.decode(point.encode()) == point   # True
```

Bad inscription ids raise `InscriptionIdError`, a `ValueError` whose `kind` is
one of `character`, `length`, `separator`, `txid` or `index`.

### Objects, addresses and amounts (`ordkit.object`)

```python
from ordkit.object import parse_object, parse_outgoing, Address, Amount, Representation

parse_object("0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef:123")
Representation.classify("1.1")       # Representation.DECIMAL
Address.parse("bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4")
Amount.parse("1.5 btc")              # Amount(sats=150000000)
parse_outgoing("0sat")               # an amount, satpoint or inscription id
```

Addresses are checked as bech32/bech32m segwit addresses (`bc`, `tb`, `bcrt`)
or base58check p2pkh/p2sh addresses.

### Media types (`ordkit.media`)

`content_type_for_path(path)` picks a content type from a file's extension
(case-insensitive) and, for `.mp4` files, calls `check_mp4_codec`, which
rejects any video track that is not H.264. `Media.from_content_type` maps a
content type to how it is shown (`Media.IMAGE`, `Media.TEXT`, ...).

### Inscriptions (`ordkit.inscription`)

```python
from ordkit.inscription import Inscription, ScriptBuilder, parse_witness

inscription = Inscription(content_type=b"text/plain;charset=utf-8", body=b"hello")
witness = inscription.to_witness()
parse_witness(witness)   # [inscription]

script = inscription.append_reveal_script(ScriptBuilder())
```

Bodies are pushed in chunks of at most 520 bytes. `Inscription.from_transaction`
collects inscriptions from every input of a `Transaction`, skipping inputs whose
witness cannot be parsed; `Inscription.from_file` reads a file, with an
optional content size limit. Unparsable witnesses raise `InscriptionError`
(`ScriptError` for truncated scripts).

### Sat ranges (`ordkit.cli`)

`list_ranges(outpoint, ranges)` turns `(start, end)` ranges into
`(outpoint, start, size, rarity, name)` tuples.

## What it does not do

ordkit does not connect to a Bitcoin node, keep an index of the chain, hold a
wallet, or serve an explorer. There are no commands to find where a sat is,
list the sats in an output, or make inscriptions: `list_ranges` works only on
ranges you supply, and inscriptions are built and read as scripts and
witnesses in memory.