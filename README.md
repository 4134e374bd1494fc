# rsyncsig

`rsyncsig` is a library for the signature side of network deltas. It has the following parts:

- **`rsyncsig.rollsum.Rollsum`** is the classic rolling weak checksum. It supports `update`, `rollin`, `rollout`, `rotate`, `digest` and `reset`.
- **`rsyncsig.sumset`** provides two things:
  - `Signature` holds the weak and strong sums of each block of a file. `build_hash_table()` indexes the blocks. `find_match(weak_sum, data)` returns the basis offset of a matching block, or `None`.
  - `sig_args(old_fsize, magic, block_len, strong_len)` picks the recommended parameters for a given file size.
- **`rsyncsig.stream`** has `Buffers`, which describes input and output space supplied by the caller. `Stream` works on top of it:
  - the *scoop* handles readahead, through `scoop_readahead`, `scoop_read` and `scoop_read_rest`;
  - the *tube* handles queued output, through `tube_write`, `tube_copy` and `tube_catchup`.
- **`rsyncsig.readsums`** loads a signature file in one of two ways:
  - incrementally, with `SignatureLoader.feed(data, eof)`;
  - all at once, with `load_signature(data)` or `load_signature_file(path_or_file)`.

  Both of the all-at-once functions return a `(Signature, Stats)` pair.
- **`rsyncsig.stats.Stats`** holds operation counters. `format()` turns them into a one-line summary and `log()` writes that summary to the log.
- **`rsyncsig.trace`** sends log output to a callback you choose. Use `trace_to` to set the callback and `set_level` to set the level. The default callback is `trace_stderr`.

Errors are raised as `rsyncsig.core.RsyncError`. The `result` attribute of the error holds a `rsyncsig.core.Result` code, such as `BAD_MAGIC`, `PARAM_ERROR`, `CORRUPT` or `INPUT_ENDED`.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from rsyncsig.core import MagicNumber
from rsyncsig.readsums import load_signature_file
from rsyncsig.rollsum import Rollsum
from rsyncsig.sumset import sig_args

magic, block_len, strong_len = sig_args(1_000_000, MagicNumber.MD4_SIG, 0, 0)
# -> MagicNumber.MD4_SIG, 896, 16

r = Rollsum()
r.update(bytes(range(256)))
assert r.digest() == 0x3A009E80

signature, stats = load_signature_file("basis.sig")
signature.build_hash_table()
print(stats.format())
```

## Signature format

A signature begins with three big-endian 32-bit values:

1. the magic number;
2. the block length;
3. the strong sum length.

After this header comes one entry per block. Each entry is a 4-byte weak sum followed by the strong sum.

The supported magic numbers are:

- `MagicNumber.MD4_SIG`
- `MagicNumber.BLAKE2_SIG`
- `MagicNumber.RK_MD4_SIG`
- `MagicNumber.RK_BLAKE2_SIG` (the default)

Strong sums are computed as follows:

- MD4 sums use pycryptodome.
- BLAKE2 sums are 32-byte BLAKE2b digests.

## What it does not do

The package reads signatures and matches blocks against them. It does not do the following:

- It does not generate signature files from a basis file.
- It does not compute deltas.
- It does not apply patches.
- It has no command-line tool.

Signatures that use the RabinKarp weak sum can be loaded and matched by weak-sum value. However, the package has no RabinKarp checksum calculator. `Rollsum` is the only rolling checksum it provides.