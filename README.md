# quantsketch

Quantile sketches for metric pipelines. Values are quantized onto a
logarithmic grid of keys, so every stored value carries a bounded relative
error (about 1% with the default configuration), and sketches built in
different places can be merged.

## Modules

- `quantsketch.summary` – `Summary`: running min, max, sum, average and
  count, with `insert`, `insert_n`, `merge` and `reset`.
- `quantsketch.equal` – `ulp_distance`, `check_float64_equal`,
  `check_int_equal` and `check_equal`, which compare summaries within 256
  units of least precision and raise `SummaryMismatchError` otherwise.
- `quantsketch.key` – key helpers: `KeyCount`, `inf_key`, `is_inf`,
  `key_to_str`.
- `quantsketch.config` – `Config`, the key mapping (relative accuracy,
  smallest representable value, bin limit). `default()` returns the standard
  configuration. Invalid parameters raise `ValueError`.
- `quantsketch.bin` – `Bin` with saturating 16-bit counts, `append_safe`,
  `n_sum` and `format_bins`.
- `quantsketch.store` – `SparseStore`, the sorted bin store with `insert`,
  `insert_counts`, `merge` and `cols`, and `trim_left`, which folds the
  lowest bins together once the bin limit is exceeded.
- `quantsketch.sketch` – `Sketch`: insert, merge, quantile, copy, equality
  and `approx_equals`; `format_sketch` renders a multi-line description.
- `quantsketch.agent` – `Agent`, an insert-optimized front end that buffers
  keys, supports sample rates and spreads a count across a value range.
- `quantsketch.ddsketch` – `convert_float_counts_to_int_counts`, which turns
  fractional per-key counts into integer `KeyCount`s while keeping the total.

## Installation

```
pip install quantsketch
```

No dependencies beyond the standard library.

## Usage

```python
from quantsketch.config import default
from quantsketch.sketch import Sketch

config = default()
sketch = Sketch()
sketch.insert_many(config, [float(v) for v in range(101)])

print(sketch.quantile(config, 0.5))   # close to 50
print(sketch.quantile(config, 0.99))  # close to 99
print(sketch.basic)                   # min=0.0000 max=100.0000 ...
```

Quantiles at `q <= 0` and `q >= 1` return the exact minimum and maximum
from the summary; an empty sketch returns 0.

Merging changes the first sketch and leaves the second untouched:

```python
a, b = Sketch(), Sketch()
a.insert(config, 1.0, 2.0, 3.0)
b.insert(config, 10.0, 20.0)
a.merge(config, b)
```

Feeding values through an agent, including sampled values:

```python
from quantsketch.agent import Agent

agent = Agent()
agent.insert(5.0, 1.0)
agent.insert(7.0, 0.5)                 # counted twice
agent.insert_interpolate(0.0, 100.0, 40)
result = agent.finish()                # a Sketch, or None if empty
```

Comparing summaries:

```python
from quantsketch.equal import check_equal, SummaryMismatchError

try:
    check_equal(result.basic, sketch.basic)
except SummaryMismatchError as err:
    print(err)
```

## What it does not do

This is a library only: there is no command-line tool. Sketches are kept in
memory; there is no serialization format or storage. There is no direct
conversion from sketch objects of other libraries — only the conversion of
fractional per-key counts into integer counts is provided.

## Running the tests

```
pip install -e ".[test]"
pytest
```