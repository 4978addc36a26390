# tinyann

Small, dependency-free neural network building blocks in plain Python.
Values are ordinary `float`s; vectors and weight matrices of the perceptrons
are flat `list`s, and the attention code works on lists of rows.

## Modules

| Module | Contents |
| --- | --- |
| `tinyann.layer` | Stateless single-layer operations: `layer_predict`, `layer_delta`, `layer_follow`, `layer_fit`, plus `identity` and `identity_derivative`. |
| `tinyann.slp` | `Slp`, a single-layer perceptron that owns its weights, bias and caches. |
| `tinyann.mlp_ops` | Stateless multilayer operations: `mlp_predict`, `mlp_backpropagate`, `hidden_delta`. |
| `tinyann.mlp` | `Mlp`, a multilayer perceptron (at least one hidden layer) with `predict`, `follow`, `train` and `train_auto`. |
| `tinyann.conv` | `conv1d`, `pool1d` and the N-dimensional `conv` and `pool`, with `PoolType` (`MAX`, `MIN`, `ADD`, `AVG`). |
| `tinyann.mhattn` | `MultiHeadAttention` with `forward` and `backward`, the `AttentionOutput` and `AttentionGradients` results, and `softmax` / `softmax_derivative`. |

## Installation

```
pip install .
```

Python 3.10 or newer is needed; there are no third-party dependencies.

## Conventions

An activation takes the whole vector and an index and returns the value at
that index, so element-wise functions and vector-wide ones share one shape.
Activation derivatives are called on a layer's activated outputs:

```python
import math

def sigmoid(values, index):
    return 1.0 / (1.0 + math.exp(-values[index]))

def sigmoid_derivative(outputs, index):
    y = outputs[index]
    return y * (1.0 - y)
```

A loss derivative takes the output, the desired output and an index:

```python
def mse_derivative(out, out_desired, index):
    return (out[index] - out_desired[index]) / len(out)
```

Weights are flat and row-major: the weight from input `j` to output `i` is
`weight[i * inc + j]`. A missing activation (`None`) passes values through and
a missing derivative counts as 1.

## Single-layer perceptron

```python
from tinyann.slp import Slp

slp = Slp.create(2, 1, mse_derivative, act=sigmoid, actderiv=sigmoid_derivative,
                 learningrate=0.5, learningrate_bias=0.5)

for _ in range(1000):
    for inp, goal in [([0, 0], [0]), ([0, 1], [1]), ([1, 0], [1]), ([1, 1], [1])]:
        slp.train(inp, goal)

print(slp.predict([1, 0]))
```

`Slp.create` sets all weights, biases and caches to zero; set `slp.weight` and
`slp.bias` to start elsewhere. `train` predicts and then fits, returning the
output from before the update. `predict` keeps its result in `cacheact`;
`fetch_delta` and `fit` keep the delta in `cachedelta`. `follow` applies a
delta you computed yourself.

## Multilayer perceptron

```python
from tinyann.mlp import Mlp

mlp = Mlp.create([2, 3, 1], mse_derivative,
                 acts=[sigmoid, sigmoid],
                 actderivs=[sigmoid_derivative, sigmoid_derivative],
                 learningrate=0.5, learningrate_bias=0.5)

mlp.train([1.0, 0.0], [1.0])
print(mlp.predict([1.0, 0.0]))
```

`sizes` needs at least three entries. Weights start at zero and live in
`mlp.weights[k]` (one flat list per layer) and `mlp.biases[k]`. `predict`
stores every layer's output in `outcache`; `follow` back-propagates an
output-layer delta through the network, last layer first, updating each layer
before its error is sent back through the updated weights, and stores every
layer's delta in `deltastream`. `train_auto` trains like `train` and returns
the output as held in `outcache`.

The same passes are available without a class in `tinyann.mlp_ops`.

## Convolution and pooling

```python
from tinyann.conv import conv1d, pool1d, conv, pool, PoolType

print(conv1d([1, 2, 3, 4], [1, 1], stride=1, pad=0))   # [3.0, 5.0, 7.0]
print(pool1d([1, 5, 2, 4], 2, 2, PoolType.MAX))        # [5, 4]

out, dims = conv([1, 2, 3, 4], (2, 2), [1, 0, 0, 1], (2, 2))
out, dims = pool([1, 2, 3, 4], (2, 2), (2, 2), pool_type=PoolType.AVG)
```

`conv1d` and `conv` pad with zeros on both ends. When `pool1d` is given
`out`, each window is folded into the matching value of `out` and averages are
not divided. `conv` and `pool` take flat row-major data with its dimensions and
return the flat result with the output dimensions.

## Multi-head attention

```python
from tinyann.mhattn import MultiHeadAttention

attn = MultiHeadAttention(mdldist=4, headc=2)   # weights default to zeros
result = attn.forward(query, key, value, mask=None)
grads = attn.backward(grad_out, query, key, value, result)
```

Sequences are lists of rows of `mdldist` values. The four weight matrices
`wqry`, `wkey`, `wval`, `wout` are `mdldist` by `mdldist` lists of rows, used as
`x @ w`. `mask`, if given, is a `seqlen` by `seqlen` matrix added to the scaled
scores of every head. The row activation defaults to `softmax` and its
derivative to `softmax_derivative`.

`forward` returns an `AttentionOutput` (`out`, per-head `attnw` and `attno`,
and the projections `q`, `k`, `v`); `backward` returns an
`AttentionGradients` with gradients for `wqry`, `wkey`, `wval` and `wout`. The
weights are not updated by `backward`.

## Errors

Invalid shapes or arguments, and a missing loss derivative where one is
required, raise `ValueError`. Out-of-range indices passed to
`identity_derivative` or `hidden_delta` raise `IndexError`.

## What it does not do

The package has no command-line tool, does not save or load models, does not
initialise weights randomly, and offers no optimisers beyond plain gradient
descent with a fixed learning rate.