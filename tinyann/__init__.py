"""Small pure-Python neural network building blocks: perceptrons, multilayer
networks, convolution, pooling and multi-head attention."""

__version__ = "0.1.0"
__all__ = ["layer", "conv", "slp", "mlp_ops", "mlp", "mhattn"]