"""Monte Carlo run expectancy and batting-order optimization."""

__version__ = "0.1.0"
