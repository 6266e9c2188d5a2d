"""dpccompare: traditional insurance versus Direct Primary Care cost comparison."""

__version__ = "0.1.0"
