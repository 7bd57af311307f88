"""
Warehouse Analytics

Star-schema sales analytics: time-series trends, product performance,
segmentation and the consolidated customer/product reports.
"""

__version__ = "1.0.0"
